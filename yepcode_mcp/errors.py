"""
YepCode MCP error types.

Custom exceptions with MCP-friendly error codes, plus helpers for the two
protocol-level faults (unknown tool, invalid arguments).
"""

from __future__ import annotations

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData


class YepCodeMcpError(Exception):
    """Base error for YepCode MCP operations."""

    code: str = "YEPCODE_MCP_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigError(YepCodeMcpError, ValueError):
    """Configuration value is missing or malformed."""

    code = "CONFIG_ERROR"


class InitializationError(YepCodeMcpError):
    """YepCode clients could not be constructed (bad or missing credential)."""

    code = "INITIALIZATION_FAILED"


class ExecutionError(YepCodeMcpError):
    """A remote execution could not be resolved to a terminal result."""

    code = "EXECUTION_FAILED"


def tool_not_found(name: str, reason: str | None = None) -> McpError:
    return McpError(
        ErrorData(code=METHOD_NOT_FOUND, message=reason or f"Unknown tool: {name}")
    )


def invalid_arguments(name: str, detail: str) -> McpError:
    return McpError(
        ErrorData(code=INVALID_PARAMS, message=f"Invalid arguments for {name}: {detail}")
    )
