"""Per-server context handed to every tool handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from yepcode_mcp.config import McpOptions, YepCodeMcpConfig

if TYPE_CHECKING:
    from yepcode_mcp.clients import YepCodeClients
    from yepcode_mcp.resolver import ExecutionResolver


@dataclass(frozen=True)
class ToolContext:
    """Shared collaborators for a handler invocation (clients, resolver, options)."""

    clients: YepCodeClients
    resolver: ExecutionResolver
    config: YepCodeMcpConfig

    @property
    def options(self) -> McpOptions:
        return self.config.options

    @property
    def api(self):
        return self.clients.api
