"""MCP configuration loader - reads YEPCODE_* environment variables (and .env)."""  # noqa: I001

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import os

from dotenv import find_dotenv, load_dotenv

from yepcode_mcp.errors import ConfigError

logger = logging.getLogger("yepcode-mcp")

# Tool name compatibility constants
RUN_PROCESS_TOOL_NAME_PREFIX = "run_ycp_"
RUN_PROCESS_TOOL_TAG = "mcp-tool"
MAX_TOOL_NAME_LENGTH = 60

# Built-in tool groups
GROUP_RUN_CODE = "run_code"
GROUP_ENV_VARS = "env_vars"
GROUP_STORAGE = "storage"
GROUP_VARIABLES = "variables"
GROUP_SCHEDULES = "schedules"
GROUP_PROCESSES = "processes"
GROUP_PROCESS_VERSIONS = "process_versions"
GROUP_EXECUTIONS = "executions"
GROUP_MODULES = "modules"
GROUP_MODULE_VERSIONS = "module_versions"

# Stable catalog order
TOOL_GROUPS: tuple[str, ...] = (
    GROUP_RUN_CODE,
    GROUP_ENV_VARS,
    GROUP_STORAGE,
    GROUP_VARIABLES,
    GROUP_SCHEDULES,
    GROUP_PROCESSES,
    GROUP_PROCESS_VERSIONS,
    GROUP_EXECUTIONS,
    GROUP_MODULES,
    GROUP_MODULE_VERSIONS,
)

YC_API = "yc_api"
YC_API_FULL = "yc_api_full"

GROUP_ALIASES: dict[str, frozenset[str]] = {
    YC_API: frozenset(
        {
            GROUP_ENV_VARS,
            GROUP_STORAGE,
            GROUP_VARIABLES,
            GROUP_SCHEDULES,
            GROUP_PROCESSES,
            GROUP_EXECUTIONS,
            GROUP_MODULES,
        }
    ),
}
GROUP_ALIASES[YC_API_FULL] = GROUP_ALIASES[YC_API] | {
    GROUP_PROCESS_VERSIONS,
    GROUP_MODULE_VERSIONS,
}

DEFAULT_GROUPS = frozenset({GROUP_RUN_CODE}) | GROUP_ALIASES[YC_API]

# YEPCODE_MCP_OPTIONS tokens
OPTION_DISABLE_RUN_CODE = "disableRunCodeTool"
OPTION_SKIP_RUN_CODE_CLEANUP = "skipRunCodeCleanup"
OPTION_SKIP_CODING_RULES = "skipCodingRules"

_TRUTHY = ("1", "true", "yes")


class ProcessSelectionMode(str, Enum):
    """How remote processes are chosen for exposure as tools."""

    NONE = "none"
    TAGS = "tags"  # any tag in the configured tag set
    LEGACY = "legacy"  # static allow-list: RUN_PROCESS_TOOL_TAG


@dataclass(frozen=True)
class ToolSelection:
    """Which built-in groups are enabled and which processes become tools."""

    groups: frozenset[str] = DEFAULT_GROUPS
    process_tags: frozenset[str] = frozenset()
    mode: ProcessSelectionMode = ProcessSelectionMode.NONE

    @property
    def processes_enabled(self) -> bool:
        return self.mode is not ProcessSelectionMode.NONE

    def allowed_tags(self) -> frozenset[str]:
        if self.mode is ProcessSelectionMode.TAGS:
            return self.process_tags
        if self.mode is ProcessSelectionMode.LEGACY:
            return frozenset({RUN_PROCESS_TOOL_TAG})
        return frozenset()

    def includes_process(self, tags: object) -> bool:
        """True if a process carrying ``tags`` should be exposed as a tool."""
        if not tags or isinstance(tags, str):
            return False
        return not self.allowed_tags().isdisjoint(str(t) for t in tags)


@dataclass(frozen=True)
class McpOptions:
    """Behavior flags from YEPCODE_MCP_OPTIONS."""

    disable_run_code_tool: bool = False
    skip_run_code_cleanup: bool = False
    skip_coding_rules: bool = False

    @property
    def run_code_cleanup(self) -> bool:
        return not self.skip_run_code_cleanup


@dataclass(frozen=True)
class McpServerConfig:
    """Server transport settings."""

    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    log_format: str = "json"  # "json" | "text"

    def validate(self) -> None:
        if self.transport not in ("stdio", "http"):
            raise ConfigError(f"Invalid transport: {self.transport}")
        if not (1 <= self.port <= 65535):
            raise ConfigError(f"Invalid port: {self.port}")
        if self.log_format not in ("json", "text"):
            raise ConfigError(f"Invalid log format: {self.log_format}")


@dataclass(frozen=True)
class YepCodeMcpConfig:
    """Root configuration. Immutable; derive variants with ``with_overrides``."""

    api_token: str | None = None
    api_host: str | None = None
    tools: ToolSelection = field(default_factory=ToolSelection)
    options: McpOptions = field(default_factory=McpOptions)
    server: McpServerConfig = field(default_factory=McpServerConfig)
    # None = wait for terminal status indefinitely
    execution_timeout: float | None = None

    def validate(self) -> None:
        self.server.validate()
        if self.execution_timeout is not None and self.execution_timeout <= 0:
            raise ConfigError("execution_timeout must be positive")

    def with_overrides(
        self, *, tools: str | None = None, options: str | None = None
    ) -> YepCodeMcpConfig:
        """Apply the two hosted-mode axes (tools, options) on top of this config."""
        cfg = self
        if tools is not None:
            cfg = replace(cfg, tools=parse_tool_selection(tools))
        if options is not None:
            cfg = replace(cfg, options=parse_options(options))
        return cfg


def _split_tokens(value: str) -> list[str]:
    return [token.strip() for token in value.split(",") if token.strip()]


def parse_tool_selection(
    value: str | None, *, legacy_processes_as_tools: bool = False
) -> ToolSelection:
    """
    Parse YEPCODE_MCP_TOOLS.

    Tokens naming a group (or ``yc_api`` / ``yc_api_full``) enable built-in
    tools; every other token is a process tag. When the variable is absent all
    default groups are enabled and processes are only exposed through the
    legacy ``mcp-tool`` switch.
    """
    if value is None:
        return ToolSelection(
            groups=DEFAULT_GROUPS,
            mode=ProcessSelectionMode.LEGACY
            if legacy_processes_as_tools
            else ProcessSelectionMode.NONE,
        )

    groups: set[str] = set()
    tags: set[str] = set()
    for token in _split_tokens(value):
        if token in GROUP_ALIASES:
            groups |= GROUP_ALIASES[token]
        elif token in TOOL_GROUPS:
            groups.add(token)
        else:
            tags.add(token)

    return ToolSelection(
        groups=frozenset(groups),
        process_tags=frozenset(tags),
        mode=ProcessSelectionMode.TAGS if tags else ProcessSelectionMode.NONE,
    )


def parse_options(value: str | None) -> McpOptions:
    """Parse YEPCODE_MCP_OPTIONS. Unknown tokens are logged and ignored."""
    if not value:
        return McpOptions()

    tokens = set(_split_tokens(value))
    known = {OPTION_DISABLE_RUN_CODE, OPTION_SKIP_RUN_CODE_CLEANUP, OPTION_SKIP_CODING_RULES}
    for unknown in sorted(tokens - known):
        logger.warning(f"Ignoring unknown YEPCODE_MCP_OPTIONS token: {unknown}")

    return McpOptions(
        disable_run_code_tool=OPTION_DISABLE_RUN_CODE in tokens,
        skip_run_code_cleanup=OPTION_SKIP_RUN_CODE_CLEANUP in tokens,
        skip_coding_rules=OPTION_SKIP_CODING_RULES in tokens,
    )


def _parse_timeout(raw: str | None) -> float | None:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid YEPCODE_MCP_EXECUTION_TIMEOUT: {raw!r}") from e


def _parse_port(raw: str | None, default: int) -> int:
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid YEPCODE_MCP_PORT: {raw!r}") from e


def load_config(
    env: Mapping[str, str] | None = None, *, dotenv: bool = True
) -> YepCodeMcpConfig:
    """
    Load MCP config from the environment.

    Precedence: process ENV → .env file → defaults

    Args:
        env: Mapping to read instead of ``os.environ`` (tests).
        dotenv: Load a ``.env`` file from the working directory first.
            Existing environment variables are never overwritten.

    Returns:
        Validated, immutable YepCodeMcpConfig.
    """
    if env is None:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True), override=False)
        env = os.environ

    server = McpServerConfig(
        transport=env.get("YEPCODE_MCP_TRANSPORT") or McpServerConfig.transport,
        host=env.get("YEPCODE_MCP_HOST") or McpServerConfig.host,
        port=_parse_port(env.get("YEPCODE_MCP_PORT"), McpServerConfig.port),
        log_level=env.get("YEPCODE_MCP_LOG_LEVEL") or McpServerConfig.log_level,
        log_format=env.get("YEPCODE_MCP_LOG_FORMAT") or McpServerConfig.log_format,
    )

    cfg = YepCodeMcpConfig(
        api_token=env.get("YEPCODE_API_TOKEN") or None,
        api_host=env.get("YEPCODE_API_HOST") or None,
        tools=parse_tool_selection(
            env.get("YEPCODE_MCP_TOOLS"),
            legacy_processes_as_tools=env.get("YEPCODE_PROCESSES_AS_MCP_TOOLS", "").lower()
            in _TRUTHY,
        ),
        options=parse_options(env.get("YEPCODE_MCP_OPTIONS")),
        server=server,
        execution_timeout=_parse_timeout(env.get("YEPCODE_MCP_EXECUTION_TIMEOUT")),
    )

    cfg.validate()
    return cfg
