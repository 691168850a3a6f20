"""Built-in YepCode tools, one module per capability group."""

from __future__ import annotations

from yepcode_mcp.schema import ToolSpec
from yepcode_mcp.tools import (
    env_vars,
    executions,
    modules,
    processes,
    run_code,
    schedules,
    storage,
    variables,
)


def builtin_specs() -> list[ToolSpec]:
    return [
        *run_code.TOOLS,
        *env_vars.TOOLS,
        *storage.TOOLS,
        *variables.TOOLS,
        *schedules.TOOLS,
        *processes.TOOLS,
        *executions.TOOLS,
        *modules.TOOLS,
    ]
