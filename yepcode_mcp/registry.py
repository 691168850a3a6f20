"""Tool Definition Registry - built-in tool catalog filtered by configuration."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from mcp.types import Tool

from yepcode_mcp.config import GROUP_RUN_CODE, TOOL_GROUPS, McpOptions, ToolSelection
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolSpec
from yepcode_mcp.tools import builtin_specs

logger = logging.getLogger("yepcode-mcp")


class ToolRegistry:
    """Holds every built-in ToolSpec and answers which ones a config enables."""

    def __init__(self, specs: Iterable[ToolSpec] | None = None):
        self._specs = tuple(builtin_specs() if specs is None else specs)
        names = [spec.name for spec in self._specs]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate built-in tool names: {', '.join(duplicates)}")
        self._order = {group: index for index, group in enumerate(TOOL_GROUPS)}

    @property
    def names(self) -> frozenset[str]:
        """Every built-in name, enabled or not (process tools may not reuse them)."""
        return frozenset(spec.name for spec in self._specs)

    def specs(self, selection: ToolSelection, options: McpOptions) -> list[ToolSpec]:
        enabled = [
            spec
            for spec in self._specs
            if spec.group in selection.groups
            and not (spec.group == GROUP_RUN_CODE and options.disable_run_code_tool)
        ]
        return sorted(enabled, key=lambda spec: self._order.get(spec.group, len(self._order)))

    def enabled(self, selection: ToolSelection, options: McpOptions) -> dict[str, ToolSpec]:
        return {spec.name: spec for spec in self.specs(selection, options)}

    async def definitions(self, ctx: ToolContext) -> list[Tool]:
        """Definitions of the enabled built-ins, rebuilt on every call."""
        specs = self.specs(ctx.config.tools, ctx.options)
        tools = [await spec.describe(ctx) for spec in specs]
        logger.debug(f"Built {len(tools)} built-in tool definitions")
        return tools
