"""
Tool Call Dispatcher.

Every ``tools/call`` goes through ``Dispatcher.call_tool``:

1. route the name (built-in or process tool), else METHOD_NOT_FOUND
2. validate the arguments, else INVALID_PARAMS (the handler never runs)
3. run the handler and wrap its outcome in a CallToolResult envelope

Protocol faults are raised as ``McpError``; handler failures are returned as
``{"error": ...}`` envelopes with ``isError=True``.
"""

from __future__ import annotations

import base64
from collections.abc import Awaitable, Callable, Mapping
import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
import functools
import json
import logging
import time
from types import MappingProxyType
from typing import Any

import jsonschema
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import BaseModel, ValidationError

from yepcode_mcp.config import RUN_PROCESS_TOOL_NAME_PREFIX
from yepcode_mcp.context import ToolContext
from yepcode_mcp.errors import invalid_arguments, tool_not_found
from yepcode_mcp.observability import generate_correlation_id
from yepcode_mcp.process_tools import ProcessTool, RunProcessArgs, expand, run_process
from yepcode_mcp.registry import ToolRegistry
from yepcode_mcp.schema import ToolArgs, ToolSpec, format_validation_error

logger = logging.getLogger("yepcode-mcp")


# --- Routes ---


@dataclass(frozen=True)
class BuiltinRoute:
    spec: ToolSpec


@dataclass(frozen=True)
class ProcessRoute:
    name: str
    identifier: str  # process id or slug passed to the execute API
    tool: ProcessTool | None = None


Route = BuiltinRoute | ProcessRoute


def match_route(
    name: str,
    builtins: Mapping[str, ToolSpec],
    process_tools: Mapping[str, ProcessTool],
    processes_enabled: bool,
) -> Route | None:
    """Resolve a tool name to a route. Returns None when nothing matches."""
    tool = process_tools.get(name)
    if tool is not None:
        return ProcessRoute(name, tool.process_id, tool)

    # Unlisted run_ycp_<id> names still reach the process by id
    if processes_enabled and name.startswith(RUN_PROCESS_TOOL_NAME_PREFIX):
        identifier = name[len(RUN_PROCESS_TOOL_NAME_PREFIX) :]
        if identifier:
            return ProcessRoute(name, identifier)

    spec = builtins.get(name)
    if spec is not None:
        return BuiltinRoute(spec)

    return None


# --- Result envelopes ---


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _to_jsonable(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(v) for v in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return _to_jsonable(to_dict())
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def normalize(result: Any) -> Any:
    """JSON-ready form of a handler result; ``None`` becomes ``{}``."""
    if result is None:
        return {}
    return _to_jsonable(result)


def success_result(result: Any) -> CallToolResult:
    text = json.dumps(normalize(result), indent=2, default=_json_default)
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(message: str) -> CallToolResult:
    text = json.dumps({"error": message}, indent=2)
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)


# --- Dispatcher ---


class Dispatcher:
    """Routes tool calls for one server configuration."""

    def __init__(self, registry: ToolRegistry, ctx: ToolContext):
        self._registry = registry
        self._ctx = ctx
        self._process_tools: Mapping[str, ProcessTool] = MappingProxyType({})

    @property
    def process_tools(self) -> Mapping[str, ProcessTool]:
        return self._process_tools

    async def refresh_process_tools(self) -> list[ProcessTool]:
        tools = await expand(self._ctx.api, self._ctx.config.tools, self._registry.names)
        # Swap, never mutate: in-flight routes keep the snapshot they read
        self._process_tools = MappingProxyType({tool.name: tool for tool in tools})
        return tools

    async def list_tools(self) -> list[Tool]:
        logger.info("Handling ListTools request")
        tools = await self._registry.definitions(self._ctx)
        tools.extend(tool.definition for tool in await self.refresh_process_tools())
        logger.info(f"Found {len(tools)} tools: {', '.join(tool.name for tool in tools)}")
        return tools

    async def route(self, name: str) -> Route:
        selection = self._ctx.config.tools
        builtins = self._registry.enabled(selection, self._ctx.options)

        route = match_route(name, builtins, self._process_tools, selection.processes_enabled)
        if route is None and selection.processes_enabled:
            # Catalog may predate a newly tagged process
            await self.refresh_process_tools()
            route = match_route(name, builtins, self._process_tools, True)

        if route is None:
            logger.error(f"Unknown tool requested: {name}")
            raise tool_not_found(name)
        return route

    def _validate_builtin(self, spec: ToolSpec, arguments: dict[str, Any] | None) -> ToolArgs:
        try:
            return spec.validate(arguments)
        except ValidationError as e:
            raise invalid_arguments(spec.name, format_validation_error(e)) from e

    def _validate_process(
        self, route: ProcessRoute, arguments: dict[str, Any] | None
    ) -> RunProcessArgs:
        try:
            if route.tool is not None:
                return route.tool.validate(arguments)
            return RunProcessArgs.model_validate(arguments or {})
        except ValidationError as e:
            raise invalid_arguments(route.name, format_validation_error(e)) from e
        except jsonschema.ValidationError as e:
            raise invalid_arguments(route.name, f"parameters: {e.message}") from e

    async def _prepare(
        self, name: str, arguments: dict[str, Any] | None
    ) -> Callable[[], Awaitable[Any]]:
        route = await self.route(name)
        if isinstance(route, ProcessRoute):
            process_args = self._validate_process(route, arguments)
            return functools.partial(run_process, self._ctx, route.identifier, process_args)
        args = self._validate_builtin(route.spec, arguments)
        return functools.partial(route.spec.handler, self._ctx, args)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        """Handle one tools/call. Raises McpError for unknown tools and bad arguments."""
        cid = generate_correlation_id()
        start_time = time.time()
        logger.info(f"call_tool: {name}", extra={"correlation_id": cid, "tool": name})

        try:
            invoke = await self._prepare(name, arguments)
        except McpError as e:
            self._log_done(name, cid, start_time, "rejected", e.error.message)
            raise

        try:
            result = await invoke()
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.exception(
                f"Error in tool handler: {name}", extra={"correlation_id": cid, "tool": name}
            )
            self._log_done(name, cid, start_time, "error", message)
            return error_result(message)

        self._log_done(name, cid, start_time, "ok", None)
        return success_result(result)

    def _log_done(
        self, name: str, cid: str, start_time: float, status: str, error: str | None
    ) -> None:
        logger.log(
            logging.INFO if status == "ok" else logging.ERROR,
            f"call_tool done: {name}",
            extra={
                "correlation_id": cid,
                "tool": name,
                "latency_ms": (time.time() - start_time) * 1000,
                "status": status,
                "error": error,
            },
        )
