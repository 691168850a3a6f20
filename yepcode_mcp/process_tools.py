"""
Dynamic process tools.

Remote YepCode processes selected by tag are exposed as MCP tools. Each call
submits an execution of the process and, unless the caller asks for
asynchronous semantics, waits for its result.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
import json
import logging
from typing import Any

import jsonschema
from mcp.types import Tool
from pydantic import Field

from yepcode_mcp.clients import INITIATED_BY, field
from yepcode_mcp.config import (
    MAX_TOOL_NAME_LENGTH,
    RUN_PROCESS_TOOL_NAME_PREFIX,
    ToolSelection,
)
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, json_schema
from yepcode_mcp.tools.processes import execution_id_of

logger = logging.getLogger("yepcode-mcp")

PAGE_SIZE = 100
# Temporary processes created by run_code
RUN_CODE_SLUG_PREFIX = "yepcode-run-"


class RunProcessOptions(ToolArgs):
    tag: str | None = Field(
        None,
        description=(
            "The process version to be executed. You may provide a specific version "
            "if user asks explicity for a process version."
        ),
    )
    comment: str | None = Field(
        None,
        description=(
            "A comment to be added to the execution. You may provide some context "
            "about the execution."
        ),
    )


class RunProcessArgs(ToolArgs):
    parameters: Any = Field(None, description="Process input parameters")
    options: RunProcessOptions | None = Field(None, description="Execution options")
    synchronous_execution: bool = Field(
        True,
        description=(
            "Whether the execution should be synchronous or not. If true, the execution "
            "will be synchronous and the execution result will be returned immediately. "
            "If false, the execution will be asynchronous and you should use the execution "
            "id to get the result later."
        ),
    )


@dataclass(frozen=True)
class ProcessTool:
    """A process exposed as a tool in the last catalog snapshot."""

    name: str
    process_id: str
    slug: str
    definition: Tool
    parameters_schema: dict[str, Any] | None = None

    def validate(self, arguments: dict[str, Any] | None) -> RunProcessArgs:
        """
        Validate a call's arguments.

        Raises pydantic.ValidationError for a malformed envelope and
        jsonschema.ValidationError when ``parameters`` do not satisfy the
        process's declared schema.
        """
        args = RunProcessArgs.model_validate(arguments or {})
        if self.parameters_schema:
            validate_parameters(self.parameters_schema, args.parameters)
        return args


def validate_parameters(schema: dict[str, Any], parameters: Any) -> None:
    validator_cls = jsonschema.validators.validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except jsonschema.SchemaError as e:
        logger.warning(f"Skipping parameter validation, invalid process schema: {e.message}")
        return
    validator_cls(schema).validate({} if parameters is None else parameters)


def parameters_schema_of(process: Any) -> dict[str, Any] | None:
    """Non-empty parameters schema of a process (dict, or JSON text decoding to one)."""
    raw = field(process, "parametersSchema", "parameters_schema")
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unparsable parametersSchema of process {field(process, 'id')}")
            return None
    if isinstance(raw, dict) and raw:
        return raw
    return None


def process_input_schema(parameters_schema: dict[str, Any] | None) -> dict[str, Any]:
    schema = json_schema(RunProcessArgs)
    if parameters_schema:
        schema["properties"]["parameters"] = parameters_schema
    else:
        del schema["properties"]["parameters"]
    return schema


def process_tool_name(
    process_id: str, slug: str, reserved: Iterable[str], used: set[str]
) -> str | None:
    """Slug if usable, else ``run_ycp_<id>``; None if neither fits."""
    taken = set(reserved) | used
    if slug and len(slug) <= MAX_TOOL_NAME_LENGTH and slug not in taken:
        return slug
    if not process_id:
        return None
    fallback = f"{RUN_PROCESS_TOOL_NAME_PREFIX}{process_id}"
    if len(fallback) > MAX_TOOL_NAME_LENGTH or fallback in taken:
        return None
    return fallback


def build_process_tool(process: Any, name: str) -> ProcessTool:
    title = str(field(process, "name") or name)
    description = field(process, "description")
    parameters_schema = parameters_schema_of(process)
    definition = Tool(
        name=name,
        title=title,
        description=f"{title} - {description}" if description else title,
        inputSchema=process_input_schema(parameters_schema),
    )
    return ProcessTool(
        name=name,
        process_id=str(field(process, "id")),
        slug=str(field(process, "slug") or ""),
        definition=definition,
        parameters_schema=parameters_schema,
    )


async def iter_processes(api: Any) -> AsyncIterator[Any]:
    page = 0
    while True:
        result = await api.get_processes({"page": page, "limit": PAGE_SIZE})
        data = field(result, "data") if result is not None else None
        if not data:
            break
        for process in data:
            yield process
        if not field(result, "hasNextPage", "has_next_page"):
            break
        page += 1


async def expand(
    api: Any, selection: ToolSelection, reserved_names: Iterable[str]
) -> list[ProcessTool]:
    """List remote processes and build tools for those the selection includes."""
    if not selection.processes_enabled:
        return []

    reserved = frozenset(reserved_names)
    used: set[str] = set()
    tools: list[ProcessTool] = []
    async for process in iter_processes(api):
        slug = str(field(process, "slug") or "")
        if slug.startswith(RUN_CODE_SLUG_PREFIX):
            continue
        if not selection.includes_process(field(process, "tags")):
            continue

        process_id = str(field(process, "id") or "")
        name = process_tool_name(process_id, slug, reserved, used)
        if name is None:
            logger.warning(f"Skipping process {slug or process_id}: no usable tool name")
            continue
        used.add(name)
        tools.append(build_process_tool(process, name))

    logger.info(f"Found {len(tools)} process tools")
    return tools


async def run_process(ctx: ToolContext, identifier: str, args: RunProcessArgs) -> dict:
    options = args.options.payload() if args.options else {}
    options["initiatedBy"] = INITIATED_BY
    submitted = await ctx.api.execute_process_async(identifier, args.parameters, options)
    execution_id = execution_id_of(submitted)
    if not args.synchronous_execution:
        return {"executionId": execution_id}
    return await ctx.resolver.resolve(execution_id)
