"""Execution tracking tools."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from yepcode_mcp.config import GROUP_EXECUTIONS
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec


class GetExecutionsArgs(ToolArgs):
    keywords: str | None = Field(
        None,
        description=(
            "Search keywords that apply to process name or execution comment "
            "(case-insensitive)"
        ),
    )
    process_id: str | None = Field(None, description="Filter executions by process ID (UUID)")
    status: Literal["CREATED", "RUNNING", "FINISHED", "KILLED", "REJECTED", "ERROR"] | None = (
        Field(None, description="Filter executions by status")
    )
    from_: str | None = Field(
        None,
        alias="from",
        description="Filter executions created from this date and time (ISO 8601 format)",
    )
    to: str | None = Field(
        None,
        description="Filter executions created until this date and time (ISO 8601 format)",
    )
    page: int = Field(0, ge=0, description="Page number for pagination (0-based index)")
    limit: int = Field(
        10, ge=1, le=100, description="Maximum number of executions to retrieve per page"
    )


class GetExecutionArgs(ToolArgs):
    execution_id: str = Field(
        ..., description="Unique identifier (UUID) of the execution to retrieve"
    )


class ExecutionIdArgs(ToolArgs):
    id: str = Field(..., description="Unique identifier (UUID) of the execution")


async def get_executions(ctx: ToolContext, args: GetExecutionsArgs) -> Any:
    return await ctx.api.get_executions(args.payload())


async def get_execution(ctx: ToolContext, args: GetExecutionArgs) -> dict:
    return await ctx.resolver.resolve(args.execution_id)


async def kill_execution(ctx: ToolContext, args: ExecutionIdArgs) -> Any:
    return await ctx.api.kill_execution(args.id)


async def rerun_execution(ctx: ToolContext, args: ExecutionIdArgs) -> Any:
    return await ctx.api.rerun_execution(args.id)


async def get_execution_logs(ctx: ToolContext, args: ExecutionIdArgs) -> Any:
    return await ctx.api.get_execution_logs(args.id)


TOOLS = [
    ToolSpec(
        name="get_executions",
        title="Get Executions",
        description=(
            "Retrieves a paginated list of process executions with optional filtering by "
            "keywords, process, status, and date range. Executions represent individual "
            "runs of processes."
        ),
        group=GROUP_EXECUTIONS,
        args_model=GetExecutionsArgs,
        handler=get_executions,
    ),
    ToolSpec(
        name="get_execution",
        title="Get process execution",
        description=(
            "Get the status, result, logs, timeline, etc. of a YepCode execution. "
            "Waits until the execution reaches a final status."
        ),
        group=GROUP_EXECUTIONS,
        args_model=GetExecutionArgs,
        handler=get_execution,
    ),
    ToolSpec(
        name="kill_execution",
        title="Kill Execution",
        description=(
            "Terminates a running execution immediately. This operation sends a kill "
            "signal to stop the execution process and marks it as killed."
        ),
        group=GROUP_EXECUTIONS,
        args_model=ExecutionIdArgs,
        handler=kill_execution,
    ),
    ToolSpec(
        name="rerun_execution",
        title="Rerun Execution",
        description="Reruns a previously executed process with the same parameters and settings.",
        group=GROUP_EXECUTIONS,
        args_model=ExecutionIdArgs,
        handler=rerun_execution,
    ),
    ToolSpec(
        name="get_execution_logs",
        title="Get Execution Logs",
        description=(
            "Retrieves the logs for a specific execution, including console output "
            "and error messages."
        ),
        group=GROUP_EXECUTIONS,
        args_model=ExecutionIdArgs,
        handler=get_execution_logs,
    ),
]
