"""Scheduled process tools."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from yepcode_mcp.config import GROUP_SCHEDULES
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec

CRON_DESCRIPTION = (
    "Cron expression defining when the process should be executed. "
    "Uses standard cron syntax (minute hour day month dayOfWeek)."
)
DATE_TIME_DESCRIPTION = (
    "Specific date and time when the process should be executed. "
    "Used for one-time scheduled executions (ISO 8601 format)."
)
CONCURRENCY_DESCRIPTION = (
    "Whether multiple executions of the same process can run concurrently. "
    "If false, new executions will be queued if one is already running."
)


class ExecutionSettings(ToolArgs):
    agent_pool_slug: str | None = Field(None, description="Agent pool where to execute")
    callback_url: str | None = Field(
        None,
        description="URL to receive execution results upon completion (success or failure)",
    )


class ScheduleInput(ToolArgs):
    parameters: str | None = Field(
        None,
        description=(
            "JSON string containing the input parameters for the process execution. "
            "Must match the process parameter schema."
        ),
    )
    tag: str | None = Field(None, description="A version tag or an alias of the version")
    comment: str | None = Field(
        None,
        description=(
            "Optional comment or description for this execution. "
            "Useful for tracking and debugging purposes."
        ),
    )
    settings: ExecutionSettings | None = Field(
        None,
        description=(
            "Execution-specific settings and configuration options. "
            "Overrides default process settings for this execution."
        ),
    )


class ScheduleFields(ToolArgs):
    cron: str | None = Field(None, description=CRON_DESCRIPTION)
    date_time: datetime | None = Field(None, description=DATE_TIME_DESCRIPTION)
    allow_concurrent_executions: bool | None = Field(None, description=CONCURRENCY_DESCRIPTION)
    input: ScheduleInput | None = Field(
        None,
        description=(
            "Input parameters and settings for the scheduled process execution. "
            "Defines what parameters will be passed to the process when it runs."
        ),
    )


class GetSchedulesArgs(ToolArgs):
    page: int = Field(0, ge=0, description="Page number for pagination (0-based index)")
    limit: int = Field(
        10,
        ge=1,
        le=100,
        description="Maximum number of scheduled processes to retrieve per page",
    )
    process_id: str | None = Field(
        None, description="Filter scheduled processes by process ID (UUID)"
    )
    keywords: str | None = Field(
        None, description="Keywords filter: applies to process name or schedule comment"
    )


class GetScheduleArgs(ToolArgs):
    id: str = Field(
        ..., description="Unique identifier (UUID) of the scheduled process to retrieve"
    )


class PauseScheduleArgs(ToolArgs):
    id: str = Field(..., description="Unique identifier (UUID) of the scheduled process to pause")


class ResumeScheduleArgs(ToolArgs):
    id: str = Field(
        ..., description="Unique identifier (UUID) of the scheduled process to resume"
    )


class DeleteScheduleArgs(ToolArgs):
    id: str = Field(
        ..., description="Unique identifier (UUID) of the scheduled process to delete"
    )


class UpdateScheduleArgs(ScheduleFields):
    id: str = Field(
        ..., description="Unique identifier (UUID) of the scheduled process to update"
    )


async def get_schedules(ctx: ToolContext, args: GetSchedulesArgs) -> Any:
    return await ctx.api.get_schedules(args.payload())


async def get_schedule(ctx: ToolContext, args: GetScheduleArgs) -> Any:
    return await ctx.api.get_schedule(args.id)


async def pause_schedule(ctx: ToolContext, args: PauseScheduleArgs) -> Any:
    return await ctx.api.pause_schedule(args.id)


async def resume_schedule(ctx: ToolContext, args: ResumeScheduleArgs) -> Any:
    return await ctx.api.resume_schedule(args.id)


async def delete_schedule(ctx: ToolContext, args: DeleteScheduleArgs) -> Any:
    await ctx.api.delete_schedule(args.id)
    return {}


async def update_schedule(ctx: ToolContext, args: UpdateScheduleArgs) -> Any:
    return await ctx.api.update_schedule(args.id, args.payload(exclude={"id"}))


TOOLS = [
    ToolSpec(
        name="get_schedules",
        title="Get Scheduled Processes",
        description=(
            "Retrieves a paginated list of scheduled processes with optional filtering by "
            "process and keywords. Scheduled processes define when and how often processes "
            "should be executed automatically."
        ),
        group=GROUP_SCHEDULES,
        args_model=GetSchedulesArgs,
        handler=get_schedules,
    ),
    ToolSpec(
        name="get_schedule",
        title="Get Scheduled Process",
        description=(
            "Retrieves detailed information about a specific scheduled process including "
            "its configuration, schedule settings, and current status."
        ),
        group=GROUP_SCHEDULES,
        args_model=GetScheduleArgs,
        handler=get_schedule,
    ),
    ToolSpec(
        name="pause_schedule",
        title="Pause Scheduled Process",
        description=(
            "Pauses a currently active scheduled process. The process will stop "
            "executing until it is resumed."
        ),
        group=GROUP_SCHEDULES,
        args_model=PauseScheduleArgs,
        handler=pause_schedule,
    ),
    ToolSpec(
        name="resume_schedule",
        title="Resume Scheduled Process",
        description=(
            "Resumes a previously paused scheduled process. The process will continue "
            "executing according to its original schedule configuration."
        ),
        group=GROUP_SCHEDULES,
        args_model=ResumeScheduleArgs,
        handler=resume_schedule,
    ),
    ToolSpec(
        name="delete_schedule",
        title="Delete Scheduled Process",
        description=(
            "Permanently deletes a scheduled process and cancels all future executions. "
            "This action cannot be undone."
        ),
        group=GROUP_SCHEDULES,
        args_model=DeleteScheduleArgs,
        handler=delete_schedule,
    ),
    ToolSpec(
        name="update_schedule",
        title="Update Scheduled Process",
        description=(
            "Updates an existing scheduled process with new configuration, schedule "
            "settings, or parameters. All provided fields will replace the existing values."
        ),
        group=GROUP_SCHEDULES,
        args_model=UpdateScheduleArgs,
        handler=update_schedule,
    ),
]
