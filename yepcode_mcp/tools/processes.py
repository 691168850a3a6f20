"""
Process management tools: CRUD, execution, scheduling, versions and aliases.

Version and alias tools belong to the ``process_versions`` group, which is only
enabled through ``yc_api_full`` or by naming it explicitly.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import Field

from yepcode_mcp.clients import INITIATED_BY, field as read_field
from yepcode_mcp.config import GROUP_PROCESS_VERSIONS, GROUP_PROCESSES
from yepcode_mcp.context import ToolContext
from yepcode_mcp.errors import ExecutionError
from yepcode_mcp.schema import ToolArgs, ToolSpec
from yepcode_mcp.tools.schedules import ExecutionSettings, ScheduleFields

PARAMETERS_DESCRIPTION = (
    "Process parameters (JSON string or object). Must match the process parameter schema."
)


class GetProcessesArgs(ToolArgs):
    keywords: str | None = Field(
        None,
        description="Search keywords that apply to process name or description (case-insensitive)",
    )
    tags: list[str] | None = Field(
        None, description="Filter processes by tags (array of tag names)"
    )
    page: int = Field(0, ge=0, description="Page number for pagination (0-based index)")
    limit: int = Field(
        10, ge=1, le=100, description="Maximum number of processes to retrieve per page"
    )


class ProcessFields(ToolArgs):
    slug: str | None = Field(
        None,
        description=(
            "A unique identifier for the process. Used in URLs and API calls. "
            "Must be URL-safe (lowercase, hyphens, no spaces)."
        ),
    )
    description: str | None = Field(
        None,
        description=(
            "A detailed description of what the process does. This helps users "
            "understand the process purpose and functionality."
        ),
    )
    readme: str | None = Field(
        None,
        description=(
            "Markdown documentation for the process. This can include usage "
            "instructions, examples, and additional context."
        ),
    )
    parameters_schema: str | None = Field(
        None,
        description=(
            "JSON Schema defining the input parameters for the process. This schema "
            "is used to generate forms in the UI and validate input data."
        ),
    )
    webhook: dict[str, Any] | None = Field(
        None,
        description=(
            "Webhook configuration for the process. Defines how the process can be "
            "triggered via HTTP webhooks."
        ),
    )
    manifest: dict[str, Any] | None = Field(
        None,
        description=(
            "Process manifest configuration. Contains metadata and configuration for "
            "the process deployment and execution."
        ),
    )
    settings: dict[str, Any] | None = Field(
        None,
        description=(
            "Process settings and configuration options. Includes publication "
            "settings, form configurations, and dependencies."
        ),
    )
    tags: list[str] | None = Field(
        None,
        description=(
            "Tags for categorizing and organizing processes. Used for filtering "
            "and grouping in the UI."
        ),
    )

    # Fields the API expects nested under "script"
    script_fields: ClassVar[tuple[str, ...]] = (
        "programming_language",
        "source_code",
        "parameters_schema",
    )

    def process_payload(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        """Process input with the code fields moved under ``script``."""
        payload = self.payload(exclude=(exclude or set()) | set(self.script_fields))
        script = self.payload(include=set(self.script_fields))
        if script:
            payload["script"] = script
        return payload


class CreateProcessArgs(ProcessFields):
    name: str = Field(
        ...,
        description=(
            "The name of the process. This will be displayed in the UI and used "
            "for identification."
        ),
    )
    programming_language: Literal["JAVASCRIPT", "PYTHON"] = Field(
        ...,
        description=(
            "The programming language used for the process source code. "
            "Supported languages are JAVASCRIPT and PYTHON."
        ),
    )
    source_code: str = Field(
        ...,
        description=(
            "The source code of the process. This is the executable code that "
            "will run when the process is executed."
        ),
    )


class UpdateProcessArgs(ProcessFields):
    identifier: str = Field(
        ..., description="Unique identifier of the process to update (UUID or slug)"
    )
    name: str | None = Field(
        None,
        description=(
            "The name of the process. This will be displayed in the UI and used "
            "for identification."
        ),
    )
    source_code: str | None = Field(
        None,
        description=(
            "The updated source code of the process. This is the executable code "
            "that will run when the process is executed."
        ),
    )


class GetProcessArgs(ToolArgs):
    identifier: str = Field(
        ..., description="Unique identifier of the process to retrieve (UUID or slug)"
    )


class DeleteProcessArgs(ToolArgs):
    identifier: str = Field(
        ..., description="Unique identifier of the process to delete (UUID or slug)"
    )


class ExecuteProcessArgs(ToolArgs):
    identifier: str = Field(
        ..., description="Unique identifier of the process to execute (UUID or slug)"
    )
    parameters: Any = Field(None, description=PARAMETERS_DESCRIPTION)
    tag: str | None = Field(None, description="A version tag or an alias of the version")
    comment: str | None = Field(
        None, description="Optional comment or description for this execution"
    )
    settings: ExecutionSettings | None = Field(
        None, description="Execution-specific settings and configuration options"
    )

    def options(self) -> dict[str, Any]:
        options = self.payload(exclude={"identifier", "parameters"})
        options["initiatedBy"] = INITIATED_BY
        return options


class ScheduleProcessArgs(ScheduleFields):
    identifier: str = Field(
        ..., description="Unique identifier of the process to schedule (UUID or slug)"
    )


# --- Versions and aliases ---


class GetProcessVersionsArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    page: int = Field(0, ge=0, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Amount of items to retrieve")


class PublishProcessVersionArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    tag: str | None = Field(None, description="Version tag")
    readme: str | None = Field(None, description="Version readme")
    comment: str | None = Field(None, description="Version comment")
    source_code: str | None = Field(None, description="Process source code")
    parameters_schema: str | None = Field(
        None, description="JSON Schema of the process parameters, as a string"
    )


class ProcessVersionArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    version_id: str = Field(..., description="Version ID")


class GetProcessVersionAliasesArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    version_id: str | None = Field(None, description="Version ID")
    page: int = Field(0, ge=0, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Amount of items to retrieve")


class CreateProcessVersionAliasArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    name: str = Field(..., description="Alias name")
    version_id: str = Field(..., description="The version id of the process being aliased")


class ProcessVersionAliasArgs(ToolArgs):
    process_id: str = Field(..., description="Process ID")
    alias_id: str = Field(..., description="Alias ID")


class UpdateProcessVersionAliasArgs(ProcessVersionAliasArgs):
    name: str | None = Field(None, description="Alias name")
    version_id: str | None = Field(
        None, description="The version id of the process being aliased"
    )


def execution_id_of(submitted: Any) -> str:
    execution_id = read_field(submitted, "executionId", "execution_id", "id")
    if not execution_id:
        raise ExecutionError("Process execution did not return an execution id")
    return str(execution_id)


async def get_processes(ctx: ToolContext, args: GetProcessesArgs) -> Any:
    return await ctx.api.get_processes(args.payload())


async def create_process(ctx: ToolContext, args: CreateProcessArgs) -> Any:
    return await ctx.api.create_process(args.process_payload())


async def get_process(ctx: ToolContext, args: GetProcessArgs) -> Any:
    return await ctx.api.get_process(args.identifier)


async def update_process(ctx: ToolContext, args: UpdateProcessArgs) -> Any:
    return await ctx.api.update_process(
        args.identifier, args.process_payload(exclude={"identifier"})
    )


async def delete_process(ctx: ToolContext, args: DeleteProcessArgs) -> Any:
    await ctx.api.delete_process(args.identifier)
    return {}


async def execute_process_async(ctx: ToolContext, args: ExecuteProcessArgs) -> dict:
    submitted = await ctx.api.execute_process_async(
        args.identifier, args.parameters, args.options()
    )
    return {"executionId": execution_id_of(submitted)}


async def execute_process_sync(ctx: ToolContext, args: ExecuteProcessArgs) -> dict:
    submitted = await ctx.api.execute_process_async(
        args.identifier, args.parameters, args.options()
    )
    return await ctx.resolver.resolve(execution_id_of(submitted))


async def schedule_process(ctx: ToolContext, args: ScheduleProcessArgs) -> Any:
    return await ctx.api.create_schedule(args.identifier, args.payload(exclude={"identifier"}))


async def get_process_versions(ctx: ToolContext, args: GetProcessVersionsArgs) -> Any:
    return await ctx.api.get_process_versions(
        args.process_id, args.payload(exclude={"process_id"})
    )


async def publish_process_version(ctx: ToolContext, args: PublishProcessVersionArgs) -> Any:
    return await ctx.api.publish_process_version(
        args.process_id, args.payload(exclude={"process_id"})
    )


async def get_process_version(ctx: ToolContext, args: ProcessVersionArgs) -> Any:
    return await ctx.api.get_process_version(args.process_id, args.version_id)


async def delete_process_version(ctx: ToolContext, args: ProcessVersionArgs) -> Any:
    await ctx.api.delete_process_version(args.process_id, args.version_id)
    return {}


async def get_process_version_aliases(
    ctx: ToolContext, args: GetProcessVersionAliasesArgs
) -> Any:
    return await ctx.api.get_process_version_aliases(
        args.process_id, args.payload(exclude={"process_id"})
    )


async def create_process_version_alias(
    ctx: ToolContext, args: CreateProcessVersionAliasArgs
) -> Any:
    return await ctx.api.create_process_version_alias(
        args.process_id, args.payload(exclude={"process_id"})
    )


async def get_process_version_alias(ctx: ToolContext, args: ProcessVersionAliasArgs) -> Any:
    return await ctx.api.get_process_version_alias(args.process_id, args.alias_id)


async def delete_process_version_alias(ctx: ToolContext, args: ProcessVersionAliasArgs) -> Any:
    await ctx.api.delete_process_version_alias(args.process_id, args.alias_id)
    return {}


async def update_process_version_alias(
    ctx: ToolContext, args: UpdateProcessVersionAliasArgs
) -> Any:
    return await ctx.api.update_process_version_alias(
        args.process_id, args.alias_id, args.payload(exclude={"process_id", "alias_id"})
    )


TOOLS = [
    ToolSpec(
        name="get_processes",
        title="Get Processes",
        description=(
            "Retrieves a paginated list of processes with optional filtering by keywords "
            "and tags. Processes are executable code units that can be scheduled or "
            "triggered manually."
        ),
        group=GROUP_PROCESSES,
        args_model=GetProcessesArgs,
        handler=get_processes,
    ),
    ToolSpec(
        name="create_process",
        title="Create Process",
        description=(
            "Creates a new process with source code, configuration, and metadata. The "
            "process can be written in JavaScript or Python and includes parameter "
            "schemas for form generation."
        ),
        group=GROUP_PROCESSES,
        args_model=CreateProcessArgs,
        handler=create_process,
    ),
    ToolSpec(
        name="get_process",
        title="Get Process",
        description=(
            "Retrieves detailed information about a specific process including its "
            "configuration, source code, and metadata."
        ),
        group=GROUP_PROCESSES,
        args_model=GetProcessArgs,
        handler=get_process,
    ),
    ToolSpec(
        name="update_process",
        title="Update Process",
        description=(
            "Updates an existing process with new configuration, source code, or "
            "metadata. All fields provided will replace the existing values."
        ),
        group=GROUP_PROCESSES,
        args_model=UpdateProcessArgs,
        handler=update_process,
    ),
    ToolSpec(
        name="delete_process",
        title="Delete Process",
        description="Deletes a process and all its versions. This action cannot be undone.",
        group=GROUP_PROCESSES,
        args_model=DeleteProcessArgs,
        handler=delete_process,
    ),
    ToolSpec(
        name="execute_process_async",
        title="Execute Process Async",
        description="Executes a process asynchronously and returns an execution ID for tracking.",
        group=GROUP_PROCESSES,
        args_model=ExecuteProcessArgs,
        handler=execute_process_async,
    ),
    ToolSpec(
        name="execute_process_sync",
        title="Execute Process Sync",
        description="Executes a process synchronously and waits for completion.",
        group=GROUP_PROCESSES,
        args_model=ExecuteProcessArgs,
        handler=execute_process_sync,
    ),
    ToolSpec(
        name="schedule_process",
        title="Schedule Process",
        description="Creates a schedule for a process to run automatically at specified times.",
        group=GROUP_PROCESSES,
        args_model=ScheduleProcessArgs,
        handler=schedule_process,
    ),
    ToolSpec(
        name="get_process_versions",
        title="Get Process Versions",
        description="Retrieves a paginated list of versions for a specific process.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=GetProcessVersionsArgs,
        handler=get_process_versions,
    ),
    ToolSpec(
        name="publish_process_version",
        title="Publish Process Version",
        description="Publishes a new version of a process.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=PublishProcessVersionArgs,
        handler=publish_process_version,
    ),
    ToolSpec(
        name="get_process_version",
        title="Get Process Version",
        description="Retrieves detailed information about a specific process version.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=ProcessVersionArgs,
        handler=get_process_version,
    ),
    ToolSpec(
        name="delete_process_version",
        title="Delete Process Version",
        description="Deletes a specific process version. This action cannot be undone.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=ProcessVersionArgs,
        handler=delete_process_version,
    ),
    ToolSpec(
        name="get_process_version_aliases",
        title="Get Process Version Aliases",
        description="Retrieves a paginated list of version aliases for a specific process.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=GetProcessVersionAliasesArgs,
        handler=get_process_version_aliases,
    ),
    ToolSpec(
        name="create_process_version_alias",
        title="Create Process Version Alias",
        description="Creates a new alias for a process version.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=CreateProcessVersionAliasArgs,
        handler=create_process_version_alias,
    ),
    ToolSpec(
        name="get_process_version_alias",
        title="Get Process Version Alias",
        description="Retrieves detailed information about a specific process version alias.",
        group=GROUP_PROCESS_VERSIONS,
        args_model=ProcessVersionAliasArgs,
        handler=get_process_version_alias,
    ),
    ToolSpec(
        name="delete_process_version_alias",
        title="Delete Process Version Alias",
        description=(
            "Permanently deletes a process version alias. This action cannot be undone."
        ),
        group=GROUP_PROCESS_VERSIONS,
        args_model=ProcessVersionAliasArgs,
        handler=delete_process_version_alias,
    ),
    ToolSpec(
        name="update_process_version_alias",
        title="Update Process Version Alias",
        description=(
            "Updates an existing process version alias with new configuration. "
            "All provided fields will replace the existing values."
        ),
        group=GROUP_PROCESS_VERSIONS,
        args_model=UpdateProcessVersionAliasArgs,
        handler=update_process_version_alias,
    ),
]
