"""Team variable tools."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from yepcode_mcp.config import GROUP_VARIABLES
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec
from yepcode_mcp.tools.env_vars import ENV_VAR_KEY_PATTERN


class GetVariablesArgs(ToolArgs):
    page: int = Field(0, ge=0, description="Page number for pagination (0-based index)")
    limit: int = Field(
        10, ge=1, le=100, description="Maximum number of variables to retrieve per page"
    )


class CreateVariableArgs(ToolArgs):
    key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        pattern=ENV_VAR_KEY_PATTERN,
        description=(
            "Variable key (must start with letter, contain only letters, "
            "numbers, and underscores)"
        ),
    )
    value: str = Field(..., description="Variable value")
    is_sensitive: bool = Field(
        True, description="Whether the variable is sensitive (hidden in logs and UI)"
    )


class UpdateVariableArgs(ToolArgs):
    id: str = Field(..., description="Unique identifier (UUID) of the team variable to update")
    value: str | None = Field(None, description="New variable value")
    is_sensitive: bool | None = Field(
        None, description="Whether the variable is sensitive (hidden in logs and UI)"
    )


class DeleteVariableArgs(ToolArgs):
    id: str = Field(..., description="Unique identifier (UUID) of the team variable to delete")


async def get_variables(ctx: ToolContext, args: GetVariablesArgs) -> Any:
    return await ctx.api.get_variables(args.payload())


async def create_variable(ctx: ToolContext, args: CreateVariableArgs) -> Any:
    return await ctx.api.create_variable(args.payload())


async def update_variable(ctx: ToolContext, args: UpdateVariableArgs) -> Any:
    return await ctx.api.update_variable(args.id, args.payload(exclude={"id"}))


async def delete_variable(ctx: ToolContext, args: DeleteVariableArgs) -> Any:
    await ctx.api.delete_variable(args.id)
    return {}


TOOLS = [
    ToolSpec(
        name="get_variables",
        title="Get Variables",
        description=(
            "Retrieves a paginated list of team variables. Variables are key-value "
            "pairs that can be used across processes and executions."
        ),
        group=GROUP_VARIABLES,
        args_model=GetVariablesArgs,
        handler=get_variables,
    ),
    ToolSpec(
        name="create_variable",
        title="Create Variable",
        description=(
            "Creates a new team variable that can be used across processes and executions. "
            "Variables can be marked as sensitive to hide their values in logs and UI."
        ),
        group=GROUP_VARIABLES,
        args_model=CreateVariableArgs,
        handler=create_variable,
    ),
    ToolSpec(
        name="update_variable",
        title="Update Variable",
        description=(
            "Updates an existing team variable with new value or configuration. "
            "Sensitive variables will have their values hidden in logs and UI."
        ),
        group=GROUP_VARIABLES,
        args_model=UpdateVariableArgs,
        handler=update_variable,
    ),
    ToolSpec(
        name="delete_variable",
        title="Delete Variable",
        description=(
            "Permanently deletes a team variable. This action cannot be undone and "
            "may affect processes that depend on this variable."
        ),
        group=GROUP_VARIABLES,
        args_model=DeleteVariableArgs,
        handler=delete_variable,
    ),
]
