"""Environment variable tools (set_env_var, remove_env_var)."""

from __future__ import annotations

import logging

from pydantic import Field

from yepcode_mcp.config import GROUP_ENV_VARS
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec

logger = logging.getLogger("yepcode-mcp")

ENV_VAR_KEY_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]*$"


class SetEnvVarArgs(ToolArgs):
    key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        pattern=ENV_VAR_KEY_PATTERN,
        description="The key of the environment variable to set",
    )
    value: str = Field(..., description="The value of the environment variable to set")
    is_sensitive: bool = Field(True, description="Whether the environment variable is sensitive")


class RemoveEnvVarArgs(ToolArgs):
    key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        pattern=ENV_VAR_KEY_PATTERN,
        description="The key of the environment variable to remove",
    )


async def set_env_var(ctx: ToolContext, args: SetEnvVarArgs) -> dict:
    logger.info(f"Setting environment variable: {args.key}")
    await ctx.clients.env.set_env_var(args.key, args.value, args.is_sensitive)
    return {}


async def remove_env_var(ctx: ToolContext, args: RemoveEnvVarArgs) -> dict:
    logger.info(f"Removing environment variable: {args.key}")
    await ctx.clients.env.del_env_var(args.key)
    return {}


TOOLS = [
    ToolSpec(
        name="set_env_var",
        title="Set environment variable",
        description="Set a YepCode environment variable to be available for future code executions",
        group=GROUP_ENV_VARS,
        args_model=SetEnvVarArgs,
        handler=set_env_var,
    ),
    ToolSpec(
        name="remove_env_var",
        title="Remove environment variable",
        description="Remove a YepCode environment variable",
        group=GROUP_ENV_VARS,
        args_model=RemoveEnvVarArgs,
        handler=remove_env_var,
    ),
]
