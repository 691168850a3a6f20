"""Script library module tools, including versions and aliases (``module_versions``)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from yepcode_mcp.config import GROUP_MODULE_VERSIONS, GROUP_MODULES
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec


class GetModulesArgs(ToolArgs):
    page: int = Field(0, ge=0, description="Page number for pagination (0-based index)")
    limit: int = Field(
        10, ge=1, le=100, description="Maximum number of modules to retrieve per page"
    )


class CreateModuleArgs(ToolArgs):
    name: str = Field(..., description="Module name")
    description: str | None = Field(None, description="Module description")
    code: str = Field(..., description="Module source code")
    language: Literal["javascript", "python"] = Field(..., description="Programming language")
    tags: list[str] | None = Field(None, description="Module tags")
    settings: dict[str, Any] | None = Field(None, description="Module settings")

    def module_payload(self) -> dict[str, Any]:
        payload = self.payload(exclude={"code", "language"})
        payload["script"] = {
            "programmingLanguage": self.language.upper(),
            "sourceCode": self.code,
        }
        return payload


class ModuleIdArgs(ToolArgs):
    id: str = Field(..., description="Unique identifier (UUID) of the script library module")


class UpdateModuleArgs(ModuleIdArgs):
    name: str | None = Field(
        None,
        description=(
            "The name of the script library. Must not have spaces, "
            "dashes and dots are allowed"
        ),
    )
    source_code: str | None = Field(
        None,
        description=(
            "The updated source code of the script library module. This is the "
            "reusable code that can be imported by processes."
        ),
    )

    def module_payload(self) -> dict[str, Any]:
        payload = self.payload(exclude={"id", "source_code"})
        if self.source_code is not None:
            payload["script"] = {"sourceCode": self.source_code}
        return payload


class GetModuleVersionsArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    page: int = Field(0, ge=0, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Amount of items to retrieve")


class ModuleVersionArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    version_id: str = Field(..., description="Version ID")


class PublishModuleVersionArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    tag: str | None = Field(None, description="Version tag")
    comment: str | None = Field(None, description="Version comment")
    source_code: str | None = Field(None, description="Module source code")


class GetModuleAliasesArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    version_id: str | None = Field(None, description="Version ID")
    page: int = Field(0, ge=0, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Amount of items to retrieve")


class CreateModuleVersionAliasArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    name: str = Field(..., description="Alias name")
    version_id: str = Field(
        ..., description="The version id of the script library being aliased"
    )


class ModuleVersionAliasArgs(ToolArgs):
    module_id: str = Field(..., description="Module ID")
    alias_id: str = Field(..., description="Alias ID")


class UpdateModuleVersionAliasArgs(ModuleVersionAliasArgs):
    name: str | None = Field(None, description="Alias name")
    version_id: str | None = Field(
        None, description="The version id of the script library being aliased"
    )


async def get_modules(ctx: ToolContext, args: GetModulesArgs) -> Any:
    return await ctx.api.get_modules(args.payload())


async def create_module(ctx: ToolContext, args: CreateModuleArgs) -> Any:
    return await ctx.api.create_module(args.module_payload())


async def get_module(ctx: ToolContext, args: ModuleIdArgs) -> Any:
    return await ctx.api.get_module(args.id)


async def update_module(ctx: ToolContext, args: UpdateModuleArgs) -> Any:
    return await ctx.api.update_module(args.id, args.module_payload())


async def delete_module(ctx: ToolContext, args: ModuleIdArgs) -> Any:
    await ctx.api.delete_module(args.id)
    return {}


async def get_module_versions(ctx: ToolContext, args: GetModuleVersionsArgs) -> Any:
    return await ctx.api.get_module_versions(args.module_id, args.payload(exclude={"module_id"}))


async def publish_module_version(ctx: ToolContext, args: PublishModuleVersionArgs) -> Any:
    return await ctx.api.publish_module_version(
        args.module_id, args.payload(exclude={"module_id"})
    )


async def get_module_version(ctx: ToolContext, args: ModuleVersionArgs) -> Any:
    return await ctx.api.get_module_version(args.module_id, args.version_id)


async def delete_module_version(ctx: ToolContext, args: ModuleVersionArgs) -> Any:
    await ctx.api.delete_module_version(args.module_id, args.version_id)
    return {}


async def get_module_aliases(ctx: ToolContext, args: GetModuleAliasesArgs) -> Any:
    return await ctx.api.get_module_version_aliases(
        args.module_id, args.payload(exclude={"module_id"})
    )


async def create_module_version_alias(
    ctx: ToolContext, args: CreateModuleVersionAliasArgs
) -> Any:
    return await ctx.api.create_module_version_alias(
        args.module_id, args.payload(exclude={"module_id"})
    )


async def get_module_version_alias(ctx: ToolContext, args: ModuleVersionAliasArgs) -> Any:
    return await ctx.api.get_module_version_alias(args.module_id, args.alias_id)


async def delete_module_version_alias(ctx: ToolContext, args: ModuleVersionAliasArgs) -> Any:
    await ctx.api.delete_module_version_alias(args.module_id, args.alias_id)
    return {}


async def update_module_version_alias(
    ctx: ToolContext, args: UpdateModuleVersionAliasArgs
) -> Any:
    return await ctx.api.update_module_version_alias(
        args.module_id, args.alias_id, args.payload(exclude={"module_id", "alias_id"})
    )


TOOLS = [
    ToolSpec(
        name="get_modules",
        title="Get Modules",
        description=(
            "Retrieves a paginated list of script library modules. Modules are reusable "
            "code libraries that can be imported and used across different processes."
        ),
        group=GROUP_MODULES,
        args_model=GetModulesArgs,
        handler=get_modules,
    ),
    ToolSpec(
        name="create_module",
        title="Create Module",
        description=(
            "Creates a new script library module with source code and metadata. Modules "
            "can be written in JavaScript or Python and can be imported by processes."
        ),
        group=GROUP_MODULES,
        args_model=CreateModuleArgs,
        handler=create_module,
    ),
    ToolSpec(
        name="get_module",
        title="Get Module",
        description=(
            "Retrieves detailed information about a specific script library module "
            "including its source code, metadata, and version information."
        ),
        group=GROUP_MODULES,
        args_model=ModuleIdArgs,
        handler=get_module,
    ),
    ToolSpec(
        name="update_module",
        title="Update Module",
        description=(
            "Updates an existing script library module with new source code or metadata. "
            "All provided fields will replace the existing values."
        ),
        group=GROUP_MODULES,
        args_model=UpdateModuleArgs,
        handler=update_module,
    ),
    ToolSpec(
        name="delete_module",
        title="Delete Module",
        description=(
            "Permanently deletes a script library module. This action cannot be undone "
            "and may affect processes that import this module."
        ),
        group=GROUP_MODULES,
        args_model=ModuleIdArgs,
        handler=delete_module,
    ),
    ToolSpec(
        name="get_module_versions",
        title="Get Module Versions",
        description="Retrieves a paginated list of versions for a specific module.",
        group=GROUP_MODULE_VERSIONS,
        args_model=GetModuleVersionsArgs,
        handler=get_module_versions,
    ),
    ToolSpec(
        name="publish_module_version",
        title="Publish Module Version",
        description="Publishes a new version of a module.",
        group=GROUP_MODULE_VERSIONS,
        args_model=PublishModuleVersionArgs,
        handler=publish_module_version,
    ),
    ToolSpec(
        name="get_module_version",
        title="Get Module Version",
        description="Retrieves detailed information about a specific module version.",
        group=GROUP_MODULE_VERSIONS,
        args_model=ModuleVersionArgs,
        handler=get_module_version,
    ),
    ToolSpec(
        name="delete_module_version",
        title="Delete Module Version",
        description="Deletes a specific module version. This action cannot be undone.",
        group=GROUP_MODULE_VERSIONS,
        args_model=ModuleVersionArgs,
        handler=delete_module_version,
    ),
    ToolSpec(
        name="get_module_aliases",
        title="Get Module Aliases",
        description="Retrieves a paginated list of version aliases for a specific module.",
        group=GROUP_MODULE_VERSIONS,
        args_model=GetModuleAliasesArgs,
        handler=get_module_aliases,
    ),
    ToolSpec(
        name="create_module_version_alias",
        title="Create Module Version Alias",
        description="Creates a new alias for a module version.",
        group=GROUP_MODULE_VERSIONS,
        args_model=CreateModuleVersionAliasArgs,
        handler=create_module_version_alias,
    ),
    ToolSpec(
        name="get_module_version_alias",
        title="Get Module Version Alias",
        description="Retrieves detailed information about a specific module version alias.",
        group=GROUP_MODULE_VERSIONS,
        args_model=ModuleVersionAliasArgs,
        handler=get_module_version_alias,
    ),
    ToolSpec(
        name="delete_module_version_alias",
        title="Delete Module Version Alias",
        description="Permanently deletes a module version alias. This action cannot be undone.",
        group=GROUP_MODULE_VERSIONS,
        args_model=ModuleVersionAliasArgs,
        handler=delete_module_version_alias,
    ),
    ToolSpec(
        name="update_module_version_alias",
        title="Update Module Version Alias",
        description=(
            "Updates an existing module version alias with new configuration. "
            "All provided fields will replace the existing values."
        ),
        group=GROUP_MODULE_VERSIONS,
        args_model=UpdateModuleVersionAliasArgs,
        handler=update_module_version_alias,
    ),
]
