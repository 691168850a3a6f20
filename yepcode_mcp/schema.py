"""
Tool specifications.

A tool's argument model is the single source of truth for both input
validation (``ToolSpec.validate``) and the JSON Schema advertised in the
catalog (``ToolSpec.input_schema``).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import copy
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from mcp.types import Tool
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from yepcode_mcp.context import ToolContext


class ToolArgs(BaseModel):
    """Base for tool argument models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def payload(
        self, *, include: set[str] | None = None, exclude: set[str] | None = None
    ) -> dict[str, Any]:
        """Wire representation for the YepCode API (unset optionals dropped)."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, include=include, exclude=exclude
        )


Handler = Callable[["ToolContext", Any], Awaitable[Any]]
DefinitionBuilder = Callable[["ToolSpec", "ToolContext"], Awaitable[Tool]]


@dataclass(frozen=True)
class ToolSpec:
    """A built-in tool: metadata, argument model and async handler."""

    name: str
    title: str
    description: str
    group: str
    args_model: type[ToolArgs]
    handler: Handler
    # Set when the advertised definition depends on remote state
    build_definition: DefinitionBuilder | None = None

    async def describe(self, ctx: ToolContext) -> Tool:
        if self.build_definition is not None:
            return await self.build_definition(self, ctx)
        return self.definition()

    def input_schema(self) -> dict[str, Any]:
        return json_schema(self.args_model)

    def definition(
        self, *, description: str | None = None, input_schema: dict[str, Any] | None = None
    ) -> Tool:
        return Tool(
            name=self.name,
            title=self.title,
            description=description if description is not None else self.description,
            inputSchema=input_schema if input_schema is not None else self.input_schema(),
        )

    def validate(self, arguments: dict[str, Any] | None) -> ToolArgs:
        """Raises pydantic.ValidationError on schema mismatch."""
        return self.args_model.model_validate(arguments or {})


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def json_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Client-facing JSON Schema for ``model`` (a fresh copy each call)."""
    return copy.deepcopy(_json_schema(model))


@lru_cache(maxsize=None)
def _json_schema(model: type[BaseModel]) -> dict[str, Any]:
    raw = model.model_json_schema(by_alias=True)
    defs = raw.pop("$defs", {})
    return _project(raw, defs)


def _project(node: Any, defs: dict[str, Any]) -> Any:
    """Inline $refs, drop titles and null defaults, flatten Optional[X] to X."""
    if isinstance(node, list):
        return [_project(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    if "$ref" in node:
        target = defs[node["$ref"].rsplit("/", 1)[-1]]
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        return _project({**target, **siblings}, defs)

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key == "title" or (key == "default" and value is None):
            continue
        if key == "properties":
            out[key] = {name: _project(sub, defs) for name, sub in value.items()}
        else:
            out[key] = _project(value, defs)

    for combinator in ("anyOf", "allOf"):
        branches = out.get(combinator)
        if branches is None:
            continue
        branches = [b for b in branches if b != {"type": "null"}]
        if len(branches) == 1:
            del out[combinator]
            out = {**branches[0], **out}
        else:
            out[combinator] = branches

    return out
