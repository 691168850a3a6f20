"""
run_code tool.

The advertised input schema is built per catalog request: the ``code``
description embeds YepCode's coding rules (fetched over HTTP, best effort) and
the keys of the environment variables already defined for the team.
"""

from __future__ import annotations

from contextlib import aclosing
import logging
import re
from typing import Any

import httpx
from mcp.types import Tool
from pydantic import Field

from yepcode_mcp.clients import INITIATED_BY, EnvClient, ErrorEvent, LogEvent, field
from yepcode_mcp.config import GROUP_RUN_CODE
from yepcode_mcp.context import ToolContext
from yepcode_mcp.errors import ExecutionError
from yepcode_mcp.schema import ToolArgs, ToolSpec

logger = logging.getLogger("yepcode-mcp")

JAVASCRIPT_RULES_URL = "https://yepcode.io/docs/ai-rules/code/javascript.md"
PYTHON_RULES_URL = "https://yepcode.io/docs/ai-rules/code/python.md"
RULES_FETCH_TIMEOUT = 10.0

_SECTION_ANCHOR_RE = re.compile(r"(\[Section titled “.*”\]\(#.*\)\n)")

RUN_CODE_TITLE = "Execute LLM-generated code in YepCode’s remote and secure sandboxes"
RUN_CODE_DESCRIPTION = """This tool is ideal when your AI agent needs to handle tasks that don’t have a predefined tool available — but could be solved by writing and running a custom script.

It supports JavaScript and Python, both with external dependencies (NPM or PyPI), so it’s perfect for:
* Complex data transformations
* API calls to services not yet integrated
* Custom logic implementations
* One-off utility scripts
* To use files as input, first upload them to YepCode Storage using the upload storage MCP tools. Then, access them in your code using the `yepcode.storage` helper methods to download the files.
* To generate and output files, create them in the local execution storage, then upload them to YepCode Storage using the `yepcode.storage` helpers. Once uploaded, you can download them using the download storage MCP tool.

Tip: First try to find a tool that matches your task, but if not available, try generating the code and running it here."""

DEFAULT_CODE_DESCRIPTION = "Source code to run. JavaScript or Python."


class RunCodeOptions(ToolArgs):
    language: str | None = Field(
        None,
        description="The language to be used to run the code. We support javascript or python.",
    )
    remove_on_done: bool | None = Field(
        None,
        description=(
            "Whether to remove the process source code after execution. If false, the code "
            "will be kept for audit purposes. By default, code is removed after execution."
        ),
    )
    comment: str | None = Field(
        None,
        description=(
            "A comment or description for this execution. Useful for tracking, debugging, "
            "and providing context about the execution."
        ),
    )
    manifest: Any = Field(
        None,
        description=(
            "Process manifest configuration. Contains metadata and configuration for the "
            "process deployment and execution, such as dependencies, environment setup, "
            "and other deployment-related settings."
        ),
    )
    parameters: Any = Field(
        None,
        description=(
            "Input parameters to be passed to the code execution. These parameters can be "
            "accessed within your code and must match the expected parameter schema if defined."
        ),
    )


class RunCodeArgs(ToolArgs):
    code: str = Field(..., description=DEFAULT_CODE_DESCRIPTION)
    options: RunCodeOptions = Field(
        default_factory=RunCodeOptions, description="Execution options"
    )


# --- Catalog description ---


def _rules_section(text: str, heading: str) -> str:
    start = text.find(heading)
    if start >= 0:
        text = text[start:]
    return _SECTION_ANCHOR_RE.sub("", text)


async def fetch_coding_rules(client: httpx.AsyncClient | None = None) -> str:
    """Fetch the JavaScript and Python coding rules. Returns "" on any HTTP failure."""
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=RULES_FETCH_TIMEOUT, follow_redirects=True)
    try:
        js = await client.get(JAVASCRIPT_RULES_URL)
        js.raise_for_status()
        py = await client.get(PYTHON_RULES_URL)
        py.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Could not fetch YepCode coding rules: {e}")
        return ""
    finally:
        if owns_client:
            await client.aclose()

    js_rules = _rules_section(js.text, "# JavaScript Code Rules")
    py_rules = _rules_section(py.text, "# Python Code Rules")
    return f"Here you can find the general rules for YepCode coding:\n\n{js_rules}\n{py_rules}"


async def list_env_var_keys(env: EnvClient) -> list[str]:
    try:
        env_vars = await env.get_env_vars()
    except Exception as e:
        logger.warning(f"Could not list environment variables: {e}")
        return []
    return [str(key) for key in (field(v, "key") for v in env_vars or []) if key]


def code_description(env_var_keys: list[str], coding_rules: str) -> str:
    parts = []
    if coding_rules:
        parts.append(coding_rules)
    if env_var_keys:
        parts.append(
            "## YepCode Environment Variables\n\n"
            "You may use the following environment variables already set in the "
            f"execution context: {', '.join(env_var_keys)}."
        )
    return "\n\n".join(parts) or DEFAULT_CODE_DESCRIPTION


async def build_run_code_definition(spec: ToolSpec, ctx: ToolContext) -> Tool:
    keys = await list_env_var_keys(ctx.clients.env)
    rules = "" if ctx.options.skip_coding_rules else await fetch_coding_rules()
    schema = spec.input_schema()
    schema["properties"]["code"]["description"] = code_description(keys, rules)
    return spec.definition(input_schema=schema)


# --- Handler ---


async def run_code(ctx: ToolContext, args: RunCodeArgs) -> dict:
    options = args.options.payload()
    options.setdefault("removeOnDone", ctx.options.run_code_cleanup)
    options["initiatedBy"] = INITIATED_BY

    logger.info(
        f"Running code with YepCode ({len(args.code)} chars, "
        f"language={options.get('language', 'auto')})"
    )

    logs: list[dict[str, Any]] = []
    async with aclosing(ctx.clients.run.run(args.code, options)) as events:
        async for event in events:
            if isinstance(event, LogEvent):
                logs.append(event.entry)
            elif isinstance(event, ErrorEvent):
                logger.info(f"YepCode execution error: {event.message}")
                return {"logs": logs, "error": event.message}
            else:
                logger.info("YepCode execution finished")
                return {"logs": logs, "returnValue": event.value}

    raise ExecutionError("Code execution ended without a result")


TOOLS = [
    ToolSpec(
        name="run_code",
        title=RUN_CODE_TITLE,
        description=RUN_CODE_DESCRIPTION,
        group=GROUP_RUN_CODE,
        args_model=RunCodeArgs,
        handler=run_code,
        build_definition=build_run_code_definition,
    ),
]
