import json

import httpx
import pytest

from tests._fakes import FakeEnv, make_config, make_dispatcher
from yepcode_mcp.clients import INITIATED_BY, ErrorEvent, FinishEvent, LogEvent
from yepcode_mcp.tools.run_code import (
    DEFAULT_CODE_DESCRIPTION,
    JAVASCRIPT_RULES_URL,
    PYTHON_RULES_URL,
    code_description,
    fetch_coding_rules,
    list_env_var_keys,
)


def _log(message):
    return LogEvent({"timestamp": "2025-01-01T00:00:00Z", "level": "INFO", "message": message})


def _body(result):
    return json.loads(result.content[0].text)


@pytest.mark.asyncio
async def test_logs_in_order_with_return_value(clients, run):
    run.events = [_log("one"), _log("two"), FinishEvent({"answer": 42})]
    dispatcher = make_dispatcher(clients, make_config())

    result = await dispatcher.call_tool("run_code", {"code": "return {answer: 42}"})

    body = _body(result)
    assert result.isError is False
    assert [entry["message"] for entry in body["logs"]] == ["one", "two"]
    assert body["returnValue"] == {"answer": 42}
    assert "error" not in body


@pytest.mark.asyncio
async def test_code_error_keeps_logs_without_return_value(clients, run):
    run.events = [_log("starting"), ErrorEvent("ReferenceError: x is not defined")]
    dispatcher = make_dispatcher(clients, make_config())

    result = await dispatcher.call_tool("run_code", {"code": "x"})

    body = _body(result)
    assert result.isError is False
    assert body["error"] == "ReferenceError: x is not defined"
    assert [entry["message"] for entry in body["logs"]] == ["starting"]
    assert "returnValue" not in body


@pytest.mark.asyncio
async def test_events_after_terminal_are_ignored(clients, run):
    run.events = [FinishEvent(1), _log("late"), ErrorEvent("late error")]
    dispatcher = make_dispatcher(clients, make_config())

    body = _body(await dispatcher.call_tool("run_code", {"code": "return 1"}))

    assert body == {"logs": [], "returnValue": 1}


@pytest.mark.asyncio
async def test_stream_without_terminal_event_is_error_envelope(clients, run):
    run.events = [_log("only a log")]
    dispatcher = make_dispatcher(clients, make_config())

    result = await dispatcher.call_tool("run_code", {"code": "return 1"})

    assert result.isError is True
    assert "without a result" in _body(result)["error"]


@pytest.mark.asyncio
async def test_run_options_default_to_cleanup(clients, run):
    run.events = [FinishEvent(None)]
    dispatcher = make_dispatcher(clients, make_config())

    await dispatcher.call_tool(
        "run_code", {"code": "print(1)", "options": {"language": "python", "comment": "c"}}
    )

    ((code, options),) = run.calls
    assert code == "print(1)"
    assert options == {
        "language": "python",
        "comment": "c",
        "removeOnDone": True,
        "initiatedBy": INITIATED_BY,
    }


@pytest.mark.asyncio
async def test_skip_cleanup_option_and_explicit_value(clients, run):
    run.events = [FinishEvent(None)]
    dispatcher = make_dispatcher(clients, make_config(options="skipRunCodeCleanup"))

    await dispatcher.call_tool("run_code", {"code": "1"})
    await dispatcher.call_tool("run_code", {"code": "2", "options": {"removeOnDone": True}})

    assert [options["removeOnDone"] for _, options in run.calls] == [False, True]


@pytest.mark.asyncio
async def test_catalog_description_lists_env_var_keys(clients, no_coding_rules_fetch):
    dispatcher = make_dispatcher(clients, make_config("run_code"))

    (tool,) = await dispatcher.list_tools()

    description = tool.inputSchema["properties"]["code"]["description"]
    assert "API_KEY, DB_URL" in description
    no_coding_rules_fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_skip_coding_rules_does_not_fetch(clients, no_coding_rules_fetch):
    dispatcher = make_dispatcher(clients, make_config("run_code", "skipCodingRules"))
    await dispatcher.list_tools()
    no_coding_rules_fetch.assert_not_awaited()


def test_code_description_fallback():
    assert code_description([], "") == DEFAULT_CODE_DESCRIPTION
    assert code_description([], "RULES") == "RULES"
    assert code_description(["A"], "RULES").startswith("RULES\n\n## YepCode Environment")


@pytest.mark.asyncio
async def test_list_env_var_keys_degrades_to_empty():
    class BrokenEnv(FakeEnv):
        async def get_env_vars(self):
            raise RuntimeError("forbidden")

    assert await list_env_var_keys(BrokenEnv()) == []


@pytest.mark.asyncio
async def test_fetch_coding_rules_extracts_sections():
    pages = {
        JAVASCRIPT_RULES_URL: "intro\n# JavaScript Code Rules\n"
        "[Section titled “Helpers”](#helpers)\nUse yepcode.storage",
        PYTHON_RULES_URL: "# Python Code Rules\nUse yepcode.storage too",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=pages[str(request.url)])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        rules = await fetch_coding_rules(client)

    assert rules.startswith("Here you can find the general rules for YepCode coding:")
    assert "# JavaScript Code Rules\nUse yepcode.storage" in rules
    assert "Section titled" not in rules
    assert "intro" not in rules
    assert "# Python Code Rules" in rules


@pytest.mark.asyncio
async def test_fetch_coding_rules_returns_empty_on_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await fetch_coding_rules(client) == ""
