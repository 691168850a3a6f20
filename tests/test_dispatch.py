"""
Tests for tools/call dispatch: routing, argument validation and result envelopes.
"""

import json

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND
import pytest

from tests._fakes import FakeExecution, make_config, make_dispatcher, page, process
from yepcode_mcp.clients import INITIATED_BY
from yepcode_mcp.dispatch import (
    BuiltinRoute,
    ProcessRoute,
    error_result,
    match_route,
    normalize,
    success_result,
)
from yepcode_mcp.process_tools import ProcessTool

CORE_SCHEMA = {
    "type": "object",
    "properties": {"x": {"type": "number"}},
    "required": ["x"],
}


def _body(result):
    return json.loads(result.content[0].text)


@pytest.fixture
def core_api(api, run):
    api.get_processes.return_value = page(
        [process("sum-numbers", ["core"], id="p-1", parameters_schema=CORE_SCHEMA)]
    )
    api.execute_process_async.return_value = {"executionId": "exec-1"}
    run.executions["exec-1"] = FakeExecution(
        ["CREATED", "RUNNING", "FINISHED"], return_value={"sum": 3}, process_id="p-1"
    )
    return api


class TestProtocolErrors:
    @pytest.mark.asyncio
    async def test_unknown_tool_is_method_not_found(self, clients):
        dispatcher = make_dispatcher(clients, make_config())
        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("does_not_exist", {})
        assert exc.value.error.code == METHOD_NOT_FOUND
        assert "does_not_exist" in exc.value.error.message

    @pytest.mark.asyncio
    async def test_missing_required_field_is_invalid_params(self, clients, env):
        dispatcher = make_dispatcher(clients, make_config())
        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("set_env_var", {"key": "API_KEY"})
        assert exc.value.error.code == INVALID_PARAMS
        assert "value" in exc.value.error.message
        assert env.set_calls == []

    @pytest.mark.asyncio
    async def test_disabled_run_code_is_hidden_and_unknown(self, clients, run):
        dispatcher = make_dispatcher(clients, make_config(options="disableRunCodeTool"))

        names = [tool.name for tool in await dispatcher.list_tools()]
        assert "run_code" not in names

        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("run_code", {"code": "return 1"})
        assert exc.value.error.code == METHOD_NOT_FOUND
        assert run.calls == []

    @pytest.mark.asyncio
    async def test_tool_outside_enabled_groups_is_unknown(self, clients):
        dispatcher = make_dispatcher(clients, make_config("env_vars"))
        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("get_processes", {})
        assert exc.value.error.code == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_prefix_is_unknown_when_processes_disabled(self, clients, api):
        dispatcher = make_dispatcher(clients, make_config())
        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("run_ycp_abc", {})
        assert exc.value.error.code == METHOD_NOT_FOUND
        api.execute_process_async.assert_not_called()


class TestBuiltinCalls:
    @pytest.mark.asyncio
    async def test_success_envelope(self, clients, env):
        dispatcher = make_dispatcher(clients, make_config())
        result = await dispatcher.call_tool(
            "set_env_var", {"key": "TOKEN", "value": "s3cr3t", "isSensitive": False}
        )
        assert result.isError is False
        assert _body(result) == {}
        assert env.set_calls == [("TOKEN", "s3cr3t", False)]

    @pytest.mark.asyncio
    async def test_handler_failure_is_error_envelope(self, clients, api):
        api.get_process.side_effect = RuntimeError("process not found")
        dispatcher = make_dispatcher(clients, make_config())

        result = await dispatcher.call_tool("get_process", {"identifier": "nope"})

        assert result.isError is True
        assert _body(result) == {"error": "process not found"}

    @pytest.mark.asyncio
    async def test_api_result_is_serialized(self, clients, api):
        api.get_variables.return_value = {"data": [{"key": "A"}], "total": 1}
        dispatcher = make_dispatcher(clients, make_config())

        result = await dispatcher.call_tool("get_variables", {"limit": 5})

        assert _body(result) == {"data": [{"key": "A"}], "total": 1}
        api.get_variables.assert_called_once_with({"page": 0, "limit": 5})

    @pytest.mark.asyncio
    async def test_get_execution_resolves_snapshot(self, clients, run):
        run.executions["exec-9"] = FakeExecution(["RUNNING", "ERROR"], error="boom")
        dispatcher = make_dispatcher(clients, make_config())

        result = await dispatcher.call_tool("get_execution", {"executionId": "exec-9"})

        body = _body(result)
        assert result.isError is False
        assert body["status"] == "ERROR"
        assert body["error"] == "boom"
        assert "returnValue" not in body

    @pytest.mark.asyncio
    async def test_execute_process_sync_waits_for_result(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config())

        result = await dispatcher.call_tool(
            "execute_process_sync",
            {"identifier": "sum-numbers", "parameters": {"x": 1}, "comment": "nightly"},
        )

        body = _body(result)
        assert body["executionId"] == "exec-1"
        assert body["returnValue"] == {"sum": 3}
        core_api.execute_process_async.assert_called_once_with(
            "sum-numbers", {"x": 1}, {"comment": "nightly", "initiatedBy": INITIATED_BY}
        )


class TestCatalog:
    @pytest.mark.asyncio
    async def test_names_are_unique(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("yc_api_full,run_code,core"))
        names = [tool.name for tool in await dispatcher.list_tools()]
        assert len(names) == len(set(names))
        assert names[0] == "run_code"
        assert names[-1] == "sum-numbers"

    @pytest.mark.asyncio
    async def test_only_process_tools_when_only_tags(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))
        names = [tool.name for tool in await dispatcher.list_tools()]
        assert names == ["sum-numbers"]

    @pytest.mark.asyncio
    async def test_list_failure_propagates(self, clients, api):
        api.get_processes.side_effect = RuntimeError("unauthorized")
        dispatcher = make_dispatcher(clients, make_config("core"))
        with pytest.raises(RuntimeError):
            await dispatcher.list_tools()


class TestProcessCalls:
    @pytest.mark.asyncio
    async def test_sync_call_returns_execution_snapshot(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))
        await dispatcher.list_tools()

        result = await dispatcher.call_tool("sum-numbers", {"parameters": {"x": 2}})

        body = _body(result)
        assert result.isError is False
        assert body["status"] == "FINISHED"
        assert body["returnValue"] == {"sum": 3}
        assert body["processId"] == "p-1"
        assert [step["status"] for step in body["timeline"]] == [
            "CREATED",
            "RUNNING",
            "FINISHED",
        ]
        core_api.execute_process_async.assert_called_once_with(
            "p-1", {"x": 2}, {"initiatedBy": INITIATED_BY}
        )

    @pytest.mark.asyncio
    async def test_async_call_returns_execution_id(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))
        await dispatcher.list_tools()

        result = await dispatcher.call_tool(
            "sum-numbers",
            {
                "parameters": {"x": 2},
                "synchronousExecution": False,
                "options": {"tag": "v1", "comment": "from test"},
            },
        )

        assert _body(result) == {"executionId": "exec-1"}
        core_api.execute_process_async.assert_called_once_with(
            "p-1", {"x": 2}, {"tag": "v1", "comment": "from test", "initiatedBy": INITIATED_BY}
        )

    @pytest.mark.asyncio
    async def test_unlisted_process_is_found_after_refresh(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))
        assert dict(dispatcher.process_tools) == {}

        result = await dispatcher.call_tool("sum-numbers", {"parameters": {"x": 2}})

        assert result.isError is False
        assert "sum-numbers" in dispatcher.process_tools

    @pytest.mark.asyncio
    async def test_parameters_failing_process_schema_are_invalid(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))
        await dispatcher.list_tools()

        with pytest.raises(McpError) as exc:
            await dispatcher.call_tool("sum-numbers", {"parameters": {"x": "two"}})

        assert exc.value.error.code == INVALID_PARAMS
        core_api.execute_process_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_prefixed_name_runs_process_by_identifier(self, clients, core_api):
        dispatcher = make_dispatcher(clients, make_config("core"))

        result = await dispatcher.call_tool(
            "run_ycp_legacy-slug", {"synchronousExecution": False}
        )

        assert _body(result) == {"executionId": "exec-1"}
        core_api.execute_process_async.assert_called_once_with(
            "legacy-slug", None, {"initiatedBy": INITIATED_BY}
        )

    @pytest.mark.asyncio
    async def test_listed_slug_with_prefix_runs_by_process_id(self, clients, api):
        api.get_processes.return_value = page([process("run_ycp_report", ["core"], id="p-7")])
        api.execute_process_async.return_value = {"executionId": "exec-7"}
        dispatcher = make_dispatcher(clients, make_config("core"))
        await dispatcher.list_tools()

        result = await dispatcher.call_tool("run_ycp_report", {"synchronousExecution": False})

        assert _body(result) == {"executionId": "exec-7"}
        api.execute_process_async.assert_called_once_with(
            "p-7", None, {"initiatedBy": INITIATED_BY}
        )

    @pytest.mark.asyncio
    async def test_missing_execution_id_is_error_envelope(self, clients, core_api):
        core_api.execute_process_async.return_value = {}
        dispatcher = make_dispatcher(clients, make_config("core"))

        result = await dispatcher.call_tool("sum-numbers", {"parameters": {"x": 2}})

        assert result.isError is True
        assert "execution id" in _body(result)["error"]


class TestRouting:
    def test_builtin_route(self):
        spec = object()
        assert match_route("get_process", {"get_process": spec}, {}, False) == BuiltinRoute(spec)

    def test_prefix_route_without_snapshot(self):
        route = match_route("run_ycp_abc", {}, {}, True)
        assert route == ProcessRoute("run_ycp_abc", "abc", None)

    def test_bare_prefix_is_not_a_route(self):
        assert match_route("run_ycp_", {}, {}, True) is None

    def test_listed_slug_with_prefix_routes_to_process_id(self):
        tool = ProcessTool(
            name="run_ycp_report", process_id="p-9", slug="run_ycp_report", definition=None
        )
        route = match_route("run_ycp_report", {}, {"run_ycp_report": tool}, True)
        assert route == ProcessRoute("run_ycp_report", "p-9", tool)


class TestEnvelopes:
    def test_none_becomes_empty_object(self):
        assert normalize(None) == {}
        assert _body(success_result(None)) == {}

    def test_bytes_are_base64(self):
        assert _body(success_result({"data": b"hi"})) == {"data": "aGk="}

    def test_error_result(self):
        result = error_result("nope")
        assert result.isError is True
        assert _body(result) == {"error": "nope"}
