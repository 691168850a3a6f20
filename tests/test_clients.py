"""Tests for the yepcode-run SDK adapters."""

from contextlib import aclosing
import threading
from types import SimpleNamespace

import pytest

from tests._fakes import make_config
from yepcode_mcp.clients import (
    ErrorEvent,
    FinishEvent,
    LogEvent,
    SdkRunClient,
    ThreadedClient,
    build_clients,
    error_message,
    field,
)
from yepcode_mcp.errors import InitializationError


class FakeRunner:
    """Stands in for YepCodeRun: invokes callbacks synchronously from run()."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.options = None
        self.threads = []

    def run(self, code, options):
        self.options = options
        self.threads.append(threading.current_thread())
        options["onLog"](SimpleNamespace(timestamp="t1", level="INFO", message="hello"))
        options["onLog"]({"timestamp": "t2", "level": "WARN", "message": "careful"})
        kind, payload = self.outcome
        if kind == "finish":
            options["onFinish"](payload)
        else:
            options["onError"](payload)
        return SimpleNamespace(wait_for_done=lambda: None)

    def get_execution(self, execution_id):
        return SimpleNamespace(
            logs=[{"timestamp": "t", "level": "INFO", "message": "m", "extra": 1}],
            process_id="proc-9",
            status="FINISHED",
            timeline=[{"status": "FINISHED"}],
            return_value="done",
            error=None,
            wait_for_done=lambda: None,
        )


@pytest.mark.asyncio
async def test_run_streams_callbacks_in_order():
    runner = FakeRunner(("finish", {"ok": True}))
    client = SdkRunClient(runner)

    async with aclosing(client.run("code", {"language": "python"})) as events:
        received = [event async for event in events]

    assert received == [
        LogEvent({"timestamp": "t1", "level": "INFO", "message": "hello"}),
        LogEvent({"timestamp": "t2", "level": "WARN", "message": "careful"}),
        FinishEvent({"ok": True}),
    ]
    assert runner.options["language"] == "python"
    assert runner.threads[0] is not threading.main_thread()


@pytest.mark.asyncio
async def test_run_error_callback_becomes_error_event():
    client = SdkRunClient(FakeRunner(("error", {"message": "SyntaxError"})))
    events = [event async for event in client.run("code", {})]
    assert events[-1] == ErrorEvent("SyntaxError")


@pytest.mark.asyncio
async def test_execution_handle_reads_sdk_execution():
    execution = SdkRunClient(FakeRunner(("finish", None))).execution("e1")
    await execution.wait_for_done()

    assert execution.status == "FINISHED"
    assert execution.process_id == "proc-9"
    assert execution.return_value == "done"
    assert execution.error is None
    assert execution.logs == [{"timestamp": "t", "level": "INFO", "message": "m"}]


@pytest.mark.asyncio
async def test_threaded_client_runs_methods_off_loop():
    seen = []

    class Blocking:
        limit = 10

        def get_processes(self, params):
            seen.append(threading.current_thread())
            return {"data": [], "params": params}

    client = ThreadedClient(Blocking())
    assert client.limit == 10
    assert await client.get_processes({"page": 0}) == {"data": [], "params": {"page": 0}}
    assert seen[0] is not threading.main_thread()


@pytest.mark.asyncio
async def test_api_double_enforces_sdk_names_and_arity(api):
    client = ThreadedClient(api)
    assert hasattr(client, "get_module_version_aliases")
    assert not hasattr(client, "get_module_aliases")
    with pytest.raises(TypeError):
        await client.create_object("a.txt", b"data")


def test_field_reads_dicts_and_objects():
    assert field({"executionId": "a"}, "executionId", "id") == "a"
    assert field(SimpleNamespace(execution_id="b"), "executionId", "execution_id") == "b"
    assert field({}, "missing", default=3) == 3


def test_error_message():
    assert error_message("plain") == "plain"
    assert error_message({"message": "from dict"}) == "from dict"
    assert error_message(ValueError("boom")) == "boom"


def test_build_clients_requires_token():
    with pytest.raises(InitializationError, match="YEPCODE_API_TOKEN"):
        build_clients(make_config(api_token=None))
