"""
YepCode client handles.

The server never speaks HTTP to YepCode itself. It consumes three capability
handles (env vars, generic API, code runs) through the async contract below;
``build_clients`` adapts the blocking ``yepcode-run`` SDK to that contract.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
import functools
import logging
from typing import Any, Protocol

from yepcode_mcp.config import YepCodeMcpConfig
from yepcode_mcp.errors import InitializationError

logger = logging.getLogger("yepcode-mcp")

INITIATED_BY = "@yepcode/mcp-server"


# --- Run events ---


@dataclass(frozen=True)
class LogEvent:
    """One log line emitted by a running execution."""

    entry: dict[str, Any]


@dataclass(frozen=True)
class ErrorEvent:
    """Terminal: the execution failed."""

    message: str


@dataclass(frozen=True)
class FinishEvent:
    """Terminal: the execution returned ``value``."""

    value: Any


RunEvent = LogEvent | ErrorEvent | FinishEvent


# --- Collaborator contract ---


class EnvClient(Protocol):
    async def get_env_vars(self) -> list[Any]: ...

    async def set_env_var(self, key: str, value: str, is_sensitive: bool = True) -> Any: ...

    async def del_env_var(self, key: str) -> Any: ...


class ExecutionHandle(Protocol):
    """Remote execution bound to an id; attributes are valid once done."""

    logs: list[Any]
    process_id: str | None
    status: str | None
    timeline: list[Any]
    return_value: Any
    error: Any

    async def wait_for_done(self) -> None: ...


class RunClient(Protocol):
    def run(self, code: str, options: dict[str, Any]) -> AsyncIterator[RunEvent]: ...

    def execution(self, execution_id: str) -> ExecutionHandle: ...


@dataclass(frozen=True)
class YepCodeClients:
    """
    Capability handles shared by every dispatch.

    ``api`` exposes the YepCode REST resources as coroutines: processes,
    versions and aliases, schedules, team variables, storage objects,
    executions and modules.
    """

    env: EnvClient
    api: Any
    run: RunClient


# --- Normalization helpers ---


def field(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key among ``names`` (dicts or SDK objects)."""
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default


def log_entry(log: Any) -> dict[str, Any]:
    return {
        "timestamp": field(log, "timestamp"),
        "level": field(log, "level"),
        "message": field(log, "message"),
    }


def error_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    message = field(error, "message")
    if message:
        return str(message)
    return str(error) or "Unknown error occurred"


# --- yepcode-run adapter ---


class ThreadedClient:
    """Exposes a blocking SDK object's methods as coroutines run in worker threads."""

    def __init__(self, target: Any):
        self._target = target

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        async def call(*args: Any, **kwargs: Any) -> Any:
            return await asyncio.to_thread(attr, *args, **kwargs)

        return call


class SdkExecution:
    """ExecutionHandle over a yepcode-run Execution, created lazily off-loop."""

    def __init__(self, factory: Callable[[], Any]):
        self._factory = factory
        self._execution: Any = None

    async def wait_for_done(self) -> None:
        if self._execution is None:
            self._execution = await asyncio.to_thread(self._factory)
        await asyncio.to_thread(self._execution.wait_for_done)

    @property
    def logs(self) -> list[Any]:
        return [log_entry(log) for log in field(self._execution, "logs", default=None) or []]

    @property
    def process_id(self) -> str | None:
        return field(self._execution, "process_id", "processId")

    @property
    def status(self) -> str | None:
        return field(self._execution, "status")

    @property
    def timeline(self) -> list[Any]:
        return list(field(self._execution, "timeline", default=None) or [])

    @property
    def return_value(self) -> Any:
        return field(self._execution, "return_value", "returnValue")

    @property
    def error(self) -> Any:
        return field(self._execution, "error")


class SdkRunClient:
    """RunClient over YepCodeRun: callbacks become an ordered async event stream."""

    def __init__(self, runner: Any):
        self._runner = runner

    async def run(self, code: str, options: dict[str, Any]) -> AsyncIterator[RunEvent]:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[RunEvent | None] = asyncio.Queue()

        # SDK callbacks fire on the worker thread
        def emit(event: RunEvent) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, event)

        sdk_options = {
            **options,
            "onLog": lambda log: emit(LogEvent(log_entry(log))),
            "onError": lambda error: emit(ErrorEvent(error_message(error))),
            "onFinish": lambda value: emit(FinishEvent(value)),
        }

        def run_to_completion() -> None:
            execution = self._runner.run(code, sdk_options)
            execution.wait_for_done()

        task = asyncio.ensure_future(asyncio.to_thread(run_to_completion))
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while (event := await queue.get()) is not None:
                yield event
        finally:
            await task

    def execution(self, execution_id: str) -> ExecutionHandle:
        return SdkExecution(functools.partial(self._runner.get_execution, execution_id))


def build_clients(config: YepCodeMcpConfig) -> YepCodeClients:
    """Construct the shared YepCode handles. Raises InitializationError."""
    if not config.api_token:
        raise InitializationError(
            "Exception while initializing YepCode. "
            "Have you set the YEPCODE_API_TOKEN environment variable?"
        )

    from yepcode_run import YepCodeApi, YepCodeApiConfig, YepCodeEnv, YepCodeRun

    settings: dict[str, Any] = {"api_token": config.api_token}
    if config.api_host:
        settings["api_host"] = config.api_host

    try:
        api_config = YepCodeApiConfig(**settings)
        clients = YepCodeClients(
            env=ThreadedClient(YepCodeEnv(api_config)),
            api=ThreadedClient(YepCodeApi(api_config)),
            run=SdkRunClient(YepCodeRun(api_config)),
        )
    except Exception as e:
        logger.exception("Exception while initializing YepCode")
        raise InitializationError(
            "Exception while initializing YepCode. "
            "Have you set the YEPCODE_API_TOKEN environment variable?"
        ) from e

    logger.info("YepCode initialized successfully")
    return clients
