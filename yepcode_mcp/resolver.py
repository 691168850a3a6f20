"""
Execution Result Resolver.

Waits for a remote execution to reach a terminal status and reports the
snapshot observed at that point.
"""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from typing import Any

from yepcode_mcp.clients import RunClient
from yepcode_mcp.errors import ExecutionError

logger = logging.getLogger("yepcode-mcp")


class ExecutionStatus(str, Enum):
    CREATED = "CREATED"
    QUEUED = "QUEUED"
    DEQUEUED = "DEQUEUED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    KILLED = "KILLED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"


TERMINAL_STATUSES = frozenset(
    {
        ExecutionStatus.FINISHED,
        ExecutionStatus.KILLED,
        ExecutionStatus.REJECTED,
        ExecutionStatus.ERROR,
    }
)


def is_terminal(status: Any) -> bool:
    value = getattr(status, "value", status)
    try:
        return ExecutionStatus(str(value).upper()) in TERMINAL_STATUSES
    except ValueError:
        return False


class ExecutionResolver:
    """Resolve an execution id to {executionId, logs, processId, status, timeline, ...}."""

    def __init__(self, run: RunClient, *, timeout: float | None = None):
        self._run = run
        self._timeout = timeout

    async def resolve(self, execution_id: str) -> dict[str, Any]:
        execution = self._run.execution(execution_id)
        try:
            if self._timeout is None:
                await execution.wait_for_done()
            else:
                await asyncio.wait_for(execution.wait_for_done(), self._timeout)
        except asyncio.TimeoutError as e:
            raise ExecutionError(
                f"Execution {execution_id} did not finish within {self._timeout:g}s"
            ) from e

        status = execution.status
        if not is_terminal(status):
            raise ExecutionError(
                f"Execution {execution_id} is not finished (status: {status})"
            )

        logger.debug(
            f"Execution {execution_id} resolved", extra={"execution_id": execution_id}
        )
        result: dict[str, Any] = {
            "executionId": execution_id,
            "logs": execution.logs,
            "processId": execution.process_id,
            "status": getattr(status, "value", status),
            "timeline": execution.timeline,
        }
        if execution.return_value is not None:
            result["returnValue"] = execution.return_value
        if execution.error:
            result["error"] = execution.error
        return result
