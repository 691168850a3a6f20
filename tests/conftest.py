from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, create_autospec, patch

import pytest
from yepcode_run import YepCodeApi

from tests._fakes import FakeEnv, FakeRun, page
from yepcode_mcp.clients import ThreadedClient, YepCodeClients


@pytest.fixture(autouse=True)
def hermetic_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Each test runs in its own tmp cwd with no YEPCODE_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("YEPCODE_"):
            monkeypatch.delenv(name)
    return tmp_path


@pytest.fixture(autouse=True)
def no_coding_rules_fetch():
    """Catalog builds never reach yepcode.io from tests."""
    with patch(
        "yepcode_mcp.tools.run_code.fetch_coding_rules", AsyncMock(return_value="")
    ) as mock:
        yield mock


@pytest.fixture
def env() -> FakeEnv:
    return FakeEnv(["API_KEY", "DB_URL"])


@pytest.fixture
def run() -> FakeRun:
    return FakeRun()


@pytest.fixture
def api() -> MagicMock:
    """Signature-checked stand-in for the blocking yepcode-run API."""
    api = create_autospec(YepCodeApi, instance=True)
    api.get_processes.return_value = page([])
    return api


@pytest.fixture
def clients(env: FakeEnv, api: MagicMock, run: FakeRun) -> YepCodeClients:
    return YepCodeClients(env=env, api=ThreadedClient(api), run=run)
