"""Shared test fixtures."""

import pytest


@pytest.fixture
def mock_process(monkeypatch):
    """Mock process.run and process.run_async for tests."""
    from flow_exec import process

    calls = []
    responses = []

    def fake_run(args, env=None, cwd=None):
        calls.append(("run", args, env, cwd))
        if responses:
            response = responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return process.Result(returncode=0, stdout="", stderr="")

    def fake_run_async(args, env=None, cwd=None, capture=True):
        calls.append(("run_async", args, env, cwd, capture))

    monkeypatch.setattr(process, "run", fake_run)
    monkeypatch.setattr(process, "run_async", fake_run_async)

    return type("MockProcess", (), {"calls": calls, "responses": responses})()
