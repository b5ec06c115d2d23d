"""
Shared fixtures: a fresh DashboardState per test, wired into the FastAPI app
through dependency_overrides, and helpers that build upload payloads.
"""
import pytest
from fastapi.testclient import TestClient

from dashboard.client.dash_client import DashClient
from dashboard.state.dashboard_state import create_state, get_state

KERNEL_COMMIT = "1111111111111111111111111111111111111111"


def make_build(n: int = 1, namespace: str = "test1", **overrides) -> dict:
    build = {
        "id": f"build{n}",
        "namespace": namespace,
        "manager": f"manager{n}",
        "kernel_repo": "repo1",
        "kernel_branch": "branch1",
        "kernel_commit": KERNEL_COMMIT,
        "kernel_commit_title": "kernel_commit_title1",
        "syzkaller_commit": "syzkaller_commit1",
        "kernel_config": f"config{n}",
    }
    build.update(overrides)
    return build


def make_crash(build: dict, n: int = 1, **overrides) -> dict:
    crash = {
        "build_id": build["id"],
        "title": f"title{n}",
        "log": f"log{n}",
        "report": f"report{n}",
    }
    crash.update(overrides)
    return crash


def make_crash_with_repro(build: dict, n: int = 1, **overrides) -> dict:
    crash = make_crash(build, n, repro_syz=f"syz repro{n}", repro_c=f"c repro{n}")
    crash.update(overrides)
    return crash


@pytest.fixture
def state():
    return create_state(retry_delay=0.0)


@pytest.fixture
def http(state):
    from main import app
    app.dependency_overrides[get_state] = lambda: state
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_state, None)


@pytest.fixture
def client(http):
    return DashClient(http)
