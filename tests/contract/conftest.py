"""Contract test fixtures: the full app wired to in-memory storage."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def container():
    from infrastructure.container import ServiceContainer, reset_container
    from infrastructure.settings import AppSettings

    settings = AppSettings(
        storage_backend="memory",
        jwt_secret="contract-test-secret",
        password_time_cost=1,
        password_memory_cost=16384,
        password_parallelism=1,
        log_level="WARNING",
    )
    container = ServiceContainer(settings)
    yield container
    reset_container()


@pytest.fixture
def client(container):
    from presentation.main import create_app
    from starlette.testclient import TestClient

    with TestClient(create_app(container=container)) as test_client:
        yield test_client


def _register_and_login(client, username: str, role: str = "admin") -> str:
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": f"{username}@acme-electricity.com",
            "password": ADMIN_PASSWORD,
            "fullName": username.title(),
            "role": role,
        },
    )
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/v1/auth/login", json={"username": username, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    return {"Authorization": f"Bearer {_register_and_login(client, 'operator')}"}
