import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")

from carrental.config import Settings, reset_settings_cache  # noqa: E402
from carrental.main import create_app  # noqa: E402

reset_settings_cache()

PASSWORD = "Passw0rd!"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'bookings.db'}",
        jwt_secret="test-secret",
        run_db_migrations=True,
        rate_limiting_enabled=False,
        metrics_enabled=False,
        bcrypt_rounds=4,
        audit_log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session(app, client) -> Generator:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def register(client) -> Callable[[str], int]:
    def _register(username: str, password: str = PASSWORD) -> int:
        response = client.post("/auth/signup", json={"username": username, "password": password})
        assert response.status_code == 201
        return response.json()["data"]["userId"]

    return _register


@pytest.fixture()
def auth_header(client, register) -> Callable[[str], dict[str, str]]:
    def _auth_header(username: str, password: str = PASSWORD) -> dict[str, str]:
        register(username, password)
        response = client.post("/auth/login", json={"username": username, "password": password})
        token = response.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _auth_header
