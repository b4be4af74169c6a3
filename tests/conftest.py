"""Shared fixtures: a throwaway SQLite database and web root per test."""

import pytest
from fastapi.testclient import TestClient

from application import create_app
from settings import Settings

INDEX_HTML = "<!DOCTYPE html><html><body><div id=\"root\">spa shell</div></body></html>"
APP_JS = "console.log('app');"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    # appsettings.json and .env of the checkout would merge into every Settings
    monkeypatch.chdir(tmp_path)
    for name in ("CONNECTIONSTRINGS", "CONNECTION_STRINGS", "ENVIRONMENT", "APP_ENVIRONMENT", "PORT", "HOST"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def web_root(tmp_path):
    root = tmp_path / "wwwroot"
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_text(INDEX_HTML)
    (root / "assets" / "app.js").write_text(APP_JS)
    (root / "help").mkdir()
    (root / "help" / "index.html").write_text("<p>help page</p>")
    return root


@pytest.fixture
def make_settings(tmp_path, web_root):
    def factory(**overrides):
        values = {
            "connection_strings": {"DefaultConnection": f"sqlite:///{tmp_path / 'app.db'}"},
            "environment": "Production",
            "web_root": str(web_root),
            "secret_key": "test-secret",
        }
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def app(make_settings):
    return create_app(make_settings())


@pytest.fixture
def client(app):
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture
def dev_client(make_settings):
    app = create_app(make_settings(environment="Development"))
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


def register_and_login(client, username="alice", password="secret123", email=None):
    email = email or f"{username}@example.com"
    response = client.post(
        "/api/users/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/users/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
