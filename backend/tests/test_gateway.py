import pytest

from backend.config import load_config
from backend.gateway.server import create_app
from backend.errors import NotFoundError


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}
    assert client.get("/").get_json() == {"status": "gateway_ok"}


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(RuntimeError):
        load_config()

    with pytest.raises(RuntimeError):
        create_app()


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "env_secret")
    monkeypatch.setenv("TOKEN_EXPIRATION_MINUTES", "30")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = load_config()

    assert settings["JWT_SECRET"] == "env_secret"
    assert settings["TOKEN_EXPIRATION_MINUTES"] == 30
    assert settings["CORS_ORIGINS"] == ["http://a.test", "http://b.test"]


def test_api_error_rendered_as_json(app):
    @app.route("/boom-api")
    def boom_api():
        raise NotFoundError("Thing not found", payload={"hint": "check the id"})

    response = app.test_client().get("/boom-api")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Thing not found", "hint": "check the id"}


def test_unexpected_error_is_generic(app):
    @app.route("/boom")
    def boom():
        raise KeyError("internal detail")

    response = app.test_client().get("/boom")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}


def test_unknown_route_is_json(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert "error" in response.get_json()
