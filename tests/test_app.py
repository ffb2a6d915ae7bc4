import pytest
from flask import Flask

from api import DEFAULT_JWT_SECRET, create_app
from api.__main__ import main
from api.config import ProductionConfig
from models.client import Role


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["database"] == "ok"


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/v1/nowhere")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"


def test_production_refuses_default_secret(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", DEFAULT_JWT_SECRET)
    with pytest.raises(RuntimeError):
        create_app("prod")


def test_create_admin_command(app, login_service):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-admin", "--email", "root@test.com", "--password", "s3cret-pass"])
    assert result.exit_code == 0, result.output
    assert "Created administrator root@test.com" in result.output

    created = login_service.credentials.find_active_by_email("root@test.com")
    assert Role(created.role) is Role.ADMIN

    again = runner.invoke(args=["create-admin", "--email", "root@test.com", "--password", "s3cret-pass"])
    assert again.exit_code != 0


def test_dev_runner_serves_the_configured_app(monkeypatch):
    served = {}
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("FLASK_RUN_PORT", "9001")
    monkeypatch.setattr(Flask, "run", lambda self, **kwargs: served.update(kwargs, app=self))

    main()

    assert served["port"] == 9001
    assert served["host"] == "127.0.0.1"
    assert served["app"].testing
