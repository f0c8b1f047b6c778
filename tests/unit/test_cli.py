"""Tests for the Typer CLI."""

import pytest
from typer.testing import CliRunner

from device_hub.cli import app


runner = CliRunner()


@pytest.fixture
def env(monkeypatch):
    from device_hub.common.config import get_settings

    monkeypatch.setenv("DEVICE_HUB_SECRET_KEY", "test-secret-key-for-unit-tests")
    monkeypatch.setenv("DEVICE_HUB_LEDGER_KEY", "test-ledger-key-for-unit-tests")
    monkeypatch.setenv("DEVICE_HUB_ADMIN_SECRET", "test-admin-secret-for-tests")
    monkeypatch.setenv("DEVICE_HUB_DB_URL", "sqlite+aiosqlite://")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
    return calls


class TestServe:
    def test_bind_address_from_settings(self, env, uvicorn_calls):
        env.setenv("DEVICE_HUB_HOST", "127.0.0.1")
        env.setenv("DEVICE_HUB_PORT", "9100")
        result = runner.invoke(app, ["serve"])
        assert result.exit_code == 0
        assert uvicorn_calls == [{"host": "127.0.0.1", "port": 9100}]

    def test_options_override_settings(self, env, uvicorn_calls):
        env.setenv("DEVICE_HUB_PORT", "9100")
        result = runner.invoke(app, ["serve", "--host", "10.0.0.5", "--port", "9200"])
        assert result.exit_code == 0
        assert uvicorn_calls == [{"host": "10.0.0.5", "port": 9200}]


class TestDeviceToken:
    def test_issues_token(self, env):
        result = runner.invoke(app, ["device-token", "sensor1", "HallA"])
        assert result.exit_code == 0
        assert result.output.strip()

    def test_rejects_bad_enroll_id(self, env):
        result = runner.invoke(app, ["device-token", "sensor-1", "HallA"])
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output
