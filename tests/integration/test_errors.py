"""Integration tests for opaque 500 responses and startup failure."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError


DEVICE = {"enrollId": "sensor1", "name": "HallA", "value": "2024-01-01 10:00:00"}
OPAQUE_BODY = {"error": "Internal server error", "code": "INTERNAL_ERROR", "detail": ""}


@pytest.fixture
def registry(app):
    from device_hub.deps import get_device_registry
    return get_device_registry()


class TestInternalErrors:
    async def test_storage_error_is_opaque(self, client, auth_headers, registry, monkeypatch):
        async def failing(*args, **kwargs):
            raise OperationalError(
                "UPDATE devices SET name='HallA' WHERE enroll_id='sensor1'",
                {"enroll_id": "sensor1"},
                Exception("disk I/O error"),
            )

        monkeypatch.setattr(registry, "register_or_update", failing)
        resp = await client.post("/device/register", json=DEVICE, headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json() == OPAQUE_BODY
        assert "UPDATE" not in resp.text
        assert "disk" not in resp.text

    async def test_unexpected_error_is_opaque(self, app, client, auth_headers, registry, monkeypatch):
        async def failing(*args, **kwargs):
            raise RuntimeError("row sensor1 has power_state=None")

        monkeypatch.setattr(registry, "turn_on", failing)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post("/device/turn-on", json={"enrollId": "sensor1"}, headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json() == OPAQUE_BODY
        assert "power_state" not in resp.text

    async def test_unexpected_error_does_not_escape_app(self, client, auth_headers, registry, monkeypatch):
        async def failing(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(registry, "turn_off", failing)
        resp = await client.post("/device/turn-off", json={"enrollId": "sensor1"}, headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json()["code"] == "INTERNAL_ERROR"


class TestLifespan:
    async def test_unreachable_database_aborts_startup(self, make_app, tmp_path):
        from device_hub.deps import get_db

        app = make_app(f"sqlite+aiosqlite:///{tmp_path}/missing/device_hub.db")
        with pytest.raises(OperationalError):
            async with app.router.lifespan_context(app):
                pass
        assert get_db().engine is None

    async def test_reachable_database_starts(self, make_app):
        from device_hub.deps import get_db

        app = make_app()
        async with app.router.lifespan_context(app):
            assert get_db().engine is not None
        assert get_db().engine is None
