"""Shared test fixtures for Device Hub."""

import pytest
from httpx import ASGITransport, AsyncClient


SECRET_KEY = "test-secret-key-for-unit-tests"
LEDGER_KEY = "test-ledger-key-for-unit-tests"
ADMIN_SECRET = "test-admin-secret-for-tests"


@pytest.fixture
def admin_secret():
    return ADMIN_SECRET


@pytest.fixture
def make_app(monkeypatch):
    """Build an app against ``db_url`` with fresh settings and singletons."""
    from device_hub.common.config import get_settings
    from device_hub.deps import reset_singletons

    def _make(db_url="sqlite+aiosqlite://"):
        monkeypatch.setenv("DEVICE_HUB_DB_URL", db_url)
        monkeypatch.setenv("DEVICE_HUB_SECRET_KEY", SECRET_KEY)
        monkeypatch.setenv("DEVICE_HUB_LEDGER_KEY", LEDGER_KEY)
        monkeypatch.setenv("DEVICE_HUB_ADMIN_SECRET", ADMIN_SECRET)

        # Clear caches and singletons so new env vars take effect
        get_settings.cache_clear()
        reset_singletons()

        from device_hub.app import create_app
        return create_app()

    yield _make

    get_settings.cache_clear()
    reset_singletons()


@pytest.fixture
def app(make_app):
    """Create a test app with in-memory DB."""
    return make_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from device_hub.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
def login(client):
    """Sign a user up, log in, and return bearer auth headers."""

    async def _login(username="alice", email="alice@example.com", password="s3cret-pass"):
        await client.post("/user/signup", json={
            "username": username, "email": email, "password": password,
        })
        resp = await client.post("/user/login", json={"email": email, "password": password})
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
async def auth_headers(login):
    return await login()
