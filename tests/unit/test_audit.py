"""Tests for the audit ledger: append, history ordering and chain verification."""

from datetime import datetime, timezone

import pytest

from device_hub.audit.models import AuditAction, AuditEntryModel
from device_hub.audit.service import AuditLedger
from device_hub.common.config import DeviceHubSettings
from device_hub.common.database import DatabaseManager
from device_hub.common.models import as_utc
from device_hub.devices.service import DeviceRegistry
from device_hub.identity.service import IdentityService
from device_hub.identity.tokens import TokenSigner


def make_settings(**overrides) -> DeviceHubSettings:
    defaults = {
        "secret_key": "test-secret-key-for-unit-tests",
        "ledger_key": "test-ledger-key-for-unit-tests",
        "admin_secret": "test-admin-secret-for-tests",
        "db_url": "sqlite+aiosqlite://",
    }
    defaults.update(overrides)
    return DeviceHubSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def ledger():
    return AuditLedger(make_settings())


async def _register_device(db, ledger, enroll_id="sensor1"):
    registry = DeviceRegistry(ledger)
    async with db.get_session() as session:
        await registry.register_or_update(session, enroll_id, "Hall A", "2024-01-01 10:00:00")


class TestAppend:
    async def test_first_entry(self, db, ledger):
        async with db.get_session() as session:
            entry = await ledger.append(session, "sensor1", AuditAction.TURN_ON, actor_id=None)
            assert entry.id is not None
            assert entry.action == "TURN_ON"
            assert entry.actor_id is None
            assert entry.prev_hash is None
            assert len(entry.entry_hash) == 64
            assert len(entry.signature) == 64

    async def test_entries_chain(self, db, ledger):
        async with db.get_session() as session:
            first = await ledger.append(session, "sensor1", AuditAction.REGISTER)
            second = await ledger.append(session, "sensor1", AuditAction.TURN_ON)
            assert second.prev_hash == first.entry_hash
            assert second.id > first.id

    async def test_chains_are_per_device(self, db, ledger):
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER)
            other = await ledger.append(session, "sensor2", AuditAction.REGISTER)
            assert other.prev_hash is None

    async def test_accepts_plain_action_strings(self, db, ledger):
        async with db.get_session() as session:
            entry = await ledger.append(session, "sensor1", "TURN_OFF")
            assert entry.action == "TURN_OFF"

    async def test_rejects_unknown_action(self, db, ledger):
        async with db.get_session() as session:
            with pytest.raises(ValueError):
                await ledger.append(session, "sensor1", "DELETE")

    async def test_timestamp_never_goes_backwards(self, db, ledger, monkeypatch):
        async with db.get_session() as session:
            first = await ledger.append(session, "sensor1", AuditAction.REGISTER)
            monkeypatch.setattr(
                "device_hub.audit.service.utcnow",
                lambda: datetime(2000, 1, 1, tzinfo=timezone.utc),
            )
            second = await ledger.append(session, "sensor1", AuditAction.TURN_ON)
            assert as_utc(second.timestamp) == as_utc(first.timestamp)


class TestHistory:
    async def test_newest_first_and_non_increasing(self, db, ledger):
        async with db.get_session() as session:
            for action in (AuditAction.REGISTER, AuditAction.TURN_ON, AuditAction.TURN_OFF):
                await ledger.append(session, "sensor1", action)
        async with db.get_session() as session:
            rows = await ledger.history(session, "sensor1")

        assert [r.action for r in rows] == ["TURN_OFF", "TURN_ON", "REGISTER"]
        stamps = [as_utc(r.timestamp) for r in rows]
        assert all(a >= b for a, b in zip(stamps, stamps[1:]))

    async def test_resolves_actor_username(self, db, ledger):
        settings = make_settings()
        identity = IdentityService(settings, TokenSigner(settings))
        async with db.get_session() as session:
            actor = await identity.signup(session, "alice", "alice@example.com", "pw")
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER, actor_id=None)
            await ledger.append(session, "sensor1", AuditAction.TURN_ON, actor_id=actor.id)
        async with db.get_session() as session:
            rows = await ledger.history(session, "sensor1")

        assert rows[0].action == "TURN_ON"
        assert rows[0].username == "alice"
        assert rows[0].actor_id == actor.id
        assert rows[1].username is None
        assert rows[1].actor_id is None

    async def test_unknown_device_is_empty(self, db, ledger):
        async with db.get_session() as session:
            assert await ledger.history(session, "ghost1") == []

    async def test_paginated(self, db, ledger):
        async with db.get_session() as session:
            for _ in range(5):
                await ledger.append(session, "sensor1", AuditAction.TURN_ON)
        async with db.get_session() as session:
            page1 = await ledger.history(session, "sensor1", limit=2, offset=0)
            page2 = await ledger.history(session, "sensor1", limit=2, offset=2)
        assert len(page1) == 2
        assert len(page2) == 2
        assert page1[-1].id > page2[0].id

    async def test_get_head(self, db, ledger):
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER)
            last = await ledger.append(session, "sensor1", AuditAction.TURN_ON)
        async with db.get_session() as session:
            head = await ledger.get_head(session, "sensor1")
            assert head is not None
            assert head.id == last.id


class TestVerifyChain:
    async def test_intact_chain(self, db, ledger):
        await _register_device(db, ledger)
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.TURN_ON)
            await ledger.append(session, "sensor1", AuditAction.TURN_OFF)
        async with db.get_session() as session:
            result = await ledger.verify_chain(session, "sensor1")
        assert result == {"valid": True, "entries_checked": 3, "break_at": None}

    async def test_tampered_action(self, db, ledger):
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER)
            forged = await ledger.append(session, "sensor1", AuditAction.TURN_ON)
            forged.action = AuditAction.TURN_OFF.value
            await session.flush()
        async with db.get_session() as session:
            result = await ledger.verify_chain(session, "sensor1")
        assert result["valid"] is False
        assert result["entries_checked"] == 1
        assert result["break_at"] == forged.id

    async def test_signed_with_other_key(self, db, ledger):
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER)
        other = AuditLedger(make_settings(ledger_key="another-ledger-key-value"))
        async with db.get_session() as session:
            result = await other.verify_chain(session, "sensor1")
        assert result["valid"] is False

    async def test_empty_chain(self, db, ledger):
        async with db.get_session() as session:
            result = await ledger.verify_chain(session, "ghost1")
        assert result == {"valid": True, "entries_checked": 0, "break_at": None}

    async def test_deleted_entry_breaks_chain(self, db, ledger):
        async with db.get_session() as session:
            await ledger.append(session, "sensor1", AuditAction.REGISTER)
            middle = await ledger.append(session, "sensor1", AuditAction.TURN_ON)
            await ledger.append(session, "sensor1", AuditAction.TURN_OFF)
        async with db.get_session() as session:
            await session.delete(await session.get(AuditEntryModel, middle.id))
        async with db.get_session() as session:
            result = await ledger.verify_chain(session, "sensor1")
        assert result["valid"] is False
        assert result["entries_checked"] == 1
