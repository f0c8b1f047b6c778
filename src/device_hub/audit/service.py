"""Audit ledger: append, query and verify the per-device action log."""

import hashlib
import hmac as hmac_mod
import json
from datetime import datetime
from typing import Any

from sqlalchemy import Row, select
from sqlalchemy.ext.asyncio import AsyncSession

from device_hub.common.config import DeviceHubSettings
from device_hub.common.models import as_utc, utcnow
from device_hub.audit.models import AuditAction, AuditEntryModel
from device_hub.identity.models import ActorModel


class AuditLedger:
    """Append-only, hash-chained action log per device.

    Entries are written inside the caller's session so they commit or roll
    back together with the device mutation they describe.
    """

    def __init__(self, settings: DeviceHubSettings):
        self.settings = settings

    # ── Write ──

    async def append(
        self,
        session: AsyncSession,
        enroll_id: str,
        action: AuditAction,
        actor_id: int | None = None,
    ) -> AuditEntryModel:
        """Append one entry to the device's chain."""
        action = AuditAction(action)
        head = await self.get_head(session, enroll_id)
        prev_hash = head.entry_hash if head else None

        # Timestamps never go backwards within a chain, even if the clock does.
        timestamp = utcnow()
        if head is not None and as_utc(head.timestamp) > timestamp:
            timestamp = as_utc(head.timestamp)

        entry_hash = self._compute_entry_hash(
            enroll_id, action.value, actor_id, timestamp, prev_hash,
        )
        entry = AuditEntryModel(
            enroll_id=enroll_id,
            action=action.value,
            timestamp=timestamp,
            actor_id=actor_id,
            prev_hash=prev_hash,
            entry_hash=entry_hash,
            signature=self._sign(entry_hash),
        )
        session.add(entry)
        await session.flush()
        return entry

    # ── Read ──

    async def get_head(
        self, session: AsyncSession, enroll_id: str,
    ) -> AuditEntryModel | None:
        """Return the most recent entry for a device."""
        result = await session.execute(
            select(AuditEntryModel)
            .where(AuditEntryModel.enroll_id == enroll_id)
            .order_by(AuditEntryModel.timestamp.desc(), AuditEntryModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def history(
        self,
        session: AsyncSession,
        enroll_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Row]:
        """Entries newest first, with the actor's username resolved.

        Entries without an actor, or whose actor no longer exists, come back
        with ``username`` set to None.
        """
        result = await session.execute(
            select(
                AuditEntryModel.id,
                AuditEntryModel.enroll_id,
                AuditEntryModel.action,
                AuditEntryModel.timestamp,
                AuditEntryModel.actor_id,
                ActorModel.username,
            )
            .outerjoin(ActorModel, AuditEntryModel.actor_id == ActorModel.id)
            .where(AuditEntryModel.enroll_id == enroll_id)
            .order_by(AuditEntryModel.timestamp.desc(), AuditEntryModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.all())

    # ── Verify ──

    async def verify_chain(
        self, session: AsyncSession, enroll_id: str,
    ) -> dict[str, Any]:
        """Walk the chain oldest to newest, verify hashes and signatures."""
        result = await session.execute(
            select(AuditEntryModel)
            .where(AuditEntryModel.enroll_id == enroll_id)
            .order_by(AuditEntryModel.timestamp.asc(), AuditEntryModel.id.asc())
        )
        entries = list(result.scalars().all())

        prev_hash = None
        for checked, entry in enumerate(entries):
            expected_hash = self._compute_entry_hash(
                entry.enroll_id, entry.action, entry.actor_id,
                entry.timestamp, entry.prev_hash,
            )
            if (
                entry.prev_hash != prev_hash
                or entry.entry_hash != expected_hash
                or not hmac_mod.compare_digest(self._sign(entry.entry_hash), entry.signature)
            ):
                return {"valid": False, "entries_checked": checked, "break_at": entry.id}
            prev_hash = entry.entry_hash

        return {"valid": True, "entries_checked": len(entries), "break_at": None}

    # ── Internal helpers ──

    @staticmethod
    def _compute_entry_hash(
        enroll_id: str,
        action: str,
        actor_id: int | None,
        timestamp: datetime,
        prev_hash: str | None,
    ) -> str:
        """SHA-256 of canonical JSON of the entry fields."""
        canonical = json.dumps(
            {
                "enroll_id": enroll_id,
                "action": action,
                "actor_id": actor_id,
                "timestamp": as_utc(timestamp).isoformat(),
                "prev_hash": prev_hash,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    def _sign(self, entry_hash: str) -> str:
        """HMAC-SHA256 of entry_hash with the ledger key."""
        return hmac_mod.new(
            self.settings.ledger_key.encode(),
            entry_hash.encode(),
            hashlib.sha256,
        ).hexdigest()
