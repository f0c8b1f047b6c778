"""Read-side views composed from the device registry and the audit ledger."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from device_hub.audit.service import AuditLedger
from device_hub.devices.models import DeviceModel
from device_hub.devices.service import DeviceRegistry


class DeviceQueries:
    """Never writes. Validation and storage details stay with the owners."""

    def __init__(self, registry: DeviceRegistry, ledger: AuditLedger):
        self.registry = registry
        self.ledger = ledger

    async def status(self, session: AsyncSession, enroll_id: str) -> DeviceModel:
        return await self.registry.get_status(session, enroll_id)

    async def list_all(self, session: AsyncSession) -> list[DeviceModel]:
        return await self.registry.list_all(session)

    async def history(
        self, session: AsyncSession, enroll_id: str, limit: int = 50, offset: int = 0,
    ) -> list:
        return await self.ledger.history(session, enroll_id, limit=limit, offset=offset)

    async def overview(
        self, session: AsyncSession, enroll_id: str, limit: int = 10,
    ) -> dict[str, Any]:
        """Current state plus the most recent ledger entries."""
        device = await self.registry.get_status(session, enroll_id)
        entries = await self.ledger.history(session, enroll_id, limit=limit)
        return {"device": device, "entries": entries}

    async def verify_history(self, session: AsyncSession, enroll_id: str) -> dict[str, Any]:
        return await self.ledger.verify_chain(session, enroll_id)
