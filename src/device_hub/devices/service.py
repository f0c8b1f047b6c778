"""Device registry: idempotent registration and power-state control."""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from device_hub.common.exceptions import InternalError, NotFound
from device_hub.common.logging import get_logger
from device_hub.common.models import utcnow
from device_hub.audit.models import AuditAction
from device_hub.audit.service import AuditLedger
from device_hub.devices.models import DeviceModel
from device_hub.devices.validation import (
    validate_enroll_id,
    validate_name,
    validate_value,
)

logger = get_logger("devices")

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class DeviceRegistry:
    """Owns canonical device records.

    Every mutation appends its ledger entry in the same session, so the
    caller's transaction commits both or neither.
    """

    def __init__(self, ledger: AuditLedger):
        self.ledger = ledger

    async def register_or_update(
        self,
        session: AsyncSession,
        enroll_id: str,
        name: str,
        value: str,
        actor_id: int | None = None,
    ) -> DeviceModel:
        """Insert a device powered off, or update name/value of an existing one.

        Power state is never touched by this call. Concurrent registrations
        of the same enroll id resolve inside the database upsert.
        """
        name = validate_name(name)
        enroll_id = validate_enroll_id(enroll_id)
        reported_at = validate_value(value)

        dialect = session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise InternalError(context={"reason": "unsupported dialect", "dialect": dialect})

        now = utcnow()
        stmt = insert(DeviceModel).values(
            enroll_id=enroll_id,
            name=name,
            value=reported_at,
            power_state=False,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["enroll_id"],
            set_={
                "name": stmt.excluded["name"],
                "value": stmt.excluded["value"],
                "updated_at": now,
            },
        )
        result = await session.scalars(
            stmt.returning(DeviceModel),
            execution_options={"populate_existing": True},
        )
        device = result.one()

        await self.ledger.append(session, enroll_id, AuditAction.REGISTER, actor_id)
        logger.info(
            "Device registered",
            extra={"context": {"enroll_id": enroll_id, "actor_id": actor_id}},
        )
        return device

    async def set_power(
        self,
        session: AsyncSession,
        enroll_id: str,
        on: bool,
        actor_id: int | None = None,
    ) -> DeviceModel:
        """Switch a registered device on or off. Unknown devices raise NotFound."""
        enroll_id = validate_enroll_id(enroll_id)

        result = await session.execute(
            select(DeviceModel)
            .where(DeviceModel.enroll_id == enroll_id)
            .with_for_update()
        )
        device = result.scalar_one_or_none()
        if device is None:
            raise NotFound("Device not found", context={"enroll_id": enroll_id})

        device.power_state = on
        await session.flush()

        action = AuditAction.TURN_ON if on else AuditAction.TURN_OFF
        await self.ledger.append(session, enroll_id, action, actor_id)
        logger.info(
            "Device power changed",
            extra={"context": {"enroll_id": enroll_id, "action": action.value, "actor_id": actor_id}},
        )
        return device

    async def turn_on(
        self, session: AsyncSession, enroll_id: str, actor_id: int | None = None,
    ) -> DeviceModel:
        return await self.set_power(session, enroll_id, True, actor_id)

    async def turn_off(
        self, session: AsyncSession, enroll_id: str, actor_id: int | None = None,
    ) -> DeviceModel:
        return await self.set_power(session, enroll_id, False, actor_id)

    # ── Read ──

    async def get_status(self, session: AsyncSession, enroll_id: str) -> DeviceModel:
        result = await session.execute(
            select(DeviceModel).where(DeviceModel.enroll_id == enroll_id)
        )
        device = result.scalar_one_or_none()
        if device is None:
            raise NotFound("Device not found", context={"enroll_id": enroll_id})
        return device

    async def list_all(self, session: AsyncSession) -> list[DeviceModel]:
        """All devices, most recently created first."""
        result = await session.execute(
            select(DeviceModel).order_by(DeviceModel.created_at.desc(), DeviceModel.id.desc())
        )
        return list(result.scalars().all())
