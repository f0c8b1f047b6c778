"""SQLAlchemy model for the device audit ledger."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from device_hub.common.models import Base, utcnow


class AuditAction(str, enum.Enum):
    REGISTER = "REGISTER"
    TURN_ON = "TURN_ON"
    TURN_OFF = "TURN_OFF"


class AuditEntryModel(Base):
    __tablename__ = "audit_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    enroll_id: Mapped[str] = mapped_column(
        String(20),
        ForeignKey("devices.enroll_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    actor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("actors.id"), nullable=True
    )
    prev_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entry_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    signature: Mapped[str] = mapped_column(String(64), nullable=False)
