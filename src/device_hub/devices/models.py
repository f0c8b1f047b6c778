"""SQLAlchemy model for registered devices."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from device_hub.common.models import Base, TimestampMixin


class DeviceModel(Base, TimestampMixin):
    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    enroll_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    power_state: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
