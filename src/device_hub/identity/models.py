"""SQLAlchemy model for user accounts."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from device_hub.common.models import Base, TimestampMixin


class ActorModel(Base, TimestampMixin):
    __tablename__ = "actors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
