"""Operator maintenance. Destructive; not part of normal request handling."""

import hmac

from device_hub.common.config import DeviceHubSettings
from device_hub.common.database import DatabaseManager
from device_hub.common.exceptions import Forbidden
from device_hub.common.logging import get_logger

logger = get_logger("admin")


class AdminService:
    def __init__(self, settings: DeviceHubSettings):
        self.settings = settings

    def check_secret(self, admin_secret: str | None) -> None:
        if not admin_secret or not hmac.compare_digest(
            admin_secret.encode(), self.settings.admin_secret.encode()
        ):
            raise Forbidden("Invalid admin secret")

    async def reset(self, db: DatabaseManager, actor_id: int | None = None) -> None:
        """Drop and recreate every table.

        All devices, ledger entries and accounts are lost. In-flight requests
        are not drained first.
        """
        logger.warning(
            "Administrative reset: dropping all tables",
            extra={"context": {"actor_id": actor_id}},
        )
        await db.drop_all()
        await db.create_all()
        logger.warning("Administrative reset complete")
