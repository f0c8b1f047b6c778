"""Identity service: account signup, login and lookup."""

import asyncio

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from device_hub.common.config import DeviceHubSettings
from device_hub.common.exceptions import Conflict, InvalidCredentials, ValidationError
from device_hub.common.logging import get_logger
from device_hub.devices.validation import validate_enroll_id, validate_name
from device_hub.identity.models import ActorModel
from device_hub.identity.passwords import DUMMY_HASH, hash_password, verify_password
from device_hub.identity.tokens import TokenSigner

logger = get_logger("identity")

USERNAME_MAX = 50
EMAIL_MAX = 100


def _require(field: str, value: str | None, max_length: int | None = None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, f"'{field}' is required")
    if max_length is not None and len(cleaned) > max_length:
        raise ValidationError(field, f"'{field}' must be at most {max_length} characters")
    return cleaned


class IdentityService:
    """Account registration and credential exchange."""

    def __init__(self, settings: DeviceHubSettings, signer: TokenSigner):
        self.settings = settings
        self.signer = signer

    async def signup(
        self, session: AsyncSession, username: str, email: str, password: str,
    ) -> ActorModel:
        """Create an account. Duplicate username or email raises Conflict."""
        username = _require("username", username, USERNAME_MAX)
        email = _require("email", email, EMAIL_MAX)
        password = _require("password", password)

        actor = ActorModel(
            username=username,
            email=email,
            password_hash=await asyncio.to_thread(hash_password, password),
        )
        session.add(actor)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise Conflict(
                "Username or email already exists",
                context={"username": username},
            ) from exc

        logger.info("Actor registered", extra={"context": {"actor_id": actor.id}})
        return actor

    async def login(self, session: AsyncSession, email: str, password: str) -> str:
        """Exchange email + password for a user-scope bearer token."""
        email = _require("email", email)
        password = _require("password", password)

        actor = await self.get_by_email(session, email)
        if actor is None:
            await asyncio.to_thread(verify_password, password, DUMMY_HASH)
            raise InvalidCredentials()
        if not await asyncio.to_thread(verify_password, password, actor.password_hash):
            raise InvalidCredentials()

        return self.signer.issue_user_token(actor.id, actor.username, actor.email)

    async def get_by_email(self, session: AsyncSession, email: str) -> ActorModel | None:
        result = await session.execute(
            select(ActorModel).where(ActorModel.email == email)
        )
        return result.scalar_one_or_none()

    def issue_device_token(self, enroll_id: str, name: str) -> str:
        """Long-lived device-scope token. Nothing is persisted."""
        enroll_id = validate_enroll_id(enroll_id)
        name = validate_name(name)
        logger.info("Device token issued", extra={"context": {"enroll_id": enroll_id}})
        return self.signer.issue_device_token(enroll_id, name)
