"""Bearer token issuing and verification.

Tokens are itsdangerous timed signatures over a small JSON payload. Each
scope uses its own salt, so a device token can never be replayed as a user
session and vice versa, and each scope carries its own maximum age.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from device_hub.common.config import DeviceHubSettings
from device_hub.common.exceptions import InvalidToken, MissingToken

USER_SCOPE = "user"
DEVICE_SCOPE = "device"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    """Verified token claims."""
    scope: str
    actor_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    enroll_id: Optional[str] = None
    issued_at: Optional[datetime] = None

    @property
    def is_user(self) -> bool:
        return self.scope == USER_SCOPE


def extract_bearer(authorization: str | None) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingToken()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingToken()
    return token


class TokenSigner:
    """Issues and verifies scoped, time-limited bearer tokens."""

    def __init__(self, settings: DeviceHubSettings):
        self.settings = settings

    def _serializer(self, scope: str) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(self.settings.secret_key, salt=f"device-hub-{scope}-token")

    def max_age(self, scope: str) -> int:
        if scope == DEVICE_SCOPE:
            return self.settings.device_token_ttl
        return self.settings.user_token_ttl

    def issue_user_token(self, actor_id: int, username: str, email: str) -> str:
        return self._serializer(USER_SCOPE).dumps({
            "scope": USER_SCOPE,
            "id": actor_id,
            "username": username,
            "email": email,
        })

    def issue_device_token(self, enroll_id: str, name: str) -> str:
        return self._serializer(DEVICE_SCOPE).dumps({
            "scope": DEVICE_SCOPE,
            "enroll_id": enroll_id,
            "name": name,
        })

    def verify(self, token: str) -> Principal:
        for scope in (USER_SCOPE, DEVICE_SCOPE):
            try:
                payload, issued_at = self._serializer(scope).loads(
                    token, max_age=self.max_age(scope), return_timestamp=True
                )
            except SignatureExpired:
                raise InvalidToken("Token expired")
            except BadSignature:
                continue

            if not isinstance(payload, dict) or payload.get("scope") != scope:
                raise InvalidToken()
            return Principal(
                scope=scope,
                actor_id=payload.get("id"),
                username=payload.get("username"),
                email=payload.get("email"),
                enroll_id=payload.get("enroll_id"),
                issued_at=issued_at,
            )
        raise InvalidToken()
