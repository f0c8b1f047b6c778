"""Bearer token authentication dependencies."""

from typing import Optional

from fastapi import Header

from device_hub.identity.tokens import Principal, extract_bearer
from device_hub.policy import Capability, Operation, build_policy, check_capability


def authorize(operation: Operation):
    """Build a FastAPI dependency enforcing the access policy for ``operation``.

    Resolves to the verified Principal, or None for public operations.
    """

    async def dependency(
        authorization: Optional[str] = Header(None),
    ) -> Optional[Principal]:
        from device_hub.common.config import get_settings
        from device_hub.deps import get_token_signer

        required = build_policy(get_settings())[operation]
        if required is Capability.PUBLIC:
            return None

        principal = get_token_signer().verify(extract_bearer(authorization))
        check_capability(required, principal)
        return principal

    return dependency


def actor_id_of(principal: Optional[Principal]) -> Optional[int]:
    """Ledger attribution for a request."""
    if principal is None or not principal.is_user:
        return None
    return principal.actor_id
