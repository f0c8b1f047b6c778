"""Access policy: which capability each operation requires.

This table is the single place that decides who may call what. Reads are
public unless ``read_requires_auth`` is set; every mutation needs a user
session so the ledger can attribute it.
"""

import enum

from device_hub.common.config import DeviceHubSettings
from device_hub.common.exceptions import Forbidden
from device_hub.identity.tokens import Principal


class Capability(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"  # any valid token, user or device
    USER = "user"  # user-scope token
    ADMIN = "admin"  # user-scope token plus the admin secret


class Operation(str, enum.Enum):
    SIGNUP = "signup"
    LOGIN = "login"
    REGISTER = "register"
    TURN_ON = "turn_on"
    TURN_OFF = "turn_off"
    ISSUE_DEVICE_TOKEN = "issue_device_token"
    STATUS = "status"
    LIST = "list"
    HISTORY = "history"
    RESET = "reset"


def build_policy(settings: DeviceHubSettings) -> dict[Operation, Capability]:
    read = Capability.AUTHENTICATED if settings.read_requires_auth else Capability.PUBLIC
    return {
        Operation.SIGNUP: Capability.PUBLIC,
        Operation.LOGIN: Capability.PUBLIC,
        Operation.REGISTER: Capability.USER,
        Operation.TURN_ON: Capability.USER,
        Operation.TURN_OFF: Capability.USER,
        Operation.ISSUE_DEVICE_TOKEN: Capability.USER,
        Operation.STATUS: read,
        Operation.LIST: read,
        Operation.HISTORY: read,
        Operation.RESET: Capability.ADMIN,
    }


def check_capability(required: Capability, principal: Principal | None) -> None:
    """Raise Forbidden if ``principal`` cannot act at ``required``.

    The admin secret half of ADMIN is checked by the admin service, since it
    arrives in the request body.
    """
    if required is Capability.PUBLIC:
        return
    if principal is None:
        raise Forbidden("Authentication required")
    if required in (Capability.USER, Capability.ADMIN) and not principal.is_user:
        raise Forbidden("A user session is required for this operation")
