"""Field validation for device input. Runs before any storage access."""

import re
from datetime import datetime

from device_hub.common.exceptions import ValidationError

NAME_MAX = 100
ENROLL_ID_MAX = 20
VALUE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NAME_RE = re.compile(r"^[A-Za-z\s]{1,%d}$" % NAME_MAX)
_ENROLL_ID_RE = re.compile(r"^[A-Za-z0-9]{1,%d}$" % ENROLL_ID_MAX)
_VALUE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def validate_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not _NAME_RE.fullmatch(cleaned):
        raise ValidationError(
            "name", f"'name' must be 1-{NAME_MAX} letters or spaces"
        )
    return cleaned


def validate_enroll_id(enroll_id: str | None) -> str:
    cleaned = (enroll_id or "").strip()
    if not _ENROLL_ID_RE.fullmatch(cleaned):
        raise ValidationError(
            "enrollId", f"'enrollId' must be 1-{ENROLL_ID_MAX} alphanumeric characters"
        )
    return cleaned


def validate_value(value: str | None) -> datetime:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` timestamp. Impossible dates are rejected."""
    if not value or not _VALUE_RE.fullmatch(value):
        raise ValidationError("value", "'value' must match YYYY-MM-DD HH:MM:SS")
    try:
        return datetime.strptime(value, VALUE_FORMAT)
    except ValueError as exc:
        raise ValidationError("value", f"'value' is not a valid time: {value}") from exc
