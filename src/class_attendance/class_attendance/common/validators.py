from __future__ import annotations

from ..core.enums import AttendanceStatus, Role, ViewStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_status(value: str | AttendanceStatus) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


def require_view_status(value: str | ViewStatus | None) -> ViewStatus:
    if isinstance(value, ViewStatus):
        return value
    if value is None or not str(value).strip():
        return ViewStatus.UNRECORDED
    try:
        return ViewStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


def require_role(value: str | Role) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}")
