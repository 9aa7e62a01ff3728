from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a person as supplied by the identity collaborator."""

    PRINCIPAL = "principal"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Status persisted in the ledger. There is no stored "unknown" state."""

    PRESENT = "present"
    ABSENT = "absent"


class ViewStatus(str, Enum):
    """Status shown in an editable daily view."""

    PRESENT = "present"
    ABSENT = "absent"
    UNRECORDED = "unrecorded"

    @classmethod
    def from_recorded(cls, status: AttendanceStatus) -> "ViewStatus":
        return cls(status.value)

    def resolve(self) -> AttendanceStatus:
        # Submitting a view is a complete statement for the day.
        if self is ViewStatus.PRESENT:
            return AttendanceStatus.PRESENT
        return AttendanceStatus.ABSENT


class ViewOrder(str, Enum):
    NAME = "name"
    ENROLLMENT = "enrollment"
