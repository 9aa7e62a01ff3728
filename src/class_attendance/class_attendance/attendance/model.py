from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional, Tuple

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.validators import require_non_empty, require_view_status
from ..core.enums import AttendanceStatus, ViewStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one status per (class, student, date)."""

    class_id: str
    student_id: str
    work_date: date
    status: AttendanceStatus
    recorded_by: str


@dataclass(frozen=True)
class RecordInput:
    """One row of a replace-day write."""

    student_id: str
    status: AttendanceStatus
    recorded_by: str


@dataclass(frozen=True)
class ViewEntry:
    student_id: str
    name: str
    status: ViewStatus

    def to_dict(self) -> dict:
        return {"student_id": self.student_id, "name": self.name, "status": self.status.value}


@dataclass(frozen=True)
class AttendanceView:
    """Editable per-student view of one class on one date.

    Derived from roster + ledger, never persisted. Every transform returns a
    new view; the original is left untouched.
    """

    class_id: str
    work_date: date
    entries: Tuple[ViewEntry, ...] = ()

    @classmethod
    def from_payload(cls, class_id: str, work_date: str | date, entries: Iterable[Mapping]) -> "AttendanceView":
        """Build a submitted view from plain dicts ({student_id, status, name?})."""
        parsed = []
        for raw in entries:
            if not isinstance(raw, Mapping):
                raise ValidationError("Each entry must be an object with student_id and status")
            student_id = require_non_empty(raw.get("student_id", ""), "student_id")
            parsed.append(
                ViewEntry(
                    student_id=student_id,
                    name=str(raw.get("name") or ""),
                    status=require_view_status(raw.get("status")),
                )
            )
        return cls(class_id=class_id, work_date=parse_iso_date(work_date), entries=tuple(parsed))

    def get(self, student_id: str) -> Optional[ViewEntry]:
        for entry in self.entries:
            if entry.student_id == student_id:
                return entry
        return None

    def student_ids(self) -> list[str]:
        return [e.student_id for e in self.entries]

    def _count(self, status: ViewStatus) -> int:
        return sum(1 for e in self.entries if e.status == status)

    @property
    def present_count(self) -> int:
        return self._count(ViewStatus.PRESENT)

    @property
    def absent_count(self) -> int:
        return self._count(ViewStatus.ABSENT)

    @property
    def unrecorded_count(self) -> int:
        return self._count(ViewStatus.UNRECORDED)

    def with_all_present(self) -> "AttendanceView":
        return replace(self, entries=tuple(replace(e, status=ViewStatus.PRESENT) for e in self.entries))

    def with_status(self, student_id: str, status: ViewStatus | str) -> "AttendanceView":
        status = require_view_status(status)
        if self.get(student_id) is None:
            raise ValidationError(f"Student {student_id!r} is not in this view")
        return replace(
            self,
            entries=tuple(replace(e, status=status) if e.student_id == student_id else e for e in self.entries),
        )

    def toggled(self, student_id: str) -> "AttendanceView":
        """Flip present <-> absent. An unrecorded student becomes present."""
        entry = self.get(student_id)
        if entry is None:
            raise ValidationError(f"Student {student_id!r} is not in this view")
        new_status = ViewStatus.ABSENT if entry.status == ViewStatus.PRESENT else ViewStatus.PRESENT
        return self.with_status(student_id, new_status)

    def to_dict(self) -> dict:
        return {
            "class_id": self.class_id,
            "date": format_iso_date(self.work_date),
            "present": self.present_count,
            "absent": self.absent_count,
            "unrecorded": self.unrecorded_count,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class SaveResult:
    class_id: str
    work_date: date
    recorded: int
    present: int
    absent: int
    # Records of former students kept as they were.
    retained: int = 0

    def to_dict(self) -> dict:
        return {
            "class_id": self.class_id,
            "date": format_iso_date(self.work_date),
            "recorded": self.recorded,
            "present": self.present,
            "absent": self.absent,
            "retained": self.retained,
        }
