from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from .rates import Rate


@dataclass(frozen=True)
class ClassDaySummary:
    class_id: str
    work_date: date
    total: int
    present: int
    absent: int
    rate: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["work_date"] = self.work_date.isoformat()
        return data


@dataclass(frozen=True)
class StudentRangeSummary:
    student_id: str
    present: int
    absent: int
    rate: Rate

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StudentReportRow:
    """Read-model for report/export consumers (one row per student)."""

    student_id: str
    name: str
    present: int
    absent: int
    recorded: int
    rate: Rate
    enrolled: bool = True

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class InstitutionSummary:
    work_date: date
    total_students: int
    present_today: int
    absent_today: int
    rate: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["work_date"] = self.work_date.isoformat()
        return data


@dataclass(frozen=True)
class ClassOverview:
    class_id: str
    name: str
    students_count: int
    taken: bool
    present: int
    absent: int
    rate: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AbsenceStreak:
    student_id: str
    name: str
    consecutive_days: int
    last_absent: Optional[date]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_absent"] = self.last_absent.isoformat() if self.last_absent else None
        return data
