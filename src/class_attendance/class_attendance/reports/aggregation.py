from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceLedger
from ..common.datetime_utils import DateRange, parse_iso_date
from ..core.constants import DEFAULT_ABSENCE_LOOKBACK_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..roster.model import ClassSection
from ..roster.repository import RosterRepository
from .model import (
    AbsenceStreak,
    ClassDaySummary,
    ClassOverview,
    InstitutionSummary,
    StudentRangeSummary,
    StudentReportRow,
)
from .rates import day_attendance_rate, enrollment_attendance_rate

logger = logging.getLogger(__name__)


def _count(records: Iterable[AttendanceRecord]) -> tuple[int, int]:
    present = absent = 0
    for r in records:
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        else:
            absent += 1
    return present, absent


class AggregationEngine:
    """Counts and rates over the ledger, joined with the roster where needed.

    Read-only: nothing here writes to either store. Records of students who
    have since left a class still count for the dates they were recorded.
    Every role gets the same primitives; access control lives elsewhere.
    """

    def __init__(self, roster: RosterRepository, ledger: AttendanceLedger):
        self._roster = roster
        self._ledger = ledger

    def _require_class(self, class_id: str) -> ClassSection:
        section = self._roster.get_class(class_id)
        if section is None:
            raise NotFoundError(f"Class {class_id!r} does not exist")
        return section

    def class_day_summary(self, class_id: str, work_date: str | date) -> ClassDaySummary:
        """Roster size plus present/absent for one date, rated over recorded students."""
        day = parse_iso_date(work_date)
        self._require_class(class_id)

        total = len(self._roster.list_enrolled_students(class_id))
        present, absent = _count(self._ledger.get_records_for_day(class_id, day))
        return ClassDaySummary(
            class_id=class_id,
            work_date=day,
            total=total,
            present=present,
            absent=absent,
            rate=day_attendance_rate(present, present + absent),
        )

    def student_range_summary(self, student_id: str, date_range: DateRange) -> StudentRangeSummary:
        if self._roster.get_person(student_id) is None:
            raise NotFoundError(f"Student {student_id!r} does not exist")

        present, absent = _count(self._ledger.get_student_records(student_id, date_range))
        return StudentRangeSummary(
            student_id=student_id,
            present=present,
            absent=absent,
            rate=enrollment_attendance_rate(present, present + absent),
        )

    def class_range_summary_per_student(
        self,
        class_id: str,
        date_range: DateRange,
        *,
        include_former: bool = False,
    ) -> List[StudentReportRow]:
        """One row per enrolled student, in roster order.

        With include_former, students who have records in the range but are
        no longer enrolled are appended after the roster, sorted by name.
        """
        self._require_class(class_id)
        roster = list(self._roster.list_enrolled_students(class_id))

        by_student: Dict[str, List[AttendanceRecord]] = defaultdict(list)
        for r in self._ledger.get_records_for_range(class_id, date_range):
            by_student[r.student_id].append(r)

        rows: List[StudentReportRow] = []
        seen: set[str] = set()
        for student in roster:
            if student.person_id in seen:
                continue
            seen.add(student.person_id)
            rows.append(self._report_row(student.person_id, student.name, by_student.get(student.person_id, [])))

        if include_former:
            former = []
            for student_id in set(by_student) - seen:
                person = self._roster.get_person(student_id)
                name = person.name if person else student_id
                former.append(self._report_row(student_id, name, by_student[student_id], enrolled=False))
            rows.extend(sorted(former, key=lambda row: (row.name.casefold(), row.student_id)))

        return rows

    @staticmethod
    def _report_row(
        student_id: str,
        name: str,
        records: Sequence[AttendanceRecord],
        *,
        enrolled: bool = True,
    ) -> StudentReportRow:
        present, absent = _count(records)
        return StudentReportRow(
            student_id=student_id,
            name=name,
            present=present,
            absent=absent,
            recorded=present + absent,
            rate=enrollment_attendance_rate(present, present + absent),
            enrolled=enrolled,
        )

    def institution_summary(self, work_date: str | date) -> InstitutionSummary:
        """Every class on one date, counted per enrollment (no per-person dedup)."""
        day = parse_iso_date(work_date)
        classes = list(self._roster.list_classes())

        total_students = sum(len(self._roster.list_enrolled_students(c.class_id)) for c in classes)
        records = self._ledger.get_records_on(day, [c.class_id for c in classes])
        present, absent = _count(records)

        logger.debug("institution summary date=%s classes=%s records=%s", day, len(classes), len(records))
        return InstitutionSummary(
            work_date=day,
            total_students=total_students,
            present_today=present,
            absent_today=absent,
            rate=day_attendance_rate(present, present + absent),
        )

    def teacher_overview(self, owner_id: str, work_date: str | date) -> List[ClassOverview]:
        """Classes owned by one teacher, with whether attendance was taken on the date."""
        day = parse_iso_date(work_date)
        classes = list(self._roster.list_classes(owner_id))

        records_by_class: Dict[str, List[AttendanceRecord]] = defaultdict(list)
        for r in self._ledger.get_records_on(day, [c.class_id for c in classes]):
            records_by_class[r.class_id].append(r)

        overview = []
        for section in classes:
            present, absent = _count(records_by_class.get(section.class_id, []))
            overview.append(
                ClassOverview(
                    class_id=section.class_id,
                    name=section.name,
                    students_count=len(self._roster.list_enrolled_students(section.class_id)),
                    taken=(present + absent) > 0,
                    present=present,
                    absent=absent,
                    rate=day_attendance_rate(present, present + absent),
                )
            )
        return overview

    def recent_absences(
        self,
        class_id: str,
        as_of: str | date,
        *,
        lookback_days: int = DEFAULT_ABSENCE_LOOKBACK_DAYS,
        min_streak: int = 1,
    ) -> List[AbsenceStreak]:
        """Enrolled students whose latest recorded days are consecutive absences.

        Days without a record neither break nor extend a streak.
        """
        self._require_class(class_id)
        window = DateRange.trailing(parse_iso_date(as_of), lookback_days)

        by_student: Dict[str, List[AttendanceRecord]] = defaultdict(list)
        for r in self._ledger.get_records_for_range(class_id, window):
            by_student[r.student_id].append(r)

        streaks = []
        for student in self._roster.list_enrolled_students(class_id):
            history = sorted(by_student.get(student.person_id, []), key=lambda r: r.work_date, reverse=True)
            streak = 0
            last_absent: Optional[date] = None
            for r in history:
                if r.status != AttendanceStatus.ABSENT:
                    break
                streak += 1
                last_absent = last_absent or r.work_date
            if streak >= max(1, min_streak):
                streaks.append(
                    AbsenceStreak(
                        student_id=student.person_id,
                        name=student.name,
                        consecutive_days=streak,
                        last_absent=last_absent,
                    )
                )

        streaks.sort(key=lambda s: (-s.consecutive_days, s.name.casefold(), s.student_id))
        return streaks
