from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.cache import ReadThroughCache
from ..common.datetime_utils import parse_iso_date
from ..core.enums import ViewOrder, ViewStatus
from ..core.exceptions import NotFoundError
from ..roster.repository import RosterRepository
from .model import AttendanceView, ViewEntry
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)


class AttendanceViewBuilder:
    """Joins the current roster with the ledger for one (class, date).

    Roster students without a record are shown as unrecorded. Records of
    students no longer enrolled are left out of the view; they stay in the
    ledger for reporting.
    """

    def __init__(
        self,
        roster: RosterRepository,
        ledger: AttendanceLedger,
        *,
        order: ViewOrder = ViewOrder.ENROLLMENT,
        cache: Optional[ReadThroughCache[AttendanceView]] = None,
    ):
        self._roster = roster
        self._ledger = ledger
        self._order = ViewOrder(order)
        self._cache = cache

    def build_view(self, class_id: str, work_date: str | date) -> AttendanceView:
        day = parse_iso_date(work_date)
        if self._cache is None:
            return self._load(class_id, day)
        return self._cache.get_or_load(class_id, day, lambda: self._load(class_id, day))

    def invalidate(self, class_id: str, work_date: Optional[str | date] = None) -> None:
        if self._cache is not None:
            self._cache.invalidate(class_id, parse_iso_date(work_date) if work_date is not None else None)

    def _load(self, class_id: str, day: date) -> AttendanceView:
        if self._roster.get_class(class_id) is None:
            raise NotFoundError(f"Class {class_id!r} does not exist")

        students = list(self._roster.list_enrolled_students(class_id))
        if self._order == ViewOrder.NAME:
            # sorted() is stable, so equal names keep enrollment order.
            students = sorted(students, key=lambda p: (p.name.casefold(), p.person_id))

        status_by_student = {r.student_id: r.status for r in self._ledger.get_records_for_day(class_id, day)}

        entries = []
        seen: set[str] = set()
        for student in students:
            if student.person_id in seen:
                continue
            seen.add(student.person_id)
            recorded = status_by_student.get(student.person_id)
            entries.append(
                ViewEntry(
                    student_id=student.person_id,
                    name=student.name,
                    status=ViewStatus.from_recorded(recorded) if recorded else ViewStatus.UNRECORDED,
                )
            )

        orphans = len(set(status_by_student) - seen)
        if orphans:
            logger.debug("view class=%s date=%s skipped %s records of former students", class_id, day, orphans)

        return AttendanceView(class_id=class_id, work_date=day, entries=tuple(entries))
