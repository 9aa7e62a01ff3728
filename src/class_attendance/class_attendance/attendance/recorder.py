from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Optional

from ..common.cache import ReadThroughCache
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty, require_status
from ..core.enums import AttendanceStatus, ViewStatus
from ..core.exceptions import LedgerInconsistencyError, NotFoundError, StorageUnavailable, ValidationError
from ..roster.repository import RosterRepository
from .model import AttendanceView, RecordInput, SaveResult
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)


def mark_all_present(view: AttendanceView) -> AttendanceView:
    """Pure transform: every student present. Nothing is persisted."""
    return view.with_all_present()


class BulkRecorder:
    """Writes an edited view back to the ledger as a full replace of the day.

    A submitted view is the final statement for that day: unrecorded entries,
    and enrolled students missing from the view, are stored as absent.
    Records that day of students no longer enrolled are written back as they were.
    Saving the same view again converges to the same ledger state.
    """

    mark_all_present = staticmethod(mark_all_present)

    def __init__(
        self,
        roster: RosterRepository,
        ledger: AttendanceLedger,
        *,
        cache: Optional[ReadThroughCache[AttendanceView]] = None,
    ):
        self._roster = roster
        self._ledger = ledger
        self._cache = cache

    def save(self, class_id: str, work_date: str | date, view: AttendanceView, actor_id: str) -> SaveResult:
        day = parse_iso_date(work_date)
        actor_id = require_non_empty(actor_id, "Actor")
        if view.class_id != class_id or view.work_date != day:
            raise ValidationError("View does not belong to this class and date")

        duplicates = [sid for sid, n in Counter(view.student_ids()).items() if n > 1]
        if duplicates:
            raise ValidationError(f"Duplicate students in view: {', '.join(sorted(duplicates))}")

        if self._roster.get_class(class_id) is None:
            raise NotFoundError(f"Class {class_id!r} does not exist")
        roster_ids = list(dict.fromkeys(p.person_id for p in self._roster.list_enrolled_students(class_id)))
        enrolled = set(roster_ids)

        unknown = set(view.student_ids()) - enrolled
        if unknown:
            raise ValidationError(f"Students not enrolled in class {class_id}: {', '.join(sorted(unknown))}")

        submitted = {e.student_id: e.status for e in view.entries}
        records = []
        for student_id in roster_ids:
            status = submitted.get(student_id, ViewStatus.UNRECORDED).resolve()
            records.append(RecordInput(student_id=student_id, status=status, recorded_by=actor_id))

        # Former students keep their record for this day untouched.
        retained = [
            RecordInput(student_id=r.student_id, status=r.status, recorded_by=r.recorded_by)
            for r in self._ledger.get_records_for_day(class_id, day)
            if r.student_id not in enrolled
        ]
        expected = records + retained

        try:
            written = self._ledger.replace_day(class_id, day, expected)
        except StorageUnavailable:
            logger.error("save failed class=%s date=%s actor=%s; ledger unchanged", class_id, day, actor_id)
            raise
        except LedgerInconsistencyError:
            logger.critical("save left class=%s date=%s in an inconsistent state", class_id, day)
            raise
        finally:
            self._invalidate(class_id, day)

        if written != len(expected):
            logger.critical("save wrote %s of %s records class=%s date=%s", written, len(expected), class_id, day)
            raise LedgerInconsistencyError(
                f"Expected {len(expected)} records for class {class_id} on {day}, ledger reports {written}"
            )

        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        logger.info(
            "attendance saved class=%s date=%s records=%s present=%s actor=%s",
            class_id, day, len(records), present, actor_id,
        )
        return SaveResult(
            class_id=class_id,
            work_date=day,
            recorded=len(records),
            present=present,
            absent=len(records) - present,
            retained=len(retained),
        )

    def mark_student(
        self,
        class_id: str,
        work_date: str | date,
        student_id: str,
        status: str | AttendanceStatus,
        actor_id: str,
    ) -> None:
        """Record one student's status without touching the rest of the day."""
        day = parse_iso_date(work_date)
        status = require_status(status)
        actor_id = require_non_empty(actor_id, "Actor")

        if self._roster.get_class(class_id) is None:
            raise NotFoundError(f"Class {class_id!r} does not exist")
        if student_id not in {p.person_id for p in self._roster.list_enrolled_students(class_id)}:
            raise NotFoundError(f"Student {student_id!r} is not enrolled in class {class_id!r}")

        try:
            self._ledger.upsert_record(
                class_id, day, RecordInput(student_id=student_id, status=status, recorded_by=actor_id)
            )
        finally:
            self._invalidate(class_id, day)
        logger.info(
            "attendance marked class=%s date=%s student=%s status=%s actor=%s",
            class_id, day, student_id, status.value, actor_id,
        )

    def _invalidate(self, class_id: str, day: date) -> None:
        if self._cache is not None:
            self._cache.invalidate(class_id, day)
