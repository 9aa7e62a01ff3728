from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import DateRange
from .model import AttendanceRecord, RecordInput


class AttendanceLedger(Protocol):
    """Repository interface for attendance records.

    Records are keyed by (class_id, student_id, work_date) and are only
    written through replace_day / upsert_record.
    """

    def get_records_for_day(self, class_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_records_for_range(self, class_id: str, date_range: DateRange) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_student_records(self, student_id: str, date_range: DateRange) -> Sequence[AttendanceRecord]:
        """Records of one student across every class."""

        raise NotImplementedError

    def get_records_on(self, work_date: date, class_ids: Optional[Sequence[str]] = None) -> Sequence[AttendanceRecord]:
        """Records of every class (or the given classes) on one date."""

        raise NotImplementedError

    def replace_day(self, class_id: str, work_date: date, records: Sequence[RecordInput]) -> int:
        """Atomically delete all records of (class_id, work_date) and insert `records`.

        Either the old set or the new set is visible afterwards, never a mix.
        Returns the number of rows written.
        """

        raise NotImplementedError

    def upsert_record(self, class_id: str, work_date: date, record: RecordInput) -> None:
        raise NotImplementedError
