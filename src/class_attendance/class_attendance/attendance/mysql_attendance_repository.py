from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import DateRange
from ..core.enums import AttendanceStatus
from ..core.exceptions import LedgerInconsistencyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .model import AttendanceRecord, RecordInput
from .repository import AttendanceLedger

logger = logging.getLogger(__name__)

_COLUMNS = "class_id, student_id, work_date, status, recorded_by"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        class_id=str(r["class_id"]),
        student_id=str(r["student_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        recorded_by=str(r["recorded_by"]),
    )


class MySQLAttendanceLedger(AttendanceLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_records_for_day(self, class_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND work_date=%s
                ORDER BY student_id
                """,
                (class_id, work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_records_for_range(self, class_id: str, date_range: DateRange) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date, student_id
                """,
                (class_id, date_range.start, date_range.end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_student_records(self, student_id: str, date_range: DateRange) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date, class_id
                """,
                (student_id, date_range.start, date_range.end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_records_on(self, work_date: date, class_ids: Optional[Sequence[str]] = None) -> Sequence[AttendanceRecord]:
        clauses = ["work_date=%s"]
        params: list[object] = [work_date]
        if class_ids is not None:
            if not class_ids:
                return []
            clauses.append(f"class_id IN ({placeholders(len(class_ids))})")
            params.extend(class_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY class_id, student_id
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def replace_day(self, class_id: str, work_date: date, records: Sequence[RecordInput]) -> int:
        rows = [(class_id, r.student_id, work_date, r.status.value, r.recorded_by) for r in records]

        with db_cursor(self._conn_factory) as (_, cur):
            # Serialise writers of the same class; the last one to commit wins.
            cur.execute("SELECT class_id FROM classes WHERE class_id=%s FOR UPDATE", (class_id,))
            cur.fetchall()

            cur.execute(
                "DELETE FROM attendance_records WHERE class_id=%s AND work_date=%s",
                (class_id, work_date),
            )
            deleted = cur.rowcount

            inserted = 0
            if rows:
                cur.executemany(
                    f"INSERT INTO attendance_records({_COLUMNS}) VALUES(%s,%s,%s,%s,%s)",
                    rows,
                )
                inserted = cur.rowcount

            if inserted != len(rows):
                # Raising inside db_cursor rolls the delete back as well.
                logger.critical(
                    "replace_day wrote %s of %s rows class=%s date=%s; rolled back",
                    inserted, len(rows), class_id, work_date,
                )
                raise LedgerInconsistencyError(
                    f"Expected {len(rows)} rows for class {class_id} on {work_date}, wrote {inserted}"
                )

            logger.debug("replace_day class=%s date=%s deleted=%s inserted=%s", class_id, work_date, deleted, inserted)
            return inserted

    def upsert_record(self, class_id: str, work_date: date, record: RecordInput) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), recorded_by=VALUES(recorded_by)
                """,
                (class_id, record.student_id, work_date, record.status.value, record.recorded_by),
            )
