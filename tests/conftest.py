from __future__ import annotations

import threading
from datetime import date
from typing import Optional

import pytest

from src.class_attendance.class_attendance.attendance.model import AttendanceRecord, RecordInput
from src.class_attendance.class_attendance.common.datetime_utils import DateRange
from src.class_attendance.class_attendance.container import build_services
from src.class_attendance.class_attendance.core.enums import AttendanceStatus, Role
from src.class_attendance.class_attendance.roster.model import ClassSection, Person


class InMemoryRoster:
    def __init__(self):
        self.classes: dict[str, ClassSection] = {}
        self.people: dict[str, Person] = {}
        self.enrollments: list[tuple[str, str]] = []

    def add_person(self, person_id: str, name: str, role: Role = Role.STUDENT, email: Optional[str] = None) -> Person:
        person = Person(person_id=person_id, name=name, role=role, email=email)
        self.people[person_id] = person
        return person

    def list_classes(self, owner_id=None):
        return [c for c in self.classes.values() if owner_id is None or c.teacher_id == owner_id]

    def get_class(self, class_id):
        return self.classes.get(class_id)

    def list_enrolled_students(self, class_id):
        return [
            self.people[sid]
            for cid, sid in self.enrollments
            if cid == class_id and self.people[sid].role == Role.STUDENT
        ]

    def get_person(self, person_id):
        return self.people.get(person_id)

    def get_person_by_email(self, email):
        return next((p for p in self.people.values() if p.email == email), None)

    def list_people(self, role=None):
        return [p for p in self.people.values() if role is None or p.role == role]

    def create_person(self, *, person_id, name, role, email=None):
        self.add_person(person_id, name, role, email)
        return person_id

    def create_class(self, *, class_id, name, teacher_id):
        self.classes[class_id] = ClassSection(class_id=class_id, name=name, teacher_id=teacher_id)
        return class_id

    def delete_class(self, class_id):
        if class_id not in self.classes:
            return False
        self.enrollments = [(c, s) for c, s in self.enrollments if c != class_id]
        del self.classes[class_id]
        return True

    def add_enrollment(self, class_id, student_id):
        if (class_id, student_id) in self.enrollments:
            return False
        self.enrollments.append((class_id, student_id))
        return True

    def remove_enrollment(self, class_id, student_id):
        if (class_id, student_id) not in self.enrollments:
            return False
        self.enrollments.remove((class_id, student_id))
        return True


class InMemoryLedger:
    """Ledger fake. replace_day swaps the whole day under one lock."""

    def __init__(self):
        self._rows: dict[tuple[str, str, date], AttendanceRecord] = {}
        self._lock = threading.Lock()
        self.fail_with: Optional[Exception] = None
        self.replace_calls = 0

    def all_records(self) -> list[AttendanceRecord]:
        with self._lock:
            return sorted(self._rows.values(), key=lambda r: (r.class_id, r.work_date, r.student_id))

    def seed(self, class_id: str, student_id: str, work_date: date, status: AttendanceStatus, recorded_by="seed"):
        with self._lock:
            self._rows[(class_id, student_id, work_date)] = AttendanceRecord(
                class_id=class_id,
                student_id=student_id,
                work_date=work_date,
                status=status,
                recorded_by=recorded_by,
            )

    def _select(self, predicate):
        with self._lock:
            return sorted(
                (r for r in self._rows.values() if predicate(r)),
                key=lambda r: (r.work_date, r.class_id, r.student_id),
            )

    def get_records_for_day(self, class_id, work_date):
        return self._select(lambda r: r.class_id == class_id and r.work_date == work_date)

    def get_records_for_range(self, class_id, date_range: DateRange):
        return self._select(lambda r: r.class_id == class_id and r.work_date in date_range)

    def get_student_records(self, student_id, date_range: DateRange):
        return self._select(lambda r: r.student_id == student_id and r.work_date in date_range)

    def get_records_on(self, work_date, class_ids=None):
        wanted = None if class_ids is None else set(class_ids)
        return self._select(lambda r: r.work_date == work_date and (wanted is None or r.class_id in wanted))

    def replace_day(self, class_id, work_date, records: list[RecordInput]):
        self.replace_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        new_rows = {
            (class_id, r.student_id, work_date): AttendanceRecord(
                class_id=class_id,
                student_id=r.student_id,
                work_date=work_date,
                status=r.status,
                recorded_by=r.recorded_by,
            )
            for r in records
        }
        with self._lock:
            for key in [k for k in self._rows if k[0] == class_id and k[2] == work_date]:
                del self._rows[key]
            self._rows.update(new_rows)
        return len(new_rows)

    def upsert_record(self, class_id, work_date, record: RecordInput):
        if self.fail_with is not None:
            raise self.fail_with
        self.seed(class_id, record.student_id, work_date, record.status, record.recorded_by)


@pytest.fixture
def roster() -> InMemoryRoster:
    """Class X (teacher T1) with students A, B, C enrolled in that order."""
    repo = InMemoryRoster()
    repo.add_person("T1", "Tina Teacher", Role.TEACHER, "tina@example.edu")
    repo.add_person("P1", "Paul Principal", Role.PRINCIPAL)
    repo.create_class(class_id="X", name="Class 10A", teacher_id="T1")
    for sid, name in [("A", "Cara Adams"), ("B", "Ben Brown"), ("C", "Alice Clark")]:
        repo.add_person(sid, name, Role.STUDENT, f"{sid.lower()}@example.edu")
        repo.add_enrollment("X", sid)
    return repo


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def container(roster, ledger):
    return build_services(roster, ledger)


@pytest.fixture
def cached_container(roster, ledger):
    return build_services(roster, ledger, cache_views=True)


@pytest.fixture
def day() -> date:
    return date(2024, 3, 1)
