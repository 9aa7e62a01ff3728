from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassSection, Person
from .repository import RosterRepository


def _to_person(row: dict) -> Person:
    return Person(
        person_id=str(row["person_id"]),
        name=row["full_name"],
        role=Role(row["role"]),
        email=row.get("email"),
    )


def _to_class(row: dict) -> ClassSection:
    return ClassSection(class_id=str(row["class_id"]), name=row["name"], teacher_id=str(row["teacher_id"]))


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_classes(self, owner_id: Optional[str] = None) -> Sequence[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            if owner_id is None:
                cur.execute("SELECT class_id, name, teacher_id FROM classes ORDER BY name, class_id")
            else:
                cur.execute(
                    "SELECT class_id, name, teacher_id FROM classes WHERE teacher_id=%s ORDER BY name, class_id",
                    (owner_id,),
                )
            return [_to_class(r) for r in fetchall(cur)]

    def get_class(self, class_id: str) -> Optional[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, teacher_id FROM classes WHERE class_id=%s", (class_id,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def list_enrolled_students(self, class_id: str) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.person_id, p.full_name, p.role, p.email
                FROM enrollments e
                JOIN people p ON p.person_id = e.student_id
                WHERE e.class_id=%s AND p.role='student'
                ORDER BY e.enrollment_id ASC
                """,
                (class_id,),
            )
            return [_to_person(r) for r in fetchall(cur)]

    def get_person(self, person_id: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, full_name, role, email FROM people WHERE person_id=%s", (person_id,))
            row = fetchone(cur)
            return _to_person(row) if row else None

    def get_person_by_email(self, email: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, full_name, role, email FROM people WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_person(row) if row else None

    def list_people(self, role: Optional[Role] = None) -> Sequence[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute("SELECT person_id, full_name, role, email FROM people ORDER BY full_name, person_id")
            else:
                cur.execute(
                    "SELECT person_id, full_name, role, email FROM people WHERE role=%s ORDER BY full_name, person_id",
                    (role.value,),
                )
            return [_to_person(r) for r in fetchall(cur)]

    def create_person(self, *, person_id: str, name: str, role: Role, email: Optional[str] = None) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO people(person_id, full_name, email, role) VALUES(%s,%s,%s,%s)",
                (person_id, name, email, role.value),
            )
            return person_id

    def create_class(self, *, class_id: str, name: str, teacher_id: str) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(class_id, name, teacher_id) VALUES(%s,%s,%s)",
                (class_id, name, teacher_id),
            )
            return class_id

    def delete_class(self, class_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM enrollments WHERE class_id=%s", (class_id,))
            cur.execute("DELETE FROM classes WHERE class_id=%s", (class_id,))
            return cur.rowcount > 0

    def add_enrollment(self, class_id: str, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO enrollments(class_id, student_id) VALUES(%s,%s)",
                (class_id, student_id),
            )
            return cur.rowcount > 0

    def remove_enrollment(self, class_id: str, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM enrollments WHERE class_id=%s AND student_id=%s",
                (class_id, student_id),
            )
            return cur.rowcount > 0
