from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import ConflictIgnored


@dataclass(frozen=True)
class Person:
    """Domain entity: a principal, teacher or student.

    Owned by the identity collaborator; this core only reads it.
    """

    person_id: str
    name: str
    role: Role
    email: Optional[str] = None


@dataclass(frozen=True)
class ClassSection:
    class_id: str
    name: str
    teacher_id: str


@dataclass(frozen=True)
class Enrollment:
    class_id: str
    student_id: str


@dataclass(frozen=True)
class EnrollmentResult:
    """Outcome of an enroll call. A duplicate is a success with a notice."""

    enrollment: Enrollment
    created: bool
    notice: Optional[ConflictIgnored] = None
