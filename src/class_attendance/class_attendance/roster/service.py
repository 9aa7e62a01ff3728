from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from ..common.cache import ReadThroughCache
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConflictIgnored, NotFoundError, ValidationError
from .model import ClassSection, Enrollment, EnrollmentResult, Person
from .repository import RosterRepository

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class RosterService:
    """Roster management used by the membership screens.

    Attendance records are never touched here: removing a class or an
    enrollment leaves the ledger as it was.
    """

    def __init__(self, roster: RosterRepository, *, cache: Optional[ReadThroughCache] = None):
        self._roster = roster
        # Daily views cached by the view builder; dropped when membership changes.
        self._cache = cache

    def list_classes(self, *, owner_id: Optional[str] = None) -> Sequence[ClassSection]:
        return self._roster.list_classes(owner_id)

    def get_class(self, class_id: str) -> ClassSection:
        section = self._roster.get_class(class_id)
        if not section:
            raise NotFoundError(f"Class {class_id!r} does not exist")
        return section

    def list_students(self, class_id: str) -> Sequence[Person]:
        self.get_class(class_id)
        return self._roster.list_enrolled_students(class_id)

    def list_unenrolled_students(self, class_id: str) -> Sequence[Person]:
        enrolled = {p.person_id for p in self.list_students(class_id)}
        return [p for p in self._roster.list_people(Role.STUDENT) if p.person_id not in enrolled]

    def create_class(self, *, name: str, teacher_id: str) -> ClassSection:
        name = require_non_empty(name, "Class name")
        teacher = self._roster.get_person(teacher_id)
        if not teacher:
            raise NotFoundError(f"Teacher {teacher_id!r} does not exist")
        if teacher.role != Role.TEACHER:
            raise ValidationError("Only a teacher can own a class")

        class_id = self._roster.create_class(class_id=_new_id(), name=name, teacher_id=teacher_id)
        logger.info("class created id=%s name=%r teacher=%s", class_id, name, teacher_id)
        return ClassSection(class_id=class_id, name=name, teacher_id=teacher_id)

    def remove_class(self, class_id: str) -> None:
        if not self._roster.delete_class(class_id):
            raise NotFoundError(f"Class {class_id!r} does not exist")
        logger.info("class removed id=%s", class_id)
        self._invalidate(class_id)

    def register_student(self, *, first_name: str, last_name: str, email: str) -> Person:
        """Create a student, or return the existing person with that email."""
        first_name = require_non_empty(first_name, "First name")
        email = require_non_empty(email, "Email").lower()

        existing = self._roster.get_person_by_email(email)
        if existing:
            if existing.role != Role.STUDENT:
                raise ValidationError(f"{email} belongs to a {existing.role.value}, not a student")
            return existing

        name = f"{first_name} {(last_name or '').strip()}".strip()
        person_id = self._roster.create_person(person_id=_new_id(), name=name, role=Role.STUDENT, email=email)
        logger.info("student registered id=%s", person_id)
        return Person(person_id=person_id, name=name, role=Role.STUDENT, email=email)

    def enroll(self, class_id: str, student_id: str) -> EnrollmentResult:
        self.get_class(class_id)
        student = self._roster.get_person(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id!r} does not exist")
        if student.role != Role.STUDENT:
            raise ValidationError("Only students can be enrolled in a class")

        enrollment = Enrollment(class_id=class_id, student_id=student_id)
        if not self._roster.add_enrollment(class_id, student_id):
            notice = ConflictIgnored(f"Student {student_id!r} is already enrolled in class {class_id!r}")
            logger.info("%s", notice)
            return EnrollmentResult(enrollment=enrollment, created=False, notice=notice)

        logger.info("student enrolled class=%s student=%s", class_id, student_id)
        self._invalidate(class_id)
        return EnrollmentResult(enrollment=enrollment, created=True)

    def disenroll(self, class_id: str, student_id: str) -> None:
        if not self._roster.remove_enrollment(class_id, student_id):
            raise NotFoundError(f"Student {student_id!r} is not enrolled in class {class_id!r}")
        logger.info("student disenrolled class=%s student=%s", class_id, student_id)
        self._invalidate(class_id)

    def _invalidate(self, class_id: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(class_id)
