from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import ClassSection, Person


class RosterRepository(Protocol):
    """Repository interface for classes, people and enrollments.

    Note (DIP): services depend on this interface, not on a concrete database.
    Reads reflect enrollment as of call time (read-committed).
    """

    def list_classes(self, owner_id: Optional[str] = None) -> Sequence[ClassSection]:
        raise NotImplementedError

    def get_class(self, class_id: str) -> Optional[ClassSection]:
        raise NotImplementedError

    def list_enrolled_students(self, class_id: str) -> Sequence[Person]:
        """Currently enrolled students, in enrollment order."""

        raise NotImplementedError

    def get_person(self, person_id: str) -> Optional[Person]:
        raise NotImplementedError

    def get_person_by_email(self, email: str) -> Optional[Person]:
        raise NotImplementedError

    def list_people(self, role: Optional[Role] = None) -> Sequence[Person]:
        raise NotImplementedError

    def create_person(self, *, person_id: str, name: str, role: Role, email: Optional[str] = None) -> str:
        raise NotImplementedError

    def create_class(self, *, class_id: str, name: str, teacher_id: str) -> str:
        raise NotImplementedError

    def delete_class(self, class_id: str) -> bool:
        """Remove the class and its enrollments. Attendance records are kept."""

        raise NotImplementedError

    def add_enrollment(self, class_id: str, student_id: str) -> bool:
        """Return False when the pair is already enrolled."""

        raise NotImplementedError

    def remove_enrollment(self, class_id: str, student_id: str) -> bool:
        raise NotImplementedError
