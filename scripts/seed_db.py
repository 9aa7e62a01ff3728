"""Seed a demo teacher, one class and a few enrolled students."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.container import build_container
from src.class_attendance.class_attendance.core.enums import Role
from src.class_attendance.class_attendance.core.logging import configure_logging

DEMO_TEACHER_ID = "teacher-demo"
DEMO_STUDENTS = [
    ("John", "Smith", "john.smith@example.edu"),
    ("Mary", "Johnson", "mary.johnson@example.edu"),
    ("Robert", "Williams", "robert.williams@example.edu"),
]


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(level=str(getattr(settings, "LOG_LEVEL", "INFO")))
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if container.roster_repo.get_person(DEMO_TEACHER_ID) is None:
        container.roster_repo.create_person(
            person_id=DEMO_TEACHER_ID, name="Demo Teacher", role=Role.TEACHER, email="teacher@example.edu"
        )

    classes = container.roster_service.list_classes(owner_id=DEMO_TEACHER_ID)
    section = classes[0] if classes else container.roster_service.create_class(name="Class 10A", teacher_id=DEMO_TEACHER_ID)

    for first, last, email in DEMO_STUDENTS:
        student = container.roster_service.register_student(first_name=first, last_name=last, email=email)
        container.roster_service.enroll(section.class_id, student.person_id)

    print(f"OK: Seeded class {section.name} ({section.class_id}) with {len(DEMO_STUDENTS)} students")


if __name__ == "__main__":
    main()
