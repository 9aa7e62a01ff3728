from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.attendance.model import AttendanceView
from src.class_attendance.class_attendance.common.datetime_utils import DateRange
from src.class_attendance.class_attendance.core.enums import AttendanceStatus, Role
from src.class_attendance.class_attendance.core.exceptions import NotFoundError

PRESENT = AttendanceStatus.PRESENT
ABSENT = AttendanceStatus.ABSENT


def _save(container, day, statuses: dict):
    view = AttendanceView.from_payload(
        "X", day, [{"student_id": sid, "status": status} for sid, status in statuses.items()]
    )
    container.recorder.save("X", day, view, "T1")


def test_class_day_summary_after_save(container, day):
    _save(container, day, {"A": "present", "B": "absent", "C": "unrecorded"})

    summary = container.aggregation.class_day_summary("X", "2024-03-01")

    assert (summary.total, summary.present, summary.absent, summary.rate) == (3, 1, 2, 33)


def test_class_day_summary_without_records_has_zero_rate(container, day):
    summary = container.aggregation.class_day_summary("X", day)

    assert (summary.total, summary.present, summary.absent, summary.rate) == (3, 0, 0, 0)


def test_class_day_summary_unknown_class(container, day):
    with pytest.raises(NotFoundError):
        container.aggregation.class_day_summary("NOPE", day)


def test_student_without_records_reports_not_available(container):
    summary = container.aggregation.student_range_summary("A", DateRange.parse("2024-03-01", "2024-03-31"))

    assert (summary.present, summary.absent, summary.rate) == (0, 0, "N/A")


def test_student_range_summary_counts_every_class(container, roster, ledger, day):
    roster.create_class(class_id="Y", name="Class 11B", teacher_id="T1")
    roster.add_enrollment("Y", "A")
    ledger.seed("X", "A", day, PRESENT)
    ledger.seed("Y", "A", day, ABSENT)
    ledger.seed("X", "A", date(2024, 3, 2), PRESENT)
    ledger.seed("X", "A", date(2024, 4, 1), ABSENT)

    summary = container.aggregation.student_range_summary("A", DateRange.parse("2024-03-01", "2024-03-31"))

    assert (summary.present, summary.absent, summary.rate) == (2, 1, 67)


def test_disenrolled_student_keeps_history(container, roster, ledger):
    roster.add_person("D", "Dan Davis")
    roster.add_enrollment("X", "D")
    _save(container, date(2024, 3, 1), {"A": "present", "B": "present", "C": "present", "D": "present"})
    roster.remove_enrollment("X", "D")

    summary = container.aggregation.student_range_summary("D", DateRange.parse("2024-03-01", "2024-03-05"))
    view = container.view_builder.build_view("X", "2024-03-05")

    assert (summary.present, summary.rate) == (1, 100)
    assert "D" not in view.student_ids()
    assert len(ledger.get_student_records("D", DateRange.parse("2024-03-01", "2024-03-01"))) == 1


def test_unknown_student_summary_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.aggregation.student_range_summary("NOPE", DateRange(date(2024, 3, 1), date(2024, 3, 1)))


def test_class_report_rows_follow_roster(container, roster, ledger):
    ledger.seed("X", "A", date(2024, 3, 1), PRESENT)
    ledger.seed("X", "A", date(2024, 3, 2), ABSENT)
    ledger.seed("X", "B", date(2024, 3, 1), PRESENT)
    roster.add_person("D", "Dan Davis")
    ledger.seed("X", "D", date(2024, 3, 1), ABSENT)

    rows = container.aggregation.class_range_summary_per_student("X", DateRange.parse("2024-03-01", "2024-03-31"))

    assert [(r.student_id, r.present, r.absent, r.rate) for r in rows] == [
        ("A", 1, 1, 50),
        ("B", 1, 0, 100),
        ("C", 0, 0, "N/A"),
    ]


def test_class_report_can_include_former_students(container, roster, ledger):
    roster.add_person("D", "Dan Davis")
    ledger.seed("X", "D", date(2024, 3, 1), ABSENT)

    rows = container.aggregation.class_range_summary_per_student(
        "X", DateRange.parse("2024-03-01", "2024-03-31"), include_former=True
    )

    assert rows[-1].student_id == "D"
    assert rows[-1].enrolled is False
    assert (rows[-1].name, rows[-1].rate) == ("Dan Davis", 0)


def test_institution_summary_counts_each_enrollment(container, roster, ledger, day):
    roster.create_class(class_id="Y", name="Class 11B", teacher_id="T1")
    roster.add_enrollment("Y", "A")
    ledger.seed("X", "A", day, PRESENT)
    ledger.seed("X", "B", day, ABSENT)
    ledger.seed("Y", "A", day, PRESENT)
    ledger.seed("X", "A", date(2024, 3, 2), ABSENT)

    summary = container.aggregation.institution_summary(day)

    assert summary.total_students == 4
    assert (summary.present_today, summary.absent_today, summary.rate) == (2, 1, 67)


def test_institution_summary_with_no_records(container, day):
    summary = container.aggregation.institution_summary(day)

    assert (summary.total_students, summary.rate) == (3, 0)


def test_teacher_overview_flags_taken_classes(container, roster, ledger, day):
    roster.add_person("T2", "Other Teacher", Role.TEACHER)
    roster.create_class(class_id="Y", name="Class 11B", teacher_id="T1")
    roster.create_class(class_id="Z", name="Class 12C", teacher_id="T2")
    _save(container, day, {"A": "present", "B": "present", "C": "absent"})

    overview = {c.class_id: c for c in container.aggregation.teacher_overview("T1", day)}

    assert sorted(overview) == ["X", "Y"]
    assert (overview["X"].taken, overview["X"].students_count, overview["X"].rate) == (True, 3, 67)
    assert (overview["Y"].taken, overview["Y"].rate) == (False, 0)


def test_recent_absences_count_trailing_streaks(container, ledger):
    ledger.seed("X", "A", date(2024, 3, 1), PRESENT)
    ledger.seed("X", "A", date(2024, 3, 4), ABSENT)
    ledger.seed("X", "A", date(2024, 3, 5), ABSENT)
    ledger.seed("X", "B", date(2024, 3, 4), ABSENT)
    ledger.seed("X", "B", date(2024, 3, 5), PRESENT)
    ledger.seed("X", "C", date(2024, 3, 5), ABSENT)

    streaks = container.aggregation.recent_absences("X", date(2024, 3, 5), lookback_days=7)

    assert [(s.student_id, s.consecutive_days) for s in streaks] == [("A", 2), ("C", 1)]
    assert streaks[0].last_absent == date(2024, 3, 5)


def test_aggregation_never_writes(container, ledger, day):
    ledger.seed("X", "A", day, PRESENT)
    before = ledger.all_records()

    container.aggregation.class_day_summary("X", day)
    container.aggregation.institution_summary(day)
    container.aggregation.class_range_summary_per_student("X", DateRange(day, day), include_former=True)

    assert ledger.all_records() == before
    assert ledger.replace_calls == 0
