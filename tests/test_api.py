from __future__ import annotations

import pytest

from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import StorageUnavailable
from src.class_attendance.class_attendance.main import create_app


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def test_get_view(client):
    resp = client.get("/api/classes/X/attendance/2024-03-01")

    assert resp.status_code == 200
    data = resp.get_json()
    assert [e["status"] for e in data["entries"]] == ["unrecorded"] * 3


def test_put_saves_and_returns_refreshed_view(client):
    resp = client.put(
        "/api/classes/X/attendance/2024-03-01",
        json={
            "actor_id": "T1",
            "entries": [
                {"student_id": "A", "status": "present"},
                {"student_id": "B", "status": "absent"},
                {"student_id": "C", "status": "unrecorded"},
            ],
        },
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["saved"]["present"] == 1
    assert [e["status"] for e in data["view"]["entries"]] == ["present", "absent", "absent"]

    summary = client.get("/api/classes/X/summary/2024-03-01").get_json()
    assert (summary["total"], summary["present"], summary["absent"], summary["rate"]) == (3, 1, 2, 33)
    assert summary["rate_label"] == "33%"


def test_put_with_mark_all_present(client, ledger):
    resp = client.put(
        "/api/classes/X/attendance/2024-03-01",
        json={"actor_id": "T1", "entries": [], "mark_all_present": True},
    )

    assert resp.status_code == 200
    saved = resp.get_json()["saved"]
    assert (saved["present"], saved["absent"]) == (3, 0)
    assert all(r.status == AttendanceStatus.PRESENT for r in ledger.all_records())


def test_patch_marks_one_student(client, ledger):
    resp = client.patch("/api/classes/X/attendance/2024-03-01/B", json={"status": "present", "actor_id": "T1"})

    assert resp.status_code == 200
    entries = {e["student_id"]: e["status"] for e in resp.get_json()["entries"]}
    assert entries == {"A": "unrecorded", "B": "present", "C": "unrecorded"}
    assert [r.status for r in ledger.all_records()] == [AttendanceStatus.PRESENT]


def test_errors_map_to_status_codes(client, ledger):
    assert client.get("/api/classes/X/attendance/01-03-2024").status_code == 400
    assert client.get("/api/classes/NOPE/attendance/2024-03-01").status_code == 404
    assert client.put("/api/classes/X/attendance/2024-03-01", data="nope").status_code == 400

    ledger.fail_with = StorageUnavailable("down")
    resp = client.put("/api/classes/X/attendance/2024-03-01", json={"actor_id": "T1", "entries": []})
    assert resp.status_code == 503
    assert resp.get_json()["retryable"] is True


def test_student_summary_without_data_is_not_available(client):
    resp = client.get("/api/students/A/summary?start=2024-03-01&end=2024-03-31")

    assert resp.status_code == 200
    assert resp.get_json()["rate"] == "N/A"
    assert client.get("/api/students/A/summary?start=2024-03-01").status_code == 400


def test_class_report_and_overviews(client):
    client.put(
        "/api/classes/X/attendance/2024-03-01",
        json={"actor_id": "T1", "entries": [{"student_id": "A", "status": "present"}]},
    )

    report = client.get("/api/classes/X/report?start=2024-03-01&end=2024-03-31").get_json()
    assert [(r["student_id"], r["rate_label"]) for r in report["rows"]] == [("A", "100%"), ("B", "0%"), ("C", "0%")]

    institution = client.get("/api/institution/summary/2024-03-01").get_json()
    assert (institution["total_students"], institution["present_today"], institution["rate"]) == (3, 1, 33)

    overview = client.get("/api/teachers/T1/overview/2024-03-01").get_json()
    assert overview[0]["taken"] is True

    absences = client.get("/api/classes/X/absences?as_of=2024-03-01").get_json()
    assert [a["student_id"] for a in absences] == ["C", "B"]


def test_malformed_entries_are_rejected(client, ledger):
    resp = client.put("/api/classes/X/attendance/2024-03-01", json={"actor_id": "T1", "entries": ["A"]})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"
    assert ledger.replace_calls == 0


def test_absence_lookback_is_bounded(client):
    assert client.get("/api/classes/X/absences?as_of=2024-03-01&lookback=999999999999").status_code == 400
    assert client.get("/api/classes/X/absences?as_of=2024-03-01&lookback=0").status_code == 400
    assert client.get("/api/classes/X/absences?as_of=2024-03-01&lookback=7").status_code == 200


def test_mark_all_present_covers_students_enrolled_after_a_cached_read(cached_container, roster, ledger, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    client = create_app(cached_container).test_client()
    client.get("/api/classes/X/attendance/2024-03-01")

    roster.add_person("D", "Dan Davis")
    roster.add_enrollment("X", "D")
    resp = client.put(
        "/api/classes/X/attendance/2024-03-01",
        json={"actor_id": "T1", "entries": [], "mark_all_present": True},
    )

    assert resp.status_code == 200
    assert resp.get_json()["saved"]["present"] == 4
    assert {r.student_id for r in ledger.all_records() if r.status == AttendanceStatus.PRESENT} == {"A", "B", "C", "D"}
