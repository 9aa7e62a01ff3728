from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from .model import AttendanceView


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes/<class_id>/attendance/<work_date>", methods=["GET"], endpoint="attendance_view")
    def attendance_view(class_id: str, work_date: str):
        if request.args.get("refresh") in {"1", "true"}:
            container.view_builder.invalidate(class_id, work_date)
        view = container.view_builder.build_view(class_id, work_date)
        return jsonify(view.to_dict())

    @app.route("/api/classes/<class_id>/attendance/<work_date>", methods=["PUT"], endpoint="attendance_save")
    def attendance_save(class_id: str, work_date: str):
        data = _json_body()
        entries = data.get("entries")
        if not isinstance(entries, list):
            raise ValidationError("entries must be a list")

        if entries or not data.get("mark_all_present"):
            view = AttendanceView.from_payload(class_id, work_date, entries)
        else:
            # Start from the current roster, not a cached view.
            container.view_builder.invalidate(class_id, work_date)
            view = container.view_builder.build_view(class_id, work_date)
        if data.get("mark_all_present"):
            view = container.recorder.mark_all_present(view)

        result = container.recorder.save(class_id, work_date, view, str(data.get("actor_id") or ""))
        refreshed = container.view_builder.build_view(class_id, work_date)
        return jsonify({"saved": result.to_dict(), "view": refreshed.to_dict()})

    @app.route(
        "/api/classes/<class_id>/attendance/<work_date>/<student_id>",
        methods=["PATCH"],
        endpoint="attendance_mark_student",
    )
    def attendance_mark_student(class_id: str, work_date: str, student_id: str):
        data = _json_body()
        container.recorder.mark_student(
            class_id,
            work_date,
            student_id,
            str(data.get("status") or ""),
            str(data.get("actor_id") or ""),
        )
        return jsonify(container.view_builder.build_view(class_id, work_date).to_dict())
