from __future__ import annotations

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import DateRange, parse_iso_date, today_local
from ..container import Container
from ..core.constants import DEFAULT_ABSENCE_LOOKBACK_DAYS, DEFAULT_REPORT_DAYS, MAX_ABSENCE_LOOKBACK_DAYS
from ..core.exceptions import ValidationError
from .rates import format_rate


def _range_from_args() -> DateRange:
    start = request.args.get("start")
    end = request.args.get("end")
    if start and end:
        return DateRange.parse(start, end)
    if start or end:
        raise ValidationError("Provide both start and end, or neither")
    return DateRange.trailing(today_local(), int(current_app.config.get("DEFAULT_REPORT_DAYS", DEFAULT_REPORT_DAYS)))


def _int_arg(name: str, default: int, *, low: int, high: int) -> int:
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    if not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}")
    return value


def register(app: Flask, container: Container) -> None:
    engine = container.aggregation

    @app.route("/api/classes/<class_id>/summary/<work_date>", endpoint="class_day_summary")
    def class_day_summary(class_id: str, work_date: str):
        summary = engine.class_day_summary(class_id, work_date)
        return jsonify({**summary.to_dict(), "rate_label": format_rate(summary.rate)})

    @app.route("/api/classes/<class_id>/report", endpoint="class_report")
    def class_report(class_id: str):
        date_range = _range_from_args()
        include_former = request.args.get("include_former") in {"1", "true"}
        rows = engine.class_range_summary_per_student(class_id, date_range, include_former=include_former)
        return jsonify(
            {
                "class_id": class_id,
                "start": date_range.start.isoformat(),
                "end": date_range.end.isoformat(),
                "rows": [{**r.to_dict(), "rate_label": format_rate(r.rate)} for r in rows],
            }
        )

    @app.route("/api/classes/<class_id>/absences", endpoint="class_absences")
    def class_absences(class_id: str):
        as_of = parse_iso_date(request.args.get("as_of") or today_local())
        lookback = _int_arg("lookback", DEFAULT_ABSENCE_LOOKBACK_DAYS, low=1, high=MAX_ABSENCE_LOOKBACK_DAYS)
        streaks = engine.recent_absences(class_id, as_of, lookback_days=lookback)
        return jsonify([s.to_dict() for s in streaks])

    @app.route("/api/students/<student_id>/summary", endpoint="student_summary")
    def student_summary(student_id: str):
        summary = engine.student_range_summary(student_id, _range_from_args())
        return jsonify({**summary.to_dict(), "rate_label": format_rate(summary.rate)})

    @app.route("/api/institution/summary/<work_date>", endpoint="institution_summary")
    def institution_summary(work_date: str):
        return jsonify(engine.institution_summary(work_date).to_dict())

    @app.route("/api/teachers/<owner_id>/overview/<work_date>", endpoint="teacher_overview")
    def teacher_overview(owner_id: str, work_date: str):
        return jsonify([c.to_dict() for c in engine.teacher_overview(owner_id, work_date)])
