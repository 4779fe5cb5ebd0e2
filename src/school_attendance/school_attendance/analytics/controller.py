from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, utc_day, utc_now
from ..common.http import current_caller, login_required, roles_required
from ..container import Container
from ..core.enums import EntityType, Role
from ..core.exceptions import MalformedInputError


def register(app: Flask, container: Container) -> None:
    def _require_visible(entity_type: EntityType, entity_id: str) -> None:
        caller = current_caller()
        container.directory_service.require_visible(
            role=caller.role,
            user_id=caller.user_id,
            school_id=caller.school_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    @app.route("/api/students/<student_id>/analytics", endpoint="api_student_analytics")
    @login_required
    def api_student_analytics(student_id: str):
        _require_visible(EntityType.STUDENT, student_id)
        analytics = container.analytics_service.student_analytics(student_id)
        return jsonify({"success": True, "analytics": analytics.to_dict()}), 200

    @app.route("/api/teachers/<teacher_id>/monthly", endpoint="api_teacher_monthly")
    @login_required
    def api_teacher_monthly(teacher_id: str):
        _require_visible(EntityType.TEACHER, teacher_id)
        logs = container.analytics_service.teacher_monthly_report(teacher_id)
        return jsonify({"success": True, "logs": [log.to_dict() for log in logs]}), 200

    @app.route("/api/attendance/summary", endpoint="api_daily_summary")
    @roles_required(Role.SCHOOL, Role.ACADEMIC_WORK)
    def api_daily_summary():
        caller = current_caller()
        raw = (request.args.get("date") or "").strip()
        try:
            day = parse_iso_date(raw) if raw else utc_day(utc_now())
        except ValueError:
            raise MalformedInputError("Date must be YYYY-MM-DD")

        summary = container.analytics_service.school_daily_summary(caller.school_id, day)
        return jsonify({"success": True, "summary": summary.to_dict()}), 200
