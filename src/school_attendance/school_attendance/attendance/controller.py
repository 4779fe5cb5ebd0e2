from __future__ import annotations

import json
import logging

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_caller, enum_field, json_body, login_required, roles_required
from ..container import Container
from ..core.constants import SSE_KEEPALIVE_SECONDS
from ..core.enums import AttendanceMode, AttendanceStatus, EntityType, Role
from ..core.exceptions import MalformedInputError
from ..notifications.notifier import student_topic

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    staff_only = roles_required(Role.SCHOOL, Role.ACADEMIC_WORK)

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_mark_attendance")
    @staff_only
    def api_mark_attendance():
        caller = current_caller()
        data = json_body()
        entity_id = str(data.get("entity_id") or "").strip()
        if not entity_id:
            raise MalformedInputError("entity_id is required")

        log = container.attendance_service.mark_attendance(
            caller.school_id,
            caller.role,
            entity_id,
            enum_field(AttendanceStatus, data.get("status"), "status"),
            enum_field(AttendanceMode, data.get("mode"), "mode", default=AttendanceMode.MANUAL),
            enum_field(EntityType, data.get("entity_type"), "entity_type", default=EntityType.STUDENT),
        )
        return jsonify({"success": True, "log": log.to_dict()}), 200

    @app.route("/api/attendance/sweep", methods=["POST"], endpoint="api_sweep_absent")
    @staff_only
    def api_sweep_absent():
        caller = current_caller()
        count = container.attendance_service.sweep_absent(caller.school_id, caller.role)
        return jsonify({"success": True, "marked_absent": count}), 200

    @app.route("/api/attendance/today", endpoint="api_todays_logs")
    @staff_only
    def api_todays_logs():
        caller = current_caller()
        logs = container.attendance_service.get_todays_logs(caller.school_id, caller.role)
        return jsonify({"success": True, "logs": [log.to_dict() for log in logs]}), 200

    @app.route("/api/attendance/date/<day>", endpoint="api_logs_for_date")
    @staff_only
    def api_logs_for_date(day: str):
        caller = current_caller()
        try:
            target = parse_iso_date(day)
        except ValueError:
            raise MalformedInputError("Date must be YYYY-MM-DD")

        entity_type = enum_field(EntityType, request.args.get("entity_type"), "entity_type", default=EntityType.STUDENT)
        logs = container.attendance_service.get_logs_for_date(caller.school_id, caller.role, target, entity_type=entity_type)
        return jsonify({"success": True, "date": target.strftime("%Y-%m-%d"), "logs": [log.to_dict() for log in logs]}), 200

    @app.route("/api/me/attendance/today", endpoint="api_my_today")
    @roles_required(Role.STUDENT, Role.TEACHER)
    def api_my_today():
        caller = current_caller()
        logs = container.attendance_service.get_today_for_entity(caller.user_id)
        last = logs[-1].status.value if logs else None
        return jsonify({"success": True, "last_status": last, "logs": [log.to_dict() for log in logs]}), 200

    @app.route("/api/attendance/history/<entity_type>/<entity_id>", endpoint="api_history")
    @login_required
    def api_history(entity_type: str, entity_id: str):
        caller = current_caller()
        kind = enum_field(EntityType, entity_type, "entity_type")
        container.directory_service.require_visible(
            role=caller.role,
            user_id=caller.user_id,
            school_id=caller.school_id,
            entity_type=kind,
            entity_id=entity_id,
        )
        logs = container.attendance_service.get_history(entity_id, kind)
        return jsonify({"success": True, "logs": [log.to_dict() for log in logs]}), 200

    @app.route("/api/students/<student_id>/events", endpoint="api_student_events")
    @login_required
    def api_student_events(student_id: str):
        """Server-sent events: one ``data:`` frame per ATTENDANCE_UPDATE for this student."""

        caller = current_caller()
        container.directory_service.require_visible(
            role=caller.role,
            user_id=caller.user_id,
            school_id=caller.school_id,
            entity_type=EntityType.STUDENT,
            entity_id=student_id,
        )
        sub = container.broadcaster.subscribe(student_topic(student_id))

        def gen():
            try:
                yield ": connected\n\n"
                for message in sub.messages(timeout=SSE_KEEPALIVE_SECONDS):
                    if message is None:
                        yield ": keep-alive\n\n"
                        continue
                    yield f"event: attendance\ndata: {json.dumps(message)}\n\n"
            finally:
                sub.close()
                logger.debug("Event stream closed for student %s", student_id)

        response = current_app.response_class(gen(), mimetype="text/event-stream")
        response.headers["Cache-Control"] = "no-cache"
        response.headers["Connection"] = "keep-alive"
        response.headers["X-Accel-Buffering"] = "no"
        response.call_on_close(sub.close)
        return response
