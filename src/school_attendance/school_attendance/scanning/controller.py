from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_caller, json_body, roles_required
from ..common.validators import require_non_empty
from ..container import Container
from ..core.enums import Role


def _qr_value() -> str:
    data = json_body()
    return require_non_empty(data.get("qr_value"), "qr_value")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/qr", methods=["POST"], endpoint="api_mark_by_qr")
    @roles_required(Role.SCHOOL, Role.ACADEMIC_WORK)
    def api_mark_by_qr():
        caller = current_caller()
        result = container.scan_service.mark_by_qr(caller.school_id, caller.role, _qr_value())
        return jsonify({"success": True, **result.to_dict()}), 200

    @app.route("/api/guard/scan", methods=["POST"], endpoint="api_guard_scan")
    @roles_required(Role.GUARD)
    def api_guard_scan():
        caller = current_caller()
        result = container.scan_service.guard_scan(caller.user_id, _qr_value())
        return jsonify({"success": True, **result.to_dict()}), 200

    @app.route("/api/bus/scan", methods=["POST"], endpoint="api_bus_scan")
    @roles_required(Role.BUS)
    def api_bus_scan():
        caller = current_caller()
        result = container.scan_service.bus_scan(caller.user_id, _qr_value())
        return jsonify({"success": True, **result.to_dict()}), 200

    @app.route("/api/student/scan", methods=["POST"], endpoint="api_student_scan")
    @roles_required(Role.STUDENT)
    def api_student_scan():
        caller = current_caller()
        result = container.scan_service.self_scan(caller.user_id, _qr_value())
        return jsonify({"success": True, **result.to_dict()}), 200
