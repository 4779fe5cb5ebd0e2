from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, send_file

from ..common.http import current_caller, login_required, roles_required
from ..container import Container
from ..core.enums import EntityType, Role

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _qr_response(entity_type: EntityType, entity_id: str):
        caller = current_caller()
        subject = container.directory_service.require_visible(
            role=caller.role,
            user_id=caller.user_id,
            school_id=caller.school_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        png = container.directory_service.qr_png(entity_type, entity_id, subject.school_id)
        return send_file(io.BytesIO(png), mimetype="image/png")

    @app.route("/api/students/<student_id>/qr.png", endpoint="api_student_qr")
    @login_required
    def api_student_qr(student_id: str):
        return _qr_response(EntityType.STUDENT, student_id)

    @app.route("/api/teachers/<teacher_id>/qr.png", endpoint="api_teacher_qr")
    @login_required
    def api_teacher_qr(teacher_id: str):
        return _qr_response(EntityType.TEACHER, teacher_id)

    @app.route("/api/students", endpoint="api_list_students")
    @roles_required(Role.SCHOOL, Role.ACADEMIC_WORK)
    def api_list_students():
        caller = current_caller()
        students = container.directory_service.list_by_school(caller.school_id, EntityType.STUDENT)
        return jsonify(
            {
                "success": True,
                "students": [{"student_id": s.entity_id, "name": s.name, "qr_value": s.qr_value} for s in students],
            }
        ), 200

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="api_delete_student")
    @roles_required(Role.SCHOOL)
    def api_delete_student(student_id: str):
        caller = current_caller()
        removed = container.directory_service.delete_student(
            current_role=caller.role,
            school_id=caller.school_id,
            student_id=student_id,
            purge_logs=container.attendance_service.purge_entity,
        )
        logger.info("Student %s removed from school %s", student_id, caller.school_id)
        return jsonify({"success": True, "deleted_logs": removed}), 200
