from __future__ import annotations

import logging

from flask import Flask, jsonify, session

from ..common.http import current_caller, enum_field, json_body, login_required
from ..container import Container
from ..core.enums import Role

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = json_body()
        role = enum_field(Role, data.get("role"), "role")
        user = container.auth_service.authenticate(role, data.get("login_id"), data.get("password"))

        session.clear()
        session["user_id"] = user.user_id
        session["role"] = user.role.value
        session["school_id"] = user.school_id
        session["name"] = user.name
        session.permanent = bool(data.get("remember"))

        logger.info("%s %s logged in", user.role.value, user.user_id)
        return jsonify({"success": True, "user": user.to_dict()}), 200

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    def api_logout():
        session.clear()
        return jsonify({"success": True}), 200

    @app.route("/api/me", endpoint="api_me")
    @login_required
    def api_me():
        caller = current_caller()
        return jsonify(
            {
                "success": True,
                "user": {
                    "user_id": caller.user_id,
                    "name": caller.name,
                    "role": caller.role.value,
                    "school_id": caller.school_id,
                },
            }
        ), 200
