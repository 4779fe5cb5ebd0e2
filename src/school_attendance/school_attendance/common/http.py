from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConcurrencyError,
    DomainError,
    InvalidTransitionError,
    MalformedInputError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: MalformedInputError is a ValidationError.
_STATUS_CODES = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (ConcurrencyError, 409),
    (MalformedInputError, 400),
    (ValidationError, 400),
)


@dataclass(frozen=True)
class Caller:
    """Identity of the logged-in caller, read from the Flask session."""

    user_id: str
    role: Role
    school_id: Optional[str]
    name: Optional[str] = None


def status_code_for(error: DomainError) -> int:
    for cls, code in _STATUS_CODES:
        if isinstance(error, cls):
            return code
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        body = {"success": False, "message": str(e)}
        if isinstance(e, InvalidTransitionError):
            body["last_status"] = e.last_status.value if e.last_status else None
            body["requested_status"] = e.requested_status.value
        return jsonify(body), status_code_for(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Let Flask render its own HTTP errors (404 routes, 405, ...).
        code = getattr(e, "code", None)
        if isinstance(code, int):
            return jsonify({"success": False, "message": getattr(e, "description", str(e))}), code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal server error"}), 500


def current_caller() -> Caller:
    if "user_id" not in session:
        raise AuthenticationError("Authentication required. Please log in again.")
    try:
        role = Role(session.get("role"))
    except ValueError:
        session.clear()
        raise AuthenticationError("Invalid session. Please log in again.")
    return Caller(
        user_id=str(session["user_id"]),
        role=role,
        school_id=session.get("school_id"),
        name=session.get("name"),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_caller()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = set(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            caller = current_caller()
            if caller.role not in allowed:
                raise AuthorizationError("Access denied. You do not have the required permissions.")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedInputError("Request body must be a JSON object")
    return data


def enum_field(enum_cls, value, field_name: str, default=None):
    """Parse a request value into ``enum_cls`` (case-insensitive) or fail with a 400."""

    if value is None or value == "":
        if default is not None:
            return default
        raise MalformedInputError(f"{field_name} is required")

    raw = str(value).strip()
    for candidate in (raw, raw.upper(), raw.lower()):
        try:
            return enum_cls(candidate)
        except ValueError:
            continue
    raise MalformedInputError(f"Invalid {field_name}: {raw}")
