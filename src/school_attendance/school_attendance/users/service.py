from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role, SchoolStatus
from ..core.exceptions import AuthenticationError
from ..directory.repository import DirectoryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    name: str
    role: Role
    school_id: Optional[str]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role.value,
            "school_id": self.school_id,
        }


class AuthService:
    """Use case: authenticate any role (login)."""

    def __init__(self, directory: DirectoryRepository):
        self._directory = directory

    def authenticate(self, role: Role, login_id: str, password: str) -> SessionUser:
        login_id = require_non_empty(login_id, "Login ID")
        account = self._directory.get_account(role, login_id)
        if not account or not account.is_active:
            raise AuthenticationError("Invalid ID or password.")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except (TypeError, ValueError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed %s login for %s", role.value, login_id)
            raise AuthenticationError("Invalid ID or password.")

        if account.school_id and role != Role.SCHOOL:
            school = self._directory.get_school(account.school_id)
            if school is None or school.status == SchoolStatus.LOCKED:
                raise AuthenticationError("Your school's account is locked. Please contact the administrator.")

        return SessionUser(
            user_id=account.account_id,
            name=account.name,
            role=account.role,
            school_id=account.school_id,
        )
