from __future__ import annotations

from dataclasses import replace

import pytest

from school_attendance.core.enums import Role
from school_attendance.core.exceptions import AuthenticationError, MalformedInputError


def test_school_login(auth_service):
    user = auth_service.authenticate(Role.SCHOOL, "SCH001", "school123")

    assert user.user_id == "SCH001"
    assert user.role == Role.SCHOOL
    assert user.school_id == "SCH001"


def test_student_login_carries_school_scope(auth_service):
    user = auth_service.authenticate(Role.STUDENT, "STU001", "student123")

    assert user.school_id == "SCH001"
    assert user.to_dict()["role"] == "student"


@pytest.mark.parametrize(
    "role, login_id, password",
    [
        (Role.SCHOOL, "SCH001", "wrong"),
        (Role.SCHOOL, "SCH404", "school123"),
        (Role.STUDENT, "SCH001", "school123"),
        (Role.SCHOOL, "SCH003", "school123"),
    ],
)
def test_bad_credentials(auth_service, role, login_id, password):
    with pytest.raises(AuthenticationError, match="Invalid ID or password."):
        auth_service.authenticate(role, login_id, password)


def test_members_of_locked_school_cannot_log_in(auth_service):
    with pytest.raises(AuthenticationError, match="locked"):
        auth_service.authenticate(Role.GUARD, "GRD009", "guard123")


def test_placeholder_hash_never_matches(auth_service, directory):
    account = directory.accounts[(Role.STUDENT, "STU001")]
    directory.accounts[(Role.STUDENT, "STU001")] = replace(account, password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        auth_service.authenticate(Role.STUDENT, "STU001", "CHANGE_ME")


def test_login_id_is_required(auth_service):
    with pytest.raises(MalformedInputError):
        auth_service.authenticate(Role.SCHOOL, "  ", "x")
