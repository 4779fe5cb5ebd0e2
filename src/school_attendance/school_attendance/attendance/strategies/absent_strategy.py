from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...core.exceptions import InvalidTransitionError
from .base import DayPath


class AbsentDay(DayPath):
    """Day already closed by the absence sweep: nothing may follow ABSENT."""

    name = "absent"

    @property
    def next_status(self):
        return {}

    def check_next(self, *, last_status: Optional[AttendanceStatus], requested: AttendanceStatus, subject_name: str) -> None:
        raise InvalidTransitionError(
            f"{subject_name} was marked ABSENT today. Expected nothing but got {requested.value}.",
            last_status=last_status,
            requested_status=requested,
        )
