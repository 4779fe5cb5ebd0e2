from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...core.exceptions import InvalidTransitionError
from .base import DayPath

_NEXT = {
    None: AttendanceStatus.IN,
    AttendanceStatus.IN: AttendanceStatus.OUT,
}


class WalkInPath(DayPath):
    """(none) -> IN -> OUT. Chosen when the day does not start with BUS_IN."""

    name = "walk_in"

    @property
    def next_status(self):
        return _NEXT

    def check_next(self, *, last_status: Optional[AttendanceStatus], requested: AttendanceStatus, subject_name: str) -> None:
        if requested in (AttendanceStatus.BUS_IN, AttendanceStatus.BUS_OUT):
            raise InvalidTransitionError(
                f"Cannot perform bus action. {subject_name} did not check in with the bus this morning.",
                last_status=last_status,
                requested_status=requested,
            )

        expected = self.expected_after(last_status)
        if requested == expected:
            return

        if last_status == AttendanceStatus.OUT:
            raise InvalidTransitionError(
                f"{subject_name} has already completed the attendance cycle for today.",
                last_status=last_status,
                requested_status=requested,
            )
        raise InvalidTransitionError(
            f"Invalid sequence. After {self._describe(last_status)}, "
            f"expected {self._describe(expected)} but got {requested.value}.",
            last_status=last_status,
            requested_status=requested,
        )
