from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...core.exceptions import InvalidTransitionError
from .base import DayPath

_NEXT = {
    None: AttendanceStatus.BUS_IN,
    AttendanceStatus.BUS_IN: AttendanceStatus.IN,
    AttendanceStatus.IN: AttendanceStatus.OUT,
    AttendanceStatus.OUT: AttendanceStatus.BUS_OUT,
}


class BusPath(DayPath):
    """(none) -> BUS_IN -> IN -> OUT -> BUS_OUT. Chosen when the day starts with BUS_IN."""

    name = "bus"

    @property
    def next_status(self):
        return _NEXT

    def check_next(self, *, last_status: Optional[AttendanceStatus], requested: AttendanceStatus, subject_name: str) -> None:
        expected = self.expected_after(last_status)
        if requested == expected:
            return

        if last_status == AttendanceStatus.BUS_OUT:
            raise InvalidTransitionError(
                f"{subject_name} has already completed the bus attendance cycle for today.",
                last_status=last_status,
                requested_status=requested,
            )
        raise InvalidTransitionError(
            f"Invalid sequence for bus user. After {self._describe(last_status)}, "
            f"expected {self._describe(expected)} but got {requested.value}.",
            last_status=last_status,
            requested_status=requested,
        )
