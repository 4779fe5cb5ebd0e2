from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus
from .model import AttendanceLog
from .strategies.absent_strategy import AbsentDay
from .strategies.base import DayPath
from .strategies.bus_strategy import BusPath
from .strategies.walk_in_strategy import WalkInPath


@dataclass
class DayPathFactory:
    """Factory Pattern: the first log of the day fixes the path for the rest of it.

    The path is recomputed from the earliest log on every call; no flag is stored.
    """

    def for_day(self, *, first_log: Optional[AttendanceLog], requested: AttendanceStatus) -> DayPath:
        if first_log is None:
            if requested == AttendanceStatus.BUS_IN:
                return BusPath()
            return WalkInPath()

        if first_log.status == AttendanceStatus.BUS_IN:
            return BusPath()
        if first_log.status == AttendanceStatus.ABSENT:
            return AbsentDay()
        return WalkInPath()
