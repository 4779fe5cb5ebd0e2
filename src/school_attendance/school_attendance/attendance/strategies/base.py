from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

from ...core.enums import AttendanceStatus
from ...core.exceptions import InvalidTransitionError
from ..model import AttendanceLog

# Repeating one of these is an accidental double scan, not an error.
ENTRY_STATUSES = frozenset({AttendanceStatus.IN, AttendanceStatus.BUS_IN})
EXIT_STATUSES = frozenset({AttendanceStatus.OUT, AttendanceStatus.BUS_OUT})


@dataclass(frozen=True)
class TransitionDecision:
    status: AttendanceStatus
    existing: Optional[AttendanceLog] = None

    @property
    def is_redundant(self) -> bool:
        return self.existing is not None


class DayPath(ABC):
    """Strategy Pattern: the canonical sequence one person follows on one day."""

    name: str = ""

    @property
    @abstractmethod
    def next_status(self) -> Mapping[Optional[AttendanceStatus], AttendanceStatus]:
        """Last status of the day (None = no logs yet) -> the only valid next status."""

        raise NotImplementedError

    @abstractmethod
    def check_next(
        self,
        *,
        last_status: Optional[AttendanceStatus],
        requested: AttendanceStatus,
        subject_name: str,
    ) -> None:
        """Raise InvalidTransitionError unless ``requested`` may follow ``last_status``."""

        raise NotImplementedError

    def decide(
        self,
        *,
        last: Optional[AttendanceLog],
        requested: AttendanceStatus,
        subject_name: str,
    ) -> TransitionDecision:
        last_status = last.status if last else None

        if requested == AttendanceStatus.ABSENT:
            raise InvalidTransitionError(
                "ABSENT can only be recorded by the end-of-day absence sweep.",
                last_status=last_status,
                requested_status=requested,
            )

        if last is None and requested in EXIT_STATUSES:
            raise InvalidTransitionError(
                f"Cannot mark {requested.value} as the first action of the day.",
                last_status=None,
                requested_status=requested,
            )

        if last is not None and requested == last.status and requested in ENTRY_STATUSES:
            return TransitionDecision(status=requested, existing=last)

        self.check_next(last_status=last_status, requested=requested, subject_name=subject_name)
        return TransitionDecision(status=requested)

    def expected_after(self, last_status: Optional[AttendanceStatus]) -> Optional[AttendanceStatus]:
        return self.next_status.get(last_status)

    @staticmethod
    def _describe(status: Optional[AttendanceStatus]) -> str:
        return status.value if status else "nothing"
