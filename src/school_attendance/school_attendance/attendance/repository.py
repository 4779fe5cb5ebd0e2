from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import EntityType
from .model import AttendanceLog, AttendanceLogDraft


class AttendanceLogRepository(Protocol):
    """Append-only store of attendance events.

    Only AttendanceService writes here; every write has passed its validation.
    """

    def append(self, draft: AttendanceLogDraft) -> AttendanceLog:
        raise NotImplementedError

    def logs_for_entity_on_day(self, entity_id: str, day: date) -> Sequence[AttendanceLog]:
        """Oldest first, ordered by (timestamp, seq)."""

        raise NotImplementedError

    def logs_for_school_on_day(self, school_id: str, day: date) -> Sequence[AttendanceLog]:
        """Most recent first."""

        raise NotImplementedError

    def logs_for_entity(self, entity_id: str, entity_type: Optional[EntityType] = None) -> Sequence[AttendanceLog]:
        """Full history, most recent first."""

        raise NotImplementedError

    def delete_all_for_entity(self, entity_id: str) -> int:
        raise NotImplementedError

    def entity_day_lock(self, entity_id: str, day: date) -> ContextManager[None]:
        """Serialise read-validate-append for one entity on one day."""

        raise NotImplementedError
