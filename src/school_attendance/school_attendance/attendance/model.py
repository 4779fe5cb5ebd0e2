from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..common.datetime_utils import to_iso, utc_day
from ..core.enums import AttendanceMode, AttendanceStatus, EntityType


@dataclass(frozen=True)
class AttendanceLogDraft:
    """A log that passed validation and is waiting to be stored."""

    entity_id: str
    entity_name: str
    entity_type: EntityType
    school_id: str
    timestamp: datetime
    status: AttendanceStatus
    mode: AttendanceMode


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one immutable attendance event.

    ``seq`` is assigned by the store and breaks ties between equal timestamps.
    """

    log_id: str
    seq: int
    entity_id: str
    entity_name: str
    entity_type: EntityType
    school_id: str
    timestamp: datetime
    status: AttendanceStatus
    mode: AttendanceMode

    @property
    def day(self) -> date:
        return utc_day(self.timestamp)

    @property
    def sort_key(self) -> tuple:
        return (self.timestamp, self.seq)

    def to_dict(self) -> dict:
        return {
            "log_id": self.log_id,
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "entity_type": self.entity_type.value,
            "school_id": self.school_id,
            "timestamp": to_iso(self.timestamp),
            "status": self.status.value,
            "mode": self.mode.value,
        }
