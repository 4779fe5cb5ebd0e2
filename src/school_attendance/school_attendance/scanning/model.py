from __future__ import annotations

from dataclasses import dataclass

from ..attendance.model import AttendanceLog
from ..core.enums import EntityType


@dataclass(frozen=True)
class QrPayload:
    entity_type: EntityType
    entity_id: str
    school_id: str


@dataclass(frozen=True)
class ScanResult:
    log: AttendanceLog
    entity_name: str

    def to_dict(self) -> dict:
        return {"log": self.log.to_dict(), "entityName": self.entity_name}
