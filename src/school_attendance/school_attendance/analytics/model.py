from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceLog


@dataclass(frozen=True)
class StudentAnalytics:
    student_id: str
    present_count: int
    absent_count: int
    last_entry: Optional[AttendanceLog]
    last_exit: Optional[AttendanceLog]
    recent_logs: Sequence[AttendanceLog] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "present_count": self.present_count,
            "absent_count": self.absent_count,
            "last_entry": self.last_entry.to_dict() if self.last_entry else None,
            "last_exit": self.last_exit.to_dict() if self.last_exit else None,
            "recent_logs": [log.to_dict() for log in self.recent_logs],
        }


@dataclass(frozen=True)
class DailySummary:
    school_id: str
    day: date
    present: int
    absent: int
    unmarked: int

    @property
    def total(self) -> int:
        return self.present + self.absent + self.unmarked

    def to_dict(self) -> dict:
        return {
            "school_id": self.school_id,
            "date": self.day.strftime("%Y-%m-%d"),
            "present": self.present,
            "absent": self.absent,
            "unmarked": self.unmarked,
            "total": self.total,
        }
