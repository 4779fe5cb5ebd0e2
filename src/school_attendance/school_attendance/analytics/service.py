from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceLog
from ..attendance.repository import AttendanceLogRepository
from ..common.datetime_utils import month_start, utc_day, utc_now
from ..core.constants import DEFAULT_RECENT_LOGS
from ..core.enums import PRESENCE_STATUSES, AttendanceStatus, EntityType
from ..core.exceptions import NotFoundError
from ..directory.service import DirectoryService
from .model import DailySummary, StudentAnalytics


def split_days(logs: Sequence[AttendanceLog]) -> tuple[set[date], set[date]]:
    """(present days, absent days). Any presence log on a day outweighs an ABSENT."""

    present: set[date] = set()
    absent: set[date] = set()
    for log in logs:
        if log.status in PRESENCE_STATUSES:
            present.add(log.day)
        elif log.status == AttendanceStatus.ABSENT:
            absent.add(log.day)
    return present, absent - present


class AnalyticsService:
    """Read-only views over the attendance log."""

    def __init__(self, logs: AttendanceLogRepository, directory: DirectoryService, *, recent_limit: int = DEFAULT_RECENT_LOGS):
        self._logs = logs
        self._directory = directory
        self._recent_limit = int(recent_limit)

    def student_analytics(self, student_id: str, *, now: Optional[datetime] = None) -> StudentAnalytics:
        self._directory.get_student(student_id)
        history = self._logs.logs_for_entity(student_id, EntityType.STUDENT)
        present, absent = split_days(history)

        today = utc_day(now or utc_now())
        todays = sorted((log for log in history if log.day == today), key=lambda log: log.sort_key)
        last_entry = next((log for log in reversed(todays) if log.status == AttendanceStatus.IN), None)
        last_exit = next((log for log in reversed(todays) if log.status == AttendanceStatus.OUT), None)

        return StudentAnalytics(
            student_id=student_id,
            present_count=len(present),
            absent_count=len(absent),
            last_entry=last_entry,
            last_exit=last_exit,
            recent_logs=tuple(history[: self._recent_limit]),
        )

    def teacher_monthly_report(self, teacher_id: str, *, now: Optional[datetime] = None) -> Sequence[AttendanceLog]:
        if self._directory.find(EntityType.TEACHER, teacher_id) is None:
            raise NotFoundError("Teacher ID not found.")
        since = month_start(now or utc_now())
        return [log for log in self._logs.logs_for_entity(teacher_id, EntityType.TEACHER) if log.day >= since]

    def school_daily_summary(self, school_id: str, day: date) -> DailySummary:
        logs = [log for log in self._logs.logs_for_school_on_day(school_id, day) if log.entity_type == EntityType.STUDENT]
        present_ids = {log.entity_id for log in logs if log.status in PRESENCE_STATUSES}
        absent_ids = {log.entity_id for log in logs if log.status == AttendanceStatus.ABSENT} - present_ids

        students = self._directory.list_by_school(school_id, EntityType.STUDENT)
        known = {s.entity_id for s in students}
        present = len(present_ids & known)
        absent = len(absent_ids & known)

        return DailySummary(
            school_id=school_id,
            day=day,
            present=present,
            absent=absent,
            unmarked=len(known) - present - absent,
        )
