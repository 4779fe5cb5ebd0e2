from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import utc_day, utc_now
from ..core.constants import ATTENDANCE_UPDATE
from ..core.enums import AttendanceMode, AttendanceStatus, EntityType, Role
from ..core.exceptions import AuthorizationError
from ..directory.model import AttendanceSubject
from ..directory.service import DirectoryService
from ..notifications.notifier import Notifier, NullNotifier, student_topic
from .factory import DayPathFactory
from .model import AttendanceLog, AttendanceLogDraft
from .repository import AttendanceLogRepository

logger = logging.getLogger(__name__)

MARKING_ROLES = frozenset({Role.SCHOOL, Role.ACADEMIC_WORK})

# Last log of the day (None if there is none) -> status to record.
StatusChooser = Callable[[Optional[AttendanceLog]], AttendanceStatus]


def require_marking_role(caller_role: Role, entity_type: EntityType = EntityType.STUDENT) -> None:
    """Only the school and its academic staff mark attendance; only the school marks teachers."""

    if caller_role not in MARKING_ROLES:
        raise AuthorizationError("Access denied. You do not have the required permissions.")
    if caller_role == Role.ACADEMIC_WORK and entity_type == EntityType.TEACHER:
        raise AuthorizationError("You do not have permission to mark teacher attendance.")


class AttendanceService:
    """The only writer of attendance logs.

    Every write is read-validate-append under a per-entity-per-day lock, so two scans
    of the same person cannot both pass validation against the same last log.
    """

    def __init__(
        self,
        logs: AttendanceLogRepository,
        directory: DirectoryService,
        *,
        notifier: Optional[Notifier] = None,
        path_factory: Optional[DayPathFactory] = None,
    ):
        self._logs = logs
        self._directory = directory
        self._notifier = notifier or NullNotifier()
        self._factory = path_factory or DayPathFactory()

    def mark_attendance(
        self,
        school_id: str,
        caller_role: Role,
        entity_id: str,
        status: AttendanceStatus,
        mode: AttendanceMode = AttendanceMode.MANUAL,
        entity_type: EntityType = EntityType.STUDENT,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceLog:
        require_marking_role(caller_role, entity_type)
        subject = self._directory.resolve(entity_type, entity_id, school_id)
        return self.mark_subject(subject, lambda _last: status, mode, now=now)

    def mark_subject(
        self,
        subject: AttendanceSubject,
        choose_status: StatusChooser,
        mode: AttendanceMode,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceLog:
        """Append the status picked by ``choose_status`` from today's last log.

        Used by scan entry points that infer the status. The subject must already be
        resolved and the caller authorised. The chooser runs under the entity lock and
        may raise to refuse the scan; its answer is still checked against the day path.
        """

        now = now or utc_now()
        today = utc_day(now)

        with self._logs.entity_day_lock(subject.entity_id, today):
            todays = self._logs.logs_for_entity_on_day(subject.entity_id, today)
            first = todays[0] if todays else None
            last = todays[-1] if todays else None

            status = choose_status(last)
            path = self._factory.for_day(first_log=first, requested=status)
            try:
                decision = path.decide(last=last, requested=status, subject_name=subject.name)
            except Exception as e:
                logger.info("Rejected %s for %s %s: %s", status.value, subject.entity_type.value, subject.entity_id, e)
                raise

            if decision.is_redundant:
                logger.warning(
                    "Redundant scan for %s (%s). Current status is already %s.",
                    subject.name,
                    subject.entity_id,
                    status.value,
                )
                return decision.existing

            log = self._logs.append(
                AttendanceLogDraft(
                    entity_id=subject.entity_id,
                    entity_name=subject.name,
                    entity_type=subject.entity_type,
                    school_id=subject.school_id,
                    timestamp=now,
                    status=decision.status,
                    mode=mode,
                )
            )

        logger.info(
            "Attendance %s for %s %s via %s (%s path)",
            log.status.value,
            log.entity_type.value,
            log.entity_id,
            log.mode.value,
            path.name,
        )
        self._publish(log)
        return log

    def sweep_absent(self, school_id: str, caller_role: Role, *, now: Optional[datetime] = None) -> int:
        """Mark every student of the school with no log today as ABSENT.

        The present set is recomputed on each call, so re-running only touches students
        who still have nothing recorded for the day. Each candidate is re-checked under
        its entity lock, so a scan racing the sweep wins and the student is skipped.
        """

        require_marking_role(caller_role)
        now = now or utc_now()
        today = utc_day(now)

        seen = {log.entity_id for log in self._logs.logs_for_school_on_day(school_id, today)}
        missing = [s for s in self._directory.list_by_school(school_id, EntityType.STUDENT) if s.entity_id not in seen]

        written = []
        for subject in missing:
            log = self._append_absent(subject, today, now)
            if log is not None:
                written.append(log)

        logger.info("Absence sweep for school %s marked %d student(s) absent", school_id, len(written))
        for log in written:
            self._publish(log)
        return len(written)

    def _append_absent(self, subject: AttendanceSubject, today: date, now: datetime) -> Optional[AttendanceLog]:
        with self._logs.entity_day_lock(subject.entity_id, today):
            if self._logs.logs_for_entity_on_day(subject.entity_id, today):
                logger.info("Sweep skipped %s: attendance recorded meanwhile", subject.entity_id)
                return None
            return self._logs.append(
                AttendanceLogDraft(
                    entity_id=subject.entity_id,
                    entity_name=subject.name,
                    entity_type=EntityType.STUDENT,
                    school_id=subject.school_id,
                    timestamp=now,
                    status=AttendanceStatus.ABSENT,
                    mode=AttendanceMode.SYSTEM,
                )
            )

    def _publish(self, log: AttendanceLog) -> None:
        if log.entity_type != EntityType.STUDENT:
            return
        try:
            self._notifier.notify(
                student_topic(log.entity_id),
                {"type": ATTENDANCE_UPDATE, "studentId": log.entity_id, "log": log.to_dict()},
            )
        except Exception:
            logger.exception("Notification failed for log %s", log.log_id)

    def get_todays_logs(self, school_id: str, caller_role: Role, *, now: Optional[datetime] = None) -> Sequence[AttendanceLog]:
        require_marking_role(caller_role)
        return self._logs.logs_for_school_on_day(school_id, utc_day(now or utc_now()))

    def get_logs_for_date(
        self,
        school_id: str,
        caller_role: Role,
        day: date,
        *,
        entity_type: Optional[EntityType] = EntityType.STUDENT,
    ) -> Sequence[AttendanceLog]:
        require_marking_role(caller_role)
        logs = self._logs.logs_for_school_on_day(school_id, day)
        if entity_type is None:
            return logs
        return [log for log in logs if log.entity_type == entity_type]

    def get_today_for_entity(self, entity_id: str, *, now: Optional[datetime] = None) -> Sequence[AttendanceLog]:
        return self._logs.logs_for_entity_on_day(entity_id, utc_day(now or utc_now()))

    def get_history(self, entity_id: str, entity_type: Optional[EntityType] = None) -> Sequence[AttendanceLog]:
        return self._logs.logs_for_entity(entity_id, entity_type)

    def purge_entity(self, entity_id: str) -> int:
        removed = self._logs.delete_all_for_entity(entity_id)
        logger.info("Deleted %d attendance log(s) of removed entity %s", removed, entity_id)
        return removed
