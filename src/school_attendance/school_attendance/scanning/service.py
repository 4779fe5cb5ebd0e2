from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceLog
from ..attendance.service import AttendanceService, require_marking_role
from ..core.enums import AttendanceMode, AttendanceStatus, EntityType, Role
from ..core.exceptions import AuthorizationError, InvalidTransitionError, MalformedInputError, ValidationError
from ..directory.model import AttendanceSubject
from ..directory.service import DirectoryService
from .model import QrPayload, ScanResult

logger = logging.getLogger(__name__)


def parse_qr_payload(raw: str) -> QrPayload:
    """Decode the JSON printed on an ID card.

    Accepts ``{"student_id", "school_id"}`` or ``{"teacher_id", "school_id"}``.
    """

    try:
        data = json.loads(raw or "")
    except (TypeError, ValueError):
        raise MalformedInputError("Invalid QR code format.")
    if not isinstance(data, dict):
        raise MalformedInputError("Invalid QR code format.")

    school_id = data.get("school_id")
    if data.get("student_id"):
        entity_type, entity_id = EntityType.STUDENT, data["student_id"]
    elif data.get("teacher_id"):
        entity_type, entity_id = EntityType.TEACHER, data["teacher_id"]
    else:
        raise MalformedInputError("Invalid QR code format.")
    if not school_id:
        raise MalformedInputError("Invalid QR code format.")

    return QrPayload(entity_type=entity_type, entity_id=str(entity_id), school_id=str(school_id))


def _school_scan_status(name: str):
    def choose(last: Optional[AttendanceLog]) -> AttendanceStatus:
        if last is None or last.status == AttendanceStatus.BUS_IN:
            return AttendanceStatus.IN
        if last.status == AttendanceStatus.IN:
            return AttendanceStatus.OUT
        if last.status in (AttendanceStatus.OUT, AttendanceStatus.BUS_OUT):
            raise InvalidTransitionError(
                f"{name} has already left for the day.",
                last_status=last.status,
                requested_status=AttendanceStatus.IN,
            )
        return AttendanceStatus.IN

    return choose


def _bus_scan_status(name: str):
    # Bus staff only scan at the very start of the day or after school check-out.
    def choose(last: Optional[AttendanceLog]) -> AttendanceStatus:
        if last is None:
            return AttendanceStatus.BUS_IN
        if last.status == AttendanceStatus.OUT:
            return AttendanceStatus.BUS_OUT
        raise InvalidTransitionError(
            f"Invalid action. Last status for {name} was {last.status.value}.",
            last_status=last.status,
            requested_status=AttendanceStatus.BUS_OUT,
        )

    return choose


def _self_scan_status(last: Optional[AttendanceLog]) -> AttendanceStatus:
    if last is not None and last.status == AttendanceStatus.OUT:
        raise InvalidTransitionError(
            "You have already been marked OUT for the day.",
            last_status=last.status,
            requested_status=AttendanceStatus.OUT,
        )
    return AttendanceStatus.IN if last is None else AttendanceStatus.OUT


class ScanService:
    """Turns a scanned QR code into a status and hands it to AttendanceService."""

    def __init__(self, attendance: AttendanceService, directory: DirectoryService, *, location_code: str = ""):
        self._attendance = attendance
        self._directory = directory
        self._location_code = location_code

    def mark_by_qr(
        self,
        school_id: str,
        caller_role: Role,
        raw: str,
        *,
        now: Optional[datetime] = None,
    ) -> ScanResult:
        payload = parse_qr_payload(raw)
        require_marking_role(caller_role, payload.entity_type)
        if payload.school_id != school_id:
            raise AuthorizationError("This QR code is not for your school.")

        subject = self._directory.resolve(payload.entity_type, payload.entity_id, school_id)
        log = self._attendance.mark_subject(subject, _school_scan_status(subject.name), AttendanceMode.QR, now=now)
        return ScanResult(log=log, entity_name=subject.name)

    def guard_scan(self, guard_id: str, raw: str, *, now: Optional[datetime] = None) -> ScanResult:
        """Gate scan: same rules as a school scan, scoped to the guard's school."""

        guard = self._directory.get_guard(guard_id)
        logger.debug("Guard %s scanning for school %s", guard_id, guard.school_id)
        return self.mark_by_qr(guard.school_id, Role.SCHOOL, raw, now=now)

    def bus_scan(self, bus_id: str, raw: str, *, now: Optional[datetime] = None) -> ScanResult:
        bus = self._directory.get_bus(bus_id)
        payload = parse_qr_payload(raw)
        if payload.entity_type != EntityType.STUDENT:
            raise MalformedInputError("Invalid QR code. Not a student ID.")
        if payload.school_id != bus.school_id:
            raise AuthorizationError("This student is not from your assigned school.")

        subject = self._directory.resolve(EntityType.STUDENT, payload.entity_id, bus.school_id)
        log = self._attendance.mark_subject(subject, _bus_scan_status(subject.name), AttendanceMode.QR, now=now)
        return ScanResult(log=log, entity_name=subject.name)

    def self_scan(self, student_id: str, raw: str, *, now: Optional[datetime] = None) -> ScanResult:
        """Student scans the school's location code (or their own card) from their device."""

        student = self._directory.get_student(student_id)
        if not self._accepts_self_scan(student_id, raw):
            raise ValidationError("Invalid QR code.")

        subject = AttendanceSubject.from_student(student)
        log = self._attendance.mark_subject(subject, _self_scan_status, AttendanceMode.QR, now=now)
        return ScanResult(log=log, entity_name=subject.name)

    def _accepts_self_scan(self, student_id: str, raw: str) -> bool:
        if self._location_code and raw == self._location_code:
            return True
        try:
            payload = parse_qr_payload(raw)
        except MalformedInputError:
            return False
        return payload.entity_type == EntityType.STUDENT and payload.entity_id == student_id

