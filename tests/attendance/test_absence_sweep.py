from __future__ import annotations

import threading
import time

import pytest

from school_attendance.core.enums import AttendanceMode, AttendanceStatus as S, EntityType, Role
from school_attendance.core.exceptions import AuthorizationError, InvalidTransitionError


def test_sweep_marks_only_students_without_logs(attendance_service, logs, notifier, at, today):
    attendance_service.mark_attendance("SCH001", Role.SCHOOL, "STU001", S.IN, now=at(minutes=0))
    attendance_service.mark_attendance("SCH001", Role.SCHOOL, "STU002", S.BUS_IN, now=at(minutes=0))
    notifier.sent.clear()

    count = attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=8))

    assert count == 1
    absent = logs.logs_for_entity_on_day("STU003", today)
    assert [(log.status, log.mode) for log in absent] == [(S.ABSENT, AttendanceMode.SYSTEM)]
    assert [topic for topic, _ in notifier.sent] == ["student:STU003"]


def test_sweep_rerun_is_a_noop(attendance_service, at):
    attendance_service.mark_attendance("SCH001", Role.SCHOOL, "STU001", S.IN, now=at(minutes=0))

    assert attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=8)) == 2
    assert attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=9)) == 0


def test_sweep_returns_zero_when_everyone_is_present(attendance_service, logs, at):
    for student_id in ("STU001", "STU002", "STU003"):
        attendance_service.mark_attendance("SCH001", Role.SCHOOL, student_id, S.IN, now=at(minutes=0))

    assert attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=8)) == 0
    assert all(log.status != S.ABSENT for log in logs.logs)


def test_sweep_stays_inside_the_school(attendance_service, logs, at):
    attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=8))

    assert {log.school_id for log in logs.logs} == {"SCH001"}
    assert "STU900" not in {log.entity_id for log in logs.logs}


def test_absent_student_cannot_check_in_later_that_day(attendance_service, logs, at, today):
    attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=1))

    with pytest.raises(InvalidTransitionError, match="was marked ABSENT today"):
        attendance_service.mark_attendance("SCH001", Role.SCHOOL, "STU001", S.IN, now=at(hours=2))

    assert [log.status for log in logs.logs_for_entity_on_day("STU001", today)] == [S.ABSENT]


def test_sweep_requires_school_staff(attendance_service, logs, fixed_now):
    with pytest.raises(AuthorizationError):
        attendance_service.sweep_absent("SCH001", Role.STUDENT, now=fixed_now)

    assert logs.logs == []


def test_sweep_waits_for_a_scan_in_progress_and_skips_that_student(
    attendance_service, directory_service, logs, at, today
):
    subject = directory_service.resolve(EntityType.STUDENT, "STU001", "SCH001")
    swept = []
    sweeper = threading.Thread(
        target=lambda: swept.append(attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(minutes=1)))
    )

    def choose_in(last):
        # Let the sweep read the empty day, then block on this student's lock.
        sweeper.start()
        deadline = time.monotonic() + 5
        while logs.lock_calls.count(("STU001", today)) < 2 and time.monotonic() < deadline:
            time.sleep(0.005)
        return S.IN

    attendance_service.mark_subject(subject, choose_in, AttendanceMode.QR, now=at(minutes=0))
    sweeper.join(timeout=5)

    assert swept == [2]
    assert [log.status for log in logs.logs_for_entity_on_day("STU001", today)] == [S.IN]
    assert all(log.status == S.ABSENT for log in logs.logs if log.entity_id != "STU001")


def test_sweep_checks_each_student_under_its_lock(attendance_service, logs, at, today):
    attendance_service.sweep_absent("SCH001", Role.SCHOOL, now=at(hours=8))

    assert sorted(logs.lock_calls) == [("STU001", today), ("STU002", today), ("STU003", today)]
