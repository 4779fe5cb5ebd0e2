from __future__ import annotations

from datetime import datetime, timezone

import pytest

from school_attendance.attendance.factory import DayPathFactory
from school_attendance.attendance.model import AttendanceLog
from school_attendance.attendance.strategies.absent_strategy import AbsentDay
from school_attendance.attendance.strategies.bus_strategy import BusPath
from school_attendance.attendance.strategies.walk_in_strategy import WalkInPath
from school_attendance.core.enums import AttendanceMode, AttendanceStatus as S, EntityType
from school_attendance.core.exceptions import InvalidTransitionError


def _log(status: S, seq: int = 1) -> AttendanceLog:
    return AttendanceLog(
        log_id=f"log-{seq}",
        seq=seq,
        entity_id="STU001",
        entity_name="Aarav Sharma",
        entity_type=EntityType.STUDENT,
        school_id="SCH001",
        timestamp=datetime(2026, 3, 2, 7, 0, tzinfo=timezone.utc),
        status=status,
        mode=AttendanceMode.MANUAL,
    )


def test_factory_without_logs_follows_requested_status():
    factory = DayPathFactory()

    assert isinstance(factory.for_day(first_log=None, requested=S.BUS_IN), BusPath)
    assert isinstance(factory.for_day(first_log=None, requested=S.IN), WalkInPath)
    assert isinstance(factory.for_day(first_log=None, requested=S.OUT), WalkInPath)


def test_factory_first_log_fixes_the_path():
    factory = DayPathFactory()

    assert isinstance(factory.for_day(first_log=_log(S.BUS_IN), requested=S.OUT), BusPath)
    assert isinstance(factory.for_day(first_log=_log(S.IN), requested=S.BUS_OUT), WalkInPath)
    assert isinstance(factory.for_day(first_log=_log(S.ABSENT), requested=S.IN), AbsentDay)


@pytest.mark.parametrize(
    "last, requested",
    [(None, S.IN), (S.IN, S.OUT)],
)
def test_walk_in_valid_transitions(last, requested):
    decision = WalkInPath().decide(last=_log(last) if last else None, requested=requested, subject_name="Aarav")

    assert decision.status == requested
    assert not decision.is_redundant


@pytest.mark.parametrize(
    "last, requested",
    [(None, S.BUS_IN), (S.BUS_IN, S.IN), (S.IN, S.OUT), (S.OUT, S.BUS_OUT)],
)
def test_bus_valid_transitions(last, requested):
    decision = BusPath().decide(last=_log(last) if last else None, requested=requested, subject_name="Aarav")

    assert decision.status == requested


def test_out_cannot_be_first_action():
    with pytest.raises(InvalidTransitionError) as exc:
        WalkInPath().decide(last=None, requested=S.OUT, subject_name="Aarav")

    assert str(exc.value) == "Cannot mark OUT as the first action of the day."
    assert exc.value.last_status is None
    assert exc.value.requested_status == S.OUT


def test_bus_out_cannot_be_first_action():
    with pytest.raises(InvalidTransitionError, match="Cannot mark BUS_OUT as the first action of the day."):
        BusPath().decide(last=None, requested=S.BUS_OUT, subject_name="Aarav")


@pytest.mark.parametrize("status", [S.IN, S.BUS_IN])
def test_repeated_entry_status_is_redundant(status):
    last = _log(status)
    path = BusPath() if status == S.BUS_IN else WalkInPath()

    decision = path.decide(last=last, requested=status, subject_name="Aarav")

    assert decision.is_redundant
    assert decision.existing is last


def test_absent_is_never_accepted_from_callers():
    with pytest.raises(InvalidTransitionError, match="absence sweep"):
        WalkInPath().decide(last=None, requested=S.ABSENT, subject_name="Aarav")


def test_walk_in_rejects_bus_actions():
    with pytest.raises(InvalidTransitionError) as exc:
        WalkInPath().decide(last=_log(S.IN), requested=S.BUS_OUT, subject_name="Aarav")

    assert str(exc.value) == "Cannot perform bus action. Aarav did not check in with the bus this morning."


def test_walk_in_out_is_terminal():
    with pytest.raises(InvalidTransitionError, match="Aarav has already completed the attendance cycle for today."):
        WalkInPath().decide(last=_log(S.OUT), requested=S.IN, subject_name="Aarav")

    with pytest.raises(InvalidTransitionError, match="already completed the attendance cycle"):
        WalkInPath().decide(last=_log(S.OUT), requested=S.OUT, subject_name="Aarav")


def test_bus_out_is_terminal():
    with pytest.raises(InvalidTransitionError, match="Aarav has already completed the bus attendance cycle for today."):
        BusPath().decide(last=_log(S.BUS_OUT), requested=S.IN, subject_name="Aarav")


def test_bus_path_reports_expected_status():
    with pytest.raises(InvalidTransitionError) as exc:
        BusPath().decide(last=_log(S.BUS_IN), requested=S.OUT, subject_name="Aarav")

    assert str(exc.value) == "Invalid sequence for bus user. After BUS_IN, expected IN but got OUT."
    assert exc.value.last_status == S.BUS_IN


def test_bus_path_rejects_early_bus_out():
    with pytest.raises(InvalidTransitionError, match="After IN, expected OUT but got BUS_OUT"):
        BusPath().decide(last=_log(S.IN), requested=S.BUS_OUT, subject_name="Aarav")


def test_absent_day_rejects_everything():
    with pytest.raises(InvalidTransitionError) as exc:
        AbsentDay().decide(last=_log(S.ABSENT), requested=S.IN, subject_name="Aarav")

    assert str(exc.value) == "Aarav was marked ABSENT today. Expected nothing but got IN."
