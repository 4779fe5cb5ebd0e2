from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from school_attendance.analytics.service import AnalyticsService
from school_attendance.attendance.model import AttendanceLog
from school_attendance.attendance.service import AttendanceService
from school_attendance.container import assemble
from school_attendance.core.enums import PaymentProofStatus, Role, SchoolStatus
from school_attendance.directory.model import Account, Bus, Guard, School, Student, Teacher
from school_attendance.directory.service import DirectoryService
from school_attendance.payments.model import PaymentProof
from school_attendance.payments.service import PaymentProofService
from school_attendance.scanning.service import ScanService
from school_attendance.users.service import AuthService

LOCATION_CODE = "TEST_LOCATION"


class InMemoryDirectory:
    def __init__(self):
        self.schools: dict[str, School] = {}
        self.students: dict[str, Student] = {}
        self.teachers: dict[str, Teacher] = {}
        self.guards: dict[str, Guard] = {}
        self.buses: dict[str, Bus] = {}
        self.accounts: dict[tuple, Account] = {}

    def add_account(self, role: Role, login_id: str, name: str, school_id: Optional[str], password: str, is_active=True):
        self.accounts[(role, login_id)] = Account(
            account_id=login_id,
            name=name,
            role=role,
            school_id=school_id,
            password_hash=generate_password_hash(password, method="pbkdf2:sha256:1000"),
            is_active=is_active,
        )

    def get_school(self, school_id):
        return self.schools.get(school_id)

    def get_student(self, student_id):
        return self.students.get(student_id)

    def get_teacher(self, teacher_id):
        return self.teachers.get(teacher_id)

    def get_guard(self, guard_id):
        return self.guards.get(guard_id)

    def get_bus(self, bus_id):
        return self.buses.get(bus_id)

    def list_students(self, school_id):
        return [s for s in self.students.values() if s.school_id == school_id]

    def list_teachers(self, school_id):
        return [t for t in self.teachers.values() if t.school_id == school_id]

    def get_account(self, role, login_id):
        return self.accounts.get((role, login_id))

    def add_fees_paid(self, student_id, amount):
        s = self.students.get(student_id)
        if not s:
            return False
        self.students[student_id] = replace(s, fees_paid=s.fees_paid + amount)
        return True

    def delete_student(self, student_id):
        return self.students.pop(student_id, None) is not None


class InMemoryAttendanceLogs:
    def __init__(self):
        self.logs: list[AttendanceLog] = []
        self._seq = 0
        self._guard = threading.Lock()
        self._locks: dict[tuple, threading.Lock] = {}
        self.lock_calls: list[tuple] = []

    def _build(self, draft) -> AttendanceLog:
        self._seq += 1
        return AttendanceLog(
            log_id=uuid.uuid4().hex,
            seq=self._seq,
            entity_id=draft.entity_id,
            entity_name=draft.entity_name,
            entity_type=draft.entity_type,
            school_id=draft.school_id,
            timestamp=draft.timestamp,
            status=draft.status,
            mode=draft.mode,
        )

    def append(self, draft):
        with self._guard:
            log = self._build(draft)
            self.logs.append(log)
            return log

    def logs_for_entity_on_day(self, entity_id, day):
        found = [log for log in self.logs if log.entity_id == entity_id and log.day == day]
        return sorted(found, key=lambda log: log.sort_key)

    def logs_for_school_on_day(self, school_id, day):
        found = [log for log in self.logs if log.school_id == school_id and log.day == day]
        return sorted(found, key=lambda log: log.sort_key, reverse=True)

    def logs_for_entity(self, entity_id, entity_type=None):
        found = [
            log
            for log in self.logs
            if log.entity_id == entity_id and (entity_type is None or log.entity_type == entity_type)
        ]
        return sorted(found, key=lambda log: log.sort_key, reverse=True)

    def delete_all_for_entity(self, entity_id):
        before = len(self.logs)
        self.logs = [log for log in self.logs if log.entity_id != entity_id]
        return before - len(self.logs)

    @contextmanager
    def entity_day_lock(self, entity_id, day):
        with self._guard:
            lock = self._locks.setdefault((entity_id, day), threading.Lock())
        self.lock_calls.append((entity_id, day))
        with lock:
            yield


class InMemoryPaymentProofs:
    def __init__(self):
        self.proofs: dict[str, PaymentProof] = {}

    def create(self, proof):
        created = PaymentProof(
            proof_id=uuid.uuid4().hex,
            school_id=proof.school_id,
            student_id=proof.student_id,
            student_name=proof.student_name,
            amount=proof.amount,
            payer_name=proof.payer_name,
            transaction_id=proof.transaction_id,
            submitted_at=proof.submitted_at,
            status=PaymentProofStatus.PENDING,
        )
        self.proofs[created.proof_id] = created
        return created

    def get(self, proof_id):
        return self.proofs.get(proof_id)

    def list_for_school(self, school_id, *, limit=200):
        found = [p for p in self.proofs.values() if p.school_id == school_id]
        return sorted(found, key=lambda p: p.submitted_at, reverse=True)[:limit]

    def decide(self, *, proof_id, status, decided_by):
        p = self.proofs.get(proof_id)
        if not p or p.status != PaymentProofStatus.PENDING:
            return False
        self.proofs[proof_id] = replace(p, status=status, decided_by=decided_by)
        return True


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple] = []
        self.fail = False

    def notify(self, topic, payload):
        if self.fail:
            raise RuntimeError("push channel down")
        self.sent.append((topic, payload))


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def at(fixed_now):
    """Times later on the same day: at(minutes=5)."""

    def _at(**delta) -> datetime:
        return fixed_now + timedelta(**delta)

    return _at


@pytest.fixture
def directory() -> InMemoryDirectory:
    d = InMemoryDirectory()
    d.schools["SCH001"] = School(school_id="SCH001", name="Greenfield Public School")
    d.schools["SCH002"] = School(school_id="SCH002", name="Riverside Academy")
    d.schools["SCH003"] = School(school_id="SCH003", name="Closed School", status=SchoolStatus.LOCKED)

    d.students["STU001"] = Student(student_id="STU001", school_id="SCH001", name="Aarav Sharma", total_fees=24000)
    d.students["STU002"] = Student(student_id="STU002", school_id="SCH001", name="Diya Patel", total_fees=24000)
    d.students["STU003"] = Student(student_id="STU003", school_id="SCH001", name="Ishaan Gupta")
    d.students["STU900"] = Student(student_id="STU900", school_id="SCH002", name="Kabir Rao")
    d.teachers["TCH001"] = Teacher(teacher_id="TCH001", school_id="SCH001", name="Meera Iyer", subject="Mathematics")
    d.guards["GRD001"] = Guard(guard_id="GRD001", school_id="SCH001", name="Main Gate")
    d.buses["BUS001"] = Bus(bus_id="BUS001", school_id="SCH001", name="Route 1")
    d.buses["BUS900"] = Bus(bus_id="BUS900", school_id="SCH002", name="River Route")

    d.add_account(Role.SCHOOL, "SCH001", "Greenfield Public School", "SCH001", "school123")
    d.add_account(Role.SCHOOL, "SCH003", "Closed School", "SCH003", "school123", is_active=False)
    d.add_account(Role.STUDENT, "STU001", "Aarav Sharma", "SCH001", "student123")
    d.add_account(Role.ACADEMIC_WORK, "AW001", "Office Desk", "SCH001", "academic123")
    d.add_account(Role.GUARD, "GRD009", "Night Gate", "SCH003", "guard123")
    return d


@pytest.fixture
def logs() -> InMemoryAttendanceLogs:
    return InMemoryAttendanceLogs()


@pytest.fixture
def proofs() -> InMemoryPaymentProofs:
    return InMemoryPaymentProofs()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def directory_service(directory) -> DirectoryService:
    return DirectoryService(directory)


@pytest.fixture
def attendance_service(logs, directory_service, notifier) -> AttendanceService:
    return AttendanceService(logs, directory_service, notifier=notifier)


@pytest.fixture
def scan_service(attendance_service, directory_service) -> ScanService:
    return ScanService(attendance_service, directory_service, location_code=LOCATION_CODE)


@pytest.fixture
def analytics_service(logs, directory_service) -> AnalyticsService:
    return AnalyticsService(logs, directory_service)


@pytest.fixture
def payment_service(proofs, directory_service) -> PaymentProofService:
    return PaymentProofService(proofs, directory_service)


@pytest.fixture
def auth_service(directory) -> AuthService:
    return AuthService(directory)


@pytest.fixture
def container(directory, logs, proofs):
    return assemble(
        directory_repo=directory,
        attendance_repo=logs,
        payments_repo=proofs,
        location_code=LOCATION_CODE,
        notify_queue_size=10,
    )


@pytest.fixture
def app(container, monkeypatch):
    from school_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    """Write a session directly, as POST /api/login would."""

    def _login(role: Role, user_id: str, school_id: Optional[str] = "SCH001", name: str = "Tester"):
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role.value
            sess["school_id"] = school_id
            sess["name"] = name
        return client

    return _login
