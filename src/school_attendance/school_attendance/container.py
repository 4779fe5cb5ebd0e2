from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.service import AnalyticsService
from .attendance.factory import DayPathFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceLogRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_NOTIFY_QUEUE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .directory.repository import DirectoryRepository
from .directory.service import DirectoryService
from .notifications.broadcaster import AttendanceBroadcaster
from .payments.mysql_payment_repository import MySQLPaymentProofRepository
from .payments.repository import PaymentProofRepository
from .payments.service import PaymentProofService
from .scanning.service import ScanService
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    directory_repo: DirectoryRepository
    attendance_repo: AttendanceLogRepository
    payments_repo: PaymentProofRepository

    broadcaster: AttendanceBroadcaster

    directory_service: DirectoryService
    attendance_service: AttendanceService
    scan_service: ScanService
    analytics_service: AnalyticsService
    payment_service: PaymentProofService
    auth_service: AuthService


def assemble(
    *,
    directory_repo: DirectoryRepository,
    attendance_repo: AttendanceLogRepository,
    payments_repo: PaymentProofRepository,
    conn: Optional[DatabaseConnection] = None,
    location_code: str = "",
    notify_queue_size: int = DEFAULT_NOTIFY_QUEUE_SIZE,
) -> Container:
    """Wire services on top of whatever repositories are given (MySQL or in-memory)."""

    broadcaster = AttendanceBroadcaster(queue_size=notify_queue_size)

    directory_service = DirectoryService(directory_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        directory_service,
        notifier=broadcaster,
        path_factory=DayPathFactory(),
    )

    return Container(
        conn=conn,
        directory_repo=directory_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        broadcaster=broadcaster,
        directory_service=directory_service,
        attendance_service=attendance_service,
        scan_service=ScanService(attendance_service, directory_service, location_code=location_code),
        analytics_service=AnalyticsService(attendance_repo, directory_service),
        payment_service=PaymentProofService(payments_repo, directory_service),
        auth_service=AuthService(directory_repo),
    )


def build_container(
    *,
    db_config: dict,
    location_code: str = "",
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT_SECONDS,
    notify_queue_size: int = DEFAULT_NOTIFY_QUEUE_SIZE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        directory_repo=MySQLDirectoryRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn, lock_timeout=lock_timeout),
        payments_repo=MySQLPaymentProofRepository(conn),
        conn=conn,
        location_code=location_code,
        notify_queue_size=notify_queue_size,
    )
