from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles used for authorization."""

    SCHOOL = "school"
    STUDENT = "student"
    SUPER_ADMIN = "super_admin"
    GUARD = "guard"
    TEACHER = "teacher"
    BUS = "bus"
    ACADEMIC_WORK = "academic_work"


class EntityType(str, Enum):
    """Kinds of people whose attendance is tracked."""

    STUDENT = "student"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    IN = "IN"
    OUT = "OUT"
    ABSENT = "ABSENT"
    BUS_IN = "BUS_IN"
    BUS_OUT = "BUS_OUT"


class AttendanceMode(str, Enum):
    """Where a log came from. Provenance only, never used for validation."""

    MANUAL = "MANUAL"
    QR = "QR"
    FINGERPRINT = "FINGERPRINT"
    SYSTEM = "SYSTEM"


class SchoolStatus(str, Enum):
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"


class PaymentProofStatus(str, Enum):
    """Approval flow of a fee payment proof."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


PRESENCE_STATUSES = frozenset(
    {AttendanceStatus.IN, AttendanceStatus.OUT, AttendanceStatus.BUS_IN, AttendanceStatus.BUS_OUT}
)
