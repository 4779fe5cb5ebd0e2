from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from ..core.enums import EntityType, Role, SchoolStatus


def qr_payload(entity_type: EntityType, entity_id: str, school_id: str) -> str:
    """Wire format printed on ID cards: {"student_id"|"teacher_id", "school_id"}."""
    return json.dumps({f"{entity_type.value}_id": entity_id, "school_id": school_id})


@dataclass(frozen=True)
class School:
    school_id: str
    name: str
    address: str = ""
    contact_no: str = ""
    status: SchoolStatus = SchoolStatus.ACTIVE
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None


@dataclass(frozen=True)
class Student:
    student_id: str
    school_id: str
    name: str
    roll_no: str = ""
    class_name: str = ""
    parent_phone: str = ""
    total_fees: float = 0.0
    fees_paid: float = 0.0

    @property
    def qr_value(self) -> str:
        return qr_payload(EntityType.STUDENT, self.student_id, self.school_id)


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    school_id: str
    name: str
    subject: str = ""
    phone_number: str = ""

    @property
    def qr_value(self) -> str:
        return qr_payload(EntityType.TEACHER, self.teacher_id, self.school_id)


@dataclass(frozen=True)
class Guard:
    guard_id: str
    school_id: str
    name: str


@dataclass(frozen=True)
class Bus:
    bus_id: str
    school_id: str
    name: str
    vehicle_details: str = ""


@dataclass(frozen=True)
class Account:
    """Login view of any role's record (password hash included, never serialised)."""

    account_id: str
    name: str
    role: Role
    school_id: Optional[str]
    password_hash: str
    is_active: bool = True


@dataclass(frozen=True)
class AttendanceSubject:
    """A student or teacher as seen by the attendance core."""

    entity_id: str
    entity_type: EntityType
    name: str
    school_id: str

    @property
    def qr_value(self) -> str:
        return qr_payload(self.entity_type, self.entity_id, self.school_id)

    @classmethod
    def from_student(cls, s: Student) -> "AttendanceSubject":
        return cls(entity_id=s.student_id, entity_type=EntityType.STUDENT, name=s.name, school_id=s.school_id)

    @classmethod
    def from_teacher(cls, t: Teacher) -> "AttendanceSubject":
        return cls(entity_id=t.teacher_id, entity_type=EntityType.TEACHER, name=t.name, school_id=t.school_id)
