from __future__ import annotations

import io
from typing import Callable, Optional, Sequence

import qrcode

from ..core.enums import EntityType, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import AttendanceSubject, Bus, Guard, Student
from .repository import DirectoryRepository


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class DirectoryService:
    """Lookups of people and schools, always answered within a school scope."""

    def __init__(self, directory: DirectoryRepository):
        self._directory = directory

    def find(self, entity_type: EntityType, entity_id: str) -> Optional[AttendanceSubject]:
        if entity_type == EntityType.STUDENT:
            s = self._directory.get_student(entity_id)
            return AttendanceSubject.from_student(s) if s else None
        t = self._directory.get_teacher(entity_id)
        return AttendanceSubject.from_teacher(t) if t else None

    def resolve(self, entity_type: EntityType, entity_id: str, school_id: str) -> AttendanceSubject:
        """Return the entity only if it belongs to ``school_id``."""

        subject = self.find(entity_type, entity_id)
        if not subject or subject.school_id != school_id:
            raise NotFoundError(f"{entity_type.value.capitalize()} not found in this school.")
        return subject

    def require_visible(
        self,
        *,
        role: Role,
        user_id: str,
        school_id: Optional[str],
        entity_type: EntityType,
        entity_id: str,
    ) -> AttendanceSubject:
        """People see their own record; school staff see everyone in their school."""

        if role.value == entity_type.value and user_id == entity_id:
            subject = self.find(entity_type, entity_id)
            if subject is None:
                raise NotFoundError(f"{entity_type.value.capitalize()} not found.")
            return subject
        if role in (Role.SCHOOL, Role.ACADEMIC_WORK) and school_id:
            return self.resolve(entity_type, entity_id, school_id)
        raise AuthorizationError("Access denied. You do not have the required permissions.")

    def list_by_school(self, school_id: str, entity_type: EntityType) -> Sequence[AttendanceSubject]:
        if entity_type == EntityType.STUDENT:
            return [AttendanceSubject.from_student(s) for s in self._directory.list_students(school_id)]
        return [AttendanceSubject.from_teacher(t) for t in self._directory.list_teachers(school_id)]

    def get_student(self, student_id: str) -> Student:
        student = self._directory.get_student(student_id)
        if not student:
            raise NotFoundError("Student not found.")
        return student

    def get_guard(self, guard_id: str) -> Guard:
        guard = self._directory.get_guard(guard_id)
        if not guard:
            raise NotFoundError("Guard not found.")
        return guard

    def get_bus(self, bus_id: str) -> Bus:
        bus = self._directory.get_bus(bus_id)
        if not bus:
            raise NotFoundError("Bus staff not found.")
        return bus

    def add_fees_paid(self, student_id: str, amount: float) -> bool:
        return self._directory.add_fees_paid(student_id, amount)

    def delete_student(
        self,
        *,
        current_role: Role,
        school_id: str,
        student_id: str,
        purge_logs: Optional[Callable[[str], int]] = None,
    ) -> int:
        """Remove a student of this school, purging their logs first.

        ``purge_logs`` runs after the checks and before the row goes, so a failed purge
        leaves the student in place to retry. Returns the number of logs purged.
        """

        if current_role != Role.SCHOOL:
            raise AuthorizationError("Only the school can remove students.")
        self.resolve(EntityType.STUDENT, student_id, school_id)
        removed = purge_logs(student_id) if purge_logs is not None else 0
        if not self._directory.delete_student(student_id):
            raise NotFoundError("Student not found in this school.")
        return removed

    def qr_png(self, entity_type: EntityType, entity_id: str, school_id: str) -> bytes:
        subject = self.resolve(entity_type, entity_id, school_id)
        return render_qr_png(subject.qr_value)
