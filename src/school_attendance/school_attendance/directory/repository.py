from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account, Bus, Guard, School, Student, Teacher


class DirectoryRepository(Protocol):
    """Read access to people and schools.

    Note (DIP): services depend on this interface, never on a concrete database.
    Creating and editing records is an admin concern handled elsewhere.
    """

    def get_school(self, school_id: str) -> Optional[School]:
        raise NotImplementedError

    def get_student(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def get_guard(self, guard_id: str) -> Optional[Guard]:
        raise NotImplementedError

    def get_bus(self, bus_id: str) -> Optional[Bus]:
        raise NotImplementedError

    def list_students(self, school_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_teachers(self, school_id: str) -> Sequence[Teacher]:
        raise NotImplementedError

    def get_account(self, role: Role, login_id: str) -> Optional[Account]:
        raise NotImplementedError

    def add_fees_paid(self, student_id: str, amount: float) -> bool:
        raise NotImplementedError

    def delete_student(self, student_id: str) -> bool:
        raise NotImplementedError
