from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role, SchoolStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account, Bus, Guard, School, Student, Teacher
from .repository import DirectoryRepository

# role -> (table, id column, has school_id column)
_ACCOUNT_TABLES = {
    Role.SCHOOL: ("schools", "school_id", False),
    Role.STUDENT: ("students", "student_id", True),
    Role.TEACHER: ("teachers", "teacher_id", True),
    Role.GUARD: ("guards", "guard_id", True),
    Role.BUS: ("buses", "bus_id", True),
    Role.ACADEMIC_WORK: ("academic_works", "academic_work_id", True),
    Role.SUPER_ADMIN: ("super_admins", "admin_id", False),
}

_STUDENT_COLUMNS = "student_id, school_id, name, roll_no, class_name, parent_phone, total_fees, fees_paid"


def _student(r: dict) -> Student:
    return Student(
        student_id=r["student_id"],
        school_id=r["school_id"],
        name=r["name"],
        roll_no=r.get("roll_no") or "",
        class_name=r.get("class_name") or "",
        parent_phone=r.get("parent_phone") or "",
        total_fees=float(r.get("total_fees") or 0),
        fees_paid=float(r.get("fees_paid") or 0),
    )


def _teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=r["teacher_id"],
        school_id=r["school_id"],
        name=r["name"],
        subject=r.get("subject") or "",
        phone_number=r.get("phone_number") or "",
    )


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_school(self, school_id: str) -> Optional[School]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT school_id, name, address, contact_no, status, opening_time, closing_time
                FROM schools
                WHERE school_id=%s
                """,
                (school_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return School(
                school_id=r["school_id"],
                name=r["name"],
                address=r.get("address") or "",
                contact_no=r.get("contact_no") or "",
                status=SchoolStatus(r.get("status") or SchoolStatus.ACTIVE.value),
                opening_time=r.get("opening_time"),
                closing_time=r.get("closing_time"),
            )

    def get_student(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _student(r) if r else None

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT teacher_id, school_id, name, subject, phone_number FROM teachers WHERE teacher_id=%s",
                (teacher_id,),
            )
            r = fetchone(cur)
            return _teacher(r) if r else None

    def get_guard(self, guard_id: str) -> Optional[Guard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT guard_id, school_id, name FROM guards WHERE guard_id=%s", (guard_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Guard(guard_id=r["guard_id"], school_id=r["school_id"], name=r["name"])

    def get_bus(self, bus_id: str) -> Optional[Bus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT bus_id, school_id, name, vehicle_details FROM buses WHERE bus_id=%s", (bus_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Bus(
                bus_id=r["bus_id"],
                school_id=r["school_id"],
                name=r["name"],
                vehicle_details=r.get("vehicle_details") or "",
            )

    def list_students(self, school_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE school_id=%s ORDER BY class_name, roll_no, student_id",
                (school_id,),
            )
            return [_student(r) for r in fetchall(cur)]

    def list_teachers(self, school_id: str) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT teacher_id, school_id, name, subject, phone_number
                FROM teachers
                WHERE school_id=%s
                ORDER BY name
                """,
                (school_id,),
            )
            return [_teacher(r) for r in fetchall(cur)]

    def get_account(self, role: Role, login_id: str) -> Optional[Account]:
        entry = _ACCOUNT_TABLES.get(role)
        if not entry:
            return None
        table, id_col, has_school = entry
        school_col = "school_id" if has_school else "NULL"
        status_col = "status" if role == Role.SCHOOL else "'ACTIVE'"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {id_col} AS account_id, name, password_hash,
                       {school_col} AS school_id, {status_col} AS status
                FROM {table}
                WHERE {id_col}=%s
                """,
                (login_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            school_id = r.get("school_id")
            if role == Role.SCHOOL:
                school_id = r["account_id"]
            return Account(
                account_id=r["account_id"],
                name=r["name"],
                role=role,
                school_id=school_id,
                password_hash=r.get("password_hash") or "",
                is_active=(r.get("status") or SchoolStatus.ACTIVE.value) == SchoolStatus.ACTIVE.value,
            )

    def add_fees_paid(self, student_id: str, amount: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET fees_paid = COALESCE(fees_paid, 0) + %s WHERE student_id=%s",
                (amount, student_id),
            )
            return cur.rowcount > 0

    def delete_student(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0
