from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import as_utc, utc_day
from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.enums import AttendanceMode, AttendanceStatus, EntityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, named_lock
from .model import AttendanceLog, AttendanceLogDraft
from .repository import AttendanceLogRepository

_COLUMNS = "seq, log_id, entity_id, entity_name, entity_type, school_id, logged_at, status, mode"


def _row_to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        log_id=r["log_id"],
        seq=int(r["seq"]),
        entity_id=r["entity_id"],
        entity_name=r["entity_name"],
        entity_type=EntityType(r["entity_type"]),
        school_id=r["school_id"],
        timestamp=as_utc(r["logged_at"]),
        status=AttendanceStatus(r["status"]),
        mode=AttendanceMode(r["mode"]),
    )


class MySQLAttendanceRepository(AttendanceLogRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, lock_timeout: int = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._conn_factory = conn_factory
        self._lock_timeout = int(lock_timeout)

    @staticmethod
    def _insert(cur, draft: AttendanceLogDraft) -> AttendanceLog:
        log_id = uuid.uuid4().hex
        ts = as_utc(draft.timestamp)
        cur.execute(
            """
            INSERT INTO attendance_logs
                (log_id, entity_id, entity_name, entity_type, school_id, logged_at, log_date, status, mode)
            VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                log_id,
                draft.entity_id,
                draft.entity_name,
                draft.entity_type.value,
                draft.school_id,
                ts.replace(tzinfo=None),
                utc_day(ts),
                draft.status.value,
                draft.mode.value,
            ),
        )
        return AttendanceLog(
            log_id=log_id,
            seq=int(cur.lastrowid),
            entity_id=draft.entity_id,
            entity_name=draft.entity_name,
            entity_type=draft.entity_type,
            school_id=draft.school_id,
            timestamp=ts,
            status=draft.status,
            mode=draft.mode,
        )

    def append(self, draft: AttendanceLogDraft) -> AttendanceLog:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(cur, draft)

    def logs_for_entity_on_day(self, entity_id: str, day: date) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE entity_id=%s AND log_date=%s
                ORDER BY logged_at ASC, seq ASC
                """,
                (entity_id, day),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def logs_for_school_on_day(self, school_id: str, day: date) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE school_id=%s AND log_date=%s
                ORDER BY logged_at DESC, seq DESC
                """,
                (school_id, day),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def logs_for_entity(self, entity_id: str, entity_type: Optional[EntityType] = None) -> Sequence[AttendanceLog]:
        clauses = ["entity_id=%s"]
        params: list[object] = [entity_id]
        if entity_type is not None:
            clauses.append("entity_type=%s")
            params.append(entity_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE {" AND ".join(clauses)}
                ORDER BY logged_at DESC, seq DESC
                """,
                tuple(params),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def delete_all_for_entity(self, entity_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_logs WHERE entity_id=%s", (entity_id,))
            return int(cur.rowcount)

    @contextmanager
    def entity_day_lock(self, entity_id: str, day: date) -> Iterator[None]:
        with named_lock(self._conn_factory, f"att:{entity_id}:{day.isoformat()}", timeout=self._lock_timeout):
            yield
