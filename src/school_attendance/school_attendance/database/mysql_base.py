from __future__ import annotations

import hashlib
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from ..core.exceptions import ConcurrencyError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def lock_key(database: str, name: str) -> str:
    """MySQL caps lock names at 64 characters; a SHA-1 hex digest is 40."""

    return hashlib.sha1(f"{database}:{name}".encode("utf-8")).hexdigest()


@contextmanager
def named_lock(conn_factory: DatabaseConnection, name: str, *, timeout: int) -> Iterator[None]:
    """Hold a MySQL user-level lock (GET_LOCK) for the duration of the block.

    The lock belongs to the session that took it, so a dedicated connection is kept
    open until RELEASE_LOCK.
    """

    key = lock_key(conn_factory.database, name)
    conn = conn_factory.connect()
    cur = conn.cursor()
    try:
        cur.execute("SELECT GET_LOCK(%s, %s)", (key, int(timeout)))
        row = cur.fetchone()
        if not row or row[0] != 1:
            raise ConcurrencyError("Another scan for this person is in progress. Please try again.")
        try:
            yield
        finally:
            cur.execute("SELECT RELEASE_LOCK(%s)", (key,))
            cur.fetchone()
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
