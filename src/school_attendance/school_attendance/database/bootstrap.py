"""Schema and demo-data setup for the attendance database."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_FILE = "schema.sql"
SEED_FILE = "seed.sql"

# table, id column, login id, demo password
DEMO_ACCOUNTS = (
    ("super_admins", "admin_id", "admin", "admin123"),
    ("schools", "school_id", "SCH001", "school123"),
    ("academic_works", "academic_work_id", "AW001", "academic123"),
    ("teachers", "teacher_id", "TCH001", "teacher123"),
    ("guards", "guard_id", "GRD001", "guard123"),
    ("buses", "bus_id", "BUS001", "bus123"),
    ("students", "student_id", "STU001", "student123"),
    ("students", "student_id", "STU002", "student123"),
)

# Quoted literals are single tokens, so a ';' inside one never ends a statement.
_SQL_TOKENS = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"|;|[^'\";]+|['\"]", re.S)
# The target database comes from settings, not from the file.
_DB_SELECTION = re.compile(r"(?im)^[ \t]*(?:CREATE[ \t]+DATABASE|USE)\b.*?;[ \t]*$")
_LINE_COMMENT = re.compile(r"(?m)^[ \t]*--.*$")


@dataclass(frozen=True)
class BootstrapReport:
    tables: int
    demo_accounts: int = 0


def split_sql_statements(sql: str) -> Iterator[str]:
    sql = _LINE_COMMENT.sub("", _DB_SELECTION.sub("", sql))
    pending: list[str] = []
    for token in _SQL_TOKENS.findall(sql):
        if token != ";":
            pending.append(token)
            continue
        statement = "".join(pending).strip()
        pending = []
        if statement:
            yield statement

    tail = "".join(pending).strip()
    if tail:
        yield tail


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def _run_statements(config: DBConfig, statements: Iterable[str]) -> int:
    conn = _connect(config)
    count = 0
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
            count += 1
        conn.commit()
    except mysql.connector.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
    return count


def ensure_database_exists(config: DBConfig) -> None:
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(config: DBConfig, path: str | Path) -> int:
    path = Path(path)
    count = _run_statements(config, split_sql_statements(path.read_text(encoding="utf-8")))
    logger.info("Applied %s to %s (%d statements)", path.name, config.database, count)
    return count


def ensure_demo_accounts(config: DBConfig) -> int:
    """Give the seeded demo accounts real password hashes. Returns rows updated."""

    statements = [
        (f"UPDATE {table} SET password_hash=%s WHERE {id_col}=%s", (generate_password_hash(password), login_id))
        for table, id_col, login_id, password in DEMO_ACCOUNTS
    ]
    conn = _connect(config)
    updated = 0
    try:
        cur = conn.cursor()
        for sql, params in statements:
            cur.execute(sql, params)
            updated += cur.rowcount
        conn.commit()
    finally:
        conn.close()
    return updated


def list_tables(config: DBConfig) -> list[str]:
    conn = _connect(config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def bootstrap_database(db_config: Mapping[str, Any], *, sql_dir: str | Path, seed: bool = False) -> BootstrapReport:
    """Create the database and its tables, optionally loading the demo school.

    Every statement in the SQL files is idempotent, so this is safe on each start.
    """

    config = DBConfig.from_mapping(db_config)
    sql_dir = Path(sql_dir)

    ensure_database_exists(config)
    apply_sql_file(config, sql_dir / SCHEMA_FILE)

    demo_accounts = 0
    if seed:
        apply_sql_file(config, sql_dir / SEED_FILE)
        demo_accounts = ensure_demo_accounts(config)

    return BootstrapReport(tables=len(list_tables(config)), demo_accounts=demo_accounts)
