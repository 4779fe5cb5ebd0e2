"""Create the database and apply database/schema.sql for the current APP_ENV."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from school_attendance.database.bootstrap import bootstrap_database


def main(seed: bool = False) -> None:
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    report = bootstrap_database(db, sql_dir=REPO_ROOT / "database", seed=seed)

    target = f"{db.get('user')}@{db.get('host')}:{db.get('port', 3306)}/{db.get('database')}"
    if seed:
        print(f"OK: {target} seeded (tables={report.tables}, demo accounts={report.demo_accounts})")
    else:
        print(f"OK: {target} schema applied (tables={report.tables})")


if __name__ == "__main__":
    main()
