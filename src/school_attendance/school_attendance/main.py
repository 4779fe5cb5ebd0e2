from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .common.log import configure_logging
from .container import Container, build_container
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_NOTIFY_QUEUE_SIZE, DEFAULT_SESSION_DAYS
from .database.bootstrap import bootstrap_database
from .directory.controller import register as register_directory
from .payments.controller import register as register_payments
from .scanning.controller import register as register_scanning
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` replaces the MySQL-backed wiring (tests pass one built on fakes).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))
    app.config["LOCATION_QR_VALUE"] = getattr(settings, "LOCATION_QR_VALUE", "")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "Starting with settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        auto_init = bool(getattr(settings, "AUTO_INIT_DB", False))
        auto_seed = bool(getattr(settings, "AUTO_SEED_DB", False))
        if auto_init or auto_seed:
            report = bootstrap_database(db_config, sql_dir=SQL_DIR, seed=auto_seed)
            logger.info("Database ready (tables=%d, demo accounts=%d)", report.tables, report.demo_accounts)

        container = build_container(
            db_config=db_config,
            location_code=app.config["LOCATION_QR_VALUE"],
            lock_timeout=int(getattr(settings, "ENTITY_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT_SECONDS)),
            notify_queue_size=int(getattr(settings, "NOTIFY_QUEUE_SIZE", DEFAULT_NOTIFY_QUEUE_SIZE)),
        )

    app.extensions["school_attendance"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_attendance(app, container)
    register_scanning(app, container)
    register_directory(app, container)
    register_analytics(app, container)
    register_payments(app, container)

    return app
