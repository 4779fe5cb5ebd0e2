from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from mysql.connector import errors, pooling

from ..core.constants import DEFAULT_DB_POOL_SIZE
from ..core.exceptions import ConcurrencyError


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_DB_POOL_SIZE

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict."""

        return cls(
            host=str(values.get("host", "localhost")),
            port=int(values.get("port", 3306)),
            user=str(values.get("user", "root")),
            password=str(values.get("password", "")),
            database=str(values.get("database", "school_attendance")),
            pool_size=int(values.get("pool_size", DEFAULT_DB_POOL_SIZE)),
        )


class DatabaseConnection:
    """Pooled connections to one attendance database, one instance per config.

    Sessions run with time_zone +00:00 so DATETIME columns hold UTC. Closing a
    connection hands it back to the pool.
    """

    _instances: Dict[DBConfig, "DatabaseConnection"] = {}
    _instances_lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._instances_lock:
            if config not in cls._instances:
                cls._instances[config] = DatabaseConnection(config)
            return cls._instances[config]

    @property
    def database(self) -> str:
        return self._config.database

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"school_attendance.{self._config.database}"[:64],
                    pool_size=self._config.pool_size,
                    pool_reset_session=True,
                    host=self._config.host,
                    port=self._config.port,
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    time_zone="+00:00",
                )
            return self._pool

    def connect(self):
        try:
            return self._get_pool().get_connection()
        except errors.PoolError:
            raise ConcurrencyError("The server is busy. Please try again.")
