"""Defaults shared by the attendance service and its settings modules."""

DEFAULT_SESSION_DAYS = 7
DEFAULT_LIST_LIMIT = 200
DEFAULT_RECENT_LOGS = 5
DEFAULT_LOCK_TIMEOUT_SECONDS = 5
# A scan holds two connections: the entity lock and the read-validate-append.
DEFAULT_DB_POOL_SIZE = 16
DEFAULT_NOTIFY_QUEUE_SIZE = 100
SSE_KEEPALIVE_SECONDS = 15

ATTENDANCE_UPDATE = "ATTENDANCE_UPDATE"
