import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
    "pool_size": 4,
}

LOCATION_QR_VALUE = "TEST_LOCATION"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ENTITY_LOCK_TIMEOUT = 1
NOTIFY_QUEUE_SIZE = 10
SESSION_DAYS = 1

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
