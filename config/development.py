import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "16")),
}

# Fixed school-wide code students scan from their own device
LOCATION_QR_VALUE = os.getenv("LOCATION_QR_VALUE", "SCHOOL_LOCATION_CHECKIN")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Seconds to wait for another scan of the same person to finish
ENTITY_LOCK_TIMEOUT = int(os.getenv("ENTITY_LOCK_TIMEOUT", "5"))
NOTIFY_QUEUE_SIZE = int(os.getenv("NOTIFY_QUEUE_SIZE", "100"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
