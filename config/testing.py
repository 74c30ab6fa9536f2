import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tenant_attendance_test"),
}

JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
JWT_LOCATION_SECRET = "test-location-secret-0123456789abcdef"
JWT_ACCESS_EXPIRY = "15m"
JWT_REFRESH_EXPIRY = "7d"
JWT_LOCATION_EXPIRY = "5m"

REKOGNITION_SIMILARITY_THRESHOLD = 85.0
ALLOWED_CHECKIN_RADIUS = 100
EXTERNAL_TIMEOUT_SECONDS = 2

DAY_BOUNDARY_TZ = "UTC"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
