import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tenant_attendance"),
}

# Each token kind is signed with its own secret
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")
JWT_LOCATION_SECRET = os.getenv("JWT_LOCATION_SECRET", "dev-location-secret")
JWT_ACCESS_EXPIRY = os.getenv("JWT_ACCESS_EXPIRY", "15m")
JWT_REFRESH_EXPIRY = os.getenv("JWT_REFRESH_EXPIRY", "7d")
JWT_LOCATION_EXPIRY = os.getenv("JWT_LOCATION_EXPIRY", "5m")

AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_S3_BUCKET = os.getenv("AWS_S3_BUCKET", "")

REKOGNITION_SIMILARITY_THRESHOLD = float(os.getenv("REKOGNITION_SIMILARITY_THRESHOLD", "85.0"))
ALLOWED_CHECKIN_RADIUS = int(os.getenv("ALLOWED_CHECKIN_RADIUS", "100"))
EXTERNAL_TIMEOUT_SECONDS = float(os.getenv("EXTERNAL_TIMEOUT_SECONDS", "10"))

# Calendar day used for the one-check-in-per-day rule
DAY_BOUNDARY_TZ = os.getenv("DAY_BOUNDARY_TZ", "UTC")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
