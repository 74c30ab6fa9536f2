import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tenant_attendance"),
}

# No defaults: create_app refuses to start without them
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "")
JWT_LOCATION_SECRET = os.getenv("JWT_LOCATION_SECRET", "")
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

DAY_BOUNDARY_TZ = os.getenv("DAY_BOUNDARY_TZ", "UTC")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
