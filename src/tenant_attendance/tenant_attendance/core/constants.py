"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_CHECKIN_RADIUS_METERS = 100
DEFAULT_SIMILARITY_THRESHOLD = 85.0
DEFAULT_EXTERNAL_TIMEOUT_SECONDS = 10.0

DEFAULT_ACCESS_EXPIRY = "15m"
DEFAULT_REFRESH_EXPIRY = "7d"
DEFAULT_LOCATION_EXPIRY = "5m"

JWT_ALGORITHM = "HS256"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
EMPLOYEE_HISTORY_DAYS = 30
MIN_PASSWORD_LENGTH = 8
