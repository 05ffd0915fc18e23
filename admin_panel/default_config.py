# Defaults of the configuration, the instance config.py overrides them.
# See config/example.config.py for the documented keys.
from datetime import timedelta

SECRET_KEY = "development"
SESSION_PROTECTION = "strong"
# Sessions expire this long after the login.
PERMANENT_SESSION_LIFETIME = timedelta(hours=12)

SENTRY_INGEST = ""
SENTRY_ENV = "development"
SENTRY_ERROR_SAMPLE_RATE = 1.0
SENTRY_TRACES_SAMPLE_RATE = 1.0

MONGO_URI = "mongodb://localhost:27017/admin_panel"

CACHE_TYPE = "SimpleCache"
CACHE_DEFAULT_TIMEOUT = 300
LISTING_CACHE_TIMEOUT = 30

GCS_PROJECT_ID = None
GCS_BUCKET = None
GCS_SERVICE_ACCOUNT_JSON = None
GCS_IMAGE_PREFIX = "users/images/"

MAX_CONTENT_LENGTH = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")
