# Copy this file to the instance folder as config.py and adjust.
# Keys not set here fall back to admin_panel/default_config.py.
from datetime import timedelta

# A Flask SECRET_KEY used for sensitive operations (like signing session cookies),
# needs to be properly random.
# For example the output of "openssl rand -hex 32"
SECRET_KEY = "some proper randomness here"
SESSION_PROTECTION = "strong"
# Users have to log in again after this long.
PERMANENT_SESSION_LIFETIME = timedelta(hours=12)

# Sentry
# SENTRY_INGEST is the URL of your Sentry ingest endpoint.
SENTRY_INGEST = ""
SENTRY_ENV = "development"  # or "production"
SENTRY_ERROR_SAMPLE_RATE = 1.0
SENTRY_TRACES_SAMPLE_RATE = 1.0

# MongoDB
MONGO_URI = "mongodb://localhost:27017/admin_panel"

# Cache (listings are cached for LISTING_CACHE_TIMEOUT seconds, mutations invalidate them)
CACHE_TYPE = "SimpleCache"
LISTING_CACHE_TIMEOUT = 30

# Google Cloud Storage for uploaded user images.
# These can also be given as environment variables of the same name.
# GCS_SERVICE_ACCOUNT_JSON is the service account key, either as JSON or base64 encoded JSON.
GCS_PROJECT_ID = ""
GCS_BUCKET = ""
GCS_SERVICE_ACCOUNT_JSON = ""
GCS_IMAGE_PREFIX = "users/images/"
