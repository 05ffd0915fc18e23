"""Google Cloud Storage backed blob store for uploaded files."""

import base64
import binascii
import json
import logging
from typing import Any, Mapping
from urllib.parse import unquote

import sentry_sdk
from flask import current_app
from google.cloud import storage
from google.oauth2 import service_account

from .errors import StorageNotConfiguredError

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("GCS_PROJECT_ID", "GCS_BUCKET", "GCS_SERVICE_ACCOUNT_JSON")


def parse_service_account(raw: str) -> dict[str, Any]:
    """Parse service account credentials given as raw JSON or as base64 encoded JSON."""
    try:
        return json.loads(raw)
    except ValueError:
        pass
    try:
        return json.loads(base64.b64decode(raw, validate=True))
    except (binascii.Error, ValueError) as e:
        raise StorageNotConfiguredError("GCS_SERVICE_ACCOUNT_JSON is neither JSON nor base64 encoded JSON.") from e


class BlobStore:
    def __init__(self, project_id: str, bucket_name: str, credentials_info: Mapping[str, Any]):
        self.project_id = project_id
        self.bucket_name = bucket_name
        self.credentials_info = dict(credentials_info)
        self._bucket = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "BlobStore":
        """Create the store from the Flask config.

        :raises StorageNotConfiguredError: If any of the GCS_* keys is missing, before any network I/O.
        """
        if config is None:
            config = current_app.config
        missing = [key for key in CONFIG_KEYS if not config.get(key)]
        if missing:
            raise StorageNotConfiguredError(f"Object storage is not configured, missing: {', '.join(missing)}.")
        return cls(
            config["GCS_PROJECT_ID"],
            config["GCS_BUCKET"],
            parse_service_account(config["GCS_SERVICE_ACCOUNT_JSON"]),
        )

    @property
    def bucket(self) -> storage.Bucket:
        if self._bucket is None:
            credentials = service_account.Credentials.from_service_account_info(self.credentials_info)
            client = storage.Client(project=self.project_id, credentials=credentials)
            self._bucket = client.bucket(self.bucket_name)
        return self._bucket

    def public_url(self, name: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{name}"

    def blob_name(self, url: str) -> str | None:
        """The name of the blob behind a public URL, None if the URL is not from this bucket."""
        prefix = f"https://storage.googleapis.com/{self.bucket_name}/"
        if not url or not url.startswith(prefix):
            return None
        return unquote(url[len(prefix) :])

    def upload(self, data: bytes, name: str, content_type: str = "image/webp") -> str:
        """Upload the data and return its public URL."""
        with sentry_sdk.start_span(op="gcs", description=f"Upload {name}"):
            blob = self.bucket.blob(name)
            blob.upload_from_string(data, content_type=content_type)
        logger.info(f"Uploaded {name} to {self.bucket_name}.")
        return blob.public_url

    def delete(self, name: str) -> None:
        with sentry_sdk.start_span(op="gcs", description=f"Delete {name}"):
            self.bucket.blob(name).delete()
        logger.info(f"Deleted {name} from {self.bucket_name}.")
