import logging

from google.api_core import exceptions as google_exceptions

from app.config.firebase import get_storage_bucket
from .base import MediaProvider, MediaUploadError

logger = logging.getLogger(__name__)


class FirebaseStorageProvider(MediaProvider):
    """
    Firebase Storage (Google Cloud Storage bucket) provider.

    Objects are made publicly readable so the stored URL can be served
    directly to report viewers.
    """

    name = "firebase"

    def __init__(self, bucket=None, timeout_seconds: float = 60.0):
        self._bucket = bucket
        self.timeout_seconds = timeout_seconds

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = get_storage_bucket()
        return self._bucket

    def upload(self, data: bytes, object_path: str, content_type: str) -> str:
        try:
            blob = self.bucket.blob(object_path)
            blob.upload_from_string(data, content_type=content_type, timeout=self.timeout_seconds)
            blob.make_public()
        except google_exceptions.GoogleAPICallError as e:
            raise MediaUploadError(f"Firebase Storage upload failed: {e}") from e

        logger.info(f"Uploaded {len(data)} bytes to gs://{self.bucket.name}/{object_path}")
        return blob.public_url

    def delete(self, object_path: str) -> None:
        try:
            self.bucket.blob(object_path).delete(timeout=self.timeout_seconds)
        except google_exceptions.NotFound:
            logger.warning(f"Media object already gone: {object_path}")
        except google_exceptions.GoogleAPICallError as e:
            raise MediaUploadError(f"Firebase Storage delete failed: {e}") from e
