import logging
from typing import Optional

from app.core.settings import settings
from .base import MediaProvider
from .firebase_provider import FirebaseStorageProvider
from .mock_provider import MockMediaProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[MediaProvider] = None


def get_media_provider() -> MediaProvider:
    """
    Resolve the active media provider based on settings.

    Rules:
    - MEDIA_PROVIDER='mock' -> in-memory provider (development, tests).
    - Otherwise Firebase Storage; FIREBASE_STORAGE_BUCKET must be set.
      There is no silent fallback to the mock provider.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.MEDIA_PROVIDER or "firebase").lower()

    if provider_name == "mock":
        _provider_instance = MockMediaProvider(base_url=settings.MOCK_MEDIA_BASE_URL)
    elif provider_name == "firebase":
        if not settings.FIREBASE_STORAGE_BUCKET:
            logger.warning("MEDIA_PROVIDER=firebase but FIREBASE_STORAGE_BUCKET is not set; uploads will fail")
        _provider_instance = FirebaseStorageProvider(timeout_seconds=settings.MEDIA_UPLOAD_TIMEOUT_SECONDS)
    else:
        raise RuntimeError(f"Unknown MEDIA_PROVIDER: {settings.MEDIA_PROVIDER}")

    logger.info(f"Media provider initialized: {_provider_instance.name}")
    return _provider_instance
