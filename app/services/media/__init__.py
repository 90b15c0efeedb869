"""
Media ingestion - object storage providers for report attachments.

Providers only move bytes; validation and image downsizing live in
app.services.media_service.
"""

from app.services.media.base import MediaProvider, MediaUploadError
from app.services.media.firebase_provider import FirebaseStorageProvider
from app.services.media.mock_provider import MockMediaProvider
from app.services.media.registry import get_media_provider

__all__ = [
    "MediaProvider",
    "MediaUploadError",
    "FirebaseStorageProvider",
    "MockMediaProvider",
    "get_media_provider",
]
