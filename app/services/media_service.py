"""
Media ingestion adapter - validates an uploaded report attachment and
forwards it to object storage.

Flow:
1. Reject non image/video MIME types and files above MEDIA_MAX_BYTES
   (both before any network call)
2. Images only: downscale to fit MEDIA_IMAGE_MAX_DIMENSION and re-encode
   (formats Pillow cannot process are uploaded as-is)
3. Upload under MEDIA_FOLDER with a bounded timeout, no retries
4. Return the media descriptor stored on the report

The upload is not transactional with report persistence. If persisting the
report fails afterwards, the uploaded object stays in the bucket.
"""

import asyncio
import io
import logging
import mimetypes
import os
import uuid
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.core import errors
from app.core.settings import settings
from app.models.report import MediaDescriptor, MediaKind
from app.services.media import MediaProvider, MediaUploadError, get_media_provider

logger = logging.getLogger(__name__)

# Re-encode quality used for downscaled lossy images
AUTO_QUALITY = 85


def resolve_media_kind(mime_type: Optional[str]) -> MediaKind:
    """
    Raises:
        UnsupportedMediaType: MIME type is neither image/* nor video/*
    """
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return MediaKind.IMAGE
    if mime_type.startswith("video/"):
        return MediaKind.VIDEO
    raise errors.UnsupportedMediaType()


def downsize_image(data: bytes, max_dimension: int) -> bytes:
    """
    Fit an image inside max_dimension x max_dimension, preserving aspect
    ratio. Images already within bounds are returned unchanged; images are
    never upscaled. Formats Pillow cannot decode (SVG, HEIC without a
    plugin, ...) are returned unchanged as well.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.width <= max_dimension and image.height <= max_dimension:
                return data
            if getattr(image, "is_animated", False):
                logger.info("Animated image left at original size")
                return data

            image_format = image.format or "JPEG"
            resized = image.copy()
            resized.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning(f"Image not decodable by Pillow, uploading original bytes: {e}")
        return data

    save_kwargs = {"optimize": True}
    if image_format in ("JPEG", "WEBP"):
        save_kwargs["quality"] = AUTO_QUALITY
    if image_format == "JPEG" and resized.mode not in ("RGB", "L"):
        resized = resized.convert("RGB")

    output = io.BytesIO()
    try:
        resized.save(output, format=image_format, **save_kwargs)
    except (OSError, KeyError, ValueError) as e:
        logger.warning(f"Could not re-encode {image_format} image, uploading original bytes: {e}")
        return data
    logger.info(f"Image downscaled to {resized.width}x{resized.height} ({len(data)} -> {output.tell()} bytes)")
    return output.getvalue()


def _extension_for(original_filename: Optional[str], mime_type: str) -> str:
    if original_filename:
        ext = os.path.splitext(original_filename)[1].lower()
        if ext and len(ext) <= 10:
            return ext
    return mimetypes.guess_extension(mime_type) or ""


class MediaService:

    def __init__(self, provider: Optional[MediaProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> MediaProvider:
        return self._provider or get_media_provider()

    def validate(self, mime_type: Optional[str], size_bytes: int) -> MediaKind:
        kind = resolve_media_kind(mime_type)
        if size_bytes > settings.MEDIA_MAX_BYTES:
            limit_mb = settings.MEDIA_MAX_BYTES // (1024 * 1024)
            raise errors.PayloadTooLarge(f"File size exceeds {limit_mb}MB limit")
        return kind

    async def ingest(
        self,
        file_bytes: bytes,
        declared_mime_type: Optional[str],
        size_bytes: Optional[int] = None,
        original_filename: Optional[str] = None,
    ) -> MediaDescriptor:
        """
        Validate and upload one attachment.

        Raises:
            UnsupportedMediaType: not image/* or video/*
            PayloadTooLarge: larger than MEDIA_MAX_BYTES
            UpstreamFailure: object store failed or timed out
        """
        size = max(size_bytes or 0, len(file_bytes))
        kind = self.validate(declared_mime_type, size)
        mime_type = declared_mime_type.lower()

        if kind is MediaKind.IMAGE:
            file_bytes = await asyncio.to_thread(downsize_image, file_bytes, settings.MEDIA_IMAGE_MAX_DIMENSION)

        object_name = f"{uuid.uuid4().hex}{_extension_for(original_filename, mime_type)}"
        object_path = f"{settings.MEDIA_FOLDER.strip('/')}/{object_name}"
        provider = self.provider

        try:
            url = await asyncio.wait_for(
                asyncio.to_thread(provider.upload, file_bytes, object_path, mime_type),
                timeout=settings.MEDIA_UPLOAD_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(f"❌ Media upload timed out after {settings.MEDIA_UPLOAD_TIMEOUT_SECONDS}s: {object_path}")
            raise errors.UpstreamFailure("Failed to upload media file", error="Media upload timed out")
        except MediaUploadError as e:
            logger.error(f"❌ Media upload failed for {object_path}: {e}")
            raise errors.UpstreamFailure("Failed to upload media file", error=str(e))

        logger.info(f"✅ Media uploaded via {provider.name}: {object_path} ({kind.value}, {size} bytes)")
        return MediaDescriptor(
            type=kind,
            url=url,
            filename=os.path.basename(original_filename) if original_filename else object_name,
            size=size,
            mime_type=mime_type,
            object_path=object_path,
        )

    async def discard(self, object_path: str) -> None:
        """
        Delete an uploaded object from storage.

        Not called on any request path: a failed report persist never
        deletes its media. Used by scripts/delete_media.py to clean up the
        orphaned object paths logged by report_service.create_report.
        """
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.provider.delete, object_path),
                timeout=settings.MEDIA_UPLOAD_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            raise errors.UpstreamFailure("Failed to delete media file", error="Media delete timed out")
        except MediaUploadError as e:
            raise errors.UpstreamFailure("Failed to delete media file", error=str(e))
        logger.info(f"Media deleted: {object_path}")


# Global service instance (singleton pattern)
_media_service = None


def get_media_service() -> MediaService:
    global _media_service
    if _media_service is None:
        _media_service = MediaService()
    return _media_service
