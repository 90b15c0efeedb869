"""
Mock media provider - keeps uploads in memory.

Used for local development without a storage bucket and in tests.
"""

import logging
import threading
from typing import Dict, Tuple

from .base import MediaProvider

logger = logging.getLogger(__name__)


class MockMediaProvider(MediaProvider):

    name = "mock"

    def __init__(self, base_url: str = "http://localhost:8000/mock-media"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def upload(self, data: bytes, object_path: str, content_type: str) -> str:
        with self._lock:
            self.objects[object_path] = (data, content_type)
        logger.info(f"[MOCK MEDIA] Stored {len(data)} bytes at {object_path}")
        return f"{self.base_url}/{object_path}"

    def delete(self, object_path: str) -> None:
        with self._lock:
            self.objects.pop(object_path, None)
