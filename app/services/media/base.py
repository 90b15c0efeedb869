from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class MediaUploadError(Exception):
    """Raised by providers when the object store rejects or fails a call."""


class MediaProvider(ABC):
    """
    Abstract object-storage provider for report media.

    Contract:
    - upload(data, object_path, content_type) stores the bytes and returns a
      durable public URL for them.
    - delete(object_path) removes a previously uploaded object; deleting a
      missing object is not an error.
    - Failures are raised as MediaUploadError, never swallowed.
    - Calls are blocking; callers run them off the event loop with a timeout.
    """

    name: str = "base"

    @abstractmethod
    def upload(self, data: bytes, object_path: str, content_type: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def delete(self, object_path: str) -> None:
        raise NotImplementedError
