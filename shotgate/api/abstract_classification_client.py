from abc import ABC, abstractmethod
from typing import Optional

from shotgate.quality.results import RemoteOutcome


class AbstractClassificationClient(ABC):
    @abstractmethod
    async def classify(
        self,
        image_bytes: bytes,
        timeout: Optional[float] = None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RemoteOutcome:
        """
        POST to /api/quality for a remote opinion on the image.
        Returns a RemoteResult, or UNAVAILABLE on any failure or timeout.
        """
        pass

    @abstractmethod
    async def persist(
        self,
        image_bytes: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """
        POST to /api/upload to store an accepted image.
        Returns the storage id, or None on failure.
        """
        pass

    async def aclose(self):  # noqa: B027
        pass
