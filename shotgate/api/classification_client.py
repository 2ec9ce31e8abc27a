import asyncio
from typing import Any, Optional

import httpx

from shotgate import constants
from shotgate.logging import SHOTGATE_LOGGER
from shotgate.quality.results import UNAVAILABLE, RemoteOutcome, RemoteResult

from .abstract_classification_client import AbstractClassificationClient


class ClassificationClient(AbstractClassificationClient):
    """Async client for the classification / persistence service.

    Each call is a single attempt bounded by ``timeout``; nothing is retried.
    Cancelling the awaiting task aborts the in-flight transfer.
    """

    def __init__(
        self,
        base_url: str = constants.DEFAULT_SERVICE_URL,
        timeout: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
        logger=SHOTGATE_LOGGER,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, logger=SHOTGATE_LOGGER, transport=None) -> "ClassificationClient":
        return cls(
            base_url=settings.service_url,
            timeout=settings.request_timeout_seconds,
            logger=logger,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        await self.client.aclose()

    async def _post_image(
        self, endpoint: str, image_bytes: bytes, filename: Optional[str], content_type: Optional[str]
    ) -> Optional[Any]:
        files = {
            constants.IMAGE_FIELD_NAME: (
                filename or f"image{constants.DEFAULT_UPLOAD_EXTENSION}",
                image_bytes,
                content_type or "application/octet-stream",
            )
        }
        try:
            resp = await self.client.post(endpoint, files=files)
            self.logger.debug(f"POST {endpoint}: {resp.status_code}")
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            content_type = e.response.headers.get("content-type", "")
            if "text/html" in content_type or e.response.text.strip().startswith("<"):
                self.logger.warning(f"HTTP error: {e.response.status_code} - Received HTML error page for POST {endpoint}")
            else:
                self.logger.warning(f"HTTP error: {e.response.status_code} {e.response.text}")
            return None
        except httpx.HTTPError as e:
            self.logger.warning(f"Request error on POST {endpoint}: {e!r}")
            return None
        except ValueError as e:
            self.logger.warning(f"Invalid JSON from POST {endpoint}: {e}")
            return None

    async def classify(
        self,
        image_bytes: bytes,
        timeout: Optional[float] = None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> RemoteOutcome:
        """POST the image to /api/quality and parse the service's opinion."""
        limit = self.timeout if timeout is None else timeout
        try:
            payload = await asyncio.wait_for(
                self._post_image(constants.QUALITY_ENDPOINT, image_bytes, filename, content_type), limit
            )
        except asyncio.TimeoutError:
            self.logger.warning(f"Classification timed out after {limit:.1f}s")
            return UNAVAILABLE

        if payload is None:
            return UNAVAILABLE
        try:
            result = RemoteResult.from_payload(payload)
        except ValueError as e:
            self.logger.warning(f"Malformed classification response: {e}")
            return UNAVAILABLE

        self.logger.debug(f"Remote classification: {result.decision.value} (confidence {result.confidence:.2f})")
        return result

    async def persist(
        self,
        image_bytes: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """POST the image to /api/upload; returns the storage id or None."""
        try:
            payload = await asyncio.wait_for(
                self._post_image(constants.UPLOAD_ENDPOINT, image_bytes, filename, content_type), self.timeout
            )
        except asyncio.TimeoutError:
            self.logger.error(f"Persistence timed out after {self.timeout:.1f}s")
            return None

        if not isinstance(payload, dict) or not payload.get("stored") or payload.get("id") is None:
            error = payload.get("error") if isinstance(payload, dict) else None
            self.logger.error(f"Persistence failed: {error or 'no storage id returned'}")
            return None
        return str(payload["id"])
