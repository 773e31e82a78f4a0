"""Azure AI Vision (Computer Vision v3.2) image analysis over REST."""
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from core.exceptions import CognitiveServiceError
from core.logging import get_logger
from schemas.analysis import AITagResult

logger = get_logger(__name__)

SERVICE_NAME = "Vision"
ANALYZE_PATH = "/vision/v3.2/analyze"
VISUAL_FEATURES = "Tags,Description,Categories"


def is_blob_url(url: str) -> bool:
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return host.endswith(".blob.core.windows.net")


class VisionService:
    """
    Tags, caption and category for an image.

    Blob-hosted images are downloaded here and posted as bytes: the vision
    service can't always fetch from the storage account itself. If that
    download fails the URL is handed to the service as a last resort.
    """

    def __init__(
        self,
        endpoint: str,
        key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.key = key
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def analyze_image(
        self, image_url: Optional[str] = None, image_data: Optional[bytes] = None
    ) -> AITagResult:
        if not self.endpoint or not self.key:
            raise CognitiveServiceError(SERVICE_NAME, "endpoint or key not configured")
        if image_data is None and not image_url:
            raise CognitiveServiceError(SERVICE_NAME, "no image supplied")

        if image_data is None and is_blob_url(image_url):
            try:
                image_data = await self._download(image_url)
            except httpx.HTTPError as e:
                logger.error(
                    f"Error fetching blob for analysis, falling back to URL analyze: {e}"
                )

        if image_data is not None:
            result = await self._analyze(
                content=image_data,
                headers={"Content-Type": "application/octet-stream"},
            )
        else:
            result = await self._analyze(json={"url": image_url})

        return self._to_tag_result(result)

    async def _download(self, url: str) -> bytes:
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.content

    async def _analyze(self, headers: Optional[dict[str, str]] = None, **body) -> dict:
        request_headers = {"Ocp-Apim-Subscription-Key": self.key, **(headers or {})}
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.endpoint}{ANALYZE_PATH}",
                    params={"visualFeatures": VISUAL_FEATURES},
                    headers=request_headers,
                    **body,
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise CognitiveServiceError(SERVICE_NAME, str(e)) from e
        except ValueError as e:
            raise CognitiveServiceError(SERVICE_NAME, f"invalid response: {e}") from e

    @staticmethod
    def _to_tag_result(result: dict[str, Any]) -> AITagResult:
        tags = result.get("tags") or []
        categories = result.get("categories") or []
        captions = (result.get("description") or {}).get("captions") or []

        return AITagResult(
            tags=[tag["name"] for tag in tags if tag and tag.get("name")],
            confidence=(tags[0].get("confidence") if tags else None) or 0,
            category=(categories[0].get("name") if categories else None) or "general",
            caption=captions[0].get("text") if captions else None,
        )
