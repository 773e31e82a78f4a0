"""Azure Speech-to-Text (short audio REST API) transcription."""
from typing import Optional

import httpx

from core.exceptions import CognitiveServiceError
from core.logging import get_logger
from schemas.analysis import TranscriptionResult

logger = get_logger(__name__)

SERVICE_NAME = "Speech"
DEFAULT_CONFIDENCE = 0.8
STT_URL = (
    "https://{region}.stt.speech.microsoft.com"
    "/speech/recognition/conversation/cognitiveservices/v1"
)


class SpeechService:
    """Transcribes recorded audio in a single request (format=detailed)."""

    def __init__(
        self,
        key: str,
        region: str,
        language: str = "en-US",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key = key
        self.region = region
        self.language = language
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def transcribe_url(self, audio_url: str) -> TranscriptionResult:
        """Download audio from a URL, then transcribe it"""
        try:
            async with self._client() as client:
                response = await client.get(audio_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise CognitiveServiceError(SERVICE_NAME, f"failed to fetch audio: {e}") from e

        return await self.transcribe(
            response.content, response.headers.get("content-type")
        )

    async def transcribe(
        self, audio_data: bytes, content_type: Optional[str] = None
    ) -> TranscriptionResult:
        if not self.key or not self.region:
            raise CognitiveServiceError(SERVICE_NAME, "key or region not configured")

        try:
            async with self._client() as client:
                response = await client.post(
                    STT_URL.format(region=self.region),
                    params={"language": self.language, "format": "detailed"},
                    headers={
                        "Ocp-Apim-Subscription-Key": self.key,
                        "Content-Type": content_type or "audio/mpeg",
                    },
                    content=audio_data,
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            raise CognitiveServiceError(SERVICE_NAME, str(e)) from e
        except ValueError as e:
            raise CognitiveServiceError(SERVICE_NAME, f"invalid response: {e}") from e

        status = result.get("RecognitionStatus")
        if status != "Success":
            raise CognitiveServiceError(SERVICE_NAME, f"Recognition failed: {status}")

        best = (result.get("NBest") or [{}])[0]
        return TranscriptionResult(
            text=result.get("DisplayText") or result.get("Text") or best.get("Display") or "",
            confidence=best.get("Confidence") or result.get("Confidence") or DEFAULT_CONFIDENCE,
            language=result.get("Language") or self.language,
        )
