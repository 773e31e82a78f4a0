"""Facade over the hosted AI services used to enrich timeline entries."""
from __future__ import annotations

from typing import TYPE_CHECKING

from core.logging import get_logger
from schemas.analysis import AITagResult, SentimentResult, TranscriptionResult
from services.categorization import categorize_key_phrases
from services.cognitive.speech import SpeechService
from services.cognitive.text_analytics import TextAnalyticsService
from services.cognitive.vision import VisionService

if TYPE_CHECKING:
    from core.config import Settings
    from services.cache_service import CacheService

logger = get_logger(__name__)


class AnalysisService:
    """
    Implements IAnalysisService on top of Azure AI Language, Vision and
    Speech. Every method raises CognitiveServiceError on failure; callers
    decide on fallbacks.
    """

    def __init__(
        self,
        text: TextAnalyticsService,
        vision: VisionService,
        speech: SpeechService,
    ) -> None:
        self.text = text
        self.vision = vision
        self.speech = speech

    @classmethod
    def from_settings(
        cls, settings: Settings, cache: CacheService | None = None
    ) -> AnalysisService:
        timeout = settings.cognitive_timeout_seconds
        return cls(
            text=TextAnalyticsService(
                settings.cognitive_text_endpoint,
                settings.cognitive_text_key,
                cache=cache,
                cache_ttl=settings.cache_ttl_analysis,
            ),
            vision=VisionService(
                settings.cognitive_vision_endpoint,
                settings.cognitive_vision_key,
                timeout=timeout,
            ),
            speech=SpeechService(
                settings.cognitive_speech_key,
                settings.cognitive_speech_region,
                language=settings.cognitive_speech_language,
                timeout=timeout,
            ),
        )

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        return await self.text.analyze_sentiment(text)

    async def categorize_text(self, text: str) -> list[str]:
        key_phrases = await self.text.extract_key_phrases(text)
        categories = categorize_key_phrases(key_phrases)
        logger.debug(f"Categorized text into {categories}")
        return categories

    async def analyze_image(
        self, image_url: str | None = None, image_data: bytes | None = None
    ) -> AITagResult:
        return await self.vision.analyze_image(image_url=image_url, image_data=image_data)

    async def transcribe(
        self, audio_data: bytes, content_type: str | None = None
    ) -> TranscriptionResult:
        return await self.speech.transcribe(audio_data, content_type)

    async def transcribe_url(self, audio_url: str) -> TranscriptionResult:
        return await self.speech.transcribe_url(audio_url)

    async def close(self) -> None:
        await self.text.close()
