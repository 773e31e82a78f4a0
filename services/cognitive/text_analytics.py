"""Azure AI Language client: sentiment and key phrase extraction."""
from __future__ import annotations

from azure.ai.textanalytics.aio import TextAnalyticsClient
from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import AzureError

from core.enums import Sentiment
from core.exceptions import CognitiveServiceError
from core.logging import get_logger
from schemas.analysis import SentimentResult, SentimentScores
from services.cache_service import CacheService, analysis_cache_key

logger = get_logger(__name__)

SERVICE_NAME = "Text analytics"


class TextAnalyticsService:
    """
    Sentiment and key phrases for a single document.

    Results are cached by the SHA-256 of the text when a cache is available.
    """

    def __init__(
        self,
        endpoint: str,
        key: str,
        cache: CacheService | None = None,
        cache_ttl: int = 86400,
        client: TextAnalyticsClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.key = key
        self.cache = cache
        self.cache_ttl = cache_ttl
        self._client = client

    def _get_client(self) -> TextAnalyticsClient:
        if self._client is None:
            if not self.endpoint or not self.key:
                raise CognitiveServiceError(SERVICE_NAME, "endpoint or key not configured")
            self._client = TextAnalyticsClient(
                endpoint=self.endpoint, credential=AzureKeyCredential(self.key)
            )
        return self._client

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        cache_key = analysis_cache_key("sentiment", text)
        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached:
                return SentimentResult.model_validate(cached)

        client = self._get_client()
        try:
            results = await client.analyze_sentiment(documents=[text])
        except AzureError as e:
            raise CognitiveServiceError(SERVICE_NAME, str(e)) from e

        result = results[0]
        if result.is_error:
            raise CognitiveServiceError(SERVICE_NAME, result.error.message)

        scores = SentimentScores(
            positive=result.confidence_scores.positive,
            negative=result.confidence_scores.negative,
            neutral=result.confidence_scores.neutral,
        )
        # "mixed" has no counterpart in our labels
        if result.sentiment in Sentiment.values():
            sentiment = Sentiment(result.sentiment)
        else:
            sentiment = Sentiment.NEUTRAL

        analysis = SentimentResult(
            sentiment=sentiment,
            confidence=max(scores.positive, scores.negative, scores.neutral),
            scores=scores,
        )

        if self.cache:
            await self.cache.set(cache_key, analysis.model_dump(mode="json"), ttl=self.cache_ttl)
        return analysis

    async def extract_key_phrases(self, text: str) -> list[str]:
        cache_key = analysis_cache_key("key_phrases", text)
        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                return cached

        client = self._get_client()
        try:
            results = await client.extract_key_phrases(documents=[text])
        except AzureError as e:
            raise CognitiveServiceError(SERVICE_NAME, str(e)) from e

        result = results[0]
        if result.is_error:
            raise CognitiveServiceError(SERVICE_NAME, result.error.message)

        key_phrases = list(result.key_phrases)
        logger.debug(f"Extracted {len(key_phrases)} key phrases")

        if self.cache:
            await self.cache.set(cache_key, key_phrases, ttl=self.cache_ttl)
        return key_phrases

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
