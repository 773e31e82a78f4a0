"""Request/response schemas for the AI analysis endpoints."""
from typing import Optional

from pydantic import BaseModel

from core.enums import Sentiment
from schemas.entry import CamelModel


class SentimentScores(BaseModel):
    positive: float
    negative: float
    neutral: float


class SentimentResult(BaseModel):
    sentiment: Sentiment
    confidence: float
    scores: SentimentScores


class AITagResult(BaseModel):
    tags: list[str]
    confidence: float
    category: Optional[str] = None
    caption: Optional[str] = None


class TranscriptionResult(BaseModel):
    text: str
    confidence: float
    language: str


class TextRequest(BaseModel):
    text: Optional[str] = None


class AudioRequest(CamelModel):
    audio_url: Optional[str] = None


class ImageRequest(CamelModel):
    image_url: Optional[str] = None


class CategoriesResponse(BaseModel):
    categories: list[str]


class PromptResponse(BaseModel):
    prompt: str


# Fallbacks returned when a hosted service is unavailable
NEUTRAL_SCORES = SentimentScores(positive=0.33, negative=0.33, neutral=0.34)

FALLBACK_SENTIMENT = SentimentResult(
    sentiment=Sentiment.NEUTRAL, confidence=0, scores=NEUTRAL_SCORES
)
FALLBACK_CATEGORIES = ["general"]
FALLBACK_IMAGE_TAGS = AITagResult(tags=["image"], confidence=0, category="general")
FALLBACK_TRANSCRIPTION = TranscriptionResult(
    text="Transcription failed", confidence=0, language="en"
)
