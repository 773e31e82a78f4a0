"""Hosted AI (Azure AI services) clients."""

from services.cognitive.analysis_service import AnalysisService
from services.cognitive.speech import SpeechService
from services.cognitive.text_analytics import TextAnalyticsService
from services.cognitive.vision import VisionService

__all__ = ["AnalysisService", "SpeechService", "TextAnalyticsService", "VisionService"]
