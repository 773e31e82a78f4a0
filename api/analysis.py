"""Direct access to the hosted AI services (used by the voice recorder and editors)."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.deps import get_analysis_service, get_current_user, get_media_signer
from core.enums import Sentiment
from core.exceptions import CognitiveServiceError
from core.logging import get_logger
from core.protocols import IAnalysisService
from core.rate_limit import AI_RATE_LIMIT, limiter
from schemas.analysis import (
    FALLBACK_IMAGE_TAGS,
    NEUTRAL_SCORES,
    AITagResult,
    AudioRequest,
    CategoriesResponse,
    ImageRequest,
    SentimentResult,
    TextRequest,
    TranscriptionResult,
)
from schemas.token import TokenPayload
from services.media_url import MediaUrlSigner

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])

# Served when the language service is down, so the UI still renders a mood
UNAVAILABLE_SENTIMENT = SentimentResult(
    sentiment=Sentiment.NEUTRAL, confidence=0.5, scores=NEUTRAL_SCORES
)


def _require(value: str | None, name: str) -> str:
    if not value or not value.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"{name} is required"
        )
    return value


@router.post("/analyze-sentiment", response_model=SentimentResult)
@limiter.limit(AI_RATE_LIMIT)
async def analyze_sentiment(
    request: Request,  # Required by slowapi for rate limiting
    body: TextRequest,
    analysis: Annotated[IAnalysisService, Depends(get_analysis_service)],
):
    text = _require(body.text, "Text")
    try:
        return await analysis.analyze_sentiment(text)
    except CognitiveServiceError as e:
        logger.error(f"Sentiment analysis error: {e.message}")
        return UNAVAILABLE_SENTIMENT


@router.post("/categorize-text", response_model=CategoriesResponse)
@limiter.limit(AI_RATE_LIMIT)
async def categorize_text(
    request: Request,
    body: TextRequest,
    analysis: Annotated[IAnalysisService, Depends(get_analysis_service)],
):
    text = _require(body.text, "Text")
    try:
        return CategoriesResponse(categories=await analysis.categorize_text(text))
    except CognitiveServiceError as e:
        logger.error(f"Text categorization error: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to categorize text",
        ) from e


@router.post("/transcribe", response_model=TranscriptionResult)
@limiter.limit(AI_RATE_LIMIT)
async def transcribe(
    request: Request,
    body: AudioRequest,
    analysis: Annotated[IAnalysisService, Depends(get_analysis_service)],
    signer: Annotated[MediaUrlSigner, Depends(get_media_signer)],
):
    """Transcribe a recording already uploaded to our media container"""
    audio_url = _require(body.audio_url, "Audio URL")
    # The server fetches this URL, so only our own blobs are accepted
    if not signer.is_own_media_url(audio_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio URL must point to timeline media storage",
        )
    try:
        return await analysis.transcribe_url(audio_url)
    except CognitiveServiceError as e:
        logger.error(f"Transcription error: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to transcribe audio",
        ) from e


@router.post("/analyze-image", response_model=AITagResult)
@limiter.limit(AI_RATE_LIMIT)
async def analyze_image(
    request: Request,
    body: ImageRequest,
    analysis: Annotated[IAnalysisService, Depends(get_analysis_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Tag an image; never fails, the generic "image" tag stands in on error"""
    if not body.image_url:
        return FALLBACK_IMAGE_TAGS
    try:
        return await analysis.analyze_image(image_url=body.image_url)
    except CognitiveServiceError as e:
        logger.error(f"Error analyzing image for {user.user_id}: {e.message}")
        return FALLBACK_IMAGE_TAGS
