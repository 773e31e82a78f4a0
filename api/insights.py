"""Read-only views over a user's entries: insights, calendar, timeline, story."""
from datetime import UTC, datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query

from api.deps import get_current_user, get_entry_service
from core.exceptions import EntryStoreError
from core.logging import get_logger
from schemas.entry import TimelineEntry
from schemas.insights import (
    CalendarDay,
    CalendarResponse,
    InsightsResponse,
    StoryResponse,
    TimelineResponse,
)
from schemas.token import TokenPayload
from services import insights_service
from services.entry_service import EntryService

logger = get_logger(__name__)

router = APIRouter()

Month = Annotated[Optional[int], Query(ge=1, le=12, description="Month, 1-12")]


async def _load_entries(service: EntryService, user_id: str) -> list[TimelineEntry]:
    try:
        return await service.list_entries(user_id)
    except EntryStoreError as e:
        logger.error(f"Failed to load entries for {user_id}: {e.details}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch entries",
        ) from e


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Mood and activity statistics across all of the user's entries"""
    entries = await _load_entries(service, user.user_id)
    monthly = insights_service.aggregate_emotions_by_month(entries)

    return InsightsResponse(
        total_entries=len(entries),
        average_sentiment=insights_service.average_sentiment(entries),
        most_active_month=insights_service.most_active_month(monthly),
        monthly=monthly,
        sentiment_breakdown=insights_service.sentiment_breakdown(entries),
        entries_by_type=insights_service.entries_by_type(entries),
    )


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
    year: Annotated[Optional[int], Query(ge=1, le=9999)] = None,
    month: Month = None,
):
    """Sunday-first 6x7 month grid; defaults to the current month"""
    now = datetime.now(UTC)
    year = year or now.year
    month = month or now.month

    entries = await _load_entries(service, user.user_id)
    by_day = insights_service.entries_by_day(entries, year, month)

    weeks = [
        [
            CalendarDay(day=day, entries=by_day.get(day, [])) if day else None
            for day in week
        ]
        for week in insights_service.get_month_matrix(year, month)
    ]
    return CalendarResponse(year=year, month=month, weeks=weeks)


@router.get("/timeline", response_model=TimelineResponse)
async def get_timeline(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Entries grouped by year (newest first) plus the tag cloud"""
    entries = await _load_entries(service, user.user_id)
    return TimelineResponse(
        years=insights_service.group_by_year(entries),
        tags=insights_service.tag_frequencies(entries),
    )


@router.get("/story", response_model=StoryResponse)
async def get_story(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
    year: Annotated[Optional[int], Query(ge=1, le=9999)] = None,
    month: Month = None,
):
    """Year-in-review: a year's (or month's) entries in chronological order"""
    current_year = datetime.now(UTC).year
    year = year or current_year

    entries = await _load_entries(service, user.user_id)
    return StoryResponse(
        year=year,
        month=month,
        entries=insights_service.story_entries(entries, year, month),
        available_years=insights_service.available_years(entries, current_year),
    )
