from typing import Optional

from schemas.entry import CamelModel, TimelineEntry


class MonthlyEmotion(CamelModel):
    month: str
    positive: int
    negative: int
    neutral: int
    total: int


class SentimentSlice(CamelModel):
    sentiment: str
    name: str
    value: int
    theme_color: str


class InsightsResponse(CamelModel):
    total_entries: int
    average_sentiment: float
    most_active_month: Optional[str]
    monthly: list[MonthlyEmotion]
    sentiment_breakdown: list[SentimentSlice]
    entries_by_type: dict[str, int]


class CalendarDay(CamelModel):
    day: int
    entries: list[TimelineEntry]


class CalendarResponse(CamelModel):
    year: int
    month: int
    weeks: list[list[Optional[CalendarDay]]]


class TagCount(CamelModel):
    tag: str
    count: int


class TimelineResponse(CamelModel):
    years: dict[str, list[TimelineEntry]]
    tags: list[TagCount]


class StoryResponse(CamelModel):
    year: int
    month: Optional[int]
    entries: list[TimelineEntry]
    available_years: list[str]
