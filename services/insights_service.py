"""
Aggregations behind the dashboard, calendar, timeline, insights and story views.

All functions are pure: they take the user's entries (already loaded from the
entry store) and never touch I/O.
"""
import calendar
import random
from collections import Counter
from datetime import UTC, date, datetime
from typing import Optional, Union

from core.enums import EntryType, Sentiment
from schemas.entry import TimelineEntry
from schemas.insights import MonthlyEmotion, SentimentSlice, TagCount

DateBound = Union[date, datetime]

THEME_COLORS = {
    Sentiment.POSITIVE.value: "#FFD700",
    Sentiment.NEGATIVE.value: "#4169E1",
    Sentiment.NEUTRAL.value: "#808080",
}
EMOTION_LABELS = {
    Sentiment.POSITIVE.value: "Happy",
    Sentiment.NEGATIVE.value: "Reflective",
    Sentiment.NEUTRAL.value: "Neutral",
}
SENTIMENT_WEIGHTS = {Sentiment.POSITIVE: 1, Sentiment.NEGATIVE: -1}


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _sentiment_or_neutral(entry: TimelineEntry) -> Sentiment:
    return entry.sentiment or Sentiment.NEUTRAL


def _sentiment_key(sentiment) -> Optional[str]:
    return sentiment.value if isinstance(sentiment, Sentiment) else sentiment


def theme_color(sentiment: Optional[str]) -> str:
    return THEME_COLORS.get(_sentiment_key(sentiment), "#FFFFFF")


def emotion_label(sentiment: Optional[str]) -> str:
    return EMOTION_LABELS.get(_sentiment_key(sentiment), "Unknown")


def parse_date_bound(value: str) -> DateBound:
    """
    Parse a filter bound: "YYYY-MM-DD" gives a date, anything longer an ISO datetime.

    Raises:
        ValueError: If the value is not ISO formatted
    """
    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value)


def _after(entry: TimelineEntry, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return _aware(entry.date) >= _aware(bound)
    return entry.date.date() >= bound


def _before(entry: TimelineEntry, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return _aware(entry.date) <= _aware(bound)
    # Date-only upper bound includes the whole day
    return entry.date.date() <= bound


def filter_entries(
    entries: list[TimelineEntry],
    entry_type: Optional[EntryType] = None,
    sentiment: Optional[Sentiment] = None,
    tag: Optional[str] = None,
    date_from: Optional[DateBound] = None,
    date_to: Optional[DateBound] = None,
) -> list[TimelineEntry]:
    """Dashboard filters. Every criterion is optional and they combine with AND."""
    filtered = entries

    if entry_type:
        filtered = [e for e in filtered if e.type == entry_type]

    if sentiment:
        filtered = [e for e in filtered if e.sentiment == sentiment]

    if tag:
        needle = tag.lower()
        filtered = [e for e in filtered if any(needle in t.lower() for t in e.ai_tags)]

    if date_from is not None:
        filtered = [e for e in filtered if _after(e, date_from)]

    if date_to is not None:
        filtered = [e for e in filtered if _before(e, date_to)]

    return filtered


def group_by_year(entries: list[TimelineEntry]) -> dict[str, list[TimelineEntry]]:
    """Group entries by year (newest year first), keeping their order within a year"""
    groups: dict[str, list[TimelineEntry]] = {}
    for entry in entries:
        groups.setdefault(str(entry.date.year), []).append(entry)
    return dict(sorted(groups.items(), key=lambda item: item[0], reverse=True))


def aggregate_emotions_by_month(entries: list[TimelineEntry]) -> list[MonthlyEmotion]:
    """Sentiment counts per YYYY-MM, sorted by month. Missing sentiment counts as neutral."""
    monthly: dict[str, Counter] = {}
    for entry in entries:
        month_key = f"{entry.date.year}-{entry.date.month:02d}"
        monthly.setdefault(month_key, Counter())[_sentiment_or_neutral(entry)] += 1

    return [
        MonthlyEmotion(
            month=month,
            positive=counts[Sentiment.POSITIVE],
            negative=counts[Sentiment.NEGATIVE],
            neutral=counts[Sentiment.NEUTRAL],
            total=sum(counts.values()),
        )
        for month, counts in sorted(monthly.items())
    ]


def most_active_month(monthly: list[MonthlyEmotion]) -> Optional[str]:
    """Month with the most entries; the earliest month wins a tie"""
    if not monthly:
        return None
    busiest = monthly[0]
    for current in monthly[1:]:
        if current.total > busiest.total:
            busiest = current
    return busiest.month


def sentiment_breakdown(entries: list[TimelineEntry]) -> list[SentimentSlice]:
    counts = Counter(_sentiment_or_neutral(entry).value for entry in entries)
    return [
        SentimentSlice(
            sentiment=sentiment,
            name=emotion_label(sentiment),
            value=count,
            theme_color=theme_color(sentiment),
        )
        for sentiment, count in counts.items()
    ]


def average_sentiment(entries: list[TimelineEntry]) -> float:
    """Mean of +1 (positive), -1 (negative) and 0 (anything else); 0 for no entries"""
    if not entries:
        return 0.0
    total = sum(SENTIMENT_WEIGHTS.get(entry.sentiment, 0) for entry in entries)
    return total / len(entries)


def entries_by_type(entries: list[TimelineEntry]) -> dict[str, int]:
    counts = Counter(entry.type.value for entry in entries)
    return {entry_type: counts.get(entry_type, 0) for entry_type in EntryType.values()}


def get_month_matrix(year: int, month: int) -> list[list[Optional[int]]]:
    """
    Six Sunday-first weeks covering a month (month is 1-12).

    Cells outside the month are None, so every month renders as the same
    6x7 grid.
    """
    first_weekday, days_in_month = calendar.monthrange(year, month)
    # calendar counts Monday as 0; the grid starts on Sunday
    start_day = (first_weekday + 1) % 7

    weeks = []
    current = 1 - start_day
    for _ in range(6):
        week: list[Optional[int]] = []
        for _ in range(7):
            week.append(current if 1 <= current <= days_in_month else None)
            current += 1
        weeks.append(week)
    return weeks


def entries_by_day(
    entries: list[TimelineEntry], year: int, month: int
) -> dict[int, list[TimelineEntry]]:
    days: dict[int, list[TimelineEntry]] = {}
    for entry in entries:
        if entry.date.year == year and entry.date.month == month:
            days.setdefault(entry.date.day, []).append(entry)
    return days


def tag_frequencies(entries: list[TimelineEntry]) -> list[TagCount]:
    """Tag cloud: most used tags first, ties alphabetical"""
    counts = Counter(tag for entry in entries for tag in entry.ai_tags)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TagCount(tag=tag, count=count) for tag, count in ordered]


def story_entries(
    entries: list[TimelineEntry], year: int, month: Optional[int] = None
) -> list[TimelineEntry]:
    """Entries of a year (optionally one month of it), oldest first"""
    selected = [
        entry
        for entry in entries
        if entry.date.year == year and (month is None or entry.date.month == month)
    ]
    return sorted(selected, key=lambda entry: _aware(entry.date))


def available_years(
    entries: list[TimelineEntry], current_year: Optional[int] = None
) -> list[str]:
    """Years that have entries plus the current year, newest first"""
    years = {entry.date.year for entry in entries}
    years.add(current_year or datetime.now(UTC).year)
    return [str(year) for year in sorted(years, reverse=True)]


def pick_random(entries: list[TimelineEntry]) -> Optional[TimelineEntry]:
    if not entries:
        return None
    return random.choice(entries)


def refresh_capsule_state(
    entry: TimelineEntry, now: Optional[datetime] = None
) -> TimelineEntry:
    """Unlock a time capsule whose unlock date has passed"""
    if not entry.is_locked or entry.unlock_date is None:
        return entry

    now = now or datetime.now(UTC)
    if _aware(entry.unlock_date) <= _aware(now):
        return entry.model_copy(update={"is_locked": False})
    return entry
