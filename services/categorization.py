"""Keyword-based life-event categorization of extracted key phrases."""
from core.enums import EntryCategory

# Checked in order; an entry may fall into several categories
CATEGORY_KEYWORDS: list[tuple[EntryCategory, tuple[str, ...]]] = [
    (
        EntryCategory.EDUCATION,
        ("graduation", "degree", "school", "university", "college"),
    ),
    (EntryCategory.CELEBRATION, ("birthday", "celebration", "party", "anniversary")),
    (EntryCategory.CAREER, ("job", "work", "career", "promotion", "interview")),
    (EntryCategory.TRAVEL, ("travel", "trip", "vacation", "flight", "hotel")),
    (EntryCategory.RELATIONSHIP, ("wedding", "marriage", "engagement", "divorce")),
    (EntryCategory.FAMILY, ("baby", "child", "family", "parent", "sibling")),
    (EntryCategory.HEALTH, ("health", "medical", "doctor", "hospital", "illness")),
]


def categorize_key_phrases(key_phrases: list[str]) -> list[str]:
    """
    Map key phrases onto life-event categories.

    A category matches when any of its keywords is a substring of any
    lower-cased phrase. Returns ["general"] when nothing matches.
    """
    phrases = [phrase.lower() for phrase in key_phrases]

    categories = [
        category.value
        for category, keywords in CATEGORY_KEYWORDS
        if any(keyword in phrase for phrase in phrases for keyword in keywords)
    ]

    return categories or [EntryCategory.GENERAL.value]
