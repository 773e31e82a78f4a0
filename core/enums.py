from enum import Enum


class EntryType(str, Enum):
    """Timeline entry type enumeration"""
    PHOTO = "photo"
    VOICE = "voice"
    TEXT = "text"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [entry_type.value for entry_type in cls]


class Sentiment(str, Enum):
    """Sentiment label enumeration"""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [sentiment.value for sentiment in cls]


class EntryCategory(str, Enum):
    """Life-event categories derived from key phrases"""
    EDUCATION = "education"
    CELEBRATION = "celebration"
    CAREER = "career"
    TRAVEL = "travel"
    RELATIONSHIP = "relationship"
    FAMILY = "family"
    HEALTH = "health"
    GENERAL = "general"
