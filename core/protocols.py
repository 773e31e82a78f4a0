from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from schemas.analysis import AITagResult, SentimentResult, TranscriptionResult
    from schemas.entry import TimelineEntry


class IEntryRepository(Protocol):
    """Protocol for timeline entry stores (DIP). Every lookup is scoped to a user."""

    async def create(self, entry: TimelineEntry) -> TimelineEntry:
        """Persist a new entry"""
        ...

    async def list_by_user(self, user_id: str) -> list[TimelineEntry]:
        """All entries of a user, newest date first"""
        ...

    async def search(self, user_id: str, term: str) -> list[TimelineEntry]:
        """Entries whose title/description contain term, or tagged exactly term"""
        ...

    async def get(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        """Get a single entry owned by user"""
        ...

    async def update(
        self, user_id: str, entry_id: str, changes: dict[str, Any]
    ) -> TimelineEntry | None:
        """Merge changes into an entry and bump updated_at"""
        ...

    async def delete(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        """Delete an entry, returning what was removed"""
        ...

    async def ping(self) -> bool:
        """Cheap connectivity check for health probes"""
        ...


class IAnalysisService(Protocol):
    """Protocol for hosted AI enrichment. Methods raise CognitiveServiceError."""

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        ...

    async def categorize_text(self, text: str) -> list[str]:
        ...

    async def analyze_image(
        self, image_url: str | None = None, image_data: bytes | None = None
    ) -> AITagResult:
        ...

    async def transcribe(
        self, audio_data: bytes, content_type: str | None = None
    ) -> TranscriptionResult:
        ...

    async def transcribe_url(self, audio_url: str) -> TranscriptionResult:
        ...
