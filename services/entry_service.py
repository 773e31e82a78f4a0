from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from core.enums import EntryType, Sentiment
from core.exceptions import CognitiveServiceError, EntryNotFoundError, StorageException
from core.logging import get_logger
from core.protocols import IAnalysisService, IEntryRepository
from core.storage_protocols import IStorageService
from schemas.analysis import (
    FALLBACK_CATEGORIES,
    FALLBACK_IMAGE_TAGS,
    FALLBACK_SENTIMENT,
    FALLBACK_TRANSCRIPTION,
    SentimentResult,
)
from schemas.entry import EntryUpdate, TimelineEntry
from services.insights_service import pick_random, refresh_capsule_state
from services.media_url import MediaUrlSigner
from utils.generators import generate_entry_id

logger = get_logger(__name__)


class EntryService:
    """Timeline entry workflows: upload with AI enrichment, reads, edits, deletes"""

    def __init__(
        self,
        entry_repo: IEntryRepository,
        storage: IStorageService,
        analysis: IAnalysisService,
        signer: MediaUrlSigner,
    ) -> None:
        self.entry_repo = entry_repo
        self.storage = storage
        self.analysis = analysis
        self.signer = signer

    def _present(self, entry: TimelineEntry) -> TimelineEntry:
        """Shape a stored entry for the client: signed media URL, current capsule state"""
        return self.signer.sign_entry(refresh_capsule_state(entry))

    async def create_entry(
        self,
        user_id: str,
        entry_type: EntryType,
        title: str,
        description: str | None = None,
        file_data: bytes | None = None,
        filename: str | None = None,
        content_type: str | None = None,
        unlock_date: datetime | None = None,
    ) -> TimelineEntry:
        """
        Create an entry: upload media, enrich it with AI, then persist.

        Enrichment runs sequentially. An AI failure never fails the upload;
        the failing call is replaced by its fallback result instead.

        Raises:
            ValueError: If the title is blank or photo/voice entries lack a file
            StorageException: If the media upload fails
            EntryStoreError: If the entry can't be persisted
        """
        # 1. Validate input
        if not title or not title.strip():
            raise ValueError("Title is required")
        if entry_type != EntryType.TEXT and file_data is None:
            raise ValueError("File is required")

        # 2. Upload media (blob folder shares the entry id)
        entry_id = generate_entry_id()
        media_url = None
        if file_data is not None and entry_type != EntryType.TEXT:
            blob_name = f"{user_id}/{entry_id}/{filename or 'upload'}"
            media_url = await self.storage.upload(file_data, blob_name, content_type)

        # 3. Enrich
        enrichment = await self._enrich(
            entry_type, title, description, file_data, content_type
        )

        # 4. Persist
        now = datetime.now(UTC)
        entry = TimelineEntry(
            id=entry_id,
            user_id=user_id,
            type=entry_type,
            title=title,
            description=description or None,
            date=now,
            media_url=media_url,
            unlock_date=unlock_date,
            is_locked=unlock_date > now if unlock_date else None,
            created_at=now,
            updated_at=now,
            **enrichment,
        )
        created = await self.entry_repo.create(entry)
        logger.info(f"Created {entry_type.value} entry {created.id} for user {user_id}")
        return self._present(created)

    async def _enrich(
        self,
        entry_type: EntryType,
        title: str,
        description: str | None,
        file_data: bytes | None,
        content_type: str | None,
    ) -> dict[str, Any]:
        """
        AI fields for a new entry. Each hosted call falls back on its own, so
        one failing service never discards what the others returned.
        """
        if entry_type == EntryType.PHOTO:
            try:
                image = await self.analysis.analyze_image(image_data=file_data)
            except CognitiveServiceError as e:
                logger.warning(f"Image analysis failed, using fallback tags: {e}")
                image = FALLBACK_IMAGE_TAGS
            return {
                "ai_tags": list(image.tags),
                "category": image.category,
                "ai_caption": image.caption,
                "sentiment": Sentiment.NEUTRAL,
            }

        if entry_type == EntryType.VOICE:
            try:
                transcription = await self.analysis.transcribe(file_data, content_type)
            except CognitiveServiceError as e:
                logger.warning(f"Transcription failed, skipping text analysis: {e}")
                # Nothing to analyse: don't score the placeholder text
                return {
                    "transcription": FALLBACK_TRANSCRIPTION.text,
                    **self._text_fields(FALLBACK_SENTIMENT, FALLBACK_CATEGORIES),
                }
            return {
                "transcription": transcription.text,
                **await self._analyze_text(transcription.text),
            }

        return await self._analyze_text(description or title)

    async def _analyze_text(self, text: str) -> dict[str, Any]:
        try:
            sentiment = await self.analysis.analyze_sentiment(text)
        except CognitiveServiceError as e:
            logger.warning(f"Sentiment analysis failed, using neutral: {e}")
            sentiment = FALLBACK_SENTIMENT

        try:
            categories = await self.analysis.categorize_text(text)
        except CognitiveServiceError as e:
            logger.warning(f"Text categorization failed, using general: {e}")
            categories = FALLBACK_CATEGORIES

        return self._text_fields(sentiment, categories)

    @staticmethod
    def _text_fields(sentiment: SentimentResult, categories: list[str]) -> dict[str, Any]:
        return {
            "sentiment": sentiment.sentiment,
            "emotion_score": sentiment.confidence,
            "ai_tags": list(categories),
            "category": categories[0] if categories else None,
        }

    async def list_entries(
        self, user_id: str, search: str | None = None
    ) -> list[TimelineEntry]:
        """All of a user's entries, newest first, optionally narrowed by a search term"""
        if search:
            entries = await self.entry_repo.search(user_id, search)
        else:
            entries = await self.entry_repo.list_by_user(user_id)
        return self.signer.sign_entries([refresh_capsule_state(e) for e in entries])

    async def get_entry(self, user_id: str, entry_id: str) -> TimelineEntry:
        entry = await self.entry_repo.get(user_id, entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return self._present(entry)

    async def update_entry(
        self, user_id: str, entry_id: str, update: EntryUpdate
    ) -> TimelineEntry:
        """
        Apply a PATCH; only title and description are ever changed.

        Raises:
            ValueError: If the new title is blank
            EntryNotFoundError: If the user has no such entry
        """
        changes = update.changes()
        if "title" in changes and not changes["title"].strip():
            raise ValueError("Title is required")
        if changes:
            entry = await self.entry_repo.update(user_id, entry_id, changes)
        else:
            entry = await self.entry_repo.get(user_id, entry_id)

        if entry is None:
            raise EntryNotFoundError(entry_id)
        return self._present(entry)

    async def delete_entry(self, user_id: str, entry_id: str) -> None:
        """
        Delete an entry, then its media.

        Blob cleanup is best effort: the entry is already gone, so a storage
        failure is logged rather than raised.
        """
        deleted = await self.entry_repo.delete(user_id, entry_id)
        if deleted is None:
            raise EntryNotFoundError(entry_id)

        if deleted.media_url:
            try:
                await self.storage.delete(deleted.media_url)
            except StorageException as e:
                logger.warning(f"Failed to delete media for entry {entry_id}: {e}")

    async def random_entry(self, user_id: str) -> TimelineEntry:
        entry = pick_random(await self.entry_repo.list_by_user(user_id))
        if entry is None:
            raise EntryNotFoundError("random")
        return self._present(entry)
