"""Tests for EntryService upload enrichment and entry workflows"""
from datetime import UTC, datetime, timedelta

import pytest

from core.enums import EntryType, Sentiment
from core.exceptions import EntryNotFoundError
from schemas.entry import EntryUpdate
from services.entry_service import EntryService

USER = "ada@example.com"


@pytest.fixture
def service(entry_repo, storage, analysis, signer):
    return EntryService(
        entry_repo=entry_repo, storage=storage, analysis=analysis, signer=signer
    )


class TestCreateEntry:
    """Upload orchestration: blob upload, sequential enrichment, persist"""

    async def test_photo_entry_gets_image_tags(self, service, storage, entry_repo):
        entry = await service.create_entry(
            USER, EntryType.PHOTO, "Birthday", file_data=b"jpeg", filename="cake.jpg",
            content_type="image/jpeg",
        )

        assert entry.ai_tags == ["cake", "people"]
        assert entry.ai_caption == "a birthday cake"
        assert entry.category == "food_"
        assert entry.sentiment == Sentiment.NEUTRAL

        # Blob folder is the entry id, and the stored URL is unsigned
        assert list(storage.uploads) == [f"{USER}/{entry.id}/cake.jpg"]
        stored = entry_repo.entries[entry.id]
        assert "?" not in stored.media_url
        assert entry.media_url.endswith("?sig=test&hours=1")

    async def test_voice_entry_is_transcribed_then_analyzed(self, service, analysis):
        entry = await service.create_entry(
            USER, EntryType.VOICE, "Voice note", file_data=b"mp3", filename="note.mp3"
        )

        assert entry.transcription == "We had a party for my birthday"
        assert entry.sentiment == Sentiment.POSITIVE
        assert entry.emotion_score == 0.9
        assert entry.ai_tags == ["celebration"]
        assert entry.category == "celebration"
        assert [name for name, _ in analysis.calls] == ["transcribe", "sentiment", "categorize"]
        assert analysis.calls[1][1] == "We had a party for my birthday"

    async def test_text_entry_analyzes_description_or_title(self, service, analysis, storage):
        await service.create_entry(USER, EntryType.TEXT, "Title only")
        await service.create_entry(USER, EntryType.TEXT, "Title", description="Longer story")

        analyzed = [arg for name, arg in analysis.calls if name == "sentiment"]
        assert analyzed == ["Title only", "Longer story"]
        assert storage.uploads == {}

    async def test_ai_failure_uses_fallbacks(self, service, analysis, entry_repo):
        """
        GIVEN every AI service failing
        WHEN uploading a voice note
        THEN the entry is still created with the fallback values
        """
        analysis.fail = True

        entry = await service.create_entry(
            USER, EntryType.VOICE, "Voice note", file_data=b"mp3", filename="note.mp3"
        )

        assert entry.id in entry_repo.entries
        assert entry.transcription == "Transcription failed"
        assert entry.sentiment == Sentiment.NEUTRAL
        assert entry.emotion_score == 0
        assert entry.ai_tags == ["general"]
        assert entry.category == "general"
        # The placeholder transcript is never sent for analysis
        assert [name for name, _ in analysis.calls] == ["transcribe"]

    async def test_ai_failure_on_text_has_no_transcription(self, service, analysis):
        analysis.fail = True

        entry = await service.create_entry(USER, EntryType.TEXT, "Quiet day")

        assert entry.transcription is None
        assert entry.sentiment == Sentiment.NEUTRAL
        assert entry.ai_tags == ["general"]

    async def test_sentiment_failure_keeps_transcription_and_categories(
        self, service, analysis
    ):
        """
        GIVEN transcription and categorization working but sentiment failing
        WHEN uploading a voice note
        THEN only the sentiment falls back
        """
        analysis.failing = {"sentiment"}

        entry = await service.create_entry(
            USER, EntryType.VOICE, "Voice note", file_data=b"mp3", filename="note.mp3"
        )

        assert entry.transcription == "We had a party for my birthday"
        assert entry.sentiment == Sentiment.NEUTRAL
        assert entry.ai_tags == ["celebration"]
        assert entry.category == "celebration"

    async def test_categorization_failure_keeps_sentiment(self, service, analysis):
        analysis.failing = {"categorize"}

        entry = await service.create_entry(USER, EntryType.TEXT, "Got the job!")

        assert entry.sentiment == Sentiment.POSITIVE
        assert entry.emotion_score == 0.9
        assert entry.ai_tags == ["general"]
        assert entry.category == "general"

    async def test_image_failure_uses_generic_image_tag(self, service, analysis):
        analysis.failing = {"image"}

        entry = await service.create_entry(
            USER, EntryType.PHOTO, "Beach", file_data=b"jpeg", filename="beach.jpg"
        )

        assert entry.ai_tags == ["image"]
        assert entry.category == "general"
        assert entry.ai_caption is None
        assert entry.sentiment == Sentiment.NEUTRAL

    async def test_media_required_for_photo_and_voice(self, service):
        with pytest.raises(ValueError, match="File is required"):
            await service.create_entry(USER, EntryType.PHOTO, "No file")

    async def test_blank_title_rejected(self, service):
        with pytest.raises(ValueError, match="Title is required"):
            await service.create_entry(USER, EntryType.TEXT, "   ")

    async def test_future_unlock_date_locks_capsule(self, service):
        unlock = datetime.now(UTC) + timedelta(days=30)

        entry = await service.create_entry(
            USER, EntryType.TEXT, "Letter to future me", unlock_date=unlock
        )

        assert entry.is_locked is True
        assert entry.unlock_date == unlock


class TestReadAndEdit:
    async def test_list_is_scoped_to_user(self, service, entry_repo, entry_factory):
        await entry_repo.create(entry_factory("mine"))
        await entry_repo.create(entry_factory("theirs", user_id="grace@example.com"))

        entries = await service.list_entries(USER)

        assert [e.id for e in entries] == ["mine"]

    async def test_search_uses_repository_search(self, service, entry_repo, entry_factory):
        await entry_repo.create(entry_factory("1", title="Trip to Lisbon"))
        await entry_repo.create(entry_factory("2", title="Dentist"))

        entries = await service.list_entries(USER, search="lisbon")

        assert [e.id for e in entries] == ["1"]

    async def test_update_only_applies_title_and_description(
        self, service, entry_repo, entry_factory
    ):
        await entry_repo.create(entry_factory("1", sentiment=Sentiment.NEGATIVE))
        update = EntryUpdate.model_validate(
            {"title": "Renamed", "description": 42, "sentiment": "positive", "userId": "x"}
        )

        entry = await service.update_entry(USER, "1", update)

        assert entry.title == "Renamed"
        assert entry.description is None
        assert entry.sentiment == Sentiment.NEGATIVE
        assert entry.user_id == USER

    async def test_update_missing_entry(self, service):
        with pytest.raises(EntryNotFoundError):
            await service.update_entry(USER, "nope", EntryUpdate(title="x"))

    async def test_update_rejects_blank_title(self, service, entry_repo, entry_factory):
        await entry_repo.create(entry_factory("1", title="Keep me"))

        with pytest.raises(ValueError, match="Title is required"):
            await service.update_entry(USER, "1", EntryUpdate(title="   "))

        assert entry_repo.entries["1"].title == "Keep me"

    async def test_update_description_only(self, service, entry_repo, entry_factory):
        await entry_repo.create(entry_factory("1", title="Keep me"))

        entry = await service.update_entry(USER, "1", EntryUpdate(description="More"))

        assert entry.title == "Keep me"
        assert entry.description == "More"


    async def test_get_other_users_entry_is_not_found(self, service, entry_repo, entry_factory):
        await entry_repo.create(entry_factory("1", user_id="grace@example.com"))

        with pytest.raises(EntryNotFoundError):
            await service.get_entry(USER, "1")

    async def test_random_entry_without_entries(self, service):
        with pytest.raises(EntryNotFoundError):
            await service.random_entry(USER)


class TestDeleteEntry:
    async def test_delete_removes_entry_then_blob(self, service, entry_repo, storage, entry_factory):
        url = "https://timelinetest.blob.core.windows.net/timeline-media/u/1/a.jpg"
        await entry_repo.create(entry_factory("1", media_url=url))

        await service.delete_entry(USER, "1")

        assert "1" not in entry_repo.entries
        assert storage.deleted == [url]

    async def test_blob_failure_does_not_fail_delete(
        self, service, entry_repo, storage, entry_factory
    ):
        storage.fail_delete = True
        await entry_repo.create(entry_factory("1", media_url="https://x/timeline-media/a"))

        await service.delete_entry(USER, "1")

        assert "1" not in entry_repo.entries

    async def test_delete_missing_entry(self, service):
        with pytest.raises(EntryNotFoundError):
            await service.delete_entry(USER, "nope")
