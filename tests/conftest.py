"""Shared test fixtures for pytest"""
import os

# Settings are read (and cached) at import time of the app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ENTRY_STORE"] = "cosmos"
os.environ["REDIS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AZURE_STORAGE_ACCOUNT"] = "timelinetest"
os.environ["AZURE_STORAGE_CONTAINER"] = "timeline-media"

from datetime import UTC, datetime, timedelta  # noqa: E402
from typing import Any  # noqa: E402
from urllib.parse import quote  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from api.deps import get_analysis_service, get_entry_repo, get_storage_service  # noqa: E402
from core.auth import create_access_token  # noqa: E402
from core.enums import EntryType, Sentiment  # noqa: E402
from core.exceptions import CognitiveServiceError, StorageDeleteError  # noqa: E402
from main import app  # noqa: E402
from schemas.analysis import (  # noqa: E402
    AITagResult,
    SentimentResult,
    SentimentScores,
    TranscriptionResult,
)
from schemas.entry import TimelineEntry  # noqa: E402
from services.media_url import MediaUrlSigner  # noqa: E402

ACCOUNT_URL = "https://timelinetest.blob.core.windows.net"
CONTAINER = "timeline-media"


class InMemoryEntryRepository:
    """Dict-backed IEntryRepository with the same ordering/search rules as the real stores"""

    def __init__(self):
        self.entries: dict[str, TimelineEntry] = {}

    def _owned(self, user_id: str) -> list[TimelineEntry]:
        owned = [e for e in self.entries.values() if e.user_id == user_id]
        return sorted(owned, key=lambda e: e.date, reverse=True)

    async def create(self, entry: TimelineEntry) -> TimelineEntry:
        self.entries[entry.id] = entry
        return entry

    async def list_by_user(self, user_id: str) -> list[TimelineEntry]:
        return self._owned(user_id)

    async def search(self, user_id: str, term: str) -> list[TimelineEntry]:
        needle = term.lower()
        return [
            e
            for e in self._owned(user_id)
            if needle in e.title.lower()
            or needle in (e.description or "").lower()
            or term in e.ai_tags
        ]

    async def get(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        entry = self.entries.get(entry_id)
        return entry if entry and entry.user_id == user_id else None

    async def update(
        self, user_id: str, entry_id: str, changes: dict[str, Any]
    ) -> TimelineEntry | None:
        entry = await self.get(user_id, entry_id)
        if entry is None:
            return None
        updated = entry.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        self.entries[entry_id] = updated
        return updated

    async def delete(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        entry = await self.get(user_id, entry_id)
        if entry is None:
            return None
        return self.entries.pop(entry_id)

    async def ping(self) -> bool:
        return True


class FakeStorage:
    """IStorageService double that records uploads/deletes and signs with a fixed token"""

    def __init__(self, container_name: str = CONTAINER, can_sign: bool = True):
        self.container_name = container_name
        self.can_sign = can_sign
        self.uploads: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_delete = False

    async def upload(self, file_data, blob_name: str, content_type=None) -> str:
        self.uploads[blob_name] = file_data
        return self.get_file_url(blob_name)

    async def delete(self, blob_url: str) -> bool:
        if self.fail_delete:
            raise StorageDeleteError(blob_url, "boom")
        self.deleted.append(blob_url)
        return True

    def get_file_url(self, blob_name: str) -> str:
        return f"{ACCOUNT_URL}/{self.container_name}/{quote(blob_name)}"

    def generate_read_sas_url(self, blob_name: str, hours: int = 1) -> str | None:
        if not self.can_sign:
            return None
        return f"{self.get_file_url(blob_name)}?sig=test&hours={hours}"


class FakeAnalysis:
    """
    IAnalysisService double. Set `fail = True` to make every call raise, or add
    call names ("sentiment", "image", ...) to `failing` to fail just those.
    """

    def __init__(self):
        self.fail = False
        self.failing: set[str] = set()
        self.sentiment = SentimentResult(
            sentiment=Sentiment.POSITIVE,
            confidence=0.9,
            scores=SentimentScores(positive=0.9, negative=0.05, neutral=0.05),
        )
        self.categories = ["celebration"]
        self.image = AITagResult(
            tags=["cake", "people"], confidence=0.97, category="food_", caption="a birthday cake"
        )
        self.transcription = TranscriptionResult(
            text="We had a party for my birthday", confidence=0.92, language="en-US"
        )
        self.calls: list[tuple[str, Any]] = []

    def _check(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.fail or name in self.failing:
            raise CognitiveServiceError(name, "service unavailable")

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        self._check("sentiment", text)
        return self.sentiment

    async def categorize_text(self, text: str) -> list[str]:
        self._check("categorize", text)
        return self.categories

    async def analyze_image(self, image_url=None, image_data=None) -> AITagResult:
        self._check("image", image_url or image_data)
        return self.image

    async def transcribe(self, audio_data: bytes, content_type=None) -> TranscriptionResult:
        self._check("transcribe", audio_data)
        return self.transcription

    async def transcribe_url(self, audio_url: str) -> TranscriptionResult:
        self._check("transcribe_url", audio_url)
        return self.transcription


def make_entry(
    entry_id: str = "entry-1",
    user_id: str = "ada@example.com",
    date: datetime | None = None,
    **fields: Any,
) -> TimelineEntry:
    """Build a TimelineEntry with sensible defaults"""
    date = date or datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
    values: dict[str, Any] = {
        "id": entry_id,
        "user_id": user_id,
        "type": EntryType.TEXT,
        "title": f"Entry {entry_id}",
        "date": date,
        "created_at": date,
        "updated_at": date,
    }
    values.update(fields)
    return TimelineEntry(**values)


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def entry_repo():
    return InMemoryEntryRepository()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def analysis():
    return FakeAnalysis()


@pytest.fixture
def signer(storage):
    return MediaUrlSigner(storage, ttl_hours=1)


def _auth_headers(email: str, sub: str) -> dict[str, str]:
    token = create_access_token(
        {"sub": sub, "email": email, "name": "Test User"},
        expires_delta=timedelta(minutes=5),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Bearer token for ada@example.com (owner id in entries)"""
    return _auth_headers("ada@example.com", "google-oauth2|1")


@pytest.fixture
def other_auth_headers():
    """Bearer token for a different user"""
    return _auth_headers("grace@example.com", "google-oauth2|2")


@pytest.fixture
async def client(entry_repo, storage, analysis):
    """HTTP client for API testing, wired to in-memory fakes"""

    async def override_get_entry_repo():
        yield entry_repo

    async def override_get_storage_service():
        return storage

    async def override_get_analysis_service():
        return analysis

    app.dependency_overrides[get_entry_repo] = override_get_entry_repo
    app.dependency_overrides[get_storage_service] = override_get_storage_service
    app.dependency_overrides[get_analysis_service] = override_get_analysis_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
