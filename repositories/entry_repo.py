import json
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import String, cast, desc, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from models.entry import TimelineEntryRecord
from schemas.entry import TimelineEntry

# PATCH-able / merge-able attributes (snake_case, as on TimelineEntry)
_MUTABLE_FIELDS = {
    "title",
    "description",
    "media_url",
    "transcription",
    "ai_tags",
    "sentiment",
    "emotion_score",
    "ai_caption",
    "is_locked",
    "unlock_date",
    "category",
}


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; every stored timestamp is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SqlEntryRepository:
    """Timeline entries in a relational database (SQLAlchemy async)"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _to_entry(record: TimelineEntryRecord) -> TimelineEntry:
        return TimelineEntry(
            id=record.id,
            user_id=record.user_id,
            type=record.type,
            title=record.title,
            description=record.description,
            date=_aware(record.date),
            media_url=record.media_url,
            transcription=record.transcription,
            ai_tags=list(record.ai_tags or []),
            sentiment=record.sentiment,
            emotion_score=record.emotion_score,
            ai_caption=record.ai_caption,
            is_locked=record.is_locked,
            unlock_date=_aware(record.unlock_date),
            category=record.category,
            created_at=_aware(record.created_at),
            updated_at=_aware(record.updated_at),
        )

    async def _get_record(
        self, user_id: str, entry_id: str
    ) -> TimelineEntryRecord | None:
        result = await self.db.execute(
            select(TimelineEntryRecord).where(
                TimelineEntryRecord.id == entry_id,
                TimelineEntryRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, entry: TimelineEntry) -> TimelineEntry:
        record = TimelineEntryRecord(
            id=entry.id,
            user_id=entry.user_id,
            type=entry.type.value,
            title=entry.title,
            description=entry.description,
            date=entry.date,
            media_url=entry.media_url,
            transcription=entry.transcription,
            ai_tags=list(entry.ai_tags),
            sentiment=entry.sentiment.value if entry.sentiment else None,
            emotion_score=entry.emotion_score,
            ai_caption=entry.ai_caption,
            is_locked=entry.is_locked,
            unlock_date=entry.unlock_date,
            category=entry.category,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return self._to_entry(record)

    async def list_by_user(self, user_id: str) -> list[TimelineEntry]:
        result = await self.db.execute(
            select(TimelineEntryRecord)
            .where(TimelineEntryRecord.user_id == user_id)
            .order_by(desc(TimelineEntryRecord.date))
        )
        return [self._to_entry(r) for r in result.scalars().all()]

    async def search(self, user_id: str, term: str) -> list[TimelineEntry]:
        # Tags are a JSON array; an exact element match shows up as "term" in its text form
        tag_literal = json.dumps(term)
        result = await self.db.execute(
            select(TimelineEntryRecord)
            .where(
                TimelineEntryRecord.user_id == user_id,
                or_(
                    TimelineEntryRecord.title.icontains(term, autoescape=True),
                    TimelineEntryRecord.description.icontains(term, autoescape=True),
                    cast(TimelineEntryRecord.ai_tags, String).contains(
                        tag_literal, autoescape=True
                    ),
                ),
            )
            .order_by(desc(TimelineEntryRecord.date))
        )
        return [self._to_entry(r) for r in result.scalars().all()]

    async def get(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        record = await self._get_record(user_id, entry_id)
        return self._to_entry(record) if record else None

    async def update(
        self, user_id: str, entry_id: str, changes: dict[str, Any]
    ) -> TimelineEntry | None:
        record = await self._get_record(user_id, entry_id)
        if not record:
            return None

        for field, value in changes.items():
            if field in _MUTABLE_FIELDS:
                setattr(record, field, value)
        record.updated_at = datetime.now(UTC)

        await self.db.flush()
        await self.db.refresh(record)
        return self._to_entry(record)

    async def delete(self, user_id: str, entry_id: str) -> TimelineEntry | None:
        record = await self._get_record(user_id, entry_id)
        if not record:
            return None

        removed = self._to_entry(record)
        await self.db.delete(record)
        await self.db.flush()
        return removed

    async def ping(self) -> bool:
        await self.db.execute(text("SELECT 1"))
        return True
