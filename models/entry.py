from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from models.mixins import CuidMixin, TimestampMixin


class TimelineEntryRecord(CuidMixin, TimestampMixin, Base):
    """
    Timeline entry row for the sql entry store.

    Mirrors the Cosmos document shape; user_id plays the partition key role.
    """

    __tablename__ = "timeline_entry"

    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Media and AI enrichment
    media_url: Mapped[str | None] = mapped_column(String, nullable=True)
    transcription: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sentiment: Mapped[str | None] = mapped_column(String(16), nullable=True)
    emotion_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    ai_caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)

    # Time capsule
    is_locked: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    unlock_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("ix_timeline_entry_user_date", "user_id", "date"),)
