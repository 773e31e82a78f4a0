from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.enums import EntryType, Sentiment


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys (the front end's wire format)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimelineEntry(CamelModel):
    """Journal record, stored as a Cosmos document partitioned by userId"""

    id: str
    user_id: str
    type: EntryType
    title: str
    description: Optional[str] = None
    date: datetime
    media_url: Optional[str] = None
    transcription: Optional[str] = None
    ai_tags: list[str] = Field(default_factory=list)
    sentiment: Optional[Sentiment] = None
    emotion_score: Optional[float] = Field(None, ge=0, le=1)
    ai_caption: Optional[str] = None
    is_locked: Optional[bool] = None
    unlock_date: Optional[datetime] = None
    category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("sentiment", mode="before")
    @classmethod
    def unknown_sentiment_is_neutral(cls, v):
        # Older documents hold raw service labels such as "mixed"
        if v is None or isinstance(v, Sentiment) or v in Sentiment.values():
            return v
        return Sentiment.NEUTRAL

    def to_document(self) -> dict:
        """Serialise for the document store (camelCase, ISO dates, no nulls)"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class EntryUpdate(BaseModel):
    """
    PATCH body. Only string title/description are applied; anything else
    (including non-string values for those keys) is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def drop_non_strings(cls, v):
        return v if isinstance(v, str) else None

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class DeleteResponse(BaseModel):
    success: bool = True
