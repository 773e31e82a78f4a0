from datetime import UTC, datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from api.deps import get_current_user, get_entry_service
from core.config import get_settings
from core.enums import EntryType
from core.exceptions import EntryStoreError, StorageException
from core.logging import get_logger
from core.rate_limit import AI_RATE_LIMIT, limiter
from schemas.entry import TimelineEntry
from schemas.token import TokenPayload
from services.entry_service import EntryService

logger = get_logger(__name__)

router = APIRouter()


def _parse_unlock_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid unlockDate: {value}",
        ) from e
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


@router.post(
    "/upload", response_model=TimelineEntry, status_code=status.HTTP_201_CREATED
)
@limiter.limit(AI_RATE_LIMIT)
async def upload_entry(
    request: Request,  # Required by slowapi for rate limiting
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
    entry_type: Annotated[str, Form(alias="type")] = "",
    title: Annotated[str, Form()] = "",
    description: Annotated[Optional[str], Form()] = None,
    unlock_date: Annotated[Optional[str], Form(alias="unlockDate")] = None,
    file: Annotated[Optional[UploadFile], File()] = None,
):
    """
    Create a timeline entry from a photo, voice note or text milestone.

    Media goes to blob storage, then the entry is enriched (tags, caption,
    transcription, sentiment, categories) before it is stored. AI failures
    fall back to neutral defaults; storage failures fail the upload.
    """
    if entry_type not in EntryType.values():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid type '{entry_type}'. Must be one of: {', '.join(EntryType.values())}",
        )

    file_data = None
    if file is not None:
        file_data = await file.read()
        max_size = get_settings().max_upload_size
        if len(file_data) > max_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum size: {max_size} bytes",
            )

    logger.info(
        f"[UPLOAD] type={entry_type} file={file.filename if file else None} "
        f"size={len(file_data) if file_data is not None else 0} user={user.user_id}"
    )

    try:
        return await service.create_entry(
            user.user_id,
            EntryType(entry_type),
            title=title,
            description=description,
            file_data=file_data,
            filename=file.filename if file else None,
            content_type=file.content_type if file else None,
            unlock_date=_parse_unlock_date(unlock_date),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except (StorageException, EntryStoreError) as e:
        logger.error(f"[UPLOAD] Error: {e.to_dict()}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to upload entry", "message": e.message},
        )
