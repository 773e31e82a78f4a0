from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query

from api.deps import get_current_user, get_entry_service
from core.enums import EntryType, Sentiment
from core.exceptions import EntryNotFoundError, EntryStoreError
from core.logging import get_logger
from schemas.entry import DeleteResponse, EntryUpdate, TimelineEntry
from schemas.token import TokenPayload
from services.entry_service import EntryService
from services.insights_service import filter_entries, parse_date_bound

logger = get_logger(__name__)

router = APIRouter()


def _store_error(action: str, e: EntryStoreError) -> HTTPException:
    logger.error(f"Entry store failure ({action}): {e.to_dict()}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("/entries", response_model=list[TimelineEntry])
async def list_entries(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
    search: Annotated[
        Optional[str], Query(description="Matches title/description, or an exact tag")
    ] = None,
    entry_type: Annotated[Optional[EntryType], Query(alias="type")] = None,
    sentiment: Optional[Sentiment] = None,
    tag: Annotated[
        Optional[str], Query(description="Case-insensitive tag substring")
    ] = None,
    date_from: Annotated[
        Optional[str], Query(alias="dateFrom", description="ISO date or datetime")
    ] = None,
    date_to: Annotated[
        Optional[str],
        Query(alias="dateTo", description="ISO date (whole day) or datetime"),
    ] = None,
):
    """List the user's entries, newest first, with optional dashboard filters"""
    try:
        lower = parse_date_bound(date_from) if date_from else None
        upper = parse_date_bound(date_to) if date_to else None
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date filter: {e}"
        ) from e

    try:
        entries = await service.list_entries(user.user_id, search=search)
    except EntryStoreError as e:
        raise _store_error("fetch entries", e) from e

    return filter_entries(
        entries,
        entry_type=entry_type,
        sentiment=sentiment,
        tag=tag,
        date_from=lower,
        date_to=upper,
    )


@router.get("/entries/{entry_id}", response_model=TimelineEntry)
async def get_entry(
    entry_id: str,
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Get a single entry by ID"""
    try:
        return await service.get_entry(user.user_id, entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail="Entry not found") from e
    except EntryStoreError as e:
        raise _store_error("fetch entry", e) from e


@router.patch("/entries/{entry_id}", response_model=TimelineEntry)
async def update_entry(
    entry_id: str,
    update: EntryUpdate,
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Edit an entry's title and/or description; other fields are ignored"""
    try:
        return await service.update_entry(user.user_id, entry_id, update)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail="Entry not found") from e
    except EntryStoreError as e:
        raise _store_error("update entry", e) from e


@router.delete("/entries/{entry_id}", response_model=DeleteResponse)
async def delete_entry(
    entry_id: str,
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """Delete an entry and (best effort) its media"""
    try:
        await service.delete_entry(user.user_id, entry_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail="Entry not found") from e
    except EntryStoreError as e:
        raise _store_error("delete entry", e) from e
    return DeleteResponse()


@router.get("/random-entry", response_model=TimelineEntry)
async def random_entry(
    service: Annotated[EntryService, Depends(get_entry_service)],
    user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """A random entry to resurface ("surprise me")"""
    try:
        return await service.random_entry(user.user_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=404, detail="No entries found") from e
    except EntryStoreError as e:
        raise _store_error("fetch random entry", e) from e
