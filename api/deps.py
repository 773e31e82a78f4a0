from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.auth import verify_token
from core.config import get_settings
from core.database import get_session_factory
from core.logging import get_logger
from core.protocols import IAnalysisService, IEntryRepository
from core.storage_protocols import IStorageService
from repositories.cosmos_entry_repo import CosmosEntryRepository
from repositories.entry_repo import SqlEntryRepository
from schemas.token import TokenPayload
from services.cache_service import CacheService
from services.cognitive import AnalysisService
from services.entry_service import EntryService
from services.media_url import MediaUrlSigner
from services.storage import AzureBlobStorageService

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)

# Global service instances (singletons), created lazily and closed on shutdown
_cache_service: CacheService | None = None
_cosmos_repo: CosmosEntryRepository | None = None
_storage_service: AzureBlobStorageService | None = None
_analysis_service: AnalysisService | None = None


# Cache service dependencies (defined early for use in other dependencies)
async def get_cache_service() -> CacheService:
    """
    Cache service dependency (singleton)

    Returns global cache service instance.
    Connected on app startup in main.py
    """
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    return _cache_service


def set_cache_service(cache_service: CacheService):
    """Set global cache service (called on app startup)"""
    global _cache_service
    _cache_service = cache_service


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenPayload:
    """
    Validate the bearer token and return the signed-in user.
    Entries are owned by TokenPayload.user_id.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_token(credentials.credentials)
        return TokenPayload(**payload)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError too (missing claims)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


# Entry store dependencies
def get_cosmos_repo() -> CosmosEntryRepository:
    global _cosmos_repo
    if _cosmos_repo is None:
        _cosmos_repo = CosmosEntryRepository.from_settings(get_settings())
    return _cosmos_repo


async def get_entry_repo() -> AsyncIterator[IEntryRepository]:
    """
    Entry repository for the configured store.

    The sql store gets one transaction per request (commit on success,
    rollback on exception); Cosmos calls are individually atomic.
    """
    if get_settings().entry_store == "sql":
        async with get_session_factory().begin() as session:
            yield SqlEntryRepository(session)
    else:
        yield get_cosmos_repo()


# Storage service dependencies
async def get_storage_service() -> IStorageService:
    """Storage service dependency"""
    global _storage_service
    if _storage_service is None:
        _storage_service = AzureBlobStorageService.from_settings(get_settings())
    return _storage_service


async def get_media_signer(
    storage: IStorageService = Depends(get_storage_service),
) -> MediaUrlSigner:
    return MediaUrlSigner(storage, ttl_hours=get_settings().media_url_ttl_hours)


# AI services
async def get_analysis_service(
    cache: CacheService = Depends(get_cache_service),
) -> IAnalysisService:
    """Hosted AI facade (singleton, shares the analysis cache)"""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService.from_settings(get_settings(), cache=cache)
    return _analysis_service


async def get_entry_service(
    repo: IEntryRepository = Depends(get_entry_repo),
    storage: IStorageService = Depends(get_storage_service),
    analysis: IAnalysisService = Depends(get_analysis_service),
    signer: MediaUrlSigner = Depends(get_media_signer),
) -> EntryService:
    """Entry service dependency"""
    return EntryService(
        entry_repo=repo, storage=storage, analysis=analysis, signer=signer
    )


async def close_services() -> None:
    """Close SDK clients held by the singletons (called on app shutdown)"""
    global _cosmos_repo, _storage_service, _analysis_service

    if _cosmos_repo is not None:
        await _cosmos_repo.close()
        _cosmos_repo = None
    if _storage_service is not None:
        await _storage_service.close()
        _storage_service = None
    if _analysis_service is not None:
        await _analysis_service.close()
        _analysis_service = None
