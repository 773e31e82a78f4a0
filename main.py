import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api import analysis, entries, insights, prompts, upload
from api.deps import close_services, get_cache_service, get_entry_repo, set_cache_service
from core.config import get_settings
from core.database import create_tables, dispose_engine
from core.logging import setup_logging
from core.protocols import IEntryRepository
from core.rate_limit import limiter
from middleware.correlation import CorrelationIDMiddleware
from middleware.security import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from services.cache_service import CacheService

logger = logging.getLogger(__name__)

settings = get_settings()

# Multipart envelope and form fields on top of the media file itself
FORM_OVERHEAD_BYTES = 1024 * 1024


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for application initialization and cleanup"""
    setup_logging()

    # The sql store has no migration tooling; create its table on startup
    if settings.entry_store == "sql":
        await create_tables()
        logger.info("SQL entry store tables ready")
    else:
        logger.info(f"Using Cosmos DB entry store: {settings.cosmos_database}/{settings.cosmos_container}")

    # Initialize Redis cache
    if settings.redis_enabled:
        try:
            cache_service = CacheService()
            await cache_service.connect()
            set_cache_service(cache_service)
            logger.info("Redis cache initialized successfully")
        except Exception as e:
            logger.warning(
                f"Redis cache initialization failed: {e}. Continuing without cache."
            )
    else:
        logger.info("Redis cache disabled in configuration")

    yield

    # Shutdown: close connections
    if settings.redis_enabled:
        try:
            cache = await get_cache_service()
            await cache.disconnect()
        except Exception as e:
            logger.warning(f"Error during cache shutdown: {e}")

    try:
        await close_services()
    except Exception as e:
        logger.warning(f"Error closing service clients: {e}")

    if settings.entry_store == "sql":
        await dispose_engine()
        logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Security middleware (order matters - applied in reverse)
# 1. Request size limit (first check)
app.add_middleware(
    RequestSizeLimitMiddleware,
    max_request_size=settings.max_upload_size + FORM_OVERHEAD_BYTES,
)

# 2. Correlation ID for request tracing
app.add_middleware(CorrelationIDMiddleware)

# 3. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 4. CORS middleware
# Security: Using allow_credentials=True requires specific origins (not wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)

# Routers
app.include_router(upload.router, prefix="/api", tags=["upload"])
app.include_router(entries.router, prefix="/api", tags=["entries"])
app.include_router(analysis.router, prefix="/api", tags=["analysis"])
app.include_router(prompts.router, prefix="/api", tags=["prompts"])
app.include_router(insights.router, prefix="/api", tags=["insights"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(repo: IEntryRepository = Depends(get_entry_repo)):
    """
    Health check endpoint for load balancers and monitoring.

    Validates:
    - API is responsive
    - Entry store connectivity (Cosmos DB or SQL)
    - Redis cache availability (optional)

    Returns:
    - 200 OK if healthy
    - 503 Service Unavailable if unhealthy
    """
    checks: dict[str, Any] = {
        "api": True,
        "entry_store": False,
        "cache": None,  # None = not configured, True = healthy, False = unhealthy
    }

    try:
        checks["entry_store"] = await repo.ping()

        # Cache is optional - won't fail the health check
        if settings.redis_enabled:
            cache = await get_cache_service()
            checks["cache"] = cache.is_available()

        if checks["api"] and checks["entry_store"]:
            return {"status": "healthy", "checks": checks}
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "checks": checks}
        )
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        checks["error"] = str(e)
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "checks": checks}
        )
