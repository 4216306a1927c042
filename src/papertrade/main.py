"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from papertrade.config.settings import get_settings
from papertrade.config.logging_config import setup_logging
from papertrade.repositories.sqlalchemy.database import init_db
from papertrade.api.deps import get_notification_purger, get_price_feed
from papertrade.api.routers import (
    trading_router,
    progress_router,
    notifications_router,
    stream_router,
)
from papertrade.core.exceptions import AppError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    settings = get_settings()
    feed = get_price_feed() if settings.price_feed_enabled else None
    if feed is not None:
        await feed.start()
    purger = get_notification_purger()
    await purger.start()
    yield
    # Shutdown
    await purger.stop()
    if feed is not None:
        await feed.stop()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Paper trading ledger with simulated price feed",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(trading_router)
app.include_router(progress_router)
app.include_router(notifications_router)
app.include_router(stream_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests in the application error format."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "VALIDATION_ERROR", "message": details or "Invalid request"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with a generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
