"""API routers package."""

from papertrade.api.routers.trading import router as trading_router
from papertrade.api.routers.progress import router as progress_router
from papertrade.api.routers.notifications import router as notifications_router
from papertrade.api.routers.stream import router as stream_router

__all__ = [
    "trading_router",
    "progress_router",
    "notifications_router",
    "stream_router",
]
