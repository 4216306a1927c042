"""Core utilities and shared functionality."""

from papertrade.core.timezone import (
    now_eastern,
    to_eastern,
    parse_datetime_eastern,
    EASTERN_TZ,
)
from papertrade.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    LimitNotMarketableError,
    QuoteUnavailableError,
    ConcurrencyConflictError,
    PersistenceError,
)

__all__ = [
    "now_eastern",
    "to_eastern",
    "parse_datetime_eastern",
    "EASTERN_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationError",
    "InsufficientFundsError",
    "InsufficientHoldingsError",
    "LimitNotMarketableError",
    "QuoteUnavailableError",
    "ConcurrencyConflictError",
    "PersistenceError",
]
