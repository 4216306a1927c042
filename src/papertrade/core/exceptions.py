"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class AuthenticationError(AppError):
    """Raised when the caller's bearer token is missing or invalid."""

    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="UNAUTHORIZED")


class InsufficientFundsError(AppError):
    """Raised when a buy costs more than the available cash."""

    def __init__(self, requested: str, available: str):
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}",
            code="INSUFFICIENT_FUNDS",
        )


class InsufficientHoldingsError(AppError):
    """Raised when attempting to sell more shares than held."""

    def __init__(self, symbol: str, requested: str, available: str):
        super().__init__(
            f"Insufficient holdings of {symbol}: requested {requested}, available {available}",
            code="INSUFFICIENT_HOLDINGS",
        )


class LimitNotMarketableError(AppError):
    """Raised when a limit order cannot be filled at the current market price."""

    def __init__(self, symbol: str, limit_price: str, market_price: str):
        super().__init__(
            f"Limit price {limit_price} for {symbol} is not marketable at {market_price}",
            code="LIMIT_NOT_MARKETABLE",
        )


class QuoteUnavailableError(AppError):
    """Raised when the quote provider cannot supply a price."""

    status_code = 502

    def __init__(self, symbol: str, reason: str = ""):
        message = f"Quote unavailable for {symbol}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, code="QUOTE_UNAVAILABLE")


class ConcurrencyConflictError(AppError):
    """Raised when a ledger was modified by another writer since it was read."""

    status_code = 409

    def __init__(self, owner_id: str = ""):
        subject = f"Ledger for {owner_id}" if owner_id else "Ledger"
        super().__init__(f"{subject} was modified concurrently", code="CONFLICT")


class PersistenceError(AppError):
    """Raised when the database rejects a write."""

    status_code = 500

    def __init__(self, message: str = "Failed to persist changes"):
        super().__init__(message, code="PERSISTENCE_ERROR")
