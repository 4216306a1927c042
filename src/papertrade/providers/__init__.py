"""Market quote providers."""

from papertrade.config.settings import Settings
from papertrade.core.exceptions import ValidationError
from papertrade.providers.quote_provider import QuoteProvider
from papertrade.providers.simulated_provider import SimulatedQuoteProvider
from papertrade.providers.http_provider import HttpQuoteProvider
from papertrade.providers.yahoo_provider import YahooQuoteProvider


def create_quote_provider(settings: Settings) -> QuoteProvider:
    """Build the quote provider selected by ``settings.quote_provider``."""
    kind = settings.quote_provider.lower()
    if kind == "simulated":
        return SimulatedQuoteProvider()
    if kind == "http":
        if not settings.quote_api_base_url:
            raise ValidationError("quote_api_base_url is required for the http quote provider")
        return HttpQuoteProvider(
            base_url=settings.quote_api_base_url,
            api_key=settings.quote_api_key,
            timeout=settings.quote_fetch_timeout_seconds,
        )
    if kind == "yahoo":
        return YahooQuoteProvider()
    raise ValidationError(f"Unknown quote provider: {settings.quote_provider}")


__all__ = [
    "QuoteProvider",
    "SimulatedQuoteProvider",
    "HttpQuoteProvider",
    "YahooQuoteProvider",
    "create_quote_provider",
]
