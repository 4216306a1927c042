"""HTTP quote provider for a REST market-data API."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from papertrade.core.timezone import now_eastern, parse_datetime_eastern
from papertrade.domain.views import Quote

logger = logging.getLogger(__name__)


class HttpQuoteProvider:
    """
    Fetches quotes from ``GET {base_url}/quote?symbol=...&apikey=...``.

    The response body must carry ``price``; ``change``, ``volume`` and
    ``timestamp`` are optional. Every request is bounded by ``timeout``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    def get_quote(self, symbol: str) -> Quote:
        """Fetch and parse one quote; raises on transport, HTTP or payload errors."""
        symbol = symbol.upper()
        params: dict[str, Any] = {"symbol": symbol}
        if self._api_key:
            params["apikey"] = self._api_key

        response = self._client.get(f"{self._base_url}/quote", params=params)
        response.raise_for_status()
        return self._parse(symbol, response.json())

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _parse(symbol: str, body: dict[str, Any]) -> Quote:
        if not isinstance(body, dict) or body.get("price") is None:
            raise ValueError(f"Quote payload for {symbol} has no price")
        try:
            price = Decimal(str(body["price"]))
            change = Decimal(str(body.get("change") or 0))
        except InvalidOperation as exc:
            raise ValueError(f"Quote payload for {symbol} is not numeric") from exc
        if price < 0:
            raise ValueError(f"Quote payload for {symbol} has a negative price")

        timestamp = body.get("timestamp")
        as_of = parse_datetime_eastern(timestamp) if isinstance(timestamp, str) else now_eastern()
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            volume=int(body.get("volume") or 0),
            as_of=as_of,
        )
