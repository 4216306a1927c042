"""Yahoo Finance quote provider via yfinance."""

from decimal import Decimal

from papertrade.core.timezone import now_eastern
from papertrade.domain.views import Quote


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


class YahooQuoteProvider:
    """Reads last price, previous close and volume from ``Ticker.fast_info``."""

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        info = _get_yf().Ticker(symbol).fast_info

        last_price = info.get("lastPrice")
        if last_price is None:
            raise ValueError(f"No price returned for {symbol}")
        price = Decimal(str(round(float(last_price), 4)))

        prev_close = info.get("previousClose")
        change = Decimal("0")
        if prev_close is not None:
            change = price - Decimal(str(round(float(prev_close), 4)))

        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            volume=int(info.get("lastVolume") or 0),
            as_of=now_eastern(),
        )
