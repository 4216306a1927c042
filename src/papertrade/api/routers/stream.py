"""WebSocket price channel."""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from papertrade.api.deps import get_price_feed
from papertrade.core.exceptions import QuoteUnavailableError
from papertrade.services import PriceFeed, stock_update_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])

MAX_SYMBOLS_PER_MESSAGE = 50


@router.websocket("/ws/prices")
async def price_stream(websocket: WebSocket, feed: PriceFeed = Depends(get_price_feed)) -> None:
    """
    Subscribe to simulated price ticks.

    Clients send ``{"type": "subscribe" | "unsubscribe", "symbols": [...]}``.
    Each subscribe is acknowledged and followed by one ``stock_update`` per
    symbol; later updates arrive on every feed tick.
    """
    await websocket.accept()
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            await _handle_message(websocket, feed, message)
    except WebSocketDisconnect:
        logger.debug("Price subscriber disconnected")
    finally:
        feed.disconnect(websocket)


async def _handle_message(websocket: WebSocket, feed: PriceFeed, message) -> None:
    if not isinstance(message, dict):
        await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
        return

    kind = message.get("type")
    symbols = message.get("symbols") or []
    if not isinstance(symbols, list) or len(symbols) > MAX_SYMBOLS_PER_MESSAGE:
        await websocket.send_json(
            {"type": "error", "message": f"symbols must be a list of at most {MAX_SYMBOLS_PER_MESSAGE}"}
        )
        return

    if kind == "subscribe":
        added = feed.subscribe(websocket, symbols)
        await websocket.send_json({"type": "subscribed", "symbols": added})
        for symbol in added:
            try:
                quote = await asyncio.to_thread(feed.quote_service.get_quote, symbol)
            except QuoteUnavailableError as exc:
                logger.info("No initial quote for %s: %s", symbol, exc.message)
                continue
            await websocket.send_json(stock_update_message(quote))
    elif kind == "unsubscribe":
        removed = feed.unsubscribe(websocket, symbols)
        await websocket.send_json({"type": "unsubscribed", "symbols": removed})
    else:
        await websocket.send_json({"type": "error", "message": f"Unknown message type: {kind}"})
