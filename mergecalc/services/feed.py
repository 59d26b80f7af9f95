"""Live ticker subscription.

Best-effort: one websocket per view, no reconnect. When the connection drops
the feed goes to CLOSED and the view keeps its last known prices.
"""
from __future__ import annotations

import asyncio
import enum
import json
import logging
import math
import ssl
from typing import Any, Awaitable, Callable

import aiohttp
import certifi

from ..config import FeedConfig, TokenConfig
from ..models import Tick

logger = logging.getLogger(__name__)

TickHandler = Callable[[Tick], Awaitable[None]]


class FeedState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    CLOSED = "closed"


def _tick(item: dict[str, Any], by_product: dict[str, str]) -> Tick | None:
    symbol = by_product.get(item.get("product_id", ""))
    if symbol is None:
        return None
    try:
        price = float(item["price"])
    except (KeyError, TypeError, ValueError):
        return None
    if price < 0 or not math.isfinite(price):
        return None
    return Tick(symbol=symbol, price=price)


def parse_frame(raw: str | bytes, by_product: dict[str, str]) -> list[Tick]:
    """Extract ticks for tracked products from one inbound frame.

    ``by_product`` maps feed product ids (``AERO-USD``) to token symbols.
    Accepts flat ``{"type": "ticker", ...}`` frames as well as the Advanced
    Trade ``{"channel": "ticker", "events": [...]}`` envelope. Anything
    unparsable or untracked yields no ticks.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(data, dict):
        return []

    if data.get("type") == "ticker":
        tick = _tick(data, by_product)
        return [tick] if tick else []

    ticks: list[Tick] = []
    if data.get("channel") == "ticker":
        for event in data.get("events") or []:
            if not isinstance(event, dict):
                continue
            for item in event.get("tickers") or []:
                if isinstance(item, dict):
                    tick = _tick(item, by_product)
                    if tick:
                        ticks.append(tick)
    return ticks


class TickerFeed:
    """Subscribe to the ticker channel for the configured product ids."""

    def __init__(self, config: FeedConfig, tokens: tuple[TokenConfig, ...]) -> None:
        self.ws_url = config.ws_url
        self.channel = config.channel
        self._by_product = {t.product_id: t.symbol for t in tokens}
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._closing = False
        self.state = FeedState.DISCONNECTED

    @property
    def product_ids(self) -> list[str]:
        return list(self._by_product)

    def subscribe_frame(self) -> dict[str, Any]:
        return {
            "type": "subscribe",
            "product_ids": self.product_ids,
            "channel": self.channel,
        }

    async def run(self, on_tick: TickHandler) -> None:
        """Connect, subscribe and dispatch ticks until the socket closes.

        Each tick is awaited before the next frame is read. Connection
        errors are logged and end the feed; nothing is raised.
        """
        if self._closing:
            self.state = FeedState.CLOSED
            return
        if self.state is not FeedState.DISCONNECTED:
            raise RuntimeError(f"Feed already used (state: {self.state.value})")

        self.state = FeedState.CONNECTING
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.ws_connect(self.ws_url) as ws:
                    self._ws = ws
                    if self._closing:
                        return
                    await ws.send_json(self.subscribe_frame())
                    self.state = FeedState.SUBSCRIBED
                    logger.info(
                        "Subscribed to %s for %s",
                        self.channel,
                        ", ".join(self.product_ids),
                    )
                    await self._receive_loop(ws, on_tick)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Ticker feed connection failed: %s", e)
        finally:
            self._ws = None
            self.state = FeedState.CLOSED
            logger.info("Ticker feed closed")

    async def _receive_loop(
        self, ws: aiohttp.ClientWebSocketResponse, on_tick: TickHandler
    ) -> None:
        while True:
            msg = await ws.receive()
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                ticks = parse_frame(msg.data, self._by_product)
                if not ticks:
                    logger.debug("Ignoring frame: %.200s", msg.data)
                for tick in ticks:
                    await on_tick(tick)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("Ticker feed error: %s", ws.exception())
                return
            elif msg.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSING,
                aiohttp.WSMsgType.CLOSED,
            ):
                return

    async def close(self) -> None:
        """Close the connection unconditionally."""
        self._closing = True
        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()
        self.state = FeedState.CLOSED
