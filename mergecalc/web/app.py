"""aiohttp web surface: page render on GET /, live view over /ws."""
from __future__ import annotations

import asyncio
import json
import logging
import uuid

from aiohttp import WSMsgType, web

from ..config import AppConfig
from ..models import Tick
from ..services import AllocationView, DataLoader, TickerFeed
from .render import render_page, snapshot

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", AppConfig)
LOADER_KEY = web.AppKey("loader", DataLoader)
VIEWS_KEY = web.AppKey("views", dict)


def _prune_views(views: dict, now: float, ttl: float) -> None:
    """Drop rendered views whose page never opened its socket within ttl."""
    expired = [view_id for view_id, (created, _) in views.items() if now - created >= ttl]
    for view_id in expired:
        del views[view_id]
    if expired:
        logger.debug("Dropped %d unmounted view(s)", len(expired))


async def index(request: web.Request) -> web.Response:
    """Load market data, build a fresh view and render it."""
    config = request.app[CONFIG_KEY]
    bundle = await request.app[LOADER_KEY].load()

    views = request.app[VIEWS_KEY]
    now = asyncio.get_running_loop().time()
    _prune_views(views, now, config.server.view_ttl)

    view = AllocationView(config, bundle)
    view_id = uuid.uuid4().hex
    views[view_id] = (now, view)

    html = render_page(view, config.page, view_id)
    return web.Response(text=html, content_type="text/html")


def _apply_client_frame(view: AllocationView, raw: str) -> bool:
    """Apply one browser frame; returns False for frames that were ignored."""
    try:
        frame = json.loads(raw)
    except ValueError:
        return False
    if not isinstance(frame, dict):
        return False

    kind = frame.get("type")
    if kind == "amount":
        view.set_amount(frame.get("value"), frame.get("symbol"))
        return True
    if kind == "total":
        view.set_total(frame.get("value"))
        return True
    return False


async def view_socket(request: web.Request) -> web.WebSocketResponse:
    """Mount a view: run its ticker feed until the page goes away."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    view_id = request.query.get("view", "")
    pending = request.app[VIEWS_KEY].pop(view_id, None)
    if pending is None:
        logger.info("Unknown view id %r; closing socket", view_id)
        await ws.close()
        return ws
    _, view = pending

    config = request.app[CONFIG_KEY]
    feed = TickerFeed(config.feed, config.tokens)

    async def on_tick(tick: Tick) -> None:
        if view.apply_tick(tick) and not ws.closed:
            await ws.send_json(snapshot(view))

    feed_task: asyncio.Task[None] | None = None
    if config.feed.enabled:
        feed_task = asyncio.create_task(feed.run(on_tick))

    try:
        await ws.send_json(snapshot(view))
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                if _apply_client_frame(view, msg.data):
                    await ws.send_json(snapshot(view))
            elif msg.type == WSMsgType.ERROR:
                logger.warning("Page socket error: %s", ws.exception())
    finally:
        await feed.close()
        if feed_task is not None:
            feed_task.cancel()
            (outcome,) = await asyncio.gather(feed_task, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.warning("Ticker feed for view %s failed: %s", view_id, outcome)
        logger.debug("View %s torn down", view_id)

    return ws


def create_app(config: AppConfig, loader: DataLoader | None = None) -> web.Application:
    app = web.Application()
    app[CONFIG_KEY] = config
    app[LOADER_KEY] = loader or DataLoader(config)
    app[VIEWS_KEY] = {}
    app.router.add_get("/", index)
    app.router.add_get("/ws", view_socket)
    return app


def run_server(config: AppConfig, host: str | None = None, port: int | None = None) -> None:
    app = create_app(config)
    host = host or config.server.host
    port = port or config.server.port
    logger.info("Serving calculator on http://%s:%d", host, port)
    web.run_app(
        app,
        host=host,
        port=port,
        print=None,
    )
