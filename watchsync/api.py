"""
HTTP and WebSocket handlers for watchsync
"""
import hashlib
import json
import logging

from aiohttp import web

from .config import Settings
from .coordinator import SessionCoordinator
from .protocol import (
    LOAD_VIDEO, VIDEO_SYNC, PING, PONG, ProtocolError, parse_message,
)
from .utils import generate_participant_id, extract_video_id

logger = logging.getLogger("watchsync")

COORDINATOR_KEY = web.AppKey("coordinator", SessionCoordinator)
SETTINGS_KEY = web.AppKey("settings", Settings)

# ============================================================
# WEBSOCKET SESSION
# ============================================================

async def ws_session(request: web.Request) -> web.WebSocketResponse:
    """One participant's duplex channel into the shared session"""
    coordinator = request.app[COORDINATOR_KEY]
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    participant_id = generate_participant_id()
    try:
        await coordinator.on_connect(participant_id, ws)

        async for msg in ws:
            if msg.type == web.WSMsgType.TEXT:
                await handle_frame(coordinator, ws, participant_id, msg.data)
            elif msg.type == web.WSMsgType.ERROR:
                logger.debug(f"WebSocket error for {participant_id}: {ws.exception()}")
    finally:
        await coordinator.on_disconnect(participant_id)

    return ws


async def handle_frame(coordinator: SessionCoordinator, ws, participant_id: str, raw: str) -> None:
    """Route one text frame; malformed frames are dropped, the channel stays open"""
    # Plain-text keepalive
    if raw == PING:
        await ws.send_str(PONG)
        return

    try:
        message = parse_message(raw)
    except ProtocolError as e:
        logger.warning("Dropping frame from %s: %s", participant_id, e)
        return

    if message.type == PING:
        await ws.send_json({"type": PONG})
    elif message.type == LOAD_VIDEO:
        await coordinator.on_load_video(message.video_id)
    elif message.type == VIDEO_SYNC:
        await coordinator.on_sync(message.sync)

# ============================================================
# CONFIGURATION
# ============================================================

async def serve_config(request: web.Request) -> web.Response:
    """Return client configuration"""
    settings = request.app[SETTINGS_KEY]
    return web.json_response({"ws_path": settings.ws_path})

# ============================================================
# SESSION STATE
# ============================================================

async def api_state(request: web.Request) -> web.Response:
    """Current playback state and viewer count, with ETag caching"""
    coordinator = request.app[COORDINATOR_KEY]
    items = {
        "state": coordinator.state.snapshot(),
        "count": coordinator.participant_count,
    }

    content = json.dumps(items, sort_keys=True)
    etag = hashlib.md5(content.encode()).hexdigest()

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    response = web.json_response({"ok": True, **items})
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "no-cache"
    return response

# ============================================================
# VIDEO URL HELPER
# ============================================================

async def api_video_id(request: web.Request) -> web.Response:
    """Resolve a pasted YouTube URL to the ID clients send with loadVideo"""
    url = request.query.get("url", "")
    video_id = extract_video_id(url)
    if not video_id:
        return web.json_response(
            {"ok": False, "error": "no video id in url"},
            status=400
        )
    return web.json_response({"ok": True, "video_id": video_id})
