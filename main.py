#!/usr/bin/env python3
"""
watchsync - shared video playback relay
WebSocket session + late-joiner catch-up
"""
import logging
import socket
from typing import Optional

from aiohttp import web

from watchsync.api import (
    COORDINATOR_KEY, SETTINGS_KEY,
    ws_session, serve_config, api_state, api_video_id,
)
from watchsync.config import Settings
from watchsync.coordinator import SessionCoordinator

logger = logging.getLogger("watchsync")


def make_origin_middleware(allowed_origins):
    @web.middleware
    async def origin_middleware(request, handler):
        """Reject cross-origin requests not on the allow-list"""
        origin = request.headers.get("Origin")
        if allowed_origins and origin and origin not in allowed_origins:
            logger.warning(f"Rejected origin {origin} for {request.path}")
            return web.json_response(
                {"ok": False, "error": "origin not allowed"},
                status=403
            )
        return await handler(request)

    return origin_middleware


def create_app(settings: Optional[Settings] = None,
               coordinator: Optional[SessionCoordinator] = None) -> web.Application:
    """Create and configure the aiohttp application"""
    settings = settings or Settings.from_env()
    app = web.Application(middlewares=[make_origin_middleware(settings.allowed_origins)])
    app[SETTINGS_KEY] = settings
    app[COORDINATOR_KEY] = coordinator or SessionCoordinator(send_timeout=settings.send_timeout)

    # WebSocket session
    app.router.add_get(settings.ws_path, ws_session)

    # API routes
    app.router.add_get("/config", serve_config)
    app.router.add_get("/state", api_state)
    app.router.add_get("/api/video-id", api_video_id)

    # Page and assets, when present
    static_dir = settings.static_dir
    if static_dir.is_dir():
        async def index(request):
            return web.FileResponse(static_dir / "index.html")

        app.router.add_get("/", index)
        app.router.add_static("/static", static_dir, name="static")
    else:
        logger.info("No static directory at %s, serving API only", static_dir)

    logger.info("📺 watchsync server ready • WebSocket at %s", settings.ws_path)
    return app


def get_local_ip():
    """Get local network IP address"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except Exception:
        return "localhost"


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = create_app(settings)
    local_ip = get_local_ip()

    logger.info(f"🚀 Starting server on {settings.host}:{settings.port}")
    logger.info(f"💡 Access at: http://{local_ip}:{settings.port}")

    web.run_app(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
