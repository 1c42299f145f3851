# cubebattle/server/__init__.py
"""Cubebattle game server - runs games and streams their events over SSE."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from .config import settings

if TYPE_CHECKING:
    from cubebattle.bots.client import BotClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("cubebattle.server")

_server_start_time: float = 0.0


def create_app(
    *,
    bot_client_factory: Callable[[], BotClient] | None = None,
    max_games: int | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        bot_client_factory: Builds the bot client for each new game. Defaults to
            an HTTP client using BOT_TIMEOUT_S.
        max_games: Size of the game table (defaults to MAX_GAMES).
    """
    from .games import GameManager
    from .models import HealthResponse
    from .routes import games as game_routes
    from .routes import stream
    from .sse import sse_manager

    manager = GameManager(bot_client_factory=bot_client_factory, max_games=max_games)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        global _server_start_time
        _server_start_time = time.time()
        logger.info(f"Cubebattle server starting on {settings.HOST}:{settings.PORT}")
        yield
        logger.info("Cubebattle server shutting down...")
        await manager.shutdown()
        await sse_manager.shutdown()

    app = FastAPI(lifespan=lifespan, title="Cubebattle Server")

    game_routes.init_game_routes(manager)
    app.include_router(game_routes.router)
    app.include_router(stream.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            clients=sse_manager.client_count,
            games=len(manager),
            uptime_s=time.time() - _server_start_time,
        )

    return app
