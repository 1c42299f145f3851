# cubebattle/server/__main__.py
"""Entry point: python -m cubebattle.server"""

from __future__ import annotations

import argparse
import asyncio
import signal
from typing import TYPE_CHECKING

import uvicorn

from .config import settings

if TYPE_CHECKING:
    from fastapi import FastAPI


async def run_server(app: FastAPI, host: str, port: int) -> None:
    """Run the server with proper shutdown handling."""
    from .sse import sse_manager

    config = uvicorn.Config(app, host=host, port=port)
    server = uvicorn.Server(config)

    # Override uvicorn's default signal handling
    loop = asyncio.get_running_loop()

    def handle_exit():
        # Cancel SSE clients first so streaming connections can close
        sse_manager._shutdown = True
        for client in list(sse_manager._clients.values()):
            client.cancel()
        sse_manager._clients.clear()
        server.should_exit = True

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_exit)

    await server.serve()


def main() -> None:
    parser = argparse.ArgumentParser(description="Cubebattle game server")
    parser.add_argument("--host", type=str, default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    parser.add_argument(
        "--bot-timeout",
        type=float,
        default=settings.BOT_TIMEOUT_S,
        help="Seconds a bot may take to answer before it loses",
    )
    parser.add_argument("--max-games", type=int, default=settings.MAX_GAMES)
    args = parser.parse_args()

    from cubebattle.bots.client import HttpBotClient

    from . import create_app

    app = create_app(
        bot_client_factory=lambda: HttpBotClient(timeout_s=args.bot_timeout),
        max_games=args.max_games,
    )
    asyncio.run(run_server(app, args.host, args.port))


if __name__ == "__main__":
    main()
