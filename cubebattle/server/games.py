"""Table of running and finished games."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cubebattle.arena.scoreboard import Scoreboard
from cubebattle.bots.client import HttpBotClient
from cubebattle.errors import GameFinished, GameNotFound, GameTableFull
from cubebattle.sim.engine import GameEngine
from cubebattle.sim.state import GameStatus

from .config import settings
from .sse import SSEManager, sse_manager

if TYPE_CHECKING:
    from cubebattle.bots.client import BotClient
    from cubebattle.config import GameConfig, GameSetup

logger = logging.getLogger("cubebattle.server")


@dataclass
class GameEntry:
    engine: GameEngine
    bot_client: BotClient
    task: asyncio.Task[Any] | None = None
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.task is not None and self.task.done()


def _default_bot_client() -> BotClient:
    return HttpBotClient(timeout_s=settings.BOT_TIMEOUT_S)


class GameManager:
    """Starts games as background tasks and keeps them addressable by id.

    Oldest finished games are evicted once `max_games` is reached. Running
    games are never evicted.
    """

    def __init__(
        self,
        *,
        bot_client_factory: Callable[[], BotClient] | None = None,
        events: SSEManager | None = None,
        max_games: int | None = None,
    ) -> None:
        self._games: OrderedDict[str, GameEntry] = OrderedDict()
        self._bot_client_factory = bot_client_factory or _default_bot_client
        self._events = events or sse_manager
        self._max_games = max_games or settings.MAX_GAMES
        self.scoreboard = Scoreboard()

    def _make_sink(self, game_id: str):
        async def sink(event: dict[str, Any]) -> None:
            await self._events.broadcast(event["type"], json.dumps({"game_id": game_id, **event}), game_id=game_id)

        return sink

    def _evict(self) -> None:
        while len(self._games) >= self._max_games:
            finished = next((gid for gid, entry in self._games.items() if entry.finished), None)
            if finished is None:
                raise GameTableFull(f"{len(self._games)} games running, limit is {self._max_games}")
            del self._games[finished]
            logger.debug(f"Evicted game {finished}")

    def start(self, config: GameConfig) -> GameEngine:
        """Create an engine for `config` and run it in the background."""
        self._evict()
        bot_client = self._bot_client_factory()
        engine = GameEngine(config, bot_client)
        engine.sink = self._make_sink(engine.game_id)
        entry = GameEntry(engine=engine, bot_client=bot_client)
        self._games[engine.game_id] = entry
        entry.task = asyncio.create_task(self._run(entry))
        return engine

    async def _run(self, entry: GameEntry) -> None:
        engine = entry.engine
        try:
            result = await engine.start()
            self.scoreboard.record(result)
        except asyncio.CancelledError:
            logger.info(f"Game {engine.game_id} cancelled")
            raise
        except Exception as e:
            # Anything escaping the per-player boundary kills this game only
            logger.exception(f"Game {engine.game_id} crashed")
            entry.error = str(e)
        finally:
            close = getattr(entry.bot_client, "close", None)
            if close is not None:
                await close()

    def get(self, game_id: str) -> GameEntry:
        entry = self._games.get(game_id)
        if entry is None:
            raise GameNotFound(game_id)
        return entry

    def update_setup(self, game_id: str, setup: GameSetup) -> None:
        entry = self.get(game_id)
        if entry.finished:
            raise GameFinished(f"Game {game_id} has ended")
        entry.engine.update_game_setup(setup)

    def entries(self) -> list[GameEntry]:
        return list(self._games.values())

    def __len__(self) -> int:
        return len(self._games)

    async def shutdown(self) -> None:
        """Cancel every running game."""
        tasks = [e.task for e in self._games.values() if e.task is not None and not e.task.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info(f"Cancelled {len(tasks)} running games")


def status_name(entry: GameEntry) -> str:
    if entry.error is not None:
        return "FAILED"
    if entry.task is not None and entry.task.cancelled():
        return "CANCELLED"
    status = GameStatus(entry.engine.status)
    if status == GameStatus.ENDED and not entry.finished:
        # Final standings not yet published
        return GameStatus.RUNNING.name
    return status.name
