from __future__ import annotations

import asyncio
import dataclasses
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import numpy as np

from ..bots.validator import validate_bot_directions
from ..constants import EVENT_GAME_ENDED, EVENT_GAME_STARTED, EVENT_NEXT_TICK, EVENT_PLAYER_LOST
from ..errors import BotClientError, Elimination, GameFinished, ValidationFailure
from . import phases
from .state import GameState, GameStatus

if TYPE_CHECKING:
    from ..arena.stats import HighScoreInfo
    from ..bots.client import BotClient
    from ..config import GameConfig, GameSetup, PlayerSetup
    from .state import NextTickInfo

logger = logging.getLogger("cubebattle.engine")

EventSink = Callable[[dict[str, Any]], Awaitable[None]]


class GameEngine:
    """
    Runs one game from start to final standings.

    - Polls every alive bot concurrently at the first sub-tick of each tick
    - Applies one cached direction per player per sub-tick
    - Resolves collisions and out-of-bounds moves into eliminations
    - Hands every event, in order, to the injected sink
    """

    def __init__(
        self,
        config: GameConfig,
        bot_client: BotClient,
        *,
        game_id: str | None = None,
        sink: EventSink | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.state = GameState(game_id=game_id or uuid.uuid4().hex[:8], config=config)
        self.bot_client = bot_client
        self.sink = sink
        self.rng = rng if rng is not None else np.random.default_rng()
        self.result: HighScoreInfo | None = None

    @property
    def game_id(self) -> str:
        return self.state.game_id

    @property
    def status(self) -> GameStatus:
        return self.state.status

    def update_game_setup(self, setup: GameSetup) -> None:
        """Queue a setup replacement. It takes effect at the next tick boundary."""
        if self.state.status == GameStatus.ENDED:
            raise GameFinished(f"Game {self.game_id} has ended")
        # Validate against the player list now rather than at the boundary
        self.state.pending_config = dataclasses.replace(self.state.config, setup=setup)
        logger.info(f"Game {self.game_id}: setup update queued")

    def position_players(self) -> None:
        phases.position_players(self.state, self.rng)

    def get_next_tick_info(self) -> NextTickInfo:
        return phases.build_next_tick_info(self.state)

    def get_highscores(self) -> HighScoreInfo:
        return phases.get_highscores(self.state)

    async def _emit(self, events: list[dict[str, Any]]) -> None:
        for event in events:
            if event["type"] == EVENT_PLAYER_LOST:
                logger.info(f"Game {self.game_id}: {event['name']} lost ({event['cause']})")
            if self.sink is not None:
                await self.sink(event)

    async def _fetch_one(self, player: PlayerSetup, request: dict[str, Any]) -> Elimination | None:
        try:
            payload = await self.bot_client.get_directions(player, {"current_player": player.to_dict(), **request})
            directions = validate_bot_directions(payload, self.state.config)
        except (BotClientError, ValidationFailure) as e:
            logger.warning(f"Game {self.game_id}: bot {player.name} failed: {e}")
            return Elimination(e.kind, str(e))
        self.state.cached_directions[player.name] = directions
        return None

    async def _fetch_directions(self, info: NextTickInfo) -> list[dict[str, Any]]:
        """Poll all positioned players at once and wait for every answer."""
        state = self.state
        players = [state.config.player(p.name) for p in state.player_positions]
        request = info.to_dict()
        outcomes = await asyncio.gather(*(self._fetch_one(p, request) for p in players))

        events: list[dict[str, Any]] = []
        for player, elimination in zip(players, outcomes):
            if elimination is not None:
                events.extend(phases.player_lost(state, player, elimination))
        return events

    async def step(self) -> None:
        """Run one sub-tick."""
        state = self.state
        phases.begin_tick(state)

        info = self.get_next_tick_info()
        await self._emit([{"type": EVENT_NEXT_TICK, **info.to_dict()}])

        if state.sub_tick == 1:
            await self._emit(await self._fetch_directions(info))

        await self._emit(phases.apply_directions(state))
        phases.detect_collisions(state)
        # Losses are announced before positions are pruned
        await self._emit(phases.record_losses(state))
        phases.remove_losers(state)
        phases.check_status(state)

        state.current_tick += 1

    async def start(self) -> HighScoreInfo:
        if self.state.status != GameStatus.NOT_STARTED:
            raise RuntimeError(f"Game {self.game_id} already started")

        self.position_players()
        self.state.status = GameStatus.RUNNING
        self.state.items = []
        logger.info(f"Game {self.game_id} started with {len(self.state.player_positions)} players")
        await self._emit([{"type": EVENT_GAME_STARTED, "id": self.game_id}])

        while self.state.status != GameStatus.ENDED:
            await self.step()
            await asyncio.sleep(self.state.config.setup.tick_delay_s)

        self.result = self.get_highscores()
        winner = self.result.winner.name if self.result.winner is not None else None
        logger.info(f"Game {self.game_id} ended at tick {self.state.current_tick}: {self.result.result} ({winner})")
        await self._emit([{"type": EVENT_GAME_ENDED, **self.result.to_dict()}])
        return self.result
