import asyncio
from typing import Any

import numpy as np
import pytest

from cubebattle.config import GameConfig, GameSetup, PlayerSetup, StartPosition
from cubebattle.sim.engine import GameEngine
from cubebattle.sim.state import GameStatus


class ScriptedBotClient:
    """Bot client answering from per-player scripts instead of the network.

    A script is either a callable taking the request, or a list of answers
    consumed one per call (the last answer repeats). Exception instances in a
    list are raised. Players without a script always answer NOOPs.
    """

    def __init__(self, scripts: dict[str, Any] | None = None) -> None:
        self.scripts = scripts or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def get_directions(self, player: PlayerSetup, request: dict[str, Any]) -> Any:
        n_calls = sum(1 for name, _ in self.calls if name == player.name)
        self.calls.append((player.name, request))

        script = self.scripts.get(player.name)
        if script is None:
            return [{"task": "NOOP"}] * request["game_info"]["num_of_tasks_per_tick"]
        if callable(script):
            return script(request)
        answer = script[min(n_calls, len(script) - 1)]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def scripted_bot():
    return ScriptedBotClient


@pytest.fixture
def make_config():
    def _make(
        starts: dict[str, tuple[int, int, int]] | None = None,
        *,
        names: list[str] | None = None,
        edge_length: int = 3,
        tasks: int = 1,
        max_ticks: int = 50,
    ) -> GameConfig:
        if names is None:
            names = list(starts) if starts else ["A", "B"]
        start_positions = None
        if starts is not None:
            start_positions = tuple(StartPosition(n, *c) for n, c in starts.items())
        setup = GameSetup(
            edge_length=edge_length,
            max_num_of_ticks=max_ticks,
            tick_delay_s=0.0,
            num_of_tasks_per_tick=tasks,
            player_start_positions=start_positions,
        )
        return GameConfig(setup=setup, players=tuple(PlayerSetup(n, f"http://bots/{n}") for n in names))

    return _make


@pytest.fixture
def make_engine():
    def _make(config: GameConfig, bot_client: Any, events: list | None = None, seed: int = 0) -> GameEngine:
        async def sink(event: dict[str, Any]) -> None:
            if events is not None:
                events.append(event)

        return GameEngine(config, bot_client, game_id="test-game", sink=sink, rng=np.random.default_rng(seed))

    return _make


@pytest.fixture
def run_steps():
    """Position players and run `n` sub-ticks without the pacing loop."""

    def _run(engine: GameEngine, n: int) -> None:
        async def _go() -> None:
            engine.position_players()
            engine.state.status = GameStatus.RUNNING
            for _ in range(n):
                if engine.status == GameStatus.ENDED:
                    break
                await engine.step()

        asyncio.run(_go())

    return _run
