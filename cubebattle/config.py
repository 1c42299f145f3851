from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .constants import (
    DEFAULT_EDGE_LENGTH,
    DEFAULT_MAX_NUM_OF_TICKS,
    DEFAULT_NUM_OF_TASKS_PER_TICK,
    DEFAULT_TICK_DELAY_S,
)


@dataclass(frozen=True)
class PlayerSetup:
    name: str
    url: str  # Bot endpoint polled once per tick

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url}


@dataclass(frozen=True)
class StartPosition:
    name: str
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class GameSetup:
    edge_length: int = DEFAULT_EDGE_LENGTH
    max_num_of_ticks: int = DEFAULT_MAX_NUM_OF_TICKS
    tick_delay_s: float = DEFAULT_TICK_DELAY_S
    num_of_tasks_per_tick: int = DEFAULT_NUM_OF_TASKS_PER_TICK  # Sub-ticks per tick
    player_start_positions: tuple[StartPosition, ...] | None = None

    def __post_init__(self) -> None:
        if self.edge_length < 1:
            raise ValueError(f"edge_length must be >= 1, got {self.edge_length}")
        if self.max_num_of_ticks < 1:
            raise ValueError(f"max_num_of_ticks must be >= 1, got {self.max_num_of_ticks}")
        if self.num_of_tasks_per_tick < 1:
            raise ValueError(f"num_of_tasks_per_tick must be >= 1, got {self.num_of_tasks_per_tick}")
        if self.tick_delay_s < 0:
            raise ValueError(f"tick_delay_s must be >= 0, got {self.tick_delay_s}")
        if self.player_start_positions is not None:
            seen: set[tuple[int, int, int]] = set()
            for pos in self.player_start_positions:
                coord = (pos.x, pos.y, pos.z)
                if any(c < 0 or c >= self.edge_length for c in coord):
                    raise ValueError(f"Start position of {pos.name} is outside the grid: {coord}")
                if coord in seen:
                    raise ValueError(f"Start positions overlap at {coord}")
                seen.add(coord)


@dataclass(frozen=True)
class GameConfig:
    setup: GameSetup = field(default_factory=GameSetup)
    players: tuple[PlayerSetup, ...] = ()

    def __post_init__(self) -> None:
        names = [p.name for p in self.players]
        if len(set(names)) != len(names):
            raise ValueError(f"Player names must be unique, got {names}")
        if len(names) > self.setup.edge_length**3:
            raise ValueError(f"{len(names)} players do not fit on a grid of edge {self.setup.edge_length}")
        starts = self.setup.player_start_positions
        if starts is not None and sorted(p.name for p in starts) != sorted(names):
            raise ValueError("player_start_positions must name every configured player exactly once")

    def player(self, name: str) -> PlayerSetup:
        for p in self.players:
            if p.name == name:
                return p
        raise KeyError(name)
