from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from ..constants import ITEM_BOMB

if TYPE_CHECKING:
    from ..actions import BotDirection
    from ..config import GameConfig, PlayerSetup


class GameStatus(IntEnum):
    NOT_STARTED = 0
    RUNNING = 1
    ENDED = 2


@dataclass
class PlayerPosition:
    name: str
    x: int
    y: int
    z: int

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "x": self.x, "y": self.y, "z": self.z}


@dataclass
class GameItem:
    x: int
    y: int
    z: int
    type: str = ITEM_BOMB

    def as_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z, "type": self.type}


@dataclass
class CollisionInfo:
    """All players (and a bomb, if any) contesting one cell within a tick."""

    x: int
    y: int
    z: int
    has_bomb: bool
    players: list[PlayerPosition] = field(default_factory=list)


@dataclass
class PreValidationInfo:
    players: list[PlayerPosition] = field(default_factory=list)
    collisions: list[CollisionInfo] = field(default_factory=list)
    out_of_bounds_players: list[PlayerPosition] = field(default_factory=list)


@dataclass
class PlayerWithHighScore:
    name: str
    url: str
    high_score: int  # Tick index at elimination or win

    @classmethod
    def from_setup(cls, setup: PlayerSetup, high_score: int) -> PlayerWithHighScore:
        return cls(name=setup.name, url=setup.url, high_score=high_score)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "high_score": self.high_score}


@dataclass(frozen=True)
class NextTickInfo:
    """Read-only snapshot broadcast to bots and observers before each sub-tick."""

    players: tuple[dict[str, Any], ...]
    items: tuple[dict[str, Any], ...]
    game_info: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": list(self.players),
            "items": list(self.items),
            "game_info": dict(self.game_info),
        }


@dataclass
class GameState:
    """Everything one game mutates. Owned by exactly one engine."""

    game_id: str
    config: GameConfig
    status: GameStatus = GameStatus.NOT_STARTED
    current_tick: int = 0
    sub_tick: int = 0
    player_positions: list[PlayerPosition] = field(default_factory=list)
    items: list[GameItem] = field(default_factory=list)
    lost_players: list[PlayerWithHighScore] = field(default_factory=list)
    pre_validation: PreValidationInfo = field(default_factory=PreValidationInfo)
    cached_directions: dict[str, list[BotDirection]] = field(default_factory=dict)
    pending_config: GameConfig | None = None

    @property
    def edge_length(self) -> int:
        return self.config.setup.edge_length

    @property
    def num_of_tasks_per_tick(self) -> int:
        return self.config.setup.num_of_tasks_per_tick

    def position_of(self, name: str) -> PlayerPosition | None:
        for p in self.player_positions:
            if p.name == name:
                return p
        return None

    def has_lost(self, name: str) -> bool:
        return any(p.name == name for p in self.lost_players)

    def active_players(self) -> list[PlayerSetup]:
        """Positioned players that have not been eliminated yet, in position order."""
        return [self.config.player(p.name) for p in self.player_positions if not self.has_lost(p.name)]
