"""Pydantic models for API requests/responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from cubebattle.config import GameConfig, GameSetup, PlayerSetup, StartPosition
from cubebattle.constants import (
    DEFAULT_EDGE_LENGTH,
    DEFAULT_MAX_NUM_OF_TICKS,
    DEFAULT_NUM_OF_TASKS_PER_TICK,
    DEFAULT_TICK_DELAY_S,
)


class StartPositionModel(BaseModel):
    name: str
    x: int
    y: int
    z: int


class GameSetupModel(BaseModel):
    """Tunable rules of one game. Also the body of a setup hot-swap."""

    edge_length: int = Field(DEFAULT_EDGE_LENGTH, ge=1)
    max_num_of_ticks: int = Field(DEFAULT_MAX_NUM_OF_TICKS, ge=1)
    tick_delay_s: float = Field(DEFAULT_TICK_DELAY_S, ge=0.0)
    num_of_tasks_per_tick: int = Field(DEFAULT_NUM_OF_TASKS_PER_TICK, ge=1)
    player_start_positions: list[StartPositionModel] | None = None

    @model_validator(mode="after")
    def _check_setup(self) -> GameSetupModel:
        self.to_setup()  # Raises ValueError on inconsistent rules
        return self

    def to_setup(self) -> GameSetup:
        starts = None
        if self.player_start_positions is not None:
            starts = tuple(StartPosition(p.name, p.x, p.y, p.z) for p in self.player_start_positions)
        return GameSetup(
            edge_length=self.edge_length,
            max_num_of_ticks=self.max_num_of_ticks,
            tick_delay_s=self.tick_delay_s,
            num_of_tasks_per_tick=self.num_of_tasks_per_tick,
            player_start_positions=starts,
        )


class PlayerSetupModel(BaseModel):
    name: str = Field(min_length=1)
    url: str


class StartGameRequest(BaseModel):
    """Request to start a new game."""

    setup: GameSetupModel = Field(default_factory=GameSetupModel)
    players: list[PlayerSetupModel] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_config(self) -> StartGameRequest:
        self.to_config()
        return self

    def to_config(self) -> GameConfig:
        return GameConfig(
            setup=self.setup.to_setup(),
            players=tuple(PlayerSetup(name=p.name, url=p.url) for p in self.players),
        )


class GameCreatedResponse(BaseModel):
    game_id: str
    status: str


class GameSummary(BaseModel):
    game_id: str
    status: str
    current_tick: int
    players_alive: int


class GameStatusResponse(GameSummary):
    sub_tick: int
    edge_length: int
    players: list[dict[str, Any]]
    items: list[dict[str, Any]]
    lost_players: list[dict[str, Any]]
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    clients: int
    games: int
    uptime_s: float
