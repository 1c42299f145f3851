"""Validation of raw bot responses into direction batches."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError, field_validator

from ..actions import Bomb, BotDirection, Move, Noop
from ..constants import MOVE_DIRECTIONS
from ..errors import ValidationFailure

if TYPE_CHECKING:
    from ..config import GameConfig


class MoveOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    task: Literal["MOVE"]
    direction: StrictStr

    @field_validator("direction")
    @classmethod
    def _legal_direction(cls, v: str) -> str:
        token = v.upper()
        if token not in MOVE_DIRECTIONS:
            raise ValueError(f"direction must be one of {', '.join(MOVE_DIRECTIONS)}, got {v!r}")
        return token


class BombOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    task: Literal["BOMB"]
    x: StrictInt
    y: StrictInt
    z: StrictInt


class NoopOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    task: Literal["NOOP"]


DirectionOrder = Annotated[Union[MoveOrder, BombOrder, NoopOrder], Field(discriminator="task")]

_batch_adapter: TypeAdapter[list[DirectionOrder]] = TypeAdapter(list[DirectionOrder])


def _to_direction(order: MoveOrder | BombOrder | NoopOrder) -> BotDirection:
    if isinstance(order, MoveOrder):
        return Move.from_token(order.direction)
    if isinstance(order, BombOrder):
        return Bomb(x=order.x, y=order.y, z=order.z)
    return Noop()


def _decode(payload: Any) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except ValueError as e:
            raise ValidationFailure(f"Bot response is not valid JSON: {e}") from e
    return payload


def validate_bot_directions(payload: Any, config: GameConfig) -> list[BotDirection]:
    """Check a bot response and return one direction per sub-tick.

    Raises:
        ValidationFailure: payload is not a list of exactly
            ``num_of_tasks_per_tick`` known commands.
    """
    data = _decode(payload)
    expected = config.setup.num_of_tasks_per_tick

    if not isinstance(data, list):
        raise ValidationFailure(f"Bot response must be a list of directions, got {type(data).__name__}")
    if len(data) != expected:
        raise ValidationFailure(f"Bot returned {len(data)} directions, expected {expected}")

    try:
        orders = _batch_adapter.validate_python(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first["loc"])
        raise ValidationFailure(f"Invalid direction at {loc}: {first['msg']}") from e

    return [_to_direction(order) for order in orders]
