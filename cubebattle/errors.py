"""Error taxonomy for per-player failures.

Bot transport and validation problems are raised as exceptions at the
client/validator boundary. Inside the tick loop every per-player failure is
carried as an ``Elimination`` value instead, and the engine turns it into a
``player_lost`` transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class LossKind(IntEnum):
    BOUNDS_VIOLATION = 0  # Move left the grid
    NETWORK_FAILURE = 1  # Bot unreachable or returned garbage
    TIMEOUT = 2  # Bot too slow
    VALIDATION_FAILURE = 3  # Malformed or illegal directions
    COLLISION = 4  # Shared a cell with another player or a bomb


@dataclass(frozen=True)
class Elimination:
    kind: LossKind
    cause: str


class CubeBattleError(Exception):
    """Base class for all cubebattle errors."""


class ValidationFailure(CubeBattleError):
    """Bot response does not decode into a legal direction batch."""

    kind = LossKind.VALIDATION_FAILURE


class BotClientError(CubeBattleError):
    """Round trip to a bot failed."""

    kind = LossKind.NETWORK_FAILURE


class BotNetworkError(BotClientError):
    pass


class BotTimeout(BotClientError):
    kind = LossKind.TIMEOUT


class GameNotFound(CubeBattleError):
    pass


class GameFinished(CubeBattleError):
    """Operation requires a game that is still running."""


class GameTableFull(CubeBattleError):
    pass
