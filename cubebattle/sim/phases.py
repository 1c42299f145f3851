"""State transitions of one tick.

Every phase takes the game's ``GameState`` and mutates it in place. Phases
that produce observable effects return them as a list of event dicts; the
engine decides when and where to dispatch them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..actions import Bomb, Move, Noop
from ..arena.stats import HighScoreInfo
from ..constants import (
    CAUSE_CRASHED,
    CAUSE_OUT_OF_BOUNDS,
    CAUSE_OUTSIDE_GRID,
    CAUSE_STEPPED_ON_BOMB,
    EVENT_PLAYER_DID_NOTHING,
    EVENT_PLAYER_LOST,
    EVENT_PLAYER_MOVE_ATTEMPT,
    EVENT_PLAYER_PLACED_BOMB,
    ITEM_BOMB,
    RESULT_TIE,
    RESULT_WINNER_FOUND,
)
from ..errors import Elimination, LossKind
from .geometry import coordinate_is_in_use, is_out_of_bounds, is_same_coordinate, random_free_coordinate
from .state import (
    CollisionInfo,
    GameItem,
    GameStatus,
    NextTickInfo,
    PlayerPosition,
    PlayerWithHighScore,
    PreValidationInfo,
)

if TYPE_CHECKING:
    import numpy as np

    from ..actions import BotDirection
    from ..config import PlayerSetup
    from .state import GameState

_AXIS_ATTRS = ("x", "y", "z")


def position_players(state: GameState, rng: np.random.Generator) -> None:
    starts = state.config.setup.player_start_positions
    if starts is not None:
        state.player_positions = [PlayerPosition(p.name, p.x, p.y, p.z) for p in starts]
        return

    positions: list[PlayerPosition] = []
    for player in state.config.players:
        c = random_free_coordinate(state.edge_length, positions, rng)
        positions.append(PlayerPosition(player.name, c.x, c.y, c.z))
    state.player_positions = positions


def begin_tick(state: GameState) -> None:
    """Advance the sub-tick counter and clear per-tick working data."""
    if state.sub_tick >= state.num_of_tasks_per_tick:
        state.sub_tick = 0
        # Setup swaps only land between tick batches so cached directions stay consistent
        if state.pending_config is not None:
            state.config = state.pending_config
            state.pending_config = None
    state.sub_tick += 1
    prune_exploded_bombs(state)
    state.pre_validation = PreValidationInfo()


def prune_exploded_bombs(state: GameState) -> None:
    """Drop bombs that took part in a collision during the previous tick."""
    exploded = [c for c in state.pre_validation.collisions if c.has_bomb]
    state.items = [
        item for item in state.items if item.type != ITEM_BOMB or not coordinate_is_in_use(item, exploded)
    ]


def build_next_tick_info(state: GameState) -> NextTickInfo:
    return NextTickInfo(
        players=tuple(p.as_dict() for p in state.player_positions),
        items=tuple(i.as_dict() for i in state.items),
        game_info={
            "id": state.game_id,
            "edge_length": state.edge_length,
            "num_of_tasks_per_tick": state.num_of_tasks_per_tick,
            "num_of_bots_in_play": len(state.player_positions),
            "current_tick": state.current_tick,
        },
    )


def player_lost(state: GameState, player: PlayerSetup, elimination: Elimination) -> list[dict[str, Any]]:
    """Record an elimination. Repeated losses of the same player are no-ops."""
    if state.has_lost(player.name):
        return []
    state.lost_players.append(PlayerWithHighScore.from_setup(player, state.current_tick))
    return [
        {
            "type": EVENT_PLAYER_LOST,
            "name": player.name,
            "cause": elimination.cause,
            "kind": elimination.kind.name,
        }
    ]


def _move(state: GameState, position: PlayerPosition, move: Move) -> list[dict[str, Any]]:
    attr = _AXIS_ATTRS[move.axis]
    setattr(position, attr, getattr(position, attr) + move.sign)
    return [{"type": EVENT_PLAYER_MOVE_ATTEMPT, **position.as_dict()}]


def _place_bomb(state: GameState, position: PlayerPosition, bomb: Bomb) -> list[dict[str, Any]]:
    collision = next((c for c in state.pre_validation.collisions if is_same_coordinate(c, bomb)), None)
    if collision is not None:
        collision.has_bomb = True
    elif not coordinate_is_in_use(bomb, state.items):
        state.items.append(GameItem(bomb.x, bomb.y, bomb.z, ITEM_BOMB))
    return [{"type": EVENT_PLAYER_PLACED_BOMB, "x": bomb.x, "y": bomb.y, "z": bomb.z, "name": position.name}]


def _noop(state: GameState, position: PlayerPosition, noop: Noop) -> list[dict[str, Any]]:
    return [{"type": EVENT_PLAYER_DID_NOTHING, **position.as_dict()}]


def apply_direction(
    state: GameState, player: PlayerSetup, direction: BotDirection
) -> tuple[Elimination | None, list[dict[str, Any]]]:
    """Apply one command for one player.

    Returns the elimination it caused (if any) alongside its events. A player
    left outside the grid after the command is out of bounds, whatever the
    command was.
    """
    position = state.position_of(player.name)
    if position is None:
        return None, []

    if isinstance(direction, Move):
        events = _move(state, position, direction)
    elif isinstance(direction, Bomb):
        events = _place_bomb(state, position, direction)
    elif isinstance(direction, Noop):
        events = _noop(state, position, direction)
    else:
        raise TypeError(f"Unknown bot direction: {direction!r}")

    if is_out_of_bounds(position, state.edge_length):
        state.pre_validation.out_of_bounds_players.append(position)
        # Only a move leaves the grid; anyone else was stranded by a smaller setup
        cause = CAUSE_OUT_OF_BOUNDS if isinstance(direction, Move) else CAUSE_OUTSIDE_GRID
        return Elimination(LossKind.BOUNDS_VIOLATION, cause), events
    return None, events


def apply_directions(state: GameState) -> list[dict[str, Any]]:
    """Apply every active player's cached command for the current sub-tick."""
    events: list[dict[str, Any]] = []
    index = state.sub_tick - 1
    for player in state.active_players():
        direction = state.cached_directions[player.name][index]
        elimination, player_events = apply_direction(state, player, direction)
        events.extend(player_events)
        if elimination is not None:
            events.extend(player_lost(state, player, elimination))
    return events


def detect_collisions(state: GameState) -> None:
    """Group players sharing a cell with each other or a bomb, one record per cell."""
    bombs = [item for item in state.items if item.type == ITEM_BOMB]
    collisions = state.pre_validation.collisions

    for i, player in enumerate(state.player_positions):
        others = [p for j, p in enumerate(state.player_positions) if j != i]
        has_bomb = coordinate_is_in_use(player, bombs)
        if not (has_bomb or coordinate_is_in_use(player, others)):
            continue

        record = next((c for c in collisions if is_same_coordinate(c, player)), None)
        if record is None:
            collisions.append(CollisionInfo(player.x, player.y, player.z, has_bomb, [player]))
        elif not any(p.name == player.name for p in record.players):
            record.players.append(player)


def record_losses(state: GameState) -> list[dict[str, Any]]:
    """Turn out-of-bounds and collided players into permanent eliminations."""
    events: list[dict[str, Any]] = []
    pv = state.pre_validation
    losses = [(p, Elimination(LossKind.BOUNDS_VIOLATION, CAUSE_OUT_OF_BOUNDS)) for p in pv.out_of_bounds_players]
    for collision in pv.collisions:
        elimination = Elimination(LossKind.COLLISION, CAUSE_STEPPED_ON_BOMB if collision.has_bomb else CAUSE_CRASHED)
        losses.extend((p, elimination) for p in collision.players)
    for position, elimination in losses:
        events.extend(player_lost(state, state.config.player(position.name), elimination))
    return events


def remove_losers(state: GameState) -> None:
    pv = state.pre_validation

    collided = {p.name for c in pv.collisions for p in c.players}
    state.player_positions = [p for p in state.player_positions if p.name not in collided]

    lost = {p.name for p in state.lost_players}
    state.player_positions = [p for p in state.player_positions if p.name not in lost]

    out_of_bounds = {p.name for p in pv.out_of_bounds_players}
    state.player_positions = [p for p in state.player_positions if p.name not in out_of_bounds]

    pv.players = list(state.player_positions)


def check_status(state: GameState) -> bool:
    """End the game when everyone lost, one player is left, or time ran out."""
    config = state.config
    if (
        len(state.lost_players) == len(config.players)
        or len(state.pre_validation.players) == 1
        or state.current_tick >= config.setup.max_num_of_ticks - 1
    ):
        state.status = GameStatus.ENDED
    return state.status == GameStatus.ENDED


def _add_score(state: GameState, entry: PlayerWithHighScore) -> None:
    if not state.has_lost(entry.name):
        state.lost_players.append(entry)


def get_highscores(state: GameState) -> HighScoreInfo:
    """Final standings. Remaining players are stamped with the current tick."""
    survivors = [state.config.player(p.name) for p in state.player_positions]
    winner: PlayerWithHighScore | None = None

    if len(survivors) == 1:
        winner = PlayerWithHighScore.from_setup(survivors[0], state.current_tick)
        _add_score(state, winner)
    elif len(survivors) > 1:
        # Tie at the tick limit
        for player in survivors:
            _add_score(state, PlayerWithHighScore.from_setup(player, state.current_tick))

    return HighScoreInfo(
        id=state.game_id,
        result=RESULT_WINNER_FOUND if winner is not None else RESULT_TIE,
        scores=list(state.lost_players),
        winner=winner,
    )
