"""Game lifecycle endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException

from cubebattle.errors import GameFinished, GameNotFound, GameTableFull

from ..games import GameEntry, status_name
from ..models import GameCreatedResponse, GameSetupModel, GameStatusResponse, GameSummary, StartGameRequest

if TYPE_CHECKING:
    from ..games import GameManager

router = APIRouter(prefix="/api", tags=["games"])

# Module-level state set by init_game_routes
_manager: GameManager | None = None


def init_game_routes(manager: GameManager) -> None:
    """Initialize routes with the game table."""
    global _manager
    _manager = manager


def _require_manager() -> GameManager:
    if _manager is None:
        raise HTTPException(503, "Game manager not initialized")
    return _manager


def _get_entry(game_id: str) -> GameEntry:
    try:
        return _require_manager().get(game_id)
    except GameNotFound:
        raise HTTPException(404, f"Game '{game_id}' not found") from None


def _summary(entry: GameEntry) -> GameSummary:
    state = entry.engine.state
    return GameSummary(
        game_id=state.game_id,
        status=status_name(entry),
        current_tick=state.current_tick,
        players_alive=len(state.player_positions),
    )


@router.post("/games", response_model=GameCreatedResponse)
async def start_game(request: StartGameRequest):
    """Start a game; events stream on /events?game_id=<id>."""
    manager = _require_manager()
    try:
        engine = manager.start(request.to_config())
    except GameTableFull as e:
        raise HTTPException(503, str(e)) from e
    return GameCreatedResponse(game_id=engine.game_id, status=status_name(manager.get(engine.game_id)))


@router.get("/games", response_model=list[GameSummary])
async def list_games():
    return [_summary(entry) for entry in _require_manager().entries()]


@router.get("/games/{game_id}", response_model=GameStatusResponse)
async def get_game(game_id: str):
    entry = _get_entry(game_id)
    state = entry.engine.state
    return GameStatusResponse(
        **_summary(entry).model_dump(),
        sub_tick=state.sub_tick,
        edge_length=state.edge_length,
        players=[p.as_dict() for p in state.player_positions],
        items=[i.as_dict() for i in state.items],
        lost_players=[p.to_dict() for p in state.lost_players],
        error=entry.error,
    )


@router.put("/games/{game_id}/setup")
async def update_game_setup(game_id: str, setup: GameSetupModel) -> dict[str, str]:
    """Queue a setup hot-swap; applied at the next tick boundary."""
    try:
        _require_manager().update_setup(game_id, setup.to_setup())
    except GameNotFound:
        raise HTTPException(404, f"Game '{game_id}' not found") from None
    except GameFinished as e:
        raise HTTPException(409, str(e)) from e
    except ValueError as e:
        raise HTTPException(422, str(e)) from e
    return {"status": "ok", "game_id": game_id}


@router.get("/games/{game_id}/result")
async def get_game_result(game_id: str) -> dict[str, Any]:
    entry = _get_entry(game_id)
    result = entry.engine.result
    if result is None:
        raise HTTPException(409, f"Game '{game_id}' has no result yet ({status_name(entry)})")
    return result.to_dict()


@router.get("/scoreboard")
async def get_scoreboard() -> dict[str, Any]:
    """Win tally across every finished game."""
    scoreboard = _require_manager().scoreboard
    return {
        "games": scoreboard.games_recorded,
        "standings": [t.to_dict() for t in scoreboard.standings()],
    }
