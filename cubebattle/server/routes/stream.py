"""SSE streaming endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ..sse import sse_event_generator, sse_manager

router = APIRouter()


@router.get("/events")
async def sse_endpoint(game_id: str | None = None):
    """
    Server-Sent Events endpoint for live games.

    Events (payload always carries game_id):
    - game_started: Players positioned, loop starting
    - next_tick: Snapshot before each sub-tick
    - player_move_attempt / player_placed_bomb / player_did_nothing
    - player_lost: Elimination with cause
    - game_ended: Final standings
    """
    client = await sse_manager.register(game_id)

    return StreamingResponse(
        sse_event_generator(client, sse_manager),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
