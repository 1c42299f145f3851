from __future__ import annotations

# ==============================================================================
# Game Defaults
# ==============================================================================

DEFAULT_BOT_TIMEOUT_S = 2.0  # Seconds a bot may take to answer
DEFAULT_EDGE_LENGTH = 8
DEFAULT_MAX_NUM_OF_TICKS = 200
DEFAULT_TICK_DELAY_S = 0.2
DEFAULT_NUM_OF_TASKS_PER_TICK = 3

# ==============================================================================
# Bot Protocol
# ==============================================================================

# Sign + axis tokens accepted for MOVE commands
MOVE_DIRECTIONS = ("+X", "-X", "+Y", "-Y", "+Z", "-Z")

ITEM_BOMB = "BOMB"

# ==============================================================================
# Results
# ==============================================================================

RESULT_WINNER_FOUND = "WINNER_FOUND"
RESULT_TIE = "TIE"

# Human-readable elimination causes (shown to observers as-is)
CAUSE_OUT_OF_BOUNDS = "Player moved out of bounds"
CAUSE_OUTSIDE_GRID = "Player left outside a shrunken grid"
CAUSE_STEPPED_ON_BOMB = "Player stepped on a BOMB"
CAUSE_CRASHED = "Player crashed to other player"

# ==============================================================================
# Event Types
# ==============================================================================

EVENT_GAME_STARTED = "game_started"
EVENT_NEXT_TICK = "next_tick"
EVENT_PLAYER_MOVE_ATTEMPT = "player_move_attempt"
EVENT_PLAYER_PLACED_BOMB = "player_placed_bomb"
EVENT_PLAYER_DID_NOTHING = "player_did_nothing"
EVENT_PLAYER_LOST = "player_lost"
EVENT_GAME_ENDED = "game_ended"
