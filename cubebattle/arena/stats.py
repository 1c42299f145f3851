"""Final standings data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..sim.state import PlayerWithHighScore


@dataclass
class HighScoreInfo:
    """Outcome of a finished game."""

    id: str  # Game id
    result: str  # "WINNER_FOUND" | "TIE"
    scores: list[PlayerWithHighScore] = field(default_factory=list)
    winner: PlayerWithHighScore | None = None

    def ranking(self) -> list[PlayerWithHighScore]:
        """Scores ordered best first (latest tick survived wins)."""
        return sorted(self.scores, key=lambda s: s.high_score, reverse=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for JSON transport."""
        return {
            "id": self.id,
            "result": self.result,
            "scores": [s.to_dict() for s in self.scores],
            "winner": self.winner.to_dict() if self.winner is not None else None,
        }
