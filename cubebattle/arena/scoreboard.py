"""Running tally of results across repeated battles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import RESULT_TIE

if TYPE_CHECKING:
    from .stats import HighScoreInfo


@dataclass
class PlayerTally:
    name: str
    games: int = 0
    wins: int = 0
    ties: int = 0
    best_high_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "games": self.games,
            "wins": self.wins,
            "ties": self.ties,
            "best_high_score": self.best_high_score,
        }


class Scoreboard:
    """In-memory win counts keyed by player name.

    Each game id is counted once, so recording the same result twice is safe.
    """

    def __init__(self) -> None:
        self.tallies: dict[str, PlayerTally] = {}
        self._recorded: set[str] = set()

    def record(self, info: HighScoreInfo) -> None:
        if info.id in self._recorded:
            return
        self._recorded.add(info.id)

        ranking = info.ranking()
        top = ranking[0].high_score if ranking else None
        for score in ranking:
            tally = self.tallies.setdefault(score.name, PlayerTally(name=score.name))
            tally.games += 1
            tally.best_high_score = max(tally.best_high_score, score.high_score)
            if info.winner is not None and info.winner.name == score.name:
                tally.wins += 1
            elif info.result == RESULT_TIE and info.winner is None and score.high_score == top:
                tally.ties += 1

    @property
    def games_recorded(self) -> int:
        return len(self._recorded)

    def standings(self) -> list[PlayerTally]:
        """Sorted leaderboard: most wins, then ties, then best score."""
        return sorted(
            self.tallies.values(),
            key=lambda t: (t.wins, t.ties, t.best_high_score),
            reverse=True,
        )
