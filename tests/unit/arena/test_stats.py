"""Tests for final standings data structures."""

from cubebattle.arena.stats import HighScoreInfo
from cubebattle.sim.state import PlayerWithHighScore


def _info():
    winner = PlayerWithHighScore(name="C", url="http://bots/C", high_score=12)
    return HighScoreInfo(
        id="g1",
        result="WINNER_FOUND",
        scores=[
            PlayerWithHighScore(name="A", url="http://bots/A", high_score=3),
            PlayerWithHighScore(name="B", url="http://bots/B", high_score=7),
            winner,
        ],
        winner=winner,
    )


def test_ranking_latest_survivor_first():
    """ranking() orders by tick survived, best first."""
    assert [s.name for s in _info().ranking()] == ["C", "B", "A"]


def test_to_dict_shape():
    data = _info().to_dict()
    assert data["id"] == "g1"
    assert data["winner"] == {"name": "C", "url": "http://bots/C", "high_score": 12}
    assert [s["name"] for s in data["scores"]] == ["A", "B", "C"]


def test_tie_has_no_winner():
    info = HighScoreInfo(id="g2", result="TIE")
    data = info.to_dict()
    assert data["winner"] is None
    assert data["scores"] == []
