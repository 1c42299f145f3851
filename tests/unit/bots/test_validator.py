"""Tests for bot response validation."""

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cubebattle.actions import Axis, Bomb, Move, Noop
from cubebattle.bots.validator import validate_bot_directions
from cubebattle.constants import MOVE_DIRECTIONS
from cubebattle.errors import LossKind, ValidationFailure


@pytest.fixture
def config3(make_config):
    return make_config(tasks=3)


def test_valid_batch_in_order(config3):
    payload = [
        {"task": "MOVE", "direction": "+X"},
        {"task": "BOMB", "x": 1, "y": 2, "z": 0},
        {"task": "NOOP"},
    ]
    directions = validate_bot_directions(payload, config3)
    assert directions == [Move(Axis.X, 1), Bomb(1, 2, 0), Noop()]


def test_json_text_is_decoded(config3):
    payload = json.dumps([{"task": "MOVE", "direction": "-z"}, {"task": "NOOP"}, {"task": "NOOP"}])
    directions = validate_bot_directions(payload.encode(), config3)
    assert directions[0] == Move(Axis.Z, -1)


@pytest.mark.parametrize("count", [0, 2, 4])
def test_wrong_length_fails(config3, count):
    with pytest.raises(ValidationFailure, match="expected 3"):
        validate_bot_directions([{"task": "NOOP"}] * count, config3)


@pytest.mark.parametrize(
    "bad",
    [
        {"task": "JUMP"},
        {"direction": "+X"},
        {"task": "MOVE", "direction": "+W"},
        {"task": "MOVE", "direction": "X+"},
        {"task": "MOVE"},
        {"task": "BOMB", "x": 1, "y": 2},
        {"task": "BOMB", "x": 1.5, "y": 2, "z": 0},
        {"task": "BOMB", "x": "1", "y": 2, "z": 0},
        {"task": "BOMB", "x": True, "y": 2, "z": 0},
        "NOOP",
    ],
)
def test_illegal_entries_fail(make_config, bad):
    with pytest.raises(ValidationFailure):
        validate_bot_directions([bad], make_config(tasks=1))


def test_not_a_list_fails(config3):
    with pytest.raises(ValidationFailure, match="must be a list"):
        validate_bot_directions({"directions": []}, config3)


def test_broken_json_fails(config3):
    with pytest.raises(ValidationFailure, match="not valid JSON"):
        validate_bot_directions("[{", config3)


def test_failure_carries_loss_kind():
    assert ValidationFailure.kind == LossKind.VALIDATION_FAILURE


@given(tokens=st.lists(st.sampled_from(MOVE_DIRECTIONS), min_size=1, max_size=5))
def test_every_move_token_round_trips(tokens):
    from cubebattle.config import GameConfig, GameSetup

    config = GameConfig(setup=GameSetup(num_of_tasks_per_tick=len(tokens)))
    directions = validate_bot_directions([{"task": "MOVE", "direction": t} for t in tokens], config)
    assert [d.token for d in directions] == tokens
