"""Tests for grid coordinate helpers."""

import dataclasses

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from cubebattle.sim.geometry import (
    Coordinate,
    coordinate_is_in_use,
    is_out_of_bounds,
    is_same_coordinate,
    random_coordinate,
    random_free_coordinate,
)
from cubebattle.sim.state import GameItem, PlayerPosition


def test_same_coordinate_ignores_entity_type():
    assert is_same_coordinate(PlayerPosition("A", 1, 2, 0), GameItem(1, 2, 0))
    assert not is_same_coordinate(PlayerPosition("A", 1, 2, 0), GameItem(1, 2, 1))


def test_coordinate_in_use():
    players = [PlayerPosition("A", 0, 0, 0), PlayerPosition("B", 2, 1, 0)]
    assert coordinate_is_in_use(Coordinate(2, 1, 0), players)
    assert not coordinate_is_in_use(Coordinate(1, 1, 0), players)
    assert not coordinate_is_in_use(Coordinate(0, 0, 0), [])


class TestOutOfBounds:
    def test_inside(self):
        assert not is_out_of_bounds(Coordinate(0, 0, 0), 3)
        assert not is_out_of_bounds(Coordinate(2, 2, 2), 3)

    def test_each_axis_low_and_high(self):
        for axis in range(3):
            low = [1, 1, 1]
            low[axis] = -1
            high = [1, 1, 1]
            high[axis] = 3
            assert is_out_of_bounds(Coordinate(*low), 3)
            assert is_out_of_bounds(Coordinate(*high), 3)


@given(edge=st.integers(min_value=1, max_value=10), seed=st.integers(min_value=0, max_value=2**16))
def test_random_coordinate_stays_in_grid(edge, seed):
    c = random_coordinate(edge - 1, np.random.default_rng(seed))
    assert not is_out_of_bounds(c, edge)


@settings(max_examples=50)
@given(seed=st.integers(min_value=0, max_value=2**16))
def test_random_free_coordinate_avoids_taken_cells(seed):
    # Edge 2 has 8 cells; leave exactly one free
    taken = [Coordinate(x, y, z) for x in range(2) for y in range(2) for z in range(2)][1:]
    c = random_free_coordinate(2, taken, np.random.default_rng(seed))
    assert c == Coordinate(0, 0, 0)


def test_coordinate_is_a_frozen_value():
    c = Coordinate(1, 2, 3)
    assert c == Coordinate(1, 2, 3)
    assert len({c, Coordinate(1, 2, 3), Coordinate(3, 2, 1)}) == 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        c.x = 0
