"""Pure coordinate helpers for the cube grid."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import numpy as np


class Positioned(Protocol):
    x: int
    y: int
    z: int


def coords(p: Positioned) -> tuple[int, int, int]:
    return (p.x, p.y, p.z)


def is_same_coordinate(a: Positioned, b: Positioned) -> bool:
    return a.x == b.x and a.y == b.y and a.z == b.z


def coordinate_is_in_use(coordinate: Positioned, entities: Iterable[Positioned]) -> bool:
    return any(is_same_coordinate(coordinate, e) for e in entities)


def is_out_of_bounds(coordinate: Positioned, edge_length: int) -> bool:
    return any(c < 0 or c >= edge_length for c in coords(coordinate))


@dataclass(frozen=True, slots=True)
class Coordinate:
    x: int
    y: int
    z: int


def random_coordinate(max_value: int, rng: np.random.Generator) -> Coordinate:
    """Uniform coordinate with every axis in [0, max_value]."""
    x, y, z = (int(v) for v in rng.integers(0, max_value + 1, size=3))
    return Coordinate(x, y, z)


def random_free_coordinate(
    edge_length: int,
    taken: Iterable[Positioned],
    rng: np.random.Generator,
) -> Coordinate:
    """Re-sample until the coordinate does not collide with anything in `taken`.

    Callers must guarantee a free cell exists (GameConfig enforces this).
    """
    taken = list(taken)
    coordinate = random_coordinate(edge_length - 1, rng)
    while coordinate_is_in_use(coordinate, taken):
        coordinate = random_coordinate(edge_length - 1, rng)
    return coordinate
