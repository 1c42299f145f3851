from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class Axis(IntEnum):
    X = 0
    Y = 1
    Z = 2


@dataclass(frozen=True)
class Move:
    axis: Axis
    sign: int  # +1 or -1

    @classmethod
    def from_token(cls, token: str) -> Move:
        """Build from a "+X"-style token (sign first, then axis)."""
        op, axis = token.upper()
        return cls(axis=Axis[axis], sign=1 if op == "+" else -1)

    @property
    def token(self) -> str:
        return f"{'+' if self.sign > 0 else '-'}{self.axis.name}"


@dataclass(frozen=True)
class Bomb:
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class Noop:
    pass


BotDirection = Union[Move, Bomb, Noop]
