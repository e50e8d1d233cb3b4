from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import IncompatibleBoardSize


class Direction(Enum):
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    UP = (0, -1)
    DOWN = (0, 1)


@dataclass(frozen=True)
class Coordinate:
    """A position on the N x N torus. Arithmetic wraps with floored modulo."""
    x: int
    y: int
    board_size: int

    def __post_init__(self) -> None:
        if not (0 <= self.x < self.board_size and 0 <= self.y < self.board_size):
            raise IncompatibleBoardSize(f"{self!r} lies outside a {self.board_size}x{self.board_size} board")

    @classmethod
    def wrapped(cls, x: int, y: int, board_size: int) -> 'Coordinate':
        # Python's % is floored, so -1 maps to board_size - 1.
        return cls(x % board_size, y % board_size, board_size)

    def step(self, direction: Direction) -> 'Coordinate':
        dx, dy = direction.value
        return Coordinate.wrapped(self.x + dx, self.y + dy, self.board_size)

    @property
    def left(self) -> 'Coordinate':
        return self.step(Direction.LEFT)

    @property
    def right(self) -> 'Coordinate':
        return self.step(Direction.RIGHT)

    @property
    def up(self) -> 'Coordinate':
        return self.step(Direction.UP)

    @property
    def down(self) -> 'Coordinate':
        return self.step(Direction.DOWN)

    def neighbours(self) -> List['Coordinate']:
        """The four orthogonal neighbours in LEFT, RIGHT, UP, DOWN order."""
        return [self.step(d) for d in Direction]

    def is_adjacent_to(self, other: 'Coordinate') -> bool:
        if other.board_size != self.board_size:
            raise IncompatibleBoardSize(
                f"Can't compare {self} (size {self.board_size}) with {other} (size {other.board_size})"
            )
        return other in self.neighbours()

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"
