from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .coord import Coordinate


class PlayerColor(Enum):
    GREEN_SQUARE = 'G'
    ORANGE_HEXAGON = 'O'
    YELLOW_CIRCLE = 'Y'
    RED_TRIANGLE = 'R'

    @property
    def symbol(self) -> str:
        return self.value


# Step value of every start tile.
START_STEPS = 1

# Non-start step values per board size, as {steps: count}. When the players
# take more room than the table leaves, the entries at the back are dropped.
STEP_DISTRIBUTION: Dict[int, Dict[int, int]] = {
    4: {1: 4, 2: 4, 3: 4, 4: 2},
    5: {1: 6, 2: 6, 3: 6, 4: 6},
    6: {1: 8, 2: 8, 3: 8, 4: 8},
}

Board = Dict[Coordinate, 'Tile']


@dataclass
class Tile:
    """A board cell. Tiles never move; they are only flagged collapsed or visited."""
    position: Coordinate
    steps: int
    start_color: Optional[PlayerColor] = None
    collapsed: bool = False
    visited: bool = False

    def clone(self) -> 'Tile':
        return Tile(self.position, self.steps, self.start_color, self.collapsed, self.visited)


def pretty(board: Mapping[Coordinate, Tile], board_size: int,
           pawns: Optional[Mapping[Coordinate, str]] = None) -> str:
    """Generates a human-readable grid: pawn symbols, '·' for collapsed tiles, else the step value."""
    marks = pawns or {}
    lines: List[str] = []
    for y in range(board_size):
        row: List[str] = []
        for x in range(board_size):
            c = Coordinate(x, y, board_size)
            tile = board[c]
            if c in marks:
                row.append(marks[c])
            elif tile.collapsed:
                row.append("·")
            else:
                row.append(str(tile.steps))
        lines.append(" ".join(row))
    return "\n".join(lines)
