from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple


BOARD_WIDTH = 10
BOARD_HEIGHT = 20


@dataclass(frozen=True)
class GridPos:
    """Integer board coordinate, or an offset relative to a piece origin.

    y = 0 is the bottom row of the board; y grows upward.
    """

    x: int
    y: int

    def __add__(self, other: "GridPos") -> "GridPos":
        return GridPos(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "GridPos") -> "GridPos":
        return GridPos(self.x - other.x, self.y - other.y)


LEFT = GridPos(-1, 0)
RIGHT = GridPos(1, 0)
DOWN = GridPos(0, -1)


class TetrominoType(IntEnum):
    O = 1
    I = 2
    J = 3
    L = 4
    S = 5
    Z = 6
    T = 7


PieceShape = Tuple[GridPos, GridPos, GridPos, GridPos]


def _shape(*offsets: Tuple[int, int]) -> PieceShape:
    if len(offsets) != 4:
        raise ValueError(f"a piece shape needs exactly 4 cells, got {len(offsets)}")
    return tuple(GridPos(x, y) for x, y in offsets)  # type: ignore[return-value]


# Rotation states per kind, in the order the rotate command cycles through them.
SHAPE_CATALOG: Dict[TetrominoType, Tuple[PieceShape, ...]] = {
    TetrominoType.O: (
        _shape((1, 0), (1, 1), (2, 0), (2, 1)),
    ),
    TetrominoType.I: (
        _shape((0, 1), (1, 1), (2, 1), (3, 1)),
        _shape((2, 0), (2, 1), (2, 2), (2, 3)),
    ),
    TetrominoType.J: (
        _shape((0, 1), (1, 1), (2, 1), (2, 0)),
        _shape((1, 0), (1, 1), (1, 2), (0, 0)),
        _shape((0, 1), (1, 1), (2, 1), (0, 2)),
        _shape((1, 0), (1, 1), (1, 2), (2, 2)),
    ),
    TetrominoType.L: (
        _shape((0, 1), (1, 1), (2, 1), (0, 0)),
        _shape((1, 0), (1, 1), (1, 2), (0, 2)),
        _shape((0, 1), (1, 1), (2, 1), (2, 2)),
        _shape((1, 0), (1, 1), (1, 2), (2, 0)),
    ),
    TetrominoType.S: (
        _shape((0, 0), (1, 0), (1, 1), (2, 1)),
        _shape((1, 2), (1, 1), (2, 1), (2, 0)),
    ),
    TetrominoType.Z: (
        _shape((0, 1), (1, 1), (1, 0), (2, 0)),
        _shape((2, 2), (2, 1), (1, 1), (1, 0)),
    ),
    TetrominoType.T: (
        _shape((0, 1), (1, 1), (2, 1), (1, 0)),
        _shape((1, 0), (1, 1), (1, 2), (0, 1)),
        _shape((0, 1), (1, 1), (2, 1), (1, 2)),
        _shape((1, 0), (1, 1), (1, 2), (2, 1)),
    ),
}


def rotation_count(kind: TetrominoType) -> int:
    return len(SHAPE_CATALOG[kind])


def shape_for(kind: TetrominoType, rotation: int) -> PieceShape:
    """Offsets of `kind` in rotation state `rotation` (taken modulo the state count)."""
    states = SHAPE_CATALOG[kind]
    return states[rotation % len(states)]
