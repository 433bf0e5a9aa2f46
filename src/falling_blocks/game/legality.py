from __future__ import annotations

from typing import Container, Iterable

from .geometry import BOARD_HEIGHT, BOARD_WIDTH, GridPos


def is_legal(
    candidate_cells: Iterable[GridPos],
    locked_cells: Container[GridPos],
    width: int = BOARD_WIDTH,
    height: int = BOARD_HEIGHT,
) -> bool:
    """True if every candidate cell is on the board and not already locked."""
    for pos in candidate_cells:
        if pos.x < 0 or pos.x >= width or pos.y < 0 or pos.y >= height:
            return False
        if pos in locked_cells:
            return False
    return True
