from __future__ import annotations

from typing import FrozenSet, Iterable, List

import numpy as np

from .geometry import GridPos
from .legality import is_legal


class GameGrid:
    """Locked cells of the board.

    The grid is indexed ``[y, x]`` with row 0 at the bottom. It uses 0 for
    empty cells and the tetromino value of the piece that locked there for
    filled cells, so renderers can colour them.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, pos: GridPos) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def is_occupied(self, pos: GridPos) -> bool:
        return self.is_inside(pos) and self.grid[pos.y, pos.x] != 0

    def __contains__(self, pos: object) -> bool:
        return isinstance(pos, GridPos) and self.is_occupied(pos)

    def can_place(self, cells: Iterable[GridPos]) -> bool:
        return is_legal(cells, self, self.width, self.height)

    def locked_cells(self) -> FrozenSet[GridPos]:
        ys, xs = np.nonzero(self.grid)
        return frozenset(GridPos(int(x), int(y)) for y, x in zip(ys, xs))

    def cell_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def lock(self, cells: Iterable[GridPos], value: int) -> None:
        """Write `cells` into the grid with `value`."""
        cells = list(cells)
        for pos in cells:
            if not self.is_inside(pos) or self.grid[pos.y, pos.x] != 0:
                raise ValueError(f"cannot lock {pos}: outside the board or already occupied")
        for pos in cells:
            self.grid[pos.y, pos.x] = value

    def full_rows(self) -> List[int]:
        return [int(y) for y in np.where(np.all(self.grid != 0, axis=1))[0]]

    def clear_rows(self, rows: Iterable[int]) -> int:
        """Remove `rows` and compact the surviving rows toward y = 0.

        Surviving rows keep their relative order. A surviving row without
        any cell does not take up a target row.
        """
        removed = set(rows)
        if not removed:
            return 0
        for y in removed:
            if not 0 <= y < self.height:
                raise ValueError(f"row {y} is outside the board")
        survivors = [
            y for y in range(self.height)
            if y not in removed and np.any(self.grid[y] != 0)
        ]
        compacted = np.zeros_like(self.grid)
        if survivors:
            compacted[: len(survivors)] = self.grid[survivors]
        self.grid = compacted
        return len(removed)

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
