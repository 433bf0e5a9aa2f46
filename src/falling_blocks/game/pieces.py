from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from .geometry import GridPos, PieceShape, TetrominoType, rotation_count, shape_for


@dataclass(frozen=True)
class Piece:
    kind: TetrominoType
    rotation: int = 0
    origin: GridPos = GridPos(0, 0)

    def shape(self) -> PieceShape:
        return shape_for(self.kind, self.rotation)

    def cells(self) -> Tuple[GridPos, ...]:
        return tuple(offset + self.origin for offset in self.shape())

    def moved(self, offset: GridPos) -> "Piece":
        return replace(self, origin=self.origin + offset)

    def rotated(self) -> "Piece":
        # Shapes come from the fixed table, so cycling never accumulates drift.
        return replace(self, rotation=(self.rotation + 1) % rotation_count(self.kind))
