from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .geometry import GridPos, TetrominoType


class AppState(Enum):
    GAMING = "gaming"
    GAME_OVER = "game_over"


KIND_COLORS: Dict[int, Tuple[int, int, int]] = {
    0: (30, 30, 36),
    int(TetrominoType.O): (240, 240, 0),
    int(TetrominoType.I): (0, 240, 240),
    int(TetrominoType.J): (0, 0, 240),
    int(TetrominoType.L): (240, 160, 0),
    int(TetrominoType.S): (0, 240, 0),
    int(TetrominoType.Z): (240, 0, 0),
    int(TetrominoType.T): (160, 0, 240),
}


def color_for_value(v: int) -> Tuple[int, int, int]:
    """Colour of a board value; negative values (the falling piece) use their kind's colour."""
    return KIND_COLORS.get(abs(int(v)), (200, 200, 200))


@dataclass(frozen=True)
class CellUpdate:
    pos: GridPos
    present: bool
    active: bool = False
    kind: int = 0


class RenderSink:
    """Receiver of everything a presentation layer needs to redraw.

    The engine calls these hooks synchronously at the end of the stage that
    changed something. Override the ones you need.
    """

    def on_cells(self, updates: Sequence[CellUpdate]) -> None:
        pass

    def on_app_state(self, state: AppState) -> None:
        pass

    def on_score(self, score: int) -> None:
        pass


@dataclass
class BoardPicture(RenderSink):
    """Current picture of the board, score and app state. Holds no history."""

    cells: Dict[GridPos, CellUpdate] = field(default_factory=dict)
    app_state: Optional[AppState] = None
    score: int = 0

    def on_cells(self, updates: Sequence[CellUpdate]) -> None:
        for update in updates:
            if update.present:
                self.cells[update.pos] = update
            else:
                self.cells.pop(update.pos, None)

    def on_app_state(self, state: AppState) -> None:
        self.app_state = state

    def on_score(self, score: int) -> None:
        self.score = score

    def active_cells(self) -> frozenset:
        return frozenset(pos for pos, u in self.cells.items() if u.active)

    def locked_cells(self) -> frozenset:
        return frozenset(pos for pos, u in self.cells.items() if not u.active)


@dataclass
class RecordingSink(BoardPicture):
    """BoardPicture that also keeps every app state and score it received.

    Meant for short-lived checks; the history is never trimmed.
    """

    app_states: List[AppState] = field(default_factory=list)
    scores: List[int] = field(default_factory=list)

    def on_app_state(self, state: AppState) -> None:
        super().on_app_state(state)
        self.app_states.append(state)

    def on_score(self, score: int) -> None:
        super().on_score(score)
        self.scores.append(score)
