"""Game module for Falling Blocks.

Exports the engine core and supporting classes:
- GridPos, TetrominoType, SHAPE_CATALOG: geometry and the shape table
- GameGrid: locked cells, line detection and row compaction
- Piece: the falling piece (kind, rotation, origin)
- is_legal: bounds and collision check for a candidate position
- ScoringRules, ScoreBoard: line-clear scoring
- RenderSink, BoardPicture, RecordingSink, CellUpdate, AppState: output to a presentation layer
- FallingBlocksGame: the per-frame pipeline and state machine
"""

from .geometry import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    SHAPE_CATALOG,
    GridPos,
    PieceShape,
    TetrominoType,
    rotation_count,
    shape_for,
)
from .grid import GameGrid
from .legality import is_legal
from .pieces import Piece
from .rules import ScoreBoard, ScoringRules
from .sink import KIND_COLORS, AppState, BoardPicture, CellUpdate, RecordingSink, RenderSink, color_for_value
from .core import (
    PieceSource,
    COMMAND_PRIORITY,
    Command,
    FallingBlocksGame,
    FallTimer,
    FrameInput,
    FrameResult,
    GameConfig,
    Phase,
)

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "SHAPE_CATALOG",
    "GridPos",
    "PieceShape",
    "TetrominoType",
    "rotation_count",
    "shape_for",
    "GameGrid",
    "is_legal",
    "Piece",
    "ScoreBoard",
    "ScoringRules",
    "AppState",
    "CellUpdate",
    "KIND_COLORS",
    "BoardPicture",
    "RecordingSink",
    "color_for_value",
    "RenderSink",
    "PieceSource",
    "COMMAND_PRIORITY",
    "Command",
    "FallingBlocksGame",
    "FallTimer",
    "FrameInput",
    "FrameResult",
    "GameConfig",
    "Phase",
]
