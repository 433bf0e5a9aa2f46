from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Iterable, Optional, Protocol, Sequence, Tuple

import numpy as np

from .geometry import DOWN, LEFT, RIGHT, GridPos, TetrominoType
from .grid import GameGrid
from .pieces import Piece
from .rules import ScoreBoard, ScoringRules
from .sink import AppState, CellUpdate, RenderSink


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    HARD_DROP = 3
    ROTATE = 4
    RESTART = 5


# When several commands arrive in the same frame only the first one found here runs.
COMMAND_PRIORITY: Tuple[Command, ...] = (
    Command.ROTATE,
    Command.SOFT_DROP,
    Command.HARD_DROP,
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
)


class PieceSource(Protocol):
    """Anything that picks a kind the way random.Random.choice does."""

    def choice(self, seq: Sequence[TetrominoType]) -> TetrominoType: ...


class Phase(Enum):
    SPAWNING = "spawning"
    FALLING = "falling"
    LOCKING = "locking"
    LINE_CLEARING = "line_clearing"
    GAME_OVER = "game_over"
    RESTARTING = "restarting"


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    fall_interval: float = 0.8
    random_seed: Optional[int] = None
    spawn_x: Optional[int] = None
    spawn_y: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width < 4 or self.height < 4:
            raise ValueError(f"board must be at least 4x4, got {self.width}x{self.height}")
        if self.fall_interval <= 0:
            raise ValueError(f"fall_interval must be positive, got {self.fall_interval}")
        if self.spawn_x is None:
            self.spawn_x = self.width // 2 - 2
        if self.spawn_y is None:
            self.spawn_y = self.height - 2
        # Every spawn shape spans 4 columns and 2 rows from the anchor.
        if not 0 <= self.spawn_x <= self.width - 4 or not 0 <= self.spawn_y <= self.height - 2:
            raise ValueError(f"spawn anchor ({self.spawn_x}, {self.spawn_y}) does not fit the board")

    @property
    def spawn_origin(self) -> GridPos:
        return GridPos(self.spawn_x, self.spawn_y)


class FallTimer:
    """Repeating gravity timer. Fires at most once per tick."""

    def __init__(self, interval: float) -> None:
        self.interval = float(interval)
        self.elapsed = 0.0

    def tick(self, dt: float) -> bool:
        self.elapsed += dt
        if self.elapsed < self.interval:
            return False
        self.elapsed %= self.interval
        return True

    def reset(self) -> None:
        self.elapsed = 0.0


@dataclass(frozen=True)
class FrameInput:
    """Stimuli for one frame.

    gravity=None lets the fall timer decide from `dt`; True/False forces it.
    """

    dt: float = 0.0
    commands: Tuple[Command, ...] = ()
    gravity: Optional[bool] = None


@dataclass
class FrameResult:
    gravity_applied: bool = False
    command: Optional[Command] = None
    locked: bool = False
    lines_cleared: int = 0
    game_over: bool = False
    restarted: bool = False


class FallingBlocksGame:
    """Single owner of the board, the falling piece, the score and the fall timer.

    Every stimulus goes through `frame`, which runs the stages in a fixed
    order: restart, gravity, input, lock, line clear, respawn. The render
    sink is notified once at the end of each frame with whatever changed.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[PieceSource] = None,
        sink: Optional[RenderSink] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.sink = sink or RenderSink()
        self.grid = GameGrid(self.config.width, self.config.height)
        self.scoreboard = ScoreBoard(rules or ScoringRules())
        self.fall_timer = FallTimer(self.config.fall_interval)
        self.current_piece: Optional[Piece] = None
        self.phase = Phase.SPAWNING
        self.lines_cleared_total = 0
        self._picture: Dict[GridPos, Tuple[bool, int]] = {}
        self._published_state: Optional[AppState] = None
        self._published_score: Optional[int] = None
        self.reset()

    # ------------------------------------------------------------------ state

    @property
    def score(self) -> int:
        return self.scoreboard.total

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def app_state(self) -> AppState:
        return AppState.GAME_OVER if self.game_over else AppState.GAMING

    def active_cells(self) -> Tuple[GridPos, ...]:
        if self.current_piece is None:
            return ()
        return self.current_piece.cells()

    def locked_cells(self) -> frozenset:
        return self.grid.locked_cells()

    def get_state(self) -> np.ndarray:
        # Locked cells hold their kind value; the falling piece is overlaid as negative values.
        state = self.grid.clone_state()
        if self.current_piece is not None:
            for pos in self.current_piece.cells():
                if self.grid.is_inside(pos):
                    state[pos.y, pos.x] = -int(self.current_piece.kind)
        return state

    def hard_drop_distance(self) -> int:
        if self.current_piece is None:
            return 0
        distance = 0
        while self.grid.can_place(self.current_piece.moved(GridPos(0, -(distance + 1))).cells()):
            distance += 1
        return distance

    # -------------------------------------------------------------- lifecycle

    def reset(self, seed: Optional[int] = None) -> None:
        """Start a new session regardless of the current phase."""
        if seed is not None:
            self.rng = random.Random(seed)
        self._clear_session()
        self._spawn()
        self._publish()

    def restart(self) -> bool:
        """Start over after a game over. Ignored in any other phase."""
        result = self.frame(FrameInput(commands=(Command.RESTART,), gravity=False))
        return result.restarted

    def spawn(self, kind: Optional[TetrominoType] = None) -> bool:
        """Replace the falling piece with a fresh one. Returns False if that ends the game."""
        if self.game_over:
            return False
        self._spawn(kind)
        self._publish()
        return not self.game_over

    # ---------------------------------------------------------------- stimuli

    def gravity_tick(self) -> FrameResult:
        return self.frame(FrameInput(gravity=True))

    def apply(self, command: Command) -> FrameResult:
        return self.frame(FrameInput(commands=(command,), gravity=False))

    def update(self, dt: float, commands: Iterable[Command] = ()) -> FrameResult:
        return self.frame(FrameInput(dt=dt, commands=tuple(commands)))

    def frame(self, frame_input: Optional[FrameInput] = None) -> FrameResult:
        frame_input = frame_input or FrameInput()
        commands = set(frame_input.commands)
        result = FrameResult()

        if self.game_over:
            if Command.RESTART in commands:
                self.phase = Phase.RESTARTING
                self._clear_session()
                self._spawn()
                result.restarted = True
            result.game_over = self.game_over
            self._publish()
            return result

        if frame_input.gravity is None:
            gravity_due = self.fall_timer.tick(frame_input.dt)
        else:
            gravity_due = frame_input.gravity

        lock_requested = False
        if gravity_due and self.current_piece is not None:
            result.gravity_applied = self._try_move(DOWN)
            lock_requested = not result.gravity_applied

        if not lock_requested:
            command = self._select_command(commands)
            if command is not None:
                accepted, lock_requested = self._execute(command)
                if accepted:
                    result.command = command

        if lock_requested:
            self._lock_piece()
            result.locked = True
            result.lines_cleared = self._clear_lines()
            self._spawn()

        result.game_over = self.game_over
        self._publish()
        return result

    # ----------------------------------------------------------------- stages

    @staticmethod
    def _select_command(commands: Iterable[Command]) -> Optional[Command]:
        present = set(commands)
        for command in COMMAND_PRIORITY:
            if command in present:
                return command
        return None

    def _execute(self, command: Command) -> Tuple[bool, bool]:
        """Run one player command. Returns (accepted, lock_requested)."""
        if self.current_piece is None:
            return False, False
        if command == Command.MOVE_LEFT:
            return self._try_move(LEFT), False
        if command == Command.MOVE_RIGHT:
            return self._try_move(RIGHT), False
        if command == Command.SOFT_DROP:
            # A blocked soft drop behaves like a blocked gravity tick.
            moved = self._try_move(DOWN)
            return True, not moved
        if command == Command.HARD_DROP:
            distance = self.hard_drop_distance()
            if distance:
                self.current_piece = self.current_piece.moved(GridPos(0, -distance))
            return True, False
        if command == Command.ROTATE:
            candidate = self.current_piece.rotated()
            if not self.grid.can_place(candidate.cells()):
                return False, False
            self.current_piece = candidate
            return True, False
        return False, False

    def _try_move(self, offset: GridPos) -> bool:
        assert self.current_piece is not None
        candidate = self.current_piece.moved(offset)
        if not self.grid.can_place(candidate.cells()):
            return False
        self.current_piece = candidate
        return True

    def _lock_piece(self) -> None:
        assert self.current_piece is not None
        self.phase = Phase.LOCKING
        self.grid.lock(self.current_piece.cells(), int(self.current_piece.kind))
        self.current_piece = None

    def _clear_lines(self) -> int:
        self.phase = Phase.LINE_CLEARING
        rows = self.grid.full_rows()
        if not rows:
            return 0
        lines = self.grid.clear_rows(rows)
        self.scoreboard.on_lines_cleared(lines)
        self.lines_cleared_total += lines
        return lines

    def _spawn(self, kind: Optional[TetrominoType] = None) -> None:
        self.phase = Phase.SPAWNING
        if kind is None:
            kind = self.rng.choice(list(TetrominoType))
        self.current_piece = Piece(kind=TetrominoType(kind), rotation=0, origin=self.config.spawn_origin)
        # Overlap with locked cells ends the game; the piece stays visible.
        if any(pos in self.grid for pos in self.current_piece.cells()):
            self.phase = Phase.GAME_OVER
        else:
            self.phase = Phase.FALLING

    def _clear_session(self) -> None:
        self.grid.reset()
        self.scoreboard.reset()
        self.fall_timer.reset()
        self.current_piece = None
        self.lines_cleared_total = 0

    # -------------------------------------------------------------- rendering

    def _current_picture(self) -> Dict[GridPos, Tuple[bool, int]]:
        picture: Dict[GridPos, Tuple[bool, int]] = {}
        state = self.get_state()
        ys, xs = np.nonzero(state)
        for y, x in zip(ys, xs):
            value = int(state[y, x])
            picture[GridPos(int(x), int(y))] = (value < 0, abs(value))
        return picture

    def _publish(self) -> None:
        picture = self._current_picture()
        updates = []
        for pos in sorted(set(self._picture) | set(picture), key=lambda p: (p.y, p.x)):
            before = self._picture.get(pos)
            after = picture.get(pos)
            if before == after:
                continue
            if after is None:
                updates.append(CellUpdate(pos, present=False))
            else:
                updates.append(CellUpdate(pos, present=True, active=after[0], kind=after[1]))
        self._picture = picture
        if updates:
            self.sink.on_cells(updates)
        if self.app_state != self._published_state:
            self._published_state = self.app_state
            self.sink.on_app_state(self.app_state)
        if self.score != self._published_score:
            self._published_score = self.score
            self.sink.on_score(self.score)
