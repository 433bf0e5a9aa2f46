from __future__ import annotations

import pytest

from falling_blocks.game import (
    AppState,
    Command,
    FallTimer,
    FrameInput,
    GameConfig,
    GridPos,
    Phase,
    RecordingSink,
    TetrominoType,
    is_legal,
    rotation_count,
)


def _lower(game, rows: int) -> None:
    for _ in range(rows):
        assert game.gravity_tick().gravity_applied


def test_spawn_places_piece_at_anchor(make_game):
    game = make_game(TetrominoType.O)
    assert game.phase is Phase.FALLING
    assert game.current_piece.origin == GridPos(3, 18)
    assert game.current_piece.rotation == 0
    assert set(game.active_cells()) == {GridPos(4, 18), GridPos(4, 19), GridPos(5, 18), GridPos(5, 19)}


def test_default_rng_spawns_every_kind_eventually():
    from falling_blocks.game import FallingBlocksGame

    game = FallingBlocksGame(GameConfig(random_seed=7))
    seen = set()
    for _ in range(200):
        game.spawn()
        seen.add(game.current_piece.kind)
    assert seen == set(TetrominoType)


def test_hard_drop_lowers_o_piece_to_floor(make_game):
    game = make_game(TetrominoType.O)
    result = game.apply(Command.HARD_DROP)

    assert result.command is Command.HARD_DROP
    assert not result.locked
    assert game.current_piece.origin == GridPos(3, 0)
    cells = game.active_cells()
    assert {c.y for c in cells} == {0, 1}
    assert is_legal(cells, game.locked_cells())
    assert game.locked_cells() == frozenset()


def test_hard_drop_is_idempotent(make_game):
    game = make_game(TetrominoType.T)
    game.apply(Command.HARD_DROP)
    first = game.current_piece.origin
    assert game.hard_drop_distance() == 0
    game.apply(Command.HARD_DROP)
    assert game.current_piece.origin == first


def test_gravity_moves_piece_down_one_row(make_game):
    game = make_game(TetrominoType.S)
    result = game.gravity_tick()
    assert result.gravity_applied
    assert game.current_piece.origin == GridPos(3, 17)


def test_blocked_gravity_locks_and_respawns(make_game):
    game = make_game(TetrominoType.O, TetrominoType.T)
    game.apply(Command.HARD_DROP)
    resting = set(game.active_cells())

    result = game.gravity_tick()

    assert result.locked
    assert not result.gravity_applied
    assert game.locked_cells() == frozenset(resting)
    assert game.current_piece.kind is TetrominoType.T
    assert game.current_piece.origin == GridPos(3, 18)
    assert game.phase is Phase.FALLING


def test_blocked_soft_drop_locks(make_game):
    game = make_game(TetrominoType.O)
    game.apply(Command.HARD_DROP)
    result = game.apply(Command.SOFT_DROP)
    assert result.locked
    assert result.command is Command.SOFT_DROP
    assert game.locked_cells() == frozenset({GridPos(4, 0), GridPos(4, 1), GridPos(5, 0), GridPos(5, 1)})


def test_soft_drop_moves_one_row(make_game):
    game = make_game(TetrominoType.O)
    result = game.apply(Command.SOFT_DROP)
    assert not result.locked
    assert game.current_piece.origin == GridPos(3, 17)


def test_horizontal_moves_stop_at_walls(make_game):
    game = make_game(TetrominoType.O)
    for _ in range(4):
        assert game.apply(Command.MOVE_LEFT).command is Command.MOVE_LEFT
    assert min(c.x for c in game.active_cells()) == 0
    result = game.apply(Command.MOVE_LEFT)
    assert result.command is None
    assert not result.locked
    assert game.current_piece.origin == GridPos(-1, 18)

    for _ in range(8):
        game.apply(Command.MOVE_RIGHT)
    assert max(c.x for c in game.active_cells()) == 9
    assert game.apply(Command.MOVE_RIGHT).command is None


def test_horizontal_move_blocked_by_locked_cell(make_game):
    game = make_game(TetrominoType.O)
    game.grid.lock([GridPos(3, 18)], 1)
    assert game.apply(Command.MOVE_LEFT).command is None
    assert game.current_piece.origin == GridPos(3, 18)


@pytest.mark.parametrize("kind", list(TetrominoType))
def test_rotating_through_all_states_restores_cells(make_game, kind):
    game = make_game(kind)
    _lower(game, 5)
    start_cells = game.active_cells()
    start_origin = game.current_piece.origin
    for _ in range(rotation_count(kind)):
        assert game.apply(Command.ROTATE).command is Command.ROTATE
    assert game.current_piece.rotation == 0
    assert game.current_piece.origin == start_origin
    assert game.active_cells() == start_cells


def test_rotation_rejected_when_new_shape_leaves_board(make_game):
    game = make_game(TetrominoType.I)
    # The upright I reaches two rows above the spawn row.
    result = game.apply(Command.ROTATE)
    assert result.command is None
    assert game.current_piece.rotation == 0


def test_rotation_rejected_on_collision(make_game):
    game = make_game(TetrominoType.I)
    _lower(game, 8)
    upright = {offset + game.current_piece.origin for offset in game.current_piece.rotated().shape()}
    game.grid.lock([sorted(upright, key=lambda p: p.y)[0]], 1)
    assert game.apply(Command.ROTATE).command is None
    assert game.current_piece.rotation == 0


def test_rotate_has_priority_over_other_commands(make_game):
    game = make_game(TetrominoType.T)
    _lower(game, 3)
    origin = game.current_piece.origin
    result = game.frame(FrameInput(commands=(Command.MOVE_LEFT, Command.HARD_DROP, Command.ROTATE), gravity=False))
    assert result.command is Command.ROTATE
    assert game.current_piece.rotation == 1
    assert game.current_piece.origin == origin


def test_drop_has_priority_over_horizontal(make_game):
    game = make_game(TetrominoType.T)
    result = game.frame(FrameInput(commands=(Command.MOVE_RIGHT, Command.SOFT_DROP), gravity=False))
    assert result.command is Command.SOFT_DROP
    assert game.current_piece.origin == GridPos(3, 17)


def test_gravity_runs_before_input_in_a_frame(make_game):
    game = make_game(TetrominoType.O)
    result = game.frame(FrameInput(commands=(Command.MOVE_LEFT,), gravity=True))
    assert result.gravity_applied
    assert result.command is Command.MOVE_LEFT
    assert game.current_piece.origin == GridPos(2, 17)


def test_gravity_lock_skips_input_in_same_frame(make_game):
    game = make_game(TetrominoType.O, TetrominoType.O)
    game.apply(Command.HARD_DROP)
    result = game.frame(FrameInput(commands=(Command.MOVE_LEFT,), gravity=True))
    assert result.locked
    assert result.command is None
    assert game.current_piece.origin == GridPos(3, 18)


def test_fall_timer_fires_at_most_once_per_tick():
    timer = FallTimer(1.0)
    assert not timer.tick(0.75)
    assert timer.tick(0.5)
    assert not timer.tick(0.5)
    assert timer.tick(0.25)
    assert timer.tick(5.0)
    assert not timer.tick(0.5)


def test_update_uses_fall_interval(make_game):
    game = make_game(TetrominoType.O)
    assert not game.update(0.5).gravity_applied
    assert game.update(0.5).gravity_applied
    assert game.current_piece.origin == GridPos(3, 17)


def test_single_line_clear_scores_one(make_game):
    game = make_game(TetrominoType.I, TetrominoType.O)
    game.grid.lock([GridPos(x, 0) for x in (0, 1, 2, 7, 8, 9)], 1)
    game.grid.lock([GridPos(0, 1)], 1)

    game.apply(Command.HARD_DROP)
    assert {c.y for c in game.active_cells()} == {0}
    result = game.gravity_tick()

    assert result.locked
    assert result.lines_cleared == 1
    assert game.score == 1
    assert game.locked_cells() == frozenset({GridPos(0, 0)})


def test_four_line_clear_scores_sixteen(make_game):
    game = make_game(TetrominoType.I, TetrominoType.O)
    for y in range(4):
        game.grid.lock([GridPos(x, y) for x in range(9)], 1)

    _lower(game, 8)
    assert game.apply(Command.ROTATE).command is Command.ROTATE
    for _ in range(4):
        game.apply(Command.MOVE_RIGHT)
    assert {c.x for c in game.active_cells()} == {9}
    game.apply(Command.HARD_DROP)
    result = game.apply(Command.SOFT_DROP)

    assert result.lines_cleared == 4
    assert game.score == 16
    assert game.lines_cleared_total == 4
    assert game.locked_cells() == frozenset()


def test_spawn_onto_locked_cells_is_game_over(make_game):
    game = make_game(TetrominoType.O)
    game.grid.lock(game.active_cells(), 1)

    assert not game.spawn(TetrominoType.O)
    assert game.game_over
    assert game.app_state is AppState.GAME_OVER
    # The colliding piece is still there.
    assert game.current_piece is not None

    before = game.active_cells()
    for command in (Command.MOVE_LEFT, Command.ROTATE, Command.HARD_DROP, Command.SOFT_DROP):
        assert game.apply(command).command is None
    assert not game.gravity_tick().locked
    assert game.active_cells() == before
    assert game.game_over


def test_restart_after_game_over(make_game):
    game = make_game(TetrominoType.O)
    game.grid.lock([GridPos(x, 0) for x in range(5)], 1)
    game.scoreboard.on_lines_cleared(2)
    game.grid.lock(game.active_cells(), 1)
    game.spawn()
    assert game.game_over

    assert game.restart()
    assert game.phase is Phase.FALLING
    assert game.app_state is AppState.GAMING
    assert game.score == 0
    assert game.locked_cells() == frozenset()
    assert game.current_piece.origin == GridPos(3, 18)
    assert game.apply(Command.MOVE_LEFT).command is Command.MOVE_LEFT


def test_restart_ignored_while_playing(make_game):
    game = make_game(TetrominoType.O)
    game.apply(Command.SOFT_DROP)
    assert not game.restart()
    assert game.current_piece.origin == GridPos(3, 17)


def test_game_over_after_stacking_to_the_top(make_game):
    game = make_game(TetrominoType.O)
    for _ in range(20):
        if game.game_over:
            break
        game.apply(Command.HARD_DROP)
        game.gravity_tick()
    assert game.game_over
    assert game.locked_cells()


def test_commands_without_active_piece_are_ignored(make_game):
    game = make_game(TetrominoType.O)
    game.current_piece = None
    for command in (Command.MOVE_LEFT, Command.ROTATE, Command.HARD_DROP, Command.SOFT_DROP):
        assert game.apply(command).command is None
    assert game.hard_drop_distance() == 0
    assert not game.gravity_tick().locked


def test_get_state_marks_active_cells_negative(make_game):
    game = make_game(TetrominoType.T)
    game.grid.lock([GridPos(0, 0)], int(TetrominoType.J))
    state = game.get_state()
    assert state.shape == (20, 10)
    assert state[0, 0] == int(TetrominoType.J)
    for c in game.active_cells():
        assert state[c.y, c.x] == -int(TetrominoType.T)


def test_sink_receives_cells_score_and_state(make_game):
    sink = RecordingSink()
    game = make_game(TetrominoType.I, TetrominoType.O, sink=sink)
    assert sink.active_cells() == frozenset(game.active_cells())
    assert sink.app_state is AppState.GAMING
    assert sink.scores == [0]

    game.grid.lock([GridPos(x, 0) for x in (0, 1, 2, 7, 8, 9)], 1)
    game.grid.lock([GridPos(0, 1)], 1)
    game.apply(Command.HARD_DROP)
    game.gravity_tick()

    assert sink.score == 1
    assert sink.locked_cells() == game.locked_cells() == frozenset({GridPos(0, 0)})
    assert sink.active_cells() == frozenset(game.active_cells())

    game.grid.lock(game.active_cells(), 1)
    game.spawn()
    assert sink.app_state is AppState.GAME_OVER
    game.restart()
    assert sink.app_states == [AppState.GAMING, AppState.GAME_OVER, AppState.GAMING]
    assert sink.scores[-1] == 0


def test_reset_with_seed_is_reproducible():
    from falling_blocks.game import FallingBlocksGame

    a = FallingBlocksGame()
    b = FallingBlocksGame()
    a.reset(seed=3)
    b.reset(seed=3)
    kinds_a, kinds_b = [], []
    for _ in range(10):
        a.spawn()
        b.spawn()
        kinds_a.append(a.current_piece.kind)
        kinds_b.append(b.current_piece.kind)
    assert kinds_a == kinds_b


@pytest.mark.parametrize(
    "kwargs",
    [dict(width=3), dict(height=3), dict(fall_interval=0), dict(spawn_x=7), dict(spawn_y=19)],
)
def test_invalid_config_raises(kwargs):
    with pytest.raises(ValueError):
        GameConfig(**kwargs)


def test_small_board_spawn_anchor():
    config = GameConfig(width=6, height=8)
    assert config.spawn_origin == GridPos(1, 6)
