from __future__ import annotations

from typing import Optional

import pytest

from falling_blocks.game import FallingBlocksGame, GameConfig, RenderSink, TetrominoType


class SequenceRng:
    """Stands in for random.Random: hands out kinds in a fixed cycle."""

    def __init__(self, *kinds: TetrominoType) -> None:
        self.kinds = list(kinds) or [TetrominoType.O]
        self.calls = 0

    def choice(self, seq):
        kind = self.kinds[self.calls % len(self.kinds)]
        self.calls += 1
        assert kind in seq
        return kind


@pytest.fixture
def make_game():
    def _make(*kinds: TetrominoType, config: Optional[GameConfig] = None, sink: Optional[RenderSink] = None):
        return FallingBlocksGame(config or GameConfig(), rng=SequenceRng(*kinds), sink=sink)

    return _make
