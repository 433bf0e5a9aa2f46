from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ScoringRules:
    max_lines_per_clear: int = 4

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        if lines > self.max_lines_per_clear:
            raise ValueError(f"a single clear removes at most {self.max_lines_per_clear} rows, got {lines}")
        # Four rows are worth 2**4; fewer rows are worth 2**(n - 1).
        if lines == 4:
            return 2 ** lines
        return 2 ** (lines - 1)


@dataclass
class ScoreBoard:
    rules: ScoringRules = field(default_factory=ScoringRules)
    _total: int = field(default=0, init=False)

    @property
    def total(self) -> int:
        return self._total

    def on_lines_cleared(self, lines: int) -> int:
        points = self.rules.score_for_lines(lines)
        self._total += points
        return points

    def reset(self) -> None:
        self._total = 0
