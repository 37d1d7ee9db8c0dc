from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    hard_drop_points: int = 2
    lines_per_level: int = 10
    # Gravity interval in ms for level 1, 2, ...; the last entry covers every higher level
    gravity_intervals_ms: tuple[int, ...] = (800, 720, 630, 550, 470, 380, 300, 220, 150, 100)

    def score_for_lines(self, lines: int, level: int) -> int:
        if 1 <= lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1] * level
        return 0

    def level_for_lines(self, total_lines: int) -> int:
        return total_lines // self.lines_per_level + 1

    def hard_drop_score(self, distance: int) -> int:
        return max(0, distance) * self.hard_drop_points

    def gravity_interval(self, level: int) -> int:
        index = min(max(level, 1) - 1, len(self.gravity_intervals_ms) - 1)
        return self.gravity_intervals_ms[index]
