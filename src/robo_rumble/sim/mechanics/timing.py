"""Reflex-minigame helpers.

The presentation layer runs the timing minigames; the engine only sees
the resulting multipliers.  These helpers map minigame outcomes onto the
multipliers the engine expects.
"""

from __future__ import annotations

from enum import Enum


class TimingGrade(str, Enum):
    PERFECT = "PERFECT"
    GOOD = "GOOD"
    NORMAL = "NORMAL"
    WEAK = "WEAK"


TIMING_BONUS: dict[TimingGrade, float] = {
    TimingGrade.PERFECT: 2.0,
    TimingGrade.GOOD: 1.5,
    TimingGrade.NORMAL: 1.0,
    TimingGrade.WEAK: 0.5,
}

# (minimum score, damage multiplier), checked top to bottom.
_DEFENSE_STEPS: tuple[tuple[float, float], ...] = (
    (1.5, 0.5),
    (1.25, 0.75),
    (1.0, 1.0),
)
_FAILED_DEFENSE_MULTIPLIER = 1.2


def timing_bonus(grade: TimingGrade | str) -> float:
    """Return the attack multiplier for a timing grade."""
    return TIMING_BONUS[TimingGrade(grade)]


def defense_multiplier(score: float) -> float:
    """Map a defense minigame score to the multiplier applied to incoming damage.

    A good block halves the damage; a missed block makes it hurt more.
    """
    for threshold, multiplier in _DEFENSE_STEPS:
        if score >= threshold:
            return multiplier
    return _FAILED_DEFENSE_MULTIPLIER
