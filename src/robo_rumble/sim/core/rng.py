"""Reproducible randomness for stat derivation and battles.

A battle owns one root :class:`GameRNG` and hands named forks to its
consumers (``"turn_order"``, ``"combat"``, ``"ai"``).  Each fork is its own
stream, so drawing an extra value in the AI never moves a crit roll.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def _seed_from(text: str) -> int:
    return int.from_bytes(hashlib.sha256(text.encode()).digest()[:8], "big")


class GameRNG:
    """Seeded wrapper around :class:`random.Random`.

    Parameters
    ----------
    seed:
        Integer seed; two instances with the same seed yield the same
        sequence of draws.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @classmethod
    def from_text(cls, text: str) -> GameRNG:
        """Seed from a SHA-256 digest of *text*.

        NFT stat jitter uses this so the same traits always give the same
        numbers, whatever ``PYTHONHASHSEED`` is.
        """
        return cls(_seed_from(text))

    @property
    def seed(self) -> int:
        return self._seed

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------

    def random_int(self, low: int, high: int) -> int:
        """Integer in the closed range ``[low, high]``."""
        return self._rng.randint(low, high)

    def random_float(self) -> float:
        """Float in ``[0.0, 1.0)``."""
        return self._rng.random()

    def uniform(self, low: float, high: float) -> float:
        """Float between *low* and *high*, both ends included."""
        return self._rng.uniform(low, high)

    def percent(self) -> float:
        """Roll in ``[0, 100)``; compared against crit and accuracy chances."""
        return self._rng.random() * 100

    def random_choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def shuffle(self, lst: list[T]) -> None:
        """Shuffle *lst* in place."""
        self._rng.shuffle(lst)

    # ------------------------------------------------------------------
    # Sub-streams
    # ------------------------------------------------------------------

    def fork(self, name: str) -> GameRNG:
        """Child stream keyed on this RNG's seed and *name*.

        The child depends only on the parent's seed, not on how many values
        the parent has already produced.
        """
        return GameRNG(_seed_from(f"{self._seed}:{name}"))

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
