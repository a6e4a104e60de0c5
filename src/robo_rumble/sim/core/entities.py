"""Entity models for the battle simulator.

``CombatUnit`` is the immutable output of the trait processor; everything
that changes during a battle lives in the separate ``UnitStatus`` record
keyed by unit id.  All data classes use Pydantic v2 BaseModel.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from robo_rumble.defs import EffectPayload, Element

_KIND_PREFIX = re.compile(r"^(roboto|robopet)-")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ``.5`` going up (not banker's rounding)."""
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

class Stats(BaseModel):
    """The six combat stats.  ``crit`` is a percentage chance."""

    model_config = ConfigDict(frozen=True)

    hp: int = Field(ge=0)
    attack: int = Field(ge=0)
    defense: int = Field(ge=0)
    speed: int = Field(ge=0)
    energy: int = Field(ge=0)
    crit: int = Field(ge=0)

    def scaled(self, factor: float) -> Stats:
        """Return a copy with every stat multiplied by *factor* (half-up)."""
        return Stats(**{k: round_half_up(v * factor) for k, v in self.as_dict().items()})

    def with_delta(self, delta: Mapping[str, int]) -> Stats:
        """Return a copy with *delta* added; results are floored at 0."""
        values = self.as_dict()
        for stat, amount in delta.items():
            values[stat] = max(0, values[stat] + amount)
        return Stats(**values)

    def as_dict(self) -> dict[str, int]:
        return self.model_dump()


# ---------------------------------------------------------------------------
# CombatUnit
# ---------------------------------------------------------------------------

class UnitKind(str, Enum):
    PRIMARY = "roboto"
    COMPANION = "robopet"


class CombatUnit(BaseModel):
    """A battle-ready unit derived from NFT traits.

    Immutable once created; the companion bonus produces a boosted copy
    via :meth:`with_stat_bonus` instead of mutating in place.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: UnitKind = UnitKind.PRIMARY
    element: Element
    stats: Stats
    abilities: tuple[str, ...] = ()
    """Unique ability ids, in unlock order."""

    strong_against: tuple[Element, ...] = ()
    weak_against: tuple[Element, ...] = ()
    image_url: str = ""
    traits: dict[str, str] = Field(default_factory=dict)
    has_companion_bonus: bool = False

    @field_validator("abilities")
    @classmethod
    def _dedupe_abilities(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))

    @property
    def base_id(self) -> str:
        """The id with its ``roboto-`` / ``robopet-`` prefix removed.

        A primary and a companion minted from the same token share a base id.
        """
        return _KIND_PREFIX.sub("", self.id)

    def with_stat_bonus(self, fraction: float) -> CombatUnit:
        """Return a copy with all stats boosted by *fraction* (``0.02`` = +2%)."""
        return self.model_copy(
            update={"stats": self.stats.scaled(1 + fraction), "has_companion_bonus": True}
        )


# ---------------------------------------------------------------------------
# Timed effects
# ---------------------------------------------------------------------------

class TimedEffect(BaseModel):
    """A named, element-tagged payload that expires after ``duration`` ticks."""

    id: str
    name: str
    element: Element = Element.NEUTRAL
    duration: int = Field(ge=0)
    effect: EffectPayload = Field(default_factory=EffectPayload)
    source_id: str | None = None

    @property
    def positive(self) -> bool:
        return self.effect.positive


class StatusEffect(TimedEffect):
    """Attached to a single unit."""


class FieldEffect(TimedEffect):
    """Attached to the battle as a whole."""


# ---------------------------------------------------------------------------
# UnitStatus
# ---------------------------------------------------------------------------

class UnitStatus(BaseModel):
    """Mutable per-battle record for one unit."""

    unit_id: str
    current_hp: int
    max_hp: int
    current_energy: int
    max_energy: int
    is_alive: bool = True
    status_effects: list[StatusEffect] = Field(default_factory=list)
    cooldowns: dict[str, int] = Field(default_factory=dict)
    """Ability id -> turns remaining.  Entries at zero are removed."""

    fresh_cooldowns: set[str] = Field(default_factory=set, exclude=True)
    """Cooldowns started during the current turn; skipped by the next tick."""

    @classmethod
    def for_unit(cls, unit: CombatUnit) -> UnitStatus:
        """Full HP and energy, no effects, no cooldowns."""
        return cls(
            unit_id=unit.id,
            current_hp=unit.stats.hp,
            max_hp=unit.stats.hp,
            current_energy=unit.stats.energy,
            max_energy=unit.stats.energy,
        )

    def take_damage(self, amount: int) -> int:
        """Remove up to *amount* HP, clamped at 0.

        Returns the HP actually lost.  Flips ``is_alive`` on reaching 0.
        """
        if amount <= 0 or not self.is_alive:
            return 0
        hp_lost = min(self.current_hp, amount)
        self.current_hp -= hp_lost
        if self.current_hp == 0:
            self.is_alive = False
        return hp_lost

    def heal(self, amount: int) -> int:
        """Restore up to *amount* HP, capped at ``max_hp``.  Returns HP restored."""
        if amount <= 0 or not self.is_alive:
            return 0
        restored = min(amount, self.max_hp - self.current_hp)
        self.current_hp += restored
        return restored
