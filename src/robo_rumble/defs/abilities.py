"""Ability definitions -- static reference data resolved by the battle engine."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .effects import EffectPayload
from .elements import Element

ONCE_PER_BATTLE = "once_per_battle"


class AbilityType(str, Enum):
    """Resolution branch taken by the engine."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    FIELD = "field"
    UTILITY = "utility"


class Targeting(str, Enum):
    """Who an ability lands on, relative to the user."""

    SINGLE = "single"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"
    SELF = "self"
    RANDOM = "random"


class AbilityRarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return _RARITY_RANK[self]


_RARITY_RANK = {
    AbilityRarity.COMMON: 0,
    AbilityRarity.RARE: 1,
    AbilityRarity.EPIC: 2,
    AbilityRarity.LEGENDARY: 3,
}


class AbilityDefinition(BaseModel):
    """Complete definition of one ability."""

    id: str
    name: str
    element: Element
    type: AbilityType
    targeting: Targeting
    rarity: AbilityRarity = AbilityRarity.COMMON

    power: int | str = 0
    """Flat power, or a ``"min-max"`` string rolled on every use."""

    accuracy: int | None = Field(default=None, ge=0, le=100)
    """Hit chance in percent.  ``None`` uses the engine default."""
    energy_cost: int = Field(default=0, ge=0)
    cooldown: int | Literal["once_per_battle"] = 0
    """Turns before reuse, or ``"once_per_battle"``."""

    duration: int | None = Field(default=None, ge=1)
    """Turns a buff/debuff/field lasts.  ``None`` uses the engine default."""

    effects: list[str] = Field(default_factory=list)
    """Secondary status ids applied on hit, or utility tags (``"cleanse"``)."""

    payload: EffectPayload = Field(default_factory=EffectPayload)
    """What a buff, debuff or field created by this ability does."""

    description: str = ""

    @field_validator("power")
    @classmethod
    def _check_power(cls, value: int | str) -> int | str:
        if isinstance(value, int):
            if value < 0:
                raise ValueError("power must be >= 0")
            return value
        _parse_range(value)
        return value

    @field_validator("cooldown")
    @classmethod
    def _check_cooldown(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 0:
            raise ValueError("cooldown must be >= 0")
        return value

    @property
    def is_once_per_battle(self) -> bool:
        return self.cooldown == ONCE_PER_BATTLE

    @property
    def power_range(self) -> tuple[int, int]:
        """``(low, high)`` bounds of :attr:`power`; equal for flat power."""
        if isinstance(self.power, int):
            return self.power, self.power
        return _parse_range(self.power)


def _parse_range(text: str) -> tuple[int, int]:
    parts = text.split("-")
    if len(parts) != 2:
        raise ValueError(f"power range must look like 'min-max', got {text!r}")
    try:
        low, high = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"power range must be integers, got {text!r}") from None
    if low < 0 or high < low:
        raise ValueError(f"invalid power range {text!r}")
    return low, high
