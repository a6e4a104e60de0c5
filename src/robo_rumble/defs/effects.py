"""Effect payloads shared by status effects, field effects and abilities."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

StatName = Literal["hp", "attack", "defense", "speed", "energy", "crit"]

STAT_NAMES: tuple[str, ...] = ("hp", "attack", "defense", "speed", "energy", "crit")


class EffectPayload(BaseModel):
    """What a timed effect actually does while it is active.

    A single payload may combine several behaviours (e.g. a debuff that
    both deals damage every turn and lowers defense).
    """

    damage_per_turn: int = Field(default=0, ge=0)
    """HP lost by the carrier each time effects tick."""

    skip_turn_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    """Probability in ``[0, 1]`` that the carrier is flagged as paralyzed."""

    debuff_immunity: bool = False
    encrypted: bool = False
    """Either flag blocks new debuffs on the carrier."""

    stat_delta: dict[StatName, int] = Field(default_factory=dict)
    """Additive stat changes while the effect is active."""

    random_stat_changes: bool = False
    """Chaos marker used by field effects."""

    positive: bool = False
    """Positive effects survive a cleanse."""

    @property
    def blocks_debuffs(self) -> bool:
        return self.debuff_immunity or self.encrypted


class StatusEffectTemplate(EffectPayload):
    """An element-specific status (e.g. ``shocked``) applied on hit."""

    name: str
    duration: int = Field(default=2, ge=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("status effect name must not be blank")
        return value
