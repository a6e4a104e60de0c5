"""Engine balancing constants.

Static tables (elements, abilities, trait mappings) live in the JSON data
files; everything here is a scalar knob of the resolution rules.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    """Tunable constants of the battle engine and trait processor."""

    model_config = ConfigDict(frozen=True)

    energy_regen: int = Field(default=20, ge=0)
    """Energy restored to the acting unit at the end of its turn."""

    companion_bonus: float = Field(default=0.02, ge=0.0)
    """Multiplicative boost for a primary/companion pair in the same roster."""

    turn_jitter: float = Field(default=10.0, ge=0.0)
    """Upper bound of the uniform jitter added to speed for turn order."""

    basic_attack_floor: int = Field(default=5, ge=0)
    basic_crit_multiplier: float = Field(default=2.0, ge=1.0)
    ability_crit_multiplier: float = Field(default=1.5, ge=1.0)
    attack_baseline: int = Field(default=50, gt=0)
    """Attack value at which ability power is taken at face value."""

    default_accuracy: int = Field(default=90, ge=0, le=100)
    default_status_duration: int = Field(default=3, ge=1)
    default_field_duration: int = Field(default=5, ge=1)
    max_abilities: int = Field(default=5, ge=1)

    strict: bool = False
    """Raise on programmer errors instead of logging and ignoring them."""


DEFAULT_CONFIG = EngineConfig()
