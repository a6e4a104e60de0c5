"""Element definitions, stat modifiers and the type chart settings."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .effects import StatName, StatusEffectTemplate


class Element(str, Enum):
    """Damage types.  The first four form the combat cycle."""

    SURGE = "SURGE"
    CODE = "CODE"
    METAL = "METAL"
    GLITCH = "GLITCH"
    NEUTRAL = "NEUTRAL"
    BOND = "BOND"
    """Companion-only."""
    WILD = "WILD"
    """Companion-only."""


# Enumeration order matters: element scoring ties go to the earliest entry.
COMBAT_ELEMENTS: tuple[Element, ...] = (
    Element.SURGE,
    Element.CODE,
    Element.METAL,
    Element.GLITCH,
)

COMPANION_ELEMENTS: tuple[Element, ...] = (Element.BOND, Element.WILD)


class StatModifier(BaseModel):
    """How an element shifts one base stat.

    Exactly one of ``multiplier`` / ``range`` may be set; ``flat`` is added
    afterwards and may be combined with either.
    """

    multiplier: float | None = Field(default=None, gt=0)
    range: tuple[float, float] | None = None
    """``(low, high)`` multiplier drawn uniformly per derivation."""

    flat: int = 0

    @model_validator(mode="after")
    def _check(self) -> StatModifier:
        if self.multiplier is not None and self.range is not None:
            raise ValueError("a stat modifier cannot have both multiplier and range")
        if self.range is not None:
            low, high = self.range
            if low <= 0 or high < low:
                raise ValueError(f"invalid multiplier range {self.range!r}")
        return self


class ElementDefinition(BaseModel):
    """Static description of a single element."""

    id: Element
    name: str
    description: str = ""
    color: str = "#FFFFFF"
    symbol: str = "?"
    strong_against: list[Element] = Field(default_factory=list)
    weak_against: list[Element] = Field(default_factory=list)
    stat_modifiers: dict[StatName, StatModifier] = Field(default_factory=dict)
    status_effects: dict[str, StatusEffectTemplate] = Field(default_factory=dict)
    """Secondary statuses abilities of this element can inflict, by id."""


class TypeChartSettings(BaseModel):
    strong_multiplier: float = Field(default=1.5, gt=1.0)
    weak_multiplier: float = Field(default=0.67, gt=0.0, lt=1.0)


class ElementCombo(BaseModel):
    """Declarative team passive unlocked by element composition."""

    name: str
    effect: str


class ElementCombos(BaseModel):
    dual: dict[Element, ElementCombo] = Field(default_factory=dict)
    trinity: ElementCombo | None = None
