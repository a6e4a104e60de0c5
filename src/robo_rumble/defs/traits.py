"""Trait tables: trait -> element weights, trait -> stat deltas, unlock rules."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field

from .effects import StatName
from .elements import Element


class _RequirementRule(BaseModel):
    requirements: dict[str, str]
    """Trait category -> exact value.  Every entry must match."""

    def matches(self, traits: Mapping[str, str]) -> bool:
        return all(traits.get(k) == v for k, v in self.requirements.items())


class AbilityCombination(_RequirementRule):
    id: str
    """Ability unlocked when the requirements match."""


class ElementBonusRule(_RequirementRule):
    bonus: dict[Element, float]


class TraitElementTable(BaseModel):
    very_important_categories: list[str] = Field(default_factory=list)
    important_categories: list[str] = Field(default_factory=list)
    very_important_multiplier: float = 1.5
    neutral_threshold: float = 1.0
    trait_mappings: dict[str, dict[str, dict[Element, float]]] = Field(default_factory=dict)
    combination_bonuses: list[ElementBonusRule] = Field(default_factory=list)
    keyword_buckets: dict[Element, list[str]] = Field(default_factory=dict)


class TraitStatCategory(BaseModel):
    category: str
    aliases: list[str] = Field(default_factory=list)
    """Alternative category names, checked in order after ``category``."""

    default: dict[StatName, int] | None = None
    """Row applied to any present value that has no row of its own."""

    multi_value: bool = False
    """Values may list several comma-separated entries."""

    values: dict[str, dict[StatName, int]] = Field(default_factory=dict)


class TraitStatTable(BaseModel):
    base_stats: dict[str, dict[StatName, int]]
    """Keyed by unit kind (``"roboto"`` / ``"robopet"``)."""

    minimums: dict[StatName, int]
    categories: list[TraitStatCategory] = Field(default_factory=list)


class AbilityCombinationTable(BaseModel):
    basic: dict[Element, str]
    real: list[AbilityCombination] = Field(default_factory=list)
    idealized: list[AbilityCombination] = Field(default_factory=list)


class CompanionProfile(BaseModel):
    element: Element = Element.BOND
    abilities: list[str] = Field(default_factory=lambda: ["companion_shield"])
    power_tier: int = Field(default=1, ge=1)
