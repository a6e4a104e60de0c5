"""Static definitions for elements, abilities and trait tables.

All reference data is represented as Pydantic models that validate the
JSON tables shipped in ``robo_rumble/data`` at load time.
"""

from .abilities import (
    ONCE_PER_BATTLE,
    AbilityDefinition,
    AbilityRarity,
    AbilityType,
    Targeting,
)
from .effects import STAT_NAMES, EffectPayload, StatName, StatusEffectTemplate
from .elements import (
    COMBAT_ELEMENTS,
    COMPANION_ELEMENTS,
    Element,
    ElementCombo,
    ElementCombos,
    ElementDefinition,
    StatModifier,
    TypeChartSettings,
)
from .traits import (
    AbilityCombination,
    AbilityCombinationTable,
    CompanionProfile,
    ElementBonusRule,
    TraitElementTable,
    TraitStatCategory,
    TraitStatTable,
)

__all__ = [
    # abilities
    "ONCE_PER_BATTLE",
    "AbilityDefinition",
    "AbilityRarity",
    "AbilityType",
    "Targeting",
    # effects
    "STAT_NAMES",
    "EffectPayload",
    "StatName",
    "StatusEffectTemplate",
    # elements
    "COMBAT_ELEMENTS",
    "COMPANION_ELEMENTS",
    "Element",
    "ElementCombo",
    "ElementCombos",
    "ElementDefinition",
    "StatModifier",
    "TypeChartSettings",
    # traits
    "AbilityCombination",
    "AbilityCombinationTable",
    "CompanionProfile",
    "ElementBonusRule",
    "TraitElementTable",
    "TraitStatCategory",
    "TraitStatTable",
]
