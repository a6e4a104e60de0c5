"""Core battle mechanics.

Re-exports the primary functions from each mechanics module for convenience.

Usage::

    from robo_rumble.sim.mechanics import (
        basic_attack_damage, ability_damage, deal_damage,
        spend_energy, regen_energy,
        attach_status, cleanse, effective_stats, tick_status_effects,
        start_cooldown, tick_cooldowns,
        compute_turn_order, resolve_targets,
    )
"""

# -- damage ------------------------------------------------------------------
from .damage import (
    ability_damage,
    basic_attack_damage,
    classify_hit,
    damage_tier,
    deal_damage,
    effectiveness_text,
    knock_out,
)

# -- energy ------------------------------------------------------------------
from .energy import can_afford, regen_energy, spend_energy

# -- cooldowns ---------------------------------------------------------------
from .cooldowns import (
    ONCE_PER_BATTLE_USED,
    is_consumed,
    remaining_cooldown,
    start_cooldown,
    tick_cooldowns,
)

# -- status effects ----------------------------------------------------------
from .status_effects import (
    add_field_effect,
    attach_status,
    cleanse,
    effective_stats,
    has_effect,
    is_debuff_immune,
    status_from_template,
    tick_field_effects,
    tick_status_effects,
)

# -- turn order / targeting / timing -----------------------------------------
from .targeting import resolve_targets
from .timing import TIMING_BONUS, TimingGrade, defense_multiplier, timing_bonus
from .turn_order import compute_turn_order

__all__ = [
    # damage
    "basic_attack_damage",
    "ability_damage",
    "effectiveness_text",
    "classify_hit",
    "damage_tier",
    "deal_damage",
    "knock_out",
    # energy
    "can_afford",
    "spend_energy",
    "regen_energy",
    # cooldowns
    "ONCE_PER_BATTLE_USED",
    "start_cooldown",
    "tick_cooldowns",
    "remaining_cooldown",
    "is_consumed",
    # status effects
    "status_from_template",
    "attach_status",
    "is_debuff_immune",
    "has_effect",
    "cleanse",
    "effective_stats",
    "tick_status_effects",
    "add_field_effect",
    "tick_field_effects",
    # turn order / targeting / timing
    "compute_turn_order",
    "resolve_targets",
    "TIMING_BONUS",
    "TimingGrade",
    "timing_bonus",
    "defense_multiplier",
]
