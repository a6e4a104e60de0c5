"""Damage calculation and application.

Basic attack pipeline:
    max(floor, attack*2 - defense) -> type multiplier -> timing bonus
    -> defense bonus (each step floored) -> min 1 -> crit x2

Ability pipeline:
    power * attack/baseline * type multiplier * defense mitigation
    -> crit x1.5 -> round -> min 1

Application clamps HP at 0; a knockout is logged and triggers the
battle-end check.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Literal

from robo_rumble.sim.core.entities import round_half_up
from robo_rumble.sim.core.game_state import EventType

if TYPE_CHECKING:
    from robo_rumble.defs import Element
    from robo_rumble.sim.core.game_state import BattleEvent, BattleState

HitClass = Literal["miss", "critical", "effective", "weak", "normal"]
DamageTier = Literal["miss", "weak", "normal", "strong", "devastating"]

# Upper bounds (exclusive) for the weak / normal / strong tiers.
_TIER_THRESHOLDS: tuple[tuple[int, DamageTier], ...] = (
    (30, "weak"),
    (60, "normal"),
    (100, "strong"),
)


def basic_attack_damage(
    attack: int,
    defense: int,
    multiplier: float,
    timing_bonus: float = 1.0,
    defense_bonus: float = 1.0,
    floor: int = 5,
) -> int:
    """Damage of a basic attack before the crit roll.

    Every multiplication is floored, and the result is never below 1.
    """
    damage = max(floor, attack * 2 - defense)
    damage = math.floor(damage * multiplier)
    damage = math.floor(damage * timing_bonus)
    damage = math.floor(damage * defense_bonus)
    return max(1, damage)


def ability_damage(
    power: int,
    attack: int,
    defense: int,
    multiplier: float,
    critical: bool = False,
    baseline: int = 50,
    crit_multiplier: float = 1.5,
) -> int:
    """Damage of one hit of a damaging ability.

    Defense mitigates at most half of the damage:
    ``1 - defense / (defense + 100) * 0.5``.
    """
    mitigation = 1 - defense / (defense + 100) * 0.5
    damage = power * (attack / baseline) * multiplier * mitigation
    if critical:
        damage *= crit_multiplier
    return max(1, round_half_up(damage))


def effectiveness_text(multiplier: float) -> str:
    if multiplier > 1:
        return "It's super effective!"
    if multiplier < 1:
        return "It's not very effective..."
    return ""


def classify_hit(damage: int, critical: bool, multiplier: float) -> HitClass:
    """Classify a hit for presentation (sound and animation choice)."""
    if damage <= 0:
        return "miss"
    if critical:
        return "critical"
    if multiplier > 1:
        return "effective"
    if multiplier < 1:
        return "weak"
    return "normal"


def damage_tier(damage: int) -> DamageTier:
    """Bucket a damage number into the tiers used by hit effects."""
    if damage <= 0:
        return "miss"
    for upper, tier in _TIER_THRESHOLDS:
        if damage < upper:
            return tier
    return "devastating"


def deal_damage(
    battle: BattleState,
    target_id: str,
    amount: int,
    *,
    source_id: str | None = None,
    element: Element | None = None,
    description: str | None = None,
) -> int:
    """Apply *amount* damage to a unit and log it.

    Logs a ``damage`` event (value is *amount*, plus the HP lost and the
    HP remaining), then a ``ko`` event and the battle-end check if the hit
    was lethal.

    Returns
    -------
    int
        HP actually lost (``0`` if the target was already knocked out).
    """
    status = battle.get_status(target_id)
    if not status.is_alive:
        return 0

    hp_lost = status.take_damage(amount)
    target = battle.get_unit(target_id)
    battle.log(
        EventType.DAMAGE,
        description or f"{target.name} takes {hp_lost} damage!",
        source=source_id,
        target=target_id,
        value=amount,
        element=element,
        remaining_hp=status.current_hp,
        hp_lost=hp_lost,
        max_hp=status.max_hp,
    )
    if not status.is_alive:
        knock_out(battle, target_id, source_id=source_id)
    return hp_lost


def knock_out(battle: BattleState, unit_id: str, source_id: str | None = None) -> BattleEvent:
    """Log a knockout and check whether it ended the battle."""
    unit = battle.get_unit(unit_id)
    event = battle.log(
        EventType.KO,
        f"{unit.name} has been knocked out!",
        source=source_id,
        target=unit_id,
    )
    battle.check_battle_end()
    return event
