"""Ability cooldown bookkeeping.

``UnitStatus.cooldowns`` maps ability id -> turns remaining.  A unit's
cooldowns tick once at the end of each of its own turns; a cooldown
started during the turn being closed is not ticked until the following
one, so an ability with ``cooldown=2`` reads 2 right after use, 1 after
the unit's next turn and is gone after the turn after that.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from robo_rumble.defs import AbilityDefinition
    from robo_rumble.sim.core.entities import UnitStatus

ONCE_PER_BATTLE_USED = 999
"""Sentinel for a consumed once-per-battle ability.  Never decremented."""


def start_cooldown(status: UnitStatus, ability: AbilityDefinition) -> None:
    """Record that *ability* was just used."""
    if ability.is_once_per_battle:
        status.cooldowns[ability.id] = ONCE_PER_BATTLE_USED
    elif isinstance(ability.cooldown, int) and ability.cooldown > 0:
        status.cooldowns[ability.id] = ability.cooldown
        status.fresh_cooldowns.add(ability.id)


def remaining_cooldown(status: UnitStatus, ability_id: str) -> int:
    return status.cooldowns.get(ability_id, 0)


def is_consumed(status: UnitStatus, ability_id: str) -> bool:
    return status.cooldowns.get(ability_id) == ONCE_PER_BATTLE_USED


def tick_cooldowns(status: UnitStatus) -> None:
    """Decrement every running cooldown of one unit by one turn.

    Entries reaching zero are deleted.  The once-per-battle sentinel and
    cooldowns started this turn are left untouched.
    """
    for ability_id, turns in list(status.cooldowns.items()):
        if turns == ONCE_PER_BATTLE_USED or ability_id in status.fresh_cooldowns:
            continue
        if turns <= 1:
            del status.cooldowns[ability_id]
        else:
            status.cooldowns[ability_id] = turns - 1
    status.fresh_cooldowns.clear()
