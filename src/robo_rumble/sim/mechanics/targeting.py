"""Target resolution -- translate an ability's targeting mode into unit ids."""

from __future__ import annotations

from typing import TYPE_CHECKING

from robo_rumble.defs import Targeting

if TYPE_CHECKING:
    from robo_rumble.sim.core.game_state import BattleState


def resolve_targets(
    battle: BattleState,
    source_id: str,
    targeting: Targeting | str,
    chosen_target: str | None = None,
) -> list[str]:
    """Resolve a targeting mode to the ids of the units it lands on.

    Only living units are ever returned; a mode with no eligible units
    resolves to an empty list.  A ``single`` ability whose chosen target
    is missing or already knocked out falls back to the first living
    opponent.
    """
    targeting = Targeting(targeting)
    enemies = [u.id for u in battle.living(battle.opponents_of(source_id))]

    if targeting == Targeting.SINGLE:
        if chosen_target is not None and chosen_target in enemies:
            return [chosen_target]
        return enemies[:1]

    if targeting == Targeting.ALL_ENEMIES:
        return enemies

    if targeting == Targeting.ALL_ALLIES:
        return [u.id for u in battle.living(battle.allies_of(source_id))]

    if targeting == Targeting.SELF:
        return [source_id] if battle.is_alive(source_id) else []

    if targeting == Targeting.RANDOM:
        if not enemies:
            return []
        return [battle.rng.random_choice(enemies)]

    return []
