"""Turn order -- speed ranking with a per-roll jitter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .status_effects import effective_stats

if TYPE_CHECKING:
    from robo_rumble.sim.core.game_state import BattleState
    from robo_rumble.sim.core.rng import GameRNG


def compute_turn_order(battle: BattleState, rng: GameRNG, jitter: float = 10.0) -> list[str]:
    """Return the ids of every living unit, fastest first.

    Each living unit gets one fresh ``U(0, jitter)`` roll added to its
    effective speed.  Units are rolled in roster order (``roster_a`` then
    ``roster_b``) and sorted stably, so a fixed seed gives a fixed order.
    """
    scored: list[tuple[float, str]] = []
    for unit in battle.living(battle.all_units):
        speed = effective_stats(battle, unit.id).speed
        scored.append((speed + rng.uniform(0, jitter), unit.id))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [unit_id for _, unit_id in scored]
