"""Random action agent -- picks actions and targets uniformly at random.

The ``RandomAgent`` is the baseline for batch simulation runs: it checks
that the full battle loop works end-to-end and gives a lower bound when
comparing rosters.

Behaviour:
    - With probability ``attack_chance`` (or when nothing is usable) it
      basic-attacks a random living opponent.
    - Otherwise it uses a random usable ability, targeting a random
      living opponent when the ability is single-target.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from robo_rumble.defs import Targeting
from robo_rumble.sim.core.game_state import ActionType, BattleAction
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.play_agents.base import PlayAgent

if TYPE_CHECKING:
    from robo_rumble.sim.engine import BattleEngine


class RandomAgent(PlayAgent):
    """Agent that plays random legal actions.

    Parameters
    ----------
    rng:
        Seeded RNG for deterministic randomness.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    attack_chance:
        Probability (0.0 -- 1.0) of a basic attack even when abilities are
        usable.  Default is 0.30.
    """

    def __init__(self, rng: GameRNG | None = None, attack_chance: float = 0.30) -> None:
        self._rng = rng or GameRNG(seed=0)
        self._attack_chance = attack_chance

    def choose_action(self, engine: BattleEngine, unit_id: str) -> BattleAction:
        state = engine.get_state()
        opponents = [u.id for u in state.living(state.opponents_of(unit_id))]
        target_id = self._rng.random_choice(opponents) if opponents else None

        usable = [a.ability for a in engine.get_available_abilities(unit_id) if a.usable]
        if not usable or self._rng.random_float() < self._attack_chance:
            return BattleAction(type=ActionType.ATTACK, source_id=unit_id, target_id=target_id)

        ability = self._rng.random_choice(usable)
        return BattleAction(
            type=ActionType.ABILITY,
            source_id=unit_id,
            ability_id=ability.id,
            target_id=target_id if ability.targeting == Targeting.SINGLE else None,
        )
