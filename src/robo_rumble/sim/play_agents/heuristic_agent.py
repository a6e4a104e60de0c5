"""Heuristic agent -- the built-in opponent AI.

Ability choice:
    - Only abilities that are currently usable are considered.
    - +10 if the ability shares the unit's element.
    - +20 if it is super effective against at least one living opponent.
    - Plus ``U(0, 10)`` jitter so equal options vary between battles.
    - The top score wins; with nothing usable the unit basic-attacks.

Target choice (single-target abilities and basic attacks):
    ``(100 - current_hp) + 50 if super effective``, highest first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from robo_rumble.defs import Targeting
from robo_rumble.sim.core.game_state import ActionType, BattleAction
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.play_agents.base import PlayAgent

if TYPE_CHECKING:
    from robo_rumble.defs import AbilityDefinition, Element
    from robo_rumble.sim.core.entities import CombatUnit
    from robo_rumble.sim.engine import BattleEngine

SAME_ELEMENT_BONUS = 10.0
SUPER_EFFECTIVE_BONUS = 20.0
TARGET_EFFECTIVE_BONUS = 50.0
_JITTER = 10.0


class HeuristicAgent(PlayAgent):
    """Scores usable abilities and picks the best one.

    Parameters
    ----------
    rng:
        Seeded RNG for the score jitter.  If ``None``, ``GameRNG(seed=0)``.
    """

    def __init__(self, rng: GameRNG | None = None) -> None:
        self._rng = rng or GameRNG(seed=0)

    def choose_action(self, engine: BattleEngine, unit_id: str) -> BattleAction:
        state = engine.get_state()
        unit = state.get_unit(unit_id)
        opponents = state.living(state.opponents_of(unit_id))

        usable = [a.ability for a in engine.get_available_abilities(unit_id) if a.usable]
        best: AbilityDefinition | None = None
        best_score = float("-inf")
        for ability in usable:
            score = self.score_ability(engine, unit, ability, opponents)
            if score > best_score:
                best, best_score = ability, score

        if best is None:
            return BattleAction(
                type=ActionType.ATTACK,
                source_id=unit_id,
                target_id=self.choose_target(engine, unit.element, opponents),
            )

        target_id = None
        if best.targeting == Targeting.SINGLE:
            target_id = self.choose_target(engine, best.element, opponents)
        return BattleAction(
            type=ActionType.ABILITY,
            source_id=unit_id,
            ability_id=best.id,
            target_id=target_id,
        )

    def score_ability(
        self,
        engine: BattleEngine,
        unit: CombatUnit,
        ability: AbilityDefinition,
        opponents: list[CombatUnit],
    ) -> float:
        score = 0.0
        if ability.element == unit.element:
            score += SAME_ELEMENT_BONUS
        if any(
            engine.registry.type_multiplier(ability.element, o.element) > 1
            for o in opponents
        ):
            score += SUPER_EFFECTIVE_BONUS
        return score + self._rng.uniform(0, _JITTER)

    def choose_target(
        self,
        engine: BattleEngine,
        element: Element,
        opponents: list[CombatUnit],
    ) -> str | None:
        """Prefer weakened opponents, strongly prefer type advantage."""
        state = engine.get_state()
        best_id: str | None = None
        best_score = float("-inf")
        for opponent in opponents:
            score = 100 - state.unit_statuses[opponent.id].current_hp
            if engine.registry.type_multiplier(element, opponent.element) > 1:
                score += TARGET_EFFECTIVE_BONUS
            if score > best_score:
                best_id, best_score = opponent.id, score
        return best_id
