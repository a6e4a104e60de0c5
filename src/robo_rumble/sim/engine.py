"""Battle engine -- lifecycle controller for a single battle.

The engine owns one :class:`BattleState` and is the only thing that
mutates it.  Callers follow this loop::

    engine = BattleEngine(seed=42)
    engine.initialize_battle(my_team, their_team)
    while engine.get_state().status is BattleStatus.ACTIVE:
        unit = engine.get_current_unit()
        events = engine.execute_action(BattleAction(...))   # or execute_ai_turn()
        ...  # present events; after a basic attack call engine.next_turn()

Gameplay problems (not enough energy, ability on cooldown, target
already down) never raise: they produce a narrative event and leave the
state untouched.  Programmer errors (acting on a finished battle,
unknown unit ids) raise when ``config.strict`` is set and are logged and
ignored otherwise.
"""

from __future__ import annotations

import logging
import math
import secrets
import time
from collections import Counter
from typing import Callable, Sequence

from robo_rumble.config import DEFAULT_CONFIG, EngineConfig
from robo_rumble.defs import AbilityDefinition, AbilityType
from robo_rumble.errors import BattleStateError, RumbleError, UnknownUnitError
from robo_rumble.sim.content.registry import ContentRegistry, default_registry
from robo_rumble.sim.core.entities import (
    CombatUnit,
    FieldEffect,
    StatusEffect,
    UnitKind,
    UnitStatus,
)
from robo_rumble.sim.core.game_state import (
    AbilityInstance,
    ActionType,
    BattleAction,
    BattleEvent,
    BattleState,
    BattleStatus,
    EventType,
    RosterSide,
)
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.mechanics.cooldowns import (
    is_consumed,
    remaining_cooldown,
    start_cooldown,
    tick_cooldowns,
)
from robo_rumble.sim.mechanics.damage import (
    ability_damage,
    basic_attack_damage,
    deal_damage,
    effectiveness_text,
)
from robo_rumble.sim.mechanics.energy import can_afford, regen_energy, spend_energy
from robo_rumble.sim.mechanics.status_effects import (
    add_field_effect,
    attach_status,
    cleanse,
    effective_stats,
    status_from_template,
    tick_field_effects,
    tick_status_effects,
)
from robo_rumble.sim.mechanics.targeting import resolve_targets
from robo_rumble.sim.mechanics.turn_order import compute_turn_order
from robo_rumble.sim.play_agents.heuristic_agent import HeuristicAgent

logger = logging.getLogger(__name__)

_SIDE_LABELS = {"a": "Your team", "b": "Opponent team"}


class BattleEngine:
    """Turn-based battle simulator for two rosters of :class:`CombatUnit`.

    Parameters
    ----------
    registry:
        Content tables (abilities, elements).  Defaults to the bundled ones.
    config:
        Balancing constants.
    seed:
        Seed for every random roll of the battle.  A random seed is drawn
        when ``None``; it is recorded on the state for replays.
    clock:
        Timestamp source for battle events.
    """

    def __init__(
        self,
        registry: ContentRegistry | None = None,
        config: EngineConfig | None = None,
        seed: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.config = config or DEFAULT_CONFIG
        self.seed = seed if seed is not None else secrets.randbits(64)
        self._clock = clock or time.time
        root = GameRNG(self.seed)
        self._combat_rng = root.fork("combat")
        self._turn_rng = root.fork("turn_order")
        self._ai = HeuristicAgent(root.fork("ai"))
        self._state: BattleState | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize_battle(
        self,
        roster_a: Sequence[CombatUnit],
        roster_b: Sequence[CombatUnit],
    ) -> BattleState:
        """Set up the battle and move it to ``active``.

        Applies the companion bonus, creates one :class:`UnitStatus` per
        unit, logs element combos and advantages, and computes the first
        turn order.

        Raises
        ------
        BattleStateError
            If this engine already holds a battle.
        ValueError
            If a roster is empty or a unit id appears twice.
        """
        if self._state is not None:
            raise BattleStateError("Battle already initialized; create a new engine")
        if not roster_a or not roster_b:
            raise ValueError("Both rosters need at least one unit")
        ids = [u.id for u in (*roster_a, *roster_b)]
        duplicates = sorted(uid for uid, n in Counter(ids).items() if n > 1)
        if duplicates:
            raise ValueError(f"Duplicate unit ids: {duplicates}")

        state = BattleState(
            roster_a=self._apply_companion_bonus(list(roster_a)),
            roster_b=self._apply_companion_bonus(list(roster_b)),
            seed=self.seed,
            rng=self._combat_rng,
            clock=self._clock,
        )
        self._state = state

        for unit in state.all_units:
            state.unit_statuses[unit.id] = UnitStatus.for_unit(unit)
            if unit.has_companion_bonus:
                state.log(
                    EventType.BUFF,
                    f"{unit.name} fights beside its partner! "
                    f"+{self.config.companion_bonus:.0%} to all stats.",
                    target=unit.id,
                    value=self.config.companion_bonus,
                )

        self._log_element_combos("a")
        self._log_element_combos("b")
        self._log_element_advantages()

        state.turn_order = compute_turn_order(state, self._turn_rng, self.config.turn_jitter)
        state.turn_index = 0
        state.transition(BattleStatus.ACTIVE)
        state.log(EventType.SYSTEM, "Battle initialized!")
        state.log(EventType.SYSTEM, f"=== TURN {state.round} ===")
        logger.info(
            "Battle started (seed=%d): %d vs %d units",
            self.seed, len(state.roster_a), len(state.roster_b),
        )
        return state

    def _apply_companion_bonus(self, roster: list[CombatUnit]) -> list[CombatUnit]:
        """Boost every unit whose base id is shared by a primary and a
        companion in the same roster."""
        kinds: dict[str, set[UnitKind]] = {}
        for unit in roster:
            kinds.setdefault(unit.base_id, set()).add(unit.kind)
        paired = {base for base, found in kinds.items() if len(found) > 1}

        boosted: list[CombatUnit] = []
        for unit in roster:
            if unit.base_id in paired:
                unit = unit.with_stat_bonus(self.config.companion_bonus)
                logger.debug("Companion bonus applied to %s", unit.id)
            boosted.append(unit)
        return boosted

    def _log_element_combos(self, side: RosterSide) -> None:
        state = self.state
        roster = state.roster(side)
        counts = Counter(u.element for u in roster)
        label = _SIDE_LABELS[side]
        for element, count in counts.items():
            combo = self.registry.combos.dual.get(element)
            if count >= 2 and combo is not None:
                state.log(
                    EventType.ELEMENT,
                    f"{label} unlocked {combo.name}: {combo.effect}",
                    element=element,
                    value=count,
                )
        trinity = self.registry.combos.trinity
        if len(counts) >= 3 and trinity is not None:
            state.log(
                EventType.ELEMENT,
                f"{label} unlocked {trinity.name}: {trinity.effect}",
                value=len(counts),
            )

    def _log_element_advantages(self) -> None:
        state = self.state
        for unit in state.roster_a:
            for enemy in state.roster_b:
                multiplier = self.registry.type_multiplier(unit.element, enemy.element)
                if multiplier > 1:
                    text = f"{unit.name} has the advantage against {enemy.name}!"
                elif multiplier < 1:
                    text = f"{unit.name} is at a disadvantage against {enemy.name}."
                else:
                    continue
                state.log(
                    EventType.ELEMENT,
                    text,
                    source=unit.id,
                    target=enemy.id,
                    value=multiplier,
                    element=unit.element,
                )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> BattleState:
        if self._state is None:
            raise BattleStateError("Battle has not been initialized")
        return self._state

    def get_state(self) -> BattleState:
        """Return the live battle state (read-only by convention)."""
        return self.state

    def get_current_unit(self) -> CombatUnit | None:
        """Return the unit whose turn it is, or ``None`` once the battle is over."""
        state = self.state
        unit_id = state.current_unit_id
        if state.status is not BattleStatus.ACTIVE or unit_id is None:
            return None
        return state.get_unit(unit_id)

    def get_available_abilities(self, unit_id: str) -> list[AbilityInstance]:
        """Return every ability of *unit_id* with its cooldown and usability.

        Unknown ability ids on the unit are skipped with a warning.
        """
        state = self.state
        try:
            unit = state.get_unit(unit_id)
        except UnknownUnitError as exc:
            self._programmer_error(exc)
            return []

        status = state.unit_statuses[unit_id]
        result: list[AbilityInstance] = []
        for ability_id in unit.abilities:
            ability = self.registry.get_ability(ability_id)
            if ability is None:
                logger.warning("Unit %s has unknown ability %r", unit_id, ability_id)
                continue
            result.append(
                AbilityInstance(
                    ability=ability,
                    current_cooldown=remaining_cooldown(status, ability_id),
                    usable=self._rejection_reason(unit, status, ability) is None,
                )
            )
        return result

    def can_use_ability(self, unit_id: str, ability_id: str) -> bool:
        """True if the unit owns the ability and it is off cooldown,
        affordable and not yet consumed."""
        state = self.state
        try:
            unit = state.get_unit(unit_id)
        except UnknownUnitError as exc:
            self._programmer_error(exc)
            return False
        ability = self.registry.get_ability(ability_id)
        if ability is None:
            return False
        return self._rejection_reason(unit, state.unit_statuses[unit_id], ability) is None

    def validate_action(self, action: BattleAction) -> bool:
        """Check an action for a host that enforces turn ownership.

        True only when the battle is active, the source is the current
        unit and alive, and any named target exists and is alive.
        """
        state = self._state
        if state is None or state.status is not BattleStatus.ACTIVE:
            return False
        if action.source_id != state.current_unit_id:
            return False
        if not state.has_unit(action.source_id) or not state.is_alive(action.source_id):
            return False
        if action.target_id is not None:
            if not state.has_unit(action.target_id) or not state.is_alive(action.target_id):
                return False
        return True

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def execute_action(self, action: BattleAction) -> list[BattleEvent]:
        """Resolve one action and return the events it produced.

        Basic attacks do not advance the turn; abilities do.
        """
        state = self._state
        if state is None or state.status is not BattleStatus.ACTIVE:
            status = state.status.value if state is not None else "uninitialized"
            self._programmer_error(
                BattleStateError(f"Cannot execute an action while the battle is {status}")
            )
            return []
        for unit_id in (action.source_id, action.target_id):
            if unit_id is not None and not state.has_unit(unit_id):
                self._programmer_error(UnknownUnitError(unit_id))
                return []

        mark = len(state.battle_log)
        recorded = action.model_copy()
        source = state.get_unit(action.source_id)

        accepted = False
        if not state.is_alive(source.id):
            state.log(
                EventType.SYSTEM,
                f"{source.name} has been knocked out and cannot act.",
                source=source.id,
            )
        elif action.type is ActionType.ATTACK:
            accepted = self._basic_attack(source, action)
        elif action.type is ActionType.ABILITY:
            accepted = self._use_ability(source, action)
        else:
            state.log(
                EventType.SYSTEM,
                f"{source.name} holds position. Switching is not available.",
                source=source.id,
            )
            accepted = True

        # Rejected actions leave no trace beyond their narrative event.
        if accepted:
            state.action_history.append(recorded)
        return state.battle_log[mark:]

    def execute_ai_turn(self) -> list[BattleEvent]:
        """Let the built-in AI act for the current unit of ``roster_b``.

        Returns no events when it is not an opposing unit's turn.
        """
        state = self.state
        if state.status is not BattleStatus.ACTIVE:
            self._programmer_error(
                BattleStateError(f"Cannot run an AI turn while the battle is {state.status.value}")
            )
            return []
        unit_id = state.current_unit_id
        if unit_id is None or state.side_of(unit_id) != "b":
            logger.debug("AI turn requested on %s, which is not AI-controlled", unit_id)
            return []
        action = self._ai.choose_action(self, unit_id)
        logger.debug("AI chose %s", action)
        return self.execute_action(action)

    def _basic_attack(self, source: CombatUnit, action: BattleAction) -> bool:
        state = self.state
        target_id = action.target_id
        if target_id is None:
            living = state.living(state.opponents_of(source.id))
            if not living:
                return False
            target_id = living[0].id
        target = state.get_unit(target_id)
        if not state.is_alive(target_id):
            state.log(
                EventType.SYSTEM,
                f"{target.name} is already knocked out.",
                source=source.id,
                target=target_id,
            )
            return False

        attacker_stats = effective_stats(state, source.id)
        defender_stats = effective_stats(state, target_id)
        multiplier = self.registry.type_multiplier(source.element, target.element)
        damage = basic_attack_damage(
            attacker_stats.attack,
            defender_stats.defense,
            multiplier,
            timing_bonus=1.0 if action.timing_bonus is None else action.timing_bonus,
            defense_bonus=1.0 if action.defense_bonus is None else action.defense_bonus,
            floor=self.config.basic_attack_floor,
        )
        critical = state.rng.percent() < attacker_stats.crit
        if critical:
            damage = math.floor(damage * self.config.basic_crit_multiplier)
            state.log(
                EventType.CRITICAL,
                "Critical hit!",
                source=source.id,
                target=target_id,
                element=source.element,
            )

        text = f"{source.name} attacks {target.name} for {damage} damage!"
        effect = effectiveness_text(multiplier)
        if effect:
            text = f"{text} {effect}"
        logger.debug("%s -> %s basic attack: %d (x%.2f)", source.id, target_id, damage, multiplier)
        deal_damage(
            state,
            target_id,
            damage,
            source_id=source.id,
            element=source.element,
            description=text,
        )
        return True

    # ------------------------------------------------------------------
    # Abilities
    # ------------------------------------------------------------------

    def _rejection_reason(
        self,
        unit: CombatUnit,
        status: UnitStatus,
        ability: AbilityDefinition,
    ) -> str | None:
        if ability.id not in unit.abilities:
            return f"{unit.name} doesn't know {ability.name}"
        if is_consumed(status, ability.id):
            return f"{ability.name} can only be used once per battle"
        cooldown = remaining_cooldown(status, ability.id)
        if cooldown > 0:
            return f"{ability.name} is on cooldown ({cooldown} turns)"
        if not can_afford(status, ability.energy_cost):
            return f"not enough energy for {ability.name}"
        return None

    def _use_ability(self, source: CombatUnit, action: BattleAction) -> bool:
        state = self.state
        status = state.unit_statuses[source.id]
        ability = self.registry.get_ability(action.ability_id or "")
        if ability is None:
            state.log(
                EventType.ABILITY,
                f"{source.name} tried an unknown ability.",
                source=source.id,
            )
            logger.debug("Unknown ability %r from %s", action.ability_id, source.id)
            return False

        reason = self._rejection_reason(source, status, ability)
        if reason is not None:
            state.log(
                EventType.ABILITY,
                f"{source.name} can't use {ability.name}: {reason}.",
                source=source.id,
                element=ability.element,
            )
            logger.debug("Rejected %s from %s: %s", ability.id, source.id, reason)
            return False

        spend_energy(status, ability.energy_cost)
        start_cooldown(status, ability)
        state.log(
            EventType.ABILITY,
            f"{source.name} uses {ability.name}!",
            source=source.id,
            target=action.target_id,
            element=ability.element,
            value=ability.energy_cost,
        )

        targets = resolve_targets(state, source.id, ability.targeting, action.target_id)
        if ability.type is AbilityType.DAMAGE:
            self._resolve_damage(source, ability, targets)
        elif ability.type is AbilityType.HEAL:
            self._resolve_heal(source, ability, targets)
        elif ability.type in (AbilityType.BUFF, AbilityType.DEBUFF):
            self._resolve_status(source, ability, targets)
        elif ability.type is AbilityType.FIELD:
            add_field_effect(
                state,
                FieldEffect(
                    id=ability.id,
                    name=ability.name,
                    element=ability.element,
                    duration=ability.duration or self.config.default_field_duration,
                    effect=ability.payload,
                    source_id=source.id,
                ),
            )
        elif ability.type is AbilityType.UTILITY:
            self._resolve_utility(source, ability, targets)

        if not state.is_over:
            self.next_turn()
        return True

    def _roll_power(self, ability: AbilityDefinition) -> int:
        low, high = ability.power_range
        if low == high:
            return low
        return self.state.rng.random_int(low, high)

    def _resolve_damage(
        self, source: CombatUnit, ability: AbilityDefinition, targets: list[str]
    ) -> None:
        state = self.state
        element_defn = self.registry.get_element(ability.element)
        accuracy = ability.accuracy if ability.accuracy is not None else self.config.default_accuracy
        for target_id in targets:
            if state.is_over:
                break
            target = state.get_unit(target_id)
            if state.rng.percent() > accuracy:
                state.log(
                    EventType.MISS,
                    f"{ability.name} missed {target.name}!",
                    source=source.id,
                    target=target_id,
                    value=0,
                    element=ability.element,
                )
                continue

            attacker_stats = effective_stats(state, source.id)
            defender_stats = effective_stats(state, target_id)
            multiplier = self.registry.type_multiplier(ability.element, target.element)
            critical = state.rng.percent() < attacker_stats.crit
            damage = ability_damage(
                self._roll_power(ability),
                attacker_stats.attack,
                defender_stats.defense,
                multiplier,
                critical=critical,
                baseline=self.config.attack_baseline,
                crit_multiplier=self.config.ability_crit_multiplier,
            )
            if critical:
                state.log(
                    EventType.CRITICAL,
                    "Critical hit!",
                    source=source.id,
                    target=target_id,
                    element=ability.element,
                )
            text = f"{ability.name} hits {target.name} for {damage} damage!"
            effect = effectiveness_text(multiplier)
            if effect:
                text = f"{text} {effect}"
            deal_damage(
                state,
                target_id,
                damage,
                source_id=source.id,
                element=ability.element,
                description=text,
            )

            if not state.is_alive(target_id) or element_defn is None:
                continue
            for effect_id in ability.effects:
                template = element_defn.status_effects.get(effect_id)
                if template is None:
                    continue
                attach_status(
                    state,
                    target_id,
                    status_from_template(effect_id, template, ability.element, source.id),
                )

    def _resolve_heal(
        self, source: CombatUnit, ability: AbilityDefinition, targets: list[str]
    ) -> None:
        state = self.state
        for target_id in targets:
            target_status = state.unit_statuses[target_id]
            restored = target_status.heal(self._roll_power(ability))
            state.log(
                EventType.HEAL,
                f"{state.get_unit(target_id).name} recovers {restored} HP!",
                source=source.id,
                target=target_id,
                value=restored,
                element=ability.element,
                remaining_hp=target_status.current_hp,
                max_hp=target_status.max_hp,
            )

    def _resolve_status(
        self, source: CombatUnit, ability: AbilityDefinition, targets: list[str]
    ) -> None:
        debuff = ability.type is AbilityType.DEBUFF
        payload = ability.payload.model_copy(update={"positive": not debuff})
        for target_id in targets:
            attach_status(
                self.state,
                target_id,
                StatusEffect(
                    id=ability.id,
                    name=ability.name,
                    element=ability.element,
                    duration=ability.duration or self.config.default_status_duration,
                    effect=payload.model_copy(deep=True),
                    source_id=source.id,
                ),
                debuff=debuff,
            )

    def _resolve_utility(
        self, source: CombatUnit, ability: AbilityDefinition, targets: list[str]
    ) -> None:
        if "cleanse" not in ability.effects:
            logger.debug("Utility ability %s has no implemented effect", ability.id)
            return
        for target_id in targets:
            cleanse(self.state, target_id)

    # ------------------------------------------------------------------
    # Turn advance
    # ------------------------------------------------------------------

    def next_turn(self) -> list[BattleEvent]:
        """Close the current unit's turn and move the cursor.

        Ticks status effects of every living unit, then the current unit's
        cooldowns, then field effects; regenerates the current unit's
        energy; and advances to the next living unit, starting a new
        round (with a fresh turn order) when the order is exhausted.

        Returns the events produced.  A no-op once the battle is over.
        """
        state = self.state
        if state.status is not BattleStatus.ACTIVE:
            return []
        mark = len(state.battle_log)
        current_id = state.current_unit_id

        paralyzed = tick_status_effects(state)
        if paralyzed:
            logger.debug("Skip-turn rolls succeeded for %s (not enforced)", paralyzed)
        if state.is_over:
            return state.battle_log[mark:]

        if current_id is not None:
            current_status = state.unit_statuses[current_id]
            # Only the unit closing its turn ticks; a cooldown counts its owner's turns.
            tick_cooldowns(current_status)
            regen_energy(current_status, self.config.energy_regen)
        tick_field_effects(state)
        self._advance_cursor()
        return state.battle_log[mark:]

    def _advance_cursor(self) -> None:
        state = self.state
        index = state.turn_index + 1
        while index < len(state.turn_order) and not state.is_alive(state.turn_order[index]):
            index += 1
        if index < len(state.turn_order):
            state.turn_index = index
            return

        state.round += 1
        state.turn_order = compute_turn_order(state, self._turn_rng, self.config.turn_jitter)
        state.turn_index = 0
        state.log(EventType.SYSTEM, f"=== TURN {state.round} ===")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _programmer_error(self, error: RumbleError) -> None:
        if self.config.strict:
            raise error
        logger.warning("Ignoring invalid engine call: %s", error)
