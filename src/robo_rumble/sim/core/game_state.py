"""Battle state for the headless battle simulator.

``BattleState`` is the aggregate root of a single battle: both rosters,
per-unit runtime records, the turn order cursor, active field effects and
the append-only event log.  It is owned by one :class:`BattleEngine` and
mutated only through the functions in :mod:`robo_rumble.sim.mechanics`.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

from robo_rumble.defs import AbilityDefinition, Element
from robo_rumble.errors import BattleStateError, UnknownUnitError
from robo_rumble.sim.core.entities import CombatUnit, FieldEffect, UnitStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BattleStatus(str, Enum):
    PREPARING = "preparing"
    ACTIVE = "active"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def is_terminal(self) -> bool:
        return self in (BattleStatus.VICTORY, BattleStatus.DEFEAT)


_TRANSITIONS: dict[BattleStatus, frozenset[BattleStatus]] = {
    BattleStatus.PREPARING: frozenset({BattleStatus.ACTIVE}),
    BattleStatus.ACTIVE: frozenset({BattleStatus.VICTORY, BattleStatus.DEFEAT}),
    BattleStatus.VICTORY: frozenset(),
    BattleStatus.DEFEAT: frozenset(),
}


class EventType(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    ABILITY = "ability"
    ELEMENT = "element"
    KO = "ko"
    MISS = "miss"
    CRITICAL = "critical"
    SYSTEM = "system"


class ActionType(str, Enum):
    ATTACK = "attack"
    ABILITY = "ability"
    SWITCH = "switch"


# ---------------------------------------------------------------------------
# Events and actions
# ---------------------------------------------------------------------------

class BattleEvent(BaseModel):
    """One entry of the battle log, consumed by presentation layers."""

    type: EventType
    description: str
    source: str | None = None
    target: str | None = None
    value: float | None = None
    element: Element | None = None
    timestamp: float = 0.0
    sequence: int = 0
    """Position in the log; strictly increasing."""

    remaining_hp: int | None = None
    hp_lost: int | None = None
    """HP actually removed by a damage event; lower than ``value`` on overkill."""
    max_hp: int | None = None


class BattleAction(BaseModel):
    """One action submitted by a player or agent."""

    type: ActionType
    source_id: str
    target_id: str | None = None
    ability_id: str | None = None
    timing_bonus: float | None = Field(default=None, ge=0.0)
    """Offense minigame multiplier; ``None`` means neutral (1.0)."""

    defense_bonus: float | None = Field(default=None, ge=0.0)
    """Defense minigame multiplier; ``None`` means the defender did not act."""


class AbilityInstance(BaseModel):
    """An ability as seen by one unit at one moment: definition plus cooldown."""

    ability: AbilityDefinition
    current_cooldown: int = 0
    usable: bool = True

    @property
    def id(self) -> str:
        return self.ability.id


# ---------------------------------------------------------------------------
# BattleState
# ---------------------------------------------------------------------------

RosterSide = Literal["a", "b"]


class BattleState(BaseModel):
    """Full mutable state of a single battle.

    ``roster_a`` is the caller's side: its wipe is a defeat, the wipe of
    ``roster_b`` a victory.
    """

    model_config = {"arbitrary_types_allowed": True}

    roster_a: list[CombatUnit]
    roster_b: list[CombatUnit]
    unit_statuses: dict[str, UnitStatus] = Field(default_factory=dict)
    turn_order: list[str] = Field(default_factory=list)
    turn_index: int = 0
    battle_log: list[BattleEvent] = Field(default_factory=list)
    field_effects: list[FieldEffect] = Field(default_factory=list)
    round: int = 1
    status: BattleStatus = BattleStatus.PREPARING
    action_history: list[BattleAction] = Field(default_factory=list)
    seed: int | None = None

    rng: Any = Field(default=None, exclude=True)
    """Combat RNG (crit, accuracy, power ranges, random targets).  Excluded
    from serialization."""

    clock: Callable[[], float] = Field(default=time.time, exclude=True)

    # -- unit lookups --------------------------------------------------------

    @property
    def all_units(self) -> list[CombatUnit]:
        return [*self.roster_a, *self.roster_b]

    def get_unit(self, unit_id: str) -> CombatUnit:
        """Return the unit with *unit_id*.

        Raises
        ------
        UnknownUnitError
            If the id belongs to neither roster.
        """
        for unit in self.all_units:
            if unit.id == unit_id:
                return unit
        raise UnknownUnitError(unit_id)

    def has_unit(self, unit_id: str) -> bool:
        return unit_id in self.unit_statuses

    def get_status(self, unit_id: str) -> UnitStatus:
        try:
            return self.unit_statuses[unit_id]
        except KeyError:
            raise UnknownUnitError(unit_id) from None

    def side_of(self, unit_id: str) -> RosterSide:
        if any(u.id == unit_id for u in self.roster_a):
            return "a"
        if any(u.id == unit_id for u in self.roster_b):
            return "b"
        raise UnknownUnitError(unit_id)

    def roster(self, side: RosterSide) -> list[CombatUnit]:
        return self.roster_a if side == "a" else self.roster_b

    def allies_of(self, unit_id: str) -> list[CombatUnit]:
        return self.roster(self.side_of(unit_id))

    def opponents_of(self, unit_id: str) -> list[CombatUnit]:
        return self.roster("b" if self.side_of(unit_id) == "a" else "a")

    def is_alive(self, unit_id: str) -> bool:
        return self.get_status(unit_id).is_alive

    def living(self, units: list[CombatUnit]) -> list[CombatUnit]:
        return [u for u in units if self.unit_statuses[u.id].is_alive]

    @property
    def current_unit_id(self) -> str | None:
        if 0 <= self.turn_index < len(self.turn_order):
            return self.turn_order[self.turn_index]
        return None

    # -- lifecycle -----------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    def transition(self, new_status: BattleStatus) -> None:
        """Move to *new_status*.

        Raises
        ------
        BattleStateError
            If the transition would go backwards or leave a terminal state.
        """
        if new_status not in _TRANSITIONS[self.status]:
            raise BattleStateError(
                f"Illegal battle status transition {self.status.value} -> {new_status.value}"
            )
        self.status = new_status

    def check_battle_end(self) -> bool:
        """Flip to a terminal status if either roster has been wiped out.

        The caller's roster is checked first, so a simultaneous wipe is a
        defeat.  Returns ``True`` if the battle is over.
        """
        if self.status != BattleStatus.ACTIVE:
            return self.is_over
        if not self.living(self.roster_a):
            self.transition(BattleStatus.DEFEAT)
            self.log(EventType.SYSTEM, "Defeat! Your team has been knocked out.")
        elif not self.living(self.roster_b):
            self.transition(BattleStatus.VICTORY)
            self.log(EventType.SYSTEM, "Victory! The opposing team has been knocked out.")
        if self.is_over:
            logger.info("Battle over: %s in round %d", self.status.value, self.round)
        return self.is_over

    # -- event log -----------------------------------------------------------

    def log(self, event_type: EventType, description: str, **fields: Any) -> BattleEvent:
        """Append a :class:`BattleEvent` to the log and return it."""
        event = BattleEvent(
            type=event_type,
            description=description,
            timestamp=self.clock(),
            sequence=len(self.battle_log),
            **fields,
        )
        self.battle_log.append(event)
        return event
