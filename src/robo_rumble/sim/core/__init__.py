"""Core simulation primitives for the battle simulator."""

from robo_rumble.sim.core.entities import (
    CombatUnit,
    FieldEffect,
    Stats,
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
)
from robo_rumble.sim.core.rng import GameRNG

__all__ = [
    # rng
    "GameRNG",
    # entities
    "Stats",
    "UnitKind",
    "CombatUnit",
    "StatusEffect",
    "FieldEffect",
    "UnitStatus",
    # game_state
    "BattleStatus",
    "EventType",
    "ActionType",
    "BattleEvent",
    "BattleAction",
    "AbilityInstance",
    "BattleState",
]
