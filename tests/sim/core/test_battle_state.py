"""Tests for BattleState lookups, status transitions and the event log."""

import pytest

from robo_rumble.defs import Element
from robo_rumble.errors import BattleStateError, UnknownUnitError
from robo_rumble.sim.core.entities import CombatUnit, Stats, UnitStatus
from robo_rumble.sim.core.game_state import BattleState, BattleStatus, EventType
from robo_rumble.sim.core.rng import GameRNG


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_unit(unit_id: str, **stat_overrides) -> CombatUnit:
    stats = dict(hp=100, attack=50, defense=50, speed=50, energy=100, crit=0)
    stats.update(stat_overrides)
    return CombatUnit(id=unit_id, name=unit_id.title(), element=Element.NEUTRAL, stats=Stats(**stats))


def _make_battle(status: BattleStatus = BattleStatus.ACTIVE) -> BattleState:
    roster_a = [_make_unit("ally-1"), _make_unit("ally-2")]
    roster_b = [_make_unit("enemy-1")]
    battle = BattleState(
        roster_a=roster_a,
        roster_b=roster_b,
        rng=GameRNG(42),
        clock=lambda: 123.0,
    )
    for unit in battle.all_units:
        battle.unit_statuses[unit.id] = UnitStatus.for_unit(unit)
    battle.turn_order = [u.id for u in battle.all_units]
    if status is not BattleStatus.PREPARING:
        battle.transition(BattleStatus.ACTIVE)
    return battle


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

class TestLookups:
    def test_side_of(self):
        battle = _make_battle()
        assert battle.side_of("ally-2") == "a"
        assert battle.side_of("enemy-1") == "b"

    def test_opponents_and_allies(self):
        battle = _make_battle()
        assert [u.id for u in battle.opponents_of("ally-1")] == ["enemy-1"]
        assert [u.id for u in battle.allies_of("enemy-1")] == ["enemy-1"]

    def test_unknown_unit_raises(self):
        battle = _make_battle()
        with pytest.raises(UnknownUnitError):
            battle.get_unit("nobody")
        with pytest.raises(KeyError):
            battle.get_status("nobody")

    def test_current_unit_id(self):
        battle = _make_battle()
        battle.turn_index = 2
        assert battle.current_unit_id == "enemy-1"
        battle.turn_index = 3
        assert battle.current_unit_id is None


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_preparing_to_active(self):
        battle = _make_battle(BattleStatus.PREPARING)
        battle.transition(BattleStatus.ACTIVE)
        assert battle.status is BattleStatus.ACTIVE

    def test_cannot_return_to_preparing(self):
        battle = _make_battle()
        with pytest.raises(BattleStateError):
            battle.transition(BattleStatus.PREPARING)

    def test_terminal_never_reverts(self):
        battle = _make_battle()
        battle.transition(BattleStatus.VICTORY)
        for status in BattleStatus:
            with pytest.raises(BattleStateError):
                battle.transition(status)

    def test_preparing_cannot_jump_to_terminal(self):
        battle = _make_battle(BattleStatus.PREPARING)
        with pytest.raises(BattleStateError):
            battle.transition(BattleStatus.DEFEAT)


# ---------------------------------------------------------------------------
# Battle end
# ---------------------------------------------------------------------------

class TestCheckBattleEnd:
    def test_still_active_with_survivors(self):
        battle = _make_battle()
        assert battle.check_battle_end() is False
        assert battle.status is BattleStatus.ACTIVE

    def test_victory_when_opponents_wiped(self):
        battle = _make_battle()
        battle.unit_statuses["enemy-1"].take_damage(999)
        assert battle.check_battle_end() is True
        assert battle.status is BattleStatus.VICTORY
        assert battle.battle_log[-1].type is EventType.SYSTEM

    def test_defeat_when_own_roster_wiped(self):
        battle = _make_battle()
        battle.unit_statuses["ally-1"].take_damage(999)
        battle.unit_statuses["ally-2"].take_damage(999)
        battle.check_battle_end()
        assert battle.status is BattleStatus.DEFEAT

    def test_simultaneous_wipe_is_defeat(self):
        battle = _make_battle()
        for status in battle.unit_statuses.values():
            status.take_damage(999)
        battle.check_battle_end()
        assert battle.status is BattleStatus.DEFEAT


# ---------------------------------------------------------------------------
# Event log
# ---------------------------------------------------------------------------

class TestLog:
    def test_sequence_and_timestamp(self):
        battle = _make_battle()
        first = battle.log(EventType.SYSTEM, "one")
        second = battle.log(EventType.DAMAGE, "two", target="enemy-1", value=5)
        assert (first.sequence, second.sequence) == (0, 1)
        assert second.timestamp == 123.0
        assert second.value == 5
        assert battle.battle_log == [first, second]
