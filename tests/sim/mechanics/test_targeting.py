"""Tests for target resolution."""

import pytest

from robo_rumble.defs import Element, Targeting
from robo_rumble.sim.core.entities import CombatUnit, Stats, UnitStatus
from robo_rumble.sim.core.game_state import BattleState, BattleStatus
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.mechanics.targeting import resolve_targets


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_unit(unit_id: str) -> CombatUnit:
    return CombatUnit(
        id=unit_id,
        name=unit_id.title(),
        element=Element.NEUTRAL,
        stats=Stats(hp=100, attack=50, defense=50, speed=50, energy=100, crit=0),
    )


def _make_battle() -> BattleState:
    battle = BattleState(
        roster_a=[_make_unit("a1"), _make_unit("a2")],
        roster_b=[_make_unit("b1"), _make_unit("b2"), _make_unit("b3")],
        rng=GameRNG(7),
    )
    for unit in battle.all_units:
        battle.unit_statuses[unit.id] = UnitStatus.for_unit(unit)
    battle.transition(BattleStatus.ACTIVE)
    return battle


def _knock_out(battle: BattleState, unit_id: str) -> None:
    battle.unit_statuses[unit_id].take_damage(10_000)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestResolveTargets:
    def test_single_uses_chosen_target(self):
        battle = _make_battle()
        assert resolve_targets(battle, "a1", Targeting.SINGLE, "b2") == ["b2"]

    def test_single_falls_back_when_target_missing(self):
        battle = _make_battle()
        assert resolve_targets(battle, "a1", Targeting.SINGLE) == ["b1"]

    def test_single_falls_back_when_target_dead(self):
        battle = _make_battle()
        _knock_out(battle, "b2")
        assert resolve_targets(battle, "a1", "single", "b2") == ["b1"]

    def test_single_never_hits_own_side(self):
        battle = _make_battle()
        assert resolve_targets(battle, "a1", Targeting.SINGLE, "a2") == ["b1"]

    def test_all_enemies_skips_dead(self):
        battle = _make_battle()
        _knock_out(battle, "b1")
        assert resolve_targets(battle, "a1", Targeting.ALL_ENEMIES) == ["b2", "b3"]

    def test_all_allies_includes_self(self):
        battle = _make_battle()
        assert resolve_targets(battle, "a1", Targeting.ALL_ALLIES) == ["a1", "a2"]

    def test_self(self):
        battle = _make_battle()
        assert resolve_targets(battle, "b3", Targeting.SELF) == ["b3"]

    def test_random_picks_living_enemy(self):
        battle = _make_battle()
        _knock_out(battle, "a1")
        assert resolve_targets(battle, "b1", Targeting.RANDOM) == ["a2"]

    @pytest.mark.parametrize("targeting", list(Targeting))
    def test_no_living_enemies_or_self(self, targeting):
        battle = _make_battle()
        for unit_id in ("a1", "a2", "b1", "b2", "b3"):
            _knock_out(battle, unit_id)
        assert resolve_targets(battle, "a1", targeting) == []
