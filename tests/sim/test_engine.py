"""Tests for the battle engine lifecycle, actions and turn advance."""

import logging

import pytest

from robo_rumble.config import EngineConfig
from robo_rumble.defs import EffectPayload, Element
from robo_rumble.errors import BattleStateError, UnknownUnitError
from robo_rumble.sim.content.registry import ContentRegistry
from robo_rumble.sim.core.entities import CombatUnit, Stats, StatusEffect, UnitKind
from robo_rumble.sim.core.game_state import (
    ActionType,
    BattleAction,
    BattleStatus,
    EventType,
)
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.engine import BattleEngine
from robo_rumble.sim.mechanics.status_effects import effective_stats


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FixedRNG(GameRNG):
    """Deterministic rolls: a constant percent, the low end of every range."""

    def __init__(self, percent: float = 50.0) -> None:
        super().__init__(0)
        self._percent = percent

    def percent(self) -> float:
        return self._percent

    def random_int(self, low: int, high: int) -> int:
        return low

    def uniform(self, low: float, high: float) -> float:
        return low

    def random_float(self) -> float:
        return 0.999

    def random_choice(self, seq):
        return seq[0]


def _make_unit(
    unit_id: str,
    element: Element = Element.NEUTRAL,
    abilities: tuple[str, ...] = (),
    kind: UnitKind = UnitKind.PRIMARY,
    **stat_overrides,
) -> CombatUnit:
    stats = dict(hp=100, attack=50, defense=50, speed=50, energy=100, crit=0)
    stats.update(stat_overrides)
    return CombatUnit(
        id=unit_id,
        name=unit_id.title(),
        kind=kind,
        element=element,
        stats=Stats(**stats),
        abilities=abilities,
    )


def _make_engine(registry, strict: bool = True, seed: int = 42) -> BattleEngine:
    config = EngineConfig(turn_jitter=0, strict=strict)
    return BattleEngine(registry, config, seed=seed, clock=lambda: 0.0)


def _attack(source_id: str, target_id: str | None = None) -> BattleAction:
    return BattleAction(type=ActionType.ATTACK, source_id=source_id, target_id=target_id)


def _ability(source_id: str, ability_id: str, target_id: str | None = None) -> BattleAction:
    return BattleAction(
        type=ActionType.ABILITY,
        source_id=source_id,
        ability_id=ability_id,
        target_id=target_id,
    )


def _duel(registry, hero: CombatUnit, foe: CombatUnit, rng: GameRNG | None = None) -> BattleEngine:
    engine = _make_engine(registry)
    engine.initialize_battle([hero], [foe])
    if rng is not None:
        engine.get_state().rng = rng
    return engine


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

class TestInitialization:
    def test_battle_becomes_active(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle([_make_unit("hero", speed=60)], [_make_unit("foe")])
        assert state.status is BattleStatus.ACTIVE
        assert state.round == 1
        assert state.turn_order == ["hero", "foe"]
        assert engine.get_current_unit().id == "hero"
        assert state.seed == 42
        descriptions = [e.description for e in state.battle_log]
        assert "Battle initialized!" in descriptions
        assert descriptions[-1] == "=== TURN 1 ==="

    def test_unit_status_starts_full(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle([_make_unit("hero", hp=80, energy=60)], [_make_unit("foe")])
        status = state.unit_statuses["hero"]
        assert (status.current_hp, status.max_hp) == (80, 80)
        assert (status.current_energy, status.max_energy) == (60, 60)
        assert status.cooldowns == {}
        assert status.status_effects == []

    def test_element_advantage_logged(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle(
            [_make_unit("hero", Element.SURGE)], [_make_unit("foe", Element.METAL)]
        )
        element_events = [e for e in state.battle_log if e.type is EventType.ELEMENT]
        assert element_events[0].value == 1.5
        assert "advantage" in element_events[0].description

    def test_reinitialize_raises(self, registry):
        engine = _make_engine(registry)
        engine.initialize_battle([_make_unit("hero")], [_make_unit("foe")])
        with pytest.raises(BattleStateError):
            engine.initialize_battle([_make_unit("hero")], [_make_unit("foe")])

    def test_empty_roster_raises(self, registry):
        with pytest.raises(ValueError):
            _make_engine(registry).initialize_battle([], [_make_unit("foe")])

    def test_duplicate_ids_raise(self, registry):
        with pytest.raises(ValueError, match="Duplicate"):
            _make_engine(registry).initialize_battle([_make_unit("twin")], [_make_unit("twin")])

    def test_state_before_initialize_raises(self, registry):
        with pytest.raises(BattleStateError):
            _make_engine(registry).get_state()


# ---------------------------------------------------------------------------
# Companion bonus and element combos
# ---------------------------------------------------------------------------

class TestCompanionBonus:
    def test_paired_units_get_two_percent(self, registry):
        engine = _make_engine(registry)
        roboto = _make_unit("roboto-7", hp=100, attack=50, defense=50, speed=50, energy=100, crit=10)
        robopet = _make_unit(
            "robopet-7", Element.BOND, kind=UnitKind.COMPANION,
            hp=80, attack=40, defense=40, speed=40, energy=80, crit=5,
        )
        state = engine.initialize_battle([roboto, robopet], [_make_unit("foe")])

        boosted = state.get_unit("roboto-7")
        assert boosted.has_companion_bonus
        assert boosted.stats.as_dict() == dict(
            hp=102, attack=51, defense=51, speed=51, energy=102, crit=10
        )
        assert state.get_unit("robopet-7").stats.as_dict() == dict(
            hp=82, attack=41, defense=41, speed=41, energy=82, crit=5
        )
        assert state.unit_statuses["roboto-7"].max_hp == 102
        buffs = [e for e in state.battle_log if e.type is EventType.BUFF]
        assert {e.target for e in buffs} == {"roboto-7", "robopet-7"}

    def test_input_units_untouched(self, registry):
        roboto = _make_unit("roboto-7")
        robopet = _make_unit("robopet-7", kind=UnitKind.COMPANION)
        _make_engine(registry).initialize_battle([roboto, robopet], [_make_unit("foe")])
        assert roboto.stats.hp == 100
        assert not roboto.has_companion_bonus

    def test_pair_split_across_rosters_gets_nothing(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle(
            [_make_unit("roboto-7")],
            [_make_unit("robopet-7", kind=UnitKind.COMPANION)],
        )
        assert not state.get_unit("roboto-7").has_companion_bonus
        assert state.get_unit("roboto-7").stats.hp == 100

    def test_dual_combo_logged_but_not_applied(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle(
            [_make_unit("s1", Element.SURGE), _make_unit("s2", Element.SURGE)],
            [_make_unit("foe")],
        )
        assert any("Power Grid" in e.description for e in state.battle_log)
        assert state.get_unit("s1").stats.speed == 50


# ---------------------------------------------------------------------------
# Basic attacks
# ---------------------------------------------------------------------------

class TestBasicAttack:
    def test_super_effective_knockout(self, registry):
        hero = _make_unit("hero", Element.SURGE, attack=50, crit=0, speed=60)
        foe = _make_unit("foe", Element.METAL, defense=50, hp=40, speed=40)
        engine = _duel(registry, hero, foe)

        events = engine.execute_action(_attack("hero", "foe"))

        assert [e.type for e in events] == [EventType.DAMAGE, EventType.KO, EventType.SYSTEM]
        assert events[0].value == 75
        assert events[0].remaining_hp == 0
        assert events[0].hp_lost == 40
        assert "super effective" in events[0].description
        assert "Victory" in events[2].description
        assert engine.get_state().status is BattleStatus.VICTORY
        assert engine.get_current_unit() is None

    def test_attack_does_not_advance_turn(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        engine.execute_action(_attack("hero", "foe"))
        assert engine.get_current_unit().id == "hero"
        engine.next_turn()
        assert engine.get_current_unit().id == "foe"

    def test_critical_doubles(self, registry):
        hero = _make_unit("hero", crit=100, speed=60)
        foe = _make_unit("foe", hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))
        events = engine.execute_action(_attack("hero", "foe"))
        assert events[0].type is EventType.CRITICAL
        assert events[1].value == 100

    def test_timing_and_defense_bonus(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe", hp=500))
        action = BattleAction(
            type=ActionType.ATTACK,
            source_id="hero",
            target_id="foe",
            timing_bonus=2.0,
            defense_bonus=0.5,
        )
        events = engine.execute_action(action)
        assert events[-1].value == 50

    def test_missing_target_hits_first_living_enemy(self, registry):
        engine = _make_engine(registry)
        engine.initialize_battle(
            [_make_unit("hero", speed=60)],
            [_make_unit("foe1", hp=500), _make_unit("foe2", hp=500)],
        )
        events = engine.execute_action(_attack("hero"))
        assert events[-1].target == "foe1"

    def test_dead_target_is_reported(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle(
            [_make_unit("hero", speed=60)],
            [_make_unit("foe1"), _make_unit("foe2")],
        )
        state.unit_statuses["foe1"].take_damage(1000)
        events = engine.execute_action(_attack("hero", "foe1"))
        assert [e.type for e in events] == [EventType.SYSTEM]
        assert state.unit_statuses["foe2"].current_hp == 100
        assert state.action_history == []

    def test_switch_is_a_no_op(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        events = engine.execute_action(BattleAction(type=ActionType.SWITCH, source_id="hero"))
        assert [e.type for e in events] == [EventType.SYSTEM]
        assert engine.get_state().action_history[-1].type is ActionType.SWITCH


# ---------------------------------------------------------------------------
# Abilities
# ---------------------------------------------------------------------------

class TestAbilities:
    def test_damage_ability(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), speed=60)
        foe = _make_unit("foe", Element.METAL, hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))

        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))

        assert events[0].type is EventType.ABILITY
        damage = next(e for e in events if e.type is EventType.DAMAGE)
        assert damage.value == 50
        state = engine.get_state()
        # 100 - 10 spent + 20 regenerated at end of turn, capped
        assert state.unit_statuses["hero"].current_energy == 100
        assert engine.get_current_unit().id == "foe"

    def test_critical_ability(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), crit=100, speed=60)
        foe = _make_unit("foe", Element.METAL, hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))
        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))
        assert EventType.CRITICAL in [e.type for e in events]
        assert next(e for e in events if e.type is EventType.DAMAGE).value == 75

    def test_miss(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), speed=60)
        foe = _make_unit("foe", hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=99))
        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))
        assert EventType.MISS in [e.type for e in events]
        assert engine.get_state().unit_statuses["foe"].current_hp == 500

    def test_power_range_rolled(self, registry):
        hero = _make_unit("hero", Element.GLITCH, ("chaos_strike",), speed=60)
        foe = _make_unit("foe", hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))
        events = engine.execute_action(_ability("hero", "chaos_strike", "foe"))
        # low end of 20-60: 20 * (1 - 50/150 * 0.5) = 16.67
        assert next(e for e in events if e.type is EventType.DAMAGE).value == 17

    def test_secondary_effect_attached(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("electron_overload",), speed=60)
        foe = _make_unit("foe", Element.METAL, hp=500)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))
        engine.execute_action(_ability("hero", "electron_overload"))
        effects = engine.get_state().unit_statuses["foe"].status_effects
        assert [e.id for e in effects] == ["shocked"]

    def test_heal(self, registry):
        hero = _make_unit("hero", abilities=("halo_restore",), speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        engine.get_state().unit_statuses["hero"].current_hp = 50
        events = engine.execute_action(_ability("hero", "halo_restore"))
        heal = next(e for e in events if e.type is EventType.HEAL)
        assert heal.value == 40
        assert engine.get_state().unit_statuses["hero"].current_hp == 90

    def test_debuff_lowers_effective_defense(self, registry):
        hero = _make_unit("hero", Element.CODE, ("hally_scan",), speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        engine.execute_action(_ability("hero", "hally_scan", "foe"))
        effects = engine.get_state().unit_statuses["foe"].status_effects
        assert effects[0].id == "hally_scan"
        assert not effects[0].positive
        assert effective_stats(engine.get_state(), "foe").defense == 35

    def test_debuff_blocked_by_immunity(self, registry):
        hero = _make_unit("hero", Element.CODE, ("hally_scan",), speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        foe_status = engine.get_state().unit_statuses["foe"]
        foe_status.status_effects.append(
            StatusEffect(
                id="golden_aegis",
                name="Golden Aegis",
                element=Element.METAL,
                duration=3,
                effect=EffectPayload(debuff_immunity=True, positive=True),
            )
        )
        events = engine.execute_action(_ability("hero", "hally_scan", "foe"))
        assert any("protected" in e.description for e in events)
        assert [e.id for e in foe_status.status_effects] == ["golden_aegis"]

    def test_cleanse(self, registry):
        hero = _make_unit("hero", abilities=("system_reboot",), speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        hero_status = engine.get_state().unit_statuses["hero"]
        hero_status.status_effects.append(
            StatusEffect(id="hacked", name="Hacked", duration=3, effect=EffectPayload())
        )
        engine.execute_action(_ability("hero", "system_reboot"))
        assert hero_status.status_effects == []

    def test_field_effect(self, registry):
        hero = _make_unit("hero", Element.GLITCH, ("chaos_field",), speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        events = engine.execute_action(_ability("hero", "chaos_field"))
        assert EventType.ELEMENT in [e.type for e in events]
        fields = engine.get_state().field_effects
        assert [f.id for f in fields] == ["chaos_field"]
        assert fields[0].effect.random_stat_changes


class TestDefaultAccuracy:
    def _make_engine(self, default_accuracy: int) -> BattleEngine:
        registry = ContentRegistry().load_all()
        volt = registry.abilities["volt_strike"]
        registry.abilities["volt_strike"] = volt.model_copy(update={"accuracy": None})
        config = EngineConfig(turn_jitter=0, default_accuracy=default_accuracy)
        engine = BattleEngine(registry, config, seed=1, clock=lambda: 0.0)
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), speed=60)
        engine.initialize_battle([hero], [_make_unit("foe", hp=500)])
        engine.get_state().rng = _FixedRNG(percent=50)
        return engine

    def test_missing_accuracy_uses_config(self):
        engine = self._make_engine(default_accuracy=40)
        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))
        assert EventType.MISS in [e.type for e in events]
        assert engine.get_state().unit_statuses["foe"].current_hp == 500

    def test_config_accuracy_can_hit(self):
        engine = self._make_engine(default_accuracy=100)
        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))
        assert EventType.DAMAGE in [e.type for e in events]


# ---------------------------------------------------------------------------
# Rejections and cooldowns
# ---------------------------------------------------------------------------

class TestAbilityRules:
    def test_cooldowns_tick_only_on_owners_turn(self, registry):
        hero = _make_unit("hero", Element.CODE, ("hally_scan",), hp=1000, speed=100)
        foe = _make_unit("foe", hp=500, attack=20, speed=10)
        engine = _duel(registry, hero, foe)
        hero_status = engine.get_state().unit_statuses["hero"]

        engine.execute_action(_ability("hero", "hally_scan", "foe"))
        assert hero_status.cooldowns["hally_scan"] == 2
        assert not engine.can_use_ability("hero", "hally_scan")

        # the opponent closing its turn leaves the hero's cooldown alone
        engine.execute_action(_attack("foe", "hero"))
        engine.next_turn()
        assert hero_status.cooldowns["hally_scan"] == 2

        engine.execute_action(_attack("hero", "foe"))
        engine.next_turn()
        assert hero_status.cooldowns["hally_scan"] == 1

        engine.execute_action(_attack("foe", "hero"))
        engine.next_turn()
        engine.execute_action(_attack("hero", "foe"))
        engine.next_turn()
        assert "hally_scan" not in hero_status.cooldowns
        assert engine.can_use_ability("hero", "hally_scan")

    def test_rejection_changes_nothing(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), energy=5, speed=60)
        engine = _duel(registry, hero, _make_unit("foe"))
        state = engine.get_state()

        events = engine.execute_action(_ability("hero", "volt_strike", "foe"))

        assert [e.type for e in events] == [EventType.ABILITY]
        assert "not enough energy" in events[0].description
        assert state.unit_statuses["hero"].current_energy == 5
        assert state.unit_statuses["hero"].cooldowns == {}
        assert state.unit_statuses["foe"].current_hp == 100
        assert engine.get_current_unit().id == "hero"
        assert state.action_history == []

    def test_unowned_ability_rejected(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        events = engine.execute_action(_ability("hero", "boom_detonate", "foe"))
        assert "doesn't know" in events[0].description

    def test_unknown_ability_rejected(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        events = engine.execute_action(_ability("hero", "does_not_exist"))
        assert [e.type for e in events] == [EventType.ABILITY]
        assert engine.get_state().action_history == []

    def test_only_resolved_actions_are_recorded(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike",), energy=5, speed=60)
        engine = _duel(registry, hero, _make_unit("foe", hp=500))
        state = engine.get_state()

        engine.execute_action(_ability("hero", "volt_strike", "foe"))
        engine.execute_action(_ability("hero", "volt_strike", "foe"))
        engine.execute_action(_attack("hero", "foe"))

        assert [a.type for a in state.action_history] == [ActionType.ATTACK]

    def test_once_per_battle(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("boom_detonate",), energy=200, speed=60)
        foe = _make_unit("foe", hp=5000, attack=10)
        engine = _duel(registry, hero, foe, rng=_FixedRNG(percent=50))
        hero_status = engine.get_state().unit_statuses["hero"]

        engine.execute_action(_ability("hero", "boom_detonate"))
        for _ in range(3):
            engine.execute_action(_attack("foe", "hero"))
            engine.next_turn()
            engine.execute_action(_attack("hero", "foe"))
            engine.next_turn()

        assert hero_status.cooldowns["boom_detonate"] == 999
        assert not engine.can_use_ability("hero", "boom_detonate")
        events = engine.execute_action(_ability("hero", "boom_detonate"))
        assert "once per battle" in events[0].description

    def test_available_abilities(self, registry):
        hero = _make_unit("hero", Element.SURGE, ("volt_strike", "boom_detonate", "ghost"), energy=30)
        engine = _duel(registry, hero, _make_unit("foe"))
        available = {a.id: a.usable for a in engine.get_available_abilities("hero")}
        assert available == {"volt_strike": True, "boom_detonate": False}


# ---------------------------------------------------------------------------
# Turn advance
# ---------------------------------------------------------------------------

class TestNextTurn:
    def test_round_wraps_and_logs(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        engine.next_turn()
        events = engine.next_turn()
        state = engine.get_state()
        assert state.round == 2
        assert events[-1].description == "=== TURN 2 ==="
        assert engine.get_current_unit().id == "hero"

    def test_dead_units_skipped(self, registry):
        engine = _make_engine(registry)
        state = engine.initialize_battle(
            [_make_unit("hero", speed=90)],
            [_make_unit("foe1", speed=60), _make_unit("foe2", speed=30)],
        )
        state.unit_statuses["foe1"].take_damage(1000)
        engine.next_turn()
        assert engine.get_current_unit().id == "foe2"

    def test_energy_regenerates_for_acting_unit(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        state = engine.get_state()
        state.unit_statuses["hero"].current_energy = 10
        state.unit_statuses["foe"].current_energy = 10
        engine.next_turn()
        assert state.unit_statuses["hero"].current_energy == 30
        assert state.unit_statuses["foe"].current_energy == 10

    def test_paralysis_is_not_enforced(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        state = engine.get_state()
        state.rng = _FixedRNG()
        state.unit_statuses["foe"].status_effects.append(
            StatusEffect(
                id="shocked",
                name="Shocked",
                element=Element.SURGE,
                duration=2,
                effect=EffectPayload(skip_turn_chance=1.0),
            )
        )
        events = engine.next_turn()
        assert any("paralyzed" in e.description for e in events)
        assert engine.get_current_unit().id == "foe"


# ---------------------------------------------------------------------------
# Programmer errors
# ---------------------------------------------------------------------------

class TestProgrammerErrors:
    def _finished(self, registry, strict: bool) -> BattleEngine:
        engine = _make_engine(registry, strict=strict)
        engine.initialize_battle(
            [_make_unit("hero", Element.SURGE, speed=60)],
            [_make_unit("foe", Element.METAL, hp=10)],
        )
        engine.execute_action(_attack("hero", "foe"))
        return engine

    def test_action_after_end_raises_when_strict(self, registry):
        engine = self._finished(registry, strict=True)
        with pytest.raises(BattleStateError):
            engine.execute_action(_attack("hero", "foe"))

    def test_action_after_end_ignored_when_lenient(self, registry, caplog):
        engine = self._finished(registry, strict=False)
        log_size = len(engine.get_state().battle_log)
        with caplog.at_level(logging.WARNING):
            assert engine.execute_action(_attack("hero", "foe")) == []
        assert "Ignoring invalid engine call" in caplog.text
        assert len(engine.get_state().battle_log) == log_size

    def test_next_turn_after_end_is_no_op(self, registry):
        engine = self._finished(registry, strict=True)
        assert engine.next_turn() == []

    def test_unknown_unit(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        with pytest.raises(UnknownUnitError):
            engine.execute_action(_attack("hero", "nobody"))

    def test_validate_action(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        assert engine.validate_action(_attack("hero", "foe"))
        assert not engine.validate_action(_attack("foe", "hero"))
        assert not engine.validate_action(_attack("hero", "nobody"))

    def test_ai_turn_skips_player_units(self, registry):
        engine = _duel(registry, _make_unit("hero", speed=60), _make_unit("foe"))
        assert engine.execute_ai_turn() == []
        engine.next_turn()
        events = engine.execute_ai_turn()
        assert events
        assert events[0].source == "foe"


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------

class TestReplay:
    def _play(self, registry, seed: int) -> BattleEngine:
        engine = _make_engine(registry, seed=seed)
        engine.initialize_battle(
            [_make_unit("hero", Element.GLITCH, ("chaos_strike",), crit=30)],
            [_make_unit("foe", Element.SURGE, ("volt_strike",), crit=30, hp=300)],
        )
        for _ in range(4):
            if engine.get_state().is_over:
                break
            unit = engine.get_current_unit()
            if unit.id == "hero":
                engine.execute_action(_ability("hero", "chaos_strike", "foe"))
            else:
                engine.execute_ai_turn()
                if engine.get_current_unit() is not None and engine.get_current_unit().id == "foe":
                    engine.next_turn()
        return engine

    def test_same_seed_same_log(self, registry):
        first = self._play(registry, seed=1234)
        second = self._play(registry, seed=1234)
        assert [(e.description, e.value) for e in first.get_state().battle_log] == [
            (e.description, e.value) for e in second.get_state().battle_log
        ]
        assert first.get_state().action_history == second.get_state().action_history
