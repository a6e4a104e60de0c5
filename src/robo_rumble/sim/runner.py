"""Battle simulation runner -- ties the engine, agents and telemetry together.

Provides two key classes:

- **CombatSimulator**: Auto-plays a single battle with an agent per side.
- **BatchRunner**: Orchestrates many seeded battles (optionally in parallel).
"""

from __future__ import annotations

import inspect
import logging
import multiprocessing
from collections import Counter
from typing import TYPE_CHECKING, Sequence

from robo_rumble.config import DEFAULT_CONFIG, EngineConfig
from robo_rumble.sim.content.registry import default_registry
from robo_rumble.sim.core.game_state import ActionType, BattleStatus, EventType
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.engine import BattleEngine
from robo_rumble.sim.play_agents.base import PlayAgent
from robo_rumble.sim.play_agents.heuristic_agent import HeuristicAgent
from robo_rumble.sim.telemetry import BattleTelemetry

if TYPE_CHECKING:
    from robo_rumble.sim.content.registry import ContentRegistry
    from robo_rumble.sim.core.entities import CombatUnit

logger = logging.getLogger(__name__)

_MAX_ACTIONS = 500


# =====================================================================
# CombatSimulator
# =====================================================================

class CombatSimulator:
    """Runs a single battle to completion with one agent per side.

    Parameters
    ----------
    agent_a / agent_b:
        Agents controlling ``roster_a`` and ``roster_b``.
    registry / config:
        Passed through to the :class:`BattleEngine`.
    """

    def __init__(
        self,
        agent_a: PlayAgent,
        agent_b: PlayAgent,
        registry: ContentRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.agent_a = agent_a
        self.agent_b = agent_b
        self.registry = registry or default_registry()
        self.config = config or DEFAULT_CONFIG

    def run_battle(
        self,
        roster_a: Sequence[CombatUnit],
        roster_b: Sequence[CombatUnit],
        seed: int,
    ) -> tuple[BattleEngine, BattleTelemetry]:
        """Play one battle and return the finished engine and its telemetry.

        Whenever an action leaves the turn cursor where it was (basic
        attacks, rejected abilities) the simulator advances the turn
        itself, as a presentation layer would.
        """
        engine = BattleEngine(self.registry, self.config, seed=seed)
        state = engine.initialize_battle(roster_a, roster_b)

        actions = 0
        while state.status is BattleStatus.ACTIVE and actions < _MAX_ACTIONS:
            unit = engine.get_current_unit()
            if unit is None:
                break
            agent = self.agent_a if state.side_of(unit.id) == "a" else self.agent_b
            action = agent.choose_action(engine, unit.id)
            cursor = (state.round, state.turn_index)
            engine.execute_action(action)
            actions += 1
            if state.status is BattleStatus.ACTIVE and cursor == (state.round, state.turn_index):
                engine.next_turn()

        if state.status is BattleStatus.ACTIVE:
            logger.warning("Battle with seed %d hit the %d action limit", seed, _MAX_ACTIONS)
        return engine, _collect_telemetry(engine, seed, actions)


def _collect_telemetry(engine: BattleEngine, seed: int, actions: int) -> BattleTelemetry:
    state = engine.get_state()
    side_of = {u.id: "a" for u in state.roster_a}
    side_of.update({u.id: "b" for u in state.roster_b})

    damage = {"a": 0, "b": 0}
    for event in state.battle_log:
        if event.type is EventType.DAMAGE and event.source in side_of and event.hp_lost:
            damage[side_of[event.source]] += event.hp_lost

    abilities = Counter(
        a.ability_id for a in state.action_history
        if a.type is ActionType.ABILITY and a.ability_id
    )
    result = state.status.value if state.is_over else "timeout"
    return BattleTelemetry(
        seed=seed,
        result=result,
        rounds=state.round,
        actions=actions,
        damage_by_a=damage["a"],
        damage_by_b=damage["b"],
        survivors_a=len(state.living(state.roster_a)),
        survivors_b=len(state.living(state.roster_b)),
        abilities_used=dict(abilities),
        knockouts=sum(e.type is EventType.KO for e in state.battle_log),
    )


# =====================================================================
# BatchRunner
# =====================================================================

def _accepts_rng(agent_class: type[PlayAgent]) -> bool:
    params = inspect.signature(agent_class).parameters.values()
    return any(p.name == "rng" or p.kind is inspect.Parameter.VAR_KEYWORD for p in params)


def _make_agent(agent_class: type[PlayAgent], rng: GameRNG) -> PlayAgent:
    """Instantiate an agent, passing *rng* when its constructor takes one."""
    if _accepts_rng(agent_class):
        return agent_class(rng=rng)  # type: ignore[call-arg]
    return agent_class()


def _run_single(
    registry: ContentRegistry,
    config: EngineConfig,
    agent_class: type[PlayAgent],
    opponent_class: type[PlayAgent],
    roster_a: Sequence[CombatUnit],
    roster_b: Sequence[CombatUnit],
    seed: int,
) -> BattleTelemetry:
    root = GameRNG(seed)
    simulator = CombatSimulator(
        _make_agent(agent_class, root.fork("agent_a")),
        _make_agent(opponent_class, root.fork("agent_b")),
        registry=registry,
        config=config,
    )
    _, telemetry = simulator.run_battle(roster_a, roster_b, seed)
    return telemetry


def _worker_run_single(args: tuple) -> BattleTelemetry:
    return _run_single(*args)


class BatchRunner:
    """Runs many seeded battles between two fixed rosters.

    Parameters
    ----------
    registry:
        Content tables.  Defaults to the bundled ones.
    agent_class:
        Agent for ``roster_a``.  Constructed with ``rng=`` when it accepts one.
    opponent_class:
        Agent for ``roster_b``.  Defaults to *agent_class*.
    config:
        Engine constants.
    """

    def __init__(
        self,
        registry: ContentRegistry | None = None,
        agent_class: type[PlayAgent] = HeuristicAgent,
        opponent_class: type[PlayAgent] | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.agent_class = agent_class
        self.opponent_class = opponent_class or agent_class
        self.config = config or DEFAULT_CONFIG

    def run_batch(
        self,
        roster_a: Sequence[CombatUnit],
        roster_b: Sequence[CombatUnit],
        n_runs: int,
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[BattleTelemetry]:
        """Run *n_runs* battles with seeds ``base_seed .. base_seed + n_runs - 1``."""
        seeds = [base_seed + i for i in range(n_runs)]
        work_items = [
            (
                self.registry,
                self.config,
                self.agent_class,
                self.opponent_class,
                list(roster_a),
                list(roster_b),
                seed,
            )
            for seed in seeds
        ]

        if parallel and n_runs > 1:
            n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)
            with multiprocessing.Pool(processes=n_workers) as pool:
                return pool.map(_worker_run_single, work_items)
        return [_run_single(*item) for item in work_items]
