#!/usr/bin/env python3
"""Run a battle (or a seeded batch of battles) from the command line.

Usage:
    uv run python scripts/simulate_battle.py                       # built-in sample teams
    uv run python scripts/simulate_battle.py --seed 7 --log-level DEBUG
    uv run python scripts/simulate_battle.py --team-a mine.json --team-b theirs.json --runs 200

A team file is a JSON list of token metadata objects (``tokenId``,
``name``, ``attributes``).  Add ``"kind": "robopet"`` to an entry to
build it as a companion.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from robo_rumble.sim.core.entities import CombatUnit
from robo_rumble.sim.play_agents import HeuristicAgent, RandomAgent
from robo_rumble.sim.core.rng import GameRNG
from robo_rumble.sim.runner import BatchRunner, CombatSimulator
from robo_rumble.sim.telemetry import BatchSummary
from robo_rumble.traits import TraitProcessor

_AGENTS = {"heuristic": HeuristicAgent, "random": RandomAgent}

_SAMPLE_TEAM_A: list[dict[str, Any]] = [
    {
        "tokenId": 101,
        "name": "Sparky",
        "attributes": [
            {"trait_type": "Robot Type", "value": "Roboto"},
            {"trait_type": "Backpack", "value": "Electron Battery"},
            {"trait_type": "Eyes", "value": "Straight Visor"},
            {"trait_type": "Body", "value": "Small Top with EKG"},
        ],
    },
    {
        "tokenId": 101,
        "kind": "robopet",
        "name": "Bolt",
        "attributes": [{"trait_type": "Robopet Type", "value": "Robodog"}],
    },
]

_SAMPLE_TEAM_B: list[dict[str, Any]] = [
    {
        "tokenId": 202,
        "name": "Tank",
        "attributes": [
            {"trait_type": "Robot Type", "value": "Roboto Robodad"},
            {"trait_type": "Backpack", "value": "Katanas"},
            {"trait_type": "Arm", "value": "Armor"},
        ],
    },
    {
        "tokenId": 203,
        "name": "Hex",
        "attributes": [
            {"trait_type": "Robot Type", "value": "Roboto Computo"},
            {"trait_type": "Eyes", "value": "Hally"},
        ],
    },
]


def _load_team(path: Path | None, fallback: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if path is None:
        return fallback
    with open(path) as f:
        return json.load(f)


def _build_units(processor: TraitProcessor, entries: list[dict[str, Any]]) -> list[CombatUnit]:
    units = []
    for entry in entries:
        if entry.get("kind") == "robopet":
            units.append(processor.process_companion(entry))
        else:
            units.append(processor.process_primary(entry))
    return units


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate Roboto battles.")
    parser.add_argument("--team-a", type=Path, default=None, help="JSON team file for the player side")
    parser.add_argument("--team-b", type=Path, default=None, help="JSON team file for the opponent side")
    parser.add_argument("--seed", type=int, default=42, help="Seed (base seed for batches)")
    parser.add_argument("--runs", type=int, default=1, help="Number of battles to simulate")
    parser.add_argument("--agent", choices=sorted(_AGENTS), default="heuristic", help="Agent for team A")
    parser.add_argument("--opponent", choices=sorted(_AGENTS), default="heuristic", help="Agent for team B")
    parser.add_argument("--parallel", action="store_true", default=False, help="Use multiprocessing for batches")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    processor = TraitProcessor()
    team_a = _build_units(processor, _load_team(args.team_a, _SAMPLE_TEAM_A))
    team_b = _build_units(processor, _load_team(args.team_b, _SAMPLE_TEAM_B))

    for label, team in (("Team A", team_a), ("Team B", team_b)):
        print(f"{label}:")
        for unit in team:
            s = unit.stats
            print(
                f"  {unit.name:<14} {unit.element.value:<8} "
                f"hp={s.hp} atk={s.attack} def={s.defense} spd={s.speed} "
                f"nrg={s.energy} crit={s.crit}  {', '.join(unit.abilities)}"
            )

    if args.runs <= 1:
        root = GameRNG(args.seed)
        simulator = CombatSimulator(
            _AGENTS[args.agent](root.fork("agent_a")),
            _AGENTS[args.opponent](root.fork("agent_b")),
        )
        engine, telemetry = simulator.run_battle(team_a, team_b, args.seed)
        print()
        for event in engine.get_state().battle_log:
            print(f"[{event.type.value:>8}] {event.description}")
        print(f"\nResult: {telemetry.result} after {telemetry.rounds} rounds")
        return

    runner = BatchRunner(agent_class=_AGENTS[args.agent], opponent_class=_AGENTS[args.opponent])
    results = runner.run_batch(team_a, team_b, args.runs, base_seed=args.seed, parallel=args.parallel)
    summary = BatchSummary.from_results(results)
    print(f"\n{summary.battles} battles (seeds {args.seed}..{args.seed + args.runs - 1})")
    print(f"  win rate:     {summary.win_rate:.1%}")
    print(f"  defeats:      {summary.defeats}")
    print(f"  timeouts:     {summary.timeouts}")
    print(f"  mean rounds:  {summary.mean_rounds:.1f}")
    print(f"  mean damage:  A {summary.mean_damage_by_a:.0f} / B {summary.mean_damage_by_b:.0f}")


if __name__ == "__main__":
    main()
