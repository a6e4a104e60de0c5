"""Telemetry data models for per-battle and per-batch statistics.

These lightweight dataclasses capture what is needed to compare rosters
and balance changes without keeping every battle log around:

- **BattleTelemetry**: outcome, rounds, damage per side, abilities used.
- **BatchSummary**: aggregate win rate and battle length over many seeds.

Both are plain ``dataclass`` instances (not Pydantic models) to keep
collection cheap during batch runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BattleTelemetry:
    """Stats from a single battle.

    Attributes
    ----------
    seed:
        The engine seed used for this battle.
    result:
        ``"victory"`` / ``"defeat"`` from roster A's point of view, or
        ``"timeout"`` if the action limit was hit.
    rounds:
        Round counter when the battle ended.
    actions:
        Number of actions submitted.
    damage_by_a / damage_by_b:
        Total HP removed by each side's units.
    survivors_a / survivors_b:
        Living units per side at the end.
    abilities_used:
        ``ability_id -> uses`` across both sides.
    knockouts:
        Number of KO events.
    """

    seed: int
    result: str
    rounds: int
    actions: int
    damage_by_a: int = 0
    damage_by_b: int = 0
    survivors_a: int = 0
    survivors_b: int = 0
    abilities_used: dict[str, int] = field(default_factory=dict)
    knockouts: int = 0


@dataclass
class BatchSummary:
    """Aggregate over a list of :class:`BattleTelemetry`."""

    battles: int = 0
    victories: int = 0
    defeats: int = 0
    timeouts: int = 0
    mean_rounds: float = 0.0
    mean_damage_by_a: float = 0.0
    mean_damage_by_b: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.victories / self.battles if self.battles else 0.0

    @classmethod
    def from_results(cls, results: list[BattleTelemetry]) -> BatchSummary:
        n = len(results)
        if n == 0:
            return cls()
        return cls(
            battles=n,
            victories=sum(r.result == "victory" for r in results),
            defeats=sum(r.result == "defeat" for r in results),
            timeouts=sum(r.result == "timeout" for r in results),
            mean_rounds=sum(r.rounds for r in results) / n,
            mean_damage_by_a=sum(r.damage_by_a for r in results) / n,
            mean_damage_by_b=sum(r.damage_by_b for r in results) / n,
        )
