"""Base class for agents that play battles.

The engine's AI turn and the :class:`CombatSimulator` ask an agent for
one :class:`BattleAction` whenever a unit it controls is up.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from robo_rumble.sim.core.game_state import BattleAction
    from robo_rumble.sim.engine import BattleEngine


class PlayAgent(ABC):
    """Base class for battle-playing agents."""

    @abstractmethod
    def choose_action(self, engine: BattleEngine, unit_id: str) -> BattleAction:
        """Choose the action for *unit_id*, whose turn it is.

        Parameters
        ----------
        engine:
            The running engine.  Agents may read its state and query
            ability availability, but must not mutate anything.
        unit_id:
            The acting unit.

        Returns
        -------
        BattleAction
            A basic attack or an ability use sourced from *unit_id*.
        """
