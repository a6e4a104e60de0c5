"""Play agent implementations for headless battle simulation.

Re-exports the base class and all concrete agent implementations so
consumers can do::

    from robo_rumble.sim.play_agents import PlayAgent, HeuristicAgent
"""

from .base import PlayAgent
from .heuristic_agent import HeuristicAgent
from .random_agent import RandomAgent

__all__ = ["PlayAgent", "HeuristicAgent", "RandomAgent"]
