"""Play agent implementations for headless combat simulation.

Re-exports the base class and all concrete agent implementations so
consumers can do::

    from beastdeck.sim.play_agents import HeuristicAgent, RandomAgent
"""

from .base import CandidatePlay, PlayAgent, legal_plays
from .heuristic_agent import LETHAL_BONUS, HeuristicAgent
from .random_agent import RandomAgent

__all__ = [
    "CandidatePlay",
    "PlayAgent",
    "legal_plays",
    "HeuristicAgent",
    "LETHAL_BONUS",
    "RandomAgent",
]
