"""Random action agent -- picks legal plays uniformly at random.

The ``RandomAgent`` is the simplest possible play agent.  It is the
baseline for batch simulation runs: it exercises the full combat loop
end-to-end and gives a lower bound for how a roster performs.

Behaviour:
    - Each time the agent is asked to act, there is a 10 % chance it
      ends the turn early (simulating "pass").
    - Otherwise it picks a random legal (card, target) play.
    - With nothing affordable it ends the turn.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beastdeck.sim.core.actions import EndTurn
from beastdeck.sim.core.rng import GameRNG
from beastdeck.sim.play_agents.base import PlayAgent, legal_plays

if TYPE_CHECKING:
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.actions import Action
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState


class RandomAgent(PlayAgent):
    """Agent that plays random legal cards each turn.

    Parameters
    ----------
    registry:
        Content registry used to resolve the cards in hand.
    rng:
        Seeded RNG for deterministic randomness.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    end_turn_chance:
        Probability (0.0 -- 1.0) that the agent voluntarily ends the turn
        instead of playing another card.  Default is 0.10 (10 %).
    """

    def __init__(
        self,
        registry: ContentRegistry,
        rng: GameRNG | None = None,
        end_turn_chance: float = 0.10,
    ) -> None:
        self.registry = registry
        self._rng = rng or GameRNG(seed=0)
        self._end_turn_chance = end_turn_chance

    def choose_action(self, state: CombatState, combatant: Combatant) -> Action:
        """Pick a random legal play, with a chance to end the turn early."""
        plays = legal_plays(state, combatant, self.registry)
        if not plays:
            return EndTurn()

        if self._rng.random_float() < self._end_turn_chance:
            return EndTurn()

        return self._rng.random_choice(plays).action
