"""Base class for agents that pilot one side of a battle.

All play agents subclass ``PlayAgent`` and implement
:meth:`PlayAgent.choose_action`.  The simulator asks the agent for one
action at a time until it ends the turn or the battle is decided.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from beastdeck.sim.core.actions import PlayCard
from beastdeck.sim.mechanics.energy import effective_cost
from beastdeck.sim.mechanics.targeting import (
    requires_target_selection,
    resolve_targets,
    valid_targets,
)

if TYPE_CHECKING:
    from beastdeck.ir.cards import MoveDefinition
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.actions import Action
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState


@dataclass
class CandidatePlay:
    """A legal card play together with the units it would affect."""

    action: PlayCard
    move: MoveDefinition
    cost: int
    targets: list[Combatant] = field(default_factory=list)

    @property
    def hand_index(self) -> int:
        return self.action.card_index


def legal_plays(
    state: CombatState, combatant: Combatant, registry: ContentRegistry
) -> list[CandidatePlay]:
    """Every affordable play with a legal target set, in hand order.

    Moves that need a manual selection yield one candidate per distinct
    resolved target set, in valid-target order.
    """
    plays: list[CandidatePlay] = []
    for index, move_id in enumerate(combatant.hand):
        move = registry.require_move(move_id)
        cost = effective_cost(combatant, move, index)
        if cost > combatant.energy:
            continue

        if not requires_target_selection(state, combatant, move):
            targets = resolve_targets(state, combatant, move)
            if targets is not None:
                plays.append(CandidatePlay(PlayCard(card_index=index), move, cost, targets))
            continue

        seen: set[tuple[str, ...]] = set()
        for candidate in valid_targets(state, combatant, move):
            targets = resolve_targets(state, combatant, move, candidate.id)
            if targets is None:
                continue
            key = tuple(t.id for t in targets)
            if key in seen:
                continue
            seen.add(key)
            plays.append(CandidatePlay(
                PlayCard(card_index=index, target_id=candidate.id), move, cost, targets,
            ))
    return plays


class PlayAgent(ABC):
    """Base class for battle agents."""

    @abstractmethod
    def choose_action(self, state: CombatState, combatant: Combatant) -> Action:
        """Choose the next action for *combatant*, whose turn it is.

        Parameters
        ----------
        state:
            The current combat state, giving the agent full observability.
        combatant:
            The acting unit.

        Returns
        -------
        PlayCard | EndTurn
            A legal card play, or ``EndTurn`` when the agent is done.
        """
