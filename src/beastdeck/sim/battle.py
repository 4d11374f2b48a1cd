"""Battle session -- builds a combat state and accepts driver actions.

:func:`create_combat_state` turns roster entries into combatants on their
grid positions.  :class:`Battle` wraps the resulting state together with
the interpreter and scheduler and implements the inbound action contract:
every :class:`~beastdeck.sim.core.actions.PlayCard`,
:class:`~beastdeck.sim.core.actions.SwitchPosition` or
:class:`~beastdeck.sim.core.actions.EndTurn` goes through
:meth:`Battle.submit` and comes back as an
:class:`~beastdeck.sim.core.actions.ActionResult`.

Usage::

    registry = ContentRegistry.default()
    battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=7)
    result = battle.submit(PlayCard(card_index=0))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence, Union

from beastdeck.ir.roster import CreatureDefinition
from beastdeck.sim import passives
from beastdeck.sim.core.actions import (
    Action,
    ActionResult,
    EndTurn,
    PlayCard,
    SwitchPosition,
)
from beastdeck.sim.core.entities import Combatant, Position, Side
from beastdeck.sim.core.game_state import CombatState
from beastdeck.sim.core.rng import GameRNG
from beastdeck.sim.interpreter import CardInterpreter
from beastdeck.sim.mechanics.card_piles import shuffle_cards
from beastdeck.sim.mechanics.formation import switch_position
from beastdeck.sim.mechanics.targeting import assign_party_positions
from beastdeck.sim.scheduler import TurnScheduler

if TYPE_CHECKING:
    from beastdeck.sim.content.registry import ContentRegistry

logger = logging.getLogger(__name__)

RosterEntry = Union[str, CreatureDefinition]
"""A creature id resolved through the registry, or an inline definition."""


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _resolve_creature(registry: ContentRegistry, entry: RosterEntry) -> CreatureDefinition:
    if isinstance(entry, CreatureDefinition):
        return entry
    return registry.require_creature(entry)


def build_combatant(
    registry: ContentRegistry,
    creature: CreatureDefinition,
    *,
    combatant_id: str,
    side: Side,
    slot: int,
    position: Position,
) -> Combatant:
    """Build one combatant from roster data.

    Every deck entry must name a known move and every passive id must be
    registered.

    Raises
    ------
    UnknownMoveError, UnknownPassiveError
        On a dangling content reference.
    """
    for move_id in creature.deck:
        registry.require_move(move_id)

    combatant = Combatant(
        id=combatant_id,
        name=creature.name,
        creature_id=creature.id,
        types=list(creature.types),
        side=side,
        slot=slot,
        position=position,
        max_hp=creature.max_hp,
        hp=creature.max_hp,
        base_speed=creature.base_speed,
        energy_per_turn=creature.energy_per_turn,
        energy_cap=creature.energy_cap,
        hand_size=creature.hand_size,
        draw_pile=list(creature.deck),
        passive_ids=list(creature.passives),
    )
    passives.validate_passive_ids(combatant)
    return combatant


def create_combat_state(
    registry: ContentRegistry,
    allies: Sequence[RosterEntry],
    opponents: Sequence[RosterEntry],
    *,
    seed: int = 0,
    ally_positions: Sequence[Position] | None = None,
    opponent_positions: Sequence[Position] | None = None,
) -> CombatState:
    """Assemble a fresh :class:`CombatState` ready for ``start_battle``.

    Parameters
    ----------
    registry:
        Resolves creature ids and validates deck references.
    allies, opponents:
        Creature ids or inline :class:`CreatureDefinition` objects, in
        slot order.
    seed:
        Battle seed; deck shuffles draw from its ``"deck"`` fork.
    ally_positions, opponent_positions:
        Explicit grid positions, one per unit.  Defaults to
        :func:`assign_party_positions`.

    Combatant ids are ``"<creature_id>-<n>"`` with *n* counting across both
    sides, allies first.
    """
    rng = GameRNG(seed).fork("deck")
    combatants: list[Combatant] = []

    for side, entries, positions in (
        (Side.ALLY, allies, ally_positions),
        (Side.OPPONENT, opponents, opponent_positions),
    ):
        if positions is None:
            positions = assign_party_positions(len(entries))
        if len(positions) != len(entries):
            raise ValueError(
                f"{side.value} side has {len(entries)} units but "
                f"{len(positions)} positions"
            )
        if len(set(positions)) != len(positions):
            raise ValueError(f"{side.value} side has overlapping positions")

        for slot, (entry, position) in enumerate(zip(entries, positions)):
            creature = _resolve_creature(registry, entry)
            combatant = build_combatant(
                registry,
                creature,
                combatant_id=f"{creature.id}-{len(combatants)}",
                side=side,
                slot=slot,
                position=position,
            )
            shuffle_cards(combatant.draw_pile, rng)
            combatants.append(combatant)

    return CombatState(combatants=combatants, rng=rng)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class Battle:
    """One battle session: state plus the engines that mutate it.

    Parameters
    ----------
    registry:
        Content registry shared by the interpreter and scheduler.
    state:
        A state built by :func:`create_combat_state`.
    """

    def __init__(self, registry: ContentRegistry, state: CombatState) -> None:
        self.registry = registry
        self.state = state
        self.interpreter = CardInterpreter(registry)
        self.scheduler = TurnScheduler(registry)
        self._started = False

    @classmethod
    def create(
        cls,
        registry: ContentRegistry,
        allies: Sequence[RosterEntry],
        opponents: Sequence[RosterEntry],
        *,
        seed: int = 0,
        ally_positions: Sequence[Position] | None = None,
        opponent_positions: Sequence[Position] | None = None,
    ) -> Battle:
        """Build the state and start round 1."""
        state = create_combat_state(
            registry, allies, opponents, seed=seed,
            ally_positions=ally_positions, opponent_positions=opponent_positions,
        )
        battle = cls(registry, state)
        battle.start()
        return battle

    # -- queries -------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def current_combatant(self) -> Combatant | None:
        return self.state.current_combatant

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> ActionResult:
        """Run battle-start passives, opening hands and the first turn."""
        if self._started:
            return self._reject("battle already started")
        self._started = True
        log_mark, event_mark = len(self.state.logs), len(self.state.events)
        self.scheduler.start_battle(self.state)
        return self._accept(log_mark, event_mark)

    def submit(self, action: Action, actor_id: str | None = None) -> ActionResult:
        """Apply one driver action for the active combatant.

        *actor_id*, when given, must name the combatant whose turn it is.
        Illegal actions are rejected without touching the state.
        """
        if not self._started:
            return self._reject("battle not started")
        if self.state.is_over:
            return self._reject("battle is over")
        actor = self.state.current_combatant
        if actor is None:
            return self._reject("no combatant is active")
        if actor_id is not None and actor_id != actor.id:
            return self._reject(f"it is not {actor_id}'s turn")

        log_mark, event_mark = len(self.state.logs), len(self.state.events)

        if isinstance(action, PlayCard):
            result = self.interpreter.play_card(
                self.state, actor, action.card_index, action.target_id,
            )
            if not result.accepted:
                return self._reject(result.reason or "illegal play")
            # A unit that knocked itself out cannot keep acting.
            if not actor.alive and not self.state.is_over:
                self.scheduler.end_turn(self.state)
        elif isinstance(action, SwitchPosition):
            reason = switch_position(self.state, actor, action.position)
            if reason is not None:
                return self._reject(reason)
        elif isinstance(action, EndTurn):
            self.scheduler.end_turn(self.state)
        else:
            raise TypeError(f"Unsupported action {action!r}")

        return self._accept(log_mark, event_mark)

    # -- helpers -------------------------------------------------------------

    def _accept(self, log_mark: int, event_mark: int) -> ActionResult:
        return ActionResult(
            accepted=True,
            logs=self.state.logs[log_mark:],
            events=self.state.events[event_mark:],
        )

    @staticmethod
    def _reject(reason: str) -> ActionResult:
        logger.debug("Rejected action: %s", reason)
        return ActionResult.rejected(reason)
