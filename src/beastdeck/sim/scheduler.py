"""Turn scheduler -- round structure, speed ordering and turn boundaries.

A battle is a sequence of rounds.  At the start of every round the living
combatants are sorted by effective speed; each then takes one turn in that
order.  The scheduler owns every transition between turns:

    start_battle -> begin_turn -> (cards) -> end_turn -> begin_turn -> ...

and the per-turn bookkeeping around them (status sweeps, energy income,
block reset, hand cycling, passive turn hooks).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beastdeck.sim import passives
from beastdeck.sim.core.entities import Side, TurnFlags
from beastdeck.sim.core.events import (
    CardsDrawn,
    EnergyGained,
    RoundStarted,
    TurnSkipped,
    TurnStarted,
)
from beastdeck.sim.mechanics.block import reset_block
from beastdeck.sim.mechanics.card_piles import discard_hand, draw_cards
from beastdeck.sim.mechanics.energy import gain_energy
from beastdeck.sim.mechanics.status_effects import (
    consume_sleep,
    effective_speed,
    process_leech_for_source,
    process_round_end_statuses,
    process_turn_end_statuses,
    process_turn_start_statuses,
)

if TYPE_CHECKING:
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState

logger = logging.getLogger(__name__)


def build_turn_order(state: CombatState) -> list[str]:
    """Living combatant ids by descending effective speed.

    Ties go to the ally side, then to declared slot order.
    """
    living = state.living()
    living.sort(key=lambda c: (-effective_speed(c), c.side is not Side.ALLY, c.slot))
    return [c.id for c in living]


def move_allies_next(state: CombatState, combatant: Combatant) -> list[Combatant]:
    """Reorder the rest of the round so *combatant*'s waiting allies act next.

    Only units after the current turn index move; their relative order is
    kept.  Returns the allies that were pulled forward.
    """
    current = state.current_turn_index
    if current >= len(state.turn_order) or state.turn_order[current] != combatant.id:
        return []

    waiting = state.turn_order[current + 1:]
    allies: list[Combatant] = []
    for unit_id in waiting:
        unit = state.get_combatant(unit_id)
        if unit is not None and unit.alive and unit.side == combatant.side:
            allies.append(unit)

    ally_ids = [a.id for a in allies]
    rest = [unit_id for unit_id in waiting if unit_id not in ally_ids]
    state.turn_order[current + 1:] = ally_ids + rest
    return allies


class TurnScheduler:
    """Drives the round/turn state machine of one battle.

    Parameters
    ----------
    registry:
        Content registry, handed to turn-start passives that inspect the
        moves in hand.
    """

    def __init__(self, registry: ContentRegistry) -> None:
        self.registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_battle(self, state: CombatState) -> Combatant | None:
        """Fire battle-start passives, deal opening hands and begin round 1.

        Returns the combatant whose turn is active, or ``None`` if the
        battle ended before anyone could act.
        """
        passives.fire_battle_start(state)
        for combatant in state.living():
            self._draw_hand(state, combatant)

        state.round = 1
        state.current_turn_index = 0
        state.turn_order = build_turn_order(state)
        self._announce_round(state)

        if self.check_battle_end(state):
            return None
        return self.begin_turn(state)

    def begin_turn(self, state: CombatState) -> Combatant | None:
        """Start the turn at ``current_turn_index``.

        Dead entries are passed over and sleeping units lose their turn.
        A unit killed by its own start-of-turn statuses is skipped too.
        Returns the combatant who may now act, or ``None`` once the battle
        is over.
        """
        while not state.is_over:
            if state.current_turn_index >= len(state.turn_order):
                self._start_next_round(state)
                continue

            combatant = state.get_combatant(state.turn_order[state.current_turn_index])
            if combatant is None or not combatant.alive:
                state.current_turn_index += 1
                continue

            if consume_sleep(state, combatant):
                state.emit(TurnSkipped(combatant_id=combatant.id, reason="asleep"))
                state.current_turn_index += 1
                continue

            state.emit(TurnStarted(combatant_id=combatant.id))
            combatant.turn_flags = TurnFlags()
            reset_block(combatant)

            process_turn_start_statuses(state, combatant)
            process_leech_for_source(state, combatant)
            if self.check_battle_end(state):
                return None
            if not combatant.alive:
                state.emit(TurnSkipped(combatant_id=combatant.id, reason="defeated"))
                state.current_turn_index += 1
                continue

            gained = gain_energy(combatant, combatant.energy_per_turn)
            state.emit(EnergyGained(combatant_id=combatant.id, amount=gained))

            passives.fire_turn_start(state, combatant, self.registry)
            if self.check_battle_end(state):
                return None
            logger.debug(
                "Round %d: %s acts (energy %d)", state.round, combatant.id, combatant.energy,
            )
            return combatant
        return None

    def end_turn(self, state: CombatState) -> Combatant | None:
        """Close the active combatant's turn and begin the next one.

        Discards the hand, draws the next one, runs end-of-turn statuses
        and passives, then advances.  Returns the next active combatant,
        or ``None`` once the battle is over.
        """
        if state.is_over:
            return None
        combatant = state.current_combatant
        if combatant is not None and combatant.alive:
            discard_hand(combatant)
            self._draw_hand(state, combatant)
            process_turn_end_statuses(state, combatant)
            if combatant.alive:
                passives.fire_turn_end(state, combatant)

        if self.check_battle_end(state):
            return None
        state.current_turn_index += 1
        return self.begin_turn(state)

    def check_battle_end(self, state: CombatState) -> bool:
        return state.check_battle_end()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_next_round(self, state: CombatState) -> None:
        process_round_end_statuses(state)
        state.round += 1
        state.current_turn_index = 0
        state.turn_order = build_turn_order(state)
        self._announce_round(state)

    @staticmethod
    def _announce_round(state: CombatState) -> None:
        state.log(f"--- Round {state.round} begins ---")
        state.emit(RoundStarted())

    @staticmethod
    def _draw_hand(state: CombatState, combatant: Combatant) -> None:
        drawn = draw_cards(combatant, state.rng)
        state.emit(CardsDrawn(combatant_id=combatant.id, count=len(drawn)))
