"""Formation moves -- a unit stepping to a neighbouring cell of its grid.

A switch costs :data:`SWITCH_COST` energy and is allowed once per turn.
The destination must be adjacent: the next column over in the same row,
or the same column in the other row.  If a living ally already stands
there, the two trade places.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beastdeck.sim.core.entities import GRID_COLUMNS, Position, Row
from beastdeck.sim.core.events import PositionChanged
from beastdeck.sim.mechanics.energy import spend_energy

if TYPE_CHECKING:
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState

logger = logging.getLogger(__name__)

SWITCH_COST = 2


def adjacent_positions(position: Position) -> list[Position]:
    """Cells a unit at *position* may switch to."""
    other_row = Row.BACK if position.row == Row.FRONT else Row.FRONT
    cells = [
        Position(row=position.row, column=column)
        for column in (position.column - 1, position.column + 1)
        if column in GRID_COLUMNS
    ]
    cells.append(Position(row=other_row, column=position.column))
    return cells


def occupant(state: CombatState, combatant: Combatant, position: Position) -> Combatant | None:
    """The living ally of *combatant* standing on *position*, if any."""
    for ally in state.living(combatant.side):
        if ally.id != combatant.id and ally.position == position:
            return ally
    return None


def validate_switch(combatant: Combatant, position: Position) -> str | None:
    """Rejection reason for a switch, or ``None`` when it is legal."""
    if not combatant.alive:
        return f"{combatant.name} is defeated"
    if combatant.turn_flags.switched_position:
        return f"{combatant.name} already switched position this turn"
    if combatant.energy < SWITCH_COST:
        return f"not enough energy to switch ({combatant.energy}/{SWITCH_COST})"
    if position not in adjacent_positions(combatant.position):
        return f"{position.row.value} row, column {position.column} is not adjacent"
    return None


def switch_position(
    state: CombatState, combatant: Combatant, position: Position
) -> str | None:
    """Move *combatant* to *position*, swapping with an ally standing there.

    Returns the rejection reason, or ``None`` once the switch is done.  A
    rejected switch changes nothing.
    """
    reason = validate_switch(combatant, position)
    if reason is not None:
        return reason

    spend_energy(combatant, SWITCH_COST)
    combatant.turn_flags.switched_position = True

    other = occupant(state, combatant, position)
    if other is not None:
        other.position = combatant.position
        combatant.position = position
        state.log(
            f"{combatant.name} and {other.name} swap positions! "
            f"(Energy: {combatant.energy})",
            combatant.id,
        )
    else:
        combatant.position = position
        state.log(
            f"{combatant.name} moves to {position.row.value} row! "
            f"(Energy: {combatant.energy})",
            combatant.id,
        )
    state.emit(PositionChanged(
        combatant_id=combatant.id,
        row=position.row.value,
        column=position.column,
        swapped_with=other.id if other is not None else None,
    ))
    logger.debug("%s switched to %s", combatant.id, position)
    return None
