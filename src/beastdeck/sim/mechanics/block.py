"""Block mechanics -- gain and per-turn reset."""

from __future__ import annotations

from typing import TYPE_CHECKING

from beastdeck.sim import passives

if TYPE_CHECKING:
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState


def gain_block(state: CombatState, combatant: Combatant, amount: int) -> int:
    """Add block to *combatant*.  Returns the block gained."""
    return state.add_block(combatant, amount)


def reset_block(combatant: Combatant) -> int:
    """Clear block at the start of the owner's turn.

    Passives such as Pressure Hull keep part of it.  Returns the block
    left afterwards.
    """
    kept = passives.retained_block(combatant)
    combatant.block = kept
    return kept
