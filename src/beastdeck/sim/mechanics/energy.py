"""Energy system -- per-turn income, spend, gain, and effective card cost.

Energy rules:
    - Each combatant gains ``energy_per_turn`` at the start of its turn.
    - Unspent energy carries over, but never past ``energy_cap``.
    - Playing a card spends its effective cost (base cost plus passive
      cost modifiers, floored at 0).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beastdeck.sim import passives

if TYPE_CHECKING:
    from beastdeck.ir.cards import MoveDefinition
    from beastdeck.sim.core.entities import Combatant


def effective_cost(
    combatant: Combatant, move: MoveDefinition, hand_index: int | None = None
) -> int:
    """Energy *combatant* pays to play *move* from *hand_index*.

    Parameters
    ----------
    combatant:
        The card's owner.
    move:
        The move definition.
    hand_index:
        Position of the card in the hand; position-bound discounts
        (Inferno Momentum) only apply when it is given.
    """
    return max(move.cost + passives.cost_delta(combatant, move, hand_index), 0)


def spend_energy(combatant: Combatant, amount: int) -> bool:
    """Attempt to spend energy.  Returns False if insufficient."""
    if combatant.energy < amount:
        return False
    combatant.energy -= amount
    return True


def gain_energy(combatant: Combatant, amount: int) -> int:
    """Add energy, capped at ``energy_cap``.  Returns the energy actually gained."""
    before = combatant.energy
    combatant.energy = min(combatant.energy + max(amount, 0), combatant.energy_cap)
    return combatant.energy - before
