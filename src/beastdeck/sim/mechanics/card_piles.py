"""Card pile manipulation helpers.

Each combatant owns its own hand, draw pile, discard pile and vanished
pile.  These functions move move ids between them; the top of the draw
pile is the *end* of the list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beastdeck.ir.cards import is_echo_id

if TYPE_CHECKING:
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.rng import GameRNG

MAX_HAND_SIZE = 10


def shuffle_cards(cards: list[str], rng: GameRNG) -> None:
    """Shuffle *cards* in place (uniform Fisher-Yates via *rng*)."""
    rng.shuffle(cards)


def _reshuffle_discard_into_draw(combatant: Combatant, rng: GameRNG) -> None:
    """Move all cards from discard into draw, then shuffle."""
    combatant.draw_pile.extend(combatant.discard_pile)
    combatant.discard_pile.clear()
    shuffle_cards(combatant.draw_pile, rng)


def _pop_top(combatant: Combatant, rng: GameRNG) -> str | None:
    if not combatant.draw_pile:
        if not combatant.discard_pile:
            return None  # nothing left to draw
        _reshuffle_discard_into_draw(combatant, rng)
    return combatant.draw_pile.pop()


def draw_cards(combatant: Combatant, rng: GameRNG) -> list[str]:
    """Fill the hand up to ``min(hand_size, MAX_HAND_SIZE)``.

    If the draw pile runs out mid-draw, the discard pile is shuffled and
    becomes the new draw pile, then drawing continues.

    Returns the list of cards actually drawn (may be fewer than needed
    if both piles are empty).
    """
    target = min(combatant.hand_size, MAX_HAND_SIZE)
    drawn: list[str] = []
    while len(combatant.hand) < target:
        card = _pop_top(combatant, rng)
        if card is None:
            break
        combatant.hand.append(card)
        drawn.append(card)
    return drawn


def draw_extra_cards(
    combatant: Combatant, n: int, rng: GameRNG
) -> tuple[list[str], list[str]]:
    """Draw up to *n* additional cards mid-turn.

    Cards that would push the hand past ``MAX_HAND_SIZE`` go straight to
    the discard pile.

    Returns
    -------
    tuple[list[str], list[str]]
        ``(drawn, discarded)``: cards that reached the hand and cards that
        overflowed into the discard pile.
    """
    drawn: list[str] = []
    discarded: list[str] = []
    for _ in range(n):
        card = _pop_top(combatant, rng)
        if card is None:
            break
        if len(combatant.hand) < MAX_HAND_SIZE:
            combatant.hand.append(card)
            drawn.append(card)
        else:
            combatant.discard_pile.append(card)
            discarded.append(card)
    return drawn, discarded


def discard_hand(combatant: Combatant) -> list[str]:
    """Move every card in the hand to the discard pile.

    Unplayed echo copies vanish instead.  Returns the ids that reached the
    discard pile.
    """
    moved = [card for card in combatant.hand if not is_echo_id(card)]
    combatant.vanished_pile.extend(card for card in combatant.hand if is_echo_id(card))
    combatant.discard_pile.extend(moved)
    combatant.hand.clear()
    return moved


def add_to_hand(combatant: Combatant, card_id: str) -> bool:
    """Put *card_id* straight into the hand unless it is already full."""
    if len(combatant.hand) >= MAX_HAND_SIZE:
        return False
    combatant.hand.append(card_id)
    return True


def take_from_hand(combatant: Combatant, hand_index: int) -> str:
    """Remove and return the card at *hand_index*."""
    return combatant.hand.pop(hand_index)


def discard_card(combatant: Combatant, card_id: str) -> None:
    """Place a played card on the discard pile."""
    combatant.discard_pile.append(card_id)


def vanish_card(combatant: Combatant, card_id: str) -> None:
    """Remove a played single-use card for the rest of the battle."""
    combatant.vanished_pile.append(card_id)
