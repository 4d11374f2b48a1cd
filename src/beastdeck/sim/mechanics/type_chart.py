"""Type effectiveness chart.

Classic weakness/resistance table: a move type is super effective (2x),
not very effective (0.5x) or has no effect (0x) against a defending type.
Against a dual-typed defender the two multipliers are multiplied.
"""

from __future__ import annotations

from beastdeck.ir.cards import ElementType as T

SUPER_EFFECTIVE = 2.0
NOT_EFFECTIVE = 0.5
NO_EFFECT = 0.0

# Attacking type -> defending type -> multiplier.  Only non-neutral entries.
_TYPE_CHART: dict[T, dict[T, float]] = {
    T.NORMAL: {T.ROCK: 0.5, T.GHOST: 0.0},
    T.FIRE: {
        T.GRASS: 2.0, T.ICE: 2.0, T.BUG: 2.0,
        T.FIRE: 0.5, T.WATER: 0.5, T.ROCK: 0.5, T.DRAGON: 0.5,
    },
    T.WATER: {
        T.FIRE: 2.0, T.GROUND: 2.0, T.ROCK: 2.0,
        T.WATER: 0.5, T.GRASS: 0.5, T.DRAGON: 0.5,
    },
    T.GRASS: {
        T.WATER: 2.0, T.GROUND: 2.0, T.ROCK: 2.0,
        T.FIRE: 0.5, T.GRASS: 0.5, T.POISON: 0.5, T.FLYING: 0.5,
        T.BUG: 0.5, T.DRAGON: 0.5,
    },
    T.ELECTRIC: {
        T.WATER: 2.0, T.FLYING: 2.0,
        T.ELECTRIC: 0.5, T.GRASS: 0.5, T.DRAGON: 0.5,
        T.GROUND: 0.0,
    },
    T.ICE: {
        T.GRASS: 2.0, T.GROUND: 2.0, T.FLYING: 2.0, T.DRAGON: 2.0,
        T.FIRE: 0.5, T.WATER: 0.5, T.ICE: 0.5,
    },
    T.FIGHTING: {
        T.NORMAL: 2.0, T.ICE: 2.0, T.ROCK: 2.0, T.DARK: 2.0,
        T.POISON: 0.5, T.FLYING: 0.5, T.PSYCHIC: 0.5, T.BUG: 0.5,
        T.GHOST: 0.0,
    },
    T.POISON: {
        T.GRASS: 2.0,
        T.POISON: 0.5, T.GROUND: 0.5, T.ROCK: 0.5, T.GHOST: 0.5,
    },
    T.GROUND: {
        T.FIRE: 2.0, T.ELECTRIC: 2.0, T.POISON: 2.0, T.ROCK: 2.0,
        T.GRASS: 0.5, T.BUG: 0.5,
        T.FLYING: 0.0,
    },
    T.FLYING: {
        T.GRASS: 2.0, T.FIGHTING: 2.0, T.BUG: 2.0,
        T.ELECTRIC: 0.5, T.ROCK: 0.5,
    },
    T.PSYCHIC: {
        T.FIGHTING: 2.0, T.POISON: 2.0,
        T.PSYCHIC: 0.5,
        T.DARK: 0.0,
    },
    T.BUG: {
        T.GRASS: 2.0, T.PSYCHIC: 2.0, T.DARK: 2.0,
        T.FIRE: 0.5, T.FIGHTING: 0.5, T.POISON: 0.5, T.FLYING: 0.5,
        T.GHOST: 0.5,
    },
    T.ROCK: {
        T.FIRE: 2.0, T.ICE: 2.0, T.FLYING: 2.0, T.BUG: 2.0,
        T.FIGHTING: 0.5, T.GROUND: 0.5,
    },
    T.GHOST: {
        T.PSYCHIC: 2.0, T.GHOST: 2.0,
        T.DARK: 0.5,
        T.NORMAL: 0.0,
    },
    T.DRAGON: {T.DRAGON: 2.0},
    T.DARK: {
        T.PSYCHIC: 2.0, T.GHOST: 2.0,
        T.FIGHTING: 0.5, T.DARK: 0.5,
    },
}


def get_type_effectiveness(move_type: T, defender_types: list[T]) -> float:
    """Multiplier for a *move_type* attack against *defender_types*.

    The per-type multipliers are multiplied together, so a dual weakness is
    4x and any immunity makes the result 0.
    """
    multiplier = 1.0
    for defender_type in defender_types:
        multiplier *= _TYPE_CHART.get(move_type, {}).get(defender_type, 1.0)
    return multiplier


def effectiveness_label(multiplier: float) -> str | None:
    """Display label for *multiplier*; ``None`` for neutral."""
    if multiplier == 0:
        return "It has no effect..."
    if multiplier > 1.0:
        return "It's super effective!"
    if multiplier < 1.0:
        return "It's not very effective..."
    return None
