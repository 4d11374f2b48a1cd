"""Tests for type effectiveness lookups and labels."""

import pytest

from beastdeck.ir.cards import ElementType as T
from beastdeck.sim.mechanics.type_chart import effectiveness_label, get_type_effectiveness


@pytest.mark.parametrize(
    "move_type, defender, expected",
    [
        (T.WATER, [T.FIRE], 2.0),
        (T.FIRE, [T.WATER], 0.5),
        (T.NORMAL, [T.GHOST], 0.0),
        (T.NORMAL, [T.ROCK], 0.5),
        (T.ELECTRIC, [T.GROUND], 0.0),
        (T.NORMAL, [T.FIRE], 1.0),
    ],
)
def test_single_type(move_type, defender, expected):
    assert get_type_effectiveness(move_type, defender) == expected


def test_dual_type_weaknesses_multiply():
    # Water vs fire/rock: 2 * 2
    assert get_type_effectiveness(T.WATER, [T.FIRE, T.ROCK]) == 4.0


def test_weakness_and_resistance_cancel():
    # Ice vs water/ground: 0.5 * 2
    assert get_type_effectiveness(T.ICE, [T.WATER, T.GROUND]) == 1.0


def test_immunity_dominates():
    assert get_type_effectiveness(T.GROUND, [T.FLYING, T.ROCK]) == 0.0


class TestLabels:
    def test_no_effect(self):
        assert effectiveness_label(0.0) == "It has no effect..."

    def test_super_effective(self):
        assert effectiveness_label(2.0) == "It's super effective!"
        assert effectiveness_label(4.0) == "It's super effective!"

    def test_not_very_effective(self):
        assert effectiveness_label(0.5) == "It's not very effective..."

    def test_neutral_has_no_label(self):
        assert effectiveness_label(1.0) is None
