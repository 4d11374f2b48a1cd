"""Tests for switching grid position."""

from beastdeck.sim.core.entities import Position, Row
from beastdeck.sim.core.events import PositionChanged
from beastdeck.sim.mechanics.formation import (
    SWITCH_COST,
    adjacent_positions,
    switch_position,
)

from tests.sim.conftest import make_combatant, make_enemy, make_state


def _pos(row, column):
    return Position(row=row, column=column)


class TestAdjacency:
    def test_corner(self):
        assert adjacent_positions(_pos(Row.FRONT, 0)) == [
            _pos(Row.FRONT, 1),
            _pos(Row.BACK, 0),
        ]

    def test_middle_back(self):
        assert adjacent_positions(_pos(Row.BACK, 1)) == [
            _pos(Row.BACK, 0),
            _pos(Row.BACK, 2),
            _pos(Row.FRONT, 1),
        ]


class TestSwitch:
    def test_move_to_empty_cell(self):
        ally = make_combatant("ally")
        state = make_state(ally, make_enemy())

        assert switch_position(state, ally, _pos(Row.BACK, 0)) is None

        assert ally.position == _pos(Row.BACK, 0)
        assert ally.energy == 3 - SWITCH_COST
        assert ally.turn_flags.switched_position
        assert state.logs[-1].message == "Ally moves to back row! (Energy: 1)"
        assert isinstance(state.events[-1], PositionChanged)
        assert state.events[-1].swapped_with is None

    def test_swap_with_ally(self):
        ally = make_combatant("ally")
        friend = make_combatant("friend", column=1)
        state = make_state(ally, friend, make_enemy())

        assert switch_position(state, ally, _pos(Row.FRONT, 1)) is None

        assert ally.position == _pos(Row.FRONT, 1)
        assert friend.position == _pos(Row.FRONT, 0)
        assert state.logs[-1].message == "Ally and Friend swap positions! (Energy: 1)"
        assert state.events[-1].swapped_with == "friend"

    def test_enemies_do_not_occupy_own_grid(self):
        ally = make_combatant("ally")
        enemy = make_enemy(column=1)
        state = make_state(ally, enemy)

        switch_position(state, ally, _pos(Row.FRONT, 1))

        assert enemy.position == _pos(Row.FRONT, 1)
        assert state.logs[-1].message.startswith("Ally moves to front row!")

    def test_once_per_turn(self):
        ally = make_combatant("ally", energy=5)
        state = make_state(ally, make_enemy())
        switch_position(state, ally, _pos(Row.BACK, 0))

        reason = switch_position(state, ally, _pos(Row.FRONT, 0))

        assert reason == "Ally already switched position this turn"
        assert ally.position == _pos(Row.BACK, 0)
        assert ally.energy == 3

    def test_not_enough_energy(self):
        ally = make_combatant("ally", energy=1)
        state = make_state(ally, make_enemy())

        reason = switch_position(state, ally, _pos(Row.BACK, 0))

        assert reason == "not enough energy to switch (1/2)"
        assert ally.position == _pos(Row.FRONT, 0)
        assert ally.energy == 1
        assert state.logs == []

    def test_non_adjacent_rejected(self):
        ally = make_combatant("ally")
        state = make_state(ally, make_enemy())

        for cell in (_pos(Row.FRONT, 2), _pos(Row.BACK, 1), _pos(Row.FRONT, 0)):
            assert switch_position(state, ally, cell) is not None

        assert ally.position == _pos(Row.FRONT, 0)
        assert ally.energy == 3
        assert not ally.turn_flags.switched_position
