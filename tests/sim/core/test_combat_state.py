"""Tests for CombatState queries, mutation helpers and the terminal check."""

from beastdeck.sim.core.entities import Side
from beastdeck.sim.core.events import (
    BattleEnded,
    BlockGained,
    CombatantDefeated,
    DamageDealt,
    Healed,
)
from beastdeck.sim.core.game_state import CombatPhase, CombatState
from beastdeck.sim.core.rng import GameRNG

from tests.sim.conftest import make_combatant, make_enemy, make_state


def _state():
    return make_state(
        make_combatant("a0"),
        make_combatant("a1", column=1),
        make_enemy("e0"),
    )


class TestQueries:
    def test_get_combatant(self):
        state = _state()
        assert state.get_combatant("e0").side is Side.OPPONENT
        assert state.get_combatant("missing") is None

    def test_living_by_side(self):
        state = _state()
        state.get_combatant("a1").hp = 0
        assert [c.id for c in state.living(Side.ALLY)] == ["a0"]
        assert [c.id for c in state.living()] == ["a0", "e0"]

    def test_allies_and_opponents(self):
        state = _state()
        a0 = state.get_combatant("a0")
        assert [c.id for c in state.allies_of(a0)] == ["a0", "a1"]
        assert [c.id for c in state.opponents_of(a0)] == ["e0"]

    def test_current_combatant(self):
        state = _state()
        assert state.current_combatant.id == "a0"
        state.current_turn_index = 3
        assert state.current_combatant is None


class TestMutations:
    def test_damage_logs_and_emits(self):
        state = _state()
        target = state.get_combatant("e0")
        lost = state.damage_combatant(target, 7, source_id="a0", blocked=2)
        assert lost == 7
        assert [e.message for e in state.logs] == [
            "E0 blocks 2 damage.",
            "E0 takes 7 damage.",
        ]
        event = state.events[-1]
        assert isinstance(event, DamageDealt)
        assert (event.amount, event.blocked, event.source_id) == (7, 2, "a0")

    def test_lethal_damage_defeats_once(self):
        state = _state()
        target = state.get_combatant("e0")
        state.damage_combatant(target, 100)
        state.damage_combatant(target, 5)
        defeats = [e for e in state.events if isinstance(e, CombatantDefeated)]
        assert len(defeats) == 1
        assert state.logs[1].message == "E0 is defeated!"

    def test_heal_emits_only_when_healing(self):
        state = _state()
        target = state.get_combatant("a0")
        assert state.heal_combatant(target, 5) == 0
        target.hp = 30
        assert state.heal_combatant(target, 5) == 5
        assert [type(e) for e in state.events] == [Healed]

    def test_add_block(self):
        state = _state()
        target = state.get_combatant("a0")
        assert state.add_block(target, 4) == 4
        assert state.add_block(target, 0) == 0
        assert target.block == 4
        assert isinstance(state.events[-1], BlockGained)
        assert state.logs[-1].message == "A0 gains 4 Block."

    def test_knock_out(self):
        state = _state()
        target = state.get_combatant("a0")
        state.knock_out(target, "A0 faints!")
        assert target.hp == 0
        assert state.logs[-1].message == "A0 faints!"

    def test_events_stamped_with_round(self):
        state = _state()
        state.round = 4
        state.add_block(state.get_combatant("a0"), 2)
        assert state.events[-1].round == 4
        assert state.logs[-1].round == 4

    def test_status_order_counter(self):
        state = _state()
        assert [state.next_status_order() for _ in range(3)] == [0, 1, 2]


class TestBattleEnd:
    def test_ongoing(self):
        state = _state()
        assert not state.check_battle_end()
        assert state.phase is CombatPhase.ONGOING

    def test_victory(self):
        state = _state()
        state.get_combatant("e0").hp = 0
        assert state.check_battle_end()
        assert state.phase is CombatPhase.VICTORY
        assert state.logs[-1].message == "Battle over: victory!"
        assert isinstance(state.events[-1], BattleEnded)

    def test_mutual_wipe_is_victory(self):
        state = _state()
        for c in state.combatants:
            c.hp = 0
        state.check_battle_end()
        assert state.phase is CombatPhase.VICTORY

    def test_terminal_phase_is_sticky(self):
        state = _state()
        state.get_combatant("e0").hp = 0
        state.check_battle_end()
        state.check_battle_end()
        assert len([e for e in state.events if isinstance(e, BattleEnded)]) == 1

    def test_is_over(self):
        state = _state()
        state.phase = CombatPhase.DEFEAT
        assert state.is_over
        assert state.current_combatant is None


class TestSerialization:
    def test_rng_excluded_from_dump(self):
        state = CombatState(combatants=[make_combatant()], rng=GameRNG(1))
        assert "rng" not in state.model_dump()

    def test_events_round_trip(self):
        state = _state()
        state.damage_combatant(state.get_combatant("e0"), 3, source_id="a0")
        restored = CombatState.model_validate_json(state.model_dump_json())
        assert restored.events == state.events
