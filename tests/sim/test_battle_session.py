"""Tests for battle construction and the inbound action contract."""

import pytest

from beastdeck.ir.roster import CreatureDefinition
from beastdeck.sim.battle import Battle, create_combat_state
from beastdeck.sim.core.actions import EndTurn, PlayCard, SwitchPosition
from beastdeck.sim.core.entities import Position, Row, Side
from beastdeck.sim.core.errors import (
    UnknownCreatureError,
    UnknownMoveError,
    UnknownPassiveError,
)
from beastdeck.sim.core.events import CardPlayed, PositionChanged, TurnStarted
from beastdeck.sim.core.game_state import CombatPhase
from beastdeck.sim.play_agents.base import legal_plays


def _creature(cid="dummy", **overrides):
    fields = dict(
        id=cid, name=cid.capitalize(), types=["normal"], max_hp=30, base_speed=5,
        deck=["tackle"] * 6, passives=[],
    )
    fields.update(overrides)
    return CreatureDefinition(**fields)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestCreateCombatState:
    def test_ids_sides_and_positions(self, registry):
        state = create_combat_state(registry, ["emberpup", "voltmouse"], ["tidecrab"])
        assert [c.id for c in state.combatants] == ["emberpup-0", "voltmouse-1", "tidecrab-2"]
        assert [c.side for c in state.combatants] == [Side.ALLY, Side.ALLY, Side.OPPONENT]
        assert state.combatants[1].position == Position(row=Row.FRONT, column=1)
        assert state.combatants[1].slot == 1
        assert state.combatants[2].slot == 0

    def test_roster_stats_copied(self, registry):
        state = create_combat_state(registry, ["emberpup"], ["tidecrab"])
        pup = state.combatants[0]
        assert pup.max_hp == pup.hp == 42
        assert pup.base_speed == 6
        assert pup.passive_ids == ["blaze_strike", "kindling"]
        assert sorted(pup.draw_pile) == sorted(registry.require_creature("emberpup").deck)

    def test_same_seed_same_shuffle(self, registry):
        a = create_combat_state(registry, ["emberpup"], ["tidecrab"], seed=5)
        b = create_combat_state(registry, ["emberpup"], ["tidecrab"], seed=5)
        assert a.combatants[0].draw_pile == b.combatants[0].draw_pile

    def test_inline_definition(self, registry):
        state = create_combat_state(registry, [_creature()], ["tidecrab"])
        assert state.combatants[0].id == "dummy-0"

    def test_explicit_positions(self, registry):
        state = create_combat_state(
            registry, ["emberpup"], ["tidecrab", "voltmouse"],
            opponent_positions=[Position(row=Row.FRONT, column=1), Position(row=Row.BACK, column=1)],
        )
        assert state.combatants[2].position.row == Row.BACK

    def test_position_count_mismatch(self, registry):
        with pytest.raises(ValueError):
            create_combat_state(registry, ["emberpup"], ["tidecrab"], ally_positions=[])

    def test_overlapping_positions(self, registry):
        spot = Position(row=Row.FRONT, column=0)
        with pytest.raises(ValueError):
            create_combat_state(
                registry, ["emberpup", "voltmouse"], ["tidecrab"], ally_positions=[spot, spot],
            )

    def test_unknown_creature(self, registry):
        with pytest.raises(UnknownCreatureError):
            create_combat_state(registry, ["missingno"], ["tidecrab"])

    def test_unknown_move_in_deck(self, registry):
        with pytest.raises(UnknownMoveError):
            create_combat_state(registry, [_creature(deck=["nope"])], ["tidecrab"])

    def test_unknown_passive(self, registry):
        with pytest.raises(UnknownPassiveError):
            create_combat_state(registry, [_creature(passives=["nope"])], ["tidecrab"])


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------

class TestBattleLifecycle:
    def test_create_starts_round_one(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=1)
        assert battle.state.round == 1
        assert battle.current_combatant.id == "emberpup-0"
        assert len(battle.current_combatant.hand) == 5
        assert not battle.is_over

    def test_start_twice_rejected(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"])
        result = battle.start()
        assert not result.accepted
        assert result.reason == "battle already started"

    def test_submit_before_start_rejected(self, registry):
        state = create_combat_state(registry, ["emberpup"], ["tidecrab"])
        battle = Battle(registry, state)
        assert not battle.submit(EndTurn()).accepted

    def test_end_turn_passes_control(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=1)
        result = battle.submit(EndTurn())
        assert result.accepted
        assert battle.current_combatant.id == "tidecrab-1"
        assert any(isinstance(e, TurnStarted) for e in result.events)

    def test_wrong_actor_rejected(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"])
        result = battle.submit(EndTurn(), actor_id="tidecrab-1")
        assert not result.accepted
        assert result.reason == "it is not tidecrab-1's turn"

    def test_battle_over_rejects(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"])
        battle.state.phase = CombatPhase.VICTORY
        assert battle.submit(EndTurn()).reason == "battle is over"

    def test_unsupported_action(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"])
        with pytest.raises(TypeError):
            battle.submit("pass")


# ---------------------------------------------------------------------------
# Card plays through the session
# ---------------------------------------------------------------------------

class TestPlayThroughSession:
    def test_legal_play_accepted(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=3)
        actor = battle.current_combatant
        play = legal_plays(battle.state, actor, registry)[0]

        result = battle.submit(play.action, actor_id=actor.id)

        assert result.accepted
        played = [e for e in result.events if isinstance(e, CardPlayed)]
        assert played[0].move_id == play.move.id
        assert result.logs[0].message.startswith("Emberpup plays ")

    def test_illegal_play_leaves_state_untouched(self, registry):
        battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=3)
        before = battle.state.model_dump()

        result = battle.submit(PlayCard(card_index=42))

        assert not result.accepted
        assert result.logs == []
        assert battle.state.model_dump() == before

    def test_self_ko_ends_the_turn(self, registry):
        bomber = _creature("bomber", base_speed=20, deck=["explosion"] * 5)
        battle = Battle.create(registry, [bomber, "scurrat"], ["bramblehorn"], seed=2)
        assert battle.current_combatant.id == "bomber-0"

        result = battle.submit(PlayCard(card_index=0))

        assert result.accepted
        assert not battle.state.get_combatant("bomber-0").alive
        assert not battle.is_over
        assert battle.current_combatant.id != "bomber-0"
        assert battle.state.get_combatant("bramblehorn-2").hp < 60

    def test_deterministic_replay(self, registry):
        def run():
            battle = Battle.create(registry, ["emberpup"], ["tidecrab"], seed=11)
            for _ in range(6):
                actor = battle.current_combatant
                plays = legal_plays(battle.state, actor, registry)
                battle.submit(plays[0].action if plays else EndTurn())
            return [e.message for e in battle.state.logs]

        assert run() == run()


class TestSwitchThroughSession:
    def _battle(self, registry):
        runner = _creature("runner", base_speed=20)
        battle = Battle.create(registry, [runner, _creature("buddy")], ["tidecrab"], seed=4)
        assert battle.current_combatant.id == "runner-0"
        return battle

    def test_switch_accepted_once(self, registry):
        battle = self._battle(registry)
        runner = battle.state.get_combatant("runner-0")
        buddy = battle.state.get_combatant("buddy-1")
        energy = runner.energy

        result = battle.submit(SwitchPosition(position=Position(row=Row.FRONT, column=1)))

        assert result.accepted
        assert runner.position == Position(row=Row.FRONT, column=1)
        assert buddy.position == Position(row=Row.FRONT, column=0)
        assert runner.energy == energy - 2
        assert [type(e) for e in result.events] == [PositionChanged]

        again = battle.submit(SwitchPosition(position=Position(row=Row.BACK, column=1)))
        assert not again.accepted
        assert again.reason == "Runner already switched position this turn"

    def test_non_adjacent_switch_leaves_state_untouched(self, registry):
        battle = self._battle(registry)
        before = battle.state.model_dump()

        result = battle.submit(SwitchPosition(position=Position(row=Row.BACK, column=2)))

        assert not result.accepted
        assert battle.state.model_dump() == before
