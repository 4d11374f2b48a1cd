"""Tests for RandomAgent and the legal-play enumeration it draws from."""

from __future__ import annotations

from beastdeck.ir.cards import MoveRange
from beastdeck.sim.core.actions import EndTurn, PlayCard
from beastdeck.sim.core.entities import Row
from beastdeck.sim.core.rng import GameRNG
from beastdeck.sim.interpreter import CardInterpreter
from beastdeck.sim.play_agents.base import legal_plays
from beastdeck.sim.play_agents.random_agent import RandomAgent

from tests.sim.conftest import make_combatant, make_enemy, make_registry, make_state, strike


def _setup(*moves, energy=3, enemies=None):
    registry = make_registry(*moves)
    actor = make_combatant("actor", energy=energy)
    actor.hand = [m.id for m in moves]
    state = make_state(actor, *(enemies or [make_enemy("enemy")]))
    return registry, state, actor


# ---------------------------------------------------------------------------
# legal_plays
# ---------------------------------------------------------------------------

class TestLegalPlays:
    def test_unaffordable_cards_skipped(self):
        registry, state, actor = _setup(strike(6, "cheap"), strike(12, "pricey", cost=2), energy=1)
        plays = legal_plays(state, actor, registry)
        assert [p.move.id for p in plays] == ["cheap"]
        assert plays[0].cost == 1

    def test_one_candidate_per_selectable_target(self):
        move = strike(6, "snipe", range=MoveRange.ANY_ENEMY)
        registry, state, actor = _setup(
            move, enemies=[make_enemy("e0"), make_enemy("e1", column=1)],
        )
        plays = legal_plays(state, actor, registry)
        assert [p.action.target_id for p in plays] == ["e0", "e1"]
        assert [[t.id for t in p.targets] for p in plays] == [["e0"], ["e1"]]

    def test_row_candidates_deduplicated(self):
        move = strike(6, "sweep", range=MoveRange.ANY_ROW)
        registry, state, actor = _setup(
            move,
            enemies=[
                make_enemy("f0"),
                make_enemy("f1", column=1),
                make_enemy("b2", row=Row.BACK, column=2),
            ],
        )
        plays = legal_plays(state, actor, registry)
        assert [[t.id for t in p.targets] for p in plays] == [["f0", "f1"], ["b2"]]

    def test_auto_range_needs_no_target_id(self):
        registry, state, actor = _setup(strike(6, "quake", range=MoveRange.ALL_ENEMIES))
        plays = legal_plays(state, actor, registry)
        assert len(plays) == 1
        assert plays[0].action.target_id is None

    def test_empty_hand(self):
        registry, state, actor = _setup()
        assert legal_plays(state, actor, registry) == []


# ---------------------------------------------------------------------------
# RandomAgent
# ---------------------------------------------------------------------------

class TestRandomAgent:
    def test_ends_turn_when_nothing_playable(self):
        registry, state, actor = _setup(strike(6), energy=0)
        assert isinstance(RandomAgent(registry).choose_action(state, actor), EndTurn)

    def test_never_passes_with_zero_end_chance(self):
        registry, state, actor = _setup(strike(6, "a"), strike(6, "b"))
        agent = RandomAgent(registry, rng=GameRNG(3), end_turn_chance=0.0)
        for _ in range(20):
            assert isinstance(agent.choose_action(state, actor), PlayCard)

    def test_always_passes_with_full_end_chance(self):
        registry, state, actor = _setup(strike(6))
        agent = RandomAgent(registry, rng=GameRNG(3), end_turn_chance=1.0)
        for _ in range(20):
            assert isinstance(agent.choose_action(state, actor), EndTurn)

    def test_choices_are_legal(self):
        move = strike(6, "snipe", range=MoveRange.ANY_ENEMY)
        registry, state, actor = _setup(
            move, strike(6), enemies=[make_enemy("e0"), make_enemy("e1", column=1)],
        )
        agent = RandomAgent(registry, rng=GameRNG(9), end_turn_chance=0.0)
        interpreter = CardInterpreter(registry)
        for _ in range(20):
            action = agent.choose_action(state, actor)
            checked = interpreter.validate_play(state, actor, action.card_index, action.target_id)
            assert not isinstance(checked, str)

    def test_same_seed_same_choices(self):
        registry, state, actor = _setup(strike(6, "a"), strike(6, "b"), strike(6, "c"))

        def run(seed):
            agent = RandomAgent(registry, rng=GameRNG(seed))
            return [agent.choose_action(state, actor) for _ in range(15)]

        assert run(21) == run(21)
