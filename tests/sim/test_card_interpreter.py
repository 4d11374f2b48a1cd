"""Tests for the card effect interpreter."""

import pytest

from beastdeck.ir.cards import EffectKind, ElementType, MoveRange
from beastdeck.ir.status_effects import StatusKind
from beastdeck.sim.core.errors import UnknownMoveError
from beastdeck.sim.core.events import CardPlayed, CardsDrawn, DamageDealt
from beastdeck.sim.core.game_state import CombatPhase
from beastdeck.sim.interpreter import CardInterpreter
from beastdeck.sim.mechanics.card_piles import MAX_HAND_SIZE
from beastdeck.sim.mechanics.status_effects import apply_status

from tests.sim.conftest import (
    effect,
    make_combatant,
    make_enemy,
    make_move,
    make_registry,
    make_state,
    strike,
)


def _setup(*moves, attacker_kwargs=None, target_kwargs=None, extra=()):
    """Water-typed attacker holding *moves* (in order) vs. one normal enemy."""
    registry = make_registry(*moves)
    attacker = make_combatant("ally", types=(ElementType.WATER,), **(attacker_kwargs or {}))
    attacker.hand = [m.id for m in moves]
    target = make_enemy("enemy", **(target_kwargs or {}))
    state = make_state(attacker, target, *extra)
    return CardInterpreter(registry), state, attacker, target


def _damage_events(state, target_id):
    return [e for e in state.events if isinstance(e, DamageDealt) and e.target_id == target_id]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestRejectedPlays:
    def test_not_enough_energy_is_atomic(self):
        interp, state, attacker, target = _setup(strike(10), attacker_kwargs={"energy": 0})
        snapshot = attacker.model_dump()

        result = interp.play_card(state, attacker, 0)

        assert not result.accepted
        assert "not enough energy" in result.reason
        assert attacker.model_dump() == snapshot
        assert target.hp == 40
        assert state.logs == []
        assert state.events == []

    def test_invalid_hand_index(self):
        interp, state, attacker, _ = _setup(strike(10))
        result = interp.play_card(state, attacker, 5)
        assert not result.accepted
        assert "invalid hand index" in result.reason
        assert attacker.energy == 3

    def test_invalid_target(self):
        interp, state, attacker, _ = _setup(strike(10))
        result = interp.play_card(state, attacker, 0, target_id="ally")
        assert not result.accepted
        assert "invalid target" in result.reason
        assert attacker.hand == ["strike"]

    def test_missing_required_selection(self):
        move = strike(5, "snipe", range=MoveRange.ANY_ENEMY)
        second = make_enemy("enemy2", column=1)
        interp, state, attacker, _ = _setup(move, extra=(second,))
        result = interp.play_card(state, attacker, 0)
        assert not result.accepted

    def test_battle_over(self):
        interp, state, attacker, _ = _setup(strike(10))
        state.phase = CombatPhase.VICTORY
        result = interp.play_card(state, attacker, 0)
        assert result.reason == "battle is over"

    def test_unknown_move_raises(self):
        interp, state, attacker, _ = _setup(strike(10))
        attacker.hand = ["no_such_move"]
        with pytest.raises(UnknownMoveError):
            interp.play_card(state, attacker, 0)


# ---------------------------------------------------------------------------
# Resolution basics
# ---------------------------------------------------------------------------

class TestPlayResolution:
    def test_spends_energy_and_discards(self):
        interp, state, attacker, target = _setup(strike(6))
        result = interp.play_card(state, attacker, 0)

        assert result.accepted
        assert result.cost == 1
        assert result.target_ids == ["enemy"]
        assert result.damage_dealt == 6
        assert attacker.energy == 2
        assert attacker.hand == []
        assert attacker.discard_pile == ["strike"]
        assert target.hp == 34

    def test_card_played_event_and_log(self):
        interp, state, attacker, _ = _setup(strike(6))
        interp.play_card(state, attacker, 0)

        assert state.logs[0].message == "Ally plays Strike (cost 1)."
        played = state.events[0]
        assert isinstance(played, CardPlayed)
        assert played.move_id == "strike"
        assert played.target_ids == ["enemy"]

    def test_vanish_card_leaves_the_deck(self):
        move = strike(6, "one_shot", vanish=True)
        interp, state, attacker, _ = _setup(move)
        interp.play_card(state, attacker, 0)
        assert attacker.vanished_pile == ["one_shot"]
        assert attacker.discard_pile == []

    def test_turn_flags_updated(self):
        guard = make_move("guard", effect(EffectKind.BLOCK, value=5), range=MoveRange.SELF)
        interp, state, attacker, _ = _setup(guard, strike(3))

        interp.play_card(state, attacker, 0)
        assert not attacker.turn_flags.first_attack_played
        assert attacker.turn_flags.cards_played == 1

        interp.play_card(state, attacker, 0)
        assert attacker.turn_flags.first_attack_played
        assert attacker.turn_flags.cards_played == 2

    def test_effects_resolve_in_order(self):
        move = make_move(
            "charge_strike",
            effect(EffectKind.APPLY_STATUS_SELF, status=StatusKind.STRENGTH, stacks=2),
            effect(EffectKind.DAMAGE, value=5),
        )
        interp, state, attacker, target = _setup(move)
        interp.play_card(state, attacker, 0)
        assert target.hp == 33  # 5 + 2 strength


# ---------------------------------------------------------------------------
# Damage effect kinds
# ---------------------------------------------------------------------------

class TestMultiHit:
    def test_block_absorbs_across_hits(self):
        move = make_move("pin", effect(EffectKind.MULTI_HIT, value=4, hits=3))
        interp, state, attacker, target = _setup(move)
        target.block = 3

        result = interp.play_card(state, attacker, 0)

        events = _damage_events(state, "enemy")
        assert [e.amount for e in events] == [1, 4, 4]
        assert [e.blocked for e in events] == [3, 0, 0]
        assert result.damage_dealt == 9
        assert target.hp == 31
        assert target.block == 0

    def test_stops_when_target_dies(self):
        move = make_move("pin", effect(EffectKind.MULTI_HIT, value=4, hits=5))
        bystander = make_enemy("enemy2", column=1)
        interp, state, attacker, target = _setup(
            move, target_kwargs={"hp": 6, "max_hp": 40}, extra=(bystander,),
        )
        interp.play_card(state, attacker, 0)
        assert len(_damage_events(state, "enemy")) == 2
        assert not target.alive


class TestDrainAndRecoil:
    def test_heal_on_hit(self):
        move = make_move("drain", effect(EffectKind.HEAL_ON_HIT, value=10, percent=0.5))
        interp, state, attacker, _ = _setup(move, attacker_kwargs={"hp": 20, "max_hp": 40})
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 25

    def test_verdant_drain_heals_full_damage(self):
        move = make_move("drain", effect(EffectKind.HEAL_ON_HIT, value=10, percent=0.5))
        interp, state, attacker, _ = _setup(move, attacker_kwargs={
            "hp": 20, "max_hp": 40, "passives": ("verdant_drain",),
        })
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 30

    def test_recoil_bypasses_block(self):
        move = make_move("take_down", effect(EffectKind.RECOIL, value=10, percent=0.25))
        interp, state, attacker, target = _setup(move)
        attacker.block = 10
        interp.play_card(state, attacker, 0)
        assert target.hp == 30
        assert attacker.hp == 38  # floor(10 * 0.25)
        assert attacker.block == 10
        recoil = _damage_events(state, "ally")
        assert recoil[0].cause == "recoil"

    def test_rock_head_prevents_recoil(self):
        move = make_move("take_down", effect(EffectKind.RECOIL, value=10, percent=0.25))
        interp, state, attacker, _ = _setup(move, attacker_kwargs={"passives": ("rock_head",)})
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 40
        assert any(e.message == "Rock Head: Ally takes no recoil!" for e in state.logs)


class TestSelfKO:
    def _explosion(self, value=10):
        return make_move(
            "explosion", effect(EffectKind.SELF_KO, value=value),
            range=MoveRange.ALL_ENEMIES, vanish=True,
        )

    def test_hits_every_target_before_fainting(self):
        partner = make_combatant("partner", column=1)
        second = make_enemy("enemy2", column=1)
        interp, state, attacker, target = _setup(self._explosion(), extra=(partner, second))

        interp.play_card(state, attacker, 0)

        assert target.hp == 30
        assert second.hp == 30
        assert not attacker.alive
        assert state.phase is CombatPhase.ONGOING
        assert attacker.vanished_pile == ["explosion"]
        assert state.logs[-1].message == "Ally faints from the blast!"

    def test_last_ally_fainting_is_a_defeat(self):
        interp, state, attacker, _ = _setup(self._explosion())
        interp.play_card(state, attacker, 0)
        assert state.phase is CombatPhase.DEFEAT

    def test_winning_blast_still_faints_the_user(self):
        partner = make_combatant("partner", column=1)
        interp, state, attacker, target = _setup(
            self._explosion(50), target_kwargs={"hp": 10, "max_hp": 40}, extra=(partner,),
        )

        interp.play_card(state, attacker, 0)

        assert state.phase is CombatPhase.VICTORY
        assert not target.alive
        assert attacker.hp == 0
        assert partner.alive
        assert any(e.message == "Ally faints from the blast!" for e in state.logs)

    def test_blast_wiping_both_sides_is_a_victory(self):
        interp, state, attacker, _ = _setup(
            self._explosion(50), target_kwargs={"hp": 10, "max_hp": 40},
        )
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 0
        assert state.phase is CombatPhase.VICTORY


class TestFixedDamage:
    def test_set_damage_logs_fixed_damage(self):
        move = make_move("dragon_rage", effect(EffectKind.SET_DAMAGE, value=10))
        interp, state, attacker, target = _setup(move)
        target.block = 4
        interp.play_card(state, attacker, 0)
        assert target.hp == 30
        assert target.block == 4
        assert any(e.message == "Enemy takes 10 fixed damage." for e in state.logs)

    def test_effectiveness_label_logged(self):
        move = strike(5, "splash", type=ElementType.WATER)
        interp, state, attacker, target = _setup(
            move, target_kwargs={"types": (ElementType.FIRE,)},
        )
        attacker.types = [ElementType.ELECTRIC]
        interp.play_card(state, attacker, 0)
        assert any(e.message == "It's super effective!" for e in state.logs)


# ---------------------------------------------------------------------------
# Terminal mid-card
# ---------------------------------------------------------------------------

class TestBattleEndsMidCard:
    def test_remaining_effects_skipped(self):
        move = make_move(
            "finisher",
            effect(EffectKind.DAMAGE, value=50),
            effect(EffectKind.APPLY_STATUS_SELF, status=StatusKind.STRENGTH, stacks=3),
        )
        interp, state, attacker, target = _setup(move, target_kwargs={"hp": 10, "max_hp": 40})

        result = interp.play_card(state, attacker, 0)

        assert result.accepted
        assert state.phase is CombatPhase.VICTORY
        assert attacker.status_stacks(StatusKind.STRENGTH) == 0
        assert attacker.discard_pile == ["finisher"]
        assert state.logs[-1].message == "Battle over: victory!"


# ---------------------------------------------------------------------------
# Non-damage effect kinds
# ---------------------------------------------------------------------------

class TestSupportEffects:
    def test_block_on_self(self):
        move = make_move("guard", effect(EffectKind.BLOCK, value=5), range=MoveRange.SELF)
        interp, state, attacker, _ = _setup(move)
        interp.play_card(state, attacker, 0)
        assert attacker.block == 5

    def test_heal_and_heal_percent(self):
        heal = make_move("recover", effect(EffectKind.HEAL, value=6), range=MoveRange.SELF)
        heal_pct = make_move(
            "roost", effect(EffectKind.HEAL_PERCENT, percent=0.25), range=MoveRange.SELF,
        )
        interp, state, attacker, _ = _setup(
            heal, heal_pct, attacker_kwargs={"hp": 10, "max_hp": 40},
        )
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 16
        interp.play_card(state, attacker, 0)
        assert attacker.hp == 26  # + floor(0.25 * 40)

    def test_apply_status_to_target(self):
        move = make_move("toxic", effect(EffectKind.APPLY_STATUS, status=StatusKind.POISON, stacks=2))
        interp, state, attacker, target = _setup(move)
        interp.play_card(state, attacker, 0)
        poison = target.get_status(StatusKind.POISON)
        assert poison.stacks == 2
        assert poison.source_id == "ally"

    def test_sheer_force_blocks_statuses(self):
        move = make_move(
            "ember",
            effect(EffectKind.DAMAGE, value=5),
            effect(EffectKind.APPLY_STATUS, status=StatusKind.BURN, stacks=1),
            type=ElementType.FIRE,
        )
        interp, state, attacker, target = _setup(
            move, attacker_kwargs={"passives": ("sheer_force",)},
        )
        interp.play_card(state, attacker, 0)
        assert target.status_stacks(StatusKind.BURN) == 0
        assert target.hp == 34  # floor(5 * 1.3)
        assert any(e.message.startswith("Sheer Force:") for e in state.logs)

    def test_draw_cards(self):
        move = make_move("focus", effect(EffectKind.DRAW_CARDS, count=2), range=MoveRange.SELF)
        interp, state, attacker, _ = _setup(move)
        attacker.draw_pile = ["a", "b", "c"]
        interp.play_card(state, attacker, 0)
        assert attacker.hand == ["c", "b"]
        drawn = [e for e in state.events if isinstance(e, CardsDrawn)]
        assert drawn[0].count == 2

    def test_draw_overflow_is_discarded(self):
        move = make_move("focus", effect(EffectKind.DRAW_CARDS, count=2), range=MoveRange.SELF)
        interp, state, attacker, _ = _setup(move)
        attacker.hand = ["focus"] + ["filler"] * (MAX_HAND_SIZE - 1)
        attacker.draw_pile = ["a", "b"]

        interp.play_card(state, attacker, 0)

        # Playing focus frees one slot; the second card overflows.
        assert len(attacker.hand) == MAX_HAND_SIZE
        assert attacker.hand[-1] == "b"
        assert "a" in attacker.discard_pile

    def test_gain_energy_capped(self):
        move = make_move(
            "charge_up", effect(EffectKind.GAIN_ENERGY, value=4), cost=0, range=MoveRange.SELF,
        )
        interp, state, attacker, _ = _setup(move)
        interp.play_card(state, attacker, 0)
        assert attacker.energy == attacker.energy_cap

    def test_cleanse_oldest_first(self):
        move = make_move("refresh", effect(EffectKind.CLEANSE, count=1), range=MoveRange.SELF)
        interp, state, attacker, _ = _setup(move)
        apply_status(state, attacker, StatusKind.BURN, 2)
        apply_status(state, attacker, StatusKind.POISON, 1)
        interp.play_card(state, attacker, 0)
        assert attacker.status_stacks(StatusKind.BURN) == 0
        assert attacker.status_stacks(StatusKind.POISON) == 1


# ---------------------------------------------------------------------------
# Cost modifiers
# ---------------------------------------------------------------------------

class TestCosts:
    def test_quick_feet_discounts_first_attack_only(self):
        interp, state, attacker, _ = _setup(
            strike(3, "a"), strike(3, "b"), attacker_kwargs={"passives": ("quick_feet",)},
        )
        first = interp.play_card(state, attacker, 0)
        second = interp.play_card(state, attacker, 0)
        assert first.cost == 0
        assert second.cost == 1

    def test_hustle_raises_attack_cost(self):
        interp, state, attacker, _ = _setup(strike(3), attacker_kwargs={"passives": ("hustle",)})
        assert interp.play_card(state, attacker, 0).cost == 2

    def test_inferno_mark_follows_card(self):
        moves = (strike(3, "a"), strike(3, "b"), strike(3, "blaze", type=ElementType.FIRE))
        interp, state, attacker, _ = _setup(*moves, attacker_kwargs={
            "passives": ("inferno_momentum",), "energy": 5,
        })
        attacker.turn_flags.inferno_momentum_index = 2

        interp.play_card(state, attacker, 0)
        assert attacker.turn_flags.inferno_momentum_index == 1

        interp.play_card(state, attacker, 1)
        assert attacker.turn_flags.inferno_momentum_index is None
