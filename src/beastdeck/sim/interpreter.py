"""Card effect interpreter -- bridge between move definitions and the
combat mechanics.

Reads a move's ordered effect list and dispatches each effect to the
mechanics functions at runtime.  Every move in the game composes the same
primitives (damage pipeline, block, heal, statuses, draw, energy, cleanse).

Usage::

    from beastdeck.sim.interpreter import CardInterpreter

    interp = CardInterpreter(registry)
    result = interp.play_card(state, combatant, hand_index=0, target_id="tidecrab-0")
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field

from beastdeck.ir.cards import SELF_KINDS, EffectKind
from beastdeck.ir.status_effects import StatusKind
from beastdeck.sim import passives
from beastdeck.sim.core.events import CardPlayed, CardsDrawn, EnergyGained
from beastdeck.sim.mechanics.block import gain_block
from beastdeck.sim.mechanics.card_piles import (
    add_to_hand,
    discard_card,
    draw_extra_cards,
    take_from_hand,
    vanish_card,
)
from beastdeck.sim.mechanics.damage import (
    apply_hit,
    calculate_hit,
    deal_direct_damage,
    heal,
)
from beastdeck.sim.mechanics.energy import effective_cost, gain_energy, spend_energy
from beastdeck.sim.mechanics.status_effects import cleanse
from beastdeck.sim.mechanics.targeting import resolve_targets
from beastdeck.sim.mechanics.type_chart import effectiveness_label

if TYPE_CHECKING:
    from beastdeck.ir.cards import CardEffect, MoveDefinition
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState
    from beastdeck.sim.mechanics.damage import DamageBreakdown

logger = logging.getLogger(__name__)


class PlayResult(BaseModel):
    """Outcome of one :meth:`CardInterpreter.play_card` call."""

    accepted: bool
    reason: str | None = None
    """Why the play was rejected; ``None`` when accepted."""

    move_id: str | None = None
    cost: int = 0
    target_ids: list[str] = Field(default_factory=list)
    damage_dealt: int = 0
    """HP removed from targets by this card (recoil excluded)."""

    @classmethod
    def rejected(cls, reason: str) -> PlayResult:
        return cls(accepted=False, reason=reason)


@dataclass
class _Play:
    """Scratch record for one card resolution."""

    source: Combatant
    move: MoveDefinition
    damage_dealt: int = 0
    damage_to_poisoned: int = 0
    self_ko_pending: bool = False
    hit_ids: list[str] = field(default_factory=list)


class CardInterpreter:
    """Resolves card plays against a :class:`CombatState`.

    The interpreter is stateless between calls -- all mutable state lives
    in the ``CombatState`` threaded through every call.

    Parameters
    ----------
    registry:
        Content registry used to resolve the move ids held in hands.
    """

    def __init__(self, registry: ContentRegistry) -> None:
        self.registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_play(
        self,
        state: CombatState,
        combatant: Combatant,
        hand_index: int,
        target_id: str | None = None,
    ) -> tuple[MoveDefinition, int, list[Combatant]] | str:
        """Check a play without mutating anything.

        Returns ``(move, effective_cost, targets)`` when the play is legal,
        otherwise the rejection reason.

        Raises
        ------
        UnknownMoveError
            If the card in hand names a move the registry does not know.
        """
        if state.is_over:
            return "battle is over"
        if not combatant.alive:
            return f"{combatant.name} is defeated"
        if not 0 <= hand_index < len(combatant.hand):
            return f"invalid hand index {hand_index}"

        move = self.registry.require_move(combatant.hand[hand_index])
        cost = effective_cost(combatant, move, hand_index)
        if combatant.energy < cost:
            return f"not enough energy for {move.name} ({combatant.energy}/{cost})"

        targets = resolve_targets(state, combatant, move, target_id)
        if targets is None:
            return f"invalid target for {move.name}"
        return move, cost, targets

    def play_card(
        self,
        state: CombatState,
        combatant: Combatant,
        hand_index: int,
        target_id: str | None = None,
    ) -> PlayResult:
        """Play a card: validate, spend energy, resolve effects, dispose of it.

        Steps:
            1. Validate everything up front; a rejected play mutates nothing.
            2. Spend the effective cost and take the card out of the hand.
            3. Resolve effects in declared order.  Self-directed kinds run
               once for the user; every other kind runs for each target in
               turn.  Dead targets are skipped and the card stops resolving
               as soon as the battle is decided.
            4. Update turn flags, hand out an echo copy, fire after-card
               passives.
            5. Vanish or discard the card.
        """
        checked = self.validate_play(state, combatant, hand_index, target_id)
        if isinstance(checked, str):
            logger.debug("Rejected play by %s: %s", combatant.id, checked)
            return PlayResult.rejected(checked)
        move, cost, targets = checked
        echo_passive = passives.echo_source(combatant, move)

        # 2. Pay
        spend_energy(combatant, cost)
        card_id = take_from_hand(combatant, hand_index)
        _shift_marked_index(combatant, hand_index)
        state.log(f"{combatant.name} plays {move.name} (cost {cost}).", combatant.id)
        state.emit(CardPlayed(
            combatant_id=combatant.id,
            move_id=move.id,
            cost=cost,
            target_ids=[t.id for t in targets],
        ))

        # 3. Resolve
        play = _Play(source=combatant, move=move)
        for effect in move.effects:
            if state.is_over:
                break
            self.execute_effect(state, play, effect, targets)

        # 4. Bookkeeping
        flags = combatant.turn_flags
        if move.is_attack:
            flags.first_attack_played = True
        flags.cards_played += 1
        if echo_passive is not None and combatant.alive:
            echo = move.echo()
            if add_to_hand(combatant, echo.id):
                state.log(f"{echo_passive.name}: {echo.name} added to hand!", combatant.id)
        if not state.is_over:
            passives.fire_after_card(state, combatant, move, play.damage_to_poisoned)
            state.check_battle_end()

        # 5. Dispose
        if move.vanish:
            vanish_card(combatant, card_id)
        else:
            discard_card(combatant, card_id)

        return PlayResult(
            accepted=True,
            move_id=move.id,
            cost=cost,
            target_ids=[t.id for t in targets],
            damage_dealt=play.damage_dealt,
        )

    def execute_effect(
        self,
        state: CombatState,
        play: _Play,
        effect: CardEffect,
        targets: list[Combatant],
    ) -> None:
        """Apply one effect to every target (or once to the user)."""
        handler = _DISPATCH.get(effect.kind)
        if handler is None:
            logger.warning("No handler for effect kind %s", effect.kind)
            return

        if effect.kind in SELF_KINDS:
            handler(self, state, play, effect, play.source)
            state.check_battle_end()
            return

        for target in targets:
            if state.is_over:
                break
            if not target.alive:
                continue
            handler(self, state, play, effect, target)
            state.check_battle_end()

        # The user faints even when the blast decided the battle.
        if play.self_ko_pending:
            play.self_ko_pending = False
            state.knock_out(play.source, f"{play.source.name} faints from the blast!")
            state.check_battle_end()

    # ------------------------------------------------------------------
    # Shared hit resolution
    # ------------------------------------------------------------------

    def _strike(
        self, state: CombatState, play: _Play, effect: CardEffect, target: Combatant
    ) -> int:
        """Run one hit through the pipeline and commit it.  Returns HP lost."""
        was_poisoned = target.status_stacks(StatusKind.POISON) > 0
        _, lost = resolve_hit(state, play.source, play.move, effect, target)
        play.damage_dealt += lost
        if was_poisoned:
            play.damage_to_poisoned += lost
        if target.id not in play.hit_ids:
            play.hit_ids.append(target.id)
        return lost

    # ------------------------------------------------------------------
    # Damage handlers
    # ------------------------------------------------------------------

    def _handle_damage(self, state, play, effect, target) -> None:
        self._strike(state, play, effect, target)

    def _handle_multi_hit(self, state, play, effect, target) -> None:
        for _ in range(effect.hits or 1):
            if state.is_over or not target.alive:
                break
            self._strike(state, play, effect, target)
            state.check_battle_end()

    def _handle_heal_on_hit(self, state, play, effect, target) -> None:
        dealt = self._strike(state, play, effect, target)
        percent = passives.heal_on_hit_percent(play.source, effect.percent or 0.0)
        heal(state, play.source, math.floor(dealt * percent))

    def _handle_recoil(self, state, play, effect, target) -> None:
        dealt = self._strike(state, play, effect, target)
        source = play.source
        if passives.prevents_recoil(source):
            if dealt > 0:
                state.log(f"Rock Head: {source.name} takes no recoil!", source.id)
            return
        recoil = math.floor(dealt * (effect.percent or 0.0))
        if recoil > 0:
            deal_direct_damage(
                state, source, recoil, source_id=source.id, cause="recoil",
            )

    def _handle_self_ko(self, state, play, effect, target) -> None:
        self._strike(state, play, effect, target)
        play.self_ko_pending = True

    # ------------------------------------------------------------------
    # Non-damage handlers
    # ------------------------------------------------------------------

    def _handle_block(self, state, play, effect, target) -> None:
        gain_block(state, target, effect.value or 0)

    def _handle_heal(self, state, play, effect, target) -> None:
        heal(state, target, effect.value or 0)

    def _handle_heal_percent(self, state, play, effect, target) -> None:
        heal(state, target, math.floor((effect.percent or 0.0) * target.max_hp))

    def _handle_apply_status(self, state, play, effect, target) -> None:
        source = play.source
        if target.id != source.id and passives.blocks_move_status(source):
            state.log(
                f"Sheer Force: {play.move.name} cannot apply {effect.status.value}.",
                source.id,
            )
            return
        passives.apply_status_from(
            state, source, target, effect.status, effect.stacks or 0, effect.duration,
        )

    def _handle_apply_status_self(self, state, play, effect, target) -> None:
        passives.apply_status_from(
            state, target, target, effect.status, effect.stacks or 0, effect.duration,
        )

    def _handle_draw_cards(self, state, play, effect, target) -> None:
        drawn, discarded = draw_extra_cards(target, effect.count or 0, state.rng)
        if discarded:
            state.log(
                f"{target.name} draws {len(drawn)} card(s); "
                f"{len(discarded)} discarded (hand full).",
                target.id,
            )
        else:
            state.log(f"{target.name} draws {len(drawn)} card(s).", target.id)
        state.emit(CardsDrawn(
            combatant_id=target.id, count=len(drawn), discarded=len(discarded),
        ))

    def _handle_gain_energy(self, state, play, effect, target) -> None:
        gained = gain_energy(target, effect.value or 0)
        state.log(f"{target.name} gains {gained} energy.", target.id)
        state.emit(EnergyGained(combatant_id=target.id, amount=gained))

    def _handle_cleanse(self, state, play, effect, target) -> None:
        cleanse(state, target, effect.count or 0)


def resolve_hit(
    state: CombatState,
    source: Combatant,
    move: MoveDefinition,
    effect: CardEffect,
    target: Combatant,
) -> tuple[DamageBreakdown, int]:
    """Calculate one hit, commit it to *target* and fire the on-hit passives.

    Shared by card plays and the damage preview (which runs it on a copy
    of the state).  Returns the breakdown and the HP the target lost.
    """
    breakdown = calculate_hit(state, source, target, move, effect)
    for flag in breakdown.consumed_flags:
        setattr(source.turn_flags, flag, True)
    if breakdown.consumed_flags:
        state.log(f"{move.name} is empowered!", source.id)

    if not breakdown.nullified:
        label = effectiveness_label(breakdown.effectiveness)
        if label is not None:
            state.log(label, target.id)

    cause = "set" if effect.kind == EffectKind.SET_DAMAGE else "attack"
    lost = apply_hit(state, target, breakdown, source_id=source.id, cause=cause)
    passives.fire_damage_hooks(state, source, target, move, lost)
    return breakdown, lost


def _shift_marked_index(combatant: Combatant, removed_index: int) -> None:
    """Keep the Inferno Momentum mark on the same card after a removal."""
    flags = combatant.turn_flags
    marked = flags.inferno_momentum_index
    if marked is None:
        return
    if marked == removed_index:
        flags.inferno_momentum_index = None
    elif marked > removed_index:
        flags.inferno_momentum_index = marked - 1


# ------------------------------------------------------------------
# Dispatch table -- maps EffectKind -> handler method
# ------------------------------------------------------------------

_DISPATCH: dict[EffectKind, Callable] = {
    EffectKind.DAMAGE: CardInterpreter._handle_damage,
    EffectKind.MULTI_HIT: CardInterpreter._handle_multi_hit,
    EffectKind.HEAL_ON_HIT: CardInterpreter._handle_heal_on_hit,
    EffectKind.RECOIL: CardInterpreter._handle_recoil,
    EffectKind.SET_DAMAGE: CardInterpreter._handle_damage,
    EffectKind.PERCENT_HP: CardInterpreter._handle_damage,
    EffectKind.SELF_KO: CardInterpreter._handle_self_ko,
    EffectKind.BLOCK: CardInterpreter._handle_block,
    EffectKind.HEAL: CardInterpreter._handle_heal,
    EffectKind.HEAL_PERCENT: CardInterpreter._handle_heal_percent,
    EffectKind.APPLY_STATUS: CardInterpreter._handle_apply_status,
    EffectKind.APPLY_STATUS_SELF: CardInterpreter._handle_apply_status_self,
    EffectKind.DRAW_CARDS: CardInterpreter._handle_draw_cards,
    EffectKind.GAIN_ENERGY: CardInterpreter._handle_gain_energy,
    EffectKind.CLEANSE: CardInterpreter._handle_cleanse,
}
