"""Passive abilities -- a registry of small typed hook implementations.

Every passive id a combatant may carry maps to one :class:`Passive`
instance in :data:`PASSIVES`.  A passive overrides only the hooks it
needs; the damage pipeline, the preview, the interpreter and the turn
scheduler all consult the registry through the helpers at the bottom of
this module, so the live and forecast numbers come from the same code.

Hook families:

- damage pipeline (pure): ``additive``, ``multiplier``, ``effectiveness``,
  ``reduction``, ``side_reduction``, ``defend_multiplier``, ``damage_cap``,
  ``nullifies``
- play-time queries (pure): ``cost_delta``, ``heal_on_hit_percent``,
  ``immune_to``, ``rewrites_row_ranges``, ``blocks_move_status``,
  ``redirects_type``, ``echoes``
- reactions (mutate state): ``on_battle_start``, ``on_turn_start``,
  ``on_turn_end``, ``on_damage_dealt``, ``on_damage_taken``,
  ``on_ally_damaged``, ``on_status_applied``, ``after_card``
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from beastdeck.ir.cards import (
    CardRarity,
    EffectKind,
    ElementType,
    base_move_id,
    is_echo_id,
)
from beastdeck.ir.status_effects import DEBUFF_KINDS, StatusKind
from beastdeck.sim.core.errors import UnknownPassiveError
from beastdeck.sim.mechanics.status_effects import (
    apply_status,
    effective_speed,
    reduce_largest_debuff,
)
from beastdeck.sim.mechanics.targeting import adjacent_allies

if TYPE_CHECKING:
    from beastdeck.ir.cards import MoveDefinition
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.entities import Combatant, StatusInstance
    from beastdeck.sim.core.game_state import CombatState

logger = logging.getLogger(__name__)

# Moves some passives key on by id.
GUST_MOVE_ID = "gust"
REST_MOVE_ID = "rest"


# ---------------------------------------------------------------------------
# Pipeline context
# ---------------------------------------------------------------------------

@dataclass
class DamageContext:
    """Read-only view handed to the pure pipeline hooks."""

    state: CombatState
    source: Combatant
    target: Combatant
    move: MoveDefinition
    effect_kind: EffectKind

    used_flags: frozenset[str] = frozenset()
    """Once-per-turn ``TurnFlags`` fields already consumed by the source."""

    def flag_used(self, flag: str) -> bool:
        return flag in self.used_flags


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class Passive:
    """Base passive: every hook is a no-op."""

    id: str = ""
    name: str = ""

    rewrites_row_ranges: bool = False
    """Row-scoped ranges of the holder's moves hit all enemies instead."""

    blocks_move_status: bool = False
    """The holder's moves cannot apply statuses to other units."""

    turn_flag: str | None = None
    """``TurnFlags`` field this passive's multiplier consumes, if any."""

    redirects_type: ElementType | None = None
    """Moves of this type aimed at a same-row ally hit the holder instead."""

    # -- damage pipeline (attacker side) -------------------------------------

    def additive(self, ctx: DamageContext) -> int:
        return 0

    def multiplier(self, ctx: DamageContext) -> float | None:
        return None

    def effectiveness(self, ctx: DamageContext, value: float) -> float:
        return value

    # -- damage pipeline (defender side) -------------------------------------

    def reduction(self, ctx: DamageContext) -> int:
        return 0

    def side_reduction(self, ctx: DamageContext) -> int:
        """Reduction granted once to every unit on the holder's side."""
        return 0

    def defend_multiplier(self, ctx: DamageContext) -> float | None:
        return None

    def nullifies(self, ctx: DamageContext) -> bool:
        return False

    def damage_cap(self, ctx: DamageContext) -> int | None:
        """Most damage one hit may deal to the holder."""
        return None

    # -- play-time queries ---------------------------------------------------

    def cost_delta(
        self, combatant: Combatant, move: MoveDefinition, hand_index: int | None
    ) -> int:
        return 0

    def heal_on_hit_percent(self, percent: float) -> float:
        return percent

    def immune_to(self, kind: StatusKind) -> bool:
        return False

    def poison_multiplier(self) -> int:
        """Multiplier on poison ticks for statuses this holder applied."""
        return 1

    def retained_block(self, block: int) -> int:
        """Block kept when the holder's block resets at turn start."""
        return 0

    def echoes(self, combatant: Combatant, move: MoveDefinition) -> bool:
        """Playing *move* adds its echo copy to the holder's hand."""
        return False

    # -- reactions -----------------------------------------------------------

    def on_battle_start(self, state: CombatState, holder: Combatant) -> None:
        pass

    def on_turn_start(
        self, state: CombatState, holder: Combatant, registry: ContentRegistry
    ) -> None:
        pass

    def on_turn_end(self, state: CombatState, holder: Combatant) -> None:
        pass

    def on_damage_dealt(
        self,
        state: CombatState,
        holder: Combatant,
        target: Combatant,
        move: MoveDefinition,
        dealt: int,
    ) -> None:
        pass

    def on_damage_taken(
        self,
        state: CombatState,
        holder: Combatant,
        attacker: Combatant,
        move: MoveDefinition,
        dealt: int,
    ) -> None:
        pass

    def on_ally_damaged(
        self, state: CombatState, holder: Combatant, ally: Combatant
    ) -> None:
        pass

    def on_status_applied(
        self,
        state: CombatState,
        holder: Combatant,
        target: Combatant,
        kind: StatusKind,
        stacks: int,
    ) -> None:
        pass

    def after_card(
        self,
        state: CombatState,
        holder: Combatant,
        move: MoveDefinition,
        damage_to_poisoned: int,
    ) -> None:
        pass


# ---------------------------------------------------------------------------
# Additive bonuses
# ---------------------------------------------------------------------------

class _TypeBonus(Passive):
    """Flat bonus on moves of one type."""

    move_type: ElementType = ElementType.NORMAL
    bonus: int = 2

    def additive(self, ctx: DamageContext) -> int:
        return self.bonus if ctx.move.type == self.move_type else 0


class Scrappy(_TypeBonus):
    id = "scrappy"
    name = "Scrappy"
    move_type = ElementType.NORMAL


class PoisonBarb(_TypeBonus):
    id = "poison_barb"
    name = "Poison Barb"
    move_type = ElementType.POISON


class Underdog(Passive):
    id = "underdog"
    name = "Underdog"

    def additive(self, ctx: DamageContext) -> int:
        if ctx.move.cost == 1 and ctx.move.rarity in (CardRarity.BASIC, CardRarity.COMMON):
            return 2
        return 0


class Adaptability(Passive):
    """STAB counts double."""

    id = "adaptability"
    name = "Adaptability"

    def additive(self, ctx: DamageContext) -> int:
        return 2 if ctx.move.type in ctx.source.types else 0


class KeenEye(Passive):
    id = "keen_eye"
    name = "Keen Eye"

    def additive(self, ctx: DamageContext) -> int:
        return 1 if ctx.target.status_stacks(StatusKind.SLOW) > 0 else 0


class PredatorsPatience(Passive):
    id = "predators_patience"
    name = "Predator's Patience"

    def additive(self, ctx: DamageContext) -> int:
        return 2 if ctx.target.status_stacks(StatusKind.POISON) > 0 else 0


class FortifiedCannons(Passive):
    id = "fortified_cannons"
    name = "Fortified Cannons"

    def additive(self, ctx: DamageContext) -> int:
        if ctx.move.type != ElementType.WATER:
            return 0
        return math.floor(ctx.source.block * 0.25)


class CounterCurrent(Passive):
    """Bonus against slower targets."""

    id = "counter_current"
    name = "Counter Current"

    def additive(self, ctx: DamageContext) -> int:
        gap = effective_speed(ctx.source) - effective_speed(ctx.target)
        return gap // 2 if gap > 0 else 0


class Relentless(Passive):
    id = "relentless"
    name = "Relentless"

    def additive(self, ctx: DamageContext) -> int:
        return ctx.source.turn_flags.cards_played


# ---------------------------------------------------------------------------
# Multipliers (applied in registry order)
# ---------------------------------------------------------------------------

class _FirstOfTypeDouble(Passive):
    """x2 on the first damage of one type each turn."""

    move_type: ElementType = ElementType.FIRE

    def multiplier(self, ctx: DamageContext) -> float | None:
        if ctx.move.type != self.move_type or ctx.flag_used(self.turn_flag):
            return None
        return 2.0


class BlazeStrike(_FirstOfTypeDouble):
    id = "blaze_strike"
    name = "Blaze Strike"
    move_type = ElementType.FIRE
    turn_flag = "blaze_strike_used"


class SwarmStrike(_FirstOfTypeDouble):
    id = "swarm_strike"
    name = "Swarm Strike"
    move_type = ElementType.BUG
    turn_flag = "swarm_strike_used"


class _Desperation(Passive):
    def multiplier(self, ctx: DamageContext) -> float | None:
        return 1.5 if ctx.source.below_half_hp else None


class RagingBull(_Desperation):
    id = "raging_bull"
    name = "Raging Bull"


class AngerPoint(_Desperation):
    id = "anger_point"
    name = "Anger Point"


class SheerForce(Passive):
    id = "sheer_force"
    name = "Sheer Force"
    blocks_move_status = True

    def multiplier(self, ctx: DamageContext) -> float | None:
        return 1.3


class Hustle(Passive):
    """Harder hits, pricier attacks, one more card in hand."""

    id = "hustle"
    name = "Hustle"

    def multiplier(self, ctx: DamageContext) -> float | None:
        return 1.3

    def cost_delta(self, combatant, move, hand_index) -> int:
        return 1 if move.is_attack else 0

    def on_battle_start(self, state, holder) -> None:
        holder.hand_size += 1
        state.log(
            f"Hustle: {holder.name}'s hand size increased to {holder.hand_size}!",
            holder.id,
        )


class Reckless(Passive):
    id = "reckless"
    name = "Reckless"

    def multiplier(self, ctx: DamageContext) -> float | None:
        return 1.3 if ctx.effect_kind == EffectKind.RECOIL else None


class Volatile(Passive):
    id = "volatile"
    name = "Volatile"

    def multiplier(self, ctx: DamageContext) -> float | None:
        return 1.5 if ctx.effect_kind == EffectKind.SELF_KO else None


# ---------------------------------------------------------------------------
# Effectiveness
# ---------------------------------------------------------------------------

class TintedLens(Passive):
    """Resisted hits land at full strength; immunities still hold."""

    id = "tinted_lens"
    name = "Tinted Lens"

    def effectiveness(self, ctx: DamageContext, value: float) -> float:
        return 1.0 if 0 < value < 1 else value


# ---------------------------------------------------------------------------
# Defensive
# ---------------------------------------------------------------------------

class ThickHide(Passive):
    id = "thick_hide"
    name = "Thick Hide"

    def reduction(self, ctx: DamageContext) -> int:
        return 1


class StaticField(Passive):
    """Reduction against slower attackers."""

    id = "static_field"
    name = "Static Field"

    def reduction(self, ctx: DamageContext) -> int:
        gap = effective_speed(ctx.target) - effective_speed(ctx.source)
        return gap // 2 if gap > 0 else 0


class BloomingCycle(Passive):
    """The whole side shrugs off half of the attacker's leech stacks."""

    id = "blooming_cycle"
    name = "Blooming Cycle"

    def side_reduction(self, ctx: DamageContext) -> int:
        return ctx.source.status_stacks(StatusKind.LEECH) // 2


class ThickFat(Passive):
    id = "thick_fat"
    name = "Thick Fat"

    def defend_multiplier(self, ctx: DamageContext) -> float | None:
        if ctx.move.type in (ElementType.FIRE, ElementType.ICE):
            return 0.75
        return None


class WaterAbsorb(Passive):
    id = "water_absorb"
    name = "Water Absorb"

    def nullifies(self, ctx: DamageContext) -> bool:
        return ctx.move.type == ElementType.WATER


class Immunity(Passive):
    id = "immunity"
    name = "Immunity"

    def immune_to(self, kind: StatusKind) -> bool:
        return kind in (StatusKind.POISON, StatusKind.BURN)


class PressureHull(Passive):
    id = "pressure_hull"
    name = "Pressure Hull"

    def retained_block(self, block: int) -> int:
        return block // 2


class RockHead(Passive):
    """No recoil damage."""

    id = "rock_head"
    name = "Rock Head"


class ShellArmor(Passive):
    id = "shell_armor"
    name = "Shell Armor"

    def damage_cap(self, ctx: DamageContext) -> int | None:
        return 20


# ---------------------------------------------------------------------------
# Cost modifiers
# ---------------------------------------------------------------------------

class QuickFeet(Passive):
    id = "quick_feet"
    name = "Quick Feet"

    def cost_delta(self, combatant, move, hand_index) -> int:
        if move.is_attack and not combatant.turn_flags.first_attack_played:
            return -1
        return 0


class InfernoMomentum(Passive):
    """The priciest fire card in the opening hand costs 3 less."""

    id = "inferno_momentum"
    name = "Inferno Momentum"

    def cost_delta(self, combatant, move, hand_index) -> int:
        marked = combatant.turn_flags.inferno_momentum_index
        if marked is not None and hand_index == marked:
            return -3
        return 0

    def on_turn_start(self, state, holder, registry) -> None:
        best_index: int | None = None
        best_cost = 0
        for i, move_id in enumerate(holder.hand):
            move = registry.require_move(move_id)
            if move.type == ElementType.FIRE and move.cost > best_cost:
                best_index, best_cost = i, move.cost
        holder.turn_flags.inferno_momentum_index = best_index
        if best_index is not None:
            move = registry.require_move(holder.hand[best_index])
            state.log(
                f"Inferno Momentum: {move.name} cost reduced to {max(best_cost - 3, 0)}!",
                holder.id,
            )


class HypnoticGaze(Passive):
    """Psychic cards cost more but put their target to sleep."""

    id = "hypnotic_gaze"
    name = "Hypnotic Gaze"

    def cost_delta(self, combatant, move, hand_index) -> int:
        return 1 if move.type == ElementType.PSYCHIC else 0

    def on_damage_dealt(self, state, holder, target, move, dealt) -> None:
        if move.type == ElementType.PSYCHIC and dealt > 0:
            apply_status_from(state, holder, target, StatusKind.SLEEP, 1)


# ---------------------------------------------------------------------------
# Echo copies
# ---------------------------------------------------------------------------

class ParentalBond(Passive):
    """The first attack each turn leaves a half-strength echo in hand."""

    id = "parental_bond"
    name = "Parental Bond"

    def echoes(self, combatant, move) -> bool:
        return move.is_attack and not combatant.turn_flags.first_attack_played


class FamilyFury(Passive):
    """Below half HP every attack echoes."""

    id = "family_fury"
    name = "Family Fury"

    def echoes(self, combatant, move) -> bool:
        return move.is_attack and combatant.below_half_hp


# ---------------------------------------------------------------------------
# Range, heal and status gates
# ---------------------------------------------------------------------------

class WhippingWinds(Passive):
    id = "whipping_winds"
    name = "Whipping Winds"
    rewrites_row_ranges = True


class Hurricane(Passive):
    id = "hurricane"
    name = "Hurricane"
    rewrites_row_ranges = True


class LightningRod(Passive):
    id = "lightning_rod"
    name = "Lightning Rod"
    redirects_type = ElementType.ELECTRIC


class VerdantDrain(Passive):
    id = "verdant_drain"
    name = "Verdant Drain"

    def heal_on_hit_percent(self, percent: float) -> float:
        return 1.0


# ---------------------------------------------------------------------------
# Battle and turn hooks
# ---------------------------------------------------------------------------

class Scurry(Passive):
    id = "scurry"
    name = "Scurry"

    def on_battle_start(self, state, holder) -> None:
        state.log(f"Scurry: {holder.name} gains 2 Haste!", holder.id)
        apply_status(state, holder, StatusKind.HASTE, 2, holder.id)


class Intimidate(Passive):
    id = "intimidate"
    name = "Intimidate"

    def on_battle_start(self, state, holder) -> None:
        state.log(
            f"Intimidate: {holder.name} applies 2 Enfeeble to all enemies!", holder.id,
        )
        for enemy in state.opponents_of(holder):
            apply_status(state, enemy, StatusKind.ENFEEBLE, 2, holder.id)


class BabyShell(Passive):
    id = "baby_shell"
    name = "Baby Shell"

    def on_turn_start(self, state, holder, registry) -> None:
        state.add_block(holder, 3)


class Charge(Passive):
    id = "charge"
    name = "Charge"

    def on_turn_start(self, state, holder, registry) -> None:
        apply_status(state, holder, StatusKind.STRENGTH, 1, holder.id)


class Leftovers(Passive):
    id = "leftovers"
    name = "Leftovers"

    def on_turn_end(self, state, holder) -> None:
        state.heal_combatant(holder, 4)


class ShedSkin(Passive):
    id = "shed_skin"
    name = "Shed Skin"

    def on_turn_end(self, state, holder) -> None:
        kind = reduce_largest_debuff(state, holder)
        if kind is not None:
            state.log(
                f"Shed Skin: {holder.name} sheds 1 {kind.value.capitalize()}!",
                holder.id,
            )


# ---------------------------------------------------------------------------
# On-hit (attacker side)
# ---------------------------------------------------------------------------

class _OnHitStatus(Passive):
    """Unblocked hits of one type apply a status to the target."""

    move_type: ElementType = ElementType.FIRE
    status: StatusKind = StatusKind.BURN

    def on_damage_dealt(self, state, holder, target, move, dealt) -> None:
        if move.type == self.move_type and dealt > 0:
            apply_status_from(state, holder, target, self.status, 1)


class Kindling(_OnHitStatus):
    id = "kindling"
    name = "Kindling"
    move_type = ElementType.FIRE
    status = StatusKind.BURN


class BabyVines(_OnHitStatus):
    id = "baby_vines"
    name = "Baby Vines"
    move_type = ElementType.GRASS
    status = StatusKind.LEECH


class NumbingStrike(_OnHitStatus):
    id = "numbing_strike"
    name = "Numbing Strike"
    move_type = ElementType.ELECTRIC
    status = StatusKind.PARALYSIS


class PoisonPoint(_OnHitStatus):
    id = "poison_point"
    name = "Poison Point"
    move_type = ElementType.POISON
    status = StatusKind.POISON


class TorrentShield(Passive):
    id = "torrent_shield"
    name = "Torrent Shield"

    def on_damage_dealt(self, state, holder, target, move, dealt) -> None:
        flags = holder.turn_flags
        if move.type != ElementType.WATER or dealt <= 0 or flags.torrent_shield_used:
            return
        flags.torrent_shield_used = True
        state.log(f"Torrent Shield: {holder.name} hardens!", holder.id)
        state.add_block(holder, dealt)


class GustForce(Passive):
    id = "gust_force"
    name = "Gust Force"

    def on_damage_dealt(self, state, holder, target, move, dealt) -> None:
        if base_move_id(move.id) != GUST_MOVE_ID or dealt <= 0 or not target.alive:
            return
        state.log(f"Gust Force: +1 Slow applied to {target.name}!", holder.id)
        apply_status_from(state, holder, target, StatusKind.SLOW, 1)


class OvergrowHeal(Passive):
    id = "overgrow_heal"
    name = "Overgrow Heal"

    def on_damage_dealt(self, state, holder, target, move, dealt) -> None:
        flags = holder.turn_flags
        if move.type != ElementType.GRASS or dealt <= 0 or flags.overgrow_heal_used:
            return
        flags.overgrow_heal_used = True
        state.heal_combatant(holder, dealt)


# ---------------------------------------------------------------------------
# On-hit (defender side)
# ---------------------------------------------------------------------------

class FlashFire(Passive):
    id = "flash_fire"
    name = "Flash Fire"

    def on_damage_taken(self, state, holder, attacker, move, dealt) -> None:
        if move.type == ElementType.FIRE:
            state.log(f"Flash Fire: {holder.name} absorbs the heat!", holder.id)
            apply_status(state, holder, StatusKind.STRENGTH, 2, holder.id)


class _Retaliate(Passive):
    status: StatusKind = StatusKind.BURN

    def on_damage_taken(self, state, holder, attacker, move, dealt) -> None:
        if attacker.alive:
            state.log(f"{self.name}: {attacker.name} is hurt by contact!", holder.id)
            apply_status(state, attacker, self.status, 1, holder.id)


class FlameBody(_Retaliate):
    id = "flame_body"
    name = "Flame Body"
    status = StatusKind.BURN


class Static(_Retaliate):
    id = "static"
    name = "Static"
    status = StatusKind.PARALYSIS


class ProtectiveInstinct(Passive):
    id = "protective_instinct"
    name = "Protective Instinct"

    def on_ally_damaged(self, state, holder, ally) -> None:
        state.add_block(holder, 3)


# ---------------------------------------------------------------------------
# Status spreading (source side; spreads never re-trigger hooks)
# ---------------------------------------------------------------------------

class _SpreadOneStack(Passive):
    status: StatusKind = StatusKind.BURN

    def on_status_applied(self, state, holder, target, kind, stacks) -> None:
        if kind != self.status:
            return
        for neighbour in adjacent_allies(state, target):
            if apply_status(state, neighbour, kind, 1, holder.id):
                state.log(
                    f"{self.name}: 1 {kind.value.capitalize()} spreads to {neighbour.name}!",
                    holder.id,
                )


class SpreadingFlames(_SpreadOneStack):
    id = "spreading_flames"
    name = "Spreading Flames"
    status = StatusKind.BURN


class SpreadingSpores(_SpreadOneStack):
    id = "spreading_spores"
    name = "Spreading Spores"
    status = StatusKind.LEECH


class DrowsyAura(Passive):
    id = "drowsy_aura"
    name = "Drowsy Aura"

    def on_status_applied(self, state, holder, target, kind, stacks) -> None:
        if kind == StatusKind.SLEEP:
            apply_status(state, target, StatusKind.ENFEEBLE, 1, holder.id)


class CompoundEyes(Passive):
    id = "compound_eyes"
    name = "Compound Eyes"

    def on_status_applied(self, state, holder, target, kind, stacks) -> None:
        if kind in DEBUFF_KINDS and target.side != holder.side:
            apply_status(state, holder, StatusKind.EVASION, 1, holder.id)


class PowderSpread(Passive):
    id = "powder_spread"
    name = "Powder Spread"

    def on_status_applied(self, state, holder, target, kind, stacks) -> None:
        if kind not in DEBUFF_KINDS or target.side == holder.side:
            return
        for neighbour in adjacent_allies(state, target):
            apply_status(state, neighbour, kind, 1, holder.id)


# ---------------------------------------------------------------------------
# After a card resolves
# ---------------------------------------------------------------------------

class ToxicHorn(Passive):
    id = "toxic_horn"
    name = "Toxic Horn"

    def after_card(self, state, holder, move, damage_to_poisoned) -> None:
        gain = damage_to_poisoned // 4
        if gain > 0:
            apply_status(state, holder, StatusKind.STRENGTH, gain, holder.id)


class ProtectiveToxins(Passive):
    id = "protective_toxins"
    name = "Protective Toxins"

    def after_card(self, state, holder, move, damage_to_poisoned) -> None:
        gain = damage_to_poisoned // 2
        if gain <= 0:
            return
        for ally in state.allies_of(holder):
            state.add_block(ally, gain)


class Slipstream(Passive):
    """Gust pulls every waiting ally forward to act right after the holder."""

    id = "slipstream"
    name = "Slipstream"

    def after_card(self, state, holder, move, damage_to_poisoned) -> None:
        from beastdeck.sim.scheduler import move_allies_next

        if base_move_id(move.id) != GUST_MOVE_ID:
            return
        allies = move_allies_next(state, holder)
        if allies:
            names = ", ".join(a.name for a in allies)
            state.log(
                f"{holder.name}'s gust stirs up a slipstream! {names} will act next!",
                holder.id,
            )


class PowerNap(Passive):
    id = "power_nap"
    name = "Power Nap"

    def after_card(self, state, holder, move, damage_to_poisoned) -> None:
        if base_move_id(move.id) != REST_MOVE_ID:
            return
        state.log(f"Power Nap: {holder.name} gains 3 Strength from Rest!", holder.id)
        apply_status(state, holder, StatusKind.STRENGTH, 3, holder.id)


class PotentVenom(Passive):
    id = "potent_venom"
    name = "Potent Venom"

    def poison_multiplier(self) -> int:
        return 2


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Insertion order is evaluation order; the multiplier passives must stay in
# this relative order.
_PASSIVE_CLASSES: tuple[type[Passive], ...] = (
    BlazeStrike, SwarmStrike, RagingBull, AngerPoint, SheerForce, Hustle,
    Reckless, Volatile,
    Scrappy, Underdog, PoisonBarb, Adaptability, KeenEye, PredatorsPatience,
    FortifiedCannons, CounterCurrent, Relentless,
    TintedLens,
    ThickHide, StaticField, BloomingCycle, ThickFat, WaterAbsorb,
    Immunity, PressureHull, RockHead, ShellArmor,
    QuickFeet, InfernoMomentum, HypnoticGaze,
    ParentalBond, FamilyFury,
    WhippingWinds, Hurricane, LightningRod, VerdantDrain,
    Scurry, Intimidate, BabyShell, Charge, Leftovers, ShedSkin,
    Kindling, BabyVines, NumbingStrike, PoisonPoint, TorrentShield, GustForce,
    OvergrowHeal,
    FlashFire, FlameBody, Static, ProtectiveInstinct,
    SpreadingFlames, SpreadingSpores, DrowsyAura, CompoundEyes, PowderSpread,
    ToxicHorn, ProtectiveToxins, Slipstream, PowerNap, PotentVenom,
)

PASSIVES: dict[str, Passive] = {cls.id: cls() for cls in _PASSIVE_CLASSES}


def get_passive(passive_id: str) -> Passive | None:
    return PASSIVES.get(passive_id)


def validate_passive_ids(combatant: Combatant) -> None:
    """Raise :class:`UnknownPassiveError` for any unregistered passive id."""
    for passive_id in combatant.passive_ids:
        if passive_id not in PASSIVES:
            raise UnknownPassiveError(passive_id, combatant.id)


def held(combatant: Combatant) -> list[Passive]:
    """Passives *combatant* holds, in registry order."""
    return [p for pid, p in PASSIVES.items() if combatant.has_passive(pid)]


def _side_held(state: CombatState, combatant: Combatant) -> list[Passive]:
    """Distinct passives held by any living unit on *combatant*'s side."""
    ids = {pid for c in state.allies_of(combatant) for pid in c.passive_ids}
    ids.update(combatant.passive_ids)
    return [p for pid, p in PASSIVES.items() if pid in ids]


# -- pure queries ------------------------------------------------------------

def rewrites_row_ranges(combatant: Combatant) -> bool:
    return any(p.rewrites_row_ranges for p in held(combatant))


def blocks_move_status(combatant: Combatant) -> bool:
    return any(p.blocks_move_status for p in held(combatant))


def is_immune(combatant: Combatant, kind: StatusKind) -> bool:
    return any(p.immune_to(kind) for p in held(combatant))


def prevents_recoil(combatant: Combatant) -> bool:
    return combatant.has_passive(RockHead.id)


def echo_source(combatant: Combatant, move: MoveDefinition) -> Passive | None:
    """The passive that makes *move* leave an echo copy, if any.

    Echo copies never echo again.
    """
    if is_echo_id(move.id):
        return None
    return next((p for p in held(combatant) if p.echoes(combatant, move)), None)


def redirect_target(
    state: CombatState, target: Combatant, move: MoveDefinition
) -> Combatant:
    """The unit that actually takes *move* when it is aimed at *target*.

    A living same-row ally of *target* whose passives draw the move's type
    takes the hit instead, unless *target* draws it itself.
    """

    def draws(unit: Combatant) -> bool:
        return any(p.redirects_type == move.type for p in held(unit))

    if draws(target):
        return target
    for ally in state.allies_of(target):
        same_row = ally.position.row == target.position.row
        if ally.id != target.id and same_row and draws(ally):
            return ally
    return target


def heal_on_hit_percent(combatant: Combatant, percent: float) -> float:
    for passive in held(combatant):
        percent = passive.heal_on_hit_percent(percent)
    return percent


def cost_delta(
    combatant: Combatant, move: MoveDefinition, hand_index: int | None
) -> int:
    """Sum of every cost modifier the holder's passives put on *move*."""
    return sum(p.cost_delta(combatant, move, hand_index) for p in held(combatant))


def retained_block(combatant: Combatant) -> int:
    return max((p.retained_block(combatant.block) for p in held(combatant)), default=0)


def poison_multiplier(state: CombatState, status: StatusInstance) -> int:
    """Poison tick multiplier from the passives of the unit that applied it."""
    if status.source_id is None:
        return 1
    source = state.get_combatant(status.source_id)
    if source is None:
        return 1
    multiplier = 1
    for passive in held(source):
        multiplier *= passive.poison_multiplier()
    return multiplier


def additive_bonus(ctx: DamageContext) -> int:
    return sum(p.additive(ctx) for p in held(ctx.source))


def multipliers(ctx: DamageContext) -> list[tuple[Passive, float]]:
    """Active attacker multipliers, in registry order."""
    active: list[tuple[Passive, float]] = []
    for passive in held(ctx.source):
        value = passive.multiplier(ctx)
        if value is not None:
            active.append((passive, value))
    return active


def adjust_effectiveness(ctx: DamageContext, value: float) -> float:
    for passive in held(ctx.source):
        value = passive.effectiveness(ctx, value)
    return value


def defensive_reduction(ctx: DamageContext) -> int:
    own = sum(p.reduction(ctx) for p in held(ctx.target))
    side = sum(p.side_reduction(ctx) for p in _side_held(ctx.state, ctx.target))
    return own + side


def defend_multipliers(ctx: DamageContext) -> list[float]:
    values = [p.defend_multiplier(ctx) for p in held(ctx.target)]
    return [v for v in values if v is not None]


def damage_cap(ctx: DamageContext) -> int | None:
    caps = [c for c in (p.damage_cap(ctx) for p in held(ctx.target)) if c is not None]
    return min(caps, default=None)


def nullifies(ctx: DamageContext) -> bool:
    return any(p.nullifies(ctx) for p in held(ctx.target))


# -- reactions ---------------------------------------------------------------

def _fire(holders: Iterable[Combatant], hook: str, state: CombatState, *args) -> None:
    for holder in holders:
        for passive in held(holder):
            if state.is_over:
                return
            getattr(passive, hook)(state, holder, *args)


def fire_battle_start(state: CombatState) -> None:
    _fire(state.living(), "on_battle_start", state)


def fire_turn_start(
    state: CombatState, combatant: Combatant, registry: ContentRegistry
) -> None:
    _fire([combatant], "on_turn_start", state, registry)


def fire_turn_end(state: CombatState, combatant: Combatant) -> None:
    _fire([combatant], "on_turn_end", state)


def fire_after_card(
    state: CombatState, combatant: Combatant, move: MoveDefinition, damage_to_poisoned: int
) -> None:
    _fire([combatant], "after_card", state, move, damage_to_poisoned)


def fire_damage_hooks(
    state: CombatState,
    attacker: Combatant,
    target: Combatant,
    move: MoveDefinition,
    dealt: int,
) -> None:
    """React to *dealt* HP lost by *target* from *attacker*'s move.

    Runs the attacker's on-hit passives, then the target's on-damage-taken
    passives (while it lives), then every living ally's reaction.
    """
    if dealt <= 0:
        return
    _fire([attacker], "on_damage_dealt", state, target, move, dealt)
    if target.alive:
        _fire([target], "on_damage_taken", state, attacker, move, dealt)
    allies = [c for c in state.allies_of(target) if c.id != target.id]
    _fire(allies, "on_ally_damaged", state, target)


def apply_status_from(
    state: CombatState,
    source: Combatant,
    target: Combatant,
    kind: StatusKind,
    stacks: int,
    duration: int | None = None,
) -> bool:
    """Apply a status on behalf of *source* and run its status hooks.

    Statuses added by the hooks themselves go through plain
    :func:`apply_status`, so spreading never cascades.
    """
    applied = apply_status(state, target, kind, stacks, source.id, duration)
    if applied:
        _fire([source], "on_status_applied", state, target, kind, stacks)
    return applied
