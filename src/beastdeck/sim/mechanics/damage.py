"""Damage calculation and application.

Implements the hit pipeline:
    base + bonus -> + strength + STAB + passive additives - enfeeble (min 1)
    -> passive multipliers (floor each) -> type effectiveness (floor)
    -> defensive reductions (min 0) -> defensive multipliers (floor)
    -> per-hit damage cap
    -> evasion (min 0) -> block absorption

:func:`calculate_hit` is pure; :func:`apply_hit` then commits a breakdown
to the target.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from beastdeck.ir.cards import BonusCondition, EffectKind
from beastdeck.ir.status_effects import StatusKind
from beastdeck.sim import passives
from beastdeck.sim.mechanics.status_effects import debuff_stacks
from beastdeck.sim.mechanics.type_chart import get_type_effectiveness

if TYPE_CHECKING:
    from beastdeck.ir.cards import CardEffect, MoveDefinition
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState

STAB_BONUS = 2

# TurnFlags fields consumed by once-per-turn damage multipliers.
ONCE_PER_TURN_FLAGS = ("blaze_strike_used", "swarm_strike_used")


class DamageBreakdown(BaseModel):
    """Every intermediate value of one hit, in pipeline order."""

    base: int = 0
    """Effect value plus bonus-condition addend (step 1)."""

    after_additive: int = 0
    after_multipliers: int = 0
    effectiveness: float = 1.0
    after_effectiveness: int = 0
    after_reduction: int = 0
    after_defend: int = 0
    evasion_reduction: int = 0
    after_evasion: int = 0
    """Damage that reaches block (step 7)."""

    blocked: int = 0
    final: int = 0
    """HP the target will lose."""

    nullified: bool = False
    """The target's passives cancelled the hit outright."""

    consumed_flags: list[str] = Field(default_factory=list)
    """Once-per-turn ``TurnFlags`` fields this hit uses up."""


# -- helpers -----------------------------------------------------------------

def stab_bonus(source: Combatant, move: MoveDefinition) -> int:
    """Flat same-type bonus when *move* shares a type with *source*."""
    return STAB_BONUS if move.type in source.types else 0


def used_flags_of(combatant: Combatant) -> frozenset[str]:
    return frozenset(
        flag for flag in ONCE_PER_TURN_FLAGS if getattr(combatant.turn_flags, flag)
    )


def bonus_addend(source: Combatant, target: Combatant, effect: CardEffect) -> int:
    """Extra base damage from the effect's bonus condition, if it holds."""
    condition = effect.bonus_condition
    if condition is None:
        return 0
    if condition == BonusCondition.USER_BELOW_HALF_HP:
        return effect.bonus_value if source.below_half_hp else 0
    if condition == BonusCondition.TARGET_DEBUFF_STACKS_AT_LEAST:
        if debuff_stacks(target) >= effect.bonus_threshold:
            return effect.bonus_value
        return 0
    if condition == BonusCondition.PER_TARGET_DEBUFF_STACK:
        return effect.bonus_value * debuff_stacks(target)
    return 0


def _absorb(breakdown: DamageBreakdown, after_evasion: int, block: int) -> None:
    breakdown.after_evasion = after_evasion
    breakdown.blocked = min(after_evasion, block)
    breakdown.final = after_evasion - breakdown.blocked


# ---------------------------------------------------------------------------
# Pure pipeline
# ---------------------------------------------------------------------------

def calculate_hit(
    state: CombatState,
    source: Combatant,
    target: Combatant,
    move: MoveDefinition,
    effect: CardEffect,
) -> DamageBreakdown:
    """Compute one hit of *effect* from *source* against *target*.

    Nothing is mutated; once-per-turn multipliers report the flags they
    would consume in ``consumed_flags``.
    """
    block = target.block
    ctx = passives.DamageContext(
        state=state, source=source, target=target, move=move,
        effect_kind=effect.kind, used_flags=used_flags_of(source),
    )
    breakdown = DamageBreakdown()

    if passives.nullifies(ctx):
        breakdown.nullified = True
        breakdown.effectiveness = 0.0
        return breakdown

    # Fixed damage ignores every modifier, block included.
    if effect.kind == EffectKind.SET_DAMAGE:
        value = effect.value or 0
        breakdown.base = breakdown.after_additive = breakdown.after_multipliers = value
        breakdown.after_effectiveness = breakdown.after_reduction = value
        breakdown.after_defend = breakdown.after_evasion = breakdown.final = value
        return breakdown

    evasion = target.status_stacks(StatusKind.EVASION)

    if effect.kind == EffectKind.PERCENT_HP:
        pool = target.max_hp if effect.of_max else target.hp
        raw = math.floor((effect.percent or 0.0) * pool)
        breakdown.base = breakdown.after_additive = breakdown.after_multipliers = raw
        breakdown.after_effectiveness = breakdown.after_reduction = raw
        breakdown.after_defend = raw
        after_evasion = max(raw - evasion, 0)
        breakdown.evasion_reduction = raw - after_evasion
        _absorb(breakdown, after_evasion, block)
        return breakdown

    # Step 1: base + bonus condition
    base = (effect.value or 0) + bonus_addend(source, target, effect)
    breakdown.base = base

    # Step 2: additive modifiers, clamped to at least 1
    damage = (
        base
        + source.status_stacks(StatusKind.STRENGTH)
        + stab_bonus(source, move)
        + passives.additive_bonus(ctx)
        - source.status_stacks(StatusKind.ENFEEBLE)
    )
    damage = max(damage, 1)
    breakdown.after_additive = damage

    # Step 3: passive multipliers in registry order
    for passive, multiplier in passives.multipliers(ctx):
        damage = math.floor(damage * multiplier)
        if passive.turn_flag is not None:
            breakdown.consumed_flags.append(passive.turn_flag)
    breakdown.after_multipliers = damage

    # Step 4: type effectiveness
    effectiveness = get_type_effectiveness(move.type, target.types)
    effectiveness = passives.adjust_effectiveness(ctx, effectiveness)
    damage = math.floor(damage * effectiveness)
    breakdown.effectiveness = effectiveness
    breakdown.after_effectiveness = damage

    # Step 5: flat defensive reductions
    damage = max(damage - passives.defensive_reduction(ctx), 0)
    breakdown.after_reduction = damage

    # Step 6: defensive multipliers, then the defender's damage cap
    for multiplier in passives.defend_multipliers(ctx):
        damage = math.floor(damage * multiplier)
    cap = passives.damage_cap(ctx)
    if cap is not None:
        damage = min(damage, cap)
    breakdown.after_defend = damage

    # Step 7: evasion
    after_evasion = max(damage - evasion, 0)
    breakdown.evasion_reduction = damage - after_evasion

    # Step 8: block
    _absorb(breakdown, after_evasion, block)
    return breakdown


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def apply_hit(
    state: CombatState,
    target: Combatant,
    breakdown: DamageBreakdown,
    *,
    source_id: str | None = None,
    cause: str = "attack",
) -> int:
    """Commit *breakdown* to *target*: spend block, then lose HP.

    Returns the HP actually lost.
    """
    if breakdown.nullified:
        state.log(f"{target.name} absorbs the attack!", target.id)
        return 0
    target.block -= min(breakdown.blocked, target.block)
    return state.damage_combatant(
        target, breakdown.final,
        source_id=source_id, cause=cause, blocked=breakdown.blocked,
    )


def deal_direct_damage(
    state: CombatState,
    target: Combatant,
    amount: int,
    *,
    source_id: str | None = None,
    cause: str = "attack",
) -> int:
    """HP loss that bypasses block entirely (recoil, status ticks)."""
    return state.damage_combatant(target, amount, source_id=source_id, cause=cause)


def heal(state: CombatState, target: Combatant, amount: int) -> int:
    """Heal *target* up to its max HP.  Returns the HP restored."""
    return state.heal_combatant(target, amount)
