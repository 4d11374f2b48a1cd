"""Damage preview -- a read-only forecast of what a move would do to a target.

The forecast plays the hits out on a deep copy of the state through the
same :func:`~beastdeck.sim.interpreter.resolve_hit` the live interpreter
uses.  Block depletion, once-per-turn multipliers and the on-hit passives
that fire between the hits of a multi-hit move therefore land exactly as
they would in the real play, while the caller's state is never touched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from beastdeck.ir.cards import EffectKind
from beastdeck.sim.interpreter import resolve_hit
from beastdeck.sim.mechanics.type_chart import effectiveness_label

if TYPE_CHECKING:
    from beastdeck.ir.cards import MoveDefinition
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState


class DamagePreview(BaseModel):
    """Forecast of one move's damage against one target."""

    base_damage: int
    final_damage: int
    """HP the first hit removes."""

    type_effectiveness: float
    effectiveness_label: str | None = None
    blocked_amount: int
    """Block absorbed across all hits."""

    evasion_reduction: int
    is_multi_hit: bool = False
    hits: int = 1
    total_damage: int
    """HP removed across all hits, capped at the target's current HP."""


def _sandbox(state: CombatState) -> CombatState:
    """Deep copy of *state* with empty output streams."""
    return state.model_copy(update={"logs": [], "events": []}).model_copy(deep=True)


def calculate_damage_preview(
    state: CombatState,
    source: Combatant,
    target: Combatant,
    move: MoveDefinition,
) -> DamagePreview | None:
    """Forecast *move* from *source* against *target*.

    Uses the move's first damage-bearing effect.  Returns ``None`` when
    the move deals no damage, the target is already down, or the target's
    passives cancel the hit.
    """
    effect = move.damage_effect
    if effect is None or state.is_over or not target.alive:
        return None

    sandbox = _sandbox(state)
    sim_source = sandbox.get_combatant(source.id)
    sim_target = sandbox.get_combatant(target.id)
    hits = (effect.hits or 1) if effect.kind == EffectKind.MULTI_HIT else 1

    first = None
    blocked_total = 0
    evasion_total = 0
    dealt_total = 0
    for _ in range(hits):
        if sandbox.is_over or not sim_target.alive:
            break
        breakdown, lost = resolve_hit(sandbox, sim_source, move, effect, sim_target)
        if breakdown.nullified:
            return None
        if first is None:
            first = breakdown
        blocked_total += breakdown.blocked
        evasion_total += breakdown.evasion_reduction
        dealt_total += lost
        sandbox.check_battle_end()

    return DamagePreview(
        base_damage=first.base,
        final_damage=first.final,
        type_effectiveness=first.effectiveness,
        effectiveness_label=effectiveness_label(first.effectiveness),
        blocked_amount=blocked_total,
        evasion_reduction=evasion_total,
        is_multi_hit=effect.kind == EffectKind.MULTI_HIT,
        hits=hits,
        total_damage=dealt_total,
    )
