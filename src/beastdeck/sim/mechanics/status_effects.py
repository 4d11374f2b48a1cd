"""Status effect lifecycle -- apply, remove, cleanse, query, and the
per-turn/per-round sweeps that tick and decay statuses.

Every kind follows the fixed policy in
:data:`beastdeck.ir.status_effects.STATUS_POLICIES`; a combatant carries at
most one :class:`StatusInstance` per kind.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beastdeck.ir.status_effects import (
    DEBUFF_KINDS,
    STATUS_POLICIES,
    DecayTiming,
    StatusKind,
)
from beastdeck.sim.core.entities import StatusInstance
from beastdeck.sim.core.events import StatusApplied, StatusRemoved

if TYPE_CHECKING:
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState

logger = logging.getLogger(__name__)

DEFAULT_SLOW_DURATION = 2
"""Turns a fresh Slow lasts when the effect does not specify a duration."""

LEECH_DECAY = 2


def _label(kind: StatusKind) -> str:
    return kind.value.capitalize()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_status_stacks(combatant: Combatant, kind: StatusKind) -> int:
    """Return the stack count of *kind* on *combatant* (0 if absent)."""
    return combatant.status_stacks(kind)


def has_status(combatant: Combatant, kind: StatusKind) -> bool:
    return combatant.status_stacks(kind) > 0


def debuff_stacks(combatant: Combatant) -> int:
    """Total stacks across every debuff kind on *combatant*."""
    return sum(s.stacks for s in combatant.statuses if s.kind in DEBUFF_KINDS)


def effective_speed(combatant: Combatant) -> int:
    """Base speed plus haste, minus paralysis and slow, floored at 0."""
    return max(
        combatant.base_speed
        + combatant.status_stacks(StatusKind.HASTE)
        - combatant.status_stacks(StatusKind.PARALYSIS)
        - combatant.status_stacks(StatusKind.SLOW),
        0,
    )


# ---------------------------------------------------------------------------
# Apply / remove
# ---------------------------------------------------------------------------

def apply_status(
    state: CombatState,
    target: Combatant,
    kind: StatusKind,
    stacks: int,
    source_id: str | None = None,
    duration: int | None = None,
) -> bool:
    """Add *stacks* of *kind* to *target*.

    An existing entry grows instead of being duplicated.  Leech remembers
    its latest source; Slow keeps the longer of the old and new duration.

    Returns
    -------
    bool
        False if nothing was applied (non-positive stacks, dead target, or
        a passive immunity).
    """
    from beastdeck.sim.passives import is_immune

    if stacks <= 0 or not target.alive:
        return False

    if is_immune(target, kind):
        state.log(f"{target.name} is immune to {_label(kind)}!", target.id)
        return False

    policy = STATUS_POLICIES[kind]
    existing = target.get_status(kind)
    if existing is not None:
        existing.stacks += stacks
        if kind == StatusKind.LEECH and source_id is not None:
            existing.source_id = source_id
        if policy.duration_based:
            existing.remaining_duration = max(
                existing.remaining_duration or 0,
                duration or DEFAULT_SLOW_DURATION,
            )
    else:
        target.statuses.append(StatusInstance(
            kind=kind,
            stacks=stacks,
            remaining_duration=(
                duration or DEFAULT_SLOW_DURATION if policy.duration_based else None
            ),
            applied_order=state.next_status_order(),
            source_id=source_id,
        ))

    state.log(f"{_label(kind)} {stacks} applied to {target.name}.", target.id)
    state.emit(StatusApplied(
        target_id=target.id, status=kind.value, stacks=stacks, source_id=source_id,
    ))
    return True


def remove_status(
    state: CombatState, combatant: Combatant, kind: StatusKind
) -> StatusInstance | None:
    """Remove the *kind* entry from *combatant* entirely.  Returns it, if any."""
    existing = combatant.get_status(kind)
    if existing is None:
        return None
    combatant.statuses.remove(existing)
    state.emit(StatusRemoved(combatant_id=combatant.id, status=kind.value))
    return existing


def _reduce(
    state: CombatState, combatant: Combatant, status: StatusInstance, amount: int
) -> None:
    status.stacks -= amount
    if status.stacks <= 0:
        remove_status(state, combatant, status.kind)
        state.log(f"{_label(status.kind)} on {combatant.name} expired.", combatant.id)


def cleanse(state: CombatState, target: Combatant, count: int) -> list[StatusInstance]:
    """Remove up to *count* debuff entries from *target*, oldest first."""
    debuffs = sorted(
        (s for s in target.statuses if s.kind in DEBUFF_KINDS),
        key=lambda s: s.applied_order,
    )
    removed = [remove_status(state, target, s.kind) for s in debuffs[:count]]
    removed = [s for s in removed if s is not None]

    if removed:
        names = ", ".join(f"{_label(s.kind)} {s.stacks}" for s in removed)
        state.log(f"{target.name} cleanses {names}!", target.id)
    else:
        state.log(f"{target.name} has no debuffs to cleanse.", target.id)
    return removed


def reduce_largest_debuff(state: CombatState, combatant: Combatant) -> StatusKind | None:
    """Take one stack off the debuff with the most stacks (oldest wins ties)."""
    debuffs = [s for s in combatant.statuses if s.kind in DEBUFF_KINDS]
    if not debuffs:
        return None
    largest = min(debuffs, key=lambda s: (-s.stacks, s.applied_order))
    _reduce(state, combatant, largest, 1)
    return largest.kind


# ---------------------------------------------------------------------------
# Sweeps
# ---------------------------------------------------------------------------

def _in_order(combatant: Combatant, timing: DecayTiming) -> list[StatusInstance]:
    return sorted(
        (s for s in combatant.statuses if STATUS_POLICIES[s.kind].timing == timing),
        key=lambda s: s.applied_order,
    )


def process_turn_start_statuses(state: CombatState, combatant: Combatant) -> None:
    """Start of *combatant*'s own turn: burn ticks, strength/haste decay."""
    for status in _in_order(combatant, DecayTiming.OWNER_TURN_START):
        if not combatant.alive:
            return
        policy = STATUS_POLICIES[status.kind]
        if policy.damage_per_stack:
            state.damage_combatant(
                combatant,
                status.stacks * policy.damage_per_stack,
                source_id=status.source_id,
                cause=status.kind.value,
            )
        _reduce(state, combatant, status, -policy.stack_delta)


def process_leech_for_source(state: CombatState, source: Combatant) -> None:
    """Start of *source*'s turn: every leech it planted drains its holder.

    The holder loses HP equal to the stacks, *source* heals what was
    drained, then the leech loses two stacks.
    """
    for holder in state.combatants:
        if not source.alive:
            return
        if not holder.alive:
            continue
        leech = holder.get_status(StatusKind.LEECH)
        if leech is None or leech.source_id != source.id:
            continue
        drained = state.damage_combatant(
            holder, leech.stacks, source_id=source.id, cause="leech",
        )
        state.heal_combatant(source, drained)
        _reduce(state, holder, leech, LEECH_DECAY)


def process_turn_end_statuses(state: CombatState, combatant: Combatant) -> None:
    """End of *combatant*'s turn: poison ticks and escalates, slow counts down."""
    from beastdeck.sim.passives import poison_multiplier

    for status in _in_order(combatant, DecayTiming.OWNER_TURN_END):
        if not combatant.alive:
            return
        if status.kind == StatusKind.POISON:
            damage = status.stacks * poison_multiplier(state, status)
            state.damage_combatant(
                combatant, damage, source_id=status.source_id, cause="poison",
            )
            status.stacks += STATUS_POLICIES[StatusKind.POISON].stack_delta
        elif STATUS_POLICIES[status.kind].duration_based:
            status.remaining_duration = (status.remaining_duration or 0) - 1
            if status.remaining_duration <= 0:
                remove_status(state, combatant, status.kind)
                state.log(
                    f"{_label(status.kind)} on {combatant.name} expired.", combatant.id,
                )


def process_round_end_statuses(state: CombatState) -> None:
    """Round rollover: round-scoped statuses (enfeeble) are cleared."""
    for combatant in state.living():
        for status in _in_order(combatant, DecayTiming.ROUND_END):
            remove_status(state, combatant, status.kind)
            state.log(
                f"{_label(status.kind)} on {combatant.name} wears off.", combatant.id,
            )


def consume_sleep(state: CombatState, combatant: Combatant) -> bool:
    """If *combatant* is asleep, spend one stack and return True (turn skipped)."""
    sleep = combatant.get_status(StatusKind.SLEEP)
    if sleep is None or sleep.stacks <= 0:
        return False
    state.log(f"{combatant.name} is asleep and skips its turn.", combatant.id)
    _reduce(state, combatant, sleep, 1)
    logger.debug("%s skipped a turn asleep", combatant.id)
    return True
