"""Status kinds and their fixed decay policies."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class StatusKind(str, Enum):
    """Every status a combatant can carry."""

    STRENGTH = "strength"
    HASTE = "haste"
    EVASION = "evasion"
    ENFEEBLE = "enfeeble"
    BURN = "burn"
    POISON = "poison"
    LEECH = "leech"
    PARALYSIS = "paralysis"
    SLOW = "slow"
    SLEEP = "sleep"


class DecayTiming(str, Enum):
    """When during the round a status ticks or decays."""

    OWNER_TURN_START = "OWNER_TURN_START"
    """At the start of the holder's turn (strength, haste, burn)."""

    OWNER_TURN_END = "OWNER_TURN_END"
    """At the end of the holder's turn (poison, slow)."""

    SOURCE_TURN_START = "SOURCE_TURN_START"
    """At the start of the turn of whoever applied it (leech)."""

    ROUND_END = "ROUND_END"
    """Once, when the round rolls over (enfeeble)."""

    SKIPPED_TURN = "SKIPPED_TURN"
    """Each time it makes the holder skip a turn (sleep)."""

    NEVER = "NEVER"
    """Permanent until cleansed (paralysis, evasion)."""


class StatusPolicy(BaseModel):
    """Fixed lifecycle of one status kind."""

    kind: StatusKind
    is_debuff: bool
    timing: DecayTiming

    damage_per_stack: int = 0
    """HP lost per stack when the status ticks (bypasses block)."""

    stack_delta: int = 0
    """Change applied to stacks after ticking (negative decays, positive escalates)."""

    clear_on_tick: bool = False
    """Remove the status entirely when it ticks."""

    duration_based: bool = False
    """Expires when ``remaining_duration`` reaches zero instead of by stacks."""

    model_config = {"frozen": True}


STATUS_POLICIES: dict[StatusKind, StatusPolicy] = {
    StatusKind.STRENGTH: StatusPolicy(
        kind=StatusKind.STRENGTH, is_debuff=False,
        timing=DecayTiming.OWNER_TURN_START, stack_delta=-1,
    ),
    StatusKind.HASTE: StatusPolicy(
        kind=StatusKind.HASTE, is_debuff=False,
        timing=DecayTiming.OWNER_TURN_START, stack_delta=-1,
    ),
    StatusKind.EVASION: StatusPolicy(
        kind=StatusKind.EVASION, is_debuff=False, timing=DecayTiming.NEVER,
    ),
    StatusKind.ENFEEBLE: StatusPolicy(
        kind=StatusKind.ENFEEBLE, is_debuff=True,
        timing=DecayTiming.ROUND_END, clear_on_tick=True,
    ),
    StatusKind.BURN: StatusPolicy(
        kind=StatusKind.BURN, is_debuff=True,
        timing=DecayTiming.OWNER_TURN_START, damage_per_stack=1, stack_delta=-1,
    ),
    StatusKind.POISON: StatusPolicy(
        kind=StatusKind.POISON, is_debuff=True,
        timing=DecayTiming.OWNER_TURN_END, damage_per_stack=1, stack_delta=1,
    ),
    StatusKind.LEECH: StatusPolicy(
        kind=StatusKind.LEECH, is_debuff=True,
        timing=DecayTiming.SOURCE_TURN_START, damage_per_stack=1, stack_delta=-2,
    ),
    StatusKind.PARALYSIS: StatusPolicy(
        kind=StatusKind.PARALYSIS, is_debuff=True, timing=DecayTiming.NEVER,
    ),
    StatusKind.SLOW: StatusPolicy(
        kind=StatusKind.SLOW, is_debuff=True,
        timing=DecayTiming.OWNER_TURN_END, duration_based=True,
    ),
    StatusKind.SLEEP: StatusPolicy(
        kind=StatusKind.SLEEP, is_debuff=True,
        timing=DecayTiming.SKIPPED_TURN, stack_delta=-1,
    ),
}

DEBUFF_KINDS: frozenset[StatusKind] = frozenset(
    kind for kind, policy in STATUS_POLICIES.items() if policy.is_debuff
)

SPEED_KINDS: frozenset[StatusKind] = frozenset(
    {StatusKind.HASTE, StatusKind.PARALYSIS, StatusKind.SLOW}
)
