"""Content schema for the creature card battler.

Moves, creatures and status kinds are Pydantic models that load cleanly
from JSON.  The :class:`ContentSet` bundles moves and creatures and checks
that every deck reference resolves.
"""

from .cards import (
    BonusCondition,
    CardEffect,
    CardRarity,
    EffectKind,
    ElementType,
    MoveDefinition,
    MoveRange,
)
from .content_set import ContentSet
from .roster import CreatureDefinition
from .status_effects import (
    DEBUFF_KINDS,
    STATUS_POLICIES,
    DecayTiming,
    StatusKind,
    StatusPolicy,
)

__all__ = [
    # cards
    "BonusCondition",
    "CardEffect",
    "CardRarity",
    "EffectKind",
    "ElementType",
    "MoveDefinition",
    "MoveRange",
    # content_set
    "ContentSet",
    # roster
    "CreatureDefinition",
    # status_effects
    "DEBUFF_KINDS",
    "STATUS_POLICIES",
    "DecayTiming",
    "StatusKind",
    "StatusPolicy",
]
