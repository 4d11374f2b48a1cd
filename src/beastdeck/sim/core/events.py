"""Structured event records emitted alongside the human-readable log.

Presentation layers subscribe to these instead of parsing log prose.  Each
record is a Pydantic model tagged by a literal ``kind`` so a list of them
round-trips through JSON.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class CombatEvent(BaseModel):
    """Common base: the round in which the event happened."""

    round: int = 0


class CardPlayed(CombatEvent):
    kind: Literal["card_played"] = "card_played"
    combatant_id: str
    move_id: str
    cost: int
    target_ids: list[str] = Field(default_factory=list)


class DamageDealt(CombatEvent):
    kind: Literal["damage_dealt"] = "damage_dealt"
    target_id: str
    amount: int
    """HP actually lost."""

    blocked: int = 0
    source_id: str | None = None
    cause: str = "attack"
    """``attack``, ``recoil``, ``burn``, ``poison``, ``leech`` or ``set``."""


class BlockGained(CombatEvent):
    kind: Literal["block_gained"] = "block_gained"
    combatant_id: str
    amount: int


class Healed(CombatEvent):
    kind: Literal["healed"] = "healed"
    combatant_id: str
    amount: int


class StatusApplied(CombatEvent):
    kind: Literal["status_applied"] = "status_applied"
    target_id: str
    status: str
    stacks: int
    source_id: str | None = None


class StatusRemoved(CombatEvent):
    kind: Literal["status_removed"] = "status_removed"
    combatant_id: str
    status: str


class CombatantDefeated(CombatEvent):
    kind: Literal["combatant_defeated"] = "combatant_defeated"
    combatant_id: str


class TurnStarted(CombatEvent):
    kind: Literal["turn_started"] = "turn_started"
    combatant_id: str


class TurnSkipped(CombatEvent):
    kind: Literal["turn_skipped"] = "turn_skipped"
    combatant_id: str
    reason: str


class RoundStarted(CombatEvent):
    kind: Literal["round_started"] = "round_started"


class CardsDrawn(CombatEvent):
    kind: Literal["cards_drawn"] = "cards_drawn"
    combatant_id: str
    count: int
    discarded: int = 0


class EnergyGained(CombatEvent):
    kind: Literal["energy_gained"] = "energy_gained"
    combatant_id: str
    amount: int


class PositionChanged(CombatEvent):
    kind: Literal["position_changed"] = "position_changed"
    combatant_id: str
    row: str
    column: int
    swapped_with: str | None = None


class BattleEnded(CombatEvent):
    kind: Literal["battle_ended"] = "battle_ended"
    phase: str


AnyEvent = Annotated[
    Union[
        CardPlayed,
        DamageDealt,
        BlockGained,
        Healed,
        StatusApplied,
        StatusRemoved,
        CombatantDefeated,
        TurnStarted,
        TurnSkipped,
        RoundStarted,
        CardsDrawn,
        EnergyGained,
        PositionChanged,
        BattleEnded,
    ],
    Field(discriminator="kind"),
]
