"""Inbound action contract and the result handed back to the driver."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field

from beastdeck.sim.core.entities import Position
from beastdeck.sim.core.events import AnyEvent
from beastdeck.sim.core.game_state import LogEntry


class PlayCard(BaseModel):
    """Play the card at ``card_index`` in the acting combatant's hand."""

    type: Literal["play_card"] = "play_card"
    card_index: int
    target_id: str | None = None
    """Required only when the move's range needs a manual selection."""


class EndTurn(BaseModel):
    type: Literal["end_turn"] = "end_turn"


class SwitchPosition(BaseModel):
    """Step to an adjacent cell, trading places with any ally already there."""

    type: Literal["switch_position"] = "switch_position"
    position: Position


Action = Union[PlayCard, EndTurn, SwitchPosition]


class ActionResult(BaseModel):
    """Outcome of submitting one action.

    A rejected action (``accepted=False``) changed nothing; ``reason``
    says why.  An accepted one carries the log lines and events it
    produced.
    """

    accepted: bool
    reason: str | None = None
    logs: list[LogEntry] = Field(default_factory=list)
    events: list[AnyEvent] = Field(default_factory=list)

    @classmethod
    def rejected(cls, reason: str) -> ActionResult:
        return cls(accepted=False, reason=reason)
