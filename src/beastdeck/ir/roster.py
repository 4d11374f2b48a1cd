"""Creature definitions -- the roster data combatants are built from."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .cards import ElementType


class CreatureDefinition(BaseModel):
    """Everything needed to put one creature on the battlefield."""

    id: str
    """Unique identifier (e.g. ``"emberpup"``)."""

    name: str
    """Display name used in logs."""

    types: list[ElementType] = Field(min_length=1, max_length=2)
    """One or two elemental types; moves of these types get STAB."""

    max_hp: int = Field(gt=0)

    base_speed: int = Field(ge=0)
    """Speed before haste/slow/paralysis; orders the round."""

    energy_per_turn: int = Field(default=3, ge=0)
    energy_cap: int = Field(default=5, ge=0)
    hand_size: int = Field(default=5, ge=0)

    deck: list[str] = Field(default_factory=list)
    """Move ids, duplicates allowed."""

    passives: list[str] = Field(default_factory=list)
    """Passive ability ids."""
