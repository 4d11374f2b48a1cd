"""Combatant model for the headless creature battle engine.

All data classes use Pydantic v2 BaseModel for validation and
serialization, so a whole battle can be dumped to JSON at any point.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from beastdeck.ir.cards import ElementType
from beastdeck.ir.status_effects import StatusKind


# ---------------------------------------------------------------------------
# Grid position
# ---------------------------------------------------------------------------

class Side(str, Enum):
    """Which team a combatant fights for."""

    ALLY = "ally"
    OPPONENT = "opponent"

    @property
    def opposite(self) -> Side:
        return Side.OPPONENT if self is Side.ALLY else Side.ALLY


class Row(str, Enum):
    FRONT = "front"
    BACK = "back"


GRID_COLUMNS = (0, 1, 2)


class Position(BaseModel):
    """A slot on one side's 2x3 grid."""

    row: Row = Row.FRONT
    column: int = Field(default=0, ge=0, le=2)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Status instance
# ---------------------------------------------------------------------------

class StatusInstance(BaseModel):
    """One status entry on a combatant.  At most one entry exists per kind."""

    kind: StatusKind
    stacks: int

    remaining_duration: int | None = None
    """Turns left for duration-based kinds (slow); ``None`` otherwise."""

    applied_order: int = 0
    """Battle-wide application counter; lower means applied earlier."""

    source_id: str | None = None
    """Combatant that applied the status (tracked for leech)."""


# ---------------------------------------------------------------------------
# Turn-scoped state
# ---------------------------------------------------------------------------

class TurnFlags(BaseModel):
    """Everything that only lasts for the owner's current turn.

    Replaced wholesale with a fresh instance at the start of each of the
    owner's turns.
    """

    blaze_strike_used: bool = False
    swarm_strike_used: bool = False
    first_attack_played: bool = False
    torrent_shield_used: bool = False
    overgrow_heal_used: bool = False
    switched_position: bool = False

    cards_played: int = 0
    """Cards resolved so far this turn (Relentless)."""

    inferno_momentum_index: int | None = None
    """Hand index of the fire card discounted by Inferno Momentum."""


# ---------------------------------------------------------------------------
# Combatant
# ---------------------------------------------------------------------------

class Combatant(BaseModel):
    """One creature taking part in a battle."""

    id: str
    """Battle-unique id (e.g. ``"emberpup-0"``)."""

    name: str
    creature_id: str
    """Roster id this combatant was built from."""

    types: list[ElementType]
    side: Side
    slot: int = 0
    """Declared insertion order within the side; breaks speed ties."""

    position: Position = Field(default_factory=Position)

    max_hp: int
    hp: int
    base_speed: int = 0
    block: int = 0

    energy: int = 0
    energy_per_turn: int = 3
    energy_cap: int = 5
    hand_size: int = 5

    hand: list[str] = Field(default_factory=list)
    draw_pile: list[str] = Field(default_factory=list)
    """Move ids; the last element is the top of the pile."""

    discard_pile: list[str] = Field(default_factory=list)
    vanished_pile: list[str] = Field(default_factory=list)
    """Single-use moves already played; gone for the rest of the battle."""

    statuses: list[StatusInstance] = Field(default_factory=list)
    passive_ids: list[str] = Field(default_factory=list)
    turn_flags: TurnFlags = Field(default_factory=TurnFlags)

    # -- HP queries ----------------------------------------------------------

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_fraction(self) -> float:
        return self.hp / self.max_hp if self.max_hp else 0.0

    @property
    def below_half_hp(self) -> bool:
        return self.hp < self.max_hp * 0.5

    # -- passives ------------------------------------------------------------

    def has_passive(self, passive_id: str) -> bool:
        return passive_id in self.passive_ids

    # -- statuses ------------------------------------------------------------

    def get_status(self, kind: StatusKind) -> StatusInstance | None:
        """Return the entry for *kind*, or ``None`` if absent."""
        for status in self.statuses:
            if status.kind == kind:
                return status
        return None

    def status_stacks(self, kind: StatusKind) -> int:
        """Return the stack count for *kind*, or ``0`` if absent."""
        status = self.get_status(kind)
        return status.stacks if status is not None else 0

    # -- block ---------------------------------------------------------------

    def gain_block(self, amount: int) -> None:
        """Add *amount* block (must be >= 0)."""
        if amount < 0:
            raise ValueError(f"gain_block amount must be >= 0, got {amount}")
        self.block += amount

    def clear_block(self) -> None:
        self.block = 0

    # -- damage / heal -------------------------------------------------------

    def lose_hp(self, amount: int) -> int:
        """Remove up to *amount* HP, ignoring block.

        Returns the HP actually lost (no overkill).
        """
        if amount <= 0:
            return 0
        lost = min(self.hp, amount)
        self.hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Heal *amount* HP, capped at ``max_hp``.  Returns the HP restored."""
        if amount <= 0 or not self.alive:
            return 0
        before = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        return self.hp - before
