"""Battle state for the headless creature battle engine.

``CombatState`` owns every combatant, the round's speed-sorted turn order,
the terminal phase, and the append-only log/event streams that the
presentation layer consumes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from beastdeck.sim.core.entities import Combatant, Side
from beastdeck.sim.core.events import (
    AnyEvent,
    BattleEnded,
    BlockGained,
    CombatantDefeated,
    CombatEvent,
    DamageDealt,
    Healed,
)

_DAMAGE_TEMPLATES: dict[str, str] = {
    "attack": "{name} takes {amount} damage.",
    "set": "{name} takes {amount} fixed damage.",
    "recoil": "{name} takes {amount} recoil damage.",
    "burn": "Burn deals {amount} damage to {name}.",
    "poison": "Poison deals {amount} damage to {name}.",
    "leech": "Leech drains {amount} HP from {name}.",
}


class CombatPhase(str, Enum):
    """Battle phase, from the ally side's point of view."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"


class LogEntry(BaseModel):
    """One templated, human-readable log line."""

    round: int
    message: str
    combatant_id: str | None = None


# ---------------------------------------------------------------------------
# CombatState
# ---------------------------------------------------------------------------

class CombatState(BaseModel):
    """Full mutable state of a single battle."""

    model_config = {"arbitrary_types_allowed": True}

    combatants: list[Combatant]
    turn_order: list[str] = Field(default_factory=list)
    """Combatant ids sorted by speed; rebuilt once per round."""

    current_turn_index: int = 0
    round: int = 1
    phase: CombatPhase = CombatPhase.ONGOING

    logs: list[LogEntry] = Field(default_factory=list)
    events: list[AnyEvent] = Field(default_factory=list)

    status_apply_counter: int = 0
    """Stamps each new status entry so cleanse can find the oldest."""

    rng: Any = Field(default=None, exclude=True)
    """Battle ``GameRNG`` used for shuffles.  Excluded from serialization."""

    # -- queries -------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.phase is not CombatPhase.ONGOING

    def get_combatant(self, combatant_id: str) -> Combatant | None:
        """Return the combatant with *combatant_id*, or ``None``."""
        for combatant in self.combatants:
            if combatant.id == combatant_id:
                return combatant
        return None

    def living(self, side: Side | None = None) -> list[Combatant]:
        """Living combatants, optionally restricted to one side, in declared order."""
        return [
            c for c in self.combatants
            if c.alive and (side is None or c.side == side)
        ]

    def allies_of(self, combatant: Combatant) -> list[Combatant]:
        """Living combatants on *combatant*'s side, including itself."""
        return self.living(combatant.side)

    def opponents_of(self, combatant: Combatant) -> list[Combatant]:
        return self.living(combatant.side.opposite)

    @property
    def current_combatant(self) -> Combatant | None:
        """The combatant whose turn it is, or ``None`` once the battle is over."""
        if self.is_over or not self.turn_order:
            return None
        if self.current_turn_index >= len(self.turn_order):
            return None
        return self.get_combatant(self.turn_order[self.current_turn_index])

    # -- output streams ------------------------------------------------------

    def log(self, message: str, combatant_id: str | None = None) -> None:
        self.logs.append(
            LogEntry(round=self.round, message=message, combatant_id=combatant_id)
        )

    def emit(self, event: CombatEvent) -> None:
        event.round = self.round
        self.events.append(event)

    def next_status_order(self) -> int:
        order = self.status_apply_counter
        self.status_apply_counter += 1
        return order

    # -- HP / block mutations ------------------------------------------------
    #
    # Every HP and block change funnels through these helpers so that the
    # log line, the structured event and the defeat check always agree.

    def damage_combatant(
        self,
        target: Combatant,
        amount: int,
        *,
        source_id: str | None = None,
        cause: str = "attack",
        blocked: int = 0,
    ) -> int:
        """Remove up to *amount* HP from *target*, ignoring block.

        *blocked* is informational: the damage block already absorbed.
        Returns the HP actually lost.
        """
        was_alive = target.alive
        lost = target.lose_hp(amount)

        if blocked > 0:
            self.log(f"{target.name} blocks {blocked} damage.", target.id)
        self.log(_DAMAGE_TEMPLATES.get(cause, _DAMAGE_TEMPLATES["attack"]).format(
            name=target.name, amount=lost,
        ), target.id)
        self.emit(DamageDealt(
            target_id=target.id, amount=lost, blocked=blocked,
            source_id=source_id, cause=cause,
        ))

        if was_alive and not target.alive:
            self.log(f"{target.name} is defeated!", target.id)
            self.emit(CombatantDefeated(combatant_id=target.id))
        return lost

    def heal_combatant(self, target: Combatant, amount: int) -> int:
        """Heal *target*, capped at max HP.  Returns the HP restored."""
        healed = target.heal(amount)
        if healed > 0:
            self.log(f"{target.name} heals {healed} HP.", target.id)
            self.emit(Healed(combatant_id=target.id, amount=healed))
        return healed

    def add_block(self, target: Combatant, amount: int) -> int:
        if amount <= 0 or not target.alive:
            return 0
        target.gain_block(amount)
        self.log(f"{target.name} gains {amount} Block.", target.id)
        self.emit(BlockGained(combatant_id=target.id, amount=amount))
        return amount

    def knock_out(self, target: Combatant, message: str) -> None:
        """Drop *target* to 0 HP outright (self-KO moves)."""
        if not target.alive:
            return
        target.hp = 0
        self.log(message, target.id)
        self.emit(CombatantDefeated(combatant_id=target.id))

    # -- terminal check ------------------------------------------------------

    def check_battle_end(self) -> bool:
        """Flip ``phase`` if a side has no living combatant.

        Opponents are checked first: a mutual wipe is a victory.  Returns
        True once the battle is over.
        """
        if self.is_over:
            return True
        if not self.living(Side.OPPONENT):
            self.phase = CombatPhase.VICTORY
        elif not self.living(Side.ALLY):
            self.phase = CombatPhase.DEFEAT
        else:
            return False
        self.log(f"Battle over: {self.phase.value}!")
        self.emit(BattleEnded(phase=self.phase.value))
        return True
