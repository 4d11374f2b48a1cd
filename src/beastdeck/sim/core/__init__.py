"""Core simulation primitives for the creature battle engine."""

from beastdeck.sim.core.actions import Action, ActionResult, EndTurn, PlayCard
from beastdeck.sim.core.entities import (
    Combatant,
    Position,
    Row,
    Side,
    StatusInstance,
    TurnFlags,
)
from beastdeck.sim.core.errors import (
    CombatIntegrityError,
    UnknownCreatureError,
    UnknownMoveError,
    UnknownPassiveError,
)
from beastdeck.sim.core.game_state import CombatPhase, CombatState, LogEntry
from beastdeck.sim.core.rng import GameRNG

__all__ = [
    # rng
    "GameRNG",
    # entities
    "Side",
    "Row",
    "Position",
    "StatusInstance",
    "TurnFlags",
    "Combatant",
    # game_state
    "CombatPhase",
    "LogEntry",
    "CombatState",
    # actions
    "PlayCard",
    "EndTurn",
    "Action",
    "ActionResult",
    # errors
    "CombatIntegrityError",
    "UnknownMoveError",
    "UnknownCreatureError",
    "UnknownPassiveError",
]
