"""Exceptions raised by the combat engine.

Illegal player/AI actions are *not* exceptions: they come back as a
rejected :class:`~beastdeck.sim.core.actions.ActionResult` and leave the
state untouched.  The classes here are reserved for broken content --
references that cannot be resolved -- which the engine cannot recover
from and hands to the driver.
"""

from __future__ import annotations


class CombatIntegrityError(Exception):
    """A battle references content that does not exist."""


class UnknownMoveError(CombatIntegrityError):
    def __init__(self, move_id: str) -> None:
        super().__init__(f"Unknown move id {move_id!r}")
        self.move_id = move_id


class UnknownCreatureError(CombatIntegrityError):
    def __init__(self, creature_id: str) -> None:
        super().__init__(f"Unknown creature id {creature_id!r}")
        self.creature_id = creature_id


class UnknownPassiveError(CombatIntegrityError):
    def __init__(self, passive_id: str, owner: str) -> None:
        super().__init__(f"Unknown passive id {passive_id!r} on {owner}")
        self.passive_id = passive_id
        self.owner = owner
