"""Top-level container bundling moves and creatures into one content document."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .cards import MoveDefinition
from .roster import CreatureDefinition


class ContentSet(BaseModel):
    """A self-consistent set of moves and creatures.

    Validation guarantees that every deck entry names a move in the set
    and that ids are unique, so a battle built from a ContentSet never hits
    a dangling reference.  Passive ids are checked separately by the
    registry, which knows the passive table.
    """

    moves: list[MoveDefinition] = Field(default_factory=list)
    creatures: list[CreatureDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> ContentSet:
        errors = self.validation_errors()
        if errors:
            raise ValueError("; ".join(errors))
        return self

    def validation_errors(self) -> list[str]:
        """Return human-readable reference errors (empty = valid)."""
        errors: list[str] = []

        move_ids: set[str] = set()
        for move in self.moves:
            if move.id in move_ids:
                errors.append(f"duplicate move id {move.id!r}")
            move_ids.add(move.id)

        creature_ids: set[str] = set()
        for creature in self.creatures:
            if creature.id in creature_ids:
                errors.append(f"duplicate creature id {creature.id!r}")
            creature_ids.add(creature.id)

            for move_id in creature.deck:
                if move_id not in move_ids:
                    errors.append(
                        f"creature {creature.id!r} references unknown move {move_id!r}"
                    )
        return errors
