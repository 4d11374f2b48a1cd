"""Content registry -- loads and serves move and creature definitions for
the battle engine.

Bundled content is loaded from JSON files in ``data/content/``.  Extra
content can be merged in from a validated :class:`ContentSet`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from beastdeck.ir.cards import CardEffect, MoveDefinition, base_move_id, is_echo_id
from beastdeck.ir.content_set import ContentSet
from beastdeck.ir.roster import CreatureDefinition
from beastdeck.sim.core.errors import (
    UnknownCreatureError,
    UnknownMoveError,
    UnknownPassiveError,
)

# Default paths relative to the project root.
_PROJECT_ROOT = Path(__file__).resolve().parents[4]  # src/beastdeck/sim/content -> root
_DEFAULT_MOVES_PATH = _PROJECT_ROOT / "data" / "content" / "moves.json"
_DEFAULT_CREATURES_PATH = _PROJECT_ROOT / "data" / "content" / "creatures.json"


def _parse_move_definition(raw: dict[str, Any]) -> MoveDefinition:
    """Parse a raw JSON dict into a MoveDefinition with nested effects."""
    effects = [CardEffect(**e) for e in raw.get("effects", [])]
    return MoveDefinition(
        id=raw["id"],
        name=raw["name"],
        type=raw["type"],
        cost=raw["cost"],
        range=raw["range"],
        rarity=raw.get("rarity", "common"),
        vanish=raw.get("vanish", False),
        description=raw.get("description", ""),
        effects=effects,
    )


def _parse_creature_definition(raw: dict[str, Any]) -> CreatureDefinition:
    return CreatureDefinition(**raw)


def _load_json_list(path: Path) -> list[dict[str, Any]]:
    with open(path) as f:
        raw_items: list[dict[str, Any]] = json.load(f)
    # Skip organizational section markers
    return [raw for raw in raw_items if "_section" not in raw]


class ContentRegistry:
    """Loads and serves move and creature definitions.

    The registry is the single source of truth for content during a battle:
    the interpreter, scheduler and agents resolve every move id through it.

    Usage::

        registry = ContentRegistry()
        registry.load_moves()
        registry.load_creatures()

        move = registry.require_move("ember")
        creature = registry.require_creature("emberpup")
    """

    def __init__(self) -> None:
        self.moves: dict[str, MoveDefinition] = {}
        self.creatures: dict[str, CreatureDefinition] = {}

    @classmethod
    def default(cls) -> ContentRegistry:
        """A registry with the bundled moves and creatures loaded."""
        registry = cls()
        registry.load_moves()
        registry.load_creatures()
        return registry

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_moves(self, path: str | Path | None = None) -> None:
        """Load move definitions from a JSON file.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to ``data/content/moves.json``
            relative to the project root.
        """
        if path is None:
            path = _DEFAULT_MOVES_PATH
        for raw in _load_json_list(Path(path)):
            move = _parse_move_definition(raw)
            self.moves[move.id] = move

    def load_creatures(self, path: str | Path | None = None) -> None:
        """Load creature definitions from a JSON file.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to
            ``data/content/creatures.json`` relative to the project root.
        """
        if path is None:
            path = _DEFAULT_CREATURES_PATH
        for raw in _load_json_list(Path(path)):
            creature = _parse_creature_definition(raw)
            self.creatures[creature.id] = creature

    def load_content_set(self, content_set: ContentSet) -> None:
        """Merge a validated :class:`ContentSet` into the registry.

        Entries whose id already exists replace the loaded version.
        """
        for move in content_set.moves:
            self.moves[move.id] = move
        for creature in content_set.creatures:
            self.creatures[creature.id] = creature

    # ------------------------------------------------------------------
    # Move queries
    # ------------------------------------------------------------------

    def get_move(self, move_id: str) -> MoveDefinition | None:
        """Return the :class:`MoveDefinition` for *move_id*, or ``None``.

        Echo ids resolve to the echo copy of their base move.
        """
        if is_echo_id(move_id):
            base = self.moves.get(base_move_id(move_id))
            return base.echo() if base is not None else None
        return self.moves.get(move_id)

    def require_move(self, move_id: str) -> MoveDefinition:
        """Like :meth:`get_move` but raises :class:`UnknownMoveError`."""
        move = self.get_move(move_id)
        if move is None:
            raise UnknownMoveError(move_id)
        return move

    def list_move_ids(self) -> list[str]:
        return sorted(self.moves)

    # ------------------------------------------------------------------
    # Creature queries
    # ------------------------------------------------------------------

    def get_creature(self, creature_id: str) -> CreatureDefinition | None:
        return self.creatures.get(creature_id)

    def require_creature(self, creature_id: str) -> CreatureDefinition:
        creature = self.creatures.get(creature_id)
        if creature is None:
            raise UnknownCreatureError(creature_id)
        return creature

    def list_creature_ids(self) -> list[str]:
        return sorted(self.creatures)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Raise on any dangling reference in the loaded content.

        Every deck entry must name a loaded move and every passive id
        must be registered.
        """
        from beastdeck.sim.passives import PASSIVES

        for creature in self.creatures.values():
            for move_id in creature.deck:
                if move_id not in self.moves:
                    raise UnknownMoveError(move_id)
            for passive_id in creature.passives:
                if passive_id not in PASSIVES:
                    raise UnknownPassiveError(passive_id, creature.id)

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"ContentRegistry(moves={len(self.moves)}, "
            f"creatures={len(self.creatures)})"
        )
