"""Shared fixtures and helpers for simulation tests."""

from __future__ import annotations

from typing import Any

import pytest

from beastdeck.ir.cards import (
    CardEffect,
    CardRarity,
    EffectKind,
    ElementType,
    MoveDefinition,
    MoveRange,
)
from beastdeck.sim.content.registry import ContentRegistry
from beastdeck.sim.core.entities import Combatant, Position, Row, Side
from beastdeck.sim.core.game_state import CombatState
from beastdeck.sim.core.rng import GameRNG


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    """Module-scoped registry with the bundled content loaded once."""
    return ContentRegistry.default()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_combatant(
    cid: str = "ally",
    *,
    side: Side = Side.ALLY,
    slot: int = 0,
    row: Row = Row.FRONT,
    column: int = 0,
    hp: int = 40,
    max_hp: int | None = None,
    types: tuple[ElementType, ...] = (ElementType.NORMAL,),
    speed: int = 5,
    passives: tuple[str, ...] = (),
    energy: int = 3,
    **kwargs: Any,
) -> Combatant:
    """A combatant with sensible defaults; any field can be overridden."""
    return Combatant(
        id=cid,
        name=kwargs.pop("name", cid.capitalize()),
        creature_id=kwargs.pop("creature_id", cid),
        types=list(types),
        side=side,
        slot=slot,
        position=Position(row=row, column=column),
        max_hp=max_hp if max_hp is not None else hp,
        hp=hp,
        base_speed=speed,
        energy=energy,
        passive_ids=list(passives),
        **kwargs,
    )


def make_enemy(cid: str = "enemy", **kwargs: Any) -> Combatant:
    kwargs.setdefault("side", Side.OPPONENT)
    return make_combatant(cid, **kwargs)


def make_state(*combatants: Combatant, seed: int = 42) -> CombatState:
    """A state whose turn order is the declaration order."""
    state = CombatState(combatants=list(combatants), rng=GameRNG(seed))
    state.turn_order = [c.id for c in combatants]
    return state


def effect(kind: EffectKind, **params: Any) -> CardEffect:
    return CardEffect(kind=kind, **params)


def make_move(
    move_id: str = "test_move",
    *effects: CardEffect,
    type: ElementType = ElementType.NORMAL,
    cost: int = 1,
    range: MoveRange = MoveRange.FRONT_ENEMY,
    rarity: CardRarity = CardRarity.COMMON,
    vanish: bool = False,
) -> MoveDefinition:
    return MoveDefinition(
        id=move_id,
        name=move_id.replace("_", " ").title(),
        type=type,
        cost=cost,
        range=range,
        rarity=rarity,
        vanish=vanish,
        effects=list(effects),
    )


def strike(value: int = 10, move_id: str = "strike", **kwargs: Any) -> MoveDefinition:
    """A plain single-target damage move."""
    return make_move(move_id, effect(EffectKind.DAMAGE, value=value), **kwargs)


def make_registry(*moves: MoveDefinition) -> ContentRegistry:
    """The bundled registry plus *moves*."""
    registry = ContentRegistry.default()
    for move in moves:
        registry.moves[move.id] = move
    return registry
