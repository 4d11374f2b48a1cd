"""Grid targeting -- translate a move's range into concrete target sets.

Each side owns a 2-row x 3-column grid.  A front-row unit shields the
back-row unit in its column; once the front row is empty the back row is
treated as the front.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beastdeck.ir.cards import ROW_RANGES, EffectKind, MoveRange
from beastdeck.ir.status_effects import DEBUFF_KINDS
from beastdeck.sim.core.entities import Position, Row

if TYPE_CHECKING:
    from beastdeck.ir.cards import MoveDefinition
    from beastdeck.sim.core.entities import Combatant, Side
    from beastdeck.sim.core.game_state import CombatState

# Ranges whose target set is fixed once the grid is known.
_AUTO_RANGES = frozenset(
    {MoveRange.SELF, MoveRange.ALL_ENEMIES, MoveRange.FRONT_ROW, MoveRange.BACK_ROW}
)


# ---------------------------------------------------------------------------
# Grid queries
# ---------------------------------------------------------------------------

def effective_front_row(state: CombatState, side: Side) -> Row:
    """``front`` while *side* has a living front-row unit, else ``back``."""
    if any(c.position.row == Row.FRONT for c in state.living(side)):
        return Row.FRONT
    return Row.BACK


def is_exposed(state: CombatState, unit: Combatant) -> bool:
    """True if *unit* can be hit by front-targeting moves.

    Front-row units are always exposed; a back-row unit is exposed when no
    living front-row ally stands in its column.
    """
    if unit.position.row == Row.FRONT:
        return True
    return not any(
        c.position.row == Row.FRONT and c.position.column == unit.position.column
        for c in state.living(unit.side)
    )


def adjacent_allies(state: CombatState, unit: Combatant) -> list[Combatant]:
    """Living units on *unit*'s side, same row, one column away."""
    return [
        c for c in state.living(unit.side)
        if c.id != unit.id
        and c.position.row == unit.position.row
        and abs(c.position.column - unit.position.column) == 1
    ]


def assign_party_positions(count: int) -> list[Position]:
    """Default formation for a party of *count* units.

    Up to three units fill the front row left to right.  Larger parties
    put the first three in front and wrap the rest into the back row.
    """
    positions: list[Position] = []
    for i in range(count):
        if i < 3:
            positions.append(Position(row=Row.FRONT, column=i))
        else:
            positions.append(Position(row=Row.BACK, column=i % 3))
    return positions


# ---------------------------------------------------------------------------
# Range resolution
# ---------------------------------------------------------------------------

def effective_range(source: Combatant, move_range: MoveRange) -> MoveRange:
    """Apply range-rewriting passives: row ranges become all-enemies."""
    from beastdeck.sim.passives import rewrites_row_ranges

    if move_range in ROW_RANGES and rewrites_row_ranges(source):
        return MoveRange.ALL_ENEMIES
    return move_range


def _candidates(
    state: CombatState, source: Combatant, move_range: MoveRange
) -> list[Combatant]:
    if move_range == MoveRange.SELF:
        return [source] if source.alive else []
    if move_range == MoveRange.ANY_ALLY:
        return state.allies_of(source)

    enemies = state.opponents_of(source)
    if not enemies:
        return []

    if move_range in (MoveRange.FRONT_ENEMY, MoveRange.FRONT_ROW):
        return [c for c in enemies if is_exposed(state, c)]

    if move_range in (MoveRange.BACK_ENEMY, MoveRange.BACK_ROW):
        back = [c for c in enemies if c.position.row == Row.BACK]
        if back:
            return back
        front = effective_front_row(state, enemies[0].side)
        return [c for c in enemies if c.position.row == front]

    # any_enemy, any_row, column, all_enemies
    return enemies


def _is_cleanse_only(move: MoveDefinition) -> bool:
    return bool(move.effects) and all(
        e.kind == EffectKind.CLEANSE for e in move.effects
    )


def valid_targets(
    state: CombatState, source: Combatant, move: MoveDefinition
) -> list[Combatant]:
    """Units that may be picked (or will be hit) when *source* plays *move*.

    A move that only cleanses is restricted to units carrying a debuff.
    """
    candidates = _candidates(state, source, effective_range(source, move.range))
    if _is_cleanse_only(move):
        candidates = [
            c for c in candidates
            if any(s.kind in DEBUFF_KINDS for s in c.statuses)
        ]
    return candidates


def requires_target_selection(
    state: CombatState, source: Combatant, move: MoveDefinition
) -> bool:
    """True if the driver must supply a ``target_id`` for this play."""
    move_range = effective_range(source, move.range)
    if move_range in _AUTO_RANGES:
        return False

    targets = valid_targets(state, source, move)
    if move_range == MoveRange.ANY_ROW:
        return len({c.position.row for c in targets}) > 1
    if move_range == MoveRange.COLUMN:
        return len({c.position.column for c in targets}) > 1
    return len(targets) > 1


def resolve_targets(
    state: CombatState,
    source: Combatant,
    move: MoveDefinition,
    target_id: str | None = None,
) -> list[Combatant] | None:
    """Resolve the concrete units *move* will hit.

    Returns ``None`` when the request is illegal: no valid target exists,
    a required selection is missing, or *target_id* is not selectable.
    A *target_id* passed for a range that needs no selection must still be
    one of the valid targets, but does not change the result.  A damaging
    move aimed at an enemy may be drawn to a same-row ally of that enemy
    by a redirecting passive.
    """
    move_range = effective_range(source, move.range)
    targets = valid_targets(state, source, move)
    if not targets:
        return None

    chosen: Combatant | None = None
    if target_id is not None:
        chosen = next((c for c in targets if c.id == target_id), None)
        if chosen is None:
            return None
    elif requires_target_selection(state, source, move):
        return None

    if move_range in _AUTO_RANGES:
        hit = targets
    elif move_range == MoveRange.ANY_ROW:
        row = chosen.position.row if chosen is not None else targets[0].position.row
        hit = [c for c in targets if c.position.row == row]
    elif move_range == MoveRange.COLUMN:
        column = (
            chosen.position.column if chosen is not None
            else targets[0].position.column
        )
        hit = [c for c in targets if c.position.column == column]
    else:
        hit = [chosen if chosen is not None else targets[0]]
    return _redirect(state, source, move, hit)


def _redirect(
    state: CombatState,
    source: Combatant,
    move: MoveDefinition,
    targets: list[Combatant],
) -> list[Combatant]:
    """Swap damaging hits on enemies for the allies that draw them (Lightning Rod)."""
    from beastdeck.sim.passives import redirect_target

    if not move.deals_damage:
        return targets
    result: list[Combatant] = []
    for target in targets:
        if target.side != source.side:
            target = redirect_target(state, target, move)
        if all(c.id != target.id for c in result):
            result.append(target)
    return result
