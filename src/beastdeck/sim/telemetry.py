"""Telemetry data models for per-battle and per-batch statistics.

These lightweight dataclasses capture everything needed to judge a
roster matchup without storing the whole state history:

- **CombatantTelemetry**: one unit's HP, damage and card usage.
- **BattleTelemetry**: outcome, rounds, side totals, per-unit records.
- **BatchSummary**: aggregate win rate and averages over many battles.

All of them are plain ``dataclass`` instances (not Pydantic models) to
keep collection cheap during batch runs.  :func:`collect_battle_telemetry`
derives a record from a finished state's event stream.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from beastdeck.sim.core.entities import Side
from beastdeck.sim.core.events import CardPlayed, DamageDealt

if TYPE_CHECKING:
    from beastdeck.sim.core.game_state import CombatState


@dataclass
class CombatantTelemetry:
    """Stats for one combatant.

    Attributes
    ----------
    damage_dealt:
        HP removed from opponents by this unit's moves, passives and
        statuses it planted.
    cards_played_by_id:
        Breakdown of cards played: ``move_id -> play count``.
    """

    combatant_id: str
    creature_id: str
    side: str
    hp_start: int
    hp_end: int
    damage_dealt: int = 0
    cards_played: int = 0
    cards_played_by_id: dict[str, int] = field(default_factory=dict)


@dataclass
class BattleTelemetry:
    """Stats from a single battle.

    Attributes
    ----------
    result:
        ``"victory"`` or ``"defeat"`` from the ally side's point of view,
        or ``"timeout"`` if the round cap was hit first.
    rounds:
        Rounds started, including the last one.
    turns:
        Turns actually taken (skipped turns excluded).
    """

    seed: int
    ally_ids: list[str]
    opponent_ids: list[str]
    result: str
    rounds: int
    turns: int
    ally_hp_start: int
    ally_hp_end: int
    ally_damage_dealt: int
    opponent_damage_dealt: int
    cards_played: int
    combatants: list[CombatantTelemetry] = field(default_factory=list)

    @property
    def won(self) -> bool:
        return self.result == "victory"


@dataclass
class BatchSummary:
    """Aggregates over a list of :class:`BattleTelemetry`."""

    battles: int
    victories: int
    defeats: int
    timeouts: int
    avg_rounds: float
    avg_ally_hp_end: float

    @property
    def win_rate(self) -> float:
        return self.victories / self.battles if self.battles else 0.0

    @classmethod
    def from_battles(cls, results: list[BattleTelemetry]) -> BatchSummary:
        n = len(results)
        return cls(
            battles=n,
            victories=sum(1 for r in results if r.result == "victory"),
            defeats=sum(1 for r in results if r.result == "defeat"),
            timeouts=sum(1 for r in results if r.result == "timeout"),
            avg_rounds=sum(r.rounds for r in results) / n if n else 0.0,
            avg_ally_hp_end=sum(r.ally_hp_end for r in results) / n if n else 0.0,
        )


def collect_battle_telemetry(
    state: CombatState, seed: int, hp_start: dict[str, int]
) -> BattleTelemetry:
    """Build telemetry for *state* from its structured events.

    *hp_start* maps combatant id to HP when the battle began.
    """
    records = {
        c.id: CombatantTelemetry(
            combatant_id=c.id,
            creature_id=c.creature_id,
            side=c.side.value,
            hp_start=hp_start.get(c.id, c.max_hp),
            hp_end=c.hp,
        )
        for c in state.combatants
    }
    sides = {c.id: c.side for c in state.combatants}

    turns = 0
    for event in state.events:
        if isinstance(event, CardPlayed):
            record = records[event.combatant_id]
            record.cards_played += 1
            record.cards_played_by_id[event.move_id] = (
                record.cards_played_by_id.get(event.move_id, 0) + 1
            )
        elif isinstance(event, DamageDealt):
            source = event.source_id
            if source in records and sides[source] != sides.get(event.target_id):
                records[source].damage_dealt += event.amount
        elif event.kind == "turn_started":
            turns += 1

    allies = [c for c in state.combatants if c.side is Side.ALLY]
    opponents = [c for c in state.combatants if c.side is Side.OPPONENT]
    result = state.phase.value if state.is_over else "timeout"

    return BattleTelemetry(
        seed=seed,
        ally_ids=[c.creature_id for c in allies],
        opponent_ids=[c.creature_id for c in opponents],
        result=result,
        rounds=state.round,
        turns=turns,
        ally_hp_start=sum(records[c.id].hp_start for c in allies),
        ally_hp_end=sum(c.hp for c in allies),
        ally_damage_dealt=sum(records[c.id].damage_dealt for c in allies),
        opponent_damage_dealt=sum(records[c.id].damage_dealt for c in opponents),
        cards_played=sum(r.cards_played for r in records.values()),
        combatants=list(records.values()),
    )
