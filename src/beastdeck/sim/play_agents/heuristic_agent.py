"""Heuristic opponent policy -- greedy, one-ply card scoring.

The ``HeuristicAgent`` scores every legal (card, target) play and picks
the best one.  It performs no search: each score is computed against the
current state only.

- **Damage**: forecast damage (via the damage preview) times the number of
  units hit, adjusted for type effectiveness, plus a large bonus when the
  forecast knocks the target out.
- **Debuffs**: stacks weighted by 2, less when the target already carries a
  heavy stack of that kind, nothing against immunity.
- **Defense / self-buffs**: block, heals and buffs weighted by how hurt the
  unit being helped is; heals are worthless at full HP.

Zero-cost plays with a positive score go first, otherwise the highest
score wins.  Ties go to the earliest card in hand and the first target.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from beastdeck.ir.cards import EffectKind
from beastdeck.ir.status_effects import DEBUFF_KINDS
from beastdeck.sim import passives
from beastdeck.sim.core.actions import EndTurn
from beastdeck.sim.play_agents.base import CandidatePlay, PlayAgent, legal_plays
from beastdeck.sim.preview import calculate_damage_preview

if TYPE_CHECKING:
    from beastdeck.ir.cards import CardEffect
    from beastdeck.sim.content.registry import ContentRegistry
    from beastdeck.sim.core.actions import Action
    from beastdeck.sim.core.entities import Combatant
    from beastdeck.sim.core.game_state import CombatState

logger = logging.getLogger(__name__)

LETHAL_BONUS = 15

# Score per point of type effectiveness above (or below) neutral.
_EFFECTIVENESS_WEIGHT = 5

_DEBUFF_STACK_WEIGHT = 2
_HEAVY_STACK_THRESHOLD = 3
_HEAVY_STACK_PENALTY = 2

_SELF_BUFF_STACK_WEIGHT = 2
_CARD_DRAW_WEIGHT = 2
_ENERGY_WEIGHT = 2
_CLEANSE_WEIGHT = 3

# HP fraction thresholds -> defensive value multiplier
_LOW_HP_FRACTION = 0.5
_HURT_HP_FRACTION = 0.75
_LOW_HP_WEIGHT = 2.0
_HURT_WEIGHT = 1.2
_HEALTHY_WEIGHT = 0.5


class HeuristicAgent(PlayAgent):
    """Greedy scoring policy used for the opponent side.

    Parameters
    ----------
    registry:
        Content registry used to resolve the cards in hand.
    """

    def __init__(self, registry: ContentRegistry) -> None:
        self.registry = registry

    # ------------------------------------------------------------------
    # PlayAgent interface
    # ------------------------------------------------------------------

    def choose_action(self, state: CombatState, combatant: Combatant) -> Action:
        best: CandidatePlay | None = None
        best_key: tuple[bool, float] | None = None

        for play in legal_plays(state, combatant, self.registry):
            score = self.score_play(state, combatant, play)
            if score <= 0:
                continue
            key = (play.cost == 0, score)
            if best_key is None or key > best_key:
                best, best_key = play, key

        if best is None:
            logger.debug("%s has no positive play; ending turn", combatant.id)
            return EndTurn()

        logger.debug(
            "%s chooses %s -> %s (score %.1f)",
            combatant.id, best.move.id, [t.id for t in best.targets], best_key[1],
        )
        return best.action

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_play(
        self, state: CombatState, combatant: Combatant, play: CandidatePlay
    ) -> float:
        """Total heuristic value of *play*."""
        score = 0.0
        if play.move.deals_damage and play.targets:
            score += self._damage_score(state, combatant, play)
        for effect in play.move.effects:
            if effect.kind == EffectKind.APPLY_STATUS and effect.status in DEBUFF_KINDS:
                score += self._debuff_score(combatant, play, effect)
            else:
                score += self._support_score(combatant, play, effect)
        return score

    def _damage_score(
        self, state: CombatState, combatant: Combatant, play: CandidatePlay
    ) -> float:
        primary = play.targets[0]
        preview = calculate_damage_preview(state, combatant, primary, play.move)
        if preview is None:
            return 0.0

        score = float(preview.total_damage * len(play.targets))
        score += math.floor((preview.type_effectiveness - 1.0) * _EFFECTIVENESS_WEIGHT)
        if preview.total_damage >= primary.hp:
            score += LETHAL_BONUS
        return score

    @staticmethod
    def _debuff_score(
        combatant: Combatant, play: CandidatePlay, effect: CardEffect
    ) -> float:
        if passives.blocks_move_status(combatant):
            return 0.0
        score = 0.0
        for target in play.targets:
            if target.side == combatant.side:
                continue
            if passives.is_immune(target, effect.status):
                continue
            score += (effect.stacks or 0) * _DEBUFF_STACK_WEIGHT
            if target.status_stacks(effect.status) >= _HEAVY_STACK_THRESHOLD:
                score -= _HEAVY_STACK_PENALTY
        return score

    @staticmethod
    def _support_score(
        combatant: Combatant, play: CandidatePlay, effect: CardEffect
    ) -> float:
        # Self-directed kinds help the user; the rest help the chosen allies.
        if effect.kind in (
            EffectKind.APPLY_STATUS_SELF, EffectKind.DRAW_CARDS, EffectKind.GAIN_ENERGY,
        ):
            recipients = [combatant]
        else:
            recipients = [t for t in play.targets if t.side == combatant.side]

        score = 0.0
        for unit in recipients:
            value = _support_value(unit, effect)
            if value > 0:
                score += value * _hp_weight(unit)
        return score


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hp_weight(unit: Combatant) -> float:
    if unit.hp_fraction < _LOW_HP_FRACTION:
        return _LOW_HP_WEIGHT
    if unit.hp_fraction < _HURT_HP_FRACTION:
        return _HURT_WEIGHT
    return _HEALTHY_WEIGHT


def _support_value(unit: Combatant, effect: CardEffect) -> int:
    """Raw value of one non-damage effect for *unit*."""
    kind = effect.kind
    if kind == EffectKind.BLOCK:
        return effect.value or 0
    if kind in (EffectKind.HEAL, EffectKind.HEAL_PERCENT):
        missing = unit.max_hp - unit.hp
        if missing <= 0:
            return 0
        if kind == EffectKind.HEAL:
            amount = effect.value or 0
        else:
            amount = math.floor((effect.percent or 0.0) * unit.max_hp)
        return min(amount, missing)
    if kind in (EffectKind.APPLY_STATUS, EffectKind.APPLY_STATUS_SELF):
        if effect.status in DEBUFF_KINDS:
            return 0
        return (effect.stacks or 0) * _SELF_BUFF_STACK_WEIGHT
    if kind == EffectKind.DRAW_CARDS:
        return (effect.count or 0) * _CARD_DRAW_WEIGHT
    if kind == EffectKind.GAIN_ENERGY:
        return (effect.value or 0) * _ENERGY_WEIGHT
    if kind == EffectKind.CLEANSE:
        debuffs = sum(1 for s in unit.statuses if s.kind in DEBUFF_KINDS)
        return min(debuffs, effect.count or 0) * _CLEANSE_WEIGHT
    return 0
