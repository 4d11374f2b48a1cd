"""Core combat mechanics for the battle engine.

Re-exports the primary functions from each mechanics module for convenience.

Usage::

    from beastdeck.sim.mechanics import (
        calculate_hit, apply_hit, deal_direct_damage, heal,
        gain_block, reset_block,
        effective_cost, spend_energy, gain_energy,
        draw_cards, draw_extra_cards, discard_hand, vanish_card,
        switch_position, adjacent_positions,
        apply_status, remove_status, cleanse, has_status, get_status_stacks,
        resolve_targets, valid_targets, requires_target_selection,
    )
"""

# -- damage ------------------------------------------------------------------
from .damage import (
    STAB_BONUS,
    DamageBreakdown,
    apply_hit,
    calculate_hit,
    deal_direct_damage,
    heal,
)

# -- block -------------------------------------------------------------------
from .block import gain_block, reset_block

# -- energy ------------------------------------------------------------------
from .energy import effective_cost, gain_energy, spend_energy

# -- card piles --------------------------------------------------------------
from .card_piles import (
    MAX_HAND_SIZE,
    discard_hand,
    draw_cards,
    draw_extra_cards,
    shuffle_cards,
    vanish_card,
)

# -- formation ---------------------------------------------------------------
from .formation import SWITCH_COST, adjacent_positions, switch_position

# -- status effects ----------------------------------------------------------
from .status_effects import (
    DEFAULT_SLOW_DURATION,
    apply_status,
    cleanse,
    debuff_stacks,
    effective_speed,
    get_status_stacks,
    has_status,
    remove_status,
)

# -- targeting ---------------------------------------------------------------
from .targeting import (
    assign_party_positions,
    requires_target_selection,
    resolve_targets,
    valid_targets,
)

# -- type chart --------------------------------------------------------------
from .type_chart import effectiveness_label, get_type_effectiveness

__all__ = [
    # damage
    "STAB_BONUS",
    "DamageBreakdown",
    "calculate_hit",
    "apply_hit",
    "deal_direct_damage",
    "heal",
    # block
    "gain_block",
    "reset_block",
    # energy
    "effective_cost",
    "spend_energy",
    "gain_energy",
    # card piles
    "MAX_HAND_SIZE",
    "shuffle_cards",
    "draw_cards",
    "draw_extra_cards",
    "discard_hand",
    "vanish_card",
    # formation
    "SWITCH_COST",
    "adjacent_positions",
    "switch_position",
    # status effects
    "DEFAULT_SLOW_DURATION",
    "apply_status",
    "remove_status",
    "cleanse",
    "has_status",
    "get_status_stacks",
    "debuff_stacks",
    "effective_speed",
    # targeting
    "assign_party_positions",
    "valid_targets",
    "requires_target_selection",
    "resolve_targets",
    # type chart
    "get_type_effectiveness",
    "effectiveness_label",
]
