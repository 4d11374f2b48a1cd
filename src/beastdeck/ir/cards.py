"""Move (card) definitions -- the content every creature's deck is built from."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .status_effects import StatusKind


class ElementType(str, Enum):
    """Elemental type shared by creatures and moves."""

    NORMAL = "normal"
    FIRE = "fire"
    WATER = "water"
    GRASS = "grass"
    ELECTRIC = "electric"
    POISON = "poison"
    FLYING = "flying"
    PSYCHIC = "psychic"
    DARK = "dark"
    FIGHTING = "fighting"
    ICE = "ice"
    BUG = "bug"
    DRAGON = "dragon"
    GHOST = "ghost"
    ROCK = "rock"
    GROUND = "ground"


class MoveRange(str, Enum):
    """Targeting rule of a move over the 2x3 formation grid."""

    FRONT_ENEMY = "front_enemy"
    BACK_ENEMY = "back_enemy"
    ANY_ENEMY = "any_enemy"
    FRONT_ROW = "front_row"
    BACK_ROW = "back_row"
    ANY_ROW = "any_row"
    COLUMN = "column"
    ALL_ENEMIES = "all_enemies"
    SELF = "self"
    ANY_ALLY = "any_ally"


ROW_RANGES: frozenset[MoveRange] = frozenset(
    {MoveRange.FRONT_ROW, MoveRange.BACK_ROW, MoveRange.ANY_ROW}
)
"""Row-scoped ranges that range-rewriting passives widen to all enemies."""


class CardRarity(str, Enum):
    """How often a move shows up in drafts."""

    BASIC = "basic"
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


class EffectKind(str, Enum):
    """Every effect variant a move can carry."""

    DAMAGE = "damage"
    MULTI_HIT = "multi_hit"
    HEAL = "heal"
    HEAL_PERCENT = "heal_percent"
    HEAL_ON_HIT = "heal_on_hit"
    RECOIL = "recoil"
    SET_DAMAGE = "set_damage"
    PERCENT_HP = "percent_hp"
    SELF_KO = "self_ko"
    BLOCK = "block"
    APPLY_STATUS = "apply_status"
    APPLY_STATUS_SELF = "apply_status_self"
    DRAW_CARDS = "draw_cards"
    GAIN_ENERGY = "gain_energy"
    CLEANSE = "cleanse"


class BonusCondition(str, Enum):
    """Conditions that add ``bonus_value`` to a damage effect's base value."""

    USER_BELOW_HALF_HP = "user_below_half_hp"
    TARGET_DEBUFF_STACKS_AT_LEAST = "target_debuff_stacks_at_least"
    PER_TARGET_DEBUFF_STACK = "per_target_debuff_stack"


# Effects that run through the damage pipeline (steps 1-8).
PIPELINE_DAMAGE_KINDS: frozenset[EffectKind] = frozenset(
    {
        EffectKind.DAMAGE,
        EffectKind.MULTI_HIT,
        EffectKind.HEAL_ON_HIT,
        EffectKind.RECOIL,
        EffectKind.SELF_KO,
    }
)

# Any effect that takes HP from the target.
DAMAGE_KINDS: frozenset[EffectKind] = PIPELINE_DAMAGE_KINDS | {
    EffectKind.SET_DAMAGE,
    EffectKind.PERCENT_HP,
}

# Effects that always act on the card's user, once per play.
SELF_KINDS: frozenset[EffectKind] = frozenset(
    {
        EffectKind.APPLY_STATUS_SELF,
        EffectKind.DRAW_CARDS,
        EffectKind.GAIN_ENERGY,
    }
)

_REQUIRED_PARAMS: dict[EffectKind, tuple[str, ...]] = {
    EffectKind.DAMAGE: ("value",),
    EffectKind.MULTI_HIT: ("value", "hits"),
    EffectKind.HEAL: ("value",),
    EffectKind.HEAL_PERCENT: ("percent",),
    EffectKind.HEAL_ON_HIT: ("value", "percent"),
    EffectKind.RECOIL: ("value", "percent"),
    EffectKind.SET_DAMAGE: ("value",),
    EffectKind.PERCENT_HP: ("percent",),
    EffectKind.SELF_KO: ("value",),
    EffectKind.BLOCK: ("value",),
    EffectKind.APPLY_STATUS: ("status", "stacks"),
    EffectKind.APPLY_STATUS_SELF: ("status", "stacks"),
    EffectKind.DRAW_CARDS: ("count",),
    EffectKind.GAIN_ENERGY: ("value",),
    EffectKind.CLEANSE: ("count",),
}


class CardEffect(BaseModel):
    """One entry of a move's ordered effect list.

    The ``kind`` tag selects which numeric parameters are meaningful; the
    validator rejects an effect that is missing a parameter its kind needs.
    """

    kind: EffectKind
    """Which effect variant this is."""

    value: int | None = None
    """Damage, block, heal or energy amount."""

    hits: int | None = None
    """Number of hits for ``multi_hit``."""

    percent: float | None = None
    """Fraction in ``[0, 1]`` for heal_on_hit, recoil, percent_hp and heal_percent."""

    of_max: bool = False
    """For ``percent_hp``: use the target's max HP instead of current HP."""

    status: StatusKind | None = None
    """Status applied by ``apply_status`` / ``apply_status_self``."""

    stacks: int | None = None
    """Stacks applied by the status effects."""

    duration: int | None = None
    """Optional duration for duration-based statuses (slow)."""

    count: int | None = None
    """Cards drawn for ``draw_cards`` or debuffs removed for ``cleanse``."""

    bonus_condition: BonusCondition | None = None
    bonus_value: int = 0
    bonus_threshold: int = 0

    @model_validator(mode="after")
    def _check_params(self) -> CardEffect:
        missing = [
            name for name in _REQUIRED_PARAMS[self.kind]
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(
                f"{self.kind.value} effect requires {', '.join(missing)}"
            )
        if self.percent is not None and not 0.0 <= self.percent <= 1.0:
            raise ValueError(f"percent must be within [0, 1], got {self.percent}")
        return self


class MoveDefinition(BaseModel):
    """Complete definition of a single move card."""

    id: str
    """Unique identifier referenced by creature decks."""

    name: str
    """Display name used in logs."""

    type: ElementType
    """Elemental type; drives STAB, type effectiveness and passive gates."""

    cost: int = Field(ge=0)
    """Base energy cost before cost-modifying passives."""

    range: MoveRange
    """Targeting rule."""

    rarity: CardRarity = CardRarity.COMMON

    vanish: bool = False
    """Single-use: removed from the deck for the rest of the battle once played."""

    description: str = ""

    effects: list[CardEffect] = Field(default_factory=list)
    """Effects resolved strictly in this order."""

    # -- queries -------------------------------------------------------------

    @property
    def is_attack(self) -> bool:
        """True if any effect runs through the damage pipeline.

        Fixed and percentage damage take HP without counting as an attack
        for attack-keyed passives.
        """
        return any(e.kind in PIPELINE_DAMAGE_KINDS for e in self.effects)

    @property
    def deals_damage(self) -> bool:
        return any(e.kind in DAMAGE_KINDS for e in self.effects)

    @property
    def damage_effect(self) -> CardEffect | None:
        """The first effect that takes HP from the target, or ``None``."""
        for effect in self.effects:
            if effect.kind in DAMAGE_KINDS:
                return effect
        return None

    def has_effect(self, kind: EffectKind) -> bool:
        return any(e.kind == kind for e in self.effects)

    # -- echo copies ---------------------------------------------------------

    def echo(self) -> MoveDefinition:
        """The free, single-use copy granted by Parental Bond.

        Every pipeline damage value is halved (floored).
        """
        effects = [
            e.model_copy(update={"value": (e.value or 0) // 2})
            if e.kind in PIPELINE_DAMAGE_KINDS else e
            for e in self.effects
        ]
        return self.model_copy(update={
            "id": f"{self.id}{ECHO_SUFFIX}",
            "name": f"{self.name} (Echo)",
            "cost": 0,
            "vanish": True,
            "effects": effects,
        })


# Hand entries with this suffix name the echo copy of the base move.
ECHO_SUFFIX = "__echo"


def is_echo_id(move_id: str) -> bool:
    return move_id.endswith(ECHO_SUFFIX)


def base_move_id(move_id: str) -> str:
    """Strip the echo suffix, if any."""
    if is_echo_id(move_id):
        return move_id[: -len(ECHO_SUFFIX)]
    return move_id
