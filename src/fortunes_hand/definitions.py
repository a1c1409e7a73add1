"""Static joker and enhancement definition tables.

The package ships ``data/jokers.json`` and ``data/enhancements.json``.
Entries are validated with pydantic and converted into the runtime
``Joker`` / ``Enhancement`` types. Bad entries degrade rather than abort the
load: they are skipped (or loaded inert) with a warning. Only a file that
is not a definition table at all raises ``DefinitionError``.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fortunes_hand.jokers import (
    AddChips,
    AddGold,
    AddMult,
    CardCondition,
    Custom,
    Effect,
    EffectKind,
    Joker,
    JokerRarity,
    ModifyRoulette,
    ModifySlot,
    Multiply,
    OnPlay,
    OnRoulette,
    OnScore,
    OnSlot,
    Passive,
    Retrigger,
    RouletteModifiers,
    SlotModifiers,
    Trigger,
    TriggerKind,
)
from fortunes_hand.models import (
    RANK_BY_LABEL,
    SUIT_BY_CODE,
    Card,
    Enhancement,
    EnhancementType,
    Rank,
    SlotSymbol,
    Suit,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
JOKERS_FILE = DATA_DIR / "jokers.json"
ENHANCEMENTS_FILE = DATA_DIR / "enhancements.json"

Source = str | Path | Mapping[str, Any] | None


class DefinitionError(ValueError):
    """A definition file could not be read as a definition table."""


def _parse_suit(value: Any) -> Any:
    """Accept ``hearts``, ``H`` or a Suit."""
    if isinstance(value, str):
        text = value.strip()
        by_name = {suit.full_name: suit for suit in Suit}
        if text.lower() in by_name:
            return by_name[text.lower()]
        if text.upper() in SUIT_BY_CODE:
            return SUIT_BY_CODE[text.upper()]
        raise ValueError(f"Unknown suit: {value!r}")
    return value


def _parse_rank(value: Any) -> Any:
    """Accept ``A``, ``10`` or a numeric rank value."""
    if isinstance(value, str) and value.strip().upper() in RANK_BY_LABEL:
        return RANK_BY_LABEL[value.strip().upper()]
    return value


# =============================================================================
# Schemas
# =============================================================================


class CardConditionSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suit: Suit | None = None
    rank: Rank | None = None
    min_rank: int | None = Field(None, alias="minRank", ge=2, le=14)
    max_rank: int | None = Field(None, alias="maxRank", ge=2, le=14)

    @field_validator("suit", mode="before")
    @classmethod
    def parse_suit(cls, value: Any) -> Any:
        return _parse_suit(value)

    @field_validator("rank", "min_rank", "max_rank", mode="before")
    @classmethod
    def parse_rank(cls, value: Any) -> Any:
        return _parse_rank(value)

    def to_condition(self) -> CardCondition:
        return CardCondition(
            suit=self.suit,
            rank=self.rank,
            min_rank=None if self.min_rank is None else int(self.min_rank),
            max_rank=None if self.max_rank is None else int(self.max_rank),
        )


class TriggerSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    card_condition: CardConditionSpec | None = Field(None, alias="cardCondition")
    symbol_condition: SlotSymbol | None = Field(None, alias="symbolCondition")


class SlotModifiersSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol_weights: dict[SlotSymbol, float] = Field(default_factory=dict, alias="symbolWeights")
    guaranteed_symbol: SlotSymbol | None = Field(None, alias="guaranteedSymbol")
    reroll_count: int = Field(0, alias="rerollCount", ge=0)


class RouletteModifiersSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    safe_zone_bonus: int = Field(0, alias="safeZoneBonus", ge=0, le=100)
    max_multiplier: int = Field(0, alias="maxMultiplier")
    free_spins: int = Field(0, alias="freeSpins", ge=0)


class EffectSpec(BaseModel):
    type: str
    value: float | None = None
    count: int | None = None
    handler: str | None = None
    modification: dict[str, Any] | None = None


class JokerSpec(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    rarity: JokerRarity
    trigger: TriggerSpec
    effect: EffectSpec
    cost: int = Field(0, ge=0)
    description: str = ""

    @field_validator("rarity", mode="before")
    @classmethod
    def normalize_rarity(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class EnhancementSpec(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    type: EnhancementType
    value: int
    description: str = ""


# =============================================================================
# Conversion
# =============================================================================


def _build_trigger(spec: TriggerSpec) -> Trigger | None:
    match spec.type:
        case TriggerKind.ON_SCORE.value:
            return OnScore()
        case TriggerKind.ON_PLAY.value:
            condition = spec.card_condition.to_condition() if spec.card_condition else None
            return OnPlay(card_condition=condition)
        case TriggerKind.ON_SLOT.value:
            return OnSlot(symbol_condition=spec.symbol_condition)
        case TriggerKind.ON_ROULETTE.value:
            return OnRoulette()
        case TriggerKind.PASSIVE.value:
            return Passive()
    return None


def _required(value: Any, effect_type: str, name: str) -> Any:
    if value is None:
        raise ValueError(f"{effect_type} effect requires {name!r}")
    return value


def _integral(value: float | None, effect_type: str) -> int:
    value = _required(value, effect_type, "value")
    if value != int(value):
        raise ValueError(f"{effect_type} effect requires a whole number, got {value}")
    return int(value)


def _build_effect(spec: EffectSpec) -> Effect | None:
    """Runtime effect for ``spec``; None if the type is unknown."""
    match spec.type:
        case EffectKind.ADD_CHIPS.value:
            return AddChips(_integral(spec.value, spec.type))
        case EffectKind.ADD_MULT.value:
            return AddMult(_integral(spec.value, spec.type))
        case EffectKind.MULTIPLY.value:
            return Multiply(float(_required(spec.value, spec.type, "value")))
        case EffectKind.ADD_GOLD.value:
            return AddGold(_integral(spec.value, spec.type))
        case EffectKind.RETRIGGER.value:
            return Retrigger(int(_required(spec.count, spec.type, "count")))
        case EffectKind.CUSTOM.value:
            return Custom(_required(spec.handler, spec.type, "handler"))
        case EffectKind.MODIFY_SLOT.value:
            mod = SlotModifiersSpec.model_validate(spec.modification or {})
            return ModifySlot(
                SlotModifiers(
                    symbol_weights=dict(mod.symbol_weights),
                    guaranteed_symbol=mod.guaranteed_symbol,
                    reroll_count=mod.reroll_count,
                )
            )
        case EffectKind.MODIFY_ROULETTE.value:
            mod = RouletteModifiersSpec.model_validate(spec.modification or {})
            return ModifyRoulette(
                RouletteModifiers(
                    safe_zone_bonus=mod.safe_zone_bonus,
                    max_multiplier=mod.max_multiplier,
                    free_spins=mod.free_spins,
                )
            )
    return None


def build_joker(spec: JokerSpec) -> Joker | None:
    """Convert a validated spec, or None if its trigger type is unknown."""
    trigger = _build_trigger(spec.trigger)
    if trigger is None:
        logger.warning(f"Skipping joker {spec.id}: unknown trigger type {spec.trigger.type!r}")
        return None

    effect = _build_effect(spec.effect)
    if effect is None:
        logger.warning(f"Joker {spec.id} loaded inert: unknown effect type {spec.effect.type!r}")

    return Joker(
        id=spec.id,
        name=spec.name,
        rarity=spec.rarity,
        trigger=trigger,
        effect=effect,
        cost=spec.cost,
        description=spec.description,
    )


# =============================================================================
# Tables
# =============================================================================


@dataclass(frozen=True)
class JokerTable:
    """Jokers by id, in file order."""

    jokers: tuple[Joker, ...]

    def get(self, joker_id: str) -> Joker | None:
        return next((j for j in self.jokers if j.id == joker_id), None)

    def all(self) -> list[Joker]:
        return list(self.jokers)

    def by_rarity(self, rarity: JokerRarity) -> list[Joker]:
        return [j for j in self.jokers if j.rarity == rarity]

    def by_trigger(self, kind: TriggerKind) -> list[Joker]:
        return [j for j in self.jokers if j.trigger.kind == kind]

    def get_all_joker_ids(self) -> list[str]:
        return [j.id for j in self.jokers]

    def __len__(self) -> int:
        return len(self.jokers)

    def __contains__(self, joker_id: object) -> bool:
        return any(j.id == joker_id for j in self.jokers)


@dataclass(frozen=True)
class EnhancementTable:
    """Enhancements by id."""

    enhancements: Mapping[str, EnhancementSpec]

    def get(self, enhancement_id: str) -> Enhancement | None:
        spec = self.enhancements.get(enhancement_id)
        if spec is None:
            return None
        return Enhancement(type=spec.type, value=spec.value)

    def all(self) -> list[EnhancementSpec]:
        return list(self.enhancements.values())

    def __len__(self) -> int:
        return len(self.enhancements)


def _read_entries(source: Source, default: Path, key: str) -> list[Any]:
    """Top-level ``key`` list of a definition table from a path or mapping."""
    if source is None:
        source = default
    if isinstance(source, Mapping):
        data: Any = source
        origin = "<mapping>"
    else:
        origin = str(source)
        try:
            data = json.loads(Path(source).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DefinitionError(f"Cannot read definition file {origin}: {e}") from e

    entries = data.get(key) if isinstance(data, Mapping) else None
    if not isinstance(entries, list):
        raise DefinitionError(f"{origin} has no top-level {key!r} list")
    return entries


def _validated(model: type[BaseModel], entries: Iterable[Any], label: str) -> list[Any]:
    specs = []
    for index, entry in enumerate(entries):
        try:
            specs.append(model.model_validate(entry))
        except ValidationError as e:
            entry_id = entry.get("id", index) if isinstance(entry, Mapping) else index
            logger.warning(f"Skipping {label} {entry_id}: {e.error_count()} validation error(s)")
    return specs


def load_joker_table(source: Source = None) -> JokerTable:
    """Load joker definitions from ``source`` (bundled table by default)."""
    entries = _read_entries(source, JOKERS_FILE, "jokers")
    jokers = []
    seen: set[str] = set()
    for spec in _validated(JokerSpec, entries, "joker"):
        if spec.id in seen:
            logger.warning(f"Skipping duplicate joker id {spec.id}")
            continue
        try:
            joker = build_joker(spec)
        except ValueError as e:
            logger.warning(f"Skipping joker {spec.id}: {e}")
            continue
        if joker is not None:
            seen.add(spec.id)
            jokers.append(joker)
    logger.debug(f"Loaded {len(jokers)} jokers")
    return JokerTable(tuple(jokers))


def load_enhancement_table(source: Source = None) -> EnhancementTable:
    """Load enhancement definitions from ``source`` (bundled table by default)."""
    entries = _read_entries(source, ENHANCEMENTS_FILE, "enhancements")
    enhancements: dict[str, EnhancementSpec] = {}
    for spec in _validated(EnhancementSpec, entries, "enhancement"):
        if spec.id in enhancements:
            logger.warning(f"Skipping duplicate enhancement id {spec.id}")
            continue
        enhancements[spec.id] = spec
    logger.debug(f"Loaded {len(enhancements)} enhancements")
    return EnhancementTable(enhancements)


@lru_cache(maxsize=1)
def default_joker_table() -> JokerTable:
    return load_joker_table()


@lru_cache(maxsize=1)
def default_enhancement_table() -> EnhancementTable:
    return load_enhancement_table()


def apply_enhancement(
    card: Card, enhancement_id: str, table: EnhancementTable | None = None
) -> Card:
    """Copy of ``card`` carrying the enhancement ``enhancement_id``.

    An unknown id returns the card unchanged.
    """
    table = table if table is not None else default_enhancement_table()
    enhancement = table.get(enhancement_id)
    if enhancement is None:
        logger.warning(f"Unknown enhancement {enhancement_id!r}, card {card.id} unchanged")
        return card
    return card.with_enhancement(enhancement)
