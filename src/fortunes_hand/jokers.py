"""Joker triggers and effects.

CRITICAL: Joker order matters. Jokers are evaluated in slot order and the
bonuses they produce keep that order within each bonus type when scored.

A joker pairs one trigger with one effect:

Triggers (when the joker fires):
- OnScore: during the score phase
- OnPlay: during the play phase, optionally only if a played card matches
- OnSlot: during the slot phase, optionally only if a reel shows a symbol
- OnRoulette: during the roulette phase
- Passive: always

Effects (what it does when it fires):
- AddChips / AddMult / Multiply: score bonuses (chips, mult, xmult)
- AddGold: gold paid out immediately
- ModifySlot / ModifyRoulette: adjustments to the next spin
- Retrigger: extra triggers for scoring cards
- Custom: a named handler registered by the host
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, assert_never

from fortunes_hand.models import (
    AppliedBonus,
    BonusType,
    Card,
    GamePhase,
    Rank,
    SlotResult,
    SlotSymbol,
    Suit,
)

if TYPE_CHECKING:
    from fortunes_hand.hand_evaluation import HandResult

logger = logging.getLogger(__name__)


class JokerRarity(Enum):
    """Joker rarity tiers."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class TriggerKind(Enum):
    """Wire names of trigger variants."""

    ON_SCORE = "on_score"
    ON_PLAY = "on_play"
    ON_SLOT = "on_slot"
    ON_ROULETTE = "on_roulette"
    PASSIVE = "passive"


class EffectKind(Enum):
    """Wire names of effect variants."""

    ADD_CHIPS = "add_chips"
    ADD_MULT = "add_mult"
    MULTIPLY = "multiply"
    ADD_GOLD = "add_gold"
    MODIFY_SLOT = "modify_slot"
    MODIFY_ROULETTE = "modify_roulette"
    RETRIGGER = "retrigger"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CardCondition:
    """Filter on a single card; unset fields match anything."""

    suit: Suit | None = None
    rank: Rank | None = None
    min_rank: int | None = None
    max_rank: int | None = None


# =============================================================================
# Triggers
# =============================================================================


@dataclass(frozen=True)
class OnScore:
    kind = TriggerKind.ON_SCORE


@dataclass(frozen=True)
class OnPlay:
    card_condition: CardCondition | None = None
    kind = TriggerKind.ON_PLAY


@dataclass(frozen=True)
class OnSlot:
    symbol_condition: SlotSymbol | None = None
    kind = TriggerKind.ON_SLOT


@dataclass(frozen=True)
class OnRoulette:
    kind = TriggerKind.ON_ROULETTE


@dataclass(frozen=True)
class Passive:
    kind = TriggerKind.PASSIVE


Trigger = OnScore | OnPlay | OnSlot | OnRoulette | Passive


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class SlotModifiers:
    """Adjustments to a slot spin. Unset fields leave the spin unchanged."""

    symbol_weights: Mapping[SlotSymbol, float] = field(default_factory=dict)
    guaranteed_symbol: SlotSymbol | None = None
    reroll_count: int = 0

    def merge(self, other: "SlotModifiers") -> "SlotModifiers":
        """Combine with a later joker's modifiers.

        Weights merge key-wise with the later value winning, the later
        guaranteed symbol wins when set, and rerolls add up.
        """
        return SlotModifiers(
            symbol_weights={**self.symbol_weights, **other.symbol_weights},
            guaranteed_symbol=other.guaranteed_symbol or self.guaranteed_symbol,
            reroll_count=self.reroll_count + other.reroll_count,
        )


@dataclass(frozen=True)
class RouletteModifiers:
    """Bonuses to a roulette spin."""

    safe_zone_bonus: int = 0  # Percentage points, 0-100
    max_multiplier: int = 0
    free_spins: int = 0

    def merge(self, other: "RouletteModifiers") -> "RouletteModifiers":
        return RouletteModifiers(
            safe_zone_bonus=self.safe_zone_bonus + other.safe_zone_bonus,
            max_multiplier=self.max_multiplier + other.max_multiplier,
            free_spins=self.free_spins + other.free_spins,
        )


@dataclass(frozen=True)
class AddChips:
    value: int
    kind = EffectKind.ADD_CHIPS


@dataclass(frozen=True)
class AddMult:
    value: int
    kind = EffectKind.ADD_MULT


@dataclass(frozen=True)
class Multiply:
    value: float
    kind = EffectKind.MULTIPLY


@dataclass(frozen=True)
class AddGold:
    value: int
    kind = EffectKind.ADD_GOLD


@dataclass(frozen=True)
class ModifySlot:
    modification: SlotModifiers
    kind = EffectKind.MODIFY_SLOT


@dataclass(frozen=True)
class ModifyRoulette:
    modification: RouletteModifiers
    kind = EffectKind.MODIFY_ROULETTE


@dataclass(frozen=True)
class Retrigger:
    count: int
    kind = EffectKind.RETRIGGER


@dataclass(frozen=True)
class Custom:
    handler: str
    kind = EffectKind.CUSTOM


Effect = AddChips | AddMult | Multiply | AddGold | ModifySlot | ModifyRoulette | Retrigger | Custom


@dataclass(frozen=True)
class Joker:
    """A joker owned by the player.

    ``effect`` is None for jokers whose effect could not be loaded; they
    still trigger but contribute nothing.
    """

    id: str
    name: str
    rarity: JokerRarity
    trigger: Trigger
    effect: Effect | None
    cost: int = 0
    description: str = ""


@dataclass(frozen=True)
class JokerContext:
    """Snapshot of the game handed to jokers for one evaluation."""

    phase: GamePhase
    played_cards: tuple[Card, ...] = ()
    hand_result: "HandResult | None" = None
    slot_result: SlotResult | None = None
    current_score: int | None = None


@dataclass
class EffectResult:
    """What a single joker's effect produced."""

    bonuses: list[AppliedBonus] = field(default_factory=list)
    gold_to_add: int = 0
    slot_modifier: SlotModifiers | None = None
    roulette_modifier: RouletteModifiers | None = None
    retrigger_count: int = 0

    def __bool__(self) -> bool:
        """True if this effect does anything."""
        return (
            bool(self.bonuses)
            or self.gold_to_add != 0
            or self.slot_modifier is not None
            or self.roulette_modifier is not None
            or self.retrigger_count != 0
        )


@dataclass
class JokerEvaluation:
    """Combined effects of every joker that fired."""

    bonuses: list[AppliedBonus] = field(default_factory=list)
    gold_to_add: int = 0
    slot_modifiers: SlotModifiers = field(default_factory=SlotModifiers)
    roulette_modifiers: RouletteModifiers = field(default_factory=RouletteModifiers)
    retrigger_count: int = 0
    triggered_joker_ids: list[str] = field(default_factory=list)


# =============================================================================
# Custom handlers
# =============================================================================

CustomHandler = Callable[[Joker, JokerContext], Iterable[AppliedBonus]]


class HandlerRegistry:
    """Named callbacks backing ``Custom`` effects.

    Handlers can be registered directly or with the decorator form::

        handlers = HandlerRegistry()

        @handlers.register("double_down")
        def double_down(joker, ctx):
            yield AppliedBonus(joker.name, BonusType.XMULT, 2)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CustomHandler] = {}

    def register(self, name: str, handler: CustomHandler | None = None):
        if handler is None:

            def decorator(func: CustomHandler) -> CustomHandler:
                self._handlers[name] = func
                return func

            return decorator
        self._handlers[name] = handler
        return handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def dispatch(self, name: str, joker: Joker, ctx: JokerContext) -> list[AppliedBonus]:
        """Run the handler registered as ``name``; unknown names contribute nothing."""
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"No handler registered for custom effect {name!r} on joker {joker.id}")
            return []
        return list(handler(joker, ctx))


# =============================================================================
# Conditions
# =============================================================================


def card_matches_condition(card: Card, condition: CardCondition) -> bool:
    """True if ``card`` satisfies every set field of ``condition``."""
    if condition.suit is not None and card.suit != condition.suit:
        return False
    if condition.rank is not None and card.rank != condition.rank:
        return False
    if condition.min_rank is not None and card.rank < condition.min_rank:
        return False
    if condition.max_rank is not None and card.rank > condition.max_rank:
        return False
    return True


def matches_card_condition(cards: Sequence[Card], condition: CardCondition | None) -> bool:
    """True if there is no condition or any card satisfies it."""
    if condition is None:
        return True
    return any(card_matches_condition(card, condition) for card in cards)


def matches_symbol_condition(result: SlotResult | None, symbol: SlotSymbol | None) -> bool:
    """True if there is no condition or any reel shows ``symbol``."""
    if symbol is None:
        return True
    if result is None:
        return False
    return symbol in result.symbols


def count_matching_cards(cards: Iterable[Card], condition: CardCondition) -> int:
    return sum(1 for card in cards if card_matches_condition(card, condition))


def matching_cards(cards: Iterable[Card], condition: CardCondition) -> list[Card]:
    return [card for card in cards if card_matches_condition(card, condition)]


# =============================================================================
# Evaluation
# =============================================================================


def should_trigger(joker: Joker, ctx: JokerContext) -> bool:
    """Decide whether ``joker`` fires in the given context."""
    match joker.trigger:
        case OnScore():
            return ctx.phase == GamePhase.SCORE_PHASE
        case OnPlay(card_condition=condition):
            return ctx.phase == GamePhase.PLAY_PHASE and matches_card_condition(
                ctx.played_cards, condition
            )
        case OnSlot(symbol_condition=symbol):
            return ctx.phase == GamePhase.SLOT_PHASE and matches_symbol_condition(
                ctx.slot_result, symbol
            )
        case OnRoulette():
            return ctx.phase == GamePhase.ROULETTE_PHASE
        case Passive():
            return True
        case _ as unreachable:
            assert_never(unreachable)


def is_score_bonus_effect(effect: Effect | None) -> bool:
    """True for effects that produce chips, mult or xmult bonuses."""
    return isinstance(effect, (AddChips, AddMult, Multiply))


def apply_effect(
    joker: Joker, ctx: JokerContext, handlers: HandlerRegistry | None = None
) -> EffectResult:
    """Apply a joker's effect. Does not check the trigger."""
    result = EffectResult()
    effect = joker.effect

    match effect:
        case None:
            pass
        case AddChips(value=value):
            result.bonuses.append(AppliedBonus(joker.name, BonusType.CHIPS, value))
        case AddMult(value=value):
            result.bonuses.append(AppliedBonus(joker.name, BonusType.MULT, value))
        case Multiply(value=value):
            result.bonuses.append(AppliedBonus(joker.name, BonusType.XMULT, value))
        case AddGold(value=value):
            result.gold_to_add = value
        case ModifySlot(modification=modification):
            result.slot_modifier = modification
        case ModifyRoulette(modification=modification):
            result.roulette_modifier = modification
        case Retrigger(count=count):
            result.retrigger_count = count
        case Custom(handler=name):
            if handlers is None:
                logger.warning(f"Custom effect {name!r} on joker {joker.id} has no handler registry")
            else:
                result.bonuses.extend(handlers.dispatch(name, joker, ctx))
        case _ as unreachable:
            assert_never(unreachable)

    return result


def _fired(jokers: Iterable[Joker], ctx: JokerContext) -> Iterator[Joker]:
    return (joker for joker in jokers if should_trigger(joker, ctx))


def evaluate_jokers(
    jokers: Sequence[Joker], ctx: JokerContext, handlers: HandlerRegistry | None = None
) -> list[AppliedBonus]:
    """Score bonuses from every joker that fires, in joker order."""
    bonuses: list[AppliedBonus] = []
    for joker in _fired(jokers, ctx):
        bonuses.extend(apply_effect(joker, ctx, handlers).bonuses)
    return bonuses


def evaluate_jokers_full(
    jokers: Sequence[Joker], ctx: JokerContext, handlers: HandlerRegistry | None = None
) -> JokerEvaluation:
    """Every effect of every joker that fires, merged."""
    evaluation = JokerEvaluation()

    for joker in _fired(jokers, ctx):
        effect = apply_effect(joker, ctx, handlers)
        evaluation.bonuses.extend(effect.bonuses)
        evaluation.gold_to_add += effect.gold_to_add
        if effect.slot_modifier is not None:
            evaluation.slot_modifiers = evaluation.slot_modifiers.merge(effect.slot_modifier)
        if effect.roulette_modifier is not None:
            evaluation.roulette_modifiers = evaluation.roulette_modifiers.merge(
                effect.roulette_modifier
            )
        evaluation.retrigger_count += effect.retrigger_count
        evaluation.triggered_joker_ids.append(joker.id)

    logger.debug(
        f"{ctx.phase.value}: {len(evaluation.triggered_joker_ids)}/{len(jokers)} jokers fired, "
        f"{len(evaluation.bonuses)} bonuses"
    )
    return evaluation


def get_triggered_jokers(jokers: Sequence[Joker], ctx: JokerContext) -> list[Joker]:
    """Jokers that would fire in ``ctx``, for highlighting in the UI."""
    return list(_fired(jokers, ctx))


def slot_modifiers_from_jokers(jokers: Iterable[Joker]) -> SlotModifiers:
    """Merged slot modifiers of every ModifySlot joker, regardless of trigger."""
    modifiers = SlotModifiers()
    for joker in jokers:
        if isinstance(joker.effect, ModifySlot):
            modifiers = modifiers.merge(joker.effect.modification)
    return modifiers


def roulette_modifiers_from_jokers(jokers: Iterable[Joker]) -> RouletteModifiers:
    """Summed roulette modifiers of every ModifyRoulette joker, regardless of trigger."""
    modifiers = RouletteModifiers()
    for joker in jokers:
        if isinstance(joker.effect, ModifyRoulette):
            modifiers = modifiers.merge(joker.effect.modification)
    return modifiers


def retrigger_count_from_jokers(jokers: Iterable[Joker], ctx: JokerContext) -> int:
    """Total retriggers from Retrigger jokers that fire in ``ctx``."""
    return sum(
        joker.effect.count for joker in _fired(jokers, ctx) if isinstance(joker.effect, Retrigger)
    )
