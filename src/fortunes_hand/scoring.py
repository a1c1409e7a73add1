"""Score aggregation.

Turns a classified hand plus ordered bonuses into a final score.

Effect order is fixed:
1. Base hand chips + base hand mult (from hand type)
2. For each scoring card (left to right):
   a. Card's chip value (rank-based; gold cards give none)
   b. Chips enhancement, added before retrigger multiplication
   c. Mult enhancement, times the trigger count
3. External bonuses, grouped by type regardless of supplied order:
   a. every +chips
   b. every +mult
   c. every xmult
4. Final score = floor(total_chips × total_mult)

Example of why grouping matters:
- Bonuses supplied as [+3 mult, x2 mult, +5 chips] on base 10 chips / 2 mult
- Applied as chips, mult, xmult: 15 × ((2 + 3) × 2) = 150
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fortunes_hand.config import DEFAULT_RULES, ScoringRules
from fortunes_hand.hand_evaluation import HandResult
from fortunes_hand.models import (
    AppliedBonus,
    BonusType,
    Card,
    EnhancementType,
    HandType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreCalculation:
    """Result of scoring one hand.

    ``applied_bonuses`` replays the calculation: starting from 0 chips and
    0 mult, applying every record in order yields ``chip_total`` and
    ``mult_total``.
    """

    hand_result: HandResult
    chip_total: float
    mult_total: float
    applied_bonuses: tuple[AppliedBonus, ...]
    final_score: int


def card_chip_value(card: Card) -> int:
    """Chips one trigger of ``card`` is worth, before retriggers."""
    if card.is_gold:
        return 0
    return card.rank.chip_value + card.enhancement_value(EnhancementType.CHIPS)


def card_trigger_count(
    card: Card, extra_retriggers: int = 0, rules: ScoringRules = DEFAULT_RULES
) -> int:
    """How many times ``card`` scores: once, plus its clamped retriggers."""
    retriggers = card.enhancement_value(EnhancementType.RETRIGGER) + extra_retriggers
    return 1 + rules.clamp_retriggers(retriggers)


def calculate_card_chips(
    cards: Iterable[Card], extra_retriggers: int = 0, rules: ScoringRules = DEFAULT_RULES
) -> int:
    """Total chips from ``cards``, retriggers included."""
    return sum(
        card_chip_value(card) * card_trigger_count(card, extra_retriggers, rules)
        for card in cards
    )


def calculate_gold_from_enhancements(
    scoring_cards: Iterable[Card],
    *,
    extra_retriggers: int = 0,
    rules: ScoringRules = DEFAULT_RULES,
) -> int:
    """Gold earned from gold enhancements; paid separately from the score."""
    return sum(
        card.enhancement_value(EnhancementType.GOLD)
        * card_trigger_count(card, extra_retriggers, rules)
        for card in scoring_cards
    )


def _enhancement_source(card: Card, triggers: int) -> str:
    source = f"Enhancement: {card.short_label}"
    if triggers > 1:
        source += f" (x{triggers})"
    return source


def _internal_bonuses(
    hand_result: HandResult, extra_retriggers: int, rules: ScoringRules
) -> list[AppliedBonus]:
    """Base and per-card contributions, in computed order, zeros omitted."""
    label = hand_result.hand_type.label
    rank_chips = 0
    enhancement_chips: list[AppliedBonus] = []
    enhancement_mult: list[AppliedBonus] = []

    for card in hand_result.scoring_cards:
        triggers = card_trigger_count(card, extra_retriggers, rules)
        if not card.is_gold:
            rank_chips += card.rank.chip_value * triggers

        chips = 0 if card.is_gold else card.enhancement_value(EnhancementType.CHIPS)
        if chips:
            enhancement_chips.append(
                AppliedBonus(_enhancement_source(card, triggers), BonusType.CHIPS, chips * triggers)
            )
        mult = card.enhancement_value(EnhancementType.MULT)
        if mult:
            enhancement_mult.append(
                AppliedBonus(_enhancement_source(card, triggers), BonusType.MULT, mult * triggers)
            )

    records = [
        AppliedBonus(f"Base: {label}", BonusType.CHIPS, hand_result.base_chips),
        AppliedBonus("Card chips", BonusType.CHIPS, rank_chips),
        *enhancement_chips,
        AppliedBonus(f"Base: {label}", BonusType.MULT, hand_result.base_mult),
        *enhancement_mult,
    ]
    return [record for record in records if record.value != 0]


def _group_external(bonuses: Iterable[AppliedBonus]) -> list[AppliedBonus]:
    """Order external bonuses chips first, then mult, then xmult, stable within type."""
    order = {BonusType.CHIPS: 0, BonusType.MULT: 1, BonusType.XMULT: 2}
    return sorted(bonuses, key=lambda bonus: order[bonus.type])


def calculate_score(
    hand_result: HandResult,
    bonuses: Sequence[AppliedBonus] = (),
    *,
    extra_retriggers: int = 0,
    rules: ScoringRules = DEFAULT_RULES,
) -> ScoreCalculation:
    """Calculate the final score for an evaluated hand.

    Args:
        hand_result: Output of ``evaluate_hand``
        bonuses: External bonuses (usually from jokers), in joker order
        extra_retriggers: Retriggers granted to every scoring card by jokers
        rules: Engine limits (retrigger clamp)

    Returns:
        ScoreCalculation with totals, ordered bonus records and final score
    """
    internal = _internal_bonuses(hand_result, extra_retriggers, rules)
    external = _group_external(bonuses)

    chips: float = 0
    mult: float = 0
    for bonus in [*internal, *external]:
        match bonus.type:
            case BonusType.CHIPS:
                chips += bonus.value
            case BonusType.MULT:
                mult += bonus.value
            case BonusType.XMULT:
                mult *= bonus.value

    final_score = math.floor(chips * mult)
    calculation = ScoreCalculation(
        hand_result=hand_result,
        chip_total=chips,
        mult_total=mult,
        applied_bonuses=tuple(internal + external),
        final_score=final_score,
    )
    logger.debug(
        f"Scored {hand_result.hand_type.label}: {chips:g} chips x {mult} mult = {final_score}"
    )
    return calculation


def empty_score_calculation() -> ScoreCalculation:
    """Score for a play with no cards."""
    return ScoreCalculation(
        hand_result=HandResult(
            hand_type=HandType.HIGH_CARD,
            rank=0,
            scoring_cards=(),
            base_chips=0,
            base_mult=1,
        ),
        chip_total=0,
        mult_total=1,
        applied_bonuses=(),
        final_score=0,
    )


def format_score_breakdown(calculation: ScoreCalculation) -> str:
    """Human-readable breakdown for logs and the debug panel."""
    lines = [f"{calculation.hand_result.hand_type.label}"]
    for bonus in calculation.applied_bonuses:
        match bonus.type:
            case BonusType.CHIPS:
                lines.append(f"  +{bonus.value:g} chips  {bonus.source}")
            case BonusType.MULT:
                lines.append(f"  +{bonus.value:g} mult   {bonus.source}")
            case BonusType.XMULT:
                lines.append(f"  x{bonus.value:g} mult   {bonus.source}")
    lines.append(
        f"  = {calculation.chip_total:g} x {calculation.mult_total:g} = {calculation.final_score}"
    )
    return "\n".join(lines)
