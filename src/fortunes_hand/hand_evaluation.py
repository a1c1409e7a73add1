"""Poker hand classification.

Identifies the strongest of the 13 hand categories a set of played cards
forms, picks the scoring cards and computes a tie-break rank within the
category. Wild cards are resolved to the substitution that yields the
strongest hand.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from itertools import combinations, combinations_with_replacement

from fortunes_hand.config import DEFAULT_RULES, ScoringRules
from fortunes_hand.models import (
    RANKS_HIGH_TO_LOW,
    SUIT_ORDER,
    Card,
    HandType,
    Rank,
    Suit,
    compare_hand_types,
)

logger = logging.getLogger(__name__)

ROYAL_RANKS: tuple[Rank, ...] = (Rank.ACE, Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN)
WHEEL_RANKS: tuple[Rank, ...] = (Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO, Rank.ACE)

Detector = Callable[[Sequence[Card]], list[Card] | None]
HandKey = tuple[HandType, int]


@dataclass(frozen=True)
class HandResult:
    """Result of hand evaluation."""

    hand_type: HandType
    rank: int  # Tie-break within hand_type, higher is stronger
    scoring_cards: tuple[Card, ...]
    base_chips: int
    base_mult: int
    # (wild card id, card it was resolved to), in played order
    resolved_wilds: tuple[tuple[str, Card], ...] = ()

    def resolved_as(self, card: Card) -> Card:
        """The card a wild was resolved to; non-wild cards map to themselves."""
        for wild_id, substitute in self.resolved_wilds:
            if wild_id == card.id:
                return substitute
        return card


# =============================================================================
# Grouping helpers
# =============================================================================


def group_by_rank(cards: Iterable[Card]) -> dict[Rank, list[Card]]:
    """Group cards by rank, preserving input order within each group."""
    groups: dict[Rank, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.rank, []).append(card)
    return groups


def group_by_suit(cards: Iterable[Card]) -> dict[Suit, list[Card]]:
    """Group cards by suit, preserving input order within each group."""
    groups: dict[Suit, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.suit, []).append(card)
    return groups


def _sort_desc(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: c.rank, reverse=True)


def _rank_groups(cards: Sequence[Card]) -> list[tuple[Rank, list[Card]]]:
    """Rank groups ordered by size, then rank, both descending."""
    groups = group_by_rank(cards)
    return sorted(groups.items(), key=lambda item: (len(item[1]), item[0]), reverse=True)


def _suit_groups(cards: Sequence[Card]) -> list[list[Card]]:
    """Suit groups ordered by size descending."""
    return sorted(group_by_suit(cards).values(), key=len, reverse=True)


def _kickers(cards: Sequence[Card], exclude: set[Rank], count: int) -> list[Card]:
    """Highest ``count`` cards whose rank is not in ``exclude``."""
    return _sort_desc(c for c in cards if c.rank not in exclude)[:count]


def _straight_cards(cards: Sequence[Card]) -> list[Card] | None:
    """Five cards forming the highest straight, high to low.

    Aces play high or in the wheel (A-2-3-4-5); sequences never wrap.
    """
    by_rank: dict[Rank, Card] = {}
    for card in _sort_desc(cards):
        by_rank.setdefault(card.rank, card)
    if len(by_rank) < 5:
        return None

    for top in range(Rank.ACE, Rank.SIX - 1, -1):
        run = [Rank(top - offset) for offset in range(5)]
        if all(rank in by_rank for rank in run):
            return [by_rank[rank] for rank in run]

    if all(rank in by_rank for rank in WHEEL_RANKS):
        return [by_rank[rank] for rank in WHEEL_RANKS]
    return None


# =============================================================================
# Hand detectors (strongest first)
# =============================================================================


def _detect_pentagon(cards: Sequence[Card]) -> list[Card] | None:
    spade_aces = [c for c in cards if c.rank == Rank.ACE and c.suit == Suit.SPADES]
    if len(spade_aces) >= 5:
        return spade_aces[:5]
    return None


def _detect_royal_quintuple(cards: Sequence[Card]) -> list[Card] | None:
    groups: dict[tuple[Rank, Suit], list[Card]] = {}
    for card in cards:
        groups.setdefault((card.rank, card.suit), []).append(card)
    matching = [(key[0], group) for key, group in groups.items() if len(group) >= 5]
    if not matching:
        return None
    _, group = max(matching, key=lambda item: item[0])
    return group[:5]


def _detect_quintuple(cards: Sequence[Card]) -> list[Card] | None:
    for _, group in _rank_groups(cards):
        if len(group) >= 5:
            return group[:5]
    return None


def _detect_royal_flush(cards: Sequence[Card]) -> list[Card] | None:
    for group in _suit_groups(cards):
        if len(group) < 5:
            break
        by_rank = {c.rank: c for c in reversed(group)}
        if all(rank in by_rank for rank in ROYAL_RANKS):
            return [by_rank[rank] for rank in ROYAL_RANKS]
    return None


def _detect_four_of_a_kind(cards: Sequence[Card]) -> list[Card] | None:
    for rank, group in _rank_groups(cards):
        if len(group) >= 4:
            return group[:4] + _kickers(cards, {rank}, 1)
    return None


def _detect_straight_flush(cards: Sequence[Card]) -> list[Card] | None:
    for group in _suit_groups(cards):
        if len(group) < 5:
            break
        straight = _straight_cards(group)
        if straight is not None:
            return straight
    return None


def _detect_full_house(cards: Sequence[Card]) -> list[Card] | None:
    groups = _rank_groups(cards)
    trips = next(((rank, group) for rank, group in groups if len(group) >= 3), None)
    if trips is None:
        return None
    pair = next(
        (group for rank, group in groups if rank != trips[0] and len(group) >= 2), None
    )
    if pair is None:
        return None
    return trips[1][:3] + pair[:2]


def _detect_flush(cards: Sequence[Card]) -> list[Card] | None:
    groups = _suit_groups(cards)
    if groups and len(groups[0]) >= 5:
        return _sort_desc(groups[0])[:5]
    return None


def _detect_straight(cards: Sequence[Card]) -> list[Card] | None:
    return _straight_cards(cards)


def _detect_three_of_a_kind(cards: Sequence[Card]) -> list[Card] | None:
    for rank, group in _rank_groups(cards):
        if len(group) >= 3:
            return group[:3] + _kickers(cards, {rank}, 2)
    return None


def _detect_two_pair(cards: Sequence[Card]) -> list[Card] | None:
    pairs = [(rank, group) for rank, group in _rank_groups(cards) if len(group) >= 2]
    if len(pairs) < 2:
        return None
    (high_rank, high), (low_rank, low) = pairs[:2]
    return high[:2] + low[:2] + _kickers(cards, {high_rank, low_rank}, 1)


def _detect_pair(cards: Sequence[Card]) -> list[Card] | None:
    for rank, group in _rank_groups(cards):
        if len(group) >= 2:
            return group[:2] + _kickers(cards, {rank}, 3)
    return None


_LADDER: tuple[tuple[HandType, Detector], ...] = (
    (HandType.PENTAGON, _detect_pentagon),
    (HandType.ROYAL_QUINTUPLE, _detect_royal_quintuple),
    (HandType.QUINTUPLE, _detect_quintuple),
    (HandType.ROYAL_FLUSH, _detect_royal_flush),
    (HandType.FOUR_OF_A_KIND, _detect_four_of_a_kind),
    (HandType.STRAIGHT_FLUSH, _detect_straight_flush),
    (HandType.FULL_HOUSE, _detect_full_house),
    (HandType.FLUSH, _detect_flush),
    (HandType.STRAIGHT, _detect_straight),
    (HandType.THREE_OF_A_KIND, _detect_three_of_a_kind),
    (HandType.TWO_PAIR, _detect_two_pair),
    (HandType.PAIR, _detect_pair),
)


def _classify(cards: Sequence[Card]) -> tuple[HandType, list[Card]]:
    """Run the detector ladder on cards with concrete ranks and suits."""
    for hand_type, detector in _LADDER:
        scoring = detector(cards)
        if scoring is not None:
            return hand_type, scoring
    return HandType.HIGH_CARD, _sort_desc(cards)[:5]


# =============================================================================
# Tie-break rank
# =============================================================================


def _packed(values: Sequence[int]) -> int:
    """Pack up to five descending rank values into weighted base-10 digits."""
    padded = list(values[:5]) + [0] * (5 - min(len(values), 5))
    return sum(value * 10 ** (4 - i) for i, value in enumerate(padded))


def _tie_break(hand_type: HandType, scoring_cards: Sequence[Card]) -> int:
    """Strength of a hand within its category; higher is stronger."""
    if not scoring_cards:
        return 0

    values = sorted((int(c.rank) for c in scoring_cards), reverse=True)
    groups = _rank_groups(scoring_cards)

    match hand_type:
        case HandType.PENTAGON:
            return 100000
        case HandType.ROYAL_QUINTUPLE:
            return 50000 + values[0]
        case HandType.QUINTUPLE:
            return 40000 + values[0]
        case HandType.ROYAL_FLUSH:
            return 10000
        case HandType.STRAIGHT | HandType.STRAIGHT_FLUSH:
            if Rank.ACE in values and Rank.TWO in values:
                return 5  # Wheel is the lowest straight
            return values[0]
        case HandType.FOUR_OF_A_KIND:
            quad = groups[0][0]
            kicker = next((v for v in values if v != quad), 0)
            return quad * 100 + kicker
        case HandType.FULL_HOUSE:
            trips = groups[0][0]
            pair = groups[1][0] if len(groups) > 1 else 0
            return trips * 100 + pair
        case HandType.TWO_PAIR:
            pair_ranks = sorted((rank for rank, group in groups if len(group) >= 2), reverse=True)
            high, low = pair_ranks[0], pair_ranks[1]
            kicker = next((v for v in values if v not in (high, low)), 0)
            return high * 1000 + low * 10 + kicker
        case HandType.THREE_OF_A_KIND | HandType.PAIR:
            return int(groups[0][0])
        case HandType.FLUSH | HandType.HIGH_CARD:
            return _packed(values)


# =============================================================================
# Wild card resolution
# =============================================================================


def _wild_candidates(
    normal_cards: Sequence[Card], wild_count: int, rules: ScoringRules
) -> list[tuple[Rank, Suit]]:
    """Substitutions to try for each wild.

    A single wild tries all 52 cards. With two or more wilds the list is
    prioritized (cards already present, other suits of present ranks, other
    ranks of present suits, then the rest of the deck) and truncated to
    ``rules.wild_sample_size`` entries.
    """
    full_deck = [(rank, suit) for rank in RANKS_HIGH_TO_LOW for suit in SUIT_ORDER]
    if wild_count == 1:
        return full_deck

    ordered = _sort_desc(normal_cards)
    present_ranks = list(dict.fromkeys(c.rank for c in ordered))
    present_suits = [suit for suit in SUIT_ORDER if any(c.suit == suit for c in ordered)]

    prioritized = [(c.rank, c.suit) for c in ordered]
    prioritized += [(rank, suit) for rank in present_ranks for suit in SUIT_ORDER]
    prioritized += [(rank, suit) for suit in present_suits for rank in RANKS_HIGH_TO_LOW]
    prioritized += full_deck
    return list(dict.fromkeys(prioritized))[: rules.wild_sample_size]


def _best_possible(normal_cards: Sequence[Card], wild_count: int) -> HandKey | None:
    """Upper bound on the hand reachable with ``wild_count`` wilds.

    Used to stop the substitution search once nothing stronger exists. Only
    five-or-more card hands can reach the categories considered here.
    """
    if len(normal_cards) + wild_count < 5:
        return None
    need = 5 - wild_count
    if need <= 0:
        return HandType.PENTAGON, 100000

    spade_aces = sum(1 for c in normal_cards if c.rank == Rank.ACE and c.suit == Suit.SPADES)
    if spade_aces >= need:
        return HandType.PENTAGON, 100000

    exact: dict[tuple[Rank, Suit], int] = {}
    for card in normal_cards:
        exact[(card.rank, card.suit)] = exact.get((card.rank, card.suit), 0) + 1
    exact_ranks = [key[0] for key, count in exact.items() if count >= need]
    if exact_ranks:
        return HandType.ROYAL_QUINTUPLE, 50000 + max(exact_ranks)

    same_ranks = [rank for rank, group in group_by_rank(normal_cards).items() if len(group) >= need]
    if same_ranks:
        return HandType.QUINTUPLE, 40000 + max(same_ranks)

    return HandType.ROYAL_FLUSH, 10000


def _restore_wilds(
    scoring: Sequence[Card], substitutions: Sequence[tuple[Card, Card]]
) -> list[Card]:
    """Swap substitute cards in ``scoring`` back to the wild cards they stand for."""
    restored = []
    for card in scoring:
        for substitute, wild in substitutions:
            if card is substitute:
                card = wild
                break
        restored.append(card)
    return restored


def _resolve_wilds(
    normal_cards: list[Card], wild_cards: list[Card], rules: ScoringRules
) -> tuple[HandType, int, list[Card], tuple[tuple[str, Card], ...]]:
    """Search wild substitutions for the strongest hand.

    Wilds are interchangeable for classification, so each multiset of
    candidates is evaluated once.
    """
    candidates = _wild_candidates(normal_cards, len(wild_cards), rules)
    ceiling = _best_possible(normal_cards, len(wild_cards))

    best_key: HandKey | None = None
    best_scoring: list[Card] = []
    best_substitutions: list[tuple[Card, Card]] = []
    evaluated = 0

    for combo in combinations_with_replacement(candidates, len(wild_cards)):
        substitutions = [
            (replace(wild, rank=rank, suit=suit), wild)
            for wild, (rank, suit) in zip(wild_cards, combo)
        ]
        hand_type, scoring = _classify(normal_cards + [sub for sub, _ in substitutions])
        key = (hand_type, _tie_break(hand_type, scoring))
        evaluated += 1
        if best_key is None or key > best_key:
            best_key, best_scoring, best_substitutions = key, scoring, substitutions
            if ceiling is not None and best_key >= ceiling:
                break

    if best_key is None:
        # No candidates to try: wilds keep their printed rank and suit
        hand_type, scoring = _classify(normal_cards + wild_cards)
        logger.debug(f"Wild search had no candidates, classified {hand_type.label} as printed")
        return hand_type, _tie_break(hand_type, scoring), scoring, ()

    logger.debug(
        f"Wild search: {len(wild_cards)} wild(s), {len(candidates)} candidates, "
        f"{evaluated} hands evaluated, best {best_key[0].label}"
    )
    resolved = tuple((wild.id, substitute) for substitute, wild in best_substitutions)
    return (
        best_key[0],
        best_key[1],
        _restore_wilds(best_scoring, best_substitutions),
        resolved,
    )


# =============================================================================
# Public API
# =============================================================================


def evaluate_hand(cards: Sequence[Card], rules: ScoringRules = DEFAULT_RULES) -> HandResult:
    """Evaluate played cards and return the strongest hand with its scoring cards.

    Args:
        cards: Cards to evaluate (typically 1-5 played cards). Any count is
            accepted; an empty list yields a zero-chip high card.
        rules: Engine limits (wild candidate sample size).

    Returns:
        HandResult with the hand type, tie-break rank, scoring cards and the
        base chips/mult of the hand type.

    Note:
        Wild cards are resolved to the strongest substitution, but the
        scoring cards reference the original wild Card objects so their
        enhancements still apply when scoring.
    """
    if not cards:
        return HandResult(
            hand_type=HandType.HIGH_CARD,
            rank=0,
            scoring_cards=(),
            base_chips=0,
            base_mult=1,
        )

    normal_cards = [c for c in cards if not c.is_wild]
    wild_cards = [c for c in cards if c.is_wild]

    resolved: tuple[tuple[str, Card], ...] = ()
    if wild_cards:
        hand_type, rank, scoring, resolved = _resolve_wilds(normal_cards, wild_cards, rules)
    else:
        hand_type, scoring = _classify(normal_cards)
        rank = _tie_break(hand_type, scoring)

    return HandResult(
        hand_type=hand_type,
        rank=rank,
        scoring_cards=tuple(scoring),
        base_chips=hand_type.base_chips,
        base_mult=hand_type.base_mult,
        resolved_wilds=resolved,
    )


def compare_hands(a: HandResult, b: HandResult) -> int:
    """Compare two hands. Returns positive if a > b, negative if a < b, 0 if equal."""
    type_compare = compare_hand_types(a.hand_type, b.hand_type)
    if type_compare != 0:
        return type_compare
    return a.rank - b.rank


def find_best_hand(
    cards: Sequence[Card], rules: ScoringRules = DEFAULT_RULES
) -> tuple[list[Card], HandResult]:
    """Find the best 5-card play from a larger set of cards.

    Args:
        cards: Cards to choose from

    Returns:
        Tuple of (best cards to play, their evaluation)
    """
    if len(cards) <= 5:
        return list(cards), evaluate_hand(cards, rules)

    best_cards: list[Card] = []
    best_result: HandResult | None = None

    for combo in combinations(cards, 5):
        combo_list = list(combo)
        result = evaluate_hand(combo_list, rules)

        if best_result is None or compare_hands(result, best_result) > 0:
            best_cards = combo_list
            best_result = result

    assert best_result is not None
    return best_cards, best_result
