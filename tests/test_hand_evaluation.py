"""Tests for poker hand evaluation."""

import pytest

from fortunes_hand.hand_evaluation import (
    compare_hands,
    evaluate_hand,
    find_best_hand,
    group_by_rank,
    group_by_suit,
)
from fortunes_hand.models import (
    HAND_RANKINGS,
    Card,
    HandType,
    Rank,
    Suit,
    compare_hand_types,
)


def cards(card_strings: list[str]) -> list[Card]:
    """Helper to create cards from strings."""
    return [Card.from_string(s) for s in card_strings]


class TestHandEvaluation:
    def test_high_card(self):
        result = evaluate_hand(cards(["AS"]))
        assert result.hand_type == HandType.HIGH_CARD
        assert len(result.scoring_cards) == 1

    def test_pair(self):
        result = evaluate_hand(cards(["AS", "AH"]))
        assert result.hand_type == HandType.PAIR
        assert len(result.scoring_cards) == 2

    def test_pair_keeps_kickers(self):
        result = evaluate_hand(cards(["AH", "AD", "KC", "QS", "JH"]))
        assert result.hand_type == HandType.PAIR
        assert [c.rank for c in result.scoring_cards] == [
            Rank.ACE,
            Rank.ACE,
            Rank.KING,
            Rank.QUEEN,
            Rank.JACK,
        ]

    def test_two_pair(self):
        result = evaluate_hand(cards(["AS", "AH", "KS", "KH", "2C"]))
        assert result.hand_type == HandType.TWO_PAIR
        assert len(result.scoring_cards) == 5

    def test_three_of_a_kind(self):
        result = evaluate_hand(cards(["AS", "AH", "AC"]))
        assert result.hand_type == HandType.THREE_OF_A_KIND
        assert len(result.scoring_cards) == 3

    def test_straight(self):
        result = evaluate_hand(cards(["5S", "6H", "7C", "8D", "9S"]))
        assert result.hand_type == HandType.STRAIGHT
        assert len(result.scoring_cards) == 5

    def test_wheel_straight(self):
        """A-2-3-4-5 straight."""
        result = evaluate_hand(cards(["AS", "2H", "3C", "4D", "5S"]))
        assert result.hand_type == HandType.STRAIGHT
        assert result.rank == 5

    def test_broadway_straight(self):
        result = evaluate_hand(cards(["10S", "JH", "QD", "KC", "AS"]))
        assert result.hand_type == HandType.STRAIGHT
        assert result.rank == 14

    def test_straights_do_not_wrap(self):
        result = evaluate_hand(cards(["QS", "KH", "AD", "2C", "3S"]))
        assert result.hand_type == HandType.HIGH_CARD

    def test_flush(self):
        result = evaluate_hand(cards(["2S", "5S", "7S", "9S", "KS"]))
        assert result.hand_type == HandType.FLUSH
        assert len(result.scoring_cards) == 5

    def test_full_house(self):
        result = evaluate_hand(cards(["AS", "AH", "AC", "KS", "KH"]))
        assert result.hand_type == HandType.FULL_HOUSE
        assert len(result.scoring_cards) == 5

    def test_four_of_a_kind(self):
        result = evaluate_hand(cards(["AS", "AH", "AC", "AD", "2S"]))
        assert result.hand_type == HandType.FOUR_OF_A_KIND
        assert len(result.scoring_cards) == 5

    def test_straight_flush(self):
        result = evaluate_hand(cards(["5S", "6S", "7S", "8S", "9S"]))
        assert result.hand_type == HandType.STRAIGHT_FLUSH
        assert len(result.scoring_cards) == 5

    def test_wheel_straight_flush(self):
        result = evaluate_hand(cards(["AS", "2S", "3S", "4S", "5S"]))
        assert result.hand_type == HandType.STRAIGHT_FLUSH
        assert result.rank == 5

    def test_royal_flush(self):
        result = evaluate_hand(cards(["10S", "JS", "QS", "KS", "AS"]))
        assert result.hand_type == HandType.ROYAL_FLUSH
        assert result.rank == 10000

    def test_quintuple(self):
        """Five of one rank across suits."""
        result = evaluate_hand(cards(["AS", "AH", "AC", "AD", "AS"]))
        assert result.hand_type == HandType.QUINTUPLE
        assert result.rank == 40014

    def test_royal_quintuple(self):
        result = evaluate_hand(cards(["KH"] * 5))
        assert result.hand_type == HandType.ROYAL_QUINTUPLE
        assert result.rank == 50013

    def test_pentagon(self):
        result = evaluate_hand(cards(["AS"] * 5))
        assert result.hand_type == HandType.PENTAGON
        assert result.rank == 100000

    def test_base_values_come_from_hand_type(self):
        result = evaluate_hand(cards(["AS", "AH"]))
        assert result.base_chips == 10
        assert result.base_mult == 2

    def test_empty_hand(self):
        result = evaluate_hand([])
        assert result.hand_type == HandType.HIGH_CARD
        assert result.rank == 0
        assert result.scoring_cards == ()
        assert result.base_chips == 0
        assert result.base_mult == 1

    def test_input_order_does_not_matter(self):
        a = evaluate_hand(cards(["KS", "5H", "KD", "5C", "5S"]))
        b = evaluate_hand(cards(["5S", "5C", "KD", "5H", "KS"]))
        assert a.hand_type == b.hand_type == HandType.FULL_HOUSE
        assert a.rank == b.rank


class TestTieBreaks:
    def test_high_card_packs_ranks(self):
        result = evaluate_hand(cards(["2S", "5H", "7D", "9C", "KS"]))
        assert result.rank == 13 * 10000 + 9 * 1000 + 7 * 100 + 5 * 10 + 2

    def test_pair_rank(self):
        assert evaluate_hand(cards(["9S", "9H", "2C"])).rank == 9

    def test_two_pair_rank(self):
        result = evaluate_hand(cards(["KS", "KH", "5D", "5C", "9S"]))
        assert result.rank == 13 * 1000 + 5 * 10 + 9

    def test_full_house_rank(self):
        result = evaluate_hand(cards(["KS", "KH", "KD", "5C", "5S"]))
        assert result.rank == 1305

    def test_four_of_a_kind_rank(self):
        result = evaluate_hand(cards(["9S", "9H", "9D", "9C", "2S"]))
        assert result.rank == 902

    def test_higher_pair_wins(self):
        kings = evaluate_hand(cards(["KS", "KH"]))
        queens = evaluate_hand(cards(["QS", "QH"]))
        assert compare_hands(kings, queens) > 0
        assert compare_hands(queens, kings) < 0

    def test_wheel_loses_to_six_high_straight(self):
        wheel = evaluate_hand(cards(["AS", "2H", "3C", "4D", "5S"]))
        six_high = evaluate_hand(cards(["2S", "3H", "4C", "5D", "6S"]))
        assert compare_hands(six_high, wheel) > 0


class TestHandRankings:
    def test_four_of_a_kind_beats_straight_flush(self):
        assert compare_hand_types(HandType.FOUR_OF_A_KIND, HandType.STRAIGHT_FLUSH) > 0

    def test_special_hands_above_royal_flush(self):
        assert HandType.ROYAL_FLUSH < HandType.QUINTUPLE < HandType.ROYAL_QUINTUPLE
        assert HandType.ROYAL_QUINTUPLE < HandType.PENTAGON

    @pytest.mark.parametrize("a", list(HandType))
    def test_compare_matches_rankings(self, a):
        for b in HandType:
            assert compare_hand_types(a, b) == HAND_RANKINGS[a] - HAND_RANKINGS[b]

    def test_rankings_are_distinct(self):
        assert len(set(HAND_RANKINGS.values())) == len(HandType) == 13


class TestGrouping:
    def test_group_by_rank(self):
        groups = group_by_rank(cards(["AS", "KH", "AD"]))
        assert [c.short_label for c in groups[Rank.ACE]] == ["AS", "AD"]
        assert len(groups[Rank.KING]) == 1

    def test_group_by_suit(self):
        groups = group_by_suit(cards(["AS", "KH", "2S"]))
        assert len(groups[Suit.SPADES]) == 2
        assert Suit.CLUBS not in groups


class TestFindBestHand:
    def test_finds_flush_in_seven_cards(self):
        hand = cards(["2H", "5H", "7H", "9H", "KH", "AS", "3C"])
        best, result = find_best_hand(hand)
        assert result.hand_type == HandType.FLUSH
        assert len(best) == 5

    def test_small_hands_are_evaluated_directly(self):
        hand = cards(["AS", "AH"])
        best, result = find_best_hand(hand)
        assert best == hand
        assert result.hand_type == HandType.PAIR
