"""Tests for wild card resolution in hand evaluation."""

from fortunes_hand.config import ScoringRules
from fortunes_hand.hand_evaluation import evaluate_hand
from fortunes_hand.models import Card, HandType, Rank, Suit
from fortunes_hand.scoring import calculate_card_chips


def cards(card_strings: list[str]) -> list[Card]:
    """Helper to create cards from strings."""
    return [Card.from_string(s) for s in card_strings]


def wild(card_id: str = "wild", rank: Rank = Rank.TWO, suit: Suit = Suit.CLUBS) -> Card:
    return Card(rank=rank, suit=suit, id=card_id, is_wild=True)


class TestSingleWild:
    def test_completes_quintuple(self):
        w = wild("w1")
        result = evaluate_hand(cards(["AS", "AH", "AD", "AC"]) + [w])
        assert result.hand_type == HandType.QUINTUPLE
        assert result.rank == 40014

    def test_scoring_cards_keep_original_wild(self):
        w = wild("w1")
        result = evaluate_hand(cards(["AS", "AH", "AD", "AC"]) + [w])
        assert any(c is w for c in result.scoring_cards)
        assert all(c.id != "" for c in result.scoring_cards)

    def test_resolved_substitute_is_reported(self):
        w = wild("w1")
        result = evaluate_hand(cards(["AS", "AH", "AD", "AC"]) + [w])
        assert [wild_id for wild_id, _ in result.resolved_wilds] == ["w1"]
        substitute = result.resolved_as(w)
        assert substitute.rank == Rank.ACE
        assert substitute.id == "w1"

    def test_non_wild_resolves_to_itself(self):
        played = cards(["AS", "AH"])
        result = evaluate_hand(played)
        assert result.resolved_as(played[0]) is played[0]
        assert result.resolved_wilds == ()

    def test_short_hand_makes_three_of_a_kind(self):
        result = evaluate_hand(cards(["7S", "7H"]) + [wild()])
        assert result.hand_type == HandType.THREE_OF_A_KIND
        assert result.rank == 7

    def test_wild_fills_royal_flush(self):
        result = evaluate_hand(cards(["10H", "JH", "QH", "KH"]) + [wild()])
        assert result.hand_type == HandType.ROYAL_FLUSH

    def test_wild_chips_use_printed_rank(self):
        w = wild("w1", rank=Rank.TWO)
        result = evaluate_hand(cards(["AS", "AH", "AD", "AC"]) + [w])
        assert calculate_card_chips(result.scoring_cards) == 11 * 4 + 2


class TestMultipleWilds:
    def test_two_wilds_find_royal_flush(self):
        result = evaluate_hand(cards(["KH", "QH", "JH"]) + [wild("w1"), wild("w2")])
        assert result.hand_type == HandType.ROYAL_FLUSH
        assert {wild_id for wild_id, _ in result.resolved_wilds} == {"w1", "w2"}

    def test_all_wilds_make_pentagon(self):
        result = evaluate_hand([wild(f"w{i}") for i in range(5)])
        assert result.hand_type == HandType.PENTAGON
        assert result.rank == 100000
        assert len(result.scoring_cards) == 5

    def test_four_wilds_copy_the_real_card(self):
        result = evaluate_hand(cards(["KH"]) + [wild(f"w{i}") for i in range(4)])
        assert result.hand_type == HandType.ROYAL_QUINTUPLE
        assert result.rank == 50013

    def test_four_wilds_with_ace_of_spades_make_pentagon(self):
        result = evaluate_hand(cards(["AS"]) + [wild(f"w{i}") for i in range(4)])
        assert result.hand_type == HandType.PENTAGON

    def test_every_wild_appears_once_in_scoring_cards(self):
        wilds = [wild("w1"), wild("w2")]
        result = evaluate_hand(cards(["9S", "9H", "9D"]) + wilds)
        for w in wilds:
            assert sum(1 for c in result.scoring_cards if c is w) == 1

    def test_zero_sample_falls_back_to_printed_cards(self):
        rules = ScoringRules(wild_sample_size=0)
        played = cards(["AS"]) + [
            wild("w1", Rank.TWO, Suit.CLUBS),
            wild("w2", Rank.TWO, Suit.DIAMONDS),
        ]
        result = evaluate_hand(played, rules)
        assert result.hand_type == HandType.PAIR
        assert result.rank == 2
        assert result.resolved_wilds == ()


class TestMonotonicity:
    def test_wild_never_weakens_hand(self):
        hands = [
            ["2S", "7H", "9D", "JC"],
            ["5S", "5H", "9D", "9C"],
            ["2H", "4H", "6H", "8H"],
            ["AS", "KD"],
            ["3C"],
        ]
        for hand in hands:
            base = evaluate_hand(cards(hand))
            with_wild = evaluate_hand(cards(hand) + [wild()])
            assert (with_wild.hand_type, with_wild.rank) >= (base.hand_type, base.rank)

    def test_two_wilds_never_weaker_than_normals_alone(self):
        normals = ["2S", "7H", "9D"]
        base = evaluate_hand(cards(normals))
        result = evaluate_hand(cards(normals) + [wild("w1"), wild("w2")])
        assert result.hand_type > base.hand_type
