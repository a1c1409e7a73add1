"""Tests for core card types and configuration."""

import pytest
from pydantic import ValidationError

from fortunes_hand.config import DEFAULT_RULES, MAX_RETRIGGER_COUNT, ScoringRules
from fortunes_hand.models import (
    Card,
    CardIdGenerator,
    HandType,
    Rank,
    Suit,
    create_card,
    create_standard_deck,
)


class TestCardParsing:
    def test_parse_ace_of_spades(self):
        card = Card.from_string("AS")
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES
        assert card.id == "AS"

    def test_parse_ten(self):
        card = Card.from_string("10h")
        assert card.rank == Rank.TEN
        assert card.suit == Suit.HEARTS
        assert card.short_label == "10H"

    def test_explicit_id(self):
        assert Card.from_string("KD", "king-1").id == "king-1"

    @pytest.mark.parametrize("text", ["AX", "1H", "", "H"])
    def test_invalid_strings(self, text):
        with pytest.raises(ValueError):
            Card.from_string(text)

    def test_str_shows_flags(self):
        card = Card(rank=Rank.ACE, suit=Suit.HEARTS, id="a", is_wild=True)
        assert str(card) == "A♥[wild]"
        assert card.is_special

    def test_plain_card_is_not_special(self):
        assert not Card.from_string("2C").is_special

    def test_rank_chip_values(self):
        assert Rank.ACE.chip_value == 11
        assert Rank.KING.chip_value == 10
        assert Rank.SEVEN.chip_value == 7


class TestHandType:
    def test_labels(self):
        assert HandType.TWO_PAIR.label == "two_pair"
        assert HandType.ROYAL_QUINTUPLE.label == "royal_quintuple"

    @pytest.mark.parametrize(
        "hand_type, chips, mult",
        [
            (HandType.HIGH_CARD, 5, 1),
            (HandType.PAIR, 10, 2),
            (HandType.FLUSH, 35, 4),
            (HandType.STRAIGHT_FLUSH, 60, 7),
            (HandType.FOUR_OF_A_KIND, 100, 8),
            (HandType.PENTAGON, 250, 25),
        ],
    )
    def test_base_values(self, hand_type, chips, mult):
        assert hand_type.base_chips == chips
        assert hand_type.base_mult == mult


class TestCardIds:
    def test_ids_are_sequential(self):
        ids = CardIdGenerator()
        first = create_card(Rank.ACE, Suit.HEARTS, ids)
        second = create_card(Rank.TEN, Suit.CLUBS, ids)
        assert first.id == "A_hearts_1"
        assert second.id == "10_clubs_2"
        assert ids.issued == 2

    def test_reset_restarts_numbering(self):
        ids = CardIdGenerator()
        create_card(Rank.ACE, Suit.HEARTS, ids)
        ids.reset()
        assert create_card(Rank.ACE, Suit.HEARTS, ids).id == "A_hearts_1"

    def test_generators_are_independent(self):
        a, b = CardIdGenerator(), CardIdGenerator()
        a.next_id(Rank.TWO, Suit.SPADES)
        assert b.next_id(Rank.TWO, Suit.SPADES) == "2_spades_1"

    def test_flags_passed_through(self):
        card = create_card(Rank.KING, Suit.DIAMONDS, CardIdGenerator(), is_gold=True)
        assert card.is_gold

    def test_standard_deck(self):
        deck = create_standard_deck(CardIdGenerator())
        assert len(deck) == 52
        assert len({c.id for c in deck}) == 52
        assert len({(c.rank, c.suit) for c in deck}) == 52


class TestScoringRules:
    def test_defaults(self):
        assert DEFAULT_RULES.max_retrigger_count == MAX_RETRIGGER_COUNT == 10
        assert DEFAULT_RULES.wild_sample_size == 20

    def test_from_mapping(self):
        rules = ScoringRules.from_mapping({"max_retrigger_count": 3})
        assert rules.max_retrigger_count == 3
        assert rules.wild_sample_size == 20
        assert ScoringRules.from_mapping(None) == DEFAULT_RULES

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            ScoringRules(max_retrigger_count=-1)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            ScoringRules.from_mapping({"max_retriggers": 3})

    def test_rules_are_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_RULES.max_retrigger_count = 5

    def test_clamp(self):
        assert DEFAULT_RULES.clamp_retriggers(100) == 10
        assert DEFAULT_RULES.clamp_retriggers(-5) == 0
        assert DEFAULT_RULES.clamp_retriggers(4) == 4
