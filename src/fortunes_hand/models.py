"""Core value types shared by the hand classifier, scorer and joker evaluator."""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Self


class Suit(Enum):
    """Card suits."""

    SPADES = "S"
    HEARTS = "H"
    CLUBS = "C"
    DIAMONDS = "D"

    def __str__(self) -> str:
        symbols = {"S": "♠", "H": "♥", "C": "♣", "D": "♦"}
        return symbols[self.value]

    @property
    def full_name(self) -> str:
        """Lowercase plural name used in card ids, e.g. ``hearts``."""
        return self.name.lower()


class Rank(IntEnum):
    """Card ranks with numeric values for comparison (Ace high = 14)."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {11: "J", 12: "Q", 13: "K", 14: "A"}[self.value]

    @property
    def chip_value(self) -> int:
        """Chips a scoring card of this rank is worth."""
        if self.value <= 10:
            return self.value
        if self.value == 14:  # Ace
            return 11
        return 10  # Face cards


# Canonical iteration orders for substitution searches
RANKS_HIGH_TO_LOW: tuple[Rank, ...] = tuple(sorted(Rank, reverse=True))
SUIT_ORDER: tuple[Suit, ...] = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)


class HandType(IntEnum):
    """Hand categories; the integer value is the category's strength.

    Three non-standard categories sit above a royal flush:
    - QUINTUPLE: five cards of one rank
    - ROYAL_QUINTUPLE: five cards of one rank and one suit
    - PENTAGON: five Aces of spades

    Four of a kind outranks a straight flush in this game.
    """

    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    STRAIGHT_FLUSH = 7
    FOUR_OF_A_KIND = 8
    ROYAL_FLUSH = 9
    QUINTUPLE = 10
    ROYAL_QUINTUPLE = 11
    PENTAGON = 12

    @property
    def label(self) -> str:
        """Lowercase id shown in the UI, e.g. ``two_pair``."""
        return self.name.lower()

    @property
    def base_chips(self) -> int:
        """Flat chips awarded for playing this hand."""
        return HAND_BASE_VALUES[self][0]

    @property
    def base_mult(self) -> int:
        """Base multiplier for this hand."""
        return HAND_BASE_VALUES[self][1]


HAND_RANKINGS: dict[HandType, int] = {hand_type: int(hand_type) for hand_type in HandType}

# (chips, mult) per hand
HAND_BASE_VALUES: dict[HandType, tuple[int, int]] = {
    HandType.HIGH_CARD: (5, 1),
    HandType.PAIR: (10, 2),
    HandType.TWO_PAIR: (20, 2),
    HandType.THREE_OF_A_KIND: (30, 3),
    HandType.STRAIGHT: (30, 4),
    HandType.FLUSH: (35, 4),
    HandType.FULL_HOUSE: (40, 4),
    HandType.STRAIGHT_FLUSH: (60, 7),
    HandType.FOUR_OF_A_KIND: (100, 8),
    HandType.ROYAL_FLUSH: (100, 8),
    HandType.QUINTUPLE: (120, 12),
    HandType.ROYAL_QUINTUPLE: (160, 16),
    HandType.PENTAGON: (250, 25),
}


def compare_hand_types(a: HandType, b: HandType) -> int:
    """Positive if ``a`` is the stronger category, negative if weaker, 0 if equal."""
    return HAND_RANKINGS[a] - HAND_RANKINGS[b]


class EnhancementType(Enum):
    """Kinds of per-card enhancement."""

    CHIPS = "chips"  # +value chips when scored
    MULT = "mult"  # +value mult when scored
    GOLD = "gold"  # +value gold, paid out in the reward phase
    RETRIGGER = "retrigger"  # card counts 1 + value times


@dataclass(frozen=True, slots=True)
class Enhancement:
    """A single enhancement attached to a card."""

    type: EnhancementType
    value: int


@dataclass(frozen=True, slots=True)
class Card:
    """A playing card.

    ``is_wild`` makes the classifier pick the strongest rank and suit for the
    card. ``is_gold``, ``is_glass``, ``trigger_slot`` and ``trigger_roulette``
    are special-card flags; only ``is_gold`` affects scoring (no chips).
    """

    rank: Rank
    suit: Suit
    id: str = ""
    enhancement: Enhancement | None = None
    is_wild: bool = False
    is_gold: bool = False
    is_glass: bool = False
    trigger_slot: bool = False
    trigger_roulette: bool = False

    def __str__(self) -> str:
        base = f"{self.rank}{self.suit}"
        modifiers = []
        if self.is_wild:
            modifiers.append("wild")
        if self.is_gold:
            modifiers.append("gold")
        if self.is_glass:
            modifiers.append("glass")
        if self.enhancement is not None:
            modifiers.append(f"{self.enhancement.type.value}+{self.enhancement.value}")
        if modifiers:
            return f"{base}[{','.join(modifiers)}]"
        return base

    def __repr__(self) -> str:
        return f"Card({self.rank!s}{self.suit!s}, id={self.id!r})"

    @property
    def short_label(self) -> str:
        """Rank plus suit letter, e.g. ``10H``."""
        return f"{self.rank}{self.suit.value}"

    @property
    def is_special(self) -> bool:
        return (
            self.is_wild
            or self.is_gold
            or self.is_glass
            or self.trigger_slot
            or self.trigger_roulette
        )

    def enhancement_value(self, enhancement_type: EnhancementType) -> int:
        """Value of the card's enhancement if it is of the given type, else 0."""
        if self.enhancement is not None and self.enhancement.type == enhancement_type:
            return self.enhancement.value
        return 0

    def with_enhancement(self, enhancement: Enhancement) -> "Card":
        """Return a copy carrying ``enhancement`` (replacing any existing one)."""
        return replace(self, enhancement=enhancement)

    def without_enhancement(self) -> "Card":
        """Return a copy with no enhancement."""
        return replace(self, enhancement=None)

    @classmethod
    def from_string(cls, s: str, card_id: str | None = None) -> Self:
        """Parse card from string like 'AS' (Ace of Spades) or '10H' (Ten of Hearts).

        The id defaults to the normalized string itself.
        """
        s = s.upper().strip()
        suit_char = s[-1:]
        rank_str = s[:-1]

        if suit_char not in SUIT_BY_CODE:
            raise ValueError(f"Invalid suit: {suit_char}")
        if rank_str not in RANK_BY_LABEL:
            raise ValueError(f"Invalid rank: {rank_str}")

        return cls(
            rank=RANK_BY_LABEL[rank_str],
            suit=SUIT_BY_CODE[suit_char],
            id=card_id if card_id is not None else s,
        )


SUIT_BY_CODE: dict[str, Suit] = {suit.value: suit for suit in Suit}
RANK_BY_LABEL: dict[str, Rank] = {str(rank): rank for rank in Rank}


class BonusType(Enum):
    """How an applied bonus combines into the score."""

    CHIPS = "chips"
    MULT = "mult"
    XMULT = "xmult"


@dataclass(frozen=True, slots=True)
class AppliedBonus:
    """One scoring contribution, kept in order for the score breakdown UI."""

    source: str
    type: BonusType
    value: float


class GamePhase(Enum):
    """Turn phases driven by the game loop."""

    IDLE = "IDLE"
    SLOT_PHASE = "SLOT_PHASE"
    DRAW_PHASE = "DRAW_PHASE"
    PLAY_PHASE = "PLAY_PHASE"
    SCORE_PHASE = "SCORE_PHASE"
    ROULETTE_PHASE = "ROULETTE_PHASE"
    REWARD_PHASE = "REWARD_PHASE"
    SHOP_PHASE = "SHOP_PHASE"
    GAME_OVER = "GAME_OVER"


class SlotSymbol(Enum):
    """Symbols that can land on a slot reel."""

    CARD = "card"
    TARGET = "target"
    GOLD = "gold"
    CHIP = "chip"
    STAR = "star"
    SKULL = "skull"
    WILD = "wild"


@dataclass(frozen=True, slots=True)
class SlotResult:
    """Outcome of one slot spin: three reels."""

    symbols: tuple[SlotSymbol, SlotSymbol, SlotSymbol]
    is_jackpot: bool = False


class CardIdGenerator:
    """Issues unique card ids of the form ``<rank>_<suit>_<n>``.

    Each game (or test) owns its own generator. ``reset()`` restarts the
    counter so id sequences are reproducible.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = start

    def next_id(self, rank: Rank, suit: Suit) -> str:
        self._counter += 1
        return f"{rank}_{suit.full_name}_{self._counter}"

    def reset(self) -> None:
        """Restart numbering from 1."""
        self._counter = 0

    @property
    def issued(self) -> int:
        """How many ids have been handed out since the last reset."""
        return self._counter


def create_card(rank: Rank, suit: Suit, ids: CardIdGenerator, **flags: bool) -> Card:
    """Create a card with a fresh id from ``ids``; ``flags`` sets special-card flags."""
    return Card(rank=rank, suit=suit, id=ids.next_id(rank, suit), **flags)


def create_standard_deck(ids: CardIdGenerator) -> list[Card]:
    """Create a standard 52-card deck."""
    return [create_card(rank, suit, ids) for suit in Suit for rank in Rank]
