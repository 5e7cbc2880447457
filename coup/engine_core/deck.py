"""
Deck & Dealing - The fixed court deck.

The deck is an immutable tuple; the top card is the last element.
All operations return new tuples. Randomness comes from an injected
random.Random so games can be replayed from a seed.
"""

from __future__ import annotations
import random

from .errors import EmptyDeck
from .rules import ALL_CARDS, CardType


def build_deck(copies_per_card: int = 5) -> tuple[CardType, ...]:
    """Full, unshuffled supply: each character repeated copies_per_card times."""
    return tuple(card for card in ALL_CARDS for _ in range(copies_per_card))


def shuffle(cards: tuple[CardType, ...], rng: random.Random) -> tuple[CardType, ...]:
    """Uniform random permutation (Fisher-Yates)."""
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


def draw(deck: tuple[CardType, ...]) -> tuple[CardType, tuple[CardType, ...]]:
    """
    Return (top card, remaining deck).

    Raises EmptyDeck when there is nothing to draw.
    """
    if not deck:
        raise EmptyDeck("The court deck is empty")
    return deck[-1], deck[:-1]


def return_and_reshuffle(
    deck: tuple[CardType, ...],
    card: CardType,
    rng: random.Random,
) -> tuple[CardType, ...]:
    """Put a card back and reshuffle the whole deck."""
    return shuffle(deck + (card,), rng)


def deal(
    num_players: int,
    rng: random.Random,
    copies_per_card: int = 5,
    cards_per_player: int = 2,
) -> tuple[list[tuple[CardType, ...]], tuple[CardType, ...]]:
    """
    Shuffle a fresh deck and deal hands.

    Returns (hands in seat order, remaining deck).
    """
    deck = shuffle(build_deck(copies_per_card), rng)
    if num_players * cards_per_player > len(deck):
        raise EmptyDeck(
            f"Cannot deal {cards_per_player} cards to {num_players} players "
            f"from a deck of {len(deck)}"
        )

    hands: list[tuple[CardType, ...]] = []
    for _ in range(num_players):
        hand = []
        for _ in range(cards_per_player):
            card, deck = draw(deck)
            hand.append(card)
        hands.append(tuple(hand))
    return hands, deck
