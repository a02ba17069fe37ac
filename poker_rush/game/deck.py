"""Deck operations for Poker Rush: creation, shuffle, removal, bonus pools."""

from __future__ import annotations

import random
from collections import defaultdict

from poker_rush.game.models import Card
from poker_rush.utils.constants import BONUS_CARDS_PER_ROUND, DECK_SIZE, RANKS, SUITS
from poker_rush.utils.crypto import create_rng

# Bonus rounds up to this ordinal get a pool with guaranteed pairs
FRIENDLY_BONUS_ROUNDS = 3
FRIENDLY_PAIRS = 3


def create_deck() -> list[Card]:
    """Create a full 52-card deck in suit-major, rank-minor order."""
    return [Card(suit=suit, rank=rank) for suit in SUITS for rank in RANKS]


def shuffle_deck(cards: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Fisher-Yates shuffle. Returns a new list.

    Without an explicit rng the shuffle draws from SystemRandom.
    """
    rng = rng or create_rng()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def new_shuffled_deck(rng: random.Random | None = None) -> list[Card]:
    return shuffle_deck(create_deck(), rng)


def remove_cards(deck: list[Card], cards: list[Card]) -> list[Card]:
    """Return the deck without the given cards (matched by id)."""
    ids = {c.id for c in cards}
    return [c for c in deck if c.id not in ids]


def bonus_pool_size(bonus_round_number: int) -> int:
    """Cards face-down in a bonus round: 10 per round, capped at the deck."""
    return min(max(bonus_round_number, 1) * BONUS_CARDS_PER_ROUND, DECK_SIZE)


def create_bonus_friendly_deck(
    bonus_round_number: int, rng: random.Random | None = None
) -> list[Card]:
    """Deck for a bonus round.

    For the first rounds, three pairs are planted inside the visible pool
    (slots 0, 2, 4, 6, 8 and the last visible slot) so a decent hand is
    always reachable. Later rounds get a plain shuffle.
    """
    rng = rng or create_rng()
    shuffled = shuffle_deck(create_deck(), rng)
    if bonus_round_number > FRIENDLY_BONUS_ROUNDS:
        return shuffled

    by_value: dict[int, list[Card]] = defaultdict(list)
    for card in shuffled:
        by_value[card.value].append(card)

    pair_cards: list[Card] = []
    others: list[Card] = []
    pairs_found = 0
    for cards in by_value.values():
        if pairs_found < FRIENDLY_PAIRS:
            pair_cards.extend(cards[:2])
            others.extend(cards[2:])
            pairs_found += 1
        else:
            others.extend(cards)
    others = shuffle_deck(others, rng)

    visible = bonus_pool_size(bonus_round_number)
    slots = [0, 2, 4, 6, 8, visible - 1][: len(pair_cards)]

    result: list[Card] = []
    pair_iter = iter(pair_cards)
    other_iter = iter(others)
    pending_pairs = len(pair_cards)
    for i in range(DECK_SIZE):
        if i in slots and pending_pairs:
            result.append(next(pair_iter))
            pending_pairs -= 1
        else:
            card = next(other_iter, None)
            if card is None:
                card = next(pair_iter)
                pending_pairs -= 1
            result.append(card)
    return result
