"""Poker hand evaluation for Poker Rush.

Classifies five cards into a HandCategory, orders them by significance and
computes a within-category strength so any two hands can be compared.
"""

from __future__ import annotations

from collections import Counter
from itertools import combinations

from poker_rush.game.errors import DuplicateCard, InvalidHandSize
from poker_rush.game.models import Card, HandCategory, HandResult
from poker_rush.utils.constants import ACE_HIGH, ACE_LOW, HAND_SIZE, WHEEL_VALUES

STRENGTH_BASE = 15


def _check_cards(cards: list[Card]) -> None:
    if len(cards) != HAND_SIZE:
        raise InvalidHandSize(len(cards))
    seen: set[str] = set()
    for card in cards:
        if card.id in seen:
            raise DuplicateCard(card.id)
        seen.add(card.id)


def is_flush(cards: list[Card]) -> bool:
    return len({c.suit for c in cards}) == 1


def is_wheel(cards: list[Card]) -> bool:
    return sorted(c.value for c in cards) == sorted(WHEEL_VALUES)


def is_straight(cards: list[Card]) -> bool:
    """Five distinct consecutive values, or the wheel A-2-3-4-5."""
    values = sorted({c.value for c in cards})
    if len(values) != HAND_SIZE:
        return False
    if values[-1] - values[0] == HAND_SIZE - 1:
        return True
    return is_wheel(cards)


def _ordered_values(cards: list[Card], wheel: bool) -> list[int]:
    """Values ordered by group size then value, one entry per card."""
    values = [ACE_LOW if wheel and c.value == ACE_HIGH else c.value for c in cards]
    counts = Counter(values)
    return sorted(values, key=lambda v: (counts[v], v), reverse=True)


def _rank_cards(cards: list[Card], wheel: bool) -> tuple[Card, ...]:
    counts = Counter(c.value for c in cards)

    def key(card: Card) -> tuple[int, int, str]:
        value = ACE_LOW if wheel and card.value == ACE_HIGH else card.value
        return (counts[card.value], value, card.suit)

    return tuple(sorted(cards, key=key, reverse=True))


def _classify(cards: list[Card]) -> HandCategory:
    flush = is_flush(cards)
    straight = is_straight(cards)
    if flush and straight:
        if min(c.value for c in cards) == 10:
            return HandCategory.ROYAL_FLUSH
        return HandCategory.STRAIGHT_FLUSH

    shape = sorted(Counter(c.value for c in cards).values(), reverse=True)
    if shape[0] == 4:
        return HandCategory.FOUR_OF_A_KIND
    if shape[:2] == [3, 2]:
        return HandCategory.FULL_HOUSE
    if flush:
        return HandCategory.FLUSH
    if straight:
        return HandCategory.STRAIGHT
    if shape[0] == 3:
        return HandCategory.THREE_OF_A_KIND
    if shape[:2] == [2, 2]:
        return HandCategory.TWO_PAIR
    if shape[0] == 2:
        return HandCategory.ONE_PAIR
    return HandCategory.HIGH_CARD


def hand_strength(cards: list[Card]) -> int:
    """Within-category strength (higher is better).

    Values are ordered by group size then value (so a pair of kings outranks
    a pair of queens whatever the kickers) and read as a base-15 number.
    The wheel counts its Ace as 1.
    """
    _check_cards(cards)
    wheel = is_straight(cards) and is_wheel(cards)
    strength = 0
    for value in _ordered_values(cards, wheel):
        strength = strength * STRENGTH_BASE + value
    return strength


def evaluate_hand(cards: list[Card]) -> HandResult:
    """Evaluate exactly five cards.

    Raises InvalidHandSize or DuplicateCard for malformed input.
    """
    _check_cards(cards)
    category = _classify(cards)
    wheel = category in (HandCategory.STRAIGHT, HandCategory.STRAIGHT_FLUSH) and is_wheel(
        cards
    )
    return HandResult(
        category=category,
        ranked_cards=_rank_cards(cards, wheel),
        total_points=category.points,
        strength=hand_strength(cards),
    )


def compare_hands(a: HandResult, b: HandResult) -> int:
    """Total order: category first, strength breaks ties. Returns -1, 0 or 1."""
    key_a = (a.category, a.strength)
    key_b = (b.category, b.strength)
    if key_a > key_b:
        return 1
    if key_a < key_b:
        return -1
    return 0


def is_better_hand(new: HandResult, previous: HandResult) -> bool:
    return compare_hands(new, previous) > 0


def best_hand(cards: list[Card]) -> HandResult:
    """Best five-card hand among five or more cards."""
    if len(cards) < HAND_SIZE:
        raise InvalidHandSize(len(cards))
    best: HandResult | None = None
    for combo in combinations(cards, HAND_SIZE):
        result = evaluate_hand(list(combo))
        if best is None or compare_hands(result, best) > 0:
            best = result
    assert best is not None
    return best
