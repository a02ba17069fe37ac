"""Power-up catalog, hand synthesis and loot selection."""

from __future__ import annotations

import random
from collections import defaultdict
from enum import Enum
from itertools import combinations, product

from poker_rush.game.evaluator import evaluate_hand
from poker_rush.game.models import Card, GameState, HandCategory, PowerUp
from poker_rush.utils.constants import (
    ACE_HIGH,
    HAND_SIZE,
    POWER_UP_ADD_TIME,
    POWER_UP_RESHUFFLE,
    REWARD_TIERS,
    STATUS_BONUS_ROUND,
    STATUS_PLAYING,
    SUITS,
)

POWER_UPS: tuple[PowerUp, ...] = (
    PowerUp("two_pair", "Two Pair", tier=1, unlocked_at_level=3,
            hand_type=HandCategory.TWO_PAIR, weight=6),
    PowerUp("three_kind", "Three of a Kind", tier=1, unlocked_at_level=7,
            hand_type=HandCategory.THREE_OF_A_KIND, weight=5),
    PowerUp(POWER_UP_RESHUFFLE, "Reshuffle", tier=1, unlocked_at_level=None, weight=4),
    PowerUp("straight", "Straight", tier=2, unlocked_at_level=10,
            hand_type=HandCategory.STRAIGHT, weight=4),
    PowerUp(POWER_UP_ADD_TIME, "Add Time", tier=1, unlocked_at_level=11,
            is_reusable=True, weight=5),
    PowerUp("flush", "Flush", tier=2, unlocked_at_level=15,
            hand_type=HandCategory.FLUSH, weight=3),
    PowerUp("full_house", "Full House", tier=2, unlocked_at_level=20,
            hand_type=HandCategory.FULL_HOUSE, weight=3),
    PowerUp("four_kind", "Four of a Kind", tier=3, unlocked_at_level=25,
            hand_type=HandCategory.FOUR_OF_A_KIND, weight=3),
    PowerUp("straight_flush", "Straight Flush", tier=3, unlocked_at_level=30,
            hand_type=HandCategory.STRAIGHT_FLUSH, weight=2),
    PowerUp("royal_flush", "Royal Flush", tier=3, unlocked_at_level=35,
            hand_type=HandCategory.ROYAL_FLUSH, weight=1),
)

_BY_ID = {p.id: p for p in POWER_UPS}


class PowerUpStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"  # unlocked, session not in play
    ACTIVE = "active"
    USED = "used"


def get_power_up(power_up_id: str) -> PowerUp | None:
    return _BY_ID.get(power_up_id)


def unlocked_power_ups_for_level(level: int) -> list[str]:
    """Catalog ids whose unlock level has been reached, in catalog order."""
    return [
        p.id
        for p in POWER_UPS
        if p.unlocked_at_level is not None and p.unlocked_at_level <= level
    ]


def power_ups_for_tier(tier: str) -> list[PowerUp]:
    tier_number = REWARD_TIERS[tier]
    return [p for p in POWER_UPS if p.tier == tier_number]


def select_reward_power_up(tier: str, rng: random.Random) -> str | None:
    """Weighted draw from a reward tier's pool. Rarer hands weigh less."""
    pool = power_ups_for_tier(tier)
    if not pool:
        return None
    chosen = rng.choices(pool, weights=[p.weight for p in pool], k=1)[0]
    return chosen.id


def power_up_status(game: GameState, power_up_id: str) -> PowerUpStatus:
    if power_up_id not in game.unlocked_power_ups:
        return PowerUpStatus.LOCKED
    if power_up_id not in game.active_power_ups:
        return PowerUpStatus.USED
    if game.status not in (STATUS_PLAYING, STATUS_BONUS_ROUND):
        return PowerUpStatus.AVAILABLE
    return PowerUpStatus.ACTIVE


# --- Hand synthesis ---


def _by_value(deck: list[Card]) -> dict[int, list[Card]]:
    """Cards grouped by value, deck order kept inside a group."""
    groups: dict[int, list[Card]] = defaultdict(list)
    for card in deck:
        groups[card.value].append(card)
    return groups


def _lowest_groups(groups: dict[int, list[Card]], size: int) -> list[int]:
    return sorted(v for v, cards in groups.items() if len(cards) >= size)


def _straight_value_runs() -> list[list[int]]:
    """Every straight as a list of values, lowest (the wheel) first."""
    runs = [[ACE_HIGH, 2, 3, 4, 5]]
    for start in range(2, 11):
        runs.append(list(range(start, start + HAND_SIZE)))
    return runs


def _is_exactly(cards: list[Card], hand_type: HandCategory) -> bool:
    return evaluate_hand(cards).category == hand_type


def _find_sets(groups: dict[int, list[Card]], sizes: list[int]) -> list[Card] | None:
    """Pick disjoint same-value groups of the given sizes, lowest values first."""
    picked: list[Card] = []
    used: set[int] = set()
    for size in sizes:
        value = next(
            (v for v in _lowest_groups(groups, size) if v not in used), None
        )
        if value is None:
            return None
        used.add(value)
        picked.extend(groups[value][:size])
    return picked


def _find_straight(deck: list[Card], suited: bool) -> list[Card] | None:
    groups = _by_value(deck)
    for run in _straight_value_runs():
        if not all(v in groups for v in run):
            continue
        for combo in product(*(groups[v] for v in run)):
            cards = list(combo)
            category = evaluate_hand(cards).category
            if not suited and category == HandCategory.STRAIGHT:
                return cards
            if suited and category == HandCategory.STRAIGHT_FLUSH:
                return cards
    return None


def _find_flush(deck: list[Card]) -> list[Card] | None:
    for suit in SUITS:
        suited = sorted((c for c in deck if c.suit == suit), key=lambda c: c.value)
        for combo in combinations(suited, HAND_SIZE):
            if _is_exactly(list(combo), HandCategory.FLUSH):
                return list(combo)
    return None


def _find_royal(deck: list[Card]) -> list[Card] | None:
    for suit in SUITS:
        suited = {c.value: c for c in deck if c.suit == suit}
        if all(v in suited for v in range(10, ACE_HIGH + 1)):
            return [suited[v] for v in range(10, ACE_HIGH + 1)]
    return None


def generate_specific_hand(
    hand_type: HandCategory, deck: list[Card]
) -> list[Card] | None:
    """Pick the cards for a hand-granting power-up from the current deck.

    Deterministic for a given deck: the lowest qualifying ranks win and deck
    order decides between cards of one rank. Pair-based grants return only
    the matched cards (Two Pair and Four of a Kind give 4, Three of a Kind
    gives 3); the others return a full hand. Returns None when the deck
    cannot produce the pattern.
    """
    groups = _by_value(deck)
    if hand_type == HandCategory.ONE_PAIR:
        return _find_sets(groups, [2])
    if hand_type == HandCategory.TWO_PAIR:
        return _find_sets(groups, [2, 2])
    if hand_type == HandCategory.THREE_OF_A_KIND:
        return _find_sets(groups, [3])
    if hand_type == HandCategory.FOUR_OF_A_KIND:
        return _find_sets(groups, [4])
    if hand_type == HandCategory.FULL_HOUSE:
        return _find_sets(groups, [3, 2])
    if hand_type == HandCategory.STRAIGHT:
        return _find_straight(deck, suited=False)
    if hand_type == HandCategory.FLUSH:
        return _find_flush(deck)
    if hand_type == HandCategory.STRAIGHT_FLUSH:
        for suit in SUITS:
            found = _find_straight([c for c in deck if c.suit == suit], suited=True)
            if found:
                return found
        return None
    if hand_type == HandCategory.ROYAL_FLUSH:
        return _find_royal(deck)
    return None
