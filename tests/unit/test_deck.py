"""Tests for deck operations."""

from collections import Counter

from poker_rush.game.deck import (
    bonus_pool_size,
    create_bonus_friendly_deck,
    create_deck,
    new_shuffled_deck,
    remove_cards,
    shuffle_deck,
)
from poker_rush.game.models import Card
from poker_rush.utils.constants import DECK_SIZE, RANKS, SUITS
from poker_rush.utils.crypto import create_rng


def c(code: str) -> Card:
    return Card.from_compact(code)


class TestCreateDeck:
    def test_total_cards(self):
        assert len(create_deck()) == DECK_SIZE  # 52

    def test_no_duplicates(self):
        deck = create_deck()
        assert len({(card.suit, card.rank) for card in deck}) == 52
        assert len({card.id for card in deck}) == 52

    def test_thirteen_per_suit(self):
        deck = create_deck()
        for suit in SUITS:
            ranks = [card.rank for card in deck if card.suit == suit]
            assert ranks == RANKS

    def test_deterministic_order(self):
        assert create_deck() == create_deck()


class TestShuffle:
    def test_preserves_cards(self):
        deck = create_deck()
        shuffled = shuffle_deck(deck, create_rng(42))
        assert Counter(deck) == Counter(shuffled)

    def test_does_not_mutate_input(self):
        deck = create_deck()
        before = list(deck)
        shuffle_deck(deck, create_rng(42))
        assert deck == before

    def test_deterministic_with_seed(self):
        deck = create_deck()
        assert shuffle_deck(deck, create_rng(7)) == shuffle_deck(deck, create_rng(7))

    def test_different_seeds_differ(self):
        deck = create_deck()
        assert shuffle_deck(deck, create_rng(1)) != shuffle_deck(deck, create_rng(2))

    def test_default_rng_changes_order(self):
        deck = create_deck()
        orders = {tuple(c.id for c in shuffle_deck(deck)) for _ in range(5)}
        assert len(orders) > 1

    def test_new_shuffled_deck_is_complete(self):
        deck = new_shuffled_deck(create_rng(3))
        assert sorted(c.id for c in deck) == sorted(c.id for c in create_deck())


class TestRemoveCards:
    def test_removes_by_id(self):
        deck = create_deck()
        remaining = remove_cards(deck, [c("Ah"), c("10s")])
        assert len(remaining) == 50
        assert c("Ah") not in remaining
        assert c("10s") not in remaining

    def test_missing_cards_ignored(self):
        deck = [c("2h"), c("3h")]
        assert remove_cards(deck, [c("Ks")]) == deck


class TestBonusPool:
    def test_pool_size_scales_with_ordinal(self):
        assert bonus_pool_size(1) == 10
        assert bonus_pool_size(3) == 30
        assert bonus_pool_size(5) == 50

    def test_pool_size_capped_at_deck(self):
        assert bonus_pool_size(6) == 52
        assert bonus_pool_size(20) == 52

    def test_friendly_deck_is_complete(self):
        deck = create_bonus_friendly_deck(1, create_rng(42))
        assert len(deck) == 52
        assert len({card.id for card in deck}) == 52

    def test_friendly_deck_plants_pairs_in_visible_pool(self):
        for seed in range(10):
            deck = create_bonus_friendly_deck(1, create_rng(seed))
            visible = deck[: bonus_pool_size(1)]
            counts = Counter(card.value for card in visible)
            pairs = sum(1 for n in counts.values() if n >= 2)
            assert pairs >= 3

    def test_later_rounds_plain_shuffle(self):
        deck = create_bonus_friendly_deck(4, create_rng(42))
        assert sorted(c.id for c in deck) == sorted(c.id for c in create_deck())
