"""Deck bookkeeping checks for a Poker Rush session."""

from __future__ import annotations

from collections import Counter

from poker_rush.game.models import Card, GameState
from poker_rush.game.modes import get_mode_config
from poker_rush.utils.constants import DECK_SIZE, HAND_SIZE


def _duplicates(cards: list[Card]) -> list[str]:
    counts = Counter(c.id for c in cards)
    return sorted(card_id for card_id, n in counts.items() if n > 1)


def validate_session_integrity(game: GameState) -> list[str]:
    """Validate card bookkeeping invariants. Returns list of errors (empty = OK).

    Checks:
    1. At most 5 selected cards
    2. No card id twice in the deck or twice in the selection
    3. Selection and deck are disjoint
    4. Every selected card is recorded in used_cards
    5. Classic modes: deck + used cards account for all 52 cards exactly once
    """
    errors: list[str] = []
    if not game.is_playing or game.mode is None:
        return errors

    if len(game.selected_cards) > HAND_SIZE:
        errors.append(f"{len(game.selected_cards)} cards selected, max {HAND_SIZE}")

    for card_id in _duplicates(game.deck):
        errors.append(f"Duplicate card in deck: {card_id}")
    for card_id in _duplicates(game.selected_cards):
        errors.append(f"Duplicate card in selection: {card_id}")

    deck_ids = {c.id for c in game.deck}
    used_ids = {c.id for c in game.used_cards}
    for card in game.selected_cards:
        if card.id in deck_ids:
            errors.append(f"Selected card still in deck: {card.id}")
        if card.id not in used_ids:
            errors.append(f"Selected card missing from used cards: {card.id}")

    config = get_mode_config(game.mode)
    if not config.recycles_cards and not game.is_bonus_level:
        overlap = deck_ids & used_ids
        if overlap:
            errors.append(f"Used cards back in deck: {sorted(overlap)}")
        total = len(deck_ids | used_ids)
        if total != DECK_SIZE:
            errors.append(f"Deck and used cards hold {total} cards, expected {DECK_SIZE}")

    return errors


def heal_session(game: GameState) -> GameState:
    """Repair deck bookkeeping in place: deduplicate, keep deck and selection
    disjoint, trim the selection to 5 and record selected cards as used."""
    seen: set[str] = set()
    selected: list[Card] = []
    overflow: list[Card] = []
    for card in game.selected_cards:
        if card.id in seen:
            continue
        seen.add(card.id)
        if len(selected) < HAND_SIZE:
            selected.append(card)
        else:
            overflow.append(card)

    selected_ids = {c.id for c in selected}
    deck: list[Card] = []
    deck_seen: set[str] = set()
    for card in game.deck + overflow:
        if card.id in selected_ids or card.id in deck_seen:
            continue
        deck_seen.add(card.id)
        deck.append(card)

    used = [c for c in game.used_cards if c.id not in {o.id for o in overflow}]
    used_ids = {c.id for c in used}
    for card in selected:
        if card.id not in used_ids:
            used.append(card)

    game.selected_cards = selected
    game.deck = deck
    game.used_cards = used
    return game
