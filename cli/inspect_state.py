"""Inspect and validate a saved session snapshot.

Usage:
  python -m cli.inspect_state --file snapshot.json
  python -m cli.inspect_state --file snapshot.json --show deck
  python -m cli.inspect_state --file snapshot.json --show hand
  python -m cli.inspect_state --file snapshot.json --validate
"""

from __future__ import annotations

import argparse
import json
import sys

from poker_rush.game.integrity import validate_session_integrity
from poker_rush.game.models import GameState
from poker_rush.game.powerups import power_up_status


def inspect_state(file_path: str, show: str | None, validate: bool) -> None:
    with open(file_path) as f:
        data = json.load(f)

    game = GameState.from_dict(data)

    if validate:
        errors = validate_session_integrity(game)
        if errors:
            print("Integrity errors:")
            for e in errors:
                print(f"  - {e}")
            sys.exit(1)
        else:
            print("State is valid ✓")
        return

    if show == "deck":
        print(f"Deck ({len(game.deck)} cards):")
        for i, card in enumerate(game.deck, 1):
            print(f"  {i:2d}. {card.display()} [{card.compact()}]")
        return

    if show == "hand":
        print(f"Selected ({len(game.selected_cards)} cards):")
        for card in game.selected_cards:
            print(f"  {card.display()} [{card.compact()}]")
        if game.current_hand:
            hand = game.current_hand
            print(f"Current hand: {hand.name} ({hand.total_points} points)")
        return

    # Default: full dump
    print(f"Session: {game.session_id}")
    print(f"Mode: {game.mode}")
    print(f"Status: {game.status}")
    print(f"Score: {game.score} (cumulative {game.cumulative_score})")
    print(f"Hands played: {game.hands_played}")
    print(f"Time: {game.time_elapsed}s elapsed, {game.time_remaining}s remaining")
    print(f"Deck: {len(game.deck)} cards, used: {len(game.used_cards)}")
    if game.mode == "ssc":
        print(f"Level: {game.ssc_level} ({game.ssc_phase}), goal {game.level_goal}")
        print(f"Bonus rounds played: {game.bonus_round_count}")
    if game.best_hand:
        print(f"Best hand: {game.best_hand.name}")
    if game.unlocked_power_ups:
        print("Power-ups:")
        for pid in game.unlocked_power_ups:
            print(f"  {pid}: {power_up_status(game, pid).value}")
    if game.pending_reward:
        print(f"Pending reward: {game.pending_reward} ({game.reward_tier})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect Poker Rush session state")
    parser.add_argument("--file", required=True, help="Path to session state JSON")
    parser.add_argument("--show", choices=["deck", "hand"], help="What to show")
    parser.add_argument("--validate", action="store_true", help="Validate integrity")
    args = parser.parse_args()
    inspect_state(args.file, args.show, args.validate)


if __name__ == "__main__":
    main()
