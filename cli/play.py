"""Interactive CLI for Poker Rush.

Usage: python -m cli.play --mode ssc [--seed 42] [--dynamodb] [--reward-url URL]

The timer runs on the wall clock: whatever time passes while you type is
charged to the countdown when the next command arrives.
"""

from __future__ import annotations

import argparse
import time

from poker_rush.db.dynamodb import DynamoDBGameRepository, DynamoDBScoreRepository
from poker_rush.db.memory import InMemoryGameRepository, InMemoryScoreRepository
from poker_rush.game.engine import ActionResult, GameEngine
from poker_rush.game.integrity import validate_session_integrity
from poker_rush.game.models import Card, GameState
from poker_rush.game.modes import GameMode
from poker_rush.game.powerups import PowerUpStatus, get_power_up, power_up_status
from poker_rush.utils.constants import (
    STATUS_BONUS_ROUND,
    STATUS_GAME_OVER,
    STATUS_LEVEL_COMPLETE,
    STATUS_PLAYING,
)
from poker_rush.utils.crypto import create_rng
from poker_rush.utils.rewards import HttpRewardGate, StaticRewardGate

VISIBLE_CARDS = 8


def parse_card(s: str) -> Card:
    """Parse compact card notation."""
    return Card.from_compact(s.strip())


def display_cards(cards: list[Card]) -> str:
    if not cards:
        return "(none)"
    return "  ".join(f"{c.display()} [{c.compact()}]" for c in cards)


def display_table(game: GameState) -> str:
    """Format session state for terminal display."""
    title = f"POKER RUSH | {game.mode}"
    if game.mode == GameMode.SSC.value:
        title += f" | level {game.ssc_level} ({game.ssc_phase})"
    lines = [
        "",
        f"{'=' * 60}",
        f"  {title}",
        f"{'=' * 60}",
        "",
        f"  Status: {game.status}",
    ]
    if game.mode in (GameMode.CLASSIC_FC.value, GameMode.CLASSIC_CB.value):
        lines.append(f"  Time: {game.time_elapsed}s   Hands: {game.hands_played}/10")
    else:
        lines.append(f"  Time left: {game.time_remaining}s   Hands: {game.hands_played}")
    score_line = f"  Score: {game.score}"
    if game.level_goal:
        score_line += f" / goal {game.level_goal}"
    if game.better_hand_streak:
        score_line += f"   Streak x{game.current_multiplier}"
    lines.append(score_line)
    if game.current_hand:
        lines.append(
            f"  Last hand: {game.current_hand.name} ({game.current_hand.total_points})"
        )
    lines.append("")

    if game.status == STATUS_BONUS_ROUND:
        lines.append(f"  Bonus pool ({len(game.deck)} cards):")
        lines.append(f"    {display_cards(game.deck)}")
    else:
        lines.append(f"  Incoming: {display_cards(game.deck[:VISIBLE_CARDS])}")
        lines.append(f"  Deck: {len(game.deck)} cards")
    lines.append(f"  Selected: {display_cards(game.selected_cards)}")

    if game.unlocked_power_ups:
        held = []
        for pid in game.unlocked_power_ups:
            status = power_up_status(game, pid)
            mark = "" if status == PowerUpStatus.ACTIVE else f" ({status.value})"
            held.append(f"{pid}{mark}")
        lines.append(f"  Power-ups: {', '.join(held)}")
    if game.pending_reward:
        p = get_power_up(game.pending_reward)
        name = p.name if p else game.pending_reward
        lines.append(f"  Loot ({game.reward_tier}): {name}")
        if game.inventory_full:
            lines.append("  Inventory full: swap <id> or discard")
    lines.append("")
    return "\n".join(lines)


def display_actions(game: GameState) -> str:
    """Show available actions."""
    lines = ["  Actions:"]
    status = game.status
    if status == STATUS_PLAYING:
        lines.append("    pick <card>      - Select a card (e.g. pick Ah)")
        lines.append("    drop <card>      - Return a selected card")
        lines.append("    submit           - Submit the five selected cards")
        lines.append("    power <id>       - Use a power-up")
        lines.append("    shuffle          - Reshuffle the deck")
    if status == STATUS_BONUS_ROUND:
        lines.append("    bonus <5 cards>  - Play your bonus hand (e.g. bonus Ah Ad 2c 2s 9h)")
        lines.append("    skip             - Give up the bonus round")
    if status == STATUS_LEVEL_COMPLETE:
        if game.pending_bonus_round:
            lines.append("    bonus            - Start the bonus round")
            lines.append("    skip             - Skip the bonus round")
        elif game.pending_reward:
            lines.append("    claim            - Keep the loot")
            lines.append("    discard          - Drop the loot")
            lines.append("    swap <id>        - Replace a held power-up with the loot")
        else:
            lines.append("    next             - Next level")
    if status == STATUS_GAME_OVER:
        lines.append("    revive           - Watch an ad for +15 seconds")
        if game.mode == GameMode.SSC.value:
            lines.append("    replay           - Watch an ad to replay the level")
    if status != STATUS_GAME_OVER:
        lines.append("    pause            - Pause / resume")
        lines.append("    end              - End the game now")
    lines.append("    quit             - Exit")
    lines.append("")
    return "\n".join(lines)


def report(result: ActionResult) -> None:
    for event in result.events:
        ev_type = event.get("event", "")
        if ev_type == "hand_submitted":
            print(f"\n  *** {event['hand']}: +{event['points']} ***")
        elif ev_type == "level_complete":
            print(f"\n  *** Level {event['level']} complete! {'*' * event['stars']} ***")
        elif ev_type == "bonus_hand_submitted":
            print(f"\n  *** Bonus {event['hand']}: +{event['points']} ({event['tier']}) ***")
        elif ev_type == "bonus_round_failed":
            print("\n  *** Bonus round timed out ***")
        elif ev_type == "game_over":
            print(f"\n  *** Game over ({event['reason']}): {event['score']} points ***")


def play_game(
    mode: str,
    seed: int | None = None,
    use_dynamodb: bool = False,
    reward_url: str | None = None,
) -> None:
    rng = create_rng(seed)
    if use_dynamodb:
        repo, scores = DynamoDBGameRepository(), DynamoDBScoreRepository()
    else:
        repo, scores = InMemoryGameRepository(), InMemoryScoreRepository()
    if reward_url:
        with HttpRewardGate(url=reward_url) as gate:
            _run(GameEngine(repo, score_repo=scores, rng=rng, reward_gate=gate), mode, seed)
    else:
        gate = StaticRewardGate(granted=True)
        _run(GameEngine(repo, score_repo=scores, rng=rng, reward_gate=gate), mode, seed)


def _run(engine: GameEngine, mode: str, seed: int | None) -> None:
    result = engine.start_game(mode)
    if not result.success:
        print(f"Start failed: {result.error}")
        return
    assert result.game is not None
    game = result.game
    sid = game.session_id

    print("\n  Welcome to Poker Rush!")
    if seed is not None:
        print(f"  Seed: {seed}")

    last_tick = time.monotonic()
    while True:
        # Charge elapsed wall time to the timer and fire the auto-submit
        for fired in engine.poll():
            report(fired)
        now = time.monotonic()
        elapsed = int(now - last_tick)
        if elapsed >= 1:
            last_tick += elapsed
            current = engine.get_game(sid)
            if current and current.status in (STATUS_PLAYING, STATUS_BONUS_ROUND):
                report(engine.tick(sid, elapsed))

        game = engine.get_game(sid)
        assert game is not None
        print(display_table(game))
        print(display_actions(game))

        try:
            action_str = input("  > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n  Game interrupted.")
            return
        if not action_str:
            continue

        parts = action_str.split()
        cmd = parts[0].lower()

        try:
            if cmd == "quit":
                break
            elif cmd == "pick" and len(parts) == 2:
                result = engine.select_card(sid, parse_card(parts[1]).id)
            elif cmd == "drop" and len(parts) == 2:
                result = engine.deselect_card(sid, parse_card(parts[1]).id)
            elif cmd == "submit":
                result = engine.submit_hand(sid)
            elif cmd == "power" and len(parts) == 2:
                result = engine.use_power_up(sid, parts[1])
            elif cmd == "shuffle":
                result = engine.reshuffle_unselected(sid)
            elif cmd == "pause":
                result = engine.pause_game(sid)
            elif cmd == "end":
                result = engine.end_game(sid)
            elif cmd == "bonus" and len(parts) == 1:
                result = engine.start_bonus_round(sid)
            elif cmd == "bonus":
                ids = [parse_card(p).id for p in parts[1:]]
                result = engine.submit_bonus_hand(sid, ids)
            elif cmd == "skip":
                result = engine.skip_bonus_round(sid)
            elif cmd == "claim":
                result = engine.claim_reward(sid)
            elif cmd == "discard":
                result = engine.discard_reward(sid)
            elif cmd == "swap" and len(parts) == 2:
                result = engine.swap_power_up(sid, parts[1])
            elif cmd == "next":
                result = engine.next_level(sid)
            elif cmd == "revive":
                result = engine.revive(sid)
            elif cmd == "replay":
                result = engine.replay_level(sid)
            else:
                print(f"  Unknown command: {action_str}")
                continue
        except ValueError as e:
            print(f"  Parse error: {e}")
            continue

        if not result.success:
            print(f"  ✗ {result.error}")
            continue
        report(result)
        assert result.game is not None
        game = result.game

        errors = validate_session_integrity(game)
        if errors:
            print(f"\n  ⚠ INTEGRITY ERROR: {errors}")
            return
        if game.status not in (STATUS_PLAYING, STATUS_BONUS_ROUND):
            last_tick = time.monotonic()

    top = engine.top_scores(mode, 5)
    if top:
        print("\n  High scores:")
        for record in top:
            best = f" ({record.best_hand_name})" if record.best_hand_name else ""
            print(f"    {record.score}{best}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Poker Rush CLI")
    parser.add_argument(
        "--mode", default=GameMode.SSC.value, choices=[m.value for m in GameMode]
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--dynamodb", action="store_true", help="Persist sessions and scores in DynamoDB"
    )
    parser.add_argument("--reward-url", default=None, help="Rewarded-ad verification endpoint")
    args = parser.parse_args()
    play_game(args.mode, args.seed, args.dynamodb, args.reward_url)


if __name__ == "__main__":
    main()
