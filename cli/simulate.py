"""Simulate Poker Rush games with a greedy bot.

Usage: python -m cli.simulate --games 100 --mode blitz_fc [--seed 42] [--verbose]
"""

from __future__ import annotations

import argparse
import random
import time

from poker_rush.db.memory import InMemoryGameRepository, InMemoryScoreRepository
from poker_rush.game.engine import ActionResult, GameEngine
from poker_rush.game.evaluator import best_hand
from poker_rush.game.integrity import validate_session_integrity
from poker_rush.game.models import GameState
from poker_rush.game.modes import GameMode
from poker_rush.game.powerups import get_power_up
from poker_rush.utils.constants import (
    DEFAULT_PICK_DEBOUNCE,
    STATUS_BONUS_ROUND,
    STATUS_GAME_OVER,
    STATUS_LEVEL_COMPLETE,
    STATUS_PLAYING,
)
from poker_rush.utils.crypto import create_rng

# The bot only "sees" this many cards at a time, like a player watching
# the belt or the falling column.
VISIBLE_CARDS = 8
BONUS_VISIBLE_CARDS = 10
MAX_ACTIONS = 20000


class SimClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class IntegrityError(RuntimeError):
    pass


def _checked(result: ActionResult) -> GameState:
    if not result.success:
        raise RuntimeError(f"Action failed: {result.error}")
    assert result.game is not None
    errors = validate_session_integrity(result.game)
    if errors:
        raise IntegrityError(f"Integrity: {errors}")
    return result.game


def _use_best_power_up(engine: GameEngine, game: GameState) -> GameState:
    """Fire the strongest hand-granting power-up the bot holds, if any."""
    candidates = [
        get_power_up(p) for p in game.active_power_ups if get_power_up(p) is not None
    ]
    hands = [p for p in candidates if p.hand_type is not None]
    if not hands or game.selected_cards:
        return game
    best = max(hands, key=lambda p: p.hand_type)
    result = engine.use_power_up(game.session_id, best.id)
    if result.success:
        return _checked(result)
    return game


def bot_hand(
    engine: GameEngine, clock: SimClock, game: GameState, rng: random.Random
) -> GameState:
    """Play one hand: pick the best five of the visible cards, then let the
    auto-submit fire."""
    game = _use_best_power_up(engine, game)
    if game.status != STATUS_PLAYING:
        return game

    missing = 5 - len(game.selected_cards)
    if missing > 0:
        visible = game.deck[:VISIBLE_CARDS]
        if len(visible) < missing:
            return _checked(engine.end_game(game.session_id))
        if missing == 5:
            picks = list(best_hand(visible).ranked_cards)
        else:
            picks = visible[:missing]
        for card in picks:
            clock.advance(DEFAULT_PICK_DEBOUNCE * 2 + rng.random() * 0.4)
            game = _checked(engine.select_card(game.session_id, card.id))

    clock.advance(game.settings.get("auto_submit_delay", 0.35))
    fired = engine.poll()
    if fired:
        game = _checked(fired[-1])

    if game.status == STATUS_PLAYING or game.status == STATUS_BONUS_ROUND:
        game = _checked(engine.tick(game.session_id, rng.randint(2, 6)))
    return game


def bot_between_levels(engine: GameEngine, game: GameState) -> GameState:
    sid = game.session_id
    if game.pending_bonus_round:
        game = _checked(engine.start_bonus_round(sid))
        pool = game.deck[:BONUS_VISIBLE_CARDS]
        hand = best_hand(pool)
        game = _checked(engine.tick(sid, 5))
        if game.status == STATUS_BONUS_ROUND:
            game = _checked(
                engine.submit_bonus_hand(sid, [c.id for c in hand.ranked_cards])
            )
    if game.pending_reward is not None:
        game = _checked(engine.claim_reward(sid))
        if game.inventory_full:
            game = _checked(engine.discard_reward(sid))
    return _checked(engine.next_level(sid))


def simulate_game(mode: str, rng: random.Random, verbose: bool = False) -> dict:
    """Simulate one complete game. Returns stats dict."""
    clock = SimClock()
    scores = InMemoryScoreRepository()
    engine = GameEngine(
        InMemoryGameRepository(),
        score_repo=scores,
        rng=rng,
        clock=clock,
        settings={"strict_integrity": True},
    )
    game = _checked(engine.start_game(mode))

    actions = 0
    try:
        while game.status != STATUS_GAME_OVER and actions < MAX_ACTIONS:
            if game.status == STATUS_LEVEL_COMPLETE:
                game = bot_between_levels(engine, game)
            else:
                game = bot_hand(engine, clock, game, rng)
            actions += 1
            if verbose and actions % 50 == 0:
                print(f"  Action {actions}, level {game.ssc_level}, score {game.score}")
    except (RuntimeError, AssertionError) as e:
        return {"error": str(e), "actions": actions}

    record = scores.top_scores(mode, 1)
    best = game.best_hand.name if game.best_hand else None
    return {
        "score": record[0].score if record else game.score,
        "hands": game.hands_played,
        "level": game.ssc_level,
        "best_hand": best,
        "actions": actions,
        "error": None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Poker Rush Simulator")
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument(
        "--mode", default=GameMode.BLITZ_FC.value, choices=[m.value for m in GameMode]
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    base_seed = args.seed if args.seed is not None else int(time.time())
    print(f"Simulating {args.games} {args.mode} games (base seed: {base_seed})")

    errors = 0
    total_score = 0
    best_score = 0
    max_level = 0
    best_hands: dict[str, int] = {}

    for i in range(args.games):
        rng = create_rng(base_seed + i)
        result = simulate_game(args.mode, rng, verbose=args.verbose)

        if result.get("error"):
            errors += 1
            if args.verbose:
                print(f"  Game {i + 1}: ERROR - {result['error']}")
            continue

        total_score += result["score"]
        best_score = max(best_score, result["score"])
        max_level = max(max_level, result["level"])
        name = result["best_hand"] or "none"
        best_hands[name] = best_hands.get(name, 0) + 1
        if args.verbose:
            print(
                f"  Game {i + 1}: score={result['score']}, "
                f"hands={result['hands']}, level={result['level']}"
            )
        if (i + 1) % 100 == 0 and not args.verbose:
            print(f"  {i + 1}/{args.games} done...")

    completed = args.games - errors
    print("\nResults:")
    print(f"  Completed games: {completed}/{args.games}")
    print(f"  Errors: {errors}")
    if completed > 0:
        print(f"  Average score: {total_score / completed:.1f}")
        print(f"  Best score: {best_score}")
        if args.mode == GameMode.SSC.value:
            print(f"  Highest level: {max_level}")
        print(f"  Best hands: {best_hands}")


if __name__ == "__main__":
    main()
