"""Integration tests for complete game flows."""

from poker_rush.db.memory import InMemoryGameRepository, InMemoryScoreRepository
from poker_rush.game.engine import GameEngine
from poker_rush.game.evaluator import best_hand
from poker_rush.game.integrity import validate_session_integrity
from poker_rush.utils.constants import (
    STATUS_BONUS_ROUND,
    STATUS_GAME_OVER,
    STATUS_LEVEL_COMPLETE,
    STATUS_PLAYING,
)
from poker_rush.utils.crypto import create_rng
from poker_rush.utils.rewards import StaticRewardGate
from tests.conftest import FakeClock

SID = "flow"


def assert_integrity(game):
    errors = validate_session_integrity(game)
    assert not errors, f"Integrity violations: {errors}"


def make_engine(seed=42):
    clock = FakeClock()
    scores = InMemoryScoreRepository()
    engine = GameEngine(
        InMemoryGameRepository(),
        score_repo=scores,
        rng=create_rng(seed),
        reward_gate=StaticRewardGate(granted=True),
        clock=clock,
        settings={"strict_integrity": True},
    )
    return engine, clock, scores


def pick_best(engine, clock, game, window=8):
    """Pick the best five cards among the first few in the deck and wait for auto-submit."""
    hand = best_hand(game.deck[:window])
    for card in hand.ranked_cards:
        clock.advance(0.1)
        result = engine.select_card(SID, card.id)
        assert result.success, result.error
        assert_integrity(result.game)
    clock.advance(0.5)
    results = engine.poll()
    assert len(results) == 1
    assert results[0].success
    assert_integrity(results[0].game)
    return results[0].game


class TestSSCFlow:
    def test_clears_levels_through_a_bonus_round(self):
        engine, clock, scores = make_engine()
        game = engine.start_game("ssc", SID).game
        assert_integrity(game)

        cleared = 0
        while cleared < 3:
            game = pick_best(engine, clock, game, window=12)
            if game.status == STATUS_LEVEL_COMPLETE:
                cleared += 1
                if game.pending_bonus_round:
                    break
                game = engine.next_level(SID).game
                assert game.status == STATUS_PLAYING
            else:
                game = engine.tick(SID, 1).game
                if game.status == STATUS_GAME_OVER:
                    game = engine.revive(SID).game or game
                    if game.status != STATUS_PLAYING:
                        return
        assert game.ssc_level == 3
        assert game.pending_bonus_round

        game = engine.start_bonus_round(SID).game
        assert game.status == STATUS_BONUS_ROUND
        assert len(game.deck) == 10
        hand = best_hand(game.deck)
        game = engine.submit_bonus_hand(SID, [card.id for card in hand.ranked_cards]).game
        assert game.pending_reward is not None
        reward = game.pending_reward

        game = engine.claim_reward(SID).game
        game = engine.next_level(SID).game
        assert game.ssc_level == 4
        assert reward in game.active_power_ups
        assert game.cumulative_score > 0
        assert_integrity(game)

    def test_time_out_publishes_cumulative_score(self):
        engine, clock, scores = make_engine(seed=7)
        game = engine.start_game("ssc", SID).game
        game = pick_best(engine, clock, game)
        scored = game.cumulative_score
        if game.status == STATUS_LEVEL_COMPLETE:
            game = engine.next_level(SID).game
        result = engine.tick(SID, 60)
        assert result.game.status == STATUS_GAME_OVER
        assert scores.top_scores("ssc")[0].score == scored


class TestBlitzFlow:
    def test_play_until_time_runs_out(self):
        engine, clock, scores = make_engine()
        game = engine.start_game("blitz_cb", SID).game
        while game.status == STATUS_PLAYING:
            game = pick_best(engine, clock, game)
            assert len(game.deck) == 52
            game = engine.tick(SID, 7).game

        assert game.status == STATUS_GAME_OVER
        assert game.score == game.raw_score * game.hands_played
        assert scores.top_scores("blitz_cb")[0].score == game.score


class TestClassicFlow:
    def test_play_all_hands(self):
        engine, clock, scores = make_engine()
        game = engine.start_game("classic_fc", SID).game
        while game.status == STATUS_PLAYING:
            game = pick_best(engine, clock, game)
            engine.tick(SID, 3)
            game = engine.get_game(SID)

        assert game.hands_played == 10
        assert len(game.used_cards) + len(game.deck) == 52
        assert game.time_elapsed == 27
        assert game.time_bonus == 1000
        assert scores.top_scores("classic_fc")[0].score == game.score
