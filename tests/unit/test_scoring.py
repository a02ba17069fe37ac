"""Tests for scoring rules."""

import pytest

from poker_rush.game.evaluator import evaluate_hand
from poker_rush.game.models import Card
from poker_rush.game.scoring import (
    apply_multipliers,
    apply_streak,
    better_hand_multiplier,
    bonus_round_points,
    calculate_leftover_penalty,
    calculate_level_goal,
    calculate_star_rating,
    calculate_time_bonus,
    final_stretch_multiplier,
    finalize_blitz_score,
    finalize_classic_score,
    get_reward_tier,
)


def c(code: str) -> Card:
    return Card.from_compact(code)


def ev(*codes: str):
    return evaluate_hand([c(code) for code in codes])


PAIR = ("Ah", "Ad", "Kc", "Qs", "Jh")
TWO_PAIR = ("2h", "2d", "3c", "3s", "4h")
TRIPS = ("5h", "5d", "5c", "3s", "4h")
FLUSH = ("2d", "8d", "Jd", "4d", "Kd")


class TestTimeBonus:
    def test_full_bonus_inside_first_minute(self):
        assert calculate_time_bonus(0) == 1000
        assert calculate_time_bonus(60) == 1000

    def test_penalty_after_first_minute(self):
        assert calculate_time_bonus(61) == -1
        assert calculate_time_bonus(150) == -90

    def test_monotonically_non_increasing(self):
        values = [calculate_time_bonus(s) for s in range(0, 601)]
        assert all(a >= b for a, b in zip(values, values[1:]))


class TestLeftoverPenalty:
    def test_ten_points_per_card_value(self):
        assert calculate_leftover_penalty([c("2h"), c("Ah")]) == (2 + 14) * 10

    def test_empty_deck(self):
        assert calculate_leftover_penalty([]) == 0


class TestLevelGoal:
    def test_base_goal(self):
        assert calculate_level_goal(1) == 500

    def test_compounding_growth(self):
        assert calculate_level_goal(2) == 525
        assert calculate_level_goal(3) == 551

    def test_strictly_increasing(self):
        goals = [calculate_level_goal(level) for level in range(1, 101)]
        assert all(a < b for a, b in zip(goals, goals[1:]))

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            calculate_level_goal(0)


class TestStreak:
    def test_multiplier_schedule(self):
        assert better_hand_multiplier(0) == 1.0
        assert better_hand_multiplier(1) == 1.2
        assert better_hand_multiplier(2) == 1.5
        assert better_hand_multiplier(3) == 2.0
        assert better_hand_multiplier(7) == 2.0

    def test_pair_two_pair_trips(self):
        hands = [ev(*PAIR), ev(*TWO_PAIR), ev(*TRIPS)]
        previous, streak, multipliers = None, 0, []
        for result in hands:
            outcome = apply_streak(result, previous, streak)
            multipliers.append(outcome.multiplier)
            previous, streak = result, outcome.streak
        assert multipliers == [1.0, 1.2, 1.5]
        assert streak == 2

    def test_worse_hand_resets(self):
        outcome = apply_streak(ev(*PAIR), ev(*FLUSH), 2)
        assert outcome.streak == 0
        assert outcome.multiplier == 1.0

    def test_equal_hand_resets(self):
        outcome = apply_streak(ev(*PAIR), ev("As", "Ac", "Kd", "Qh", "Jd"), 1)
        assert outcome.streak == 0


class TestMultipliers:
    def test_final_stretch_window(self):
        assert final_stretch_multiplier(True, 10) == 2
        assert final_stretch_multiplier(True, 1) == 2
        assert final_stretch_multiplier(True, 11) == 1
        assert final_stretch_multiplier(True, 0) == 1
        assert final_stretch_multiplier(False, 5) == 1

    def test_apply_floors_each_step(self):
        assert apply_multipliers(150, 1.2) == 180
        assert apply_multipliers(10, 1.5, 2) == 30


class TestBonusRound:
    def test_points_formula(self):
        total, time_points = bonus_round_points(300, 2, 25)
        assert time_points == 250
        assert total == 300 * 2 + 250

    def test_negative_time_ignored(self):
        assert bonus_round_points(50, 1, -3) == (50, 0)

    @pytest.mark.parametrize(
        "points, tier",
        [(0, "bronze"), (499, "bronze"), (500, "silver"), (1200, "silver"), (1201, "gold")],
    )
    def test_reward_tier(self, points, tier):
        assert get_reward_tier(points) == tier


class TestStarRating:
    def test_thresholds(self):
        assert calculate_star_rating(499, 500) == 0
        assert calculate_star_rating(500, 500) == 1
        assert calculate_star_rating(625, 500) == 2
        assert calculate_star_rating(750, 500) == 3


class TestFinalize:
    def test_classic_bonus_then_penalty(self):
        final = finalize_classic_score(2000, 45, [c("Kh")], apply_penalty=True)
        assert final.time_bonus == 1000
        assert final.leftover_penalty == 130
        assert final.score == 2870

    def test_classic_clamped_at_zero(self):
        final = finalize_classic_score(10, 600, [c("Ah"), c("Kh")], apply_penalty=True)
        assert final.score == 0

    def test_classic_without_penalty(self):
        final = finalize_classic_score(100, 30, [c("Ah")], apply_penalty=False)
        assert final.leftover_penalty == 0
        assert final.score == 1100

    def test_blitz_raw_times_hands(self):
        assert finalize_blitz_score(800, 6).score == 4800
