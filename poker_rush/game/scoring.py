"""Score calculation rules for Poker Rush."""

from __future__ import annotations

import math
from dataclasses import dataclass

from poker_rush.game.evaluator import is_better_hand
from poker_rush.game.models import Card, HandResult
from poker_rush.utils.constants import (
    BASE_LEVEL_GOAL,
    BONUS_TIME_POINTS_PER_SECOND,
    CLASSIC_BONUS_WINDOW,
    CLASSIC_TIME_BONUS,
    FINAL_STRETCH_MULTIPLIER,
    FINAL_STRETCH_SECONDS,
    GOLD_THRESHOLD,
    LEFTOVER_PENALTY_PER_VALUE,
    LEVEL_GOAL_GROWTH,
    SILVER_THRESHOLD,
    STAR_THRESHOLDS,
    STREAK_MULTIPLIERS,
    TIER_BRONZE,
    TIER_GOLD,
    TIER_SILVER,
)


@dataclass
class StreakOutcome:
    streak: int
    multiplier: float


@dataclass
class FinalScore:
    score: int
    time_bonus: int = 0
    leftover_penalty: int = 0


def calculate_time_bonus(seconds: int) -> int:
    """Classic time bonus: 1000 inside the first minute, then -1 per extra second."""
    if seconds <= CLASSIC_BONUS_WINDOW:
        return CLASSIC_TIME_BONUS
    return -(seconds - CLASSIC_BONUS_WINDOW)


def calculate_leftover_penalty(remaining_deck: list[Card]) -> int:
    """Penalty for cards never picked: 10 points per card value."""
    return sum(card.value * LEFTOVER_PENALTY_PER_VALUE for card in remaining_deck)


def calculate_level_goal(level: int) -> int:
    """Score target for an SSC level: 500 at level 1, +5% compounding."""
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")
    return math.floor(BASE_LEVEL_GOAL * LEVEL_GOAL_GROWTH ** (level - 1))


def better_hand_multiplier(streak: int) -> float:
    if streak <= 0:
        return STREAK_MULTIPLIERS[0]
    return STREAK_MULTIPLIERS[min(streak, len(STREAK_MULTIPLIERS) - 1)]


def apply_streak(
    result: HandResult, previous: HandResult | None, streak: int
) -> StreakOutcome:
    """Advance the better-hand streak for a newly submitted hand.

    A hand strictly better than the one before it extends the streak and
    earns the multiplier for the new length; anything else resets it.
    """
    if previous is None or not is_better_hand(result, previous):
        return StreakOutcome(streak=0, multiplier=1.0)
    new_streak = streak + 1
    return StreakOutcome(streak=new_streak, multiplier=better_hand_multiplier(new_streak))


def final_stretch_multiplier(enabled: bool, time_remaining: int) -> int:
    """Double points during the last ten seconds of a countdown."""
    if enabled and 0 < time_remaining <= FINAL_STRETCH_SECONDS:
        return FINAL_STRETCH_MULTIPLIER
    return 1


def apply_multipliers(points: int, *multipliers: float) -> int:
    """Apply multipliers in order, flooring after each step."""
    for multiplier in multipliers:
        points = math.floor(points * multiplier)
    return points


def bonus_round_points(
    hand_points: int, point_multiplier: int, time_remaining: int
) -> tuple[int, int]:
    """Bonus round total and its time component.

    Returns (total_points, time_points).
    """
    time_points = max(time_remaining, 0) * BONUS_TIME_POINTS_PER_SECOND
    return hand_points * point_multiplier + time_points, time_points


def calculate_star_rating(score: int, goal: int) -> int:
    """0-3 stars for a level score measured against its goal."""
    stars = 0
    for threshold in STAR_THRESHOLDS:
        if score >= goal * threshold:
            stars += 1
    return stars


def finalize_classic_score(
    raw_score: int,
    time_elapsed: int,
    remaining_deck: list[Card],
    apply_penalty: bool,
) -> FinalScore:
    """Classic end of game: time bonus, then leftover penalty, floored at zero."""
    time_bonus = calculate_time_bonus(time_elapsed)
    penalty = calculate_leftover_penalty(remaining_deck) if apply_penalty else 0
    return FinalScore(
        score=max(0, raw_score + time_bonus - penalty),
        time_bonus=time_bonus,
        leftover_penalty=penalty,
    )


def finalize_blitz_score(raw_score: int, hands_played: int) -> FinalScore:
    """Blitz end of game: base points times the number of hands played."""
    return FinalScore(score=raw_score * hands_played)


def get_reward_tier(points: int) -> str:
    """Loot tier earned by a bonus round score."""
    if points > GOLD_THRESHOLD:
        return TIER_GOLD
    if points >= SILVER_THRESHOLD:
        return TIER_SILVER
    return TIER_BRONZE
