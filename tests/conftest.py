"""Shared test fixtures for Poker Rush."""

from __future__ import annotations

import pytest

from poker_rush.db.memory import InMemoryGameRepository, InMemoryScoreRepository
from poker_rush.game.engine import GameEngine
from poker_rush.game.models import HandCategory, ScoreRecord
from poker_rush.utils.crypto import create_rng
from poker_rush.utils.rewards import StaticRewardGate


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class RecordingHooks:
    """Records audio/theme notifications for test assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def on_hand_scored(self, category: HandCategory) -> None:
        self.calls.append(("on_hand_scored", category))

    def on_card_picked(self) -> None:
        self.calls.append(("on_card_picked", None))

    def get_calls(self, name: str) -> list[object]:
        return [arg for n, arg in self.calls if n == name]


class ExplodingHooks:
    def on_hand_scored(self, category: HandCategory) -> None:
        raise RuntimeError("speaker on fire")

    def on_card_picked(self) -> None:
        raise RuntimeError("speaker on fire")


class BrokenScoreRepository:
    """Score sink whose backend is down."""

    def __init__(self) -> None:
        self.attempts = 0

    def save_score(self, record: ScoreRecord) -> None:
        self.attempts += 1
        raise ConnectionError("leaderboard unreachable")

    def top_scores(self, mode: str, limit: int = 10) -> list[ScoreRecord]:
        return []


@pytest.fixture
def game_repo():
    return InMemoryGameRepository()


@pytest.fixture
def score_repo():
    return InMemoryScoreRepository()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hooks():
    return RecordingHooks()


@pytest.fixture
def reward_gate():
    return StaticRewardGate(granted=True)


@pytest.fixture
def engine(game_repo, score_repo, clock, hooks, reward_gate):
    return GameEngine(
        game_repo,
        score_repo=score_repo,
        rng=create_rng(42),
        hooks=hooks,
        reward_gate=reward_gate,
        clock=clock,
        settings={"strict_integrity": True},
    )
