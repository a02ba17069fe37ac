"""Repository protocol interfaces for Poker Rush persistence."""

from __future__ import annotations

from typing import Protocol

from poker_rush.game.models import GameState, ScoreRecord


class GameRepository(Protocol):
    def get_game(self, session_id: str) -> GameState | None:
        ...

    def save_game(self, game: GameState) -> None:
        ...

    def delete_game(self, session_id: str) -> None:
        ...


class ScoreRepository(Protocol):
    def save_score(self, record: ScoreRecord) -> None:
        ...

    def top_scores(self, mode: str, limit: int = 10) -> list[ScoreRecord]:
        ...
