"""In-memory repository implementations for testing and local CLI."""

from __future__ import annotations

import copy

from poker_rush.game.models import GameState, ScoreRecord


class InMemoryGameRepository:
    def __init__(self) -> None:
        self._games: dict[str, GameState] = {}

    def get_game(self, session_id: str) -> GameState | None:
        game = self._games.get(session_id)
        if game is None:
            return None
        return copy.deepcopy(game)

    def save_game(self, game: GameState) -> None:
        existing = self._games.get(game.session_id)
        if existing is not None and existing.version != game.version:
            raise ValueError(
                f"Version conflict: expected {game.version}, found {existing.version}"
            )
        saved = copy.deepcopy(game)
        saved.version = game.version + 1
        self._games[game.session_id] = saved

    def delete_game(self, session_id: str) -> None:
        self._games.pop(session_id, None)


class InMemoryScoreRepository:
    def __init__(self) -> None:
        self._scores: list[ScoreRecord] = []

    def save_score(self, record: ScoreRecord) -> None:
        # one record per session; a revived game overwrites its earlier result
        self._scores = [s for s in self._scores if s.session_id != record.session_id]
        self._scores.append(copy.deepcopy(record))

    def top_scores(self, mode: str, limit: int = 10) -> list[ScoreRecord]:
        matching = [s for s in self._scores if s.mode == mode]
        matching.sort(key=lambda s: (-s.score, s.created_at))
        return [copy.deepcopy(s) for s in matching[:limit]]

    def all_scores(self) -> list[ScoreRecord]:
        return [copy.deepcopy(s) for s in self._scores]
