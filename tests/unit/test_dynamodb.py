"""Tests for the DynamoDB repositories against an in-process fake table."""

from decimal import Decimal

import pytest
from botocore.exceptions import ClientError

from poker_rush.db import dynamodb
from poker_rush.db.dynamodb import (
    DynamoDBGameRepository,
    DynamoDBScoreRepository,
    _from_item,
    _to_item,
)
from poker_rush.game.deck import create_deck
from poker_rush.game.models import GameState, ScoreRecord


class FakeTable:
    def __init__(self, name: str) -> None:
        self.name = name
        self.items: dict[str, dict] = {}
        self.queries: list[dict] = []

    def get_item(self, Key, ConsistentRead=False):
        item = self.items.get(Key["sessionId"])
        return {"Item": item} if item else {}

    def put_item(self, Item, ConditionExpression=None, ExpressionAttributeValues=None):
        for value in Item.values():
            assert not isinstance(value, float)
        if ConditionExpression:
            existing = self.items.get(Item["sessionId"])
            if existing and existing["version"] != ExpressionAttributeValues[":v"]:
                raise ClientError(
                    {"Error": {"Code": "ConditionalCheckFailedException", "Message": ""}},
                    "PutItem",
                )
        self.items[Item["sessionId"]] = Item

    def delete_item(self, Key):
        self.items.pop(Key["sessionId"], None)

    def query(self, **kwargs):
        self.queries.append(kwargs)
        items = sorted(self.items.values(), key=lambda i: i["score"], reverse=True)
        return {"Items": items[: kwargs["Limit"]]}


class FakeResource:
    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}

    def Table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable(name))


@pytest.fixture
def resource(monkeypatch):
    fake = FakeResource()
    monkeypatch.setattr(dynamodb, "_dynamodb", fake)
    return fake


class TestItemConversion:
    def test_floats_become_decimal_and_back(self):
        item = _to_item({"a": 1.5, "b": [2, 0.25], "c": {"d": 3}})
        assert item == {"a": Decimal("1.5"), "b": [2, Decimal("0.25")], "c": {"d": 3}}
        assert _from_item(item) == {"a": 1.5, "b": [2, 0.25], "c": {"d": 3}}

    def test_integral_decimal_becomes_int(self):
        assert _from_item({"score": Decimal("120")}) == {"score": 120}


class TestGameRepository:
    def test_save_and_load(self, resource):
        repo = DynamoDBGameRepository()
        game = GameState(
            session_id="s1", mode="ssc", is_playing=True, deck=create_deck(), last_pick_at=12.5
        )
        repo.save_game(game)
        loaded = repo.get_game("s1")
        assert loaded.deck == game.deck
        assert loaded.last_pick_at == 12.5
        assert loaded.version == 2
        assert "PokerRush_Sessions" in resource.tables

    def test_version_conflict(self, resource):
        repo = DynamoDBGameRepository()
        repo.save_game(GameState(session_id="s1"))
        stale = GameState(session_id="s1", version=1)
        repo.save_game(repo.get_game("s1"))
        with pytest.raises(ValueError, match="Version conflict"):
            repo.save_game(stale)

    def test_missing_and_delete(self, resource):
        repo = DynamoDBGameRepository(table_name="Custom")
        assert repo.get_game("nope") is None
        repo.save_game(GameState(session_id="s1"))
        repo.delete_game("s1")
        assert repo.get_game("s1") is None


class TestScoreRepository:
    def test_top_scores(self, resource):
        repo = DynamoDBScoreRepository()
        for i, score in enumerate([300, 900, 150]):
            repo.save_score(
                ScoreRecord(
                    session_id=f"s{i}",
                    mode="blitz_fc",
                    score=score,
                    hands_played=3,
                    ssc_level=None,
                    time_elapsed=60,
                    best_hand_name="One Pair",
                    created_at="2026-01-01T00:00:00+00:00",
                )
            )
        top = repo.top_scores("blitz_fc", limit=2)
        assert [r.score for r in top] == [900, 300]
        query = resource.tables["PokerRush_Scores"].queries[0]
        assert query["IndexName"] == "mode-score-index"
        assert query["ScanIndexForward"] is False
