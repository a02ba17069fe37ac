"""DynamoDB repository implementations for production."""

from __future__ import annotations

import json
import os
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from poker_rush.game.models import GameState, ScoreRecord


# Initialize DynamoDB resource at module level for Lambda warm starts
_dynamodb = None
_prefix = os.environ.get("DYNAMODB_TABLE_PREFIX", "PokerRush")


def _get_dynamodb():
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource("dynamodb")
    return _dynamodb


def _to_item(data: dict) -> dict:
    """DynamoDB rejects floats; store them as Decimal."""
    return json.loads(json.dumps(data), parse_float=Decimal)


def _from_item(item: dict) -> dict:
    def convert(value):
        if isinstance(value, Decimal):
            return int(value) if value == value.to_integral_value() else float(value)
        if isinstance(value, list):
            return [convert(v) for v in value]
        if isinstance(value, dict):
            return {k: convert(v) for k, v in value.items()}
        return value

    return convert(item)


class DynamoDBGameRepository:
    def __init__(self, table_name: str | None = None) -> None:
        self._table_name = table_name or f"{_prefix}_Sessions"
        self._table = _get_dynamodb().Table(self._table_name)

    def get_game(self, session_id: str) -> GameState | None:
        response = self._table.get_item(
            Key={"sessionId": session_id},
            ConsistentRead=True,
        )
        item = response.get("Item")
        if not item:
            return None
        return GameState.from_dict(_from_item(item))

    def save_game(self, game: GameState) -> None:
        item = _to_item(game.to_dict())
        item["version"] = game.version + 1
        try:
            self._table.put_item(
                Item=item,
                ConditionExpression=(
                    "attribute_not_exists(sessionId) OR version = :v"
                ),
                ExpressionAttributeValues={":v": game.version},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ValueError("Version conflict") from e
            raise

    def delete_game(self, session_id: str) -> None:
        self._table.delete_item(Key={"sessionId": session_id})


class DynamoDBScoreRepository:
    """Scores keyed by mode (partition) and session (sort), with a
    `mode-score-index` GSI on (mode, score) for leaderboards."""

    def __init__(self, table_name: str | None = None) -> None:
        self._table_name = table_name or f"{_prefix}_Scores"
        self._table = _get_dynamodb().Table(self._table_name)

    def save_score(self, record: ScoreRecord) -> None:
        self._table.put_item(Item=_to_item(record.to_dict()))

    def top_scores(self, mode: str, limit: int = 10) -> list[ScoreRecord]:
        response = self._table.query(
            IndexName="mode-score-index",
            KeyConditionExpression=Key("mode").eq(mode),
            ScanIndexForward=False,
            Limit=limit,
        )
        return [ScoreRecord.from_dict(_from_item(i)) for i in response.get("Items", [])]
