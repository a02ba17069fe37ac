"""Tests for data models."""

import pytest

from poker_rush.game.evaluator import evaluate_hand
from poker_rush.game.models import (
    Card,
    GameState,
    HandCategory,
    HandResult,
    ScoreRecord,
    initial_state,
)


def c(code: str) -> Card:
    return Card.from_compact(code)


class TestCard:
    def test_id_is_rank_and_suit(self):
        assert Card(suit="hearts", rank="A").id == "A-hearts"

    def test_values(self):
        assert c("Ah").value == 14
        assert c("Ks").value == 13
        assert c("10d").value == 10
        assert c("2c").value == 2

    def test_compact_roundtrip(self):
        for code in ["Ah", "10s", "Qd", "2c"]:
            assert c(code).compact() == code

    def test_from_compact_case_insensitive(self):
        assert Card.from_compact("qd") == Card(suit="diamonds", rank="Q")

    def test_from_compact_invalid(self):
        with pytest.raises(ValueError):
            Card.from_compact("1x")
        with pytest.raises(ValueError):
            Card.from_compact("11h")

    def test_from_id(self):
        assert Card.from_id("10-spades") == c("10s")
        with pytest.raises(ValueError):
            Card.from_id("Z-hearts")

    def test_display(self):
        assert c("Ah").display() == "A♥"

    def test_to_dict(self):
        assert c("Jc").to_dict() == {"id": "J-clubs", "suit": "clubs", "rank": "J", "value": 11}

    def test_hashable_and_equal(self):
        assert {c("Ah"), c("Ah")} == {Card(suit="hearts", rank="A")}


class TestHandCategory:
    def test_ordering(self):
        assert HandCategory.ROYAL_FLUSH > HandCategory.STRAIGHT_FLUSH > HandCategory.HIGH_CARD

    def test_points(self):
        assert HandCategory.ROYAL_FLUSH.points == 5000
        assert HandCategory.FOUR_OF_A_KIND.points == 1500
        assert HandCategory.HIGH_CARD.points == 10

    def test_label_roundtrip(self):
        for category in HandCategory:
            assert HandCategory.from_label(category.label) == category

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            HandCategory.from_label("Five of a Kind")


class TestHandResult:
    def test_roundtrip(self):
        result = evaluate_hand([c("Ah"), c("Ad"), c("7c"), c("7s"), c("2h")])
        restored = HandResult.from_dict(result.to_dict())
        assert restored == result
        assert restored.name == "Two Pair"


class TestGameState:
    def test_initial_state_is_idle(self):
        state = initial_state("s1")
        assert state.status == "idle"
        assert state.score == 0
        assert state.selected_cards == []
        assert state.deck == []
        assert state.ssc_level == 1
        assert not state.is_playing

    def test_status_priority(self):
        state = GameState(session_id="s1", is_playing=True)
        assert state.status == "playing"
        state.is_bonus_level = True
        assert state.status == "bonus_round"
        state.is_level_complete = True
        assert state.status == "level_complete"
        state.is_paused = True
        assert state.status == "paused"
        state.is_game_over = True
        assert state.status == "game_over"

    def test_serialization_roundtrip(self):
        state = GameState(
            session_id="s1",
            mode="ssc",
            score=420,
            deck=[c("2h"), c("3h")],
            selected_cards=[c("Ah")],
            used_cards=[c("Ah")],
            best_hand=evaluate_hand([c("Ah"), c("Kh"), c("Qh"), c("Jh"), c("10h")]),
            unlocked_power_ups=["two_pair"],
            active_power_ups=["two_pair"],
            last_pick_at=12.5,
            settings={"inventory_capacity": 3},
            is_playing=True,
        )
        data = state.to_dict()
        assert data["sessionId"] == "s1"
        assert data["status"] == "playing"
        assert data["bestHand"]["category"] == "Royal Flush"
        assert GameState.from_dict(data) == state

    def test_find_helpers(self):
        state = GameState(session_id="s1", deck=[c("2h")], selected_cards=[c("Ah")])
        assert state.find_in_deck("2-hearts") == c("2h")
        assert state.find_in_deck("A-hearts") is None
        assert state.find_selected("A-hearts") == c("Ah")

    def test_new_session_id_unique(self):
        assert GameState.new_session_id() != GameState.new_session_id()


class TestScoreRecord:
    def test_roundtrip(self):
        record = ScoreRecord(
            session_id="s1",
            mode="blitz_fc",
            score=9000,
            hands_played=6,
            ssc_level=None,
            time_elapsed=60,
            best_hand_name="Flush",
            created_at="2024-01-01T00:00:00+00:00",
        )
        assert ScoreRecord.from_dict(record.to_dict()) == record
