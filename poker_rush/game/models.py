"""Data models for Poker Rush game state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from poker_rush.utils.constants import (
    RANK_VALUES,
    STATUS_BONUS_ROUND,
    STATUS_GAME_OVER,
    STATUS_IDLE,
    STATUS_LEVEL_COMPLETE,
    STATUS_PAUSED,
    STATUS_PLAYING,
    SUIT_CODES,
    SUIT_SYMBOLS,
)
from poker_rush.utils.crypto import generate_session_id


class HandCategory(IntEnum):
    """Poker hand categories; a larger value is a better hand."""

    HIGH_CARD = 1
    ONE_PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def label(self) -> str:
        return HAND_LABELS[self]

    @property
    def points(self) -> int:
        return HAND_POINTS[self]

    @classmethod
    def from_label(cls, label: str) -> HandCategory:
        for category, name in HAND_LABELS.items():
            if name == label:
                return category
        raise ValueError(f"Unknown hand: {label}")


HAND_LABELS = {
    HandCategory.HIGH_CARD: "High Card",
    HandCategory.ONE_PAIR: "One Pair",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.ROYAL_FLUSH: "Royal Flush",
}

HAND_POINTS = {
    HandCategory.HIGH_CARD: 10,
    HandCategory.ONE_PAIR: 50,
    HandCategory.TWO_PAIR: 150,
    HandCategory.THREE_OF_A_KIND: 300,
    HandCategory.STRAIGHT: 500,
    HandCategory.FLUSH: 750,
    HandCategory.FULL_HOUSE: 1000,
    HandCategory.FOUR_OF_A_KIND: 1500,
    HandCategory.STRAIGHT_FLUSH: 2500,
    HandCategory.ROYAL_FLUSH: 5000,
}


@dataclass(frozen=True)
class Card:
    """A single playing card.

    Compact encoding examples: "Ah" = Ace of hearts, "10s" = Ten of spades.
    """

    suit: str  # "hearts", "diamonds", "clubs", "spades"
    rank: str  # "A", "2".."10", "J", "Q", "K"

    @property
    def id(self) -> str:
        return f"{self.rank}-{self.suit}"

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    def compact(self) -> str:
        """Encode to compact string."""
        return f"{self.rank}{SUIT_CODES[self.suit]}"

    @classmethod
    def from_compact(cls, code: str) -> Card:
        """Decode from compact string ("Ah", "10s", "qd")."""
        code = code.strip()
        suit_map = {v: k for k, v in SUIT_CODES.items()}
        suit = suit_map.get(code[-1:].lower())
        rank = code[:-1].upper()
        if suit is None or rank not in RANK_VALUES:
            raise ValueError(f"Invalid card code: {code!r}")
        return cls(suit=suit, rank=rank)

    @classmethod
    def from_id(cls, card_id: str) -> Card:
        rank, _, suit = card_id.partition("-")
        if rank not in RANK_VALUES or suit not in SUIT_CODES:
            raise ValueError(f"Invalid card id: {card_id!r}")
        return cls(suit=suit, rank=rank)

    def display(self) -> str:
        """Unicode display string."""
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {"id": self.id, "suit": self.suit, "rank": self.rank, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict) -> Card:
        return cls(suit=d["suit"], rank=d["rank"])


@dataclass(frozen=True)
class HandResult:
    """An evaluated five-card hand."""

    category: HandCategory
    ranked_cards: tuple[Card, ...]
    total_points: int
    strength: int

    @property
    def name(self) -> str:
        return self.category.label

    def to_dict(self) -> dict:
        return {
            "category": self.category.label,
            "rankedCards": [c.to_dict() for c in self.ranked_cards],
            "totalPoints": self.total_points,
            "strength": self.strength,
        }

    @classmethod
    def from_dict(cls, d: dict) -> HandResult:
        return cls(
            category=HandCategory.from_label(d["category"]),
            ranked_cards=tuple(Card.from_dict(c) for c in d["rankedCards"]),
            total_points=d["totalPoints"],
            strength=d["strength"],
        )


@dataclass(frozen=True)
class PowerUp:
    """Catalog entry for a power-up."""

    id: str
    name: str
    tier: int  # 1, 2, 3
    unlocked_at_level: int | None  # None = only obtainable as loot
    is_reusable: bool = False
    hand_type: HandCategory | None = None
    weight: int = 1  # relative odds inside its tier's loot pool


@dataclass
class ScoreRecord:
    """Finalized game result handed to the score sink on game over."""

    session_id: str
    mode: str
    score: int
    hands_played: int
    ssc_level: int | None
    time_elapsed: int
    best_hand_name: str | None
    created_at: str

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "score": self.score,
            "handsPlayed": self.hands_played,
            "sscLevel": self.ssc_level,
            "timeElapsed": self.time_elapsed,
            "bestHand": self.best_hand_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ScoreRecord:
        return cls(
            session_id=d["sessionId"],
            mode=d["mode"],
            score=int(d["score"]),
            hands_played=int(d["handsPlayed"]),
            ssc_level=int(d["sscLevel"]) if d.get("sscLevel") is not None else None,
            time_elapsed=int(d["timeElapsed"]),
            best_hand_name=d.get("bestHand"),
            created_at=d["createdAt"],
        )


def _card_list(cards: list[Card]) -> list[dict]:
    return [c.to_dict() for c in cards]


def _hand_or_none(d: dict | None) -> HandResult | None:
    return HandResult.from_dict(d) if d else None


@dataclass
class GameState:
    """Complete state of one game session (maps to one repository row)."""

    session_id: str
    mode: str | None = None
    score: int = 0
    raw_score: int = 0  # base points before the final-stretch bonus
    level_score: int = 0
    cumulative_score: int = 0
    hands_played: int = 0
    time_elapsed: int = 0
    time_remaining: int = 0
    selected_cards: list[Card] = field(default_factory=list)
    deck: list[Card] = field(default_factory=list)
    used_cards: list[Card] = field(default_factory=list)
    current_hand: HandResult | None = None
    last_hand_points: int = 0
    best_hand: HandResult | None = None
    ssc_level: int = 1
    ssc_phase: str | None = None
    ssc_round: int = 1
    level_goal: int = 0
    unlocked_power_ups: list[str] = field(default_factory=list)
    active_power_ups: list[str] = field(default_factory=list)
    earned_power_ups: list[str] = field(default_factory=list)
    pending_reward: str | None = None
    reward_tier: str | None = None
    inventory_full: bool = False
    is_playing: bool = False
    is_paused: bool = False
    is_game_over: bool = False
    is_level_complete: bool = False
    is_bonus_level: bool = False
    pending_bonus_round: bool = False
    is_bonus_failed: bool = False
    bonus_round_count: int = 0
    point_multiplier: int = 1
    previous_hand: HandResult | None = None
    better_hand_streak: int = 0
    current_multiplier: float = 1.0
    star_rating: int = 0
    time_bonus: int = 0
    leftover_penalty: int = 0
    bonus_time_points: int = 0
    last_pick_at: float | None = None
    revives_used: int = 0
    settings: dict = field(default_factory=dict)
    updated_at: str = ""
    version: int = 1

    @property
    def status(self) -> str:
        if self.is_game_over:
            return STATUS_GAME_OVER
        if not self.is_playing:
            return STATUS_IDLE
        if self.is_paused:
            return STATUS_PAUSED
        if self.is_level_complete:
            return STATUS_LEVEL_COMPLETE
        if self.is_bonus_level:
            return STATUS_BONUS_ROUND
        return STATUS_PLAYING

    def find_in_deck(self, card_id: str) -> Card | None:
        for card in self.deck:
            if card.id == card_id:
                return card
        return None

    def find_selected(self, card_id: str) -> Card | None:
        for card in self.selected_cards:
            if card.id == card_id:
                return card
        return None

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "score": self.score,
            "rawScore": self.raw_score,
            "levelScore": self.level_score,
            "cumulativeScore": self.cumulative_score,
            "handsPlayed": self.hands_played,
            "timeElapsed": self.time_elapsed,
            "timeRemaining": self.time_remaining,
            "selectedCards": _card_list(self.selected_cards),
            "deck": _card_list(self.deck),
            "usedCards": _card_list(self.used_cards),
            "currentHand": self.current_hand.to_dict() if self.current_hand else None,
            "lastHandPoints": self.last_hand_points,
            "bestHand": self.best_hand.to_dict() if self.best_hand else None,
            "sscLevel": self.ssc_level,
            "sscPhase": self.ssc_phase,
            "sscRound": self.ssc_round,
            "levelGoal": self.level_goal,
            "unlockedPowerUps": list(self.unlocked_power_ups),
            "activePowerUps": list(self.active_power_ups),
            "earnedPowerUps": list(self.earned_power_ups),
            "pendingReward": self.pending_reward,
            "rewardTier": self.reward_tier,
            "inventoryFull": self.inventory_full,
            "isPlaying": self.is_playing,
            "isPaused": self.is_paused,
            "isGameOver": self.is_game_over,
            "isLevelComplete": self.is_level_complete,
            "isBonusLevel": self.is_bonus_level,
            "pendingBonusRound": self.pending_bonus_round,
            "isBonusFailed": self.is_bonus_failed,
            "bonusRoundCount": self.bonus_round_count,
            "pointMultiplier": self.point_multiplier,
            "previousHand": self.previous_hand.to_dict() if self.previous_hand else None,
            "betterHandStreak": self.better_hand_streak,
            "currentMultiplier": self.current_multiplier,
            "starRating": self.star_rating,
            "timeBonus": self.time_bonus,
            "leftoverPenalty": self.leftover_penalty,
            "bonusTimePoints": self.bonus_time_points,
            "lastPickAt": self.last_pick_at,
            "revivesUsed": self.revives_used,
            "status": self.status,
            "settings": dict(self.settings),
            "updatedAt": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, d: dict) -> GameState:
        return cls(
            session_id=d["sessionId"],
            mode=d.get("mode"),
            score=d.get("score", 0),
            raw_score=d.get("rawScore", 0),
            level_score=d.get("levelScore", 0),
            cumulative_score=d.get("cumulativeScore", 0),
            hands_played=d.get("handsPlayed", 0),
            time_elapsed=d.get("timeElapsed", 0),
            time_remaining=d.get("timeRemaining", 0),
            selected_cards=[Card.from_dict(c) for c in d.get("selectedCards", [])],
            deck=[Card.from_dict(c) for c in d.get("deck", [])],
            used_cards=[Card.from_dict(c) for c in d.get("usedCards", [])],
            current_hand=_hand_or_none(d.get("currentHand")),
            last_hand_points=d.get("lastHandPoints", 0),
            best_hand=_hand_or_none(d.get("bestHand")),
            ssc_level=d.get("sscLevel", 1),
            ssc_phase=d.get("sscPhase"),
            ssc_round=d.get("sscRound", 1),
            level_goal=d.get("levelGoal", 0),
            unlocked_power_ups=list(d.get("unlockedPowerUps", [])),
            active_power_ups=list(d.get("activePowerUps", [])),
            earned_power_ups=list(d.get("earnedPowerUps", [])),
            pending_reward=d.get("pendingReward"),
            reward_tier=d.get("rewardTier"),
            inventory_full=d.get("inventoryFull", False),
            is_playing=d.get("isPlaying", False),
            is_paused=d.get("isPaused", False),
            is_game_over=d.get("isGameOver", False),
            is_level_complete=d.get("isLevelComplete", False),
            is_bonus_level=d.get("isBonusLevel", False),
            pending_bonus_round=d.get("pendingBonusRound", False),
            is_bonus_failed=d.get("isBonusFailed", False),
            bonus_round_count=d.get("bonusRoundCount", 0),
            point_multiplier=d.get("pointMultiplier", 1),
            previous_hand=_hand_or_none(d.get("previousHand")),
            better_hand_streak=d.get("betterHandStreak", 0),
            current_multiplier=d.get("currentMultiplier", 1.0),
            star_rating=d.get("starRating", 0),
            time_bonus=d.get("timeBonus", 0),
            leftover_penalty=d.get("leftoverPenalty", 0),
            bonus_time_points=d.get("bonusTimePoints", 0),
            last_pick_at=d.get("lastPickAt"),
            revives_used=d.get("revivesUsed", 0),
            settings=dict(d.get("settings", {})),
            updated_at=d.get("updatedAt", ""),
            version=d.get("version", 1),
        )

    @staticmethod
    def new_session_id() -> str:
        return generate_session_id()


def initial_state(session_id: str, settings: dict | None = None) -> GameState:
    """The idle state every session starts from and returns to on reset."""
    return GameState(session_id=session_id, settings=dict(settings or {}))
