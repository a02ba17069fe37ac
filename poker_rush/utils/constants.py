"""Game constants for Poker Rush."""

# Suits
HEARTS = "hearts"
DIAMONDS = "diamonds"
CLUBS = "clubs"
SPADES = "spades"
SUITS = [HEARTS, DIAMONDS, CLUBS, SPADES]

# Suit display symbols and compact codes
SUIT_SYMBOLS = {
    HEARTS: "♥",
    DIAMONDS: "♦",
    CLUBS: "♣",
    SPADES: "♠",
}
SUIT_CODES = {
    HEARTS: "h",
    DIAMONDS: "d",
    CLUBS: "c",
    SPADES: "s",
}

# Ranks (display order)
RANKS = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]

# Ace is high (14); the wheel straight treats it as 1
RANK_VALUES = {
    "2": 2,
    "3": 3,
    "4": 4,
    "5": 5,
    "6": 6,
    "7": 7,
    "8": 8,
    "9": 9,
    "10": 10,
    "J": 11,
    "Q": 12,
    "K": 13,
    "A": 14,
}
ACE_HIGH = 14
ACE_LOW = 1
WHEEL_VALUES = [14, 2, 3, 4, 5]
ROYAL_VALUES = [10, 11, 12, 13, 14]

DECK_SIZE = 52
HAND_SIZE = 5

# Scoring
CLASSIC_TIME_BONUS = 1000
CLASSIC_BONUS_WINDOW = 60  # seconds
LEFTOVER_PENALTY_PER_VALUE = 10
BASE_LEVEL_GOAL = 500
LEVEL_GOAL_GROWTH = 1.05
BONUS_TIME_POINTS_PER_SECOND = 10
FINAL_STRETCH_SECONDS = 10
FINAL_STRETCH_MULTIPLIER = 2
STAR_THRESHOLDS = (1.0, 1.25, 1.5)

# Better-hand streak multipliers (index = streak length, last value repeats)
STREAK_MULTIPLIERS = [1.0, 1.2, 1.5, 2.0]

# Reward tiers (bonus round points)
TIER_BRONZE = "bronze"
TIER_SILVER = "silver"
TIER_GOLD = "gold"
REWARD_TIERS = {TIER_BRONZE: 1, TIER_SILVER: 2, TIER_GOLD: 3}
GOLD_THRESHOLD = 1200  # strictly above
SILVER_THRESHOLD = 500

# Timers (seconds)
COUNTDOWN_SECONDS = 60
BONUS_ROUND_SECONDS = 60
CLASSIC_TIME_LIMIT = 600
CLASSIC_MAX_HANDS = 10
ADD_TIME_SECONDS = 15
REVIVE_SECONDS = 15
MAX_REVIVES = 1

# SSC progression
BONUS_ROUND_INTERVAL = 3
LEVELS_PER_PHASE = 3
ORBIT_START_LEVEL = 37
SPEED_SCALING_START_LEVEL = 10
MAX_SPEED_FACTOR = 2.0
BONUS_CARDS_PER_ROUND = 10

# SSC phases
PHASE_STATIC = "static"
PHASE_CONVEYOR = "conveyor"
PHASE_FALLING = "falling"
PHASE_ORBIT = "orbit"

# Session statuses (derived from GameState flags)
STATUS_IDLE = "idle"
STATUS_PLAYING = "playing"
STATUS_PAUSED = "paused"
STATUS_LEVEL_COMPLETE = "level_complete"
STATUS_BONUS_ROUND = "bonus_round"
STATUS_GAME_OVER = "game_over"

# Power-up ids
POWER_UP_ADD_TIME = "add_time"
POWER_UP_RESHUFFLE = "reshuffle"

# Ad-gated actions
REWARD_REVIVE = "revive"
REWARD_REPLAY_LEVEL = "replay_level"

# Input handling defaults
DEFAULT_AUTO_SUBMIT_DELAY = 0.35
DEFAULT_PICK_DEBOUNCE = 0.05
