"""Game engine for Poker Rush: runs one session's state machine."""

from __future__ import annotations

import functools
import json
import logging
import random
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable

from poker_rush.db.repository import GameRepository, ScoreRepository
from poker_rush.game.deck import (
    create_bonus_friendly_deck,
    new_shuffled_deck,
    remove_cards,
    shuffle_deck,
)
from poker_rush.game.errors import (
    DuplicateCard,
    GameError,
    InsufficientDeckForPowerUp,
    InvalidHandSize,
    InvalidTransition,
    SessionNotFound,
    UnknownPowerUp,
)
from poker_rush.game.evaluator import compare_hands, evaluate_hand
from poker_rush.game.hooks import GameHooks, NullHooks, notify
from poker_rush.game.integrity import heal_session, validate_session_integrity
from poker_rush.game.levels import (
    bonus_round_card_count,
    get_ssc_level_info,
    should_trigger_bonus_round,
)
from poker_rush.game.models import (
    Card,
    GameState,
    HandCategory,
    HandResult,
    ScoreRecord,
    initial_state,
)
from poker_rush.game.modes import GameMode, ModeConfig, get_mode_config
from poker_rush.game.powerups import (
    generate_specific_hand,
    get_power_up,
    select_reward_power_up,
    unlocked_power_ups_for_level,
)
from poker_rush.game.scheduler import Scheduler
from poker_rush.game.scoring import (
    StreakOutcome,
    apply_multipliers,
    apply_streak,
    bonus_round_points,
    calculate_level_goal,
    calculate_star_rating,
    final_stretch_multiplier,
    finalize_blitz_score,
    finalize_classic_score,
    get_reward_tier,
)
from poker_rush.utils.constants import (
    ADD_TIME_SECONDS,
    BONUS_ROUND_SECONDS,
    COUNTDOWN_SECONDS,
    DEFAULT_AUTO_SUBMIT_DELAY,
    DEFAULT_PICK_DEBOUNCE,
    HAND_SIZE,
    MAX_REVIVES,
    POWER_UP_ADD_TIME,
    POWER_UP_RESHUFFLE,
    REVIVE_SECONDS,
    REWARD_REPLAY_LEVEL,
    REWARD_REVIVE,
    STATUS_BONUS_ROUND,
    STATUS_PLAYING,
)
from poker_rush.utils.crypto import create_rng
from poker_rush.utils.rewards import RewardGate, StaticRewardGate
from poker_rush.utils.settings import load_settings

logger = logging.getLogger("pokerrush.engine")

AUTO_SUBMIT_KEY = "auto_submit:{session_id}"
QUIET_EVENTS = {"tick"}


@dataclass
class ActionResult:
    success: bool
    game: GameState | None
    error: str | None = None
    error_code: str | None = None
    events: list[dict] = field(default_factory=list)


class GameEngine:
    """Session state machine. All state lives in GameState / repository.

    Every operation loads the session, applies one transform, checks deck
    bookkeeping, saves and returns an ActionResult. Illegal actions come
    back as failed results with the stored state untouched.
    """

    def __init__(
        self,
        repo: GameRepository,
        score_repo: ScoreRepository | None = None,
        rng: random.Random | None = None,
        hooks: GameHooks | None = None,
        reward_gate: RewardGate | None = None,
        clock: Callable[[], float] | None = None,
        scheduler: Scheduler | None = None,
        settings: dict | None = None,
    ) -> None:
        self._repo = repo
        self._scores = score_repo
        self._rng = rng or create_rng()
        self._hooks = hooks or NullHooks()
        self._reward_gate = reward_gate or StaticRewardGate(granted=False)
        self._clock = clock or time.monotonic
        self._scheduler = scheduler or Scheduler()
        self._settings = settings

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # --- Session lifecycle ---

    def start_game(
        self,
        mode: GameMode | str,
        session_id: str | None = None,
        start_level: int = 1,
        force_bonus: bool = False,
        settings: dict | None = None,
    ) -> ActionResult:
        """Start (or restart) a session in the given mode.

        start_level and force_bonus only apply to SSC: they jump straight to
        a level, or into a bonus round, for practice and debugging.
        """
        session_id = session_id or GameState.new_session_id()
        existing = self._repo.get_game(session_id)
        try:
            config = self._resolve_mode(mode)
            if start_level < 1:
                raise InvalidTransition(f"Start level must be >= 1, got {start_level}")
            if not config.level_based and (force_bonus or start_level != 1):
                raise InvalidTransition(f"Mode {config.mode.value} has no levels")
        except GameError as e:
            return self._rejected(existing, e)

        overrides = dict(self._settings or {})
        overrides.update(settings or {})
        game = initial_state(session_id, load_settings(overrides))
        game.mode = config.mode.value
        game.is_playing = True
        game.time_remaining = config.start_time
        if config.level_based:
            self._setup_level(game, start_level)
            if force_bonus:
                game.is_level_complete = True
                game.pending_bonus_round = True
                self._begin_bonus_round(game)
        else:
            game.ssc_phase = config.presentation
            game.deck = new_shuffled_deck(self._rng)
        if existing is not None:
            game.version = existing.version

        event = self._event(
            game,
            "game_started",
            mode=game.mode,
            level=game.ssc_level if config.level_based else None,
            bonus=game.is_bonus_level,
        )
        return self._commit(game, [event])

    def end_game(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._end_game)

    def reset_game(self, session_id: str) -> ActionResult:
        """Return unconditionally to the idle initial state."""
        existing = self._repo.get_game(session_id)
        game = initial_state(session_id)
        if existing is not None:
            game.version = existing.version
        return self._commit(game, [self._event(game, "game_reset")])

    def pause_game(self, session_id: str) -> ActionResult:
        """Toggle pause. Timers are frozen, not reset."""
        return self._apply(session_id, self._set_paused, None)

    def set_paused(self, session_id: str, paused: bool) -> ActionResult:
        return self._apply(session_id, self._set_paused, paused)

    # --- Card play ---

    def select_card(
        self, session_id: str, card_id: str, now: float | None = None
    ) -> ActionResult:
        return self._apply(
            session_id, self._select_card, card_id, self._clock() if now is None else now
        )

    def deselect_card(self, session_id: str, card_id: str) -> ActionResult:
        return self._apply(session_id, self._deselect_card, card_id)

    def submit_hand(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._submit_hand)

    def reshuffle_unselected(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._reshuffle_unselected)

    # --- Timer ---

    def tick(self, session_id: str, seconds: int = 1) -> ActionResult:
        """Advance the simulation timer by whole seconds."""
        return self._apply(session_id, self._tick, seconds)

    def poll(self, now: float | None = None) -> list[ActionResult]:
        """Fire deferred actions that are due (auto-submit)."""
        return self._scheduler.run_due(self._clock() if now is None else now)

    # --- SSC levels and bonus rounds ---

    def next_level(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._next_level)

    def start_bonus_round(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._start_bonus_round)

    def skip_bonus_round(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._skip_bonus_round)

    def submit_bonus_hand(self, session_id: str, card_ids: list[str]) -> ActionResult:
        return self._apply(session_id, self._submit_bonus_hand, card_ids)

    # --- Power-ups and rewards ---

    def use_power_up(self, session_id: str, power_up_id: str) -> ActionResult:
        return self._apply(session_id, self._use_power_up, power_up_id)

    def claim_reward(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._claim_reward)

    def discard_reward(self, session_id: str) -> ActionResult:
        return self._apply(session_id, self._discard_reward)

    def swap_power_up(self, session_id: str, old_id: str) -> ActionResult:
        return self._apply(session_id, self._swap_power_up, old_id)

    def revive(self, session_id: str) -> ActionResult:
        """Continue a game lost on time after a rewarded ad. Once per game."""
        return self._rewarded(session_id, REWARD_REVIVE, self._check_revive, self._revive)

    def replay_level(self, session_id: str) -> ActionResult:
        """Restart a lost SSC level after a rewarded ad."""
        return self._rewarded(
            session_id, REWARD_REPLAY_LEVEL, self._check_replay, self._replay_level
        )

    # --- Queries ---

    def get_game(self, session_id: str) -> GameState | None:
        return self._repo.get_game(session_id)

    def get_status(self, session_id: str) -> str | None:
        game = self._repo.get_game(session_id)
        return game.status if game else None

    def top_scores(self, mode: GameMode | str, limit: int = 10) -> list[ScoreRecord]:
        if self._scores is None:
            return []
        try:
            config = self._resolve_mode(mode)
        except GameError as e:
            logger.debug("Rejected score query: %s", e)
            return []
        return self._scores.top_scores(config.mode.value, limit)

    # --- Transforms ---

    def _select_card(self, game: GameState, card_id: str, now: float) -> list[dict]:
        self._require_status(game, STATUS_PLAYING, "select a card")
        if len(game.selected_cards) >= HAND_SIZE:
            raise InvalidTransition("Selection is full")
        card = game.find_in_deck(card_id)
        if card is None:
            if game.find_selected(card_id):
                raise DuplicateCard(card_id)
            raise InvalidTransition(f"Card {card_id} is not in the deck")

        debounce = game.settings.get("pick_debounce", DEFAULT_PICK_DEBOUNCE)
        if game.last_pick_at is not None and 0 <= now - game.last_pick_at < debounce:
            raise InvalidTransition("Pick ignored: too soon after the previous pick")

        game.deck.remove(card)
        game.selected_cards.append(card)
        game.used_cards.append(card)
        game.last_pick_at = now

        events = [
            self._event(
                game, "card_selected", card=card.compact(), selected=len(game.selected_cards)
            )
        ]
        events.extend(self._after_selection_change(game, now))
        return events

    def _deselect_card(self, game: GameState, card_id: str) -> list[dict]:
        self._require_status(game, STATUS_PLAYING, "deselect a card")
        card = game.find_selected(card_id)
        if card is None:
            raise InvalidTransition(f"Card {card_id} is not selected")
        game.selected_cards.remove(card)
        self._forget_used(game, [card])
        game.deck.append(card)
        game.current_hand = None
        return [
            self._event(
                game, "card_deselected", card=card.compact(), selected=len(game.selected_cards)
            )
        ]

    def _submit_hand(self, game: GameState) -> list[dict]:
        self._require_status(game, STATUS_PLAYING, "submit a hand")
        if len(game.selected_cards) != HAND_SIZE:
            raise InvalidHandSize(len(game.selected_cards))

        config = get_mode_config(game.mode)
        result = evaluate_hand(game.selected_cards)
        if config.streak_enabled:
            outcome = apply_streak(result, game.previous_hand, game.better_hand_streak)
        else:
            outcome = StreakOutcome(streak=0, multiplier=1.0)
        stretch = final_stretch_multiplier(config.final_stretch, game.time_remaining)
        points = apply_multipliers(result.total_points, outcome.multiplier, stretch)

        game.raw_score += result.total_points if config.multiplies_by_hands else points
        game.score += points
        game.level_score += points
        game.cumulative_score += points
        game.hands_played += 1
        game.last_hand_points = points
        game.current_hand = replace(result, total_points=points)
        game.previous_hand = result
        game.better_hand_streak = outcome.streak
        game.current_multiplier = outcome.multiplier
        self._track_best_hand(game, result)

        submitted = game.selected_cards
        game.selected_cards = []
        if config.recycles_cards:
            game.deck = game.deck + submitted

        events = [
            self._event(
                game,
                "hand_submitted",
                hand=result.name,
                cards=[c.compact() for c in submitted],
                base_points=result.total_points,
                points=points,
                multiplier=outcome.multiplier,
                final_stretch=stretch > 1,
                streak=outcome.streak,
                score=game.score,
            )
        ]

        if config.level_based and game.score >= game.level_goal:
            events.append(self._complete_level(game))
        elif config.max_hands is not None and (
            game.hands_played >= config.max_hands or len(game.deck) < HAND_SIZE
        ):
            events.append(self._finish_game(game, "hands_exhausted"))
        return events

    def _reshuffle_unselected(self, game: GameState) -> list[dict]:
        self._require_status(game, STATUS_PLAYING, "reshuffle")
        game.deck = shuffle_deck(game.deck, self._rng)
        return [self._event(game, "deck_reshuffled", deck_remaining=len(game.deck))]

    def _tick(self, game: GameState, seconds: int) -> list[dict]:
        if seconds < 1:
            raise InvalidTransition(f"A tick must advance at least 1 second, got {seconds}")
        self._require_status(game, (STATUS_PLAYING, STATUS_BONUS_ROUND), "advance the timer")
        config = get_mode_config(game.mode)
        game.time_elapsed += seconds

        if config.counts_down:
            game.time_remaining = max(0, game.time_remaining - seconds)
            if game.time_remaining == 0:
                return [self._expire(game, config)]
        elif config.time_limit is not None and game.time_elapsed >= config.time_limit:
            return [self._finish_game(game, "time_limit")]
        return [
            self._event(
                game,
                "tick",
                seconds=seconds,
                time_remaining=game.time_remaining,
                time_elapsed=game.time_elapsed,
            )
        ]

    def _set_paused(self, game: GameState, paused: bool | None) -> list[dict]:
        if game.is_game_over or not game.is_playing:
            raise InvalidTransition(f"Cannot pause while {game.status}")
        target = (not game.is_paused) if paused is None else paused
        if target == game.is_paused:
            return []
        game.is_paused = target
        return [self._event(game, "paused" if target else "resumed")]

    def _end_game(self, game: GameState) -> list[dict]:
        if game.is_game_over or not game.is_playing:
            raise InvalidTransition(f"Cannot end a game that is {game.status}")
        return [self._finish_game(game, "ended")]

    def _next_level(self, game: GameState) -> list[dict]:
        self._require_level_complete(game)
        if game.pending_bonus_round:
            raise InvalidTransition("Start or skip the bonus round first")
        if game.pending_reward is not None:
            raise InvalidTransition("Claim or discard the reward first")
        self._setup_level(game, game.ssc_level + 1)
        return [
            self._event(
                game,
                "level_started",
                level=game.ssc_level,
                phase=game.ssc_phase,
                goal=game.level_goal,
                power_ups=list(game.active_power_ups),
            )
        ]

    def _start_bonus_round(self, game: GameState) -> list[dict]:
        self._require_level_complete(game)
        if not game.pending_bonus_round:
            raise InvalidTransition("No bonus round pending")
        self._begin_bonus_round(game)
        return [
            self._event(
                game,
                "bonus_round_started",
                round=game.bonus_round_count,
                pool=len(game.deck),
            )
        ]

    def _skip_bonus_round(self, game: GameState) -> list[dict]:
        in_bonus = game.status == STATUS_BONUS_ROUND
        if not in_bonus:
            self._require_level_complete(game)
            if not game.pending_bonus_round:
                raise InvalidTransition("No bonus round to skip")
        game.pending_bonus_round = False
        game.is_bonus_level = False
        game.is_bonus_failed = True
        game.is_level_complete = True
        return [self._event(game, "bonus_round_skipped", in_progress=in_bonus)]

    def _submit_bonus_hand(self, game: GameState, card_ids: list[str]) -> list[dict]:
        self._require_status(game, STATUS_BONUS_ROUND, "submit a bonus hand")
        if len(card_ids) != HAND_SIZE:
            raise InvalidHandSize(len(card_ids))
        cards: list[Card] = []
        for card_id in card_ids:
            if any(c.id == card_id for c in cards):
                raise DuplicateCard(card_id)
            card = game.find_in_deck(card_id)
            if card is None:
                raise InvalidTransition(f"Card {card_id} is not in the bonus pool")
            cards.append(card)

        result = evaluate_hand(cards)
        total, time_points = bonus_round_points(
            result.total_points, game.point_multiplier, game.time_remaining
        )
        game.score += total
        game.raw_score += total
        game.level_score += total
        game.cumulative_score += total
        game.hands_played += 1
        game.last_hand_points = total
        game.bonus_time_points = time_points
        game.current_hand = result
        self._track_best_hand(game, result)
        game.deck = remove_cards(game.deck, cards)
        game.used_cards.extend(cards)

        tier = get_reward_tier(total)
        game.reward_tier = tier
        game.pending_reward = select_reward_power_up(tier, self._rng)
        game.inventory_full = False
        game.is_bonus_level = False
        game.is_level_complete = True

        return [
            self._event(
                game,
                "bonus_hand_submitted",
                hand=result.name,
                points=total,
                time_points=time_points,
                tier=tier,
                reward=game.pending_reward,
            )
        ]

    def _use_power_up(self, game: GameState, power_up_id: str) -> list[dict]:
        power_up = get_power_up(power_up_id)
        if power_up is None or power_up_id not in game.active_power_ups:
            raise UnknownPowerUp(power_up_id)
        self._require_status(game, STATUS_PLAYING, "use a power-up")

        events: list[dict] = []
        granted: list[Card] = []
        if power_up_id == POWER_UP_ADD_TIME:
            game.time_remaining += ADD_TIME_SECONDS
        elif power_up_id == POWER_UP_RESHUFFLE:
            game.deck = shuffle_deck(game.deck, self._rng)
        elif power_up.hand_type is not None:
            granted = generate_specific_hand(power_up.hand_type, game.deck) or []
            if not granted:
                raise InsufficientDeckForPowerUp(power_up_id)
            if len(game.selected_cards) + len(granted) > HAND_SIZE:
                returned = game.selected_cards
                game.selected_cards = []
                self._forget_used(game, returned)
                game.deck.extend(returned)
            game.deck = remove_cards(game.deck, granted)
            game.selected_cards.extend(granted)
            game.used_cards.extend(granted)
        else:
            raise UnknownPowerUp(power_up_id)

        if not power_up.is_reusable:
            game.active_power_ups.remove(power_up_id)

        events.append(
            self._event(
                game,
                "power_up_used",
                power_up=power_up_id,
                granted=[c.compact() for c in granted],
                time_remaining=game.time_remaining,
            )
        )
        if granted:
            events.extend(self._after_selection_change(game, self._clock()))
        return events

    def _claim_reward(self, game: GameState) -> list[dict]:
        reward = self._require_pending_reward(game)
        if reward in game.earned_power_ups:
            game.pending_reward = None
            game.inventory_full = False
            return [self._event(game, "reward_claimed", power_up=reward, duplicate=True)]

        capacity = game.settings.get("inventory_capacity")
        if capacity is not None and len(game.earned_power_ups) >= capacity:
            game.inventory_full = True
            return [
                self._event(
                    game, "inventory_full", power_up=reward, held=list(game.earned_power_ups)
                )
            ]

        self._grant(game, reward)
        return [self._event(game, "reward_claimed", power_up=reward, duplicate=False)]

    def _discard_reward(self, game: GameState) -> list[dict]:
        reward = self._require_pending_reward(game)
        game.pending_reward = None
        game.inventory_full = False
        return [self._event(game, "reward_discarded", power_up=reward)]

    def _swap_power_up(self, game: GameState, old_id: str) -> list[dict]:
        reward = self._require_pending_reward(game)
        if old_id not in game.earned_power_ups:
            raise UnknownPowerUp(old_id)
        game.earned_power_ups.remove(old_id)
        if old_id not in unlocked_power_ups_for_level(game.ssc_level):
            if old_id in game.unlocked_power_ups:
                game.unlocked_power_ups.remove(old_id)
            if old_id in game.active_power_ups:
                game.active_power_ups.remove(old_id)
        self._grant(game, reward)
        return [self._event(game, "power_up_swapped", removed=old_id, added=reward)]

    def _check_revive(self, game: GameState) -> None:
        config = get_mode_config(game.mode) if game.mode else None
        if not game.is_game_over or config is None or not config.counts_down:
            raise InvalidTransition("Only a game lost on time can be revived")
        if game.time_remaining > 0:
            raise InvalidTransition("Only a game lost on time can be revived")
        if game.revives_used >= MAX_REVIVES:
            raise InvalidTransition("No revives left")

    def _revive(self, game: GameState) -> list[dict]:
        config = get_mode_config(game.mode)
        if config.multiplies_by_hands:
            game.score = game.level_score
        game.is_game_over = False
        game.is_paused = False
        game.time_remaining += REVIVE_SECONDS
        game.revives_used += 1
        return [self._event(game, "revived", time_remaining=game.time_remaining)]

    def _check_replay(self, game: GameState) -> None:
        config = get_mode_config(game.mode) if game.mode else None
        if not game.is_game_over or config is None or not config.level_based:
            raise InvalidTransition("Only a lost SSC level can be replayed")
        if game.score >= game.level_goal:
            raise InvalidTransition("Level goal was met; nothing to replay")

    def _replay_level(self, game: GameState) -> list[dict]:
        game.cumulative_score -= game.score
        game.is_game_over = False
        game.is_paused = False
        self._setup_level(game, game.ssc_level)
        return [self._event(game, "level_replayed", level=game.ssc_level)]

    # --- Transition helpers ---

    def _setup_level(self, game: GameState, level: int) -> None:
        info = get_ssc_level_info(level)
        game.ssc_level = level
        game.ssc_phase = info.phase
        game.ssc_round = info.round
        game.level_goal = calculate_level_goal(level)
        game.score = 0
        game.raw_score = 0
        game.level_score = 0
        game.hands_played = 0
        game.time_remaining = COUNTDOWN_SECONDS
        game.time_elapsed = 0
        game.time_bonus = 0
        game.leftover_penalty = 0
        game.bonus_time_points = 0
        game.selected_cards = []
        game.used_cards = []
        game.deck = new_shuffled_deck(self._rng)
        game.current_hand = None
        game.last_hand_points = 0
        game.previous_hand = None
        game.better_hand_streak = 0
        game.current_multiplier = 1.0
        game.star_rating = 0
        game.is_level_complete = False
        game.is_bonus_level = False
        game.is_bonus_failed = False
        game.pending_bonus_round = False
        game.is_playing = True

        unlocked = unlocked_power_ups_for_level(level)
        unlocked.extend(p for p in game.earned_power_ups if p not in unlocked)
        game.unlocked_power_ups = unlocked
        game.active_power_ups = list(unlocked)

    def _begin_bonus_round(self, game: GameState) -> None:
        game.bonus_round_count += 1
        pool = create_bonus_friendly_deck(game.bonus_round_count, self._rng)
        game.deck = pool[: bonus_round_card_count(game.bonus_round_count)]
        game.selected_cards = []
        game.used_cards = []
        game.current_hand = None
        game.score = 0
        game.raw_score = 0
        game.level_score = 0
        game.hands_played = 0
        game.time_remaining = BONUS_ROUND_SECONDS
        game.time_elapsed = 0
        game.bonus_time_points = 0
        game.is_bonus_level = True
        game.is_bonus_failed = False
        game.is_level_complete = False
        game.pending_bonus_round = False

    def _complete_level(self, game: GameState) -> dict:
        game.is_level_complete = True
        game.star_rating = calculate_star_rating(game.score, game.level_goal)
        game.pending_bonus_round = should_trigger_bonus_round(game.ssc_level)
        return self._event(
            game,
            "level_complete",
            level=game.ssc_level,
            score=game.score,
            goal=game.level_goal,
            stars=game.star_rating,
            bonus_round=game.pending_bonus_round,
        )

    def _expire(self, game: GameState, config: ModeConfig) -> dict:
        if game.is_bonus_level:
            game.is_bonus_level = False
            game.is_bonus_failed = True
            game.is_level_complete = True
            return self._event(game, "bonus_round_failed", round=game.bonus_round_count)
        if config.level_based and game.score >= game.level_goal:
            return self._complete_level(game)
        return self._finish_game(game, "time_up")

    def _finish_game(self, game: GameState, reason: str) -> dict:
        config = get_mode_config(game.mode)
        if config.applies_time_bonus:
            final = finalize_classic_score(
                game.raw_score,
                game.time_elapsed,
                game.deck,
                config.applies_leftover_penalty,
            )
            game.score = final.score
            game.time_bonus = final.time_bonus
            game.leftover_penalty = final.leftover_penalty
        elif config.multiplies_by_hands:
            game.score = finalize_blitz_score(game.raw_score, game.hands_played).score
        game.is_game_over = True
        game.is_paused = False
        return self._event(
            game,
            "game_over",
            reason=reason,
            score=self._final_score(game, config),
            hands_played=game.hands_played,
            time_bonus=game.time_bonus,
            leftover_penalty=game.leftover_penalty,
        )

    def _after_selection_change(self, game: GameState, now: float) -> list[dict]:
        if len(game.selected_cards) != HAND_SIZE:
            return []
        game.current_hand = evaluate_hand(game.selected_cards)
        return [self._event(game, "selection_full", hand=game.current_hand.name, at=now)]

    def _grant(self, game: GameState, power_up_id: str) -> None:
        game.earned_power_ups.append(power_up_id)
        if power_up_id not in game.unlocked_power_ups:
            game.unlocked_power_ups.append(power_up_id)
        if power_up_id not in game.active_power_ups:
            game.active_power_ups.append(power_up_id)
        game.pending_reward = None
        game.inventory_full = False

    @staticmethod
    def _track_best_hand(game: GameState, result: HandResult) -> None:
        if game.best_hand is None or compare_hands(result, game.best_hand) > 0:
            game.best_hand = result

    @staticmethod
    def _forget_used(game: GameState, cards: list[Card]) -> None:
        ids = {c.id for c in cards}
        game.used_cards = [c for c in game.used_cards if c.id not in ids]

    @staticmethod
    def _final_score(game: GameState, config: ModeConfig) -> int:
        return game.cumulative_score if config.level_based else game.score

    # --- Validation ---

    @staticmethod
    def _resolve_mode(mode: GameMode | str) -> ModeConfig:
        try:
            return get_mode_config(mode)
        except ValueError:
            raise InvalidTransition(f"Unknown mode: {mode}") from None

    @staticmethod
    def _require_status(game: GameState, allowed: str | tuple[str, ...], action: str) -> None:
        allowed = (allowed,) if isinstance(allowed, str) else allowed
        if game.status not in allowed:
            raise InvalidTransition(f"Cannot {action} while {game.status}")

    @staticmethod
    def _require_level_complete(game: GameState) -> None:
        if game.mode != GameMode.SSC.value:
            raise InvalidTransition("Levels only exist in SSC mode")
        if game.is_game_over or game.is_paused or not game.is_level_complete:
            raise InvalidTransition(f"Level is not complete ({game.status})")

    @staticmethod
    def _require_pending_reward(game: GameState) -> str:
        if game.pending_reward is None:
            raise InvalidTransition("No reward pending")
        return game.pending_reward

    # --- Plumbing ---

    def _apply(self, session_id: str, transform: Callable, *args) -> ActionResult:
        game = self._repo.get_game(session_id)
        if game is None:
            return self._rejected(None, SessionNotFound(session_id))
        try:
            events = transform(game, *args)
        except GameError as e:
            return self._rejected(self._repo.get_game(session_id), e)
        if not events:
            return ActionResult(success=True, game=self._repo.get_game(session_id))
        return self._commit(game, events)

    def _rewarded(
        self,
        session_id: str,
        reason: str,
        check: Callable[[GameState], None],
        transform: Callable[[GameState], list[dict]],
    ) -> ActionResult:
        game = self._repo.get_game(session_id)
        if game is None:
            return self._rejected(None, SessionNotFound(session_id))
        try:
            check(game)
        except GameError as e:
            return self._rejected(game, e)
        if not self._reward_gate.grant_reward(reason, session_id):
            event = self._event(game, "reward_declined", reason=reason)
            logger.info(json.dumps(event))
            return ActionResult(
                success=False, game=game, error="Reward not granted", events=[event]
            )
        return self._apply(session_id, transform)

    def _commit(self, game: GameState, events: list[dict]) -> ActionResult:
        self._check_integrity(game)
        game.updated_at = self._now()
        self._repo.save_game(game)
        game = self._repo.get_game(game.session_id)

        for event in events:
            level = logging.DEBUG if event["event"] in QUIET_EVENTS else logging.INFO
            logger.log(level, json.dumps(event))
        self._after_commit(game, events)
        return ActionResult(success=True, game=game, events=events)

    def _after_commit(self, game: GameState, events: list[dict]) -> None:
        key = AUTO_SUBMIT_KEY.format(session_id=game.session_id)
        if game.status != STATUS_PLAYING or len(game.selected_cards) != HAND_SIZE:
            self._scheduler.cancel(key)

        for event in events:
            name = event["event"]
            if name == "card_selected":
                notify(self._hooks, "on_card_picked")
            elif name in ("hand_submitted", "bonus_hand_submitted"):
                notify(self._hooks, "on_hand_scored", HandCategory.from_label(event["hand"]))
            elif name == "game_over":
                self._publish_score(game)

            if game.status == STATUS_PLAYING and len(game.selected_cards) == HAND_SIZE:
                if name == "selection_full":
                    self._schedule_auto_submit(game, event["at"])
                elif name == "resumed":
                    self._schedule_auto_submit(game, self._clock())

    def _schedule_auto_submit(self, game: GameState, now: float) -> None:
        delay = game.settings.get("auto_submit_delay", DEFAULT_AUTO_SUBMIT_DELAY)
        self._scheduler.call_later(
            now,
            delay,
            AUTO_SUBMIT_KEY.format(session_id=game.session_id),
            functools.partial(self.submit_hand, game.session_id),
        )

    def _publish_score(self, game: GameState) -> None:
        if self._scores is None:
            return
        config = get_mode_config(game.mode)
        record = ScoreRecord(
            session_id=game.session_id,
            mode=game.mode,
            score=self._final_score(game, config),
            hands_played=game.hands_played,
            ssc_level=game.ssc_level if config.level_based else None,
            time_elapsed=game.time_elapsed,
            best_hand_name=game.best_hand.name if game.best_hand else None,
            created_at=self._now(),
        )
        try:
            self._scores.save_score(record)
        except Exception:
            logger.exception("Failed to publish score for %s", game.session_id)

    def _check_integrity(self, game: GameState) -> None:
        errors = validate_session_integrity(game)
        if not errors:
            return
        if game.settings.get("strict_integrity"):
            raise AssertionError("; ".join(errors))
        logger.warning(
            "Healing session %s: %s", game.session_id, "; ".join(errors)
        )
        heal_session(game)

    def _rejected(self, game: GameState | None, error: GameError) -> ActionResult:
        logger.debug("Rejected (%s): %s", error.code, error)
        return ActionResult(success=False, game=game, error=str(error), error_code=error.code)

    @staticmethod
    def _event(game: GameState, name: str, **fields) -> dict:
        return {"event": name, "session_id": game.session_id, **fields}

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
