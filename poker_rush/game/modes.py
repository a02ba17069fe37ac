"""Game modes and their per-mode rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from poker_rush.utils.constants import (
    CLASSIC_MAX_HANDS,
    CLASSIC_TIME_LIMIT,
    COUNTDOWN_SECONDS,
    PHASE_CONVEYOR,
    PHASE_FALLING,
)


class GameMode(str, Enum):
    CLASSIC_FC = "classic_fc"  # classic, falling cards
    CLASSIC_CB = "classic_cb"  # classic, conveyor belt
    BLITZ_FC = "blitz_fc"
    BLITZ_CB = "blitz_cb"
    SSC = "ssc"

    @property
    def family(self) -> str:
        return self.value.split("_")[0]


@dataclass(frozen=True)
class ModeConfig:
    """Rules resolved once when a session starts."""

    mode: GameMode
    counts_down: bool
    start_time: int
    time_limit: int | None  # count-up modes end here
    max_hands: int | None
    recycles_cards: bool  # submitted cards go back into the deck
    level_based: bool
    streak_enabled: bool
    final_stretch: bool
    applies_time_bonus: bool
    applies_leftover_penalty: bool
    multiplies_by_hands: bool  # final score = raw score x hands played
    presentation: str | None  # fixed card presentation, None = per level


MODE_CONFIGS: dict[GameMode, ModeConfig] = {
    GameMode.CLASSIC_FC: ModeConfig(
        mode=GameMode.CLASSIC_FC,
        counts_down=False,
        start_time=0,
        time_limit=CLASSIC_TIME_LIMIT,
        max_hands=CLASSIC_MAX_HANDS,
        recycles_cards=False,
        level_based=False,
        streak_enabled=False,
        final_stretch=False,
        applies_time_bonus=True,
        applies_leftover_penalty=True,
        multiplies_by_hands=False,
        presentation=PHASE_FALLING,
    ),
    GameMode.CLASSIC_CB: ModeConfig(
        mode=GameMode.CLASSIC_CB,
        counts_down=False,
        start_time=0,
        time_limit=CLASSIC_TIME_LIMIT,
        max_hands=CLASSIC_MAX_HANDS,
        recycles_cards=False,
        level_based=False,
        streak_enabled=False,
        final_stretch=False,
        applies_time_bonus=True,
        applies_leftover_penalty=False,
        multiplies_by_hands=False,
        presentation=PHASE_CONVEYOR,
    ),
    GameMode.BLITZ_FC: ModeConfig(
        mode=GameMode.BLITZ_FC,
        counts_down=True,
        start_time=COUNTDOWN_SECONDS,
        time_limit=None,
        max_hands=None,
        recycles_cards=True,
        level_based=False,
        streak_enabled=False,
        final_stretch=True,
        applies_time_bonus=False,
        applies_leftover_penalty=False,
        multiplies_by_hands=True,
        presentation=PHASE_FALLING,
    ),
    GameMode.BLITZ_CB: ModeConfig(
        mode=GameMode.BLITZ_CB,
        counts_down=True,
        start_time=COUNTDOWN_SECONDS,
        time_limit=None,
        max_hands=None,
        recycles_cards=True,
        level_based=False,
        streak_enabled=False,
        final_stretch=True,
        applies_time_bonus=False,
        applies_leftover_penalty=False,
        multiplies_by_hands=True,
        presentation=PHASE_CONVEYOR,
    ),
    GameMode.SSC: ModeConfig(
        mode=GameMode.SSC,
        counts_down=True,
        start_time=COUNTDOWN_SECONDS,
        time_limit=None,
        max_hands=None,
        recycles_cards=True,
        level_based=True,
        streak_enabled=True,
        final_stretch=True,
        applies_time_bonus=False,
        applies_leftover_penalty=False,
        multiplies_by_hands=False,
        presentation=None,
    ),
}


def get_mode_config(mode: GameMode | str) -> ModeConfig:
    """Resolve a mode (or its string value) to its rules."""
    return MODE_CONFIGS[GameMode(mode)]
