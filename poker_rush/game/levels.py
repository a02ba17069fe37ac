"""SSC level progression: phases, speeds, bonus round cadence."""

from __future__ import annotations

import math
from dataclasses import dataclass

from poker_rush.game.deck import bonus_pool_size
from poker_rush.utils.constants import (
    BONUS_ROUND_INTERVAL,
    LEVELS_PER_PHASE,
    MAX_SPEED_FACTOR,
    ORBIT_START_LEVEL,
    PHASE_CONVEYOR,
    PHASE_FALLING,
    PHASE_ORBIT,
    PHASE_STATIC,
    SPEED_SCALING_START_LEVEL,
)

PRE_ORBIT_ROTATION = [PHASE_STATIC, PHASE_CONVEYOR, PHASE_FALLING]
ORBIT_ROTATION = [PHASE_STATIC, PHASE_CONVEYOR, PHASE_FALLING, PHASE_ORBIT]

BASE_SPEEDS = {
    PHASE_STATIC: 0.0,
    PHASE_CONVEYOR: 1.2,
    PHASE_FALLING: 1.8,
    PHASE_ORBIT: 1.5,
}
# Falling cards are 15% slower during their first appearance (levels 7-9)
FIRST_FALLING_SPEED = 1.53
FIRST_FALLING_LEVELS = range(7, 10)

# Per-level speed growth above the scaling threshold
SPEED_GROWTH = {
    PHASE_CONVEYOR: 0.02,
    PHASE_FALLING: 0.005,
    PHASE_ORBIT: 0.005,
}
OUTER_RING_BOOST = 0.5
DIFFICULTY_STEP = 0.1


@dataclass(frozen=True)
class SSCLevelInfo:
    phase: str
    round: int  # rotation cycle, 1-indexed
    difficulty_multiplier: float


def _check_level(level: int) -> None:
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")


def get_ssc_level_info(level: int) -> SSCLevelInfo:
    """Phase and cycle of a numbered level (bonus rounds are not levels).

    Levels 1-36 rotate static -> conveyor -> falling, three levels each.
    From level 37 the orbit phase joins the rotation.
    """
    _check_level(level)
    if level < ORBIT_START_LEVEL:
        cycle_len = len(PRE_ORBIT_ROTATION) * LEVELS_PER_PHASE
        position = (level - 1) % cycle_len
        phase = PRE_ORBIT_ROTATION[position // LEVELS_PER_PHASE]
        cycle = math.ceil(level / cycle_len)
    else:
        cycle_len = len(ORBIT_ROTATION) * LEVELS_PER_PHASE
        pre_orbit_cycles = (ORBIT_START_LEVEL - 1) // (
            len(PRE_ORBIT_ROTATION) * LEVELS_PER_PHASE
        )
        offset = level - ORBIT_START_LEVEL
        phase = ORBIT_ROTATION[(offset % cycle_len) // LEVELS_PER_PHASE]
        cycle = pre_orbit_cycles + offset // cycle_len + 1
    return SSCLevelInfo(
        phase=phase,
        round=cycle,
        difficulty_multiplier=round(1 + (cycle - 1) * DIFFICULTY_STEP, 4),
    )


def get_ssc_phase(level: int) -> str:
    return get_ssc_level_info(level).phase


def get_ssc_speed(level: int) -> float:
    """Card speed for a level's phase.

    Speeds stay at their base up to level 10 and then grow linearly, never
    beyond MAX_SPEED_FACTOR times the base.
    """
    phase = get_ssc_phase(level)
    if phase == PHASE_STATIC:
        return 0.0
    base = BASE_SPEEDS[phase]
    if phase == PHASE_FALLING and level in FIRST_FALLING_LEVELS:
        base = FIRST_FALLING_SPEED
    if level <= SPEED_SCALING_START_LEVEL:
        return base
    factor = 1 + (level - SPEED_SCALING_START_LEVEL) * SPEED_GROWTH[phase]
    return base * min(factor, MAX_SPEED_FACTOR)


def get_orbit_ring_speed(level: int, ring_index: int, total_rings: int) -> float:
    """Outer rings spin faster, up to 50% above the level speed."""
    if total_rings <= 0:
        raise ValueError("total_rings must be positive")
    return get_ssc_speed(level) * (1 + (ring_index / total_rings) * OUTER_RING_BOOST)


def should_trigger_bonus_round(level_just_completed: int) -> bool:
    return level_just_completed > 0 and level_just_completed % BONUS_ROUND_INTERVAL == 0


def bonus_round_card_count(bonus_round_ordinal: int) -> int:
    return bonus_pool_size(bonus_round_ordinal)
