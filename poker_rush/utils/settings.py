"""Engine settings for Poker Rush.

Settings are a plain dict stored on every GameState so a session keeps the
rules it was started with. Values come from the environment and can be
overridden per session.
"""

from __future__ import annotations

import os

from poker_rush.utils.constants import (
    DEFAULT_AUTO_SUBMIT_DELAY,
    DEFAULT_PICK_DEBOUNCE,
)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def load_settings(overrides: dict | None = None) -> dict:
    """Build the settings dict for a new session.

    Keys:
      inventory_capacity: max held loot power-ups, None = unlimited
      strict_integrity: raise on deck bookkeeping violations instead of healing
      auto_submit_delay: seconds between the fifth pick and auto-submission
      pick_debounce: minimum seconds between two accepted picks
    """
    settings = {
        "inventory_capacity": _env_int("POKER_RUSH_INVENTORY_CAPACITY"),
        "strict_integrity": _env_bool("POKER_RUSH_STRICT_INTEGRITY", False),
        "auto_submit_delay": _env_float(
            "POKER_RUSH_AUTO_SUBMIT_DELAY", DEFAULT_AUTO_SUBMIT_DELAY
        ),
        "pick_debounce": _env_float("POKER_RUSH_PICK_DEBOUNCE", DEFAULT_PICK_DEBOUNCE),
    }
    if overrides:
        unknown = set(overrides) - set(settings)
        if unknown:
            raise ValueError(f"Unknown settings: {sorted(unknown)}")
        settings.update(overrides)
    return settings
