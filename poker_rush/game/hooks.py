"""Fire-and-forget notification hooks (audio, haptics, theming)."""

from __future__ import annotations

import logging
from typing import Protocol

from poker_rush.game.models import HandCategory

logger = logging.getLogger("pokerrush.hooks")


class GameHooks(Protocol):
    def on_hand_scored(self, category: HandCategory) -> None:
        ...

    def on_card_picked(self) -> None:
        ...


class NullHooks:
    def on_hand_scored(self, category: HandCategory) -> None:
        pass

    def on_card_picked(self) -> None:
        pass


def notify(hooks: GameHooks, name: str, *args) -> None:
    """Call a hook; a failing listener never reaches the game."""
    try:
        getattr(hooks, name)(*args)
    except Exception:
        logger.exception("Hook %s failed", name)
