"""Error taxonomy for Poker Rush.

Pure game functions raise these; GameEngine catches GameError at the
operation boundary and turns it into a failed ActionResult, leaving the
session unchanged.
"""

from __future__ import annotations


class GameError(ValueError):
    code = "GameError"


class InvalidHandSize(GameError):
    code = "InvalidHandSize"

    def __init__(self, size: int) -> None:
        super().__init__(f"A hand needs exactly 5 cards, got {size}")
        self.size = size


class DuplicateCard(GameError):
    code = "DuplicateCard"

    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card {card_id} appears more than once")
        self.card_id = card_id


class InsufficientDeckForPowerUp(GameError):
    code = "InsufficientDeckForPowerUp"

    def __init__(self, power_up_id: str) -> None:
        super().__init__(f"The deck cannot satisfy power-up {power_up_id}")
        self.power_up_id = power_up_id


class InvalidTransition(GameError):
    code = "InvalidTransition"


class UnknownPowerUp(GameError):
    code = "UnknownPowerUp"

    def __init__(self, power_up_id: str) -> None:
        super().__init__(f"Power-up {power_up_id} is not available")
        self.power_up_id = power_up_id


class SessionNotFound(GameError):
    code = "SessionNotFound"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id
