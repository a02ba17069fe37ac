"""Deferred, cancellable engine actions.

The engine never sleeps. Work that must happen "a moment later" (the
auto-submit after the fifth pick) is registered here against a deadline and
fired by the caller's event loop through run_due().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger("pokerrush.scheduler")


@dataclass
class ScheduledCall:
    key: str
    due_at: float
    callback: Callable[[], object]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class Scheduler:
    """One pending call per key; scheduling a key again replaces it."""

    _calls: dict[str, ScheduledCall] = field(default_factory=dict)

    def call_later(
        self, now: float, delay: float, key: str, callback: Callable[[], object]
    ) -> ScheduledCall:
        self.cancel(key)
        call = ScheduledCall(key=key, due_at=now + max(delay, 0.0), callback=callback)
        self._calls[key] = call
        return call

    def cancel(self, key: str) -> bool:
        call = self._calls.pop(key, None)
        if call is None:
            return False
        call.cancel()
        return True

    def pending(self, key: str) -> ScheduledCall | None:
        call = self._calls.get(key)
        if call is None or call.cancelled:
            return None
        return call

    def run_due(self, now: float) -> list[object]:
        """Fire every call whose deadline has passed, earliest first.

        Returns the callbacks' results in firing order.
        """
        due = sorted(
            (c for c in self._calls.values() if c.due_at <= now),
            key=lambda c: c.due_at,
        )
        results = []
        for call in due:
            # a callback may have cancelled a later call
            if self._calls.get(call.key) is not call or call.cancelled:
                continue
            del self._calls[call.key]
            logger.debug("Firing %s", call.key)
            results.append(call.callback())
        return results

    def __len__(self) -> int:
        return len(self._calls)
