"""Rewarded-ad gate clients.

The engine asks a gate whether the player earned a reward (watched an ad)
before reviving or replaying. A declined ad and a broken network look the
same to the game: no reward.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

import httpx

logger = logging.getLogger("pokerrush.rewards")


class RewardGate(Protocol):
    def grant_reward(self, reason: str, session_id: str | None = None) -> bool:
        ...


class StaticRewardGate:
    """Answers every request the same way. Records what was asked."""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.requests: list[tuple[str, str | None]] = []

    def grant_reward(self, reason: str, session_id: str | None = None) -> bool:
        self.requests.append((reason, session_id))
        return self.granted


class HttpRewardGate:
    """Verifies a rewarded ad against a remote endpoint.

    POSTs {"reason", "sessionId"} to REWARD_GATE_URL and expects
    {"granted": true} back.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url or os.environ.get("REWARD_GATE_URL", "")
        self._token = token or os.environ.get("REWARD_GATE_TOKEN", "")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=5.0)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpRewardGate:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def grant_reward(self, reason: str, session_id: str | None = None) -> bool:
        if not self._url:
            logger.warning("No reward gate URL configured, denying %s", reason)
            return False
        payload = {"reason": reason, "sessionId": session_id}
        try:
            data = self._post(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Reward gate request failed for %s: %s", reason, e)
            return False
        return data.get("granted") is True

    def _post(self, payload: dict) -> dict:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        response = self._client.post(self._url, json=payload, headers=headers)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected reward gate response: {data!r}")
        return data
