"""Tests for reward gate clients."""

import json

import httpx

from poker_rush.utils.rewards import HttpRewardGate, StaticRewardGate

URL = "https://rewards.example.test/verify"


def gate_with(handler) -> HttpRewardGate:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpRewardGate(url=URL, token="secret", client=client)


class TestStaticRewardGate:
    def test_records_requests(self):
        gate = StaticRewardGate(granted=False)
        assert gate.grant_reward("revive", "s1") is False
        assert gate.requests == [("revive", "s1")]


class TestHttpRewardGate:
    def test_granted(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"granted": True})

        assert gate_with(handler).grant_reward("revive", "s1") is True
        request = seen[0]
        assert request.url == URL
        assert request.headers["Authorization"] == "Bearer secret"
        assert json.loads(request.content) == {"reason": "revive", "sessionId": "s1"}

    def test_declined(self):
        gate = gate_with(lambda r: httpx.Response(200, json={"granted": False}))
        assert gate.grant_reward("replay_level") is False

    def test_server_error_is_no_reward(self):
        gate = gate_with(lambda r: httpx.Response(503, text="down"))
        assert gate.grant_reward("revive") is False

    def test_transport_error_is_no_reward(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        assert gate_with(handler).grant_reward("revive") is False

    def test_malformed_body_is_no_reward(self):
        gate = gate_with(lambda r: httpx.Response(200, text="<html>"))
        assert gate.grant_reward("revive") is False

    def test_non_object_body_is_no_reward(self):
        gate = gate_with(lambda r: httpx.Response(200, json=["granted"]))
        assert gate.grant_reward("revive") is False

    def test_truthy_but_not_true(self):
        gate = gate_with(lambda r: httpx.Response(200, json={"granted": "yes"}))
        assert gate.grant_reward("revive") is False

    def test_missing_url_denies(self, monkeypatch):
        monkeypatch.delenv("REWARD_GATE_URL", raising=False)
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        assert HttpRewardGate(client=client).grant_reward("revive") is False

    def test_closes_own_client(self):
        with HttpRewardGate(url=URL) as gate:
            assert not gate._client.is_closed
        assert gate._client.is_closed

    def test_leaves_injected_client_open(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        HttpRewardGate(url=URL, client=client).close()
        assert not client.is_closed
        client.close()
