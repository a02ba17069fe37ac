"""Tests for settings loading."""

import pytest

from poker_rush.utils.settings import load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "POKER_RUSH_INVENTORY_CAPACITY",
        "POKER_RUSH_STRICT_INTEGRITY",
        "POKER_RUSH_AUTO_SUBMIT_DELAY",
        "POKER_RUSH_PICK_DEBOUNCE",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings() == {
            "inventory_capacity": None,
            "strict_integrity": False,
            "auto_submit_delay": 0.35,
            "pick_debounce": 0.05,
        }

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("POKER_RUSH_INVENTORY_CAPACITY", "3")
        monkeypatch.setenv("POKER_RUSH_STRICT_INTEGRITY", "true")
        monkeypatch.setenv("POKER_RUSH_AUTO_SUBMIT_DELAY", "0.5")
        settings = load_settings()
        assert settings["inventory_capacity"] == 3
        assert settings["strict_integrity"] is True
        assert settings["auto_submit_delay"] == 0.5

    def test_empty_capacity_is_unlimited(self, monkeypatch):
        monkeypatch.setenv("POKER_RUSH_INVENTORY_CAPACITY", "")
        assert load_settings()["inventory_capacity"] is None

    def test_invalid_capacity(self, monkeypatch):
        monkeypatch.setenv("POKER_RUSH_INVENTORY_CAPACITY", "0")
        with pytest.raises(ValueError):
            load_settings()

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("POKER_RUSH_INVENTORY_CAPACITY", "3")
        assert load_settings({"inventory_capacity": None})["inventory_capacity"] is None

    def test_unknown_override(self):
        with pytest.raises(ValueError):
            load_settings({"elimination_score": 101})
