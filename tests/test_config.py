"""
Tests for environment-driven configuration
"""

import pytest

from config import Config
from exceptions import ConfigurationError


class TestConfig:

    def test_defaults(self, monkeypatch):
        for key in ("TALLY_PORT", "TALLY_ALLOWED_ORIGINS", "TALLY_SEED_SUBJECTS", "TALLY_MAX_ID_LENGTH"):
            monkeypatch.delenv(key, raising=False)

        cfg = Config()

        assert cfg.API_PORT == 8080
        assert cfg.ALLOWED_ORIGINS == ["*"]
        assert cfg.SEED_SUBJECTS == []
        assert cfg.MAX_ID_LENGTH == 128

    def test_lists_parsed(self, monkeypatch):
        monkeypatch.setenv("TALLY_SEED_SUBJECTS", "alice, bob,,carol ")
        monkeypatch.setenv("TALLY_ALLOWED_ORIGINS", "https://a.example,https://b.example")

        cfg = Config()

        assert cfg.SEED_SUBJECTS == ["alice", "bob", "carol"]
        assert cfg.ALLOWED_ORIGINS == ["https://a.example", "https://b.example"]

    @pytest.mark.parametrize("key, value", [
        ("TALLY_PORT", "0"),
        ("TALLY_PORT", "70000"),
        ("TALLY_PORT", "http"),
        ("TALLY_MAX_ID_LENGTH", "0"),
        ("TALLY_MAX_VOTE_LENGTH", "-1"),
        ("TALLY_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, monkeypatch, key, value):
        monkeypatch.setenv(key, value)

        with pytest.raises(ConfigurationError) as exc_info:
            Config()

        assert exc_info.value.config_key == key

    def test_summary(self, monkeypatch):
        monkeypatch.setenv("TALLY_SEED_SUBJECTS", "alice,bob")

        summary = Config().summary()

        assert summary["seed_subjects_count"] == 2
        assert "api_port" in summary

    @pytest.mark.parametrize("seeds", [
        "alice," + "x" * 200,
        "alice,bo\x01b",
    ])
    def test_invalid_seed_subjects(self, monkeypatch, seeds):
        """Seed ids that the store would reject fail at config time"""
        monkeypatch.setenv("TALLY_SEED_SUBJECTS", seeds)

        with pytest.raises(ConfigurationError) as exc_info:
            Config()

        assert exc_info.value.config_key == "TALLY_SEED_SUBJECTS"

    def test_seed_length_follows_max_id_length(self, monkeypatch):
        monkeypatch.setenv("TALLY_MAX_ID_LENGTH", "4")
        monkeypatch.setenv("TALLY_SEED_SUBJECTS", "abcd")

        assert Config().SEED_SUBJECTS == ["abcd"]

        monkeypatch.setenv("TALLY_SEED_SUBJECTS", "abcde")
        with pytest.raises(ConfigurationError):
            Config()
