"""Tests for environment overrides of matching constants."""

from dataclasses import replace

from clipworker.config import MatchingConfig


class TestMatchingConfig:

    def test_defaults(self):
        config = MatchingConfig()
        assert config.auto_match_threshold == 0.95
        assert config.dedup_window_sec == 30
        assert config.max_candidates == 5
        assert config.dedup_within_batch is False

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CLIPWORKER_AUTO_MATCH_THRESHOLD", "0.9")
        monkeypatch.setenv("CLIPWORKER_MAX_CANDIDATES", "3")
        monkeypatch.setenv("CLIPWORKER_DEDUP_WITHIN_BATCH", "yes")
        config = MatchingConfig.from_env()
        assert config.auto_match_threshold == 0.9
        assert config.max_candidates == 3
        assert config.dedup_within_batch is True

    def test_invalid_env_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("CLIPWORKER_DEDUP_WINDOW_SEC", "thirty")
        monkeypatch.setenv("CLIPWORKER_DEDUP_WITHIN_BATCH", "maybe")
        config = MatchingConfig.from_env()
        assert config.dedup_window_sec == 30
        assert config.dedup_within_batch is False

    def test_replace(self):
        assert replace(MatchingConfig(), dedup_window_sec=10).dedup_window_sec == 10
