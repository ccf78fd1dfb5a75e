"""
Tests for configuration defaults and environment overrides.
"""

from pathlib import Path

import pytest

from ablelink.config import DashboardConfig, NarrationConfig, ScoringPolicy


class TestScoringPolicy:

    def test_defaults(self):
        policy = ScoringPolicy()
        assert policy.mood_window_days == 7
        assert policy.mood_scale_max == 5
        assert policy.normalized_weights == (0.5, 0.5)

    def test_weights_normalized(self):
        assert ScoringPolicy(task_weight=2, mood_weight=2).normalized_weights == (0.5, 0.5)
        assert ScoringPolicy(task_weight=1, mood_weight=0).normalized_weights == (1.0, 0.0)


class TestNarrationConfig:

    def test_defaults(self):
        config = NarrationConfig()
        assert config.rate == 0.8
        assert config.pitch == 1.0
        assert config.fragment_pause_s > 0

    @pytest.mark.parametrize("kwargs", [{"rate": 0}, {"fragment_pause_s": -1}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            NarrationConfig(**kwargs)


class TestDashboardConfig:

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ABLELINK_HOME", str(tmp_path))
        monkeypatch.setenv("ABLELINK_SPEECH_BACKEND", "none")

        config = DashboardConfig()

        assert config.storage_dir == tmp_path
        assert config.synthesizer == "none"

    def test_default_storage_dir(self, monkeypatch):
        monkeypatch.delenv("ABLELINK_HOME", raising=False)
        assert DashboardConfig().storage_dir == Path.home() / ".ablelink"

    def test_default_backend_is_auto(self, monkeypatch):
        monkeypatch.delenv("ABLELINK_SPEECH_BACKEND", raising=False)
        assert DashboardConfig().synthesizer == "auto"

    def test_string_storage_dir(self, tmp_path):
        assert DashboardConfig(storage_dir=str(tmp_path)).storage_dir == tmp_path

    def test_invalid_concurrency(self):
        with pytest.raises(ValueError):
            DashboardConfig(max_concurrent_fetches=0)
