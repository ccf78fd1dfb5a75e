"""
Tests for accessibility settings, ambient detection and style projection.
"""

import json
from unittest.mock import Mock, patch

import pytest

from ablelink.accessibility import (
    AccessibilitySettings,
    AmbientSignals,
    FileKeyValueStore,
    MemoryKeyValueStore,
    RootStyles,
    SettingsStore,
    StyleFlags,
    detect_ambient_signals,
    layout_for,
)
from ablelink.config import SETTINGS_KEY
from ablelink.errors import SettingsPersistFailure
from ablelink.models import DisabilityProfile


class TestLoad:
    """Tests for SettingsStore.load."""

    def test_absent_blob_gives_defaults(self):
        store = SettingsStore(MemoryKeyValueStore())
        assert store.load() == AccessibilitySettings()

    def test_reads_persisted_blob(self):
        kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"highContrast": True, "largeFonts": True})})
        settings = SettingsStore(kv).load()
        assert settings.high_contrast
        assert settings.large_fonts
        assert not settings.reduce_motion

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "42", '"text"'])
    def test_unreadable_blob_fails_soft(self, raw):
        store = SettingsStore(MemoryKeyValueStore({SETTINGS_KEY: raw}))
        assert store.load() == AccessibilitySettings()

    def test_legacy_screen_reader_key(self):
        kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"screenReader": True})})
        store = SettingsStore(kv)
        store.load()
        assert store.narration_enabled
        assert store.is_explicit("screen_reader_narration")

    def test_unknown_keys_ignored(self):
        kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"fontFamily": "serif", "largeFonts": True})})
        assert SettingsStore(kv).load() == AccessibilitySettings(large_fonts=True)

    def test_undecodable_file_fails_soft(self, tmp_path):
        (tmp_path / "accessibility-settings.json").write_bytes(b'{"highContrast": \xff}')
        assert SettingsStore(FileKeyValueStore(tmp_path)).load() == AccessibilitySettings()

    def test_store_read_error_fails_soft(self):
        kv = Mock()
        kv.get.side_effect = RuntimeError("backend offline")
        store = SettingsStore(kv)
        assert store.load() == AccessibilitySettings()
        assert not store.is_explicit("high_contrast")


class TestUpdate:
    """Tests for SettingsStore.update."""

    def test_round_trip_in_fresh_store(self):
        kv = MemoryKeyValueStore()
        SettingsStore(kv).update({"highContrast": True})

        fresh = SettingsStore(kv)
        assert fresh.load().high_contrast

    def test_persists_full_object(self):
        kv = MemoryKeyValueStore()
        SettingsStore(kv).update(large_fonts=True)

        data = json.loads(kv.get(SETTINGS_KEY))
        assert data == {
            "highContrast": False,
            "largeFonts": True,
            "reduceMotion": False,
            "screenReaderNarration": False,
        }

    def test_shallow_merge(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.update(high_contrast=True)
        store.update(large_fonts=True)
        assert store.settings.high_contrast
        assert store.settings.large_fonts

    def test_unknown_setting_raises(self):
        store = SettingsStore(MemoryKeyValueStore())
        with pytest.raises(KeyError):
            store.update(sparkles=True)

    def test_notifies_synchronously(self):
        store = SettingsStore(MemoryKeyValueStore())
        seen = []
        store.subscribe(seen.append)

        store.update(reduce_motion=True)

        assert len(seen) == 1
        assert seen[0].reduce_motion

    def test_unsubscribe(self):
        store = SettingsStore(MemoryKeyValueStore())
        listener = Mock()
        unsubscribe = store.subscribe(listener)
        unsubscribe()

        store.update(large_fonts=True)
        listener.assert_not_called()

    def test_failing_listener_does_not_block_others(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.subscribe(Mock(side_effect=RuntimeError("boom")))
        good = Mock()
        store.subscribe(good)

        store.update(large_fonts=True)
        good.assert_called_once()

    def test_persist_failure_keeps_memory_authoritative(self):
        kv = Mock()
        kv.get.return_value = None
        kv.set.side_effect = SettingsPersistFailure(SETTINGS_KEY, OSError("disk full"))
        store = SettingsStore(kv)
        store.load()

        result = store.update(high_contrast=True)

        assert result.high_contrast
        assert store.settings.high_contrast
        assert isinstance(store.last_persist_error, SettingsPersistFailure)

    def test_persist_error_cleared_on_success(self):
        kv = MemoryKeyValueStore()
        store = SettingsStore(kv)
        store.last_persist_error = SettingsPersistFailure(SETTINGS_KEY)
        store.update(high_contrast=True)
        assert store.last_persist_error is None


class TestDetectAmbient:
    """Tests for ambient preference seeding."""

    def test_seeds_defaults(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.load()
        settings = store.detect_ambient(AmbientSignals(True, True))
        assert settings.high_contrast
        assert settings.reduce_motion

    def test_never_overrides_explicit_prior_update(self):
        kv = MemoryKeyValueStore()
        SettingsStore(kv).update(high_contrast=False)

        fresh = SettingsStore(kv)
        fresh.load()
        fresh.detect_ambient(AmbientSignals(prefers_high_contrast=True))

        assert not fresh.settings.high_contrast

    def test_only_keys_in_blob_are_explicit(self):
        kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"largeFonts": True})})
        store = SettingsStore(kv)
        store.load()
        store.detect_ambient(AmbientSignals(True, True))

        assert store.settings.high_contrast
        assert store.settings.reduce_motion
        assert store.settings.large_fonts

    def test_in_session_update_is_explicit(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.load()
        store.update(reduce_motion=False)
        store.detect_ambient(AmbientSignals(prefers_reduced_motion=True))
        assert not store.settings.reduce_motion

    def test_applies_once(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.load()
        store.detect_ambient(AmbientSignals())
        store.detect_ambient(AmbientSignals(True, True))
        assert not store.settings.high_contrast

    def test_seeding_is_not_persisted(self):
        kv = MemoryKeyValueStore()
        store = SettingsStore(kv)
        store.load()
        store.detect_ambient(AmbientSignals(prefers_high_contrast=True))
        assert kv.get(SETTINGS_KEY) is None

    def test_probes_host_when_no_signals_given(self):
        store = SettingsStore(MemoryKeyValueStore())
        store.load()
        with patch(
            "ablelink.accessibility.settings.detect_ambient_signals",
            return_value=AmbientSignals(prefers_reduced_motion=True),
        ) as probe:
            store.detect_ambient()
        probe.assert_called_once()
        assert store.settings.reduce_motion


class TestAmbientSignals:
    """Tests for the host probes."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ABLELINK_PREFERS_HIGH_CONTRAST", "1")
        monkeypatch.setenv("ABLELINK_PREFERS_REDUCED_MOTION", "no")
        signals = detect_ambient_signals()
        assert signals == AmbientSignals(prefers_high_contrast=True, prefers_reduced_motion=False)

    def test_failed_probe_reports_false(self, monkeypatch):
        monkeypatch.delenv("ABLELINK_PREFERS_HIGH_CONTRAST", raising=False)
        monkeypatch.delenv("ABLELINK_PREFERS_REDUCED_MOTION", raising=False)
        with patch("ablelink.accessibility.ambient._run", return_value=None), \
                patch("ablelink.accessibility.ambient._read_registry", return_value=None):
            assert detect_ambient_signals() == AmbientSignals()


class TestFileKeyValueStore:
    """Tests for the JSON file store."""

    def test_round_trip(self, tmp_path):
        kv = FileKeyValueStore(tmp_path / "state")
        assert kv.get(SETTINGS_KEY) is None

        SettingsStore(kv).update(large_fonts=True)

        assert (tmp_path / "state" / "accessibility-settings.json").exists()
        assert SettingsStore(FileKeyValueStore(tmp_path / "state")).load().large_fonts

    def test_write_failure_raises_persist_failure(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        kv = FileKeyValueStore(blocker)
        with pytest.raises(SettingsPersistFailure):
            kv.set(SETTINGS_KEY, "{}")


class TestStyleProjection:
    """Tests for style flags and layouts."""

    def test_update_projects_root_classes(self):
        root = RootStyles()
        store = SettingsStore(MemoryKeyValueStore(), style_sink=root)
        store.update(high_contrast=True, reduce_motion=True)
        assert root.classes == {"high-contrast", "reduce-motion"}

    def test_load_projects(self):
        root = RootStyles()
        kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"largeFonts": True})})
        SettingsStore(kv, style_sink=root).load()
        assert root.flags == StyleFlags(large_fonts=True)

    def test_ambient_projects(self):
        root = RootStyles()
        store = SettingsStore(MemoryKeyValueStore(), style_sink=root)
        store.load()
        store.detect_ambient(AmbientSignals(prefers_reduced_motion=True))
        assert "reduce-motion" in root.classes

    def test_layout_per_profile(self):
        flags = StyleFlags(high_contrast=True, large_fonts=True)
        layout = layout_for(DisabilityProfile.HEARING, flags)
        assert layout.max_width == "max-w-6xl"
        assert "bg-black" in layout.container_classes
        assert "text-xl" in layout.container_classes
        assert layout.content_classes == "max-w-6xl mx-auto space-y-4 p-4"

    def test_unset_profile_uses_cognitive_layout(self):
        assert layout_for(None, StyleFlags()) == layout_for(DisabilityProfile.COGNITIVE, StyleFlags())
