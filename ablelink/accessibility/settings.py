"""
Accessibility Settings - Process-wide configuration with persistence.

The SettingsStore is the single owner of the accessibility settings.
Every surface and the narration queue hold a reference to it; every
mutation goes through `update`, which persists and notifies in one
step so memory and storage never drift apart.

Lifecycle:
    store = SettingsStore(FileKeyValueStore(config.storage_dir))
    store.load()            # persisted blob, or all-false defaults
    store.detect_ambient()  # seed from OS preferences, once
    store.update(large_fonts=True)
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, fields, replace, asdict
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ablelink.accessibility.ambient import AmbientSignals, detect_ambient_signals
from ablelink.accessibility.styling import StyleFlags, StyleSink
from ablelink.config import SETTINGS_KEY
from ablelink.errors import SettingsPersistFailure

logger = logging.getLogger(__name__)


# Persisted JSON keys <-> dataclass fields
_JSON_KEYS = {
    "high_contrast": "highContrast",
    "large_fonts": "largeFonts",
    "reduce_motion": "reduceMotion",
    "screen_reader_narration": "screenReaderNarration",
}
_FIELD_NAMES = {json_key: name for name, json_key in _JSON_KEYS.items()}
# Older blobs used "screenReader"
_FIELD_NAMES["screenReader"] = "screen_reader_narration"


@dataclass(frozen=True)
class AccessibilitySettings:
    """Accessibility switches shared by the whole process.

    Attributes:
        high_contrast: High-contrast colour scheme
        large_fonts: Enlarged text
        reduce_motion: Disable animation and transitions
        screen_reader_narration: Narration is audible
    """
    high_contrast: bool = False
    large_fonts: bool = False
    reduce_motion: bool = False
    screen_reader_narration: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {_JSON_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessibilitySettings":
        values = {}
        for key, value in data.items():
            name = _FIELD_NAMES.get(key)
            if name is not None:
                values[name] = bool(value)
        return cls(**values)


def field_name(key: str) -> str:
    """Resolve a snake_case or persisted camelCase key to a field name."""
    if key in _JSON_KEYS:
        return key
    if key in _FIELD_NAMES:
        return _FIELD_NAMES[key]
    raise KeyError(f"Unknown accessibility setting: {key}")


@runtime_checkable
class KeyValueStore(Protocol):
    """String key-value persistence, no transactions."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value. Raises SettingsPersistFailure on failure."""
        ...


class MemoryKeyValueStore:
    """In-process key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore:
    """File-backed key-value store.

    Directory structure:
        ~/.ablelink/
            accessibility-settings.json
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Atomic replace
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            raise SettingsPersistFailure(key, e) from e


SettingsListener = Callable[[AccessibilitySettings], None]


class SettingsStore:
    """Owner of the process-wide accessibility settings.

    Example:
        store = SettingsStore(MemoryKeyValueStore(), style_sink=RootStyles())
        store.load()
        store.detect_ambient()

        unsubscribe = store.subscribe(lambda s: print(s.high_contrast))
        store.update(high_contrast=True)   # persists, then prints True
        unsubscribe()
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = SETTINGS_KEY,
        style_sink: Optional[StyleSink] = None,
    ) -> None:
        self._store = store
        self._key = key
        self._style_sink = style_sink
        self._settings = AccessibilitySettings()
        self._explicit: set[str] = set()
        self._listeners: list[SettingsListener] = []
        self._ambient_applied = False
        self.last_persist_error: Optional[SettingsPersistFailure] = None

    @property
    def settings(self) -> AccessibilitySettings:
        """Current settings snapshot."""
        return self._settings

    @property
    def narration_enabled(self) -> bool:
        return self._settings.screen_reader_narration

    def is_explicit(self, name: str) -> bool:
        """Whether the user has set this field in this or a prior session."""
        return field_name(name) in self._explicit

    def load(self) -> AccessibilitySettings:
        """Read the persisted blob. Never raises; bad data yields defaults."""
        settings = AccessibilitySettings()
        explicit: set[str] = set()

        try:
            raw = self._store.get(self._key)
        except Exception as e:
            logger.warning(f"Could not read accessibility settings: {e}")
            raw = None

        if raw:
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError(f"expected an object, got {type(data).__name__}")
                settings = AccessibilitySettings.from_dict(data)
                explicit = {_FIELD_NAMES[k] for k in data if k in _FIELD_NAMES}
            except ValueError as e:
                logger.warning(f"Ignoring unreadable accessibility settings: {e}")

        self._settings = settings
        self._explicit = explicit
        self._project_styles()
        return settings

    def detect_ambient(self, signals: Optional[AmbientSignals] = None) -> AccessibilitySettings:
        """Seed contrast and motion from OS preferences, once per process.

        A signal applies only when the matching setting is still False and
        was never set explicitly. Ambient seeding is not persisted, so a
        user who never touches the setting keeps following the OS.

        Args:
            signals: Pre-read signals (probes the host if None)
        """
        if self._ambient_applied:
            return self._settings
        self._ambient_applied = True

        if signals is None:
            signals = detect_ambient_signals()

        changes = {}
        if signals.prefers_high_contrast and self._seedable("high_contrast"):
            changes["high_contrast"] = True
        if signals.prefers_reduced_motion and self._seedable("reduce_motion"):
            changes["reduce_motion"] = True

        if changes:
            logger.info(f"Applying ambient accessibility preferences: {sorted(changes)}")
            self._settings = replace(self._settings, **changes)
            self._project_styles()
            self._notify()

        return self._settings

    def _seedable(self, name: str) -> bool:
        return name not in self._explicit and not getattr(self._settings, name)

    def update(
        self,
        partial: Optional[dict[str, bool]] = None,
        **changes: bool,
    ) -> AccessibilitySettings:
        """Shallow-merge fields, persist the full result, notify readers.

        Accepts snake_case field names or the persisted camelCase keys.
        A persist failure is logged and kept in `last_persist_error`; the
        in-memory settings still change.

        Raises:
            KeyError: For an unknown setting name
        """
        merged = {**(partial or {}), **changes}
        resolved = {field_name(k): bool(v) for k, v in merged.items()}

        self._settings = replace(self._settings, **resolved)
        self._explicit.update(resolved)
        self._persist()
        self._project_styles()
        self._notify()
        return self._settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a reader; returns a callable that unsubscribes it."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _persist(self) -> None:
        payload = json.dumps(self._settings.to_dict())
        try:
            self._store.set(self._key, payload)
        except SettingsPersistFailure as e:
            logger.warning(f"Accessibility settings kept in memory only: {e}")
            self.last_persist_error = e
            return
        self.last_persist_error = None
        # A persisted blob carries every key
        self._explicit.update(f.name for f in fields(AccessibilitySettings))

    def _project_styles(self) -> None:
        if self._style_sink is not None:
            self._style_sink.apply_styles(StyleFlags.from_settings(self._settings))

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._settings)
            except Exception as e:
                logger.warning(f"Settings listener {listener!r} failed: {e}")
