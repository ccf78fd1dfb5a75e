"""
Accessibility settings for AbleLink.

Modules:
    settings    - AccessibilitySettings and the SettingsStore lifecycle
    ambient     - OS-level high-contrast / reduced-motion probes
    styling     - Projection of settings onto root styles and layouts

Example:
    from ablelink.accessibility import SettingsStore, FileKeyValueStore, RootStyles

    root = RootStyles()
    store = SettingsStore(FileKeyValueStore("~/.ablelink"), style_sink=root)
    store.load()
    store.detect_ambient()
"""

from ablelink.accessibility.settings import (
    AccessibilitySettings,
    SettingsStore,
    KeyValueStore,
    MemoryKeyValueStore,
    FileKeyValueStore,
)
from ablelink.accessibility.ambient import (
    AmbientSignals,
    detect_ambient_signals,
)
from ablelink.accessibility.styling import (
    StyleFlags,
    StyleSink,
    RootStyles,
    LayoutSpec,
    layout_for,
)

__all__ = [
    # Settings
    "AccessibilitySettings",
    "SettingsStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    # Ambient
    "AmbientSignals",
    "detect_ambient_signals",
    # Styling
    "StyleFlags",
    "StyleSink",
    "RootStyles",
    "LayoutSpec",
    "layout_for",
]
