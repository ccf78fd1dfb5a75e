"""
Ambient Preferences - OS-level accessibility signals.

Probes the host for two read-only preferences: a high-contrast request
and a reduced-motion request. Signals only seed defaults at startup;
they never override a setting the user chose explicitly.

Detection order:
1. Environment overrides (ABLELINK_PREFERS_HIGH_CONTRAST,
   ABLELINK_PREFERS_REDUCED_MOTION)
2. Platform probe (GNOME gsettings, macOS defaults, Windows registry)

Any probe that fails reports False.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AmbientSignals:
    """Host accessibility preferences."""
    prefers_high_contrast: bool = False
    prefers_reduced_motion: bool = False


def detect_ambient_signals() -> AmbientSignals:
    """Probe the host once for ambient accessibility preferences."""
    high_contrast = _env_flag("ABLELINK_PREFERS_HIGH_CONTRAST")
    reduced_motion = _env_flag("ABLELINK_PREFERS_REDUCED_MOTION")

    if high_contrast is None:
        high_contrast = _probe_high_contrast()
    if reduced_motion is None:
        reduced_motion = _probe_reduced_motion()

    signals = AmbientSignals(
        prefers_high_contrast=high_contrast,
        prefers_reduced_motion=reduced_motion,
    )
    logger.debug(f"Ambient signals: {signals}")
    return signals


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in _TRUTHY


def _probe_high_contrast() -> bool:
    if sys.platform == "win32":
        flags = _read_registry(r"Control Panel\Accessibility\HighContrast", "Flags")
        try:
            return bool(int(flags or 0) & 1)
        except ValueError:
            return False

    if sys.platform == "darwin":
        return _run(["defaults", "read", "com.apple.universalaccess", "increaseContrast"]) == "1"

    return _run(
        ["gsettings", "get", "org.gnome.desktop.a11y.interface", "high-contrast"]
    ) == "true"


def _probe_reduced_motion() -> bool:
    if sys.platform == "win32":
        return _read_registry(r"Control Panel\Desktop\WindowMetrics", "MinAnimate") == "0"

    if sys.platform == "darwin":
        return _run(["defaults", "read", "com.apple.universalaccess", "reduceMotion"]) == "1"

    return _run(
        ["gsettings", "get", "org.gnome.desktop.interface", "enable-animations"]
    ) == "false"


def _run(command: list[str]) -> Optional[str]:
    """Run a probe command, returning stripped stdout or None."""
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=1.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip().strip("'")


def _read_registry(path: str, name: str) -> Optional[str]:
    try:
        import winreg
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, path) as key:
            value, _ = winreg.QueryValueEx(key, name)
        return str(value)
    except (ImportError, OSError):
        return None
