"""
Style Projection - Settings reflected onto the rendering surface.

A pure projection: three boolean flags become root style classes, and
each disability profile gets a container layout. No state is kept here
beyond what the sink chooses to remember.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from ablelink.models import DisabilityProfile

if TYPE_CHECKING:
    from ablelink.accessibility.settings import AccessibilitySettings


@dataclass(frozen=True)
class StyleFlags:
    """Global style switches derived from accessibility settings."""
    high_contrast: bool = False
    large_fonts: bool = False
    reduce_motion: bool = False

    @classmethod
    def from_settings(cls, settings: "AccessibilitySettings") -> "StyleFlags":
        return cls(
            high_contrast=settings.high_contrast,
            large_fonts=settings.large_fonts,
            reduce_motion=settings.reduce_motion,
        )

    @property
    def css_classes(self) -> frozenset[str]:
        classes = set()
        if self.high_contrast:
            classes.add("high-contrast")
        if self.large_fonts:
            classes.add("large-fonts")
        if self.reduce_motion:
            classes.add("reduce-motion")
        return frozenset(classes)


@runtime_checkable
class StyleSink(Protocol):
    """Receives style flags whenever settings change."""

    def apply_styles(self, flags: StyleFlags) -> None:
        ...


class RootStyles:
    """Style classes on the document root.

    The rendering shell reads `classes` (or `flags`) to keep contrast
    and motion styling globally consistent.

    Example:
        root = RootStyles()
        store = SettingsStore(MemoryKeyValueStore(), style_sink=root)
        store.update(high_contrast=True)
        assert "high-contrast" in root.classes
    """

    def __init__(self) -> None:
        self.flags = StyleFlags()

    def apply_styles(self, flags: StyleFlags) -> None:
        self.flags = flags

    @property
    def classes(self) -> frozenset[str]:
        return self.flags.css_classes


@dataclass(frozen=True)
class LayoutSpec:
    """Container layout for one disability profile."""
    max_width: str
    spacing: str
    padding: str
    background: str
    text_size: str

    @property
    def container_classes(self) -> str:
        return f"min-h-screen {self.background} {self.text_size}"

    @property
    def content_classes(self) -> str:
        return f"{self.max_width} mx-auto {self.spacing} {self.padding}"


_PROFILE_LAYOUTS: dict[DisabilityProfile, tuple[str, str, str]] = {
    DisabilityProfile.COGNITIVE: ("max-w-2xl", "space-y-8", "p-6"),
    DisabilityProfile.VISUAL: ("max-w-4xl", "space-y-6", "p-8"),
    DisabilityProfile.HEARING: ("max-w-6xl", "space-y-4", "p-4"),
    DisabilityProfile.PHYSICAL: ("max-w-3xl", "space-y-12", "p-8"),
}


def layout_for(
    profile: Optional[DisabilityProfile],
    flags: StyleFlags,
) -> LayoutSpec:
    """Layout for a profile; an unset profile gets the cognitive layout."""
    max_width, spacing, padding = _PROFILE_LAYOUTS[profile or DisabilityProfile.COGNITIVE]
    return LayoutSpec(
        max_width=max_width,
        spacing=spacing,
        padding=padding,
        background="bg-black text-white" if flags.high_contrast else "bg-gray-50",
        text_size="text-xl" if flags.large_fonts else "text-base",
    )
