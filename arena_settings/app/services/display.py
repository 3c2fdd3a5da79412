from __future__ import annotations

import logging
from typing import Protocol

import pygame

logger = logging.getLogger(__name__)

# Ordered from cheapest to most expensive.
QUALITY_PRESETS: tuple[str, ...] = ("Fastest", "Fast", "Simple", "Good", "Beautiful", "Fantastic")
FALLBACK_RESOLUTION = (1280, 720)


class DisplayService(Protocol):
    def set_resolution(self, width: int, height: int, fullscreen: bool) -> None: ...

    def set_quality_preset(self, index: int) -> None: ...

    def set_field_of_view(self, degrees: int) -> None: ...

    def current_display_resolution(self) -> tuple[int, int]: ...

    def preset_count(self) -> int: ...


class PygameDisplay:
    """Display collaborator backed by ``pygame.display``.

    Quality preset and field of view are stored for the renderer to read;
    this layer does not interpret them.
    """

    def __init__(self, presets: tuple[str, ...] = QUALITY_PRESETS) -> None:
        self.presets = presets
        self.quality_preset = len(presets) // 2
        self.field_of_view = 60
        self.surface: pygame.Surface | None = None

    def _ensure_display(self) -> None:
        if not pygame.display.get_init():
            pygame.display.init()

    def set_resolution(self, width: int, height: int, fullscreen: bool) -> None:
        self._ensure_display()
        flags = pygame.FULLSCREEN if fullscreen else 0
        self.surface = pygame.display.set_mode((int(width), int(height)), flags)
        logger.info("Display mode set to %dx%d (fullscreen=%s).", width, height, fullscreen)

    def set_quality_preset(self, index: int) -> None:
        self.quality_preset = max(0, min(len(self.presets) - 1, int(index)))

    def set_field_of_view(self, degrees: int) -> None:
        self.field_of_view = int(degrees)

    def current_display_resolution(self) -> tuple[int, int]:
        try:
            self._ensure_display()
            sizes = pygame.display.get_desktop_sizes()
        except pygame.error:
            logger.warning("No video device available, assuming %dx%d.", *FALLBACK_RESOLUTION)
            return FALLBACK_RESOLUTION
        if sizes:
            width, height = sizes[0]
            return (int(width), int(height))
        info = pygame.display.Info()
        if info.current_w > 0 and info.current_h > 0:
            return (info.current_w, info.current_h)
        return FALLBACK_RESOLUTION

    def preset_count(self) -> int:
        return len(self.presets)

    def preset_name(self, index: int) -> str:
        return self.presets[index]


class HeadlessDisplay(PygameDisplay):
    """Records display changes without opening a window."""

    def __init__(self, resolution: tuple[int, int] | None = None, presets: tuple[str, ...] = QUALITY_PRESETS) -> None:
        super().__init__(presets)
        self._resolution = resolution
        self.mode: tuple[int, int, bool] | None = None

    def set_resolution(self, width: int, height: int, fullscreen: bool) -> None:
        self.mode = (int(width), int(height), bool(fullscreen))

    def current_display_resolution(self) -> tuple[int, int]:
        if self._resolution is not None:
            return self._resolution
        return super().current_display_resolution()
