from __future__ import annotations

from dataclasses import dataclass

import pygame


@dataclass(slots=True)
class AudioService:
    music: float = 0.5

    def set_music_volume(self, value: float) -> None:
        self.music = max(0.0, min(1.0, float(value)))
        if pygame.mixer.get_init():
            pygame.mixer.music.set_volume(self.music)
