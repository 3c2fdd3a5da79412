from __future__ import annotations

from .models import WHITE, GameSettings

DEFAULT_FOV = 60
DEFAULT_MOUSE_SENSITIVITY = 1.0
DEFAULT_MUSIC_VOLUME = 0.5
DEFAULT_SFX_VOLUME = 0.7
DEFAULT_CROWD_VOLUME = 0.6
DEFAULT_PLAYER_NAME = "Contestant"


def median_preset_index(preset_count: int) -> int:
    # No "recommended" preset exists, so take the middle of the ordered list.
    if preset_count < 1:
        raise ValueError(f"preset_count must be at least 1, got {preset_count}")
    return preset_count // 2


def compute_default_settings(current_resolution: tuple[int, int], preset_count: int) -> GameSettings:
    width, height = current_resolution
    return GameSettings(
        resolution_x=int(width),
        resolution_y=int(height),
        fullscreen=True,
        fov=DEFAULT_FOV,
        mouse_sensitivity_x=DEFAULT_MOUSE_SENSITIVITY,
        mouse_sensitivity_y=DEFAULT_MOUSE_SENSITIVITY,
        music_volume=DEFAULT_MUSIC_VOLUME,
        sfx_volume=DEFAULT_SFX_VOLUME,
        crowd_volume=DEFAULT_CROWD_VOLUME,
        gfx_preset=median_preset_index(preset_count),
        player_color=WHITE,
        player_name=DEFAULT_PLAYER_NAME,
    )
