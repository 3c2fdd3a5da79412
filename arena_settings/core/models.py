from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ACTIONS: tuple[str, ...] = ("left", "right", "up", "down", "jump", "fire1", "fire2")


class PlayerColor(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    r: float = Field(default=1.0, ge=0.0, le=1.0)
    g: float = Field(default=1.0, ge=0.0, le=1.0)
    b: float = Field(default=1.0, ge=0.0, le=1.0)

    def as_list(self) -> list[float]:
        return [self.r, self.g, self.b]

    def as_rgb255(self) -> tuple[int, int, int]:
        return (round(self.r * 255), round(self.g * 255), round(self.b * 255))


WHITE = PlayerColor(r=1.0, g=1.0, b=1.0)


class GameSettings(BaseModel):
    """Display, audio, graphics and player preferences.

    Instances are frozen; use ``model_copy(update=...)`` to derive a changed copy.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    resolution_x: int = Field(gt=0)
    resolution_y: int = Field(gt=0)
    fullscreen: bool
    fov: int = Field(gt=0)
    mouse_sensitivity_x: float = Field(gt=0.0)
    mouse_sensitivity_y: float = Field(gt=0.0)
    music_volume: float = Field(ge=0.0, le=1.0)
    sfx_volume: float = Field(ge=0.0, le=1.0)
    crowd_volume: float = Field(ge=0.0, le=1.0)
    gfx_preset: int = Field(ge=0)
    player_color: PlayerColor = WHITE
    player_name: str = Field(min_length=1)

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.resolution_x, self.resolution_y)


class KeyBinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: int
    alternate: int

    def as_list(self) -> list[int]:
        return [self.primary, self.alternate]


class InputBindings(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: KeyBinding
    right: KeyBinding
    up: KeyBinding
    down: KeyBinding
    jump: KeyBinding
    fire1: KeyBinding
    fire2: KeyBinding
    use_joystick: bool = False

    def binding_for(self, action: str) -> KeyBinding:
        if action not in ACTIONS:
            raise KeyError(action)
        return getattr(self, action)

    def with_binding(self, action: str, primary: int, alternate: int) -> InputBindings:
        if action not in ACTIONS:
            raise KeyError(action)
        return self.model_copy(update={action: KeyBinding(primary=primary, alternate=alternate)})
