from __future__ import annotations

import logging

import pygame

from arena_settings.core.models import InputBindings, KeyBinding

logger = logging.getLogger(__name__)


def default_bindings() -> InputBindings:
    return InputBindings(
        left=KeyBinding(primary=pygame.K_a, alternate=pygame.K_LEFT),
        right=KeyBinding(primary=pygame.K_d, alternate=pygame.K_RIGHT),
        up=KeyBinding(primary=pygame.K_w, alternate=pygame.K_UP),
        down=KeyBinding(primary=pygame.K_s, alternate=pygame.K_DOWN),
        jump=KeyBinding(primary=pygame.K_SPACE, alternate=pygame.K_RCTRL),
        fire1=KeyBinding(primary=pygame.K_j, alternate=pygame.K_z),
        fire2=KeyBinding(primary=pygame.K_k, alternate=pygame.K_x),
        use_joystick=False,
    )


def key_label(code: int) -> str:
    name = pygame.key.name(code)
    return name.upper() if name else str(code)


class InputService:
    """Owns the live key bindings that the game loop reads each frame."""

    def __init__(self) -> None:
        self.bindings: InputBindings = default_bindings()

    def default_bindings(self) -> InputBindings:
        return default_bindings()

    def set_bindings(self, bindings: InputBindings) -> None:
        self.bindings = bindings
        logger.info("Input bindings updated (joystick=%s).", bindings.use_joystick)

    def action_for_key(self, code: int) -> str | None:
        for action, binding in self.bindings:
            if isinstance(binding, KeyBinding) and code in (binding.primary, binding.alternate):
                return action
        return None
