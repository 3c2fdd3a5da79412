from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pygame
from rich.console import Console
from rich.markup import escape

from arena_settings.app.manager import SETTINGS_FILENAME, Collaborators, ManagerState, SettingsManager
from arena_settings.app.services.audio import AudioService
from arena_settings.app.services.display import PygameDisplay
from arena_settings.app.services.input import InputService
from arena_settings.app.services.logger import configure_logging
from arena_settings.core.document import SettingsError


def resolve_settings_path() -> Path:
    override = os.environ.get("ARENA_SETTINGS_PATH", "").strip()
    return Path(override) if override else Path.cwd() / SETTINGS_FILENAME


def resolve_logs_dir() -> Path:
    override = os.environ.get("ARENA_LOGS_DIR", "").strip()
    return Path(override) if override else Path.cwd() / "logs"


def build_manager(settings_path: Path, on_ready: Callable[[], None] | None = None) -> SettingsManager:
    collaborators = Collaborators(
        display=PygameDisplay(),
        audio=AudioService(),
        input=InputService(),
        on_ready=on_ready,
    )
    return SettingsManager(collaborators, settings_path=settings_path)


def main() -> None:
    console = Console()
    bundle = configure_logging(resolve_logs_dir())
    logger = bundle.app
    settings_path = resolve_settings_path()

    manager = build_manager(settings_path, on_ready=lambda: logger.info("Settings applied, starting intro."))
    try:
        state = manager.startup()
    except SettingsError as exc:
        logger.exception("Failed to load settings.")
        console.print(f"[bold red]Settings file could not be used:[/bold red]\n{escape(str(exc))}")
        console.print(f"Fix or delete {settings_path} and start again. Log: {bundle.latest_log_path}")
        raise SystemExit(1) from exc

    if state is ManagerState.DEFAULTS_CREATED:
        console.print(f"[yellow]Created {settings_path} with default settings.[/yellow]")
    settings = manager.current_settings()
    console.print(
        f"[bold]{settings.player_name}[/bold] ready at {settings.resolution_x}x{settings.resolution_y}"
        f" (fullscreen={settings.fullscreen}, fov={settings.fov})."
    )
    pygame.quit()


if __name__ == "__main__":
    main()
