from __future__ import annotations

from pathlib import Path
from typing import Optional

import pygame
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from arena_settings.app.manager import SETTINGS_FILENAME, Collaborators, SettingsManager
from arena_settings.app.services.audio import AudioService
from arena_settings.app.services.display import HeadlessDisplay
from arena_settings.app.services.input import InputService, key_label
from arena_settings.core.document import Document, SettingsError, ValueKind
from arena_settings.core.models import ACTIONS, GameSettings, PlayerColor
from arena_settings.core.translator import CONTROLS_SECTION, SETTINGS_SECTION

app = typer.Typer(add_completion=False, help="Inspect and edit the arena settings file.")
console = Console()

PathOption = typer.Option(Path(SETTINGS_FILENAME), "--path", "-p", help="Settings file to operate on.")


def _headless_manager(path: Path, resolution: tuple[int, int] | None = None) -> SettingsManager:
    collaborators = Collaborators(display=HeadlessDisplay(resolution), audio=AudioService(), input=InputService())
    manager = SettingsManager(collaborators, settings_path=path)
    try:
        manager.startup()
    except SettingsError as exc:
        console.print(f"[bold red]Settings load failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    return manager


def _parse_resolution(raw: str) -> tuple[int, int]:
    width, _, height = raw.lower().partition("x")
    try:
        return (int(width), int(height))
    except ValueError as exc:
        console.print(f"[bold red]Invalid resolution '{escape(raw)}', expected WIDTHxHEIGHT.[/bold red]")
        raise typer.Exit(1) from exc


def _parse_key(raw: str) -> int:
    if raw.lstrip("-").isdigit():
        return int(raw)
    try:
        return pygame.key.key_code(raw.lower())
    except ValueError as exc:
        console.print(f"[bold red]Unknown key '{escape(raw)}'.[/bold red]")
        raise typer.Exit(1) from exc


def _persist_options(manager: SettingsManager, updates: dict) -> None:
    current = manager.current_settings()
    try:
        updated = GameSettings.model_validate({**current.model_dump(), **updates})
    except ValidationError as exc:
        console.print(f"[bold red]Invalid setting:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    try:
        manager.apply_and_persist_options(updated)
    except SettingsError as exc:
        console.print(f"[bold red]Save failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


@app.command()
def show(path: Path = PathOption) -> None:
    """Print every field of the settings file."""
    try:
        doc = Document.load(path)
    except SettingsError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(1) from exc

    display = HeadlessDisplay()
    for section_name in doc.sections():
        table = Table(title=escape(f"[{section_name}]"))
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="white")
        table.add_column("Type", style="dim")
        for field_name, value in doc.fields(section_name).items():
            text = value.encode()
            if section_name == CONTROLS_SECTION and value.kind is ValueKind.INT_ARRAY:
                text = f"{text}  ({' / '.join(key_label(code) for code in value.data)})"
            elif section_name == SETTINGS_SECTION and field_name == "GFXPreset" and value.kind is ValueKind.INT:
                if 0 <= value.data < display.preset_count():
                    text = f"{text}  ({display.preset_name(value.data)})"
            table.add_row(field_name, escape(text), value.kind.value)
        comment = doc.get_comment(section_name)
        if comment:
            table.caption = escape(comment)
        console.print(table)


@app.command()
def init(
    path: Path = PathOption,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file with defaults."),
    resolution: Optional[str] = typer.Option(None, "--resolution", help="Default resolution as WIDTHxHEIGHT."),
) -> None:
    """Write a settings file populated with defaults."""
    size = None
    if resolution is not None:
        size = _parse_resolution(resolution)

    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists. Use --force to overwrite.[/yellow]")
        raise typer.Exit(1)
    if path.exists():
        # Replaced without parsing so a malformed file can be recovered.
        path.unlink()
    _headless_manager(path, size)
    console.print(f"[green]Wrote default settings to {path}.[/green]")


@app.command("set-option")
def set_option(
    path: Path = PathOption,
    resolution: Optional[str] = typer.Option(None, "--resolution", help="WIDTHxHEIGHT."),
    fullscreen: Optional[bool] = typer.Option(None, "--fullscreen/--windowed"),
    fov: Optional[int] = typer.Option(None, "--fov", min=1),
    sensitivity_x: Optional[float] = typer.Option(None, "--sensitivity-x"),
    sensitivity_y: Optional[float] = typer.Option(None, "--sensitivity-y"),
    music: Optional[float] = typer.Option(None, "--music"),
    sfx: Optional[float] = typer.Option(None, "--sfx"),
    crowd: Optional[float] = typer.Option(None, "--crowd"),
    preset: Optional[int] = typer.Option(None, "--preset", min=0),
) -> None:
    """Change display, audio or graphics options."""
    updates: dict = {}
    if resolution is not None:
        updates["resolution_x"], updates["resolution_y"] = _parse_resolution(resolution)
    for key, value in (
        ("fullscreen", fullscreen),
        ("fov", fov),
        ("mouse_sensitivity_x", sensitivity_x),
        ("mouse_sensitivity_y", sensitivity_y),
        ("music_volume", music),
        ("sfx_volume", sfx),
        ("crowd_volume", crowd),
        ("gfx_preset", preset),
    ):
        if value is not None:
            updates[key] = value
    if not updates:
        console.print("[yellow]Nothing to change.[/yellow]")
        raise typer.Exit(1)

    manager = _headless_manager(path)
    _persist_options(manager, updates)
    console.print(f"[green]Updated {', '.join(sorted(updates))}.[/green]")


@app.command("set-player")
def set_player(
    path: Path = PathOption,
    name: Optional[str] = typer.Option(None, "--name"),
    color: Optional[str] = typer.Option(None, "--color", help="R,G,B with channels in 0..1."),
) -> None:
    """Change the player's display name or colour."""
    manager = _headless_manager(path)
    current = manager.current_settings()
    updates: dict = {}
    try:
        if name is not None:
            updates["player_name"] = name
        if color is not None:
            channels = [float(part) for part in color.split(",")]
            if len(channels) != 3:
                raise ValueError("expected three comma separated channels")
            updates["player_color"] = PlayerColor(r=channels[0], g=channels[1], b=channels[2])
        updated = GameSettings.model_validate({**current.model_dump(), **updates})
    except ValueError as exc:
        console.print(f"[bold red]Invalid player setting:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    try:
        manager.apply_and_persist_player_identity(updated)
    except SettingsError as exc:
        console.print(f"[bold red]Save failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    console.print(f"[green]Player is now {escape(updated.player_name)} {updated.player_color.as_rgb255()}.[/green]")


@app.command("set-binding")
def set_binding(
    action: str = typer.Argument(..., help=f"One of: {', '.join(ACTIONS)}."),
    primary: str = typer.Argument(..., help="Key name (e.g. 'a', 'space') or pygame key code."),
    alternate: Optional[str] = typer.Argument(None, help="Alternate key; defaults to the current one."),
    path: Path = PathOption,
) -> None:
    """Rebind one action."""
    if action not in ACTIONS:
        console.print(f"[bold red]Unknown action '{escape(action)}'.[/bold red]")
        raise typer.Exit(1)

    manager = _headless_manager(path)
    input_service = manager.collaborators.input
    current = input_service.bindings.binding_for(action)
    primary_code = _parse_key(primary)
    alternate_code = _parse_key(alternate) if alternate is not None else current.alternate
    for code in dict.fromkeys((primary_code, alternate_code)):
        other = input_service.action_for_key(code)
        if other is not None and other != action:
            console.print(f"[yellow]{escape(key_label(code))} is also bound to {other}.[/yellow]")
    bindings = input_service.bindings.with_binding(action, primary_code, alternate_code)

    try:
        manager.persist_bindings(bindings)
    except SettingsError as exc:
        console.print(f"[bold red]Save failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1) from exc
    input_service.set_bindings(bindings)
    console.print(f"[green]{action} bound to {escape(key_label(bindings.binding_for(action).primary))}.[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
