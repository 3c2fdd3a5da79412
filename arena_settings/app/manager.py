from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from arena_settings.app.services.audio import AudioService
from arena_settings.app.services.display import DisplayService
from arena_settings.app.services.input import InputService
from arena_settings.core.defaults import compute_default_settings
from arena_settings.core.document import Document, DocumentNotFoundError, SettingsError
from arena_settings.core.models import GameSettings, InputBindings, PlayerColor
from arena_settings.core.translator import (
    bindings_to_document,
    document_to_bindings,
    document_to_settings,
    player_identity_to_document,
    read_custom_resolution,
    read_player_identity,
    settings_to_document,
)

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.cfg"


class ManagerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    DEFAULTS_CREATED = "defaults_created"


class SettingsStateError(SettingsError):
    pass


@dataclass(slots=True)
class Collaborators:
    display: DisplayService
    audio: AudioService
    input: InputService
    on_ready: Callable[[], None] | None = None


def _revalidated(settings: GameSettings) -> GameSettings:
    # model_copy(update=...) skips validation.
    return GameSettings.model_validate(settings.model_dump())


class SettingsManager:
    """Loads, applies and persists the settings file.

    Create exactly one per process and hand it to whatever needs settings.
    A manager starts once; calling ``startup()`` again raises
    ``SettingsStateError`` rather than reloading.
    """

    def __init__(self, collaborators: Collaborators, settings_path: Path | str = SETTINGS_FILENAME) -> None:
        self.collaborators = collaborators
        self.settings_path = Path(settings_path)
        self.state = ManagerState.UNINITIALIZED
        self.mouse_sensitivity: tuple[float, float] = (1.0, 1.0)
        self.player_color: PlayerColor | None = None
        self.player_name: str | None = None
        self._document: Document | None = None
        self._settings: GameSettings | None = None

    @property
    def document(self) -> Document:
        self._require_started()
        assert self._document is not None
        return self._document

    def current_settings(self) -> GameSettings:
        self._require_started()
        assert self._settings is not None
        return self._settings.model_copy()

    def custom_resolution(self) -> tuple[int, int]:
        return read_custom_resolution(self.document)

    def _require_started(self) -> None:
        if self.state is ManagerState.UNINITIALIZED:
            raise SettingsStateError("Settings manager has not been started.")

    def _save(self) -> None:
        assert self._document is not None
        self._document.save(self.settings_path)
        logger.info("Saved settings to %s.", self.settings_path)

    def _default_document(self) -> tuple[Document, GameSettings, InputBindings]:
        display = self.collaborators.display
        settings = compute_default_settings(display.current_display_resolution(), display.preset_count())
        bindings = self.collaborators.input.default_bindings()
        doc = Document()
        settings_to_document(doc, settings)
        bindings_to_document(doc, bindings)
        return doc, settings, bindings

    def startup(self) -> ManagerState:
        if self.state is not ManagerState.UNINITIALIZED:
            raise SettingsStateError(f"Settings manager already started ({self.state.value}).")

        try:
            doc = Document.load(self.settings_path)
        except DocumentNotFoundError:
            logger.warning("No config file '%s' found. Making one with defaults.", self.settings_path)
            doc, settings, bindings = self._default_document()
            doc.save(self.settings_path)
            state = ManagerState.DEFAULTS_CREATED
        else:
            settings = document_to_settings(doc)
            bindings = document_to_bindings(doc)
            logger.info("Loaded settings from %s.", self.settings_path)
            state = ManagerState.LOADED

        self._document = doc
        self._apply_options(settings)
        self._apply_player(settings.player_color, settings.player_name)
        self.collaborators.input.set_bindings(bindings)
        self._settings = settings
        self.state = state

        if self.collaborators.on_ready is not None:
            self.collaborators.on_ready()
        return state

    def _apply_options(self, settings: GameSettings) -> None:
        display = self.collaborators.display
        display.set_resolution(settings.resolution_x, settings.resolution_y, settings.fullscreen)
        display.set_quality_preset(settings.gfx_preset)
        display.set_field_of_view(settings.fov)
        self.mouse_sensitivity = (settings.mouse_sensitivity_x, settings.mouse_sensitivity_y)
        self.collaborators.audio.set_music_volume(settings.music_volume)
        # SFX and crowd volume are persisted only; no audio channel consumes them yet.

    def _apply_player(self, color: PlayerColor, name: str) -> None:
        self.player_color = color
        self.player_name = name

    def _persist(self, mutate: Callable[[Document], None]) -> None:
        doc = self.document
        backup = doc.copy()
        try:
            mutate(doc)
            self._save()
        except (SettingsError, ValueError):
            self._document = backup
            raise

    def apply_and_persist_options(self, new_settings: GameSettings) -> GameSettings:
        self._require_started()
        new_settings = _revalidated(new_settings)
        self._apply_options(new_settings)

        color, name = read_player_identity(self.document)
        merged = new_settings.model_copy(update={"player_color": color, "player_name": name})
        self._persist(lambda doc: settings_to_document(doc, merged))
        self._settings = merged
        return merged.model_copy()

    def apply_and_persist_player_identity(self, new_settings: GameSettings) -> GameSettings:
        self._require_started()
        new_settings = _revalidated(new_settings)
        self._persist(lambda doc: player_identity_to_document(doc, new_settings))
        self._apply_player(new_settings.player_color, new_settings.player_name)
        assert self._settings is not None
        self._settings = self._settings.model_copy(
            update={"player_color": new_settings.player_color, "player_name": new_settings.player_name}
        )
        return self._settings.model_copy()

    def persist_bindings(self, bindings: InputBindings) -> None:
        self._persist(lambda doc: bindings_to_document(doc, bindings))

    def reset_to_defaults(self) -> GameSettings:
        self._require_started()
        previous = self._document
        doc, settings, bindings = self._default_document()
        self._document = doc
        try:
            self._save()
        except SettingsError:
            self._document = previous
            raise
        self.collaborators.input.set_bindings(bindings)
        self._apply_options(settings)
        self._apply_player(settings.player_color, settings.player_name)
        self._settings = settings
        logger.info("Settings reset to defaults.")
        return settings.model_copy()
