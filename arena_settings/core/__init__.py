"""Settings document, models and the translation between them."""

from .defaults import compute_default_settings, median_preset_index
from .document import (
    Document,
    DocumentIOError,
    DocumentNotFoundError,
    DocumentParseError,
    FieldNotFoundError,
    FieldTypeError,
    SettingsError,
    ValueKind,
)
from .models import ACTIONS, GameSettings, InputBindings, KeyBinding, PlayerColor
from .translator import (
    bindings_to_document,
    document_to_bindings,
    document_to_settings,
    player_identity_to_document,
    settings_to_document,
)

__all__ = [
    "ACTIONS",
    "Document",
    "DocumentIOError",
    "DocumentNotFoundError",
    "DocumentParseError",
    "FieldNotFoundError",
    "FieldTypeError",
    "GameSettings",
    "InputBindings",
    "KeyBinding",
    "PlayerColor",
    "SettingsError",
    "ValueKind",
    "bindings_to_document",
    "compute_default_settings",
    "document_to_bindings",
    "document_to_settings",
    "median_preset_index",
    "player_identity_to_document",
    "settings_to_document",
]
