from __future__ import annotations

from pydantic import ValidationError

from .document import Document, DocumentParseError, FieldTypeError
from .models import ACTIONS, GameSettings, InputBindings, KeyBinding, PlayerColor

SETTINGS_SECTION = "Settings"
CONTROLS_SECTION = "Controls"

CONTROLS_COMMENT = "Controls value corresponds to the pygame key code. {Main Key, Alt Key}"

CONTROL_FIELDS: dict[str, str] = {
    "left": "Left",
    "right": "Right",
    "up": "Up",
    "down": "Down",
    "jump": "Jump",
    "fire1": "Fire1",
    "fire2": "Fire2",
}
JOYSTICK_FIELD = "UseJoystick"


def _validation_failure(section: str, exc: ValidationError) -> DocumentParseError:
    problems = []
    for issue in exc.errors():
        loc = ".".join(str(part) for part in issue.get("loc", [])) or "(root)"
        problems.append(f"{loc}: {issue.get('msg', 'invalid value')}")
    return DocumentParseError(f"Invalid [{section}] values: " + "; ".join(problems))


def read_player_identity(doc: Document) -> tuple[PlayerColor, str]:
    channels = doc.get_float_array(SETTINGS_SECTION, "PlayerColor")
    if len(channels) < 3:
        raise FieldTypeError(SETTINGS_SECTION, "PlayerColor", "3-element float array", f"{len(channels)}-element array")
    name = doc.get_string(SETTINGS_SECTION, "PlayerName")
    try:
        color = PlayerColor(r=channels[0], g=channels[1], b=channels[2])
    except ValidationError as exc:
        raise _validation_failure(SETTINGS_SECTION, exc) from exc
    return color, name


def read_custom_resolution(doc: Document) -> tuple[int, int]:
    return (
        doc.get_int(SETTINGS_SECTION, "ResolutionX"),
        doc.get_int(SETTINGS_SECTION, "ResolutionY"),
    )


def document_to_settings(doc: Document) -> GameSettings:
    s = SETTINGS_SECTION
    resolution_x, resolution_y = read_custom_resolution(doc)
    values = {
        "resolution_x": resolution_x,
        "resolution_y": resolution_y,
        "fullscreen": doc.get_bool(s, "Fullscreen"),
        "fov": doc.get_int(s, "FOV"),
        "mouse_sensitivity_x": doc.get_float(s, "MouseSensitivityX"),
        "mouse_sensitivity_y": doc.get_float(s, "MouseSensitivityY"),
        "music_volume": doc.get_float(s, "MusicVolume"),
        "sfx_volume": doc.get_float(s, "SFXVolume"),
        "crowd_volume": doc.get_float(s, "CrowdVolume"),
        "gfx_preset": doc.get_int(s, "GFXPreset"),
    }
    values["player_color"], values["player_name"] = read_player_identity(doc)
    try:
        return GameSettings(**values)
    except ValidationError as exc:
        raise _validation_failure(s, exc) from exc


def document_to_bindings(doc: Document) -> InputBindings:
    values: dict[str, object] = {}
    for action in ACTIONS:
        field_name = CONTROL_FIELDS[action]
        keys = doc.get_int_array(CONTROLS_SECTION, field_name)
        if len(keys) < 2:
            raise FieldTypeError(CONTROLS_SECTION, field_name, "2-element int array", f"{len(keys)}-element array")
        values[action] = KeyBinding(primary=keys[0], alternate=keys[1])
    values["use_joystick"] = doc.get_bool(CONTROLS_SECTION, JOYSTICK_FIELD)
    return InputBindings(**values)


def player_identity_to_document(doc: Document, settings: GameSettings) -> None:
    doc.set_float_array(SETTINGS_SECTION, "PlayerColor", settings.player_color.as_list())
    doc.set_string(SETTINGS_SECTION, "PlayerName", settings.player_name)


def settings_to_document(doc: Document, settings: GameSettings) -> None:
    s = SETTINGS_SECTION
    doc.set_int(s, "ResolutionX", settings.resolution_x)
    doc.set_int(s, "ResolutionY", settings.resolution_y)
    doc.set_bool(s, "Fullscreen", settings.fullscreen)
    doc.set_int(s, "FOV", settings.fov)
    doc.set_float(s, "MouseSensitivityX", settings.mouse_sensitivity_x)
    doc.set_float(s, "MouseSensitivityY", settings.mouse_sensitivity_y)
    doc.set_float(s, "MusicVolume", settings.music_volume)
    doc.set_float(s, "SFXVolume", settings.sfx_volume)
    doc.set_float(s, "CrowdVolume", settings.crowd_volume)
    doc.set_int(s, "GFXPreset", settings.gfx_preset)
    player_identity_to_document(doc, settings)


def bindings_to_document(doc: Document, bindings: InputBindings) -> None:
    if not doc.get_comment(CONTROLS_SECTION):
        doc.set_comment(CONTROLS_SECTION, CONTROLS_COMMENT)
    for action in ACTIONS:
        doc.set_int_array(CONTROLS_SECTION, CONTROL_FIELDS[action], bindings.binding_for(action).as_list())
    doc.set_bool(CONTROLS_SECTION, JOYSTICK_FIELD, bindings.use_joystick)
