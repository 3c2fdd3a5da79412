from __future__ import annotations

from pathlib import Path

import pytest

from arena_settings.core import document
from arena_settings.core.document import (
    Document,
    DocumentIOError,
    DocumentNotFoundError,
    DocumentParseError,
    FieldNotFoundError,
    FieldTypeError,
    ValueKind,
)

SAMPLE = """\
[Settings]
ResolutionX = 1920
Fullscreen = true
MouseSensitivityX = 1.5
PlayerColor = { 1, 0.5, 0 }
PlayerName = "Bob \\"The Blade\\""
Title = Grand Champion

# Controls value corresponds to the pygame key code.
# {Main Key, Alt Key}
[Controls]
Left = { 97, 1073741904 }
Empty = {}
"""


def test_parse_infers_value_kinds() -> None:
    doc = Document.parse(SAMPLE)
    fields = doc.fields("Settings")
    assert fields["ResolutionX"].kind is ValueKind.INT
    assert fields["Fullscreen"].kind is ValueKind.BOOL
    assert fields["MouseSensitivityX"].kind is ValueKind.FLOAT
    assert fields["PlayerColor"].kind is ValueKind.FLOAT_ARRAY
    assert fields["PlayerName"].kind is ValueKind.STRING
    assert doc.get_string("Settings", "PlayerName") == 'Bob "The Blade"'
    assert doc.get_string("Settings", "Title") == "Grand Champion"
    assert doc.get_int_array("Controls", "Left") == [97, 1073741904]
    assert doc.get_int_array("Controls", "Empty") == []


def test_comment_lines_attach_to_following_section() -> None:
    doc = Document.parse(SAMPLE)
    assert doc.get_comment("Settings") is None
    assert doc.get_comment("Controls") == "Controls value corresponds to the pygame key code.\n{Main Key, Alt Key}"


def test_dumps_writes_comment_above_header_and_quotes_strings() -> None:
    doc = Document()
    doc.set_int("Settings", "FOV", 75)
    doc.set_string("Settings", "PlayerName", "Bob")
    doc.set_comment("Controls", "Key codes. {Main Key, Alt Key}")
    doc.set_int_array("Controls", "Jump", [32, 1073742052])
    doc.set_bool("Controls", "UseJoystick", False)

    assert doc.dumps() == (
        "[Settings]\n"
        "FOV = 75\n"
        'PlayerName = "Bob"\n'
        "\n"
        "# Key codes. {Main Key, Alt Key}\n"
        "[Controls]\n"
        "Jump = { 32, 1073742052 }\n"
        "UseJoystick = False\n"
    )


def test_reparse_of_dumped_document_keeps_values() -> None:
    doc = Document.parse(SAMPLE)
    again = Document.parse(doc.dumps())
    assert again.get_float_array("Settings", "PlayerColor") == [1.0, 0.5, 0.0]
    assert again.get_string("Settings", "PlayerName") == 'Bob "The Blade"'
    assert again.get_comment("Controls") == doc.get_comment("Controls")


def test_numeric_looking_names_stay_strings_after_save() -> None:
    doc = Document()
    doc.set_string("Settings", "PlayerName", "1337")
    again = Document.parse(doc.dumps())
    assert again.fields("Settings")["PlayerName"].kind is ValueKind.STRING
    assert again.get_string("Settings", "PlayerName") == "1337"


@pytest.mark.parametrize(
    ("name", "encoded"),
    [
        ("Ann\nLee", '"Ann\\nLee"'),
        ("Ann\r\nLee", '"Ann\\r\\nLee"'),
        ("tab\there", '"tab\\there"'),
        ("para\u2029graph", '"para\\u2029graph"'),
        ("bell\x07", '"bell\\u0007"'),
        ("C:\\games\\", '"C:\\\\games\\\\"'),
    ],
)
def test_strings_with_control_characters_stay_on_one_line(name: str, encoded: str) -> None:
    doc = Document()
    doc.set_string("Settings", "PlayerName", name)

    text = doc.dumps()

    assert text == f"[Settings]\nPlayerName = {encoded}\n"
    assert len(text.splitlines()) == 2
    assert Document.parse(text).get_string("Settings", "PlayerName") == name


def test_non_ascii_strings_are_written_verbatim() -> None:
    doc = Document()
    doc.set_string("Settings", "PlayerName", "Zoë 竜")
    assert 'PlayerName = "Zoë 竜"' in doc.dumps()


@pytest.mark.parametrize("raw", ['"\\u12"', '"\\uzzzz"', '"\\U00110000"'])
def test_malformed_unicode_escape_is_a_parse_error(raw: str) -> None:
    with pytest.raises(DocumentParseError, match="escape"):
        Document.parse(f"[Settings]\nPlayerName = {raw}\n")


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_float_setters_reject_non_finite_numbers(bad: float) -> None:
    doc = Document()
    with pytest.raises(ValueError, match="finite"):
        doc.set_float("Settings", "MouseSensitivityX", bad)
    with pytest.raises(ValueError, match="finite"):
        doc.set_float_array("Settings", "PlayerColor", [1.0, bad, 0.0])
    assert not doc.has_field("Settings", "MouseSensitivityX")
    assert not doc.has_field("Settings", "PlayerColor")


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("[Settings\nFOV = 60\n", "Unterminated section"),
        ("FOV = 60\n", "before any section"),
        ("[Settings]\nFOV 60\n", "Expected 'Key = Value'"),
        ("[Settings]\nFOV = 60\nFOV = 70\n", "Duplicate field"),
        ("[Settings]\nPlayerColor = { 1, 0\n", "unterminated array"),
        ("[Settings]\nPlayerColor = { 1, red, 0 }\n", "not numeric"),
        ('[Settings]\nPlayerName = "Bob\n', "unterminated string"),
        ("[Settings]\n = 4\n", "Empty field name"),
    ],
)
def test_parse_rejects_structurally_invalid_text(text: str, message: str) -> None:
    with pytest.raises(DocumentParseError, match=message):
        Document.parse(text, source="settings.cfg")


def test_parse_error_reports_line_number() -> None:
    with pytest.raises(DocumentParseError) as excinfo:
        Document.parse("[Settings]\nFOV = 60\n[Controls\n", source="settings.cfg")
    assert excinfo.value.line == 3
    assert "settings.cfg:3" in str(excinfo.value)


def test_typed_getters_check_the_value_kind() -> None:
    doc = Document.parse(SAMPLE)
    with pytest.raises(FieldTypeError):
        doc.get_int("Settings", "MouseSensitivityX")
    with pytest.raises(FieldTypeError):
        doc.get_int("Settings", "Fullscreen")
    with pytest.raises(FieldTypeError):
        doc.get_bool("Settings", "ResolutionX")
    with pytest.raises(FieldTypeError):
        doc.get_int_array("Settings", "PlayerColor")
    with pytest.raises(FieldTypeError):
        doc.get_string("Controls", "Left")


def test_integers_widen_to_floats() -> None:
    doc = Document.parse(SAMPLE)
    assert doc.get_float("Settings", "ResolutionX") == 1920.0
    assert doc.get_float_array("Controls", "Left") == [97.0, 1073741904.0]


def test_missing_field_or_section_raises_field_not_found() -> None:
    doc = Document.parse(SAMPLE)
    with pytest.raises(FieldNotFoundError) as excinfo:
        doc.get_int("Settings", "FOV")
    assert excinfo.value.section == "Settings"
    assert excinfo.value.name == "FOV"
    with pytest.raises(FieldNotFoundError):
        doc.get_bool("Audio", "Muted")


def test_setter_creates_section_and_replaces_kind() -> None:
    doc = Document()
    doc.set_int("Settings", "GFXPreset", 2)
    doc.set_float("Settings", "GFXPreset", 2.5)
    assert doc.has_section("Settings")
    assert doc.fields("Settings")["GFXPreset"].kind is ValueKind.FLOAT
    assert doc.sections() == ["Settings"]


def test_copy_is_independent() -> None:
    doc = Document.parse(SAMPLE)
    clone = doc.copy()
    clone.set_int_array("Controls", "Left", [1, 2])
    clone.set_comment("Controls", None)
    assert doc.get_int_array("Controls", "Left") == [97, 1073741904]
    assert doc.get_comment("Controls") is not None


def test_load_missing_file_raises_not_found(tmp_path: Path) -> None:
    missing = tmp_path / "settings.cfg"
    with pytest.raises(DocumentNotFoundError) as excinfo:
        Document.load(missing)
    assert isinstance(excinfo.value, FileNotFoundError)
    assert excinfo.value.path == missing


def test_save_then_load_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.cfg"
    Document.parse(SAMPLE).save(path)
    loaded = Document.load(path)
    assert loaded.get_int("Settings", "ResolutionX") == 1920
    assert [p.name for p in path.parent.iterdir()] == ["settings.cfg"]


def test_failed_save_keeps_previous_file_and_cleans_temp(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    path.write_text("[Settings]\nFOV = 60\n", encoding="utf-8")

    def _fail_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(document.os, "replace", _fail_replace)
    doc = Document()
    doc.set_int("Settings", "FOV", 90)
    with pytest.raises(DocumentIOError, match="No space left on device"):
        doc.save(path)

    assert path.read_text(encoding="utf-8") == "[Settings]\nFOV = 60\n"
    assert [p.name for p in tmp_path.iterdir()] == ["settings.cfg"]
