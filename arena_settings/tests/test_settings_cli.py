from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from arena_settings.core.document import Document
from arena_settings.core.translator import document_to_bindings, document_to_settings
from arena_settings.tools.settings_cli import app

runner = CliRunner()


def _init(path: Path) -> None:
    result = runner.invoke(app, ["init", "--path", str(path), "--resolution", "1600x900"])
    assert result.exit_code == 0, result.output


def test_init_writes_defaults_and_refuses_to_overwrite(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    settings = document_to_settings(Document.load(path))
    assert settings.resolution == (1600, 900)
    assert settings.gfx_preset == 3
    assert settings.player_name == "Contestant"

    again = runner.invoke(app, ["init", "--path", str(path)])
    assert again.exit_code == 1


def test_init_force_replaces_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    path.write_text("[Settings\n", encoding="utf-8")

    result = runner.invoke(app, ["init", "--path", str(path), "--resolution", "800x600", "--force"])

    assert result.exit_code == 0, result.output
    assert document_to_settings(Document.load(path)).resolution == (800, 600)


def test_show_lists_fields(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["show", "--path", str(path)])

    assert result.exit_code == 0, result.output
    assert "ResolutionX" in result.output
    assert "UseJoystick" in result.output


def test_show_missing_file_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["show", "--path", str(tmp_path / "nope.cfg")])
    assert result.exit_code == 1


def test_set_option_and_player_are_independent(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["set-player", "--path", str(path), "--name", "Bob", "--color", "1,0,0"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["set-option", "--path", str(path), "--fov", "90", "--music", "0.25", "--windowed"])
    assert result.exit_code == 0, result.output

    settings = document_to_settings(Document.load(path))
    assert settings.fov == 90
    assert settings.music_volume == 0.25
    assert settings.fullscreen is False
    assert settings.player_name == "Bob"
    assert settings.player_color.as_list() == [1.0, 0.0, 0.0]


def test_set_option_rejects_out_of_range_volume(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)
    before = path.read_text(encoding="utf-8")

    result = runner.invoke(app, ["set-option", "--path", str(path), "--music", "1.5"])

    assert result.exit_code == 1
    assert path.read_text(encoding="utf-8") == before


def test_set_binding_by_key_code(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["set-binding", "jump", "32", "13", "--path", str(path)])

    assert result.exit_code == 0, result.output
    bindings = document_to_bindings(Document.load(path))
    assert bindings.jump.as_list() == [32, 13]


def test_set_binding_rejects_unknown_action(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)
    result = runner.invoke(app, ["set-binding", "crouch", "32", "--path", str(path)])
    assert result.exit_code == 1


def test_show_names_the_quality_preset(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["show", "--path", str(path)])

    assert result.exit_code == 0, result.output
    assert "(Good)" in result.output


def test_set_binding_warns_about_key_shared_with_another_action(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["set-binding", "jump", "97", "--path", str(path)])

    assert result.exit_code == 0, result.output
    assert "also bound to left" in result.output
    assert document_to_bindings(Document.load(path)).jump.primary == 97


def test_set_option_rejects_infinite_sensitivity(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)
    before = path.read_text(encoding="utf-8")

    result = runner.invoke(app, ["set-option", "--path", str(path), "--sensitivity-x", "inf"])

    assert result.exit_code == 1
    assert path.read_text(encoding="utf-8") == before


def test_set_player_name_with_line_break_keeps_file_loadable(tmp_path: Path) -> None:
    path = tmp_path / "settings.cfg"
    _init(path)

    result = runner.invoke(app, ["set-player", "--path", str(path), "--name", "Ann\nLee"])
    assert result.exit_code == 0, result.output

    assert document_to_settings(Document.load(path)).player_name == "Ann\nLee"
    result = runner.invoke(app, ["set-option", "--path", str(path), "--fov", "80"])
    assert result.exit_code == 0, result.output
