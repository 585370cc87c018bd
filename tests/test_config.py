"""Tests for xdtsync.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from xdtsync.config import (
    SyncSettings,
    create_default_settings,
    find_settings_file,
    load_settings,
    write_settings,
)
from xdtsync.exceptions import SettingsError


class TestSyncSettings:
    def test_defaults(self) -> None:
        settings = SyncSettings()
        assert settings.timesheet_folder == "./XDTS"
        assert settings.input_folder == "Input"
        assert settings.output_folder == "Comps"
        assert settings.start_frame == 1

    def test_aliases(self) -> None:
        settings = SyncSettings(inputFolder="Cels", startFrame=0)
        assert settings.input_folder == "Cels"
        assert settings.start_frame == 0

    def test_invalid_start_frame_raises(self) -> None:
        with pytest.raises(ValueError):
            SyncSettings(start_frame=2)

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ValueError):
            SyncSettings(overrides={})

    def test_timesheet_dir_is_relative_to_project(self, tmp_path: Path) -> None:
        settings = SyncSettings(timesheet_folder="sheets")
        assert settings.timesheet_dir(tmp_path) == (tmp_path / "sheets").resolve()


class TestCreateDefaultSettings:
    def test_uses_file_keys(self) -> None:
        settings = create_default_settings()
        assert settings == {
            "timesheetFolder": "./XDTS",
            "inputFolder": "Input",
            "outputFolder": "Comps",
            "startFrame": 1,
        }


class TestFindSettingsFile:
    def test_none_when_absent(self, tmp_path: Path) -> None:
        assert find_settings_file(tmp_path) is None

    def test_finds_json(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.json").write_text("{}")
        assert find_settings_file(tmp_path) == tmp_path / "xdts-sync.json"

    def test_more_than_one_raises(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.yaml").write_text("")
        (tmp_path / "xdts-sync.json").write_text("{}")
        with pytest.raises(SettingsError):
            find_settings_file(tmp_path)


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path) == SyncSettings()

    def test_round_trip(self, tmp_path: Path) -> None:
        data = create_default_settings()
        data["outputFolder"] = "Out"
        write_settings(data, tmp_path / "xdts-sync.yaml")
        settings = load_settings(tmp_path)
        assert settings.output_folder == "Out"

    def test_json_file(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.json").write_text('{"startFrame": 0}')
        assert load_settings(tmp_path).start_frame == 0

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.yml").write_text("")
        assert load_settings(tmp_path) == SyncSettings()

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.yaml").write_text("inputFolder: [unclosed")
        with pytest.raises(SettingsError) as exc_info:
            load_settings(tmp_path)
        assert "Invalid settings file" in str(exc_info.value)

    def test_not_a_mapping_raises(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.yaml").write_text("- a\n- b\n")
        with pytest.raises(SettingsError):
            load_settings(tmp_path)

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.yaml").write_text("startFrame: 5\n")
        with pytest.raises(SettingsError) as exc_info:
            load_settings(tmp_path)
        assert "startFrame" in str(exc_info.value)
