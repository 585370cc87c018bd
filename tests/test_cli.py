"""Tests for xdtsync CLI commands."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from xdtsync import __version__
from xdtsync.cli import app
from xdtsync.host import load_project, save_project

runner = CliRunner()


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInitCommand:
    def test_init_creates_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init", str(tmp_path)])
        assert result.exit_code == 0
        content = (tmp_path / "xdts-sync.yaml").read_text()
        assert "inputFolder: Input" in content

    def test_init_fails_if_settings_exist(self, tmp_path: Path) -> None:
        (tmp_path / "xdts-sync.json").write_text("{}")
        result = runner.invoke(app, ["init", str(tmp_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestCheckCommand:
    def test_check_lists_tasks(self, tmp_sync_project: Path) -> None:
        result = runner.invoke(app, ["check", str(tmp_sync_project)])
        assert result.exit_code == 0
        assert "scene.xdts" in result.output
        assert "1 timesheet(s) ready" in result.output

    def test_check_does_not_modify_project(self, tmp_sync_project: Path) -> None:
        before = tmp_sync_project.read_text()
        runner.invoke(app, ["check", str(tmp_sync_project)])
        assert tmp_sync_project.read_text() == before

    def test_check_missing_xdts_folder(self, tmp_path: Path, sample_project) -> None:
        project_file = tmp_path / "project.json"
        save_project(sample_project, project_file)
        result = runner.invoke(app, ["check", str(project_file)])
        assert result.exit_code == 1
        assert "Could not find XDTS folder" in result.output


class TestSyncCommand:
    def test_sync_saves_in_place(self, tmp_sync_project: Path) -> None:
        result = runner.invoke(app, ["sync", str(tmp_sync_project)])
        assert result.exit_code == 0
        assert "Synchronized 2 column(s)" in result.output
        project = load_project(tmp_sync_project)
        assert project.history == ["Synchronize Timesheets"]

    def test_sync_to_output(self, tmp_sync_project: Path, tmp_path: Path) -> None:
        before = tmp_sync_project.read_text()
        output = tmp_path / "synced.json"
        result = runner.invoke(app, ["sync", str(tmp_sync_project), "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert tmp_sync_project.read_text() == before

    def test_sync_dry_run(self, tmp_sync_project: Path) -> None:
        before = tmp_sync_project.read_text()
        result = runner.invoke(app, ["sync", str(tmp_sync_project), "--dry-run"])
        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert tmp_sync_project.read_text() == before

    def test_sync_missing_sync_folder(self, tmp_sync_project: Path) -> None:
        project = load_project(tmp_sync_project)
        project.items[0].name = "[other.xdts]"
        save_project(project, tmp_sync_project)
        before = tmp_sync_project.read_text()

        result = runner.invoke(app, ["sync", str(tmp_sync_project)])
        assert result.exit_code == 1
        assert "Could not find sync folder" in result.output
        assert tmp_sync_project.read_text() == before

    def test_sync_invalid_settings(self, tmp_sync_project: Path) -> None:
        (tmp_sync_project.parent / "xdts-sync.yaml").write_text("startFrame: 3\n")
        result = runner.invoke(app, ["sync", str(tmp_sync_project)])
        assert result.exit_code == 1
        assert "Invalid settings file" in result.output

    def test_sync_non_utf8_timesheet(self, tmp_sync_project: Path) -> None:
        path = tmp_sync_project.parent / "XDTS" / "scene.xdts"
        path.write_bytes(path.read_bytes().replace(b"\"B\"", b"\"\xff\xfe\"", 1))
        before = tmp_sync_project.read_text()

        result = runner.invoke(app, ["sync", str(tmp_sync_project)])
        assert result.exit_code == 1
        assert "scene.xdts" in result.output
        assert "UTF-8" in result.output
        assert tmp_sync_project.read_text() == before


class TestInspectCommand:
    def test_inspect_prints_columns(
        self, tmp_path: Path, sample_payload, write_xdts
    ) -> None:
        path = write_xdts(tmp_path / "scene.xdts", sample_payload)
        result = runner.invoke(app, ["inspect", str(path), "-p", str(tmp_path)])
        assert result.exit_code == 0
        assert "48 frame(s), 3 column(s)" in result.output
        assert "×" in result.output

    def test_inspect_single_column(
        self, tmp_path: Path, sample_payload, write_xdts
    ) -> None:
        path = write_xdts(tmp_path / "scene.xdts", sample_payload)
        result = runner.invoke(app, ["inspect", str(path), "-c", "B", "-s", "0"])
        assert result.exit_code == 0
        assert "00:00:00:06" in result.output

    def test_inspect_unknown_column(
        self, tmp_path: Path, sample_payload, write_xdts
    ) -> None:
        path = write_xdts(tmp_path / "scene.xdts", sample_payload)
        result = runner.invoke(app, ["inspect", str(path), "-c", "Z", "-s", "1"])
        assert result.exit_code == 1
        assert "No column" in result.output

    def test_inspect_rejects_zero_fps(
        self, tmp_path: Path, sample_payload, write_xdts
    ) -> None:
        path = write_xdts(tmp_path / "scene.xdts", sample_payload)
        result = runner.invoke(
            app, ["inspect", str(path), "--fps", "0", "-p", str(tmp_path)]
        )
        assert result.exit_code == 1
        assert "--fps" in result.output

    def test_inspect_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["inspect", str(tmp_path / "none.xdts"), "-s", "1"])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_inspect_unsafe_timesheet(self, tmp_path: Path) -> None:
        path = tmp_path / "evil.xdts"
        path.write_text('exchangeDigitalTimeSheet Save Data\n{"__proto__": 1}')
        result = runner.invoke(app, ["inspect", str(path), "-s", "1"])
        assert result.exit_code == 1
        assert "evil.xdts" in result.output
