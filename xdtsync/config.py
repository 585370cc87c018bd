"""
xdtsync.config - Settings file loading and validation.

Handles loading xdts-sync.yaml (or .json) from the project directory,
applying defaults, and validating all parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xdtsync.exceptions import SettingsError

SETTINGS_FILE_NAMES = ("xdts-sync.yaml", "xdts-sync.yml", "xdts-sync.json")


class SyncSettings(BaseModel):
    """Resolved settings for a synchronization run."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    timesheet_folder: str = Field(default="./XDTS", alias="timesheetFolder")
    input_folder: str = Field(default="Input", alias="inputFolder", min_length=1)
    output_folder: str = Field(default="Comps", alias="outputFolder", min_length=1)
    start_frame: int = Field(default=1, alias="startFrame")

    @field_validator("start_frame")
    @classmethod
    def validate_start_frame(cls, v: int) -> int:
        if v not in (0, 1):
            raise ValueError("startFrame is not 0 or 1")
        return v

    def timesheet_dir(self, project_dir: Path) -> Path:
        return (project_dir / self.timesheet_folder).resolve()


def find_settings_file(project_dir: Path) -> Path | None:
    """Return the settings file in a project directory, if any."""
    found = [project_dir / name for name in SETTINGS_FILE_NAMES if (project_dir / name).exists()]
    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        raise SettingsError(f"There can only be 1 `xdts-sync` file per project, found: {names}")
    return found[0] if found else None


def load_settings(project_dir: Path) -> SyncSettings:
    """Load and validate settings from a project directory.

    Missing settings file means defaults.
    """
    settings_file = find_settings_file(project_dir)
    if settings_file is None:
        return SyncSettings()

    with open(settings_file, encoding="utf-8") as f:
        try:
            raw_settings = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid settings file:\n{e}") from e

    if not isinstance(raw_settings, dict):
        raise SettingsError("Invalid settings file:\nexpected a mapping of settings")

    try:
        return SyncSettings(**raw_settings)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings file:\n{e}") from e


def create_default_settings() -> dict[str, Any]:
    """Create the default settings mapping for a new project."""
    return SyncSettings().model_dump(by_alias=True)


def write_settings(settings: dict[str, Any], path: Path) -> None:
    """Write settings to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(settings, f, default_flow_style=False, sort_keys=False)
