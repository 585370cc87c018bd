"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from xdtsync.host import HostProject, save_project

XDTS_HEADER = "exchangeDigitalTimeSheet Save Data"
NULL_CELL = "SYMBOL_NULL_CELL"


def _make_track(events: list[tuple[int, Any]]) -> dict[str, Any]:
    return {
        "frames": [
            {
                "frame": frame,
                "data": [
                    {"id": 0, "values": [value]},
                    {"id": 5, "values": ["memo"]},
                ],
            }
            for frame, value in events
        ]
    }


def _make_payload(
    names: list[str],
    tracks: list[list[tuple[int, Any]]],
    duration: int = 48,
) -> dict[str, Any]:
    return {
        "version": 5,
        "header": {"cut": "1", "scene": "1"},
        "timeTables": [
            {
                "name": "sheet1",
                "duration": duration,
                "timeTableHeaders": [
                    {"fieldId": 5, "names": ["Camera"]},
                    {"fieldId": 0, "names": names},
                ],
                "fields": [
                    {"fieldId": 0, "tracks": [_make_track(t) for t in tracks]},
                    {"fieldId": 5, "tracks": [_make_track([(0, "1")])]},
                ],
            }
        ],
    }


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Return a factory for XDTS payloads: column names and (frame, value) tracks."""
    return _make_payload


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Three columns: A starts at frame 0, B starts late, C is empty."""
    return _make_payload(
        ["A", "B", "C"],
        [
            [(0, "1"), (12, NULL_CELL), (24, "3")],
            [(6, "1")],
            [],
        ],
        duration=48,
    )


@pytest.fixture
def write_xdts() -> Callable[[Path, dict[str, Any]], Path]:
    """Return a helper writing a payload as an XDTS file."""

    def write(path: Path, payload: dict[str, Any]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{XDTS_HEADER}\n{json.dumps(payload)}", encoding="utf-8")
        return path

    return write


@pytest.fixture
def sample_project() -> HostProject:
    """A project with one sync folder holding cels for columns A and B."""
    project = HostProject("test")
    root = project.add_folder("[scene.xdts]")
    inputs = project.add_folder("Input", parent=root)
    project.add_footage("A", 1920, 1080, parent=inputs, frame_rate=24.0, duration=1 / 24)
    project.add_footage("B", 1280, 720, parent=inputs, frame_rate=12.0, pixel_aspect=0.9)
    project.add_footage("Background", 1920, 1080)
    return project


@pytest.fixture
def tmp_sync_project(
    tmp_path: Path,
    sample_payload: dict[str, Any],
    sample_project: HostProject,
    write_xdts: Callable[[Path, dict[str, Any]], Path],
) -> Path:
    """Create a project directory with an XDTS folder and a project document.

    Returns:
        Path to the project document
    """
    project_dir = tmp_path / "test_project"
    write_xdts(project_dir / "XDTS" / "scene.xdts", sample_payload)
    project_file = project_dir / "project.json"
    save_project(sample_project, project_file)
    return project_file
