"""
xdtsync.io - XDTS reading, JSON read/write helpers, atomic file writes.

Centralized I/O utilities for the load and save steps of a sync run.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from xdtsync.config import SyncSettings
from xdtsync.exceptions import ProjectError, TimesheetFormatError, UnsafeColumnName

XDTS_HEADER = "exchangeDigitalTimeSheet Save Data"
XDTS_SUFFIX = ".xdts"

# Names that generic object materialization in the authoring host treats as
# runtime internals. Kept as a text-level guard ahead of parsing.
RESERVED_TOKENS = ("__proto__", "prototype", "toString", "valueOf")


@dataclass(frozen=True)
class RawTimesheet:
    """An XDTS file that has been read and parsed but not decoded."""

    name: str
    payload: dict[str, Any]


def check_reserved_tokens(text: str, file_name: str) -> None:
    """Reject timesheet text containing any reserved property name.

    Raises:
        UnsafeColumnName: On the first reserved token found
    """
    for token in RESERVED_TOKENS:
        if token in text:
            raise UnsafeColumnName(file_name, token)


def parse_xdts_text(text: str, file_name: str) -> dict[str, Any]:
    """Parse the contents of an XDTS file into its JSON payload.

    The first line must be the XDTS header; the remainder is JSON.

    Args:
        text: Full file contents
        file_name: Display name used in error messages

    Returns:
        Parsed payload dictionary

    Raises:
        TimesheetFormatError: If the header is missing or the body is not JSON
        UnsafeColumnName: If the body contains a reserved token
    """
    check_reserved_tokens(text, file_name)

    header, _, body = text.partition("\n")

    if header.strip() != XDTS_HEADER:
        raise TimesheetFormatError(
            file_name, f"Timesheet `{file_name}` does not start with the XDTS header line."
        )

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise TimesheetFormatError(
            file_name, f"Timesheet `{file_name}` contains invalid JSON: {e}"
        ) from e

    if not isinstance(payload, dict):
        raise TimesheetFormatError(file_name, f"Timesheet `{file_name}` is not a JSON object.")
    return payload


def read_xdts(path: Path) -> RawTimesheet:
    """Read an XDTS file from disk.

    Args:
        path: Path to the .xdts file

    Returns:
        RawTimesheet named after the file
    """
    try:
        text = read_text(path)
    except UnicodeDecodeError as e:
        raise TimesheetFormatError(
            path.name, f"Timesheet `{path.name}` is not valid UTF-8 text: {e}"
        ) from e
    return RawTimesheet(name=path.name, payload=parse_xdts_text(text, path.name))


def find_timesheets(project_dir: Path, settings: SyncSettings) -> list[Path]:
    """List the XDTS files in the project's timesheet folder.

    Raises:
        ProjectError: If the folder is missing or holds no timesheets
    """
    search_dir = settings.timesheet_dir(project_dir)
    if not search_dir.is_dir():
        raise ProjectError(
            "Could not find XDTS folder. Ensure that there is a folder named `XDTS` "
            f"directly adjacent to the project file.\n\nCheck the path `{search_dir}`."
        )

    files = sorted(p for p in search_dir.glob(f"*{XDTS_SUFFIX}") if p.is_file())
    if not files:
        raise ProjectError(
            "There are no XDTS files in the timesheet folder. No processing will occur."
        )
    return files


def read_json(path: Path) -> dict[str, Any]:
    """Read JSON file with UTF-8 encoding.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON data as dictionary

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Write JSON file atomically with pretty formatting.

    Writes to a temp file first, then renames to prevent corruption
    on interruption.

    Args:
        path: Destination path for JSON file
        data: Data to write
        indent: Indentation level for pretty printing (default: 2)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            json.dump(data, tmp, indent=indent, ensure_ascii=False)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def read_text(path: Path) -> str:
    """Read text file with UTF-8 encoding.

    Args:
        path: Path to text file

    Returns:
        File contents as string
    """
    with open(path, encoding="utf-8-sig") as f:
        return f.read()
