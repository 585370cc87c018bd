"""
xdtsync.timesheet.decoder - XDTS payload → Timesheet.

Reads the visible-cel header and field sections of the first time table
and turns every column track into an ordered list of exposure events.
Any malformed input is fatal for the file.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import ValidationError

from xdtsync.exceptions import (
    ColumnCountMismatch,
    DuplicateColumnName,
    MalformedColumnName,
    TimesheetFormatError,
    UnsupportedFrameNotation,
)
from xdtsync.io import RawTimesheet
from xdtsync.timesheet.models import ExposureEvent, Timesheet
from xdtsync.timesheet.schema import (
    CEL_DATA_ID,
    NULL_CELL,
    VISIBLE_FIELD_ID,
    XdtsPayload,
    XdtsTimeTable,
    XdtsTrack,
)

logger = logging.getLogger(__name__)


def extract_column_names(table: XdtsTimeTable, file_name: str) -> list[str]:
    """Return the visible column names in left-to-right order.

    Raises:
        MalformedColumnName: If a name is blank or whitespace-only
        DuplicateColumnName: If two names are equal
    """
    names: list[str] = []
    for header in table.headers:
        if header.field_id == VISIBLE_FIELD_ID:
            names = list(header.names)
            break

    for name in names:
        if not name.strip():
            raise MalformedColumnName(file_name)

    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DuplicateColumnName(file_name, name)
        seen.add(name)

    return names


def coerce_frame_value(raw_value: Any, file_name: str) -> int | None:
    """Convert a raw cel value to a 1-indexed source frame.

    Returns None for the empty-cell sentinel.

    Raises:
        UnsupportedFrameNotation: If the value is not a positive whole number
    """
    if raw_value == NULL_CELL:
        return None
    if isinstance(raw_value, bool) or raw_value is None:
        raise UnsupportedFrameNotation(file_name, raw_value)

    try:
        number = float(raw_value)
    except (TypeError, ValueError) as e:
        raise UnsupportedFrameNotation(file_name, raw_value) from e

    if not math.isfinite(number) or not number.is_integer() or number < 1:
        raise UnsupportedFrameNotation(file_name, raw_value)
    return int(number)


def decode_track(track: XdtsTrack, file_name: str) -> list[ExposureEvent]:
    """Decode one column track into its exposure events, in authored order."""
    events = []
    for block in track.frames:
        for datum in block.data:
            if datum.id != CEL_DATA_ID:
                continue
            raw_value = datum.values[0] if datum.values else None
            value = coerce_frame_value(raw_value, file_name)
            events.append(ExposureEvent(frame=block.frame, value=value))
    return events


def extract_tracks(table: XdtsTimeTable, file_name: str) -> list[list[ExposureEvent]]:
    """Decode every visible column track, skipping camera and other categories."""
    tracks = []
    for entry in table.field_entries:
        if entry.field_id != VISIBLE_FIELD_ID:
            continue
        for track in entry.tracks:
            tracks.append(decode_track(track, file_name))
    return tracks


def load_payload(payload: dict[str, Any], file_name: str) -> XdtsPayload:
    """Validate a raw payload against the XDTS schema.

    Raises:
        TimesheetFormatError: If the payload does not fit the schema
    """
    try:
        return XdtsPayload.model_validate(payload)
    except ValidationError as e:
        raise TimesheetFormatError(
            file_name, f"Timesheet `{file_name}` has an unexpected structure:\n{e}"
        ) from e


def decode_timesheet(payload: dict[str, Any], file_name: str) -> Timesheet:
    """Decode a parsed XDTS payload into a Timesheet.

    Only the first time table is read.

    Args:
        payload: Parsed JSON body of the XDTS file
        file_name: Timesheet file name, used as the timesheet name and in errors

    Returns:
        Decoded Timesheet

    Raises:
        TimesheetError: Any decoding failure, naming the file
    """
    table = load_payload(payload, file_name).time_tables[0]

    names = extract_column_names(table, file_name)
    tracks = extract_tracks(table, file_name)

    if len(names) != len(tracks):
        raise ColumnCountMismatch(file_name, len(names), len(tracks))

    logger.debug("Decoded %d column(s) from %s", len(names), file_name)

    return Timesheet(
        name=file_name,
        duration=table.duration,
        columns=tuple(names),
        exposures={name: tuple(events) for name, events in zip(names, tracks)},
    )


def decode_raw_timesheet(raw: RawTimesheet) -> Timesheet:
    """Decode a RawTimesheet read from disk."""
    return decode_timesheet(raw.payload, raw.name)
