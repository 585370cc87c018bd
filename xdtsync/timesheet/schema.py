"""
xdtsync.timesheet.schema - Typed schema for raw XDTS payloads.

Only the parts of the document the decoder reads are modeled; unknown keys
are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Category tag of the visible cel columns. Other categories hold camera
# and metadata tracks.
VISIBLE_FIELD_ID = 0

# Data item type holding the exposed cel reference.
CEL_DATA_ID = 0

NULL_CELL = "SYMBOL_NULL_CELL"


class _XdtsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class XdtsDatum(_XdtsModel):
    id: int
    values: list[Any] = Field(default_factory=list)


class XdtsFrame(_XdtsModel):
    frame: int
    data: list[XdtsDatum] = Field(default_factory=list)


class XdtsTrack(_XdtsModel):
    frames: list[XdtsFrame] = Field(default_factory=list)


class XdtsField(_XdtsModel):
    field_id: int = Field(alias="fieldId")
    tracks: list[XdtsTrack] = Field(default_factory=list)


class XdtsHeader(_XdtsModel):
    field_id: int = Field(alias="fieldId")
    names: list[str] = Field(default_factory=list)


class XdtsTimeTable(_XdtsModel):
    duration: int
    headers: list[XdtsHeader] = Field(default_factory=list, alias="timeTableHeaders")
    field_entries: list[XdtsField] = Field(default_factory=list, alias="fields")


class XdtsPayload(_XdtsModel):
    time_tables: list[XdtsTimeTable] = Field(alias="timeTables", min_length=1)
