"""
xdtsync.timesheet.models - Decoded timesheet data model.

ExposureEvent and Timesheet are immutable once built. Column name
uniqueness is enforced at construction.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExposureEvent(BaseModel):
    """A change of exposed cel on one column, starting at `frame`.

    `value` is the 1-indexed source frame shown from this frame on, or None
    when nothing is shown until the next event.
    """

    model_config = ConfigDict(frozen=True)

    frame: int
    value: int | None = Field(default=None, ge=1)

    @property
    def is_empty(self) -> bool:
        return self.value is None


class Timesheet(BaseModel):
    """A decoded XDTS timesheet."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration: int
    columns: tuple[str, ...] = ()
    exposures: dict[str, tuple[ExposureEvent, ...]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_columns(self) -> Timesheet:
        if any(not c.strip() for c in self.columns):
            raise ValueError("column names must not be blank")
        if len(set(self.columns)) != len(self.columns):
            raise ValueError("column names must be unique")
        if set(self.columns) != set(self.exposures):
            raise ValueError("columns and exposures must have the same names")
        return self

    def column_exposures(self, column: str) -> tuple[ExposureEvent, ...]:
        return self.exposures[column]
