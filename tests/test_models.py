"""Tests for xdtsync.timesheet.models module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from xdtsync.timesheet.models import ExposureEvent, Timesheet


class TestExposureEvent:
    def test_empty_event(self) -> None:
        event = ExposureEvent(frame=4)
        assert event.value is None
        assert event.is_empty

    def test_value_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ExposureEvent(frame=0, value=0)

    def test_frozen(self) -> None:
        event = ExposureEvent(frame=0, value=1)
        with pytest.raises(ValidationError):
            event.value = 2


class TestTimesheet:
    def test_valid(self) -> None:
        timesheet = Timesheet(
            name="s.xdts",
            duration=24,
            columns=("A", "B"),
            exposures={"A": (ExposureEvent(frame=0, value=1),), "B": ()},
        )
        assert timesheet.column_exposures("A")[0].value == 1

    def test_duplicate_columns_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Timesheet(name="s", duration=1, columns=("A", "A"), exposures={"A": ()})

    def test_blank_columns_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Timesheet(name="s", duration=1, columns=(" ",), exposures={" ": ()})

    def test_exposure_keys_must_match_columns(self) -> None:
        with pytest.raises(ValidationError):
            Timesheet(name="s", duration=1, columns=("A",), exposures={"B": ()})

    def test_frozen(self) -> None:
        timesheet = Timesheet(name="s", duration=1)
        with pytest.raises(ValidationError):
            timesheet.duration = 2
