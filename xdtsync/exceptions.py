"""
xdtsync.exceptions - Custom exception classes.

All xdtsync-specific exceptions inherit from XdtsSyncError.
"""


class XdtsSyncError(Exception):
    """Base exception for all xdtsync errors."""

    pass


class SettingsError(XdtsSyncError):
    """Settings file loading or validation error."""

    pass


class ProjectError(XdtsSyncError):
    """Project layout error (sync folders, timesheet folder, tasks)."""

    pass


class HostError(XdtsSyncError):
    """Host project accessor error."""

    pass


class TimesheetError(XdtsSyncError):
    """Base exception for timesheet decoding errors.

    Every decoding error names the timesheet file it came from.
    """

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        self.message = message
        super().__init__(message)


class TimesheetFormatError(TimesheetError):
    """Timesheet is not a readable XDTS document."""

    pass


class UnsafeColumnName(TimesheetError):
    """Timesheet text contains a reserved property name."""

    def __init__(self, file_name: str, token: str):
        self.token = token
        super().__init__(
            file_name,
            f"Detected the value `{token}` within `{file_name}`. "
            "Ensure there are no columns with this name and update the XDTS file.",
        )


class MalformedColumnName(TimesheetError):
    """A column name is blank or whitespace-only."""

    def __init__(self, file_name: str):
        super().__init__(
            file_name,
            f"Discovered an unnamed column in timesheet `{file_name}`. "
            "Ensure all columns are given names with visible characters.",
        )


class DuplicateColumnName(TimesheetError):
    """Two columns share the same name."""

    def __init__(self, file_name: str, column: str):
        self.column = column
        super().__init__(
            file_name,
            f"Duplicate column name `{column}` in timesheet `{file_name}`. "
            "Remove duplicate column names and update the XDTS file.",
        )


class UnsupportedFrameNotation(TimesheetError):
    """A cel value could not be read as a whole frame number."""

    def __init__(self, file_name: str, raw_value: object):
        self.raw_value = raw_value
        super().__init__(
            file_name,
            f"Issue parsing frame data for `{file_name}`, frame with value `{raw_value}` "
            "is not supported. Frames must be specified by number and hybrid notations "
            "such as `1 1a 2 2a` are not supported.",
        )


class ColumnCountMismatch(TimesheetError):
    """Header names and column tracks disagree in number."""

    def __init__(self, file_name: str, header_count: int, track_count: int):
        self.header_count = header_count
        self.track_count = track_count
        super().__init__(
            file_name,
            f"Mismatched column headers and column data, found {header_count} header(s) "
            f"and {track_count} entries in XDTS file `{file_name}`.",
        )
