"""
xdtsync.resolve - Match timesheet columns to asset group cels.

An asset group ("sync folder") is the project folder named after a
timesheet file. A task pairs a decoded timesheet with its asset group and
lists the columns that have a cel to retime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from xdtsync.exceptions import ProjectError
from xdtsync.host import CompItem, FolderItem, FootageItem
from xdtsync.timesheet.models import Timesheet

logger = logging.getLogger(__name__)


@dataclass
class AssetGroup:
    """Cels and output comps belonging to one timesheet."""

    name: str
    timesheet_name: str
    root: FolderItem
    inputs: FolderItem
    outputs: FolderItem | None = None
    cels: dict[str, FootageItem] = field(default_factory=dict)
    comps: dict[str, CompItem] = field(default_factory=dict)


@dataclass(frozen=True)
class Task:
    """Columns of one timesheet to apply to one asset group.

    `columns` maps column name to its index in `timesheet.columns`.
    """

    timesheet: Timesheet
    asset_group: AssetGroup
    columns: dict[str, int]

    @property
    def name(self) -> str:
        return self.timesheet.name


def resolve_columns(timesheet: Timesheet, group: AssetGroup) -> dict[str, int]:
    """Map each timesheet column that has a cel in `group` to its display index."""
    columns = {}
    for index, name in enumerate(timesheet.columns):
        if name in group.cels:
            columns[name] = index
        else:
            logger.debug("Column `%s` of %s has no cel, skipping", name, timesheet.name)
    return columns


def resolve_task(timesheet: Timesheet, group: AssetGroup) -> Task:
    return Task(timesheet=timesheet, asset_group=group, columns=resolve_columns(timesheet, group))


def find_timesheet(timesheets: list[Timesheet], name: str) -> Timesheet:
    for timesheet in timesheets:
        if timesheet.name == name:
            return timesheet
    raise ProjectError(f"Could not find timesheet with name `{name}` for task processing.")


def generate_tasks(groups: list[AssetGroup], timesheets: list[Timesheet]) -> list[Task]:
    """Build one task per asset group, in group discovery order.

    Raises:
        ProjectError: If a group has no timesheet with its name
    """
    tasks = []
    for group in groups:
        timesheet = find_timesheet(timesheets, group.timesheet_name)
        task = resolve_task(timesheet, group)
        logger.debug(
            "Task %s: %d of %d column(s) resolved",
            task.name,
            len(task.columns),
            len(timesheet.columns),
        )
        tasks.append(task)
    return tasks
