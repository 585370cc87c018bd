"""
xdtsync.sync - Timesheet synchronization pipeline.

Load phase: read XDTS files → locate sync folders → decode timesheets →
generate tasks. Apply phase (one undo group): populate missing comps →
fix cel settings → fix comp settings → retime comps.

Each step runs over the whole batch before the next one starts. Any
error aborts the run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from xdtsync.config import SyncSettings
from xdtsync.curves import retime_comp
from xdtsync.exceptions import HostError, ProjectError
from xdtsync.host import CompItem, FolderItem, FootageItem, HostProject, Item, get_sub_item
from xdtsync.io import RawTimesheet, find_timesheets, read_xdts
from xdtsync.resolve import AssetGroup, Task, generate_tasks
from xdtsync.timesheet.decoder import decode_raw_timesheet
from xdtsync.timesheet.models import Timesheet

logger = logging.getLogger(__name__)

UNDO_GROUP_NAME = "Synchronize Timesheets"

# Placeholder settings for newly created comps; fixed up from the cel later.
COMP_DEFAULTS = {
    "width": 100,
    "height": 100,
    "pixel_aspect": 1.0,
    "duration": 10.0,
    "frame_rate": 24.0,
}


@dataclass
class ColumnResult:
    """Keys written for one retimed column."""

    task: str
    column: str
    index: int
    source_frame_keys: int
    opacity_keys: int


@dataclass
class SyncReport:
    """Summary of a synchronization run."""

    tasks: list[Task] = field(default_factory=list)
    columns: list[ColumnResult] = field(default_factory=list)
    created_comps: list[str] = field(default_factory=list)


def sync_folder_name(timesheet_name: str) -> str:
    """Name of the project folder that holds a timesheet's cels and comps."""
    return f"[{timesheet_name}]"


# Load phase


def read_timesheets(project_dir: Path, settings: SyncSettings) -> list[RawTimesheet]:
    files = find_timesheets(project_dir, settings)
    logger.debug("Found %d timesheet file(s)", len(files))
    return [read_xdts(path) for path in files]


def _is_folder_named(name: str) -> Callable[[Item], bool]:
    def predicate(item: Item) -> bool:
        return isinstance(item, FolderItem) and item.name == name

    return predicate


def locate_sync_folder(
    project: HostProject, settings: SyncSettings, timesheet_name: str
) -> AssetGroup:
    """Find the sync folder for one timesheet and index its cels and comps.

    Raises:
        ProjectError: If a required folder is missing or any folder is duplicated
    """
    name = sync_folder_name(timesheet_name)

    def missing_root() -> None:
        raise ProjectError(f"Could not find sync folder with name `{name}`.")

    def duplicate_root() -> None:
        raise ProjectError(
            f"Found too many sync folders with name `{name}`. "
            "Ensure there is only 1 sync folder with this name."
        )

    def missing_inputs() -> None:
        raise ProjectError(f"Could not find `{settings.input_folder}` subfolder in `{name}`.")

    def duplicate_inputs() -> None:
        raise ProjectError(
            f"Found duplicate `{settings.input_folder}` subfolders in `{name}`. "
            "Ensure there are no duplicates."
        )

    def duplicate_outputs() -> None:
        raise ProjectError(
            f"Found duplicate `{settings.output_folder}` subfolders in `{name}`. "
            "Ensure there are no duplicates."
        )

    root = get_sub_item(project, _is_folder_named(name), missing_root, duplicate_root)
    inputs = get_sub_item(
        root, _is_folder_named(settings.input_folder), missing_inputs, duplicate_inputs
    )
    # Output folder may not exist yet; it is created in the apply phase.
    outputs = get_sub_item(
        root, _is_folder_named(settings.output_folder), lambda: None, duplicate_outputs
    )

    group = AssetGroup(
        name=name, timesheet_name=timesheet_name, root=root, inputs=inputs, outputs=outputs
    )

    for item in inputs.items:
        if isinstance(item, FootageItem):
            group.cels[item.name] = item

    if outputs is not None:
        for item in outputs.items:
            if isinstance(item, CompItem):
                group.comps[item.name] = item

    logger.debug(
        "Sync folder %s: %d cel(s), %d comp(s)", name, len(group.cels), len(group.comps)
    )
    return group


def locate_sync_folders(
    project: HostProject, settings: SyncSettings, raw_timesheets: list[RawTimesheet]
) -> list[AssetGroup]:
    return [locate_sync_folder(project, settings, raw.name) for raw in raw_timesheets]


def parse_timesheets(raw_timesheets: list[RawTimesheet]) -> list[Timesheet]:
    return [decode_raw_timesheet(raw) for raw in raw_timesheets]


def load_tasks(project: HostProject, project_dir: Path, settings: SyncSettings) -> list[Task]:
    """Run the load phase. Nothing in the project is modified."""
    raw_timesheets = read_timesheets(project_dir, settings)
    groups = locate_sync_folders(project, settings, raw_timesheets)
    timesheets = parse_timesheets(raw_timesheets)
    return generate_tasks(groups, timesheets)


# Apply phase


def populate_missing_files(
    project: HostProject, settings: SyncSettings, tasks: list[Task]
) -> list[str]:
    """Create missing output folders and comps.

    Returns:
        Names of the comps created, as `<sync folder>/<column>`
    """
    created = []
    for task in tasks:
        group = task.asset_group
        if group.outputs is None:
            logger.debug("Creating `%s` folder in %s", settings.output_folder, group.name)
            group.outputs = project.add_folder(settings.output_folder, parent=group.root)

        for column in task.columns:
            if column not in group.comps:
                group.comps[column] = project.add_comp(
                    column, parent=group.outputs, **COMP_DEFAULTS
                )
                created.append(f"{group.name}/{column}")
    return created


def _cel(task: Task, column: str) -> FootageItem:
    cel = task.asset_group.cels.get(column)
    if cel is None:
        raise HostError(f"No cel for column `{column}` in `{task.asset_group.name}`.")
    return cel


def _comp(task: Task, column: str) -> CompItem:
    comp = task.asset_group.comps.get(column)
    if comp is None:
        raise HostError(f"No comp for column `{column}` in `{task.asset_group.name}`.")
    return comp


def fix_cel_settings(tasks: list[Task]) -> None:
    """Loop every cel so it covers the whole timesheet for remapping."""
    for task in tasks:
        for column in task.columns:
            _cel(task, column).loop = task.timesheet.duration


def fix_comp_settings(tasks: list[Task]) -> None:
    """Match each comp to its cel and rebuild its single cel layer."""
    for task in tasks:
        for column in task.columns:
            comp = _comp(task, column)
            cel = _cel(task, column)
            if cel.frame_rate <= 0:
                raise HostError(
                    f"Cel `{column}` in `{task.asset_group.name}` has no frame rate."
                )

            comp.width = cel.width
            comp.height = cel.height
            comp.pixel_aspect = cel.pixel_aspect
            comp.duration = task.timesheet.duration / cel.frame_rate
            comp.frame_rate = cel.frame_rate

            for layer in list(comp.layers):
                comp.remove_layer(layer)

            layer = comp.add_layer(cel)
            layer.start_time = 0.0
            layer.in_point = 0.0
            layer.out_point = task.timesheet.duration / cel.frame_rate


def retime_comps(tasks: list[Task]) -> list[ColumnResult]:
    results = []
    for task in tasks:
        for column, index in task.columns.items():
            comp = _comp(task, column)
            exposures = task.timesheet.column_exposures(column)
            source_keys, opacity_keys = retime_comp(comp, exposures)
            logger.debug(
                "Retimed %s/%s: %d source frame key(s), %d opacity key(s)",
                task.asset_group.name,
                column,
                source_keys,
                opacity_keys,
            )
            results.append(ColumnResult(task.name, column, index, source_keys, opacity_keys))
    return results


def apply_tasks(project: HostProject, settings: SyncSettings, tasks: list[Task]) -> SyncReport:
    """Run the apply phase inside a single undo group."""
    report = SyncReport(tasks=tasks)
    with project.undo_group(UNDO_GROUP_NAME):
        report.created_comps = populate_missing_files(project, settings, tasks)
        fix_cel_settings(tasks)
        fix_comp_settings(tasks)
        report.columns = retime_comps(tasks)
    return report


def synchronize(project: HostProject, project_dir: Path, settings: SyncSettings) -> SyncReport:
    """Synchronize every timesheet in the project directory into `project`."""
    tasks = load_tasks(project, project_dir, settings)
    return apply_tasks(project, settings, tasks)
