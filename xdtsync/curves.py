"""
xdtsync.curves - Exposure events → stepped keyframe curves.

Each column produces two curves: a source-frame remap curve driving the
Timewarp effect, and a visibility curve driving layer opacity. Both are
set on the host and then converted to hold keys, so a value stays
constant until the next authored change.
"""

from __future__ import annotations

from collections.abc import Sequence

from xdtsync.host import (
    TIMEWARP_ADJUST_BY_SOURCE_FRAME,
    TIMEWARP_WHOLE_FRAMES,
    AnimatedProperty,
    CompItem,
    KeyframeInterpolation,
)
from xdtsync.timesheet.models import ExposureEvent

CurvePoint = tuple[float, float]

# Source frame value meaning nothing is sampled.
NO_SOURCE_FRAME = -1

HIDDEN = 0
VISIBLE = 100


def frame_to_time(frame: int, frame_rate: float) -> float:
    """Convert a frame number to seconds."""
    return frame / frame_rate


def source_frame_points(
    exposures: Sequence[ExposureEvent], frame_rate: float
) -> list[CurvePoint]:
    """Build the source-frame remap curve.

    Authored cel numbers are 1-indexed; the remap expects 0-indexed source
    frames. Empty cells map to NO_SOURCE_FRAME.
    """
    return [
        (
            frame_to_time(event.frame, frame_rate),
            NO_SOURCE_FRAME if event.is_empty else event.value - 1,
        )
        for event in exposures
    ]


def visibility_points(exposures: Sequence[ExposureEvent], frame_rate: float) -> list[CurvePoint]:
    """Build the opacity curve.

    A column with no events, or whose first event comes after frame 0,
    starts hidden at time 0.
    """
    points: list[CurvePoint] = []
    if not exposures or exposures[0].frame > 0:
        points.append((0.0, HIDDEN))

    for event in exposures:
        points.append(
            (frame_to_time(event.frame, frame_rate), HIDDEN if event.is_empty else VISIBLE)
        )
    return points


def set_curve(prop: AnimatedProperty, points: Sequence[CurvePoint]) -> None:
    """Set a curve's points on a host property."""
    times = [t for t, _ in points]
    values = [v for _, v in points]
    prop.set_values_at_times(times, values)


def convert_to_hold(prop: AnimatedProperty) -> None:
    """Set every key of `prop` to hold on both sides."""
    for index in range(prop.num_keys):
        prop.set_interpolation_type_at_key(
            index, KeyframeInterpolation.HOLD, KeyframeInterpolation.HOLD
        )


def retime_comp(comp: CompItem, exposures: Sequence[ExposureEvent]) -> tuple[int, int]:
    """Apply one column's exposures to the first layer of `comp`.

    Returns:
        Number of (source frame, opacity) keys set
    """
    layer = comp.layer(0)

    timewarp = layer.add_effect("Timewarp")
    timewarp.set_value("method", TIMEWARP_WHOLE_FRAMES)
    timewarp.set_value("adjust_time_by", TIMEWARP_ADJUST_BY_SOURCE_FRAME)
    source_frame = timewarp.get_property("source_frame")

    set_curve(source_frame, source_frame_points(exposures, comp.frame_rate))
    set_curve(layer.opacity, visibility_points(exposures, comp.frame_rate))

    # Interpolation is per key, so it can only be set once all keys exist.
    convert_to_hold(source_frame)
    convert_to_hold(layer.opacity)

    return source_frame.num_keys, layer.opacity.num_keys
