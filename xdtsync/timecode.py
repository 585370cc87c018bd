"""
xdtsync.timecode - Frame number and timecode formatting.

Used when exposure data is shown to the user: frames are numbered from
the configured start frame and paired with non-drop-frame timecode.
"""

from __future__ import annotations


def frames_to_timecode(total_frames: int, fps: float) -> str:
    """Convert a frame count to non-drop-frame timecode.

    Args:
        total_frames: Total number of frames
        fps: Frames per second (24, 25, 30, etc.)

    Returns:
        Timecode string in HH:MM:SS:FF format

    Raises:
        ValueError: If fps rounds to less than one frame per second
    """
    frames_per_second = round(fps)
    if frames_per_second < 1:
        raise ValueError(f"Frame rate must be at least 1, got {fps}")
    sign = "-" if total_frames < 0 else ""
    total_frames = abs(total_frames)

    ff = total_frames % frames_per_second
    total_seconds = total_frames // frames_per_second
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600

    return f"{sign}{hh:02d}:{mm:02d}:{ss:02d}:{ff:02d}"


def display_frame(frame: int, start_frame: int = 1) -> int:
    """Frame number as shown to the user, counting from `start_frame`."""
    return frame + start_frame


def format_cel(value: int | None) -> str:
    """Cel number for display; empty cells are shown as a cross."""
    return "×" if value is None else str(value)
