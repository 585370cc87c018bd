"""
xdtsync - XDTS timesheet synchronizer.

Converts frame-accurate XDTS exposure tables into stepped time-remap and
opacity keyframes on a compositing project: timesheet decoding → column
resolution → curve synthesis.
"""

__version__ = "0.1.0"
