"""
xdtsync.timesheet - XDTS timesheet decoding.

Load phase: validate the raw payload against the XDTS schema and decode
it into per-column exposure events.
"""

from __future__ import annotations
