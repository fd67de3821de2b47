"""Cadence strings such as ``5m`` or ``1d`` converted to milliseconds.

Malformed schedules never raise. They evaluate to ``DEFAULT_INTERVAL_MS``
(one hour) so a misconfigured monitor still expires and alerts instead of
silently never timing out.
"""
from __future__ import annotations

import re

UNIT_MS: dict[str, int] = {
    "s": 1_000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}

DEFAULT_INTERVAL_MS = 3_600_000

_SCHEDULE_RE = re.compile(r"([0-9]+)([smhd])")


def is_valid_schedule(schedule: object) -> bool:
    """Return True if ``schedule`` matches ``<digits><unit>`` exactly."""
    return isinstance(schedule, str) and _SCHEDULE_RE.fullmatch(schedule) is not None


def parse_schedule(schedule: object) -> int:
    """
    Convert a cadence string to its interval in milliseconds.

    Args:
        schedule: Cadence such as ``30s``, ``5m``, ``12h`` or ``1d``

    Returns:
        Interval in milliseconds, or ``DEFAULT_INTERVAL_MS`` when the
        string is malformed
    """
    if not isinstance(schedule, str):
        return DEFAULT_INTERVAL_MS

    match = _SCHEDULE_RE.fullmatch(schedule)
    if match is None:
        return DEFAULT_INTERVAL_MS

    value, unit = match.groups()
    return int(value) * UNIT_MS[unit]
