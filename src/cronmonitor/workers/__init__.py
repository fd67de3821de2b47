from __future__ import annotations

from cronmonitor.workers.sweeper import LivenessSweeper, SweepReport

__all__ = [
    "LivenessSweeper",
    "SweepReport",
]
