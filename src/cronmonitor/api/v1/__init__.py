from __future__ import annotations

from cronmonitor.api.v1 import monitors

__all__ = [
    "monitors",
]
