from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from cronmonitor.models.ping import PingStatus


class PingResponse(BaseModel):
    """Schema for a logged check-in."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: int
    status: PingStatus
