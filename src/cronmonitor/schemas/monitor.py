from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from cronmonitor.models.monitor import MonitorStatus
from cronmonitor.schemas.ping import PingResponse


class MonitorBase(BaseModel):
    """Base monitor schema."""

    name: str = Field(..., min_length=1, max_length=255)
    schedule: str = Field(..., min_length=1, max_length=32)


class MonitorCreate(MonitorBase):
    """
    Schema for creating a monitor.

    ``grace_seconds`` falls back to the configured default when omitted.
    Malformed schedules are accepted and evaluated with the one-hour
    fallback interval.
    """

    grace_seconds: int | None = Field(None, ge=0)
    alert_webhook: HttpUrl | None = None
    alert_email: EmailStr | None = None

    @field_validator("alert_webhook", "alert_email", mode="before")
    @classmethod
    def blank_target_is_none(cls, v):
        """Treat empty form fields as an unset target."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MonitorResponse(MonitorBase):
    """Schema for monitor response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    grace_seconds: int
    alert_webhook: str | None
    alert_email: str | None
    created_at: int
    last_ping: int | None
    status: MonitorStatus
    failure_count: int
    ping_url: str | None = None


class MonitorDetail(MonitorResponse):
    """Monitor with its most recent check-ins, newest first."""

    recent_pings: list[PingResponse] = Field(default_factory=list)


class MonitorList(BaseModel):
    """Schema for list of monitors."""

    monitors: list[MonitorResponse]
    total: int
