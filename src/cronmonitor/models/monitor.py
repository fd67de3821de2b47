from __future__ import annotations

import uuid
from enum import Enum

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cronmonitor.models.base import Base
from cronmonitor.utils.time import now_ms


class MonitorStatus(str, Enum):
    """Liveness states of a monitor."""

    NEW = "new"
    UP = "up"
    DOWN = "down"


ACTIVE_STATUSES = (MonitorStatus.NEW, MonitorStatus.UP, MonitorStatus.DOWN)


def generate_monitor_id() -> str:
    return uuid.uuid4().hex


class Monitor(Base):
    """A scheduled job that is expected to check in periodically."""

    __tablename__ = "monitors"

    # Public opaque identifier, used in the ping URL
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_monitor_id,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    schedule: Mapped[str] = mapped_column(String(32), nullable=False)
    grace_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    # Delivery targets, both optional
    alert_webhook: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    alert_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    # Epoch milliseconds
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=now_ms,
        index=True,
    )
    last_ping: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=MonitorStatus.NEW.value,
        index=True,
    )
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<Monitor(id='{self.id}', name='{self.name}', "
            f"schedule='{self.schedule}', status='{self.status}')>"
        )
