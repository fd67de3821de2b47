from __future__ import annotations

from enum import Enum

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from cronmonitor.models.base import Base


class PingStatus(str, Enum):
    """Outcome reported by a check-in."""

    SUCCESS = "success"
    FAILURE = "failure"


class Ping(Base):
    """Append-only log of check-ins received for a monitor."""

    __tablename__ = "pings"
    __table_args__ = (
        Index("ix_pings_monitor_id_timestamp", "monitor_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    monitor_id: Mapped[str] = mapped_column(
        ForeignKey("monitors.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Epoch milliseconds
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PingStatus.SUCCESS.value,
    )

    def __repr__(self) -> str:
        return (
            f"<Ping(id={self.id}, monitor_id='{self.monitor_id}', "
            f"timestamp={self.timestamp})>"
        )
