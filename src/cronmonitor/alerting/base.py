from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class AlertPayload:
    """Breach snapshot delivered to alert targets."""

    monitor_id: str
    monitor_name: str
    status: str
    last_ping: int | None
    failure_count: int
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AlertChannel(ABC):
    """Abstract base class for alert delivery channels."""

    name: str = "channel"

    @abstractmethod
    async def send(self, target: str, payload: AlertPayload) -> bool:
        """
        Send alert to a single target through this channel.

        Args:
            target: Channel-specific destination (URL, email address)
            payload: Alert data to send

        Returns:
            True if successful, False otherwise

        Raises:
            AlertDeliveryError: When the channel can say why delivery failed
        """
        pass

    @abstractmethod
    def validate_target(self, target: str | None) -> bool:
        """
        Validate a delivery target for this channel.

        Returns:
            True if the target is usable, False otherwise
        """
        pass
