from __future__ import annotations

import httpx
import structlog

from cronmonitor.alerting.base import AlertChannel, AlertPayload
from cronmonitor.utils.exceptions import AlertDeliveryError

logger = structlog.get_logger(__name__)


class WebhookAlertChannel(AlertChannel):
    """Send alerts as a JSON POST to the monitor's webhook URL."""

    name = "webhook"

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def validate_target(self, target: str | None) -> bool:
        """Validate webhook URL."""
        return bool(target) and target.startswith(("http://", "https://"))

    async def send(self, target: str, payload: AlertPayload) -> bool:
        """
        Send alert to webhook.

        Args:
            target: Webhook URL
            payload: Alert data to send

        Returns:
            True once the webhook answered with a 2xx status, False if the
            URL is not a usable webhook target

        Raises:
            AlertDeliveryError: On a non-2xx answer or a transport error
        """
        if not self.validate_target(target):
            logger.error("webhook_invalid_target", webhook_url=target)
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(target, json=payload.to_dict())
                response.raise_for_status()

        except httpx.HTTPError as exc:
            logger.error(
                "webhook_alert_failed",
                monitor_id=payload.monitor_id,
                webhook_url=target,
                error=str(exc),
            )
            raise AlertDeliveryError(payload.monitor_id, self.name, str(exc)) from exc

        logger.info(
            "webhook_alert_sent",
            monitor_id=payload.monitor_id,
            webhook_url=target,
            status_code=response.status_code,
        )
        return True
