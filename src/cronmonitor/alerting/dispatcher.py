"""Best-effort fan-out of overdue alerts to a monitor's configured targets.

Delivery never raises: a failing, slow or misconfigured target is logged
and reported as an undelivered ``DeliveryOutcome``. There is no retry or
delivery confirmation; a monitor that stays overdue is re-alerted on the
next sweep instead.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from cronmonitor.alerting.base import AlertChannel, AlertPayload
from cronmonitor.alerting.email import EmailAlertChannel
from cronmonitor.alerting.webhook import WebhookAlertChannel
from cronmonitor.utils.exceptions import AlertDeliveryError

if TYPE_CHECKING:
    from cronmonitor.config import Settings
    from cronmonitor.models.monitor import Monitor

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryOutcome:
    """Result of one delivery attempt to one target."""

    channel: str
    target: str
    delivered: bool
    error: AlertDeliveryError | None = None


class AlertDispatcher:
    """Deliver an alert to every target configured on a monitor."""

    def __init__(
        self,
        webhook_channel: AlertChannel | None = None,
        email_channel: AlertChannel | None = None,
        timeout: float = 10.0,
    ):
        self.webhook_channel = webhook_channel or WebhookAlertChannel(timeout=timeout)
        self.email_channel = email_channel
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> AlertDispatcher:
        """Build a dispatcher, enabling SMTP email only when configured."""
        email_channel = None
        if settings.email_enabled and settings.smtp_host and settings.smtp_from_email:
            email_channel = EmailAlertChannel(
                smtp_host=settings.smtp_host,
                smtp_port=settings.smtp_port,
                smtp_user=settings.smtp_user,
                smtp_password=settings.smtp_password,
                from_email=settings.smtp_from_email,
                use_tls=settings.smtp_use_tls,
                timeout=settings.alert_timeout_seconds,
            )
        elif settings.email_enabled:
            logger.warning("email_alerts_enabled_without_smtp_config")

        return cls(
            webhook_channel=WebhookAlertChannel(timeout=settings.alert_timeout_seconds),
            email_channel=email_channel,
            timeout=settings.alert_timeout_seconds,
        )

    async def dispatch(
        self,
        monitor: Monitor,
        payload: AlertPayload,
    ) -> list[DeliveryOutcome]:
        """
        Deliver ``payload`` to the monitor's webhook and email targets.

        Args:
            monitor: Monitor carrying ``alert_webhook`` / ``alert_email``
            payload: Breach snapshot to deliver

        Returns:
            One outcome per configured target, empty for a silent monitor
        """
        outcomes: list[DeliveryOutcome] = []

        if monitor.alert_webhook:
            outcomes.append(
                await self._deliver(self.webhook_channel, monitor.alert_webhook, payload)
            )

        if monitor.alert_email:
            if self.email_channel is None:
                # Extension point: no email transport configured
                logger.warning(
                    "email_alert_skipped",
                    monitor_id=payload.monitor_id,
                    monitor_name=payload.monitor_name,
                    to_email=monitor.alert_email,
                )
                outcomes.append(
                    DeliveryOutcome(
                        channel="email",
                        target=monitor.alert_email,
                        delivered=False,
                        error=AlertDeliveryError(
                            payload.monitor_id, "email", "no email transport configured"
                        ),
                    )
                )
            else:
                outcomes.append(
                    await self._deliver(self.email_channel, monitor.alert_email, payload)
                )

        return outcomes

    async def _deliver(
        self,
        channel: AlertChannel,
        target: str,
        payload: AlertPayload,
    ) -> DeliveryOutcome:
        """Run one channel send under the delivery timeout, absorbing every failure."""
        error: AlertDeliveryError | None = None

        try:
            delivered = await asyncio.wait_for(
                channel.send(target, payload),
                timeout=self.timeout,
            )
            if not delivered:
                error = AlertDeliveryError(
                    payload.monitor_id, channel.name, "channel reported failure"
                )
        except asyncio.TimeoutError:
            error = AlertDeliveryError(
                payload.monitor_id, channel.name, f"timed out after {self.timeout}s"
            )
        except AlertDeliveryError as exc:
            error = exc
        except Exception as exc:
            error = AlertDeliveryError(payload.monitor_id, channel.name, str(exc))

        if error is not None:
            logger.error(
                "alert_delivery_failed",
                monitor_id=payload.monitor_id,
                channel=channel.name,
                target=target,
                error=error.reason,
            )
            return DeliveryOutcome(
                channel=channel.name,
                target=target,
                delivered=False,
                error=error,
            )

        logger.info(
            "alert_delivered",
            monitor_id=payload.monitor_id,
            channel=channel.name,
            failure_count=payload.failure_count,
        )
        return DeliveryOutcome(channel=channel.name, target=target, delivered=True)
