from __future__ import annotations

from cronmonitor.alerting.base import AlertChannel, AlertPayload
from cronmonitor.alerting.dispatcher import AlertDispatcher, DeliveryOutcome
from cronmonitor.alerting.email import EmailAlertChannel
from cronmonitor.alerting.webhook import WebhookAlertChannel

__all__ = [
    "AlertChannel",
    "AlertPayload",
    "AlertDispatcher",
    "DeliveryOutcome",
    "WebhookAlertChannel",
    "EmailAlertChannel",
]
