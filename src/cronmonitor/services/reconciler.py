"""Per-monitor liveness evaluation.

``reconcile`` is a pure function of a monitor row and the current time.
The sweep worker feeds it every active monitor and applies the result
through the store, so no state is carried between sweep ticks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from cronmonitor.alerting.base import AlertPayload
from cronmonitor.models.monitor import MonitorStatus
from cronmonitor.services.schedule import parse_schedule


class MonitorState(Protocol):
    """Monitor fields the reconciler reads."""

    id: str
    name: str
    schedule: str
    grace_seconds: int
    created_at: int
    last_ping: int | None
    status: str
    failure_count: int
    alert_webhook: str | None
    alert_email: str | None


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of evaluating one monitor at one instant."""

    monitor_id: str
    overdue: bool
    elapsed_ms: int
    threshold_ms: int
    new_status: str
    new_failure_count: int
    alert: AlertPayload | None = None


def _baseline(monitor: MonitorState) -> int:
    # Never-pinged monitors are timed from creation
    return monitor.last_ping if monitor.last_ping is not None else monitor.created_at


def _threshold(monitor: MonitorState) -> int:
    return parse_schedule(monitor.schedule) + monitor.grace_seconds * 1000


def reconcile(monitor: MonitorState, now: int) -> Reconciliation:
    """
    Decide whether a monitor has missed its check-in window.

    A monitor is overdue when strictly more than ``interval + grace`` has
    elapsed since its last ping (or creation, if never pinged). Overdue
    monitors go ``down`` and their failure count grows by one on every
    evaluation. The reconciler never moves a monitor ``up``.

    Args:
        monitor: Monitor row or any object with the same fields
        now: Evaluation time in epoch milliseconds

    Returns:
        Reconciliation with the target state and, when the monitor is
        overdue and has a delivery target, the alert payload
    """
    threshold = _threshold(monitor)
    elapsed = now - _baseline(monitor)

    if elapsed <= threshold:
        return Reconciliation(
            monitor_id=monitor.id,
            overdue=False,
            elapsed_ms=elapsed,
            threshold_ms=threshold,
            new_status=monitor.status,
            new_failure_count=monitor.failure_count,
        )

    new_failure_count = monitor.failure_count + 1
    alert = None
    if monitor.alert_webhook or monitor.alert_email:
        alert = AlertPayload(
            monitor_id=monitor.id,
            monitor_name=monitor.name,
            status=MonitorStatus.DOWN.value,
            last_ping=monitor.last_ping,
            failure_count=new_failure_count,
            timestamp=now,
        )

    return Reconciliation(
        monitor_id=monitor.id,
        overdue=True,
        elapsed_ms=elapsed,
        threshold_ms=threshold,
        new_status=MonitorStatus.DOWN.value,
        new_failure_count=new_failure_count,
        alert=alert,
    )
