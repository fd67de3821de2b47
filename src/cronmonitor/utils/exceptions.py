from __future__ import annotations


class CronMonitorException(Exception):
    """Base exception for the cron monitor."""

    pass


class MonitorNotFoundError(CronMonitorException):
    """Raised when a monitor cannot be found."""

    def __init__(self, monitor_id: str):
        self.monitor_id = monitor_id
        super().__init__(f"Monitor {monitor_id} not found")


class InvalidInputError(CronMonitorException):
    """Raised when a request is missing required input."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class StoreFailureError(CronMonitorException):
    """Raised when the monitor store cannot complete an operation."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation {operation} failed: {reason}")


class AlertDeliveryError(CronMonitorException):
    """Raised when alert delivery fails."""

    def __init__(self, monitor_id: str, channel: str, reason: str):
        self.monitor_id = monitor_id
        self.channel = channel
        self.reason = reason
        super().__init__(
            f"Failed to deliver alert for monitor {monitor_id} via {channel}: {reason}"
        )
