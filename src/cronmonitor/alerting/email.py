from __future__ import annotations

import asyncio
import smtplib
from email.message import EmailMessage

import structlog

from cronmonitor.alerting.base import AlertChannel, AlertPayload
from cronmonitor.utils.time import ms_to_datetime

logger = structlog.get_logger(__name__)


class EmailAlertChannel(AlertChannel):
    """Send alerts via SMTP. Only wired in when email alerting is enabled."""

    name = "email"

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str | None,
        smtp_password: str | None,
        from_email: str,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.use_tls = use_tls
        self.timeout = timeout

    def validate_target(self, target: str | None) -> bool:
        """Validate SMTP configuration and recipient."""
        if not self.smtp_host or not self.from_email:
            logger.error("email_missing_required_config")
            return False
        return bool(target) and "@" in target

    def _create_body(self, payload: AlertPayload) -> str:
        last_ping = ms_to_datetime(payload.last_ping)
        return (
            f"Monitor: {payload.monitor_name} ({payload.monitor_id})\n"
            f"Status: {payload.status.upper()}\n"
            f"Last check-in: {last_ping.isoformat() if last_ping else 'never'}\n"
            f"Missed sweeps: {payload.failure_count}\n"
            f"Detected at: {ms_to_datetime(payload.timestamp).isoformat()}\n"
        )

    def _build_message(self, target: str, payload: AlertPayload) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = target
        msg["Subject"] = f"[{payload.status.upper()}] {payload.monitor_name} missed its check-in"
        msg.set_content(self._create_body(payload))
        return msg

    async def send(self, target: str, payload: AlertPayload) -> bool:
        """
        Send alert email without blocking the event loop.

        Args:
            target: Recipient address
            payload: Alert data to send

        Returns:
            True if successful, False otherwise
        """
        if not self.validate_target(target):
            return False

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._send_sync, target, payload)

    def _send_sync(self, target: str, payload: AlertPayload) -> bool:
        """Synchronous SMTP delivery (called from executor)."""
        try:
            msg = self._build_message(target, payload)

            with smtplib.SMTP(
                self.smtp_host, self.smtp_port, timeout=self.timeout
            ) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)

            logger.info(
                "email_alert_sent",
                monitor_id=payload.monitor_id,
                to_email=target,
            )
            return True

        except smtplib.SMTPAuthenticationError:
            logger.error(
                "email_authentication_failed",
                smtp_host=self.smtp_host,
                smtp_user=self.smtp_user,
            )
            return False

        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "email_alert_failed",
                monitor_id=payload.monitor_id,
                smtp_host=self.smtp_host,
                error=str(exc),
            )
            return False
