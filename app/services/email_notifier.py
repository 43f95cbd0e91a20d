"""
Email Notification Service
Sends new-match notifications to clients and operational reports to admins
"""

import re
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import make_msgid
from decimal import Decimal
from typing import Optional
import structlog

from app.config import settings

logger = structlog.get_logger(__name__)

TAG_RE = re.compile(r"<[^>]*>")


class NotificationError(Exception):
    """Raised when a message could not be handed to the mail server."""


class EmailNotifier:
    """
    SMTP dispatcher.

    Both send methods return the Message-ID of the delivered message and
    raise NotificationError on failure. Callers decide whether a failure
    matters; the scheduler and matching engine only log it.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """Load SMTP settings, falling back to app configuration"""
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_username = smtp_username or settings.smtp_username
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.smtp_from_email
        self.timeout = timeout or settings.smtp_timeout_seconds

    def is_enabled(self) -> bool:
        """Check if an SMTP host is configured"""
        return bool(self.smtp_host)

    def send_match_notification(
        self,
        to_address: str,
        project_id: int,
        vendor_id: int,
        score: Decimal
    ) -> str:
        """
        Notify a client about a newly matched vendor.

        Args:
            to_address: Client contact email
            project_id: Matched project
            vendor_id: Matched vendor
            score: Match score

        Returns:
            Message-ID of the sent email

        Raises:
            NotificationError: SMTP not configured or delivery failed
        """
        subject = f"New Match for Project {project_id}"
        text_body = f"Project {project_id} matched with Vendor {vendor_id} (score: {score})"

        message_id = self._send(to_address, subject, text_body=text_body)
        logger.info(
            "match_notification_sent",
            to=to_address,
            project_id=project_id,
            vendor_id=vendor_id,
            message_id=message_id
        )
        return message_id

    def send_report(self, to_address: str, subject: str, html_body: str) -> str:
        """
        Send an HTML report with a plain-text alternative.

        Returns:
            Message-ID of the sent email

        Raises:
            NotificationError: SMTP not configured or delivery failed
        """
        text_body = TAG_RE.sub("", html_body)
        message_id = self._send(to_address, subject, text_body=text_body, html_body=html_body)
        logger.info("report_sent", to=to_address, subject=subject, message_id=message_id)
        return message_id

    def _send(
        self,
        to_address: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None
    ) -> str:
        if not self.is_enabled():
            raise NotificationError("SMTP host not configured")

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.from_email
        msg['To'] = to_address
        message_id = make_msgid(domain="expanders360.com")
        msg['Message-ID'] = message_id

        msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        if html_body is not None:
            msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                if self.smtp_username and self.smtp_password:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email to {to_address}: {e}") from e

        return message_id


# Global instance
email_notifier = EmailNotifier()
