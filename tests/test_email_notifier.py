"""Tests for EmailNotifier SMTP delivery."""

import smtplib
from decimal import Decimal
from unittest.mock import patch

import pytest

from app.services.email_notifier import EmailNotifier, NotificationError


@pytest.fixture
def notifier():
    return EmailNotifier(
        smtp_host="smtp.test",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="secret",
        from_email="no-reply@expanders360.com",
        timeout=5,
    )


class TestEmailNotifier:
    """Tests for EmailNotifier with smtplib.SMTP patched out."""

    @patch("app.services.email_notifier.smtplib.SMTP")
    def test_match_notification(self, mock_smtp, notifier):
        server = mock_smtp.return_value.__enter__.return_value

        message_id = notifier.send_match_notification("ops@example.com", 7, 3, Decimal("10.20"))

        mock_smtp.assert_called_once_with("smtp.test", 2525, timeout=5)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        sent = server.send_message.call_args[0][0]
        assert sent["To"] == "ops@example.com"
        assert sent["Subject"] == "New Match for Project 7"
        assert sent["Message-ID"] == message_id
        assert "Vendor 3 (score: 10.20)" in sent.get_payload()[0].get_payload(decode=True).decode()

    @patch("app.services.email_notifier.smtplib.SMTP")
    def test_report_has_html_and_text_parts(self, mock_smtp, notifier):
        server = mock_smtp.return_value.__enter__.return_value

        notifier.send_report("admin@expanders360.com", "Weekly", "<h2>Weekly</h2><p>Total: 3</p>")

        sent = server.send_message.call_args[0][0]
        text_part, html_part = sent.get_payload()
        assert text_part.get_content_type() == "text/plain"
        assert "<h2>" not in text_part.get_payload(decode=True).decode()
        assert html_part.get_content_type() == "text/html"

    @patch("app.services.email_notifier.smtplib.SMTP")
    def test_smtp_failure_raises_notification_error(self, mock_smtp, notifier):
        server = mock_smtp.return_value.__enter__.return_value
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({"x@example.com": (550, b"no")})

        with pytest.raises(NotificationError):
            notifier.send_match_notification("x@example.com", 1, 1, Decimal("1.00"))

    @patch("app.services.email_notifier.smtplib.SMTP")
    def test_connection_error_raises_notification_error(self, mock_smtp, notifier):
        mock_smtp.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(NotificationError):
            notifier.send_report("admin@expanders360.com", "Subject", "<p>body</p>")

    def test_unconfigured_host_raises(self, monkeypatch):
        monkeypatch.setattr("app.config.settings.smtp_host", None)
        notifier = EmailNotifier()

        assert notifier.is_enabled() is False
        with pytest.raises(NotificationError):
            notifier.send_report("admin@expanders360.com", "Subject", "<p>body</p>")
