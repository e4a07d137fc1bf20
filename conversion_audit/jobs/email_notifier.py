"""
SMTP e-mail delivery for the conversion audit.

Sends the HTML report at the end of a successful run, and a plain-text error
notification when a run fails. Delivery failures are logged and reported as
False; they never propagate into the run.

Environment Requirements:
- SMTP__HOST, SMTP__PORT: Mail server (STARTTLS on 587 by default)
- SMTP__USER, SMTP__PASSWORD: Optional login
- SMTP__SENDER: From address (defaults to SMTP__USER)
- EMAIL__RECIPIENT: Recipient of both the report and error notifications

Usage:
    notifier = EmailNotifier.from_settings(get_settings())
    sent = notifier.send("ops@example.com", subject, html_body=report_html)
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from conversion_audit.core.config import Settings, SmtpSettings


logger = logging.getLogger(__name__)


class EmailNotifier:
    """
    Sends one message per call over SMTP.

    Attributes:
        smtp: Mail transport settings.
    """

    def __init__(self, smtp: SmtpSettings):
        self.smtp = smtp

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(settings.smtp)

    @property
    def configured(self) -> bool:
        return bool(self.smtp.host)

    @property
    def sender(self) -> str:
        return self.smtp.sender or self.smtp.user or ""

    def build_message(
        self,
        recipient: str,
        subject: str,
        html_body: Optional[str] = None,
        text_body: Optional[str] = None
    ) -> MIMEMultipart:
        """
        Build a multipart/alternative message with a plain and/or HTML part.

        The plain part is attached first so clients prefer the HTML part.
        """
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.sender
        msg['To'] = recipient

        if text_body is not None:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        if html_body is not None:
            msg.attach(MIMEText(html_body, 'html', 'utf-8'))
        return msg

    def send(
        self,
        recipient: str,
        subject: str,
        html_body: Optional[str] = None,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Send one message.

        Args:
            recipient: Destination address.
            subject: Subject line.
            html_body: HTML content (report).
            text_body: Plain text content (error notification).

        Returns:
            True when the server accepted the message, False when delivery was
            skipped (no SMTP host or recipient) or failed.
        """
        if not self.configured:
            logger.warning("SMTP host not configured, skipping e-mail")
            return False
        if not recipient:
            logger.warning("No e-mail recipient configured, skipping e-mail")
            return False

        logger.info(f"Sending e-mail '{subject}' to {recipient}")
        try:
            msg = self.build_message(recipient, subject, html_body=html_body, text_body=text_body)

            with smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=self.smtp.timeout_seconds) as server:
                if self.smtp.use_tls:
                    server.starttls()
                if self.smtp.user and self.smtp.password:
                    server.login(self.smtp.user, self.smtp.password)
                server.send_message(msg)

        except Exception as e:
            logger.error(f"Failed to send e-mail '{subject}': {type(e).__name__}: {e}")
            return False

        logger.info("E-mail sent successfully")
        return True
