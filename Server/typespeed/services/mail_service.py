"""
Mail Service

Sends email via SMTP or logs it, chosen by EMAIL_BACKEND:
  - "log" (default): writes the email to the application log
  - "smtp": sends via SMTP using the MAIL_* settings

Delivery runs on a background thread with bounded retries when MAIL_ASYNC is
enabled, so a slow or unreachable mail server never delays the request that
triggered the email. Failures are logged, not raised.
"""

import logging
import smtplib
import threading
import time
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    html: str
    sender: str


class MailService:
    """Fire-and-forget HTML mail dispatcher."""

    def __init__(self,
                 backend: str = 'log',
                 server: str = 'localhost',
                 port: int = 587,
                 username: str = '',
                 password: str = '',
                 sender: str = 'noreply@example.com',
                 async_delivery: bool = True,
                 max_retries: int = 3,
                 retry_delay: float = 2.0):
        self.backend = backend
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.async_delivery = async_delivery
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'MailService':
        return cls(
            backend=config.get('EMAIL_BACKEND', 'log'),
            server=config.get('MAIL_SERVER', 'localhost'),
            port=config.get('MAIL_PORT', 587),
            username=config.get('MAIL_USERNAME', ''),
            password=config.get('MAIL_PASSWORD', ''),
            sender=config.get('MAIL_FROM') or 'noreply@example.com',
            async_delivery=config.get('MAIL_ASYNC', True),
            max_retries=config.get('MAIL_MAX_RETRIES', 3),
            retry_delay=config.get('MAIL_RETRY_DELAY_SECONDS', 2.0),
        )

    def send(self, to: str, subject: str, html: str) -> Optional[threading.Thread]:
        """
        Queue an HTML email for delivery.

        Returns:
            The delivery thread when sending asynchronously, else None
        """
        message = MailMessage(to=to, subject=subject, html=html, sender=self.sender)

        if not self.async_delivery:
            self.deliver(message)
            return None

        worker = threading.Thread(target=self.deliver, args=(message,),
                                  name=f"mail-{to}", daemon=True)
        worker.start()
        return worker

    def deliver(self, message: MailMessage) -> bool:
        """Try to deliver message, retrying with a linear backoff."""
        for attempt in range(1, self.max_retries + 1):
            try:
                self._transport(message)
                logger.info("Email delivered to %s (subject=%s, attempt %d)",
                            message.to, message.subject, attempt)
                return True
            except (smtplib.SMTPException, OSError) as e:
                logger.warning("Email delivery to %s failed (attempt %d/%d): %s",
                               message.to, attempt, self.max_retries, e)
                if attempt < self.max_retries and self.retry_delay:
                    time.sleep(self.retry_delay * attempt)

        logger.error("Giving up on email to %s after %d attempts", message.to, self.max_retries)
        return False

    def _transport(self, message: MailMessage) -> None:
        if self.backend == 'log':
            logger.info("EMAIL [to=%s] subject=%s\n%s", message.to, message.subject, message.html)
            return

        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = message.sender
        msg['To'] = message.to
        msg.attach(MIMEText(message.html, 'html'))

        with smtplib.SMTP(self.server, self.port, timeout=30) as smtp:
            smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)
