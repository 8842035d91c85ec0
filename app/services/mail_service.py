"""
Mail Dispatch - SMTP sender for password reset emails.

Takes {to, subject, text}. When EMAIL_USER / EMAIL_PASS are not configured
nothing is sent: the message is logged instead so local setups keep working.
"""
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    pass


class Mailer:
    """
    Thin wrapper over smtplib.
    Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return self.settings.email_configured

    def _build_message(self, to: str, subject: str, text: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.email_from or self.settings.email_user
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        return msg

    def send(self, to: str, subject: str, text: str) -> bool:
        """
        Send one plain-text email.

        Returns:
            True if handed to the SMTP server, False if mail is not configured.

        Raises:
            MailDeliveryError when the message cannot be built or the SMTP exchange fails.
        """
        if not self.configured:
            logger.info("[No SMTP] Would send '%s' to %s", subject, to)
            return False

        s = self.settings
        try:
            # header values with CR/LF raise ValueError here
            msg = self._build_message(to, subject, text)
            if s.email_smtp_port == 465:
                with smtplib.SMTP_SSL(s.email_smtp_host, s.email_smtp_port,
                                      timeout=s.email_smtp_timeout_seconds) as server:
                    server.login(s.email_user, s.email_pass)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(s.email_smtp_host, s.email_smtp_port,
                                  timeout=s.email_smtp_timeout_seconds) as server:
                    server.starttls()
                    server.login(s.email_user, s.email_pass)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.warning("SMTP error while sending email to %s: %s", to, e)
            raise MailDeliveryError(str(e)) from e

        logger.info("Email sent to %s", to)
        return True


def get_mailer() -> Mailer:
    """FastAPI dependency; override in tests."""
    return Mailer()
