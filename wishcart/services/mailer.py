# wishcart/services/mailer.py
from email.message import EmailMessage
from typing import Optional
import logging
import smtplib

from wishcart.config import settings
from wishcart.core.errors import WishlistError

logger = logging.getLogger(__name__)


class MailerError(WishlistError):
    status_code = 502


class Mailer:
    """
    Sends mails over SMTP. Without an SMTP host configured the mail is only
    logged, which is what development and tests use.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None, sender: Optional[str] = None):
        self.host = settings.SMTP_HOST if host is None else host
        self.port = settings.SMTP_PORT if port is None else port
        self.sender = sender or settings.SMTP_SENDER

    def send(self, to: str, subject: str, body: str, reply_to: Optional[str] = None, html: bool = False) -> None:
        if not self.host:
            logger.info("Mail to %s (not sent, no SMTP host): %s", to, subject)
            return
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.set_content(body, subtype="html" if html else "plain")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailerError(f"Could not send mail to {to}: {e}") from e
        logger.info("Mail sent to %s: %s", to, subject)
