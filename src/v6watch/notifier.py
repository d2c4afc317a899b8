"""Email delivery of address change notifications."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, parseaddr
from typing import Callable

from v6watch.config import SmtpConfig
from v6watch.errors import DeliveryFailedError

logger = logging.getLogger(__name__)


def _parse_mailbox(value: str, field_name: str) -> tuple[str, str]:
    """Split ``value`` into (display name, address).

    Raises:
        DeliveryFailedError: If no ``local@domain`` address can be found.
    """
    name, address = parseaddr(value)
    local, _, domain = address.rpartition("@")
    if not local or not domain:
        raise DeliveryFailedError(f"无效的邮箱地址 {field_name}: {value!r}")
    return name, address


class EmailNotifier:
    """Sends plain-text notifications through an authenticated SMTP relay.

    The connection starts in plain text and is upgraded with STARTTLS before
    credentials are sent. There is no retry: a failed send leaves the stored
    address untouched so the next run notifies again.

    Example:
        notifier = EmailNotifier()
        notifier.send(config.smtp, "subject", "body")
    """

    SENDER_NAME = "IPv6监控"

    def __init__(
        self,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        ssl_context: ssl.SSLContext | None = None,
    ):
        """Initialize notifier.

        Args:
            smtp_factory: SMTP client constructor (for testing).
            ssl_context: TLS context for STARTTLS. Defaults to the system
                trust store.
        """
        self._smtp_factory = smtp_factory
        self._ssl_context = ssl_context

    def build_message(self, smtp: SmtpConfig, subject: str, body: str) -> EmailMessage:
        """Build the notification message.

        Raises:
            DeliveryFailedError: If sender or recipient address is invalid.
        """
        _, from_addr = _parse_mailbox(smtp.from_addr, "from_addr")
        to_name, to_addr = _parse_mailbox(smtp.to_addr, "to_addr")

        message = EmailMessage()
        message["From"] = formataddr((self.SENDER_NAME, from_addr))
        message["To"] = formataddr((to_name, to_addr))
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, smtp: SmtpConfig, subject: str, body: str) -> None:
        """Deliver one notification.

        Args:
            smtp: Relay settings and credentials.
            subject: Mail subject.
            body: Plain-text body.

        Raises:
            DeliveryFailedError: On invalid addresses, connection, TLS,
                authentication or relay rejection errors.
        """
        message = self.build_message(smtp, subject, body)
        context = self._ssl_context or ssl.create_default_context()

        try:
            logger.debug(f"Connecting to {smtp.server}:{smtp.port}")
            with self._smtp_factory(smtp.server, smtp.port) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                server.login(smtp.login, smtp.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Mail delivery via {smtp.server}:{smtp.port} failed: {e}")
            raise DeliveryFailedError(f"邮件发送失败: {e}") from e

        logger.info(f"Notification sent to {message['To']}")
