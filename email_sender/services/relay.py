"""Outbound message relays: SMTP (Gmail, SendGrid, SES, custom) and a console relay for local dev."""
from __future__ import annotations

import logging
import smtplib
import time
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Optional, Protocol

from email_sender import config
from email_sender.models import Envelope

logger = logging.getLogger(__name__)


class MessageRelay(Protocol):
    """Anything that can check its own connectivity and send one envelope."""

    name: str

    def probe(self) -> bool:
        ...

    def send(self, envelope: Envelope) -> str:
        """Send one message; return its message id. Raise on failure."""
        ...


def sender_identity(name: str = "", address: str = "") -> str:
    return formataddr((name or config.SENDER_NAME, address or config.SENDER_EMAIL))


def build_message(envelope: Envelope) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["From"] = envelope.sender
    msg["To"] = envelope.to
    msg["Subject"] = envelope.subject
    msg["Message-ID"] = make_msgid()
    msg.attach(MIMEText(envelope.text, "plain", "utf-8"))
    msg.attach(MIMEText(envelope.html, "html", "utf-8"))
    return msg


class SmtpRelay:
    """
    One SMTP connection per call, so sends are independent and safe to run from a thread pool.
    Port 465 uses implicit TLS; anything else upgrades with STARTTLS.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        name: str = "smtp",
        timeout: float = config.SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.name = name
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        implicit_tls = self.port == 465
        smtp_cls = smtplib.SMTP_SSL if implicit_tls else smtplib.SMTP
        server = smtp_cls(self.host, self.port, timeout=self.timeout)
        # the socket is already open; close it if the handshake fails
        try:
            if not implicit_tls:
                server.starttls()
            server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    def probe(self) -> bool:
        with self._connect() as server:
            code, _ = server.noop()
        return code == 250

    def send(self, envelope: Envelope) -> str:
        msg = build_message(envelope)
        with self._connect() as server:
            server.sendmail(envelope.sender, [envelope.to], msg.as_string())
        return msg["Message-ID"]


class ConsoleRelay:
    """Logs envelopes instead of sending them. Only used when EMAIL_SERVICE=console."""

    name = "console"

    def probe(self) -> bool:
        return True

    def send(self, envelope: Envelope) -> str:
        logger.info(
            "Console email: from=%s to=%s subject=%r (%d chars)",
            envelope.sender, envelope.to, envelope.subject, len(envelope.text),
        )
        return f"console-{int(time.time() * 1000)}"


def build_relay() -> Optional[MessageRelay]:
    """
    Pick the relay named by EMAIL_SERVICE. Returns None when the service is unknown or its
    credentials are missing; the dispatcher reports that as transport unavailable.
    """
    service = config.EMAIL_SERVICE
    user, password = config.EMAIL_USER, config.EMAIL_PASS

    if service == "gmail" and user and password:
        return SmtpRelay("smtp.gmail.com", 587, user, password, name="gmail")
    if service == "sendgrid" and config.SENDGRID_API_KEY:
        return SmtpRelay("smtp.sendgrid.net", 587, "apikey", config.SENDGRID_API_KEY, name="sendgrid")
    if service == "smtp" and config.SMTP_HOST and user and password:
        return SmtpRelay(config.SMTP_HOST, config.SMTP_PORT, user, password, name="smtp")
    if service == "ses" and config.AWS_ACCESS_KEY_ID and config.AWS_SECRET_ACCESS_KEY:
        return SmtpRelay(
            f"email-smtp.{config.AWS_REGION}.amazonaws.com", 587,
            config.AWS_ACCESS_KEY_ID, config.AWS_SECRET_ACCESS_KEY, name="ses",
        )
    if service == "console":
        return ConsoleRelay()

    logger.warning("No email service configured (EMAIL_SERVICE=%r)", service or None)
    return None
