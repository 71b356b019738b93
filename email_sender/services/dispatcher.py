"""
Validate, sanitize and relay one message per recipient.

Steps, each short-circuiting the rest: presence checks, recipient validation, content
sanitization, relay probe, per-recipient sends. A recipient whose send fails is recorded and
the loop moves on; only a batch where nothing was delivered is an error.
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from email_sender.errors import (
    AllSendsFailedError,
    InvalidRecipientsError,
    MissingFieldError,
    TransportUnavailableError,
)
from email_sender.models import DispatchOutcome, Envelope
from email_sender.services.relay import MessageRelay
from email_sender.services.sanitizer import sanitize_body_or_subject, sanitize_html_danger
from email_sender.services.validator import RecipientBatchError, validate_recipient_batch

logger = logging.getLogger(__name__)

_NEWLINE_RE = re.compile(r"\s*\n\s*")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def clean_subject(subject: str) -> str:
    """Strip active markup and control chars; headers are single-line."""
    return _NEWLINE_RE.sub(" ", clean_body(subject))


def clean_body(body: str) -> str:
    # control chars go first: "<scr\x01ipt>" must not turn into a tag after markup removal
    return sanitize_body_or_subject(sanitize_html_danger(sanitize_body_or_subject(body)))


def checked_recipients(recipients: Any) -> list[str]:
    """Run batch validation and return the trimmed addresses, or raise InvalidRecipientsError."""
    try:
        results = validate_recipient_batch(recipients)
    except RecipientBatchError as e:
        raise InvalidRecipientsError(str(e)) from e
    invalid = [r.address for r in results if not r.valid]
    if invalid:
        raise InvalidRecipientsError(f"Invalid email addresses: {', '.join(invalid)}", invalid)
    return [r.address for r in results]


class Dispatcher:
    """
    Sends a subject/body to a recipient batch through a MessageRelay.

    relay=None means no transport is configured; that surfaces as TransportUnavailableError
    after validation, never as a silent no-op. max_workers > 1 sends on a bounded thread pool.
    """

    def __init__(self, relay: Optional[MessageRelay], sender: str, max_workers: int = 1):
        self.relay = relay
        self.sender = sender
        self.max_workers = max(1, max_workers)

    def dispatch(self, recipients: Any, subject: Any, body: Any) -> DispatchOutcome:
        if not isinstance(recipients, list) or not recipients:
            raise MissingFieldError("recipients", "Recipients are required and must be a non-empty array")
        if _is_blank(subject):
            raise MissingFieldError("subject")
        if _is_blank(body):
            raise MissingFieldError("content")

        addresses = checked_recipients(recipients)

        safe_subject = clean_subject(subject)
        safe_body = clean_body(body)
        if not safe_subject:
            raise MissingFieldError("subject", "Subject was entirely unsafe markup")
        if not safe_body:
            raise MissingFieldError("content", "Content was entirely unsafe markup")

        self._probe(addresses)

        envelopes = [
            Envelope(
                sender=self.sender,
                to=address,
                subject=safe_subject,
                text=safe_body,
                html=safe_body.replace("\n", "<br>"),
            )
            for address in addresses
        ]
        if self.max_workers > 1 and len(envelopes) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(envelopes))) as pool:
                delivered = list(pool.map(self._send_one, envelopes))
        else:
            delivered = [self._send_one(env) for env in envelopes]

        outcome = DispatchOutcome(
            sent_count=sum(delivered),
            failed_recipients=[env.to for env, ok in zip(envelopes, delivered) if not ok],
        )
        logger.info(
            "Dispatch via %s: sent=%d failed=%d",
            self.relay.name, outcome.sent_count, len(outcome.failed_recipients),
        )
        if not outcome.overall_success:
            raise AllSendsFailedError(outcome.failed_recipients)
        return outcome

    def _probe(self, addresses: list[str]) -> None:
        if self.relay is None:
            raise TransportUnavailableError("Email service not configured", addresses)
        try:
            ok = self.relay.probe()
        except Exception as e:
            logger.error("Relay probe failed (%s): %s: %s", self.relay.name, type(e).__name__, e)
            raise TransportUnavailableError(recipients=addresses) from e
        if not ok:
            logger.error("Relay probe failed (%s)", self.relay.name)
            raise TransportUnavailableError(recipients=addresses)

    def _send_one(self, envelope: Envelope) -> bool:
        try:
            message_id = self.relay.send(envelope)
        except Exception:
            logger.exception("Failed to send email to %s", envelope.to)
            return False
        logger.debug("Sent to %s (message_id=%s)", envelope.to, message_id)
        return True
