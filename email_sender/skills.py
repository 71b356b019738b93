"""
Email skills: the function surface shared by the HTTP app and the CLI.

- generate_email(prompt) -> GeneratedDraft
- send_email(recipients, subject, body) -> DispatchOutcome
- mailto_for(recipients, subject, body) -> url string
- add_recipient(existing, candidate) -> list of addresses

Collaborators are built from config on each call; nothing is cached between requests.
"""
from __future__ import annotations

from typing import Any

from email_sender import config
from email_sender.models import DispatchOutcome, GeneratedDraft
from email_sender.services.dispatcher import Dispatcher, checked_recipients
from email_sender.services.llm_crafter import DraftGenerator, build_completion_client
from email_sender.services.mailto import build_mailto_url
from email_sender.services.relay import build_relay, sender_identity
from email_sender.services.validator import add_recipient

__all__ = [
    "add_recipient",
    "get_dispatcher",
    "get_draft_generator",
    "generate_email",
    "mailto_for",
    "send_email",
]


def get_draft_generator() -> DraftGenerator:
    return DraftGenerator(build_completion_client())


def get_dispatcher() -> Dispatcher:
    return Dispatcher(build_relay(), sender_identity(), max_workers=config.DISPATCH_MAX_WORKERS)


def generate_email(prompt: str) -> GeneratedDraft:
    return get_draft_generator().generate(prompt)


def send_email(recipients: Any, subject: str, body: str) -> DispatchOutcome:
    return get_dispatcher().dispatch(recipients, subject, body)


def mailto_for(recipients: Any, subject: str = "", body: str = "") -> str:
    """Validate recipients like a send would, then build the mailto URL."""
    return build_mailto_url(checked_recipients(recipients), subject or "", body or "")
