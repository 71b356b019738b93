"""
Structural email validation for single addresses and recipient batches.

The grammar is a practical subset of RFC 5322: dot-atom local part, '@', two or more DNS labels.
It says nothing about deliverability.
"""
from __future__ import annotations

import re
from typing import Any

from email_sender.config import EMAIL_MAX_LEN, MAX_RECIPIENTS
from email_sender.errors import InvalidRecipientsError
from email_sender.models import EmailValidation
from email_sender.services.sanitizer import sanitize_email_token

_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
EMAIL_RE = re.compile(rf"{_ATOM}(?:\.{_ATOM})*@{_LABEL}(?:\.{_LABEL})+")


class RecipientBatchError(ValueError):
    """The batch as a whole is unusable (shape, size or duplicates)."""


def is_valid_email_address(value: Any) -> EmailValidation:
    if not isinstance(value, str) or not value.strip():
        return EmailValidation(address="" if value is None else str(value), valid=False,
                               reason="Email address is required")
    address = value.strip()
    if len(address) > EMAIL_MAX_LEN:
        return EmailValidation(address=address, valid=False, reason="Email address is too long")
    if not EMAIL_RE.fullmatch(address):
        return EmailValidation(address=address, valid=False, reason="Email address is malformed")
    return EmailValidation(address=address, valid=True)


def _duplicates(items: list[Any]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for item in items:
        key = str(item).strip().lower()
        if key in seen and key not in dupes:
            dupes.append(key)
        seen.add(key)
    return dupes


def validate_recipient_batch(items: Any) -> list[EmailValidation]:
    """
    Validate a recipient list.

    Batch-level problems (not a list, empty, over MAX_RECIPIENTS, case-insensitive duplicates)
    raise RecipientBatchError before any address is looked at. Otherwise returns one
    EmailValidation per input item, in order.
    """
    if not isinstance(items, list):
        raise RecipientBatchError("Invalid email list format")
    if not items:
        raise RecipientBatchError("At least one recipient required")
    if len(items) > MAX_RECIPIENTS:
        raise RecipientBatchError(f"Maximum {MAX_RECIPIENTS} recipients allowed")
    dupes = _duplicates(items)
    if dupes:
        raise RecipientBatchError(f"Duplicate recipients: {', '.join(dupes)}")
    return [is_valid_email_address(item) for item in items]


def add_recipient(existing: list[str], candidate: str) -> list[str]:
    """
    Clean up a typed address and append it to the recipient list.

    Raises InvalidRecipientsError with a user-facing message when the candidate is unusable,
    already present, or the list is full. Returns a new list; `existing` is not modified.
    """
    address = sanitize_email_token(candidate)
    if not address:
        raise InvalidRecipientsError("Please enter a valid email address")
    result = is_valid_email_address(address)
    if not result.valid:
        raise InvalidRecipientsError(result.reason or "Invalid email address", [address])
    if address in {e.strip().lower() for e in existing}:
        raise InvalidRecipientsError("This email address has already been added")
    if len(existing) >= MAX_RECIPIENTS:
        raise InvalidRecipientsError(f"Maximum {MAX_RECIPIENTS} recipients allowed")
    return [*existing, address]
