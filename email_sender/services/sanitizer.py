"""
Text sanitization for prompts, subjects, bodies and raw address tokens.

Every function is pure and total: anything that is not a string (or is empty) comes back as "".
Running any sanitizer twice gives the same result as running it once. sanitize_email_token
is cosmetic only: its output still has to go through the validator.
"""
from __future__ import annotations

import re
from typing import Any

from email_sender.config import CONTENT_MAX_LEN, PROMPT_SANITIZED_MAX_LEN

# C0 controls and DEL, except \t (0x09) and \n (0x0A)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")
_SPACE_RUN_RE = re.compile(r" {2,}")
_PUNCT_RUN_RE = re.compile(r"[!?]{3,}")
_EMAIL_TOKEN_JUNK_RE = re.compile(r"[^a-z0-9_@.\-]")
_DOT_RUN_RE = re.compile(r"\.{2,}")
_SCRIPT_RE = re.compile(r"<script\b.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_IFRAME_RE = re.compile(r"<iframe\b.*?</iframe\s*>", re.IGNORECASE | re.DOTALL)


def _strip_controls(text: str) -> str:
    text = text.replace("\0", " ")
    text = _CONTROL_RE.sub("", text)
    return _SPACE_RUN_RE.sub(" ", text).strip()


def sanitize_generic(text: Any) -> str:
    """NUL -> space, drop control chars (keep \\n and \\t), collapse runs of spaces, trim."""
    if not text or not isinstance(text, str):
        return ""
    return _strip_controls(text)


def sanitize_email_token(text: Any) -> str:
    """
    Best-effort cleanup of a typed address: lower-case, keep only [a-z0-9_@.-], squeeze dots.
    Not a validity check; run the result through the validator.
    """
    if not text or not isinstance(text, str):
        return ""
    token = _EMAIL_TOKEN_JUNK_RE.sub("", text.strip().lower())
    token = _DOT_RUN_RE.sub(".", token)
    return token.strip(".")


def sanitize_prompt(text: Any) -> str:
    """Generic cleanup, squeeze !!!/??? runs to '!!', cap at PROMPT_SANITIZED_MAX_LEN."""
    sanitized = sanitize_generic(text)
    sanitized = _PUNCT_RUN_RE.sub("!!", sanitized)
    if len(sanitized) > PROMPT_SANITIZED_MAX_LEN:
        sanitized = sanitized[:PROMPT_SANITIZED_MAX_LEN].rstrip()
    return sanitized


def sanitize_body_or_subject(text: Any) -> str:
    """Normalize line endings to \\n, then generic cleanup (newlines kept), cap at CONTENT_MAX_LEN."""
    if not text or not isinstance(text, str):
        return ""
    sanitized = _strip_controls(text.replace("\r\n", "\n").replace("\r", "\n"))
    if len(sanitized) > CONTENT_MAX_LEN:
        sanitized = sanitized[:CONTENT_MAX_LEN].rstrip()
    return sanitized


def sanitize_html_danger(text: Any) -> str:
    """
    Remove <script>...</script> and <iframe>...</iframe> blocks, then trim.

    Repeats until nothing matches, so a tag split around an inner block cannot reassemble.
    """
    if not text or not isinstance(text, str):
        return ""
    while True:
        stripped = _IFRAME_RE.sub("", _SCRIPT_RE.sub("", text))
        if stripped == text:
            break
        text = stripped
    return text.strip()
