"""LLM-drafted subject and body from a user prompt (Groq chat completions over httpx)."""
from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

import httpx

from email_sender.config import (
    GROQ_API_KEY,
    GROQ_BASE_URL,
    GROQ_MODEL,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
    PROMPT_MAX_LEN,
)
from email_sender.errors import (
    CompletionNotConfiguredError,
    EmptyCompletionError,
    InvalidPromptError,
    UpstreamAuthError,
    UpstreamThrottledError,
    UpstreamUnavailableError,
)
from email_sender.models import EmailDraft, GeneratedDraft

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional email writer. Generate a well-structured, professional email based on "
    "the user's prompt. Include an appropriate subject line at the beginning of your response in the "
    'format "Subject: [subject line]" followed by the email body. Keep the tone professional but friendly.'
)

_SUBJECT_LINE_RE = re.compile(r"^subject:[ \t]*(.*)$", re.IGNORECASE)


class CompletionClient(Protocol):
    def complete(self, system: str, user: str, *, max_tokens: int, temperature: float) -> str:
        ...


class GroqCompletionClient:
    """
    Minimal client for Groq's OpenAI-compatible /chat/completions endpoint.

    Maps HTTP failures onto the generation error taxonomy: 401/403 -> UpstreamAuthError,
    429 -> UpstreamThrottledError, anything else (incl. timeouts) -> UpstreamUnavailableError.
    """

    def __init__(
        self,
        api_key: str,
        model: str = GROQ_MODEL,
        base_url: str = GROQ_BASE_URL,
        timeout: float = LLM_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http_client or httpx.Client(timeout=timeout)

    def complete(self, system: str, user: str, *, max_tokens: int, temperature: float) -> str:
        try:
            resp = self._http.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Groq completion failed: HTTP %s", status)
            if status in (401, 403):
                raise UpstreamAuthError() from e
            if status == 429:
                raise UpstreamThrottledError() from e
            raise UpstreamUnavailableError() from e
        except httpx.HTTPError as e:
            logger.warning("Groq completion failed: %s: %s", type(e).__name__, e)
            raise UpstreamUnavailableError() from e

        try:
            choices = resp.json().get("choices") or [{}]
        except ValueError as e:
            raise UpstreamUnavailableError() from e
        return ((choices[0].get("message") or {}).get("content") or "").strip()


def parse_draft(raw: str) -> EmailDraft:
    """
    Split a completion into subject and body.

    A first line of the form "Subject: ..." becomes the subject and is removed from the body;
    otherwise the subject is empty and the whole text is the body.
    """
    text = (raw or "").strip()
    first, _, rest = text.partition("\n")
    m = _SUBJECT_LINE_RE.match(first.strip())
    if not m:
        return EmailDraft(subject="", body=text)
    return EmailDraft(subject=m.group(1).strip(), body=rest.strip())


def check_prompt(prompt: object) -> str:
    """Return the trimmed prompt, or raise InvalidPromptError."""
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidPromptError("Prompt is required and must be a non-empty string")
    if len(prompt) > PROMPT_MAX_LEN:
        raise InvalidPromptError(f"Prompt is too long. Maximum {PROMPT_MAX_LEN} characters allowed.")
    return prompt.strip()


class DraftGenerator:
    """Prompt in, EmailDraft out. No retries: the caller decides whether to ask again."""

    def __init__(
        self,
        client: Optional[CompletionClient],
        max_tokens: int = LLM_MAX_TOKENS,
        temperature: float = LLM_TEMPERATURE,
    ):
        self.client = client
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, prompt: object) -> GeneratedDraft:
        text = check_prompt(prompt)
        if self.client is None:
            raise CompletionNotConfiguredError()
        logger.info("Generating draft (prompt_len=%d)", len(text))
        raw = self.client.complete(
            SYSTEM_PROMPT, text, max_tokens=self.max_tokens, temperature=self.temperature
        )
        if not raw or not raw.strip():
            raise EmptyCompletionError()
        raw = raw.strip()
        return GeneratedDraft(raw=raw, draft=parse_draft(raw))


def build_completion_client() -> Optional[GroqCompletionClient]:
    """Groq client from config, or None when GROQ_API_KEY is unset."""
    if not GROQ_API_KEY:
        return None
    return GroqCompletionClient(GROQ_API_KEY)
