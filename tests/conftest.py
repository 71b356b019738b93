"""
Pytest configuration and fixtures for all tests.
"""
import os

import pytest

# Set up test environment before importing any package modules (.env must not leak in)
os.environ["GROQ_API_KEY"] = ""
os.environ["EMAIL_SERVICE"] = ""
os.environ.setdefault("LOG_LEVEL", "INFO")

from email_sender.models import Envelope  # noqa: E402


class FakeRelay:
    """In-memory relay: records envelopes, fails for chosen recipients."""

    name = "fake"

    def __init__(self, fail_for=(), probe_result=True, probe_error=None):
        self.fail_for = set(fail_for)
        self.probe_result = probe_result
        self.probe_error = probe_error
        self.probes = 0
        self.sent: list[Envelope] = []
        self.attempted: list[str] = []

    def probe(self) -> bool:
        self.probes += 1
        if self.probe_error is not None:
            raise self.probe_error
        return self.probe_result

    def send(self, envelope: Envelope) -> str:
        self.attempted.append(envelope.to)
        if envelope.to in self.fail_for:
            raise ConnectionError(f"relay rejected {envelope.to}")
        self.sent.append(envelope)
        return f"<msg-{len(self.sent)}@test>"


class FakeCompletionClient:
    """Returns a canned completion (or raises) and records every call."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def complete(self, system: str, user: str, *, max_tokens: int, temperature: float) -> str:
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def relay():
    return FakeRelay()


@pytest.fixture
def completion():
    return FakeCompletionClient(reply="Subject: Team Sync\n\nLet's meet Friday.")
