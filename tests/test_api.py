"""HTTP tests for the FastAPI app (collaborators replaced through dependency overrides)."""
import pytest
from fastapi.testclient import TestClient

from email_sender.errors import UpstreamAuthError, UpstreamThrottledError, UpstreamUnavailableError
from email_sender.main import app
from email_sender.services.dispatcher import Dispatcher
from email_sender.services.llm_crafter import DraftGenerator
from email_sender.skills import get_dispatcher, get_draft_generator
from tests.conftest import FakeCompletionClient, FakeRelay


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _use_completion(fake):
    app.dependency_overrides[get_draft_generator] = lambda: DraftGenerator(fake)


def _use_relay(fake):
    app.dependency_overrides[get_dispatcher] = lambda: Dispatcher(fake, "noreply@example.com")


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["service"] == "ai-email-sender"
    assert data["llm_configured"] is False


class TestGenerateEmail:
    def test_success(self, client, completion):
        _use_completion(completion)
        r = client.post("/api/generate-email", json={"prompt": "Invite the team to a sync"})
        assert r.status_code == 200
        assert r.json() == {
            "success": True,
            "email": "Subject: Team Sync\n\nLet's meet Friday.",
            "subject": "Team Sync",
            "body": "Let's meet Friday.",
        }

    @pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   "}])
    def test_empty_prompt(self, client, completion, body):
        _use_completion(completion)
        r = client.post("/api/generate-email", json=body)
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert completion.calls == []

    def test_prompt_too_long_makes_no_upstream_call(self, client, completion):
        _use_completion(completion)
        r = client.post("/api/generate-email", json={"prompt": "a" * 2001})
        assert r.status_code == 400
        assert "too long" in r.json()["error"]
        assert completion.calls == []

    def test_missing_api_key(self, client):
        r = client.post("/api/generate-email", json={"prompt": "Write an email"})
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Groq API key not configured"}

    @pytest.mark.parametrize("error,status", [
        (UpstreamAuthError(), 401),
        (UpstreamThrottledError(), 429),
        (UpstreamUnavailableError(), 500),
    ])
    def test_upstream_failures(self, client, error, status):
        _use_completion(FakeCompletionClient(error=error))
        r = client.post("/api/generate-email", json={"prompt": "Write an email"})
        assert r.status_code == status
        assert r.json()["success"] is False
        assert r.json()["error"]

    def test_empty_completion(self, client):
        _use_completion(FakeCompletionClient(reply=""))
        r = client.post("/api/generate-email", json={"prompt": "Write an email"})
        assert r.status_code == 500
        assert r.json()["error"] == "Failed to generate email content"


class TestSendEmail:
    def test_all_sent(self, client, relay):
        _use_relay(relay)
        r = client.post("/api/send-email", json={
            "recipients": ["a@example.com", "b@example.com"], "subject": "Hi", "content": "Hello",
        })
        assert r.status_code == 200
        assert r.json() == {"success": True, "sentCount": 2}

    def test_partial_is_207(self, client):
        _use_relay(FakeRelay(fail_for={"ok2@example.com"}))
        r = client.post("/api/send-email", json={
            "recipients": ["ok1@example.com", "ok2@example.com"], "subject": "Hi", "content": "Hello",
        })
        assert r.status_code == 207
        data = r.json()
        assert data["success"] is True
        assert data["sentCount"] == 1
        assert data["failedRecipients"] == ["ok2@example.com"]
        assert "Partially successful" in data["error"]

    def test_all_failed_is_500(self, client):
        _use_relay(FakeRelay(fail_for={"a@example.com"}))
        r = client.post("/api/send-email", json={"recipients": ["a@example.com"], "subject": "Hi", "content": "Hello"})
        assert r.status_code == 500
        data = r.json()
        assert data["success"] is False
        assert data["sentCount"] == 0
        assert data["failedRecipients"] == ["a@example.com"]

    def test_invalid_recipient_is_400_and_nothing_sent(self, client, relay):
        _use_relay(relay)
        r = client.post("/api/send-email", json={
            "recipients": ["s1@example.com", "bad", "s2@example.com"], "subject": "Hi", "content": "Hello",
        })
        assert r.status_code == 400
        assert r.json()["failedRecipients"] == ["bad"]
        assert relay.attempted == []

    @pytest.mark.parametrize("body", [
        {"subject": "Hi", "content": "Hello"},
        {"recipients": [], "subject": "Hi", "content": "Hello"},
        {"recipients": ["a@example.com"], "content": "Hello"},
        {"recipients": ["a@example.com"], "subject": "Hi", "content": " "},
    ])
    def test_missing_fields(self, client, relay, body):
        _use_relay(relay)
        r = client.post("/api/send-email", json=body)
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_duplicates(self, client, relay):
        _use_relay(relay)
        r = client.post("/api/send-email", json={"recipients": ["a@x.com", "A@X.COM"], "subject": "Hi", "content": "Hello"})
        assert r.status_code == 400
        assert "Duplicate" in r.json()["error"]

    def test_invalid_json(self, client, relay):
        _use_relay(relay)
        r = client.post("/api/send-email", content=b"{not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid JSON in request body"}

    def test_wrong_field_type(self, client, relay):
        _use_relay(relay)
        r = client.post("/api/send-email", json={"recipients": "a@example.com", "subject": "Hi", "content": "Hello"})
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_transport_unconfigured(self, client):
        r = client.post("/api/send-email", json={"recipients": ["a@example.com"], "subject": "Hi", "content": "Hello"})
        assert r.status_code == 500
        assert r.json() == {
            "success": False,
            "error": "Email service not configured",
            "sentCount": 0,
            "failedRecipients": ["a@example.com"],
        }


class TestMailtoAndRecipients:
    def test_mailto(self, client):
        r = client.post("/api/mailto", json={"recipients": ["a@example.com"], "subject": "Hi there", "content": "Hello"})
        assert r.status_code == 200
        assert r.json()["mailto"] == "mailto:a@example.com?subject=Hi%20there&body=Hello"

    def test_mailto_invalid_recipient(self, client):
        r = client.post("/api/mailto", json={"recipients": ["nope"], "subject": "Hi", "content": "Hello"})
        assert r.status_code == 400
        assert r.json()["failedRecipients"] == ["nope"]

    def test_add_recipient(self, client):
        r = client.post("/api/recipients", json={"recipients": ["a@example.com"], "candidate": " B@Example.com "})
        assert r.status_code == 200
        assert r.json()["recipients"] == ["a@example.com", "b@example.com"]

    def test_add_duplicate_recipient(self, client):
        r = client.post("/api/recipients", json={"recipients": ["a@example.com"], "candidate": "A@example.com"})
        assert r.status_code == 400
        assert "already been added" in r.json()["error"]
