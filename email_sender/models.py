"""Pydantic models for API requests and responses, plus the request-scoped value objects."""
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class EmailDraft:
    """Subject (possibly empty) and body split out of a completion."""
    subject: str
    body: str


@dataclass(frozen=True)
class GeneratedDraft:
    raw: str
    draft: EmailDraft


@dataclass(frozen=True)
class EmailValidation:
    address: str
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class Envelope:
    """One message for one recipient, as handed to a relay."""
    sender: str
    to: str
    subject: str
    text: str
    html: str


@dataclass
class DispatchOutcome:
    sent_count: int = 0
    failed_recipients: list[str] = field(default_factory=list)

    @property
    def overall_success(self) -> bool:
        return self.sent_count > 0


class GenerateEmailRequest(BaseModel):
    """Request for POST /api/generate-email."""
    prompt: Optional[str] = None


class GenerateEmailResponse(BaseModel):
    success: bool = True
    email: str
    subject: str = ""
    body: str = ""


# Recipients stay loosely typed: non-string entries are reported back as invalid addresses
# rather than rejected by request parsing.
class SendEmailRequest(BaseModel):
    """Request for POST /api/send-email."""
    recipients: Optional[list[Any]] = None
    subject: Optional[str] = None
    content: Optional[str] = None


class SendEmailResponse(BaseModel):
    success: bool = True
    sentCount: int = 0
    failedRecipients: Optional[list[str]] = None
    error: Optional[str] = None


class MailtoRequest(BaseModel):
    """Request for POST /api/mailto."""
    recipients: Optional[list[Any]] = None
    subject: str = ""
    content: str = ""


class MailtoResponse(BaseModel):
    success: bool = True
    mailto: str


class AddRecipientRequest(BaseModel):
    """Request for POST /api/recipients."""
    recipients: list[str] = Field(default_factory=list)
    candidate: str = ""


class AddRecipientResponse(BaseModel):
    success: bool = True
    recipients: list[str]
