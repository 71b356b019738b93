"""FastAPI app: POST /api/generate-email, POST /api/send-email, POST /api/mailto, POST /api/recipients, GET /health."""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from email_sender import config
from email_sender.errors import EmailSenderError
from email_sender.models import (
    AddRecipientRequest,
    AddRecipientResponse,
    GenerateEmailRequest,
    GenerateEmailResponse,
    MailtoRequest,
    MailtoResponse,
    SendEmailRequest,
    SendEmailResponse,
)
from email_sender.services.dispatcher import Dispatcher
from email_sender.services.llm_crafter import DraftGenerator
from email_sender.skills import add_recipient, get_dispatcher, get_draft_generator, mailto_for

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Email Sender", version="0.1.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(EmailSenderError)
async def email_sender_error_handler(request: Request, exc: EmailSenderError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        message = "Invalid JSON in request body"
    else:
        fields = ", ".join(str(e.get("loc", ["body"])[-1]) for e in errors)
        message = f"Invalid request body: {fields}"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.get("/health")
def health():
    """Health check. Reports whether the LLM and a relay are configured (no network calls)."""
    return {
        "ok": True,
        "service": "ai-email-sender",
        "llm_configured": bool(config.GROQ_API_KEY),
        "email_service": config.EMAIL_SERVICE or None,
    }


@app.post("/api/generate-email", response_model=GenerateEmailResponse)
def generate_email(req: GenerateEmailRequest, generator: DraftGenerator = Depends(get_draft_generator)):
    """Draft an email from a prompt. Returns the raw completion plus the subject/body split."""
    result = generator.generate(req.prompt)
    return GenerateEmailResponse(email=result.raw, subject=result.draft.subject, body=result.draft.body)


@app.post("/api/send-email", response_model=SendEmailResponse)
def send_email(req: SendEmailRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    """
    Send the edited draft to every recipient. 200 when all were sent, 207 when some failed;
    validation and transport failures come back through the EmailSenderError handler.
    """
    outcome = dispatcher.dispatch(req.recipients, req.subject, req.content)
    if outcome.failed_recipients:
        resp = SendEmailResponse(
            sentCount=outcome.sent_count,
            failedRecipients=outcome.failed_recipients,
            error=f"Partially successful: failed to send to {len(outcome.failed_recipients)} recipients",
        )
        return JSONResponse(status_code=207, content=resp.model_dump(exclude_none=True))
    resp = SendEmailResponse(sentCount=outcome.sent_count)
    return JSONResponse(status_code=200, content=resp.model_dump(exclude_none=True))


@app.post("/api/mailto", response_model=MailtoResponse)
def mailto(req: MailtoRequest):
    """Prefilled mailto: link for sending from the user's own mail client."""
    return MailtoResponse(mailto=mailto_for(req.recipients, req.subject, req.content))


@app.post("/api/recipients", response_model=AddRecipientResponse)
def recipients_add(req: AddRecipientRequest):
    """Clean up and append one typed address to the recipient list."""
    return AddRecipientResponse(recipients=add_recipient(req.recipients, req.candidate))
