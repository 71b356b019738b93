"""Config from environment."""
import os
from pathlib import Path

from dotenv import load_dotenv

_repo_root = Path(__file__).resolve().parent.parent
load_dotenv(_repo_root / ".env")


def _env(key: str, default: str = "") -> str:
    return (os.getenv(key) or default).strip()


LOG_LEVEL = _env("LOG_LEVEL", "INFO")

# Groq chat completions (OpenAI-compatible API)
GROQ_API_KEY = _env("GROQ_API_KEY")
GROQ_MODEL = _env("GROQ_MODEL", "llama-3.3-70b-versatile")
GROQ_BASE_URL = _env("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
LLM_TIMEOUT_SECONDS = float(_env("LLM_TIMEOUT_SECONDS", "30"))
LLM_MAX_TOKENS = int(_env("LLM_MAX_TOKENS", "1000"))
LLM_TEMPERATURE = float(_env("LLM_TEMPERATURE", "0.7"))

# Outbound relay: gmail | sendgrid | smtp | ses | console
EMAIL_SERVICE = _env("EMAIL_SERVICE").lower()
EMAIL_USER = _env("EMAIL_USER")
EMAIL_PASS = _env("EMAIL_PASS")
SMTP_HOST = _env("SMTP_HOST")
SMTP_PORT = int(_env("SMTP_PORT", "587"))
SENDGRID_API_KEY = _env("SENDGRID_API_KEY")
AWS_ACCESS_KEY_ID = _env("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = _env("AWS_SECRET_ACCESS_KEY")
AWS_REGION = _env("AWS_REGION", "us-east-1")
SMTP_TIMEOUT_SECONDS = float(_env("SMTP_TIMEOUT_SECONDS", "15"))

# Sender identity
SENDER_EMAIL = _env("SENDER_EMAIL") or EMAIL_USER or "noreply@example.com"
SENDER_NAME = _env("SENDER_NAME", "AI Email Sender")

# 1 = send sequentially; >1 = bounded thread pool
DISPATCH_MAX_WORKERS = max(1, int(_env("DISPATCH_MAX_WORKERS", "1")))

# Limits
PROMPT_MAX_LEN = 2000
PROMPT_SANITIZED_MAX_LEN = 1000
CONTENT_MAX_LEN = 10000
EMAIL_MAX_LEN = 254
MAX_RECIPIENTS = 50
