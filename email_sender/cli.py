"""
CLI for the email sender: generate, send, mailto, serve.

Usage:
  python -m email_sender.cli generate --prompt "Invite the team to Friday's retro"
  python -m email_sender.cli send --to a@example.com,b@example.com --subject "Hi" --body "Hello" [--confirm]
  python -m email_sender.cli mailto --to a@example.com --subject "Hi" --body "Hello"
  python -m email_sender.cli serve --port 8003
"""
import argparse
import json
import sys

from email_sender.errors import EmailSenderError
from email_sender.services.sanitizer import sanitize_prompt
from email_sender.skills import add_recipient, generate_email, mailto_for, send_email

# sysexits EX_TEMPFAIL: the same command may succeed if run again later
EXIT_TEMPFAIL = 75


def _recipients_arg(s: str) -> list[str]:
    """Comma-separated addresses, cleaned up and de-duplicated the same way the UI does it."""
    recipients: list[str] = []
    for token in (s or "").split(","):
        if token.strip():
            recipients = add_recipient(recipients, token)
    return recipients


def cmd_generate(args):
    result = generate_email(sanitize_prompt(args.prompt))
    print(json.dumps({"subject": result.draft.subject, "body": result.draft.body}, indent=2))


def cmd_send(args):
    to = _recipients_arg(args.to)
    if args.confirm:
        print("Draft:", json.dumps({"to": to, "subject": args.subject, "body": args.body}, indent=2))
        ok = input("Send? [y/N]: ").strip().lower()
        if ok != "y":
            print("Aborted.")
            return
    outcome = send_email(to, args.subject, args.body)
    print(json.dumps({"sentCount": outcome.sent_count, "failedRecipients": outcome.failed_recipients}, indent=2))
    if outcome.failed_recipients:
        sys.exit(1)


def cmd_mailto(args):
    print(mailto_for(_recipients_arg(args.to), args.subject, args.body))


def cmd_serve(args):
    import uvicorn

    uvicorn.run("email_sender.main:app", host=args.host, port=args.port)


def main(argv=None):
    parser = argparse.ArgumentParser(description="AI email sender CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_generate = sub.add_parser("generate", help="Draft subject and body from a prompt")
    p_generate.add_argument("--prompt", required=True, help="What the email should say")
    p_generate.set_defaults(run=cmd_generate)

    p_send = sub.add_parser("send", help="Send through the configured EMAIL_SERVICE")
    p_send.add_argument("--to", required=True, help="Comma-separated to addresses")
    p_send.add_argument("--subject", required=True, help="Subject")
    p_send.add_argument("--body", required=True, help="Body")
    p_send.add_argument("--confirm", action="store_true", help="Show draft and confirm before send")
    p_send.set_defaults(run=cmd_send)

    p_mailto = sub.add_parser("mailto", help="Print mailto URL (user client)")
    p_mailto.add_argument("--to", required=True, help="Comma-separated to addresses")
    p_mailto.add_argument("--subject", default="", help="Subject")
    p_mailto.add_argument("--body", default="", help="Body")
    p_mailto.set_defaults(run=cmd_mailto)

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8003)
    p_serve.set_defaults(run=cmd_serve)

    args = parser.parse_args(argv)
    try:
        args.run(args)
    except EmailSenderError as e:
        print(json.dumps(e.to_payload(), indent=2), file=sys.stderr)
        sys.exit(EXIT_TEMPFAIL if e.retryable else 1)


if __name__ == "__main__":
    main()
