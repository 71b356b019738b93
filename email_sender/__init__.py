"""AI Email Sender: LLM-drafted email, edited by the user, relayed over SMTP or handed to a mail client."""
