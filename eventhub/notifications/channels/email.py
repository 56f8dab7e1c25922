"""Email delivery through SendGrid."""

import logging
import os
import re
from dataclasses import dataclass

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)

SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "events@example.org")
FROM_NAME = os.environ.get("FROM_NAME", "Events Team")

# Templates may contain [text](url) links
LINK = re.compile(r"\[(?P<text>[^\]]+)\]\((?P<url>[^)]+)\)")

HTML_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: Helvetica, Arial, sans-serif; line-height: 1.5; color: #222;">
{body}
</body>
</html>"""

_client: SendGridAPIClient | None = None


@dataclass
class EmailMessage:
    """A rendered email: recipient, subject and markdown-ish body."""

    to_email: str
    subject: str
    body: str

    def to_mail(self) -> Mail:
        return Mail(
            from_email=(FROM_EMAIL, FROM_NAME),
            to_emails=self.to_email,
            subject=self.subject,
            plain_text_content=markdown_to_plain_text(self.body),
            html_content=markdown_to_html(self.body),
        )


def markdown_to_html(text: str) -> str:
    """Links become anchors, line breaks become <br>."""
    body = LINK.sub(r'<a href="\g<url>">\g<text></a>', text)
    return HTML_PAGE.format(body=body.replace("\n", "<br>\n"))


def markdown_to_plain_text(text: str) -> str:
    """Links become "text (url)"."""
    return LINK.sub(r"\g<text> (\g<url>)", text)


def _get_sendgrid_client() -> SendGridAPIClient | None:
    """Lazily build the shared client; None when no API key is configured."""
    global _client
    if _client is None and SENDGRID_API_KEY:
        _client = SendGridAPIClient(SENDGRID_API_KEY)
    return _client


def send_email(message: EmailMessage) -> bool:
    """
    Hand one message to SendGrid.

    Blocking; callers on the event loop should run it in a worker thread.

    Returns:
        True if SendGrid accepted the message (2xx), False otherwise
    """
    client = _get_sendgrid_client()
    if client is None:
        logger.warning("SENDGRID_API_KEY not set, email to %s not sent", message.to_email)
        return False

    try:
        response = client.send(message.to_mail())
    except Exception as e:
        logger.error(f"SendGrid rejected email to {message.to_email}: {e}")
        return False

    return 200 <= response.status_code < 300
