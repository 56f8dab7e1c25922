"""Email templates from messages.yaml, rendered with str.format."""

from functools import lru_cache
from pathlib import Path

import yaml

MESSAGES_FILE = Path(__file__).parent / "messages.yaml"
EMAIL_PARTS = ("email_subject", "email_body")


@lru_cache(maxsize=1)
def load_templates() -> dict:
    """Parse messages.yaml once per process."""
    with open(MESSAGES_FILE) as f:
        return yaml.safe_load(f) or {}


def has_template(message_type: str) -> bool:
    """True if both the email subject and body exist for message_type."""
    parts = load_templates().get(message_type) or {}
    return all(part in parts for part in EMAIL_PARTS)


def render_message(template: str, context: dict) -> str:
    """
    Fill {placeholders} from context. Extra keys are ignored.

    Raises:
        KeyError: A placeholder has no value in context
    """
    return template.format(**context)


def get_message(message_type: str, part: str, context: dict) -> str:
    """Render one part ("email_subject" / "email_body") of a message type."""
    return render_message(load_templates()[message_type][part], context)
