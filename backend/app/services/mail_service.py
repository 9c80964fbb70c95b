"""Transactional email: render templates and hand them to the mail sink.

Delivery is simulated: the rendered message is logged rather than sent over
SMTP. Mail failures are logged and never propagate to the caller, so a
sign-up is not rolled back because a welcome email could not be delivered.
"""

import logging
from dataclasses import dataclass

from app.config import settings

logger = logging.getLogger(__name__)

TEMPLATES = {
    "welcome": {
        "subject": "Welcome to {app_name}, {name}!",
        "body": (
            "Welcome, {name}!\n\n"
            "Thank you for joining {app_name}. We're thrilled to have you on board.\n\n"
            "Here are a few things you can do to get started:\n"
            "- Explore our listings: {app_url}/listings\n"
            "- Post your own property: {app_url}/become-host\n\n"
            "If you have any questions, feel free to contact us at {admin_email}.\n\n"
            "Best regards,\nThe {app_name} Team"
        ),
    },
}


@dataclass(frozen=True)
class EmailMessage:
    """A rendered email ready for delivery."""

    sender: str
    recipient: str
    subject: str
    body: str


def render_email(template: str, recipient: str, **variables: str) -> EmailMessage:
    """Render ``template`` for ``recipient``.

    Raises:
        KeyError: If the template name is unknown.
    """
    tmpl = TEMPLATES[template]
    context = {
        "app_name": settings.app_name,
        "app_url": settings.app_url,
        "admin_email": settings.mail_admin_email,
        **variables,
    }
    return EmailMessage(
        sender=settings.mail_from_email,
        recipient=recipient,
        subject=tmpl["subject"].format(**context),
        body=tmpl["body"].format(**context),
    )


def deliver(message: EmailMessage) -> None:
    """Simulated delivery: log the message."""
    logger.info("Email sent from %s to %s: %s", message.sender, message.recipient, message.subject)


async def send_welcome_email(email: str, name: str) -> bool:
    """Send the welcome email. Returns False (and logs) on failure."""
    try:
        message = render_email("welcome", email, name=name or email)
        deliver(message)
    except Exception:
        logger.exception("Error sending welcome email to %s", email)
        return False
    return True
