"""Fire-and-forget user notifications."""

import logging

from blog_api.workers.tasks import send_welcome_email

logger = logging.getLogger(__name__)


def dispatch_welcome_email(email: str, name: str) -> bool:
    """Queue the welcome mail; returns False instead of raising when the broker is unavailable."""
    try:
        send_welcome_email.delay(email, name)
    except Exception:
        logger.exception("Could not queue welcome mail for %s", email)
        return False
    return True
