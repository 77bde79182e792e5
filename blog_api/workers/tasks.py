"""Celery tasks."""

import html
import logging

from celery import shared_task

from blog_api.core.config import get_settings
from blog_api.core.mailer import send_email

logger = logging.getLogger(__name__)


def welcome_subject(app_name: str, name: str) -> str:
    return f"Welcome to {app_name}, {name}!"


def render_welcome_email(app_name: str, name: str) -> tuple[str, str]:
    """Return the (html, text) bodies of the welcome mail."""
    safe_name = html.escape(name)
    safe_app = html.escape(app_name)
    html_body = f"""
      <div style="font-family:Arial,sans-serif;font-size:15px;color:#0f172a">
        <p>Hi {safe_name},</p>
        <p>Thanks for signing up to <strong>{safe_app}</strong>. Your account is ready to use.</p>
        <p>Happy writing!</p>
      </div>
    """
    text_body = (
        f"Hi {name},\n\n"
        f"Thanks for signing up to {app_name}. Your account is ready to use.\n\n"
        "Happy writing!"
    )
    return html_body, text_body


@shared_task(name="blog_api.send_welcome_email")
def send_welcome_email(email: str, name: str) -> bool:
    app_name = get_settings().app_name
    html_body, text_body = render_welcome_email(app_name, name)
    sent = send_email(welcome_subject(app_name, name), email, html_body, text_body)
    if not sent:
        logger.warning("Welcome mail to %s was not delivered", email)
    return sent
