"""
Email adapter for the blog API.

Mail goes out over SMTP (implicit TLS on port 465, STARTTLS otherwise) using
the credentials in Settings. Delivery problems are logged and reported as a
False return value; callers never see an exception from here.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def smtp_configured(settings: Settings) -> bool:
    required = (settings.smtp_host, settings.smtp_port, settings.smtp_user, settings.smtp_password, settings.smtp_from)
    return all(required)


def build_message(sender: str, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = to_email
    message.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
    message.attach(MIMEText(html_body, "html", "utf-8"))
    return message


def _open_connection(settings: Settings) -> smtplib.SMTP:
    context = ssl.create_default_context()
    if settings.smtp_port == 465:
        return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context)
    server = smtplib.SMTP(settings.smtp_host, settings.smtp_port)
    server.ehlo()
    server.starttls(context=context)
    return server


def send_email(subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
    settings = get_settings()
    if not smtp_configured(settings):
        logger.warning("SMTP not configured; skipping mail to %s", to_email)
        return False
    message = build_message(settings.smtp_from, to_email, subject, html_body, text_body)
    try:
        with _open_connection(settings) as server:
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.smtp_from, [to_email], message.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send mail to %s: %s", to_email, exc)
        return False
    logger.info("Mail '%s' sent to %s", subject, to_email)
    return True
