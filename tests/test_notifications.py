from __future__ import annotations

from blog_api.services import notifications
from blog_api.workers import tasks


class _BrokenBroker:
    def delay(self, *args, **kwargs):
        raise ConnectionError("broker unavailable")


def test_enqueue_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(notifications, "send_welcome_email", _BrokenBroker())

    assert notifications.dispatch_welcome_email("ann@example.com", "Ann") is False


def test_welcome_task_sends_mail(temp_db, monkeypatch):
    sent = []

    def _send(subject, to_email, html_body, text_body=None):
        sent.append((subject, to_email, text_body))
        return True

    monkeypatch.setattr(tasks, "send_email", _send)

    assert tasks.send_welcome_email("ann@example.com", "Ann") is True
    subject, to_email, text_body = sent[0]
    assert subject == "Welcome to Blog API, Ann!"
    assert to_email == "ann@example.com"
    assert "Ann" in text_body


def test_welcome_mail_without_smtp_is_not_fatal(temp_db):
    assert tasks.send_welcome_email("ann@example.com", "Ann") is False
