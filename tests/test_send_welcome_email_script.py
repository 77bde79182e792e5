from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "send_welcome_email.py"


@pytest.fixture()
def script():
    spec = importlib.util.spec_from_file_location("send_welcome_email", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_queues_the_welcome_mail(script, monkeypatch, capsys):
    queued = []
    monkeypatch.setattr(script, "dispatch_welcome_email", lambda email, name: queued.append((email, name)) or True)

    assert script.main(["ann@example.com", "Ann Smith"]) == 0
    assert queued == [("ann@example.com", "Ann Smith")]
    assert "queued for: ann@example.com" in capsys.readouterr().out


def test_reports_enqueue_failure(script, monkeypatch, capsys):
    monkeypatch.setattr(script, "dispatch_welcome_email", lambda email, name: False)

    assert script.main(["ann@example.com", "Ann"]) == 1
    assert "Failed to queue" in capsys.readouterr().err
