"""
Unit tests for services.mailer module.
SMTP is never contacted; the transport is replaced with fakes.
"""
import smtplib

import pytest

from app.config import settings
from app.services import mailer


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_port", 2525)
    monkeypatch.setattr(settings, "mail_from", "noreply@example.com")
    monkeypatch.setattr(settings, "smtp_username", "mailer")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    monkeypatch.setattr(settings, "smtp_use_tls", True)


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def send_message(self, msg):
        self.calls.append(("send", msg["To"], msg["Subject"], msg.get_payload()))


def test_skips_when_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", None)
    called = []
    monkeypatch.setattr(mailer, "_deliver", lambda *a: called.append(a))

    assert mailer.send_email("a@example.com", "Hi", "Body") is False
    assert called == []


def test_sends_through_smtp(monkeypatch, smtp_configured):
    FakeSMTP.instances.clear()
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

    assert mailer.send_welcome_email("jess@example.com", "Jess") is True

    server = FakeSMTP.instances[0]
    assert (server.host, server.port) == ("smtp.example.com", 2525)
    assert server.calls[0] == "starttls"
    assert server.calls[1] == ("login", "mailer", "secret")
    _, to, subject, payload = server.calls[2]
    assert to == "jess@example.com"
    assert subject == "Thanks for joining in!"
    assert "Jess" in payload


def test_failure_is_swallowed(monkeypatch, smtp_configured):
    def _boom(host, port, timeout=None):
        raise smtplib.SMTPConnectError(421, b"down")

    monkeypatch.setattr(smtplib, "SMTP", _boom)

    assert mailer.send_farewell_email("jess@example.com", "Jess") is False
