import asyncio

import httpx

from lecture_pilot.core.config import Settings
from lecture_pilot.services import email as email_service


def _configured() -> Settings:
    return Settings(
        emailjs_service_id="service_x",
        emailjs_template_id="template_x",
        emailjs_public_key="public_x",
    )


def test_template_greets_by_name():
    subject, body = email_service.welcome_email_template("Jane")
    assert subject == "🎉 Welcome to ReviseRight, Jane!"
    assert body.startswith("Hi Jane,")


def test_unconfigured_send_is_simulated():
    result = asyncio.run(email_service.send_welcome_email("a@b.com", "Jane", cfg=Settings()))
    assert result.success is True
    assert result.simulated is True
    assert "Jane" in result.subject


def test_configured_send_goes_through_emailjs(monkeypatch):
    sent = {}

    async def fake_send(cfg, to_email, to_name, subject, body):
        sent.update(to_email=to_email, to_name=to_name)

    monkeypatch.setattr(email_service, "_send_via_emailjs", fake_send)
    result = asyncio.run(email_service.send_welcome_email("a@b.com", "Jane", cfg=_configured()))

    assert result.simulated is False
    assert sent == {"to_email": "a@b.com", "to_name": "Jane"}


def test_failed_send_falls_back_to_simulation(monkeypatch):
    async def broken_send(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(email_service, "_send_via_emailjs", broken_send)
    result = asyncio.run(email_service.send_welcome_email("a@b.com", "Jane", cfg=_configured()))

    assert result.success is True
    assert result.simulated is True


def test_bad_endpoint_falls_back_to_simulation(monkeypatch):
    async def bad_url_send(*args, **kwargs):
        raise httpx.InvalidURL("Invalid URL")

    monkeypatch.setattr(email_service, "_send_via_emailjs", bad_url_send)
    result = asyncio.run(email_service.send_welcome_email("a@b.com", "Jane", cfg=_configured()))

    assert result.simulated is True
