from __future__ import annotations

import json

import httpx
import pytest

from scholarmatch.server.resume_client import (
    ResumeWebhookError,
    build_resume_payload,
    trigger_resume_generation,
)
from scholarmatch.server.scholarship_models import StudentProfile

WEBHOOK = "https://hooks.example.com/resume-builder"


def _profile() -> StudentProfile:
    return StudentProfile(
        id="recP1",
        name="Arjun Nair",
        email="arjun@example.com",
        location="Kochi",
        skills=["Python", "Figma"],
        gpa="3.6",
        created_at="2025-01-01T00:00:00+00:00",
        updated_at="2025-01-01T00:00:00+00:00",
    )


def test_payload_flattens_profile_to_strings() -> None:
    payload = build_resume_payload(_profile())

    assert payload["profileId"] == "recP1"
    assert payload["skills"] == "Python, Figma"
    assert payload["phone"] == ""
    assert payload["fieldOfStudy"] == ""
    assert all(isinstance(v, str) for v in payload.values())


def test_trigger_posts_payload_to_configured_webhook(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESUME_WEBHOOK_URL", WEBHOOK)
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    result = trigger_resume_generation(_profile(), transport=httpx.MockTransport(handler))

    assert result == {"ok": True}
    assert seen["url"] == WEBHOOK
    assert seen["body"]["name"] == "Arjun Nair"


def test_non_json_reply_is_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESUME_WEBHOOK_URL", WEBHOOK)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="Workflow was started"))

    assert trigger_resume_generation(_profile(), transport=transport) == {}


def test_error_status_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESUME_WEBHOOK_URL", WEBHOOK)
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="webhook not registered"))

    with pytest.raises(ResumeWebhookError, match="status=404"):
        trigger_resume_generation(_profile(), transport=transport)


def test_transport_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESUME_WEBHOOK_URL", WEBHOOK)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ResumeWebhookError):
        trigger_resume_generation(_profile(), transport=httpx.MockTransport(handler))


def test_missing_webhook_url_raises() -> None:
    with pytest.raises(ResumeWebhookError, match="RESUME_WEBHOOK_URL"):
        trigger_resume_generation(_profile())
