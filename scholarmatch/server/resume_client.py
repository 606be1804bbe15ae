# server/resume_client.py
import os
from typing import Any, Dict, Optional

import httpx

from .logging_config import get_logger, log_with_context
from .scholarship_models import StudentProfile

logger = get_logger("resume")

DEFAULT_TIMEOUT = 30.0


class ResumeWebhookError(Exception):
    """Raised when the resume webhook is missing or rejects a request."""


def _get_webhook_url() -> str:
    return os.getenv("RESUME_WEBHOOK_URL") or ""


def _get_timeout() -> float:
    try:
        return float(os.getenv("RESUME_WEBHOOK_TIMEOUT") or DEFAULT_TIMEOUT)
    except ValueError:
        return DEFAULT_TIMEOUT


def build_resume_payload(profile: StudentProfile) -> Dict[str, Any]:
    """Flat, string-only payload; skills are comma-joined."""
    return {
        "profileId": profile.id,
        "name": profile.name,
        "email": profile.email,
        "phone": profile.phone or "",
        "location": profile.location or "",
        "educationLevel": profile.education_level or "",
        "fieldOfStudy": profile.field_of_study or "",
        "gpa": profile.gpa or "",
        "graduationYear": profile.graduation_year or "",
        "skills": ", ".join(profile.skills or []),
        "activities": profile.activities or "",
        "summary": profile.summary or "",
        "education": profile.education or "",
        "experience": profile.experience or "",
        "projects": profile.projects or "",
    }


def trigger_resume_generation(
    profile: StudentProfile,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> Dict[str, Any]:
    """
    POST the profile to the resume webhook and return its JSON reply.

    The resume itself is produced asynchronously and lands in the
    scholarships table's Notes column; callers poll for it later.
    """
    url = _get_webhook_url()
    if not url:
        raise ResumeWebhookError("RESUME_WEBHOOK_URL is not set in the environment.")

    payload = build_resume_payload(profile)
    log_with_context(
        logger,
        "INFO",
        "Calling resume webhook",
        context={"profile_id": profile.id},
    )

    try:
        with httpx.Client(timeout=_get_timeout(), transport=transport) as client:
            resp = client.post(url, json=payload)
    except httpx.HTTPError as exc:
        raise ResumeWebhookError(f"Resume webhook request failed: {exc!r}") from exc

    if not resp.is_success:
        raise ResumeWebhookError(
            f"Resume webhook error: status={resp.status_code}, body={resp.text}"
        )

    try:
        data = resp.json()
    except ValueError:
        data = {}
    logger.info("Resume generation triggered")
    return data if isinstance(data, dict) else {"result": data}
