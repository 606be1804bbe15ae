# server/llm.py
# ---------------------------------------------------------
# Application guidance for a (profile, scholarship) pair.
#
# With ANTHROPIC_API_KEY set, Claude writes the essay tips, checklist and
# improvement suggestions. Without a key, or when the call fails, the
# fixed placeholder guidance is returned. The placeholder is the normal
# mode of operation today.
#
# Public helper used by routes:
#   - generate_guidance(profile, scholarship)
# ---------------------------------------------------------

import json
import os
import re
from typing import Any, Dict, Optional

from anthropic import Anthropic

from .logging_config import get_logger
from .scholarship_models import Scholarship, StudentProfile

logger = get_logger("llm")

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

FALLBACK_GUIDANCE: Dict[str, Any] = {
    "essay_tips": (
        "Focus on explaining your unique value proposition and how this "
        "scholarship aligns with your goals."
    ),
    "checklist": [
        "Review requirements",
        "Prepare documents",
        "Draft essay",
        "Proofread",
        "Submit before deadline",
    ],
    "improvement_suggestions": "Generic guidance. AI suggestions will be available soon.",
}

_client: Optional[Anthropic] = None
_client_key: Optional[str] = None


def _get_client() -> Optional[Anthropic]:
    """Anthropic client for the current key, or None when no key is set."""
    global _client, _client_key
    api_key = os.getenv("ANTHROPIC_API_KEY") or ""
    if not api_key:
        return None
    if _client is None or _client_key != api_key:
        _client = Anthropic(api_key=api_key)
        _client_key = api_key
        logger.info(f"Anthropic client initialized; key prefix: {api_key[:8]}...")
    return _client


def _model() -> str:
    return os.getenv("ANTHROPIC_MODEL") or DEFAULT_MODEL


# -------------------------------------------------------------------
# Shared helpers
# -------------------------------------------------------------------

def _coerce_json_from_claude(raw: str) -> Dict[str, Any]:
    """
    Claude often wraps JSON in ```json fences or adds extra prose.
    Strip fences and grab the first {...} block.
    """
    s = raw.strip()

    if s.startswith("```"):
        lines = s.splitlines()
        if lines and lines[0].strip().startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        s = "\n".join(lines).strip()

    if not s.lstrip().startswith("{"):
        m = re.search(r"\{.*\}", s, flags=re.S)
        if m:
            s = m.group(0)

    return json.loads(s or "{}")


def _call_claude_json(system_prompt: str, user_text: str, max_tokens: int = 1024) -> Dict[str, Any]:
    client = _get_client()
    if client is None:
        return {}
    try:
        message = client.messages.create(
            model=_model(),
            max_tokens=max_tokens,
            temperature=0.3,
            system=system_prompt,
            messages=[{"role": "user", "content": user_text}],
        )
        content = message.content[0].text if message.content else ""
        return _coerce_json_from_claude(content)
    except Exception as e:
        logger.warning(f"Claude API error in _call_claude_json: {e!r}")
        return {}


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def fallback_guidance() -> Dict[str, Optional[str]]:
    return {
        "essay_tips": FALLBACK_GUIDANCE["essay_tips"],
        "checklist": _as_text(FALLBACK_GUIDANCE["checklist"]),
        "improvement_suggestions": FALLBACK_GUIDANCE["improvement_suggestions"],
    }


# -------------------------------------------------------------------
# Guidance
# -------------------------------------------------------------------

def generate_guidance(profile: StudentProfile, scholarship: Scholarship) -> Dict[str, Optional[str]]:
    """
    Returns essay_tips, checklist and improvement_suggestions as text.
    The checklist is a JSON-encoded list of steps.
    """
    if _get_client() is None:
        return fallback_guidance()

    system_prompt = (
        "You are a scholarship application coach. Give specific, practical "
        "advice for one student applying to one scholarship.\n\n"
        "Return ONLY a valid JSON object with this structure:\n"
        "{\n"
        '  "essay_tips": "2-4 sentences on what the essay should emphasise",\n'
        '  "checklist": ["ordered, concrete steps to complete the application"],\n'
        '  "improvement_suggestions": "how the student could strengthen the application"\n'
        "}\n"
    )
    student: Dict[str, Any] = profile.model_dump(
        include={
            "education_level", "field_of_study", "gpa", "graduation_year",
            "skills", "activities", "financial_need", "summary", "experience", "projects",
        },
        exclude_none=True,
    )
    user_prompt = (
        "Scholarship:\n"
        f"{json.dumps(scholarship.model_dump(exclude={'notes', 'profile_id'}), ensure_ascii=False)}\n\n"
        "Student:\n"
        f"{json.dumps(student, ensure_ascii=False)}"
    )

    data = _call_claude_json(system_prompt, user_prompt)
    if not data:
        return fallback_guidance()

    out = fallback_guidance()
    for key in out:
        text = _as_text(data.get(key))
        if text:
            out[key] = text
    return out
