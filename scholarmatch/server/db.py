# server/db.py
"""
Airtable connection settings.

The backend is picked once, at startup, from AIRTABLE_API_KEY and
AIRTABLE_BASE_ID. Without both the app runs on the in-process cache only.
"""

import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from .backends import AirtableBackend, RecordBackend, UnconfiguredBackend
from .logging_config import get_logger, log_with_context

# Load .env from the project root
ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")

logger = get_logger("store")

PROFILES_TABLE = "student_profiles"
SCHOLARSHIPS_TABLE = "scholarships"
MATCHES_TABLE = "scholarship_matches"
GUIDANCE_TABLE = "application_guidance"
APPLICATIONS_TABLE = "scholarship_applications"


def _get_credentials() -> Tuple[str, str]:
    return os.getenv("AIRTABLE_API_KEY") or "", os.getenv("AIRTABLE_BASE_ID") or ""


def make_backend() -> RecordBackend:
    api_key, base_id = _get_credentials()
    log_with_context(
        logger,
        "INFO",
        "Airtable configuration loaded",
        extra_data={"api_key_set": bool(api_key), "base_id": base_id or None},
    )
    if not api_key or not base_id:
        logger.warning(
            "Airtable credentials not configured (set AIRTABLE_API_KEY and "
            "AIRTABLE_BASE_ID); using in-memory storage"
        )
        return UnconfiguredBackend()
    return AirtableBackend(api_key, base_id)
