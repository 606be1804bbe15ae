# server/schemas.py
"""
Request and response payloads that are specific to the HTTP layer.

Entities themselves (profiles, scholarships, matches, ...) live in
scholarship_models.py and are returned as-is. This file covers:
- /health                       (HealthOut)
- /api/matches/*                (GenerateMatchesIn, MatchesOut, MatchStatusIn)
- /api/guidance                 (GuidanceIn)
- /api/applications             (ApplicationIn)
- /api/consultation-booking     (ConsultationBookingIn)
- /api/seed*                    (MessageOut)
- /api/resume/*                 (ResumeGenerateIn, ResumeGenerateOut, ResumeOut)

Identifiers are Optional on input so a missing id is answered with a
400 and a readable message instead of a schema error.
"""

from typing import List, Optional

from pydantic import Field

from .scholarship_models import CamelModel, ScholarshipMatch


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

class HealthOut(CamelModel):
    ok: bool = True
    ts: str
    # "airtable" or "memory"
    backend: str


# ---------------------------------------------------------------------------
# /api/matches
# ---------------------------------------------------------------------------

class GenerateMatchesIn(CamelModel):
    profile_id: Optional[str] = None


class MatchesOut(CamelModel):
    matches: List[ScholarshipMatch] = Field(default_factory=list)


class MatchStatusIn(CamelModel):
    # e.g. "new", "favorite", "applied", "dismissed"
    status: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# /api/guidance
# ---------------------------------------------------------------------------

class GuidanceIn(CamelModel):
    profile_id: Optional[str] = None
    scholarship_id: Optional[str] = None


# ---------------------------------------------------------------------------
# /api/applications
# ---------------------------------------------------------------------------

class ApplicationIn(CamelModel):
    profile_id: Optional[str] = None
    scholarship_id: Optional[str] = None
    # file names; every one must end in .pdf
    documents: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# /api/consultation-booking
# ---------------------------------------------------------------------------

class ConsultationBookingIn(CamelModel):
    profile_id: Optional[str] = None
    counselor_name: Optional[str] = None
    # rupees, as charged by the client-side mock payment
    amount: Optional[float] = None


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------

class MessageOut(CamelModel):
    message: str
    count: Optional[int] = None


# ---------------------------------------------------------------------------
# /api/resume
# ---------------------------------------------------------------------------

class ResumeGenerateIn(CamelModel):
    profile_id: Optional[str] = None


class ResumeGenerateOut(CamelModel):
    message: str = "Resume generation initiated"
    profile_id: str
    status: str = "processing"


class ResumeOut(CamelModel):
    id: str
    profile_id: Optional[str] = None
    content: str
    created_at: str
