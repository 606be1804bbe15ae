# server/scholarship_models.py

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def split_skills(value):
    """Accept skills as a list or as a comma-separated string."""
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return value


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire (profileId, matchScore, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Student profiles
# ---------------------------------------------------------------------------


class StudentProfileBase(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    phone: Optional[str] = None
    location: str = ""
    education_level: Optional[str] = None
    field_of_study: Optional[str] = None
    gpa: Optional[str] = None
    graduation_year: Optional[str] = None
    skills: Optional[List[str]] = None
    activities: Optional[str] = None
    financial_need: Optional[str] = Field(
        default=None,
        description="Financial-need tier, e.g. 'low', 'medium', 'high'",
    )
    summary: Optional[str] = None
    education: Optional[str] = None
    experience: Optional[str] = None
    projects: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def _split_skills(cls, value):
        return split_skills(value)


class StudentProfileCreate(StudentProfileBase):
    name: str = Field(..., min_length=1)
    email: EmailStr


class StudentProfileUpdate(StudentProfileBase):
    """Partial update: only the fields the caller sends are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    location: Optional[str] = None


class StudentProfile(StudentProfileBase):
    id: str
    name: str
    email: str
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Scholarships
# ---------------------------------------------------------------------------


class ScholarshipCreate(CamelModel):
    title: str = Field(..., min_length=1)
    organization: str = Field(..., min_length=1)
    amount: str = Field(..., min_length=1, description="Display string, e.g. '₹8,00,000'")
    deadline: str = Field(..., min_length=1, description="Display string, not parsed")
    description: str = Field(..., min_length=1)
    requirements: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    type: str = Field(
        default="merit-based",
        description="merit-based, need-based or internship",
    )
    eligibility_gpa: Optional[str] = None
    eligible_fields: Optional[List[str]] = None
    eligible_levels: Optional[List[str]] = None
    is_active: bool = True


class Scholarship(ScholarshipCreate):
    id: str
    created_at: str
    notes: Optional[str] = Field(
        default=None,
        description="Generated resume text when the record is a resume",
    )
    profile_id: Optional[str] = Field(
        default=None,
        description="Owning profile when the record is a resume",
    )


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


class ScholarshipMatchCreate(CamelModel):
    profile_id: str
    scholarship_id: str
    match_score: int = Field(..., ge=0, le=100)
    ai_reasoning: Optional[str] = None
    status: str = "new"


class ScholarshipMatch(ScholarshipMatchCreate):
    id: str
    created_at: str


class ScholarshipMatchDetail(ScholarshipMatch):
    scholarship: Scholarship


# ---------------------------------------------------------------------------
# Guidance (also carries consultation bookings)
# ---------------------------------------------------------------------------


class ApplicationGuidanceCreate(CamelModel):
    profile_id: str
    scholarship_id: str
    essay_tips: Optional[str] = None
    checklist: Optional[str] = None
    improvement_suggestions: Optional[str] = None


class ApplicationGuidance(ApplicationGuidanceCreate):
    id: str
    created_at: str


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class ScholarshipApplicationCreate(CamelModel):
    student_profile_id: str
    scholarship_id: str
    documents: List[str] = Field(default_factory=list)
    status: str = "pending"


class ScholarshipApplication(ScholarshipApplicationCreate):
    id: str
    applied_at: str
