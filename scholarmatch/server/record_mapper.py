# server/record_mapper.py
"""
Translate between Airtable records and domain entities.

Records look like {"id": "rec...", "fields": {...}}. Over time the base has
used two naming conventions for the same column (``Title`` vs ``title``,
``ProfileID`` vs ``profileId``), so every reader accepts all known
spellings. Writers always use the capitalized convention.

Nothing in here raises on malformed field values: missing or unparseable
values are replaced by defaults.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dateparser

from .scholarship_models import (
    ApplicationGuidance,
    ApplicationGuidanceCreate,
    Scholarship,
    ScholarshipApplication,
    ScholarshipApplicationCreate,
    ScholarshipCreate,
    ScholarshipMatch,
    ScholarshipMatchCreate,
    StudentProfile,
    StudentProfileCreate,
    now_iso,
    split_skills,
)

UNTITLED_SCHOLARSHIP = "Untitled Scholarship"
UNKNOWN_ORGANIZATION = "Unknown Organization"


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _pick(fields: Dict[str, Any], *names: str, default: Any = None) -> Any:
    """First non-empty value among the given field spellings."""
    for name in names:
        value = fields.get(name)
        if value is not None and value != "":
            return value
    return default


def _text(fields: Dict[str, Any], *names: str, default: Optional[str] = None) -> Optional[str]:
    value = _pick(fields, *names)
    return default if value is None else str(value)


def parse_list(raw: Any) -> List[str]:
    """
    Lists arrive either natively or as JSON-encoded strings.
    Anything that does not decode to a list becomes [].
    """
    if isinstance(raw, list):
        return [str(item) for item in raw]
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return []
        if isinstance(decoded, list):
            return [str(item) for item in decoded]
    return []


def _optional_list(fields: Dict[str, Any], *names: str) -> Optional[List[str]]:
    raw = _pick(fields, *names)
    if raw is None:
        return None
    return parse_list(raw)


def normalize_timestamp(value: Any) -> str:
    """ISO-8601 when parseable, verbatim otherwise, now() when missing."""
    if value is None or value == "":
        return now_iso()
    try:
        return dateparser.isoparse(str(value)).isoformat()
    except (ValueError, OverflowError):
        return str(value)


def _fields(record: Dict[str, Any]) -> Dict[str, Any]:
    return record.get("fields") or {}


def _compact(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


# ---------------------------------------------------------------------------
# Validity heuristics
# ---------------------------------------------------------------------------


def record_has_display_fields(record: Dict[str, Any]) -> bool:
    fields = _fields(record)
    return bool(
        _pick(fields, "Title", "title") or _pick(fields, "Organization", "organization")
    )


def is_displayable_scholarship(scholarship: Scholarship) -> bool:
    return (
        scholarship.title != UNTITLED_SCHOLARSHIP
        and scholarship.organization != UNKNOWN_ORGANIZATION
    )


def scholarships_look_valid(records: List[Dict[str, Any]], scholarships: Iterable[Scholarship]) -> bool:
    """
    Decide whether rows read from the scholarships table are usable.

    The first raw record must carry a title or an organization in either
    naming convention, and at least one mapped scholarship must have both a
    real title and a real organization. An empty result is not valid.
    """
    if not records:
        return False
    if not record_has_display_fields(records[0]):
        return False
    return any(is_displayable_scholarship(s) for s in scholarships)


# ---------------------------------------------------------------------------
# Student profiles
# ---------------------------------------------------------------------------


def to_student_profile(record: Dict[str, Any]) -> StudentProfile:
    fields = _fields(record)
    skills_raw = _pick(fields, "Skills", "skills")
    return StudentProfile(
        id=record["id"],
        name=_text(fields, "Name", "name", default=""),
        email=_text(fields, "Email", "email", default=""),
        phone=_text(fields, "Phone", "phone"),
        location=_text(fields, "Location", "location", default=""),
        education_level=_text(fields, "EducationLevel", "educationLevel"),
        field_of_study=_text(fields, "FieldOfStudy", "fieldOfStudy"),
        gpa=_text(fields, "GPA", "Gpa", "gpa"),
        graduation_year=_text(fields, "GraduationYear", "graduationYear"),
        skills=split_skills(skills_raw) if skills_raw is not None else None,
        activities=_text(fields, "Activities", "activities"),
        financial_need=_text(fields, "FinancialNeed", "financialNeed"),
        summary=_text(fields, "Summary", "summary"),
        education=_text(fields, "Education", "education"),
        experience=_text(fields, "Experience", "experience"),
        projects=_text(fields, "Projects", "projects"),
        created_at=normalize_timestamp(_pick(fields, "CreatedAt", "createdAt")),
        updated_at=normalize_timestamp(_pick(fields, "UpdatedAt", "updatedAt")),
    )


PROFILE_COLUMNS = {
    "name": "Name",
    "email": "Email",
    "phone": "Phone",
    "location": "Location",
    "education_level": "EducationLevel",
    "field_of_study": "FieldOfStudy",
    "gpa": "GPA",
    "graduation_year": "GraduationYear",
    "skills": "Skills",
    "activities": "Activities",
    "financial_need": "FinancialNeed",
    "summary": "Summary",
    "education": "Education",
    "experience": "Experience",
    "projects": "Projects",
}


def profile_changes_to_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Map snake_case profile attributes to Airtable columns."""
    fields: Dict[str, Any] = {}
    for attr, value in changes.items():
        column = PROFILE_COLUMNS.get(attr)
        if column is None or value is None:
            continue
        fields[column] = ", ".join(value) if attr == "skills" else value
    return fields


def student_profile_to_fields(profile: StudentProfileCreate, created_at: str) -> Dict[str, Any]:
    fields = profile_changes_to_fields(profile.model_dump())
    fields["CreatedAt"] = created_at
    fields["UpdatedAt"] = created_at
    return fields


# ---------------------------------------------------------------------------
# Scholarships
# ---------------------------------------------------------------------------


def to_scholarship(record: Dict[str, Any]) -> Scholarship:
    fields = _fields(record)
    is_active = fields.get("IsActive", fields.get("isActive"))
    return Scholarship(
        id=record["id"],
        title=_text(fields, "Title", "title", default=UNTITLED_SCHOLARSHIP),
        organization=_text(fields, "Organization", "organization", default=UNKNOWN_ORGANIZATION),
        amount=_text(fields, "Amount", "amount", default="Amount TBD"),
        deadline=_text(fields, "Deadline", "deadline", default="No deadline specified"),
        description=_text(fields, "Description", "description", default="No description available"),
        requirements=_text(
            fields, "Requirements", "requirements", default="Check with scholarship provider"
        ),
        tags=parse_list(_pick(fields, "Tags", "tags")),
        type=_text(fields, "Type", "type", default="merit-based"),
        eligibility_gpa=_text(fields, "EligibilityGpa", "eligibilityGpa"),
        eligible_fields=_optional_list(fields, "EligibleFields", "eligibleFields"),
        eligible_levels=_optional_list(fields, "EligibleLevels", "eligibleLevels"),
        is_active=is_active is not False,
        created_at=normalize_timestamp(_pick(fields, "CreatedAt", "createdAt")),
        notes=_text(fields, "Notes", "notes"),
        profile_id=_text(fields, "ProfileId", "profileId"),
    )


def scholarship_to_fields(scholarship: ScholarshipCreate, created_at: str) -> Dict[str, Any]:
    return _compact({
        "Title": scholarship.title,
        "Organization": scholarship.organization,
        "Amount": scholarship.amount,
        "Deadline": scholarship.deadline,
        "Description": scholarship.description,
        "Requirements": scholarship.requirements,
        "Tags": json.dumps(scholarship.tags),
        "Type": scholarship.type,
        "EligibilityGpa": scholarship.eligibility_gpa,
        "EligibleFields": (
            json.dumps(scholarship.eligible_fields)
            if scholarship.eligible_fields is not None
            else None
        ),
        "EligibleLevels": (
            json.dumps(scholarship.eligible_levels)
            if scholarship.eligible_levels is not None
            else None
        ),
        "IsActive": scholarship.is_active,
        "CreatedAt": created_at,
    })


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_scholarship_match(record: Dict[str, Any]) -> ScholarshipMatch:
    fields = _fields(record)
    return ScholarshipMatch(
        id=record["id"],
        profile_id=_text(fields, "ProfileID", "ProfileId", "profileId", default=""),
        scholarship_id=_text(fields, "ScholarshipID", "ScholarshipId", "scholarshipId", default=""),
        match_score=min(max(_int(_pick(fields, "MatchScore", "matchScore")), 0), 100),
        ai_reasoning=_text(fields, "AIReasoning", "aiReasoning"),
        status=_text(fields, "Status", "status", default="new"),
        created_at=normalize_timestamp(_pick(fields, "CreatedAt", "createdAt")),
    )


def scholarship_match_to_fields(match: ScholarshipMatchCreate, created_at: str) -> Dict[str, Any]:
    return _compact({
        "ProfileID": match.profile_id,
        "ScholarshipID": match.scholarship_id,
        "MatchScore": match.match_score,
        "AIReasoning": match.ai_reasoning,
        "Status": match.status or "new",
        "CreatedAt": created_at,
    })


# ---------------------------------------------------------------------------
# Guidance
# ---------------------------------------------------------------------------


def to_application_guidance(record: Dict[str, Any]) -> ApplicationGuidance:
    fields = _fields(record)
    return ApplicationGuidance(
        id=record["id"],
        profile_id=_text(fields, "ProfileId", "profileId", default=""),
        scholarship_id=_text(fields, "ScholarshipId", "scholarshipId", default=""),
        essay_tips=_text(fields, "EssayTips", "essayTips"),
        checklist=_text(fields, "Checklist", "checklist"),
        improvement_suggestions=_text(fields, "ImprovementSuggestions", "improvementSuggestions"),
        created_at=normalize_timestamp(_pick(fields, "CreatedAt", "createdAt")),
    )


def application_guidance_to_fields(guidance: ApplicationGuidanceCreate, created_at: str) -> Dict[str, Any]:
    return _compact({
        "ProfileId": guidance.profile_id,
        "ScholarshipId": guidance.scholarship_id,
        "EssayTips": guidance.essay_tips,
        "Checklist": guidance.checklist,
        "ImprovementSuggestions": guidance.improvement_suggestions,
        "CreatedAt": created_at,
    })


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


def to_scholarship_application(record: Dict[str, Any]) -> ScholarshipApplication:
    fields = _fields(record)
    return ScholarshipApplication(
        id=record["id"],
        student_profile_id=_text(fields, "StudentProfileId", "studentProfileId", default=""),
        scholarship_id=_text(fields, "ScholarshipId", "scholarshipId", default=""),
        documents=parse_list(_pick(fields, "Documents", "documents")),
        status=_text(fields, "Status", "status", default="pending"),
        applied_at=normalize_timestamp(_pick(fields, "AppliedAt", "appliedAt")),
    )


def scholarship_application_to_fields(
    application: ScholarshipApplicationCreate, applied_at: str
) -> Dict[str, Any]:
    return {
        "StudentProfileId": application.student_profile_id,
        "ScholarshipId": application.scholarship_id,
        "Documents": json.dumps(application.documents),
        "Status": application.status or "pending",
        "AppliedAt": applied_at,
    }
