# server/fallback_catalog.py
"""
Built-in scholarships served whenever the scholarships table is missing,
empty or does not look like scholarship data.
"""

from typing import List, Optional

from .scholarship_models import Scholarship, now_iso

FALLBACK_ID_PREFIX = "fallback-"

_CATALOG = [
    {
        "id": "fallback-1",
        "title": "National Merit STEM Scholarship",
        "organization": "Future Scientists Foundation",
        "amount": "₹12,50,000",
        "deadline": "2025-03-15",
        "description": (
            "Supporting outstanding students pursuing STEM degrees with "
            "demonstrated academic excellence and research potential."
        ),
        "requirements": "Minimum 3.7 GPA, STEM major, research experience preferred",
        "tags": ["STEM", "Merit-Based", "Undergraduate", "Research"],
        "type": "merit-based",
        "eligibility_gpa": "3.7",
        "eligible_fields": [
            "Computer Science", "Engineering", "Mathematics", "Physics", "Chemistry", "Biology",
        ],
        "eligible_levels": ["undergraduate"],
    },
    {
        "id": "fallback-2",
        "title": "Tech Diversity Excellence Award",
        "organization": "TechForward Initiative",
        "amount": "₹7,00,000",
        "deadline": "2025-04-01",
        "description": (
            "Promoting diversity in technology fields by supporting underrepresented "
            "students with financial aid and mentorship."
        ),
        "requirements": "Technology-related major, demonstrate financial need, minimum 3.0 GPA",
        "tags": ["Technology", "Diversity", "Need-Based", "Mentorship"],
        "type": "need-based",
        "eligibility_gpa": "3.0",
        "eligible_fields": [
            "Computer Science", "Information Technology", "Software Engineering", "AIML",
        ],
        "eligible_levels": ["undergraduate", "graduate"],
    },
    {
        "id": "fallback-3",
        "title": "Community Leadership Grant",
        "organization": "Local Community Foundation",
        "amount": "₹2,50,000",
        "deadline": "2025-05-15",
        "description": (
            "Recognizing students who demonstrate exceptional leadership and "
            "community service commitment."
        ),
        "requirements": (
            "Minimum 100 hours community service, leadership role in organization, "
            "any major, 3.2+ GPA"
        ),
        "tags": ["Leadership", "Community Service", "Local"],
        "type": "merit-based",
        "eligibility_gpa": "3.2",
        "eligible_fields": [],
        "eligible_levels": ["undergraduate"],
    },
    {
        "id": "fallback-4",
        "title": "Environmental Innovation Award",
        "organization": "Green Future Initiative",
        "amount": "₹10,00,000",
        "deadline": "2025-06-30",
        "description": (
            "Supporting students developing innovative solutions for environmental "
            "challenges and sustainability."
        ),
        "requirements": (
            "Environmental science or related field, research project focused on "
            "sustainability, minimum 3.5 GPA"
        ),
        "tags": ["Environmental Science", "Innovation", "Research-Based", "Sustainability"],
        "type": "merit-based",
        "eligibility_gpa": "3.5",
        "eligible_fields": [
            "Environmental Science", "Environmental Engineering", "Renewable Energy", "Biology",
        ],
        "eligible_levels": ["undergraduate", "graduate"],
    },
    {
        "id": "fallback-5",
        "title": "First Generation College Student Support",
        "organization": "Educational Equity Foundation",
        "amount": "₹4,00,000",
        "deadline": "2025-04-30",
        "description": (
            "Supporting first-generation college students with financial aid and "
            "academic support services."
        ),
        "requirements": (
            "First-generation college student status, demonstrate financial need, "
            "minimum 2.8 GPA"
        ),
        "tags": ["First-Generation", "Need-Based", "Academic Support"],
        "type": "need-based",
        "eligibility_gpa": "2.8",
        "eligible_fields": [],
        "eligible_levels": ["undergraduate"],
    },
    {
        "id": "fallback-6",
        "title": "Women in Engineering Scholarship",
        "organization": "Society of Women Engineers",
        "amount": "₹8,00,000",
        "deadline": "2025-05-01",
        "description": (
            "Empowering women pursuing engineering degrees with financial support "
            "and networking opportunities."
        ),
        "requirements": "Female students in engineering programs, minimum 3.3 GPA",
        "tags": ["Women", "Engineering", "STEM", "Diversity"],
        "type": "merit-based",
        "eligibility_gpa": "3.3",
        "eligible_fields": [
            "Engineering", "Computer Science", "Electronics", "Mechanical Engineering",
        ],
        "eligible_levels": ["undergraduate", "graduate"],
    },
]


def fallback_scholarships() -> List[Scholarship]:
    """Fresh copies of the catalog, stamped with the current time."""
    created_at = now_iso()
    return [
        Scholarship(**{**item, "is_active": True, "created_at": created_at})
        for item in _CATALOG
    ]


def find_fallback_scholarship(scholarship_id: str) -> Optional[Scholarship]:
    return next(
        (s for s in fallback_scholarships() if s.id == scholarship_id),
        None,
    )


def is_fallback_id(scholarship_id: str) -> bool:
    return scholarship_id.startswith(FALLBACK_ID_PREFIX)
