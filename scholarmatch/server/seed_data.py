# server/seed_data.py
"""Scholarship sets used to populate an empty base."""

from typing import Any, Dict, List

from .logging_config import get_logger
from .scholarship_models import ScholarshipCreate
from .store import ScholarshipStore

logger = get_logger("store")

SAMPLE_SCHOLARSHIPS: List[Dict[str, Any]] = [
    {
        "title": "Google Computer Science Scholarship",
        "organization": "Google Inc.",
        "amount": "₹8,25,000",
        "deadline": "2025-03-15",
        "description": "Supporting underrepresented students in computer science.",
        "requirements": "3.5+ GPA, leadership, passion for CS",
        "tags": ["technology", "computer-science", "diversity"],
        "type": "merit-based",
        "eligibility_gpa": "3.5",
        "eligible_fields": ["Computer Science", "Software Engineering"],
        "eligible_levels": ["undergraduate-sophomore", "undergraduate-junior"],
    },
    {
        "title": "Microsoft LEAP Engineering",
        "organization": "Microsoft",
        "amount": "₹20,62,500",
        "deadline": "2025-04-01",
        "description": "Engineering internship for non-traditional backgrounds.",
        "requirements": "Computer science, strong coding skills",
        "tags": ["technology", "internship", "engineering"],
        "type": "merit-based",
        "eligibility_gpa": "3.0",
        "eligible_fields": ["Computer Science", "Engineering"],
        "eligible_levels": ["undergraduate-sophomore", "undergraduate-junior"],
    },
    {
        "title": "Society of Women Engineers",
        "organization": "SWE",
        "amount": "₹12,37,500",
        "deadline": "2025-02-15",
        "description": "Empowering women in engineering fields.",
        "requirements": "Female student, 3.5+ GPA, engineering major",
        "tags": ["engineering", "women", "stem"],
        "type": "merit-based",
        "eligibility_gpa": "3.5",
        "eligible_fields": ["Engineering"],
        "eligible_levels": ["undergraduate-sophomore", "undergraduate-junior"],
    },
    {
        "title": "First Generation Scholarship",
        "organization": "Educational Foundation",
        "amount": "₹6,60,000",
        "deadline": "2025-07-01",
        "description": "Supporting first-generation college students.",
        "requirements": "First-gen status, financial need",
        "tags": ["first-generation", "financial-need"],
        "type": "need-based",
        "eligibility_gpa": "2.8",
    },
    {
        "title": "NASA Summer Internship",
        "organization": "NASA",
        "amount": "₹6,19,500",
        "deadline": "2025-01-31",
        "description": "Internship in aerospace engineering.",
        "requirements": "STEM major, 3.0+ GPA",
        "tags": ["internship", "aerospace", "stem"],
        "type": "internship",
        "eligibility_gpa": "3.0",
        "eligible_fields": ["Engineering", "Physics"],
        "eligible_levels": ["undergraduate-sophomore", "undergraduate-junior"],
    },
]

DEVELOPMENT_SCHOLARSHIPS: List[Dict[str, Any]] = [
    {
        "title": "National Merit STEM Scholarship",
        "organization": "Future Scientists Foundation",
        "amount": "$15,000",
        "deadline": "2024-03-15",
        "description": (
            "Supporting outstanding students pursuing STEM degrees with demonstrated "
            "academic excellence and research potential."
        ),
        "requirements": (
            "Minimum 3.7 GPA, STEM major, research experience preferred, "
            "US citizen or permanent resident"
        ),
        "tags": ["STEM", "Merit-Based", "Undergraduate", "Research"],
        "type": "merit-based",
        "eligibility_gpa": "3.7",
        "eligible_fields": [
            "Computer Science", "Engineering", "Mathematics", "Physics", "Chemistry", "Biology",
        ],
        "eligible_levels": ["undergraduate"],
    },
    {
        "title": "Tech Diversity Excellence Award",
        "organization": "TechForward Initiative",
        "amount": "$8,500",
        "deadline": "2024-04-01",
        "description": (
            "Promoting diversity in technology fields by supporting underrepresented "
            "students with financial aid and mentorship."
        ),
        "requirements": (
            "Technology-related major, demonstrate financial need, underrepresented "
            "minority status, minimum 3.0 GPA"
        ),
        "tags": ["Technology", "Diversity", "Need-Based", "Mentorship"],
        "type": "need-based",
        "eligibility_gpa": "3.0",
        "eligible_fields": ["Computer Science", "Information Technology", "Software Engineering"],
        "eligible_levels": ["undergraduate", "graduate"],
    },
    {
        "title": "Community Leadership Grant",
        "organization": "Local Community Foundation",
        "amount": "$3,000",
        "deadline": "2024-05-15",
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
        "title": "Environmental Innovation Award",
        "organization": "Green Future Initiative",
        "amount": "$12,000",
        "deadline": "2024-06-30",
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
        "title": "First Generation College Student Support",
        "organization": "Educational Equity Foundation",
        "amount": "$5,000",
        "deadline": "2024-04-30",
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
]


def seed_sample_data(store: ScholarshipStore) -> int:
    """Add SAMPLE_SCHOLARSHIPS to the Airtable base. No-op without Airtable."""
    if not store.backend.available:
        return 0
    created = 0
    for item in SAMPLE_SCHOLARSHIPS:
        store.create_scholarship(ScholarshipCreate(**item))
        created += 1
    logger.info(f"Seeded {created} sample scholarships")
    return created


def reseed_scholarships(store: ScholarshipStore) -> int:
    """Clear the scholarships table, then add DEVELOPMENT_SCHOLARSHIPS."""
    store.clear_all_scholarships()
    for item in DEVELOPMENT_SCHOLARSHIPS:
        store.create_scholarship(ScholarshipCreate(**item))
    return len(DEVELOPMENT_SCHOLARSHIPS)
