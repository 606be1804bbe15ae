from __future__ import annotations

import json

from scholarmatch.server.record_mapper import (
    UNTITLED_SCHOLARSHIP,
    normalize_timestamp,
    parse_list,
    profile_changes_to_fields,
    record_has_display_fields,
    scholarship_match_to_fields,
    scholarship_to_fields,
    scholarships_look_valid,
    to_scholarship,
    to_scholarship_match,
    to_student_profile,
)
from scholarmatch.server.scholarship_models import ScholarshipCreate, ScholarshipMatchCreate


def test_to_scholarship_applies_defaults_for_missing_fields() -> None:
    scholarship = to_scholarship({"id": "rec1", "fields": {}})

    assert scholarship.title == UNTITLED_SCHOLARSHIP
    assert scholarship.organization == "Unknown Organization"
    assert scholarship.amount == "Amount TBD"
    assert scholarship.deadline == "No deadline specified"
    assert scholarship.description == "No description available"
    assert scholarship.requirements == "Check with scholarship provider"
    assert scholarship.type == "merit-based"
    assert scholarship.tags == []
    assert scholarship.is_active is True
    assert scholarship.created_at


def test_to_scholarship_accepts_lowercase_field_names() -> None:
    scholarship = to_scholarship(
        {
            "id": "rec2",
            "fields": {
                "title": "Open Source Fellowship",
                "organization": "OSF",
                "tags": ["oss"],
                "eligibleFields": '["Computer Science"]',
                "isActive": False,
            },
        }
    )

    assert scholarship.title == "Open Source Fellowship"
    assert scholarship.organization == "OSF"
    assert scholarship.tags == ["oss"]
    assert scholarship.eligible_fields == ["Computer Science"]
    assert scholarship.is_active is False


def test_parse_list_never_raises_on_bad_input() -> None:
    assert parse_list('["a", "b"]') == ["a", "b"]
    assert parse_list(["x"]) == ["x"]
    assert parse_list("not json") == []
    assert parse_list('{"a": 1}') == []
    assert parse_list(None) == []
    assert parse_list(42) == []


def test_to_scholarship_with_malformed_tags_yields_empty_list() -> None:
    scholarship = to_scholarship({"id": "rec3", "fields": {"Title": "T", "Tags": "[broken"}})

    assert scholarship.tags == []


def test_normalize_timestamp_keeps_unparseable_values() -> None:
    assert normalize_timestamp("2025-01-05T10:00:00Z") == "2025-01-05T10:00:00+00:00"
    assert normalize_timestamp("last tuesday") == "last tuesday"
    assert normalize_timestamp(None)


def test_profile_skills_are_split_on_read_and_joined_on_write() -> None:
    profile = to_student_profile(
        {
            "id": "recP",
            "fields": {"Name": "Asha", "Email": "asha@example.com", "Skills": "Python, ML ,,Stats"},
        }
    )

    assert profile.skills == ["Python", "ML", "Stats"]
    assert profile_changes_to_fields({"skills": profile.skills}) == {"Skills": "Python, ML, Stats"}


def test_profile_changes_to_fields_skips_none_and_unknown_attributes() -> None:
    fields = profile_changes_to_fields({"gpa": "3.9", "phone": None, "favourite_colour": "red"})

    assert fields == {"GPA": "3.9"}


def test_scholarship_fields_round_trip_through_mapper() -> None:
    data = ScholarshipCreate(
        title="Rural Innovators Award",
        organization="Gram Vikas",
        amount="₹1,00,000",
        deadline="2025-12-01",
        description="Rural tech projects.",
        requirements="Working prototype",
        tags=["innovation"],
        type="need-based",
        eligible_levels=["undergraduate"],
    )

    fields = scholarship_to_fields(data, "2025-02-01T00:00:00+00:00")
    assert json.loads(fields["Tags"]) == ["innovation"]
    assert "EligibleFields" not in fields

    scholarship = to_scholarship({"id": "recR", "fields": fields})
    assert scholarship.model_dump(include=set(ScholarshipCreate.model_fields)) == data.model_dump()


def test_match_mapper_reads_either_profile_id_spelling_and_clamps_score() -> None:
    first = to_scholarship_match(
        {"id": "m1", "fields": {"ProfileID": "p1", "ScholarshipID": "s1", "MatchScore": 140}}
    )
    second = to_scholarship_match(
        {"id": "m2", "fields": {"profileId": "p2", "scholarshipId": "s2", "matchScore": "75"}}
    )

    assert (first.profile_id, first.match_score, first.status) == ("p1", 100, "new")
    assert (second.profile_id, second.scholarship_id, second.match_score) == ("p2", "s2", 75)


def test_match_fields_use_capitalized_columns() -> None:
    fields = scholarship_match_to_fields(
        ScholarshipMatchCreate(profile_id="p1", scholarship_id="s1", match_score=80),
        "2025-01-01T00:00:00+00:00",
    )

    assert fields == {
        "ProfileID": "p1",
        "ScholarshipID": "s1",
        "MatchScore": 80,
        "Status": "new",
        "CreatedAt": "2025-01-01T00:00:00+00:00",
    }


def test_scholarships_look_valid_predicate() -> None:
    good = {"id": "r1", "fields": {"Title": "A", "Organization": "B"}}
    untitled = {"id": "r2", "fields": {"Amount": "₹10"}}

    assert record_has_display_fields(good)
    assert not record_has_display_fields(untitled)

    assert scholarships_look_valid([good], [to_scholarship(good)])
    assert not scholarships_look_valid([], [])
    assert not scholarships_look_valid([untitled, good], [to_scholarship(untitled), to_scholarship(good)])

    title_only = {"id": "r3", "fields": {"Title": "Only a title"}}
    assert not scholarships_look_valid([title_only], [to_scholarship(title_only)])
