from __future__ import annotations

import random

import pytest

from conftest import SCHOLARSHIP_FIELDS, InMemoryBackend
from scholarmatch.server.db import MATCHES_TABLE, SCHOLARSHIPS_TABLE
from scholarmatch.server.matching import (
    MAX_SCORE,
    MIN_SCORE,
    PLACEHOLDER_REASONING,
    MatchGenerator,
    ProfileNotFound,
)
from scholarmatch.server.scholarship_models import StudentProfileCreate
from scholarmatch.server.store import ScholarshipStore


def _make_profile(store: ScholarshipStore) -> str:
    return store.create_profile(StudentProfileCreate(name="Neha", email="neha@example.com")).id


def test_generate_creates_one_match_per_catalog_scholarship(memory_store: ScholarshipStore) -> None:
    profile_id = _make_profile(memory_store)

    matches = MatchGenerator(memory_store, rng=random.Random(7)).generate(profile_id)

    assert len(matches) == 6
    assert {m.scholarship_id for m in matches} == {f"fallback-{i}" for i in range(1, 7)}
    for match in matches:
        assert MIN_SCORE <= match.match_score <= MAX_SCORE
        assert match.status == "new"
        assert match.ai_reasoning == PLACEHOLDER_REASONING
        assert match.profile_id == profile_id


def test_generate_skips_inactive_scholarships(
    airtable_store: ScholarshipStore, backend: InMemoryBackend
) -> None:
    backend.seed(SCHOLARSHIPS_TABLE, SCHOLARSHIP_FIELDS)
    backend.seed(SCHOLARSHIPS_TABLE, {**SCHOLARSHIP_FIELDS, "Title": "Closed Grant", "IsActive": False})
    backend.seed(SCHOLARSHIPS_TABLE, {**SCHOLARSHIP_FIELDS, "Title": "Another Grant"})
    profile_id = _make_profile(airtable_store)

    matches = MatchGenerator(airtable_store).generate(profile_id)

    assert len(matches) == 2
    assert len(backend.rows(MATCHES_TABLE)) == 2
    assert all(row["fields"]["Status"] == "new" for row in backend.rows(MATCHES_TABLE))


def test_generate_unknown_profile_raises(memory_store: ScholarshipStore) -> None:
    with pytest.raises(ProfileNotFound):
        MatchGenerator(memory_store).generate("missing")


def test_score_bounds_are_inclusive(memory_store: ScholarshipStore) -> None:
    class EdgeRandom:
        calls = 0

        def randint(self, a: int, b: int) -> int:
            self.calls += 1
            return a if self.calls % 2 else b

    generator = MatchGenerator(memory_store, rng=EdgeRandom())

    assert [generator.score(), generator.score()] == [60, 100]


def test_generated_matches_are_listed_best_first(memory_store: ScholarshipStore) -> None:
    profile_id = _make_profile(memory_store)
    MatchGenerator(memory_store, rng=random.Random(1)).generate(profile_id)

    listed = memory_store.get_matches(profile_id)
    scores = [m.match_score for m in listed]

    assert len(listed) == 6
    assert scores == sorted(scores, reverse=True)
