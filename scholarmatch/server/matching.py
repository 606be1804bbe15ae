# server/matching.py
"""
Match generation.

AI matching is switched off: every active scholarship gets a random score
in [MIN_SCORE, MAX_SCORE] and a fixed placeholder reasoning. The profile
must exist but its content is not used.
"""

import random
from typing import List, Optional

from .logging_config import get_logger, log_with_context
from .scholarship_models import ScholarshipMatch, ScholarshipMatchCreate
from .store import ScholarshipStore

logger = get_logger("matching")

MIN_SCORE = 60
MAX_SCORE = 100
PLACEHOLDER_REASONING = "Pre-stored scholarship. AI matching will be enabled soon."


class ProfileNotFound(LookupError):
    """Raised when matches are requested for an unknown profile."""


class MatchGenerator:
    def __init__(self, store: ScholarshipStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()

    def score(self) -> int:
        return self.rng.randint(MIN_SCORE, MAX_SCORE)

    def generate(self, profile_id: str) -> List[ScholarshipMatch]:
        if self.store.get_profile(profile_id) is None:
            raise ProfileNotFound(profile_id)

        scholarships = [s for s in self.store.list_scholarships() if s.is_active]
        items = [
            ScholarshipMatchCreate(
                profile_id=profile_id,
                scholarship_id=s.id,
                match_score=self.score(),
                ai_reasoning=PLACEHOLDER_REASONING,
                status="new",
            )
            for s in scholarships
        ]
        matches = self.store.create_match_batch(profile_id, items)

        log_with_context(
            logger,
            "INFO",
            f"Generated {len(matches)} matches",
            context={"profile_id": profile_id},
            extra_data={"scholarships": len(scholarships)},
        )
        return matches
