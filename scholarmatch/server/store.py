# server/store.py
"""
ScholarshipStore: the single entry point for persistence.

Airtable is tried first when configured; the in-process caches are always
written, so every create succeeds even when the backend is down or absent.
Lookups never raise: a backend failure reads as "not found" or, for
scholarships, as the fallback catalog. clear_all_scholarships() is the
only operation that lets a backend error escape.

The caches are plain dicts owned by the store instance. There is no
locking; concurrent writers to the same id are last-write-wins.
"""

import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .backends import Record, RecordBackend
from .db import (
    APPLICATIONS_TABLE,
    GUIDANCE_TABLE,
    MATCHES_TABLE,
    PROFILES_TABLE,
    SCHOLARSHIPS_TABLE,
)
from .fallback_catalog import (
    fallback_scholarships,
    find_fallback_scholarship,
    is_fallback_id,
)
from .logging_config import get_logger, log_with_context
from .record_mapper import (
    UNTITLED_SCHOLARSHIP,
    application_guidance_to_fields,
    profile_changes_to_fields,
    scholarship_application_to_fields,
    scholarship_match_to_fields,
    scholarship_to_fields,
    scholarships_look_valid,
    student_profile_to_fields,
    to_application_guidance,
    to_scholarship,
    to_scholarship_application,
    to_scholarship_match,
    to_student_profile,
)
from .scholarship_models import (
    ApplicationGuidance,
    ApplicationGuidanceCreate,
    Scholarship,
    ScholarshipApplication,
    ScholarshipApplicationCreate,
    ScholarshipCreate,
    ScholarshipMatch,
    ScholarshipMatchCreate,
    ScholarshipMatchDetail,
    StudentProfile,
    StudentProfileCreate,
    now_iso,
)

logger = get_logger("store")

T = TypeVar("T")

CLEAR_BATCH_SIZE = 10
RESUME_LOOKUP_LIMIT = 10


class InvalidDocumentsError(ValueError):
    """An application was submitted without documents or with non-PDF ones."""


def documents_are_pdf(documents: Iterable[str]) -> bool:
    return all(doc.lower().endswith(".pdf") for doc in documents)


def filter_scholarships(
    items: List[Scholarship],
    q: Optional[str] = None,
    type: Optional[str] = None,
    tags: Optional[List[str]] = None,
    field_of_study: Optional[str] = None,
    education_level: Optional[str] = None,
) -> List[Scholarship]:
    """
    In-memory filtering over an already loaded catalog.

    A scholarship with no eligible fields (or levels) is open to every
    field (or level).
    """
    if type:
        items = [s for s in items if s.type.lower() == type.lower()]

    if tags:
        wanted = {t.strip().lower() for t in tags if t.strip()}
        if wanted:
            items = [s for s in items if wanted & {t.lower() for t in s.tags}]

    if field_of_study:
        f = field_of_study.lower()
        items = [
            s for s in items
            if not s.eligible_fields or f in (x.lower() for x in s.eligible_fields)
        ]

    if education_level:
        lvl = education_level.lower()
        items = [
            s for s in items
            if not s.eligible_levels or lvl in (x.lower() for x in s.eligible_levels)
        ]

    if q:
        q_lower = q.lower()
        items = [
            s for s in items
            if q_lower in s.title.lower()
            or q_lower in s.organization.lower()
            or q_lower in s.description.lower()
        ]

    return items


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


class ScholarshipStore:
    def __init__(self, backend: RecordBackend):
        self.backend = backend
        self._profiles: Dict[str, StudentProfile] = {}
        self._scholarships: Dict[str, Scholarship] = {}
        self._matches: Dict[str, List[ScholarshipMatch]] = {}
        self._applications: Dict[str, List[ScholarshipApplication]] = {}
        self._guidance: Dict[str, ApplicationGuidance] = {}

        if backend.available:
            logger.info("Using Airtable for scholarships and profiles")
        else:
            logger.warning("Airtable not configured - using in-memory storage")

    # -----------------------------------------------------------------------
    # Backend helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def _warn(self, message: str, exc: Exception, **context: Any) -> None:
        log_with_context(
            logger,
            "WARNING",
            f"{message}: {exc!r}",
            context=context,
            extra_data={"backend": self.backend.name},
        )

    def _backend_create(
        self, table: str, fields: Dict[str, Any], mapper: Callable[[Record], T]
    ) -> Optional[T]:
        """Create one record; None when the backend is absent or fails."""
        if not self.backend.available:
            return None
        try:
            return mapper(self.backend.create(table, fields))
        except Exception as exc:
            self._warn(f"Error creating record in {table}, falling back to memory", exc)
            return None

    def _backend_find(self, table: str, record_id: str, mapper: Callable[[Record], T]) -> Optional[T]:
        if not self.backend.available:
            return None
        try:
            return mapper(self.backend.find(table, record_id))
        except Exception as exc:
            self._warn(f"Error fetching {record_id} from {table}", exc, record_id=record_id)
            return None

    # -----------------------------------------------------------------------
    # Student profiles
    # -----------------------------------------------------------------------

    def get_profile(self, profile_id: str) -> Optional[StudentProfile]:
        cached = self._profiles.get(profile_id)
        if cached is not None:
            return cached
        profile = self._backend_find(PROFILES_TABLE, profile_id, to_student_profile)
        if profile is not None:
            self._profiles[profile_id] = profile
        return profile

    def create_profile(self, data: StudentProfileCreate) -> StudentProfile:
        now = now_iso()
        profile = self._backend_create(
            PROFILES_TABLE, student_profile_to_fields(data, now), to_student_profile
        )
        durable = profile is not None
        if profile is None:
            profile = StudentProfile(
                id=self._new_id(),
                **data.model_dump(),
                created_at=now,
                updated_at=now,
            )
        self._profiles[profile.id] = profile
        log_with_context(
            logger,
            "INFO",
            "Profile created",
            context={"profile_id": profile.id},
            extra_data={"durable": durable},
        )
        return profile

    def update_profile(self, profile_id: str, changes: Dict[str, Any]) -> StudentProfile:
        """
        Overwrite the fields present in ``changes``; everything else keeps
        its current value. The Airtable write is best-effort.
        """
        now = now_iso()
        changes = {k: v for k, v in changes.items() if v is not None}

        existing = self.get_profile(profile_id) or StudentProfile(
            id=profile_id, name="", email="", created_at=now, updated_at=now
        )
        updated = existing.model_copy(update={**changes, "updated_at": now})

        if self.backend.available:
            fields = profile_changes_to_fields(changes)
            fields["UpdatedAt"] = now
            try:
                self.backend.update(PROFILES_TABLE, profile_id, fields)
            except Exception as exc:
                self._warn("Error updating profile in Airtable", exc, profile_id=profile_id)

        self._profiles[profile_id] = updated
        return updated

    # -----------------------------------------------------------------------
    # Scholarships
    # -----------------------------------------------------------------------

    def list_scholarships(self) -> List[Scholarship]:
        if not self.backend.available:
            return fallback_scholarships()
        try:
            records = self.backend.select(SCHOLARSHIPS_TABLE)
            scholarships = [to_scholarship(r) for r in records]
        except Exception as exc:
            self._warn("Error fetching scholarships, using fallback data", exc)
            return fallback_scholarships()

        if not scholarships_look_valid(records, scholarships):
            logger.info("Airtable scholarships lack proper fields, using fallback data")
            return fallback_scholarships()
        return scholarships

    def search_scholarships(
        self,
        q: Optional[str] = None,
        type: Optional[str] = None,
        tags: Optional[List[str]] = None,
        field_of_study: Optional[str] = None,
        education_level: Optional[str] = None,
    ) -> List[Scholarship]:
        return filter_scholarships(
            self.list_scholarships(),
            q=q,
            type=type,
            tags=tags,
            field_of_study=field_of_study,
            education_level=education_level,
        )

    def get_scholarship(self, scholarship_id: str) -> Optional[Scholarship]:
        if is_fallback_id(scholarship_id):
            return find_fallback_scholarship(scholarship_id)

        cached = self._scholarships.get(scholarship_id)
        if cached is not None:
            return cached

        if not self.backend.available:
            return find_fallback_scholarship(scholarship_id)

        try:
            scholarship = to_scholarship(self.backend.find(SCHOLARSHIPS_TABLE, scholarship_id))
        except Exception as exc:
            self._warn("Error fetching scholarship", exc, scholarship_id=scholarship_id)
            return find_fallback_scholarship(scholarship_id)

        if scholarship.title == UNTITLED_SCHOLARSHIP:
            return fallback_scholarships()[0]

        self._scholarships[scholarship.id] = scholarship
        return scholarship

    def create_scholarship(self, data: ScholarshipCreate) -> Scholarship:
        now = now_iso()
        scholarship = self._backend_create(
            SCHOLARSHIPS_TABLE, scholarship_to_fields(data, now), to_scholarship
        )
        if scholarship is None:
            scholarship = Scholarship(id=self._new_id(), **data.model_dump(), created_at=now)
        self._scholarships[scholarship.id] = scholarship
        return scholarship

    def clear_all_scholarships(self) -> int:
        """
        Delete every row of the scholarships table, CLEAR_BATCH_SIZE ids per
        request. Backend errors propagate. Returns the number deleted.
        """
        if not self.backend.available:
            return 0
        try:
            record_ids = [r["id"] for r in self.backend.select(SCHOLARSHIPS_TABLE)]
            if not record_ids:
                return 0
            logger.info(f"Clearing {len(record_ids)} existing scholarships...")
            for i in range(0, len(record_ids), CLEAR_BATCH_SIZE):
                self.backend.destroy(SCHOLARSHIPS_TABLE, record_ids[i:i + CLEAR_BATCH_SIZE])
        except Exception:
            logger.exception("Error clearing scholarships")
            raise
        logger.info("All scholarships cleared")
        return len(record_ids)

    # -----------------------------------------------------------------------
    # Matches
    # -----------------------------------------------------------------------

    def create_match_batch(
        self, profile_id: str, items: List[ScholarshipMatchCreate]
    ) -> List[ScholarshipMatch]:
        """
        Persist one generation run. Airtable keeps every run; the cache
        keeps only the latest run for the profile.
        """
        now = now_iso()
        matches: Optional[List[ScholarshipMatch]] = None

        if self.backend.available and items:
            rows = [scholarship_match_to_fields(item, now) for item in items]
            try:
                records = self.backend.batch_create(MATCHES_TABLE, rows)
                matches = [to_scholarship_match(r) for r in records]
            except Exception as exc:
                self._warn("Error creating scholarship matches", exc, profile_id=profile_id)

        if matches is None:
            matches = [
                ScholarshipMatch(id=self._new_id(), **item.model_dump(), created_at=now)
                for item in items
            ]

        self._matches[profile_id] = list(matches)
        return matches

    def get_matches(self, profile_id: str) -> List[ScholarshipMatchDetail]:
        """
        "new" matches for the profile, best score first, each with its
        scholarship attached. The cached run wins whenever there is one;
        Airtable is only queried for profiles this process has not matched.
        """
        cached = self._matches.get(profile_id)
        if cached:
            candidates = [m for m in cached if m.status == "new"]
        elif not self.backend.available:
            return []
        else:
            try:
                records = self.backend.select(
                    MATCHES_TABLE, where={"ProfileID": profile_id, "Status": "new"}
                )
                candidates = [to_scholarship_match(r) for r in records]
            except Exception as exc:
                self._warn("Error fetching scholarship matches", exc, profile_id=profile_id)
                return []

        results: List[ScholarshipMatchDetail] = []
        for match in candidates:
            scholarship = self.get_scholarship(match.scholarship_id)
            if scholarship is not None:
                results.append(ScholarshipMatchDetail(**match.model_dump(), scholarship=scholarship))
        results.sort(key=lambda m: m.match_score, reverse=True)
        return results

    def _find_cached_match(self, match_id: str) -> Optional[ScholarshipMatch]:
        for matches in self._matches.values():
            for match in matches:
                if match.id == match_id:
                    return match
        return None

    def _replace_cached_match(self, updated: ScholarshipMatch) -> None:
        matches = self._matches.get(updated.profile_id, [])
        for i, match in enumerate(matches):
            if match.id == updated.id:
                matches[i] = updated

    def update_match_status(self, match_id: str, status: str) -> ScholarshipMatch:
        existing = self._find_cached_match(match_id)
        if existing is not None:
            merged = existing.model_copy(update={"status": status})
        else:
            merged = ScholarshipMatch(
                id=match_id,
                profile_id="",
                scholarship_id="",
                match_score=0,
                status=status,
                created_at=now_iso(),
            )

        if self.backend.available:
            try:
                record = self.backend.update(MATCHES_TABLE, match_id, {"Status": status})
                if existing is None:
                    merged = to_scholarship_match(record)
            except Exception as exc:
                self._warn("Error updating match status", exc, match_id=match_id)

        # A match outside the cached batch stays uncached: caching it would
        # become the profile's whole batch and hide its other Airtable matches.
        if existing is not None:
            self._replace_cached_match(merged)
        return merged

    # -----------------------------------------------------------------------
    # Guidance and consultation bookings
    # -----------------------------------------------------------------------

    def get_guidance(self, profile_id: str, scholarship_id: str) -> Optional[ApplicationGuidance]:
        for guidance in self._guidance.values():
            if guidance.profile_id == profile_id and guidance.scholarship_id == scholarship_id:
                return guidance

        if not self.backend.available:
            return None
        try:
            records = self.backend.select(
                GUIDANCE_TABLE,
                where={"ProfileId": profile_id, "ScholarshipId": scholarship_id},
                max_records=1,
            )
            if not records:
                return None
            guidance = to_application_guidance(records[0])
        except Exception as exc:
            self._warn("Error fetching application guidance", exc, profile_id=profile_id)
            return None

        self._guidance[guidance.id] = guidance
        return guidance

    def create_guidance(self, data: ApplicationGuidanceCreate) -> ApplicationGuidance:
        now = now_iso()
        guidance = self._backend_create(
            GUIDANCE_TABLE, application_guidance_to_fields(data, now), to_application_guidance
        )
        if guidance is None:
            guidance = ApplicationGuidance(id=self._new_id(), **data.model_dump(), created_at=now)
        self._guidance[guidance.id] = guidance
        return guidance

    def save_consultation_booking(
        self, profile_id: str, counselor_name: str, amount: float
    ) -> ApplicationGuidance:
        """Bookings live in the guidance table, encoded into its text columns."""
        booked_at = now_iso()
        booking = self.create_guidance(
            ApplicationGuidanceCreate(
                profile_id=profile_id,
                scholarship_id=f"consultation-{counselor_name}",
                essay_tips=f"Consultation Booking: {counselor_name}",
                checklist=f"Amount Paid: ₹{_format_amount(amount)}",
                improvement_suggestions=f"Counselor: {counselor_name}, Booked on: {booked_at}",
            )
        )
        log_with_context(
            logger,
            "INFO",
            "Consultation booking saved",
            context={"profile_id": profile_id},
            extra_data={"counselor": counselor_name, "amount": amount},
        )
        return booking

    # -----------------------------------------------------------------------
    # Applications
    # -----------------------------------------------------------------------

    def create_application(self, data: ScholarshipApplicationCreate) -> ScholarshipApplication:
        """
        All documents must be PDFs; one bad document rejects the whole
        application and nothing is stored.
        """
        if not data.documents:
            raise InvalidDocumentsError("At least one document is required")
        if not documents_are_pdf(data.documents):
            raise InvalidDocumentsError("Only PDF documents are allowed")

        now = now_iso()
        application = self._backend_create(
            APPLICATIONS_TABLE,
            scholarship_application_to_fields(data, now),
            to_scholarship_application,
        )
        if application is None:
            application = ScholarshipApplication(
                id=self._new_id(), **data.model_dump(), applied_at=now
            )
        self._applications.setdefault(data.student_profile_id, []).append(application)
        log_with_context(
            logger,
            "INFO",
            "Scholarship application created",
            context={
                "application_id": application.id,
                "profile_id": data.student_profile_id,
                "scholarship_id": data.scholarship_id,
            },
        )
        return application

    def get_applications(self, profile_id: str) -> List[ScholarshipApplication]:
        cached = self._applications.get(profile_id)
        if cached:
            return list(cached)
        if not self.backend.available:
            return []
        try:
            records = self.backend.select(
                APPLICATIONS_TABLE,
                where={"StudentProfileId": profile_id},
                sort="-AppliedAt",
            )
            return [to_scholarship_application(r) for r in records]
        except Exception as exc:
            self._warn("Error fetching applications", exc, profile_id=profile_id)
            return []

    # -----------------------------------------------------------------------
    # Resumes
    # -----------------------------------------------------------------------

    def get_resume(self, profile_id: str) -> Optional[Scholarship]:
        """
        Generated resumes are written by the webhook into the scholarships
        table: the newest row tied to the profile that has non-empty Notes.
        """
        if not self.backend.available:
            return None
        try:
            records = self.backend.select(
                SCHOLARSHIPS_TABLE,
                contains={"ProfileId": profile_id, "Notes": profile_id, "Title": profile_id},
                sort="-CreatedAt",
                max_records=RESUME_LOOKUP_LIMIT,
            )
            resumes = [to_scholarship(r) for r in records]
        except Exception as exc:
            self._warn("Error fetching resume", exc, profile_id=profile_id)
            return None

        for resume in resumes:
            if resume.notes:
                return resume
        logger.info(f"No resume with notes found for profileId: {profile_id}")
        return None
