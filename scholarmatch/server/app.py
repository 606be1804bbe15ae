# server/app.py
import time
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .db import make_backend
from .llm import generate_guidance
from .logging_config import (
    generate_request_id,
    get_logger,
    log_with_context,
    request_id_var,
    setup_logging,
)
from .matching import MatchGenerator, ProfileNotFound
from .resume_client import ResumeWebhookError, trigger_resume_generation
from .resume_export import DOCX_MEDIA_TYPE, build_resume_docx, content_disposition
from .schemas import (
    ApplicationIn,
    ConsultationBookingIn,
    GenerateMatchesIn,
    GuidanceIn,
    HealthOut,
    MatchesOut,
    MatchStatusIn,
    MessageOut,
    ResumeGenerateIn,
    ResumeGenerateOut,
    ResumeOut,
)
from .scholarship_models import (
    ApplicationGuidance,
    ApplicationGuidanceCreate,
    Scholarship,
    ScholarshipApplication,
    ScholarshipApplicationCreate,
    ScholarshipMatch,
    ScholarshipMatchDetail,
    StudentProfile,
    StudentProfileCreate,
    StudentProfileUpdate,
    now_iso,
)
from .seed_data import reseed_scholarships, seed_sample_data
from .store import InvalidDocumentsError, ScholarshipStore

setup_logging()
logger = get_logger("http")

app = FastAPI(title="Scholarship Match Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# One store per process; handlers receive it through get_store().
store = ScholarshipStore(make_backend())


def get_store() -> ScholarshipStore:
    return store


def get_match_generator(store: ScholarshipStore = Depends(get_store)) -> MatchGenerator:
    return MatchGenerator(store)


# ---------------------------------------------------------------------------
# Request id + access log
# ---------------------------------------------------------------------------


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    log_with_context(
        logger,
        "INFO",
        f"Request started: {request.method} {request.url.path}",
        extra_data={"query_params": dict(request.query_params)},
    )

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id
    log_with_context(
        logger,
        "INFO",
        f"Request completed: {request.method} {request.url.path} -> {response.status_code}",
        extra_data={"duration_ms": round(duration_ms, 2), "status_code": response.status_code},
    )
    return response


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthOut)
def health(store: ScholarshipStore = Depends(get_store)) -> HealthOut:
    return HealthOut(ts=now_iso(), backend=store.backend.name)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


@app.post("/api/profile", response_model=StudentProfile)
def create_profile(
    payload: Dict[str, Any] = Body(...),
    store: ScholarshipStore = Depends(get_store),
) -> StudentProfile:
    # Clients send either {"profile": {...}} or the profile itself.
    raw = payload.get("profile") or payload
    try:
        data = StudentProfileCreate.model_validate(raw)
    except ValidationError as exc:
        logger.warning(f"Profile validation failed: {exc.error_count()} error(s)")
        raise HTTPException(
            status_code=400,
            detail={"message": "Failed to create profile", "error": str(exc)},
        )
    return store.create_profile(data)


@app.get("/api/profile/{profile_id}", response_model=StudentProfile)
def get_profile(profile_id: str, store: ScholarshipStore = Depends(get_store)) -> StudentProfile:
    profile = store.get_profile(profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@app.put("/api/profile/{profile_id}", response_model=StudentProfile)
def update_profile(
    profile_id: str,
    payload: StudentProfileUpdate,
    store: ScholarshipStore = Depends(get_store),
) -> StudentProfile:
    return store.update_profile(profile_id, payload.model_dump(exclude_unset=True))


# ---------------------------------------------------------------------------
# Scholarships
# ---------------------------------------------------------------------------


@app.get("/api/scholarships", response_model=List[Scholarship])
def list_scholarships(store: ScholarshipStore = Depends(get_store)) -> List[Scholarship]:
    return store.list_scholarships()


@app.get("/api/scholarships/search", response_model=List[Scholarship])
def search_scholarships(
    q: Optional[str] = None,
    type: Optional[str] = None,
    tags: Optional[str] = Query(default=None, description="Comma-separated tags"),
    field_of_study: Optional[str] = Query(default=None, alias="fieldOfStudy"),
    education_level: Optional[str] = Query(default=None, alias="educationLevel"),
    store: ScholarshipStore = Depends(get_store),
) -> List[Scholarship]:
    return store.search_scholarships(
        q=q,
        type=type,
        tags=tags.split(",") if tags else None,
        field_of_study=field_of_study,
        education_level=education_level,
    )


@app.get("/api/scholarships/{scholarship_id}", response_model=Scholarship)
def get_scholarship(scholarship_id: str, store: ScholarshipStore = Depends(get_store)) -> Scholarship:
    scholarship = store.get_scholarship(scholarship_id)
    if scholarship is None:
        raise HTTPException(status_code=404, detail="Scholarship not found")
    return scholarship


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@app.post("/api/matches/generate", response_model=MatchesOut)
def generate_matches(
    payload: GenerateMatchesIn,
    generator: MatchGenerator = Depends(get_match_generator),
) -> MatchesOut:
    if not payload.profile_id:
        raise HTTPException(status_code=400, detail="Profile ID is required")
    try:
        matches = generator.generate(payload.profile_id)
    except ProfileNotFound:
        raise HTTPException(status_code=404, detail="Profile not found")
    return MatchesOut(matches=matches)


@app.get("/api/matches/{profile_id}", response_model=List[ScholarshipMatchDetail])
def get_matches(profile_id: str, store: ScholarshipStore = Depends(get_store)) -> List[ScholarshipMatchDetail]:
    return store.get_matches(profile_id)


@app.put("/api/matches/{match_id}/status", response_model=ScholarshipMatch)
def update_match_status(
    match_id: str,
    payload: MatchStatusIn,
    store: ScholarshipStore = Depends(get_store),
) -> ScholarshipMatch:
    return store.update_match_status(match_id, payload.status)


# ---------------------------------------------------------------------------
# Guidance
# ---------------------------------------------------------------------------


@app.post("/api/guidance", response_model=ApplicationGuidance)
def create_guidance(
    payload: GuidanceIn,
    store: ScholarshipStore = Depends(get_store),
) -> ApplicationGuidance:
    if not payload.profile_id or not payload.scholarship_id:
        raise HTTPException(status_code=400, detail="Profile ID and Scholarship ID are required")

    existing = store.get_guidance(payload.profile_id, payload.scholarship_id)
    if existing is not None:
        return existing

    profile = store.get_profile(payload.profile_id)
    scholarship = store.get_scholarship(payload.scholarship_id)
    if profile is None or scholarship is None:
        raise HTTPException(status_code=404, detail="Profile or scholarship not found")

    guidance = generate_guidance(profile, scholarship)
    return store.create_guidance(
        ApplicationGuidanceCreate(
            profile_id=payload.profile_id,
            scholarship_id=payload.scholarship_id,
            **guidance,
        )
    )


@app.get("/api/guidance/{profile_id}/{scholarship_id}", response_model=ApplicationGuidance)
def get_guidance(
    profile_id: str,
    scholarship_id: str,
    store: ScholarshipStore = Depends(get_store),
) -> ApplicationGuidance:
    guidance = store.get_guidance(profile_id, scholarship_id)
    if guidance is None:
        raise HTTPException(status_code=404, detail="Guidance not found")
    return guidance


# ---------------------------------------------------------------------------
# Applications + consultations
# ---------------------------------------------------------------------------


@app.post("/api/applications", response_model=ScholarshipApplication)
def create_application(
    payload: ApplicationIn,
    store: ScholarshipStore = Depends(get_store),
) -> ScholarshipApplication:
    if not payload.profile_id:
        raise HTTPException(status_code=400, detail="Profile ID is required")
    if not payload.scholarship_id:
        raise HTTPException(status_code=400, detail="Scholarship ID is required")
    try:
        return store.create_application(
            ScholarshipApplicationCreate(
                student_profile_id=payload.profile_id,
                scholarship_id=payload.scholarship_id,
                documents=payload.documents,
                status="pending",
            )
        )
    except InvalidDocumentsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.get("/api/applications/{profile_id}", response_model=List[ScholarshipApplication])
def get_applications(
    profile_id: str, store: ScholarshipStore = Depends(get_store)
) -> List[ScholarshipApplication]:
    return store.get_applications(profile_id)


@app.post("/api/consultation-booking", response_model=ApplicationGuidance)
def consultation_booking(
    payload: ConsultationBookingIn,
    store: ScholarshipStore = Depends(get_store),
) -> ApplicationGuidance:
    if not payload.profile_id or not payload.counselor_name or not payload.amount:
        raise HTTPException(
            status_code=400,
            detail="Profile ID, counselor name, and amount are required",
        )
    return store.save_consultation_booking(
        payload.profile_id, payload.counselor_name, payload.amount
    )


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


@app.post("/api/seed-data", response_model=MessageOut)
def seed_data(store: ScholarshipStore = Depends(get_store)) -> MessageOut:
    count = seed_sample_data(store)
    return MessageOut(message="Sample data seeded successfully", count=count)


@app.post("/api/seed/scholarships", response_model=MessageOut)
def seed_scholarships(store: ScholarshipStore = Depends(get_store)) -> MessageOut:
    try:
        count = reseed_scholarships(store)
    except Exception as exc:
        logger.error(f"Seeding scholarships failed: {exc!r}")
        raise HTTPException(status_code=500, detail="Failed to seed scholarships")
    return MessageOut(message=f"Successfully seeded {count} scholarships", count=count)


# ---------------------------------------------------------------------------
# Resumes
# ---------------------------------------------------------------------------


@app.post("/api/resume/generate", response_model=ResumeGenerateOut)
def generate_resume(
    payload: ResumeGenerateIn,
    store: ScholarshipStore = Depends(get_store),
) -> ResumeGenerateOut:
    if not payload.profile_id:
        raise HTTPException(status_code=400, detail="Profile ID is required")
    profile = store.get_profile(payload.profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    try:
        trigger_resume_generation(profile)
    except ResumeWebhookError as exc:
        logger.error(str(exc))
        raise HTTPException(status_code=500, detail="Failed to generate resume via webhook")
    return ResumeGenerateOut(profile_id=payload.profile_id)


@app.get("/api/resume/{profile_id}", response_model=ResumeOut)
def get_resume(profile_id: str, store: ScholarshipStore = Depends(get_store)) -> ResumeOut:
    resume = store.get_resume(profile_id)
    if resume is None or not resume.notes:
        raise HTTPException(
            status_code=404, detail="Resume not found. Please generate a resume first."
        )
    return ResumeOut(
        id=resume.id,
        profile_id=resume.profile_id,
        content=resume.notes,
        created_at=resume.created_at,
    )


@app.get("/api/resume/{profile_id}/download")
def download_resume(profile_id: str, store: ScholarshipStore = Depends(get_store)) -> Response:
    profile = store.get_profile(profile_id)
    resume = store.get_resume(profile_id)
    if resume is None or not resume.notes:
        raise HTTPException(
            status_code=404, detail="Resume not found. Please generate a resume first."
        )

    name = profile.name if profile else None
    try:
        content = build_resume_docx(
            resume.notes,
            name=name,
            email=profile.email if profile else None,
            phone=profile.phone if profile else None,
            location=profile.location if profile else None,
        )
        disposition = content_disposition(name)
    except Exception as exc:
        logger.error(f"Resume export failed: {exc!r}")
        raise HTTPException(status_code=500, detail="Failed to download resume")

    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": disposition},
    )
