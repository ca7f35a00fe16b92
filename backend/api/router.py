import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_db, get_esco_client, get_gemini_client
from config import settings
from database import Database
from models.requests import (
    CreateJobPostingRequest,
    CreateSeekerRequest,
    MatchRequest,
    TrainingProgramsRequest,
    TransitionRequest,
)
from models.responses import (
    JobPostingResponse,
    MatchListItem,
    MatchResponse,
    RecruiterResponse,
    SeekerProfileResponse,
    TrainingProgramsResponse,
    TransitionResponse,
)
from models.schemas.esco import TaxonomyEntry
from services import match_service, onboarding, pdf_parser
from services.esco_client import EscoClient
from services.gemini_client import GeminiClient
from services.training_search import search_training_programs

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health(gemini: GeminiClient = Depends(get_gemini_client)):
    return {
        "status": "ok",
        "gemini_configured": gemini.enabled,
        "training_search_configured": bool(settings.brave_search_api_key),
    }


@router.get("/esco/search", response_model=list[TaxonomyEntry])
async def esco_search(
    q: str | None = Query(None),
    text: str | None = Query(None),
    type: str = Query("occupation", pattern="^(occupation|skill)$"),
    esco: EscoClient = Depends(get_esco_client),
):
    query = text or q
    if not query:
        raise HTTPException(status_code=400, detail="q parameter is required")

    search = esco.search_skills if type == "skill" else esco.search_occupations
    return await asyncio.to_thread(search, query)


# --- Seekers ---


@router.post("/seekers", response_model=SeekerProfileResponse, status_code=201)
@limiter.limit("10/minute")
async def create_seeker(
    request: Request,
    body: CreateSeekerRequest,
    db: Database = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    esco: EscoClient = Depends(get_esco_client),
):
    return await onboarding.create_seeker_profile(
        db, gemini, esco, body.cv_text, name=body.name, email=body.email
    )


@router.post("/seekers/upload", response_model=SeekerProfileResponse, status_code=201)
@limiter.limit("10/minute")
async def upload_seeker_cv(
    request: Request,
    cv_file: UploadFile = File(...),
    name: str | None = Form(None),
    email: str | None = Form(None),
    db: Database = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    esco: EscoClient = Depends(get_esco_client),
):
    # Read and validate size
    content = await cv_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    if not pdf_parser.is_pdf(cv_file.filename, content):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    try:
        cv_text = pdf_parser.extract_text(content)
    except Exception:
        logger.warning("Could not parse uploaded PDF %r", cv_file.filename, exc_info=True)
        raise HTTPException(status_code=400, detail="Could not parse PDF file")

    if not cv_text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from PDF")

    return await onboarding.create_seeker_profile(
        db, gemini, esco, cv_text[: settings.max_cv_chars], name=name, email=email
    )


@router.get("/seekers", response_model=list[SeekerProfileResponse])
def list_seekers(db: Database = Depends(get_db)):
    return onboarding.list_seeker_profiles(db)


@router.get("/seekers/{profile_id}", response_model=SeekerProfileResponse)
def get_seeker(profile_id: str, db: Database = Depends(get_db)):
    return onboarding.get_seeker_profile(db, profile_id)


# --- Recruiters / job postings ---


@router.post("/recruiters", response_model=RecruiterResponse, status_code=201)
@limiter.limit("10/minute")
async def create_job_posting(
    request: Request,
    body: CreateJobPostingRequest,
    db: Database = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    esco: EscoClient = Depends(get_esco_client),
):
    return await onboarding.create_job_posting(
        db, gemini, esco, body.occupation_uri, company=body.company, email=body.email
    )


@router.get("/recruiters", response_model=list[JobPostingResponse])
def list_job_postings(db: Database = Depends(get_db)):
    return onboarding.list_job_postings(db)


@router.get("/recruiters/{posting_id}", response_model=JobPostingResponse)
def get_job_posting(posting_id: str, db: Database = Depends(get_db)):
    return onboarding.get_job_posting(db, posting_id)


# --- Matching ---


@router.post("/match", response_model=MatchResponse)
@limiter.limit("20/minute")
async def create_match(
    request: Request,
    body: MatchRequest,
    db: Database = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    esco: EscoClient = Depends(get_esco_client),
):
    return await match_service.run_match(
        db, gemini, esco, body.seeker_profile_id, body.job_posting_id
    )


@router.get("/match", response_model=list[MatchListItem])
def list_matches(
    seeker_profile_id: str | None = Query(None),
    job_posting_id: str | None = Query(None),
    db: Database = Depends(get_db),
):
    return match_service.list_matches(db, seeker_profile_id, job_posting_id)


@router.post("/transition", response_model=TransitionResponse)
@limiter.limit("10/minute")
async def analyze_transition(
    request: Request,
    body: TransitionRequest,
    db: Database = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    esco: EscoClient = Depends(get_esco_client),
):
    return await match_service.analyze_transition(
        db, gemini, esco, body.seeker_profile_id, body.occupation_uri
    )


@router.post("/training-programs", response_model=TrainingProgramsResponse)
@limiter.limit("10/minute")
async def training_programs(
    request: Request,
    body: TrainingProgramsRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
):
    programs = await search_training_programs(gemini, body.missing_skills, body.target_occupation)
    return TrainingProgramsResponse(programs=programs)
