"""Seeker and recruiter onboarding: build, store and read back profiles."""

import asyncio
import logging

from sqlalchemy.exc import IntegrityError

from database import Database
from database.models import JobPosting, RecruiterProfile, SeekerProfile
from database.repository import JobPostingRepository, SeekerRepository
from models.responses import (
    JobPostingResponse,
    JobPostingSkillOut,
    RecruiterResponse,
    SeekerProfileResponse,
    SeekerSkillOut,
)
from services import insights
from services.esco_client import EscoClient
from services.exceptions import (
    EmailAlreadyRegisteredException,
    EmptyProfileException,
    JobPostingNotFoundException,
    SeekerNotFoundException,
)
from services.gemini_client import GeminiClient
from services.profile_builder import build_seeker_skills, parse_cv

logger = logging.getLogger(__name__)


def seeker_response(profile: SeekerProfile) -> SeekerProfileResponse:
    return SeekerProfileResponse(
        id=profile.id,
        name=profile.user.name,
        email=profile.user.email,
        job_titles=profile.job_titles or [],
        education=profile.education or [],
        skills=[
            SeekerSkillOut(
                uri=s.esco_uri,
                title=s.title,
                skill_type=s.skill_type,
                proficiency=s.proficiency,
                source=s.source,
            )
            for s in profile.skills
        ],
        created_at=profile.created_at,
    )


def posting_response(posting: JobPosting) -> JobPostingResponse:
    return JobPostingResponse(
        id=posting.id,
        title=posting.title,
        occupation_uri=posting.esco_occupation_uri,
        description=posting.description,
        company=posting.recruiter_profile.company if posting.recruiter_profile else None,
        recruiter_profile_id=posting.recruiter_profile_id,
        skills=[
            JobPostingSkillOut(
                uri=s.esco_uri, title=s.title, skill_type=s.skill_type, is_essential=s.is_essential
            )
            for s in posting.skills
        ],
        created_at=posting.created_at,
    )


def recruiter_response(recruiter: RecruiterProfile) -> RecruiterResponse:
    return RecruiterResponse(
        id=recruiter.id,
        name=recruiter.user.name,
        email=recruiter.user.email,
        company=recruiter.company,
        job_postings=[posting_response(p) for p in recruiter.job_postings],
    )


async def create_seeker_profile(
    db: Database,
    gemini: GeminiClient,
    esco: EscoClient,
    cv_text: str,
    name: str | None = None,
    email: str | None = None,
) -> SeekerProfileResponse:
    """Parse a CV, map it onto the taxonomy and store the seeker profile."""
    parsed = await parse_cv(gemini, cv_text)
    skills = await build_seeker_skills(parsed, esco)
    if not skills:
        raise EmptyProfileException("No taxonomy skills could be identified in the CV")

    try:
        with db.session_scope() as session:
            profile = SeekerRepository(session).create(name, email, cv_text, parsed, skills)
            return seeker_response(profile)
    except IntegrityError as e:
        logger.info("Seeker email %s already registered", email)
        raise EmailAlreadyRegisteredException(email) from e


def get_seeker_profile(db: Database, profile_id: str) -> SeekerProfileResponse:
    with db.session_scope() as session:
        profile = SeekerRepository(session).get(profile_id)
        if profile is None:
            raise SeekerNotFoundException(profile_id)
        return seeker_response(profile)


def list_seeker_profiles(db: Database) -> list[SeekerProfileResponse]:
    with db.session_scope() as session:
        return [seeker_response(p) for p in SeekerRepository(session).list_all()]


async def create_job_posting(
    db: Database,
    gemini: GeminiClient,
    esco: EscoClient,
    occupation_uri: str,
    company: str | None = None,
    email: str | None = None,
) -> RecruiterResponse:
    """Create a posting from a taxonomy occupation, with an AI-written description."""
    occupation = await asyncio.to_thread(esco.get_occupation_details, occupation_uri)
    description = await insights.generate_job_description(
        gemini,
        occupation.title,
        [s.title for s in occupation.essential_skills],
        [s.title for s in occupation.optional_skills],
    )

    with db.session_scope() as session:
        repo = JobPostingRepository(session)
        recruiter = repo.get_or_create_recruiter(email, company)
        repo.create(recruiter, occupation, description=description or None)
        session.refresh(recruiter)
        return recruiter_response(recruiter)


def get_job_posting(db: Database, posting_id: str) -> JobPostingResponse:
    with db.session_scope() as session:
        posting = JobPostingRepository(session).get(posting_id)
        if posting is None:
            raise JobPostingNotFoundException(posting_id)
        return posting_response(posting)


def list_job_postings(db: Database) -> list[JobPostingResponse]:
    with db.session_scope() as session:
        return [posting_response(p) for p in JobPostingRepository(session).list_all()]
