"""Match orchestration around the pure engine.

Flow (job posting):
    load seeker + posting ─┬─ stored match? ──────────────────────────┐
                           └─ co-occurrence (taxonomy, threaded)      │
                                 → match_skills_enhanced → store      │
                                                                      ↓
                             coaching + candidate summary (concurrent, Gemini)

Flow (career transition): same engine against a taxonomy occupation,
nothing stored, transition coaching instead.
"""

import asyncio
import logging

from sqlalchemy.exc import IntegrityError

from database import Database
from database.models import Match
from database.repository import (
    JobPostingRepository,
    MatchRepository,
    SeekerRepository,
    to_job_skills,
    to_seeker_skills,
)
from models.responses import MatchListItem, MatchResponse, TransitionResponse
from models.schemas.matching import (
    FuzzyMatchDetail,
    FuzzyMatchTitle,
    JobSkill,
    MatchResult,
    ScoreBreakdown,
    SeekerSkill,
)
from services import insights
from services.cooccurrence import batch_co_occurrence
from services.esco_client import EscoClient
from services.exceptions import JobPostingNotFoundException, SeekerNotFoundException
from services.gemini_client import GeminiClient
from services.matching import match_skills_enhanced

logger = logging.getLogger(__name__)


def build_title_lookup(seeker_skills: list[SeekerSkill], job_skills: list[JobSkill]) -> dict[str, str]:
    """URI -> display title; job titles win over seeker titles for shared URIs."""
    lookup = {s.uri: s.title for s in seeker_skills if s.title}
    lookup.update({s.uri: s.title for s in job_skills if s.title})
    return lookup


def stored_match_result(match: Match, title_lookup: dict[str, str]) -> MatchResult:
    """Rebuild a MatchResult from a stored match row."""
    def resolve(uris: list[str]) -> list[str]:
        return [title_lookup.get(uri) or uri for uri in uris]

    fuzzy = [FuzzyMatchDetail.model_validate(f) for f in match.fuzzy_matches or []]
    return MatchResult(
        match_score=match.match_score,
        seeker_relevance=match.seeker_relevance,
        matched_skills=match.matched_skills or [],
        missing_skills=match.missing_skills or [],
        optional_matched_skills=match.optional_matched_skills or [],
        optional_missing_skills=match.optional_missing_skills or [],
        fuzzy_matches=fuzzy,
        score_breakdown=ScoreBreakdown.model_validate(match.score_breakdown or {}),
        matched_titles=resolve(match.matched_skills or []),
        missing_titles=resolve(match.missing_skills or []),
        optional_matched_titles=resolve(match.optional_matched_skills or []),
        optional_missing_titles=resolve(match.optional_missing_skills or []),
        fuzzy_titles=[
            FuzzyMatchTitle(seeker_title=f.seeker_title, job_title=f.job_title, similarity=f.similarity)
            for f in fuzzy
        ],
    )


async def compute_match(
    esco: EscoClient,
    seeker_skills: list[SeekerSkill],
    job_skills: list[JobSkill],
) -> MatchResult:
    """Fetch co-occurrence for the two skill sets, then run the engine."""
    co_map = await asyncio.to_thread(
        batch_co_occurrence,
        esco,
        [s.uri for s in seeker_skills],
        [s.uri for s in job_skills],
    )
    return match_skills_enhanced(
        seeker_skills, job_skills, co_map, build_title_lookup(seeker_skills, job_skills)
    )


async def run_match(
    db: Database,
    gemini: GeminiClient,
    esco: EscoClient,
    seeker_profile_id: str,
    job_posting_id: str,
) -> MatchResponse:
    """Score a seeker against a posting, reusing a stored match when there is one."""
    with db.session_scope() as session:
        seeker = SeekerRepository(session).get(seeker_profile_id)
        if seeker is None:
            raise SeekerNotFoundException(seeker_profile_id)
        posting = JobPostingRepository(session).get(job_posting_id)
        if posting is None:
            raise JobPostingNotFoundException(job_posting_id)

        seeker_name = seeker.user.name or "Anonymous Seeker"
        seeker_titles = list(seeker.job_titles or [])
        job_title = posting.title
        seeker_skills = to_seeker_skills(seeker)
        job_skills = to_job_skills(posting)
        title_lookup = build_title_lookup(seeker_skills, job_skills)

        existing = MatchRepository(session).get_existing(seeker_profile_id, job_posting_id)
        stored = (
            (existing.id, existing.created_at, stored_match_result(existing, title_lookup))
            if existing is not None else None
        )

    if stored is not None:
        match_id, created_at, result = stored
        cached = True
        logger.info("Reusing stored match %s", match_id)
    else:
        result = await compute_match(esco, seeker_skills, job_skills)
        match_id, created_at, result, cached = _store_match(
            db, seeker_profile_id, job_posting_id, result, title_lookup
        )

    coaching, summary = await asyncio.gather(
        insights.explain_gaps(gemini, result.matched_titles, result.missing_titles, job_title),
        insights.summarize_candidate(
            gemini,
            seeker_name,
            seeker_titles,
            result.match_score,
            result.matched_titles,
            result.missing_titles,
            job_title,
        ),
    )

    return MatchResponse(
        id=match_id,
        seeker_profile_id=seeker_profile_id,
        job_posting_id=job_posting_id,
        **result.model_dump(exclude={"fuzzy_matches"}),
        coaching=coaching,
        summary=summary,
        seeker_name=seeker_name,
        job_title=job_title,
        cached=cached,
        created_at=created_at,
    )


def _store_match(
    db: Database,
    seeker_profile_id: str,
    job_posting_id: str,
    result: MatchResult,
    title_lookup: dict[str, str],
):
    """Insert the match; if a concurrent request won the race, return theirs."""
    try:
        with db.session_scope() as session:
            match = MatchRepository(session).create(seeker_profile_id, job_posting_id, result)
            logger.info(
                "Stored match %s: seeker=%s posting=%s score=%d",
                match.id, seeker_profile_id, job_posting_id, result.match_score,
            )
            return match.id, match.created_at, result, False
    except IntegrityError:
        logger.info("Match for seeker=%s posting=%s already stored", seeker_profile_id, job_posting_id)
        with db.session_scope() as session:
            existing = MatchRepository(session).get_existing(seeker_profile_id, job_posting_id)
            return existing.id, existing.created_at, stored_match_result(existing, title_lookup), True


def list_matches(
    db: Database,
    seeker_profile_id: str | None = None,
    job_posting_id: str | None = None,
) -> list[MatchListItem]:
    with db.session_scope() as session:
        matches = MatchRepository(session).list_all(seeker_profile_id, job_posting_id)
        return [
            MatchListItem(
                id=m.id,
                seeker_profile_id=m.seeker_profile_id,
                job_posting_id=m.job_posting_id,
                match_score=m.match_score,
                seeker_relevance=m.seeker_relevance,
                seeker_name=m.seeker_profile.user.name,
                job_title=m.job_posting.title,
                company=m.job_posting.recruiter_profile.company,
                created_at=m.created_at,
            )
            for m in matches
        ]


async def analyze_transition(
    db: Database,
    gemini: GeminiClient,
    esco: EscoClient,
    seeker_profile_id: str,
    occupation_uri: str,
) -> TransitionResponse:
    """Score a seeker against a target occupation and coach the career change."""
    with db.session_scope() as session:
        seeker = SeekerRepository(session).get(seeker_profile_id)
        if seeker is None:
            raise SeekerNotFoundException(seeker_profile_id)
        seeker_name = seeker.user.name
        seeker_titles = list(seeker.job_titles or [])
        seeker_skills = to_seeker_skills(seeker)

    occupation = await asyncio.to_thread(esco.get_occupation_details, occupation_uri)
    job_skills = [
        JobSkill(uri=s.uri, title=s.title, is_essential=True) for s in occupation.essential_skills
    ] + [
        JobSkill(uri=s.uri, title=s.title, is_essential=False) for s in occupation.optional_skills
    ]

    result = await compute_match(esco, seeker_skills, job_skills)

    coaching = await insights.explain_transition_gaps(
        gemini,
        seeker_titles,
        occupation.title,
        result.matched_titles,
        result.missing_titles,
        fuzzy_matches=result.fuzzy_titles,
        optional_matched=result.optional_matched_titles,
        seeker_relevance=result.seeker_relevance,
    )

    return TransitionResponse(
        match_score=result.match_score,
        seeker_relevance=result.seeker_relevance,
        matched_titles=result.matched_titles,
        missing_titles=result.missing_titles,
        fuzzy_titles=result.fuzzy_titles,
        optional_matched_titles=result.optional_matched_titles,
        optional_missing_titles=result.optional_missing_titles,
        score_breakdown=result.score_breakdown,
        coaching=coaching,
        occupation_title=occupation.title,
        seeker_name=seeker_name,
    )
