"""Repositories over the ORM models. Callers own the session/transaction."""

import logging
import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from database.models import (
    JobPosting,
    JobPostingSkill,
    Match,
    RecruiterProfile,
    SeekerProfile,
    SeekerSkillRecord,
    User,
)
from models.schemas.esco import EscoOccupation
from models.schemas.matching import JobSkill, MatchResult, SeekerSkill
from models.schemas.profile import ParsedCv, ProfileSkill

logger = logging.getLogger(__name__)


def _placeholder_email(role: str) -> str:
    return f"{role.lower()}-{time.time_ns()}@talentbridge.local"


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db


class SeekerRepository(BaseRepository):
    def create(
        self,
        name: str | None,
        email: str | None,
        cv_text: str,
        parsed: ParsedCv,
        skills: list[ProfileSkill],
    ) -> SeekerProfile:
        user = User(
            name=name or "Anonymous Seeker",
            email=email or _placeholder_email("SEEKER"),
            role="SEEKER",
        )
        profile = SeekerProfile(
            user=user,
            cv_text=cv_text,
            job_titles=parsed.job_titles,
            education=parsed.education,
            skills=[
                SeekerSkillRecord(
                    esco_uri=s.uri,
                    title=s.title,
                    skill_type=s.skill_type,
                    proficiency=s.proficiency,
                    source=s.source.value,
                )
                for s in skills
            ],
        )
        self.db.add(profile)
        self.db.flush()
        logger.info("Created seeker profile %s with %d skills", profile.id, len(skills))
        return profile

    def get(self, profile_id: str) -> SeekerProfile | None:
        return self.db.get(SeekerProfile, profile_id)

    def list_all(self) -> list[SeekerProfile]:
        stmt = select(SeekerProfile).order_by(SeekerProfile.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())


class JobPostingRepository(BaseRepository):
    def get_or_create_recruiter(self, email: str | None, company: str | None) -> RecruiterProfile:
        """Find the recruiter behind ``email`` (creating user/profile as needed)."""
        resolved_email = email or _placeholder_email("RECRUITER")
        user = self.db.execute(select(User).where(User.email == resolved_email)).scalar_one_or_none()

        if user is None:
            user = User(name=company or "Anonymous Recruiter", email=resolved_email, role="RECRUITER")
            self.db.add(user)
        if user.recruiter is None:
            user.recruiter = RecruiterProfile(company=company or None)
        self.db.flush()
        return user.recruiter

    def create(
        self,
        recruiter: RecruiterProfile,
        occupation: EscoOccupation,
        description: str | None = None,
    ) -> JobPosting:
        skills = [
            JobPostingSkill(esco_uri=s.uri, title=s.title, skill_type=s.skill_type, is_essential=True)
            for s in occupation.essential_skills
        ] + [
            JobPostingSkill(esco_uri=s.uri, title=s.title, skill_type=s.skill_type, is_essential=False)
            for s in occupation.optional_skills
        ]
        posting = JobPosting(
            recruiter_profile=recruiter,
            title=occupation.title,
            esco_occupation_uri=occupation.uri,
            description=description,
            skills=skills,
        )
        self.db.add(posting)
        self.db.flush()
        logger.info("Created job posting %s (%s) with %d skills", posting.id, posting.title, len(skills))
        return posting

    def get(self, posting_id: str) -> JobPosting | None:
        return self.db.get(JobPosting, posting_id)

    def list_all(self) -> list[JobPosting]:
        stmt = select(JobPosting).order_by(JobPosting.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())


class MatchRepository(BaseRepository):
    def get_existing(self, seeker_profile_id: str, job_posting_id: str) -> Match | None:
        stmt = select(Match).where(
            Match.seeker_profile_id == seeker_profile_id,
            Match.job_posting_id == job_posting_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, seeker_profile_id: str, job_posting_id: str, result: MatchResult) -> Match:
        dumped = result.model_dump(mode="json")
        match = Match(
            seeker_profile_id=seeker_profile_id,
            job_posting_id=job_posting_id,
            match_score=result.match_score,
            seeker_relevance=result.seeker_relevance,
            matched_skills=result.matched_skills,
            missing_skills=result.missing_skills,
            optional_matched_skills=result.optional_matched_skills,
            optional_missing_skills=result.optional_missing_skills,
            fuzzy_matches=dumped["fuzzy_matches"],
            score_breakdown=dumped["score_breakdown"],
        )
        self.db.add(match)
        self.db.flush()
        return match

    def list_all(
        self,
        seeker_profile_id: str | None = None,
        job_posting_id: str | None = None,
    ) -> list[Match]:
        stmt = select(Match)
        if seeker_profile_id:
            stmt = stmt.where(Match.seeker_profile_id == seeker_profile_id)
        if job_posting_id:
            stmt = stmt.where(Match.job_posting_id == job_posting_id)
        stmt = stmt.order_by(Match.match_score.desc())
        return list(self.db.execute(stmt).scalars().all())


def to_seeker_skills(profile: SeekerProfile) -> list[SeekerSkill]:
    return [
        SeekerSkill(uri=s.esco_uri, title=s.title, proficiency=s.proficiency, source=s.source)
        for s in profile.skills
    ]


def to_job_skills(posting: JobPosting) -> list[JobSkill]:
    return [
        JobSkill(uri=s.esco_uri, title=s.title, is_essential=s.is_essential)
        for s in posting.skills
    ]
