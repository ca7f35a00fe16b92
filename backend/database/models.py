"""ORM models: users, seeker profiles, job postings and stored matches."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "user"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    role = Column(String(16), nullable=False)  # SEEKER | RECRUITER
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    seeker = relationship("SeekerProfile", back_populates="user", uselist=False, lazy="selectin")
    recruiter = relationship("RecruiterProfile", back_populates="user", uselist=False, lazy="selectin")


class SeekerProfile(Base):
    __tablename__ = "seeker_profile"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    cv_text = Column(Text, nullable=False, default="")
    job_titles = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    user = relationship("User", back_populates="seeker", lazy="selectin")
    skills = relationship(
        "SeekerSkillRecord", back_populates="seeker_profile",
        cascade="all, delete-orphan", lazy="selectin",
    )
    matches = relationship(
        "Match", back_populates="seeker_profile",
        cascade="all, delete-orphan", lazy="selectin",
    )


class SeekerSkillRecord(Base):
    """A taxonomy skill attached to a seeker profile."""
    __tablename__ = "seeker_skill"

    id = Column(String(36), primary_key=True, default=_uuid)
    seeker_profile_id = Column(
        String(36), ForeignKey("seeker_profile.id", ondelete="CASCADE"), nullable=False, index=True
    )
    esco_uri = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    skill_type = Column(String(64), nullable=True)
    proficiency = Column(Integer, nullable=False, default=3)  # 1-5
    source = Column(String(16), nullable=False, default="explicit")  # explicit | inferred

    seeker_profile = relationship("SeekerProfile", back_populates="skills")

    __table_args__ = (UniqueConstraint("seeker_profile_id", "esco_uri"),)


class RecruiterProfile(Base):
    __tablename__ = "recruiter_profile"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    company = Column(Text, nullable=True)

    user = relationship("User", back_populates="recruiter", lazy="selectin")
    job_postings = relationship(
        "JobPosting", back_populates="recruiter_profile",
        cascade="all, delete-orphan", lazy="selectin",
    )


class JobPosting(Base):
    __tablename__ = "job_posting"

    id = Column(String(36), primary_key=True, default=_uuid)
    recruiter_profile_id = Column(
        String(36), ForeignKey("recruiter_profile.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(Text, nullable=False)
    esco_occupation_uri = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    recruiter_profile = relationship("RecruiterProfile", back_populates="job_postings", lazy="selectin")
    skills = relationship(
        "JobPostingSkill", back_populates="job_posting",
        cascade="all, delete-orphan", lazy="selectin",
    )


class JobPostingSkill(Base):
    __tablename__ = "job_posting_skill"

    id = Column(String(36), primary_key=True, default=_uuid)
    job_posting_id = Column(
        String(36), ForeignKey("job_posting.id", ondelete="CASCADE"), nullable=False, index=True
    )
    esco_uri = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    skill_type = Column(String(64), nullable=True)
    is_essential = Column(Boolean, nullable=False, default=True)

    job_posting = relationship("JobPosting", back_populates="skills")


class Match(Base):
    """Stored engine output for one (seeker, posting) pair."""
    __tablename__ = "match"

    id = Column(String(36), primary_key=True, default=_uuid)
    seeker_profile_id = Column(
        String(36), ForeignKey("seeker_profile.id", ondelete="CASCADE"), nullable=False
    )
    job_posting_id = Column(
        String(36), ForeignKey("job_posting.id", ondelete="CASCADE"), nullable=False
    )
    match_score = Column(Integer, nullable=False, default=0)
    seeker_relevance = Column(Integer, nullable=False, default=0)

    # Taxonomy URIs
    matched_skills = Column(JSON, nullable=False, default=list)
    missing_skills = Column(JSON, nullable=False, default=list)
    optional_matched_skills = Column(JSON, nullable=False, default=list)
    optional_missing_skills = Column(JSON, nullable=False, default=list)

    fuzzy_matches = Column(JSON, nullable=False, default=list)  # FuzzyMatchDetail dicts
    score_breakdown = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    seeker_profile = relationship("SeekerProfile", back_populates="matches", lazy="selectin")
    job_posting = relationship("JobPosting", lazy="selectin")

    __table_args__ = (UniqueConstraint("seeker_profile_id", "job_posting_id"),)
