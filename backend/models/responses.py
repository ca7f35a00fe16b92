from datetime import datetime

from pydantic import BaseModel

from models.schemas.matching import FuzzyMatchTitle, ScoreBreakdown
from models.schemas.training import TrainingProgram


class SeekerSkillOut(BaseModel):
    uri: str
    title: str
    skill_type: str | None = None
    proficiency: int = 3
    source: str = "explicit"


class SeekerProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    job_titles: list[str] = []
    education: list[str] = []
    skills: list[SeekerSkillOut] = []
    created_at: datetime | None = None


class JobPostingSkillOut(BaseModel):
    uri: str
    title: str
    skill_type: str | None = None
    is_essential: bool = True


class JobPostingResponse(BaseModel):
    id: str
    title: str
    occupation_uri: str
    description: str | None = None
    company: str | None = None
    recruiter_profile_id: str
    skills: list[JobPostingSkillOut] = []
    created_at: datetime | None = None


class RecruiterResponse(BaseModel):
    id: str
    name: str
    email: str
    company: str | None = None
    job_postings: list[JobPostingResponse] = []


class MatchResponse(BaseModel):
    """Stored match plus resolved titles and AI commentary."""
    id: str
    seeker_profile_id: str
    job_posting_id: str
    match_score: int = 0
    seeker_relevance: int = 0
    matched_skills: list[str] = []
    missing_skills: list[str] = []
    optional_matched_skills: list[str] = []
    optional_missing_skills: list[str] = []
    matched_titles: list[str] = []
    missing_titles: list[str] = []
    optional_matched_titles: list[str] = []
    optional_missing_titles: list[str] = []
    fuzzy_titles: list[FuzzyMatchTitle] = []
    score_breakdown: ScoreBreakdown = ScoreBreakdown()
    coaching: str = ""
    summary: str = ""
    seeker_name: str = ""
    job_title: str = ""
    cached: bool = False
    created_at: datetime | None = None


class MatchListItem(BaseModel):
    id: str
    seeker_profile_id: str
    job_posting_id: str
    match_score: int = 0
    seeker_relevance: int = 0
    seeker_name: str = ""
    job_title: str = ""
    company: str | None = None
    created_at: datetime | None = None


class TransitionResponse(BaseModel):
    match_score: int = 0
    seeker_relevance: int = 0
    matched_titles: list[str] = []
    missing_titles: list[str] = []
    fuzzy_titles: list[FuzzyMatchTitle] = []
    optional_matched_titles: list[str] = []
    optional_missing_titles: list[str] = []
    score_breakdown: ScoreBreakdown = ScoreBreakdown()
    coaching: str = ""
    occupation_title: str = ""
    seeker_name: str = ""


class TrainingProgramsResponse(BaseModel):
    programs: list[TrainingProgram] = []
