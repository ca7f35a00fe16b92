"""Matching engine contracts: seeker/job skills in, explainable MatchResult out."""

from enum import Enum

from pydantic import BaseModel, field_validator

DEFAULT_PROFICIENCY = 3
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5


class SkillSource(str, Enum):
    """Where a seeker skill came from."""
    EXPLICIT = "explicit"  # stated in the raw CV text
    INFERRED = "inferred"  # expanded from a job-title -> occupation mapping


class FuzzyMatchType(str, Enum):
    CO_OCCURRENCE = "co-occurrence"
    TITLE_SIMILARITY = "title-similarity"


def clamp_proficiency(value: object) -> int:
    """Coerce a proficiency to an int in [1, 5]; unset or unparsable means 3."""
    if value is None or isinstance(value, bool):
        return DEFAULT_PROFICIENCY
    try:
        level = int(round(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_PROFICIENCY
    return max(MIN_PROFICIENCY, min(MAX_PROFICIENCY, level))


class SeekerSkill(BaseModel):
    """A taxonomy skill held by a job seeker."""
    uri: str
    title: str = ""
    proficiency: int = DEFAULT_PROFICIENCY  # 1 (passing mention) .. 5 (expert)
    # Unrecognised source strings are kept as-is and score with a neutral multiplier
    source: SkillSource | str = SkillSource.EXPLICIT

    @field_validator("proficiency", mode="before")
    @classmethod
    def _clamp_proficiency(cls, value: object) -> int:
        return clamp_proficiency(value)

    @field_validator("source", mode="before")
    @classmethod
    def _parse_source(cls, value: object) -> SkillSource | str:
        if isinstance(value, SkillSource):
            return value
        text = str(value or "").strip().lower()
        try:
            return SkillSource(text)
        except ValueError:
            return text


class JobSkill(BaseModel):
    """A taxonomy skill required by a job posting or target occupation."""
    uri: str
    title: str = ""
    is_essential: bool = True


class FuzzyMatchDetail(BaseModel):
    """A job skill without an exact match that a seeker skill partially covers."""
    seeker_uri: str
    seeker_title: str
    job_uri: str
    job_title: str
    similarity: float  # raw score of the winning source, before its credit multiplier
    type: FuzzyMatchType


class FuzzyMatchTitle(BaseModel):
    seeker_title: str
    job_title: str
    similarity: float


class ScoreBreakdown(BaseModel):
    """Counts behind the composite score."""
    essential_exact: int = 0
    essential_fuzzy: int = 0
    optional_exact: int = 0
    optional_fuzzy: int = 0
    proficiency_bonus: float = 0.0  # 0.0-0.05
    max_possible: int = 0  # essential + optional skill count


class MatchResult(BaseModel):
    """Engine output for one seeker scored against one job.

    Fuzzy-matched job skills appear in neither the matched nor the missing
    lists; they only surface through ``fuzzy_matches``.
    """
    match_score: int = 0  # 0-100
    seeker_relevance: int = 0  # % of seeker skills relevant to the job

    matched_skills: list[str] = []  # essential URIs, exact
    missing_skills: list[str] = []  # essential URIs
    optional_matched_skills: list[str] = []
    optional_missing_skills: list[str] = []
    fuzzy_matches: list[FuzzyMatchDetail] = []
    score_breakdown: ScoreBreakdown = ScoreBreakdown()

    matched_titles: list[str] = []
    missing_titles: list[str] = []
    optional_matched_titles: list[str] = []
    optional_missing_titles: list[str] = []
    fuzzy_titles: list[FuzzyMatchTitle] = []
