"""CV parse output and the skill profile built from it."""

from pydantic import BaseModel, field_validator

from models.schemas.matching import DEFAULT_PROFICIENCY, SkillSource, clamp_proficiency


class RawSkill(BaseModel):
    """A skill as written in the CV, before taxonomy mapping."""
    name: str
    proficiency: int = DEFAULT_PROFICIENCY

    @field_validator("proficiency", mode="before")
    @classmethod
    def _clamp_proficiency(cls, value: object) -> int:
        return clamp_proficiency(value)


class ParsedCv(BaseModel):
    """Structured output of the CV parser."""
    job_titles: list[str] = []
    education: list[str] = []
    raw_skills: list[RawSkill] = []


class ProfileSkill(BaseModel):
    """A taxonomy-mapped seeker skill ready to be stored."""
    uri: str
    title: str
    skill_type: str | None = None
    proficiency: int = DEFAULT_PROFICIENCY
    source: SkillSource = SkillSource.EXPLICIT
