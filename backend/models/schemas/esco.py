"""ESCO taxonomy payloads, reduced to the fields the matcher needs."""

from pydantic import BaseModel


class TaxonomyEntry(BaseModel):
    """A search hit: one skill or occupation."""
    uri: str
    title: str


class EscoSkill(BaseModel):
    uri: str
    title: str
    skill_type: str | None = None  # last path segment, e.g. "skill" or "knowledge"
    description: str | None = None


class EscoOccupation(BaseModel):
    """An occupation with its essential and optional skill lists."""
    uri: str
    title: str
    description: str | None = None
    preferred_label: str | None = None
    alternative_labels: list[str] = []
    code: str | None = None
    essential_skills: list[EscoSkill] = []
    optional_skills: list[EscoSkill] = []
