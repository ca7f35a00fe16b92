"""Pydantic contracts shared between services."""

from models.schemas.esco import EscoOccupation, EscoSkill, TaxonomyEntry
from models.schemas.matching import (
    FuzzyMatchDetail,
    FuzzyMatchType,
    JobSkill,
    MatchResult,
    ScoreBreakdown,
    SeekerSkill,
    SkillSource,
)
from models.schemas.profile import ParsedCv, ProfileSkill, RawSkill
from models.schemas.training import TrainingProgram

__all__ = [
    "EscoOccupation",
    "EscoSkill",
    "TaxonomyEntry",
    "FuzzyMatchDetail",
    "FuzzyMatchType",
    "JobSkill",
    "MatchResult",
    "ScoreBreakdown",
    "SeekerSkill",
    "SkillSource",
    "ParsedCv",
    "ProfileSkill",
    "RawSkill",
    "TrainingProgram",
]
