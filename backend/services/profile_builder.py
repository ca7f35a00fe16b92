"""Seeker profile building: CV text -> parsed CV -> taxonomy-mapped skills.

Pipeline:
1. Gemini extracts job titles, education and rated raw skills from the CV
2. Each raw skill is mapped to its top taxonomy skill (source = explicit)
3. Each job title is mapped to its top occupation, whose skills are added
   (source = inferred; essential at proficiency 3, optional at 2)
4. Skills are deduplicated by URI, explicit beating inferred
"""

import asyncio
import logging
from typing import Protocol

from models.schemas.esco import EscoOccupation, TaxonomyEntry
from models.schemas.matching import SkillSource
from models.schemas.profile import ParsedCv, ProfileSkill, RawSkill
from services import prompt_builder
from services.esco_client import EscoApiError
from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

INFERRED_ESSENTIAL_PROFICIENCY = 3
INFERRED_OPTIONAL_PROFICIENCY = 2


class TaxonomyClient(Protocol):
    def search_skills(self, text: str) -> list[TaxonomyEntry]: ...
    def search_occupations(self, text: str) -> list[TaxonomyEntry]: ...
    def get_occupation_details(self, uri: str) -> EscoOccupation: ...


def _as_str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def parse_cv_payload(data: dict | None) -> ParsedCv:
    """Validate Gemini's CV JSON. Skills may be plain strings or {name, proficiency}."""
    if not isinstance(data, dict):
        return ParsedCv()

    raw_skills: list[RawSkill] = []
    for item in data.get("skills") or data.get("raw_skills") or []:
        if isinstance(item, str):
            if item.strip():
                raw_skills.append(RawSkill(name=item.strip()))
        elif isinstance(item, dict) and str(item.get("name", "")).strip():
            raw_skills.append(RawSkill(
                name=str(item["name"]).strip(),
                proficiency=item.get("proficiency"),
            ))

    return ParsedCv(
        job_titles=_as_str_list(data.get("job_titles")),
        education=_as_str_list(data.get("education")),
        raw_skills=raw_skills,
    )


async def parse_cv(gemini: GeminiClient, cv_text: str) -> ParsedCv:
    """Extract structured CV data. Empty ParsedCv when Gemini is unavailable."""
    data = await gemini.generate_json(prompt_builder.build_cv_parse_prompt(cv_text))
    if data is None:
        logger.warning("CV parsing unavailable, returning empty profile")
    return parse_cv_payload(data)


def merge_skills(skills: list[ProfileSkill]) -> list[ProfileSkill]:
    """Deduplicate by URI keeping first-seen order.

    Explicit beats inferred; within the same source the higher proficiency wins.
    """
    merged: dict[str, ProfileSkill] = {}
    for skill in skills:
        current = merged.get(skill.uri)
        if current is None:
            merged[skill.uri] = skill
            continue
        if current.source != skill.source:
            if skill.source == SkillSource.EXPLICIT:
                merged[skill.uri] = skill
        elif skill.proficiency > current.proficiency:
            merged[skill.uri] = skill
    return list(merged.values())


def _map_raw_skill(client: TaxonomyClient, raw: RawSkill) -> list[ProfileSkill]:
    try:
        results = client.search_skills(raw.name)
    except EscoApiError as e:
        logger.warning("Skill lookup failed for %r: %s", raw.name, e)
        return []
    if not results:
        logger.debug("No taxonomy skill found for %r", raw.name)
        return []
    top = results[0]
    return [ProfileSkill(
        uri=top.uri,
        title=top.title,
        proficiency=raw.proficiency,
        source=SkillSource.EXPLICIT,
    )]


def _expand_job_title(client: TaxonomyClient, job_title: str) -> list[ProfileSkill]:
    try:
        occupations = client.search_occupations(job_title)
        if not occupations:
            return []
        occupation = client.get_occupation_details(occupations[0].uri)
    except EscoApiError as e:
        logger.warning("Occupation lookup failed for %r: %s", job_title, e)
        return []

    inferred = [
        ProfileSkill(
            uri=s.uri,
            title=s.title,
            skill_type=s.skill_type,
            proficiency=INFERRED_ESSENTIAL_PROFICIENCY,
            source=SkillSource.INFERRED,
        )
        for s in occupation.essential_skills
    ]
    inferred += [
        ProfileSkill(
            uri=s.uri,
            title=s.title,
            skill_type=s.skill_type,
            proficiency=INFERRED_OPTIONAL_PROFICIENCY,
            source=SkillSource.INFERRED,
        )
        for s in occupation.optional_skills
    ]
    return inferred


async def build_seeker_skills(parsed: ParsedCv, client: TaxonomyClient) -> list[ProfileSkill]:
    """Map parsed CV data onto taxonomy skills, running lookups concurrently."""
    tasks = [asyncio.to_thread(_map_raw_skill, client, raw) for raw in parsed.raw_skills]
    tasks += [asyncio.to_thread(_expand_job_title, client, title) for title in parsed.job_titles]

    batches = await asyncio.gather(*tasks)
    skills = merge_skills([skill for batch in batches for skill in batch])
    logger.info(
        "Built profile: %d raw skills, %d job titles -> %d taxonomy skills",
        len(parsed.raw_skills), len(parsed.job_titles), len(skills),
    )
    return skills
