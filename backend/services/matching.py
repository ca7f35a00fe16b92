"""Skill matching engine: one seeker scored against one job.

Flow:
    seeker skills + job skills + co-occurrence map
      ├─ split job skills into essential / optional
      ├─ score_skill_set(essential)   exact -> fuzzy -> missing
      ├─ score_skill_set(optional)    (same seeker pool, no exclusivity)
      ├─ composite score = 80% essential + 15% optional + 5% proficiency bonus
      ├─ seeker relevance (how much of the seeker's profile the job uses)
      └─ breakdown + title resolution -> MatchResult

Pure and synchronous: no I/O, no state kept between calls.
"""

import logging
import math

from pydantic import BaseModel

from models.schemas.matching import (
    FuzzyMatchDetail,
    FuzzyMatchTitle,
    FuzzyMatchType,
    JobSkill,
    MatchResult,
    ScoreBreakdown,
    SeekerSkill,
    SkillSource,
)
from services.similarity import title_similarity

logger = logging.getLogger(__name__)

CoOccurrenceMap = dict[str, dict[str, float]]

CO_OCCURRENCE_THRESHOLD = 0.15
TITLE_SIMILARITY_THRESHOLD = 0.4

# Fuzzy credit stays below a full exact match (1.0)
CO_OCCURRENCE_CREDIT = 0.5
TITLE_SIMILARITY_CREDIT = 0.3

SOURCE_MULTIPLIERS: dict[SkillSource, float] = {
    SkillSource.EXPLICIT: 1.0,
    SkillSource.INFERRED: 0.85,
}

# Indexed by proficiency 1-5; 3 is par
PROFICIENCY_MULTIPLIERS = (0.70, 0.85, 1.00, 1.10, 1.15)

W_ESSENTIAL = 0.80
W_OPTIONAL = 0.15
W_PROFICIENCY = 0.05
MAX_PROFICIENCY_BONUS = 0.05


class SkillSetScore(BaseModel):
    """Accumulated result of scoring one list of required skills."""
    exact_uris: list[str] = []
    missing_uris: list[str] = []
    fuzzy_matches: list[FuzzyMatchDetail] = []
    total_score: float = 0.0
    prof_multiplier_sum: float = 0.0
    matched_count: int = 0  # skills that got any credit, exact or fuzzy


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _round_half_up_hundredths(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def source_multiplier(source: SkillSource | str) -> float:
    multiplier = SOURCE_MULTIPLIERS.get(source)
    if multiplier is None:
        logger.debug("Unknown skill source %r, using neutral multiplier", source)
        return 1.0
    return multiplier


def proficiency_multiplier(proficiency: int) -> float:
    level = max(1, min(len(PROFICIENCY_MULTIPLIERS), int(proficiency)))
    return PROFICIENCY_MULTIPLIERS[level - 1]


def co_occurrence(co_map: CoOccurrenceMap, seeker_uri: str, job_uri: str) -> float:
    return co_map.get(seeker_uri, {}).get(job_uri, 0.0)


def find_fuzzy_match(
    job_skill: JobSkill,
    seeker_skills: list[SeekerSkill],
    co_map: CoOccurrenceMap,
) -> tuple[float, FuzzyMatchDetail, SeekerSkill] | None:
    """Find the seeker skill that best stands in for ``job_skill``.

    Each seeker skill can earn co-occurrence credit (raw >= 0.15, x0.5) or
    title credit (raw >= 0.4, x0.3). Only a strictly higher credit replaces
    the current best, so earlier seeker skills win ties and co-occurrence
    wins ties against title similarity on the same skill.

    Returns (credit, detail, winning seeker skill) or None.
    """
    best_credit = 0.0
    best: tuple[FuzzyMatchDetail, SeekerSkill] | None = None

    for seeker in seeker_skills:
        co = co_occurrence(co_map, seeker.uri, job_skill.uri)
        if co >= CO_OCCURRENCE_THRESHOLD and co * CO_OCCURRENCE_CREDIT > best_credit:
            best_credit = co * CO_OCCURRENCE_CREDIT
            best = (_fuzzy_detail(seeker, job_skill, co, FuzzyMatchType.CO_OCCURRENCE), seeker)

        sim = title_similarity(seeker.title, job_skill.title)
        if sim >= TITLE_SIMILARITY_THRESHOLD and sim * TITLE_SIMILARITY_CREDIT > best_credit:
            best_credit = sim * TITLE_SIMILARITY_CREDIT
            best = (_fuzzy_detail(seeker, job_skill, sim, FuzzyMatchType.TITLE_SIMILARITY), seeker)

    if best is None:
        return None
    detail, seeker = best
    return best_credit, detail, seeker


def _fuzzy_detail(
    seeker: SeekerSkill,
    job_skill: JobSkill,
    similarity: float,
    match_type: FuzzyMatchType,
) -> FuzzyMatchDetail:
    return FuzzyMatchDetail(
        seeker_uri=seeker.uri,
        seeker_title=seeker.title,
        job_uri=job_skill.uri,
        job_title=job_skill.title,
        similarity=similarity,
        type=match_type,
    )


def score_skill_set(
    required: list[JobSkill],
    seeker_skills: list[SeekerSkill],
    co_map: CoOccurrenceMap,
) -> SkillSetScore:
    """Score one list of required skills (all essential or all optional)."""
    seeker_by_uri = {s.uri: s for s in seeker_skills}
    result = SkillSetScore()

    for job_skill in required:
        seeker = seeker_by_uri.get(job_skill.uri)
        if seeker is not None:
            credit = 1.0
            result.exact_uris.append(job_skill.uri)
        else:
            fuzzy = find_fuzzy_match(job_skill, seeker_skills, co_map)
            if fuzzy is None:
                result.missing_uris.append(job_skill.uri)
                continue
            credit, detail, seeker = fuzzy
            result.fuzzy_matches.append(detail)

        prof_mult = proficiency_multiplier(seeker.proficiency)
        result.total_score += credit * source_multiplier(seeker.source) * prof_mult
        result.prof_multiplier_sum += prof_mult
        result.matched_count += 1

    return result


def is_relevant(
    seeker: SeekerSkill,
    job_skills: list[JobSkill],
    job_uris: set[str],
    co_map: CoOccurrenceMap,
) -> bool:
    """Whether a seeker skill is used by the job: exact, co-occurring or similarly named."""
    if seeker.uri in job_uris:
        return True
    related = co_map.get(seeker.uri, {})
    if any(related.get(j.uri, 0.0) >= CO_OCCURRENCE_THRESHOLD for j in job_skills):
        return True
    return any(
        title_similarity(seeker.title, j.title) >= TITLE_SIMILARITY_THRESHOLD
        for j in job_skills
    )


def compute_seeker_relevance(
    seeker_skills: list[SeekerSkill],
    job_skills: list[JobSkill],
    co_map: CoOccurrenceMap,
) -> int:
    """Percentage (0-100) of the seeker's skills that are relevant to the job."""
    if not seeker_skills:
        return 0
    job_uris = {j.uri for j in job_skills}
    relevant = sum(1 for s in seeker_skills if is_relevant(s, job_skills, job_uris, co_map))
    return _round_half_up(100 * relevant / len(seeker_skills))


def compute_proficiency_bonus(
    essential: SkillSetScore,
    optional: SkillSetScore,
    total_required: int,
) -> float:
    """Average multiplier overage above 1.0 per required skill, clamped to [0, 0.05]."""
    overage = (
        essential.prof_multiplier_sum + optional.prof_multiplier_sum
        - (essential.matched_count + optional.matched_count)
    )
    bonus = overage / max(total_required, 1)
    return max(0.0, min(MAX_PROFICIENCY_BONUS, bonus))


def compute_match_score(
    essential_normalized: float,
    optional_normalized: float,
    proficiency_bonus: float,
) -> int:
    raw = (
        W_ESSENTIAL * essential_normalized
        + W_OPTIONAL * optional_normalized
        + W_PROFICIENCY * proficiency_bonus
    )
    return min(100, max(0, _round_half_up(raw * 100)))


def match_skills_enhanced(
    seeker_skills: list[SeekerSkill],
    job_skills: list[JobSkill],
    co_occurrence_map: CoOccurrenceMap,
    title_lookup: dict[str, str],
) -> MatchResult:
    """Score one seeker against one job and explain the result."""
    essential_skills = [s for s in job_skills if s.is_essential]
    optional_skills = [s for s in job_skills if not s.is_essential]

    essential = score_skill_set(essential_skills, seeker_skills, co_occurrence_map)
    optional = score_skill_set(optional_skills, seeker_skills, co_occurrence_map)

    essential_norm = essential.total_score / len(essential_skills) if essential_skills else 0.0
    optional_norm = optional.total_score / len(optional_skills) if optional_skills else 0.0

    total_required = len(essential_skills) + len(optional_skills)
    bonus = compute_proficiency_bonus(essential, optional, total_required)
    match_score = compute_match_score(essential_norm, optional_norm, bonus)

    seeker_relevance = compute_seeker_relevance(seeker_skills, job_skills, co_occurrence_map)

    fuzzy_matches = essential.fuzzy_matches + optional.fuzzy_matches
    essential_uris = {s.uri for s in essential_skills}
    optional_uris = {s.uri for s in optional_skills}

    breakdown = ScoreBreakdown(
        essential_exact=len(essential.exact_uris),
        essential_fuzzy=sum(1 for f in fuzzy_matches if f.job_uri in essential_uris),
        optional_exact=len(optional.exact_uris),
        optional_fuzzy=sum(1 for f in fuzzy_matches if f.job_uri in optional_uris),
        proficiency_bonus=_round_half_up_hundredths(bonus),
        max_possible=total_required,
    )

    logger.debug(
        "Match computed: score=%d relevance=%d essential=%d/%d optional=%d/%d fuzzy=%d",
        match_score, seeker_relevance,
        len(essential.exact_uris), len(essential_skills),
        len(optional.exact_uris), len(optional_skills),
        len(fuzzy_matches),
    )

    def resolve(uris: list[str]) -> list[str]:
        return [title_lookup.get(uri) or uri for uri in uris]

    return MatchResult(
        match_score=match_score,
        seeker_relevance=seeker_relevance,
        matched_skills=essential.exact_uris,
        missing_skills=essential.missing_uris,
        optional_matched_skills=optional.exact_uris,
        optional_missing_skills=optional.missing_uris,
        fuzzy_matches=fuzzy_matches,
        score_breakdown=breakdown,
        matched_titles=resolve(essential.exact_uris),
        missing_titles=resolve(essential.missing_uris),
        optional_matched_titles=resolve(optional.exact_uris),
        optional_missing_titles=resolve(optional.missing_uris),
        fuzzy_titles=[
            FuzzyMatchTitle(
                seeker_title=f.seeker_title,
                job_title=f.job_title,
                similarity=f.similarity,
            )
            for f in fuzzy_matches
        ],
    )
