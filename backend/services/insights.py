"""AI-written prose around a match: coaching, summaries, job descriptions.

Every function returns "" when Gemini is unavailable so callers can still
return the numeric match.
"""

import logging

from models.schemas.matching import FuzzyMatchTitle
from services import prompt_builder
from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


async def _generate(gemini: GeminiClient, prompt: str, what: str, max_output_tokens: int) -> str:
    text = await gemini.generate_text(prompt, max_output_tokens=max_output_tokens)
    if text is None:
        logger.warning("Gemini %s unavailable", what)
        return ""
    return text


async def explain_gaps(
    gemini: GeminiClient,
    matched: list[str],
    missing: list[str],
    job_title: str,
) -> str:
    prompt = prompt_builder.build_gap_prompt(matched, missing, job_title)
    return await _generate(gemini, prompt, "coaching", 1024)


async def summarize_candidate(
    gemini: GeminiClient,
    seeker_name: str,
    job_titles: list[str],
    match_score: int,
    matched: list[str],
    missing: list[str],
    job_title: str,
) -> str:
    prompt = prompt_builder.build_candidate_summary_prompt(
        seeker_name, job_titles, match_score, matched, missing, job_title
    )
    return await _generate(gemini, prompt, "candidate summary", 512)


async def explain_transition_gaps(
    gemini: GeminiClient,
    previous_titles: list[str],
    target_occupation: str,
    matched: list[str],
    missing: list[str],
    fuzzy_matches: list[FuzzyMatchTitle] | None = None,
    optional_matched: list[str] | None = None,
    seeker_relevance: int | None = None,
) -> str:
    prompt = prompt_builder.build_transition_prompt(
        previous_titles,
        target_occupation,
        matched,
        missing,
        fuzzy_matches=fuzzy_matches,
        optional_matched=optional_matched,
        seeker_relevance=seeker_relevance,
    )
    return await _generate(gemini, prompt, "transition coaching", 1536)


async def generate_job_description(
    gemini: GeminiClient,
    occupation_title: str,
    essential: list[str],
    optional: list[str],
) -> str:
    prompt = prompt_builder.build_job_description_prompt(occupation_title, essential, optional)
    return await _generate(gemini, prompt, "job description", 1024)
