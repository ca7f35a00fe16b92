"""Training-program discovery: Brave web search + Gemini extraction."""

import asyncio
import logging

import requests
from pydantic import ValidationError

from config import settings
from models.schemas.training import TrainingProgram
from services import prompt_builder
from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

MAX_SKILLS_IN_QUERY = 5
MAX_PROGRAMS = 5


def brave_web_search(query: str, api_key: str | None = None, count: int = 10) -> list[dict]:
    """Return [{title, url, description}] from Brave web search, [] on any failure."""
    key = settings.brave_search_api_key if api_key is None else api_key
    if not key:
        logger.warning("No BRAVE_SEARCH_API_KEY set - training search disabled")
        return []

    try:
        res = requests.get(
            settings.brave_search_url,
            params={"q": query, "count": count},
            headers={
                "Accept": "application/json",
                "Accept-Encoding": "gzip",
                "X-Subscription-Token": key,
            },
            timeout=15,
        )
    except requests.RequestException as e:
        logger.warning("Brave search request failed: %s", e)
        return []

    if not res.ok:
        logger.warning("Brave search returned %s", res.status_code)
        return []

    try:
        data = res.json() or {}
    except ValueError:
        logger.warning("Brave search returned non-JSON body")
        return []

    results = (data.get("web") or {}).get("results") or []
    return [
        {
            "title": r.get("title", ""),
            "url": r.get("url", ""),
            "description": r.get("description") or "",
        }
        for r in results
    ]


def format_search_context(results: list[dict]) -> str:
    return "\n\n".join(
        f'{i}. "{r["title"]}" - {r["url"]}\n   {r["description"]}'
        for i, r in enumerate(results, start=1)
    )


def parse_programs(data: object) -> list[TrainingProgram]:
    """Keep the well-formed program records from Gemini's JSON array."""
    if not isinstance(data, list):
        return []
    programs: list[TrainingProgram] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            programs.append(TrainingProgram.model_validate(item))
        except ValidationError as e:
            logger.debug("Skipping malformed training program %r: %s", item, e)
    return programs[:MAX_PROGRAMS]


async def search_training_programs(
    gemini: GeminiClient,
    missing_skills: list[str],
    target_occupation: str,
) -> list[TrainingProgram]:
    """Suggest up to 5 programs covering the first few missing skills."""
    top_skills = missing_skills[:MAX_SKILLS_IN_QUERY]
    if not top_skills:
        return []

    query = f"{target_occupation} training program course {' '.join(top_skills)}"
    results = await asyncio.to_thread(brave_web_search, query)
    if not results:
        return []

    prompt = prompt_builder.build_training_extraction_prompt(
        target_occupation, top_skills, format_search_context(results)
    )
    data = await gemini.generate_json(prompt, max_output_tokens=2048)
    return parse_programs(data)
