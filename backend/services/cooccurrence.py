"""Skill co-occurrence from shared occupation membership in the taxonomy.

Two skills are related in proportion to how many occupations list both:
Jaccard similarity over their occupation-URI sets.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from config import settings
from services.esco_client import EscoApiError
from services.matching import CoOccurrenceMap
from services.similarity import jaccard

logger = logging.getLogger(__name__)


class SkillOccupationSource(Protocol):
    def get_skill_occupations(self, uri: str) -> set[str]: ...


def fetch_occupation_sets(
    client: SkillOccupationSource,
    uris: list[str],
    max_workers: int | None = None,
) -> dict[str, set[str]]:
    """Look up the occupation set of every distinct URI, in parallel.

    A failed lookup counts as an empty set so one bad skill cannot sink
    the whole match.
    """
    distinct = list(dict.fromkeys(uris))
    if not distinct:
        return {}

    def _lookup(uri: str) -> set[str]:
        try:
            return client.get_skill_occupations(uri)
        except EscoApiError as e:
            logger.warning("Occupation lookup failed for %s: %s", uri, e)
            return set()

    workers = max(1, min(max_workers or settings.cooccurrence_max_workers, len(distinct)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(_lookup, distinct))
    return dict(zip(distinct, results))


def co_occurrence_from_sets(
    occupation_sets: dict[str, set[str]],
    seeker_uris: list[str],
    job_uris: list[str],
) -> CoOccurrenceMap:
    """Build seeker-uri -> job-uri -> score, keeping only positive scores."""
    co_map: CoOccurrenceMap = {}
    for seeker_uri in dict.fromkeys(seeker_uris):
        seeker_occ = occupation_sets.get(seeker_uri, set())
        if not seeker_occ:
            continue
        row: dict[str, float] = {}
        for job_uri in dict.fromkeys(job_uris):
            if job_uri == seeker_uri:
                continue
            score = jaccard(seeker_occ, occupation_sets.get(job_uri, set()))
            if score > 0:
                row[job_uri] = score
        if row:
            co_map[seeker_uri] = row
    return co_map


def batch_co_occurrence(
    client: SkillOccupationSource,
    seeker_uris: list[str],
    job_uris: list[str],
    max_workers: int | None = None,
) -> CoOccurrenceMap:
    """Compute the co-occurrence map consumed by the matching engine."""
    if not seeker_uris or not job_uris:
        return {}
    occupation_sets = fetch_occupation_sets(client, seeker_uris + job_uris, max_workers)
    co_map = co_occurrence_from_sets(occupation_sets, seeker_uris, job_uris)
    logger.info(
        "Co-occurrence computed for %d seeker x %d job skills (%d related seeker skills)",
        len(set(seeker_uris)), len(set(job_uris)), len(co_map),
    )
    return co_map
