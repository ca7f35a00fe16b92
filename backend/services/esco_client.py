"""ESCO taxonomy REST client with retry on transient failures.

One client owns one ``requests.Session``. It is created once at start-up,
handed to the services that need it and closed on shutdown.
"""

import logging
import threading

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from config import settings
from models.schemas.esco import EscoOccupation, EscoSkill, TaxonomyEntry

logger = logging.getLogger(__name__)


class EscoApiError(Exception):
    """Raised when the taxonomy API cannot answer a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class _TransientEscoError(EscoApiError):
    """5xx or connection failure; worth another attempt."""


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, _TransientEscoError)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "ESCO request failed (attempt %s). Retrying in %.1fs. Details: %s",
        retry_state.attempt_number, wait, exc,
    )


def _skill_type(raw: str | None) -> str | None:
    if not raw:
        return None
    return raw.rstrip("/").split("/")[-1]


def _parse_skill_links(links: list[dict]) -> list[EscoSkill]:
    return [
        EscoSkill(
            uri=link["uri"],
            title=link.get("title", ""),
            skill_type=_skill_type(link.get("skillType")),
        )
        for link in links
        if link.get("uri")
    ]


class EscoClient:
    """Thin wrapper over the ESCO search and resource endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        language: str | None = None,
        search_limit: int | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.esco_api_url).rstrip("/")
        self.language = language or settings.esco_language
        self.search_limit = search_limit or settings.esco_search_limit
        self.max_attempts = max(1, max_attempts or settings.esco_max_retries)
        self.backoff_seconds = (
            settings.esco_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self.timeout = timeout or settings.esco_timeout_seconds
        self._session: requests.Session | None = None
        self._session_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        # Lookups fan out over a thread pool; only one of them may build the session
        with self._session_lock:
            if self._session is None:
                session = requests.Session()
                session.headers.update({"Accept": "application/json"})
                self._session = session
            return self._session

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    # -- HTTP ------------------------------------------------------------

    def _get_once(self, path: str, params: dict) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            res = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise _TransientEscoError(f"ESCO API unreachable: {e}") from e

        if res.status_code >= 500:
            raise _TransientEscoError(
                f"ESCO API error: {res.status_code} {res.reason}", res.status_code
            )
        if not res.ok:
            raise EscoApiError(f"ESCO API error: {res.status_code} {res.reason}", res.status_code)
        return res.json()

    def _get_json(self, path: str, params: dict) -> dict:
        retrying = Retrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            return retrying(self._get_once, path, params)
        except _TransientEscoError as e:
            raise EscoApiError(
                f"ESCO API: giving up after {self.max_attempts} attempts: {e}", e.status_code
            ) from e

    # -- Search ----------------------------------------------------------

    def _search(self, text: str, kind: str) -> list[TaxonomyEntry]:
        data = self._get_json(
            "search",
            {"text": text, "language": self.language, "type": kind, "limit": self.search_limit},
        )
        results = (data.get("_embedded") or {}).get("results") or []
        return [
            TaxonomyEntry(uri=r["uri"], title=r.get("title", ""))
            for r in results
            if r.get("uri")
        ]

    def search_skills(self, text: str) -> list[TaxonomyEntry]:
        return self._search(text, "skill")

    def search_occupations(self, text: str) -> list[TaxonomyEntry]:
        return self._search(text, "occupation")

    # -- Resources -------------------------------------------------------

    def get_occupation_details(self, uri: str) -> EscoOccupation:
        """Fetch an occupation with its essential and optional skills."""
        data = self._get_json("resource/occupation", {"uri": uri, "language": self.language})
        links = data.get("_links") or {}

        description = (data.get("description") or {}).get(self.language) or {}
        preferred = data.get("preferredLabel") or {}
        alternatives = data.get("alternativeLabel") or {}

        return EscoOccupation(
            uri=data.get("uri", uri),
            title=data.get("title", ""),
            description=description.get("literal"),
            preferred_label=preferred.get(self.language),
            alternative_labels=alternatives.get(self.language) or [],
            code=data.get("code"),
            essential_skills=_parse_skill_links(links.get("hasEssentialSkill") or []),
            optional_skills=_parse_skill_links(links.get("hasOptionalSkill") or []),
        )

    def get_skill_occupations(self, uri: str) -> set[str]:
        """URIs of every occupation listing this skill as essential or optional."""
        data = self._get_json("resource/skill", {"uri": uri, "language": self.language})
        links = data.get("_links") or {}
        occupations = (links.get("isEssentialForOccupation") or []) + (
            links.get("isOptionalForOccupation") or []
        )
        return {o["uri"] for o in occupations if o.get("uri")}
