"""Saved-search digests.

A digest is a ranked snapshot of the active jobs matching a saved
search at one point in time.  Building the rows is pure: the same
search against the same job pool always yields the same rows in the
same order.  Persisting a digest is the one side effect, and it is
delegated to the :class:`~jobmarket_scoring.storage.MarketplaceRepository`,
which must insert the digest and advance the search's ``last_run_at``
in a single transaction.

Scoring per row::

    match_score = min(score_cap, base_score + per_keyword × matched)

with the defaults 95 / 40 / 12.  A query that yields no keywords scores
every surviving job at a flat ``no_keyword_score`` (50).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from jobmarket_scoring.config import DigestConfig
from jobmarket_scoring.digest.schedule import is_due
from jobmarket_scoring.errors import ActionableError, ErrorType

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from jobmarket_scoring.models import JobPosting, SavedSearch, SearchFilters
    from jobmarket_scoring.storage.repository import MarketplaceRepository

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 2


@dataclass(frozen=True)
class DigestRow:
    """One job in a digest."""

    job_id: str
    title: str
    company: str
    location: str
    url: str
    matched_skills: tuple[str, ...]
    match_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "url": self.url,
            "matched_skills": list(self.matched_skills),
            "match_score": self.match_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DigestRow:
        return cls(
            job_id=str(data["job_id"]),
            title=str(data.get("title", "")),
            company=str(data.get("company", "")),
            location=str(data.get("location", "")),
            url=str(data.get("url", "")),
            matched_skills=tuple(data.get("matched_skills") or ()),
            match_score=int(data.get("match_score", 0)),
        )


@dataclass(frozen=True)
class Digest:
    """A persisted digest for one saved search."""

    id: str
    saved_search_id: str
    generated_at: datetime
    rows: tuple[DigestRow, ...]
    search_name: str = "Saved search"

    @property
    def job_ids(self) -> list[str]:
        return [row.job_id for row in self.rows]


def extract_keywords(query: str, limit: int = 10) -> list[str]:
    """Split *query* into at most *limit* lowercase keyword tokens.

    Splits on commas, then whitespace.  Tokens shorter than two
    characters are dropped and duplicates keep their first position.

    >>> extract_keywords("React, Remote")
    ['react', 'remote']
    """
    keywords: list[str] = []
    for part in query.split(","):
        for token in part.split():
            token = token.strip().lower()
            if len(token) < MIN_KEYWORD_LENGTH or token in keywords:
                continue
            keywords.append(token)
    return keywords[:limit]


def job_url(job_id: str) -> str:
    return f"/jobs/{job_id}"


class DigestGenerator:
    """Turns saved searches into persisted digests.

    Parameters
    ----------
    repository:
        Persistence collaborator supplying searches and the active job
        pool, and storing digests.
    settings:
        Keyword and scoring limits from ``[digest]``.
    clock:
        Returns the generation timestamp.  Defaults to the current UTC
        time.
    """

    def __init__(
        self,
        repository: MarketplaceRepository,
        settings: DigestConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or DigestConfig()
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------
    # Pure row building
    # ------------------------------------------------------------------

    def build_rows(self, search: SavedSearch, jobs: Sequence[JobPosting]) -> list[DigestRow]:
        """Filter and score *jobs* for *search*, best match first.

        Ties keep the order of *jobs*.  At most ``max_rows`` rows are
        returned.
        """
        keywords = extract_keywords(search.query, self._settings.max_keywords)
        phrase = search.query.strip().lower()

        rows: list[DigestRow] = []
        for job in jobs:
            if not job.active:
                continue
            haystack = f"{job.title} {job.description}".lower()
            if phrase and not _matches_query(job, haystack, phrase, keywords):
                continue
            if not _matches_filters(job, search.filters):
                continue

            matched = tuple(k for k in keywords if k in haystack)
            rows.append(
                DigestRow(
                    job_id=job.id,
                    title=job.title,
                    company=job.company,
                    location=job.location_label,
                    url=job_url(job.id),
                    matched_skills=matched,
                    match_score=self._match_score(matched, keywords),
                )
            )

        rows.sort(key=lambda row: -row.match_score)
        return rows[: self._settings.max_rows]

    def _match_score(self, matched: Sequence[str], keywords: Sequence[str]) -> int:
        if not keywords:
            return self._settings.no_keyword_score
        raw = self._settings.base_score + self._settings.per_keyword * len(matched)
        return min(self._settings.score_cap, raw)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def generate_digest(self, search: SavedSearch, jobs: Sequence[JobPosting]) -> Digest | None:
        """Build rows for *search* and persist them as a new digest.

        Returns ``None`` when the repository cannot store the digest.
        In that case neither the digest nor the new ``last_run_at`` is
        written.
        """
        rows = self.build_rows(search, jobs)
        generated_at = self._clock()
        try:
            digest = self._repository.record_digest(search, rows, generated_at)
        except ActionableError as exc:
            if exc.error_type is not ErrorType.UPSTREAM:
                raise
            logger.warning("Could not store digest for saved search %s: %s", search.id, exc.error)
            return None

        logger.info(
            "Generated digest %s for saved search %s (%d row(s))",
            digest.id,
            search.id,
            len(digest.rows),
        )
        return digest

    def run_saved_search(self, search_id: str) -> Digest | None:
        """Load *search_id* and the active pool, then generate a digest.

        Returns ``None`` for an unknown search or when the repository
        cannot supply the data.
        """
        try:
            search = self._repository.get_saved_search(search_id)
            if search is None:
                logger.warning("Saved search %s not found", search_id)
                return None
            jobs = self._repository.active_jobs()
        except ActionableError as exc:
            if exc.error_type is not ErrorType.UPSTREAM:
                raise
            logger.warning("Could not load data for saved search %s: %s", search_id, exc.error)
            return None
        return self.generate_digest(search, jobs)

    def run_due(self, now: datetime | None = None) -> list[Digest]:
        """Generate digests for every saved search whose schedule is due.

        The job pool is read once and shared by all due searches.
        Searches whose digest cannot be stored are skipped.
        """
        now = now or self._clock()
        try:
            due = [
                search
                for search in self._repository.list_saved_searches()
                if is_due(search.schedule, search.last_run_at, now)
            ]
            if not due:
                logger.info("No saved searches due")
                return []
            jobs = self._repository.active_jobs()
        except ActionableError as exc:
            if exc.error_type is not ErrorType.UPSTREAM:
                raise
            logger.warning("Could not load saved searches for scheduled run: %s", exc.error)
            return []

        digests = [d for d in (self.generate_digest(s, jobs) for s in due) if d is not None]
        logger.info("Scheduled run generated %d of %d due digest(s)", len(digests), len(due))
        return digests


def _matches_query(job: JobPosting, haystack: str, phrase: str, keywords: Sequence[str]) -> bool:
    # Whole phrase in the title or description, or every keyword somewhere
    if phrase in job.title.lower() or phrase in job.description.lower():
        return True
    return bool(keywords) and all(k in haystack for k in keywords)


def _matches_filters(job: JobPosting, filters: SearchFilters) -> bool:
    if filters.location:
        wanted = filters.location.strip().lower()
        if wanted and not any(wanted in loc.lower() for loc in job.locations):
            return False
    if filters.remote is not None and job.remote != filters.remote:
        return False
    if filters.employment_type and job.employment_type != filters.employment_type:
        return False
    return True
