"""Global test configuration — shared factories and fixtures.

This conftest provides:

1. **Record factories** — ``make_job``, ``make_candidate``,
   ``make_employer``, and ``make_search`` build the frozen input records
   with sensible defaults so each test only states the fields it cares
   about.

2. **Storage fixtures** — ``repository`` is a real
   :class:`SqlMarketplaceRepository` backed by SQLite under ``tmp_path``
   with the schema already created.  No test touches a shared database.

3. **Clock** — ``FIXED_NOW`` pins every generated timestamp so digests
   and alerts compare equal across runs.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

import pytest

from jobmarket_scoring.models import (
    CandidateProfile,
    EmployerAccount,
    ExperienceEntry,
    JobPosting,
    SavedSearch,
    SearchFilters,
)
from jobmarket_scoring.storage.sql import SqlMarketplaceRepository

if TYPE_CHECKING:
    from pathlib import Path

FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


def make_job(job_id: str = "job-1", **overrides: Any) -> JobPosting:
    """A JobPosting with neutral defaults; override any field by keyword."""
    fields: dict[str, Any] = {
        "id": job_id,
        "title": "Frontend Engineer",
        "description": "",
        "tags": (),
        "locations": (),
        "company": "Acme",
    }
    fields.update(overrides)
    return JobPosting(**fields)


def make_candidate(candidate_id: str = "cand-1", **overrides: Any) -> CandidateProfile:
    """A CandidateProfile with neutral defaults; override any field by keyword."""
    fields: dict[str, Any] = {"id": candidate_id}
    fields.update(overrides)
    return CandidateProfile(**fields)


def make_experience(count: int) -> tuple[ExperienceEntry, ...]:
    """*count* experience entries (each credited as two years)."""
    return tuple(ExperienceEntry(start_date=date(2015 + i, 1, 1)) for i in range(count))


def make_employer(employer_id: str = "emp-1", **overrides: Any) -> EmployerAccount:
    fields: dict[str, Any] = {"id": employer_id}
    fields.update(overrides)
    return EmployerAccount(**fields)


def make_search(search_id: str = "search-1", **overrides: Any) -> SavedSearch:
    fields: dict[str, Any] = {
        "id": search_id,
        "owner_id": "user-1",
        "query": "",
        "filters": SearchFilters(),
    }
    fields.update(overrides)
    return SavedSearch(**fields)


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'db' / 'marketplace.db'}"


@pytest.fixture
def repository(database_url: str) -> SqlMarketplaceRepository:
    """Real SQLite repository under ``tmp_path`` with tables created."""
    repo = SqlMarketplaceRepository(database_url)
    repo.create_schema()
    return repo
