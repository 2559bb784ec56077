"""Input records consumed by the scoring engine.

These are the plain data contracts supplied by the surrounding
marketplace application (or the storage adapter).  The engine treats
every record as read-only: all dataclasses are frozen and collection
fields are tuples.

Result types live beside the component that produces them
(``RelevanceScore`` in :mod:`~jobmarket_scoring.scoring.relevance`,
``Digest`` in :mod:`~jobmarket_scoring.digest.generator`, and so on).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class VerificationTier(StrEnum):
    """Employer verification levels, in increasing order of trust."""

    NONE = "none"
    DOMAIN = "domain"
    BUSINESS = "business"
    PAYMENT = "payment"
    VERIFIED = "verified"

    @classmethod
    def parse(cls, value: str | None) -> VerificationTier:
        """Map a stored tier string to a member; unknown values degrade to NONE."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NONE


class ProofCardType(StrEnum):
    PORTFOLIO = "portfolio"
    CREDENTIAL = "credential"
    REFERENCE = "reference"
    ASSESSMENT_RESULT = "assessment_result"


class Schedule(StrEnum):
    """How often a saved search's digest should be regenerated."""

    INSTANT = "instant"
    DAILY = "daily"
    WEEKLY = "weekly"


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalaryRange:
    """A posted compensation range.  Either bound may be unpublished."""

    min: float | None
    max: float | None
    currency: str = "USD"

    @property
    def is_complete(self) -> bool:
        """Both bounds published (and non-zero)."""
        return bool(self.min) and bool(self.max)


@dataclass(frozen=True)
class JobPosting:
    """A job posting as read from the marketplace."""

    id: str
    title: str
    description: str = ""
    tags: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    remote: bool = False
    employment_type: str | None = None
    salary: SalaryRange | None = None
    employer_id: str | None = None
    company: str = ""
    active: bool = True
    created_at: datetime | None = None

    @property
    def location_label(self) -> str:
        return " / ".join(self.locations)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExperienceEntry:
    """One role in a candidate's history.  ``end_date=None`` means current."""

    start_date: date
    end_date: date | None = None

    @property
    def is_current(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class PortfolioItem:
    title: str
    tags: tuple[str, ...] = ()
    url: str | None = None


@dataclass(frozen=True)
class ProofCard:
    """A verifiable artifact attached to a candidate profile."""

    type: ProofCardType
    title: str
    verified: bool = False
    score: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class CandidateProfile:
    """A candidate profile as read from the marketplace."""

    id: str
    skills: tuple[str, ...] = ()
    location: str | None = None
    experience: tuple[ExperienceEntry, ...] = ()
    portfolio: tuple[PortfolioItem, ...] = ()
    proof_cards: tuple[ProofCard, ...] = ()
    profile_completeness: int = 0
    salary_expectation: float | None = None

    @property
    def verified_references(self) -> tuple[ProofCard, ...]:
        return tuple(
            card
            for card in self.proof_cards
            if card.type is ProofCardType.REFERENCE and card.verified
        )


# ---------------------------------------------------------------------------
# Employers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmployerAccount:
    """Verification state and responsiveness signals for an employer."""

    id: str
    verification_tier: VerificationTier = VerificationTier.NONE
    response_rate: float = 0.0
    avg_response_time: str = ""
    raw_trust_score: float = 0.0
    verified_at: datetime | None = None


# ---------------------------------------------------------------------------
# Saved searches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchFilters:
    """Structured filters on a saved search.  ``None`` means "not set"."""

    location: str | None = None
    remote: bool | None = None
    employment_type: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    seniority: str | None = None
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """JSON-ready dict with unset filters omitted."""
        raw: dict[str, object] = {
            "location": self.location,
            "remote": self.remote,
            "employment_type": self.employment_type,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "seniority": self.seniority,
            "tags": list(self.tags) or None,
        }
        return {k: v for k, v in raw.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> SearchFilters:
        """Build filters from a stored JSON blob, ignoring unknown keys."""
        data = data or {}
        remote = data.get("remote")
        tags = data.get("tags") or ()
        return cls(
            location=_optional_str(data.get("location")),
            remote=remote if isinstance(remote, bool) else None,
            # Older records store the employment type under "type"
            employment_type=_optional_str(data.get("employment_type") or data.get("type")),
            salary_min=_optional_float(data.get("salary_min")),
            salary_max=_optional_float(data.get("salary_max")),
            seniority=_optional_str(data.get("seniority")),
            tags=tuple(str(t) for t in tags) if isinstance(tags, (list, tuple)) else (),
        )


@dataclass(frozen=True)
class SavedSearch:
    """A candidate's saved search, regenerated into digests on a schedule."""

    id: str
    owner_id: str
    query: str = ""
    filters: SearchFilters = field(default_factory=SearchFilters)
    schedule: Schedule = Schedule.DAILY
    name: str = "Saved search"
    last_run_at: datetime | None = None


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
