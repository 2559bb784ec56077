"""Proactive job alerts corroborated by independent signals.

The SmartAlertGenerator cross-references one candidate against a pool
of jobs and emits an alert only when at least two independent match
reasons fire.  Single-signal matches are suppressed as noise.

Signals and their effect on the confidence tier (starting at ``low``):

- **Skills** — 2+ job tags overlap the candidate's skills → ``medium``;
  3+ → ``high``.
- **Portfolio** — a portfolio item's tags overlap the job's tags →
  ``low``→``medium``, ``medium``→``high``.
- **Seniority** — senior title with 5+ years → ``low``→``medium``,
  ``medium``→``high``; non-senior title with 2+ years → ``low``→``medium``.
- **Location** — a job location contains the candidate's location →
  ``low``→``medium``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from jobmarket_scoring.scoring.relevance import (
    MID_LEVEL_YEARS,
    SENIOR_YEARS,
    experience_years,
    is_senior_title,
)
from jobmarket_scoring.scoring.salary import Confidence
from jobmarket_scoring.text import overlapping_tags

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from jobmarket_scoring.models import CandidateProfile, JobPosting

logger = logging.getLogger(__name__)

MIN_ALERT_REASONS = 2

_CONFIDENCE_ORDER = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2}


class AlertKind(StrEnum):
    SKILL_MATCH = "skill_match"
    JOB_MATCH = "job_match"


@dataclass(frozen=True)
class Alert:
    """A job worth pushing to the candidate, with the reasons why."""

    job_id: str
    job: JobPosting
    reasons: tuple[str, ...]
    confidence: Confidence
    created_at: datetime
    kind: AlertKind = AlertKind.JOB_MATCH


def _raise_tier(confidence: Confidence) -> Confidence:
    if confidence is Confidence.LOW:
        return Confidence.MEDIUM
    return Confidence.HIGH


def _floor_medium(confidence: Confidence) -> Confidence:
    if confidence is Confidence.LOW:
        return Confidence.MEDIUM
    return confidence


class SmartAlertGenerator:
    """Generates alerts for jobs that several signals agree on.

    Parameters
    ----------
    clock:
        Returns the alert creation timestamp.  Injected so tests can
        pin it; defaults to the current UTC time.
    min_reasons:
        Minimum independent reasons required to emit an alert.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        min_reasons: int = MIN_ALERT_REASONS,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))
        self._min_reasons = min_reasons

    def generate_alerts(
        self,
        candidate: CandidateProfile,
        jobs: Sequence[JobPosting],
    ) -> list[Alert]:
        """Return alerts for *jobs*, most confident first.

        Ordering within a confidence tier follows the input job order.
        Inactive jobs never alert.
        """
        alerts: list[Alert] = []
        for job in jobs:
            if not job.active:
                continue
            alert = self._evaluate(candidate, job)
            if alert is not None:
                alerts.append(alert)

        alerts.sort(key=lambda a: _CONFIDENCE_ORDER[a.confidence])
        logger.debug(
            "Generated %d alert(s) for candidate %s from %d job(s)",
            len(alerts),
            candidate.id,
            len(jobs),
        )
        return alerts

    def _evaluate(self, candidate: CandidateProfile, job: JobPosting) -> Alert | None:
        reasons: list[str] = []
        confidence = Confidence.LOW

        skill_matches = overlapping_tags(job.tags, candidate.skills)
        if len(skill_matches) >= 2:
            shown = ", ".join(skill_matches[:3])
            reasons.append(f"Matches {len(skill_matches)} of your skills: {shown}")
            confidence = Confidence.HIGH if len(skill_matches) >= 3 else Confidence.MEDIUM

        job_tags = [tag.lower() for tag in job.tags if tag]
        relevant_portfolio = any(
            tag in item_tag.lower()
            for item in candidate.portfolio
            for item_tag in item.tags
            for tag in job_tags
        )
        if relevant_portfolio:
            reasons.append("Your portfolio includes relevant work")
            confidence = _raise_tier(confidence)

        years = experience_years(candidate)
        senior = is_senior_title(job.title)
        if senior and years >= SENIOR_YEARS:
            reasons.append("Matches your senior-level experience")
            confidence = _raise_tier(confidence)
        elif not senior and years >= MID_LEVEL_YEARS:
            reasons.append("Matches your experience level")
            confidence = _floor_medium(confidence)

        if candidate.location:
            wanted = candidate.location.lower()
            if any(wanted in loc.lower() for loc in job.locations):
                reasons.append("Matches your preferred location")
                confidence = _floor_medium(confidence)

        if len(reasons) < self._min_reasons:
            return None

        return Alert(
            job_id=job.id,
            job=job,
            reasons=tuple(reasons),
            confidence=confidence,
            created_at=self._clock(),
            kind=AlertKind.SKILL_MATCH if skill_matches else AlertKind.JOB_MATCH,
        )


_DEFAULT_GENERATOR = SmartAlertGenerator()


def generate_alerts(candidate: CandidateProfile, jobs: Sequence[JobPosting]) -> list[Alert]:
    """Generate alerts with the default settings."""
    return _DEFAULT_GENERATOR.generate_alerts(candidate, jobs)
