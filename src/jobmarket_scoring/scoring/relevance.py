"""Explainable candidate ↔ job relevance scoring and pool ranking.

The RelevanceScorer combines six independently computed factors into a
single bounded score.  Every factor carries its own 0–100 score, its
weight, a human-readable explanation, and — when it scored below 100 —
an improvement hint, so the overall number is always traceable.

======================  ======  =========================================
Factor                  Weight  Signal
======================  ======  =========================================
Skills Match            0.30    matched / required job tags
Location Fit            0.15    remote, or candidate ↔ job containment
Salary Fit              0.15    job publishes a full range
Proof Completed         0.20    portfolio, proof cards, verified refs
Response Rate           0.10    profile completeness (proxy)
Experience Level        0.10    derived years vs. "senior" in the title
======================  ======  =========================================

Ranking is two-pass: each pool member's overall score is computed once
(without ranking), then a candidate's rank is the number of pool
members scoring strictly higher, plus one.  Equal scores share a rank.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from jobmarket_scoring.bounds import clamp, round_half_up
from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.scoring.salary import SalaryFairnessAnalyzer, fairness_score
from jobmarket_scoring.scoring.trust import TrustScoreEngine
from jobmarket_scoring.text import mutually_contains, overlapping_tags

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobmarket_scoring.config import Settings
    from jobmarket_scoring.models import CandidateProfile, EmployerAccount, JobPosting

logger = logging.getLogger(__name__)

MAX_FACTOR_SCORE = 100

SKILLS_MATCH = "Skills Match"
LOCATION_FIT = "Location Fit"
SALARY_FIT = "Salary Fit"
PROOF_COMPLETED = "Proof Completed"
RESPONSE_RATE = "Response Rate"
EXPERIENCE_LEVEL = "Experience Level"

_REMOTE_MARKERS = ("remote", "anywhere")

# Years credited per experience entry
YEARS_PER_EXPERIENCE_ENTRY = 2
SENIOR_YEARS = 5
MID_LEVEL_YEARS = 2


def experience_years(candidate: CandidateProfile) -> int:
    """Approximate years of experience as ``floor(entries × 2)``.

    Counts entries; start and end dates are not consulted.
    """
    return math.floor(len(candidate.experience) * YEARS_PER_EXPERIENCE_ENTRY)


def is_senior_title(title: str) -> bool:
    return "senior" in title.lower()


@dataclass(frozen=True)
class RelevanceWeights:
    """Per-factor weights.  Must each lie in [0, 1] and sum to 1.0."""

    skills: float = 0.30
    location: float = 0.15
    salary: float = 0.15
    proof: float = 0.20
    response: float = 0.10
    experience: float = 0.10

    def validate(self) -> None:
        """Raise ``ActionableError`` (VALIDATION) for out-of-range weights."""
        values = {
            "skills": self.skills,
            "location": self.location,
            "salary": self.salary,
            "proof": self.proof,
            "response": self.response,
            "experience": self.experience,
        }
        for name, value in values.items():
            if not 0.0 <= value <= 1.0:
                raise ActionableError.validation(
                    field_name=f"relevance.{name}",
                    reason=f"is {value} — must be between 0.0 and 1.0",
                )
        total = sum(values.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ActionableError.validation(
                field_name="relevance",
                reason=f"weights sum to {total:.4f} — must sum to 1.0",
                suggestion="Adjust the [relevance] weights so they add up to exactly 1.0",
            )


@dataclass(frozen=True)
class Factor:
    """One named, weighted, independently explainable score component."""

    name: str
    score: int
    weight: float
    explanation: str
    improvement: str | None = None
    max_score: int = MAX_FACTOR_SCORE

    @property
    def contribution(self) -> float:
        return self.score * self.weight


@dataclass(frozen=True)
class RelevanceScore:
    """Explainable relevance of one candidate to one job."""

    overall: int
    factors: tuple[Factor, ...]
    rank: int
    explanation: str
    candidate_id: str = ""
    job_id: str = ""
    employer_trust: int | None = None

    @property
    def weight_total(self) -> float:
        return sum(f.weight for f in self.factors)


class RelevanceScorer:
    """Scores candidates against a job and ranks them within a pool.

    Parameters
    ----------
    weights:
        Factor weights; validated on construction.
    salary_analyzer:
        Optional analyzer used to annotate the Salary Fit explanation
        with the posted range's fairness score.  Never changes scores.
    trust_engine:
        Computes the informational ``employer_trust`` when an employer
        is passed to :meth:`calculate_relevance`.
    """

    def __init__(
        self,
        weights: RelevanceWeights | None = None,
        *,
        salary_analyzer: SalaryFairnessAnalyzer | None = None,
        trust_engine: TrustScoreEngine | None = None,
    ) -> None:
        self.weights = weights or RelevanceWeights()
        self.weights.validate()
        self._salary_analyzer = salary_analyzer
        self._trust_engine = trust_engine or TrustScoreEngine()

    @classmethod
    def from_settings(cls, settings: Settings) -> RelevanceScorer:
        """Scorer using the configured [relevance] weights.

        Salary Fit explanations carry the fairness annotation.
        """
        return cls(settings.relevance, salary_analyzer=SalaryFairnessAnalyzer())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate_relevance(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
        pool: Sequence[CandidateProfile] = (),
        *,
        employer: EmployerAccount | None = None,
    ) -> RelevanceScore:
        """Score *candidate* against *job* and rank it within *pool*.

        The pool may or may not include the candidate itself; either way
        the rank counts pool members scoring strictly higher, plus one.
        """
        factors = self.compute_factors(candidate, job)
        overall = self._overall(factors)
        pool_scores = [self._overall(self.compute_factors(other, job)) for other in pool]
        rank = sum(1 for s in pool_scores if s > overall) + 1
        return self._build(candidate, job, factors, overall, rank, employer)

    def rank_pool(
        self,
        job: JobPosting,
        pool: Sequence[CandidateProfile],
    ) -> list[RelevanceScore]:
        """Score every candidate in *pool* once and rank them.

        Returns results sorted by rank (best first); candidates with
        equal overall scores share a rank and keep pool order.
        """
        scored = []
        for candidate in pool:
            factors = self.compute_factors(candidate, job)
            scored.append((candidate, factors, self._overall(factors)))

        ordered = sorted((overall for _, _, overall in scored), reverse=True)
        # First index of each score in the descending list == count of higher scores
        first_index: dict[int, int] = {}
        for index, overall in enumerate(ordered):
            first_index.setdefault(overall, index)

        results = [
            self._build(candidate, job, factors, overall, first_index[overall] + 1, None)
            for candidate, factors, overall in scored
        ]
        results.sort(key=lambda r: r.rank)
        logger.debug("Ranked %d candidates for job %s", len(results), job.id)
        return results

    def compute_factors(self, candidate: CandidateProfile, job: JobPosting) -> tuple[Factor, ...]:
        """Compute the six weighted factors in their canonical order."""
        return (
            self._skills_match(candidate, job),
            self._location_fit(candidate, job),
            self._salary_fit(job),
            self._proof_completed(candidate),
            self._response_rate(candidate),
            self._experience_level(candidate, job),
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @staticmethod
    def _overall(factors: Sequence[Factor]) -> int:
        return int(clamp(round_half_up(sum(f.contribution for f in factors)), 0, MAX_FACTOR_SCORE))

    def _build(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
        factors: tuple[Factor, ...],
        overall: int,
        rank: int,
        employer: EmployerAccount | None,
    ) -> RelevanceScore:
        employer_trust = None
        if employer is not None:
            employer_trust = self._trust_engine.derive_verification_status(employer).score
        return RelevanceScore(
            overall=overall,
            factors=factors,
            rank=rank,
            explanation=_explain(factors, rank),
            candidate_id=candidate.id,
            job_id=job.id,
            employer_trust=employer_trust,
        )

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    def _skills_match(self, candidate: CandidateProfile, job: JobPosting) -> Factor:
        required = [tag.lower() for tag in job.tags if tag]
        if not required:
            return Factor(
                name=SKILLS_MATCH,
                score=0,
                weight=self.weights.skills,
                explanation="Job lists no required skills",
            )

        matched = overlapping_tags(required, candidate.skills)
        missing = [tag for tag in required if tag not in matched]
        score = round_half_up(100 * len(matched) / len(required))
        return Factor(
            name=SKILLS_MATCH,
            score=score,
            weight=self.weights.skills,
            explanation=(
                f"Matches {len(matched)} of {len(required)} required skills"
                + (f": {', '.join(matched)}" if matched else "")
            ),
            improvement=f"Add skills: {', '.join(missing)}" if missing else None,
        )

    def _location_fit(self, candidate: CandidateProfile, job: JobPosting) -> Factor:
        def factor(score: int, explanation: str, improvement: str = "Consider remote roles or relocating") -> Factor:
            return Factor(
                name=LOCATION_FIT,
                score=score,
                weight=self.weights.location,
                explanation=explanation,
                improvement=improvement if score < MAX_FACTOR_SCORE else None,
            )

        if not candidate.location:
            return factor(50, "Location not specified", "Add your location to your profile")

        job_locations = [loc.lower() for loc in job.locations if loc]
        if any(marker in loc for loc in job_locations for marker in _REMOTE_MARKERS):
            return factor(100, "Remote position matches any location")
        if any(mutually_contains(candidate.location, loc) for loc in job_locations):
            return factor(100, f"Location matches: {candidate.location}")
        return factor(30, "Location mismatch")

    def _salary_fit(self, job: JobPosting) -> Factor:
        salary = job.salary
        if salary is not None and salary.is_complete:
            explanation = f"Salary range: {salary.currency} {salary.min:,.0f} - {salary.max:,.0f}"
            if self._salary_analyzer is not None:
                insight = self._salary_analyzer.analyze(
                    job.title,
                    job.location_label,
                    float(salary.min or 0),
                    float(salary.max or 0),
                    salary.currency,
                )
                explanation += f" (fairness {fairness_score(insight)}/100)"
            return Factor(
                name=SALARY_FIT,
                score=80,
                weight=self.weights.salary,
                explanation=explanation,
                improvement="Compare the posted range with your salary expectations",
            )
        return Factor(
            name=SALARY_FIT,
            score=50,
            weight=self.weights.salary,
            explanation="Salary range not specified",
            improvement="Ask the employer for the salary range",
        )

    def _proof_completed(self, candidate: CandidateProfile) -> Factor:
        score = 0
        parts: list[str] = []
        if candidate.portfolio:
            score += 40
            parts.append(f"{len(candidate.portfolio)} portfolio items")
        if candidate.proof_cards:
            score += 30
            parts.append(f"{len(candidate.proof_cards)} proof cards")
        references = candidate.verified_references
        if references:
            score += 30
            parts.append(f"{len(references)} verified references")

        score = int(clamp(score, 0, MAX_FACTOR_SCORE))
        return Factor(
            name=PROOF_COMPLETED,
            score=score,
            weight=self.weights.proof,
            explanation=", ".join(parts) if parts else "No proof completed",
            improvement="Complete proof tasks for this role type" if score < MAX_FACTOR_SCORE else None,
        )

    def _response_rate(self, candidate: CandidateProfile) -> Factor:
        completeness = int(clamp(candidate.profile_completeness, 0, MAX_FACTOR_SCORE))
        return Factor(
            name=RESPONSE_RATE,
            score=completeness,
            weight=self.weights.response,
            explanation=f"Profile {completeness}% complete - indicates engagement",
            improvement="Complete your profile" if completeness < MAX_FACTOR_SCORE else None,
        )

    def _experience_level(self, candidate: CandidateProfile, job: JobPosting) -> Factor:
        years = experience_years(candidate)
        senior = is_senior_title(job.title)

        if senior and years >= SENIOR_YEARS:
            score, explanation = 100, f"{years} years - matches senior role"
        elif senior:
            score, explanation = 60, f"{years} years - below senior level"
        elif years >= MID_LEVEL_YEARS:
            score, explanation = 90, f"{years} years - matches role level"
        else:
            score, explanation = 50, f"{years} years experience"

        return Factor(
            name=EXPERIENCE_LEVEL,
            score=score,
            weight=self.weights.experience,
            explanation=explanation,
            improvement="Add more experience history to your profile" if score < MAX_FACTOR_SCORE else None,
        )


def _explain(factors: Sequence[Factor], rank: int) -> str:
    """Summarise the top three contributing factors and all pending hints."""
    top = sorted(factors, key=lambda f: f.contribution, reverse=True)[:3]
    summary = f"Ranked #{rank} based on {', '.join(f.name for f in top)}."
    hints = [f.improvement for f in factors if f.improvement]
    if hints:
        summary += " " + " ".join(hints)
    return summary


_DEFAULT_SCORER = RelevanceScorer()


def calculate_relevance(
    candidate: CandidateProfile,
    job: JobPosting,
    pool: Sequence[CandidateProfile] = (),
) -> RelevanceScore:
    """Score and rank *candidate* with the default weights."""
    return _DEFAULT_SCORER.calculate_relevance(candidate, job, pool)
