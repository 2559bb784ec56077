"""Relevance scoring tests — six explainable factors and pool ranking.

Covers: TestSkillsMatchFactor, TestLocationFitFactor,
TestOtherFactors, TestOverallScore, TestConfiguredWeights,
TestPoolRanking, TestExplanation
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import pytest
from conftest import make_candidate, make_employer, make_experience, make_job

from jobmarket_scoring.config import load_settings
from jobmarket_scoring.errors import ActionableError, ErrorType
from jobmarket_scoring.models import (
    PortfolioItem,
    ProofCard,
    ProofCardType,
    SalaryRange,
    VerificationTier,
)
from jobmarket_scoring.scoring.relevance import (
    EXPERIENCE_LEVEL,
    LOCATION_FIT,
    PROOF_COMPLETED,
    RESPONSE_RATE,
    SALARY_FIT,
    SKILLS_MATCH,
    Factor,
    RelevanceScore,
    RelevanceScorer,
    RelevanceWeights,
    calculate_relevance,
)
from jobmarket_scoring.scoring.salary import SalaryFairnessAnalyzer

if TYPE_CHECKING:
    from pathlib import Path

    from jobmarket_scoring.config import Settings


def _factor(result: RelevanceScore, name: str) -> Factor:
    return next(f for f in result.factors if f.name == name)


class TestSkillsMatchFactor:
    """REQUIREMENT: Skills Match is the rounded share of required tags covered.

    WHO: Candidates and recruiters reading why a score is what it is
    WHAT: score = round(100 × K / N) with containment in either direction;
          N = 0 scores 0; missing tags are listed in the improvement hint
    WHY: The biggest factor must be reproducible by hand
    """

    def test_one_of_three_tags_scores_33(self) -> None:
        """React/TypeScript against React/Node/SQL covers one tag in three."""
        candidate = make_candidate(skills=("React", "TypeScript"))
        job = make_job(tags=("React", "Node", "SQL"))
        factor = _factor(calculate_relevance(candidate, job), SKILLS_MATCH)
        assert factor.score == 33
        assert factor.improvement == "Add skills: node, sql"

    def test_containment_works_in_both_directions(self) -> None:
        """'React Native' covers 'react' and 'js' is covered by 'node.js'."""
        candidate = make_candidate(skills=("React Native", "js"))
        job = make_job(tags=("React", "Node.js"))
        assert _factor(calculate_relevance(candidate, job), SKILLS_MATCH).score == 100

    def test_halves_round_up(self) -> None:
        """One of eight tags is 12.5%, reported as 13."""
        candidate = make_candidate(skills=("alpha",))
        job = make_job(tags=("alpha", "b1", "b2", "b3", "b4", "b5", "b6", "b7"))
        assert _factor(calculate_relevance(candidate, job), SKILLS_MATCH).score == 13

    def test_job_without_tags_scores_zero(self) -> None:
        """No required skills means nothing to match and no hint."""
        candidate = make_candidate(skills=("React",))
        factor = _factor(calculate_relevance(candidate, make_job()), SKILLS_MATCH)
        assert factor.score == 0
        assert factor.improvement is None

    def test_full_coverage_has_no_hint(self) -> None:
        """A factor at its maximum carries no improvement hint."""
        candidate = make_candidate(skills=("react",))
        factor = _factor(calculate_relevance(candidate, make_job(tags=("React",))), SKILLS_MATCH)
        assert factor.score == 100
        assert factor.improvement is None


class TestLocationFitFactor:
    """REQUIREMENT: Location Fit rewards remote roles and matching cities.

    WHO: Candidates with a declared location
    WHAT: unknown candidate location → 50 with a hint to add one;
          remote/anywhere → 100; mutual containment → 100; otherwise 30
    WHY: Location is a hard constraint for many candidates
    """

    @pytest.mark.parametrize(
        ("candidate_location", "job_locations", "expected"),
        [
            (None, ("Remote",), 50),
            ("Berlin", ("Remote - EU",), 100),
            ("Berlin", ("Work from anywhere",), 100),
            ("Berlin", ("Berlin, Germany",), 100),
            ("San Francisco, CA", ("San Francisco",), 100),
            ("Berlin", ("Paris",), 30),
        ],
    )
    def test_location_rules(
        self,
        candidate_location: str | None,
        job_locations: tuple[str, ...],
        expected: int,
    ) -> None:
        """Each location rule produces its documented score."""
        candidate = make_candidate(location=candidate_location)
        job = make_job(locations=job_locations)
        assert _factor(calculate_relevance(candidate, job), LOCATION_FIT).score == expected

    def test_unknown_location_asks_for_a_location(self) -> None:
        """A candidate without a location is told to add one, not to relocate."""
        factor = _factor(calculate_relevance(make_candidate(), make_job(locations=("Paris",))), LOCATION_FIT)
        assert factor.improvement == "Add your location to your profile"

    def test_mismatch_suggests_remote_or_relocating(self) -> None:
        """A known but mismatched location keeps the relocation hint."""
        candidate = make_candidate(location="Berlin")
        factor = _factor(calculate_relevance(candidate, make_job(locations=("Paris",))), LOCATION_FIT)
        assert factor.improvement == "Consider remote roles or relocating"


class TestOtherFactors:
    """REQUIREMENT: Salary, proof, response and experience follow fixed rules.

    WHO: Anyone auditing a relevance score
    WHAT: salary 80 with a full range else 50; proof 40/30/30; response =
          profile completeness; experience 100/60/90/50 by years and
          "senior" in the title
    WHY: Fixed rules keep scores stable between releases
    """

    def test_salary_fit_depends_on_a_complete_range(self) -> None:
        """Both bounds published scores 80; a missing bound scores 50."""
        candidate = make_candidate()
        full = make_job(salary=SalaryRange(min=100_000, max=120_000))
        partial = make_job(salary=SalaryRange(min=100_000, max=None))
        assert _factor(calculate_relevance(candidate, full), SALARY_FIT).score == 80
        assert _factor(calculate_relevance(candidate, partial), SALARY_FIT).score == 50
        assert _factor(calculate_relevance(candidate, make_job()), SALARY_FIT).score == 50

    def test_salary_fairness_annotates_without_changing_score(self) -> None:
        """A scorer with an analyzer explains fairness but keeps 80."""
        scorer = RelevanceScorer(salary_analyzer=SalaryFairnessAnalyzer())
        job = make_job(
            title="Senior Frontend Engineer",
            locations=("San Francisco, CA",),
            salary=SalaryRange(min=145_000, max=155_000),
        )
        factor = _factor(scorer.calculate_relevance(make_candidate(), job), SALARY_FIT)
        assert factor.score == 80
        assert "fairness 90/100" in factor.explanation

    def test_proof_completed_adds_up_to_100(self) -> None:
        """Portfolio, any proof card and a verified reference sum to 100."""
        candidate = make_candidate(
            portfolio=(PortfolioItem(title="Shop redesign"),),
            proof_cards=(ProofCard(type=ProofCardType.REFERENCE, title="Ex-manager", verified=True),),
        )
        factor = _factor(calculate_relevance(candidate, make_job()), PROOF_COMPLETED)
        assert factor.score == 100

    def test_unverified_reference_counts_only_as_a_card(self) -> None:
        """An unverified reference earns the proof-card points only."""
        candidate = make_candidate(
            proof_cards=(ProofCard(type=ProofCardType.REFERENCE, title="Pending"),),
        )
        assert _factor(calculate_relevance(candidate, make_job()), PROOF_COMPLETED).score == 30

    def test_response_rate_is_clamped_completeness(self) -> None:
        """Profile completeness is used directly, clamped to [0, 100]."""
        assert _factor(calculate_relevance(make_candidate(profile_completeness=72), make_job()), RESPONSE_RATE).score == 72
        assert _factor(calculate_relevance(make_candidate(profile_completeness=140), make_job()), RESPONSE_RATE).score == 100

    @pytest.mark.parametrize(
        ("entries", "title", "expected"),
        [
            (3, "Senior Engineer", 100),
            (2, "Senior Engineer", 60),
            (1, "Engineer", 90),
            (0, "Engineer", 50),
        ],
    )
    def test_experience_level(self, entries: int, title: str, expected: int) -> None:
        """Years are entries × 2, compared against the senior threshold."""
        candidate = make_candidate(experience=make_experience(entries))
        job = make_job(title=title)
        assert _factor(calculate_relevance(candidate, job), EXPERIENCE_LEVEL).score == expected


class TestOverallScore:
    """REQUIREMENT: The overall score is the bounded weighted sum of factors.

    WHO: Every consumer of a relevance score
    WHAT: overall = round(Σ score × weight) in [0, 100]; weights sum to 1.0;
          invalid weights are rejected at construction
    WHY: A total outside its scale, or weights that drift, break ranking
    """

    def test_weights_sum_to_one(self) -> None:
        """The six factor weights always add up to exactly 1.0."""
        result = calculate_relevance(make_candidate(), make_job())
        assert len(result.factors) == 6
        assert math.isclose(result.weight_total, 1.0)

    def test_overall_is_weighted_sum(self) -> None:
        """Factors 33/50/50/0/60/50 combine to 36."""
        candidate = make_candidate(skills=("React", "TypeScript"), profile_completeness=60)
        job = make_job(tags=("React", "Node", "SQL"))
        # 33×0.30 + 50×0.15 + 50×0.15 + 0×0.20 + 60×0.10 + 50×0.10 = 35.9
        assert calculate_relevance(candidate, job).overall == 36

    def test_perfect_candidate_scores_at_most_100(self) -> None:
        """Every factor at or near maximum stays within the scale."""
        candidate = make_candidate(
            skills=("React",),
            location="Remote",
            experience=make_experience(4),
            portfolio=(PortfolioItem(title="App"),),
            proof_cards=(ProofCard(type=ProofCardType.REFERENCE, title="Ref", verified=True),),
            profile_completeness=100,
        )
        job = make_job(
            title="Senior Frontend Engineer",
            tags=("React",),
            locations=("Remote",),
            salary=SalaryRange(min=150_000, max=180_000),
        )
        overall = calculate_relevance(candidate, job).overall
        # Salary Fit tops out at 80: 100 − 20 × 0.15 = 97
        assert overall == 97
        assert 0 <= overall <= 100

    def test_weights_outside_range_are_rejected(self) -> None:
        """A negative weight raises VALIDATION before anything is scored."""
        with pytest.raises(ActionableError) as exc_info:
            RelevanceScorer(RelevanceWeights(skills=-0.1, location=0.55))
        assert exc_info.value.error_type == ErrorType.VALIDATION

    def test_weights_not_summing_to_one_are_rejected(self) -> None:
        """Weights that add up to more than 1.0 raise VALIDATION."""
        with pytest.raises(ActionableError) as exc_info:
            RelevanceScorer(RelevanceWeights(skills=0.5))
        assert exc_info.value.error_type == ErrorType.VALIDATION
        assert "sum" in exc_info.value.error

    def test_scoring_is_deterministic(self) -> None:
        """The same inputs always produce an identical result."""
        candidate = make_candidate(skills=("React",), location="Berlin")
        job = make_job(tags=("React", "CSS"), locations=("Berlin",))
        assert calculate_relevance(candidate, job) == calculate_relevance(candidate, job)

    def test_employer_trust_is_informational(self) -> None:
        """Passing an employer adds its trust score without changing the overall."""
        scorer = RelevanceScorer()
        candidate = make_candidate(skills=("React",))
        job = make_job(tags=("React",))
        employer = make_employer(verification_tier=VerificationTier.VERIFIED)
        plain = scorer.calculate_relevance(candidate, job)
        annotated = scorer.calculate_relevance(candidate, job, employer=employer)
        assert annotated.employer_trust == 40
        assert annotated.overall == plain.overall
        assert plain.employer_trust is None


class TestConfiguredWeights:
    """REQUIREMENT: Weights from settings.toml drive the overall score.

    WHO: Operators tuning the marketplace ranking
    WHAT: RelevanceScorer.from_settings uses the [relevance] weights, so a
          non-default weighting changes overall; the scorer it builds
          annotates Salary Fit with the fairness score
    WHY: A weight that is validated but never applied is a silent no-op
    """

    @staticmethod
    def _settings(tmp_path: Path, body: str) -> Settings:
        path = tmp_path / "settings.toml"
        path.write_text(body, encoding="utf-8")
        return load_settings(path)

    def test_configured_weights_change_overall(self, tmp_path: Path) -> None:
        """Moving weight onto skills lifts a full skills match from 50 to 60."""
        candidate = make_candidate(skills=("React",))
        job = make_job(tags=("React",))
        defaults = RelevanceScorer.from_settings(self._settings(tmp_path, ""))
        tuned = RelevanceScorer.from_settings(
            self._settings(
                tmp_path,
                "[relevance]\n"
                "skills = 0.50\nlocation = 0.05\nsalary = 0.05\n"
                "proof = 0.20\nresponse = 0.10\nexperience = 0.10\n",
            )
        )
        # 100×0.30 + 50×0.15 + 50×0.15 + 0 + 0 + 50×0.10 = 50
        assert defaults.calculate_relevance(candidate, job).overall == 50
        # 100×0.50 + 50×0.05 + 50×0.05 + 0 + 0 + 50×0.10 = 60
        assert tuned.calculate_relevance(candidate, job).overall == 60
        assert _factor(tuned.calculate_relevance(candidate, job), SKILLS_MATCH).weight == 0.50

    def test_scorer_from_settings_annotates_salary_fairness(self, tmp_path: Path) -> None:
        """The configured scorer adds the fairness score to Salary Fit."""
        scorer = RelevanceScorer.from_settings(self._settings(tmp_path, ""))
        job = make_job(locations=("Remote",), salary=SalaryRange(min=90_000, max=110_000))
        factor = _factor(scorer.calculate_relevance(make_candidate(), job), SALARY_FIT)
        assert "/100)" in factor.explanation


class TestPoolRanking:
    """REQUIREMENT: Rank counts strictly-higher pool members, plus one.

    WHO: Recruiters ordering applicants for a job
    WHAT: The best candidate is rank 1; equal scores share a rank;
          rank_pool returns every candidate sorted by rank
    WHY: Ties must not be broken arbitrarily between equally good people
    """

    def test_best_candidate_is_rank_one(self) -> None:
        """The highest scorer in the pool ranks first."""
        job = make_job(tags=("React", "Node"))
        strong = make_candidate("strong", skills=("React", "Node"))
        weak = make_candidate("weak", skills=())
        pool = (strong, weak)
        assert calculate_relevance(strong, job, pool).rank == 1
        assert calculate_relevance(weak, job, pool).rank == 2

    def test_equal_scores_share_a_rank(self) -> None:
        """Two identical profiles both rank behind the one stronger profile."""
        job = make_job(tags=("React", "Node"))
        strong = make_candidate("strong", skills=("React", "Node"))
        twin_a = make_candidate("twin-a", skills=("React",))
        twin_b = make_candidate("twin-b", skills=("React",))
        pool = (strong, twin_a, twin_b)
        assert calculate_relevance(twin_a, job, pool).rank == 2
        assert calculate_relevance(twin_b, job, pool).rank == 2

    def test_candidate_outside_pool_is_ranked_against_it(self) -> None:
        """The pool need not contain the candidate being scored."""
        job = make_job(tags=("React",))
        outsider = make_candidate("outsider", skills=())
        pool = (make_candidate("a", skills=("React",)), make_candidate("b", skills=("React",)))
        assert calculate_relevance(outsider, job, pool).rank == 3

    def test_empty_pool_ranks_first(self) -> None:
        """Without a pool there is nobody to outrank the candidate."""
        assert calculate_relevance(make_candidate(), make_job()).rank == 1

    def test_rank_pool_orders_by_rank_with_shared_ties(self) -> None:
        """rank_pool scores everyone once and keeps pool order within ties."""
        job = make_job(tags=("React", "Node"))
        pool = (
            make_candidate("tie-1", skills=("React",)),
            make_candidate("best", skills=("React", "Node")),
            make_candidate("tie-2", skills=("React",)),
        )
        results = RelevanceScorer().rank_pool(job, pool)
        assert [r.candidate_id for r in results] == ["best", "tie-1", "tie-2"]
        assert [r.rank for r in results] == [1, 2, 2]


class TestExplanation:
    """REQUIREMENT: Every score explains itself in plain language.

    WHO: Candidates wondering how to improve
    WHAT: The explanation names the rank and the three largest weighted
          contributions, then lists every pending improvement hint
    WHY: An unexplained number invites distrust
    """

    def test_explanation_names_rank_and_top_factors(self) -> None:
        """Top contributions appear in descending order after the rank."""
        candidate = make_candidate(
            skills=("React",),
            location="Berlin",
            profile_completeness=100,
            experience=make_experience(1),
        )
        job = make_job(tags=("React",), locations=("Berlin",))
        result = calculate_relevance(candidate, job)
        # Skills 30, Location 15, Response 10, Experience 9, Salary 7.5, Proof 0
        assert result.explanation.startswith(
            f"Ranked #1 based on {SKILLS_MATCH}, {LOCATION_FIT}, {RESPONSE_RATE}."
        )

    def test_explanation_lists_pending_hints(self) -> None:
        """Hints for sub-maximal factors are appended to the summary."""
        candidate = make_candidate(skills=("React",))
        job = make_job(tags=("React", "GraphQL"))
        result = calculate_relevance(candidate, job)
        assert "Add skills: graphql" in result.explanation
        assert "Complete your profile" in result.explanation
