"""Proof task tests — fixed-rubric grading and assessment proof cards.

Covers: TestProofTaskGrading, TestProofTaskTemplates, TestProofCards
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from jobmarket_scoring.errors import ActionableError, ErrorType
from jobmarket_scoring.models import ProofCardType
from jobmarket_scoring.scoring.proof_tasks import (
    DEFAULT_TEMPLATES,
    ProofTaskQuestion,
    ProofTaskScorer,
    ProofTaskTemplate,
    ProofTaskType,
    QuestionType,
    build_proof_card,
    score_proof_task,
)

FRONTEND = DEFAULT_TEMPLATES[ProofTaskType.FRONTEND]
SUPPORT = DEFAULT_TEMPLATES[ProofTaskType.CUSTOMER_SUPPORT]


class TestProofTaskGrading:
    """REQUIREMENT: Answers are graded 10 points per question with fixed rules.

    WHO: Candidates proving a skill with a short assessment
    WHAT: multiple-choice/scenario earn 10 for the exact correct answer;
          code/design earn 5 for any non-empty answer; passed when
          score >= max × passing% / 100
    WHY: Grading must be predictable since nothing is executed or reviewed
    """

    def test_correct_choice_and_code_answer(self) -> None:
        """10 for the right option plus 5 for submitted code is 15 of 20."""
        result = score_proof_task({"q1": 0, "q2": "return nums.filter(n => n % 2 === 0)"}, FRONTEND)
        assert result.score == 15
        assert result.max_score == 20
        assert result.passed is True

    def test_wrong_choice_fails(self) -> None:
        """A wrong option earns nothing; 5 of 20 is below the 70% pass mark."""
        result = score_proof_task({"q1": 3, "q2": "some code"}, FRONTEND)
        assert result.score == 5
        assert result.passed is False

    def test_blank_code_answer_earns_nothing(self) -> None:
        """Whitespace-only submissions do not count as an answer."""
        result = score_proof_task({"q1": 0, "q2": "   "}, FRONTEND)
        assert result.score == 10

    def test_missing_answers_score_zero(self) -> None:
        """Unanswered questions earn no points."""
        result = score_proof_task({}, SUPPORT)
        assert result.score == 0
        assert result.max_score == 10
        assert result.passed is False

    def test_pass_mark_is_inclusive(self) -> None:
        """A score exactly at the threshold passes."""
        template = ProofTaskTemplate(
            id="t",
            type=ProofTaskType.BACKEND,
            title="Half",
            description="",
            estimated_minutes=1,
            passing_score=50,
            questions=(
                ProofTaskQuestion(id="a", type=QuestionType.MULTIPLE_CHOICE, question="?", correct_answer=1),
                ProofTaskQuestion(id="b", type=QuestionType.MULTIPLE_CHOICE, question="?", correct_answer=1),
            ),
        )
        result = ProofTaskScorer().score({"a": 1, "b": 0}, template)
        assert result.score == 10
        assert result.passed is True


class TestProofTaskTemplates:
    """REQUIREMENT: Every supported role type has a template; others are rejected.

    WHO: The assessment picker and the CLI
    WHAT: six templates exist; get_template accepts enum or string and
          raises VALIDATION for unknown types
    WHY: A silent fallback would grade candidates on the wrong test
    """

    def test_all_six_task_types_have_templates(self) -> None:
        """Every task type maps to a template with at least one question."""
        templates = ProofTaskScorer().available_templates()
        assert {t.type for t in templates} == set(ProofTaskType)
        assert all(t.questions for t in templates)

    def test_lookup_by_string(self) -> None:
        """String task types resolve like enum members."""
        assert ProofTaskScorer().get_template("customer_support") is SUPPORT

    def test_unknown_type_raises_validation(self) -> None:
        """Unknown task types raise a VALIDATION error listing the valid ones."""
        with pytest.raises(ActionableError) as exc_info:
            ProofTaskScorer().get_template("astrology")
        assert exc_info.value.error_type == ErrorType.VALIDATION
        assert "frontend" in (exc_info.value.suggestion or "")


class TestProofCards:
    """REQUIREMENT: A graded task becomes an assessment proof card.

    WHO: Candidates adding evidence to their profile
    WHAT: The card is an assessment_result titled after the task, carrying
          the score, and verified only when the task was passed
    WHY: Failed attempts must not read as verified evidence
    """

    def test_passed_task_yields_verified_card(self) -> None:
        """Passing produces a verified card with the score."""
        completed = datetime(2026, 2, 1, tzinfo=UTC)
        result = score_proof_task({"q1": 1}, SUPPORT)
        card = build_proof_card(SUPPORT, result, completed_at=completed)
        assert card.type is ProofCardType.ASSESSMENT_RESULT
        assert card.title == SUPPORT.title
        assert card.verified is True
        assert card.score == 10
        assert card.created_at == completed

    def test_failed_task_yields_unverified_card(self) -> None:
        """Failing still records the attempt, unverified."""
        result = score_proof_task({"q1": 0}, SUPPORT)
        assert build_proof_card(SUPPORT, result).verified is False
