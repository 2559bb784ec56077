"""Fixed-rubric skills assessments ("proof tasks").

Each task template is an ordered list of questions worth 10 points
apiece.  Multiple-choice and scenario questions earn full credit only
for the recorded correct answer.  Code and design questions earn
partial credit (5 points) for any non-empty submission — nothing is
executed or reviewed.

A result passes when ``score >= max_score × passing_score / 100``.
Passing results can be turned into an ``assessment_result`` proof card
for the candidate's profile.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType

from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.models import ProofCard, ProofCardType

POINTS_PER_QUESTION = 10
PARTIAL_CREDIT = 5


class ProofTaskType(StrEnum):
    FRONTEND = "frontend"
    PRODUCT_DESIGN = "product_design"
    CUSTOMER_SUPPORT = "customer_support"
    BACKEND = "backend"
    PRODUCT_MANAGER = "product_manager"
    DATA_ANALYST = "data_analyst"


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    SCENARIO = "scenario"
    CODE = "code"
    DESIGN = "design"


# Question types graded by exact match against the correct answer
_EXACT_MATCH_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.SCENARIO})


@dataclass(frozen=True)
class ProofTaskQuestion:
    id: str
    type: QuestionType
    question: str
    options: tuple[str, ...] = ()
    correct_answer: int | str | None = None
    prompt: str | None = None


@dataclass(frozen=True)
class ProofTaskTemplate:
    id: str
    type: ProofTaskType
    title: str
    description: str
    estimated_minutes: int
    passing_score: int
    questions: tuple[ProofTaskQuestion, ...]

    @property
    def max_score(self) -> int:
        return len(self.questions) * POINTS_PER_QUESTION


@dataclass(frozen=True)
class ProofTaskResult:
    score: int
    max_score: int
    passed: bool


DEFAULT_TEMPLATES: Mapping[ProofTaskType, ProofTaskTemplate] = MappingProxyType({
    ProofTaskType.FRONTEND: ProofTaskTemplate(
        id="frontend_template",
        type=ProofTaskType.FRONTEND,
        title="Frontend Development Proof",
        description="Quick assessment of frontend development skills",
        estimated_minutes=15,
        passing_score=70,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.MULTIPLE_CHOICE,
                question="What is the primary purpose of React hooks?",
                options=(
                    "To manage component state and side effects",
                    "To style components",
                    "To handle routing",
                    "To optimize performance",
                ),
                correct_answer=0,
            ),
            ProofTaskQuestion(
                id="q2",
                type=QuestionType.CODE,
                question="Write a function that filters an array of numbers to return only even numbers",
                prompt="function filterEven(numbers) {\n  // Your code here\n}",
            ),
        ),
    ),
    ProofTaskType.PRODUCT_DESIGN: ProofTaskTemplate(
        id="design_template",
        type=ProofTaskType.PRODUCT_DESIGN,
        title="Product Design Proof",
        description="Assess design thinking and UX skills",
        estimated_minutes=20,
        passing_score=70,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.SCENARIO,
                question="A user complains that a checkout button is hard to find. What's the first step you'd take?",
                options=(
                    "Move the button to a more prominent location",
                    "Conduct user research to understand the problem",
                    "A/B test different button colors",
                    "Add more visual hierarchy",
                ),
                correct_answer=1,
            ),
            ProofTaskQuestion(
                id="q2",
                type=QuestionType.DESIGN,
                question="Design a mobile-friendly navigation for an e-commerce app",
                prompt="Consider accessibility, thumb zones, and common patterns",
            ),
        ),
    ),
    ProofTaskType.CUSTOMER_SUPPORT: ProofTaskTemplate(
        id="support_template",
        type=ProofTaskType.CUSTOMER_SUPPORT,
        title="Customer Support Proof",
        description="Test communication and problem-solving skills",
        estimated_minutes=10,
        passing_score=75,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.SCENARIO,
                question="A customer is frustrated because their order is delayed. How do you respond?",
                options=(
                    "Apologize and offer a discount",
                    "Acknowledge their frustration, explain the delay, and provide a solution",
                    "Transfer them to a manager",
                    "Ask them to wait",
                ),
                correct_answer=1,
            ),
        ),
    ),
    ProofTaskType.BACKEND: ProofTaskTemplate(
        id="backend_template",
        type=ProofTaskType.BACKEND,
        title="Backend Development Proof",
        description="Quick backend skills assessment",
        estimated_minutes=15,
        passing_score=70,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.MULTIPLE_CHOICE,
                question="What's the difference between REST and GraphQL?",
                options=(
                    "REST uses HTTP, GraphQL doesn't",
                    "GraphQL allows clients to request specific data, REST returns fixed endpoints",
                    "REST is faster than GraphQL",
                    "GraphQL is only for frontend",
                ),
                correct_answer=1,
            ),
        ),
    ),
    ProofTaskType.PRODUCT_MANAGER: ProofTaskTemplate(
        id="pm_template",
        type=ProofTaskType.PRODUCT_MANAGER,
        title="Product Management Proof",
        description="Assess product thinking and prioritization",
        estimated_minutes=15,
        passing_score=70,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.SCENARIO,
                question="You have 3 features to build but only resources for 1. How do you decide?",
                options=(
                    "Build the easiest one",
                    "Build the one the CEO wants",
                    "Analyze user impact, business value, and effort",
                    "Build all three slowly",
                ),
                correct_answer=2,
            ),
        ),
    ),
    ProofTaskType.DATA_ANALYST: ProofTaskTemplate(
        id="analyst_template",
        type=ProofTaskType.DATA_ANALYST,
        title="Data Analysis Proof",
        description="Test data analysis and SQL skills",
        estimated_minutes=15,
        passing_score=70,
        questions=(
            ProofTaskQuestion(
                id="q1",
                type=QuestionType.CODE,
                question="Write a SQL query to find the top 10 customers by total order value",
                prompt="SELECT ... FROM orders ...",
            ),
        ),
    ),
})


def _has_content(answer: object) -> bool:
    if answer is None:
        return False
    if isinstance(answer, str):
        return bool(answer.strip())
    return True


class ProofTaskScorer:
    """Grades answers against proof task templates."""

    def __init__(
        self,
        templates: Mapping[ProofTaskType, ProofTaskTemplate] = DEFAULT_TEMPLATES,
    ) -> None:
        self._templates = templates

    def get_template(self, task_type: ProofTaskType | str) -> ProofTaskTemplate:
        """Return the template for *task_type*.

        Raises ``ActionableError`` (VALIDATION) for unknown task types.
        """
        try:
            key = ProofTaskType(task_type)
            return self._templates[key]
        except (ValueError, KeyError):
            known = ", ".join(t.value for t in self._templates)
            raise ActionableError.validation(
                field_name="task_type",
                reason=f"unknown proof task type '{task_type}'",
                suggestion=f"Use one of: {known}",
            ) from None

    def available_templates(self) -> list[ProofTaskTemplate]:
        return list(self._templates.values())

    def score(self, answers: Mapping[str, object], template: ProofTaskTemplate) -> ProofTaskResult:
        """Grade *answers* (question id → answer) against *template*."""
        score = 0
        for question in template.questions:
            answer = answers.get(question.id)
            if question.type in _EXACT_MATCH_TYPES:
                if answer is not None and answer == question.correct_answer:
                    score += POINTS_PER_QUESTION
            elif _has_content(answer):
                score += PARTIAL_CREDIT

        max_score = template.max_score
        return ProofTaskResult(
            score=score,
            max_score=max_score,
            passed=score >= max_score * template.passing_score / 100,
        )


def build_proof_card(
    template: ProofTaskTemplate,
    result: ProofTaskResult,
    *,
    completed_at: datetime | None = None,
) -> ProofCard:
    """Turn a graded result into an ``assessment_result`` proof card.

    The card is marked verified only when the result passed.
    """
    return ProofCard(
        type=ProofCardType.ASSESSMENT_RESULT,
        title=template.title,
        verified=result.passed,
        score=result.score,
        created_at=completed_at or datetime.now(UTC),
    )


_DEFAULT_SCORER = ProofTaskScorer()


def score_proof_task(answers: Mapping[str, object], template: ProofTaskTemplate) -> ProofTaskResult:
    """Grade *answers* against *template*."""
    return _DEFAULT_SCORER.score(answers, template)
