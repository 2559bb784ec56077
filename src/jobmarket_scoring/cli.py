"""CLI command handlers for the job marketplace scoring engine.

Each public function corresponds to a CLI subcommand and encapsulates
the wiring, orchestration, and output for that command.  Handlers raise
:class:`~jobmarket_scoring.errors.ActionableError`; ``__main__`` turns
those into a message and a non-zero exit.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from jobmarket_scoring.config import DEFAULT_SETTINGS_PATH, Settings, load_settings
from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.logging import configure_file_logging, set_level
from jobmarket_scoring.models import (
    CandidateProfile,
    EmployerAccount,
    ExperienceEntry,
    JobPosting,
    PortfolioItem,
    SalaryRange,
    VerificationTier,
)
from jobmarket_scoring.scoring.proof_tasks import (
    ProofTaskScorer,
    ProofTaskType,
    build_proof_card,
)
from jobmarket_scoring.scoring.relevance import RelevanceScorer
from jobmarket_scoring.scoring.salary import (
    SalaryFairnessAnalyzer,
    fairness_score,
    format_currency,
)
from jobmarket_scoring.scoring.skills import extract_skills, skill_category
from jobmarket_scoring.scoring.trust import TrustScoreEngine, verification_badge


def handle_skills(args: argparse.Namespace) -> None:
    """Print the canonical skills found in the given text, with categories."""
    text = " ".join(args.text)
    skills = extract_skills(text)
    if not skills:
        print("No known skills found.")
        return
    print(f"Found {len(skills)} skill(s):")
    for skill in skills:
        print(f"  - {skill} ({skill_category(skill)})")


def handle_trust(args: argparse.Namespace) -> None:
    """Derive verification status and trust score for an employer."""
    employer = EmployerAccount(
        id=args.employer_id,
        verification_tier=VerificationTier.parse(args.tier),
        response_rate=args.response_rate,
        avg_response_time=args.response_time,
        raw_trust_score=args.raw_trust,
    )
    status = TrustScoreEngine().derive_verification_status(employer)
    badge = verification_badge(status.tier)

    print(f"Employer:    {employer.id}")
    print(f"Tier:        {status.tier} — {badge.label}")
    print(f"Trust score: {status.score}/100")
    if status.next_steps:
        print("Next steps:")
        for step in status.next_steps:
            print(f"  - {step}")
    else:
        print("Fully verified.")


def handle_salary(args: argparse.Namespace) -> None:
    """Analyse a posted salary range against market benchmarks."""
    if args.max < args.min:
        raise ActionableError.validation(
            field_name="--max",
            reason=f"{args.max} is below --min {args.min}",
            suggestion="Pass the lower bound as --min and the upper bound as --max",
        )
    insight = SalaryFairnessAnalyzer().analyze(
        args.title, args.location, args.min, args.max, args.currency
    )

    print(f"Range:         {format_currency(args.min, args.currency)} - {format_currency(args.max, args.currency)}")
    print(f"Confidence:    {insight.range_confidence}")
    print(f"Market match:  {'yes' if insight.market_match else 'no'}")
    print(f"Fairness:      {fairness_score(insight)}/100")
    print(f"Benefits est.: {format_currency(insight.benefits_value_estimate, args.currency)}")
    if insight.location_adjustment is not None:
        adj = insight.location_adjustment
        print(
            f"Cost of living ×{adj.factor}: "
            f"{format_currency(adj.adjusted_min, args.currency)} - "
            f"{format_currency(adj.adjusted_max, args.currency)}"
        )
    for line in insight.insights:
        print(f"  + {line}")
    for line in insight.warnings:
        print(f"  ! {line}")


def handle_relevance(args: argparse.Namespace) -> None:
    """Score one candidate against one job with the configured weights."""
    settings = _load(args)
    scorer = RelevanceScorer.from_settings(settings)

    salary = None
    if args.salary_min is not None or args.salary_max is not None:
        salary = SalaryRange(min=args.salary_min, max=args.salary_max, currency=args.currency)
    job = JobPosting(
        id=args.job_id,
        title=args.title,
        tags=tuple(args.tags),
        locations=tuple(args.job_location or ()),
        salary=salary,
    )
    candidate = CandidateProfile(
        id=args.candidate_id,
        skills=tuple(args.skills),
        location=args.candidate_location,
        experience=tuple(ExperienceEntry(start_date=date.today()) for _ in range(args.experience)),
        portfolio=tuple(PortfolioItem(title=f"Item {i}") for i in range(1, args.portfolio + 1)),
        profile_completeness=args.completeness,
    )
    result = scorer.calculate_relevance(candidate, job)

    print(f"Relevance: {result.overall}/100")
    for factor in result.factors:
        print(f"  {factor.name:<17} {factor.score:>3} × {factor.weight:.2f}  {factor.explanation}")
        if factor.improvement:
            print(f"  {'':<17}       → {factor.improvement}")
    print(result.explanation)


def handle_proof_task(args: argparse.Namespace) -> None:
    """Grade answers to a proof task, or list the available tasks."""
    scorer = ProofTaskScorer()
    if args.list or not args.task_type:
        print("Available proof tasks:")
        for template in scorer.available_templates():
            print(
                f"  - {template.type}: {template.title} "
                f"({len(template.questions)} question(s), ~{template.estimated_minutes} min)"
            )
        return

    template = scorer.get_template(args.task_type)
    answers = parse_answers(args.answer or [])
    result = scorer.score(answers, template)
    card = build_proof_card(template, result)

    print(f"{template.title}: {result.score}/{result.max_score} (pass mark {template.passing_score}%)")
    print("PASSED" if result.passed else "NOT PASSED")
    if card.verified:
        print(f"Proof card: {card.type} '{card.title}' (verified)")


def parse_answers(pairs: list[str]) -> dict[str, object]:
    """Parse ``QUESTION=ANSWER`` pairs; all-digit answers become option indexes."""
    answers: dict[str, object] = {}
    for pair in pairs:
        question_id, sep, answer = pair.partition("=")
        if not sep or not question_id.strip():
            raise ActionableError.parse(
                source="--answer",
                raw_error=f"'{pair}' is not in QUESTION=ANSWER form",
                suggestion="Pass answers like --answer q1=0 --answer q2='my answer'",
            )
        answer = answer.strip()
        answers[question_id.strip()] = int(answer) if answer.isdigit() else answer
    return answers


def handle_init_db(args: argparse.Namespace) -> None:
    """Create the marketplace tables."""
    from jobmarket_scoring.storage.sql import SqlMarketplaceRepository

    settings = _load(args)
    SqlMarketplaceRepository(settings.database.url).create_schema()
    print(f"Database ready: {settings.database.url}")


def handle_digest(args: argparse.Namespace) -> None:
    """Generate a digest for one saved search, or for every due search."""
    from jobmarket_scoring.digest.generator import DigestGenerator
    from jobmarket_scoring.storage.sql import SqlMarketplaceRepository

    settings = _load(args)
    configure_file_logging(settings.logging.log_dir, level=logging.getLevelName(settings.logging.level))
    repository = SqlMarketplaceRepository(settings.database.url)
    generator = DigestGenerator(repository, settings.digest)

    if args.due:
        digests = generator.run_due()
        print(f"Generated {len(digests)} digest(s)")
    else:
        digest = generator.run_saved_search(args.search_id)
        if digest is None:
            print(f"Error: Could not generate digest for saved search '{args.search_id}'")
            sys.exit(1)
        digests = [digest]

    for digest in digests:
        print(f"\n{digest.search_name} ({digest.saved_search_id}) — {len(digest.rows)} job(s)")
        for i, row in enumerate(digest.rows, 1):
            matched = f" [{', '.join(row.matched_skills)}]" if row.matched_skills else ""
            print(f"{i}. [{row.match_score}] {row.title} — {row.company}{matched}")
            print(f"   {row.location} | {row.url}")


def _load(args: argparse.Namespace) -> Settings:
    settings = load_settings(getattr(args, "config", DEFAULT_SETTINGS_PATH))
    if not getattr(args, "verbose", False):
        set_level(settings.logging.level)
    return settings


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="jobmarket-scoring",
        description="Explainable matching, relevance and trust scoring for a job marketplace",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_SETTINGS_PATH),
        help=f"Path to settings TOML (default: {DEFAULT_SETTINGS_PATH})",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    # -- skills --------------------------------------------------------------
    skills_p = sub.add_parser("skills", help="Extract canonical skills from text")
    skills_p.add_argument("text", nargs="+", help="Free text (job description, title, tags)")

    # -- trust ---------------------------------------------------------------
    trust_p = sub.add_parser("trust", help="Compute an employer's verification status and trust score")
    trust_p.add_argument(
        "--tier",
        choices=[t.value for t in VerificationTier],
        default=VerificationTier.NONE.value,
        help="Verification tier (default: none)",
    )
    trust_p.add_argument("--response-rate", type=float, default=0.0, help="Response rate percentage")
    trust_p.add_argument("--response-time", type=str, default="", help='Average response time, e.g. "2 days"')
    trust_p.add_argument("--raw-trust", type=float, default=0.0, help="Stored raw trust score")
    trust_p.add_argument("--employer-id", type=str, default="employer", help="Label for the output")

    # -- salary --------------------------------------------------------------
    salary_p = sub.add_parser("salary", help="Judge a posted salary range against market data")
    salary_p.add_argument("--title", type=str, required=True, help="Job title")
    salary_p.add_argument("--location", type=str, required=True, help="Job location")
    salary_p.add_argument("--min", type=float, required=True, help="Posted minimum")
    salary_p.add_argument("--max", type=float, required=True, help="Posted maximum")
    salary_p.add_argument("--currency", type=str, default="USD", help="Currency code (default: USD)")

    # -- relevance -----------------------------------------------------------
    relevance_p = sub.add_parser("relevance", help="Score a candidate against a job with the configured weights")
    relevance_p.add_argument("--skills", nargs="*", default=[], help="Candidate skills")
    relevance_p.add_argument("--tags", nargs="*", default=[], help="Skills the job requires")
    relevance_p.add_argument("--title", type=str, default="Engineer", help="Job title")
    relevance_p.add_argument("--job-location", action="append", help="Job location (repeatable)")
    relevance_p.add_argument("--candidate-location", type=str, default=None, help="Candidate location")
    relevance_p.add_argument("--salary-min", type=float, default=None, help="Posted salary minimum")
    relevance_p.add_argument("--salary-max", type=float, default=None, help="Posted salary maximum")
    relevance_p.add_argument("--currency", type=str, default="USD", help="Currency code (default: USD)")
    relevance_p.add_argument("--completeness", type=int, default=0, help="Profile completeness percentage")
    relevance_p.add_argument("--experience", type=int, default=0, help="Number of experience entries")
    relevance_p.add_argument("--portfolio", type=int, default=0, help="Number of portfolio items")
    relevance_p.add_argument("--candidate-id", type=str, default="candidate", help="Label for the candidate")
    relevance_p.add_argument("--job-id", type=str, default="job", help="Label for the job")

    # -- proof-task ----------------------------------------------------------
    proof_p = sub.add_parser("proof-task", help="Grade answers to a proof task")
    proof_p.add_argument(
        "task_type",
        nargs="?",
        choices=[t.value for t in ProofTaskType],
        help="Proof task type",
    )
    proof_p.add_argument(
        "--answer",
        action="append",
        metavar="QUESTION=ANSWER",
        help="Answer for one question (repeatable)",
    )
    proof_p.add_argument("--list", action="store_true", help="List available proof tasks")

    # -- init-db -------------------------------------------------------------
    sub.add_parser("init-db", help="Create the marketplace database tables")

    # -- digest --------------------------------------------------------------
    digest_p = sub.add_parser("digest", help="Generate saved-search digests")
    target = digest_p.add_mutually_exclusive_group(required=True)
    target.add_argument("search_id", nargs="?", help="Saved search ID")
    target.add_argument("--due", action="store_true", help="Run every saved search whose schedule is due")

    return parser
