"""CLI entry point for the job marketplace scoring engine."""

from __future__ import annotations

import sys

from jobmarket_scoring.cli import (
    build_parser,
    handle_digest,
    handle_init_db,
    handle_proof_task,
    handle_relevance,
    handle_salary,
    handle_skills,
    handle_trust,
)
from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.logging import logger, set_level

_HANDLERS = {
    "skills": handle_skills,
    "trust": handle_trust,
    "salary": handle_salary,
    "relevance": handle_relevance,
    "proof-task": handle_proof_task,
    "init-db": handle_init_db,
    "digest": handle_digest,
}

_SERVICE = "jobmarket-scoring"


def _report(error: ActionableError) -> None:
    print(f"Error: {error.error}", file=sys.stderr)
    if error.suggestion:
        print(f"  {error.suggestion}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_level("DEBUG")

    try:
        _HANDLERS[args.command](args)
    except ActionableError as exc:
        logger.debug("Command %s failed: %s", args.command, exc.to_dict())
        _report(exc)
        sys.exit(1)
    except Exception as exc:
        # Anything a handler did not classify is reported in the same form
        error = ActionableError.from_exception(exc, _SERVICE, args.command)
        logger.debug("Command %s crashed: %s", args.command, error.to_dict(), exc_info=True)
        _report(error)
        sys.exit(1)


if __name__ == "__main__":
    main()
