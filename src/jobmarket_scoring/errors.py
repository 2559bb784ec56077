"""Errors raised by the marketplace scoring engine.

Scorers never raise for gaps in business data: a missing location, an
unknown benchmark or an unreadable response time each resolve to a
documented fallback score.  An :class:`ActionableError` is raised only
when the operator has to do something about it:

- ``CONFIG`` / ``PARSE``: settings.toml (or CLI input) needs editing
- ``VALIDATION``: a value is out of range (weights, limits, task types)
- ``UPSTREAM``: the marketplace database could not be read or written
- ``UNEXPECTED``: anything else that escaped to the command line

Each error carries a one-line ``suggestion`` for the operator, numbered
``troubleshooting`` steps, and ``ai_guidance`` for an agent driving the
CLI.  :meth:`ActionableError.to_dict` renders all of it for the debug log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ErrorType(StrEnum):
    """How to recover, not where the failure started."""

    CONFIG = "config"
    PARSE = "parse"
    UPSTREAM = "upstream"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class AIGuidance:
    """What an agent should try next: an action, a command, things to check."""

    action_required: str
    command: str | None = None
    checks: list[str] | None = None
    steps: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "action_required": self.action_required,
                "command": self.command,
                "checks": self.checks,
                "steps": self.steps,
            }
        )


@dataclass(frozen=True)
class Troubleshooting:
    """Numbered recovery steps printed for the operator."""

    steps: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"steps": list(self.steps)}


# Lower-cased fragments that mark a failure as a storage or connectivity problem
_UPSTREAM_MARKERS = (
    "database is locked",
    "no such table",
    "unable to open",
    "operationalerror",
    "timeout",
    "timed out",
    "connection refused",
)

_INIT_DB_COMMAND = "python -m jobmarket_scoring init-db"


@dataclass
class ActionableError(Exception):
    """A failure the operator can act on.

    Build instances through the classmethods (``config``, ``parse``,
    ``upstream``, ``validation``, ``unexpected``, ``from_exception``);
    each fills in the guidance for its recovery path.  A ``suggestion``
    passed by the caller always replaces the generated one.
    """

    error: str
    error_type: ErrorType
    service: str

    success: bool = field(default=False, init=False)
    suggestion: str | None = None
    ai_guidance: AIGuidance | None = None
    troubleshooting: Troubleshooting | None = None
    context: dict[str, Any] | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def __post_init__(self) -> None:
        super().__init__(self.error)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; unset fields are left out."""
        return _compact(
            {
                "success": self.success,
                "error": self.error,
                "error_type": self.error_type.value,
                "service": self.service,
                "timestamp": self.timestamp,
                "suggestion": self.suggestion,
                "ai_guidance": self.ai_guidance.to_dict() if self.ai_guidance else None,
                "troubleshooting": self.troubleshooting.to_dict() if self.troubleshooting else None,
                "context": self.context,
            }
        )

    # ------------------------------------------------------------------
    # Settings and input
    # ------------------------------------------------------------------

    @classmethod
    def config(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """settings.toml is missing, or a section has the wrong shape."""
        return cls(
            error=f"Configuration error — {field_name}: {reason}",
            error_type=ErrorType.CONFIG,
            service="settings.toml",
            suggestion=suggestion or f"Fix '{field_name}' in config/settings.toml",
            ai_guidance=AIGuidance(
                action_required=f"Edit '{field_name}' in the settings file passed with --config",
                checks=["Does the settings file exist?", f"Is '{field_name}' a TOML table or value of the right type?"],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    "1. Open the settings file (default config/settings.toml)",
                    f"2. Fix '{field_name}': {reason}",
                    "3. Re-run the command",
                ]
            ),
        )

    @classmethod
    def parse(
        cls,
        source: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Input that could not be read: settings TOML, ``--answer`` pairs."""
        return cls(
            error=f"Could not parse {source}: {raw_error}",
            error_type=ErrorType.PARSE,
            service=source,
            suggestion=suggestion or f"Fix the syntax of {source}",
            ai_guidance=AIGuidance(action_required=f"Correct the syntax of {source}"),
            troubleshooting=Troubleshooting(
                steps=[f"1. Find the problem in {source}: {raw_error}", "2. Fix it and re-run"]
            ),
        )

    @classmethod
    def validation(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """A value outside its allowed range: weights, digest limits, task types."""
        return cls(
            error=f"Validation error — {field_name}: {reason}",
            error_type=ErrorType.VALIDATION,
            service="validation",
            suggestion=suggestion or f"Fix '{field_name}': {reason}",
            ai_guidance=AIGuidance(action_required=f"Supply a valid value for '{field_name}'"),
            troubleshooting=Troubleshooting(
                steps=[f"1. '{field_name}' {reason}", "2. Correct the value and retry"]
            ),
        )

    # ------------------------------------------------------------------
    # Marketplace database
    # ------------------------------------------------------------------

    @classmethod
    def upstream(
        cls,
        resource: str,
        operation: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """The marketplace database could not supply data or commit a write."""
        return cls(
            error=f"Upstream data unavailable — {resource} during {operation}: {raw_error}",
            error_type=ErrorType.UPSTREAM,
            service=resource,
            suggestion=suggestion or f"Check that the database holding '{resource}' exists and is initialised",
            ai_guidance=AIGuidance(
                action_required=f"Make the '{resource}' table readable, then retry {operation}",
                command=_INIT_DB_COMMAND,
                checks=[
                    "Does [database].url point at the intended database?",
                    f"Has init-db created the '{resource}' table?",
                    "Is another process holding a write lock?",
                ],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    "1. Check [database].url in the settings file",
                    f"2. Run: {_INIT_DB_COMMAND}",
                    f"3. Retry {operation}",
                ]
            ),
        )

    # ------------------------------------------------------------------
    # Everything else
    # ------------------------------------------------------------------

    @classmethod
    def unexpected(
        cls,
        service: str,
        operation: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """A failure with no known recovery path."""
        return cls(
            error=f"Unexpected error in {service} during {operation}: {raw_error}",
            error_type=ErrorType.UNEXPECTED,
            service=service,
            suggestion=suggestion or "Re-run with --verbose and report the log output",
            ai_guidance=AIGuidance(
                action_required="Collect the debug log and escalate",
                checks=[f"Does '{operation}' fail again with --verbose?"],
            ),
        )

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        service: str,
        operation: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Classify a foreign exception: storage or connectivity trouble is
        ``UPSTREAM``, anything else ``UNEXPECTED``.  The raw message is kept.
        """
        raw_error = str(error) or type(error).__name__
        lowered = f"{type(error).__name__} {raw_error}".lower()
        if isinstance(error, (TimeoutError, ConnectionError)) or any(
            marker in lowered for marker in _UPSTREAM_MARKERS
        ):
            return cls.upstream(service, operation, raw_error, suggestion=suggestion)
        return cls.unexpected(service, operation, raw_error, suggestion=suggestion)
