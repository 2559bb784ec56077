"""Configuration loading and validation.

Loads ``settings.toml`` and validates all fields at startup, before any
database session is opened or digests are written.  Bad weights caught
here never reach a scored job.

The validated config is exposed as a :class:`Settings` dataclass with
typed fields for each section: ``database``, ``relevance``, ``digest``,
and ``logging``.  Every section is optional; only the file itself must
exist.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.scoring.relevance import RelevanceWeights

# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass
class DatabaseConfig:
    """Persistence settings from ``[database]``."""

    url: str = "sqlite:///data/marketplace.db"


@dataclass
class DigestConfig:
    """Keyword and scoring limits from ``[digest]``."""

    max_keywords: int = 10
    max_rows: int = 50
    base_score: int = 40
    per_keyword: int = 12
    score_cap: int = 95
    no_keyword_score: int = 50


@dataclass
class LoggingConfig:
    """Log output settings from ``[logging]``."""

    log_dir: str = "data/logs"
    level: str = "INFO"


@dataclass
class Settings:
    """Top-level validated configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    relevance: RelevanceWeights = field(default_factory=RelevanceWeights)
    digest: DigestConfig = field(default_factory=DigestConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Default settings path
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Loading and validation
# ---------------------------------------------------------------------------


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load and validate settings from a TOML file.

    Raises :class:`~jobmarket_scoring.errors.ActionableError`:
      - CONFIG if the file is missing or a section is not a table
      - VALIDATION if field values are out of range
      - PARSE if the TOML is malformed

    Returns a fully validated :class:`Settings` instance.
    """
    filepath = Path(path)
    if not filepath.exists():
        raise ActionableError.config(
            field_name="settings_path",
            reason=f"Settings file not found: {filepath}",
            suggestion=f"Create {filepath} or pass --config with the path to your settings",
        )

    raw_text = filepath.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError as exc:
        raise ActionableError.parse(
            source=str(filepath),
            raw_error=str(exc),
            suggestion=f"Fix TOML syntax in {filepath}",
        ) from None

    return _validate(data, filepath)


def _validate(data: dict[str, object], filepath: Path) -> Settings:
    """Validate raw TOML data and return a Settings instance."""

    # -- database section ----------------------------------------------------
    database_data = _optional_section(data, "database", filepath)
    url = str(database_data.get("url", DatabaseConfig.url)).strip()
    if not url:
        raise ActionableError.validation(
            field_name="database.url",
            reason="must not be empty",
            suggestion="Set [database].url to an SQLAlchemy URL such as sqlite:///data/marketplace.db",
        )
    database = DatabaseConfig(url=url)

    # -- relevance section ---------------------------------------------------
    relevance_data = _optional_section(data, "relevance", filepath)
    defaults = RelevanceWeights()
    relevance = RelevanceWeights(
        skills=_float(relevance_data, "skills", defaults.skills, "relevance"),
        location=_float(relevance_data, "location", defaults.location, "relevance"),
        salary=_float(relevance_data, "salary", defaults.salary, "relevance"),
        proof=_float(relevance_data, "proof", defaults.proof, "relevance"),
        response=_float(relevance_data, "response", defaults.response, "relevance"),
        experience=_float(relevance_data, "experience", defaults.experience, "relevance"),
    )
    relevance.validate()

    # -- digest section ------------------------------------------------------
    digest_data = _optional_section(data, "digest", filepath)
    digest = DigestConfig(
        max_keywords=_int(digest_data, "max_keywords", DigestConfig.max_keywords, "digest"),
        max_rows=_int(digest_data, "max_rows", DigestConfig.max_rows, "digest"),
        base_score=_int(digest_data, "base_score", DigestConfig.base_score, "digest"),
        per_keyword=_int(digest_data, "per_keyword", DigestConfig.per_keyword, "digest"),
        score_cap=_int(digest_data, "score_cap", DigestConfig.score_cap, "digest"),
        no_keyword_score=_int(digest_data, "no_keyword_score", DigestConfig.no_keyword_score, "digest"),
    )

    for name in ("max_keywords", "max_rows"):
        value = getattr(digest, name)
        if value < 1:
            raise ActionableError.validation(
                field_name=f"digest.{name}",
                reason=f"is {value} — must be >= 1",
                suggestion=f"Set [digest].{name} to a positive integer",
            )

    for name in ("base_score", "per_keyword", "score_cap", "no_keyword_score"):
        value = getattr(digest, name)
        if not 0 <= value <= 100:
            raise ActionableError.validation(
                field_name=f"digest.{name}",
                reason=f"is {value} — must be between 0 and 100",
                suggestion=f"Set [digest].{name} to a value between 0 and 100",
            )

    if digest.base_score > digest.score_cap:
        raise ActionableError.validation(
            field_name="digest.base_score",
            reason=f"is {digest.base_score} — must not exceed score_cap ({digest.score_cap})",
            suggestion="Lower [digest].base_score or raise [digest].score_cap",
        )

    # -- logging section -----------------------------------------------------
    logging_data = _optional_section(data, "logging", filepath)
    level = str(logging_data.get("level", LoggingConfig.level)).upper()
    if level not in _LOG_LEVELS:
        raise ActionableError.validation(
            field_name="logging.level",
            reason=f"'{level}' is not a log level",
            suggestion=f"Set [logging].level to one of: {', '.join(_LOG_LEVELS)}",
        )
    logging_config = LoggingConfig(
        log_dir=str(logging_data.get("log_dir", LoggingConfig.log_dir)),
        level=level,
    )

    return Settings(
        database=database,
        relevance=relevance,
        digest=digest,
        logging=logging_config,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _optional_section(data: dict[str, object], name: str, filepath: Path) -> dict[str, object]:
    """Return a top-level section (empty when absent), or raise CONFIG error."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ActionableError.config(
            field_name=name,
            reason=f"[{name}] in {filepath} must be a table, not {type(section).__name__}",
            suggestion=f"Define [{name}] as a TOML table",
        )
    return section


def _float(section: dict[str, object], key: str, default: float, section_name: str) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ActionableError.validation(
            field_name=f"{section_name}.{key}",
            reason=f"'{value}' is not a number",
        )
    return float(value)


def _int(section: dict[str, object], key: str, default: int, section_name: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ActionableError.validation(
            field_name=f"{section_name}.{key}",
            reason=f"'{value}' is not an integer",
        )
    return value
