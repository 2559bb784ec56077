"""Salary fairness analysis.

Compares a posted compensation range against benchmark market data and
produces a :class:`SalaryInsight`: a coarse confidence tier, whether the
range overlaps the market band, an optional cost-of-living adjustment,
an estimated benefits value, and human-readable insights and warnings.

All lookups are pure containment checks on lowercased text against
immutable tables — no network calls, no learned models.  Missing data
degrades to neutral values:

- No benchmark row for the title/location → ``medium`` confidence and an
  informational note; only the range-width check can warn.
- Location with no cost-of-living entry (or a neutral 1.0 entry) → no
  ``location_adjustment``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from jobmarket_scoring.bounds import clamp, round_half_up

logger = logging.getLogger(__name__)


class Confidence(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SalaryBenchmark:
    """One row of market compensation data."""

    role: str
    location: str
    min: float
    max: float
    median: float
    sample_size: int


@dataclass(frozen=True)
class LocationAdjustment:
    """Cost-of-living multiplier applied to the posted range."""

    factor: float
    adjusted_min: int
    adjusted_max: int


@dataclass(frozen=True)
class SalaryInsight:
    """Result of analysing one posted salary range."""

    range_confidence: Confidence
    market_match: bool
    benefits_value_estimate: int
    insights: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    location_adjustment: LocationAdjustment | None = None
    benchmark: SalaryBenchmark | None = None


DEFAULT_BENCHMARKS: tuple[SalaryBenchmark, ...] = (
    SalaryBenchmark(
        role="Senior Product Designer",
        location="San Francisco, CA",
        min=120_000,
        max=180_000,
        median=150_000,
        sample_size=245,
    ),
    SalaryBenchmark(
        role="Senior Frontend Engineer",
        location="San Francisco, CA",
        min=140_000,
        max=200_000,
        median=170_000,
        sample_size=312,
    ),
    SalaryBenchmark(
        role="Product Manager",
        location="New York, NY",
        min=130_000,
        max=190_000,
        median=160_000,
        sample_size=189,
    ),
)

# Checked in order; the first key contained in the location wins.
DEFAULT_LOCATION_FACTORS: tuple[tuple[str, float], ...] = (
    ("san francisco", 1.4),
    ("new york", 1.35),
    ("seattle", 1.2),
    ("boston", 1.15),
    ("austin", 0.95),
    ("remote", 1.0),
)

NEUTRAL_LOCATION_FACTOR = 1.0

# (max - min) / min above this ratio is flagged as too wide
WIDE_RANGE_RATIO = 0.5

BENEFITS_RATIO = 0.25


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format a whole-unit amount for messages.

    >>> format_currency(140000)
    '$140,000'
    >>> format_currency(52000, "EUR")
    'EUR 52,000'
    """
    whole = f"{round_half_up(amount):,}"
    if currency.upper() == "USD":
        return f"${whole}"
    return f"{currency.upper()} {whole}"


class SalaryFairnessAnalyzer:
    """Judges a posted salary range against benchmark market data.

    Parameters
    ----------
    benchmarks:
        Market data rows, searched in order.
    location_factors:
        ``(location substring, multiplier)`` pairs, searched in order.
    """

    def __init__(
        self,
        *,
        benchmarks: tuple[SalaryBenchmark, ...] = DEFAULT_BENCHMARKS,
        location_factors: tuple[tuple[str, float], ...] = DEFAULT_LOCATION_FACTORS,
    ) -> None:
        self._benchmarks = benchmarks
        self._location_factors = location_factors

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(
        self,
        title: str,
        location: str,
        salary_min: float,
        salary_max: float,
        currency: str = "USD",
    ) -> SalaryInsight:
        """Analyse a posted range ``[salary_min, salary_max]``.

        Market comparison against the matched benchmark band:

        - posted range inside the band, or enclosing it → ``high``,
          market match
        - one end inside the band → ``medium``, market match
        - ``salary_max`` below the band minimum → ``low``, warning
        - ``salary_min`` above the band maximum → ``high``, premium insight

        Independently, a range wider than 50% of ``salary_min`` is flagged
        for clarification whether or not a benchmark matched.
        """
        insights: list[str] = []
        warnings: list[str] = []
        confidence = Confidence.MEDIUM
        market_match = False

        benchmark = self.find_benchmark(title, location)
        if benchmark is not None:
            min_inside = benchmark.min <= salary_min <= benchmark.max
            max_inside = benchmark.min <= salary_max <= benchmark.max
            encloses = salary_min <= benchmark.min and salary_max >= benchmark.max

            if (min_inside and max_inside) or encloses:
                market_match = True
                confidence = Confidence.HIGH
                insights.append(
                    f"Salary range aligns with market data ({benchmark.sample_size} data points)"
                )
            elif min_inside or max_inside:
                market_match = True
                confidence = Confidence.MEDIUM
                insights.append(
                    f"Salary range partially overlaps market data ({benchmark.sample_size} data points)"
                )
            elif salary_max < benchmark.min:
                confidence = Confidence.LOW
                warnings.append(
                    f"Maximum salary ({format_currency(salary_max, currency)}) is below "
                    f"market minimum ({format_currency(benchmark.min, currency)})"
                )
            elif salary_min > benchmark.max:
                confidence = Confidence.HIGH
                insights.append("Salary range is above market average - premium opportunity")
        else:
            insights.append("Limited market data for this role/location combination")

        if salary_min > 0:
            width_ratio = (salary_max - salary_min) / salary_min
            if width_ratio > WIDE_RANGE_RATIO:
                warnings.append(
                    f"Salary range is very wide ({round_half_up(width_ratio * 100)}%) "
                    "- request clarification"
                )

        insight = SalaryInsight(
            range_confidence=confidence,
            market_match=market_match,
            benefits_value_estimate=round_half_up((salary_min + salary_max) / 2 * BENEFITS_RATIO),
            insights=insights,
            warnings=warnings,
            location_adjustment=self.location_adjustment(location, salary_min, salary_max),
            benchmark=benchmark,
        )
        logger.debug(
            "Salary analysis for %r in %r: confidence=%s match=%s warnings=%d",
            title,
            location,
            insight.range_confidence,
            insight.market_match,
            len(insight.warnings),
        )
        return insight

    def find_benchmark(self, title: str, location: str) -> SalaryBenchmark | None:
        """Return the first benchmark row matching a title/location pair.

        A row matches when the title contains the first word of the row's
        role and the location contains the city part (before the first
        comma) of the row's location.  Rows are tried in table order.
        """
        normalized_title = title.lower()
        normalized_location = location.lower()
        for row in self._benchmarks:
            role_words = row.role.lower().split()
            city = row.location.lower().split(",")[0].strip()
            if role_words and role_words[0] in normalized_title and city in normalized_location:
                return row
        return None

    def location_adjustment(
        self,
        location: str,
        salary_min: float,
        salary_max: float,
    ) -> LocationAdjustment | None:
        """Cost-of-living adjustment, or ``None`` when the factor is neutral."""
        normalized = location.lower()
        factor = next(
            (f for key, f in self._location_factors if key in normalized),
            NEUTRAL_LOCATION_FACTOR,
        )
        if factor == NEUTRAL_LOCATION_FACTOR:
            return None
        return LocationAdjustment(
            factor=factor,
            adjusted_min=round_half_up(salary_min * factor),
            adjusted_max=round_half_up(salary_max * factor),
        )


def fairness_score(insight: SalaryInsight) -> int:
    """Collapse an insight into a 0–100 fairness score.

    Base 50; +20 for high confidence, −20 for low; +20 for a market
    match; −10 per warning.  Clamped to [0, 100].
    """
    score = 50
    if insight.range_confidence is Confidence.HIGH:
        score += 20
    elif insight.range_confidence is Confidence.LOW:
        score -= 20
    if insight.market_match:
        score += 20
    score -= 10 * len(insight.warnings)
    return int(clamp(score, 0, 100))


_DEFAULT_ANALYZER = SalaryFairnessAnalyzer()


def analyze_salary(
    title: str,
    location: str,
    salary_min: float,
    salary_max: float,
    currency: str = "USD",
) -> SalaryInsight:
    """Analyse a posted range with the built-in benchmark tables."""
    return _DEFAULT_ANALYZER.analyze(title, location, salary_min, salary_max, currency)
