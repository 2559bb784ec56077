"""Employer trust tier and trust score.

Two operations:

1. **Verification status** — a fixed lookup from the employer's
   verification tier to the four verification dimensions (domain,
   business registry, payment, human review) plus a checklist of the
   dimensions still outstanding, in canonical order.

2. **Trust score** — a bounded additive score in [0, 100]:

   ============================  =====================================
   Term                          Points
   ============================  =====================================
   Verification tier             verified 40, payment 30, business 20,
                                 domain 10, none 0
   Response rate                 ≥90% 30, ≥75% 20, ≥50% 10
   Average response time (days)  ≤2 20, ≤5 15, ≤7 10
   Carry-over                    floor(raw trust input / 10)
   ============================  =====================================

Response times are free text ("2.3 days", "48 hours").  Text without a
recognizable unit parses to :data:`UNPARSEABLE_RESPONSE_DAYS`, which
never earns response-time points — a defined fallback, not an error.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from types import MappingProxyType

from jobmarket_scoring.bounds import clamp
from jobmarket_scoring.models import EmployerAccount, VerificationTier

logger = logging.getLogger(__name__)

UNPARSEABLE_RESPONSE_DAYS = 999.0

MAX_TRUST_SCORE = 100

_DURATION_RE = re.compile(r"(\d+\.?\d*)\s*(day|hour|minute)", re.IGNORECASE)


@dataclass(frozen=True)
class ScoreBand:
    """Points awarded when a measured value clears a threshold.

    Bands are checked in order; the first one whose threshold the
    value satisfies wins.
    """

    threshold: float
    points: int


TIER_POINTS: Mapping[VerificationTier, int] = MappingProxyType({
    VerificationTier.VERIFIED: 40,
    VerificationTier.PAYMENT: 30,
    VerificationTier.BUSINESS: 20,
    VerificationTier.DOMAIN: 10,
    VerificationTier.NONE: 0,
})

# Higher response rate is better: value >= threshold
RESPONSE_RATE_BANDS: tuple[ScoreBand, ...] = (
    ScoreBand(threshold=90, points=30),
    ScoreBand(threshold=75, points=20),
    ScoreBand(threshold=50, points=10),
)

# Faster response is better: value <= threshold (days)
RESPONSE_TIME_BANDS: tuple[ScoreBand, ...] = (
    ScoreBand(threshold=2, points=20),
    ScoreBand(threshold=5, points=15),
    ScoreBand(threshold=7, points=10),
)

# Canonical order of the verification checklist
NEXT_STEP_DOMAIN = "Verify company domain email"
NEXT_STEP_BUSINESS = "Submit business registration documents"
NEXT_STEP_PAYMENT = "Complete payment verification"
NEXT_STEP_REVIEW = "Schedule human review"

# tier -> (domain, business registry, payment, human review)
_TIER_DIMENSIONS: Mapping[VerificationTier, tuple[bool, bool, bool, bool]] = MappingProxyType({
    VerificationTier.VERIFIED: (True, True, True, True),
    VerificationTier.PAYMENT: (True, True, True, False),
    VerificationTier.BUSINESS: (True, True, False, False),
    VerificationTier.DOMAIN: (True, False, False, False),
    VerificationTier.NONE: (False, False, False, False),
})


@dataclass(frozen=True)
class TrustStatus:
    """Derived verification state and trust score for one employer."""

    tier: VerificationTier
    domain_verified: bool
    business_registry_verified: bool
    payment_verified: bool
    human_review_completed: bool
    next_steps: tuple[str, ...]
    score: int
    verified_at: datetime | None = None


@dataclass(frozen=True)
class VerificationBadge:
    """Display label for a verification tier."""

    label: str
    description: str


_BADGES: Mapping[VerificationTier, VerificationBadge] = MappingProxyType({
    VerificationTier.VERIFIED: VerificationBadge(
        "Verified Employer",
        "Fully verified with domain, business registry, payment, and human review",
    ),
    VerificationTier.PAYMENT: VerificationBadge("Payment Verified", "Payment method verified"),
    VerificationTier.BUSINESS: VerificationBadge("Business Verified", "Business registration verified"),
    VerificationTier.DOMAIN: VerificationBadge("Domain Verified", "Company domain email verified"),
    VerificationTier.NONE: VerificationBadge("Unverified", "Verification pending"),
})


def parse_response_time(text: str | None) -> float:
    """Convert a free-text duration to days.

    >>> parse_response_time("2.3 days")
    2.3
    >>> parse_response_time("48 hours")
    2.0
    >>> parse_response_time("soon")
    999.0
    """
    match = _DURATION_RE.search(text or "")
    if not match:
        return UNPARSEABLE_RESPONSE_DAYS
    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit == "day":
        return value
    if unit == "hour":
        return value / 24
    return value / (24 * 60)


class TrustScoreEngine:
    """Derives verification status and a bounded trust score for employers.

    Parameters
    ----------
    tier_points:
        Points per verification tier.
    response_rate_bands:
        Bands over the response-rate percentage (``>=`` threshold).
    response_time_bands:
        Bands over the average response time in days (``<=`` threshold).
    """

    def __init__(
        self,
        *,
        tier_points: Mapping[VerificationTier, int] = TIER_POINTS,
        response_rate_bands: tuple[ScoreBand, ...] = RESPONSE_RATE_BANDS,
        response_time_bands: tuple[ScoreBand, ...] = RESPONSE_TIME_BANDS,
    ) -> None:
        self._tier_points = tier_points
        self._response_rate_bands = response_rate_bands
        self._response_time_bands = response_time_bands

    def derive_verification_status(self, employer: EmployerAccount) -> TrustStatus:
        """Look up the verification dimensions for the employer's tier.

        The returned status carries the employer's trust score.
        """
        tier = VerificationTier.parse(employer.verification_tier)
        domain, business, payment, review = _TIER_DIMENSIONS[tier]

        next_steps = tuple(
            step
            for done, step in (
                (domain, NEXT_STEP_DOMAIN),
                (business, NEXT_STEP_BUSINESS),
                (payment, NEXT_STEP_PAYMENT),
                (review, NEXT_STEP_REVIEW),
            )
            if not done
        )

        status = TrustStatus(
            tier=tier,
            domain_verified=domain,
            business_registry_verified=business,
            payment_verified=payment,
            human_review_completed=review,
            next_steps=next_steps,
            score=0,
            verified_at=employer.verified_at if tier is VerificationTier.VERIFIED else None,
        )
        return replace(status, score=self.trust_score(employer, status))

    def trust_score(self, employer: EmployerAccount, status: TrustStatus) -> int:
        """Compute the additive trust score, clamped to [0, 100]."""
        tier_points = self._tier_points.get(status.tier, 0)

        rate_points = next(
            (b.points for b in self._response_rate_bands if employer.response_rate >= b.threshold),
            0,
        )

        days = parse_response_time(employer.avg_response_time)
        time_points = next(
            (b.points for b in self._response_time_bands if days <= b.threshold),
            0,
        )

        carry_over = math.floor(max(employer.raw_trust_score, 0) / 10)

        total = tier_points + rate_points + time_points + carry_over
        logger.debug(
            "Trust score for %s: tier=%d rate=%d time=%d carry=%d",
            employer.id,
            tier_points,
            rate_points,
            time_points,
            carry_over,
        )
        return int(clamp(total, 0, MAX_TRUST_SCORE))


def verification_badge(tier: VerificationTier | str) -> VerificationBadge:
    """Display label and description for *tier*."""
    return _BADGES[VerificationTier.parse(tier)]


_DEFAULT_ENGINE = TrustScoreEngine()


def derive_verification_status(employer: EmployerAccount) -> TrustStatus:
    """Derive the verification status using the default point tables."""
    return _DEFAULT_ENGINE.derive_verification_status(employer)


def trust_score(employer: EmployerAccount, status: TrustStatus) -> int:
    """Compute the trust score using the default point tables."""
    return _DEFAULT_ENGINE.trust_score(employer, status)
