"""Scoring policy: lookback window, confidence bands, and the transcript boost.

The bands are hand-tuned lookup tables rather than a decay curve so each
band stays stable and explainable on a conversion report.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

LOOKBACK = timedelta(hours=24)

TEMPORAL_CANDIDATE_LIMIT = 10

CONFIDENCE_CEILING = 0.98


@dataclass(frozen=True)
class ConfidenceBand:
    """Confidence assigned when elapsed hours fall below ``under_hours``.

    ``under_hours=None`` is the open-ended last band.
    """

    under_hours: float | None
    confidence: float


IDENTITY_BANDS: tuple[ConfidenceBand, ...] = (
    ConfidenceBand(under_hours=1, confidence=0.95),
    ConfidenceBand(under_hours=6, confidence=0.85),
    ConfidenceBand(under_hours=12, confidence=0.75),
    ConfidenceBand(under_hours=None, confidence=0.70),
)
"""Email-match confidence by hours between the newest matching lead and the order."""

TEMPORAL_BANDS: tuple[ConfidenceBand, ...] = (
    ConfidenceBand(under_hours=2, confidence=0.50),
    ConfidenceBand(under_hours=6, confidence=0.40),
    ConfidenceBand(under_hours=None, confidence=0.30),
)
"""Time-only confidence by hours between the conversation start and the order."""

STRONG_MENTION_RATIO = 0.5
STRONG_MENTION_BOOST = 0.10
WEAK_MENTION_BOOST = 0.05


@dataclass(frozen=True)
class LookbackWindow:
    """Closed interval ``[start, end]`` searched for leads and conversations."""

    start: datetime
    end: datetime

    @classmethod
    def for_order(cls, order_time: datetime) -> "LookbackWindow":
        return cls(start=order_time - LOOKBACK, end=order_time)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def hours_between(earlier: datetime, later: datetime) -> float:
    """Elapsed hours from ``earlier`` to ``later``."""
    return (later - earlier).total_seconds() / 3600


def band_confidence(bands: tuple[ConfidenceBand, ...], hours: float) -> float:
    """Look up the confidence of the first band whose bound exceeds ``hours``."""
    for band in bands:
        if band.under_hours is None or hours < band.under_hours:
            return band.confidence
    raise ValueError("band table must end with an open-ended band")


def mention_boost(confidence: float, mentioned: int, total: int) -> float:
    """Raise confidence for product mentions, clamped to the ceiling.

    Returns ``confidence`` unchanged when nothing was mentioned or there
    is nothing to mention.
    """
    if total <= 0 or mentioned <= 0:
        return confidence
    ratio = mentioned / total
    boost = STRONG_MENTION_BOOST if ratio >= STRONG_MENTION_RATIO else WEAK_MENTION_BOOST
    return min(round(confidence + boost, 4), CONFIDENCE_CEILING)
