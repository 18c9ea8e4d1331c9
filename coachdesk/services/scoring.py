"""Weighted KPI scoring.

Turns a list of per-KPI ``(kpi_type, raw_score, target, weight)`` entries into
a single overall rating on a 1–5 scale:

* each KPI is normalised against its target (or against 5 for ratings) and
  capped at 1.2, so over-performance earns at most 120% credit;
* normalised values are averaged using the weights of the KPIs that carry a
  positive weight;
* the 0–1 average is mapped linearly onto 1–5 (0 -> 1, 1.0 -> 5) and clamped.

Everything here is pure: no I/O, no database access.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Optional, Union


class KpiType(str, Enum):
    PERCENTAGE = "Percentage"
    RATING_1_TO_5 = "Rating1to5"
    TIME = "Time"
    CURRENCY = "Currency"


# Older data labels ratings the way the scoring form displayed them
KPI_TYPE_ALIASES = {
    "Rating (1-5)": KpiType.RATING_1_TO_5,
}

TARGET_BASED_TYPES = {KpiType.PERCENTAGE, KpiType.CURRENCY}

OVERPERFORMANCE_CAP = 1.2
MIN_RATING = 1.0
MAX_RATING = 5.0
RATING_DECIMALS = 2


@dataclass(frozen=True)
class ScoringEntry:
    kpi_type: Union[KpiType, str]
    raw_score: Optional[float] = None
    target: Optional[float] = None
    weight: Optional[float] = None


def parse_kpi_type(value: Union[KpiType, str, None]) -> Optional[KpiType]:
    """Return the matching ``KpiType``, or ``None`` for unknown labels."""
    if isinstance(value, KpiType):
        return value
    if value is None:
        return None
    if value in KPI_TYPE_ALIASES:
        return KPI_TYPE_ALIASES[value]
    try:
        return KpiType(value)
    except ValueError:
        return None


def normalize_kpi(kpi_type: Union[KpiType, str], raw_score: float, target: float) -> float:
    """Normalise one KPI to a 0–1.2 scale.

    Percentage and Currency KPIs are measured against their target (a zero
    or negative target gives 0). Ratings are divided by 5. Any other type,
    including ``Time``, contributes 0. There is no lower clamp: a negative
    score stays negative and pulls the average down.
    """
    parsed = parse_kpi_type(kpi_type)

    if parsed in TARGET_BASED_TYPES:
        normalized = raw_score / target if target > 0 else 0.0
    elif parsed is KpiType.RATING_1_TO_5:
        normalized = raw_score / 5
    else:
        normalized = 0.0

    return min(normalized, OVERPERFORMANCE_CAP)


def weighted_average(entries: Iterable[ScoringEntry]) -> Optional[float]:
    """Weighted mean of the normalised scores, or ``None`` if no weight is positive.

    Missing values count as 0. Unrecognised KPI types still add their weight
    to the denominator. Infinite or NaN inputs raise ``ValueError``.
    """
    total_weighted_score = 0.0
    total_weight = 0.0

    for entry in entries:
        weight = float(entry.weight or 0)
        if weight <= 0:
            continue
        raw_score, target = float(entry.raw_score or 0), float(entry.target or 0)
        if not all(math.isfinite(v) for v in (weight, raw_score, target)):
            raise ValueError("KPI scores, targets and weights must be finite numbers")
        normalized = normalize_kpi(entry.kpi_type, raw_score, target)
        total_weighted_score += normalized * weight
        total_weight += weight

    if total_weight == 0:
        return None
    return total_weighted_score / total_weight


def round_half_up(value: float, decimals: int = RATING_DECIMALS) -> float:
    """Round halves away from zero, working on the exact binary value of ``value``.

    ``round()`` sends ties to the even digit, so 1.625 would become 1.62.
    """
    step = Decimal(1).scaleb(-decimals)
    return float(Decimal(value).quantize(step, rounding=ROUND_HALF_UP))


def rating_from_average(average: float) -> float:
    """Map a 0–1.2 weighted average onto the 1–5 rating scale."""
    rating = average * 4 + 1
    return round_half_up(min(MAX_RATING, max(MIN_RATING, rating)))


def compute_overall_rating(entries: Iterable[ScoringEntry]) -> Optional[float]:
    """Overall 1–5 rating for a scoring session.

    Returns ``None`` when no entry carries a positive weight; callers must
    reject such a submission instead of storing a rating.
    """
    average = weighted_average(entries)
    if average is None:
        return None
    return rating_from_average(average)
