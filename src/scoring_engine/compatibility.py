"""Reading compatibility between two readers' criterion weights.

Compares what two readers say they care about, not how they rated books.
Each criterion difference ``|a - b|`` is already on a 0–1 scale because the
weights are. The overall difference is the mean of those differences weighted
by ``(a + b) / 2``, so criteria both readers care about dominate.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from scoring_common.metrics import track
from scoring_common.models import (
    RATING_CRITERIA,
    CompatibilityResult,
    CriterionCompatibility,
    PreferenceWeights,
    SentimentBand,
)
from scoring_common.structured_logging import get_logger

from .ratings import resolve_weights

logger = get_logger(__name__)

# (inclusive upper bound, band, score)
BAND_LADDER: Tuple[Tuple[float, SentimentBand, int], ...] = (
    (0.02, SentimentBand.OVERWHELMINGLY_COMPATIBLE, 3),
    (0.05, SentimentBand.VERY_COMPATIBLE, 2),
    (0.10, SentimentBand.MOSTLY_COMPATIBLE, 1),
    (0.20, SentimentBand.MIXED, 0),
    (0.35, SentimentBand.MOSTLY_INCOMPATIBLE, -1),
    (0.40, SentimentBand.NOT_COMPATIBLE, -2),
)
_WORST = (SentimentBand.OVERWHELMINGLY_NOT_COMPATIBLE, -3)


def classify_difference(difference: float) -> Tuple[SentimentBand, int]:
    """Return the band and the -3..+3 score for a normalised difference."""
    for upper, band, score in BAND_LADDER:
        if difference <= upper:
            return band, score
    return _WORST


def preference_compatibility(
    weights_a: PreferenceWeights,
    weights_b: PreferenceWeights,
    defaults: Optional[Mapping[str, float]] = None,
) -> CompatibilityResult:
    """Classify how closely two readers weight the rating criteria.

    Both vectors must already exist; callers materialise the system defaults
    for readers without stored preferences.
    """
    with track("preference_compatibility"):
        a = resolve_weights(weights_a, defaults)
        b = resolve_weights(weights_b, defaults)

        per_criterion: Dict[str, CriterionCompatibility] = {}
        total_weighted_diff = 0.0
        total_weight = 0.0
        for criterion in RATING_CRITERIA:
            diff = abs(a[criterion] - b[criterion])
            band, _ = classify_difference(diff)
            per_criterion[criterion] = CriterionCompatibility(band=band, difference=diff, normalized=diff)

            criterion_weight = (a[criterion] + b[criterion]) / 2
            total_weighted_diff += diff * criterion_weight
            total_weight += criterion_weight

        overall_normalized = total_weighted_diff / total_weight if total_weight > 0 else 0.0
        overall, score = classify_difference(overall_normalized)

    logger.debug(
        "Computed preference compatibility",
        extra={
            "user_a": weights_a.user_id,
            "user_b": weights_b.user_id,
            "normalized_difference": overall_normalized,
            "score": score,
        },
    )
    return CompatibilityResult(
        overall=overall,
        score=score,
        normalized_difference=overall_normalized,
        per_criterion=per_criterion,
    )
