"""Preference-weighted rating aggregation.

A rating is five signed thumbs (-1, 0, 1). Rated criteria are moved onto the
1–5 display scale (thumbs up = 5, thumbs down = 1) and averaged with the
reader's criterion weights; unrated criteria are left out of both sums.
"""

from __future__ import annotations

import math
from typing import Dict, Mapping, Optional, Sequence

import scoring_common.weights as W
from scoring_common.metrics import record_fallback, track
from scoring_common.models import RATING_CRITERIA, PreferenceWeights, RatingSummary, RatingVector

# Neutral midpoint of the display scale and the factor stretching 1..5 to -3..+3
NEUTRAL_RATING = 3.0
COMPATIBILITY_SCALE = 1.5


def _to_display_scale(value: float) -> float:
    # 1 -> 5, -1 -> 1; averaged values land in between
    return NEUTRAL_RATING + 2.0 * value


def resolve_weights(
    weights: PreferenceWeights | Mapping[str, float],
    defaults: Optional[PreferenceWeights | Mapping[str, float]] = None,
) -> Dict[str, float]:
    """Return criterion -> weight with non-finite entries replaced by *defaults*.

    Finite weights are clamped into [0, 1].
    """
    if defaults is None:
        defaults = W.get()
    elif isinstance(defaults, PreferenceWeights):
        defaults = defaults.as_dict()
    if isinstance(weights, PreferenceWeights):
        weights = weights.as_dict()

    resolved: Dict[str, float] = {}
    for criterion in RATING_CRITERIA:
        value = weights.get(criterion)
        if value is None or not math.isfinite(value):
            record_fallback(f"weight.{criterion}")
            value = defaults[criterion]
        resolved[criterion] = min(max(value, 0.0), 1.0)
    return resolved


def weighted_rating(
    rating: RatingVector,
    weights: PreferenceWeights | Mapping[str, float],
    defaults: Optional[Mapping[str, float]] = None,
) -> float:
    """Weighted 1–5 rating, or ``0`` when no criterion was rated."""
    resolved = resolve_weights(weights, defaults)
    total_weighted_rating = 0.0
    total_weight = 0.0
    for criterion in RATING_CRITERIA:
        value = getattr(rating, criterion)
        if value == 0:
            continue
        total_weighted_rating += _to_display_scale(value) * resolved[criterion]
        total_weight += resolved[criterion]

    if total_weight == 0:
        return 0.0
    return total_weighted_rating / total_weight


def compatibility_rating(
    rating: RatingVector,
    weights: PreferenceWeights | Mapping[str, float],
    defaults: Optional[Mapping[str, float]] = None,
) -> float:
    """Map the weighted rating onto -3..+3 around the neutral midpoint.

    An unrated vector has no sentiment and scores 0.
    """
    overall = weighted_rating(rating, weights, defaults)
    if overall == 0:
        return 0.0
    return (overall - NEUTRAL_RATING) * COMPATIBILITY_SCALE


def straight_rating(rating: RatingVector) -> float:
    """Unweighted 1–5 mean of the rated criteria, ``0`` when none is rated."""
    return weighted_rating(rating, {c: 1.0 for c in RATING_CRITERIA})


def criterion_averages(ratings: Sequence[RatingVector]) -> Optional[RatingVector]:
    """Per-criterion mean of the signed values across *ratings*."""
    if not ratings:
        return None
    return RatingVector(**{
        c: sum(getattr(r, c) for r in ratings) / len(ratings)
        for c in RATING_CRITERIA
    })


def average_weighted_rating(
    ratings: Sequence[RatingVector],
    weights: PreferenceWeights | Mapping[str, float],
    defaults: Optional[Mapping[str, float]] = None,
) -> float:
    if not ratings:
        return 0.0
    return sum(weighted_rating(r, weights, defaults) for r in ratings) / len(ratings)


def average_straight_rating(ratings: Sequence[RatingVector]) -> float:
    if not ratings:
        return 0.0
    return sum(straight_rating(r) for r in ratings) / len(ratings)


def summarize_ratings(
    ratings: Sequence[RatingVector],
    weights: PreferenceWeights | Mapping[str, float],
    defaults: Optional[Mapping[str, float]] = None,
) -> Optional[RatingSummary]:
    """Dashboard summary of many ratings of one book or author.

    ``overall`` and ``compatibility`` are computed from the per-criterion
    averages seen through the viewer's weights; ``weighted_average`` and
    ``straight_average`` average the individual ratings.
    """
    if not ratings:
        return None
    with track("summarize_ratings"):
        averages = criterion_averages(ratings)
        return RatingSummary(
            count=len(ratings),
            weighted_average=average_weighted_rating(ratings, weights, defaults),
            straight_average=average_straight_rating(ratings),
            criteria=averages,
            overall=weighted_rating(averages, weights, defaults),
            compatibility=compatibility_rating(averages, weights, defaults),
        )
