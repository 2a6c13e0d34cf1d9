"""Read-time ranking of books against a user's genre view.

A view is a ranked list of taxonomy tags. Books are scored on the tags they
share with the view:

    total_score = Σ book-side importance of every matched assignment

The view contributes only the *set* of tags, so reordering a view never
reshuffles books that match the same tags. Using the book's own importance
rewards books for which the matched tags are central, not incidental.

Content blocking happens after this, in the caller.
"""

from __future__ import annotations

import math
from typing import Dict, Hashable, List, Literal, Mapping, Optional, Sequence

from scoring_common.metrics import record_fallback, track
from scoring_common.models import BookScore, BookTaxonomyAssignment, ViewTag
from scoring_common.settings import settings as S
from scoring_common.structured_logging import get_logger

from .rank_weight import rank_weight

logger = get_logger(__name__)

Aggregate = Literal["sum", "mean"]


def view_importance(view_tags: Sequence[ViewTag]) -> Dict[int, float]:
    """Map each view taxonomy id to its rank-decayed weight.

    A taxonomy listed twice keeps its best (lowest) rank.
    """
    weights: Dict[int, float] = {}
    for tag in view_tags:
        w = rank_weight(tag.rank)
        if w > weights.get(tag.taxonomy_id, 0.0):
            weights[tag.taxonomy_id] = w
    return weights


def _book_importance(assignment: BookTaxonomyAssignment) -> float:
    value = assignment.importance
    if value is None or not math.isfinite(value):
        record_fallback("importance")
        return S.missing_importance
    return value


def score_books(
    view_tags: Sequence[ViewTag],
    candidates: Mapping[Hashable, Sequence[BookTaxonomyAssignment]],
    limit: Optional[int] = None,
    aggregate: Aggregate = "sum",
) -> List[BookScore]:
    """Return the top *limit* candidates sorted by score, then matching-tag count.

    ``aggregate="mean"`` ranks by the average matched importance instead of
    the sum (discovery ordering). Books with no matching tag are left out.
    """
    if aggregate not in ("sum", "mean"):
        raise ValueError(f"aggregate must be 'sum' or 'mean', got {aggregate!r}")
    if limit is None:
        limit = S.default_result_limit

    with track("score_books"), logger.log_performance(
        "score_books", view_tag_count=len(view_tags), candidate_count=len(candidates)
    ):
        view_weights = view_importance(view_tags)
        if not view_weights:
            return []

        scored: List[BookScore] = []
        for book_id, assignments in candidates.items():
            total = 0.0
            matching = 0
            for assignment in assignments:
                if assignment.taxonomy_id not in view_weights:
                    continue
                total += _book_importance(assignment)
                matching += 1
            if matching == 0:
                continue
            if aggregate == "mean":
                total = total / matching
            scored.append(BookScore(book_id=book_id, total_score=total, matching_count=matching))

        scored.sort(key=lambda s: (s.total_score, s.matching_count), reverse=True)

    logger.debug(
        "Scored books against view",
        extra={"matched_books": len(scored), "limit": limit, "aggregate": aggregate},
    )
    return scored[: max(limit, 0)]
