"""
Taxonomy-weighted scoring engine.

Pure functions over plain records: rank-decayed tag importance, genre-view
book ranking, preference-weighted ratings and reader compatibility.
"""

from .rank_weight import rank_weight
from .importance import (
    assign_importance,
    order_by_kind,
    rederive_importance,
    top_taxonomies,
    validate_tag_selection,
)
from .similarity import score_books, view_importance
from .ratings import (
    average_straight_rating,
    average_weighted_rating,
    compatibility_rating,
    criterion_averages,
    straight_rating,
    summarize_ratings,
    weighted_rating,
)
from .compatibility import classify_difference, preference_compatibility
from .errors import InvalidRankError, ScoringEngineError, TagSelectionError

__all__ = [
    "rank_weight",
    "assign_importance",
    "order_by_kind",
    "rederive_importance",
    "top_taxonomies",
    "validate_tag_selection",
    "score_books",
    "view_importance",
    "average_straight_rating",
    "average_weighted_rating",
    "compatibility_rating",
    "criterion_averages",
    "straight_rating",
    "summarize_ratings",
    "weighted_rating",
    "classify_difference",
    "preference_compatibility",
    "InvalidRankError",
    "ScoringEngineError",
    "TagSelectionError",
]
