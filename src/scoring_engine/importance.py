"""Write-time rank and importance assignment for a book's taxonomy tags.

An editor submits the book's tags as one ordered list (genres, subgenres,
themes, tropes). Every save replaces the book's whole assignment set, so ranks
always run ``1..N`` without gaps or duplicates and importance is always the
rank weight of the stored rank.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from scoring_common.models import BookTaxonomyAssignment, TaxonomyKind, TaxonomyRef
from scoring_common.settings import settings as S
from scoring_common.structured_logging import get_logger

from .errors import TagSelectionError
from .rank_weight import rank_weight

logger = get_logger(__name__)

# Maximum number of tags per kind on a single book
KIND_LIMITS: Dict[TaxonomyKind, int] = {
    TaxonomyKind.GENRE: 2,
    TaxonomyKind.SUBGENRE: 5,
    TaxonomyKind.THEME: 6,
    TaxonomyKind.TROPE: 7,
}

# Unknown kinds sort after every known one
_UNKNOWN_KIND_ORDER = len(TaxonomyKind)


def _kind_order(kind: Optional[TaxonomyKind]) -> int:
    return kind.order if kind is not None else _UNKNOWN_KIND_ORDER


def order_by_kind(tags: Iterable[TaxonomyRef]) -> List[TaxonomyRef]:
    """Stable-sort *tags* into ``TaxonomyKind`` order, keeping order within a kind."""
    return sorted(tags, key=lambda t: t.kind.order)


def assign_importance(
    ordered_tags: Sequence[TaxonomyRef],
    book_id: Optional[int] = None,
) -> List[BookTaxonomyAssignment]:
    """Rank *ordered_tags* as given and attach the rank weight of each position.

    The list is trusted: callers validate cardinality (see
    ``validate_tag_selection``) and ordering beforehand. Tags that are out of
    kind order are still ranked as submitted, with a warning.
    """
    kinds = [t.kind.order for t in ordered_tags]
    if kinds != sorted(kinds):
        logger.warning(
            "Taxonomy tags are not in kind order; ranking them as submitted",
            extra={"book_id": book_id, "kinds": [t.kind.value for t in ordered_tags]},
        )

    assignments = [
        BookTaxonomyAssignment(
            book_id=book_id,
            taxonomy_id=tag.taxonomy_id,
            kind=tag.kind,
            rank=index + 1,
            importance=rank_weight(index + 1),
        )
        for index, tag in enumerate(ordered_tags)
    ]
    logger.debug("Assigned taxonomy importance", extra={"book_id": book_id, "tag_count": len(assignments)})
    return assignments


def rederive_importance(assignments: Iterable[BookTaxonomyAssignment]) -> List[BookTaxonomyAssignment]:
    """Recompute importance from each stored rank."""
    return [a.model_copy(update={"importance": rank_weight(a.rank)}) for a in assignments]


def validate_tag_selection(tags: Sequence[TaxonomyRef], min_total: Optional[int] = None) -> None:
    """Enforce the editor-side limits on a book's tag list.

    Raises ``TagSelectionError`` naming the first violated limit.
    """
    if min_total is None:
        min_total = S.min_total_tags

    counts = Counter(t.kind for t in tags)
    for kind, limit in KIND_LIMITS.items():
        if counts[kind] > limit:
            raise TagSelectionError(
                f"At most {limit} {kind.value} tags are allowed, got {counts[kind]}",
                kind=kind.value,
                count=counts[kind],
                limit=limit,
            )

    if len(tags) < min_total:
        raise TagSelectionError(
            f"At least {min_total} tags are required, got {len(tags)}",
            count=len(tags),
            limit=min_total,
        )


def top_taxonomies(assignments: Iterable[BookTaxonomyAssignment], limit: int = 5) -> List[BookTaxonomyAssignment]:
    """The *limit* most prominent tags for display: by kind first, then rank."""
    ranked = sorted(assignments, key=lambda a: (_kind_order(a.kind), a.rank))
    return ranked[:limit]
