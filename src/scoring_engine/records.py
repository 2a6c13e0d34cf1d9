"""Conversion between storage rows and engine models.

Rows may be plain mappings (raw driver results, JSON) or ORM instances from
``scoring_common.models``. Decimal columns arrive as ``Decimal`` or string and
are parsed here, so the scoring functions only ever see floats. A value that
does not parse falls back to a default instead of failing the request.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from scoring_common.metrics import record_fallback
from scoring_common.models import (
    RATING_CRITERIA,
    BookGenreTaxonomy,
    BookTaxonomyAssignment,
    PreferenceWeights,
    RatingVector,
    TaxonomyKind,
    ViewTag,
)
import scoring_common.weights as W
from scoring_common.structured_logging import get_logger

logger = get_logger(__name__)

# Fixed precision used when writing importance back to a decimal column
IMPORTANCE_PLACES = 6


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def parse_decimal(value: Any, fallback: Optional[float], field: str = "decimal") -> Optional[float]:
    """Parse a stored decimal (str, Decimal, int, float) into a finite float.

    Missing, unparsable and non-finite values return *fallback*.
    """
    if value is None or value == "":
        return fallback
    try:
        parsed = float(Decimal(str(value).strip()) if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        parsed = math.nan
    if not math.isfinite(parsed):
        record_fallback(field)
        logger.debug("Unparsable decimal replaced by fallback", extra={"field": field, "value": str(value), "fallback": fallback})
        return fallback
    return parsed


def _parse_kind(value: Any) -> Optional[TaxonomyKind]:
    if value is None:
        return None
    try:
        return TaxonomyKind(value)
    except ValueError:
        logger.debug("Unknown taxonomy kind ignored", extra={"kind": str(value)})
        return None


def parse_assignment(row: Any) -> BookTaxonomyAssignment:
    """Read a ``book_genre_taxonomies`` row; bad importance is left as ``None``."""
    return BookTaxonomyAssignment(
        book_id=_field(row, "book_id"),
        taxonomy_id=int(_field(row, "taxonomy_id")),
        kind=_parse_kind(_field(row, "type") or _field(row, "kind")),
        rank=int(_field(row, "rank")),
        importance=parse_decimal(_field(row, "importance"), None, field="importance"),
    )


def parse_view_tag(row: Any) -> ViewTag:
    return ViewTag(
        view_id=_field(row, "view_id"),
        taxonomy_id=int(_field(row, "taxonomy_id")),
        kind=_parse_kind(_field(row, "type") or _field(row, "kind")),
        rank=int(_field(row, "rank")),
    )


def group_assignments(rows: Iterable[Any]) -> Dict[Any, List[BookTaxonomyAssignment]]:
    """Group assignment rows by book id, ready for ``score_books``."""
    grouped: Dict[Any, List[BookTaxonomyAssignment]] = {}
    for row in rows:
        assignment = parse_assignment(row)
        grouped.setdefault(assignment.book_id, []).append(assignment)
    return grouped


def parse_rating(row: Any) -> RatingVector:
    values = {}
    for criterion in RATING_CRITERIA:
        value = parse_decimal(_field(row, criterion), 0.0, field=f"rating.{criterion}")
        # anything outside the thumbs range counts as unrated
        values[criterion] = value if -1 <= value <= 1 else 0.0
    return RatingVector(user_id=_field(row, "user_id"), book_id=_field(row, "book_id"), **values)


def parse_preferences(row: Any, defaults: Optional[Mapping[str, float]] = None) -> PreferenceWeights:
    """Read a ``rating_preferences`` row, falling back per criterion to *defaults*."""
    if defaults is None:
        defaults = W.get()
    return PreferenceWeights(
        user_id=_field(row, "user_id"),
        **{
            c: parse_decimal(_field(row, c), defaults[c], field=f"weight.{c}")
            for c in RATING_CRITERIA
        },
    )


def assignment_rows(book_id: int, assignments: Iterable[BookTaxonomyAssignment]) -> List[BookGenreTaxonomy]:
    """Build the replacement ``book_genre_taxonomies`` rows for one book.

    The caller deletes the book's previous rows and adds these in the same
    transaction.
    """
    quantum = Decimal(1).scaleb(-IMPORTANCE_PLACES)
    return [
        BookGenreTaxonomy(
            book_id=book_id,
            taxonomy_id=a.taxonomy_id,
            rank=a.rank,
            importance=Decimal(repr(a.importance)).quantize(quantum) if a.importance is not None else None,
        )
        for a in assignments
    ]
