import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from scoring_common.models import PreferenceWeights, RatingVector, TaxonomyRef
from scoring_common.structured_logging import get_logger, log_error_with_context, set_request_context
import scoring_common.weights as W

from .compatibility import preference_compatibility
from .errors import ScoringEngineError
from .importance import assign_importance
from .ratings import compatibility_rating, weighted_rating
from .records import parse_assignment, parse_preferences, parse_rating, parse_view_tag
from .similarity import score_books

app = typer.Typer(help="Taxonomy-weighted scoring engine CLI")
logger = get_logger(__name__)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"Could not read {path}: {exc}", err=True)
        raise typer.Exit(code=1)


def _parse(path: Path, parser):
    """Apply *parser* to the JSON document at *path*, exiting on invalid records."""
    data = _read_json(path)
    try:
        return parser(data)
    except (ValidationError, TypeError, ValueError, AttributeError) as exc:
        typer.echo(f"Invalid records in {path}: {exc}", err=True)
        raise typer.Exit(code=2)


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _fail(exc: ScoringEngineError, operation: str) -> None:
    log_error_with_context(logger, exc, operation, error_code=exc.error_code)
    typer.echo(f"{exc.error_code}: {exc.message}", err=True)
    raise typer.Exit(code=2)


# ---------------------------------------------------------------------
# assign
# ---------------------------------------------------------------------
@app.command()
def assign(
    tags: Path = typer.Argument(..., help="JSON list of {taxonomy_id, kind}, in rank order"),
    book_id: Optional[int] = typer.Option(None, help="Book the tags belong to"),
):
    """Rank a book's ordered tag list and attach importance weights."""
    set_request_context()
    refs = _parse(tags, lambda data: [TaxonomyRef(**t) for t in data])
    try:
        assignments = assign_importance(refs, book_id=book_id)
    except ScoringEngineError as exc:
        _fail(exc, "assign")
    _emit([a.model_dump(mode="json") for a in assignments])


# ---------------------------------------------------------------------
# rank-books
# ---------------------------------------------------------------------
@app.command("rank-books")
def rank_books(
    view: Path = typer.Argument(..., help="JSON list of view tags {taxonomy_id, rank}"),
    candidates: Path = typer.Argument(..., help="JSON object book_id -> list of assignments"),
    limit: Optional[int] = typer.Option(None, help="Maximum number of books returned"),
    aggregate: str = typer.Option("sum", help="sum | mean of matched importance"),
):
    """Rank candidate books by taxonomy overlap with a genre view."""
    if aggregate not in ("sum", "mean"):
        typer.echo(f"Unknown aggregate {aggregate!r}; use sum or mean", err=True)
        raise typer.Exit(code=2)
    set_request_context()
    view_tags = _parse(view, lambda data: [parse_view_tag(row) for row in data])
    corpus = _parse(candidates, lambda data: {
        book_id: [parse_assignment(row) for row in rows]
        for book_id, rows in data.items()
    })
    try:
        ranked = score_books(view_tags, corpus, limit=limit, aggregate=aggregate)
    except ScoringEngineError as exc:
        _fail(exc, "rank-books")
    _emit([s.model_dump(mode="json") for s in ranked])


# ---------------------------------------------------------------------
# rate
# ---------------------------------------------------------------------
@app.command()
def rate(
    rating: Path = typer.Argument(..., help="JSON rating vector"),
    weights: Optional[Path] = typer.Option(None, help="JSON preference weights (defaults when omitted)"),
):
    """Weighted 1-5 rating and -3..+3 compatibility rating of one rating."""
    vector: RatingVector = _parse(rating, parse_rating)
    prefs: PreferenceWeights = (
        _parse(weights, parse_preferences) if weights else W.default_preference_weights()
    )
    _emit({
        "weighted_rating": weighted_rating(vector, prefs),
        "compatibility_rating": compatibility_rating(vector, prefs),
    })


# ---------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------
@app.command()
def compare(
    weights_a: Path = typer.Argument(..., help="JSON preference weights of the first reader"),
    weights_b: Path = typer.Argument(..., help="JSON preference weights of the second reader"),
):
    """Reading compatibility of two readers' criterion weights."""
    a = _parse(weights_a, parse_preferences)
    b = _parse(weights_b, parse_preferences)
    _emit(preference_compatibility(a, b).model_dump(mode="json"))


if __name__ == "__main__":
    app()
