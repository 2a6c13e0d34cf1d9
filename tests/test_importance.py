import pytest

from factories import make_assignment, make_refs
from scoring_common.models import TaxonomyKind
from scoring_engine.errors import TagSelectionError
from scoring_engine.importance import (
    assign_importance,
    order_by_kind,
    rederive_importance,
    top_taxonomies,
    validate_tag_selection,
)
from scoring_engine.rank_weight import rank_weight


def test_ranks_are_contiguous_and_importance_follows_rank():
    refs = make_refs("genre", "subgenre", "subgenre", "theme", "trope", "trope")
    assignments = assign_importance(refs, book_id=7)

    assert [a.rank for a in assignments] == [1, 2, 3, 4, 5, 6]
    for i, a in enumerate(assignments):
        assert a.importance == rank_weight(i + 1)
        assert a.book_id == 7
    assert [a.taxonomy_id for a in assignments] == [r.taxonomy_id for r in refs]
    assert assignments[0].kind is TaxonomyKind.GENRE


def test_empty_list_gives_no_assignments():
    assert assign_importance([]) == []


def test_reassignment_replaces_previous_ranks():
    first = assign_importance(make_refs("genre", "theme", "trope"))
    second = assign_importance(make_refs("genre", "trope", start_id=200))
    assert [a.rank for a in second] == [1, 2]
    assert {a.taxonomy_id for a in second}.isdisjoint({a.taxonomy_id for a in first})


def test_out_of_order_kinds_are_ranked_as_submitted():
    refs = make_refs("trope", "genre")
    assignments = assign_importance(refs)
    assert [a.kind for a in assignments] == [TaxonomyKind.TROPE, TaxonomyKind.GENRE]
    assert [a.rank for a in assignments] == [1, 2]


def test_order_by_kind_is_stable():
    refs = make_refs("trope", "theme", "genre", "theme", "subgenre")
    ordered = order_by_kind(refs)
    assert [r.kind.value for r in ordered] == ["genre", "subgenre", "theme", "theme", "trope"]
    themes = [r.taxonomy_id for r in ordered if r.kind is TaxonomyKind.THEME]
    assert themes == [101, 103]


def test_rederived_importance_round_trips():
    assignments = assign_importance(make_refs("genre", "subgenre", "theme", "theme", "trope"))
    stored = [a.model_copy(update={"importance": None}) for a in assignments]
    rederived = rederive_importance(stored)
    assert [a.importance for a in rederived] == pytest.approx([a.importance for a in assignments])


def test_validate_accepts_full_selection():
    refs = make_refs(*(["genre"] * 2 + ["subgenre"] * 5 + ["theme"] * 6 + ["trope"] * 7))
    validate_tag_selection(refs)


@pytest.mark.parametrize(
    "kind,limit",
    [("genre", 2), ("subgenre", 5), ("theme", 6), ("trope", 7)],
)
def test_validate_rejects_too_many_of_a_kind(kind, limit):
    refs = make_refs(*([kind] * (limit + 1)))
    with pytest.raises(TagSelectionError) as excinfo:
        validate_tag_selection(refs, min_total=0)
    assert excinfo.value.kind == kind
    assert excinfo.value.limit == limit


def test_validate_requires_minimum_total():
    with pytest.raises(TagSelectionError) as excinfo:
        validate_tag_selection(make_refs("genre", "theme", "trope", "trope"))
    assert excinfo.value.count == 4
    assert excinfo.value.limit == 5


def test_top_taxonomies_sorts_by_kind_then_rank():
    assignments = [
        make_assignment(1, 1.0, rank=3, kind=TaxonomyKind.TROPE),
        make_assignment(2, 1.0, rank=2, kind=TaxonomyKind.THEME),
        make_assignment(3, 1.0, rank=1, kind=TaxonomyKind.THEME),
        make_assignment(4, 1.0, rank=4, kind=TaxonomyKind.GENRE),
        make_assignment(5, 1.0, rank=5),
    ]
    top = top_taxonomies(assignments, limit=4)
    assert [a.taxonomy_id for a in top] == [4, 3, 2, 1]
