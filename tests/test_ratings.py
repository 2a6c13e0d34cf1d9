import math

import pytest

from factories import make_rating, make_weights
import scoring_common.weights as W
from scoring_engine.ratings import (
    average_straight_rating,
    average_weighted_rating,
    compatibility_rating,
    criterion_averages,
    resolve_weights,
    straight_rating,
    summarize_ratings,
    weighted_rating,
)


def test_unrated_vector_scores_zero():
    assert weighted_rating(make_rating(), make_weights()) == 0


def test_weighted_rating_example():
    rating = make_rating(enjoyment=1, writing=-1)
    # (5 * 0.35 + 1 * 0.25) / (0.35 + 0.25)
    assert weighted_rating(rating, make_weights()) == pytest.approx(2 / 0.6)


def test_all_thumbs_up_is_five_and_all_down_is_one():
    up = make_rating(enjoyment=1, writing=1, themes=1, characters=1, worldbuilding=1)
    down = make_rating(enjoyment=-1, writing=-1, themes=-1, characters=-1, worldbuilding=-1)
    assert weighted_rating(up, make_weights()) == pytest.approx(5.0)
    assert weighted_rating(down, make_weights()) == pytest.approx(1.0)


def test_unrated_criteria_do_not_dilute_the_rating():
    rating = make_rating(worldbuilding=1)
    assert weighted_rating(rating, make_weights()) == pytest.approx(5.0)


def test_non_finite_weight_replaced_by_default():
    rating = make_rating(enjoyment=1, writing=-1)
    broken = make_weights(enjoyment=math.nan, writing=math.inf)
    assert weighted_rating(rating, broken) == pytest.approx(2 / 0.6)


def test_explicit_defaults_override_system_defaults():
    rating = make_rating(enjoyment=1, writing=-1)
    broken = make_weights(enjoyment=math.nan)
    defaults = {"enjoyment": 0.25, "writing": 0.25, "themes": 0.2, "characters": 0.2, "worldbuilding": 0.1}
    # enjoyment falls back to 0.25 -> (5 * 0.25 + 1 * 0.25) / 0.5
    assert weighted_rating(rating, broken, defaults=defaults) == pytest.approx(3.0)


def test_system_defaults_come_from_weights_module(monkeypatch):
    monkeypatch.setattr(W, "get", lambda: {"enjoyment": 1.0, "writing": 0.0, "themes": 0.0, "characters": 0.0, "worldbuilding": 0.0})
    rating = make_rating(enjoyment=1, writing=-1)
    broken = make_weights(enjoyment=math.nan, writing=math.nan)
    assert weighted_rating(rating, broken) == pytest.approx(5.0)


def test_zero_weights_on_rated_criteria_score_zero():
    rating = make_rating(enjoyment=1)
    assert weighted_rating(rating, make_weights(enjoyment=0.0)) == 0


def test_weights_are_clamped_into_unit_range():
    resolved = resolve_weights(make_weights(enjoyment=-0.5, writing=1.5))
    assert resolved["enjoyment"] == 0.0
    assert resolved["writing"] == 1.0
    assert resolved["themes"] == 0.2


def test_negative_weight_cannot_push_rating_off_scale():
    rating = make_rating(enjoyment=1, writing=-1)
    # unclamped, 0.5 and -0.5 would cancel the total weight
    assert weighted_rating(rating, make_weights(enjoyment=0.5, writing=-0.5)) == pytest.approx(5.0)


@pytest.mark.parametrize(
    "rating,expected",
    [
        (make_rating(enjoyment=1, writing=-1, themes=1, characters=-1), 0.0),
        (make_rating(enjoyment=1, writing=1, themes=1, characters=1, worldbuilding=1), 3.0),
        (make_rating(enjoyment=-1, writing=-1, themes=-1, characters=-1, worldbuilding=-1), -3.0),
    ],
)
def test_compatibility_rating_scale(rating, expected):
    weights = make_weights((0.25, 0.25, 0.25, 0.25, 0.1))
    assert compatibility_rating(rating, weights) == pytest.approx(expected)


def test_compatibility_rating_of_unrated_vector_is_neutral():
    assert compatibility_rating(make_rating(), make_weights()) == 0


def test_straight_rating_ignores_weights():
    rating = make_rating(enjoyment=1, writing=-1)
    assert straight_rating(rating) == pytest.approx(3.0)


def test_criterion_averages():
    ratings = [make_rating(enjoyment=1, writing=-1), make_rating(enjoyment=1, writing=1, themes=-1)]
    averages = criterion_averages(ratings)
    assert averages.enjoyment == 1
    assert averages.writing == 0
    assert averages.themes == -0.5
    assert criterion_averages([]) is None


def test_averages_over_many_ratings():
    ratings = [make_rating(enjoyment=1), make_rating(enjoyment=-1), make_rating()]
    weights = make_weights()
    # 5, 1 and the unrated sentinel 0
    assert average_weighted_rating(ratings, weights) == pytest.approx(2.0)
    assert average_straight_rating(ratings) == pytest.approx(2.0)
    assert average_weighted_rating([], weights) == 0
    assert average_straight_rating([]) == 0


def test_summarize_ratings():
    ratings = [
        make_rating(enjoyment=1, writing=1),
        make_rating(enjoyment=1, writing=-1),
    ]
    summary = summarize_ratings(ratings, make_weights())
    assert summary.count == 2
    assert summary.criteria.enjoyment == 1
    assert summary.criteria.writing == 0
    # averaged vector only has enjoyment rated
    assert summary.overall == pytest.approx(5.0)
    assert summary.compatibility == pytest.approx(3.0)
    assert summary.weighted_average == pytest.approx((5.0 + 2 / 0.6) / 2)
    assert summary.straight_average == pytest.approx((5.0 + 3.0) / 2)


def test_summarize_no_ratings():
    assert summarize_ratings([], make_weights()) is None
