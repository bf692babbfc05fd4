import pytest

from terreno.models import DEFAULT_WEIGHTS, SimilarityOverrides, SimilarityProfile, resolve
from terreno.similarity import paginate, rank, score_candidate
from terreno.similarity.scorer import location_points, price_points, space_points

RIYADH = (24.7136, 46.6753)


def profile(id="ref", lat=RIYADH[0], lng=RIYADH[1], **kwargs):
    fields = {
        "type": "apartment",
        "category": "residential",
        "city": "Riyadh",
        "price": 500000.0,
        "space": None,
    }
    fields.update(kwargs)
    return SimilarityProfile(id=id, latitude=lat, longitude=lng, **fields)


def test_identical_property_gets_max_score():
    reference = profile(space=120.0)
    candidate = profile(id="c", space=120.0)

    scored = score_candidate(reference, candidate, DEFAULT_WEIGHTS, include_space=True)

    assert scored.score == 63
    assert scored.distance_km == pytest.approx(0.0)


def test_identical_project_gets_max_score_without_space():
    reference = profile(space=120.0)
    candidate = profile(id="c", space=120.0)

    scored = score_candidate(reference, candidate, DEFAULT_WEIGHTS, include_space=False)

    assert scored.score == 55


def test_close_candidate_in_same_city_scores_55():
    reference = profile()
    candidate = profile(id="c", price=520000.0)

    assert score_candidate(reference, candidate, DEFAULT_WEIGHTS).score == 55


def test_far_candidate_with_nothing_in_common_scores_zero():
    reference = profile()
    candidate = profile(
        id="c",
        lat=RIYADH[0] + 0.45,  # ~50 km al norte
        type="villa",
        category="commercial",
        city="Buraydah",
        price=2000000.0,
    )

    scored = score_candidate(reference, candidate, DEFAULT_WEIGHTS)

    assert scored.score == 0
    assert scored.distance_km == pytest.approx(50.0, rel=0.01)
    assert rank(reference, [candidate], DEFAULT_WEIGHTS) != []
    strict = resolve(DEFAULT_WEIGHTS, SimilarityOverrides(min_score=1))
    assert rank(reference, [candidate], strict) == []


@pytest.mark.parametrize(
    "distance,points",
    [(0.0, 15), (1.5, 15), (2.0, 15), (3.0, 10), (5.0, 10), (7.5, 6), (10.0, 6), (10.01, 0), (None, 0)],
)
def test_location_tiers(distance, points):
    assert location_points(distance, DEFAULT_WEIGHTS) == points


def test_location_tiers_follow_overrides():
    weights = resolve(DEFAULT_WEIGHTS, SimilarityOverrides(close_distance=0.5, location_weight=25))
    assert location_points(1.0, weights) == 17
    assert location_points(0.4, weights) == 25


def test_close_threshold_beyond_medium_wins_first():
    weights = resolve(DEFAULT_WEIGHTS, SimilarityOverrides(close_distance=6))

    assert location_points(5.5, weights) == 15
    assert location_points(8.0, weights) == 6
    assert location_points(10.5, weights) == 0


def test_price_full_and_partial_credit():
    weights = resolve(DEFAULT_WEIGHTS, SimilarityOverrides(price_range_percentage=0.1))

    assert price_points(500000, 520000, weights) == 10
    assert price_points(500000, 600000, weights) == 5
    assert price_points(500000, 2000000, weights) == 0
    assert price_points(500000, 100000, weights) == 0


def test_price_without_reference_price_scores_zero():
    assert price_points(None, 500000, DEFAULT_WEIGHTS) == 0
    assert price_points(0, 0, DEFAULT_WEIGHTS) == 0
    assert price_points(500000, None, DEFAULT_WEIGHTS) == 0


def test_space_has_no_partial_credit():
    assert space_points(100, 120, DEFAULT_WEIGHTS) == 8
    assert space_points(100, 150, DEFAULT_WEIGHTS) == 0
    assert space_points(None, 100, DEFAULT_WEIGHTS) == 0


def test_missing_attributes_never_match():
    reference = profile(type=None, city=None)
    candidate = profile(id="c", type=None, city=None, lat=None, lng=None, price=None)

    scored = score_candidate(reference, candidate, DEFAULT_WEIGHTS)

    assert scored.score == 10  # solo categoría
    assert scored.distance_km is None


def test_city_match_is_case_sensitive():
    reference = profile()
    candidate = profile(id="c", city="riyadh")

    assert score_candidate(reference, candidate, DEFAULT_WEIGHTS).score == 47


def test_rank_orders_by_score_then_distance_then_id():
    reference = profile()
    candidates = [
        profile(id="far", lat=RIYADH[0] + 0.015),  # ~1.7 km, mismo score
        profile(id="b"),
        profile(id="a"),
        profile(id="low", type="villa"),
        profile(id="nowhere", lat=None, lng=None, city="Other", price=None),
        profile(id="ref"),
    ]

    ranked = rank(reference, candidates, DEFAULT_WEIGHTS)

    assert [item.profile.id for item in ranked] == ["a", "b", "far", "low", "nowhere"]
    scores = [item.score for item in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_places_missing_distance_after_known_distance():
    reference = profile()
    candidates = [
        profile(id="a", lat=None, lng=None),
        profile(id="b", lat=RIYADH[0] + 0.5),
    ]
    # a: 12 + 10 + 8 + 10 = 40; b: igual salvo ubicación (fuera de rango)
    ranked = rank(reference, candidates, DEFAULT_WEIGHTS)

    assert [item.score for item in ranked] == [40, 40]
    assert [item.profile.id for item in ranked] == ["b", "a"]


def test_rank_filters_by_min_score():
    reference = profile()
    candidates = [profile(id="same"), profile(id="other", type="villa", category="land")]
    weights = resolve(DEFAULT_WEIGHTS, SimilarityOverrides(min_score=50))

    assert [item.profile.id for item in rank(reference, candidates, weights)] == ["same"]


def test_paginate_is_one_indexed():
    items = list(range(25))
    assert paginate(items, 1, 10) == list(range(10))
    assert paginate(items, 3, 10) == [20, 21, 22, 23, 24]
    assert paginate(items, 4, 10) == []
