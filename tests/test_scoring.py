"""Tests for nycprop.comps.scoring — similarity components and totals."""

import itertools

import pytest

from nycprop.comps.scoring import (
    ScoreInputs,
    class_points,
    neighborhood_points,
    score_breakdown,
    similarity_score,
    size_points,
    unit_points,
    year_points,
)


def _inputs(cls="D4", units=10, units_total=10, year=1920, area=10_000):
    return ScoreInputs(cls, units, units_total, year, area)


def test_identical_building_in_same_neighborhood_scores_100():
    subject = _inputs(units=0, units_total=10, year=1920)
    comp = _inputs(units=10, units_total=10, year=1918)
    assert score_breakdown(subject, comp, True, False) == {
        "neighborhood": 30,
        "building_class": 25,
        "units": 20,
        "year_built": 15,
        "size": 10,
    }
    assert similarity_score(subject, comp, True, False) == 100


class TestComponents:
    def test_neighborhood(self):
        assert neighborhood_points(True, True) == 30
        assert neighborhood_points(False, True) == 15
        assert neighborhood_points(False, False) == 0

    def test_class(self):
        assert class_points("C1", "c1") == 25
        assert class_points("C1", "C7") == 15
        assert class_points("C1", "D4") == 0
        assert class_points("", "C1") == 0

    def test_units_use_larger_count(self):
        assert unit_points(_inputs(units=4, units_total=8), _inputs(units=8, units_total=0)) == 20

    def test_units_ratio_rounds_half_up(self):
        # 20 * 1/8 = 2.5
        assert unit_points(_inputs(units=1, units_total=1), _inputs(units=8, units_total=8)) == 3

    def test_units_zero(self):
        assert unit_points(_inputs(units=0, units_total=0), _inputs()) == 0

    @pytest.mark.parametrize("diff,points", [
        (0, 15), (5, 15), (6, 12), (10, 12), (11, 8), (20, 8), (21, 4), (30, 4), (31, 0),
    ])
    def test_year_bands(self, diff, points):
        assert year_points(1950, 1950 + diff) == points
        assert year_points(1950 + diff, 1950) == points

    def test_year_unknown(self):
        assert year_points(None, 1920) == 0
        assert year_points(1920, None) == 0

    def test_size(self):
        assert size_points(10_000, 5_000) == 5
        assert size_points(10_000, 4_000) == 4
        assert size_points(0, 5_000) == 0
        assert size_points(None, 5_000) == 0


def test_score_always_in_bounds():
    subject = _inputs()
    for same, adjacent, cls, units, year, area in itertools.product(
        [True, False], [True, False], ["D4", "C1", ""],
        [0, 10, 500], [None, 1800, 1920], [None, 0, 10_000],
    ):
        comp = ScoreInputs(cls, units, units, year, area)
        assert 0 <= similarity_score(subject, comp, same, adjacent) <= 100
