"""Tests for scoring, quadrant classification and sorting."""

import itertools

import pytest

from engines.models import WeightState
from engines.scoring import (QUADRANTS, calculate_score, classify_quadrant, quadrant_features,
                             quadrant_summary, score_features, sort_features)


def feat(name, impact, effort, rate, score=None):
    f = {'name': name, 'avgImpact': impact, 'avgEffort': effort, 'selectionRate': rate}
    if score is not None:
        f['score'] = score
    return f


# ============================================================================
# Score
# ============================================================================


class TestCalculateScore:
    def test_reference_scenario(self):
        score = calculate_score(feat('Wine Cellar App', 4, 1, 50), WeightState())
        assert score == pytest.approx(70.5)

    def test_zero_weights_is_midpoint(self):
        assert calculate_score(feat('x', 5, 5, 100), WeightState(0, 0, 0)) == 50

    def test_clamped_high(self):
        assert calculate_score(feat('x', 5, 1, 100), WeightState(100, 0, 100)) == 100

    def test_clamped_low(self):
        assert calculate_score(feat('x', 1, 5, 0), WeightState(0, 300, 0)) == 0

    @pytest.mark.parametrize('weights', [(40, 30, 30), (100, 100, 100), (0, 100, 0), (250, 0, 250), (5, 500, 5)])
    def test_always_in_range(self, weights):
        w = WeightState(*weights)
        for impact, effort, rate in itertools.product((1, 2.5, 3, 5), (1, 3, 5), (0, 50, 100)):
            assert 0 <= calculate_score(feat('x', impact, effort, rate), w) <= 100


# ============================================================================
# Quadrants
# ============================================================================


class TestClassifyQuadrant:
    @pytest.mark.parametrize('impact,effort,expected', [
        (4, 2, 'quick-wins'),
        (4, 4, 'major-projects'),
        (2, 2, 'fill-ins'),
        (2, 4, 'thankless-tasks'),
        (3, 3, 'thankless-tasks'),
        (3, 1, 'fill-ins'),
        (5, 3, 'major-projects'),
        (3.0001, 2.9999, 'quick-wins'),
    ])
    def test_strict_thresholds(self, impact, effort, expected):
        assert classify_quadrant(impact, effort) == expected

    @pytest.mark.parametrize('effort', [1, 2, 3, 4, 5])
    def test_impact_three_never_high(self, effort):
        assert classify_quadrant(3, effort) in ('fill-ins', 'thankless-tasks')


class TestScoreFeatures:
    def test_adds_score_and_quadrant(self):
        (scored,) = score_features([feat('Wine Cellar App', 4, 1, 50)], WeightState())
        assert scored['score'] == pytest.approx(70.5)
        assert scored['quadrant'] == 'quick-wins'

    def test_without_quadrant(self):
        (scored,) = score_features([feat('x', 4, 1, 50)], WeightState(), with_quadrant=False)
        assert 'quadrant' not in scored


# ============================================================================
# Sorting
# ============================================================================


class TestSortFeatures:
    @pytest.fixture
    def rows(self):
        return [
            feat('beta', 3, 2, 0, score=60),
            feat('Alpha', 4, 2, 0, score=70),
            feat('gamma', 3, 4, 0, score=60),
            feat('delta', 2, 2, 0, score=60),
        ]

    def test_score_desc_default(self, rows):
        assert [f['name'] for f in sort_features(rows)] == ['Alpha', 'beta', 'gamma', 'delta']

    def test_score_asc_stable(self, rows):
        assert [f['name'] for f in sort_features(rows, 'score', 'asc')] == ['beta', 'gamma', 'delta', 'Alpha']

    def test_impact_ties_keep_input_order_both_ways(self, rows):
        assert [f['name'] for f in sort_features(rows, 'impact', 'asc')] == ['delta', 'beta', 'gamma', 'Alpha']
        assert [f['name'] for f in sort_features(rows, 'impact', 'desc')] == ['Alpha', 'beta', 'gamma', 'delta']

    def test_effort(self, rows):
        assert [f['name'] for f in sort_features(rows, 'effort', 'desc')] == ['gamma', 'beta', 'Alpha', 'delta']

    def test_name_case_insensitive(self, rows):
        assert [f['name'] for f in sort_features(rows, 'name', 'asc')] == ['Alpha', 'beta', 'delta', 'gamma']

    def test_unknown_field_falls_back_to_score(self, rows):
        assert sort_features(rows, 'colour') == sort_features(rows, 'score')


class TestQuadrantFeatures:
    def test_members_sorted_by_score(self):
        rows = score_features([feat('a', 4, 2, 0), feat('b', 5, 1, 100), feat('c', 2, 4, 0)], WeightState())
        assert [f['name'] for f in quadrant_features(rows, 'quick-wins')] == ['b', 'a']
        assert quadrant_features(rows, 'fill-ins') == []

    def test_unknown_quadrant(self):
        with pytest.raises(ValueError):
            quadrant_features([], 'nowhere')

    def test_summary_counts_every_quadrant(self):
        rows = score_features([feat('a', 4, 2, 0), feat('b', 2, 4, 0)], WeightState())
        summary = quadrant_summary(rows)
        assert set(summary) == set(QUADRANTS)
        assert summary['quick-wins'] == 1
        assert summary['thankless-tasks'] == 1
