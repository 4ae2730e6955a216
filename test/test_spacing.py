"""
Auto-Spacing Engine Tests
"""

import math

import pytest

from lpsketch.geometry import Point
from lpsketch.spacing import (
    compute_arc_auto_spacing_points,
    compute_linear_auto_spacing_points,
    dedupe_points,
    equal_spacing_points_on_polyline,
    points_at_distances,
)
from lpsketch.tools import CornerKind

O = CornerKind.OUTSIDE
I = CornerKind.INSIDE


def _approx_points(points, expected):
    assert len(points) == len(expected)
    for p, (x, y) in zip(points, expected):
        assert p.x == pytest.approx(x, abs=1e-9)
        assert p.y == pytest.approx(y, abs=1e-9)


class TestPolylineDistances:
    def test_points_at_distances(self):
        path = [Point(0, 0), Point(10, 0), Point(10, 10)]
        _approx_points(points_at_distances(path, [0, 5, 10, 15, 20]),
                       [(0, 0), (5, 0), (10, 0), (10, 5), (10, 10)])

    def test_distances_are_clamped(self):
        path = [Point(0, 0), Point(10, 0)]
        _approx_points(points_at_distances(path, [-5, 50]), [(0, 0), (10, 0)])

    def test_zero_length_edges_are_skipped(self):
        path = [Point(0, 0), Point(0, 0), Point(10, 0)]
        _approx_points(points_at_distances(path, [5]), [(5, 0)])

    def test_equal_spacing_rounds_count_up(self):
        points = equal_spacing_points_on_polyline([Point(0, 0), Point(10, 0)], 4)
        # ceil(10 / 4) = 3 pieces of 10/3
        assert len(points) == 4
        assert points[1].x == pytest.approx(10 / 3)

    def test_dedupe_keeps_first(self):
        deduped = dedupe_points([Point(0, 0), Point(0.3, 0), Point(5, 5)], 0.5)
        assert deduped == [Point(0, 0), Point(5, 5)]


class TestLinearAutoSpacing:
    """Outside corners restart the spacing, inside corners are walked through."""

    def test_inside_corner_spans_both_edges(self):
        points = compute_linear_auto_spacing_points(
            [Point(0, 0), Point(10, 0), Point(10, 10)], [O, I, O], closed=False, max_interval_pt=6)
        _approx_points(points, [(0, 0), (5, 0), (10, 0), (10, 5), (10, 10)])

    def test_outside_corner_is_anchor(self):
        points = compute_linear_auto_spacing_points(
            [Point(0, 0), Point(10, 0), Point(10, 4)], [O, O, O], closed=False, max_interval_pt=6)
        # Span 1: 10 -> 2 pieces; span 2: 4 -> 1 piece; shared corner deduped
        _approx_points(points, [(0, 0), (5, 0), (10, 0), (10, 4)])

    def test_closed_square_with_outside_corners(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        points = compute_linear_auto_spacing_points(square, [O, O, O, O], closed=True, max_interval_pt=10)
        _approx_points(points, [(0, 0), (10, 0), (10, 10), (0, 10)])

    def test_closed_single_anchor_spans_loop(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        points = compute_linear_auto_spacing_points(square, [O, I, I, I], closed=True, max_interval_pt=20)
        # Perimeter 40 in two pieces; the closing point duplicates the anchor
        _approx_points(points, [(0, 0), (10, 10)])

    def test_closed_without_outside_corner_yields_nothing(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        assert compute_linear_auto_spacing_points(square, [I, I, I, I], closed=True, max_interval_pt=5) == []

    def test_invalid_input_yields_nothing(self):
        assert compute_linear_auto_spacing_points([Point(0, 0)], [O], False, 5) == []
        assert compute_linear_auto_spacing_points([Point(0, 0), Point(1, 0)], [O, O], False, 0) == []


class TestArcAutoSpacing:
    def test_endpoints_are_exact(self):
        start, through, end = Point(0, 0), Point(50, 50), Point(100, 0)
        points = compute_arc_auto_spacing_points(start, through, end, 20)
        assert points[0] == start
        assert points[-1] == end
        # Semicircle of radius 50: ceil(157.08 / 20) = 8 pieces
        assert len(points) == 9

    def test_points_lie_on_circle(self):
        points = compute_arc_auto_spacing_points(Point(0, 0), Point(50, 50), Point(100, 0), 20)
        for p in points:
            assert math.hypot(p.x - 50, p.y) == pytest.approx(50.0, abs=1e-9)

    def test_follows_through_side(self):
        points = compute_arc_auto_spacing_points(Point(0, 0), Point(50, -50), Point(100, 0), 20)
        assert all(p.y <= 1e-9 for p in points)

    def test_invalid_arc_yields_nothing(self):
        assert compute_arc_auto_spacing_points(Point(0, 0), Point(50, 0), Point(100, 0), 20) == []
