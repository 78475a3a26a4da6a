"""
Unit tests for geometry primitives.

Tests:
- Closest edge selection and tie-break order
- Projection clamping onto edge segments
- Degenerate (zero and negative size) boxes
- Grid snapping
- Angles and rotation
"""

import math
import pytest

from models.geometry import (
    Point, Bounds, Edge, EDGE_ORDER,
    clamp, edge_distances, closest_edge, point_on_edge, closest_edge_point,
    snap_to_increment, snap_point, angle_degrees, rotate,
)


class TestBounds:
    """Tests for Bounds value type."""

    def test_derived_edges(self):
        b = Bounds(10, 20, 100, 50)
        assert b.right == 110
        assert b.bottom == 70
        assert b.center == Point(60, 45)

    def test_negative_size_is_clamped(self):
        b = Bounds(10, 20, -5, -8)
        assert b.right == 10
        assert b.bottom == 20
        assert b.normalized() == Bounds(10, 20, 0, 0)

    def test_contains_on_boundary(self):
        b = Bounds(0, 0, 100, 50)
        assert b.contains_on_boundary(Point(0, 25))
        assert b.contains_on_boundary(Point(100, 50))
        assert b.contains_on_boundary(Point(40, 0))
        assert not b.contains_on_boundary(Point(50, 25))
        assert not b.contains_on_boundary(Point(150, 0))


class TestClosestEdge:
    """Tests for edge selection."""

    def test_edge_order(self):
        assert EDGE_ORDER == (Edge.LEFT, Edge.RIGHT, Edge.TOP, Edge.BOTTOM)

    def test_distances(self):
        b = Bounds(0, 0, 100, 50)
        assert edge_distances(b, Point(130, 10)) == (130, 30, 10, 40)

    def test_each_edge(self):
        b = Bounds(0, 0, 100, 50)
        assert closest_edge(b, Point(-20, 25)) == Edge.LEFT
        assert closest_edge(b, Point(130, 25)) == Edge.RIGHT
        assert closest_edge(b, Point(50, -30)) == Edge.TOP
        assert closest_edge(b, Point(50, 90)) == Edge.BOTTOM

    def test_tie_prefers_left_over_top(self):
        """Reference (100,50) is 100 from both left and top of (200,150,100,50)."""
        b = Bounds(200, 150, 100, 50)
        assert closest_edge(b, Point(100, 50)) == Edge.LEFT

    def test_tie_prefers_right_over_bottom(self):
        b = Bounds(0, 0, 100, 50)
        assert closest_edge(b, Point(200, 150)) == Edge.RIGHT

    def test_tie_prefers_top_over_bottom(self):
        """A reference halfway between top and bottom of a flat box."""
        b = Bounds(0, 0, 100, 0)
        assert closest_edge(b, Point(50, 0)) == Edge.TOP

    def test_reference_inside_box(self):
        b = Bounds(0, 0, 100, 50)
        assert closest_edge(b, Point(95, 25)) == Edge.RIGHT
        assert closest_edge(b, Point(50, 3)) == Edge.TOP


class TestProjection:
    """Tests for projecting onto an edge."""

    def test_clamps_to_edge_segment(self):
        b = Bounds(0, 0, 100, 50)
        assert point_on_edge(b, Edge.RIGHT, Point(300, 500)) == Point(100, 50)
        assert point_on_edge(b, Edge.LEFT, Point(-10, -40)) == Point(0, 0)
        assert point_on_edge(b, Edge.TOP, Point(-50, -5)) == Point(0, 0)
        assert point_on_edge(b, Edge.BOTTOM, Point(40, 99)) == Point(40, 50)

    def test_closest_edge_point_lies_on_boundary(self):
        b = Bounds(20, 30, 80, 40)
        for ref in [Point(0, 0), Point(500, 45), Point(60, 50), Point(-100, 300), Point(60, -1)]:
            p, edge = closest_edge_point(b, ref)
            assert b.contains_on_boundary(p)
            assert edge in EDGE_ORDER

    def test_zero_size_box_collapses_to_point(self):
        b = Bounds(40, 60, 0, 0)
        p, edge = closest_edge_point(b, Point(500, -300))
        assert p == Point(40, 60)

    def test_negative_size_box_treated_as_zero(self):
        b = Bounds(40, 60, -30, -30)
        p, _ = closest_edge_point(b, Point(0, 0))
        assert p == Point(40, 60)


class TestSnapping:
    """Tests for grid snapping."""

    @pytest.mark.parametrize("value,expected", [
        (213, 215),
        (237, 235),
        (212.5, 215),
        (210, 210),
        (-2.4, 0),
        (-2.6, -5),
    ])
    def test_snap_to_increment(self, value, expected):
        assert snap_to_increment(value) == expected

    def test_half_rounds_up_not_to_even(self):
        # round(2.5) == 2 but the grid snaps halves upward
        assert snap_to_increment(12.5, 5) == 15
        assert snap_to_increment(17.5, 5) == 20

    def test_custom_increment(self):
        assert snap_to_increment(23, 10) == 20
        assert snap_to_increment(26, 10) == 30

    def test_non_positive_increment_disables_snapping(self):
        assert snap_to_increment(13.7, 0) == 13.7

    def test_snap_point(self):
        assert snap_point(Point(213, 237)) == Point(215, 235)


class TestAngles:
    """Tests for direction and rotation helpers."""

    def test_angle_degrees_screen_axes(self):
        origin = Point(0, 0)
        assert angle_degrees(origin, Point(10, 0)) == 0
        assert angle_degrees(origin, Point(0, 10)) == 90
        assert angle_degrees(origin, Point(0, -10)) == -90
        assert angle_degrees(origin, Point(-10, 0)) == 180

    def test_rotate(self):
        p = rotate(Point(10, 0), 90)
        assert p.x == pytest.approx(0, abs=1e-9)
        assert p.y == pytest.approx(10)

    def test_clamp(self):
        assert clamp(5, 0, 10) == 5
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10
        assert math.isclose(clamp(2.5, 2.5, 2.5), 2.5)
