"""Tests for geometry primitives."""

import math

import pytest

from py_fortune.core.geometry import (
    Coordinate, circle_from_points, get_angle, is_clockwise, orientation,
    polygon_signed_area, positive_angle, ray_segment_intersection
)


class TestCircumcircle:
    """Test circumcircle computation."""

    def test_right_triangle(self):
        """Test circle through a right triangle is centered on the hypotenuse."""
        circle = circle_from_points(Coordinate(0, 0), Coordinate(10, 0), Coordinate(0, 10))

        assert circle.center.x == pytest.approx(5)
        assert circle.center.y == pytest.approx(5)
        assert circle.radius == pytest.approx(math.sqrt(50))

    def test_event_point_is_lowest_point(self):
        """Test the event point lies below the center by one radius."""
        circle = circle_from_points(Coordinate(0, 0), Coordinate(10, 0), Coordinate(5, 10))

        assert circle.center == pytest.approx((5, 3.75))
        assert circle.event_point == pytest.approx((5, 3.75 + circle.radius))
        assert circle.radius == pytest.approx(6.25)

    def test_equidistant(self):
        """Test the center is equidistant from all three points."""
        a, b, c = Coordinate(1.5, -2), Coordinate(7, 3.25), Coordinate(-4, 6)
        circle = circle_from_points(a, b, c)

        for point in (a, b, c):
            assert circle.center.distance_to(point) == pytest.approx(circle.radius)

    @pytest.mark.parametrize("points", [
        [(0, 0), (5, 0), (10, 0)],
        [(0, 0), (0, 5), (0, 10)],
        [(1, 1), (2, 2), (5, 5)],
        [(3, 3), (3, 3), (8, 1)],
    ])
    def test_collinear_has_no_circle(self, points):
        """Test collinear or coincident points have no circumcircle."""
        a, b, c = (Coordinate(*p) for p in points)
        assert circle_from_points(a, b, c) is None


class TestOrientation:
    """Test angle and orientation helpers."""

    def test_positive_angle(self):
        assert positive_angle(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
        assert positive_angle(math.pi / 4) == pytest.approx(math.pi / 4)

    def test_get_angle_quadrants(self):
        """Test angles grow from +x towards +y."""
        center = Coordinate(0, 0)
        assert get_angle(Coordinate(1, 0), center) == pytest.approx(0)
        assert get_angle(Coordinate(0, 1), center) == pytest.approx(math.pi / 2)
        assert get_angle(Coordinate(-1, 0), center) == pytest.approx(math.pi)
        assert get_angle(Coordinate(0, -1), center) == pytest.approx(3 * math.pi / 2)

    def test_is_clockwise_matches_orientation(self):
        """Test the angular test agrees with the cross product sign."""
        a, b, c = Coordinate(5, 10), Coordinate(0, 0), Coordinate(10, 0)
        center = circle_from_points(a, b, c).center

        assert orientation(a, b, c) > 0
        assert is_clockwise(a, b, c, center)
        assert orientation(a, c, b) < 0
        assert not is_clockwise(a, c, b, center)


class TestRaySegmentIntersection:
    """Test ray and segment intersection."""

    def test_hit(self):
        hit = ray_segment_intersection(Coordinate(0, 0), Coordinate(1, 0),
                                       Coordinate(5, -5), Coordinate(5, 5))
        assert hit == pytest.approx((5, 0))

    def test_behind_origin(self):
        """Test segments behind the ray origin are missed."""
        assert ray_segment_intersection(Coordinate(0, 0), Coordinate(1, 0),
                                        Coordinate(-5, -5), Coordinate(-5, 5)) is None

    def test_parallel(self):
        assert ray_segment_intersection(Coordinate(0, 0), Coordinate(1, 0),
                                        Coordinate(0, 1), Coordinate(5, 1)) is None

    def test_degenerate_ray(self):
        assert ray_segment_intersection(Coordinate(0, 0), Coordinate(0, 0),
                                        Coordinate(5, -5), Coordinate(5, 5)) is None


class TestSignedArea:
    """Test shoelace area sign convention."""

    def test_screen_clockwise_square_is_positive(self):
        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        assert polygon_signed_area(square) == pytest.approx(100)
        assert polygon_signed_area(square[::-1]) == pytest.approx(-100)
