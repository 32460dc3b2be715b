"""Geometry primitives for the sweepline engine.

All functions here are pure. The plane uses the sweep convention: the
sweepline moves towards increasing y, and "clockwise" is meant with y
increasing downward (screen orientation), which is counter-clockwise in the
usual math orientation.
"""

import math
from typing import NamedTuple, Optional


class Coordinate(NamedTuple):
    """A point in the sweep plane."""
    x: float
    y: float

    def distance_to(self, other: "Coordinate") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def __repr__(self):
        return f"({round(self.x, 1)}, {round(self.y, 1)})"


class Circle(NamedTuple):
    """Circle through three sites.

    ``event_point`` is the point of the circle with the largest y, where the
    sweepline first touches it and the circle event fires.
    """
    center: Coordinate
    radius: float
    event_point: Coordinate


def circle_from_points(a: Coordinate, b: Coordinate, c: Coordinate) -> Optional[Circle]:
    """
    Circumcircle of three points from the perpendicular bisectors.

    Args:
        a, b, c: Points on the circle

    Returns:
        The circle, or None if the points are collinear
    """
    ab_x = b.x - a.x
    ab_y = b.y - a.y
    ac_x = c.x - a.x
    ac_y = c.y - a.y
    e = ab_x * (a.x + b.x) + ab_y * (a.y + b.y)
    f = ac_x * (a.x + c.x) + ac_y * (a.y + c.y)
    g = 2 * (ab_x * (c.y - b.y) - ab_y * (c.x - b.x))

    # g == 0: collinear, g < 0: the arcs diverge (see orientation())
    if g == 0:
        return None

    center_x = (ac_y * e - ab_y * f) / g
    center_y = (ab_x * f - ac_x * e) / g
    radius = math.hypot(a.x - center_x, a.y - center_y)

    return Circle(
        center=Coordinate(center_x, center_y),
        radius=radius,
        event_point=Coordinate(center_x, center_y + radius),
    )


def orientation(a: Coordinate, b: Coordinate, c: Coordinate) -> float:
    """Twice the signed area of triangle abc.

    Positive when a -> b -> c turns clockwise with y pointing down.
    """
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def positive_angle(angle: float) -> float:
    """Map an angle in radians into [0, 2*pi)."""
    angle = math.fmod(angle, 2 * math.pi)
    if angle < 0:
        angle += 2 * math.pi
    return angle


def get_angle(point: Coordinate, center: Coordinate) -> float:
    """Angle of ``point`` around ``center`` in [0, 2*pi), measured from +x towards +y."""
    return positive_angle(math.atan2(point.y - center.y, point.x - center.x))


def is_clockwise(a: Coordinate, b: Coordinate, c: Coordinate, center: Coordinate) -> bool:
    """
    Check whether a, b, c are met in that order walking clockwise around ``center``.

    Angles grow from +x towards +y, which is clockwise on a y-down screen.
    Walking that way from a, c must not be reached before b.
    """
    theta_a = get_angle(a, center)
    theta_b = get_angle(b, center)
    theta_c = get_angle(c, center)
    return positive_angle(theta_b - theta_a) < positive_angle(theta_c - theta_a)


def ray_segment_intersection(ray_origin: Coordinate, ray_through: Coordinate,
                             p1: Coordinate, p2: Coordinate) -> Optional[Coordinate]:
    """
    Intersection of a ray with a line segment.

    Solves origin + t*r = p1 + u*s for the normalized ray direction r and the
    segment vector s.

    Args:
        ray_origin: Where the ray starts
        ray_through: Any other point along the ray
        p1, p2: Segment endpoints

    Returns:
        The intersection, or None if the ray misses the segment or is parallel to it
    """
    rx = ray_through.x - ray_origin.x
    ry = ray_through.y - ray_origin.y
    length = math.hypot(rx, ry)
    if length == 0:
        return None
    rx /= length
    ry /= length

    sx = p2.x - p1.x
    sy = p2.y - p1.y
    denominator = rx * sy - ry * sx
    if denominator == 0:
        return None

    qx = p1.x - ray_origin.x
    qy = p1.y - ray_origin.y
    t = (qx * sy - qy * sx) / denominator
    u = (qx * ry - qy * rx) / denominator

    if t > 0 and 0 <= u <= 1:
        return Coordinate(ray_origin.x + t * rx, ray_origin.y + t * ry)
    return None


def polygon_signed_area(points) -> float:
    """Shoelace area; positive for rings that are clockwise with y pointing down."""
    area = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        area += points[i][0] * points[j][1] - points[j][0] * points[i][1]
    return area / 2
