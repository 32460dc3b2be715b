"""
Clipping of the sweep output to a bounding rectangle.

The sweep leaves edges that run to infinity: their origin is either missing
or still anchored to a beach line breakpoint. Clipping turns every edge into
a finite segment inside the rectangle, closes each cell with border edges
along the rectangle, and drops what lies outside.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from ..config import settings
from .dcel import HalfEdge, Site, Vertex, new_edge_pair
from .errors import InvalidInputError
from .geometry import Coordinate, get_angle

logger = structlog.get_logger()

# Relative slack for Liang-Barsky and perimeter comparisons, scaled by BoundingRect.scale
EPS = 1e-9


@dataclass(frozen=True)
class BoundingRect:
    """Axis-aligned rectangle given by its corner with the smallest coordinates and its size."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        values = (self.x, self.y, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            raise InvalidInputError(f"Bounding rectangle must be finite, got {values}")
        if self.width <= 0 or self.height <= 0:
            raise InvalidInputError(
                f"Bounding rectangle needs a positive size, got {self.width}x{self.height}")

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "BoundingRect":
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def perimeter(self) -> float:
        return 2 * (self.width + self.height)

    @property
    def scale(self) -> float:
        """Larger side; relative tolerances are multiplied by it."""
        return max(self.width, self.height)

    @property
    def corners(self) -> List[Coordinate]:
        """Corners in face traversal order (clockwise with y pointing down)."""
        return [
            Coordinate(self.min_x, self.min_y),
            Coordinate(self.max_x, self.min_y),
            Coordinate(self.max_x, self.max_y),
            Coordinate(self.min_x, self.max_y),
        ]

    @property
    def segments(self) -> List[Tuple[Coordinate, Coordinate]]:
        corners = self.corners
        return [(corners[i], corners[(i + 1) % 4]) for i in range(4)]

    def contains(self, point: Optional[Coordinate], tolerance: float = 0.0) -> bool:
        """Check whether a point lies in the rectangle, with ``tolerance`` of slack."""
        if point is None:
            return False
        return (self.min_x - tolerance <= point[0] <= self.max_x + tolerance
                and self.min_y - tolerance <= point[1] <= self.max_y + tolerance)

    def perimeter_position(self, point: Coordinate) -> float:
        """
        Distance along the border from the first corner, following the corner order.

        Points off the border are projected onto the nearest side.
        """
        x, y = point
        distances = (
            abs(y - self.min_y),
            abs(x - self.max_x),
            abs(y - self.max_y),
            abs(x - self.min_x),
        )
        side = distances.index(min(distances))
        x = min(max(x, self.min_x), self.max_x)
        y = min(max(y, self.min_y), self.max_y)
        if side == 0:
            return x - self.min_x
        if side == 1:
            return self.width + (y - self.min_y)
        if side == 2:
            return self.width + self.height + (self.max_x - x)
        return 2 * self.width + self.height + (self.max_y - y)

    def distance_to_border(self, point: Coordinate) -> float:
        x, y = point
        if self.contains(point):
            return min(x - self.min_x, self.max_x - x, y - self.min_y, self.max_y - y)
        dx = max(self.min_x - x, 0.0, x - self.max_x)
        dy = max(self.min_y - y, 0.0, y - self.max_y)
        return math.hypot(dx, dy)

    def clip_line(self, base: Coordinate, direction: Coordinate,
                  t0: float, t1: float) -> Optional[Tuple[float, float]]:
        """
        Liang-Barsky clipping of base + t * direction for t in [t0, t1].

        Returns:
            The clipped parameter range, or None if the line misses the rectangle
        """
        for p, q in (
            (-direction.x, base.x - self.min_x),
            (direction.x, self.max_x - base.x),
            (-direction.y, base.y - self.min_y),
            (direction.y, self.max_y - base.y),
        ):
            if p == 0:
                if q < 0:
                    return None
                continue
            t = q / p
            if p < 0:
                t0 = max(t0, t)
            else:
                t1 = min(t1, t)
            if t0 > t1:
                return None
        if not (math.isfinite(t0) and math.isfinite(t1)):
            return None
        return t0, t1


class _BorderVertices:
    """Vertices created on the rectangle border, merged by position."""

    def __init__(self, rect: BoundingRect):
        self.rect = rect
        self._by_position: Dict[Tuple[float, float], Vertex] = {}
        self.corners = [self.get(corner) for corner in rect.corners]

    def get(self, point: Coordinate) -> Vertex:
        scale = self.rect.scale
        key = (round((point[0] - self.rect.x) / scale, 9), round((point[1] - self.rect.y) / scale, 9))
        vertex = self._by_position.get(key)
        if vertex is None:
            vertex = Vertex(point[0], point[1])
            vertex.on_border = True
            self._by_position[key] = vertex
        return vertex

    def all(self) -> List[Vertex]:
        return list(self._by_position.values())


def _edge_pairs(edges: Sequence[HalfEdge]) -> List[Tuple[HalfEdge, HalfEdge]]:
    pairs = []
    seen = set()
    for edge in edges:
        if id(edge) in seen or edge.twin is None:
            continue
        seen.add(id(edge))
        seen.add(id(edge.twin))
        pairs.append((edge, edge.twin))
    return pairs


def _edge_direction(edge: HalfEdge) -> Coordinate:
    """Unit direction from origin to destination; the edge's site lies to its left in math orientation."""
    site, other = edge.incident_site, edge.twin.incident_site
    dx = site.x - other.x
    dy = site.y - other.y
    length = math.hypot(dx, dy)
    return Coordinate(dy / length, -dx / length)


def _clip_pair(edge: HalfEdge, rect: BoundingRect, border: _BorderVertices,
               tolerance: float) -> bool:
    """
    Clip one twin pair in place.

    Returns:
        False when the pair lies outside the rectangle and must be dropped
    """
    twin = edge.twin
    start = edge.origin.coordinate if edge.origin is not None else None
    end = twin.origin.coordinate if twin.origin is not None else None

    if start is not None and end is not None and \
            rect.contains(start, tolerance) and rect.contains(end, tolerance):
        return True

    direction = _edge_direction(edge)
    if start is not None:
        base = start
    elif end is not None:
        base = end
    else:
        # Both ends at infinity: the edge is the whole bisector
        base = Coordinate((edge.incident_site.x + twin.incident_site.x) / 2,
                          (edge.incident_site.y + twin.incident_site.y) / 2)

    t0 = 0.0 if start is not None else -math.inf
    if end is not None:
        t1 = (end.x - base.x) * direction.x + (end.y - base.y) * direction.y
    else:
        t1 = math.inf

    clipped = rect.clip_line(base, direction, t0, t1)
    if clipped is None or clipped[1] - clipped[0] <= EPS * rect.scale:
        return False
    c0, c1 = clipped

    if start is None or not rect.contains(start, tolerance):
        vertex = border.get(Coordinate(base.x + c0 * direction.x, base.y + c0 * direction.y))
        edge.set_origin(vertex)
    if end is None or not rect.contains(end, tolerance):
        vertex = border.get(Coordinate(base.x + c1 * direction.x, base.y + c1 * direction.y))
        twin.set_origin(vertex)
    return True


def _border_path(start: Vertex, end: Vertex, rect: BoundingRect,
                 border: _BorderVertices) -> List[Vertex]:
    """Vertices met walking the border from ``start`` to ``end`` in face order, both included."""
    perimeter = rect.perimeter
    s_start = rect.perimeter_position(start.coordinate)
    eps = EPS * rect.scale
    span = (rect.perimeter_position(end.coordinate) - s_start) % perimeter
    if span <= eps:
        span = 0.0

    corners = []
    for corner in border.corners:
        offset = (rect.perimeter_position(corner.coordinate) - s_start) % perimeter
        if eps < offset < span - eps and corner is not start and corner is not end:
            corners.append((offset, corner))
    corners.sort(key=lambda item: item[0])
    return [start] + [corner for _, corner in corners] + [end]


def _add_border_edge(origin: Vertex, destination: Vertex, site: Optional[Site],
                     new_edges: List[HalfEdge]) -> HalfEdge:
    inner, outer = new_edge_pair(origin=origin, site=site, twin_origin=destination)
    new_edges.extend((inner, outer))
    return inner


def _close_face(site: Site, face_edges: List[HalfEdge], rect: BoundingRect,
                border: _BorderVertices, tolerance: float,
                new_edges: List[HalfEdge], border_edges: List[HalfEdge]) -> None:
    """Order a face's edges around it and fill the gaps along the border."""
    site.first_edge = None

    if not face_edges:
        if not rect.contains(site.coordinate):
            return
        # A lone site owns the whole rectangle
        corners = border.corners
        ring = [_add_border_edge(corners[i], corners[(i + 1) % 4], site, new_edges)
                for i in range(4)]
        border_edges.extend(ring)
        for i, edge in enumerate(ring):
            edge.set_next(ring[(i + 1) % 4])
        site.first_edge = ring[0]
        return

    if rect.contains(site.coordinate):
        center = site.coordinate
    else:
        points = [e.origin.coordinate for e in face_edges] + \
                 [e.destination.coordinate for e in face_edges]
        center = Coordinate(sum(p.x for p in points) / len(points),
                            sum(p.y for p in points) / len(points))

    def midpoint_angle(edge: HalfEdge) -> float:
        a, b = edge.origin, edge.destination
        return get_angle(Coordinate((a.x + b.x) / 2, (a.y + b.y) / 2), center)

    face_edges.sort(key=midpoint_angle)
    count = len(face_edges)
    for i, edge in enumerate(face_edges):
        following = face_edges[(i + 1) % count]
        end, start = edge.destination, following.origin
        if end is start:
            edge.set_next(following)
            continue

        if rect.distance_to_border(end.coordinate) > tolerance or \
                rect.distance_to_border(start.coordinate) > tolerance:
            logger.warning("Face gap away from the border", site=repr(site),
                           gap_start=repr(end), gap_end=repr(start))
            edge.set_next(following)
            continue

        path = _border_path(end, start, rect, border)
        previous = edge
        for origin, destination in zip(path, path[1:]):
            border_edge = _add_border_edge(origin, destination, site, new_edges)
            border_edges.append(border_edge)
            previous.set_next(border_edge)
            previous = border_edge
        previous.set_next(following)

    site.first_edge = face_edges[0]


def _link_outer_ring(border_edges: List[HalfEdge], rect: BoundingRect) -> None:
    """Chain the outward twins of the border edges into the unbounded face."""
    ordered = sorted(border_edges, key=lambda e: rect.perimeter_position(e.origin.coordinate))
    for i, edge in enumerate(ordered):
        edge.twin.set_next(ordered[i - 1].twin)


def bound(edges: List[HalfEdge], vertices: List[Vertex], rect: BoundingRect,
          sites: Optional[Sequence[Site]] = None,
          tolerance: Optional[float] = None) -> Tuple[List[HalfEdge], List[Vertex]]:
    """
    Clip a diagram to a rectangle.

    Sites are never removed or renumbered. Every surviving cell becomes a
    closed ring of half-edges traversed clockwise (y pointing down), border
    edges included; their twins form the ring of the outside face, with no
    incident site.

    Args:
        edges: Half-edges from the sweep
        vertices: Vertices from the sweep
        rect: The bounding rectangle
        sites: Sites of the diagram; collected from the edges when omitted
        tolerance: Slack for inside tests relative to the larger rectangle
            side, settings.clip_tolerance by default. A vertex further out
            than that is discarded and its edges are clipped.

    Returns:
        Tuple of (edges, vertices) of the bounded diagram
    """
    if tolerance is None:
        tolerance = settings.clip_tolerance
    # Absolute distance from here on
    tolerance = tolerance * rect.scale

    if sites is None:
        found = {}
        for edge in edges:
            if edge.incident_site is not None:
                found[id(edge.incident_site)] = edge.incident_site
        sites = list(found.values())

    logger.info("Bounding diagram", edges=len(edges), vertices=len(vertices),
                rect=(rect.x, rect.y, rect.width, rect.height))

    border = _BorderVertices(rect)
    kept: List[HalfEdge] = []
    dropped = 0
    for edge, twin in _edge_pairs(edges):
        if edge.incident_site is None or twin.incident_site is None:
            continue
        if _clip_pair(edge, rect, border, tolerance):
            edge.breakpoint = None
            twin.breakpoint = None
            kept.extend((edge, twin))
        else:
            dropped += 1

    for edge in kept:
        edge.next = None
        edge.prev = None

    by_site: Dict[int, List[HalfEdge]] = {id(site): [] for site in sites}
    for edge in kept:
        by_site.setdefault(id(edge.incident_site), []).append(edge)

    new_edges: List[HalfEdge] = []
    border_edges: List[HalfEdge] = []
    for site in sites:
        _close_face(site, by_site[id(site)], rect, border, tolerance, new_edges, border_edges)
    if border_edges:
        _link_outer_ring(border_edges, rect)

    result_edges = kept + new_edges

    inside = [v for v in vertices if rect.contains(v.coordinate, tolerance)]
    for vertex in inside:
        vertex.incident_edges = []
    used_border = []
    for vertex in border.all():
        vertex.incident_edges = []
    for edge in result_edges:
        edge.origin.incident_edges.append(edge)
    for vertex in border.all():
        if vertex.incident_edges:
            used_border.append(vertex)

    result_vertices = inside + used_border
    logger.info("Diagram bounded", edges=len(result_edges), vertices=len(result_vertices),
                dropped_edges=dropped * 2, border_vertices=len(used_border))
    return result_edges, result_vertices
