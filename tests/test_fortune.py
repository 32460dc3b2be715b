"""Tests for the sweepline engine."""

import math

import numpy as np
import pytest
from scipy.spatial import Voronoi as ScipyVoronoi

from py_fortune.core.bounding import BoundingRect
from py_fortune.core.errors import InvalidInputError
from py_fortune.core.events import Event
from py_fortune.core.fortune import FortuneSweep, compute_voronoi, make_sites
from py_fortune.core.geometry import Coordinate, polygon_signed_area

RECT = BoundingRect(-5, -5, 20, 20)


def random_points(count, seed, size=100.0):
    rng = np.random.default_rng(seed)
    return rng.uniform(0, size, (count, 2))


def sweep_vertices(vertices):
    """Vertices emitted by circle events, leaving out clipping's border vertices."""
    return [v for v in vertices if not v.on_border]


def bisector_pairs(edges):
    """One half-edge per twin pair separating two sites."""
    pairs = []
    seen = set()
    for edge in edges:
        if id(edge) in seen:
            continue
        seen.add(id(edge))
        seen.add(id(edge.twin))
        if edge.incident_site is not None and edge.twin.incident_site is not None:
            pairs.append(edge)
    return pairs


class TestSmallInputs:
    """Test the boundary cases with one to three sites."""

    def test_empty(self):
        sites, vertices, edges = compute_voronoi([])
        assert sites == [] and vertices == [] and edges == []

    def test_empty_bounded(self):
        sites, vertices, edges = compute_voronoi([], bounding_rect=RECT)
        assert sites == [] and vertices == [] and edges == []

    def test_single_site(self):
        """Test one site gives no vertices and no edges."""
        sites, vertices, edges = compute_voronoi([(3, 4)])

        assert len(sites) == 1
        assert vertices == []
        assert edges == []

    @pytest.mark.parametrize("points", [
        [(0, 0), (10, 0)],
        [(0, 0), (3, 5)],
        [(3, 5), (0, 0)],
    ])
    def test_two_sites(self, points):
        """Test two sites give one unbounded bisector pair."""
        sites, vertices, edges = compute_voronoi(points)

        assert vertices == []
        assert len(edges) == 2
        edge, twin = edges
        assert edge.twin is twin and twin.twin is edge
        assert {edge.incident_site.index, twin.incident_site.index} == {0, 1}
        assert edge.destination is None or edge.origin is None

    def test_three_sites(self):
        """Test three sites meet at their circumcenter."""
        sites, vertices, edges = compute_voronoi([(0, 0), (10, 0), (5, 10)])

        assert len(sites) == 3
        assert len(vertices) == 1
        assert vertices[0].coordinate == pytest.approx((5, 3.75))
        assert len(edges) == 6
        assert len(vertices[0].incident_edges) == 3
        for edge in vertices[0].incident_edges:
            assert edge.origin is vertices[0]

    def test_collinear_triple(self):
        """Test collinear sites never produce a vertex."""
        sweep = FortuneSweep()
        sites, vertices, edges = sweep.compute([(0, 0), (5, 0), (10, 0)])

        assert vertices == []
        assert len(edges) == 4
        left, middle, right = list(sweep.beach_line.arcs())
        assert sweep.check_circle_event(left, middle, right) is None

    def test_vertical_collinear_triple(self):
        sites, vertices, edges = compute_voronoi([(0, 0), (0, 5), (0, 10)])

        assert vertices == []
        assert len(edges) == 4


class TestScenarios:
    """Test the bounded reference scenarios."""

    def test_triangle_in_rectangle(self):
        sites, vertices, edges = compute_voronoi([(0, 0), (10, 0), (5, 10)], bounding_rect=RECT)

        inner = sweep_vertices(vertices)
        assert len(inner) == 1
        assert inner[0].coordinate == pytest.approx((5, 3.75))

        assert len(sites) == 3
        for site in sites:
            ring = site.surrounding_edges()
            assert ring is not None
            assert all(edge.incident_site is site for edge in ring)

        ends = sorted(
            tuple(round(c, 6) for c in v.coordinate)
            for edge in bisector_pairs(edges)
            for v in (edge.origin, edge.destination)
            if v.on_border
        )
        assert ends == [(-5.0, 8.75), (5.0, -5.0), (15.0, 8.75)]

    def test_two_sites_in_rectangle(self):
        sites, vertices, edges = compute_voronoi([(0, 0), (10, 0)], bounding_rect=RECT)

        assert sweep_vertices(vertices) == []
        pairs = bisector_pairs(edges)
        assert len(pairs) == 1
        ends = sorted(tuple(v.coordinate) for v in (pairs[0].origin, pairs[0].destination))
        assert ends == [pytest.approx((5, -5)), pytest.approx((5, 15))]

    def test_collinear_triple_in_rectangle(self):
        sites, vertices, edges = compute_voronoi([(0, 0), (5, 0), (10, 0)], bounding_rect=RECT)

        assert sweep_vertices(vertices) == []
        for site in sites:
            assert site.surrounding_edges() is not None
            assert polygon_signed_area(site.polygon()) > 0


class TestRoundedCoordinates:
    """Test inputs whose coordinates carry rounding from trigonometry."""

    @staticmethod
    def hexagon_with_centre():
        ring = [(5 + 4 * math.cos(k * math.pi / 3), 5 + 4 * math.sin(k * math.pi / 3))
                for k in range(6)]
        return ring + [(5, 5)]

    def test_hexagon_with_centre(self):
        """Test sites on a circle plus its centre give one vertex per hexagon side."""
        sites, vertices, edges = compute_voronoi(self.hexagon_with_centre())

        assert len(sites) == 7
        inner = sweep_vertices(vertices)
        assert len(inner) == 6
        radius = 4 / math.sqrt(3)
        expected = sorted(
            (round(5 + radius * math.cos((k + 0.5) * math.pi / 3), 6),
             round(5 + radius * math.sin((k + 0.5) * math.pi / 3), 6))
            for k in range(6)
        )
        found = sorted((round(v.x, 6), round(v.y, 6)) for v in inner)
        assert found == [pytest.approx(point) for point in expected]

    def test_hexagon_with_centre_bounded(self):
        rect = BoundingRect(0, 0, 10, 10)
        sites, _, _ = compute_voronoi(self.hexagon_with_centre(), bounding_rect=rect)

        for site in sites:
            ring = site.surrounding_edges()
            assert ring is not None
            assert all(edge.incident_site is site for edge in ring)
        # The centre cell is the hexagon around (5, 5)
        assert len(sites[6].polygon()) == 6
        total = sum(polygon_signed_area(site.polygon()) for site in sites)
        assert total == pytest.approx(100)


class TestDiagramInvariants:
    """Test structural properties on random inputs."""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_twins_are_paired(self, seed):
        _, _, edges = compute_voronoi(random_points(60, seed))

        assert len(edges) % 2 == 0
        for edge in edges:
            assert edge.twin is not None
            assert edge.twin.twin is edge
            assert edge.twin is not edge

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_vertices_equidistant(self, seed):
        """Test every vertex is equidistant from the sites around it."""
        _, vertices, _ = compute_voronoi(random_points(60, seed))

        for vertex in vertices:
            around = {id(e.incident_site): e.incident_site for e in vertex.incident_edges}
            around.update({id(e.twin.incident_site): e.twin.incident_site
                           for e in vertex.incident_edges})
            distances = [vertex.coordinate.distance_to(s.coordinate) for s in around.values()]
            assert len(distances) >= 3
            assert max(distances) - min(distances) < 1e-6 * max(1.0, max(distances))

    @pytest.mark.parametrize("seed", [3, 11])
    def test_bounded_rings_closed(self, seed):
        """Test every cell is a closed ring with positive area."""
        rect = BoundingRect(0, 0, 100, 100)
        sites, _, edges = compute_voronoi(random_points(80, seed), bounding_rect=rect)

        assert len(sites) == 80
        for site in sites:
            ring = site.surrounding_edges()
            assert ring is not None
            assert all(edge.incident_site is site for edge in ring)
            for edge in ring:
                assert edge.next.prev is edge
                assert edge.destination is edge.next.origin
            assert polygon_signed_area(site.polygon()) > 0

    @pytest.mark.parametrize("seed", [3, 11])
    def test_cells_tile_rectangle(self, seed):
        rect = BoundingRect(0, 0, 100, 100)
        sites, _, _ = compute_voronoi(random_points(80, seed), bounding_rect=rect)

        total = sum(polygon_signed_area(site.polygon()) for site in sites)
        assert total == pytest.approx(rect.width * rect.height)

    def test_sites_inside_their_cells(self):
        rect = BoundingRect(0, 0, 100, 100)
        sites, _, _ = compute_voronoi(random_points(40, 5), bounding_rect=rect)

        for site in sites:
            polygon = site.polygon()
            # Convex cell traversed with positive area: the site is left of every side
            for (x0, y0), (x1, y1) in zip(polygon, polygon[1:] + polygon[:1]):
                cross = (x1 - x0) * (site.y - y0) - (y1 - y0) * (site.x - x0)
                assert cross >= -1e-9

    def test_idempotent(self):
        """Test the same input gives the same geometry twice."""
        points = random_points(50, 9)
        first = compute_voronoi(points)
        second = compute_voronoi(points)

        assert [v.coordinate for v in first[1]] == [v.coordinate for v in second[1]]
        assert len(first[2]) == len(second[2])

    def test_sweep_reuse(self):
        """Test one sweep instance can run again from scratch."""
        sweep = FortuneSweep()
        points = random_points(30, 2)
        _, vertices_1, edges_1 = sweep.compute(points)
        _, vertices_2, edges_2 = sweep.compute(points)

        assert len(vertices_1) == len(vertices_2)
        assert len(edges_1) == len(edges_2)


class TestAgainstScipy:
    """Compare vertex positions with scipy.spatial.Voronoi."""

    @pytest.mark.parametrize("seed", [0, 13, 21])
    def test_vertices_match(self, seed):
        points = random_points(100, seed)
        _, vertices, _ = compute_voronoi(points)
        ours = np.array([v.coordinate for v in vertices])
        reference = ScipyVoronoi(points).vertices

        assert len(ours) == len(reference)
        for vertex in ours:
            distances = np.hypot(*(reference - vertex).T)
            assert distances.min() < 1e-6
        for vertex in reference:
            distances = np.hypot(*(ours - vertex).T)
            assert distances.min() < 1e-6

    def test_neighbors_match(self):
        points = random_points(60, 17)
        sites, _, edges = compute_voronoi(points)
        ours = {tuple(sorted((e.incident_site.index, e.twin.incident_site.index))) for e in edges}
        reference = {tuple(sorted(map(int, pair))) for pair in ScipyVoronoi(points).ridge_points}

        assert ours == reference


class TestInputHandling:
    """Test site construction from raw coordinates."""

    def test_duplicates_dropped(self):
        sites = make_sites([(0, 0), (1, 2), (0, 0)])

        assert [s.coordinate for s in sites] == [(0, 0), (1, 2)]
        assert [s.index for s in sites] == [0, 1]

    @pytest.mark.parametrize("point", [(math.nan, 0), (0, math.inf), (-math.inf, 1)])
    def test_non_finite_rejected(self, point):
        with pytest.raises(InvalidInputError):
            compute_voronoi([(0, 0), point])

    def test_accepts_numpy(self):
        sites, _, _ = compute_voronoi(np.array([[0.0, 0.0], [4.0, 1.0], [2.0, 5.0]]))
        assert len(sites) == 3

    def test_stale_circle_event_ignored(self):
        """Test a circle event no longer held by its arc does nothing."""
        sweep = FortuneSweep()
        sweep.compute([(0, 0), (10, 0), (5, 10)])
        arc = next(sweep.beach_line.arcs())
        stale = Event.circle_event(Coordinate(0, 50), Coordinate(0, 40), arc)

        sweep.handle_circle_event(stale)

        assert len(sweep.vertices) == 1
        assert sweep.event_queue.is_empty
