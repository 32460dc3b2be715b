"""
Fortune's sweepline algorithm.

The sweepline moves towards increasing y. Site events split the arc above a
new site, circle events remove an arc whose neighbours' breakpoints have
converged and emit a Voronoi vertex. Half-edges are emitted as the beach
line changes; the edge traced by a breakpoint (L, R) bounds R and its twin
bounds L.
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from .beach_line import BeachLine, BeachNode
from .bounding import BoundingRect, bound
from .dcel import HalfEdge, Site, Vertex, new_edge_pair
from .errors import InvalidInputError, MalformedTreeError
from .events import Event, EventKind, EventQueue
from .geometry import circle_from_points, is_clockwise, orientation

logger = structlog.get_logger()

VoronoiOutput = Tuple[List[Site], List[Vertex], List[HalfEdge]]


def make_sites(points: Iterable[Sequence[float]]) -> List[Site]:
    """
    Build one Site per distinct input point, keeping input order.

    Repeated points are dropped with a warning: coincident sites have no
    bisector.
    """
    sites: List[Site] = []
    seen = set()
    for point in points:
        x, y = float(point[0]), float(point[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.error("Non-finite site coordinate", x=x, y=y)
            raise InvalidInputError(f"Site coordinates must be finite, got ({x}, {y})")
        if (x, y) in seen:
            logger.warning("Dropping duplicate site", x=x, y=y)
            continue
        seen.add((x, y))
        sites.append(Site(x, y, index=len(sites)))
    return sites


class FortuneSweep:
    """
    Drives one sweep over a set of sites.

    The sweep owns the beach line, the event queue and the growing DCEL lists.
    compute() starts from scratch on every call.
    """

    def __init__(self):
        self.beach_line = BeachLine()
        self.event_queue = EventQueue()
        self.sites: List[Site] = []
        self.vertices: List[Vertex] = []
        self.edges: List[HalfEdge] = []
        self.sweep_y = -math.inf

    def compute(self, points: Iterable[Sequence[float]]) -> VoronoiOutput:
        """
        Run the sweep.

        Args:
            points: Site coordinates as (x, y) pairs

        Returns:
            Tuple of (sites, vertices, edges) of the unbounded diagram
        """
        self.beach_line = BeachLine()
        self.sites = make_sites(points)
        self.vertices = []
        self.edges = []
        self.sweep_y = -math.inf
        self.event_queue = EventQueue([Event.site_event(site) for site in self.sites])

        logger.info("Starting sweep", sites=len(self.sites))

        while not self.event_queue.is_empty:
            event = self.event_queue.dequeue()
            if event is None:
                break
            self.sweep_y = event.coordinate.y

            if event.kind is EventKind.SITE:
                self.handle_site_event(event.site)
            else:
                self.handle_circle_event(event)

        logger.info("Sweep finished", sites=len(self.sites),
                    vertices=len(self.vertices), edges=len(self.edges))
        return self.sites, self.vertices, self.edges

    # Site events

    def handle_site_event(self, site: Site) -> None:
        """Insert the arc of a new site into the beach line."""
        if self.beach_line.is_empty:
            self.beach_line.root = BeachNode.arc(site)
            return

        arc = self.beach_line.find_arc_above(site.coordinate)
        self._invalidate_circle_event(arc)

        if arc.site.y == site.y:
            # The arc above is itself still on the sweepline: every site seen
            # so far shares this y, so the arcs sit side by side.
            self._insert_beside(arc, site)
            return

        old_site = arc.site
        #        (old, new)
        #        /        \
        #     old      (new, old)
        #               /      \
        #             new      old
        outer = BeachNode.breakpoint(old_site, site)
        inner = BeachNode.breakpoint(site, old_site)
        left_arc = BeachNode.arc(old_site)
        middle_arc = BeachNode.arc(site)
        right_arc = BeachNode.arc(old_site)
        inner.adopt(middle_arc, right_arc)
        outer.adopt(left_arc, inner)

        # Both breakpoints start at the same point and trace the same
        # bisector in opposite directions; the origins are not known yet.
        outer_edge, inner_edge = new_edge_pair(
            breakpoint=outer, site=site,
            twin_breakpoint=inner, twin_site=old_site,
        )
        outer.edge = outer_edge
        inner.edge = inner_edge
        self.edges.extend((outer_edge, inner_edge))

        self.beach_line.replace(arc, outer)
        logger.debug("Site event", site=repr(site), split=repr(old_site))

        left_neighbour = left_arc.predecessor()
        if left_neighbour is not None:
            self.check_circle_event(left_neighbour, left_arc, middle_arc)
        right_neighbour = right_arc.successor()
        if right_neighbour is not None:
            self.check_circle_event(middle_arc, right_arc, right_neighbour)

    def _insert_beside(self, arc: BeachNode, site: Site) -> None:
        """Split a degenerate arc on the sweepline into two arcs side by side."""
        if site.x > arc.site.x:
            left_site, right_site = arc.site, site
        else:
            left_site, right_site = site, arc.site

        breakpoint = BeachNode.breakpoint(left_site, right_site)
        left_arc = BeachNode.arc(left_site)
        right_arc = BeachNode.arc(right_site)
        breakpoint.adopt(left_arc, right_arc)

        # The shared edge comes in from infinity, so the twin has no origin
        edge, _twin = new_edge_pair(breakpoint=breakpoint, site=right_site,
                                    twin_site=left_site)
        breakpoint.edge = edge
        self.edges.extend((edge, edge.twin))

        self.beach_line.replace(arc, breakpoint)
        logger.debug("Site event on the first sweep row", site=repr(site))

        left_neighbour = left_arc.predecessor()
        if left_neighbour is not None:
            self.check_circle_event(left_neighbour, left_arc, right_arc)
        right_neighbour = right_arc.successor()
        if right_neighbour is not None:
            self.check_circle_event(left_arc, right_arc, right_neighbour)

    # Circle events

    def handle_circle_event(self, event: Event) -> None:
        """Remove the vanishing arc and emit the Voronoi vertex at the circle center."""
        arc = event.arc
        if arc is None or arc.circle_event is not event:
            logger.debug("Skipping stale circle event", point=repr(event.coordinate))
            return
        arc.circle_event = None

        predecessor = arc.predecessor()
        successor = arc.successor()
        if predecessor is None or successor is None:
            logger.error("Circle event arc at the end of the beach line", arc=repr(arc))
            raise MalformedTreeError(f"Vanishing {arc!r} is missing a neighbour")

        deletion = self.beach_line.delete_arc(arc, predecessor, successor, event.coordinate.y)

        self._invalidate_circle_event(predecessor)
        self._invalidate_circle_event(successor)

        vertex = Vertex.at(event.center)
        self.vertices.append(vertex)

        # Around the vertex x, with B the vanished arc between A and C:
        #
        #    A   \   B   /   C        left = (A, B), right = (B, C)
        #         \     /             both breakpoint edges now start at x
        #          \   /
        #            x                new breakpoint (A, C) traces downward
        #       A    |    C
        left_edge = deletion.left.edge
        right_edge = deletion.right.edge
        if left_edge is None or right_edge is None:
            raise MalformedTreeError("Breakpoint without a traced edge")
        left_edge.set_origin(vertex)
        right_edge.set_origin(vertex)

        left_site, right_site = deletion.updated.sites
        new_edge, new_twin = new_edge_pair(
            breakpoint=deletion.updated, site=right_site,
            twin_origin=vertex, twin_site=left_site,
        )
        self.edges.extend((new_edge, new_twin))

        # Face B: (B, C) twin runs into x, then (A, B) leaves it
        right_edge.twin.set_next(left_edge)
        # Face A: (A, B) twin runs into x, then the new twin leaves it
        left_edge.twin.set_next(new_twin)
        # Face C: the new edge runs into x, then (B, C) leaves it
        new_edge.set_next(right_edge)

        vertex.incident_edges.extend((left_edge, right_edge, new_twin))
        deletion.updated.edge = new_edge

        logger.debug("Circle event", vertex=repr(vertex), arc=repr(arc))

        before = predecessor.predecessor()
        if before is not None:
            self.check_circle_event(before, predecessor, successor)
        after = successor.successor()
        if after is not None:
            self.check_circle_event(predecessor, successor, after)

    def check_circle_event(self, left: BeachNode, middle: BeachNode,
                           right: BeachNode) -> Optional[Event]:
        """
        Register a circle event if the breakpoints around ``middle`` converge.

        Returns:
            The new event, or None when the arcs diverge or the sites are collinear
        """
        if left.site is right.site:
            return None

        a = left.site.coordinate
        b = middle.site.coordinate
        c = right.site.coordinate
        if orientation(a, b, c) <= 0:
            # Collinear, or the breakpoints move apart
            return None
        circle = circle_from_points(a, b, c)
        if circle is None or not is_clockwise(a, b, c, circle.center):
            return None

        event = Event.circle_event(circle.event_point, circle.center, middle)
        middle.circle_event = event
        self.event_queue.enqueue(event)
        return event

    def _invalidate_circle_event(self, arc: BeachNode) -> None:
        if arc.circle_event is not None:
            self.event_queue.remove(arc.circle_event)
            arc.circle_event = None


def compute_voronoi(points: Iterable[Sequence[float]],
                    bounding_rect: Optional[BoundingRect] = None) -> VoronoiOutput:
    """
    Compute the Voronoi diagram of a set of sites.

    Args:
        points: Site coordinates as (x, y) pairs
        bounding_rect: Optional BoundingRect to clip the diagram to

    Returns:
        Tuple of (sites, vertices, edges). Without a bounding rectangle,
        edges running to infinity have no origin or no destination.
    """
    sites, vertices, edges = FortuneSweep().compute(points)

    if bounding_rect is not None and sites:
        edges, vertices = bound(edges, vertices, bounding_rect, sites=sites)

    logger.info("Voronoi diagram computed", sites=len(sites),
                vertices=len(vertices), edges=len(edges),
                bounded=bounding_rect is not None)
    return sites, vertices, edges
