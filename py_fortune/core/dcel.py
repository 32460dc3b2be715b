"""Doubly-connected edge list records produced by the sweep.

Faces are traced clockwise with y increasing downward: walking ``next``
along a face keeps the face's site on the right-hand side on screen, which
gives a positive shoelace area.
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

from .geometry import Coordinate

if TYPE_CHECKING:
    from .beach_line import BeachNode


class Site:
    """A Voronoi site and the face of its cell."""

    def __init__(self, x: float, y: float, index: int = 0):
        self.x = float(x)
        self.y = float(y)
        self.index = index
        # An edge on the border of this site's cell
        self.first_edge: Optional["HalfEdge"] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def surrounding_edges(self) -> Optional[List["HalfEdge"]]:
        """Edges of the cell boundary, or None if the boundary is not a closed ring."""
        if self.first_edge is None:
            return None
        return self.first_edge.walk()

    def polygon(self) -> Optional[List[Coordinate]]:
        """Cell corners in traversal order, None for open or unclipped cells."""
        ring = self.surrounding_edges()
        if ring is None or any(edge.origin is None for edge in ring):
            return None
        return [edge.origin.coordinate for edge in ring]

    def __repr__(self):
        return f"Site({round(self.x, 1)}, {round(self.y, 1)})"


class Vertex:
    """A vertex of the diagram with its outgoing half-edges."""

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)
        self.incident_edges: List["HalfEdge"] = []
        # Set for vertices created where clipping meets the bounding rectangle
        self.on_border = False

    @classmethod
    def at(cls, coordinate: Coordinate) -> "Vertex":
        return cls(coordinate.x, coordinate.y)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def __repr__(self):
        return f"Vertex({round(self.x, 1)}, {round(self.y, 1)})"


class HalfEdge:
    """
    Directed edge on the boundary of one site's cell.

    While a breakpoint of the beach line is still tracing the edge, ``origin``
    is None and ``breakpoint`` refers to that node instead. ``destination`` is
    the twin's origin.
    """

    def __init__(self, origin: Optional[Vertex] = None,
                 breakpoint: Optional["BeachNode"] = None,
                 incident_site: Optional[Site] = None,
                 twin: Optional["HalfEdge"] = None):
        self.origin = origin
        self.breakpoint = breakpoint
        self.twin: Optional["HalfEdge"] = None
        self.next: Optional["HalfEdge"] = None
        self.prev: Optional["HalfEdge"] = None
        self.incident_site: Optional[Site] = None

        if incident_site is not None:
            self.set_incident_site(incident_site)
        if twin is not None:
            self.set_twin(twin)

    @property
    def destination(self) -> Optional[Vertex]:
        return self.twin.origin if self.twin is not None else None

    def set_origin(self, vertex: Vertex) -> None:
        """Finalize the origin, dropping the breakpoint anchor."""
        self.origin = vertex
        self.breakpoint = None

    def set_next(self, edge: "HalfEdge") -> None:
        self.next = edge
        edge.prev = self

    def set_twin(self, edge: "HalfEdge") -> None:
        self.twin = edge
        edge.twin = self

    def set_incident_site(self, site: Site) -> None:
        self.incident_site = site
        if site.first_edge is None:
            site.first_edge = self

    def walk(self) -> Optional[List["HalfEdge"]]:
        """
        Follow ``next`` pointers until they loop back to this edge.

        Returns:
            The edges of the ring starting with this one, or None if the chain is open
        """
        ring = [self]
        current = self.next
        while current is not self:
            if current is None or len(ring) > _MAX_RING:
                return None
            ring.append(current)
            current = current.next
        return ring

    def __repr__(self):
        if self.origin is not None:
            start = repr(self.origin.coordinate)
        elif self.breakpoint is not None:
            start = f"b{self.breakpoint!r}"
        else:
            start = "inf"
        end = repr(self.destination.coordinate) if self.destination is not None else "inf"
        return f"HalfEdge({start} -> {end})"


# Guard against corrupted next chains that cycle without returning
_MAX_RING = 1_000_000


def new_edge_pair(origin: Optional[Vertex] = None,
                  breakpoint: Optional["BeachNode"] = None,
                  site: Optional[Site] = None,
                  twin_origin: Optional[Vertex] = None,
                  twin_breakpoint: Optional["BeachNode"] = None,
                  twin_site: Optional[Site] = None) -> Tuple[HalfEdge, HalfEdge]:
    """Create two twin half-edges."""
    edge = HalfEdge(origin=origin, breakpoint=breakpoint, incident_site=site)
    twin = HalfEdge(origin=twin_origin, breakpoint=twin_breakpoint,
                    incident_site=twin_site, twin=edge)
    return edge, twin
