"""
Voronoi diagram result and facade.

compute_voronoi() hands back the raw DCEL lists. VoronoiDiagram wraps them
with numpy views and cell connectivity, and Voronoi generates sites when
none are given before computing the bounded diagram.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from ..config import settings
from .bounding import BoundingRect
from .dcel import HalfEdge, Site, Vertex
from .errors import InvalidInputError
from .fortune import compute_voronoi
from .sites import generate_random_sites

logger = structlog.get_logger()

RectLike = Union[BoundingRect, Tuple[float, float, float, float]]


def as_bounding_rect(rect: Optional[RectLike]) -> BoundingRect:
    """Accept a BoundingRect or an (x, y, width, height) tuple; None gives the default size."""
    if rect is None:
        return BoundingRect(0.0, 0.0, settings.default_rect_width, settings.default_rect_height)
    if isinstance(rect, BoundingRect):
        return rect
    if len(rect) != 4:
        raise InvalidInputError(f"Expected (x, y, width, height), got {rect!r}")
    return BoundingRect(*(float(v) for v in rect))


@dataclass
class VoronoiDiagram:
    """Voronoi diagram as DCEL lists.

    Sites keep their input order: ``sites[i].index == i``.
    """
    sites: List[Site]
    vertices: List[Vertex]
    edges: List[HalfEdge]
    rect: Optional[BoundingRect] = None
    seed: Optional[Union[str, int]] = field(default=None)

    @property
    def is_bounded(self) -> bool:
        return self.rect is not None

    def site_coordinates(self) -> np.ndarray:
        """[x, y] per site."""
        return np.array([[s.x, s.y] for s in self.sites], dtype=float).reshape(-1, 2)

    def vertex_coordinates(self) -> np.ndarray:
        """[x, y] per vertex, border vertices included for bounded diagrams."""
        return np.array([[v.x, v.y] for v in self.vertices], dtype=float).reshape(-1, 2)

    def cell_polygon(self, index: int) -> Optional[np.ndarray]:
        """
        Corners of one cell in traversal order.

        Args:
            index: Site index

        Returns:
            Array of [x, y] corners, None if the cell is not closed
        """
        polygon = self.sites[index].polygon()
        if polygon is None:
            return None
        return np.array(polygon, dtype=float)

    def cell_neighbors(self) -> List[List[int]]:
        """Indices of the sites sharing an edge with each site, sorted."""
        neighbors = [set() for _ in self.sites]
        for edge in self.edges:
            site = edge.incident_site
            other = edge.twin.incident_site if edge.twin is not None else None
            if site is None or other is None:
                continue
            neighbors[site.index].add(other.index)
        return [sorted(n) for n in neighbors]

    def cell_border_flags(self) -> np.ndarray:
        """1 for cells touching the bounding rectangle, 0 otherwise."""
        flags = np.zeros(len(self.sites), dtype=np.uint8)
        for edge in self.edges:
            if edge.incident_site is not None and edge.twin is not None \
                    and edge.twin.incident_site is None:
                flags[edge.incident_site.index] = 1
        return flags

    def edge_segments(self) -> np.ndarray:
        """
        One [[x0, y0], [x1, y1]] segment per twin pair with both ends known.

        Border edges of a bounded diagram are included.
        """
        segments = []
        seen = set()
        for edge in self.edges:
            if id(edge) in seen:
                continue
            seen.add(id(edge))
            if edge.twin is not None:
                seen.add(id(edge.twin))
            start, end = edge.origin, edge.destination
            if start is None or end is None:
                continue
            segments.append([[start.x, start.y], [end.x, end.y]])
        return np.array(segments, dtype=float).reshape(-1, 2, 2)


class Voronoi:
    """
    Bounded Voronoi diagram of given or generated sites.

    Args:
        sites: Site coordinates; generated inside ``rect`` when None
        num_points: Number of sites to generate when ``sites`` is None
        rect: Bounding rectangle as BoundingRect or (x, y, width, height)
        seed: Seed for site generation
    """

    def __init__(self, sites: Optional[Union[np.ndarray, Sequence[Sequence[float]]]] = None,
                 num_points: int = 0, rect: Optional[RectLike] = None,
                 seed: Optional[Union[str, int]] = None):
        self.rect = as_bounding_rect(rect)
        self.seed = seed

        if sites is None:
            self.sites = generate_random_sites(num_points, self.rect, seed)
        else:
            self.sites = np.array(sites, dtype=float).reshape(-1, 2)

        voronoi_sites, vertices, edges = compute_voronoi(self.sites, bounding_rect=self.rect)
        self.diagram = VoronoiDiagram(voronoi_sites, vertices, edges, rect=self.rect, seed=seed)
        logger.info("Voronoi model ready", sites=len(voronoi_sites), generated=sites is None)

    @property
    def voronoi_sites(self) -> List[Site]:
        return self.diagram.sites

    @property
    def voronoi_vertices(self) -> List[Vertex]:
        return self.diagram.vertices

    @property
    def voronoi_edges(self) -> List[HalfEdge]:
        return self.diagram.edges
