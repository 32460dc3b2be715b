"""
Core Voronoi construction functionality.
"""

from .bounding import BoundingRect, bound
from .dcel import HalfEdge, Site, Vertex
from .errors import InvalidInputError, MalformedTreeError, VoronoiError
from .fortune import FortuneSweep, compute_voronoi
from .geometry import Coordinate
from .sites import compute_polygon_centroid, generate_random_sites, get_jittered_grid, relax_sites
from .voronoi import Voronoi, VoronoiDiagram

__all__ = ['BoundingRect', 'bound', 'HalfEdge', 'Site', 'Vertex',
           'InvalidInputError', 'MalformedTreeError', 'VoronoiError',
           'FortuneSweep', 'compute_voronoi', 'Coordinate',
           'compute_polygon_centroid', 'generate_random_sites', 'get_jittered_grid', 'relax_sites',
           'Voronoi', 'VoronoiDiagram']
