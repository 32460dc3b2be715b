"""
Voronoi diagrams with Fortune's sweepline algorithm.
"""

from .core import (BoundingRect, Coordinate, InvalidInputError, MalformedTreeError, Voronoi,
                   VoronoiDiagram, VoronoiError, bound, compute_voronoi, generate_random_sites)

__version__ = "0.1.0"

__all__ = ['BoundingRect', 'Coordinate', 'InvalidInputError', 'MalformedTreeError', 'Voronoi',
           'VoronoiDiagram', 'VoronoiError', 'bound', 'compute_voronoi', 'generate_random_sites']
