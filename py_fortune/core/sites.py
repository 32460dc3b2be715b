"""
Site generation and Lloyd relaxation.

Generators return (N, 2) numpy arrays of x, y coordinates that can be fed
straight into compute_voronoi().
"""

from typing import Optional, Sequence, Union

import numpy as np
import structlog

from ..config import settings
from ..utils.random import make_rng
from .bounding import BoundingRect
from .errors import InvalidInputError
from .fortune import compute_voronoi

logger = structlog.get_logger()

Seed = Union[str, int, None]


def generate_random_sites(count: int, rect: BoundingRect, seed: Seed = None) -> np.ndarray:
    """
    Generate uniformly distributed sites inside a rectangle.

    Args:
        count: Number of sites; 0 gives an empty array
        rect: Rectangle the sites are drawn from
        seed: Random seed for reproducibility

    Returns:
        Array of [x, y] site coordinates
    """
    if count < 0:
        raise InvalidInputError(f"Site count must not be negative, got {count}")
    if count == 0:
        return np.empty((0, 2))

    rng = make_rng(seed)
    xs = rng.uniform(rect.min_x, rect.max_x, count)
    ys = rng.uniform(rect.min_y, rect.max_y, count)
    logger.debug("Generated random sites", count=count, seed=seed)
    return np.column_stack([xs, ys])


def get_jittered_grid(width: float, height: float, spacing: float, seed: Seed = None) -> np.ndarray:
    """
    Generate jittered square grid points.

    Points start on a regular grid and are moved by up to 90% of half the
    spacing in each axis, which breaks up the artificial grid pattern while
    keeping sites evenly spread. It is the usual starting layout for
    relax_sites(), which smooths it further with Lloyd passes over the
    bounded diagram.

    Args:
        width: Grid width
        height: Grid height
        spacing: Distance between grid points
        seed: Random seed for reproducibility

    Returns:
        Array of [x, y] point coordinates
    """
    if spacing <= 0:
        raise InvalidInputError(f"Grid spacing must be positive, got {spacing}")

    rng = make_rng(seed)

    radius = spacing / 2  # square radius
    jittering = radius * 0.9  # max deviation
    double_jittering = jittering * 2

    def jitter():
        return rng.random() * double_jittering - jittering

    points = []
    y = radius
    while y < height:
        x = radius
        while x < width:
            xj = min(round(x + jitter(), 2), width)
            yj = min(round(y + jitter(), 2), height)
            points.append([xj, yj])
            x += spacing
        y += spacing

    if not points:
        return np.empty((0, 2))
    return np.array(points)


def compute_polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Args:
        vertices: Array of [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    x = vertices[:, 0]
    y = vertices[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum() / 2

    if abs(area) < 1e-10:
        return np.mean(vertices, axis=0)

    cx = ((x + x_next) * cross).sum() / (6.0 * area)
    cy = ((y + y_next) * cross).sum() / (6.0 * area)
    return np.array([cx, cy])


def relax_sites(sites: Union[np.ndarray, Sequence[Sequence[float]]], rect: BoundingRect,
                iterations: Optional[int] = None) -> np.ndarray:
    """Apply Lloyd's relaxation to even out site spacing.

    Each pass computes the bounded diagram and moves every site to the
    centroid of its cell. Sites whose cell could not be closed stay put.

    Args:
        sites: Sites to relax
        rect: Bounding rectangle; relaxed sites stay inside it
        iterations: Number of passes, settings.relax_iterations when None

    Returns:
        Relaxed site coordinates, one row per distinct input site
    """
    if iterations is None:
        iterations = settings.relax_iterations
    if iterations < 0:
        raise InvalidInputError(f"Iterations must not be negative, got {iterations}")

    points = np.array(sites, dtype=float).reshape(-1, 2)
    logger.info("Starting Lloyd's relaxation", sites=len(points), iterations=iterations)

    for iteration in range(iterations):
        diagram_sites, _, _ = compute_voronoi(points, bounding_rect=rect)
        relaxed = np.array([site.coordinate for site in diagram_sites], dtype=float).reshape(-1, 2)

        for site in diagram_sites:
            polygon = site.polygon()
            if polygon is None or len(polygon) < 3:
                continue
            relaxed[site.index] = compute_polygon_centroid(np.array(polygon))

        relaxed[:, 0] = np.clip(relaxed[:, 0], rect.min_x, rect.max_x)
        relaxed[:, 1] = np.clip(relaxed[:, 1], rect.min_y, rect.max_y)
        points = relaxed
        logger.debug("Relaxation pass done", iteration=iteration + 1)

    logger.info("Lloyd's relaxation completed")
    return points
