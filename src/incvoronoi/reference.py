import numpy as np
from scipy.spatial import Voronoi
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from .export import VoronoiMesh2D, mesh_from_polygons
from .polygon import ConvexPolygon


def _make_reflections_2d(points: np.ndarray, bounds, include_diagonals: bool = True) -> np.ndarray:
    """
    Ghost seeds: points mirrored across every side of the bounding box
    (and, with include_diagonals, across its corners).

    bounds: (minx, miny, maxx, maxy)
    """
    minx, miny, maxx, maxy = map(float, bounds)

    # (scale, offset) per axis: identity, mirror at min, mirror at max
    mirror_x = [(1.0, 0.0), (-1.0, 2 * minx), (-1.0, 2 * maxx)]
    mirror_y = [(1.0, 0.0), (-1.0, 2 * miny), (-1.0, 2 * maxy)]

    ghosts = []
    for i, (sx, ox) in enumerate(mirror_x):
        for j, (sy, oy) in enumerate(mirror_y):
            if i == 0 and j == 0:
                continue
            if i and j and not include_diagonals:
                continue
            ghosts.append(points * np.array([sx, sy]) + np.array([ox, oy]))

    return np.vstack(ghosts) if ghosts else np.zeros((0, 2), dtype=np.float64)


def _drop_collinear(ring: np.ndarray, tol: float) -> np.ndarray:
    """Remove ring vertices closer than tol to the line through their neighbors."""
    prev = np.roll(ring, 1, axis=0)
    nxt = np.roll(ring, -1, axis=0)
    chord = nxt - prev
    cross = chord[:, 0] * (ring[:, 1] - prev[:, 1]) - chord[:, 1] * (ring[:, 0] - prev[:, 0])
    dist = np.abs(cross) / np.maximum(np.linalg.norm(chord, axis=1), np.finfo(np.float64).tiny)
    return ring[dist > tol]


def compute_reference_voronoi(
    polygon,
    seeds: np.ndarray,
    *,
    reflection_diagonals: bool = True,
    weld_decimals: int = 9,
) -> VoronoiMesh2D:
    """
    Batch Voronoi diagram of seeds clipped to a convex polygon, built with SciPy.

    Used to cross-check the incremental engine:
    - SciPy Voronoi produces infinite regions for hull points, so mirrored ghost
      seeds are added around the polygon bounds.
    - Every ghost is at least as far from any point of the bounding box as the
      seed it mirrors, so clipped regions of the original seeds are exact.
    - Cell i corresponds to seeds[i].
    """
    coords = polygon.to_array() if isinstance(polygon, ConvexPolygon) else np.asarray(polygon, dtype=np.float64)
    poly = Polygon(coords)
    if poly.is_empty or not poly.is_valid:
        raise ValueError("polygon must be a valid, non-empty polygon")

    seeds = np.asarray(seeds, dtype=np.float64)
    if seeds.ndim != 2 or seeds.shape[1] != 2:
        raise ValueError("seeds must be (N,2)")
    if len(seeds) == 0:
        return mesh_from_polygons([], weld_decimals)

    ghosts = _make_reflections_2d(seeds, poly.bounds, include_diagonals=reflection_diagonals)
    vor = Voronoi(np.vstack([seeds, ghosts]))

    polygons = []
    for i in range(len(seeds)):
        region = vor.regions[vor.point_region[i]]
        if -1 in region or len(region) < 3:
            continue

        clipped = Polygon(vor.vertices[region]).intersection(poly)
        if clipped.is_empty or clipped.geom_type != "Polygon":
            continue

        ring = np.array(orient(clipped, sign=1.0).exterior.coords[:-1], dtype=np.float64)
        # ghost edges lying on a polygon side leave extra points along it
        ring = _drop_collinear(ring, 10.0 ** -weld_decimals)
        if len(ring) < 3:
            continue
        polygons.append((i, i, ring))

    return mesh_from_polygons(polygons, weld_decimals)
