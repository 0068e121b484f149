from typing import List

import numpy as np
from shapely.geometry import Point, Polygon

from .datastructures import Site
from .polygon import ConvexPolygon
from .vec2 import Vec2


def sample_points_in_polygon(
    polygon,
    *,
    target_area: float | None = None,
    n_points: int | None = None,
    rng: np.random.Generator,
    max_tries: int = 1_000_000,
) -> np.ndarray:
    """
    Rejection-sample points strictly inside polygon ((N,2) array or ConvexPolygon).
    Either n_points or target_area (area per point) decides the count.
    """
    coords = polygon.to_array() if isinstance(polygon, ConvexPolygon) else np.asarray(polygon, dtype=np.float64)
    poly = Polygon(coords)
    area = poly.area

    if n_points is None:
        if target_area is None:
            raise ValueError("Either target_area or n_points required")
        if target_area <= 0:
            raise ValueError("target_area must be > 0")
        n_points = max(1, int(area / target_area))
    if n_points < 0:
        raise ValueError("n_points must be >= 0")

    minx, miny, maxx, maxy = poly.bounds

    points = []
    tries = 0
    while len(points) < n_points:
        if tries >= max_tries:
            raise RuntimeError(f"Sampling failed: needed {n_points} points, got {len(points)} (tries={tries})")
        tries += 1
        p = Point(
            rng.uniform(minx, maxx),
            rng.uniform(miny, maxy),
        )
        if poly.contains(p):
            points.append((p.x, p.y))

    return np.array(points, dtype=np.float64).reshape(-1, 2)


def sample_sites(polygon, n: int, rng: np.random.Generator, *, first_id: int = 0) -> List[Site]:
    """Like sample_points_in_polygon, wrapped into Sites tagged with their own ID."""
    pts = sample_points_in_polygon(polygon, n_points=n, rng=rng)
    return [
        Site(site_id=first_id + i, pos=Vec2(float(x), float(y)), cluster_tag=first_id + i)
        for i, (x, y) in enumerate(pts)
    ]


def random_sites_in_box(n: int, rng: np.random.Generator, *, margin: float = 0.1, first_id: int = 0) -> List[Site]:
    """Uniform sites in [margin, 1 - margin]^2 of the unit square."""
    if not 0.0 <= margin < 0.5:
        raise ValueError("margin must be in [0, 0.5)")
    if n < 0:
        raise ValueError("n must be >= 0")
    span = 1.0 - 2.0 * margin
    xy = rng.random((n, 2)) * span + margin
    return [
        Site(site_id=first_id + i, pos=Vec2(float(x), float(y)), cluster_tag=first_id + i)
        for i, (x, y) in enumerate(xy)
    ]
