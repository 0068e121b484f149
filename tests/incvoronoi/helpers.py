from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image

from src.incvoronoi.vec2 import Vec2


def png_mean_abs_diff(png_a: bytes, png_b: bytes) -> float:
    a = np.asarray(Image.open(BytesIO(png_a)).convert("RGB"), dtype=np.float64)
    b = np.asarray(Image.open(BytesIO(png_b)).convert("RGB"), dtype=np.float64)
    if a.shape != b.shape:
        return float("inf")
    return float(np.mean(np.abs(a - b)))


def area_by_site(diagram) -> dict:
    return {c.site.site_id: c.area() for c in diagram.cells()}


def distance_gap(diagram, cell, p: Vec2) -> float:
    """How much farther p is from the cell's own site than from the nearest site."""
    nearest = min(c.site.pos.distance(p) for c in diagram.cells())
    return cell.site.pos.distance(p) - nearest


def has_vertex_near(cell, target: Vec2, tol: float = 1e-9) -> bool:
    return any(v.pos.distance(target) <= tol for v in cell.ring.vertices)


def shared_edges(cell, other_id: int):
    return [e for e in cell.edges if other_id in e.adjacent_cells and cell.cell_id in e.adjacent_cells]
