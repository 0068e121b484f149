from __future__ import annotations

from typing import List, Sequence, Tuple

from .datastructures import VoronoiEdge, VoronoiPolygon, VoronoiVertex
from .segment import Segment
from .vec2 import Vec2


class BoundingRegion(VoronoiPolygon):
    """
    Fixed convex domain of a diagram.
    Side i runs from vertex i to vertex i+1; corner i lies on sides {i-1, i}.
    """

    @classmethod
    def from_points(cls, points: Sequence[Tuple[float, float]] | Sequence[Vec2]) -> "BoundingRegion":
        pts = [p if isinstance(p, Vec2) else Vec2(float(p[0]), float(p[1])) for p in points]
        n = len(pts)
        if n < 3:
            raise ValueError("Bounding region needs at least 3 vertices")
        if not all(p.is_finite() for p in pts):
            raise ValueError("Bounding region vertices must be finite")
        corners = [VoronoiVertex.corner(p, [(i - 1) % n, i]) for i, p in enumerate(pts)]
        region = cls(corners)
        if not region.is_convex():
            raise ValueError("Bounding region must be a non-degenerate convex polygon")
        return region

    @classmethod
    def rectangle(cls, width: float, height: float, origin: Tuple[float, float] = (0.0, 0.0)) -> "BoundingRegion":
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        x0, y0 = map(float, origin)
        return cls.from_points([
            (x0, y0),
            (x0 + width, y0),
            (x0 + width, y0 + height),
            (x0, y0 + height),
        ])

    @classmethod
    def unit_square(cls) -> "BoundingRegion":
        return cls.rectangle(1.0, 1.0)

    def side_count(self) -> int:
        return len(self.vertices)

    def side_segment(self, boundary_id: int) -> Segment:
        n = len(self.points)
        return Segment(self.points[boundary_id % n], self.points[(boundary_id + 1) % n])

    def boundary_edges(self) -> List[VoronoiEdge]:
        n = len(self.vertices)
        return [VoronoiEdge(self.vertices[i], self.vertices[(i + 1) % n]) for i in range(n)]

    def default_bisector_length(self) -> float:
        return 2.0 * self.diameter()
