from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .segment import Segment
from .vec2 import Vec2


def ring_edges(points: Sequence[Vec2]) -> List[Segment]:
    """Closed edge list vertex[i] -> vertex[i+1], wrapping; empty for fewer than 3 points."""
    if len(points) < 3:
        return []
    return [Segment(a, b) for a, b in zip(points, list(points[1:]) + [points[0]])]


class ConvexPolygon:
    """
    Convex polygon given by its vertex ring.
    Convexity is the caller's responsibility; is_convex() is available to check it.
    """

    def __init__(self, points: Sequence[Vec2]):
        self.points: List[Vec2] = list(points)
        self.edges: List[Segment] = ring_edges(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return "ConvexPolygon(" + " ".join(str(p) for p in self.points) + ")"

    def contains(self, point: Vec2) -> bool:
        """
        Crossing-number test: count edges hit by a rightward horizontal ray, inside iff odd.
        Touching an edge counts as a crossing.
        """
        if len(self.points) < 3:
            raise ValueError("Polygon needs at least 3 vertices")
        crossings = 0
        for edge in self.edges:
            if self._ray_to_right_crosses(point, edge):
                crossings += 1
        return crossings % 2 == 1

    @staticmethod
    def _ray_to_right_crosses(point: Vec2, edge: Segment) -> bool:
        max_x = max(edge.p1.x, edge.p2.x, point.x) + 1.0
        return Segment(point, Vec2(max_x, point.y)).intersects(edge)

    def signed_area(self) -> float:
        s = 0.0
        for e in self.edges:
            s += e.p1.cross(e.p2)
        return 0.5 * s

    def area(self) -> float:
        return abs(self.signed_area())

    def orientation(self) -> int:
        """+1 counter-clockwise, -1 clockwise, 0 degenerate."""
        a = self.signed_area()
        return 1 if a > 0.0 else (-1 if a < 0.0 else 0)

    def is_convex(self) -> bool:
        n = len(self.points)
        if n < 3 or self.orientation() == 0:
            return False
        turn = 0
        for i in range(n):
            a = self.points[i]
            b = self.points[(i + 1) % n]
            c = self.points[(i + 2) % n]
            z = (b - a).cross(c - b)
            if z == 0.0:
                continue
            s = 1 if z > 0.0 else -1
            if turn == 0:
                turn = s
            elif s != turn:
                return False
        return turn != 0

    def _inner_side(self) -> int:
        # Segment.side() of an interior point for every edge of a CCW ring is -1
        return -self.orientation()

    def strictly_contains(self, point: Vec2) -> bool:
        inner = self._inner_side()
        return inner != 0 and all(e.side(point) == inner for e in self.edges)

    def covers(self, point: Vec2) -> bool:
        """Half-plane test: inside or on an edge. Unlike contains(), a ray through a vertex cannot miscount."""
        inner = self._inner_side()
        return inner != 0 and all(e.side(point) in (0, inner) for e in self.edges)

    def on_boundary(self, point: Vec2) -> bool:
        inner = self._inner_side()
        sides = [e.side(point) for e in self.edges]
        return all(s in (0, inner) for s in sides) and 0 in sides

    def bounds(self) -> Tuple[float, float, float, float]:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)

    def diameter(self) -> float:
        return max(a.distance(b) for a in self.points for b in self.points)

    def centroid(self) -> Vec2:
        a = self.signed_area()
        if a == 0.0:
            n = len(self.points)
            return Vec2(sum(p.x for p in self.points) / n, sum(p.y for p in self.points) / n)
        cx = cy = 0.0
        for e in self.edges:
            c = e.p1.cross(e.p2)
            cx += (e.p1.x + e.p2.x) * c
            cy += (e.p1.y + e.p2.y) * c
        return Vec2(cx / (6.0 * a), cy / (6.0 * a))

    def to_array(self) -> np.ndarray:
        return np.array([[p.x, p.y] for p in self.points], dtype=np.float64).reshape(-1, 2)
