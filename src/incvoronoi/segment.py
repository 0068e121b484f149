from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .vec2 import Vec2


def _sign(v: float, eps: float = 0.0) -> int:
    if v > eps:
        return 1
    if v < -eps:
        return -1
    return 0


@dataclass(frozen=True)
class Segment:
    """
    Ordered pair of endpoints.
    Intersection is symmetric; side() depends on orientation (swapping p1/p2 flips the sign).
    """
    p1: Vec2
    p2: Vec2

    def __str__(self) -> str:
        return f"[{self.p1}:{self.p2}]"

    def _cross_value(self, p: Vec2) -> float:
        a, b = self.p1, self.p2
        return (a.x - b.x) * (p.y - a.y) - (a.y - b.y) * (p.x - a.x)

    def side(self, p: Vec2, tolerance: float = 0.0) -> int:
        """
        -1 / +1 for the two half-planes, 0 when p is on the supporting line
        (or within tolerance of it, measured as a distance).
        """
        eps = tolerance * self.length() if tolerance > 0.0 else 0.0
        return _sign(self._cross_value(p), eps)

    def _straddles(self, other: "Segment") -> bool:
        # touching the line counts
        return self._cross_value(other.p1) * self._cross_value(other.p2) <= 0.0

    def intersects(self, other: "Segment") -> bool:
        return self._straddles(other) and other._straddles(self)

    def intersection(self, other: "Segment") -> Optional[Vec2]:
        """
        Crossing point, or None when the segments do not meet or are parallel.
        Coincident segments are reported as None as well.
        """
        if not self.intersects(other):
            return None
        p1, p2, p3, p4 = self.p1, self.p2, other.p1, other.p2
        det = (p1.x - p2.x) * (p4.y - p3.y) - (p4.x - p3.x) * (p1.y - p2.y)
        if det == 0.0:
            return None
        t = ((p4.y - p3.y) * (p4.x - p2.x) + (p3.x - p4.x) * (p4.y - p2.y)) / det
        return Vec2(t * p1.x + (1.0 - t) * p2.x, t * p1.y + (1.0 - t) * p2.y)

    def length(self) -> float:
        return self.p1.distance(self.p2)

    def midpoint(self) -> Vec2:
        return Vec2.midpoint(self.p1, self.p2)

    def reversed(self) -> "Segment":
        return Segment(self.p2, self.p1)

    @staticmethod
    def perpendicular_bisector(p: Vec2, q: Vec2, length: float) -> "Segment":
        """Bisector of p and q as a segment of the given length centered on their midpoint."""
        m = Vec2.midpoint(p, q)
        w = Vec2.unit_between(p, q).rotate90()
        half = w.scale(length / 2.0)
        return Segment(m - half, m + half)
