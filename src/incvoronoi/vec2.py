from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vec2:
    """
    Immutable 2D point / vector.
    Division by zero and normalizing the zero vector both give the zero vector,
    so degenerate inputs never fault inside the diagram code.
    """
    x: float
    y: float

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> "Vec2":
        return self.scale(k)

    def __rmul__(self, k: float) -> "Vec2":
        return self.scale(k)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __str__(self) -> str:
        return f"({self.x:.3f},{self.y:.3f})"

    def scale(self, k: float) -> "Vec2":
        return Vec2(self.x * k, self.y * k)

    def div(self, k: float) -> "Vec2":
        if k == 0.0:
            return Vec2(0.0, 0.0)
        return Vec2(self.x / k, self.y / k)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vec2") -> float:
        """z-component of the outer product."""
        return self.x * other.y - self.y * other.x

    def norm2(self) -> float:
        return self.x * self.x + self.y * self.y

    def norm(self) -> float:
        return math.sqrt(self.norm2())

    def distance(self, other: "Vec2") -> float:
        return (self - other).norm()

    def normalize(self) -> "Vec2":
        return self.div(self.norm())

    def rotate90(self) -> "Vec2":
        return Vec2(-self.y, self.x)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    @staticmethod
    def midpoint(a: "Vec2", b: "Vec2") -> "Vec2":
        return Vec2((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)

    @staticmethod
    def unit_between(a: "Vec2", b: "Vec2") -> "Vec2":
        """Unit vector pointing from a to b (zero if a == b)."""
        return (b - a).div(a.distance(b))

    @staticmethod
    def angle_between(a: "Vec2", b: "Vec2") -> float:
        """Unsigned angle in [0, pi]."""
        denom = math.sqrt(a.norm2() * b.norm2())
        if denom == 0.0:
            return 0.0
        cos_theta = max(-1.0, min(1.0, a.dot(b) / denom))
        return math.acos(cos_theta)

    @staticmethod
    def angle_from_axis(v: "Vec2") -> float:
        """
        Angle from the +x axis to v in [0, 2*pi).
        arccos of the cosine, mirrored to 2*pi - theta when the outer product is negative.
        """
        axis = Vec2(1.0, 0.0)
        theta = Vec2.angle_between(axis, v)
        if axis.cross(v) < 0.0:
            theta = 2.0 * math.pi - theta
        if theta >= 2.0 * math.pi:
            theta = 0.0
        return theta
