from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from .polygon import ConvexPolygon
from .segment import Segment
from .vec2 import Vec2


class DegenerateCellError(RuntimeError):
    """A bisector did not split a cell into exactly two parts."""


@dataclass(frozen=True)
class Site:
    """Generator point of one cell. cluster_tag is carried through untouched."""
    site_id: int
    pos: Vec2
    cluster_tag: Any = None


@dataclass(frozen=True)
class VoronoiVertex:
    """
    boundary_set: IDs of the bounding-region sides the vertex lies on
    (empty = interior, one = mid-side, two = region corner).
    """
    pos: Vec2
    is_corner: bool = False
    boundary_set: FrozenSet[int] = frozenset()

    @classmethod
    def corner(cls, pos: Vec2, sides: Iterable[int]) -> "VoronoiVertex":
        return cls(pos=pos, is_corner=True, boundary_set=frozenset(sides))

    def on_boundary(self) -> bool:
        return len(self.boundary_set) > 0

    def __str__(self) -> str:
        return str(self.pos)


def unique_vertices(points: Iterable[VoronoiVertex]) -> List[VoronoiVertex]:
    """Drop repeated vertices, first occurrence wins."""
    out: List[VoronoiVertex] = []
    for p in points:
        if p not in out:
            out.append(p)
    return out


def angle_from_center(center: Vec2, point: Vec2) -> float:
    return Vec2.angle_from_axis(point - center)


def sort_points_around_center(center: Vec2, points: Iterable[VoronoiVertex]) -> List[VoronoiVertex]:
    """Counter-clockwise ring order around center; ties keep insertion order."""
    return sorted(unique_vertices(points), key=lambda p: angle_from_center(center, p.pos))


@dataclass
class VoronoiEdge:
    v1: VoronoiVertex
    v2: VoronoiVertex
    adjacent_cells: Set[int] = field(default_factory=set)

    @property
    def segment(self) -> Segment:
        return Segment(self.v1.pos, self.v2.pos)

    def is_boundary(self) -> bool:
        return bool(self.v1.boundary_set & self.v2.boundary_set)

    def shared_boundary(self) -> FrozenSet[int]:
        return self.v1.boundary_set & self.v2.boundary_set

    def other_cell(self, cell_id: int) -> Optional[int]:
        for c in self.adjacent_cells:
            if c != cell_id:
                return c
        return None

    def copy(self) -> "VoronoiEdge":
        return VoronoiEdge(self.v1, self.v2, set(self.adjacent_cells))

    def __str__(self) -> str:
        cells = " ".join(str(c) for c in sorted(self.adjacent_cells))
        return f"VoronoiEdge: {self.segment} cells: {cells}"


class VoronoiPolygon(ConvexPolygon):
    """Convex ring whose vertices keep their boundary annotations."""

    def __init__(self, vertices: Sequence[VoronoiVertex]):
        self.vertices: List[VoronoiVertex] = list(vertices)
        super().__init__([v.pos for v in self.vertices])

    @classmethod
    def from_lines(cls, center: Vec2, edges: Iterable[VoronoiEdge]) -> "VoronoiPolygon":
        """
        Ring of a convex cell from its unordered edges: every edge contributes the
        endpoint that comes first counter-clockwise around center.
        """
        starts: List[VoronoiVertex] = []
        for e in edges:
            a1 = angle_from_center(center, e.v1.pos)
            a2 = angle_from_center(center, e.v2.pos)
            if abs(a1 - a2) > math.pi:
                a1, a2 = a2, a1
            starts.append(e.v1 if a1 < a2 else e.v2)
        return cls(sort_points_around_center(center, starts))

    def __repr__(self) -> str:
        return "VoronoiPolygon(" + " ".join(str(v) for v in self.vertices) + ")"


@dataclass
class DivideInfo:
    bisector: Segment
    cut_lines: List[VoronoiEdge]
    middle_line: VoronoiEdge
    remain_points: List[VoronoiVertex]
    separated_points: List[VoronoiVertex]
    break_points: List[VoronoiVertex]
    new_neighbors: List[int]
    tolerance: float = 0.0


@dataclass
class VoronoiCell:
    cell_id: int
    site: Site
    ring: VoronoiPolygon
    edges: List[VoronoiEdge]

    @classmethod
    def from_edges(cls, cell_id: int, site: Site, edges: List[VoronoiEdge]) -> "VoronoiCell":
        return cls(cell_id=cell_id, site=site, ring=VoronoiPolygon.from_lines(site.pos, edges), edges=edges)

    def check_ring(self) -> "VoronoiCell":
        """Raise DegenerateCellError unless the ring has one vertex per edge and strictly encloses the site."""
        if len(self.ring) < 3 or len(self.ring) != len(self.edges):
            raise DegenerateCellError(
                f"cell {self.cell_id}: ring has {len(self.ring)} vertices for {len(self.edges)} edges"
            )
        if not self.ring.strictly_contains(self.site.pos):
            raise DegenerateCellError(f"cell {self.cell_id}: ring does not enclose its site")
        return self

    def contains(self, point: Vec2) -> bool:
        """Inside or on the boundary of the ring."""
        return self.ring.covers(point)

    def neighbor_ids(self) -> Set[int]:
        """Every cell ID referenced by this cell's edges (own ID included)."""
        ids: Set[int] = set()
        for e in self.edges:
            ids |= e.adjacent_cells
        return ids

    def neighbors(self) -> List[int]:
        return sorted(self.neighbor_ids() - {self.cell_id})

    def area(self) -> float:
        return self.ring.area()

    def divide(
        self,
        bisector: Segment,
        new_cell_id: int,
        crossings: Optional[Dict[FrozenSet[Vec2], VoronoiVertex]] = None,
        tolerance: float = 0.0,
    ) -> Optional[DivideInfo]:
        """
        Split this cell by the bisector between its site and a new site.
        Returns None when the bisector only touches the cell; raises DegenerateCellError
        when it does not cross the ring in exactly two places.

        crossings caches break points per edge (keyed by endpoint positions) so that
        both cells sharing an edge end up with the identical vertex. Vertices closer
        than tolerance to the bisector count as lying on it.
        """
        if crossings is None:
            crossings = {}

        def side(p: Vec2) -> int:
            return bisector.side(p, tolerance)

        my_side = side(self.site.pos)
        if my_side == 0:
            raise DegenerateCellError(f"cell {self.cell_id}: site lies on the bisector")

        def kept(v: VoronoiVertex) -> bool:
            return side(v.pos) != -my_side

        if all(kept(v) for v in self.ring.vertices):
            return None

        cut_lines: List[VoronoiEdge] = []
        break_points: List[VoronoiVertex] = []
        new_neighbors: List[int] = []

        for e in self.edges:
            k1, k2 = kept(e.v1), kept(e.v2)
            if k1 == k2:
                continue
            kept_v = e.v1 if k1 else e.v2
            if side(kept_v.pos) == 0:
                # the cut passes through this vertex
                bp = kept_v
            else:
                key = frozenset((e.v1.pos, e.v2.pos))
                bp = crossings.get(key)
                if bp is None:
                    pt = bisector.intersection(e.segment)
                    if pt is None:
                        raise DegenerateCellError(f"cell {self.cell_id}: bisector parallel to {e.segment}")
                    bp = VoronoiVertex(pos=pt, boundary_set=e.shared_boundary())
                    crossings[key] = bp
                cut_lines.append(VoronoiEdge(kept_v, bp, set(e.adjacent_cells)))
                other = e.other_cell(self.cell_id)
                if other is not None and other not in new_neighbors:
                    new_neighbors.append(other)
            if all(b.pos != bp.pos for b in break_points):
                break_points.append(bp)

        if len(break_points) != 2:
            raise DegenerateCellError(
                f"cell {self.cell_id}: expected 2 break points, got {len(break_points)}"
            )

        middle_line = VoronoiEdge(break_points[0], break_points[1], {self.cell_id, new_cell_id})

        remain_points: List[VoronoiVertex] = list(break_points)
        separated_points: List[VoronoiVertex] = list(break_points)
        for v in self.ring.vertices:
            if kept(v):
                remain_points.append(v)
            elif not v.on_boundary() or v.is_corner:
                separated_points.append(v)

        if len(unique_vertices(remain_points)) < 3:
            raise DegenerateCellError(f"cell {self.cell_id}: carved ring collapsed")

        return DivideInfo(
            bisector=bisector,
            cut_lines=cut_lines,
            middle_line=middle_line,
            remain_points=remain_points,
            separated_points=separated_points,
            break_points=break_points,
            new_neighbors=new_neighbors,
            tolerance=tolerance,
        )

    def carved(self, info: DivideInfo) -> "VoronoiCell":
        """New cell value with the separated part removed; self is left untouched."""
        split = info.bisector
        tol = info.tolerance
        my_side = split.side(self.site.pos, tol)

        edges: List[VoronoiEdge] = []
        for e in self.edges:
            if split.side(e.v1.pos, tol) != -my_side and split.side(e.v2.pos, tol) != -my_side:
                edges.append(e.copy())
        edges.extend(e.copy() for e in info.cut_lines)
        edges.append(info.middle_line.copy())
        ring = VoronoiPolygon(sort_points_around_center(self.site.pos, info.remain_points))
        return VoronoiCell(cell_id=self.cell_id, site=self.site, ring=ring, edges=edges).check_ring()

    def __str__(self) -> str:
        lines = "\n".join(str(e) for e in self.edges)
        return f"Cell({self.cell_id}) Center={self.site.pos} {self.ring!r}\n{lines}"
