from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np
import structlog

from .bounds import BoundingRegion
from .datastructures import (
    DegenerateCellError,
    Site,
    VoronoiCell,
    VoronoiEdge,
    VoronoiVertex,
    unique_vertices,
)
from .export import VoronoiMesh2D, diagram_to_mesh
from .segment import Segment
from .vec2 import Vec2

logger = structlog.get_logger()


class InsertResult(str, Enum):
    """Outcome of VoronoiDiagram.insert()."""

    OK = "ok"
    DUPLICATE_SITE = "duplicate_site"
    SITE_OUTSIDE_BOUNDS = "site_outside_bounds"
    DEGENERATE = "degenerate"


class DiagramConfig(NamedTuple):
    """Engine parameters."""
    bisector_length: Optional[float] = None  # None => 2 * diameter of the bounding region
    snap_tolerance: float = 1e-12  # relative to the region diameter


def _as_vec2(point) -> Vec2:
    if isinstance(point, Vec2):
        return point
    return Vec2(float(point[0]), float(point[1]))


class VoronoiDiagram:
    """
    Incremental Voronoi diagram inside a convex bounding region.

    Sites are added one at a time with insert(); after every call the cells
    partition the region by nearest site. Cell IDs are indices into the cell
    list and never change. Not thread-safe.
    """

    def __init__(self, bounding_region: Optional[BoundingRegion] = None, config: Optional[DiagramConfig] = None):
        self.bounding_region = bounding_region if bounding_region is not None else BoundingRegion.unit_square()
        self.config = config if config is not None else DiagramConfig()

        length = self.config.bisector_length
        if length is None:
            length = self.bounding_region.default_bisector_length()
        if not length > 0:
            raise ValueError("bisector_length must be > 0")
        self.bisector_length = float(length)

        if self.config.snap_tolerance < 0:
            raise ValueError("snap_tolerance must be >= 0")
        self.snap_distance = self.config.snap_tolerance * self.bounding_region.diameter()
        self.area_tolerance = 1e-9 * self.bounding_region.area()

        self._cells: List[VoronoiCell] = []

    def __len__(self) -> int:
        return len(self._cells)

    def cells(self) -> Tuple[VoronoiCell, ...]:
        return tuple(self._cells)

    def cell(self, cell_id: int) -> VoronoiCell:
        return self._cells[cell_id]

    def sites(self) -> List[Site]:
        return [c.site for c in self._cells]

    def neighbors(self, cell_id: int) -> List[int]:
        return self._cells[cell_id].neighbors()

    def edges(self) -> Iterator[VoronoiEdge]:
        """Every edge of the diagram once; shared edges come from the lower cell ID."""
        for cell in self._cells:
            for e in cell.edges:
                other = e.other_cell(cell.cell_id)
                if other is None or other > cell.cell_id:
                    yield e

    def locate(self, point) -> Optional[int]:
        """ID of the first cell whose ring contains point, or None."""
        p = _as_vec2(point)
        for cell in self._cells:
            if cell.contains(p):
                return cell.cell_id
        return None

    def add_point(self, x: float, y: float, cluster_tag=None) -> InsertResult:
        """Insert (x, y) with the next cell ID as site ID."""
        site_id = len(self._cells)
        return self.insert(Site(site_id=site_id, pos=Vec2(float(x), float(y)), cluster_tag=cluster_tag))

    def insert(self, site: Site) -> InsertResult:
        if not site.pos.is_finite():
            raise ValueError(f"Site {site.site_id} has non-finite coordinates: {site.pos}")

        region = self.bounding_region
        if not region.strictly_contains(site.pos):
            result = InsertResult.DEGENERATE if region.on_boundary(site.pos) else InsertResult.SITE_OUTSIDE_BOUNDS
            logger.warning("Site rejected", site_id=site.site_id, pos=str(site.pos), result=result.value)
            return result

        if not self._cells:
            self._cells.append(self._assemble_cell(0, site, region.boundary_edges()))
            logger.debug("Initial cell created", site_id=site.site_id)
            return InsertResult.OK

        start = self.locate(site.pos)
        if start is None:
            logger.warning("Site rejected", site_id=site.site_id, pos=str(site.pos),
                           result=InsertResult.SITE_OUTSIDE_BOUNDS.value)
            return InsertResult.SITE_OUTSIDE_BOUNDS
        if self._cells[start].site.pos == site.pos:
            logger.warning("Site rejected", site_id=site.site_id, pos=str(site.pos),
                           result=InsertResult.DUPLICATE_SITE.value, existing_cell=start)
            return InsertResult.DUPLICATE_SITE

        try:
            carved, new_edges = self._carve_region(site, start)
            new_cell = self._assemble_cell(len(self._cells), site, new_edges)
            self._check_area(carved, new_cell)
        except DegenerateCellError as exc:
            logger.warning("Site rejected", site_id=site.site_id, pos=str(site.pos),
                           result=InsertResult.DEGENERATE.value, reason=str(exc))
            return InsertResult.DEGENERATE

        # commit only after every carved cell and the new ring were built
        for cell_id, cell in carved.items():
            self._cells[cell_id] = cell
        self._cells.append(new_cell)
        logger.debug("Site inserted", site_id=site.site_id, cell_id=new_cell.cell_id,
                     carved=sorted(carved), ring_size=len(new_cell.ring))
        return InsertResult.OK

    def _carve_region(self, site: Site, start: int) -> Tuple[Dict[int, VoronoiCell], List[VoronoiEdge]]:
        """
        Walk outwards from the cell containing site, carving every cell the new cell overlaps.
        Returns the carved replacements and the edges of the new cell.
        Existing cells are not modified.
        """
        new_id = len(self._cells)
        visited: Set[int] = set()
        stack: List[int] = [start]
        carved: Dict[int, VoronoiCell] = {}
        middle_lines: List[VoronoiEdge] = []
        corners: List[VoronoiVertex] = []
        crossings: Dict[FrozenSet[Vec2], VoronoiVertex] = {}

        while stack:
            cell_id = stack.pop()
            if cell_id in visited or cell_id == new_id:
                continue
            visited.add(cell_id)

            cell = self._cells[cell_id]
            bisector = Segment.perpendicular_bisector(site.pos, cell.site.pos, self.bisector_length)
            info = cell.divide(bisector, new_id, crossings, self.snap_distance)
            if info is None:
                continue

            for n in info.new_neighbors:
                if n not in visited:
                    stack.append(n)

            middle_lines.append(info.middle_line.copy())
            corners.extend(p for p in info.separated_points if p.is_corner)

            updated = cell.carved(info)
            carved[cell_id] = updated

            # neighbors that vanished were swallowed by the new cell
            for n in sorted(cell.neighbor_ids() - updated.neighbor_ids()):
                if n not in visited:
                    stack.append(n)

        if start not in carved:
            raise DegenerateCellError(f"cell {start}: containing cell was not split")

        return carved, middle_lines + self._stitch_boundary(middle_lines, corners)

    def _stitch_boundary(self, middle_lines: Sequence[VoronoiEdge], corners: Iterable[VoronoiVertex]) -> List[VoronoiEdge]:
        """
        Close the new cell along the region boundary: vertices sharing a side are joined
        in order along that side.
        """
        candidates = [v for e in middle_lines for v in (e.v1, e.v2) if v.on_boundary()]
        candidates = unique_vertices(candidates + list(corners))

        region = self.bounding_region
        stitched: List[VoronoiEdge] = []
        for k in range(region.side_count()):
            side = region.side_segment(k)
            direction = side.p2 - side.p1
            on_side = [v for v in candidates if k in v.boundary_set]
            on_side.sort(key=lambda v: (v.pos - side.p1).dot(direction))
            for a, b in zip(on_side, on_side[1:]):
                if a.pos != b.pos:
                    stitched.append(VoronoiEdge(a, b))
        return stitched

    @staticmethod
    def _assemble_cell(cell_id: int, site: Site, edges: List[VoronoiEdge]) -> VoronoiCell:
        for e in edges:
            e.adjacent_cells.add(cell_id)
        return VoronoiCell.from_edges(cell_id, site, edges).check_ring()

    def _check_area(self, carved: Dict[int, VoronoiCell], new_cell: VoronoiCell) -> None:
        """The new cell must cover exactly the area carved off its neighbors."""
        removed = sum(self._cells[cell_id].area() - cell.area() for cell_id, cell in carved.items())
        if abs(removed - new_cell.area()) > self.area_tolerance:
            raise DegenerateCellError(
                f"cell {new_cell.cell_id}: area {new_cell.area()!r} does not match carved area {removed!r}"
            )

    def to_mesh(self, weld_decimals: int = 9) -> VoronoiMesh2D:
        return diagram_to_mesh(self, weld_decimals=weld_decimals)

    def total_area(self) -> float:
        return float(sum(c.area() for c in self._cells))


def _coerce_sites(sites: Iterable) -> List[Site]:
    out: List[Site] = []
    for i, s in enumerate(sites):
        if isinstance(s, Site):
            out.append(s)
        else:
            out.append(Site(site_id=i, pos=_as_vec2(s), cluster_tag=i))
    return out


def build_diagram(
    sites: Iterable,
    bounding_region: Optional[BoundingRegion] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    shuffle: bool = True,
    config: Optional[DiagramConfig] = None,
) -> Tuple[VoronoiDiagram, List[InsertResult]]:
    """
    Insert a batch of sites (Site objects or (x, y) pairs) into a fresh diagram.
    With shuffle=True the insertion order is a permutation drawn from rng;
    results are returned in insertion order.
    """
    items = _coerce_sites(sites)
    if shuffle and len(items) > 1:
        if rng is None:
            rng = np.random.default_rng()
        items = [items[i] for i in rng.permutation(len(items))]

    diagram = VoronoiDiagram(bounding_region, config=config)
    results = [diagram.insert(s) for s in items]

    logger.info("Diagram built", sites=len(items), cells=len(diagram),
                rejected=sum(1 for r in results if r is not InsertResult.OK))
    return diagram, results
