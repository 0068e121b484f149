from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Set, Tuple

import numpy as np

if TYPE_CHECKING:
    from .voronoi import VoronoiDiagram


@dataclass(frozen=True)
class MeshEdge2D:
    v0: int
    v1: int
    cells: Tuple[int, ...]  # 1 or 2 cell indices


@dataclass
class MeshCell2D:
    index: int
    site_id: int
    polygon: np.ndarray  # (N,2), counter-clockwise
    neighbors: List[int]

    def area(self) -> float:
        x = self.polygon[:, 0]
        y = self.polygon[:, 1]
        return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


@dataclass
class VoronoiMesh2D:
    """
    Welded, index-based snapshot of a diagram.
    vertices: (M,2); edges reference vertex rows and the cells on either side.
    """
    vertices: np.ndarray
    cells: List[MeshCell2D]
    edges: List[MeshEdge2D]

    def cell_count(self) -> int:
        return len(self.cells)

    def edge_count(self) -> int:
        return len(self.edges)

    def total_area(self) -> float:
        return float(sum(c.area() for c in self.cells))

    def neighbor_map(self) -> Dict[int, List[int]]:
        return {c.index: list(c.neighbors) for c in self.cells}


class VertexWelder:
    """Assigns one row per distinct point after rounding to `decimals`."""

    def __init__(self, decimals: int):
        self.decimals = int(decimals)
        self.vertices: List[List[float]] = []
        self._index: Dict[Tuple[float, float], int] = {}

    def index_of(self, x: float, y: float) -> int:
        key = (round(float(x), self.decimals), round(float(y), self.decimals))
        if key not in self._index:
            self._index[key] = len(self.vertices)
            self.vertices.append([key[0], key[1]])
        return self._index[key]

    def array(self) -> np.ndarray:
        if not self.vertices:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array(self.vertices, dtype=np.float64)


def mesh_from_polygons(polygons: List[Tuple[int, int, np.ndarray]], weld_decimals: int) -> VoronoiMesh2D:
    """
    polygons: (cell index, site id, (N,2) ring) triples.
    Edges and neighbors are derived from welded ring topology.
    """
    welder = VertexWelder(weld_decimals)
    edge_map: Dict[Tuple[int, int], Set[int]] = defaultdict(set)
    cells: List[MeshCell2D] = []

    for index, site_id, coords in polygons:
        vidx = [welder.index_of(x, y) for x, y in coords]
        for a, b in zip(vidx, vidx[1:] + vidx[:1]):
            if a == b:
                continue
            edge_map[(min(a, b), max(a, b))].add(index)
        cells.append(MeshCell2D(index=index, site_id=site_id, polygon=np.asarray(coords, dtype=np.float64), neighbors=[]))

    edges = [MeshEdge2D(a, b, tuple(sorted(cs))) for (a, b), cs in edge_map.items()]

    neighbors: Dict[int, Set[int]] = defaultdict(set)
    for e in edges:
        if len(e.cells) == 2:
            c0, c1 = e.cells
            neighbors[c0].add(c1)
            neighbors[c1].add(c0)
    for c in cells:
        c.neighbors = sorted(neighbors.get(c.index, ()))

    return VoronoiMesh2D(vertices=welder.array(), cells=cells, edges=edges)


def diagram_to_mesh(diagram: "VoronoiDiagram", weld_decimals: int = 9) -> VoronoiMesh2D:
    polygons = [(c.cell_id, c.site.site_id, c.ring.to_array()) for c in diagram.cells()]
    return mesh_from_polygons(polygons, weld_decimals)
