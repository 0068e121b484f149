from .vec2 import Vec2
from .segment import Segment
from .polygon import ConvexPolygon
from .datastructures import (
    DegenerateCellError,
    DivideInfo,
    Site,
    VoronoiCell,
    VoronoiEdge,
    VoronoiPolygon,
    VoronoiVertex,
    sort_points_around_center,
)
from .bounds import BoundingRegion
from .voronoi import DiagramConfig, InsertResult, VoronoiDiagram, build_diagram

__all__ = [
    "Vec2",
    "Segment",
    "ConvexPolygon",
    "DegenerateCellError",
    "DivideInfo",
    "Site",
    "VoronoiCell",
    "VoronoiEdge",
    "VoronoiPolygon",
    "VoronoiVertex",
    "sort_points_around_center",
    "BoundingRegion",
    "DiagramConfig",
    "InsertResult",
    "VoronoiDiagram",
    "build_diagram",
]

from .export import VoronoiMesh2D, MeshCell2D, MeshEdge2D
from .reference import compute_reference_voronoi
from .sampling import sample_points_in_polygon, sample_sites, random_sites_in_box

__all__ += [
    "VoronoiMesh2D",
    "MeshCell2D",
    "MeshEdge2D",
    "compute_reference_voronoi",
    "sample_points_in_polygon",
    "sample_sites",
    "random_sites_in_box",
]
