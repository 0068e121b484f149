import math

import numpy as np
import pytest

from src.incvoronoi.bounds import BoundingRegion
from src.incvoronoi.datastructures import DegenerateCellError, Site
from src.incvoronoi.vec2 import Vec2
from src.incvoronoi.voronoi import DiagramConfig, InsertResult, VoronoiDiagram

from tests.incvoronoi.helpers import has_vertex_near, shared_edges


def _diagram_with(points):
    d = VoronoiDiagram(BoundingRegion.unit_square())
    results = [d.add_point(x, y) for x, y in points]
    return d, results


def test_single_site_owns_whole_square():
    d, results = _diagram_with([(0.5, 0.5)])

    assert results == [InsertResult.OK]
    assert len(d) == 1
    cell = d.cell(0)
    assert sorted(v.pos.as_tuple() for v in cell.ring.vertices) == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert len(cell.edges) == 4
    assert all(e.is_boundary() for e in cell.edges)
    assert cell.area() == pytest.approx(1.0)
    assert d.neighbors(0) == []


def test_two_sites_split_vertically():
    d, results = _diagram_with([(0.25, 0.5), (0.75, 0.5)])

    assert results == [InsertResult.OK, InsertResult.OK]
    c0, c1 = d.cell(0), d.cell(1)
    assert c0.area() == pytest.approx(0.5)
    assert c1.area() == pytest.approx(0.5)

    e0 = shared_edges(c0, 1)
    e1 = shared_edges(c1, 0)
    assert len(e0) == 1 and len(e1) == 1
    ends = sorted([e0[0].v1.pos.as_tuple(), e0[0].v2.pos.as_tuple()])
    assert ends[0] == pytest.approx((0.5, 0.0), abs=1e-12)
    assert ends[1] == pytest.approx((0.5, 1.0), abs=1e-12)
    assert {e0[0].v1.pos, e0[0].v2.pos} == {e1[0].v1.pos, e1[0].v2.pos}

    assert d.neighbors(0) == [1]
    assert d.neighbors(1) == [0]


def test_two_sites_split_horizontally():
    d, _ = _diagram_with([(0.5, 0.25), (0.5, 0.75)])

    e = shared_edges(d.cell(0), 1)
    assert len(e) == 1
    ends = sorted([e[0].v1.pos.as_tuple(), e[0].v2.pos.as_tuple()])
    assert ends[0] == pytest.approx((0.0, 0.5), abs=1e-12)
    assert ends[1] == pytest.approx((1.0, 0.5), abs=1e-12)
    assert d.cell(0).contains(Vec2(0.5, 0.1))
    assert d.cell(1).contains(Vec2(0.5, 0.9))


def test_three_sites_meet_at_circumcenter():
    sites = [(0.2, 0.2), (0.8, 0.2), (0.5, 0.8)]
    d, results = _diagram_with(sites)

    assert all(r is InsertResult.OK for r in results)
    assert len(d) == 3
    vertex = Vec2(0.5, 0.425)
    for cell in d.cells():
        assert has_vertex_near(cell, vertex)
        assert sorted(cell.neighbors()) == sorted({0, 1, 2} - {cell.cell_id})

    dists = [vertex.distance(Vec2(*s)) for s in sites]
    assert max(dists) - min(dists) < 1e-9
    assert d.total_area() == pytest.approx(1.0, abs=1e-9)


def test_duplicate_site_is_rejected_and_changes_nothing():
    d, results = _diagram_with([(0.5, 0.5)])
    before = d.cells()

    assert d.add_point(0.5, 0.5) is InsertResult.DUPLICATE_SITE
    assert len(d) == 1
    assert d.cells()[0] is before[0]


def test_collinear_sites_give_parallel_edges():
    d, results = _diagram_with([(0.25, 0.5), (0.5, 0.5), (0.75, 0.5)])

    assert all(r is InsertResult.OK for r in results)
    interior = [e for e in d.edges() if len(e.adjacent_cells) == 2]
    assert len(interior) == 2
    xs = []
    for e in interior:
        assert abs(e.v1.pos.x - e.v2.pos.x) < 1e-12
        xs.append(e.v1.pos.x)
    assert sorted(xs) == pytest.approx([0.375, 0.625])
    assert d.neighbors(1) == [0, 2]
    assert d.neighbors(0) == [1]


def test_new_cell_covering_three_corners():
    d, results = _diagram_with([(0.1, 0.1), (0.5, 0.6)])

    assert results == [InsertResult.OK, InsertResult.OK]
    # bisector 0.4x + 0.5y = 0.295 cuts the bottom side at x=0.7375 and the left side at y=0.59
    assert d.cell(0).area() == pytest.approx(0.7375 * 0.59 / 2)
    assert d.cell(1).area() == pytest.approx(1 - 0.7375 * 0.59 / 2)
    assert len(d.cell(1).ring) == 5
    assert len(d.cell(0).ring) == 3


def test_four_cells_meeting_in_one_vertex():
    d, results = _diagram_with([(0.25, 0.375), (0.75, 0.375), (0.75, 0.625), (0.25, 0.625)])

    assert all(r is InsertResult.OK for r in results)
    assert len(d) == 4
    for cell in d.cells():
        assert cell.area() == pytest.approx(0.25, abs=1e-9)
        assert has_vertex_near(cell, Vec2(0.5, 0.5), tol=1e-9)
    assert d.total_area() == pytest.approx(1.0, abs=1e-9)


def test_locate_returns_containing_cell():
    d, _ = _diagram_with([(0.25, 0.5), (0.75, 0.5)])
    assert d.locate((0.1, 0.9)) == 0
    assert d.locate(Vec2(0.9, 0.1)) == 1
    assert d.locate((2.0, 2.0)) is None


def test_site_on_region_boundary_is_degenerate():
    d, _ = _diagram_with([(0.5, 0.5)])
    assert d.add_point(0.0, 0.5) is InsertResult.DEGENERATE
    assert d.add_point(1.0, 1.0) is InsertResult.DEGENERATE
    assert len(d) == 1


def test_site_outside_region():
    d = VoronoiDiagram()
    assert d.add_point(1.5, 0.5) is InsertResult.SITE_OUTSIDE_BOUNDS
    assert len(d) == 0
    assert d.add_point(0.5, 0.5) is InsertResult.OK
    assert d.add_point(-0.1, 0.5) is InsertResult.SITE_OUTSIDE_BOUNDS
    assert len(d) == 1


def test_non_finite_site_raises():
    d = VoronoiDiagram()
    with pytest.raises(ValueError):
        d.insert(Site(site_id=0, pos=Vec2(math.nan, 0.5)))
    with pytest.raises(ValueError):
        d.add_point(0.5, math.inf)


def test_failed_insert_leaves_diagram_unchanged(monkeypatch):
    d, _ = _diagram_with([(0.2, 0.2), (0.8, 0.2), (0.5, 0.8)])
    before = d.cells()
    areas = [c.area() for c in before]

    def fail(self, middle_lines, corners):
        raise DegenerateCellError("forced")

    monkeypatch.setattr(VoronoiDiagram, "_stitch_boundary", fail)

    assert d.add_point(0.5, 0.5) is InsertResult.DEGENERATE
    assert len(d) == 3
    assert all(a is b for a, b in zip(d.cells(), before))
    assert [c.area() for c in d.cells()] == areas
    assert all(c.neighbor_ids() <= {0, 1, 2} for c in d.cells())


def test_cluster_tag_is_kept():
    d = VoronoiDiagram()
    d.insert(Site(site_id=7, pos=Vec2(0.3, 0.3), cluster_tag="a"))
    d.insert(Site(site_id=9, pos=Vec2(0.7, 0.7), cluster_tag=("b", 2)))
    assert [s.cluster_tag for s in d.sites()] == ["a", ("b", 2)]
    assert [s.site_id for s in d.sites()] == [7, 9]
    assert [c.cell_id for c in d.cells()] == [0, 1]


def test_rectangle_region():
    region = BoundingRegion.rectangle(4.0, 2.0, origin=(-1.0, 3.0))
    d = VoronoiDiagram(region)
    assert d.add_point(0.0, 4.0) is InsertResult.OK
    assert d.add_point(2.0, 4.0) is InsertResult.OK
    assert d.cell(0).area() == pytest.approx(4.0)
    assert d.cell(1).area() == pytest.approx(4.0)
    assert d.bisector_length == pytest.approx(2 * math.sqrt(20.0))


def test_triangle_region():
    region = BoundingRegion.from_points([(0.0, 0.0), (2.0, 0.0), (0.0, 2.0)])
    d = VoronoiDiagram(region)
    assert d.add_point(0.4, 0.4) is InsertResult.OK
    assert d.add_point(1.0, 0.4) is InsertResult.OK
    assert d.add_point(0.4, 1.0) is InsertResult.OK
    assert d.total_area() == pytest.approx(2.0, abs=1e-9)


def test_bisector_length_must_be_positive():
    with pytest.raises(ValueError):
        VoronoiDiagram(config=DiagramConfig(bisector_length=0.0))
    d = VoronoiDiagram(config=DiagramConfig(bisector_length=10.0))
    assert d.bisector_length == 10.0


def test_to_mesh_welds_shared_vertices():
    d, _ = _diagram_with([(0.2, 0.2), (0.8, 0.2), (0.5, 0.8)])
    mesh = d.to_mesh()

    assert mesh.cell_count() == 3
    # 4 corners + 3 side points + 1 interior vertex
    assert len(mesh.vertices) == 8
    assert mesh.total_area() == pytest.approx(1.0, abs=1e-9)
    assert mesh.neighbor_map() == {0: [1, 2], 1: [0, 2], 2: [0, 1]}
    interior = [e for e in mesh.edges if len(e.cells) == 2]
    assert len(interior) == 3


def _assert_consistent(d):
    for cell in d.cells():
        assert len(cell.ring) == len(cell.edges), (cell.cell_id, len(cell.ring), len(cell.edges))
        assert cell.ring.strictly_contains(cell.site.pos)
    assert d.total_area() == pytest.approx(1.0, abs=1e-9)


def test_site_next_to_existing_site_keeps_partition_whole():
    d, _ = _diagram_with([(0.37, 0.467), (0.848, 0.857)])
    before = d.cells()

    result = d.add_point(0.37, 0.466999999858)

    assert result in (InsertResult.OK, InsertResult.DEGENERATE)
    if result is InsertResult.OK:
        assert len(d) == 3
        assert has_vertex_near(d.cell(0), Vec2(0.0, 0.466999999929), tol=1e-9)
    else:
        assert all(a is b for a, b in zip(d.cells(), before))
    _assert_consistent(d)


@pytest.mark.parametrize("offset", [1e-10, 3e-11, 1e-11])
def test_sites_close_to_existing_sites_never_corrupt_diagram(offset):
    rng = np.random.default_rng(17)
    d = VoronoiDiagram(BoundingRegion.unit_square())
    for x, y in rng.uniform(0.05, 0.95, size=(30, 2)):
        d.add_point(x, y)

    for site in list(d.sites())[:10]:
        before = d.cells()
        result = d.add_point(site.pos.x, site.pos.y - offset)
        assert result in (InsertResult.OK, InsertResult.DEGENERATE)
        if result is InsertResult.DEGENERATE:
            assert all(a is b for a, b in zip(d.cells(), before))
        _assert_consistent(d)


def test_site_within_snap_distance_is_degenerate_and_changes_nothing():
    d, _ = _diagram_with([(0.2, 0.2), (0.8, 0.2), (0.5, 0.8)])
    before = d.cells()
    areas = [c.area() for c in before]
    edges = [[(e.v1.pos, e.v2.pos, frozenset(e.adjacent_cells)) for e in c.edges] for c in before]

    assert d.add_point(0.5, 0.8 + 1e-13) is InsertResult.DEGENERATE

    assert len(d) == 3
    assert all(a is b for a, b in zip(d.cells(), before))
    assert [c.area() for c in d.cells()] == areas
    assert [[(e.v1.pos, e.v2.pos, frozenset(e.adjacent_cells)) for e in c.edges] for c in d.cells()] == edges
