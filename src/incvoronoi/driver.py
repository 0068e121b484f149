from __future__ import annotations

from typing import List, Optional

import numpy as np
import structlog

from .bounds import BoundingRegion
from .config import DriverSettings
from .datastructures import Site
from .sampling import random_sites_in_box
from .vec2 import Vec2
from .visualize import DrawingSurface, PillowSurface, render_diagram
from .voronoi import InsertResult, VoronoiDiagram

logger = structlog.get_logger()


class VoronoiApp:
    """
    Interactive driver: owns one diagram over the unit square, turns canvas clicks
    and batch requests into sites and repaints on demand.
    The canvas has a 1 pixel border, so pixel (1, 1) is the region origin.
    """

    def __init__(self, settings: Optional[DriverSettings] = None, rng: Optional[np.random.Generator] = None):
        self.settings = settings if settings is not None else DriverSettings()
        self.rng = rng if rng is not None else np.random.default_rng(self.settings.seed)
        self.diagram = VoronoiDiagram(BoundingRegion.unit_square())

    def _next_site(self, x: float, y: float) -> Site:
        site_id = len(self.diagram)
        return Site(site_id=site_id, pos=Vec2(x, y), cluster_tag=site_id)

    def canvas_to_unit(self, px: float, py: float) -> Vec2:
        size = self.settings.canvas_size
        return Vec2((px - 1.0) / size, (py - 1.0) / size)

    def on_click(self, px: float, py: float) -> InsertResult:
        p = self.canvas_to_unit(px, py)
        return self.diagram.insert(self._next_site(p.x, p.y))

    def on_add_points(self, n: Optional[int] = None) -> List[InsertResult]:
        n = self.settings.batch_size if n is None else int(n)
        results = []
        for proposal in random_sites_in_box(n, self.rng, margin=self.settings.margin):
            results.append(self.diagram.insert(self._next_site(proposal.pos.x, proposal.pos.y)))
        logger.info("Batch added", requested=n, cells=len(self.diagram),
                    rejected=sum(1 for r in results if r is not InsertResult.OK))
        return results

    def draw(self, surface: Optional[DrawingSurface] = None) -> DrawingSurface:
        size = self.settings.canvas_size
        if surface is None:
            px = int(round(size)) + 2
            surface = PillowSurface(px, px)
        render_diagram(self.diagram, surface, origin=(1.0, 1.0), scale=size)
        return surface
