from __future__ import annotations

from io import BytesIO
from typing import List, Protocol, Sequence, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Rectangle
from PIL import Image, ImageDraw

Color = Tuple[int, int, int]

BACKGROUND: Color = (0, 0, 0)
EDGE_COLOR: Color = (0, 255, 0)
SITE_COLOR: Color = (255, 0, 0)


class DrawingSurface(Protocol):
    """Minimal 2D canvas the driver draws on. Coordinates are in surface units."""

    def set_stroke_color(self, color: Color) -> None: ...

    def set_fill_color(self, color: Color) -> None: ...

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def stroke(self) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...


class _PathRecorder:
    """Shared move_to / line_to bookkeeping: a path is a list of polylines."""

    def __init__(self):
        self.stroke_color: Color = EDGE_COLOR
        self.fill_color: Color = SITE_COLOR
        self._path: List[List[Tuple[float, float]]] = []

    def set_stroke_color(self, color: Color) -> None:
        self.stroke_color = tuple(int(c) for c in color)

    def set_fill_color(self, color: Color) -> None:
        self.fill_color = tuple(int(c) for c in color)

    def begin_path(self) -> None:
        self._path = []

    def move_to(self, x: float, y: float) -> None:
        self._path.append([(float(x), float(y))])

    def line_to(self, x: float, y: float) -> None:
        if not self._path:
            self._path.append([])
        self._path[-1].append((float(x), float(y)))

    def _take_polylines(self) -> List[List[Tuple[float, float]]]:
        polylines = [p for p in self._path if len(p) >= 2]
        self._path = []
        return polylines


class PillowSurface(_PathRecorder):
    """Raster surface backed by a Pillow RGB image."""

    def __init__(self, width: int, height: int, background: Color = BACKGROUND, line_width: int = 1):
        super().__init__()
        self.image = Image.new("RGB", (int(width), int(height)), background)
        self.line_width = int(line_width)
        self._draw = ImageDraw.Draw(self.image)

    def stroke(self) -> None:
        for polyline in self._take_polylines():
            self._draw.line(polyline, fill=self.stroke_color, width=self.line_width)

    def fill_circle(self, x: float, y: float, radius: float) -> None:
        self._draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=self.fill_color)

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self._draw.rectangle([x, y, x + width, y + height], fill=self.fill_color)

    def to_png(self) -> bytes:
        buf = BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


def _mpl_color(color: Color) -> Tuple[float, float, float]:
    return tuple(c / 255.0 for c in color)


class MatplotlibSurface(_PathRecorder):
    """Surface drawing onto a matplotlib Axes (y grows downwards, like a canvas)."""

    def __init__(self, ax=None, size: Tuple[float, float] | None = None):
        super().__init__()
        if ax is None:
            fig, ax = plt.subplots()
        self.ax = ax
        if size is not None:
            self.ax.set_xlim(0, size[0])
            self.ax.set_ylim(size[1], 0)
        self.ax.set_aspect("equal")

    def stroke(self) -> None:
        for polyline in self._take_polylines():
            xs, ys = zip(*polyline)
            self.ax.plot(xs, ys, "-", color=_mpl_color(self.stroke_color), linewidth=1.0)

    def fill_circle(self, x: float, y: float, radius: float) -> None:
        self.ax.add_patch(Circle((x, y), radius, color=_mpl_color(self.fill_color)))

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.ax.add_patch(Rectangle((x, y), width, height, color=_mpl_color(self.fill_color)))


def render_diagram(
    diagram,
    surface: DrawingSurface,
    *,
    origin: Sequence[float] = (1.0, 1.0),
    scale: float = 698.0,
    background: Color = BACKGROUND,
    edge_color: Color = EDGE_COLOR,
    site_color: Color = SITE_COLOR,
    site_radius: float = 2.0,
) -> None:
    """
    Paint a diagram: background over the region bounds, all edges as one stroked
    path, every site as a filled circle. Diagram point p maps to origin + scale * p.
    """
    ox, oy = float(origin[0]), float(origin[1])

    def to_surface(p):
        return ox + p.x * scale, oy + p.y * scale

    minx, miny, maxx, maxy = diagram.bounding_region.bounds()
    surface.set_fill_color(background)
    surface.fill_rect(ox + minx * scale - 1, oy + miny * scale - 1, (maxx - minx) * scale + 2, (maxy - miny) * scale + 2)

    surface.set_stroke_color(edge_color)
    surface.begin_path()
    for edge in diagram.edges():
        surface.move_to(*to_surface(edge.v1.pos))
        surface.line_to(*to_surface(edge.v2.pos))
    surface.stroke()

    surface.set_fill_color(site_color)
    for cell in diagram.cells():
        x, y = to_surface(cell.site.pos)
        surface.fill_circle(x, y, site_radius)


def plot_voronoi(diagram, ax=None):
    if ax is None:
        fig, ax = plt.subplots()

    for cell in diagram.cells():
        p = cell.ring.to_array()
        p = p[list(range(len(p))) + [0]]
        ax.plot(*p.T, "-k")

    sites = [c.site.pos for c in diagram.cells()]
    if sites:
        ax.plot([s.x for s in sites], [s.y for s in sites], ".r")

    ax.set_aspect("equal")
    ax.set_title("Voronoi (incremental)")
    return ax
