"""Render a random diagram to PNG. Run from the repository root: python -m scripts.render_random out.png"""

import sys
from pathlib import Path

from src.incvoronoi.config import DriverSettings
from src.incvoronoi.driver import VoronoiApp
from src.incvoronoi.logs import configure_logging


def main(argv) -> int:
    out = Path(argv[1]) if len(argv) > 1 else Path("voronoi.png")

    settings = DriverSettings()
    configure_logging(settings.log_level)

    app = VoronoiApp(settings)
    app.on_add_points()
    surface = app.draw()

    out.write_bytes(surface.to_png())
    print("Wrote", out, "with", len(app.diagram), "cells")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
