# loanmap/plotting.py

import logging
from typing import Optional

import geopandas as gpd
import matplotlib.pyplot as plt
from matplotlib.patches import Patch

from loanmap.constants import BOUNDARY_NAME_COL, MAP_CONFIG, NO_DATA_COLOR, STROKE_COLOR, STROKE_WIDTH
from loanmap.renderer import MapSurface, RenderedMap

logger = logging.getLogger(__name__)


def plot_rendered_map(rendered: RenderedMap, geometry: gpd.GeoDataFrame,
                      title: Optional[str] = None, crs: Optional[str] = MAP_CONFIG["crs"]):
    """Draw a rendered year as a choropleth with its swatch legend."""
    fills = {f.name: f for f in rendered.features}
    gdf = geometry
    if crs and gdf.crs is not None:
        try:
            gdf = gdf.to_crs(crs)
        except Exception as e:
            logger.warning("Reprojection to %s failed, drawing in %s: %s", crs, gdf.crs, e)

    names = gdf[BOUNDARY_NAME_COL].astype(str).tolist()
    colors = [fills[n].fill if n in fills else NO_DATA_COLOR for n in names]
    first = rendered.features[0] if rendered.features else None
    edge = first.stroke if first else STROKE_COLOR
    width = first.stroke_width if first else STROKE_WIDTH

    fig, ax = plt.subplots(figsize=MAP_CONFIG["figsize"], dpi=MAP_CONFIG["dpi"])
    if len(gdf):
        gdf.plot(ax=ax, color=colors, edgecolor=edge, linewidth=width)

    # Highest threshold on top, as in a vertical swatch column
    handles = [Patch(facecolor=s.color, edgecolor="#666", alpha=0.8, label=s.label)
               for s in reversed(rendered.legend.swatches)]
    ax.legend(handles=handles, title=rendered.legend.caption, loc="lower right",
              frameon=False, fontsize=8, title_fontsize=9)

    ax.set_title(title or str(rendered.year), fontsize=14, fontweight='bold')
    ax.set_axis_off()
    fig.tight_layout()
    return fig


class FigureSurface(MapSurface):
    """MapSurface that keeps one matplotlib figure; the previous one is closed on replace."""

    def __init__(self, geometry: gpd.GeoDataFrame, title: Optional[str] = None):
        super().__init__()
        self.geometry = geometry
        self.title = title
        self.figure = None

    def clear(self) -> None:
        if self.figure is not None:
            plt.close(self.figure)
            self.figure = None
        super().clear()

    def _draw(self, rendered: RenderedMap) -> None:
        title = f"{self.title} ({rendered.year})" if self.title else str(rendered.year)
        self.figure = plot_rendered_map(rendered, self.geometry, title=title)
