# loanmap/renderer.py
"""
Choropleth rendering of one year of the aggregate.

The renderer resolves every boundary feature to a fill colour and builds the
legend. Drawing is left to the MapSurface it is bound to.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import geopandas as gpd

from loanmap.aggregation import AggregateIndex, year_key
from loanmap.constants import (
    BOUNDARY_NAME_COL, LEGEND_CAPTION, LEGEND_DIVISOR, LEGEND_FRACTIONS,
    NO_DATA_COLOR, STROKE_COLOR, STROKE_WIDTH,
)
from loanmap.registry import RegionRegistry
from loanmap.scale import ColorScale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureFill:
    name: str
    code: Optional[str]
    value: Optional[float]
    fill: str
    stroke: str = STROKE_COLOR
    stroke_width: float = STROKE_WIDTH

    @property
    def has_data(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class LegendSwatch:
    threshold: float
    color: str
    label: str


@dataclass(frozen=True)
class Legend:
    swatches: Tuple[LegendSwatch, ...]
    caption: str = LEGEND_CAPTION


@dataclass(frozen=True)
class RenderedMap:
    year: int
    features: Tuple[FeatureFill, ...]
    legend: Legend

    def fill_for(self, name: str) -> Optional[str]:
        for f in self.features:
            if f.name == name:
                return f.fill
        return None


def format_currency(value: float) -> str:
    return f"${value:.2f}"


def legend_thresholds(scale: ColorScale) -> Tuple[float, ...]:
    """Domain min, then 2/6 ... 6/6 of the domain max."""
    vmin, vmax = scale.domain
    return (vmin,) + tuple(vmax / LEGEND_DIVISOR * n for n in LEGEND_FRACTIONS)


def build_legend(scale: ColorScale) -> Legend:
    swatches = tuple(
        LegendSwatch(threshold=t, color=scale(t), label=format_currency(t))
        for t in legend_thresholds(scale)
    )
    return Legend(swatches=swatches)


class MapSurface:
    """
    Holds the map currently shown on a page. Replacing it removes the old map
    before the new one is installed.
    """

    def __init__(self):
        self.current: Optional[RenderedMap] = None
        self.replacements = 0

    def replace(self, rendered: RenderedMap) -> None:
        self.clear()
        self._draw(rendered)
        self.current = rendered
        self.replacements += 1

    def clear(self) -> None:
        self.current = None

    def _draw(self, rendered: RenderedMap) -> None:
        """The base surface only keeps the map in memory; subclasses draw it."""


class ChoroplethRenderer:
    """Colours boundary features by one year's normalized loan totals."""

    def __init__(self, registry: RegionRegistry, surface: Optional[MapSurface] = None,
                 name_col: str = BOUNDARY_NAME_COL):
        self.registry = registry
        self.surface = surface
        self.name_col = name_col

    def _feature_fill(self, index: AggregateIndex, name: str, year: int, scale: ColorScale) -> FeatureFill:
        code = self.registry.code_for(name)
        if code is None:
            logger.debug("Unresolved boundary feature %r", name)
            return FeatureFill(name=name, code=None, value=None, fill=NO_DATA_COLOR)

        entry = index.get(year, code)
        if entry is None or math.isnan(entry.normalized_total):
            return FeatureFill(name=name, code=code, value=None, fill=NO_DATA_COLOR)

        return FeatureFill(name=name, code=code, value=entry.normalized_total,
                           fill=scale(entry.normalized_total))

    def render(self, index: AggregateIndex, geometry: gpd.GeoDataFrame,
               year: Union[int, str], scale: ColorScale) -> RenderedMap:
        """
        Builds the map for one year and, when bound to a surface, replaces
        whatever that surface was showing.
        """
        if self.name_col not in geometry.columns:
            raise ValueError(f"Boundary geometry has no '{self.name_col}' column")

        year = year_key(year)
        features = tuple(
            self._feature_fill(index, str(name), year, scale)
            for name in geometry[self.name_col].tolist()
        )
        rendered = RenderedMap(year=year, features=features, legend=build_legend(scale))

        if self.surface is not None:
            self.surface.replace(rendered)
        return rendered
