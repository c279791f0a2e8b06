# loanmap/scale.py

import math
from dataclasses import dataclass
from typing import Tuple

import matplotlib as mpl
import matplotlib.colors as mcolors
import numpy as np

from loanmap.aggregation import AggregateIndex
from loanmap.constants import COLOR_MAP_NAME


class EmptyDomainScaleError(ValueError):
    """The year used for the colour domain has no valid totals."""


@dataclass(frozen=True)
class ColorScale:
    """
    Continuous value -> hex colour mapping over a fixed [vmin, vmax] domain.
    Values outside the domain are clipped to its ends.
    """
    vmin: float
    vmax: float
    cmap_name: str = COLOR_MAP_NAME

    @property
    def domain(self) -> Tuple[float, float]:
        return self.vmin, self.vmax

    @property
    def cmap(self) -> mcolors.Colormap:
        return mpl.colormaps[self.cmap_name]

    @property
    def norm(self) -> mcolors.Normalize:
        return mcolors.Normalize(vmin=self.vmin, vmax=self.vmax, clip=True)

    def __call__(self, value: float) -> str:
        if value is None or math.isnan(value):
            raise ValueError("No-data values have no colour on the scale")
        return mcolors.to_hex(self.cmap(float(self.norm(value))))


def build_scale(index: AggregateIndex, cmap_name: str = COLOR_MAP_NAME) -> ColorScale:
    """
    Builds the colour scale from the first year of the index (iteration order,
    not the smallest year). NaN totals are ignored.

    Raises:
        EmptyDomainScaleError: the index is empty or its first year has no valid totals.
    """
    year = index.first_year()
    if year is None:
        raise EmptyDomainScaleError("Cannot build a colour scale from an empty aggregate")

    values = np.array([e.normalized_total for e in index[year].values()], dtype=float)
    values = values[~np.isnan(values)]
    if values.size == 0:
        raise EmptyDomainScaleError(f"Year {year} has no regions with valid totals; colour domain is undefined")

    return ColorScale(vmin=float(values.min()), vmax=float(values.max()), cmap_name=cmap_name)
