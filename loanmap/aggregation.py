# loanmap/aggregation.py
"""
Year x region rollup of loan records.

Records are grouped in a single pass into year -> region -> amounts, then each
group is reduced to its sum and divided by the region's population.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import pandas as pd

from loanmap.registry import RegionRegistry

logger = logging.getLogger(__name__)

YearKey = Union[int, str]


@dataclass(frozen=True)
class RawRecord:
    origination_date: datetime
    region_name: str
    loan_amount: float

    @property
    def origination_year(self) -> int:
        return self.origination_date.year


@dataclass(frozen=True)
class YearRegionAggregate:
    year: int
    region: str
    total_amount: float
    population: Optional[int]
    normalized_total: float

    @property
    def has_data(self) -> bool:
        return not math.isnan(self.normalized_total)


def year_key(year: YearKey) -> int:
    if isinstance(year, bool):
        raise TypeError("Year must be an int or a numeric string")
    return int(str(year).strip()) if isinstance(year, str) else int(year)


class AggregateIndex:
    """
    Read-only year -> {region -> YearRegionAggregate} mapping.
    Years keep the order in which they were first seen in the data;
    callers must look years and regions up by key, not by position.
    """

    def __init__(self, years: Mapping[int, Mapping[str, YearRegionAggregate]]):
        self._years = MappingProxyType({
            int(year): MappingProxyType(dict(regions)) for year, regions in years.items()
        })

    @property
    def years(self) -> Tuple[int, ...]:
        return tuple(self._years.keys())

    def first_year(self) -> Optional[int]:
        return next(iter(self._years), None)

    def __len__(self) -> int:
        return len(self._years)

    def __iter__(self) -> Iterator[int]:
        return iter(self._years)

    def __contains__(self, year) -> bool:
        try:
            return year_key(year) in self._years
        except (TypeError, ValueError):
            return False

    def __getitem__(self, year: YearKey) -> Mapping[str, YearRegionAggregate]:
        return self._years[year_key(year)]

    def regions_for(self, year: YearKey) -> Mapping[str, YearRegionAggregate]:
        """Regions of one year; empty mapping if the year is not indexed."""
        try:
            return self._years.get(year_key(year), MappingProxyType({}))
        except (TypeError, ValueError):
            return MappingProxyType({})

    def get(self, year: YearKey, region: Optional[str]) -> Optional[YearRegionAggregate]:
        if region is None:
            return None
        return self.regions_for(year).get(region)

    def entries(self) -> Iterator[YearRegionAggregate]:
        for regions in self._years.values():
            yield from regions.values()

    def to_frame(self) -> pd.DataFrame:
        """All entries as a DataFrame (year, region, total_amount, population, normalized_total)."""
        rows = [
            {
                'year': e.year,
                'region': e.region,
                'total_amount': e.total_amount,
                'population': e.population,
                'normalized_total': e.normalized_total,
            }
            for e in self.entries()
        ]
        return pd.DataFrame(rows, columns=['year', 'region', 'total_amount', 'population', 'normalized_total'])

    def __eq__(self, other) -> bool:
        if not isinstance(other, AggregateIndex):
            return NotImplemented
        return _as_plain(self) == _as_plain(other)

    def __repr__(self) -> str:
        return f"AggregateIndex(years={list(self.years)})"


def _as_plain(index: AggregateIndex) -> Dict[int, Dict[str, tuple]]:
    # NaN != NaN, so compare no-data totals through a sentinel
    out = {}
    for year in index:
        out[year] = {
            region: (e.total_amount, e.population, e.normalized_total if e.has_data else None)
            for region, e in index[year].items()
        }
    return out


def normalize(total: float, population: Optional[int]) -> float:
    """total / population, or NaN when the population is missing or zero."""
    if population is None or population <= 0:
        return math.nan
    return total / population


def aggregate(records: Iterable[RawRecord], registry: RegionRegistry) -> AggregateIndex:
    """
    Groups records by origination year then region and normalizes each group's
    summed loan amount by the region's population.

    Empty-region groups are kept as entries with a NaN total so they exist
    structurally but never carry a valid value.
    """
    groups: Dict[int, Dict[str, List[float]]] = {}
    count = 0
    for rec in records:
        region = (rec.region_name or "").strip()
        groups.setdefault(rec.origination_year, {}).setdefault(region, []).append(float(rec.loan_amount))
        count += 1

    years: Dict[int, Dict[str, YearRegionAggregate]] = {}
    for year, regions in groups.items():
        rolled = {}
        for region, amounts in regions.items():
            total = math.fsum(amounts)
            population = registry.population_for(region) if region else None
            if region and registry.resolve(region) is None:
                logger.debug("No registry entry for region %r (%d)", region, year)
            rolled[region] = YearRegionAggregate(
                year=year,
                region=region,
                total_amount=total,
                population=population,
                normalized_total=normalize(total, population) if region else math.nan,
            )
        years[year] = rolled

    logger.info("Aggregated %d records into %d years", count, len(years))
    return AggregateIndex(years)
