# loanmap/pipeline.py

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import geopandas as gpd

from loanmap.aggregation import AggregateIndex, RawRecord, aggregate
from loanmap.converters import BoundaryLoader, LoanRecordLoader
from loanmap.registry import RegionRegistry
from loanmap.scale import ColorScale, build_scale

logger = logging.getLogger(__name__)


class LoadJoinError(RuntimeError):
    """One of the concurrent input loads failed; nothing was aggregated."""


@dataclass(frozen=True, eq=False)
class PipelineResult:
    index: AggregateIndex
    geometry: gpd.GeoDataFrame
    scale: ColorScale
    registry: RegionRegistry

    @property
    def years(self):
        return self.index.years


def assemble(records: List[RawRecord], geometry: gpd.GeoDataFrame,
             registry: Optional[RegionRegistry] = None) -> PipelineResult:
    """Aggregates already-loaded inputs and derives the colour scale."""
    registry = registry or RegionRegistry.default()
    index = aggregate(records, registry)
    scale = build_scale(index)
    logger.info("Colour domain from %s: [%g, %g]", index.first_year(), scale.vmin, scale.vmax)
    return PipelineResult(index=index, geometry=geometry, scale=scale, registry=registry)


def build_pipeline(records_path: str, geo_path: str,
                   registry: Optional[RegionRegistry] = None,
                   load_records: Callable[[str], List[RawRecord]] = LoanRecordLoader.load,
                   load_geometry: Callable[[str], gpd.GeoDataFrame] = BoundaryLoader.load,
                   progress_callback=None) -> PipelineResult:
    """
    Loads the loan records and the boundary geometry concurrently and builds
    the pipeline once both have finished.

    Args:
        records_path: Path to the loan CSV
        geo_path: Path to the boundary GeoJSON
        registry: Region lookup; defaults to the US states table
        load_records / load_geometry: Loader callables
        progress_callback: Optional callable(float, str) to report progress (0.0-1.0, message)

    Raises:
        LoadJoinError: either load failed. The first failure is chained.
    """
    if progress_callback: progress_callback(0.1, "Loading loan records and boundaries...")

    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        futures = {
            "records": executor.submit(load_records, records_path),
            "geometry": executor.submit(load_geometry, geo_path),
        }
        concurrent.futures.wait(futures.values())

    results = {}
    for name, future in futures.items():
        exc = future.exception()
        if exc is not None:
            raise LoadJoinError(f"Failed to load {name}: {exc}") from exc
        results[name] = future.result()

    if progress_callback: progress_callback(0.6, "Aggregating loans by year and state...")
    result = assemble(results["records"], results["geometry"], registry)
    if progress_callback: progress_callback(1.0, "Ready")
    return result
