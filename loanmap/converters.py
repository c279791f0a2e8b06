# loanmap/converters.py

import logging
import os
from typing import Iterable, List, Optional

import geopandas as gpd
import pandas as pd

from loanmap.aggregation import RawRecord
from loanmap.constants import BOUNDARY_NAME_COL, EXCLUDED_YEARS, RECORD_COLUMNS

logger = logging.getLogger(__name__)


def records_from_frame(df: pd.DataFrame,
                       date_col: str = RECORD_COLUMNS["date"],
                       region_col: str = RECORD_COLUMNS["region"],
                       amount_col: str = RECORD_COLUMNS["amount"],
                       excluded_years: Iterable[int] = EXCLUDED_YEARS,
                       drop_empty_regions: bool = True) -> List[RawRecord]:
    """
    Converts a loan table into RawRecords.

    Rows with an unparseable date are dropped with a warning. Rows with an empty
    region or an excluded origination year are filtered out, matching what the
    map is meant to show.
    """
    missing = [c for c in (date_col, region_col, amount_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Loan table is missing columns {missing}. Available: {list(df.columns)}")

    dates = pd.to_datetime(df[date_col], errors='coerce')
    regions = df[region_col].fillna("").astype(str).str.strip()
    amounts = pd.to_numeric(df[amount_col], errors='coerce')

    bad_dates = int(dates.isna().sum())
    if bad_dates:
        logger.warning("Dropping %d rows with unparseable %s", bad_dates, date_col)
    bad_amounts = int((amounts.isna() & dates.notna()).sum())
    if bad_amounts:
        logger.warning("Dropping %d rows with non-numeric %s", bad_amounts, amount_col)
    if (amounts < 0).any():
        raise ValueError(f"Negative values found in {amount_col}")

    keep = dates.notna() & amounts.notna()
    excluded = set(int(y) for y in excluded_years)
    if excluded:
        keep &= ~dates.dt.year.isin(excluded)
    if drop_empty_regions:
        keep &= regions != ""

    records = [
        RawRecord(origination_date=d.to_pydatetime(), region_name=r, loan_amount=float(a))
        for d, r, a in zip(dates[keep], regions[keep], amounts[keep])
    ]
    logger.info("Kept %d of %d loan rows", len(records), len(df))
    return records


class LoanRecordLoader:
    """Reads the Prosper loan export (CSV) into RawRecords."""

    @staticmethod
    def load(path: str, excluded_years: Iterable[int] = EXCLUDED_YEARS) -> List[RawRecord]:
        if not os.path.exists(path):
            raise ValueError(f"Loan data file not found: {path}")

        wanted = set(RECORD_COLUMNS.values())
        try:
            df = pd.read_csv(path, usecols=lambda c: c in wanted, dtype={RECORD_COLUMNS["region"]: str})
        except Exception as e:
            raise ValueError(f"Failed to read loan data: {e}")

        return records_from_frame(df, excluded_years=excluded_years)


class BoundaryLoader:
    """
    Loads a region boundary file (GeoJSON, GPKG, SHP) and normalizes it to the
    internal schema: a `name` column plus geometry in EPSG:4326.
    """

    @staticmethod
    def load(path: str, name_col: Optional[str] = None) -> gpd.GeoDataFrame:
        try:
            gdf = gpd.read_file(path)
        except Exception as e:
            raise ValueError(f"Failed to read file: {e}")

        if gdf.crs is None:
            gdf = gdf.set_crs("EPSG:4326")
        elif gdf.crs != "EPSG:4326":
            gdf = gdf.to_crs("EPSG:4326")

        col_map = {c.upper(): c for c in gdf.columns}
        wanted = (name_col or BOUNDARY_NAME_COL).upper()
        if wanted not in col_map:
            raise ValueError(f"Region name column '{name_col or BOUNDARY_NAME_COL}' not found. Available: {list(gdf.columns)}")

        new_gdf = gpd.GeoDataFrame(geometry=gdf.geometry, crs=gdf.crs)
        new_gdf[BOUNDARY_NAME_COL] = gdf[col_map[wanted]].astype(str).str.strip()
        return new_gdf[[BOUNDARY_NAME_COL, "geometry"]]
