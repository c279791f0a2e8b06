"""
Pytest configuration and shared fixtures for LoanMap tests.

Uses a small hand-made region table, loan records and box-shaped boundaries
so every test runs without the real Prosper export.
"""

import pytest
import sys
from datetime import datetime
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import geopandas as gpd
from shapely.geometry import box


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Add project root to sys.path for loanmap imports
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from loanmap.aggregation import RawRecord
from loanmap.registry import RegionRegistry


CA_POP = 37254522
OR_POP = 3831072

REGION_TABLE = {
    'California': {'abbr': 'CA', 'pop': CA_POP},
    'Oregon': {'abbr': 'OR', 'pop': OR_POP},
    'Guam': {'abbr': 'GU'},
    'Zeroland': {'abbr': 'ZZ', 'pop': 0},
}


def rec(year, region, amount, month=6):
    return RawRecord(origination_date=datetime(year, month, 15), region_name=region, loan_amount=amount)


@pytest.fixture(scope="session")
def project_root():
    """Returns the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def registry():
    return RegionRegistry.from_table(REGION_TABLE)


@pytest.fixture
def records():
    """2008 comes first in data order; 2009 follows."""
    return [
        rec(2008, 'CA', 1000),
        rec(2008, 'CA', 2000),
        rec(2008, 'OR', 500),
        rec(2009, 'CA', 4000),
        rec(2009, 'GU', 700),
        rec(2009, 'OR', 100),
        rec(2009, 'ZZ', 250),
    ]


@pytest.fixture
def geometry():
    """Four square 'states'; Atlantis has no registry entry."""
    names = ['California', 'Oregon', 'Guam', 'Atlantis']
    shapes = [box(-124, 32, -114, 42), box(-124, 42, -116, 46), box(144, 13, 145, 14), box(-40, 20, -30, 30)]
    return gpd.GeoDataFrame({'name': names}, geometry=shapes, crs="EPSG:4326")


@pytest.fixture
def pipeline(records, geometry, registry):
    from loanmap.pipeline import assemble
    return assemble(records, geometry, registry)


@pytest.fixture
def loan_csv(tmp_path):
    """A small Prosper-style CSV with one row of each kind the loader filters."""
    path = tmp_path / "loans.csv"
    path.write_text(
        "ListingKey,LoanOriginationDate,BorrowerState,LoanOriginalAmount\n"
        "a,2008-03-01 00:00:00,CA,1000\n"
        "b,2008-07-19 00:00:00,CA,2000\n"
        "c,2009-01-02 00:00:00,OR,500\n"
        "d,2009-05-05 00:00:00,,800\n"
        "e,2014-02-01 00:00:00,CA,900\n"
        "f,not a date,CA,400\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def states_geojson(tmp_path, geometry):
    path = tmp_path / "states.json"
    geometry.to_file(path, driver="GeoJSON")
    return path
