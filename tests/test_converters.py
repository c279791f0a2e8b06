"""
Unit tests for loanmap.converters module.

Loads a small Prosper-style CSV and a GeoJSON written by the fixtures.
"""

import pandas as pd
import pytest
import geopandas as gpd
from loanmap.converters import BoundaryLoader, LoanRecordLoader, records_from_frame


class TestLoanRecordLoader:

    def test_filters_empty_region_excluded_year_and_bad_date(self, loan_csv):
        records = LoanRecordLoader.load(str(loan_csv))
        assert [(r.origination_year, r.region_name, r.loan_amount) for r in records] == [
            (2008, 'CA', 1000.0),
            (2008, 'CA', 2000.0),
            (2009, 'OR', 500.0),
        ]

    def test_excluded_years_configurable(self, loan_csv):
        records = LoanRecordLoader.load(str(loan_csv), excluded_years=())
        assert 2014 in {r.origination_year for r in records}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            LoanRecordLoader.load(str(tmp_path / "missing.csv"))

    def test_missing_columns_raise(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("a,b\n1,2\n", encoding="utf-8")
        with pytest.raises(ValueError, match="missing columns"):
            LoanRecordLoader.load(str(path))


class TestRecordsFromFrame:

    def test_negative_amount_rejected(self):
        df = pd.DataFrame({
            'LoanOriginationDate': ['2008-01-01'],
            'BorrowerState': ['CA'],
            'LoanOriginalAmount': [-5],
        })
        with pytest.raises(ValueError, match="Negative"):
            records_from_frame(df)

    def test_keep_empty_regions_when_asked(self):
        df = pd.DataFrame({
            'LoanOriginationDate': ['2008-01-01', '2008-02-01'],
            'BorrowerState': ['CA', None],
            'LoanOriginalAmount': [5, 7],
        })
        records = records_from_frame(df, drop_empty_regions=False)
        assert [r.region_name for r in records] == ['CA', '']

    def test_non_numeric_amount_dropped(self):
        df = pd.DataFrame({
            'LoanOriginationDate': ['2008-01-01', '2008-02-01'],
            'BorrowerState': ['CA', 'OR'],
            'LoanOriginalAmount': ['5', 'n/a'],
        })
        records = records_from_frame(df)
        assert [r.region_name for r in records] == ['CA']


class TestBoundaryLoader:

    def test_load_returns_named_geodataframe(self, states_geojson):
        result = BoundaryLoader.load(str(states_geojson))
        assert isinstance(result, gpd.GeoDataFrame)
        assert list(result.columns) == ['name', 'geometry']
        assert set(result['name']) == {'California', 'Oregon', 'Guam', 'Atlantis'}

    def test_result_is_wgs84(self, states_geojson):
        result = BoundaryLoader.load(str(states_geojson))
        assert result.crs.to_epsg() == 4326

    def test_name_column_lookup_is_case_insensitive(self, states_geojson):
        result = BoundaryLoader.load(str(states_geojson), name_col="NAME")
        assert 'California' in set(result['name'])

    def test_unknown_name_column_raises(self, states_geojson):
        with pytest.raises(ValueError, match="not found"):
            BoundaryLoader.load(str(states_geojson), name_col="STATE_NAME")

    def test_load_nonexistent_file_raises_error(self):
        """Loading a non-existent file should raise an error."""
        with pytest.raises(ValueError, match="Failed to read file"):
            BoundaryLoader.load("nonexistent_file.geojson")
