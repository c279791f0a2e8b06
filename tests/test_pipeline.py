"""
Unit tests for loanmap.pipeline module.

Covers the join of the two concurrent loads and the immutable result.
"""

import dataclasses
import threading

import pytest
from loanmap.pipeline import LoadJoinError, PipelineResult, assemble, build_pipeline
from loanmap.scale import EmptyDomainScaleError

from conftest import CA_POP, rec


class TestBuildPipeline:

    def test_end_to_end_from_files(self, loan_csv, states_geojson, registry):
        result = build_pipeline(str(loan_csv), str(states_geojson), registry=registry)
        assert isinstance(result, PipelineResult)
        assert result.years == (2008, 2009)
        assert result.index.get(2008, 'CA').normalized_total == pytest.approx(3000 / CA_POP)
        assert len(result.geometry) == 4

    def test_waits_for_both_loads(self, geometry, registry):
        """Aggregation starts only after the slower load has finished."""
        geometry_done = threading.Event()

        def slow_geometry(path):
            geometry_done.wait(0.05)
            geometry_done.set()
            return geometry

        def records(path):
            return [rec(2008, 'CA', 10)]

        result = build_pipeline("r", "g", registry=registry,
                                load_records=records, load_geometry=slow_geometry)
        assert geometry_done.is_set()
        assert result.geometry is geometry

    def test_failed_records_load_propagates(self, geometry, registry):
        def broken(path):
            raise ValueError("bad csv")

        with pytest.raises(LoadJoinError, match="records") as exc_info:
            build_pipeline("r", "g", registry=registry,
                           load_records=broken, load_geometry=lambda p: geometry)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_failed_geometry_load_propagates(self, registry):
        def broken(path):
            raise OSError("no such file")

        with pytest.raises(LoadJoinError, match="geometry"):
            build_pipeline("r", "g", registry=registry,
                           load_records=lambda p: [rec(2008, 'CA', 1)], load_geometry=broken)

    def test_missing_files_fail_the_join(self, tmp_path, registry):
        with pytest.raises(LoadJoinError):
            build_pipeline(str(tmp_path / "a.csv"), str(tmp_path / "b.json"), registry=registry)

    def test_progress_reported(self, geometry, registry):
        seen = []
        build_pipeline("r", "g", registry=registry,
                       load_records=lambda p: [rec(2008, 'CA', 1)], load_geometry=lambda p: geometry,
                       progress_callback=lambda p, msg: seen.append(p))
        assert seen[0] == 0.1 and seen[-1] == 1.0


class TestAssemble:

    def test_result_is_frozen(self, pipeline):
        with pytest.raises(dataclasses.FrozenInstanceError):
            pipeline.scale = None

    def test_all_missing_first_year_surfaces_scale_error(self, geometry, registry):
        with pytest.raises(EmptyDomainScaleError):
            assemble([rec(2008, 'GU', 1)], geometry, registry)

    def test_default_registry(self, geometry):
        result = assemble([rec(2008, 'CA', 1)], geometry)
        assert result.registry.by_code('TX') is not None
