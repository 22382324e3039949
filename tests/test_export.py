#!/usr/bin/env python3
"""
Tests for CSV and Parquet export.
"""

import pandas as pd
import pytest

from remsim.data_gen import PROFILE_COLUMNS, VISIT_COLUMNS, SimulationParams, generate
from remsim.export import export_tables, read_visits


@pytest.fixture
def tables():
    return generate(SimulationParams(n_subjects=100, p_attend=0.7), seed=42)


class TestExportTables:
    """Writing tables to disk."""

    @pytest.mark.parametrize("fmt", ["csv", "parquet"])
    def test_writes_both_tables(self, tables, tmp_path, fmt):
        profiles, visits = tables
        paths = export_tables(profiles, visits, tmp_path / "out", fmt=fmt)

        assert paths["profiles"].name == f"profiles.{fmt}"
        assert paths["visits"].name == f"visits.{fmt}"
        assert paths["profiles"].exists()
        assert paths["visits"].exists()

    def test_csv_header(self, tables, tmp_path):
        profiles, visits = tables
        paths = export_tables(profiles, visits, tmp_path)

        header = paths["visits"].read_text().splitlines()[0]
        assert header.split(",") == VISIT_COLUMNS
        assert list(pd.read_csv(paths["profiles"]).columns) == PROFILE_COLUMNS

    @pytest.mark.parametrize("fmt", ["csv", "parquet"])
    def test_read_back(self, tables, tmp_path, fmt):
        profiles, visits = tables
        paths = export_tables(profiles, visits, tmp_path, fmt=fmt)

        loaded = read_visits(paths["visits"])
        assert list(loaded.columns) == VISIT_COLUMNS
        assert len(loaded) == len(visits)
        assert (loaded["measured_value"].isna() == visits["measured_value"].isna()).all()
        pd.testing.assert_frame_equal(loaded, visits, check_dtype=False)

    def test_suffix(self, tables, tmp_path):
        profiles, visits = tables
        paths = export_tables(profiles, visits, tmp_path, suffix="_rep001")
        assert paths["visits"].name == "visits_rep001.csv"

    def test_unknown_format(self, tables, tmp_path):
        profiles, visits = tables
        with pytest.raises(ValueError, match="Unknown export format"):
            export_tables(profiles, visits, tmp_path, fmt="xlsx")
        assert not list(tmp_path.iterdir())


class TestReadVisits:
    """Loading exported visits."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_visits(tmp_path / "visits.csv")

    def test_unknown_suffix(self, tmp_path):
        path = tmp_path / "visits.txt"
        path.write_text("subject_id\n1\n")
        with pytest.raises(ValueError):
            read_visits(path)
