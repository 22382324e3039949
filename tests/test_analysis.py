#!/usr/bin/env python3
"""
Tests for per-gender trend fitting.
"""

import numpy as np
import pytest

from remsim.analysis import TREND_COLUMNS, expected_trends, fit_trends
from remsim.data_gen import SimulationParams, generate


class TestFitTrends:
    """Fitted lines recover the generating parameters."""

    def test_recovers_parameters(self):
        params = SimulationParams(n_subjects=20000)
        _, visits = generate(params, seed=42)

        fitted = fit_trends(visits)
        expected = expected_trends(params)

        assert list(fitted.columns) == TREND_COLUMNS
        assert sorted(fitted.index) == ["F", "M"]
        for sex in ("F", "M"):
            assert fitted.loc[sex, "intercept"] == pytest.approx(expected.loc[sex, "intercept"], abs=0.2)
            assert fitted.loc[sex, "slope"] == pytest.approx(expected.loc[sex, "slope"], abs=0.02)

    def test_counts_only_measured_visits(self):
        _, visits = generate(SimulationParams(n_subjects=300, p_attend=0.5), seed=1)
        fitted = fit_trends(visits)
        assert fitted["n_measurements"].sum() == visits["attended"].sum()

    def test_zero_gap_has_no_slope(self):
        params = SimulationParams(n_subjects=200, max_gap_days=0)
        _, visits = generate(params, seed=5)
        fitted = fit_trends(visits)
        assert fitted["slope"].isna().all()
        assert fitted.loc["F", "intercept"] == pytest.approx(params.baseline, abs=0.5)

    def test_no_measurements(self):
        _, visits = generate(SimulationParams(n_subjects=20, p_attend=0.0), seed=2)
        fitted = fit_trends(visits)
        assert fitted.empty
        assert list(fitted.columns) == TREND_COLUMNS


class TestExpectedTrends:
    """True generating lines."""

    def test_male_offsets(self):
        params = SimulationParams(baseline=50.0, male_baseline_offset=5.0, slope=1.0, male_slope_offset=-0.5)
        expected = expected_trends(params)
        assert expected.loc["F", "intercept"] == 50.0
        assert expected.loc["M", "intercept"] == 55.0
        assert expected.loc["F", "slope"] == 1.0
        assert np.isclose(expected.loc["M", "slope"], 0.5)
