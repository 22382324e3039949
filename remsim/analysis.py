"""
Per-gender trend estimates for simulated repeated measures.
"""

import logging

import numpy as np
import pandas as pd

from .data_gen import SEX_LABELS, SimulationParams, measured_visits

logger = logging.getLogger(__name__)

TREND_COLUMNS = ["intercept", "slope", "n_measurements"]


def _fit_line(day: np.ndarray, value: np.ndarray):
    if len(day) < 2 or np.ptp(day) == 0:
        intercept = float(np.mean(value)) if len(value) else np.nan
        return intercept, np.nan
    slope, intercept = np.polyfit(day, value, deg=1)
    return float(intercept), float(slope)


def fit_trends(visits: pd.DataFrame) -> pd.DataFrame:
    """Least-squares line of measured_value on elapsed_day for each sex.

    Only attended visits are used. Sexes without measurements are left out.
    """
    measured = measured_visits(visits)
    records, index = [], []
    for sex, group in measured.groupby("sex", sort=True):
        intercept, slope = _fit_line(
            group["elapsed_day"].to_numpy(dtype=float),
            group["measured_value"].to_numpy(dtype=float),
        )
        if np.isnan(slope):
            logger.warning("Cannot fit slope for sex=%s (%d measurements)", sex, len(group))
        records.append({"intercept": intercept, "slope": slope, "n_measurements": len(group)})
        index.append(sex)

    return pd.DataFrame(records, index=pd.Index(index, name="sex"), columns=TREND_COLUMNS)


def expected_trends(params: SimulationParams) -> pd.DataFrame:
    """Generating intercept and slope for each sex."""
    trends = pd.DataFrame(
        {
            "intercept": [params.baseline, params.baseline + params.male_baseline_offset],
            "slope": [params.slope, params.slope + params.male_slope_offset],
        },
        index=pd.Index(SEX_LABELS, name="sex"),
    )
    return trends
