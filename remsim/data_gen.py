"""
Synthetic repeated-measures data generation.

Simulates a population of subjects, each with a gender, a random number of
intended appointments and random gaps between them. Appointments may be
no-shows; attended ones yield a value following a gender-stratified linear
trend in elapsed days plus standard normal noise.

Random draws are taken from one ``numpy.random.Generator`` in a fixed order:

1. ``total_visits`` for every subject, in subject order
2. ``gender`` for every subject, in subject order
3. ``gap_days`` for every expanded visit row, in row order
4. ``attended`` for every visit row
5. measurement noise for every visit row (masked for no-shows)

so identical parameters and seed reproduce identical tables.
"""

import logging
import math
from dataclasses import dataclass, fields
from typing import Iterator, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

logger = logging.getLogger(__name__)


SEX_LABELS = np.array(["F", "M"])

# upper bound on expanded visit rows held in memory at once
MAX_TOTAL_VISITS = 50_000_000

PROFILE_COLUMNS = ["id", "total_visits", "gender", "sex"]

VISIT_COLUMNS = [
    "subject_id",
    "gender",
    "sex",
    "appointment_index",
    "gap_days",
    "elapsed_day",
    "attended",
    "attended_count_so_far",
    "total_attended",
    "measured_value",
]


class InvalidParameter(ValueError):
    """Raised when a simulation parameter is outside its domain."""

    def __init__(self, name: str, value, reason: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid parameter '{name}'={value!r}: {reason}")


@dataclass(frozen=True)
class SimulationParams:
    """Parameters of the repeated-measures model."""
    n_subjects: int = 10000
    visit_rate: float = 0.75
    p_male: float = 0.5
    baseline: float = 100.0
    male_baseline_offset: float = 10.0
    slope: float = -0.25
    male_slope_offset: float = -0.1
    p_attend: float = 0.9
    max_gap_days: float = 7.0

    def validate(self) -> "SimulationParams":
        """Check every parameter against its domain, raising InvalidParameter."""
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
                raise InvalidParameter(field.name, value, "must be a number")
            if not math.isfinite(value):
                raise InvalidParameter(field.name, value, "must be finite")

        if int(self.n_subjects) != self.n_subjects or self.n_subjects < 1:
            raise InvalidParameter("n_subjects", self.n_subjects, "must be a positive integer")
        if self.visit_rate <= 0:
            raise InvalidParameter("visit_rate", self.visit_rate, "exponential rate must be > 0")
        for name in ("p_male", "p_attend"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidParameter(name, value, "probability must be in [0, 1]")
        if self.max_gap_days < 0:
            raise InvalidParameter("max_gap_days", self.max_gap_days, "must be >= 0")
        return self

    @classmethod
    def from_config(cls, config: dict) -> "SimulationParams":
        """Build parameters from the population/trend/visits config sections."""
        known = {field.name for field in fields(cls)}
        values = {}
        for section in ("population", "trend", "visits"):
            for key, value in (config.get(section) or {}).items():
                if key in known:
                    values[key] = value
        return cls(**values)


def _generate_profiles(params: SimulationParams, rng: np.random.Generator) -> pd.DataFrame:
    """Draw one profile per subject: number of intended visits and gender."""
    n = int(params.n_subjects)
    draws = np.ceil(rng.exponential(scale=1.0 / params.visit_rate, size=n))
    if not np.isfinite(draws).all() or draws.sum() > MAX_TOTAL_VISITS:
        raise InvalidParameter(
            "visit_rate", params.visit_rate,
            f"expected visit count exceeds {MAX_TOTAL_VISITS:,} rows",
        )
    # exponential support is (0, inf); only an exact 0.0 from the sampler maps to 1
    total_visits = np.where(draws == 0, 1, draws).astype(np.int64)
    gender = rng.binomial(1, params.p_male, size=n).astype(np.int64)

    return pd.DataFrame({
        "id": np.arange(1, n + 1, dtype=np.int64),
        "total_visits": total_visits,
        "gender": gender,
        "sex": SEX_LABELS[gender],
    })


def _expand_visits(profiles: pd.DataFrame, params: SimulationParams,
                   rng: np.random.Generator) -> pd.DataFrame:
    """Expand profiles into one row per scheduled visit and derive per-visit columns."""
    rows = np.repeat(np.arange(len(profiles)), profiles["total_visits"].to_numpy())
    n_rows = len(rows)

    visits = pd.DataFrame({
        "subject_id": profiles["id"].to_numpy()[rows],
        "gender": profiles["gender"].to_numpy()[rows],
        "sex": profiles["sex"].to_numpy()[rows],
    })

    visits["gap_days"] = rng.uniform(0.0, params.max_gap_days, size=n_rows)
    visits["attended"] = rng.binomial(1, params.p_attend, size=n_rows).astype(np.int64)
    noise = rng.standard_normal(size=n_rows)

    # segmented running totals, reset at each subject boundary
    by_subject = visits.groupby("subject_id", sort=False)
    visits["appointment_index"] = by_subject.cumcount().astype(np.int64) + 1
    visits["elapsed_day"] = by_subject["gap_days"].cumsum()
    visits["attended_count_so_far"] = by_subject["attended"].cumsum().astype(np.int64)
    visits["total_attended"] = by_subject["attended"].transform("sum").astype(np.int64)

    gender = visits["gender"].to_numpy()
    day = visits["elapsed_day"].to_numpy()
    value = (
        params.baseline
        + gender * params.male_baseline_offset
        + params.slope * day
        + gender * params.male_slope_offset * day
        + noise
    )
    visits["measured_value"] = np.where(visits["attended"].to_numpy() == 1, value, np.nan)

    return visits[VISIT_COLUMNS]


def generate(params: Optional[SimulationParams] = None,
             rng: Optional[np.random.Generator] = None,
             seed: Optional[int] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Generate the profiles and long-format visits tables.

    Args:
        params: Model parameters; defaults reproduce the reference setup.
        rng: Random source. Takes precedence over ``seed``.
        seed: Seed for a fresh ``numpy.random.default_rng`` when ``rng`` is not given.

    Returns:
        ``(profiles, visits)`` DataFrames.

    Raises:
        InvalidParameter: before any random draw, if a parameter is out of domain;
            after the visit-count draws, if they exceed ``MAX_TOTAL_VISITS`` rows.
    """
    params = (params or SimulationParams()).validate()
    if rng is None:
        rng = np.random.default_rng(seed)

    profiles = _generate_profiles(params, rng)
    visits = _expand_visits(profiles, params, rng)

    logger.debug(
        "Generated %d subjects, %d visits, %d measured",
        len(profiles), len(visits), int(visits["attended"].sum()),
    )
    return profiles, visits


def measured_visits(visits: pd.DataFrame) -> pd.DataFrame:
    """Visits that produced a measurement, in tidy long format for plotting."""
    return visits.loc[visits["attended"] == 1].reset_index(drop=True)


def generate_replicates(params: Optional[SimulationParams] = None,
                        n_replicates: int = 1,
                        seed: int = 42,
                        progress: bool = True) -> Iterator[Tuple[int, pd.DataFrame, pd.DataFrame]]:
    """Iterate ``(replicate, profiles, visits)`` over independently seeded datasets.

    Replicate ``r`` is generated with seed ``seed + r``. Parameters are
    validated when this is called, not on first iteration.
    """
    params = (params or SimulationParams()).validate()
    if int(n_replicates) != n_replicates or n_replicates < 1:
        raise InvalidParameter("replicates", n_replicates, "must be a positive integer")
    return _iter_replicates(params, int(n_replicates), seed, progress)


def _iter_replicates(params, n_replicates, seed, progress):
    for replicate in tqdm(
        range(n_replicates),
        desc="Generating replicates",
        unit="datasets",
        ascii=True,
        disable=not progress or n_replicates == 1,
    ):
        profiles, visits = generate(params, seed=seed + replicate)
        yield replicate, profiles, visits
