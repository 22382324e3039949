"""
Export of simulated tables to CSV or Parquet.
"""

import logging
from pathlib import Path
from typing import Dict

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .data_gen import PROFILE_COLUMNS, VISIT_COLUMNS
from .io.paths import ensure_dir

logger = logging.getLogger(__name__)

FORMATS = {"csv": ".csv", "parquet": ".parquet"}


def _create_visits_schema():
    """Create PyArrow schema for the visits table."""
    return pa.schema([
        pa.field("subject_id", pa.int64()),
        pa.field("gender", pa.int64()),
        pa.field("sex", pa.string()),
        pa.field("appointment_index", pa.int64()),
        pa.field("gap_days", pa.float64()),
        pa.field("elapsed_day", pa.float64()),
        pa.field("attended", pa.int64()),
        pa.field("attended_count_so_far", pa.int64()),
        pa.field("total_attended", pa.int64()),
        pa.field("measured_value", pa.float64()),
    ])


def _create_profiles_schema():
    """Create PyArrow schema for the profiles table."""
    return pa.schema([
        pa.field("id", pa.int64()),
        pa.field("total_visits", pa.int64()),
        pa.field("gender", pa.int64()),
        pa.field("sex", pa.string()),
    ])


def _write_table(df: pd.DataFrame, path: Path, fmt: str, schema=None) -> None:
    if fmt == "csv":
        df.to_csv(path, index=False)
    else:
        table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
        pq.write_table(table, path)


def export_tables(profiles: pd.DataFrame, visits: pd.DataFrame, out_dir,
                  fmt: str = "csv", suffix: str = "") -> Dict[str, Path]:
    """Write profiles and visits tables to ``out_dir``.

    Returns a mapping of table name to written path.
    """
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format '{fmt}'. Expected one of: {sorted(FORMATS)}")

    out_dir = ensure_dir(Path(out_dir))
    ext = FORMATS[fmt]
    paths = {
        "profiles": out_dir / f"profiles{suffix}{ext}",
        "visits": out_dir / f"visits{suffix}{ext}",
    }

    _write_table(profiles[PROFILE_COLUMNS], paths["profiles"], fmt, _create_profiles_schema())
    _write_table(visits[VISIT_COLUMNS], paths["visits"], fmt, _create_visits_schema())

    logger.info("Wrote %d profiles and %d visits to %s", len(profiles), len(visits), out_dir)
    return paths


def read_visits(path) -> pd.DataFrame:
    """Load a visits table written by :func:`export_tables`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Visits file {path} does not exist")
    if path.suffix == FORMATS["parquet"]:
        return pq.read_table(path).to_pandas()
    if path.suffix == FORMATS["csv"]:
        return pd.read_csv(path)
    raise ValueError(f"Unknown visits file type: {path.suffix}")
