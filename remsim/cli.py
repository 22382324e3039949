"""
Command line interface for repeated-measures simulation.

Usage:
    remsim simulate --config config/simulation.yaml
    remsim simulate --n-subjects 500 --p-attend 0.8 --seed 7 --format parquet
    remsim plot output/visits.csv
    remsim fit output/visits.csv
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from tqdm import tqdm

from .config import apply_overrides, load_config
from .data_gen import InvalidParameter, SimulationParams, generate_replicates, measured_visits
from .io.paths import get_plot_path

logger = logging.getLogger(__name__)

DEFAULT_PLOT_NAME = "regression_by_gender.png"

app = typer.Typer(help="Simulate repeated measurements with gender-based variability.")


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
):
    """Repeated-measures data simulator."""
    from .utils import setup_logging
    setup_logging(log_level)


@app.command()
def simulate(
    config_file: str = typer.Option(None, "--config", help="Configuration file path"),
    n_subjects: int = typer.Option(None, "--n-subjects", help="Override number of subjects from config"),
    visit_rate: float = typer.Option(None, "--visit-rate", help="Override exponential rate of the visit count"),
    p_male: float = typer.Option(None, "--p-male", help="Override probability of a male subject"),
    p_attend: float = typer.Option(None, "--p-attend", help="Override probability of attending an appointment"),
    max_gap_days: float = typer.Option(None, "--max-gap-days", help="Override maximum days between appointments"),
    seed: int = typer.Option(None, "--seed", help="Override seed from config"),
    replicates: int = typer.Option(None, "--replicates", help="Number of independently seeded datasets"),
    out: str = typer.Option(None, "--out", help="Override output directory from config"),
    fmt: str = typer.Option(None, "--format", help="Output format: csv or parquet"),
    plot: Optional[bool] = typer.Option(None, "--plot/--no-plot", help="Save the regression plot"),
    preview: int = typer.Option(0, "--preview", help="Log the first N rows of each table"),
):
    """Generate profiles and long-format visits tables."""
    from .export import FORMATS, export_tables

    try:
        config = load_config("simulation", config_file)
    except FileNotFoundError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    config = apply_overrides(
        config,
        n_subjects=n_subjects,
        visit_rate=visit_rate,
        p_male=p_male,
        p_attend=p_attend,
        max_gap_days=max_gap_days,
        seed=seed,
        replicates=replicates,
        out=out,
        fmt=fmt,
        plot=plot,
    )

    n_replicates = config["processing"]["replicates"]
    out_dir = Path(config["output"]["directory"])
    fmt = str(config["output"]["format"]).lower()
    if fmt not in FORMATS:
        logger.error("Unknown export format '%s'. Expected one of: %s", fmt, sorted(FORMATS))
        raise typer.Exit(code=2)

    # all replicates are generated before anything is written
    try:
        params = SimulationParams.from_config(config).validate()
        datasets = list(generate_replicates(params, n_replicates, seed=config["processing"]["seed"]))
    except InvalidParameter as e:
        logger.error(str(e))
        raise typer.Exit(code=2)

    for replicate, profiles, visits in datasets:
        suffix = f"_rep{replicate:03d}" if n_replicates > 1 else ""
        paths = export_tables(profiles, visits, out_dir, fmt=fmt, suffix=suffix)

        if preview:
            logger.info("Profiles:\n%s", profiles.head(preview).to_string(index=False))
            logger.info("Visits:\n%s", visits.head(preview).to_string(index=False))

        if config["output"]["plot"]:
            from .plotting import save_plot
            plot_name = Path(config["output"]["plot_name"])
            save_plot(visits, get_plot_path(f"{plot_name.stem}{suffix}{plot_name.suffix}", out_dir))

        _report(profiles, visits, paths["visits"])


def _report(profiles, visits, visits_path):
    n_measured = len(measured_visits(visits))
    rate = n_measured / len(visits) if len(visits) else 0.0
    tqdm.write(f"✅ Simulation complete! {len(profiles):,} subjects, {len(visits):,} visits")
    tqdm.write(f"📈 Measured visits: {n_measured:,} ({rate:.1%} attendance)")
    tqdm.write(f"📁 Visits table: {visits_path}")


@app.command()
def plot(
    visits_path: str = typer.Argument(..., help="Path to an exported visits table (.csv or .parquet)"),
    output: str = typer.Option(None, "--output", help="Plot file to write (default: plots/regression_by_gender.png)"),
):
    """Plot measured values against elapsed days by gender."""
    from .export import read_visits
    from .plotting import save_plot

    try:
        visits = read_visits(visits_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    path = save_plot(visits, Path(output) if output else get_plot_path(DEFAULT_PLOT_NAME))
    tqdm.write(f"📊 Plot saved to {path}")


@app.command()
def fit(
    visits_path: str = typer.Argument(..., help="Path to an exported visits table (.csv or .parquet)"),
):
    """Print the per-gender linear trend fitted to measured visits."""
    from .analysis import fit_trends
    from .export import read_visits

    try:
        visits = read_visits(visits_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    trends = fit_trends(visits)
    typer.echo(trends.to_string())


if __name__ == "__main__":
    app()
