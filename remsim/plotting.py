"""
Scatter and per-gender regression plot of simulated measurements.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from .data_gen import measured_visits

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Regression of values by gender"


def plot_trajectories(visits: pd.DataFrame, ax=None, title: str = DEFAULT_TITLE):
    """Scatter elapsed_day against measured_value with a regression line per sex.

    Returns the matplotlib Figure holding the axes.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))
    else:
        fig = ax.figure

    measured = measured_visits(visits)
    if measured.empty:
        logger.warning("No attended visits to plot")
    else:
        palette = dict(zip(sorted(measured["sex"].unique()), sns.color_palette("husl", 2)))
        for sex, group in measured.groupby("sex", sort=True):
            sns.regplot(
                data=group,
                x="elapsed_day",
                y="measured_value",
                ax=ax,
                ci=None,
                color=palette[sex],
                label=sex,
                scatter_kws={"alpha": 0.2, "s": 10},
                line_kws={"lw": 2},
            )
        ax.legend(title="Gender")

    ax.set_title(title, loc="center")
    ax.set_xlabel("Days")
    ax.set_ylabel("Value")
    fig.tight_layout()
    return fig


def save_plot(visits: pd.DataFrame, path, title: str = DEFAULT_TITLE) -> Path:
    """Render the regression plot to ``path`` and close the figure."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = plot_trajectories(visits, title=title)
    fig.savefig(path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    logger.info("Saved plot to %s", path)
    return path
