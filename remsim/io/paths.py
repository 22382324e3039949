"""
Path management utilities for the simulator.
Provides consistent default locations for configuration and plots.
"""

from pathlib import Path


# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Configuration
CONFIG_DIR = PROJECT_ROOT / "config"

# Visualization
PLOTS_DIR = PROJECT_ROOT / "plots"


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, create if it doesn't."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_plot_path(plot_name: str, directory=None) -> Path:
    """Get path for plot file, creating its directory."""
    return ensure_dir(Path(directory) if directory else PLOTS_DIR) / plot_name
