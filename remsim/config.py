"""
Configuration management for the simulator.
Loads simulation settings from YAML files and merges command line overrides.
"""

import copy
import logging
from pathlib import Path

import yaml

from .io.paths import CONFIG_DIR

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "population": {
        "n_subjects": 10000,
        "visit_rate": 0.75,
        "p_male": 0.5,
    },
    "trend": {
        "baseline": 100.0,
        "male_baseline_offset": 10.0,
        "slope": -0.25,
        "male_slope_offset": -0.1,
    },
    "visits": {
        "p_attend": 0.9,
        "max_gap_days": 7.0,
    },
    "processing": {
        "seed": 42,
        "replicates": 1,
    },
    "output": {
        "directory": "output",
        "format": "csv",
        "plot": True,
        "plot_name": "regression_by_gender.png",
    },
}

# CLI option name -> (section, key)
OVERRIDE_KEYS = {
    "n_subjects": ("population", "n_subjects"),
    "visit_rate": ("population", "visit_rate"),
    "p_male": ("population", "p_male"),
    "p_attend": ("visits", "p_attend"),
    "max_gap_days": ("visits", "max_gap_days"),
    "seed": ("processing", "seed"),
    "replicates": ("processing", "replicates"),
    "out": ("output", "directory"),
    "fmt": ("output", "format"),
    "plot": ("output", "plot"),
}


class ConfigLoader:
    """Loads YAML configuration files into dicts."""

    def __init__(self, config_dir=CONFIG_DIR):
        self.config_dir = Path(config_dir)
        if not self.config_dir.exists():
            raise FileNotFoundError(f"Configuration directory {config_dir} does not exist")

    def load_yaml(self, filename: str):
        filepath = Path(filename)
        if not filepath.is_absolute() and len(filepath.parts) == 1:
            filepath = self.config_dir / filename
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file {filepath} does not exist")
        with open(filepath, "r") as f:
            return yaml.safe_load(f) or {}

    def load_simulation_config(self, filename="simulation.yaml") -> dict:
        return merge_config(DEFAULT_CONFIG, self.load_yaml(filename))


def merge_config(base: dict, overrides: dict) -> dict:
    """Return a copy of ``base`` with the sections of ``overrides`` laid over it."""
    merged = copy.deepcopy(base)
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def apply_overrides(config: dict, **overrides) -> dict:
    """Override config values with the options that were explicitly provided."""
    config = copy.deepcopy(config)
    for name, value in overrides.items():
        if name not in OVERRIDE_KEYS:
            raise ValueError(f"Unknown config override: {name}")
        if value is None:
            continue
        section, key = OVERRIDE_KEYS[name]
        config.setdefault(section, {})[key] = value
    return config


def load_config(config_type: str = "simulation", filename=None, config_dir=CONFIG_DIR):
    if config_type != "simulation":
        raise ValueError(f"Unknown config type: {config_type}")
    if filename is None and not (Path(config_dir) / "simulation.yaml").exists():
        logger.warning("No simulation.yaml in %s, using built-in defaults", config_dir)
        return copy.deepcopy(DEFAULT_CONFIG)
    if filename is not None and Path(filename).parent != Path("."):
        config_dir = Path(filename).parent
    loader = ConfigLoader(config_dir)
    return loader.load_simulation_config(filename or "simulation.yaml")
