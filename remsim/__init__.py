"""
Repeated-measures data simulation.

Generates long-format longitudinal datasets with gender-stratified linear
trends, random appointment gaps and probabilistic no-shows.
"""

from .data_gen import (
    InvalidParameter,
    SimulationParams,
    generate,
    generate_replicates,
    measured_visits,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidParameter",
    "SimulationParams",
    "generate",
    "generate_replicates",
    "measured_visits",
]
