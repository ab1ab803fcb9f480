"""
pylsm: modular land-surface simulation.

Processes declare their variables, a state namespace tree is built from the
declarations, and a Simulation driver advances it with an explicit
integrator. See pylsm.world for the engine and pylsm.soil, pylsm.surface and
pylsm.vegetation for the physics.
"""

from .constants import PhysicalConstants
from .grid import ColumnGrid, ExponentialSpacing, PrescribedSpacing, UniformSpacing
from .land import LandModel, richards_soil
from .logging_config import setup_logging
from .world import (
    ConfigurationError,
    DiagnosticsContext,
    FieldInput,
    ForwardEuler,
    FunctionInput,
    Heun,
    NumericalDomainError,
    SimConfig,
    Simulation,
    TimeSeriesInput,
    build_state,
    make_integrator,
)

__version__ = "0.1.0"

__all__ = [
    "ColumnGrid",
    "ConfigurationError",
    "DiagnosticsContext",
    "ExponentialSpacing",
    "FieldInput",
    "ForwardEuler",
    "FunctionInput",
    "Heun",
    "LandModel",
    "NumericalDomainError",
    "PhysicalConstants",
    "PrescribedSpacing",
    "SimConfig",
    "Simulation",
    "TimeSeriesInput",
    "UniformSpacing",
    "build_state",
    "make_integrator",
    "richards_soil",
    "setup_logging",
]
