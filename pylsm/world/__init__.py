"""
World: the state/process composition engine and its time-stepping driver.

Pieces (leaf first)
- variables: symbolic declarations (prognostic / auxiliary / input)
- state: namespace tree built from declarations, shared clock
- closures: prognostic <-> diagnostic relations, applied after updates
- process: Process contract and CompositeProcess sequencing
- boundary / inputs: edge fluxes and external forcing
- integrators: ForwardEuler, Heun
- simulation: Simulation driver, run(steps=...) / run(period=...)
"""

from __future__ import annotations

from .boundary import GroundHeatFlux, InfiltrationFlux, NoFlux, PrescribedFlux, PrescribedValue
from .closures import Closure, apply_closures
from .config import SimConfig
from .diagnostics import DiagnosticsContext
from .errors import ConfigurationError, NumericalDomainError
from .inputs import FieldInput, FunctionInput, InputSource, TimeSeriesInput
from .integrators import ForwardEuler, Heun, make_integrator
from .process import CompositeProcess, Process
from .simulation import Simulation
from .state import Clock, StateNamespace, build_state
from .variables import XY, XYZ, Dims, Namespaced, Variable, VarKind, auxiliary, input_, prognostic

__all__ = [
    "Clock",
    "Closure",
    "CompositeProcess",
    "ConfigurationError",
    "DiagnosticsContext",
    "Dims",
    "FieldInput",
    "ForwardEuler",
    "FunctionInput",
    "GroundHeatFlux",
    "Heun",
    "InfiltrationFlux",
    "InputSource",
    "Namespaced",
    "NoFlux",
    "NumericalDomainError",
    "PrescribedFlux",
    "PrescribedValue",
    "Process",
    "SimConfig",
    "Simulation",
    "StateNamespace",
    "TimeSeriesInput",
    "VarKind",
    "Variable",
    "XY",
    "XYZ",
    "apply_closures",
    "auxiliary",
    "build_state",
    "input_",
    "make_integrator",
    "prognostic",
]
