"""
Boundary conditions for column processes.

A boundary condition is attached to one side ("top" = cell 0, "bottom" =
cell nz-1) of one prognostic variable of a process and adds its flux
divergence into that variable's tendency at the edge cell:

    tendency[..., k_edge] += q_in / (dz[k_edge] * storage)

where q_in is the flux INTO the column (positive = gain) and storage is
1, or `process.edge_storage(state, side)` when the owning process defines
it (porosity for saturation). The interior
operator of the owning process uses zero-flux edges, so contributions from
the top and the bottom add up independently.

Value (Dirichlet) conditions delegate the conversion of a boundary value
into a flux to the owning process via `process.edge_flux(state, grid,
side, value)` (e.g. half-cell conduction for heat).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError
from .variables import XY, input_

TOP = "top"
BOTTOM = "bottom"


def edge_index(side: str) -> int:
    if side == TOP:
        return 0
    if side == BOTTOM:
        return -1
    raise ConfigurationError(f"unknown boundary side {side!r}; expected 'top' or 'bottom'")


class BoundaryCondition:
    def variables(self) -> tuple:
        return ()

    def apply(self, state, grid, process, prognostic: str, side: str) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement apply()")


def _add_edge_flux(state, grid, process, prognostic: str, side: str, q_in) -> None:
    k = edge_index(side)
    # Processes whose prognostic is a per-pore quantity (saturation) scale by their storage
    storage = process.edge_storage(state, side) if hasattr(process, "edge_storage") else 1.0
    state.tendency(prognostic)[..., k] += q_in / (grid.dz(k) * storage)


@dataclass(frozen=True)
class NoFlux(BoundaryCondition):
    """Closed boundary; contributes nothing."""

    def apply(self, state, grid, process, prognostic, side):
        return None


@dataclass(frozen=True)
class PrescribedFlux(BoundaryCondition):
    """
    Fixed inward flux (e.g. geothermal heat flux in W/m^2 at the bottom).
    If `input_name` is given the flux is read from that lateral input field.
    """

    value: float = 0.0
    input_name: Optional[str] = None

    def variables(self):
        return (input_(self.input_name, XY, default=self.value),) if self.input_name else ()

    def flux(self, state):
        return state[self.input_name] if self.input_name else self.value

    def apply(self, state, grid, process, prognostic, side):
        _add_edge_flux(state, grid, process, prognostic, side, self.flux(state))


@dataclass(frozen=True)
class PrescribedValue(BoundaryCondition):
    """
    Fixed boundary value of the diagnostic quantity (e.g. surface
    temperature in °C). If `input_name` is given the value is read from that
    lateral input field.
    """

    value: float = 0.0
    input_name: Optional[str] = None

    def variables(self):
        return (input_(self.input_name, XY, default=self.value),) if self.input_name else ()

    def boundary_value(self, state):
        return state[self.input_name] if self.input_name else self.value

    def apply(self, state, grid, process, prognostic, side):
        q_in = process.edge_flux(state, grid, side, self.boundary_value(state))
        _add_edge_flux(state, grid, process, prognostic, side, q_in)


@dataclass(frozen=True)
class GroundHeatFlux(BoundaryCondition):
    """
    Top heat flux taken from the surface energy balance. The ground heat
    flux field is positive upward, so the inward flux is its negative. The
    field is declared by the surface energy balance sharing the namespace.
    """

    field: str = "ground_heat_flux"

    def apply(self, state, grid, process, prognostic, side):
        if side != TOP:
            raise ConfigurationError("GroundHeatFlux can only be used at the top boundary")
        if self.field not in state:
            raise ConfigurationError(f"GroundHeatFlux needs a {self.field!r} field; add a surface energy balance")
        _add_edge_flux(state, grid, process, prognostic, side, -state[self.field])


@dataclass(frozen=True)
class InfiltrationFlux(BoundaryCondition):
    """
    Top water flux taken from the surface hydrology. The infiltration field
    (m/s) is positive downward, i.e. already an inward flux.
    """

    field: str = "infiltration"

    def apply(self, state, grid, process, prognostic, side):
        if side != TOP:
            raise ConfigurationError("InfiltrationFlux can only be used at the top boundary")
        if self.field not in state:
            raise ConfigurationError(f"InfiltrationFlux needs a {self.field!r} field; add a surface hydrology")
        _add_edge_flux(state, grid, process, prognostic, side, state[self.field])
