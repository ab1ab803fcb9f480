"""
Soil heat transport.

Prognostic internal energy U (J/m^3) with the freeze/thaw closure;
conduction between cells,

    dU/dt = -dq/dz,   q = -k_face dT/dz   (downward positive, W/m^2)

with arithmetic-mean face conductivity and closed edges, plus the top
and bottom boundary conditions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pylsm.constants import PhysicalConstants
from pylsm.world.boundary import BOTTOM, TOP, BoundaryCondition, NoFlux, edge_index
from pylsm.world.errors import ConfigurationError
from pylsm.world.process import Process
from pylsm.world.variables import XY, XYZ, auxiliary, prognostic

from .closures import EnergyTemperatureClosure
from .composition import SoilThermalProperties, soil_fractions


@dataclass(frozen=True)
class SoilEnergy(Process):
    thermal: SoilThermalProperties = field(default_factory=SoilThermalProperties)
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)
    top: BoundaryCondition = field(default_factory=NoFlux)
    bottom: BoundaryCondition = field(default_factory=NoFlux)
    initialize_from: str = "temperature"  # or "internal_energy"

    @property
    def closure(self) -> EnergyTemperatureClosure:
        return EnergyTemperatureClosure(self.thermal, self.constants)

    def variables(self):
        return (
            prognostic("internal_energy", XYZ, closure=self.closure, units="J/m^3"),
            auxiliary("ground_temperature", XY, units="°C", desc="temperature of the uppermost cell"),
            auxiliary("thermal_conductivity", XYZ, units="W/m/K"),
        ) + self.top.variables() + self.bottom.variables()

    def initialize(self, state, grid):
        if self.initialize_from == "temperature":
            self.closure.forward(state, grid)
        elif self.initialize_from != "internal_energy":
            raise ConfigurationError(f"Unknown initialize_from: {self.initialize_from!r}")
        self.closure.inverse(state, grid)
        self.compute_auxiliary(state, grid)

    def compute_auxiliary(self, state, grid):
        state["thermal_conductivity"] = self.thermal.thermal_conductivity(soil_fractions(state))
        state["ground_temperature"] = state.temperature[..., 0]

    def heat_flux(self, state, grid):
        """Downward-positive conductive heat flux (W/m^2) at the interior faces."""
        return -grid.face_mean(state.thermal_conductivity) * grid.ddz(state.temperature)

    def compute_tendencies(self, state, grid):
        state.tendency("internal_energy")[...] += grid.interior_divergence(self.heat_flux(state, grid))
        self.top.apply(state, grid, self, "internal_energy", TOP)
        self.bottom.apply(state, grid, self, "internal_energy", BOTTOM)

    def edge_flux(self, state, grid, side, value):
        """Inward half-cell conduction flux for a prescribed boundary temperature."""
        k = edge_index(side)
        return state.thermal_conductivity[..., k] * (value - state.temperature[..., k]) / (0.5 * grid.dz(k))
