"""
Soil organic carbon.

ConstantSoilCarbon fixes the organic fraction of the solid matrix.

OnePoolSoilCarbon carries one pool of soil organic carbon density C
(kg C m^-3) per cell:

    dC/dt = -R + d/dz(D_b dC/dz) - d/dz(w C) + litter input (top cell)
    R     = k_ref * Q10^((T - T_ref)/10) * C

Rates are given per year and converted to per second. The organic
fraction of the solid matrix follows from C and the organic matter
density.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from pylsm.constants import SECONDS_PER_YEAR
from pylsm.world.boundary import BOTTOM, TOP, BoundaryCondition, NoFlux, PrescribedFlux
from pylsm.world.process import Process
from pylsm.world.variables import XYZ, auxiliary, prognostic


@dataclass(frozen=True)
class ConstantSoilCarbon(Process):
    organic_fraction: float = 0.0

    def variables(self):
        return (auxiliary("organic_fraction", XYZ, default=self.organic_fraction),)

    def initialize(self, state, grid):
        state["organic_fraction"] = self.organic_fraction

    def compute_auxiliary(self, state, grid):
        """Constant."""
        return None

    def compute_tendencies(self, state, grid):
        """Constant."""
        return None


@dataclass(frozen=True)
class OnePoolSoilCarbon(Process):
    decomposition_rate: float = 0.1  # k_ref, 1/yr
    q10: float = 2.0
    reference_temperature: float = 10.0  # °C
    advection_velocity: float = 0.0  # m/yr, downward positive
    diffusivity: float = 0.1  # bioturbation D_b, m^2/yr
    organic_density: float = 1300.0  # kg/m^3
    top: BoundaryCondition = field(default_factory=lambda: PrescribedFlux(input_name="litter"))
    bottom: BoundaryCondition = field(default_factory=NoFlux)

    def variables(self):
        return (
            prognostic("density_soc", XYZ, units="kg/m^3", desc="soil organic carbon density"),
            auxiliary("respiration_rate", XYZ, units="kg/m^3/s", desc="heterotrophic respiration"),
            auxiliary("organic_fraction", XYZ),
        ) + self.top.variables() + self.bottom.variables()

    def _temperature(self, state):
        return state["temperature"] if "temperature" in state else self.reference_temperature

    def initialize(self, state, grid):
        self.update_organic_fraction(state)

    def update_organic_fraction(self, state):
        solid = 1.0 - state.porosity if "porosity" in state else 1.0
        frac = np.divide(state.density_soc / self.organic_density, solid,
                         out=np.zeros_like(state.density_soc), where=np.asarray(solid) > 0)
        state["organic_fraction"] = np.clip(frac, 0.0, 1.0)

    def compute_auxiliary(self, state, grid):
        k = self.decomposition_rate / SECONDS_PER_YEAR
        f_T = self.q10 ** ((self._temperature(state) - self.reference_temperature) / 10.0)
        state["respiration_rate"] = k * f_T * state.density_soc
        self.update_organic_fraction(state)

    def transport_flux(self, state, grid):
        """Downward-positive carbon flux (kg/m^2/s) at the interior faces."""
        C = state.density_soc
        diffusive = -(self.diffusivity / SECONDS_PER_YEAR) * grid.ddz(C)
        # Upwind: material enters a face from the cell above it
        advective = (self.advection_velocity / SECONDS_PER_YEAR) * C[..., :-1]
        return diffusive + advective

    def compute_tendencies(self, state, grid):
        tend = state.tendency("density_soc")
        tend -= state.respiration_rate
        tend += grid.interior_divergence(self.transport_flux(state, grid))
        self.top.apply(state, grid, self, "density_soc", TOP)
        self.bottom.apply(state, grid, self, "density_soc", BOTTOM)
