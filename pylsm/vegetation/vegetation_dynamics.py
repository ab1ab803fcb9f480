"""
Fractional vegetation cover of a single PFT, Lotka-Volterra form
(PALADYN Eq. 73):

    dnu/dt = lambda_NPP * NPP / C_veg * nu* * (1 - nu) - gamma_v * nu*
    nu*    = max(nu, nu_seed)

gamma_v is the minimum disturbance rate (1/yr); NPP in kgC/m^2/day.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.constants import SECONDS_PER_DAY, SECONDS_PER_YEAR
from pylsm.jax_compat import safe_divide
from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, prognostic


@dataclass(frozen=True)
class VegetationDynamics(Process):
    nu_seed: float = 0.001
    gamma_v_min: float = 0.002  # 1/yr

    def variables(self):
        return (
            prognostic("vegetation_area_fraction", XY, default=self.nu_seed),
            prognostic("C_veg", XY, units="kgC/m^2"),
            auxiliary("lambda_NPP", XY),
            auxiliary("NPP", XY, units="kgC/m^2/day"),
        )

    def compute_auxiliary(self, state, grid):
        """Cover is purely prognostic."""
        return None

    def compute_tendencies(self, state, grid):
        nu = state.vegetation_area_fraction
        nu_star = np.maximum(nu, self.nu_seed)
        spread = safe_divide(state.lambda_NPP * state.NPP / SECONDS_PER_DAY, state.C_veg)
        state.tendency("vegetation_area_fraction")[...] += (
            spread * nu_star * (1.0 - nu) - self.gamma_v_min / SECONDS_PER_YEAR * nu_star
        )
