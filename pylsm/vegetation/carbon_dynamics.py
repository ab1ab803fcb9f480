"""
Vegetation carbon pool (PALADYN, Willeit and Ganopolski 2016), one pool
for leaves, stems and roots together.

    LAI_b     = C_veg / (2/SLA + awl)                          (Eqs. 76-79)
    lambda    = clip((LAI_b - LAI_min) / (LAI_max - LAI_min), 0, 1)   (Eq. 74)
    Lambda    = (gamma_L/SLA + gamma_R/SLA + gamma_S*awl) * LAI_b     (Eq. 75)
    dC_veg/dt = (1 - lambda) * NPP - Lambda                    (Eq. 72)

NPP is in kgC/m^2/day and turnover rates in 1/yr; the tendency is in
kgC/m^2/s. Litterfall per unit grid area is reported for the soil.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.constants import SECONDS_PER_DAY, SECONDS_PER_YEAR
from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, prognostic


@dataclass(frozen=True)
class CarbonDynamics(Process):
    SLA: float = 10.0  # specific leaf area, m^2/kgC
    awl: float = 2.0  # allometric coefficient, kgC/m^2
    LAI_min: float = 1.0
    LAI_max: float = 6.0
    gamma_L: float = 0.3  # leaf turnover, 1/yr
    gamma_R: float = 0.3  # root turnover, 1/yr
    gamma_S: float = 0.05  # stem turnover, 1/yr

    def variables(self):
        return (
            prognostic("C_veg", XY, units="kgC/m^2", desc="vegetation carbon"),
            auxiliary("LAI_b", XY, desc="balanced leaf area index"),
            auxiliary("lambda_NPP", XY, desc="NPP share spent on spreading"),
            auxiliary("litterfall", XY, units="kgC/m^2/s"),
            auxiliary("NPP", XY, units="kgC/m^2/day"),
        )

    def balanced_lai(self, C_veg):
        return C_veg / (2.0 / self.SLA + self.awl)

    def lambda_npp(self, LAI_b):
        return np.clip((LAI_b - self.LAI_min) / (self.LAI_max - self.LAI_min), 0.0, 1.0)

    def local_litterfall(self, LAI_b):
        """Lambda_loc in kgC/m^2/yr."""
        return (self.gamma_L / self.SLA + self.gamma_R / self.SLA + self.gamma_S * self.awl) * LAI_b

    def compute_auxiliary(self, state, grid):
        LAI_b = self.balanced_lai(state.C_veg)
        state["LAI_b"] = LAI_b
        state["lambda_NPP"] = self.lambda_npp(LAI_b)
        nu = state["vegetation_area_fraction"] if "vegetation_area_fraction" in state else 1.0
        state["litterfall"] = self.local_litterfall(LAI_b) / SECONDS_PER_YEAR * nu

    def compute_tendencies(self, state, grid):
        growth = (1.0 - state.lambda_NPP) * state.NPP / SECONDS_PER_DAY
        state.tendency("C_veg")[...] += growth - self.local_litterfall(state.LAI_b) / SECONDS_PER_YEAR
