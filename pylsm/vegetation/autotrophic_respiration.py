"""
Autotrophic respiration (PALADYN): maintenance of leaves, stems and roots
plus growth respiration; NPP is what remains of GPP.

    R_leaf = Rd / 1000
    R_stem = resp10 * f_air  * awl * LAI_b / (aws * cn_sapwood)
    R_root = resp10 * f_soil * phen * LAI_b / (SLA * cn_root)
    Rg     = 0.25 * (GPP - Rm),   Ra = Rm + Rg,   NPP = GPP - Ra

All in kgC/m^2/day. The soil temperature factor is zero until root
respiration is coupled to soil temperature.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, input_

from .carbon_dynamics import CarbonDynamics


@dataclass(frozen=True)
class AutotrophicRespiration(Process):
    cn_sapwood: float = 330.0
    cn_root: float = 29.0
    aws: float = 10.0  # ratio of total to respiring stem carbon
    resp10: float = 0.066
    growth_fraction: float = 0.25
    carbon: CarbonDynamics = field(default_factory=CarbonDynamics)

    def variables(self):
        return (
            auxiliary("Ra", XY, units="kgC/m^2/day"),
            auxiliary("NPP", XY, units="kgC/m^2/day"),
            auxiliary("GPP", XY, units="kgC/m^2/day"),
            auxiliary("Rd", XY, units="gC/m^2/day"),
            auxiliary("phen", XY),
            auxiliary("LAI_b", XY),
            input_("air_temperature", XY, default=10.0, units="°C"),
        )

    def temperature_factors(self, T_air):
        f_air = np.exp(308.56 * (1.0 / 56.02 - 1.0 / (46.02 + T_air)))
        f_soil = np.zeros_like(f_air)
        return f_air, f_soil

    def maintenance(self, T_air, Rd, phen, LAI_b):
        f_air, f_soil = self.temperature_factors(T_air)
        R_leaf = Rd / 1000.0
        R_stem = self.resp10 * f_air * self.carbon.awl * LAI_b / (self.aws * self.cn_sapwood)
        R_root = self.resp10 * f_soil * phen * LAI_b / (self.carbon.SLA * self.cn_root)
        return R_leaf + R_stem + R_root

    def compute_auxiliary(self, state, grid):
        Rm = self.maintenance(state.air_temperature, state.Rd, state.phen, state.LAI_b)
        Ra = Rm + self.growth_fraction * (state.GPP - Rm)
        state["Ra"] = Ra
        state["NPP"] = state.GPP - Ra

    def compute_tendencies(self, state, grid):
        return None
