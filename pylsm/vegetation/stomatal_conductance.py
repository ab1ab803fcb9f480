"""
Optimal stomatal conductance (Medlyn et al. 2011) as used by PALADYN.

    lambda_c = 1 - 1.6 / (1 + g1 / sqrt(VPD[kPa]))
    gw_can   = g0 + (1 + g1 / sqrt(VPD)) * An / co2 * 1e6
    g0       = g_min * (1 - exp(-k_ext * LAI)) * beta

beta is the soil moisture limiting factor of a plant available water
scheme sharing the namespace, or the constant `beta` without one.

lambda_c (ratio of leaf-internal to air CO2) feeds photosynthesis in the
same pass; gw_can uses the net assimilation of the previous pass.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.constants import vapor_pressure_deficit
from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, input_

from .plant_available_water import soil_moisture_limiting_factor


@dataclass(frozen=True)
class MedlynStomatalConductance(Process):
    g1: float = 2.3
    g_min: float = 0.5  # mm/s
    k_ext: float = 0.5  # light extinction coefficient
    beta: float = 1.0  # soil moisture limiting factor without a PAW scheme

    def variables(self):
        return (
            auxiliary("lambda_c", XY, desc="leaf-internal / air CO2 ratio"),
            auxiliary("gw_can", XY, units="m/s", desc="canopy conductance for water vapour"),
            auxiliary("An", XY, units="gC/m^2/day", desc="daytime net assimilation"),
            auxiliary("LAI", XY),
            input_("air_temperature", XY, default=10.0, units="°C"),
            input_("air_pressure", XY, default=101325.0, units="Pa"),
            input_("specific_humidity", XY, default=0.005, units="kg/kg"),
            input_("co2", XY, default=400.0, units="ppm"),
        )

    def lambda_c(self, vpd):
        return 1.0 - 1.6 / (1.0 + self.g1 / np.sqrt(vpd * 1.0e-3))

    def canopy_conductance(self, vpd, An, co2, LAI, beta=None):
        beta = self.beta if beta is None else beta
        g0 = self.g_min / 1000.0 * (1.0 - np.exp(-self.k_ext * LAI)) * beta
        return g0 + (1.0 + self.g1 / np.sqrt(vpd)) * An / co2 * 1.0e6

    def compute_auxiliary(self, state, grid):
        vpd = vapor_pressure_deficit(state.air_temperature, state.specific_humidity, state.air_pressure)
        state["lambda_c"] = self.lambda_c(vpd)
        state["gw_can"] = self.canopy_conductance(
            vpd, state.An, state.co2, state.LAI, soil_moisture_limiting_factor(state, self.beta)
        )

    def compute_tendencies(self, state, grid):
        return None
