"""
Light-use-efficiency C3 photosynthesis (Haxeltine and Prentice 1996) in the
PALADYN formulation (Willeit and Ganopolski 2016, Appendix C).

Inputs: air temperature (°C), downward shortwave (W/m^2), pressure (Pa),
CO2 (ppm), LAI and lambda_c. Outputs GPP (kgC/m^2/day), daily leaf
respiration Rd and daytime net assimilation An (gC/m^2/day). No light,
no leaves or air colder than -3 °C give zero GPP and Rd. Assimilation and
leaf respiration scale with the soil moisture limiting factor beta.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.constants import partial_pressure_co2, partial_pressure_o2
from pylsm.jax_compat import safe_divide
from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, input_

from .plant_available_water import soil_moisture_limiting_factor


@dataclass(frozen=True)
class LUEPhotosynthesis(Process):
    tau25: float = 2600.0  # CO2/O2 specificity ratio at 25 °C
    Kc25: float = 30.0  # Michaelis-Menten constant for CO2 at 25 °C (Pa)
    Ko25: float = 3.0e4  # Michaelis-Menten constant for O2 at 25 °C (Pa)
    q10_tau: float = 0.57
    q10_Kc: float = 2.1
    q10_Ko: float = 1.2
    alpha_leaf: float = 0.17  # leaf albedo in the PAR range
    cq: float = 4.6e-6  # J -> mol photons
    k_ext: float = 0.5
    alpha_a: float = 0.5  # fraction of PAR absorbed by leaves
    t_CO2_high: float = 42.0
    t_CO2_low: float = -4.0
    t_photos_high: float = 30.0
    t_photos_low: float = 15.0
    alpha_C3: float = 0.08  # intrinsic quantum efficiency
    C_mass: float = 12.0  # g/mol
    theta_r: float = 0.7  # co-limitation shape parameter
    day_length: float = 24.0  # h
    sec_day: float = 8.765813e4
    beta: float = 1.0  # soil moisture limiting factor without a PAW scheme

    def variables(self):
        return (
            auxiliary("GPP", XY, units="kgC/m^2/day"),
            auxiliary("Rd", XY, units="gC/m^2/day"),
            auxiliary("An", XY, units="gC/m^2/day"),
            auxiliary("LAI", XY),
            auxiliary("lambda_c", XY),
            input_("air_temperature", XY, default=10.0, units="°C"),
            input_("air_pressure", XY, default=101325.0, units="Pa"),
            input_("shortwave_down", XY, default=200.0, units="W/m^2"),
            input_("co2", XY, default=400.0, units="ppm"),
        )

    def kinetic_parameters(self, T_air):
        f = (T_air - 25.0) * 0.1
        return self.tau25 * self.q10_tau**f, self.Kc25 * self.q10_Kc**f, self.Ko25 * self.q10_Ko**f

    def apar(self, swdown, LAI):
        """Absorbed PAR (mol photons/m^2/day)."""
        par = 0.5 * swdown * self.sec_day * (1.0 - self.alpha_leaf) * self.cq
        return self.alpha_a * par * (1.0 - np.exp(-self.k_ext * LAI))

    def temperature_stress(self, T_air):
        k1 = 2.0 * np.log(1.0 / 0.99 - 1.0) / (self.t_CO2_low - self.t_photos_low)
        k2 = 0.5 * (self.t_CO2_low + self.t_photos_low)
        k3 = np.log(0.99 / 0.01) / (self.t_CO2_high - self.t_photos_high)
        low = 1.0 / (1.0 + np.exp(k1 * (k2 - T_air)))
        high = 1.0 - 0.01 * np.exp(k3 * (T_air - self.t_photos_high))
        inside = (T_air > self.t_CO2_low) & (T_air < self.t_CO2_high)
        return np.where(inside, low * high, 0.0)

    def photosynthesis(self, T_air, swdown, pressure, co2, LAI, lambda_c, beta=None):
        """Returns (GPP, Rd, And)."""
        beta = self.beta if beta is None else beta
        p_O2 = partial_pressure_o2(pressure)
        p_i = lambda_c * partial_pressure_co2(pressure, co2)
        tau, Kc, Ko = self.kinetic_parameters(T_air)
        gamma_star = p_O2 / (2.0 * tau)

        apar = self.apar(swdown, LAI)
        k_inh = p_i + Kc * (1.0 + p_O2 / Ko)
        c1 = self.alpha_C3 * self.temperature_stress(T_air) * self.C_mass * (p_i - gamma_star) / (p_i + 2.0 * gamma_star)
        c2 = (p_i - gamma_star) / k_inh
        Vc_max = safe_divide(c1 * apar * k_inh, p_i - gamma_star)

        JE = c1 * apar / self.day_length
        JC = c2 * Vc_max / 24.0
        disc = np.maximum((JE + JC) ** 2 - 4.0 * self.theta_r * JE * JC, 0.0)
        Ag = (JE + JC - np.sqrt(disc)) / (2.0 * self.theta_r) * self.day_length * beta
        Rd = self.alpha_C3 * Vc_max * beta
        An = Ag - Rd
        And = An + (1.0 - self.day_length / 24.0) * Rd

        active = (self.day_length > 0.0) & (T_air > -3.0) & (LAI > 0.0)
        GPP = np.where(active, And * 1.0e-3, 0.0)
        return GPP, np.where(active, Rd, 0.0), np.where(active, And, 0.0)

    def compute_auxiliary(self, state, grid):
        GPP, Rd, And = self.photosynthesis(
            state.air_temperature, state.shortwave_down, state.air_pressure,
            state.co2, state.LAI, state.lambda_c, soil_moisture_limiting_factor(state, self.beta),
        )
        state["GPP"] = GPP
        state["Rd"] = Rd
        state["An"] = And

    def compute_tendencies(self, state, grid):
        return None
