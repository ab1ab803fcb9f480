# pylsm/constants.py

"""
Central repository for physical constants and unit conversions used by the
land-surface processes.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# --- Time ---
SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0
SECONDS_PER_YEAR = 365.25 * SECONDS_PER_DAY

# --- Physical Constants (SI units) ---
RHO_WATER = 1000.0  # Density of water (kg m^-3)
RHO_ICE = 916.2  # Density of ice (kg m^-3)
RHO_AIR = 1.293  # Density of air at standard pressure and 0 °C (kg m^-3)
CP_AIR = 1005.7  # Specific heat capacity of dry air (J kg^-1 K^-1)
L_FUSION = 3.34e5  # Specific latent heat of fusion (J kg^-1)
L_VAPORIZATION = 2.257e6  # Specific latent heat of vaporization (J kg^-1)
L_SUBLIMATION = 2.834e6  # Specific latent heat of sublimation (J kg^-1)
GRAVITY = 9.80665  # Gravitational acceleration (m s^-2)
T_REF = 273.15  # 0 °C in Kelvin
SIGMA = 5.6704e-8  # Stefan-Boltzmann constant (W m^-2 K^-4)
VON_KARMAN = 0.4
EPSILON = 0.622  # Ratio of molecular weights of water vapour and dry air
R_AIR = 287.058  # Specific gas constant of dry air (J kg^-1 K^-1)


@dataclass(frozen=True)
class PhysicalConstants:
    """Bundle of physical constants passed to processes (overridable for calibration)."""

    rho_w: float = RHO_WATER
    rho_i: float = RHO_ICE
    rho_a: float = RHO_AIR
    c_a: float = CP_AIR
    L_sl: float = L_FUSION
    L_lg: float = L_VAPORIZATION
    L_sg: float = L_SUBLIMATION
    g: float = GRAVITY
    T_ref: float = T_REF
    sigma: float = SIGMA
    kappa: float = VON_KARMAN
    epsilon: float = EPSILON
    R_a: float = R_AIR

    def celsius_to_kelvin(self, T):
        return T + self.T_ref

    def stefan_boltzmann(self, T, emissivity):
        """Radiant emittance eps * sigma * T^4 for T in Kelvin."""
        return emissivity * self.sigma * T**4

    @property
    def volumetric_latent_heat_fusion(self) -> float:
        """rho_w * L_sl (J m^-3), latent heat of a unit volume of pore water."""
        return self.rho_w * self.L_sl


def saturation_vapor_pressure(T):
    """
    Saturation vapour pressure over water (Pa) for T in °C (Magnus form,
    Alduchov and Eskridge 1996).
    """
    return 610.94 * np.exp(17.625 * T / (243.04 + T))


def vapor_pressure_deficit(T_air, q_air, pressure):
    """VPD (Pa) from air temperature (°C), specific humidity (kg/kg) and pressure (Pa)."""
    e_sat = saturation_vapor_pressure(T_air)
    e_air = q_air * pressure / (EPSILON + (1.0 - EPSILON) * q_air)
    return np.maximum(e_sat - e_air, 0.1)


def partial_pressure_o2(pressure):
    return 0.209 * pressure


def partial_pressure_co2(pressure, co2_ppm):
    return co2_ppm * 1e-6 * pressure
