"""
Surface energy balance (SEB).

Fluxes, all positive upward (W/m^2):
- Radiation:  R_net = S_up - S_down + L_up - L_down
              S_up = albedo * S_down
              L_up = eps * sigma * T_s^4 + (1 - eps) * L_down     (T_s in K)
- Sensible:   H_s = -rho_a * c_a / r_a * (T_air - T_s)
- Latent:     H_l = -L_sg * rho_a * beta / r_a * (q_air - q_sat(T_s))
              q_sat = epsilon * e_sat(T_s) / p
- Ground:     G = R_net + H_s + H_l
              (heat conducted up out of the ground; the surface holds no energy)

Skin temperature
- PrescribedSkinTemperature: T_s is an input field.
- ImplicitSkinTemperature: T_s satisfies the half-cell conduction relation
      T_s = T_g - G(T_s) * dz_1 / (2 * k_s)
  with T_g the temperature of the uppermost soil cell; solved per column by
  Newton iteration (default) or relaxed fixed-point (Picard) iteration. The
  Picard map has slope -dz_1 / (2 k_s) * dG/dT_s, which falls below -1 for
  thin top cells; it then needs
      relaxation < 2 / (1 + dz_1 / (2 k_s) * dG/dT_s).
  Non-convergence is logged as a warning and the last iterate is kept.

Environment overrides (surface_energy_balance_from_env):
    LSM_ALBEDO=0.3, LSM_EMISSIVITY=0.97
    LSM_AERODYNAMIC_RESISTANCE=50 (s/m)
    LSM_SKIN_TOL=1e-6 (K), LSM_SKIN_MAX_ITER=50
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import numpy as np

from pylsm.constants import PhysicalConstants, saturation_vapor_pressure
from pylsm.numerics.fixed_point import fixed_point, newton
from pylsm.world.errors import ConfigurationError
from pylsm.world.process import CompositeProcess, Process
from pylsm.world.variables import XY, auxiliary, input_

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstantAlbedo(Process):
    albedo: float = 0.3
    emissivity: float = 0.97

    def variables(self):
        return (
            auxiliary("albedo", XY, default=self.albedo),
            auxiliary("emissivity", XY, default=self.emissivity),
        )

    def compute_auxiliary(self, state, grid):
        state["albedo"] = self.albedo
        state["emissivity"] = self.emissivity

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class DiagnosedRadiativeFluxes(Process):
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)

    def variables(self):
        return (
            auxiliary("surface_shortwave_up", XY, units="W/m^2"),
            auxiliary("surface_longwave_up", XY, units="W/m^2"),
            auxiliary("surface_net_radiation", XY, units="W/m^2", desc="net outgoing (positive up) radiation"),
        )

    def fluxes(self, state, T_s):
        c = self.constants
        sw_up = state.albedo * state.shortwave_down
        lw_up = c.stefan_boltzmann(c.celsius_to_kelvin(T_s), state.emissivity) + (1.0 - state.emissivity) * state.longwave_down
        net = sw_up - state.shortwave_down + lw_up - state.longwave_down
        return sw_up, lw_up, net

    def compute_auxiliary(self, state, grid):
        sw_up, lw_up, net = self.fluxes(state, state.skin_temperature)
        state["surface_shortwave_up"] = sw_up
        state["surface_longwave_up"] = lw_up
        state["surface_net_radiation"] = net

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class DiagnosedTurbulentFluxes(Process):
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)
    aerodynamic_resistance: float = 50.0  # s/m
    moisture_limiting_factor: float = 1.0

    def variables(self):
        return (
            auxiliary("sensible_heat_flux", XY, units="W/m^2"),
            auxiliary("latent_heat_flux", XY, units="W/m^2"),
        )

    def saturation_specific_humidity(self, state, T_s):
        return self.constants.epsilon * saturation_vapor_pressure(T_s) / state.air_pressure

    def fluxes(self, state, T_s):
        c = self.constants
        r_a = self.aerodynamic_resistance
        H_s = -c.rho_a * c.c_a / r_a * (state.air_temperature - T_s)
        q_sat = self.saturation_specific_humidity(state, T_s)
        H_l = -c.L_sg * c.rho_a * self.moisture_limiting_factor / r_a * (state.specific_humidity - q_sat)
        return H_s, H_l

    def compute_auxiliary(self, state, grid):
        H_s, H_l = self.fluxes(state, state.skin_temperature)
        state["sensible_heat_flux"] = H_s
        state["latent_heat_flux"] = H_l

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class PrescribedSkinTemperature(Process):
    def variables(self):
        return (
            input_("skin_temperature", XY, units="°C"),
            auxiliary("ground_heat_flux", XY, units="W/m^2"),
        )

    def solve(self, state, grid, ground_heat_flux):
        """Skin temperature is forcing; nothing to solve."""
        return None

    def compute_auxiliary(self, state, grid):
        return None

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class ImplicitSkinTemperature(Process):
    soil_conductivity: float = 2.0  # k_s, W/m/K
    tol: float = 1e-6
    max_iter: int = 50
    method: str = "newton"  # or "picard"
    relaxation: float = 1.0  # picard only

    def variables(self):
        return (
            auxiliary("skin_temperature", XY, units="°C", desc="longwave emission temperature"),
            auxiliary("ground_heat_flux", XY, units="W/m^2"),
            auxiliary("ground_temperature", XY, units="°C", desc="temperature of the uppermost cell"),
        )

    def solve(self, state, grid, ground_heat_flux):
        half_cell = grid.dz(0) / (2.0 * self.soil_conductivity)
        T_g = state.ground_temperature

        def residual(T_s):
            return T_s - T_g + ground_heat_flux(T_s) * half_cell

        if self.method == "newton":
            result = newton(residual, state.skin_temperature, tol=self.tol, max_iter=self.max_iter)
        elif self.method == "picard":
            result = fixed_point(
                lambda T_s: T_s - residual(T_s), state.skin_temperature,
                tol=self.tol, max_iter=self.max_iter, relaxation=self.relaxation,
            )
        else:
            raise ConfigurationError(f"Unknown skin temperature solver: {self.method!r}")
        if not result.converged:
            logger.warning(
                "[SEB] skin temperature not converged after %d iterations (max |dT|=%.3g K, tol=%.1e)",
                result.iterations, result.residual, self.tol,
            )
        if np.all(np.isfinite(result.value)):
            state["skin_temperature"] = result.value
        return result

    def compute_auxiliary(self, state, grid):
        """Solved by the owning SurfaceEnergyBalance."""
        return None

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class SurfaceEnergyBalance(CompositeProcess):
    albedo: Process = field(default_factory=ConstantAlbedo)
    skin_temperature: Process = field(default_factory=ImplicitSkinTemperature)
    radiative_fluxes: Process = field(default_factory=DiagnosedRadiativeFluxes)
    turbulent_fluxes: Process = field(default_factory=DiagnosedTurbulentFluxes)

    components = ("albedo", "skin_temperature", "radiative_fluxes", "turbulent_fluxes")

    def ground_heat_flux(self, state, T_s):
        _, _, R_net = self.radiative_fluxes.fluxes(state, T_s)
        H_s, H_l = self.turbulent_fluxes.fluxes(state, T_s)
        return R_net + H_s + H_l

    def compute_auxiliary(self, state, grid):
        self.albedo.compute_auxiliary(state, grid)
        self.skin_temperature.solve(state, grid, lambda T_s: self.ground_heat_flux(state, T_s))
        self.radiative_fluxes.compute_auxiliary(state, grid)
        self.turbulent_fluxes.compute_auxiliary(state, grid)
        state["ground_heat_flux"] = (
            state.surface_net_radiation + state.sensible_heat_flux + state.latent_heat_flux
        )

    def compute_tendencies(self, state, grid):
        """The SEB is purely diagnostic."""
        return None


def surface_energy_balance_from_env(constants: PhysicalConstants | None = None) -> SurfaceEnergyBalance:
    def _f(env, default):
        try:
            return float(os.getenv(env, str(default)))
        except ValueError:
            return default

    def _i(env, default):
        try:
            return int(os.getenv(env, str(default)))
        except ValueError:
            return default

    constants = constants if constants is not None else PhysicalConstants()
    return SurfaceEnergyBalance(
        albedo=ConstantAlbedo(albedo=_f("LSM_ALBEDO", 0.3), emissivity=_f("LSM_EMISSIVITY", 0.97)),
        skin_temperature=ImplicitSkinTemperature(tol=_f("LSM_SKIN_TOL", 1e-6), max_iter=_i("LSM_SKIN_MAX_ITER", 50)),
        radiative_fluxes=DiagnosedRadiativeFluxes(constants),
        turbulent_fluxes=DiagnosedTurbulentFluxes(constants, aerodynamic_resistance=_f("LSM_AERODYNAMIC_RESISTANCE", 50.0)),
    )
