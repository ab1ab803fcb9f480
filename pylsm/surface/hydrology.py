"""
Surface hydrology after PALADYN (Willeit and Ganopolski 2016), liquid water
only. Water fluxes are in m/s of liquid water.

PALADYNCanopyInterception
    Canopy water w_can (kg/m^2) intercepts rain and drains to the ground:
        I_can = alpha_int * P * (1 - exp(-k_ext * (LAI + SAI)))
        R_can = max(w_can, 0) / rho_w / tau_w
        f_can = clip(w_can / (w_can_max * (LAI + SAI)), 0, 1)
        P_g   = P - I_can + R_can                  (rain reaching the ground)
        dw_can/dt = rho_w * (I_can - E_can - R_can)

PALADYNCanopyEvapotranspiration
    dq(T) = q_sat(T) - q_air; fluxes positive upward:
        transpiration  T_c = rho_a/rho_w * dq(T_s) / (r_a + 1/gw_can)
        canopy         E_c = rho_a/rho_w * f_can * dq(T_s) / r_a
        ground         E_g = rho_a/rho_w * beta_g * dq(T_g) / (r_a + r_e)
    with r_e = (1 - exp(-LAI - SAI)) / (C_can * windspeed) the resistance
    between ground and canopy. T_s is the skin temperature and T_g the
    ground temperature when those fields exist, the air temperature
    otherwise.

GroundEvaporation
    Bare ground: E_g = rho_a/rho_w * beta_g * dq(T_s) / r_a

DirectSurfaceRunoff
    Ponded water S (surface_excess_water of the soil) drains with timescale
    tau_r; the soil takes up to the conductivity of its top cell unless that
    cell is saturated:
        D = max(S, 0) / tau_r
        I = min(D if S > 0 else P_g, K_top) * (sat_top < 1)
        runoff = P_g + D - I
    `infiltration` (I, positive downward) is the top water flux of the soil
    (InfiltrationFlux).

SurfaceHydrology
    Auxiliary order: canopy_interception -> evapotranspiration -> surface_runoff
    Tendencies: canopy_interception
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from pylsm.constants import PhysicalConstants, saturation_vapor_pressure
from pylsm.jax_compat import safe_divide
from pylsm.soil.closures import SATURATED
from pylsm.soil.composition import SoilHydraulicProperties, SoilTexture, soil_fractions
from pylsm.world.errors import ConfigurationError
from pylsm.world.process import CompositeProcess, Process
from pylsm.world.variables import XY, auxiliary, input_, prognostic


def humidity_gradient(state, T, constants: PhysicalConstants):
    """q_sat(T) - q_air (kg/kg) for a surface at temperature T (°C)."""
    q_sat = constants.epsilon * saturation_vapor_pressure(T) / state.air_pressure
    return q_sat - state.specific_humidity


def _surface_temperatures(state):
    T_s = state["skin_temperature"] if "skin_temperature" in state else state.air_temperature
    T_g = state["ground_temperature"] if "ground_temperature" in state else T_s
    return T_s, T_g


# ---------------------------
# Ground evaporation resistance
# ---------------------------


@dataclass(frozen=True)
class ConstantEvaporationResistance:
    """Unit interval factor; zero means no evaporation."""

    factor: float = 1.0

    def __call__(self, state):
        return self.factor


@dataclass(frozen=True)
class SoilMoistureEvaporationResistance:
    """
    Lee and Pielke (1992):
        beta_g = (1 - cos(pi * theta_1 / theta_fc))^2 / 4   for theta_1 < theta_fc
        beta_g = 1                                          otherwise
    with theta_1 the liquid water content of the uppermost soil cell.
    """

    texture: SoilTexture = field(default_factory=SoilTexture)
    hydraulic_properties: SoilHydraulicProperties = field(default_factory=SoilHydraulicProperties)

    def __call__(self, state):
        if "saturation_water_ice" not in state or "porosity" not in state:
            raise ConfigurationError("SoilMoistureEvaporationResistance needs a soil model in the same namespace")
        theta = soil_fractions(state).water[..., 0]
        fc = self.hydraulic_properties.field_capacity(self.texture)
        return np.where(theta < fc, (1.0 - np.cos(np.pi * theta / fc)) ** 2 / 4.0, 1.0)


# ---------------------------
# Canopy water
# ---------------------------


@dataclass(frozen=True)
class PALADYNCanopyInterception(Process):
    alpha_int: float = 0.2  # interception factor
    k_ext: float = 0.5  # extinction coefficient
    w_can_max: float = 0.2  # kg/m^2 per unit LAI + SAI (Verseghy 1991)
    tau_w: float = 86400.0  # s, canopy water removal timescale
    stem_area_index: float = 0.0
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)

    def variables(self):
        return (
            prognostic("canopy_water", XY, units="kg/m^2", desc="liquid water held by the canopy"),
            auxiliary("canopy_water_interception", XY, units="m/s"),
            auxiliary("canopy_water_removal", XY, units="m/s"),
            auxiliary("saturation_canopy_water", XY, desc="wet fraction of the canopy"),
            auxiliary("precip_ground", XY, units="m/s", desc="rain reaching the ground"),
            auxiliary("LAI", XY),
            input_("SAI", XY, default=self.stem_area_index, desc="stem area index"),
            input_("rainfall", XY, default=0.0, units="m/s"),
        )

    def interception(self, rain, LAI, SAI):
        return self.alpha_int * rain * (1.0 - np.exp(-self.k_ext * (LAI + SAI)))

    def saturation_fraction(self, w_can, LAI, SAI):
        capacity = self.w_can_max * (LAI + SAI)
        return np.clip(safe_divide(w_can, capacity), 0.0, 1.0)

    def removal(self, w_can):
        return np.maximum(w_can, 0.0) / self.constants.rho_w / self.tau_w

    def compute_auxiliary(self, state, grid):
        I_can = self.interception(state.rainfall, state.LAI, state.SAI)
        R_can = self.removal(state.canopy_water)
        state["canopy_water_interception"] = I_can
        state["canopy_water_removal"] = R_can
        state["saturation_canopy_water"] = self.saturation_fraction(state.canopy_water, state.LAI, state.SAI)
        state["precip_ground"] = state.rainfall - I_can + R_can

    def compute_tendencies(self, state, grid):
        E_can = state["evaporation_canopy"] if "evaporation_canopy" in state else 0.0
        state.tendency("canopy_water")[...] += self.constants.rho_w * (
            state.canopy_water_interception - E_can - state.canopy_water_removal
        )


# ---------------------------
# Evapotranspiration
# ---------------------------


@dataclass(frozen=True)
class PALADYNCanopyEvapotranspiration(Process):
    C_can: float = 0.006  # ground-canopy drag coefficient
    aerodynamic_resistance: float = 50.0  # s/m
    ground_resistance: object = field(default_factory=ConstantEvaporationResistance)
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)

    def variables(self):
        return (
            auxiliary("evaporation_canopy", XY, units="m/s", desc="evaporation of intercepted water"),
            auxiliary("evaporation_ground", XY, units="m/s", desc="evaporation from the ground below the canopy"),
            auxiliary("transpiration", XY, units="m/s"),
            auxiliary("saturation_canopy_water", XY),
            auxiliary("LAI", XY),
            input_("SAI", XY, default=0.0),
            input_("windspeed", XY, default=3.0, units="m/s"),
        )

    def canopy_resistance(self, LAI, SAI, windspeed):
        """Aerodynamic resistance between ground and canopy (s/m)."""
        return (1.0 - np.exp(-LAI - SAI)) / (self.C_can * np.maximum(windspeed, 0.1))

    def transpiration(self, dq, gw_can):
        r_s = 1.0 / np.maximum(gw_can, np.sqrt(np.finfo(float).eps))
        return dq / (self.aerodynamic_resistance + r_s)

    def compute_auxiliary(self, state, grid):
        c = self.constants
        T_s, T_g = _surface_temperatures(state)
        dq_s = humidity_gradient(state, T_s, c)
        dq_g = humidity_gradient(state, T_g, c)
        r_a = self.aerodynamic_resistance
        r_e = self.canopy_resistance(state.LAI, state.SAI, state.windspeed)
        to_water = c.rho_a / c.rho_w
        gw_can = state["gw_can"] if "gw_can" in state else 0.0
        state["transpiration"] = to_water * self.transpiration(dq_s, gw_can)
        state["evaporation_canopy"] = to_water * state.saturation_canopy_water * dq_s / r_a
        state["evaporation_ground"] = to_water * self.ground_resistance(state) * dq_g / (r_a + r_e)

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class GroundEvaporation(Process):
    aerodynamic_resistance: float = 50.0  # s/m
    ground_resistance: object = field(default_factory=ConstantEvaporationResistance)
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)

    def variables(self):
        return (auxiliary("evaporation_ground", XY, units="m/s", desc="evaporation from bare ground"),)

    def compute_auxiliary(self, state, grid):
        c = self.constants
        T_s, _ = _surface_temperatures(state)
        dq = humidity_gradient(state, T_s, c)
        state["evaporation_ground"] = c.rho_a / c.rho_w * self.ground_resistance(state) * dq / self.aerodynamic_resistance

    def compute_tendencies(self, state, grid):
        return None


# ---------------------------
# Runoff and infiltration
# ---------------------------


@dataclass(frozen=True)
class DirectSurfaceRunoff(Process):
    tau_r: float = 3600.0  # s, ponded water removal timescale

    def variables(self):
        return (
            auxiliary("surface_runoff", XY, units="m/s"),
            auxiliary("surface_drainage", XY, units="m/s", desc="drainage of ponded water"),
            auxiliary("infiltration", XY, units="m/s", desc="water entering the soil (positive downward)"),
            input_("rainfall", XY, default=0.0, units="m/s"),
        )

    def fluxes(self, precip_ground, excess, K_top, sat_top):
        """Returns (drainage, infiltration, runoff)."""
        ponded = excess > 0.0
        drainage = np.where(ponded, np.maximum(excess, 0.0) / self.tau_r, 0.0)
        influx = np.where(ponded, drainage, precip_ground)
        infiltration = np.where(sat_top < SATURATED, np.minimum(influx, K_top), 0.0)
        return drainage, infiltration, precip_ground + drainage - infiltration

    def compute_auxiliary(self, state, grid):
        precip = state["precip_ground"] if "precip_ground" in state else state.rainfall
        excess = state["surface_excess_water"] if "surface_excess_water" in state else np.zeros_like(precip)
        if "hydraulic_conductivity" in state:
            K_top = state.hydraulic_conductivity[..., 0]
            sat_top = state.saturation_water_ice[..., 0]
        else:
            # No soil: everything runs off
            K_top = sat_top = np.zeros_like(precip)
        drainage, infiltration, runoff = self.fluxes(precip, excess, K_top, sat_top)
        state["surface_drainage"] = drainage
        state["infiltration"] = infiltration
        state["surface_runoff"] = runoff

    def compute_tendencies(self, state, grid):
        return None


@dataclass(frozen=True)
class SurfaceHydrology(CompositeProcess):
    canopy_interception: Optional[Process] = field(default_factory=PALADYNCanopyInterception)
    evapotranspiration: Optional[Process] = field(default_factory=PALADYNCanopyEvapotranspiration)
    surface_runoff: Process = field(default_factory=DirectSurfaceRunoff)

    components = ("canopy_interception", "evapotranspiration", "surface_runoff")
    tendency_order = ("canopy_interception",)
