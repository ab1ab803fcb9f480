"""
Soil composition and material properties.

A soil cell is decomposed into volumetric fractions of water, ice, air and a
solid matrix of mineral and organic material:

    water_ice = porosity * saturation
    water     = water_ice * liquid
    ice       = water_ice * (1 - liquid)
    air       = porosity * (1 - saturation)
    organic   = (1 - porosity) * organic_fraction
    mineral   = (1 - porosity) * (1 - organic_fraction)

Thermal properties (Hillel 1982 constants):
- heat capacity: volume-weighted sum of constituent heat capacities
- conductivity: inverse quadratic mixing, k = (sum_i theta_i sqrt(k_i))^2
  (Cosenza et al. 2003)

Hydraulic properties: SURFEX porosity / field capacity / wilting point
(Masson et al. 2013) and unsaturated conductivity either linear in the
liquid fraction of the pore space or van Genuchten-Mualem with ice
impedance (Westermann et al. 2023).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from pylsm.jax_compat import safe_divide, xp
from pylsm.world.errors import ConfigurationError

from .swrc import VanGenuchten


@dataclass(frozen=True)
class SoilTexture:
    """Mineral texture fractions (sum to one)."""

    sand: float = 0.5
    silt: float = 0.3
    clay: float = 0.2

    def __post_init__(self):
        total = self.sand + self.silt + self.clay
        if not np.isclose(total, 1.0):
            raise ConfigurationError(f"soil texture fractions must sum to 1, got {total:.3f}")


class VolumetricFractions(NamedTuple):
    water: np.ndarray
    ice: np.ndarray
    air: np.ndarray
    mineral: np.ndarray
    organic: np.ndarray


def volumetric_fractions(porosity, saturation, liquid, organic_fraction=0.0) -> VolumetricFractions:
    water_ice = porosity * saturation
    solid = 1.0 - porosity
    return VolumetricFractions(
        water=water_ice * liquid,
        ice=water_ice * (1.0 - liquid),
        air=porosity * (1.0 - saturation),
        mineral=solid * (1.0 - organic_fraction),
        organic=solid * organic_fraction,
    )


def soil_fractions(state, liquid=None) -> VolumetricFractions:
    """
    Volumetric fractions of the soil cells in `state`; `liquid` overrides the
    current `liquid_water_fraction` (e.g. to evaluate fully frozen soil).
    """
    if liquid is None:
        liquid = state["liquid_water_fraction"] if "liquid_water_fraction" in state else 1.0
    organic = state["organic_fraction"] if "organic_fraction" in state else 0.0
    return volumetric_fractions(state.porosity, xp.clip(state.saturation_water_ice, 0.0, 1.0), liquid, organic)


# ---------------------------
# Thermal properties
# ---------------------------


@dataclass(frozen=True)
class HeatCapacities:
    """Volumetric heat capacities (J m^-3 K^-1)."""

    water: float = 4.2e6
    ice: float = 1.9e6
    air: float = 1.25e3
    mineral: float = 2.0e6
    organic: float = 2.5e6


@dataclass(frozen=True)
class ThermalConductivities:
    """Thermal conductivities (W m^-1 K^-1), Hillel (1982)."""

    water: float = 0.57
    ice: float = 2.2
    air: float = 0.025
    mineral: float = 3.8
    organic: float = 0.25


@dataclass(frozen=True)
class SoilThermalProperties:
    heat_capacities: HeatCapacities = field(default_factory=HeatCapacities)
    conductivities: ThermalConductivities = field(default_factory=ThermalConductivities)

    def heat_capacity(self, fracs: VolumetricFractions):
        c = self.heat_capacities
        return (
            fracs.water * c.water + fracs.ice * c.ice + fracs.air * c.air
            + fracs.mineral * c.mineral + fracs.organic * c.organic
        )

    def thermal_conductivity(self, fracs: VolumetricFractions):
        k = self.conductivities
        s = (
            fracs.water * xp.sqrt(k.water) + fracs.ice * xp.sqrt(k.ice) + fracs.air * xp.sqrt(k.air)
            + fracs.mineral * xp.sqrt(k.mineral) + fracs.organic * xp.sqrt(k.organic)
        )
        return s * s


# ---------------------------
# Hydraulic properties
# ---------------------------


@dataclass(frozen=True)
class SoilHydraulicProperties:
    """
    SURFEX-style hydraulic parameters. `unsat` selects the unsaturated
    conductivity formulation: "linear" or "van_genuchten".
    """

    cond_sat: float = 1e-5  # m/s
    porosity: float = 0.49  # base porosity of sand-free soil
    porosity_sand_coef: float = -1.1e-3
    wilting_point_coef: float = 37.13e-3
    field_capacity_coef: float = 89.0e-3
    field_capacity_exp: float = 0.35
    unsat: str = "linear"
    impedance: float = 7.0  # ice impedance exponent
    swrc: VanGenuchten = field(default_factory=VanGenuchten)

    def mineral_porosity(self, texture: SoilTexture) -> float:
        return self.porosity + self.porosity_sand_coef * texture.sand * 100.0

    def wilting_point(self, texture: SoilTexture) -> float:
        return self.wilting_point_coef * xp.sqrt(texture.clay * 100.0)

    def field_capacity(self, texture: SoilTexture) -> float:
        return self.field_capacity_coef * (texture.clay * 100.0) ** self.field_capacity_exp

    def hydraulic_conductivity(self, fracs: VolumetricFractions, liquid=1.0):
        theta_sat = fracs.water + fracs.ice + fracs.air
        rel = xp.clip(safe_divide(fracs.water, theta_sat), 0.0, 1.0)
        if self.unsat == "linear":
            return self.cond_sat * rel
        if self.unsat == "van_genuchten":
            n = self.swrc.n
            ice_impedance = 10.0 ** (-self.impedance * (1.0 - liquid))
            mualem = (1.0 - (1.0 - rel ** (n / (n - 1.0))) ** ((n - 1.0) / n)) ** 2
            return self.cond_sat * ice_impedance * xp.sqrt(rel) * mualem
        raise ConfigurationError(f"unknown unsaturated conductivity scheme {self.unsat!r}")
