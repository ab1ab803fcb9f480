"""
Plant available water and the soil moisture limiting factor (PALADYN).

Per soil cell the available fraction of liquid water is

    W = clip((theta_w - theta_wp) / (theta_fc - theta_wp), 0, 1)

with theta_w the volumetric liquid water content, theta_fc the field
capacity and theta_wp the wilting point of the soil texture. The soil
moisture limiting factor is the root-weighted column sum

    beta = sum_k W_k * root_fraction_k

and scales canopy conductance and photosynthesis.

The soil fields (porosity, saturation_water_ice, liquid_water_fraction)
are read from the shared namespace; they are declared by the soil model.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from pylsm.soil.composition import SoilHydraulicProperties, SoilTexture, soil_fractions
from pylsm.world.errors import ConfigurationError
from pylsm.world.process import Process
from pylsm.world.variables import XY, XYZ, auxiliary


@dataclass(frozen=True)
class FieldCapacityLimitedPAW(Process):
    texture: SoilTexture = field(default_factory=SoilTexture)
    hydraulic_properties: SoilHydraulicProperties = field(default_factory=SoilHydraulicProperties)

    def variables(self):
        return (
            auxiliary("plant_available_water", XYZ, desc="fraction of soil water available for root uptake"),
            auxiliary("soil_moisture_limiting_factor", XY, default=1.0, desc="root-weighted plant available water"),
            auxiliary("root_fraction", XYZ, desc="fraction of roots in each soil cell"),
        )

    def plant_available_water(self, theta_w):
        fc = self.hydraulic_properties.field_capacity(self.texture)
        wp = self.hydraulic_properties.wilting_point(self.texture)
        return np.clip((theta_w - wp) / (fc - wp), 0.0, 1.0)

    def compute_auxiliary(self, state, grid):
        if "saturation_water_ice" not in state or "porosity" not in state:
            raise ConfigurationError("FieldCapacityLimitedPAW needs a soil model in the same namespace")
        paw = self.plant_available_water(soil_fractions(state).water)
        state["plant_available_water"] = paw
        state["soil_moisture_limiting_factor"] = np.sum(paw * state.root_fraction, axis=-1)

    def compute_tendencies(self, state, grid):
        return None


def soil_moisture_limiting_factor(state, default: float = 1.0):
    """The factor diagnosed by a PAW scheme in `state`, else `default`."""
    return state["soil_moisture_limiting_factor"] if "soil_moisture_limiting_factor" in state else default
