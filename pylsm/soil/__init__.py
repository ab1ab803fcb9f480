"""Soil column physics: composition, retention curves, closures and processes."""

from .carbon import ConstantSoilCarbon, OnePoolSoilCarbon
from .closures import EnergyTemperatureClosure, PressureSaturationClosure, adjust_saturation_profile, water_table_depth
from .composition import (
    HeatCapacities,
    SoilHydraulicProperties,
    SoilTexture,
    SoilThermalProperties,
    ThermalConductivities,
    VolumetricFractions,
    soil_fractions,
    volumetric_fractions,
)
from .energy import SoilEnergy
from .hydrology import FreeDrainage, ImmobileSoilWater, RichardsSoilHydrology
from .model import SoilModel
from .stratigraphy import HomogeneousStratigraphy
from .swrc import BrooksCorey, VanGenuchten

__all__ = [
    "BrooksCorey",
    "ConstantSoilCarbon",
    "EnergyTemperatureClosure",
    "FreeDrainage",
    "HeatCapacities",
    "HomogeneousStratigraphy",
    "ImmobileSoilWater",
    "OnePoolSoilCarbon",
    "PressureSaturationClosure",
    "RichardsSoilHydrology",
    "SoilEnergy",
    "SoilHydraulicProperties",
    "SoilModel",
    "SoilTexture",
    "SoilThermalProperties",
    "ThermalConductivities",
    "VanGenuchten",
    "VolumetricFractions",
    "adjust_saturation_profile",
    "soil_fractions",
    "volumetric_fractions",
    "water_table_depth",
]
