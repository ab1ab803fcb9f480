"""Single-PFT vegetation after PALADYN (Willeit and Ganopolski 2016)."""

from .autotrophic_respiration import AutotrophicRespiration
from .carbon_dynamics import CarbonDynamics
from .model import VegetationModel
from .phenology import Phenology
from .photosynthesis import LUEPhotosynthesis
from .plant_available_water import FieldCapacityLimitedPAW, soil_moisture_limiting_factor
from .root_distribution import PALADYNRootDistribution
from .stomatal_conductance import MedlynStomatalConductance
from .vegetation_dynamics import VegetationDynamics

__all__ = [
    "AutotrophicRespiration",
    "CarbonDynamics",
    "FieldCapacityLimitedPAW",
    "LUEPhotosynthesis",
    "MedlynStomatalConductance",
    "PALADYNRootDistribution",
    "Phenology",
    "VegetationDynamics",
    "VegetationModel",
    "soil_moisture_limiting_factor",
]
