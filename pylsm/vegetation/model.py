"""
VegetationModel: single-PFT PALADYN vegetation.

Auxiliary order (each step reads what the previous one wrote):
    carbon_dynamics -> phenology -> root_distribution -> plant_available_water
    -> stomatal_conductance -> photosynthesis -> autotrophic_respiration
    -> vegetation_dynamics
Tendency order:
    carbon_dynamics -> vegetation_dynamics

plant_available_water reads the soil water of the namespace and is off by
default; LandModel switches it on.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from pylsm.world.process import CompositeProcess

from .autotrophic_respiration import AutotrophicRespiration
from .carbon_dynamics import CarbonDynamics
from .phenology import Phenology
from .photosynthesis import LUEPhotosynthesis
from .plant_available_water import FieldCapacityLimitedPAW
from .root_distribution import PALADYNRootDistribution
from .stomatal_conductance import MedlynStomatalConductance
from .vegetation_dynamics import VegetationDynamics


@dataclass(frozen=True)
class VegetationModel(CompositeProcess):
    carbon_dynamics: CarbonDynamics = field(default_factory=CarbonDynamics)
    phenology: Phenology = field(default_factory=Phenology)
    root_distribution: Optional[PALADYNRootDistribution] = field(default_factory=PALADYNRootDistribution)
    plant_available_water: Optional[FieldCapacityLimitedPAW] = None
    stomatal_conductance: MedlynStomatalConductance = field(default_factory=MedlynStomatalConductance)
    photosynthesis: LUEPhotosynthesis = field(default_factory=LUEPhotosynthesis)
    autotrophic_respiration: AutotrophicRespiration = field(default_factory=AutotrophicRespiration)
    vegetation_dynamics: VegetationDynamics = field(default_factory=VegetationDynamics)

    components = (
        "carbon_dynamics",
        "phenology",
        "root_distribution",
        "plant_available_water",
        "stomatal_conductance",
        "photosynthesis",
        "autotrophic_respiration",
        "vegetation_dynamics",
    )
    auxiliary_order = components
    tendency_order = ("carbon_dynamics", "vegetation_dynamics")

    def __post_init__(self):
        # Respiration needs the allometry of the carbon pool it respires from
        if self.autotrophic_respiration.carbon != self.carbon_dynamics:
            object.__setattr__(
                self, "autotrophic_respiration",
                replace(self.autotrophic_respiration, carbon=self.carbon_dynamics),
            )
