"""
SoilModel: stratigraphy, hydrology, energy and biogeochemistry sharing one
namespace.

Call order
- initialize: stratigraphy -> hydrology -> biogeochemistry -> energy
  (the energy closure needs porosity, saturation and organic fraction)
- auxiliary / tendencies: stratigraphy -> hydrology -> biogeochemistry -> energy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pylsm.world.process import CompositeProcess, Process

from .carbon import ConstantSoilCarbon
from .energy import SoilEnergy
from .hydrology import ImmobileSoilWater
from .stratigraphy import HomogeneousStratigraphy

_PHYSICS_ORDER = ("stratigraphy", "hydrology", "biogeochemistry", "energy")


@dataclass(frozen=True)
class SoilModel(CompositeProcess):
    stratigraphy: Process = field(default_factory=HomogeneousStratigraphy)
    hydrology: Process = field(default_factory=ImmobileSoilWater)
    energy: Optional[Process] = field(default_factory=SoilEnergy)
    biogeochemistry: Process = field(default_factory=ConstantSoilCarbon)

    components = ("stratigraphy", "hydrology", "energy", "biogeochemistry")
    initialize_order = _PHYSICS_ORDER
    auxiliary_order = _PHYSICS_ORDER
    tendency_order = _PHYSICS_ORDER
