"""
Coupled land model: prescribed atmosphere, surface energy balance,
vegetation, surface hydrology and the soil column in one namespace.

Coupling
- The soil's top heat boundary is the ground heat flux of the surface energy
  balance; the SEB reads the soil's uppermost temperature (ground_temperature).
- Plant available water of the soil column limits canopy conductance and
  photosynthesis through the soil moisture limiting factor.
- Surface hydrology partitions rain into canopy interception, runoff and
  infiltration; with Richards soil hydrology (richards_soil) the infiltration
  is the soil's top water flux.
- Vegetation litterfall feeds the soil carbon litter input when the soil
  carries a carbon pool with a `litter` field.

Auxiliary order:
    atmosphere -> soil -> surface_energy_balance -> vegetation -> surface_hydrology
then the litter hand-over. Tendency order: vegetation -> surface_hydrology -> soil.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from pylsm.soil import RichardsSoilHydrology, SoilEnergy, SoilModel
from pylsm.surface import DirectSurfaceRunoff, PrescribedAtmosphere, SurfaceEnergyBalance, SurfaceHydrology
from pylsm.vegetation import FieldCapacityLimitedPAW, VegetationModel
from pylsm.world.boundary import GroundHeatFlux, InfiltrationFlux
from pylsm.world.process import CompositeProcess

_COUPLING_ORDER = ("atmosphere", "soil", "surface_energy_balance", "vegetation", "surface_hydrology")


def _coupled_soil() -> SoilModel:
    return SoilModel(energy=SoilEnergy(top=GroundHeatFlux()))


def _coupled_vegetation() -> VegetationModel:
    return VegetationModel(plant_available_water=FieldCapacityLimitedPAW())


def richards_soil(runoff_timescale: float = DirectSurfaceRunoff.tau_r, **hydrology) -> SoilModel:
    """Soil with Richards water flow fed by surface infiltration and heat from the SEB."""
    return SoilModel(
        hydrology=RichardsSoilHydrology(top=InfiltrationFlux(), runoff_timescale=runoff_timescale, **hydrology),
        energy=SoilEnergy(top=GroundHeatFlux()),
    )


@dataclass(frozen=True)
class LandModel(CompositeProcess):
    atmosphere: PrescribedAtmosphere = field(default_factory=PrescribedAtmosphere)
    surface_energy_balance: Optional[SurfaceEnergyBalance] = field(default_factory=SurfaceEnergyBalance)
    vegetation: Optional[VegetationModel] = field(default_factory=_coupled_vegetation)
    surface_hydrology: Optional[SurfaceHydrology] = field(default_factory=SurfaceHydrology)
    soil: SoilModel = field(default_factory=_coupled_soil)

    components = ("atmosphere", "surface_energy_balance", "vegetation", "surface_hydrology", "soil")
    initialize_order = _COUPLING_ORDER
    auxiliary_order = _COUPLING_ORDER
    tendency_order = ("vegetation", "surface_hydrology", "soil")

    def __post_init__(self):
        # Plant available water is evaluated for the texture of the soil column
        paw = self.vegetation.plant_available_water if self.vegetation is not None else None
        strat = self.soil.stratigraphy
        if paw is None or not hasattr(strat, "texture"):
            return
        if (paw.texture, paw.hydraulic_properties) != (strat.texture, strat.hydraulic_properties):
            paw = replace(paw, texture=strat.texture, hydraulic_properties=strat.hydraulic_properties)
            object.__setattr__(self, "vegetation", replace(self.vegetation, plant_available_water=paw))

    def compute_auxiliary(self, state, grid):
        super().compute_auxiliary(state, grid)
        if "litter" in state and "litterfall" in state:
            state["litter"] = state.litterfall
