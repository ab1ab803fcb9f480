"""Surface processes: prescribed atmosphere, surface energy balance and surface hydrology."""

from .atmosphere import PrescribedAtmosphere
from .energy_balance import (
    ConstantAlbedo,
    DiagnosedRadiativeFluxes,
    DiagnosedTurbulentFluxes,
    ImplicitSkinTemperature,
    PrescribedSkinTemperature,
    SurfaceEnergyBalance,
    surface_energy_balance_from_env,
)
from .hydrology import (
    ConstantEvaporationResistance,
    DirectSurfaceRunoff,
    GroundEvaporation,
    PALADYNCanopyEvapotranspiration,
    PALADYNCanopyInterception,
    SoilMoistureEvaporationResistance,
    SurfaceHydrology,
    humidity_gradient,
)

__all__ = [
    "ConstantAlbedo",
    "ConstantEvaporationResistance",
    "DiagnosedRadiativeFluxes",
    "DiagnosedTurbulentFluxes",
    "DirectSurfaceRunoff",
    "GroundEvaporation",
    "ImplicitSkinTemperature",
    "PALADYNCanopyEvapotranspiration",
    "PALADYNCanopyInterception",
    "PrescribedAtmosphere",
    "PrescribedSkinTemperature",
    "SoilMoistureEvaporationResistance",
    "SurfaceEnergyBalance",
    "SurfaceHydrology",
    "humidity_gradient",
    "surface_energy_balance_from_env",
]
