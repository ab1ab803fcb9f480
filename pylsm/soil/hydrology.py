"""
Soil hydrology.

ImmobileSoilWater
    Saturation fixed at a constant; only conductivity and water table are
    diagnosed.

RichardsSoilHydrology
    Mixed-form Richards equation in terms of saturation of the pore space:

        d(sat)/dt = -(1/porosity) dq/dz,   q = -K_face dH/dz   (downward positive)

    with H the total head of PressureSaturationClosure and K_face the smaller
    conductivity of the two neighbouring cells. Top and bottom boundary
    conditions add edge fluxes in m/s. Water expelled from the top cell by
    the closure collects in `surface_excess_water` and optionally runs off
    with timescale `runoff_timescale`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pylsm.world.boundary import BOTTOM, TOP, BoundaryCondition, NoFlux, _add_edge_flux, edge_index
from pylsm.world.errors import ConfigurationError
from pylsm.world.process import Process
from pylsm.world.variables import XY, XYZ, auxiliary, prognostic

from .closures import PressureSaturationClosure, water_table_depth
from .composition import SoilHydraulicProperties, soil_fractions
from .swrc import VanGenuchten


def _hydraulic_conductivity(props: SoilHydraulicProperties, state):
    liquid = state["liquid_water_fraction"] if "liquid_water_fraction" in state else 1.0
    return props.hydraulic_conductivity(soil_fractions(state), liquid)


@dataclass(frozen=True)
class FreeDrainage(BoundaryCondition):
    """Gravity drainage out of the bottom cell at its hydraulic conductivity."""

    def apply(self, state, grid, process, prognostic, side):
        if side != BOTTOM:
            raise ConfigurationError("FreeDrainage can only be used at the bottom boundary")
        _add_edge_flux(state, grid, process, prognostic, side, -state.hydraulic_conductivity[..., -1])


@dataclass(frozen=True)
class ImmobileSoilWater(Process):
    saturation: float = 1.0
    hydraulic_properties: SoilHydraulicProperties = field(default_factory=SoilHydraulicProperties)

    def variables(self):
        return (
            auxiliary("saturation_water_ice", XYZ, default=self.saturation, desc="water+ice fraction of pores"),
            auxiliary("hydraulic_conductivity", XYZ, units="m/s"),
            auxiliary("water_table", XY, units="m", desc="depth of the water table"),
        )

    def initialize(self, state, grid):
        state["saturation_water_ice"] = self.saturation
        self.compute_auxiliary(state, grid)

    def compute_auxiliary(self, state, grid):
        state["hydraulic_conductivity"] = _hydraulic_conductivity(self.hydraulic_properties, state)
        state["water_table"] = water_table_depth(state.saturation_water_ice, grid.z_faces)

    def compute_tendencies(self, state, grid):
        """Water does not move."""
        return None


@dataclass(frozen=True)
class RichardsSoilHydrology(Process):
    swrc: VanGenuchten = field(default_factory=VanGenuchten)
    hydraulic_properties: SoilHydraulicProperties = field(default_factory=SoilHydraulicProperties)
    top: BoundaryCondition = field(default_factory=NoFlux)
    bottom: BoundaryCondition = field(default_factory=NoFlux)
    runoff_timescale: Optional[float] = None  # s
    initialize_from: str = "saturation"  # or "pressure_head"

    @property
    def closure(self) -> PressureSaturationClosure:
        return PressureSaturationClosure(self.swrc)

    def variables(self):
        return (
            prognostic("saturation_water_ice", XYZ, closure=self.closure, default=1.0,
                       desc="water+ice fraction of pores"),
            prognostic("surface_excess_water", XY, units="m", desc="ponded water above the column"),
            auxiliary("hydraulic_conductivity", XYZ, units="m/s"),
            auxiliary("water_table", XY, units="m", desc="depth of the water table"),
        ) + self.top.variables() + self.bottom.variables()

    def initialize(self, state, grid):
        if self.initialize_from == "pressure_head":
            self.closure.forward(state, grid)
        elif self.initialize_from != "saturation":
            raise ConfigurationError(f"Unknown initialize_from: {self.initialize_from!r}")
        self.closure.inverse(state, grid)
        self.compute_auxiliary(state, grid)

    def compute_auxiliary(self, state, grid):
        state["hydraulic_conductivity"] = _hydraulic_conductivity(self.hydraulic_properties, state)

    def darcy_flux(self, state, grid):
        """Downward-positive water flux (m/s) at the interior faces."""
        return -grid.face_min(state.hydraulic_conductivity) * grid.ddz(state.pressure_head)

    def compute_tendencies(self, state, grid):
        state.tendency("saturation_water_ice")[...] += (
            grid.interior_divergence(self.darcy_flux(state, grid)) / state.porosity
        )
        self.top.apply(state, grid, self, "saturation_water_ice", TOP)
        self.bottom.apply(state, grid, self, "saturation_water_ice", BOTTOM)
        if self.runoff_timescale is not None:
            state.tendency("surface_excess_water")[...] -= state.surface_excess_water / self.runoff_timescale

    # ---- boundary hooks ----

    def edge_storage(self, state, side):
        return state.porosity[..., edge_index(side)]

    def edge_flux(self, state, grid, side, value):
        """Inward flux for a prescribed total head `value` at the boundary face."""
        k = edge_index(side)
        K = state.hydraulic_conductivity[..., k]
        return K * (value - state.pressure_head[..., k]) / (0.5 * grid.dz(k))
