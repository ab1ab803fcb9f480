"""
Soil closures.

EnergyTemperatureClosure
    internal_energy (J/m^3)  <->  temperature (°C), liquid_water_fraction
    Latent heat of the cell L = rho_w * L_sl * porosity * saturation; heat
    capacity from the soil composition, fully frozen below the plateau and
    fully thawed above it.

PressureSaturationClosure
    saturation_water_ice  <->  pressure_head (total head, m)
    pressure_head = psi_m(theta) - z + max(0, z - water_table)
    with z the cell-centre depth (positive downward). The inverse first
    redistributes over- and under-saturation along the column, then
    diagnoses the water table.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from pylsm.constants import PhysicalConstants
from pylsm.world.closures import (
    Closure,
    energy_from_temperature,
    liquid_fraction_from_temperature,
    temperature_from_energy,
)
from pylsm.world.variables import XYZ, auxiliary

from .composition import SoilThermalProperties, soil_fractions
from .swrc import VanGenuchten

SATURATED = 1.0 - 1e-9


@dataclass(frozen=True)
class EnergyTemperatureClosure(Closure):
    thermal: SoilThermalProperties = field(default_factory=SoilThermalProperties)
    constants: PhysicalConstants = field(default_factory=PhysicalConstants)

    def variables(self):
        return (
            auxiliary("temperature", XYZ, units="°C", desc="soil temperature"),
            auxiliary("liquid_water_fraction", XYZ, default=1.0, desc="unfrozen fraction of pore water"),
        )

    def latent_heat(self, state):
        sat = np.clip(state.saturation_water_ice, 0.0, 1.0)
        return self.constants.volumetric_latent_heat_fusion * state.porosity * sat

    def heat_capacity(self, state, liquid):
        return self.thermal.heat_capacity(soil_fractions(state, liquid=liquid))

    def forward(self, state, grid):
        T = state.temperature
        liq = liquid_fraction_from_temperature(T)
        U = energy_from_temperature(T, liq, self.latent_heat(state), self.heat_capacity(state, liq))
        state["internal_energy"] = U
        state["liquid_water_fraction"] = liq

    def inverse(self, state, grid):
        T, liq = temperature_from_energy(
            state.internal_energy,
            self.latent_heat(state),
            self.heat_capacity(state, 0.0),
            self.heat_capacity(state, 1.0),
        )
        state["temperature"] = T
        state["liquid_water_fraction"] = liq


# ---------------------------
# Water
# ---------------------------


def adjust_saturation_profile(saturation, porosity, dz):
    """
    Move water out of over-saturated cells into the cell above (bottom to
    top), then fill negative saturation from the cell below (top to bottom).
    Water pushed out of the top cell is returned as surface excess (m).
    Transfers conserve pore water volume, porosity * saturation * dz; only
    the final clamp of the bottom cell to zero can add water.

    Returns (saturation, surface_excess) as new arrays.
    """
    sat = np.array(saturation, dtype=float, copy=True)
    vol = np.broadcast_to(porosity * dz, sat.shape)
    nz = sat.shape[-1]

    for k in range(nz - 1, 0, -1):
        over = np.maximum(sat[..., k] - 1.0, 0.0)
        sat[..., k] -= over
        sat[..., k - 1] += over * vol[..., k] / vol[..., k - 1]
    over = np.maximum(sat[..., 0] - 1.0, 0.0)
    sat[..., 0] -= over
    surface_excess = over * vol[..., 0]

    for k in range(nz - 1):
        deficit = np.maximum(-sat[..., k], 0.0)
        sat[..., k] += deficit
        sat[..., k + 1] -= deficit * vol[..., k] / vol[..., k + 1]
    sat[..., -1] = np.maximum(sat[..., -1], 0.0)
    return sat, surface_excess


def water_table_depth(saturation, z_faces):
    """
    Depth (m) of the upper face of the saturated zone connected to the column
    bottom; the bottom face when the lowest cell is unsaturated, 0 when the
    whole column is saturated.
    """
    nz = saturation.shape[-1]
    unsat_from_bottom = saturation[..., ::-1] < SATURATED
    n_saturated = np.where(
        np.any(unsat_from_bottom, axis=-1),
        np.argmax(unsat_from_bottom, axis=-1),
        nz,
    )
    return np.asarray(z_faces)[nz - n_saturated]


@dataclass(frozen=True)
class PressureSaturationClosure(Closure):
    swrc: VanGenuchten = field(default_factory=VanGenuchten)

    def variables(self):
        return (auxiliary("pressure_head", XYZ, units="m", desc="total hydraulic head"),)

    def total_head(self, saturation, porosity, z, water_table):
        matric = self.swrc.psi(porosity * saturation, porosity)
        hydrostatic = np.maximum(0.0, z - water_table[..., None])
        return matric - z + hydrostatic

    def forward(self, state, grid):
        # Cells with positive matric potential are saturated, so the
        # hydrostatic term never changes the result
        por = state.porosity
        matric = state.pressure_head + grid.z_centers
        state["saturation_water_ice"] = self.swrc.theta(matric, por) / por

    def inverse(self, state, grid):
        sat, excess = adjust_saturation_profile(state.saturation_water_ice, state.porosity, grid.thickness)
        state["saturation_water_ice"] = sat
        if "surface_excess_water" in state:
            state.surface_excess_water[...] += excess
        wt = water_table_depth(sat, grid.z_faces)
        if "water_table" in state:
            state["water_table"] = wt
        state["pressure_head"] = self.total_head(sat, state.porosity, grid.z_centers, wt)

    def derivative(self, saturation, porosity):
        """d(psi)/d(saturation); the reciprocal of `saturation_derivative`."""
        return self.swrc.dpsi_dtheta(porosity * saturation, porosity) * porosity

    def saturation_derivative(self, psi, porosity):
        """d(saturation)/d(psi) at matric potential psi."""
        return self.swrc.dtheta_dpsi(psi, porosity) / porosity
