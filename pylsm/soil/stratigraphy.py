"""Vertical soil structure: porosity of the column."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pylsm.world.process import Process
from pylsm.world.variables import XYZ, auxiliary

from .composition import SoilHydraulicProperties, SoilTexture


@dataclass(frozen=True)
class HomogeneousStratigraphy(Process):
    """
    One texture for the whole column. Porosity is taken from `porosity` when
    given, otherwise from the texture via the hydraulic parameters.
    """

    texture: SoilTexture = field(default_factory=SoilTexture)
    hydraulic_properties: SoilHydraulicProperties = field(default_factory=SoilHydraulicProperties)
    porosity: Optional[float] = None

    def porosity_value(self) -> float:
        if self.porosity is not None:
            return float(self.porosity)
        return self.hydraulic_properties.mineral_porosity(self.texture)

    def variables(self):
        return (auxiliary("porosity", XYZ, default=self.porosity_value(), desc="pore volume fraction"),)

    def initialize(self, state, grid):
        state["porosity"] = self.porosity_value()

    def compute_auxiliary(self, state, grid):
        """Static column: nothing to diagnose."""
        return None

    def compute_tendencies(self, state, grid):
        """Static column: no tendencies."""
        return None
