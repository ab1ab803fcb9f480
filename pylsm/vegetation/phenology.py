"""Evergreen phenology: full leaf-out, LAI equals the balanced LAI."""

from __future__ import annotations

from dataclasses import dataclass

from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary


@dataclass(frozen=True)
class Phenology(Process):
    f_deciduous: float = 0.0  # 0 evergreen, 1 deciduous

    def variables(self):
        return (
            auxiliary("phen", XY, desc="phenology factor"),
            auxiliary("LAI", XY, desc="leaf area index"),
            auxiliary("LAI_b", XY, desc="balanced leaf area index"),
        )

    def compute_auxiliary(self, state, grid):
        phen = 1.0
        state["phen"] = phen
        state["LAI"] = (self.f_deciduous * phen + (1.0 - self.f_deciduous)) * state.LAI_b

    def compute_tendencies(self, state, grid):
        return None
