"""
Static root profile after Zeng (2001) as used by PALADYN.

Cumulative fraction of roots above depth z (m):

    Y(z) = 1 - (exp(-d1 z) + exp(-d2 z)) / 2

The fraction in a cell is Y(z_bottom) - Y(z_top), renormalized over the
column so that the fractions of every column sum to one.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.world.process import Process
from pylsm.world.variables import XYZ, auxiliary


@dataclass(frozen=True)
class PALADYNRootDistribution(Process):
    d1: float = 7.0  # 1/m, needleleaf tree
    d2: float = 2.0  # 1/m

    def variables(self):
        return (auxiliary("root_fraction", XYZ, desc="fraction of roots in each soil cell"),)

    def cumulative_fraction(self, z):
        return 1.0 - 0.5 * (np.exp(-self.d1 * z) + np.exp(-self.d2 * z))

    def root_fraction(self, grid):
        per_cell = np.diff(self.cumulative_fraction(grid.z_faces))
        return per_cell / per_cell.sum()

    def initialize(self, state, grid):
        self.compute_auxiliary(state, grid)

    def compute_auxiliary(self, state, grid):
        state["root_fraction"] = self.root_fraction(grid)

    def compute_tendencies(self, state, grid):
        """Static profile."""
        return None
