"""
Diagnostics: NaN/Inf checkpoints and conserved-quantity integrals.

Purpose
- DiagnosticsContext is the explicit, driver-owned switch for numerical
  checks. It scans the whole state tree at two checkpoints per step (end of
  the auxiliary pass, end of the tendency pass). When disabled, `check`
  returns immediately.
- Side-effect-free helpers to integrate energy, water and carbon over the
  column, usable for step-wise conservation checks.

Notes
- A full pass is always completed before reporting: one bad cell does not
  interrupt the evaluation of the others. The context then logs every
  offending field and, if `raise_on_nonfinite`, raises NumericalDomainError.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import numpy as np

from .errors import NumericalDomainError

logger = logging.getLogger(__name__)


def nonfinite_fields(state) -> list[str]:
    """Dotted paths of every field in the tree holding NaN or Inf."""
    bad = []
    for path, ns in state.walk():
        for name, arr in ns.fields():
            if not np.all(np.isfinite(arr)):
                bad.append(f"{path}.{name}" if path else name)
    return bad


def column_integral(field: np.ndarray, grid) -> np.ndarray:
    """Integral over depth (per column) of a column field, sum(field * dz)."""
    return grid.column_integral(np.asarray(field))


def total_internal_energy(state) -> np.ndarray:
    """Column-integrated internal energy (J m^-2)."""
    return column_integral(state.internal_energy, state.grid)


def total_water(state) -> np.ndarray:
    """
    Column water + ice (m^3 m^-2, i.e. m of water) including surface excess
    water when present.
    """
    water = column_integral(state.saturation_water_ice * state.porosity, state.grid)
    if "surface_excess_water" in state:
        water = water + state.surface_excess_water
    return water


def total_soil_carbon(state) -> np.ndarray:
    """Column-integrated soil organic carbon (kg m^-2)."""
    return column_integral(state.density_soc, state.grid)


@dataclass
class DiagnosticsContext:
    """Explicit debug context threaded through the simulation driver."""

    enabled: bool = False
    raise_on_nonfinite: bool = True

    @classmethod
    def from_env(cls) -> DiagnosticsContext:
        try:
            enabled = int(os.getenv("LSM_DEBUG", "0")) == 1
        except ValueError:
            enabled = False
        return cls(enabled=enabled)

    def check(self, state, checkpoint: str) -> list[str]:
        if not self.enabled:
            return []
        bad = nonfinite_fields(state)
        if bad:
            logger.error(
                "[Diagnostics] non-finite values after %s at t=%.1fs (step %d): %s",
                checkpoint, state.clock.time, state.clock.iteration, ", ".join(bad),
            )
            if self.raise_on_nonfinite:
                raise NumericalDomainError(checkpoint, bad)
        return bad
