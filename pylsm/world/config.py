"""
Simulation configuration (env-driven, construction time only).
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class SimConfig:
    """Driver-level settings; process parameters live on the process dataclasses."""

    n_columns: int = 1
    nz: int = 50
    dt_seconds: float = 300.0
    integrator: str = "euler"
    debug: bool = False

    @classmethod
    def from_env(cls) -> SimConfig:
        def _ibool(name: str, default: str = "0") -> bool:
            try:
                return int(os.getenv(name, default)) == 1
            except ValueError:
                return default == "1"

        def _int(name: str, default: str) -> int:
            try:
                return int(os.getenv(name, default))
            except ValueError:
                return int(default)

        def _float(name: str, default: str) -> float:
            try:
                return float(os.getenv(name, default))
            except ValueError:
                return float(default)

        return cls(
            n_columns=_int("LSM_N_COLUMNS", "1"),
            nz=_int("LSM_NZ", "50"),
            dt_seconds=_float("LSM_DT_SECONDS", "300"),
            integrator=os.getenv("LSM_INTEGRATOR", "euler").strip().lower(),
            debug=_ibool("LSM_DEBUG", "0"),
        )

    def make_grid(self, spacing=None):
        """Column grid with `nz` exponentially spaced layers unless `spacing` is given."""
        from pylsm.grid import ColumnGrid, ExponentialSpacing

        return ColumnGrid(spacing if spacing is not None else ExponentialSpacing(n=self.nz), n_columns=self.n_columns)
