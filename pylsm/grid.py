# pylsm/grid.py

"""
Defines the vertical column grid shared by all soil and surface processes.

Conventions:
- Depth z is positive downward, in meters, with z = 0 at the land surface.
- Index 0 is the uppermost (surface) cell, index nz-1 the lowermost cell.
- Column fields have shape (n_columns, nz); lateral fields (n_columns,).
- Face-centred quantities have nz+1 entries along the vertical axis,
  face k being the upper face of cell k.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pylsm.world.errors import ConfigurationError


def _round_sig(values: np.ndarray, sig: int) -> np.ndarray:
    """Round each entry to `sig` significant digits."""
    return np.array([float(f"{v:.{sig}g}") for v in values])


@dataclass(frozen=True)
class UniformSpacing:
    """N layers of constant thickness dz (m)."""

    dz: float = 0.5
    n: int = 50

    def thicknesses(self) -> np.ndarray:
        if self.dz <= 0 or self.n < 1:
            raise ConfigurationError(f"UniformSpacing needs dz > 0 and n >= 1, got dz={self.dz}, n={self.n}")
        return np.full(self.n, float(self.dz))


@dataclass(frozen=True)
class ExponentialSpacing:
    """
    Layer thicknesses growing geometrically from dz_min at the surface to
    dz_max at the bottom (log2-spaced), rounded to `sig` significant digits.
    """

    dz_min: float = 0.1
    dz_max: float = 100.0
    n: int = 50
    sig: int = 3

    def thicknesses(self) -> np.ndarray:
        if not (0 < self.dz_min <= self.dz_max) or self.n < 1:
            raise ConfigurationError(
                f"ExponentialSpacing needs 0 < dz_min <= dz_max and n >= 1, got "
                f"dz_min={self.dz_min}, dz_max={self.dz_max}, n={self.n}"
            )
        raw = 2.0 ** np.linspace(np.log2(self.dz_min), np.log2(self.dz_max), self.n)
        return _round_sig(raw, self.sig)


@dataclass(frozen=True)
class PrescribedSpacing:
    """Explicit list of layer thicknesses, surface first."""

    dz: tuple = (0.1, 0.2, 0.4, 0.8)

    def thicknesses(self) -> np.ndarray:
        arr = np.asarray(self.dz, dtype=float)
        if arr.ndim != 1 or arr.size < 1 or np.any(arr <= 0):
            raise ConfigurationError(f"PrescribedSpacing needs positive thicknesses, got {self.dz!r}")
        return arr


class ColumnGrid:
    """
    Laterally replicated 1D vertical grid.
    """

    def __init__(self, spacing=None, n_columns: int = 1):
        if n_columns < 1:
            raise ConfigurationError(f"n_columns must be >= 1, got {n_columns}")
        self.spacing = spacing if spacing is not None else UniformSpacing()
        self.n_columns = int(n_columns)

        self.thickness = self.spacing.thicknesses()
        self.nz = int(self.thickness.size)

        # Depths of faces (nz+1) and centres (nz), positive downward
        self.z_faces = np.concatenate([[0.0], np.cumsum(self.thickness)])
        self.z_centers = 0.5 * (self.z_faces[:-1] + self.z_faces[1:])
        # Distance between neighbouring cell centres (nz-1)
        self.dz_centers = np.diff(self.z_centers)

    @property
    def column_shape(self) -> tuple[int, int]:
        return (self.n_columns, self.nz)

    @property
    def lateral_shape(self) -> tuple[int]:
        return (self.n_columns,)

    @property
    def depth(self) -> float:
        return float(self.z_faces[-1])

    def dz(self, k: int) -> float:
        """Thickness of cell k (negative indices count from the bottom)."""
        return float(self.thickness[k])

    def ddz(self, field: np.ndarray) -> np.ndarray:
        """
        Vertical derivative of a cell-centred field at the nz-1 interior faces,
        d/dz with z positive downward.
        """
        return np.diff(field, axis=-1) / self.dz_centers

    def divergence(self, face_flux: np.ndarray) -> np.ndarray:
        """
        Cell-centred divergence -(F_bottom - F_top)/dz of a downward-positive
        flux given on all nz+1 faces. Returns the tendency contribution.
        """
        return -np.diff(face_flux, axis=-1) / self.thickness

    def interior_divergence(self, interior_flux: np.ndarray) -> np.ndarray:
        """Divergence of a flux known on interior faces only; edge faces carry zero flux."""
        pad = [(0, 0)] * (interior_flux.ndim - 1) + [(1, 1)]
        return self.divergence(np.pad(interior_flux, pad))

    def face_mean(self, field: np.ndarray) -> np.ndarray:
        """Arithmetic mean of a cell-centred field on the interior faces."""
        return 0.5 * (field[..., :-1] + field[..., 1:])

    def face_min(self, field: np.ndarray) -> np.ndarray:
        return np.minimum(field[..., :-1], field[..., 1:])

    def column_integral(self, field: np.ndarray) -> np.ndarray:
        """Sum over the vertical of field * dz, per column."""
        return np.sum(field * self.thickness, axis=-1)

    def __repr__(self) -> str:
        return f"ColumnGrid(nz={self.nz}, n_columns={self.n_columns}, depth={self.depth:.3g} m)"
