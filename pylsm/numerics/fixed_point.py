"""
Iterative solvers for implicit per-cell updates.

Used for stiff diagnostic quantities (skin temperature) whose defining
equation x = g(x), or f(x) = 0, has no closed form. Both solvers treat every
cell independently (element-wise), so one call handles a whole field.

Iteration stops when the largest step-to-step change over all cells falls
below `tol` or after `max_iter` sweeps. Non-convergence is not an error:
the caller receives the last iterate together with the convergence flag
and decides how to report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np


@dataclass
class FixedPointResult:
    value: np.ndarray
    iterations: int
    converged: bool
    residual: float


def fixed_point(
    g: Callable[[np.ndarray], np.ndarray],
    x0: np.ndarray,
    tol: float = 1e-6,
    max_iter: int = 50,
    relaxation: float = 1.0,
) -> FixedPointResult:
    """
    Solve x = g(x) by (relaxed) Picard iteration, x <- x + w * (g(x) - x).
    """
    x = np.array(x0, dtype=float, copy=True)
    residual = np.inf
    for it in range(1, max_iter + 1):
        x_new = x + relaxation * (g(x) - x)
        residual = float(np.max(np.abs(x_new - x))) if x_new.size else 0.0
        x = x_new
        if not np.isfinite(residual):
            return FixedPointResult(x, it, False, residual)
        if residual < tol:
            return FixedPointResult(x, it, True, residual)
    return FixedPointResult(x, max_iter, False, residual)


def newton(
    f: Callable[[np.ndarray], np.ndarray],
    x0: np.ndarray,
    tol: float = 1e-6,
    max_iter: int = 50,
    step: float = 1e-4,
) -> FixedPointResult:
    """
    Solve f(x) = 0 cell by cell with Newton corrections; the derivative is a
    forward difference with increment `step`. Cells whose derivative vanishes
    are left unchanged.
    """
    x = np.array(x0, dtype=float, copy=True)
    residual = np.inf
    for it in range(1, max_iter + 1):
        fx = f(x)
        dfdx = (f(x + step) - fx) / step
        dx = -np.divide(fx, dfdx, out=np.zeros_like(x), where=dfdx != 0)
        x = x + dx
        residual = float(np.max(np.abs(dx))) if dx.size else 0.0
        if not np.isfinite(residual):
            return FixedPointResult(x, it, False, residual)
        if residual < tol:
            return FixedPointResult(x, it, True, residual)
    return FixedPointResult(x, max_iter, False, residual)
