"""
Closure relations between prognostic (conserved) and diagnostic quantities.

A Closure object is attached to a prognostic declaration and is evaluated
per cell, with no dependence on neighbouring cells:
- forward(state, grid): diagnostic -> prognostic (used at initialization)
- inverse(state, grid): prognostic -> diagnostic (used after every update)

The pure kernels below implement the freeze/thaw energy-temperature
relation. They branch on values only (xp.where) and return finite numbers
for any finite input, so they can be traced by reverse-mode AD.

Energy-temperature rule, with L the volumetric latent heat of the cell's
water and ice content and C the volumetric heat capacity:
    U <  0      : T = U / C        , liquid fraction 0   (frozen)
    0 <= U < L  : T = 0            , liquid fraction U/L (phase change)
    U >= L      : T = (U - L) / C  , liquid fraction 1   (thawed)
"""

from __future__ import annotations

from pylsm.jax_compat import safe_divide, xp


class Closure:
    """Base class; subclasses declare their diagnostic companions."""

    def variables(self) -> tuple:
        return ()

    def forward(self, state, grid) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement forward()")

    def inverse(self, state, grid) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement inverse()")


def liquid_fraction_from_temperature(T):
    """Liquid fraction implied by temperature alone: 1 above 0 °C, else 0."""
    return xp.where(T > 0.0, 1.0, 0.0)


def liquid_fraction_from_energy(U, L):
    """Unfrozen fraction for internal energy U (J/m^3) and latent heat L (J/m^3)."""
    plateau = safe_divide(U, L, fill=0.0)
    return xp.where(U < 0.0, 0.0, xp.where(U >= L, 1.0, plateau))


def temperature_from_energy(U, L, C_frozen, C_thawed=None):
    """
    Three-regime inverse closure. Returns (temperature, liquid_fraction).

    `C_frozen` is used in the frozen branch and `C_thawed` (defaults to
    `C_frozen`) in the thawed branch; the plateau does not need C.
    """
    if C_thawed is None:
        C_thawed = C_frozen
    liq = liquid_fraction_from_energy(U, L)
    T_frozen = safe_divide(U, C_frozen)
    T_thawed = safe_divide(U - L, C_thawed)
    T = xp.where(U < 0.0, T_frozen, xp.where(U >= L, T_thawed, 0.0))
    return T, liq


def energy_from_temperature(T, liquid_fraction, L, C):
    """Forward closure U = T*C + L*liquid_fraction."""
    return T * C + L * liquid_fraction


def apply_closures(state) -> None:
    """Refresh the diagnostics of every closure-bearing prognostic in the tree."""
    for _, ns in state.walk():
        for closure in ns.closures.values():
            closure.inverse(ns, ns.grid)
