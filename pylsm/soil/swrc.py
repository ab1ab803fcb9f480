"""
Soil water retention curves (SWRC).

Each curve maps the matric potential psi (m, negative when unsaturated) to the
volumetric water content theta and back, with analytic derivatives:

    theta(psi, theta_sat)        psi(theta, theta_sat)
    dtheta_dpsi(psi, theta_sat)  dpsi_dtheta(theta, theta_sat)

By the inverse function theorem dpsi_dtheta(theta(psi)) == 1 / dtheta_dpsi(psi)
wherever the curve is strictly monotone.

All functions accept out-of-range input (positive psi, theta outside
[theta_res, theta_sat]) and return finite values: the effective saturation
is clipped to [SE_MIN, 1] before inverting.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylsm.jax_compat import safe_power, xp

SE_MIN = 1e-9  # smallest effective saturation used when inverting
SE_MAX_DERIV = 1.0 - 1e-12  # dpsi/dtheta is unbounded at saturation


def _suction(psi):
    """|psi| on the unsaturated side, 0 for psi >= 0."""
    return -xp.minimum(psi, 0.0)


@dataclass(frozen=True)
class VanGenuchten:
    """
    van Genuchten (1980):
        theta = theta_res + (theta_sat - theta_res) * (1 + (alpha |psi|)^n)^(-m),  m = 1 - 1/n
    alpha in 1/m, n > 1.
    """

    alpha: float = 1.0
    n: float = 2.0
    theta_res: float = 0.0

    @property
    def m(self) -> float:
        return 1.0 - 1.0 / self.n

    def effective_saturation(self, psi):
        return (1.0 + (self.alpha * _suction(psi)) ** self.n) ** (-self.m)

    def theta(self, psi, theta_sat):
        return self.theta_res + (theta_sat - self.theta_res) * self.effective_saturation(psi)

    def _se(self, theta, theta_sat, upper=1.0):
        return xp.clip((theta - self.theta_res) / (theta_sat - self.theta_res), SE_MIN, upper)

    def psi(self, theta, theta_sat):
        se = self._se(theta, theta_sat)
        return -safe_power(se ** (-1.0 / self.m) - 1.0, 1.0 / self.n) / self.alpha

    def dtheta_dpsi(self, psi, theta_sat):
        s = _suction(psi)
        n, m, a = self.n, self.m, self.alpha
        return (
            (theta_sat - self.theta_res) * m * n * a**n
            * safe_power(s, n - 1.0) * (1.0 + (a * s) ** n) ** (-m - 1.0)
        )

    def dpsi_dtheta(self, theta, theta_sat):
        n, m, a = self.n, self.m, self.alpha
        se = self._se(theta, theta_sat, upper=SE_MAX_DERIV)
        base = se ** (-1.0 / m) - 1.0
        dpsi_dse = base ** (1.0 / n - 1.0) * se ** (-1.0 / m - 1.0) / (a * n * m)
        return dpsi_dse / (theta_sat - self.theta_res)


@dataclass(frozen=True)
class BrooksCorey:
    """
    Brooks and Corey (1964):
        theta = theta_res + (theta_sat - theta_res) * (psi_b / |psi|)^lam   for |psi| > psi_b
        theta = theta_sat                                                   otherwise
    psi_b is the air-entry suction (m, positive), lam the pore size index.
    """

    psi_b: float = 0.01
    lam: float = 0.25
    theta_res: float = 0.0

    def effective_saturation(self, psi):
        s = _suction(psi)
        unsat = s > self.psi_b
        s_safe = xp.where(unsat, s, self.psi_b)
        return xp.where(unsat, (self.psi_b / s_safe) ** self.lam, 1.0)

    def theta(self, psi, theta_sat):
        return self.theta_res + (theta_sat - self.theta_res) * self.effective_saturation(psi)

    def _se(self, theta, theta_sat, upper=1.0):
        return xp.clip((theta - self.theta_res) / (theta_sat - self.theta_res), SE_MIN, upper)

    def psi(self, theta, theta_sat):
        return -self.psi_b * self._se(theta, theta_sat) ** (-1.0 / self.lam)

    def dtheta_dpsi(self, psi, theta_sat):
        s = _suction(psi)
        unsat = s > self.psi_b
        s_safe = xp.where(unsat, s, self.psi_b)
        d = (theta_sat - self.theta_res) * self.lam * self.psi_b**self.lam * s_safe ** (-self.lam - 1.0)
        return xp.where(unsat, d, 0.0)

    def dpsi_dtheta(self, theta, theta_sat):
        se = self._se(theta, theta_sat, upper=SE_MAX_DERIV)
        dpsi_dse = (self.psi_b / self.lam) * se ** (-1.0 / self.lam - 1.0)
        return dpsi_dse / (theta_sat - self.theta_res)
