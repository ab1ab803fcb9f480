"""
Explicit time integrators operating generically over the state namespace.

Contract
- advance(state, model, dt): the driver has already zeroed tendencies and
  run the auxiliary and tendency passes on `state`; the integrator applies
  the tendencies to every prognostic field in the tree and then refreshes
  closure diagnostics so that prognostics and diagnostics agree on exit.

Schemes
- ForwardEuler: x <- x + dt * k1
- Heun (RK2 predictor-corrector): predictor x* = x + dt * k1 in a scratch
  stage namespace, k2 evaluated at x* (auxiliary + tendencies recomputed),
  x <- x + dt/2 * (k1 + k2). The stage is owned by the integrator instance
  and allocated once, sized like the state it first sees.
"""

from __future__ import annotations

import logging

from .closures import apply_closures
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def explicit_update(state, dt: float) -> None:
    """x <- x + dt * tendency for every prognostic in the tree."""
    for _, ns in state.walk():
        for name, field in ns.prognostic.items():
            field += dt * ns.tendency(name)


class ForwardEuler:
    name = "euler"

    def advance(self, state, model, dt: float) -> None:
        explicit_update(state, dt)
        apply_closures(state)


class Heun:
    name = "heun"

    def __init__(self) -> None:
        self._stage = None

    def stage_buffer(self, state):
        """Scratch namespace tree matching `state`; reallocated if the schema changes."""
        if self._stage is None or self._stage.schema.keys() != state.schema.keys():
            logger.debug("[Heun] allocating stage buffer")
            self._stage = state.copy()
        return self._stage

    def advance(self, state, model, dt: float) -> None:
        stage = self.stage_buffer(state)
        stage.assign(state)

        # Predictor: Euler step into the stage, evaluated at t + dt
        explicit_update(stage, dt)
        apply_closures(stage)
        stage.clock.time = state.clock.time + dt

        # Second tendency evaluation at the predicted state
        stage.zero_tendencies()
        model.compute_auxiliary(stage, stage.grid)
        model.compute_tendencies(stage, stage.grid)

        # Corrector: equal-weight average of k1 and k2
        stages = dict(stage.walk())
        for path, ns in state.walk():
            sns = stages[path]
            for tname, k1 in ns.tendencies.items():
                k1 += sns.tendencies[tname]
                k1 *= 0.5
        explicit_update(state, dt)
        apply_closures(state)


_INTEGRATORS = {
    "euler": ForwardEuler,
    "forward_euler": ForwardEuler,
    "heun": Heun,
    "rk2": Heun,
}


def make_integrator(kind: str = "euler"):
    try:
        return _INTEGRATORS[str(kind).strip().lower()]()
    except KeyError:
        raise ConfigurationError(f"Unknown integrator kind: {kind!r}") from None
