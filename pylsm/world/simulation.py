"""
Simulation driver: owns the model, the state tree, the integrator and the
input sources, and advances them together.

One step:
  1. pull input-source values into input fields
  2. zero every tendency field
  3. compute_auxiliary over the process tree   (diagnostics checkpoint)
  4. compute_tendencies over the process tree  (diagnostics checkpoint)
  5. integrator.advance(state, model, dt)
  6. clock.tick(dt)

run(steps=...) or run(period=...) (exactly one of them) repeats step();
afterwards the auxiliary pass is recomputed so that every diagnostic field
matches the final prognostic state.

Without an explicit grid the simulation builds one from its SimConfig
(LSM_NZ cells of exponential spacing in LSM_N_COLUMNS columns).
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

from pylsm.jax_compat import backend

from .config import SimConfig
from .diagnostics import DiagnosticsContext
from .errors import ConfigurationError
from .inputs import InputSource, update_inputs
from .integrators import make_integrator
from .state import StateNamespace, build_state

logger = logging.getLogger(__name__)


class Simulation:
    def __init__(
        self,
        model,
        grid=None,
        *,
        integrator=None,
        dt: Optional[float] = None,
        inputs: Sequence[InputSource] = (),
        initial_conditions: Optional[Mapping[str, Any]] = None,
        diagnostics: Optional[DiagnosticsContext] = None,
        config: Optional[SimConfig] = None,
        dtype=np.float64,
    ) -> None:
        self.config = config if config is not None else SimConfig.from_env()
        self.model = model
        self.grid = grid if grid is not None else self.config.make_grid()
        self.dt = float(dt if dt is not None else self.config.dt_seconds)
        if not self.dt > 0.0:
            raise ConfigurationError(f"time step must be positive, got dt={self.dt}")
        self.integrator = integrator if integrator is not None else make_integrator(self.config.integrator)
        self.inputs = list(inputs)
        self.initial_conditions = dict(initial_conditions or {})
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsContext(enabled=self.config.debug)
        self.dtype = dtype
        self.state: Optional[StateNamespace] = None

    # ---------------- lifecycle ----------------

    @property
    def clock(self):
        return self._require_state().clock

    @property
    def time(self) -> float:
        return self.clock.time

    def _require_state(self) -> StateNamespace:
        if self.state is None:
            self.initialize()
        return self.state

    def _initial_value(self, value: Any):
        return value(self.grid) if callable(value) else value

    def initialize(self) -> StateNamespace:
        """(Re)build the state tree, apply inputs and initial conditions, initialize the model."""
        state = build_state(self.model, self.grid, dtype=self.dtype)
        for source in self.inputs:
            source.validate(state)
        for name in self.initial_conditions:
            if name not in state:
                raise ConfigurationError(f"initial condition given for unknown field {name!r}")

        update_inputs(self.inputs, state)
        for name, value in self.initial_conditions.items():
            state[name] = self._initial_value(value)

        self.model.initialize(state, self.grid)
        state.zero_tendencies()
        self.model.compute_auxiliary(state, self.grid)
        self.diagnostics.check(state, "initialization")

        self.state = state
        logger.info(
            "[Simulation] initialized %s on %r: %d prognostic, %d auxiliary, %d input fields; dt=%gs, integrator=%s, jax=%s",
            type(self.model).__name__, self.grid,
            sum(len(ns.prognostic) for _, ns in state.walk()),
            sum(len(ns.auxiliary) for _, ns in state.walk()),
            sum(len(ns.inputs) for _, ns in state.walk()),
            self.dt, getattr(self.integrator, "name", type(self.integrator).__name__), backend(),
        )
        return state

    # ---------------- stepping ----------------

    def step(self) -> StateNamespace:
        state = self._require_state()
        update_inputs(self.inputs, state)
        state.zero_tendencies()
        self.model.compute_auxiliary(state, self.grid)
        self.diagnostics.check(state, "auxiliary pass")
        self.model.compute_tendencies(state, self.grid)
        self.diagnostics.check(state, "tendency pass")
        self.integrator.advance(state, self.model, self.dt)
        state.clock.tick(self.dt)
        return state

    def steps_for(self, steps: Optional[int] = None, period: Optional[float | timedelta] = None) -> int:
        """Number of steps implied by exactly one of `steps` / `period` (seconds or timedelta)."""
        if (steps is None) == (period is None):
            raise ConfigurationError("run() needs exactly one of steps= or period=")
        if steps is not None:
            n = int(steps)
            if n < 0 or n != steps:
                raise ConfigurationError(f"steps must be a non-negative integer, got {steps!r}")
            return n
        seconds = period.total_seconds() if isinstance(period, timedelta) else float(period)
        if seconds < 0:
            raise ConfigurationError(f"period must be non-negative, got {period!r}")
        n = int(seconds // self.dt)
        if n * self.dt != seconds:
            logger.warning(
                "[Simulation] period %.1fs is not a multiple of dt=%gs; running %d steps (%.1fs)",
                seconds, self.dt, n, n * self.dt,
            )
        return n

    def run(
        self,
        steps: Optional[int] = None,
        period: Optional[float | timedelta] = None,
        callback: Optional[Callable[[Simulation], None]] = None,
    ) -> StateNamespace:
        n = self.steps_for(steps, period)
        state = self._require_state()
        logger.info("[Simulation] running %d steps from t=%.1fs", n, state.clock.time)
        for _ in range(n):
            self.step()
            if callback is not None:
                callback(self)
        # Diagnostics consistent with the final prognostic state
        update_inputs(self.inputs, state)
        self.model.compute_auxiliary(state, self.grid)
        return state

    # ---------------- restart ----------------

    def checkpoint(self) -> dict:
        return self._require_state().snapshot()

    def restore(self, snapshot: dict) -> None:
        self._require_state().restore(snapshot)
