"""
Input sources: pull external values into input fields once per step.

- FieldInput: static value or array (constant in time)
- TimeSeriesInput: values at given times, linearly interpolated at
  clock.time (scipy.interpolate.interp1d), held constant outside the range
- FunctionInput: closed-form fn(time, grid) -> value

Targets are field names, optionally dotted into child namespaces
("upland.litter"). Unknown targets are reported by `validate` before the
first step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np
from scipy.interpolate import interp1d

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class InputSource:
    name: str

    def update(self, state, clock) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement update()")

    def validate(self, state) -> None:
        if self.name not in state:
            raise ConfigurationError(f"input source targets unknown field {self.name!r}")
        if state.group_of(self.name) not in ("input", "auxiliary", "prognostic"):
            raise ConfigurationError(f"input source cannot write tendency field {self.name!r}")


@dataclass
class FieldInput(InputSource):
    """Constant field; written on every update so restored snapshots pick it up again."""

    name: str
    value: Any = 0.0

    def update(self, state, clock) -> None:
        state[self.name] = self.value


@dataclass
class TimeSeriesInput(InputSource):
    """
    `values` has shape (n_times,) for a spatially uniform series or
    (n_times, *field_shape) for a field-valued one.
    """

    name: str
    times: Any
    values: Any
    _interp: Callable = field(init=False, repr=False)

    def __post_init__(self):
        t = np.asarray(self.times, dtype=float)
        v = np.asarray(self.values, dtype=float)
        if t.ndim != 1 or t.size < 1:
            raise ConfigurationError(f"TimeSeriesInput {self.name!r}: times must be a non-empty 1D sequence")
        if v.shape[0] != t.size:
            raise ConfigurationError(
                f"TimeSeriesInput {self.name!r}: {t.size} times but {v.shape[0]} values"
            )
        if np.any(np.diff(t) <= 0):
            raise ConfigurationError(f"TimeSeriesInput {self.name!r}: times must be strictly increasing")
        if t.size == 1:
            self._interp = lambda _t, _v=v[0]: _v
        else:
            self._interp = interp1d(
                t, v, axis=0, kind="linear", bounds_error=False,
                fill_value=(v[0], v[-1]), assume_sorted=True,
            )

    def value_at(self, time: float):
        return self._interp(float(time))

    def update(self, state, clock) -> None:
        state[self.name] = self.value_at(clock.time)


@dataclass
class FunctionInput(InputSource):
    name: str
    fn: Callable

    def update(self, state, clock) -> None:
        state[self.name] = self.fn(clock.time, state.grid)


def update_inputs(inputs, state) -> None:
    for source in inputs:
        source.update(state, state.clock)
