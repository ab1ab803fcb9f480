"""
jax_compat.py: Optional JAX array backend for pylsm closures and kernels

Provides:
- JAX enable switch via env LSM_USE_JAX (0/1)
- xp: jax.numpy when enabled, numpy otherwise
- Differentiation-safe helpers:
    * safe_divide: division with a guarded denominator (double-where pattern),
      so that the unused branch of xp.where never produces inf/nan gradients
    * safe_power: x**p for x >= 0 that stays finite (and differentiable) at 0
- to_numpy: safe conversion from device arrays to numpy
- is_enabled / backend: query flag and detected platform
"""
from __future__ import annotations

import os

import numpy as _np

_JAX_ENABLED = False
_JAX = None
_JNP = None
_JAX_BACKEND = "none"  # cpu|gpu|tpu|metal|unknown|none

try:
    _JAX_ENABLED = int(os.getenv("LSM_USE_JAX", "0")) == 1
except ValueError:
    _JAX_ENABLED = False

if _JAX_ENABLED:
    try:
        import jax as _JAX
        import jax.numpy as _JNP
        plat_env = os.getenv("LSM_JAX_PLATFORM")
        if plat_env:
            # Must be set before the JAX backend initializes
            os.environ.setdefault("JAX_PLATFORM_NAME", plat_env)
        try:
            devs = _JAX.devices()
            if devs:
                _JAX_BACKEND = getattr(devs[0], "platform", "unknown")
            else:
                _JAX_BACKEND = _JAX.default_backend() or "unknown"
        except RuntimeError:
            _JAX_BACKEND = "unknown"
        # Enable only on real accelerators unless forced (closure tracing on cpu)
        if (_JAX_BACKEND in ("gpu", "cuda", "tpu")) or (os.getenv("LSM_JAX_FORCE", "0") == "1"):
            _JAX_ENABLED = True
        else:
            _JAX_ENABLED = False
    except ImportError:
        # JAX requested but not installed: stay on NumPy
        _JAX = None
        _JNP = None
        _JAX_ENABLED = False
        _JAX_BACKEND = "none"


# Public array module: jax.numpy if enabled, else numpy.
if _JAX_ENABLED and (_JNP is not None):
    xp = _JNP
else:
    xp = _np


def is_enabled() -> bool:
    return _JAX_ENABLED


def backend() -> str:
    """Return detected JAX backend string: gpu|cpu|tpu|metal|unknown|none"""
    return _JAX_BACKEND


def to_numpy(x):
    """Convert a JAX array (if enabled) to a writeable NumPy array; else return a writeable np.ndarray."""
    if _JAX_ENABLED:
        arr = _np.asarray(x)
        # Ensure writeable to avoid in-place op errors (e.g., a += tendency)
        if not arr.flags.writeable:
            arr = arr.copy()
        return arr
    return x if isinstance(x, _np.ndarray) else _np.array(x, copy=True)


def safe_divide(num, den, fill=0.0):
    """
    num / den where den != 0, `fill` elsewhere.

    The denominator is replaced by one before dividing so that neither branch
    of the select evaluates a division by zero.
    """
    nonzero = den != 0
    den_safe = xp.where(nonzero, den, 1.0)
    return xp.where(nonzero, num / den_safe, fill)


def safe_power(x, p, floor: float = 0.0):
    """max(x, floor) ** p, with x clamped away from zero when p < 1."""
    positive = x > floor
    x_safe = xp.where(positive, x, 1.0)
    return xp.where(positive, x_safe ** p, floor ** p if floor > 0.0 else 0.0)
