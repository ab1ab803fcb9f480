"""
pytest configuration

Goals:
- keep tests fast and deterministic
- run on NumPy regardless of the caller's LSM_USE_JAX
- shrink the default grid unless a test overrides explicitly
"""

import os
import sys

import pytest

# Ensure project root on sys.path for 'pylsm' imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _lsm_env(monkeypatch):
    # Small default grid (tests can override via monkeypatch in the test)
    monkeypatch.setenv("LSM_N_COLUMNS", "1")
    monkeypatch.setenv("LSM_NZ", "10")
    monkeypatch.setenv("LSM_DT_SECONDS", "300")
    monkeypatch.setenv("LSM_INTEGRATOR", "euler")
    # Numerical checks on by default; a NaN should fail loudly in tests
    monkeypatch.setenv("LSM_DEBUG", "1")
    monkeypatch.setenv("LSM_USE_JAX", "0")
    yield


@pytest.fixture
def small_grid():
    from pylsm.grid import ColumnGrid, UniformSpacing

    return ColumnGrid(UniformSpacing(dz=0.5, n=6), n_columns=2)
