import logging
from datetime import timedelta

import numpy as np
import pytest

from pylsm.grid import ColumnGrid, ExponentialSpacing, UniformSpacing
from pylsm.soil import HomogeneousStratigraphy, SoilEnergy, SoilModel
from pylsm.world import (
    XY,
    ConfigurationError,
    DiagnosticsContext,
    NumericalDomainError,
    PrescribedValue,
    Process,
    Simulation,
    auxiliary,
    prognostic,
)


class Decay(Process):
    """dx/dt = -k x, with a diagnosed copy of x."""

    def __init__(self, k=1e-3):
        self.k = k

    def variables(self):
        return (prognostic("x", XY, default=1.0), auxiliary("x_seen", XY))

    def compute_auxiliary(self, state, grid):
        state["x_seen"] = state.x

    def compute_tendencies(self, state, grid):
        state.tendency("x")[...] -= self.k * state.x


@pytest.fixture
def grid():
    return ColumnGrid(UniformSpacing(dz=1.0, n=2), n_columns=3)


def test_run_requires_exactly_one_of_steps_or_period(grid):
    sim = Simulation(Decay(), grid, dt=10.0)
    with pytest.raises(ConfigurationError):
        sim.run()
    with pytest.raises(ConfigurationError):
        sim.run(steps=0, period=0.0)
    with pytest.raises(ConfigurationError):
        sim.run(steps=-1)
    assert sim.clock.iteration == 0
    assert sim.time == 0.0


def test_zero_steps_leaves_state_unchanged(grid):
    sim = Simulation(Decay(), grid, dt=10.0)
    state = sim.run(steps=0)
    np.testing.assert_allclose(state.x, 1.0)
    assert sim.time == 0.0


def test_period_converts_to_steps(grid):
    sim = Simulation(Decay(), grid, dt=300.0)
    assert sim.steps_for(period=3600.0) == 12
    assert sim.steps_for(period=timedelta(hours=2)) == 24
    sim.run(period=timedelta(minutes=30))
    assert sim.clock.iteration == 6
    assert sim.time == 1800.0


def test_period_not_multiple_of_dt_warns(grid, caplog):
    sim = Simulation(Decay(), grid, dt=300.0)
    with caplog.at_level(logging.WARNING, logger="pylsm"):
        assert sim.steps_for(period=1000.0) == 3
    assert "not a multiple" in caplog.text


def test_nonpositive_dt_rejected(grid):
    with pytest.raises(ConfigurationError):
        Simulation(Decay(), grid, dt=0.0)


def test_dt_from_env_config(grid, monkeypatch):
    monkeypatch.setenv("LSM_DT_SECONDS", "60")
    monkeypatch.setenv("LSM_INTEGRATOR", "heun")
    sim = Simulation(Decay(), grid)
    assert sim.dt == 60.0
    assert sim.integrator.name == "heun"


def test_auxiliary_consistent_after_run(grid):
    sim = Simulation(Decay(k=1e-3), grid, dt=10.0)
    state = sim.run(steps=5)
    np.testing.assert_allclose(state.x, (1.0 - 1e-2) ** 5)
    np.testing.assert_allclose(state.x_seen, state.x)


def test_initial_conditions_and_unknown_names(grid):
    sim = Simulation(Decay(), grid, dt=10.0, initial_conditions={"x": lambda g: np.arange(g.n_columns, dtype=float)})
    state = sim.initialize()
    np.testing.assert_allclose(state.x, [0.0, 1.0, 2.0])
    bad = Simulation(Decay(), grid, dt=10.0, initial_conditions={"y": 1.0})
    with pytest.raises(ConfigurationError):
        bad.initialize()


def test_checkpoint_restore_reproduces_run(grid):
    sim = Simulation(Decay(), grid, dt=10.0)
    sim.run(steps=3)
    snap = sim.checkpoint()
    first = sim.run(steps=4).x.copy()
    sim.restore(snap)
    assert sim.clock.iteration == 3
    second = sim.run(steps=4).x.copy()
    np.testing.assert_array_equal(first, second)


class Blowup(Decay):
    def compute_tendencies(self, state, grid):
        state.tendency("x")[...] += np.inf


def test_nonfinite_tendency_reported(grid, caplog):
    sim = Simulation(Blowup(), grid, dt=10.0, diagnostics=DiagnosticsContext(enabled=True))
    with caplog.at_level(logging.ERROR, logger="pylsm"):
        with pytest.raises(NumericalDomainError) as err:
            sim.run(steps=1)
    assert err.value.checkpoint == "tendency pass"
    assert "x_tendency" in err.value.fields
    assert "non-finite" in caplog.text


def test_diagnostics_disabled_does_not_raise(grid):
    sim = Simulation(Blowup(), grid, dt=10.0, diagnostics=DiagnosticsContext(enabled=False))
    sim.run(steps=1)
    assert not np.all(np.isfinite(sim.state.x))


def test_soil_heat_conduction_stays_finite():
    grid = ColumnGrid(ExponentialSpacing(dz_min=0.1, dz_max=100.0, n=50))
    model = SoilModel(energy=SoilEnergy(top=PrescribedValue(value=-5.0)))
    T0 = lambda g: 2.0 - 0.05 * g.z_centers
    sim = Simulation(model, grid, dt=300.0, initial_conditions={"temperature": T0})
    sim.run(steps=2)
    sim.run(period=3600.0)
    T = sim.state.temperature
    assert np.all(np.isfinite(T))
    assert np.all(np.isfinite(sim.state.internal_energy))
    assert sim.time == 300.0 * 14
    # The cold top boundary cools the uppermost cell
    assert T[0, 0] < T0(grid)[0]


def test_soil_energy_initialized_from_internal_energy():
    grid = ColumnGrid(UniformSpacing(dz=0.25, n=4))
    model = SoilModel(
        stratigraphy=HomogeneousStratigraphy(porosity=0.5),
        energy=SoilEnergy(initialize_from="internal_energy"),
    )
    U0 = np.array([-1.0e7, 2.0e7, 5.0e7, 2.0e8])
    sim = Simulation(model, grid, initial_conditions={"internal_energy": U0})
    state = sim.initialize()
    np.testing.assert_array_equal(state.internal_energy[0], U0)
    # Frozen, two cells on the melting plateau, thawed
    T = state.temperature[0]
    liq = state.liquid_water_fraction[0]
    assert T[0] < 0.0 and liq[0] == 0.0
    np.testing.assert_array_equal(T[1:3], 0.0)
    assert 0.0 < liq[1] < liq[2] < 1.0
    assert T[3] > 0.0 and liq[3] == 1.0


def test_soil_energy_rejects_unknown_initial_variable():
    grid = ColumnGrid(UniformSpacing(dz=0.25, n=4))
    sim = Simulation(SoilModel(energy=SoilEnergy(initialize_from="enthalpy")), grid)
    with pytest.raises(ConfigurationError):
        sim.initialize()


def test_grid_defaults_to_config(monkeypatch):
    monkeypatch.setenv("LSM_NZ", "4")
    monkeypatch.setenv("LSM_N_COLUMNS", "3")
    sim = Simulation(SoilModel())
    assert sim.grid.column_shape == (3, 4)
    state = sim.initialize()
    assert state.temperature.shape == (3, 4)
    assert state.ground_temperature.shape == (3,)
