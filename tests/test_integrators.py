import numpy as np
import pytest

from pylsm.grid import ColumnGrid, UniformSpacing
from pylsm.world import (
    XY,
    ConfigurationError,
    ForwardEuler,
    Heun,
    Process,
    Simulation,
    build_state,
    make_integrator,
    prognostic,
)


class LinearGrowth(Process):
    """du/dt = u + c"""

    def __init__(self, c=0.1):
        self.c = c

    def variables(self):
        return (prognostic("u", XY),)

    def compute_auxiliary(self, state, grid):
        return None

    def compute_tendencies(self, state, grid):
        state.tendency("u")[...] += state.u + self.c


def _one_step(integrator, dt):
    grid = ColumnGrid(UniformSpacing(dz=1.0, n=1))
    sim = Simulation(LinearGrowth(), grid, integrator=integrator, dt=dt)
    sim.run(steps=1)
    return float(sim.state.u[0])


@pytest.mark.parametrize("dt", [0.1, 0.5, 1.0])
def test_forward_euler_single_step(dt):
    assert np.isclose(_one_step(ForwardEuler(), dt), 0.1 * dt)


@pytest.mark.parametrize("dt", [0.1, 0.5, 1.0])
def test_heun_single_step(dt):
    expected = (0.1 * dt + (0.1 * dt + 0.1) * dt) / 2.0
    heun = _one_step(Heun(), dt)
    euler = _one_step(ForwardEuler(), dt)
    assert np.isclose(heun, expected)
    # Convex growth: the corrector stage adds the curvature term
    assert heun > euler


def test_heun_is_second_order():
    # Exact solution u(t) = c (e^t - 1)
    def error(integrator, n):
        grid = ColumnGrid(UniformSpacing(dz=1.0, n=1))
        sim = Simulation(LinearGrowth(), grid, integrator=integrator, dt=1.0 / n)
        sim.run(steps=n)
        return abs(float(sim.state.u[0]) - 0.1 * (np.e - 1.0))

    ratio_euler = error(ForwardEuler(), 20) / error(ForwardEuler(), 40)
    ratio_heun = error(Heun(), 20) / error(Heun(), 40)
    assert 1.8 < ratio_euler < 2.2
    assert 3.6 < ratio_heun < 4.4


def test_heun_reuses_stage_buffer():
    grid = ColumnGrid(UniformSpacing(dz=1.0, n=1))
    heun = Heun()
    state = build_state(LinearGrowth(), grid)
    stage = heun.stage_buffer(state)
    assert heun.stage_buffer(state) is stage
    assert stage is not state


def test_make_integrator():
    assert isinstance(make_integrator("euler"), ForwardEuler)
    assert isinstance(make_integrator("RK2"), Heun)
    with pytest.raises(ConfigurationError):
        make_integrator("leapfrog")
