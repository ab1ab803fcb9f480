import numpy as np
import pytest

from pylsm.grid import ColumnGrid, UniformSpacing
from pylsm.soil import (
    BrooksCorey,
    EnergyTemperatureClosure,
    PressureSaturationClosure,
    SoilModel,
    VanGenuchten,
    adjust_saturation_profile,
    water_table_depth,
)
from pylsm.world import build_state
from pylsm.world.closures import (
    energy_from_temperature,
    liquid_fraction_from_temperature,
    temperature_from_energy,
)


def test_frozen_branch():
    T, liq = temperature_from_energy(np.array(-1.0e7), 1.67e8, 2.0e5)
    assert np.isclose(T, -50.0)
    assert liq == 0.0


def test_phase_change_plateau():
    L = 1.67e8
    T, liq = temperature_from_energy(np.array(L / 2), L, 2.0e6)
    assert T == 0.0
    assert np.isclose(liq, 0.5)


def test_thawed_branch():
    L, C = 1.0e8, 2.5e6
    T, liq = temperature_from_energy(np.array(L + 5.0 * C), L, 2.0e6, C)
    assert np.isclose(T, 5.0)
    assert liq == 1.0


def test_no_latent_heat_is_finite():
    U = np.array([-1.0e6, 0.0, 1.0e6])
    T, liq = temperature_from_energy(U, 0.0, 2.0e6)
    assert np.all(np.isfinite(T))
    np.testing.assert_allclose(T, [-0.5, 0.0, 0.5])
    np.testing.assert_allclose(liq, [0.0, 1.0, 1.0])


def test_energy_temperature_round_trip_kernels():
    T = np.linspace(-20.0, 20.0, 41)
    L, C = 1.2e8, 2.2e6
    liq = liquid_fraction_from_temperature(T)
    U = energy_from_temperature(T, liq, L, C)
    T_back, liq_back = temperature_from_energy(U, L, C)
    np.testing.assert_allclose(T_back, T, atol=1e-9)
    np.testing.assert_allclose(liq_back, liq)


def test_energy_closure_on_soil_state():
    grid = ColumnGrid(UniformSpacing(dz=0.2, n=5))
    model = SoilModel()
    state = build_state(model, grid)
    model.initialize(state, grid)
    closure = state.closures["internal_energy"]
    assert isinstance(closure, EnergyTemperatureClosure)

    state["temperature"] = np.array([-10.0, -1.0, 0.0, 1.0, 10.0])
    closure.forward(state, grid)
    T_in = state.temperature.copy()
    state["temperature"] = 99.0
    closure.inverse(state, grid)
    np.testing.assert_allclose(state.temperature, T_in, atol=1e-9)
    np.testing.assert_allclose(state.liquid_water_fraction, [[0.0, 0.0, 0.0, 1.0, 1.0]])


@pytest.mark.parametrize("swrc", [VanGenuchten(), VanGenuchten(alpha=2.0, n=1.5, theta_res=0.05), BrooksCorey()])
def test_swrc_inverse_and_derivatives(swrc):
    por = 0.45
    psi = -np.logspace(-1, 1, 9)
    theta = swrc.theta(psi, por)
    assert np.all((theta >= swrc.theta_res) & (theta <= por))
    np.testing.assert_allclose(swrc.psi(theta, por), psi, rtol=1e-6)
    np.testing.assert_allclose(
        swrc.dpsi_dtheta(theta, por) * swrc.dtheta_dpsi(psi, por), 1.0, rtol=1e-6
    )


@pytest.mark.parametrize("swrc", [VanGenuchten(), BrooksCorey()])
def test_swrc_out_of_range_is_finite(swrc):
    por = 0.4
    psi = np.array([-1e6, -1.0, 0.0, 1.0, 1e3])
    assert np.all(np.isfinite(swrc.theta(psi, por)))
    assert np.all(np.isfinite(swrc.dtheta_dpsi(psi, por)))
    theta = np.array([-0.1, 0.0, 0.2, 0.4, 0.5])
    assert np.all(np.isfinite(swrc.psi(theta, por)))
    assert np.all(np.isfinite(swrc.dpsi_dtheta(theta, por)))
    # Positive pressure means saturated
    np.testing.assert_allclose(swrc.theta(np.array([0.0, 2.0]), por), por)


def test_pressure_closure_derivative_is_reciprocal():
    closure = PressureSaturationClosure(VanGenuchten(alpha=1.5, n=1.8))
    por = 0.4
    psi = np.array([-0.3, -1.0, -4.0])
    sat = closure.swrc.theta(psi, por) / por
    np.testing.assert_allclose(
        closure.derivative(sat, por) * closure.saturation_derivative(psi, por), 1.0, rtol=1e-6
    )


def test_adjust_saturation_profile_conserves_water():
    dz = np.array([0.1, 0.2, 0.4, 0.8])
    por = np.full(4, 0.4)
    sat = np.array([[0.5, 1.3, -0.1, 0.9]])
    new, excess = adjust_saturation_profile(sat, por, dz)
    assert np.all(new >= 0.0) and np.all(new <= 1.0)
    before = np.sum(sat * por * dz)
    after = np.sum(new * por * dz) + excess.sum()
    assert np.isclose(before, after)


def test_adjust_saturation_profile_surface_excess():
    dz = np.array([0.5, 0.5])
    por = np.full(2, 0.5)
    new, excess = adjust_saturation_profile(np.array([[1.0, 1.2]]), por, dz)
    np.testing.assert_allclose(new, 1.0)
    np.testing.assert_allclose(excess, [0.2 * 0.5 * 0.5])


def test_water_table_depth():
    z_faces = np.array([0.0, 1.0, 2.0, 3.0])
    sat = np.array([
        [0.5, 0.5, 0.5],  # dry bottom: water table at the bottom face
        [0.5, 1.0, 1.0],  # saturated below 1 m
        [1.0, 0.5, 1.0],  # perched water in the top cell is ignored
        [1.0, 1.0, 1.0],  # fully saturated
    ])
    np.testing.assert_allclose(water_table_depth(sat, z_faces), [3.0, 1.0, 2.0, 0.0])
